"""
Scoring Engine

Pure, deterministic mapping from a response set to four sub-scores, an
overall score and a verdict.

Sub-scores (each clamped to [0, 100]):
- response_time: falls as mean latency of successful responses grows
- time_variance: falls as the latency coefficient of variation grows
- consistency: blend of response-length agreement and pairwise Jaccard
  overlap of the answer tokens
- participation: successful responses over the full requested agent count

The thesis: a real swarm of machine agents answers fast, at the same pace,
with near-identical text, and all of them answer.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from itertools import combinations
from typing import Optional, Sequence

from core.config.runtime import Breakpoints, ScoringPolicy
from core.schemas import ChallengeResponse, SubScores, Verdict

from swarm.stats import coefficient_of_variation, mean


logger = logging.getLogger(__name__)


def clamp(value: float, low: float = 0.0, high: float = 100.0) -> float:
    return max(low, min(high, value))


def interpolate(points: Breakpoints, x: float) -> float:
    """
    Piecewise-linear lookup.

    Flat before the first breakpoint and after the last one.
    """
    if x <= points[0][0]:
        return points[0][1]
    for (x0, y0), (x1, y1) in zip(points, points[1:]):
        if x <= x1:
            return y0 + (y1 - y0) * (x - x0) / (x1 - x0)
    return points[-1][1]


def round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def tokenize(text: str) -> frozenset[str]:
    return frozenset(text.lower().split())


def jaccard(a: frozenset[str], b: frozenset[str]) -> Optional[float]:
    """Jaccard similarity, or None when both sets are empty."""
    union = a | b
    if not union:
        return None
    return len(a & b) / len(union)


@dataclass(frozen=True)
class ScoreCard:
    """Result of scoring one response set."""
    scores: SubScores
    overall_score: int
    verdict: Verdict


class ScoringEngine:
    """
    Scores response sets under a ScoringPolicy.

    Usage:
        engine = ScoringEngine()
        card = engine.score(responses, total_agents=5)
        card.verdict  # Verdict.GENUINE
    """

    def __init__(self, policy: Optional[ScoringPolicy] = None) -> None:
        self.policy = policy or ScoringPolicy()

    # ------------------------------------------------------------------
    # Sub-scores
    # ------------------------------------------------------------------

    def score_response_time(self, responses: Sequence[ChallengeResponse]) -> float:
        """Zero when nobody answered; otherwise a band lookup on mean latency."""
        latencies = [r.latency_ms for r in responses if r.ok]
        if not latencies:
            return 0.0
        return clamp(interpolate(self.policy.response_time_bands, mean(latencies)))

    def score_time_variance(self, responses: Sequence[ChallengeResponse]) -> float:
        latencies = [r.latency_ms for r in responses if r.ok]
        if len(latencies) < 2:
            return self.policy.neutral_score
        cv = coefficient_of_variation(latencies)
        return clamp(interpolate(self.policy.variance_bands, cv))

    def score_consistency(self, responses: Sequence[ChallengeResponse]) -> float:
        texts = [r.response for r in responses if r.ok and r.response]
        if len(texts) < 2:
            return self.policy.neutral_score

        length_cv = coefficient_of_variation([len(t) for t in texts], empty=1.0)
        length_score = max(0.0, 100.0 - length_cv * 100.0)

        token_sets = [tokenize(t) for t in texts]
        similarities = [
            s for s in (jaccard(a, b) for a, b in combinations(token_sets, 2))
            if s is not None
        ]
        overlap_score = (sum(similarities) / len(similarities) * 100.0) if similarities else 0.0

        return clamp(
            length_score * self.policy.length_weight
            + overlap_score * self.policy.overlap_weight
        )

    def score_participation(
        self,
        responses: Sequence[ChallengeResponse],
        total_agents: int,
    ) -> float:
        """Successful responses over the full requested set, never over responders."""
        if total_agents <= 0:
            raise ValueError("total_agents must be positive")
        successful = sum(1 for r in responses if r.ok)
        return clamp(successful * 100.0 / total_agents)

    # ------------------------------------------------------------------
    # Combination
    # ------------------------------------------------------------------

    def verdict_for(self, overall_score: float) -> Verdict:
        if overall_score >= self.policy.genuine_threshold:
            return Verdict.GENUINE
        if overall_score >= self.policy.suspicious_threshold:
            return Verdict.SUSPICIOUS
        return Verdict.LIKELY_FAKE

    def score(
        self,
        responses: Sequence[ChallengeResponse],
        total_agents: int,
    ) -> ScoreCard:
        """
        Score a response set.

        Args:
            responses: One response per requested agent
            total_agents: Size of the requested agent set

        Returns:
            ScoreCard with sub-scores, rounded overall score and verdict
        """
        scores = SubScores(
            response_time=self.score_response_time(responses),
            time_variance=self.score_time_variance(responses),
            consistency=self.score_consistency(responses),
            participation=self.score_participation(responses, total_agents),
        )
        overall = min(100, max(0, round_half_up(scores.mean())))
        verdict = self.verdict_for(overall)

        logger.debug(
            f"Scored {len(responses)} responses: rt={scores.response_time:.1f} "
            f"var={scores.time_variance:.1f} cons={scores.consistency:.1f} "
            f"part={scores.participation:.1f} -> {overall} ({verdict.value})"
        )
        return ScoreCard(scores=scores, overall_score=overall, verdict=verdict)
