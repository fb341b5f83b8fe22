"""
Module 09A - Verification Pipeline

In-process runner composing the off-chain verification flow:

    validate -> generate challenge -> dispatch -> score -> build Verification -> store

Key features:
- Request validation happens before any network traffic
- The Verification record is built once, after every dispatch task settled
- Storage goes through an injectable repository; the engine itself has none
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Optional, Sequence

from core.config.runtime import ApiConfig, RuntimeConfig
from core.schemas import (
    CHALLENGE_TYPES,
    Agent,
    ErrorCodes,
    InvalidRequestException,
    Verdict,
    Verification,
)

from swarm.challenger import ChallengeGenerator
from swarm.dispatcher import Dispatcher
from swarm.scoring import ScoringEngine, round_half_up
from swarm.sources import Clock, RandomSource, SystemClock

from orchestrator.store import InMemoryVerificationRepository, VerificationRepository


logger = logging.getLogger(__name__)


# =============================================================================
# Statistics
# =============================================================================

@dataclass
class VerificationStats:
    """Aggregate view over every stored verification."""
    total_verifications: int = 0
    verdicts: dict[str, int] = field(
        default_factory=lambda: {v.value: 0 for v in Verdict}
    )
    average_score: int = 0

    def to_dict(self) -> dict[str, Any]:
        return {
            "total_verifications": self.total_verifications,
            "verdicts": dict(self.verdicts),
            "average_score": self.average_score,
        }


def compute_stats(verifications: Sequence[Verification]) -> VerificationStats:
    stats = VerificationStats(total_verifications=len(verifications))
    for v in verifications:
        stats.verdicts[v.verdict.value] += 1
    if verifications:
        stats.average_score = round_half_up(
            sum(v.overall_score for v in verifications) / len(verifications)
        )
    return stats


# =============================================================================
# Verifier
# =============================================================================

class SwarmVerifier:
    """
    Runs one swarm verification end to end.

    Usage:
        verifier = SwarmVerifier()
        verification = await verifier.verify(agents)
        verification.verdict  # Verdict.GENUINE
    """

    def __init__(
        self,
        *,
        config: Optional[RuntimeConfig] = None,
        repository: Optional[VerificationRepository] = None,
        generator: Optional[ChallengeGenerator] = None,
        dispatcher: Optional[Dispatcher] = None,
        engine: Optional[ScoringEngine] = None,
        random_source: Optional[RandomSource] = None,
        clock: Optional[Clock] = None,
    ):
        """
        Initialize the verifier.

        Args:
            config: Runtime configuration (defaults built if not provided)
            repository: Where finished verifications are stored
            generator: Challenge generator (built from random_source/clock if absent)
            dispatcher: Dispatcher (built from config.dispatch if absent)
            engine: Scoring engine (built from config.scoring if absent)
            random_source: Randomness for ids, nonces and prompt selection
            clock: Wall/monotonic clock shared by generator and dispatcher
        """
        self.config = config or RuntimeConfig()
        self.clock = clock or SystemClock()
        self.repository = repository if repository is not None else InMemoryVerificationRepository()
        self.generator = generator or ChallengeGenerator(random_source=random_source, clock=self.clock)
        self.dispatcher = dispatcher or Dispatcher(self.config.dispatch, clock=self.clock)
        self.engine = engine or ScoringEngine(self.config.scoring)

    @property
    def limits(self) -> ApiConfig:
        return self.config.api

    def validate(
        self,
        agents: Sequence[Agent],
        challenge_type: str,
        timeout_ms: int,
    ) -> None:
        """
        Reject malformed requests before anything is dispatched.

        Raises:
            InvalidRequestException: on any violation
        """
        if len(agents) < max(2, self.limits.min_agents):
            raise InvalidRequestException(
                f"At least {max(2, self.limits.min_agents)} agents required for swarm verification",
                code=ErrorCodes.INSUFFICIENT_AGENTS,
                details={"agent_count": len(agents)},
            )
        if len(agents) > self.limits.max_agents:
            raise InvalidRequestException(
                f"At most {self.limits.max_agents} agents per verification",
                details={"agent_count": len(agents)},
            )

        ids = [a.id for a in agents]
        duplicates = sorted({i for i in ids if ids.count(i) > 1})
        if duplicates:
            raise InvalidRequestException(
                "Agent ids must be unique", details={"duplicates": duplicates}
            )

        if challenge_type not in CHALLENGE_TYPES:
            raise InvalidRequestException(
                f"Unknown challenge type: {challenge_type!r}",
                code=ErrorCodes.UNKNOWN_CHALLENGE_TYPE,
                details={"supported": list(CHALLENGE_TYPES)},
            )
        if timeout_ms <= 0 or timeout_ms > self.limits.max_timeout_ms:
            raise InvalidRequestException(
                f"timeout_ms must be in (0, {self.limits.max_timeout_ms}]",
                details={"timeout_ms": timeout_ms},
            )

    async def verify(
        self,
        agents: Sequence[Agent],
        challenge_type: Optional[str] = None,
        timeout_ms: Optional[int] = None,
    ) -> Verification:
        """
        Challenge the swarm, score the responses and store the result.

        Args:
            agents: The claimed swarm (at least two)
            challenge_type: parallel, distributed or consistency
            timeout_ms: Challenge lifetime; defaults to the dispatch config

        Returns:
            The stored, immutable Verification
        """
        challenge_type = challenge_type or self.limits.default_challenge_type
        timeout_ms = timeout_ms if timeout_ms is not None else self.config.dispatch.default_timeout_ms
        self.validate(agents, challenge_type, timeout_ms)

        challenge = self.generator.generate(challenge_type, [a.id for a in agents], timeout_ms)
        logger.info(
            f"New verification: {len(agents)} agents, type={challenge_type}, "
            f"challenge={challenge.challenge_id}"
        )

        result = await self.dispatcher.dispatch(agents, challenge, timeout_ms)
        card = self.engine.score(result.responses, total_agents=len(agents))

        verification = Verification(
            verification_id=self.generator.new_verification_id(),
            challenge_id=challenge.challenge_id,
            challenge_type=challenge.type,
            prompt=challenge.prompt,
            agents=tuple(agents),
            responses=tuple(result.responses),
            scores=card.scores,
            overall_score=card.overall_score,
            verdict=card.verdict,
            timing=result.timing,
            created_at=self.clock.now(),
        )
        self.repository.put(verification)

        logger.info(
            f"Verification {verification.verification_id}: score={verification.overall_score} "
            f"verdict={verification.verdict.value} "
            f"responded={result.responded_count}/{result.total_agents}"
        )
        return verification

    def get(self, verification_id: str) -> Verification:
        return self.repository.get(verification_id)

    def stats(self) -> VerificationStats:
        return compute_stats(self.repository.list())


def create_verifier(
    *,
    config: Optional[RuntimeConfig] = None,
    repository: Optional[VerificationRepository] = None,
) -> SwarmVerifier:
    """Convenience factory with production defaults."""
    return SwarmVerifier(config=config, repository=repository)
