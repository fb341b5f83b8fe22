"""
Module 09A - Verification Pipeline Tests

Tests for orchestrator/pipeline.py:
1. A uniform swarm is verified as genuine and stored
2. Partial and universal failure still produce one response per agent
3. Invalid requests are rejected before any traffic
4. Aggregate stats
"""
import asyncio

import pytest

from core.config.runtime import DispatchConfig, RuntimeConfig
from core.http import AsyncHttpClient
from core.schemas import ErrorCodes, InvalidRequestException, Verdict
from orchestrator.pipeline import SwarmVerifier, compute_stats
from orchestrator.store import InMemoryVerificationRepository
from swarm.dispatcher import Dispatcher
from swarm.sources import FixedClock, SeededRandomSource

from fixtures import (
    FIXED_NOW,
    ScriptedAgents,
    answer_with,
    make_agents,
    make_verification,
    refuse_connection,
)


def run_verify(scripted, agents, config=None, repository=None, **kwargs):
    """Run one verification with deterministic randomness and a frozen clock."""
    config = config or RuntimeConfig()
    clock = FixedClock(FIXED_NOW)

    async def _run():
        async with AsyncHttpClient(transport=scripted.transport()) as http:
            verifier = SwarmVerifier(
                config=config,
                repository=repository,
                dispatcher=Dispatcher(config.dispatch, http=http, clock=clock),
                random_source=SeededRandomSource(11),
                clock=clock,
            )
            return verifier, await verifier.verify(agents, **kwargs)

    return asyncio.run(_run())


class TestVerify:
    """End-to-end verification runs."""

    def test_uniform_swarm_is_genuine(self, agents):
        scripted = ScriptedAgents({f"agent-{i}.test": answer_with("91") for i in range(5)})
        verifier, verification = run_verify(scripted, agents)

        assert verification.verdict == Verdict.GENUINE
        assert verification.overall_score == 100
        assert verification.responded_count == 5
        assert verification.agent_count == 5
        assert verification.challenge_type == "parallel"
        assert verification.verification_id.startswith("sv_")
        assert verification.created_at == FIXED_NOW
        assert verifier.get(verification.verification_id) == verification

    def test_partial_failure_counts_full_set(self, agents):
        routes = {f"agent-{i}.test": answer_with("91") for i in range(3)}
        routes.update({f"agent-{i}.test": refuse_connection() for i in range(3, 5)})
        _, verification = run_verify(ScriptedAgents(routes), agents)

        assert len(verification.responses) == 5
        assert verification.responded_count == 3
        assert verification.scores.participation == 60.0

    def test_universal_failure_still_stored(self, agents):
        repo = InMemoryVerificationRepository()
        _, verification = run_verify(ScriptedAgents({}), agents, repository=repo)

        assert len(verification.responses) == 5
        assert verification.responded_count == 0
        assert verification.timing.mean_ms == 0.0
        assert verification.verdict == Verdict.LIKELY_FAKE
        assert repo.get(verification.verification_id) == verification

    def test_consistency_type(self, agents):
        scripted = ScriptedAgents({f"agent-{i}.test": answer_with("fast calm precise") for i in range(5)})
        _, verification = run_verify(scripted, agents, challenge_type="consistency")

        assert verification.challenge_type == "consistency"
        assert verification.verdict == Verdict.GENUINE

    def test_each_run_has_a_new_challenge(self, agents):
        scripted = ScriptedAgents({f"agent-{i}.test": answer_with("91") for i in range(5)})
        repo = InMemoryVerificationRepository()
        clock = FixedClock(FIXED_NOW)

        async def _run():
            async with AsyncHttpClient(transport=scripted.transport()) as http:
                verifier = SwarmVerifier(
                    repository=repo,
                    dispatcher=Dispatcher(DispatchConfig(), http=http, clock=clock),
                    clock=clock,
                )
                return [await verifier.verify(agents) for _ in range(2)]

        first, second = asyncio.run(_run())
        assert first.challenge_id != second.challenge_id
        assert first.verification_id != second.verification_id
        assert len(repo) == 2


class TestValidation:
    """Rejected before dispatch: nothing is sent, nothing is stored."""

    def _rejects(self, agents, code=ErrorCodes.INVALID_REQUEST, **kwargs):
        scripted = ScriptedAgents({})
        repo = InMemoryVerificationRepository()
        with pytest.raises(InvalidRequestException) as exc:
            run_verify(scripted, agents, repository=repo, **kwargs)
        assert exc.value.code == code
        assert scripted.calls == []
        assert len(repo) == 0

    def test_single_agent(self):
        self._rejects(make_agents(1), code=ErrorCodes.INSUFFICIENT_AGENTS)

    def test_no_agents(self):
        self._rejects([], code=ErrorCodes.INSUFFICIENT_AGENTS)

    def test_duplicate_ids(self):
        agents = make_agents(2)
        self._rejects([agents[0], agents[0]])

    def test_unknown_type(self):
        self._rejects(make_agents(2), code=ErrorCodes.UNKNOWN_CHALLENGE_TYPE, challenge_type="blitz")

    def test_timeout_bounds(self):
        self._rejects(make_agents(2), timeout_ms=0)
        self._rejects(make_agents(2), timeout_ms=600_000)

    def test_max_agents(self):
        config = RuntimeConfig.from_dict({"api": {"max_agents": 3}})
        self._rejects(make_agents(4), config=config)


class TestStats:
    """Aggregates over stored verifications."""

    def test_empty(self):
        stats = compute_stats([])
        assert stats.total_verifications == 0
        assert stats.average_score == 0
        assert stats.verdicts == {"genuine": 0, "suspicious": 0, "likely_fake": 0}

    def test_counts_and_rounded_average(self):
        stats = compute_stats([
            make_verification("sv_1", 100, Verdict.GENUINE),
            make_verification("sv_2", 50, Verdict.SUSPICIOUS),
            make_verification("sv_3", 25, Verdict.LIKELY_FAKE),
        ])
        assert stats.total_verifications == 3
        assert stats.verdicts == {"genuine": 1, "suspicious": 1, "likely_fake": 1}
        assert stats.average_score == 58

    def test_verifier_stats_reads_repository(self):
        repo = InMemoryVerificationRepository()
        repo.put(make_verification("sv_1", 80, Verdict.GENUINE))
        verifier = SwarmVerifier(repository=repo)

        assert verifier.stats().to_dict() == {
            "total_verifications": 1,
            "verdicts": {"genuine": 1, "suspicious": 0, "likely_fake": 0},
            "average_score": 80,
        }
