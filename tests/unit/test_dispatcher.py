"""
Dispatcher Unit Tests
Tests for swarm/dispatcher.py and swarm/endpoints.py

Agents are played by an httpx.MockTransport, so no sockets are opened.

Tests:
- One response per requested agent, in request order, under any failure mix
- Endpoint variants tried in order, stopping at the first 2xx
- Per-agent deadlines: a hung agent never delays the others
- Success payload parsing (field names, processing time, raw text)
- Outbound payload shape
"""
import asyncio
import time

import pytest

from core.config.runtime import DispatchConfig
from core.http import AsyncHttpClient
from swarm.challenger import ChallengeGenerator
from swarm.dispatcher import Dispatcher
from swarm.endpoints import EndpointResolver

from fixtures import (
    ScriptedAgents,
    answer_with,
    hang,
    make_agents,
    make_challenge,
    refuse_connection,
    status,
)


def run_dispatch(scripted, agents, timeout_ms=2000, challenge=None, config=None):
    """Dispatch a fresh challenge through the scripted transport."""
    if challenge is None:
        challenge = ChallengeGenerator().generate("parallel", [a.id for a in agents], timeout_ms)

    async def _run():
        async with AsyncHttpClient(transport=scripted.transport()) as http:
            dispatcher = Dispatcher(config or DispatchConfig(), http=http)
            return await dispatcher.dispatch(agents, challenge, timeout_ms)

    return asyncio.run(_run())


class TestOneToOne:
    """|responses| == |agents| in every case."""

    def test_all_agents_answer(self, agents):
        scripted = ScriptedAgents({f"agent-{i}.test": answer_with("91") for i in range(5)})
        result = run_dispatch(scripted, agents)

        assert len(result.responses) == 5
        assert result.responded_count == 5
        assert result.total_agents == 5
        assert [r.agent_id for r in result.responses] == [a.id for a in agents]
        assert all(r.response == "91" for r in result.responses)

    def test_universal_failure_keeps_mapping(self, agents):
        scripted = ScriptedAgents({f"agent-{i}.test": refuse_connection() for i in range(5)})
        result = run_dispatch(scripted, agents)

        assert len(result.responses) == 5
        assert result.responded_count == 0
        for agent, response in zip(agents, result.responses):
            assert response.agent_id == agent.id
            assert response.response == ""
            assert response.error.startswith("All endpoint variants failed")

    def test_universal_failure_timing_is_zero(self, agents):
        scripted = ScriptedAgents({})
        result = run_dispatch(scripted, agents)

        assert result.timing.mean_ms == 0.0
        assert result.timing.cv == 0.0
        assert result.avg_latency_ms == 0.0

    def test_expired_challenge_fails_every_agent(self):
        agents = make_agents(3)
        scripted = ScriptedAgents({f"agent-{i}.test": answer_with("91") for i in range(3)})
        stale = make_challenge(timeout_ms=1000)  # expired long ago

        result = run_dispatch(scripted, agents, challenge=stale)

        assert len(result.responses) == 3
        assert result.responded_count == 0


class TestEndpointFallback:
    """Variants are walked in order; the first 2xx wins."""

    def test_well_known_path_first(self):
        agents = make_agents(2)
        scripted = ScriptedAgents({f"agent-{i}.test": answer_with("ok") for i in range(2)})
        result = run_dispatch(scripted, agents)

        assert scripted.paths_for("agent-0.test") == ["/.well-known/svp-challenge"]
        assert result.responses[0].endpoint_used == "http://agent-0.test/.well-known/svp-challenge"

    def test_falls_through_404s(self):
        agents = make_agents(2)
        scripted = ScriptedAgents({
            "agent-0.test": {"/challenge": answer_with("ok")},
            "agent-1.test": {"/": answer_with("ok")},
        })
        result = run_dispatch(scripted, agents)

        assert scripted.paths_for("agent-0.test") == [
            "/.well-known/svp-challenge",
            "/api/svp/challenge",
            "/challenge",
        ]
        assert scripted.paths_for("agent-1.test") == [
            "/.well-known/svp-challenge",
            "/api/svp/challenge",
            "/challenge",
            "/verify",
            "/",
        ]
        assert result.responded_count == 2
        assert result.responses[1].endpoint_used == "http://agent-1.test"

    def test_server_error_moves_to_next_variant(self):
        agents = make_agents(2)
        scripted = ScriptedAgents({
            "agent-0.test": {
                "/.well-known/svp-challenge": status(500),
                "/api/svp/challenge": answer_with("ok"),
            },
            "agent-1.test": answer_with("ok"),
        })
        result = run_dispatch(scripted, agents)

        assert result.responses[0].ok
        assert result.responses[0].endpoint_used.endswith("/api/svp/challenge")

    def test_exhausted_variants_list_each_failure(self):
        agents = make_agents(2)
        scripted = ScriptedAgents({"agent-0.test": {}, "agent-1.test": answer_with("ok")})
        result = run_dispatch(scripted, agents)

        error = result.responses[0].error
        assert error.count("HTTP 404") == 5
        assert result.responses[1].ok

    def test_custom_paths(self):
        agents = make_agents(2)
        config = DispatchConfig(endpoint_paths=("/svp",))
        scripted = ScriptedAgents({f"agent-{i}.test": {"/svp": answer_with("ok")} for i in range(2)})
        result = run_dispatch(scripted, agents, config=config)

        assert result.responded_count == 2
        assert scripted.paths_for("agent-0.test") == ["/svp"]

    def test_resolver_deduplicates(self):
        resolver = EndpointResolver.from_paths(["/a", "/a", ""])
        assert resolver.candidates(make_agents(1)[0]) == ["http://agent-0.test/a", "http://agent-0.test"]


class TestDeadlines:
    """Per-task cancellation."""

    def test_hung_agent_times_out_alone(self):
        agents = make_agents(3)
        scripted = ScriptedAgents({
            "agent-0.test": hang(5.0),
            "agent-1.test": answer_with("91"),
            "agent-2.test": answer_with("91"),
        })

        started = time.monotonic()
        result = run_dispatch(scripted, agents, timeout_ms=300)
        elapsed = time.monotonic() - started

        assert elapsed < 2.0
        assert result.responses[0].error.startswith("Timed out after")
        assert result.responses[0].response == ""
        assert result.responses[1].ok and result.responses[2].ok
        assert result.responded_count == 2

    def test_slow_agent_does_not_delay_fast_latencies(self):
        agents = make_agents(2)
        scripted = ScriptedAgents({
            "agent-0.test": answer_with("91", delay_s=0.25),
            "agent-1.test": answer_with("91"),
        })
        result = run_dispatch(scripted, agents, timeout_ms=2000)

        slow, fast = result.responses
        assert slow.ok and fast.ok
        assert slow.latency_ms >= 200
        assert fast.latency_ms < 200

    def test_timing_over_successes_only(self):
        agents = make_agents(2)
        scripted = ScriptedAgents({
            "agent-0.test": hang(5.0),
            "agent-1.test": answer_with("91"),
        })
        result = run_dispatch(scripted, agents, timeout_ms=200)

        assert result.timing.max_ms == result.responses[1].latency_ms


class TestPayloadParsing:
    """What counts as the answer text."""

    def _single(self, behaviour, field_config=None):
        agents = make_agents(2)
        scripted = ScriptedAgents({"agent-0.test": behaviour, "agent-1.test": answer_with("x")})
        return run_dispatch(scripted, agents, config=field_config).responses[0]

    def test_alternate_field_name(self):
        import httpx

        async def behaviour(request):
            return httpx.Response(200, json={"answer": "42"})

        assert self._single(behaviour).response == "42"

    def test_processing_time_is_informational(self):
        response = self._single(answer_with("91", processing_time=12345))

        assert response.processing_time_ms == 12345
        assert response.latency_ms < 12345

    def test_processing_time_header_and_plain_text(self):
        import httpx

        async def behaviour(request):
            return httpx.Response(200, text="91", headers={"X-SVP-Response-Time": "12.5"})

        response = self._single(behaviour)
        assert response.response == "91"
        assert response.processing_time_ms == 12.5

    def test_unknown_fields_fall_back_to_body(self):
        import httpx

        async def behaviour(request):
            return httpx.Response(200, json={"foo": "bar"})

        response = self._single(behaviour)
        assert response.ok
        assert "foo" in response.response


class TestOutboundPayload:
    """The JSON body each agent receives."""

    def test_payload_fields(self):
        agents = make_agents(2)
        scripted = ScriptedAgents({f"agent-{i}.test": answer_with("ok") for i in range(2)})
        challenge = ChallengeGenerator().generate("parallel", [a.id for a in agents], 2000)
        run_dispatch(scripted, agents, challenge=challenge)

        _, _, payload = scripted.calls[0]
        assert payload["version"] == "0.1"
        assert payload["challengeId"] == challenge.challenge_id
        assert payload["prompt"] == challenge.prompt
        assert payload["nonce"] == challenge.nonce
        assert payload["verifier"] == "swarmproof-verifier"
        assert payload["timestamp"] == int(challenge.created_at.timestamp() * 1000)
        assert challenge.nonce in payload["message"]

    def test_every_agent_gets_the_same_challenge(self):
        agents = make_agents(3)
        scripted = ScriptedAgents({f"agent-{i}.test": answer_with("ok") for i in range(3)})
        run_dispatch(scripted, agents)

        nonces = {payload["nonce"] for _, _, payload in scripted.calls}
        assert len(nonces) == 1
