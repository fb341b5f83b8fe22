"""
Common test fixtures shared by all modules.

Provides factory functions for core swarm data structures:
- Agent
- Challenge
- ChallengeResponse (successful and failed)
- Verification

plus an httpx mock transport that plays a set of scripted agents.
"""

import asyncio
import json
from datetime import datetime, timezone, timedelta
from typing import Any, Callable, Optional, Sequence

import httpx

from core.schemas import (
    Agent,
    Challenge,
    ChallengeResponse,
    SubScores,
    TimingStats,
    Verdict,
    Verification,
)


FIXED_NOW = datetime(2026, 3, 1, 12, 0, 0, tzinfo=timezone.utc)

SCENARIO_B_ANSWERS = (
    "Paris",
    "I think it is probably around forty two",
    "no idea honestly",
    "blue",
    "The answer depends heavily on context and interpretation of the question",
)
SCENARIO_B_LATENCIES = (1200.0, 3400.0, 7800.0, 2100.0, 5200.0)


# =============================================================================
# Agent / Challenge Factories
# =============================================================================

def make_agent(
    index: int = 0,
    endpoint: Optional[str] = None,
    token_id: Optional[str] = None,
) -> Agent:
    """Create an Agent reachable at http://agent-<index>.test by default."""
    return Agent(
        id=f"agent-{index}",
        name=f"Agent {index}",
        endpoint=endpoint or f"http://agent-{index}.test",
        token_id=token_id,
    )


def make_agents(count: int = 5) -> list[Agent]:
    return [make_agent(i) for i in range(count)]


def make_challenge(
    challenge_id: str = "ch_0123456789abcdef",
    prompt: str = "What is 7 * 13? Reply with just the number.",
    timeout_ms: int = 10_000,
    target_agents: Sequence[str] = (),
    created_at: datetime = FIXED_NOW,
) -> Challenge:
    return Challenge(
        challenge_id=challenge_id,
        type="parallel",
        prompt=prompt,
        nonce="ab" * 16,
        created_at=created_at,
        expires_at=created_at + timedelta(milliseconds=timeout_ms),
        target_agents=tuple(target_agents),
    )


# =============================================================================
# Response Factories
# =============================================================================

def make_response(
    agent_id: str = "agent-0",
    response: str = "91",
    latency_ms: float = 300.0,
    challenge_id: str = "ch_0123456789abcdef",
    processing_time_ms: Optional[float] = None,
) -> ChallengeResponse:
    """Create a successful ChallengeResponse."""
    return ChallengeResponse(
        challenge_id=challenge_id,
        agent_id=agent_id,
        response=response,
        received_at=FIXED_NOW,
        latency_ms=latency_ms,
        processing_time_ms=processing_time_ms,
        endpoint_used=f"http://{agent_id}.test/.well-known/svp-challenge",
    )


def make_failed_response(
    agent_id: str = "agent-0",
    error: str = "Timed out after 10000ms",
    latency_ms: float = 10_000.0,
    challenge_id: str = "ch_0123456789abcdef",
) -> ChallengeResponse:
    """Create a failure record as the dispatcher would."""
    return ChallengeResponse(
        challenge_id=challenge_id,
        agent_id=agent_id,
        response="",
        received_at=FIXED_NOW,
        latency_ms=latency_ms,
        error=error,
    )


def make_responses(
    answers: Sequence[str],
    latencies: Sequence[float],
) -> list[ChallengeResponse]:
    return [
        make_response(agent_id=f"agent-{i}", response=answer, latency_ms=latency)
        for i, (answer, latency) in enumerate(zip(answers, latencies))
    ]


def make_scenario_a() -> list[ChallengeResponse]:
    """Five agents answering "32" within 300-320ms."""
    return make_responses(["32"] * 5, [300.0, 305.0, 310.0, 315.0, 320.0])


def make_scenario_b() -> list[ChallengeResponse]:
    """Five agents with scattered latencies and unrelated answers."""
    return make_responses(SCENARIO_B_ANSWERS, SCENARIO_B_LATENCIES)


# =============================================================================
# Verification Factory
# =============================================================================

def make_verification(
    verification_id: str = "sv_0000000000000001",
    overall_score: int = 100,
    verdict: Verdict = Verdict.GENUINE,
    agent_count: int = 2,
) -> Verification:
    agents = make_agents(agent_count)
    return Verification(
        verification_id=verification_id,
        challenge_id="ch_0123456789abcdef",
        challenge_type="parallel",
        prompt="What is 7 * 13? Reply with just the number.",
        agents=tuple(agents),
        responses=tuple(make_response(agent_id=a.id) for a in agents),
        scores=SubScores(
            response_time=overall_score,
            time_variance=overall_score,
            consistency=overall_score,
            participation=overall_score,
        ),
        overall_score=overall_score,
        verdict=verdict,
        timing=TimingStats(min_ms=300.0, max_ms=300.0, mean_ms=300.0),
        created_at=FIXED_NOW,
    )


# =============================================================================
# Scripted Agents (httpx.MockTransport)
# =============================================================================

Behaviour = Callable[[httpx.Request], Any]


def answer_with(text: str, delay_s: float = 0.0, processing_time: Optional[float] = None) -> Behaviour:
    """An agent that answers `text` as JSON after `delay_s`."""
    async def _behaviour(request: httpx.Request) -> httpx.Response:
        if delay_s:
            await asyncio.sleep(delay_s)
        body: dict[str, Any] = {"response": text}
        if processing_time is not None:
            body["processingTime"] = processing_time
        return httpx.Response(200, json=body)
    return _behaviour


def hang(seconds: float = 30.0) -> Behaviour:
    """An agent that never answers in time."""
    async def _behaviour(request: httpx.Request) -> httpx.Response:
        await asyncio.sleep(seconds)
        return httpx.Response(200, json={"response": "too late"})
    return _behaviour


def status(code: int) -> Behaviour:
    async def _behaviour(request: httpx.Request) -> httpx.Response:
        return httpx.Response(code, text="nope")
    return _behaviour


def refuse_connection() -> Behaviour:
    async def _behaviour(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)
    return _behaviour


class ScriptedAgents:
    """
    Routes requests by host and path to per-agent behaviours.

    `routes` maps a host (e.g. "agent-0.test") to either a single behaviour
    used for every path, or a dict of path -> behaviour where unlisted paths
    answer 404. Every request is recorded in `calls`.
    """

    def __init__(self, routes: dict[str, Any]) -> None:
        self.routes = routes
        self.calls: list[tuple[str, str, dict[str, Any]]] = []

    async def __call__(self, request: httpx.Request) -> httpx.Response:
        body = request.content
        payload = json.loads(body) if body else {}
        self.calls.append((request.url.host, request.url.path, payload))

        route = self.routes.get(request.url.host)
        if route is None:
            raise httpx.ConnectError("unknown host", request=request)
        if isinstance(route, dict):
            behaviour = route.get(request.url.path or "/")
            if behaviour is None:
                return httpx.Response(404)
            return await behaviour(request)
        return await route(request)

    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self)

    def paths_for(self, host: str) -> list[str]:
        return [path for h, path, _ in self.calls if h == host]
