"""
Swarm Dispatcher

Sends one challenge to every agent at the same time and collects one
ChallengeResponse per agent.

Concurrency model:
- one asyncio task per agent, no shared mutable state between tasks
- each task carries its own absolute deadline taken from the challenge
  expiry; when it passes, that task's in-flight request is cancelled and a
  failure record takes its place
- a single gather() waits for every task to settle before returning

Failures never escape dispatch(): timeouts, connection errors, non-2xx
statuses and exhausted endpoint variants all become responses with an
empty text and an error string.
"""

from __future__ import annotations

import asyncio
import json
import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Optional, Sequence

from core.config.runtime import DispatchConfig
from core.http import AsyncHttpClient, HttpError, HttpResponse
from core.schemas import Agent, Challenge, ChallengeResponse, TimingStats

from swarm.endpoints import EndpointResolver
from swarm.sources import Clock, SystemClock
from swarm.stats import timing_stats


logger = logging.getLogger(__name__)

PROCESSING_TIME_HEADER = "x-svp-response-time"


@dataclass
class DispatchResult:
    """Everything collected for one challenge."""
    responses: list[ChallengeResponse]
    total_agents: int
    responded_count: int
    timing: TimingStats

    @property
    def avg_latency_ms(self) -> float:
        return self.timing.mean_ms


class Dispatcher:
    """
    Concurrent challenge delivery with per-agent endpoint fallback.

    Usage:
        dispatcher = Dispatcher(DispatchConfig())
        result = await dispatcher.dispatch(agents, challenge)
    """

    def __init__(
        self,
        config: Optional[DispatchConfig] = None,
        *,
        http: Optional[AsyncHttpClient] = None,
        resolver: Optional[EndpointResolver] = None,
        clock: Optional[Clock] = None,
    ) -> None:
        self.config = config or DispatchConfig()
        self.resolver = resolver or EndpointResolver.from_paths(self.config.endpoint_paths)
        self.clock = clock or SystemClock()
        self._http = http

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    async def dispatch(
        self,
        agents: Sequence[Agent],
        challenge: Challenge,
        timeout_ms: Optional[float] = None,
    ) -> DispatchResult:
        """
        Deliver the challenge to every agent and wait for all to settle.

        Args:
            agents: Target agents; one response is returned per agent, in order
            challenge: The challenge to deliver
            timeout_ms: Optional tighter bound than the challenge expiry

        Returns:
            DispatchResult with responses and timing statistics over the
            successful responses only
        """
        budget_s = self._budget_seconds(challenge, timeout_ms)
        payload = self.build_payload(challenge)

        logger.info(
            f"Dispatching challenge {challenge.challenge_id} to {len(agents)} agents "
            f"(budget {budget_s * 1000:.0f}ms)"
        )
        started = self.clock.monotonic()

        if self._http is not None:
            responses = await self._fan_out(self._http, agents, challenge, payload, budget_s)
        else:
            async with AsyncHttpClient(
                timeout=max(budget_s, 0.001),
                default_headers={"User-Agent": self.config.user_agent},
            ) as http:
                responses = await self._fan_out(http, agents, challenge, payload, budget_s)

        successful = [r for r in responses if r.ok]
        stats = timing_stats([r.latency_ms for r in successful])

        logger.info(
            f"Challenge {challenge.challenge_id}: {len(successful)}/{len(agents)} responded, "
            f"settled in {(self.clock.monotonic() - started) * 1000:.0f}ms"
        )

        return DispatchResult(
            responses=responses,
            total_agents=len(agents),
            responded_count=len(successful),
            timing=stats,
        )

    def build_payload(self, challenge: Challenge) -> dict[str, Any]:
        """The JSON body POSTed to every agent."""
        return {
            "version": self.config.protocol_version,
            "challengeId": challenge.challenge_id,
            "prompt": challenge.prompt,
            "nonce": challenge.nonce,
            "timestamp": int(challenge.created_at.timestamp() * 1000),
            "verifier": self.config.verifier_id,
            "message": challenge.format_message(),
        }

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _budget_seconds(self, challenge: Challenge, timeout_ms: Optional[float]) -> float:
        remaining = (challenge.expires_at - self.clock.now()).total_seconds()
        if timeout_ms is not None:
            remaining = min(remaining, timeout_ms / 1000)
        return max(remaining, 0.0)

    async def _fan_out(
        self,
        http: AsyncHttpClient,
        agents: Sequence[Agent],
        challenge: Challenge,
        payload: dict[str, Any],
        budget_s: float,
    ) -> list[ChallengeResponse]:
        tasks = [
            asyncio.create_task(self._challenge_agent(http, agent, challenge, payload, budget_s))
            for agent in agents
        ]
        settled = await asyncio.gather(*tasks, return_exceptions=True)

        responses: list[ChallengeResponse] = []
        for agent, outcome in zip(agents, settled):
            if isinstance(outcome, BaseException):
                logger.warning(f"Agent {agent.id} task failed unexpectedly: {outcome!r}")
                outcome = self._failure(challenge, agent, 0.0, f"Internal dispatch error: {outcome}")
            responses.append(outcome)
        return responses

    async def _challenge_agent(
        self,
        http: AsyncHttpClient,
        agent: Agent,
        challenge: Challenge,
        payload: dict[str, Any],
        budget_s: float,
    ) -> ChallengeResponse:
        """Run one agent's attempts under its own deadline."""
        started = self.clock.monotonic()
        deadline = started + budget_s

        try:
            return await asyncio.wait_for(
                self._try_endpoints(http, agent, challenge, payload, started, deadline),
                timeout=budget_s,
            )
        except asyncio.TimeoutError:
            elapsed_ms = (self.clock.monotonic() - started) * 1000
            logger.debug(f"Agent {agent.id} timed out after {elapsed_ms:.0f}ms")
            return self._failure(
                challenge, agent, elapsed_ms, f"Timed out after {budget_s * 1000:.0f}ms"
            )

    async def _try_endpoints(
        self,
        http: AsyncHttpClient,
        agent: Agent,
        challenge: Challenge,
        payload: dict[str, Any],
        started: float,
        deadline: float,
    ) -> ChallengeResponse:
        errors: list[str] = []

        for url in self.resolver.candidates(agent):
            remaining = deadline - self.clock.monotonic()
            if remaining <= 0:
                errors.append(f"{url}: deadline reached")
                break
            try:
                response = await http.post(url, json=payload, timeout=remaining)
            except HttpError as e:
                errors.append(f"{url}: {e}")
                continue

            if not response.ok:
                errors.append(f"{url}: HTTP {response.status_code}")
                continue

            latency_ms = (self.clock.monotonic() - started) * 1000
            text, processing_ms = self._parse_success(response)
            logger.debug(f"Agent {agent.id} answered via {url} in {latency_ms:.0f}ms")
            return ChallengeResponse(
                challenge_id=challenge.challenge_id,
                agent_id=agent.id,
                response=text,
                received_at=self.clock.now(),
                latency_ms=latency_ms,
                processing_time_ms=processing_ms,
                endpoint_used=url,
            )

        elapsed_ms = (self.clock.monotonic() - started) * 1000
        logger.debug(f"Agent {agent.id} exhausted endpoint variants: {errors}")
        return self._failure(
            challenge,
            agent,
            elapsed_ms,
            "All endpoint variants failed: " + "; ".join(errors),
        )

    def _parse_success(self, response: HttpResponse) -> tuple[str, Optional[float]]:
        """Pull the answer text and self-reported duration out of a 2xx body."""
        processing_ms = _as_float(response.headers.get(PROCESSING_TIME_HEADER))

        try:
            data = response.json()
        except (json.JSONDecodeError, UnicodeDecodeError):
            return response.text, processing_ms

        if not isinstance(data, dict):
            return response.text, processing_ms

        reported = _as_float(data.get("processingTime"))
        if reported is not None:
            processing_ms = reported

        for field_name in self.config.response_fields:
            value = data.get(field_name)
            if isinstance(value, str):
                return value, processing_ms

        return response.text, processing_ms

    def _failure(
        self,
        challenge: Challenge,
        agent: Agent,
        elapsed_ms: float,
        error: str,
    ) -> ChallengeResponse:
        return ChallengeResponse(
            challenge_id=challenge.challenge_id,
            agent_id=agent.id,
            response="",
            received_at=self.clock.now(),
            latency_ms=max(elapsed_ms, 0.0),
            error=error,
        )


def _as_float(value: Any) -> Optional[float]:
    if value is None or isinstance(value, bool):
        return None
    try:
        return float(value)
    except (TypeError, ValueError):
        return None
