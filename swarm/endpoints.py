"""
Endpoint Resolution

Agents publish their challenge handler at different paths. Resolution is an
ordered list of strategies; the dispatcher walks it and stops at the first
variant that answers with a 2xx.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Sequence

from core.schemas import Agent


@dataclass(frozen=True)
class EndpointStrategy:
    """One way of turning an agent endpoint into a request URL."""
    name: str
    path: str

    def url_for(self, agent: Agent) -> str:
        if not self.path:
            return agent.endpoint
        return agent.endpoint + self.path


_NAMES = {
    "/.well-known/svp-challenge": "well_known",
    "/api/svp/challenge": "api",
    "/challenge": "challenge",
    "/verify": "verify",
    "": "bare",
}


class EndpointResolver:
    """Ordered, early-exiting list of endpoint strategies."""

    def __init__(self, strategies: Sequence[EndpointStrategy]) -> None:
        if not strategies:
            raise ValueError("at least one endpoint strategy is required")
        self.strategies = tuple(strategies)

    @classmethod
    def from_paths(cls, paths: Iterable[str]) -> "EndpointResolver":
        return cls([
            EndpointStrategy(name=_NAMES.get(p, p.strip("/") or "bare"), path=p)
            for p in paths
        ])

    def candidates(self, agent: Agent) -> list[str]:
        """URLs to try for this agent, in order, without duplicates."""
        urls: list[str] = []
        for strategy in self.strategies:
            url = strategy.url_for(agent)
            if url not in urls:
                urls.append(url)
        return urls
