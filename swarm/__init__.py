"""
Off-chain swarm verification engine.

Challenge generation, concurrent dispatch with endpoint fallback, and the
statistical scoring that turns a response set into a verdict.
"""

from swarm.challenger import PROMPT_BANK, ChallengeGenerator
from swarm.dispatcher import DispatchResult, Dispatcher
from swarm.endpoints import EndpointResolver, EndpointStrategy
from swarm.scoring import ScoreCard, ScoringEngine
from swarm.sources import (
    Clock,
    FixedClock,
    RandomSource,
    SeededRandomSource,
    SystemClock,
    SystemRandomSource,
)

__all__ = [
    "PROMPT_BANK",
    "ChallengeGenerator",
    "DispatchResult",
    "Dispatcher",
    "EndpointResolver",
    "EndpointStrategy",
    "ScoreCard",
    "ScoringEngine",
    "Clock",
    "FixedClock",
    "RandomSource",
    "SeededRandomSource",
    "SystemClock",
    "SystemRandomSource",
]
