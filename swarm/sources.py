"""
Randomness and Clock Sources

Explicit dependencies for everything the verifier would otherwise take from
hidden globals: ids, nonces, prompt selection, and time. Production code uses
the system implementations; tests pass seeded or fixed substitutes.
"""

from __future__ import annotations

import random
import secrets
import time
from datetime import datetime, timedelta, timezone
from typing import Protocol, Sequence, TypeVar, runtime_checkable

T = TypeVar("T")


@runtime_checkable
class RandomSource(Protocol):
    """Source of identifiers, nonces and unbiased choices."""

    def token_hex(self, nbytes: int) -> str:
        ...

    def choice(self, seq: Sequence[T]) -> T:
        ...


class SystemRandomSource:
    """Cryptographically strong randomness backed by the secrets module."""

    def token_hex(self, nbytes: int) -> str:
        return secrets.token_hex(nbytes)

    def choice(self, seq: Sequence[T]) -> T:
        return secrets.choice(seq)


class SeededRandomSource:
    """
    Deterministic substitute for tests and reproducible simulations.

    Not suitable for production nonces.
    """

    def __init__(self, seed: int = 0) -> None:
        self._rng = random.Random(seed)

    def token_hex(self, nbytes: int) -> str:
        return self._rng.getrandbits(nbytes * 8).to_bytes(nbytes, "big").hex()

    def choice(self, seq: Sequence[T]) -> T:
        return self._rng.choice(seq)


@runtime_checkable
class Clock(Protocol):
    """Wall clock for timestamps plus a monotonic clock for latencies."""

    def now(self) -> datetime:
        ...

    def monotonic(self) -> float:
        ...


class SystemClock:
    def now(self) -> datetime:
        return datetime.now(timezone.utc)

    def monotonic(self) -> float:
        return time.monotonic()


class FixedClock:
    """A clock that only moves when told to."""

    def __init__(self, start: datetime | None = None) -> None:
        self._now = start or datetime(2026, 1, 1, tzinfo=timezone.utc)
        self._mono = 0.0

    def now(self) -> datetime:
        return self._now

    def monotonic(self) -> float:
        return self._mono

    def advance(self, seconds: float) -> None:
        self._now = self._now + timedelta(seconds=seconds)
        self._mono += seconds
