"""
Module 09A - Verification Pipeline (In-Process Runtime Wiring)

Composes challenge generation, dispatch and scoring into one verification
run, and stores the resulting records.

Public API:
- SwarmVerifier: Runs one verification end to end
- VerificationStats: Aggregates over stored verifications
- VerificationRepository: Storage protocol (get/put/list)
- InMemoryVerificationRepository: Thread-safe, write-once implementation
"""

from orchestrator.pipeline import (
    SwarmVerifier,
    VerificationStats,
    compute_stats,
    create_verifier,
)
from orchestrator.store import (
    InMemoryVerificationRepository,
    VerificationRepository,
)


__all__ = [
    "SwarmVerifier",
    "VerificationStats",
    "compute_stats",
    "create_verifier",
    "InMemoryVerificationRepository",
    "VerificationRepository",
]
