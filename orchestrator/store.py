"""
Verification Repository

Storage seam for Verification records. The verification engine only
depends on the protocol; the in-memory implementation backs the API
process.

Records are write-once: put() refuses an existing id, and the only later
change is attaching an attestation reference exactly once.
"""

from __future__ import annotations

import logging
import threading
from typing import Optional, Protocol, runtime_checkable

from core.schemas import (
    AttestationAlreadySetException,
    Verification,
    VerificationExistsException,
    VerificationNotFound,
)


logger = logging.getLogger(__name__)


@runtime_checkable
class VerificationRepository(Protocol):
    """Get/put by verification id."""

    def get(self, verification_id: str) -> Verification:
        ...

    def put(self, verification: Verification) -> None:
        ...

    def list(self, limit: Optional[int] = None) -> list[Verification]:
        ...


class InMemoryVerificationRepository:
    """Thread-safe dict-backed repository, ordered by insertion."""

    def __init__(self) -> None:
        self._items: dict[str, Verification] = {}
        self._lock = threading.Lock()

    def get(self, verification_id: str) -> Verification:
        with self._lock:
            verification = self._items.get(verification_id)
        if verification is None:
            raise VerificationNotFound(verification_id)
        return verification

    def put(self, verification: Verification) -> None:
        with self._lock:
            if verification.verification_id in self._items:
                raise VerificationExistsException(verification.verification_id)
            self._items[verification.verification_id] = verification
        logger.debug(f"Stored verification {verification.verification_id}")

    def list(self, limit: Optional[int] = None) -> list[Verification]:
        """Most recent first."""
        with self._lock:
            items = list(reversed(self._items.values()))
        return items if limit is None else items[:limit]

    def attach_attestation(self, verification_id: str, attestation_ref: str) -> Verification:
        """
        Set the attestation reference on a stored verification.

        Scores and verdict are never touched; the stored record is replaced
        by a copy that differs only in attestation_ref.

        Raises:
            VerificationNotFound: unknown id
            AttestationAlreadySetException: a reference is already attached
        """
        with self._lock:
            current = self._items.get(verification_id)
            if current is None:
                raise VerificationNotFound(verification_id)
            if current.attestation_ref is not None:
                raise AttestationAlreadySetException(verification_id)
            updated = current.model_copy(update={"attestation_ref": attestation_ref})
            self._items[verification_id] = updated
        logger.info(f"Attached attestation {attestation_ref} to {verification_id}")
        return updated

    def __len__(self) -> int:
        with self._lock:
            return len(self._items)
