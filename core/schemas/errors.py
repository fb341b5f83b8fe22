"""
Module 01 - Schemas
File: errors.py

Purpose: Standard error taxonomy for swarm verification.
Defines both Pydantic models for structured error communication
and Python exceptions for control flow.
"""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field


# =============================================================================
# Error Codes (Machine-Readable Constants)
# =============================================================================

class ErrorCodes:
    """Stable machine-readable error codes."""

    # Request validation (rejected before dispatch)
    INVALID_REQUEST = "INVALID_REQUEST"
    INSUFFICIENT_AGENTS = "INSUFFICIENT_AGENTS"
    UNKNOWN_CHALLENGE_TYPE = "UNKNOWN_CHALLENGE_TYPE"

    # Policy / configuration
    SCORING_POLICY_INVALID = "SCORING_POLICY_INVALID"

    # Storage
    VERIFICATION_NOT_FOUND = "VERIFICATION_NOT_FOUND"
    VERIFICATION_EXISTS = "VERIFICATION_EXISTS"
    ATTESTATION_ALREADY_SET = "ATTESTATION_ALREADY_SET"

    # On-chain commit-reveal
    CONTRACT_REVERT = "CONTRACT_REVERT"


class RevertReason:
    """Reasons attached to a reverted commit-reveal transaction."""

    UNKNOWN_CHALLENGE = "UNKNOWN_CHALLENGE"
    INVALID_SENDER = "INVALID_SENDER"
    CHALLENGE_EXISTS = "CHALLENGE_EXISTS"
    INVALID_WINDOW = "INVALID_WINDOW"
    INVALID_HASH = "INVALID_HASH"
    COMMIT_CLOSED = "COMMIT_CLOSED"
    ALREADY_COMMITTED = "ALREADY_COMMITTED"
    REVEAL_NOT_OPEN = "REVEAL_NOT_OPEN"
    REVEAL_CLOSED = "REVEAL_CLOSED"
    NOT_COMMITTED = "NOT_COMMITTED"
    ALREADY_REVEALED = "ALREADY_REVEALED"
    HASH_MISMATCH = "HASH_MISMATCH"
    NOT_CREATOR = "NOT_CREATOR"
    REVEAL_NOT_CLOSED = "REVEAL_NOT_CLOSED"
    ALREADY_FINALIZED = "ALREADY_FINALIZED"


# =============================================================================
# Pydantic Error Model (Structured Communication)
# =============================================================================

class SwarmError(BaseModel):
    """
    Error model for passing failures between layers without exceptions.
    """

    model_config = ConfigDict(extra="forbid")

    code: str = Field(
        ...,
        description="Stable machine-readable error code",
        examples=[ErrorCodes.INVALID_REQUEST],
    )
    message: str = Field(..., description="Human-readable error message")
    details: dict[str, Any] = Field(default_factory=dict)


# =============================================================================
# Python Exceptions (Control Flow)
# =============================================================================

class SwarmProofException(Exception):
    """
    Base exception for all swarm verification errors.

    Carries structured error information and can be converted to a
    SwarmError model.
    """

    def __init__(
        self,
        message: str,
        code: str = "SWARMPROOF_ERROR",
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message)
        self.code = code
        self.message = message
        self.details = details or {}

    def to_error_model(self) -> SwarmError:
        """Convert this exception to a SwarmError model."""
        return SwarmError(code=self.code, message=self.message, details=self.details)

    def __repr__(self) -> str:
        return f"{type(self).__name__}(code={self.code!r}, message={self.message!r})"


class InvalidRequestException(SwarmProofException):
    """Raised for malformed verification requests, before any dispatch."""

    def __init__(
        self,
        message: str,
        code: str = ErrorCodes.INVALID_REQUEST,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message=message, code=code, details=details)


class ScoringPolicyException(SwarmProofException):
    """Raised when scoring or chain policy constants are inconsistent."""

    def __init__(self, message: str, details: dict[str, Any] | None = None) -> None:
        super().__init__(
            message=message,
            code=ErrorCodes.SCORING_POLICY_INVALID,
            details=details,
        )


class VerificationNotFound(SwarmProofException):
    """Raised when a verification id is not in the repository."""

    def __init__(self, verification_id: str) -> None:
        super().__init__(
            message=f"Verification not found: {verification_id}",
            code=ErrorCodes.VERIFICATION_NOT_FOUND,
            details={"verification_id": verification_id},
        )
        self.verification_id = verification_id


class VerificationExistsException(SwarmProofException):
    """Raised when a stored verification would be overwritten."""

    def __init__(self, verification_id: str) -> None:
        super().__init__(
            message=f"Verification already stored: {verification_id}",
            code=ErrorCodes.VERIFICATION_EXISTS,
            details={"verification_id": verification_id},
        )


class AttestationAlreadySetException(SwarmProofException):
    """Raised when an attestation reference is attached twice."""

    def __init__(self, verification_id: str) -> None:
        super().__init__(
            message=f"Attestation already attached to {verification_id}",
            code=ErrorCodes.ATTESTATION_ALREADY_SET,
            details={"verification_id": verification_id},
        )


class ContractRevert(SwarmProofException):
    """
    Raised when a commit-reveal transaction violates a precondition.

    The ledger guarantees that no state written by the reverted call
    survives.
    """

    def __init__(
        self,
        reason: str,
        message: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        full_details = dict(details or {})
        full_details["reason"] = reason
        super().__init__(
            message=message or reason,
            code=ErrorCodes.CONTRACT_REVERT,
            details=full_details,
        )
        self.reason = reason
