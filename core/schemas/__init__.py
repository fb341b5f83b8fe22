"""
Module 01 - Schemas
File: __init__.py

Purpose: Export the public API for the schemas module.
"""

from .versioning import (
    PROTOCOL_VERSION,
    SCHEMA_VERSION,
    SUPPORTED_PROTOCOL_VERSIONS,
    UnsupportedProtocolVersionError,
    assert_supported_protocol_version,
    is_compatible_protocol_version,
)

from .errors import (
    AttestationAlreadySetException,
    ContractRevert,
    ErrorCodes,
    InvalidRequestException,
    RevertReason,
    ScoringPolicyException,
    SwarmError,
    SwarmProofException,
    VerificationExistsException,
    VerificationNotFound,
)

from .swarm import (
    CHALLENGE_TYPES,
    Agent,
    Challenge,
    ChallengeResponse,
    ChallengeType,
    SubScores,
    TimingStats,
    Verdict,
    Verification,
)

__all__ = [
    # Versioning
    "PROTOCOL_VERSION",
    "SCHEMA_VERSION",
    "SUPPORTED_PROTOCOL_VERSIONS",
    "UnsupportedProtocolVersionError",
    "assert_supported_protocol_version",
    "is_compatible_protocol_version",
    # Errors
    "AttestationAlreadySetException",
    "ContractRevert",
    "ErrorCodes",
    "InvalidRequestException",
    "RevertReason",
    "ScoringPolicyException",
    "SwarmError",
    "SwarmProofException",
    "VerificationExistsException",
    "VerificationNotFound",
    # Swarm
    "CHALLENGE_TYPES",
    "Agent",
    "Challenge",
    "ChallengeResponse",
    "ChallengeType",
    "SubScores",
    "TimingStats",
    "Verdict",
    "Verification",
]
