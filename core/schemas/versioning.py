"""
Module 01 - Schemas
File: versioning.py

Purpose: Centralize schema and wire protocol version constants.
This file has no imports from other schema files to avoid circular
dependencies.
"""

from typing import Literal

# Current schema version - used across all stored models
SCHEMA_VERSION: str = "v1"

# Swarm Verification Protocol version sent to agents in every challenge
PROTOCOL_VERSION: str = "0.1"

SchemaVersion = Literal["v1"]

SUPPORTED_SCHEMA_VERSIONS: frozenset[str] = frozenset({"v1"})
SUPPORTED_PROTOCOL_VERSIONS: frozenset[str] = frozenset({"0.1"})


class UnsupportedProtocolVersionError(ValueError):
    """Raised when an unsupported protocol version is encountered."""

    def __init__(self, version: str, supported: frozenset[str] | None = None) -> None:
        self.version = version
        self.supported = supported or SUPPORTED_PROTOCOL_VERSIONS
        super().__init__(
            f"Unsupported protocol version: '{version}'. "
            f"Supported versions: {sorted(self.supported)}"
        )


def assert_supported_protocol_version(version: str) -> None:
    """
    Validate that the given protocol version is supported.

    Raises:
        UnsupportedProtocolVersionError: If the version is not supported.
    """
    if version not in SUPPORTED_PROTOCOL_VERSIONS:
        raise UnsupportedProtocolVersionError(version)


def is_compatible_protocol_version(version: str) -> bool:
    """Check if a protocol version is compatible without raising."""
    return version in SUPPORTED_PROTOCOL_VERSIONS
