"""
Core cryptographic utilities.

Module 02 provides hashing for commit-reveal commitments and identifiers.
"""
from .hashing import (
    BYTES32_LEN,
    sha256,
    hash_text,
    hash_concat,
    to_hex,
    from_hex,
    bytes32_from_hex,
    is_bytes32_hex,
)

__all__ = [
    "BYTES32_LEN",
    "sha256",
    "hash_text",
    "hash_concat",
    "to_hex",
    "from_hex",
    "bytes32_from_hex",
    "is_bytes32_hex",
]
