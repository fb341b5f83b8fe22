"""
Module 02 - Hashing Utilities
Hashing helpers for commit-reveal identifiers and commitments.

This module provides:
- SHA-256 hashing for raw bytes and byte concatenations
- Hex encoding/decoding with 0x prefix
- Fixed-width (32-byte) identifier validation

Determinism Notes:
- Always hash raw bytes exactly as given
- Text is encoded as UTF-8 before hashing, never normalized
"""
from __future__ import annotations

import hashlib

# Width of every on-chain identifier (challenge ids, prompt hashes, commit hashes)
BYTES32_LEN = 32


def sha256(data: bytes) -> bytes:
    """
    Compute SHA-256 hash of raw bytes.

    Example:
        >>> sha256(b"hello").hex()
        '2cf24dba5fb0a30e26e83b2ac5b9e29e1b161e5c1fa7425e73043362938b9824'
    """
    return hashlib.sha256(data).digest()


def hash_text(text: str) -> bytes:
    """Hash a UTF-8 string, e.g. a prompt or an answer."""
    return sha256(text.encode("utf-8"))


def hash_concat(*parts: bytes) -> bytes:
    """
    Hash the concatenation of byte sequences.

    Used for commit hashes, H(answer || salt), and for challenge ids,
    H(prompt_hash || block || creator).
    """
    return sha256(b"".join(parts))


def to_hex(data: bytes) -> str:
    """
    Convert bytes to hexadecimal string with 0x prefix.

    Example:
        >>> to_hex(bytes.fromhex("deadbeef"))
        '0xdeadbeef'
    """
    return "0x" + data.hex()


def from_hex(hex_string: str) -> bytes:
    """
    Convert hexadecimal string (with 0x prefix) to bytes.

    Raises:
        ValueError: If string doesn't start with 0x, has odd length,
                   or contains invalid hex characters
    """
    if not hex_string.startswith("0x"):
        raise ValueError(
            f"Hex string must start with '0x' prefix, got: {hex_string[:10]}..."
        )

    hex_content = hex_string[2:]

    if len(hex_content) % 2 != 0:
        raise ValueError(
            f"Hex string must have even length after 0x prefix, "
            f"got length {len(hex_content)}"
        )

    try:
        return bytes.fromhex(hex_content)
    except ValueError as e:
        raise ValueError(f"Invalid hex characters in string: {e}") from e


def bytes32_from_hex(hex_string: str) -> bytes:
    """
    Decode a 0x-prefixed hex string that must be exactly 32 bytes.

    Raises:
        ValueError: If the string is not valid hex or not 32 bytes wide
    """
    data = from_hex(hex_string)
    if len(data) != BYTES32_LEN:
        raise ValueError(f"Expected {BYTES32_LEN} bytes, got {len(data)}")
    return data


def is_bytes32_hex(value: str) -> bool:
    """Check whether value is a 0x-prefixed 32-byte hex string."""
    try:
        bytes32_from_hex(value)
    except ValueError:
        return False
    return True


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
