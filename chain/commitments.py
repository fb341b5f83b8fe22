"""
Commitment helpers for agents taking part in a commit-reveal challenge.

An agent hashes its answer text to a 32-byte answer value, draws a random
32-byte salt, and commits H(answer || salt). After the commit deadline it
reveals (answer, salt) and the contract recomputes the hash.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from core.crypto import hash_text, to_hex

from chain.contract import compute_commit_hash
from swarm.sources import RandomSource, SystemRandomSource


@dataclass(frozen=True)
class CommitData:
    answer_text: str
    answer: str       # 0x-hex H(answer_text), the value revealed on-chain
    salt: str         # 0x-hex, 32 bytes
    commit_hash: str  # 0x-hex H(answer || salt)


def prompt_hash(prompt: str) -> str:
    """32-byte hash of a prompt, suitable for create_challenge()."""
    return to_hex(hash_text(prompt))


def prepare_commit(answer_text: str, random_source: Optional[RandomSource] = None) -> CommitData:
    """Build everything an agent needs for its commit and later reveal."""
    rng = random_source or SystemRandomSource()
    answer = to_hex(hash_text(answer_text))
    salt = "0x" + rng.token_hex(32)
    return CommitData(
        answer_text=answer_text,
        answer=answer,
        salt=salt,
        commit_hash=compute_commit_hash(answer, salt),
    )
