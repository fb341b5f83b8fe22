"""
Challenge Generator

Produces single-use challenges that are easy for a model to answer quickly
and uniformly, but hard for a group of humans to answer with matched timing.

Two prompt families:
- parallel/distributed: short prompts with one obvious answer, so every
  agent's reply should be near-identical and the timing comparable
- consistency: open-ended prompts that test stylistic agreement
"""

from __future__ import annotations

from datetime import timedelta
from typing import Optional, Sequence

from core.schemas import CHALLENGE_TYPES, Challenge, InvalidRequestException
from core.schemas.errors import ErrorCodes

from swarm.sources import Clock, RandomSource, SystemClock, SystemRandomSource


PARALLEL_PROMPTS: tuple[str, ...] = (
    "In exactly 3 words, describe the color blue.",
    "Complete this sequence: 2, 4, 8, 16, __",
    "What is 7 * 13? Reply with just the number.",
    "Name one element from the periodic table.",
    "What comes after 'Hello' in a greeting?",
    "Spell 'verification' backwards.",
    "What is the capital of France? One word.",
    "Complete: The quick brown fox jumps over the lazy ___",
    "What is 100 - 37?",
    "Name a primary color.",
)

CONSISTENCY_PROMPTS: tuple[str, ...] = (
    "Explain quantum computing in exactly 10 words.",
    "What is the meaning of life? Answer in haiku format.",
    "Describe yourself in 5 adjectives.",
    "What year did World War 2 end?",
    "Define 'artificial intelligence' in one sentence.",
)

PROMPT_BANK: dict[str, tuple[str, ...]] = {
    "parallel": PARALLEL_PROMPTS,
    "distributed": PARALLEL_PROMPTS,
    "consistency": CONSISTENCY_PROMPTS,
}

# 16 bytes = 128 bits of nonce entropy
NONCE_BYTES = 16
CHALLENGE_ID_BYTES = 8
VERIFICATION_ID_BYTES = 8


class ChallengeGenerator:
    """
    Builds Challenge objects. Pure apart from the injected randomness and clock.
    """

    def __init__(
        self,
        random_source: Optional[RandomSource] = None,
        clock: Optional[Clock] = None,
        prompt_bank: Optional[dict[str, Sequence[str]]] = None,
    ) -> None:
        self.random = random_source or SystemRandomSource()
        self.clock = clock or SystemClock()
        self.prompt_bank = prompt_bank or PROMPT_BANK

    def new_challenge_id(self) -> str:
        return f"ch_{self.random.token_hex(CHALLENGE_ID_BYTES)}"

    def new_verification_id(self) -> str:
        return f"sv_{self.random.token_hex(VERIFICATION_ID_BYTES)}"

    def new_nonce(self) -> str:
        return self.random.token_hex(NONCE_BYTES)

    def generate(
        self,
        challenge_type: str,
        target_agent_ids: Sequence[str],
        timeout_ms: int = 10_000,
    ) -> Challenge:
        """
        Create a challenge for the given agents.

        Raises:
            InvalidRequestException: unknown type or non-positive timeout
        """
        if challenge_type not in CHALLENGE_TYPES or challenge_type not in self.prompt_bank:
            raise InvalidRequestException(
                f"Unknown challenge type: {challenge_type!r}",
                code=ErrorCodes.UNKNOWN_CHALLENGE_TYPE,
                details={"supported": list(CHALLENGE_TYPES)},
            )
        if timeout_ms <= 0:
            raise InvalidRequestException(
                "timeout_ms must be positive", details={"timeout_ms": timeout_ms}
            )

        prompt = self.random.choice(tuple(self.prompt_bank[challenge_type]))
        created_at = self.clock.now()

        return Challenge(
            challenge_id=self.new_challenge_id(),
            type=challenge_type,
            prompt=prompt,
            nonce=self.new_nonce(),
            created_at=created_at,
            expires_at=created_at + timedelta(milliseconds=timeout_ms),
            target_agents=tuple(target_agent_ids),
        )
