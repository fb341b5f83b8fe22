"""
Swarm Challenge Contract (commit-reveal)

A block-height-gated state machine:

    Created -> CommitClosed -> RevealClosed -> Finalized
    (commit window)  (reveal window)

- create_challenge: id = H(prompt_hash || uint64be(block) || creator)
- commit: block < commit_deadline, once per (challenge, agent)
- reveal: commit_deadline <= block <= reveal_deadline, committed and not yet
  revealed, and H(answer || salt) must equal the stored commit hash
- finalize: creator only, block > reveal_deadline, once

Every precondition is checked before any write, and every call runs inside
Ledger.execute(), so a rejected call leaves storage untouched.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional

from core.config.runtime import ChainConfig
from core.crypto import bytes32_from_hex, hash_concat, is_bytes32_hex, to_hex
from core.schemas import ContractRevert, RevertReason

from chain.ledger import UINT64_MAX, Ledger
from chain.scoring import final_score


class ChallengePhase(str, Enum):
    CREATED = "created"              # commit window open
    COMMIT_CLOSED = "commit_closed"  # reveal window open
    REVEAL_CLOSED = "reveal_closed"  # awaiting finalize
    FINALIZED = "finalized"


@dataclass
class Commitment:
    commit_hash: str
    commit_block: int
    revealed_answer: Optional[str] = None
    revealed: bool = False


@dataclass
class OnChainChallenge:
    challenge_id: str
    prompt_hash: str
    creator: str
    start_block: int
    commit_deadline: int
    reveal_deadline: int
    finalized: bool = False
    score: int = 0
    participants: list[str] = field(default_factory=list)
    commitments: dict[str, Commitment] = field(default_factory=dict)

    @property
    def revealed_count(self) -> int:
        return sum(1 for c in self.commitments.values() if c.revealed)

    def phase_at(self, block: int) -> ChallengePhase:
        return phase(self, block)


@dataclass
class ContractStorage:
    challenges: dict[str, OnChainChallenge] = field(default_factory=dict)


@dataclass(frozen=True)
class ChallengeView:
    """Public read-only view of a challenge."""
    challenge_id: str
    prompt_hash: str
    creator: str
    start_block: int
    commit_deadline: int
    reveal_deadline: int
    finalized: bool
    score: int
    participant_count: int
    revealed_count: int
    phase: ChallengePhase


def phase(challenge: OnChainChallenge | ChallengeView, block: int) -> ChallengePhase:
    """State of a challenge at the given block height."""
    if challenge.finalized:
        return ChallengePhase.FINALIZED
    if block < challenge.commit_deadline:
        return ChallengePhase.CREATED
    if block <= challenge.reveal_deadline:
        return ChallengePhase.COMMIT_CLOSED
    return ChallengePhase.REVEAL_CLOSED


def _address_key(address: str) -> str:
    if not address:
        raise ContractRevert(RevertReason.INVALID_SENDER, "empty sender address")
    return address.lower()


def compute_challenge_id(prompt_hash: str, block: int, creator: str) -> str:
    return to_hex(hash_concat(
        bytes32_from_hex(prompt_hash),
        block.to_bytes(8, "big"),
        creator.lower().encode("utf-8"),
    ))


def compute_commit_hash(answer: str, salt: str) -> str:
    """H(answer || salt) over the raw 32-byte values."""
    return to_hex(hash_concat(bytes32_from_hex(answer), bytes32_from_hex(salt)))


class SwarmChallengeContract:
    """
    Commit-reveal verification bound to a Ledger.

    State-mutating calls take the sender address explicitly; key custody
    and signing are the caller's concern.
    """

    def __init__(self, ledger: Ledger, config: Optional[ChainConfig] = None) -> None:
        self.ledger = ledger
        self.config = config or ChainConfig()
        self.storage = ContractStorage()

    # ------------------------------------------------------------------
    # Transactions
    # ------------------------------------------------------------------

    def create_challenge(
        self,
        sender: str,
        prompt_hash: str,
        commit_blocks: Optional[int] = None,
        reveal_blocks: Optional[int] = None,
    ) -> str:
        commit_blocks = self.config.default_commit_blocks if commit_blocks is None else commit_blocks
        reveal_blocks = self.config.default_reveal_blocks if reveal_blocks is None else reveal_blocks

        def tx() -> str:
            creator = _address_key(sender)
            if not is_bytes32_hex(prompt_hash):
                raise ContractRevert(RevertReason.INVALID_HASH, "prompt hash must be 32 bytes")
            if commit_blocks < 1 or reveal_blocks < 1:
                raise ContractRevert(
                    RevertReason.INVALID_WINDOW,
                    details={"commit_blocks": commit_blocks, "reveal_blocks": reveal_blocks},
                )

            block = self.ledger.block_number
            commit_deadline = block + commit_blocks
            reveal_deadline = commit_deadline + reveal_blocks
            if reveal_deadline > UINT64_MAX:
                raise ContractRevert(RevertReason.INVALID_WINDOW, "deadline overflows uint64")

            challenge_id = compute_challenge_id(prompt_hash, block, creator)
            if challenge_id in self.storage.challenges:
                raise ContractRevert(RevertReason.CHALLENGE_EXISTS, details={"challenge_id": challenge_id})

            self.storage.challenges[challenge_id] = OnChainChallenge(
                challenge_id=challenge_id,
                prompt_hash=prompt_hash.lower(),
                creator=creator,
                start_block=block,
                commit_deadline=commit_deadline,
                reveal_deadline=reveal_deadline,
            )
            self.ledger.emit(
                "ChallengeCreated",
                challenge_id=challenge_id,
                prompt_hash=prompt_hash.lower(),
                commit_deadline=commit_deadline,
                reveal_deadline=reveal_deadline,
            )
            return challenge_id

        return self.ledger.execute(self, sender, "createChallenge", tx)

    def commit(self, sender: str, challenge_id: str, commit_hash: str) -> None:
        def tx() -> None:
            agent = _address_key(sender)
            challenge = self._require(challenge_id)
            block = self.ledger.block_number
            if block >= challenge.commit_deadline:
                raise ContractRevert(RevertReason.COMMIT_CLOSED, details={"block": block})
            if agent in challenge.commitments:
                raise ContractRevert(RevertReason.ALREADY_COMMITTED, details={"participant": agent})
            if not is_bytes32_hex(commit_hash):
                raise ContractRevert(RevertReason.INVALID_HASH, "commit hash must be 32 bytes")

            challenge.participants.append(agent)
            challenge.commitments[agent] = Commitment(
                commit_hash=commit_hash.lower(),
                commit_block=block,
            )
            self.ledger.emit("Committed", challenge_id=challenge_id, participant=agent, block_number=block)

        self.ledger.execute(self, sender, "commit", tx)

    def reveal(self, sender: str, challenge_id: str, answer: str, salt: str) -> None:
        def tx() -> None:
            agent = _address_key(sender)
            challenge = self._require(challenge_id)
            block = self.ledger.block_number
            if block < challenge.commit_deadline:
                raise ContractRevert(RevertReason.REVEAL_NOT_OPEN, details={"block": block})
            if block > challenge.reveal_deadline:
                raise ContractRevert(RevertReason.REVEAL_CLOSED, details={"block": block})
            commitment = challenge.commitments.get(agent)
            if commitment is None:
                raise ContractRevert(RevertReason.NOT_COMMITTED, details={"participant": agent})
            if commitment.revealed:
                raise ContractRevert(RevertReason.ALREADY_REVEALED, details={"participant": agent})
            if not (is_bytes32_hex(answer) and is_bytes32_hex(salt)):
                raise ContractRevert(RevertReason.HASH_MISMATCH, "answer and salt must be 32 bytes")
            if compute_commit_hash(answer, salt) != commitment.commit_hash:
                raise ContractRevert(RevertReason.HASH_MISMATCH, details={"participant": agent})

            commitment.revealed_answer = answer.lower()
            commitment.revealed = True
            self.ledger.emit("Revealed", challenge_id=challenge_id, participant=agent, answer=answer.lower())

        self.ledger.execute(self, sender, "reveal", tx)

    def finalize(self, sender: str, challenge_id: str) -> int:
        def tx() -> int:
            caller = _address_key(sender)
            challenge = self._require(challenge_id)
            if caller != challenge.creator:
                raise ContractRevert(RevertReason.NOT_CREATOR, details={"sender": caller})
            if challenge.finalized:
                raise ContractRevert(RevertReason.ALREADY_FINALIZED)
            block = self.ledger.block_number
            if block <= challenge.reveal_deadline:
                raise ContractRevert(RevertReason.REVEAL_NOT_CLOSED, details={"block": block})

            commit_blocks = [challenge.commitments[p].commit_block for p in challenge.participants]
            revealed = challenge.revealed_count
            challenge.score = final_score(commit_blocks, revealed, self.config)
            challenge.finalized = True
            self.ledger.emit(
                "Finalized",
                challenge_id=challenge_id,
                score=challenge.score,
                participant_count=len(challenge.participants),
                revealed_count=revealed,
            )
            return challenge.score

        return self.ledger.execute(self, sender, "finalize", tx)

    # ------------------------------------------------------------------
    # Views
    # ------------------------------------------------------------------

    def get_challenge(self, challenge_id: str) -> ChallengeView:
        challenge = self._require(challenge_id)
        return ChallengeView(
            challenge_id=challenge.challenge_id,
            prompt_hash=challenge.prompt_hash,
            creator=challenge.creator,
            start_block=challenge.start_block,
            commit_deadline=challenge.commit_deadline,
            reveal_deadline=challenge.reveal_deadline,
            finalized=challenge.finalized,
            score=challenge.score,
            participant_count=len(challenge.participants),
            revealed_count=challenge.revealed_count,
            phase=challenge.phase_at(self.ledger.block_number),
        )

    def get_commitment(self, challenge_id: str, participant: str) -> Optional[Commitment]:
        """A copy of the participant's commitment, or None."""
        challenge = self._require(challenge_id)
        commitment = challenge.commitments.get(participant.lower())
        if commitment is None:
            return None
        return Commitment(**vars(commitment))

    def participants(self, challenge_id: str) -> list[str]:
        """Committers in commit order."""
        return list(self._require(challenge_id).participants)

    def _require(self, challenge_id: str) -> OnChainChallenge:
        challenge = self.storage.challenges.get(challenge_id.lower()) if challenge_id else None
        if challenge is None:
            raise ContractRevert(RevertReason.UNKNOWN_CHALLENGE, details={"challenge_id": challenge_id})
        return challenge


__all__ = [
    "ChallengePhase",
    "ChallengeView",
    "Commitment",
    "OnChainChallenge",
    "SwarmChallengeContract",
    "compute_challenge_id",
    "compute_commit_hash",
    "phase",
]
