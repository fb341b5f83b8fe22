"""
On-chain commit-reveal verification.

Block height replaces wall-clock timing as the trusted clock, and
hash pre-commitment makes answer copying impossible within the commit window.
"""

from chain.commitments import CommitData, prepare_commit, prompt_hash
from chain.contract import (
    ChallengePhase,
    ChallengeView,
    Commitment,
    OnChainChallenge,
    SwarmChallengeContract,
    compute_challenge_id,
    compute_commit_hash,
    phase,
)
from chain.ledger import Ledger, LedgerEvent, TxReceipt
from chain.scoring import block_spread, final_score, reveal_rate, spread_score

__all__ = [
    "CommitData",
    "prepare_commit",
    "prompt_hash",
    "ChallengePhase",
    "ChallengeView",
    "Commitment",
    "OnChainChallenge",
    "SwarmChallengeContract",
    "compute_challenge_id",
    "compute_commit_hash",
    "phase",
    "Ledger",
    "LedgerEvent",
    "TxReceipt",
    "block_spread",
    "final_score",
    "reveal_rate",
    "spread_score",
]
