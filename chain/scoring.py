"""
Block-spread Scoring

Scores a finalized commit-reveal challenge from two observations:
- how tightly the commits cluster in block height (spread)
- what fraction of committers came back to reveal

Integer arithmetic throughout, matching what a contract can compute.
"""

from __future__ import annotations

import math
from typing import Optional, Sequence

from core.config.runtime import ChainConfig


def block_spread(commit_blocks: Sequence[int]) -> int:
    """max(commit block) - min(commit block); 0 for no commits."""
    if not commit_blocks:
        return 0
    return max(commit_blocks) - min(commit_blocks)


def spread_score(spread: int, config: Optional[ChainConfig] = None) -> int:
    """Map a block spread to a score via the configured bands."""
    config = config or ChainConfig()
    for max_spread, score in config.spread_bands:
        if spread <= max_spread:
            return score
    return config.spread_fallback_score


def reveal_rate(revealed_count: int, participant_count: int) -> int:
    if participant_count <= 0:
        return 0
    return revealed_count * 100 // participant_count


def final_score(
    commit_blocks: Sequence[int],
    revealed_count: int,
    config: Optional[ChainConfig] = None,
) -> int:
    """
    Combined score; zero participants yields 0.

    final = floor(spread_weight * spread_score + reveal_weight * reveal_rate)
    """
    config = config or ChainConfig()
    if not commit_blocks:
        return 0
    combined = (
        config.spread_weight * spread_score(block_spread(commit_blocks), config)
        + config.reveal_weight * reveal_rate(revealed_count, len(commit_blocks))
    )
    return max(0, min(100, math.floor(combined + 1e-9)))
