"""
Dispersion statistics shared by dispatch and scoring.

All helpers use the population standard deviation and return 0.0 instead of
NaN for empty input or a zero mean.
"""

from __future__ import annotations

import statistics
from typing import Sequence

from core.schemas import TimingStats


def mean(values: Sequence[float]) -> float:
    if not values:
        return 0.0
    return statistics.fmean(values)


def std_dev(values: Sequence[float]) -> float:
    if len(values) < 2:
        return 0.0
    return statistics.pstdev(values)


def coefficient_of_variation(values: Sequence[float], *, empty: float = 0.0) -> float:
    """stdDev / mean; `empty` is returned when the mean is not positive."""
    avg = mean(values)
    if avg <= 0:
        return empty
    return std_dev(values) / avg


def timing_stats(latencies: Sequence[float]) -> TimingStats:
    """Aggregate latency statistics; all zero when there are no latencies."""
    if not latencies:
        return TimingStats()
    return TimingStats(
        min_ms=min(latencies),
        max_ms=max(latencies),
        mean_ms=mean(latencies),
        std_dev_ms=std_dev(latencies),
        cv=coefficient_of_variation(latencies),
    )
