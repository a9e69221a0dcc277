"""
Average bar range and derived risk distance.

The risk distance is a simple ATR-style proxy: the mean high-low range of
the trailing ``lookback`` bars, scaled by ``range_multiplier`` and floored at
``min_distance`` so a dead-flat stretch never yields a zero-risk trade.

    avg_range(n) = mean(high - low) over the last min(n, index + 1) bars
    distance     = max(avg_range * multiplier, min_distance)

Pure functions; no I/O.
"""

from __future__ import annotations

from typing import Sequence

from config.engine_config import RiskConfig
from replay_core.contracts import Bar


def average_range(bars: Sequence[Bar], index: int, lookback: int = 14) -> float:
    """Mean high-low range of the bars ending at *index* (inclusive).

    Near the start of the session fewer than ``lookback`` bars exist; the
    window shrinks to what is available. Returns 0.0 for an empty sequence.
    """
    if not bars or lookback <= 0:
        return 0.0
    index = max(0, min(index, len(bars) - 1))
    start = max(0, index - lookback + 1)
    window = bars[start : index + 1]
    return sum(b.range() for b in window) / len(window)


def derive_risk_distance(bars: Sequence[Bar], index: int, risk: RiskConfig) -> float:
    """Stop distance used when the caller gives no explicit stop/target."""
    avg = average_range(bars, index, risk.lookback)
    return max(avg * risk.range_multiplier, risk.min_distance)
