"""
Journal analytics: reduce closed trades to summary statistics in R.

    win_rate      = wins / count * 100
    avg_r         = mean(r)            (reported again as expectancy)
    profit_factor = sum(r > 0) / |sum(r < 0)|
                    inf when there are wins and no losses, 0 when neither
    max_drawdown  = max(peak - cumulative) along the cumulative-R curve,
                    peak starting at 0

An empty journal gives all zeros. Pure; no I/O.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Iterable, Sequence

from replay_core.contracts import ClosedTradeRecord


@dataclass(frozen=True)
class JournalStats:
    count: int = 0
    wins: int = 0
    losses: int = 0
    flats: int = 0
    win_rate: float = 0.0
    avg_r: float = 0.0
    expectancy: float = 0.0
    profit_factor: float = 0.0
    max_drawdown: float = 0.0
    total_r: float = 0.0

    @property
    def profit_factor_is_infinite(self) -> bool:
        return math.isinf(self.profit_factor)


def r_values(records: Iterable[ClosedTradeRecord]) -> list[float]:
    return [float(rec.r) for rec in records]


def equity_curve(records: Iterable[ClosedTradeRecord]) -> list[float]:
    """Cumulative R after each trade."""
    curve: list[float] = []
    cum = 0.0
    for r in r_values(records):
        cum += r
        curve.append(cum)
    return curve


def max_drawdown(rs: Sequence[float]) -> float:
    """Largest peak-to-trough drop of the cumulative-R curve."""
    cum = 0.0
    peak = 0.0
    worst = 0.0
    for r in rs:
        cum += r
        if cum > peak:
            peak = cum
        dd = peak - cum
        if dd > worst:
            worst = dd
    return worst


def profit_factor(rs: Sequence[float]) -> float:
    gross_win = sum(r for r in rs if r > 0)
    gross_loss = abs(sum(r for r in rs if r < 0))
    if gross_loss == 0:
        return math.inf if gross_win > 0 else 0.0
    return gross_win / gross_loss


def summarize(records: Sequence[ClosedTradeRecord]) -> JournalStats:
    """Summary statistics over the whole journal, in order."""
    rs = r_values(records)
    n = len(rs)
    if n == 0:
        return JournalStats()

    wins = sum(1 for r in rs if r > 0)
    losses = sum(1 for r in rs if r < 0)
    total = sum(rs)
    avg = total / n

    return JournalStats(
        count=n,
        wins=wins,
        losses=losses,
        flats=n - wins - losses,
        win_rate=wins / n * 100,
        avg_r=avg,
        expectancy=avg,
        profit_factor=profit_factor(rs),
        max_drawdown=max_drawdown(rs),
        total_r=total,
    )
