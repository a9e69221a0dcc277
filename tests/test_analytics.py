"""Tests for journal analytics: win rate, expectancy, profit factor, drawdown."""

import math

import pytest

from replay_core.analytics import (
    JournalStats,
    equity_curve,
    max_drawdown,
    profit_factor,
    summarize,
)
from replay_core.contracts import ClosedTradeRecord, Direction, TradeResult


def _rec(r: float, i: int = 0) -> ClosedTradeRecord:
    return ClosedTradeRecord(
        id=f"t{i}",
        direction=Direction.LONG,
        entry=1.1,
        exit=1.1 + r * 0.001,
        r=r,
        result=TradeResult.from_r(r),
        reason="TP" if r > 0 else "SL",
        entry_index=i,
        exit_index=i + 1,
        opened_at="2026-03-02T14:30:00+00:00",
        closed_at="2026-03-02T14:35:00+00:00",
    )


def _recs(*rs: float) -> list[ClosedTradeRecord]:
    return [_rec(r, i) for i, r in enumerate(rs)]


def test_reference_scenario() -> None:
    stats = summarize(_recs(2, -1, 1, -1))
    assert stats.count == 4
    assert stats.wins == 2
    assert stats.losses == 2
    assert stats.win_rate == 50.0
    assert stats.avg_r == pytest.approx(0.25)
    assert stats.expectancy == pytest.approx(0.25)
    assert stats.profit_factor == pytest.approx(1.5)
    assert stats.max_drawdown == pytest.approx(1.0)
    assert stats.total_r == pytest.approx(1.0)


def test_empty_journal_is_all_zeros() -> None:
    stats = summarize([])
    assert stats == JournalStats()
    assert stats.win_rate == 0.0
    assert stats.profit_factor == 0.0
    assert stats.max_drawdown == 0.0


def test_all_wins_infinite_profit_factor() -> None:
    stats = summarize(_recs(1, 2))
    assert math.isinf(stats.profit_factor)
    assert stats.profit_factor_is_infinite
    assert stats.max_drawdown == 0.0


def test_flats_counted_separately() -> None:
    stats = summarize(_recs(0.0, 1.0, 0.0))
    assert stats.flats == 2
    assert stats.wins == 1
    assert stats.win_rate == pytest.approx(100 / 3)


def test_only_flats_profit_factor_zero() -> None:
    assert profit_factor([0.0, 0.0]) == 0.0


def test_drawdown_from_initial_peak_of_zero() -> None:
    """Losing from the start counts: the peak begins at 0, not at the first trade."""
    assert max_drawdown([-1.0, -0.5, 2.0]) == pytest.approx(1.5)


def test_drawdown_takes_the_deepest_trough() -> None:
    assert max_drawdown([3.0, -1.0, 1.0, -2.5, -0.5, 4.0]) == pytest.approx(3.0)


def test_equity_curve() -> None:
    assert equity_curve(_recs(2, -1, 1, -1)) == [2.0, 1.0, 2.0, 1.0]
    assert equity_curve([]) == []
