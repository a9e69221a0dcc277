"""
Human-readable replay output for the terminal.

Every CLI command uses these formatters. The view is a pure function of
(bars, cursor, position) plus the journal, so the same text comes back for
the same session state.
"""

from __future__ import annotations

import math
from typing import TYPE_CHECKING, Sequence

from replay_core.contracts import Bar, ClosedTradeRecord, Position
from replay_core.position_engine import open_r

if TYPE_CHECKING:
    from playback.controller import Session
    from replay_core.analytics import JournalStats

EMPTY = "—"
INFINITY = "∞"


def _fmt_price(value: float) -> str:
    return f"{value:.5f}"


def _fmt_r(value: float) -> str:
    return f"{value:+.2f}R"


def _fmt_pf(value: float) -> str:
    if math.isinf(value):
        return INFINITY
    return f"{value:.2f}"


def format_bar(bar: Bar, index: int) -> str:
    bar_type = "up" if bar.is_up() else "down"
    return (
        f"#{index:<4d} {bar_type:4s} | O {_fmt_price(bar.open)}  H {_fmt_price(bar.high)}  "
        f"L {_fmt_price(bar.low)}  C {_fmt_price(bar.close)}"
    )


def format_bars(bars: Sequence[Bar], start: int = 0) -> str:
    if not bars:
        return "No bars."
    return "\n".join(format_bar(bar, start + i) for i, bar in enumerate(bars))


def format_position(pos: Position | None, price: float, cash_per_r: float | None = None) -> str:
    """Format the open position with its live R at *price*."""
    if pos is None:
        return "Position     : flat (no open position)"
    r = open_r(pos, price)
    lines = [
        f"Position     : {pos.direction.value.upper()} {pos.order_type.value} @ {_fmt_price(pos.entry_price)}"
        f" (bar {pos.entry_index})",
        f"Stop / Target: {_fmt_price(pos.stop_price)} / {_fmt_price(pos.target_price)}"
        + ("  [breakeven]" if pos.moved_to_breakeven else ""),
        f"Open R       : {_fmt_r(r)}",
    ]
    if cash_per_r is not None:
        lines.append(f"Open P/L     : ${r * cash_per_r:+,.2f}  (risk {pos.risk_fraction:g}%)")
    if pos.setup:
        lines.append(f"Setup        : {pos.setup}")
    return "\n".join(lines)


def format_hud(session: Session, *, cash_per_r: float | None = None) -> str:
    """One-screen summary of the session at the cursor."""
    bar = session.current_bar
    lines = [
        f"=== Replay: {session.seed}  bar {session.cursor_index}/{session.last_index} ===",
        format_bar(bar, session.cursor_index),
        format_position(session.position, bar.close, cash_per_r),
        "===",
    ]
    return "\n".join(lines)


def format_stats(stats: JournalStats) -> str:
    """Journal summary. Ratios show a dash until there is at least one trade."""
    if stats.count == 0:
        win_rate = avg_r = expectancy = pf = dd = total = EMPTY
    else:
        win_rate = f"{stats.win_rate:.1f}%"
        avg_r = _fmt_r(stats.avg_r)
        expectancy = _fmt_r(stats.expectancy)
        pf = _fmt_pf(stats.profit_factor)
        dd = f"{stats.max_drawdown:.2f}R"
        total = _fmt_r(stats.total_r)
    lines = [
        "=== Journal Stats ===",
        f"Trades       : {stats.count} (W:{stats.wins} / L:{stats.losses} / F:{stats.flats})",
        f"Win rate     : {win_rate}",
        f"Avg R        : {avg_r}",
        f"Expectancy   : {expectancy}",
        f"Profit factor: {pf}",
        f"Max drawdown : {dd}",
        f"Total R      : {total}",
        "===",
    ]
    return "\n".join(lines)


def format_close_event(payload: dict) -> str:
    """One line for a ``trade_closed`` event."""
    return (
        f"Closed {payload['direction'].upper()} {_fmt_price(payload['entry'])} -> {_fmt_price(payload['exit'])}"
        f"  {_fmt_r(payload['r'])}  {payload['result']}  ({payload['reason']})"
    )


def format_journal(records: Sequence[ClosedTradeRecord], limit: int | None = None) -> str:
    """Journal table, newest first."""
    if not records:
        return "Journal is empty."
    rows = list(reversed(records))
    if limit is not None:
        rows = rows[:limit]
    lines = [f"{'closed':25s} {'dir':5s} {'entry':>9s} {'exit':>9s} {'R':>7s} {'result':6s} reason"]
    for rec in rows:
        line = (
            f"{rec.closed_at[:25]:25s} {rec.direction.value:5s} {_fmt_price(rec.entry):>9s} "
            f"{_fmt_price(rec.exit):>9s} {_fmt_r(rec.r):>7s} {rec.result.value:6s} {rec.reason}"
        )
        if rec.setup:
            line += f"  [{rec.setup}]"
        lines.append(line)
    return "\n".join(lines)
