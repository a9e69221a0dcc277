"""
Position Engine: entry, per-bar auto-management, and closing of the single trade.

Responsibilities:
    - Entry price, stop and target (explicit or derived from average range)
    - Initial risk distance, fixed at entry
    - Stop/target hit detection with a conservative same-bar rule
    - Breakeven promotion once open R reaches the trigger
    - R-multiple scoring of the closed trade

Evaluation order per bar is close-check first, breakeven second. A stop or
target hit always wins over a breakeven adjustment on the same bar.

Invalid commands (enter while open) come back as REJECTED results; nothing
here raises for user mistakes.
"""

from __future__ import annotations

import logging
import math
from datetime import datetime
from typing import Sequence

from config.engine_config import EngineConfig
from replay_core.contracts import (
    STILL_OPEN,
    Bar,
    BarEvaluation,
    ClosedTradeRecord,
    CommandStatus,
    Direction,
    EntryRequest,
    EntryResult,
    ExitReason,
    ManageResult,
    OrderType,
    Outcome,
    Position,
    TradeResult,
)
from replay_core.sizing import clamp_risk_fraction
from replay_core.volatility import derive_risk_distance

logger = logging.getLogger("btl.engine")

REJECT_ALREADY_OPEN = "already_open"


def _iso(ts: datetime) -> str:
    return ts.isoformat()


def _finite_or_none(value: float | None) -> float | None:
    """Explicit price, or None when it is missing, NaN or infinite."""
    if value is None or not math.isfinite(value):
        return None
    return float(value)


def enter_position(
    bars: Sequence[Bar],
    cursor_index: int,
    current: Position | None,
    request: EntryRequest,
    config: EngineConfig,
    now: datetime,
) -> EntryResult:
    """Open a position at the cursor bar.

    Entry is the bar's close unless a non-market order carries an explicit
    price. Stop and target default to the derived risk distance (and
    ``target_multiple`` times it) on the losing and winning side.
    """
    if current is not None:
        logger.info("Entry rejected: a position is already open")
        return EntryResult(status=CommandStatus.REJECTED, reject_reason=REJECT_ALREADY_OPEN)

    bar = bars[cursor_index]
    sign = request.direction.sign
    entry_price = _finite_or_none(request.entry_price)
    stop_price = _finite_or_none(request.stop_price)
    target_price = _finite_or_none(request.target_price)

    if request.order_type is not OrderType.MARKET and entry_price is not None:
        entry = entry_price
    else:
        entry = bar.close

    risk_dist = derive_risk_distance(bars, cursor_index, config.risk)
    stop = stop_price if stop_price is not None else entry - sign * risk_dist
    target = (
        target_price
        if target_price is not None
        else entry + sign * risk_dist * config.risk.target_multiple
    )
    initial_risk = abs(entry - stop) or risk_dist

    position = Position(
        direction=request.direction,
        order_type=request.order_type,
        entry_price=entry,
        stop_price=float(stop),
        target_price=float(target),
        initial_risk_distance=initial_risk,
        entry_index=cursor_index,
        opened_at=now,
        risk_fraction=clamp_risk_fraction(request.risk_fraction),
        auto_breakeven=request.auto_breakeven,
        setup=request.setup.strip(),
        notes=request.notes.strip(),
    )
    logger.info(
        "Opened %s at %.5f (stop %.5f, target %.5f, risk %.5f) on bar %d",
        position.direction.value, entry, position.stop_price, position.target_price,
        initial_risk, cursor_index,
    )
    return EntryResult(status=CommandStatus.OPENED, position=position)


def open_r(position: Position, price: float) -> float:
    """Unrealised R at *price*, always against the initial risk distance.

    Returns 0.0 when the risk distance is zero.
    """
    if not position.initial_risk_distance:
        return 0.0
    move = (price - position.entry_price) * position.direction.sign
    return move / position.initial_risk_distance


def evaluate_bar(position: Position, bar: Bar) -> BarEvaluation:
    """Check whether *bar* hits the stop or the target.

    When both are inside the bar the order of touches is unknown; assume the
    stop came first and tag the exit so the journal shows the conflict.
    """
    if position.direction is Direction.LONG:
        hit_stop = bar.low <= position.stop_price
        hit_target = bar.high >= position.target_price
    else:
        hit_stop = bar.high >= position.stop_price
        hit_target = bar.low <= position.target_price

    if hit_stop and hit_target:
        return BarEvaluation(Outcome.CLOSED_AT_STOP, position.stop_price, ExitReason.STOP_SAME_BAR)
    if hit_stop:
        return BarEvaluation(Outcome.CLOSED_AT_STOP, position.stop_price, ExitReason.STOP)
    if hit_target:
        return BarEvaluation(Outcome.CLOSED_AT_TARGET, position.target_price, ExitReason.TARGET)
    return STILL_OPEN


def apply_breakeven(position: Position, bar: Bar, trigger_r: float = 1.0) -> bool:
    """Move the stop to entry once open R at the bar close reaches *trigger_r*.

    Returns True only on the bar that performs the move.
    """
    if not position.auto_breakeven or position.moved_to_breakeven:
        return False
    if open_r(position, bar.close) < trigger_r:
        return False
    position.stop_price = position.entry_price
    position.moved_to_breakeven = True
    logger.info("Stop moved to breakeven at %.5f", position.entry_price)
    return True


def manage_position(position: Position, bar: Bar, config: EngineConfig) -> ManageResult:
    """One auto-management pass: close check, then breakeven if still open."""
    evaluation = evaluate_bar(position, bar)
    if evaluation.closed:
        return ManageResult(evaluation=evaluation)
    moved = apply_breakeven(position, bar, config.breakeven.trigger_r)
    return ManageResult(evaluation=evaluation, breakeven_moved=moved)


def close_position(
    position: Position,
    exit_price: float,
    reason: ExitReason | str,
    cursor_index: int,
    now: datetime,
    record_id: str,
) -> ClosedTradeRecord:
    """Score the trade and build its journal record.

    The caller appends the record to the journal and drops the position.
    """
    r = open_r(position, exit_price)
    reason_label = reason.value if isinstance(reason, ExitReason) else str(reason)
    record = ClosedTradeRecord(
        id=record_id,
        direction=position.direction,
        entry=position.entry_price,
        exit=exit_price,
        r=r,
        result=TradeResult.from_r(r),
        reason=reason_label,
        entry_index=position.entry_index,
        exit_index=cursor_index,
        opened_at=_iso(position.opened_at),
        closed_at=_iso(now),
        setup=position.setup,
        notes=position.notes,
        risk_fraction=position.risk_fraction,
        moved_to_breakeven=position.moved_to_breakeven,
    )
    logger.info(
        "Closed %s at %.5f: %+.2fR (%s)", position.direction.value, exit_price, r, reason_label,
    )
    return record
