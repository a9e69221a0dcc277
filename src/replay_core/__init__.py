"""
replay-core: deterministic bar generation, position engine and R analytics.

No I/O, no clocks, no global state. Time and identity are passed in by the
caller, so every function is reproducible and unit-testable.
"""

from replay_core.analytics import JournalStats, equity_curve, summarize
from replay_core.bars import generate_bars
from replay_core.contracts import (
    Bar,
    ClosedTradeRecord,
    Direction,
    EntryRequest,
    ExitReason,
    OrderType,
    Outcome,
    Position,
    TradeResult,
)
from replay_core.position_engine import (
    apply_breakeven,
    close_position,
    enter_position,
    evaluate_bar,
    manage_position,
    open_r,
)

__all__ = [
    "Bar",
    "ClosedTradeRecord",
    "Direction",
    "EntryRequest",
    "ExitReason",
    "JournalStats",
    "OrderType",
    "Outcome",
    "Position",
    "TradeResult",
    "apply_breakeven",
    "close_position",
    "enter_position",
    "equity_curve",
    "evaluate_bar",
    "generate_bars",
    "manage_position",
    "open_r",
    "summarize",
]
