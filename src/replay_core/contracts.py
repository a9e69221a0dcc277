"""
Data contracts for replay-core: Bar, Position, ClosedTradeRecord, command results.

replay-core consumes bars and entry requests and produces positions,
evaluations and closed-trade records. No I/O; these are plain dataclasses.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any

# Placeholder older journals wrote for an untagged setup.
NO_SETUP = "\u2014"


# ---------------------------------------------------------------------------
# Enums
# ---------------------------------------------------------------------------


class Direction(str, Enum):
    """Trade direction."""

    LONG = "long"
    SHORT = "short"

    @property
    def sign(self) -> int:
        """+1 for long, -1 for short."""
        return 1 if self is Direction.LONG else -1


class OrderType(str, Enum):
    """How the entry price is chosen. Non-market orders fill at the caller's price."""

    MARKET = "market"
    LIMIT = "limit"
    STOP = "stop"


class Outcome(str, Enum):
    """Result of evaluating an open position against one bar."""

    STILL_OPEN = "STILL_OPEN"
    CLOSED_AT_STOP = "CLOSED_AT_STOP"
    CLOSED_AT_TARGET = "CLOSED_AT_TARGET"


class ExitReason(str, Enum):
    """Why a trade closed. Values are the labels written to the journal."""

    STOP = "SL"
    STOP_SAME_BAR = "SL (same candle)"
    TARGET = "TP"
    MANUAL = "Manual close"


class TradeResult(str, Enum):
    """Sign of a closed trade's R-multiple."""

    WIN = "Win"
    LOSS = "Loss"
    FLAT = "Flat"

    @classmethod
    def from_r(cls, r: float) -> TradeResult:
        if r > 0:
            return cls.WIN
        if r < 0:
            return cls.LOSS
        return cls.FLAT


class CommandStatus(str, Enum):
    """Status of an enter/close command."""

    OPENED = "OPENED"
    CLOSED = "CLOSED"
    REJECTED = "REJECTED"


# ---------------------------------------------------------------------------
# Market data
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class Bar:
    """Synthetic OHLC bar. low <= min(open, close) <= max(open, close) <= high."""

    open: float
    high: float
    low: float
    close: float

    def range(self) -> float:
        """Full extent of the bar: high - low."""
        return self.high - self.low

    def is_up(self) -> bool:
        """Close at or above open."""
        return self.close >= self.open


# ---------------------------------------------------------------------------
# Position lifecycle
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class EntryRequest:
    """Everything the user supplies when opening a trade.

    Explicit prices are optional: ``entry_price`` only applies to non-market
    orders, ``stop_price``/``target_price`` replace the derived levels.
    """

    direction: Direction
    order_type: OrderType = OrderType.MARKET
    entry_price: float | None = None
    stop_price: float | None = None
    target_price: float | None = None
    risk_fraction: float = 25.0      # percent of account per 1R
    auto_breakeven: bool = False
    setup: str = ""
    notes: str = ""


@dataclass
class Position:
    """The single open trade. Mutated in place only by breakeven promotion."""

    direction: Direction
    order_type: OrderType
    entry_price: float
    stop_price: float
    target_price: float
    initial_risk_distance: float     # fixed at entry; never follows the live stop
    entry_index: int
    opened_at: datetime
    risk_fraction: float = 25.0
    auto_breakeven: bool = False
    moved_to_breakeven: bool = False
    setup: str = ""
    notes: str = ""


@dataclass(frozen=True)
class ClosedTradeRecord:
    """Immutable journal entry written when a position closes."""

    id: str
    direction: Direction
    entry: float
    exit: float
    r: float
    result: TradeResult
    reason: str
    entry_index: int
    exit_index: int
    opened_at: str
    closed_at: str
    setup: str = ""
    notes: str = ""
    risk_fraction: float = 25.0
    moved_to_breakeven: bool = False

    def to_dict(self) -> dict[str, Any]:
        """Serialise with the journal's camelCase field names."""
        return {
            "id": self.id,
            "direction": self.direction.value,
            "setup": self.setup,
            "entry": self.entry,
            "exit": self.exit,
            "r": self.r,
            "result": self.result.value,
            "reason": self.reason,
            "entryIndex": self.entry_index,
            "exitIndex": self.exit_index,
            "openedAt": self.opened_at,
            "closedAt": self.closed_at,
            "notes": self.notes,
            "riskFraction": self.risk_fraction,
            "movedToBreakeven": self.moved_to_breakeven,
        }

    @classmethod
    def from_dict(cls, raw: dict[str, Any]) -> ClosedTradeRecord:
        """Parse a stored row. Raises ValueError/KeyError/TypeError on bad data.

        Older journals store an untagged setup as ``NO_SETUP``; it loads as "".
        """
        r = float(raw["r"])
        entry, exit_ = float(raw["entry"]), float(raw["exit"])
        if not all(math.isfinite(v) for v in (r, entry, exit_)):
            raise ValueError(f"non-finite price or R in record {raw.get('id')!r}")
        setup = str(raw.get("setup") or "")
        if setup == NO_SETUP:
            setup = ""
        return cls(
            id=str(raw.get("id", "")),
            direction=Direction(raw["direction"]),
            entry=entry,
            exit=exit_,
            r=r,
            result=TradeResult(raw["result"]) if raw.get("result") else TradeResult.from_r(r),
            reason=str(raw.get("reason", "")),
            entry_index=int(raw.get("entryIndex", 0)),
            exit_index=int(raw.get("exitIndex", 0)),
            opened_at=str(raw.get("openedAt", "")),
            closed_at=str(raw.get("closedAt", "")),
            setup=setup,
            notes=str(raw.get("notes") or ""),
            risk_fraction=float(raw.get("riskFraction", 25.0)),
            moved_to_breakeven=bool(raw.get("movedToBreakeven", False)),
        )


@dataclass(frozen=True)
class BarEvaluation:
    """Stop/target check of a position against one bar."""

    outcome: Outcome
    exit_price: float | None = None
    reason: ExitReason | None = None

    @property
    def closed(self) -> bool:
        return self.outcome is not Outcome.STILL_OPEN


STILL_OPEN = BarEvaluation(Outcome.STILL_OPEN)


@dataclass(frozen=True)
class ManageResult:
    """Outcome of one auto-management pass (close check, then breakeven)."""

    evaluation: BarEvaluation = STILL_OPEN
    breakeven_moved: bool = False


@dataclass(frozen=True)
class EntryResult:
    """Result of an enter command. REJECTED carries a reason; nothing is raised."""

    status: CommandStatus
    position: Position | None = None
    reject_reason: str | None = None

    @property
    def ok(self) -> bool:
        return self.status is CommandStatus.OPENED


@dataclass(frozen=True)
class CloseResult:
    """Result of a close command."""

    status: CommandStatus
    record: ClosedTradeRecord | None = None
    reject_reason: str | None = None

    @property
    def ok(self) -> bool:
        return self.status is CommandStatus.CLOSED


@dataclass(frozen=True)
class StepResult:
    """What happened on one cursor transition."""

    cursor_index: int
    moved: bool
    manage: ManageResult = field(default_factory=ManageResult)
    closed: ClosedTradeRecord | None = None
