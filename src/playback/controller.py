"""
Replay controller: owns the session and turns user commands into engine calls.

Every cursor move runs, in order:
    1. auto-close check against the new bar
    2. breakeven promotion (only if still open)
    3. observer notification

Manual moves (step, jump, reset) cancel playback first so a pending tick
never races a manual move.
"""

from __future__ import annotations

import logging
import uuid
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Callable

from config.engine_config import EngineConfig
from config.loader import AppConfig
from journal.store import JournalStore
from playback import calendar
from playback.player import Player, Scheduler, SleepScheduler
from replay_core.analytics import JournalStats, summarize
from replay_core.bars import generate_bars
from replay_core.contracts import (
    Bar,
    ClosedTradeRecord,
    CloseResult,
    CommandStatus,
    EntryRequest,
    EntryResult,
    ExitReason,
    ManageResult,
    Position,
    StepResult,
)
from replay_core.position_engine import close_position, enter_position, manage_position, open_r

logger = logging.getLogger("btl.playback")

REJECT_NO_POSITION = "no_position"

Observer = Callable[["Session"], Any]
EventCallback = Callable[[str, dict], Any]


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


def _new_id() -> str:
    return str(uuid.uuid4())


@dataclass
class Session:
    """Bars, cursor and the open position (if any). Everything a view needs."""

    seed: str
    bars: tuple[Bar, ...]
    cursor_index: int = 0
    position: Position | None = None

    @property
    def current_bar(self) -> Bar:
        return self.bars[self.cursor_index]

    @property
    def current_price(self) -> float:
        return self.current_bar.close

    @property
    def last_index(self) -> int:
        return len(self.bars) - 1


class ReplayController:
    """Single-session command surface: reset, step, jump, enter, close, play."""

    def __init__(
        self,
        config: AppConfig,
        engine: EngineConfig,
        journal: JournalStore,
        *,
        scheduler: Scheduler | None = None,
        clock: Callable[[], datetime] = _utc_now,
        id_factory: Callable[[], str] = _new_id,
        event_callback: EventCallback | None = None,
        seed: str | None = None,
    ) -> None:
        self._config = config
        self._engine = engine
        self._journal = journal
        self._clock = clock
        self._id_factory = id_factory
        self._event_callback = event_callback
        self._observers: list[Observer] = []
        self._session = self._build_session(seed or config.session.seed)
        self._player = Player(
            step=lambda: self._move(self._session.cursor_index + 1),
            at_end=lambda: self._session.cursor_index >= self._session.last_index,
            scheduler=scheduler or SleepScheduler(),
            speed=config.playback.speed,
            base_interval_ms=config.playback.base_interval_ms,
            min_interval_ms=config.playback.min_interval_ms,
            on_state=self._on_playback_state,
        )

    # ------------------------------------------------------------------
    # Read-only views
    # ------------------------------------------------------------------

    @property
    def session(self) -> Session:
        return self._session

    @property
    def journal(self) -> JournalStore:
        return self._journal

    @property
    def engine_config(self) -> EngineConfig:
        return self._engine

    @property
    def is_playing(self) -> bool:
        return self._player.playing

    @property
    def speed(self) -> float:
        return self._player.speed

    def open_r(self) -> float:
        """Open R of the current position at the current close (0 when flat)."""
        pos = self._session.position
        if pos is None:
            return 0.0
        return open_r(pos, self._session.current_price)

    def stats(self) -> JournalStats:
        return summarize(self._journal.load())

    def records(self) -> list[ClosedTradeRecord]:
        return self._journal.load()

    def subscribe(self, observer: Observer) -> Callable[[], None]:
        """Register *observer*; returns a function that unregisters it."""
        self._observers.append(observer)
        return lambda: self._observers.remove(observer)

    # ------------------------------------------------------------------
    # Cursor transitions
    # ------------------------------------------------------------------

    def reset(self, seed: str | None = None) -> StepResult:
        """Regenerate bars and rewind. An open position is dropped unjournaled."""
        self._player.pause()
        seed = seed or self._session.seed
        abandoned = self._session.position is not None
        self._session = self._build_session(seed)
        logger.info(
            "Session reset: seed=%s bars=%d cursor=%d%s",
            seed, len(self._session.bars), self._session.cursor_index,
            " (open position discarded)" if abandoned else "",
        )
        self._emit("session_reset", seed=seed, bars=len(self._session.bars),
                   cursor=self._session.cursor_index, abandoned_position=abandoned)
        self._notify()
        return StepResult(cursor_index=self._session.cursor_index, moved=True)

    def step_by(self, delta: int) -> StepResult:
        self._player.pause()
        return self._move(self._session.cursor_index + delta)

    def jump_to(self, index: int) -> StepResult:
        self._player.pause()
        return self._move(index)

    def next_day_open(self) -> StepResult:
        return self.jump_to(calendar.next_day_open(self._session.cursor_index, self._engine.calendar))

    def next_session(self) -> StepResult:
        return self.jump_to(calendar.next_session(self._session.cursor_index, self._engine.calendar))

    def next_ny_session(self) -> StepResult:
        return self.jump_to(calendar.next_ny_session(self._session.cursor_index, self._engine.calendar))

    # ------------------------------------------------------------------
    # Playback
    # ------------------------------------------------------------------

    def play(self, speed: float | None = None) -> bool:
        """Start timed stepping. No-op (False) if already playing."""
        if speed is not None:
            self._player.speed = speed
        return self._player.play()

    def pause(self) -> bool:
        return self._player.pause()

    # ------------------------------------------------------------------
    # Trade commands
    # ------------------------------------------------------------------

    def enter(self, request: EntryRequest) -> EntryResult:
        s = self._session
        result = enter_position(s.bars, s.cursor_index, s.position, request, self._engine, self._clock())
        if result.status is CommandStatus.REJECTED:
            self._emit("entry_rejected", reason=result.reject_reason)
            return result
        s.position = result.position
        pos = result.position
        self._emit("trade_opened", direction=pos.direction.value, entry=pos.entry_price,
                   stop=pos.stop_price, target=pos.target_price, bar_index=s.cursor_index)
        self._notify()
        return result

    def close(self) -> CloseResult:
        """Close the open position at the current close."""
        s = self._session
        if s.position is None:
            logger.info("Close rejected: no open position")
            return CloseResult(status=CommandStatus.REJECTED, reject_reason=REJECT_NO_POSITION)
        record = self._close(s.current_price, ExitReason.MANUAL)
        self._notify()
        return CloseResult(status=CommandStatus.CLOSED, record=record)

    def clear_journal(self) -> None:
        self._journal.clear()
        logger.info("Journal cleared")

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _build_session(self, seed: str) -> Session:
        cfg = self._config.session
        bars = generate_bars(cfg.seed_prefix + seed, cfg.bar_count)
        if not bars:
            raise ValueError("A session needs at least one bar")
        cursor = max(0, min(cfg.warmup_index, len(bars) - 1))
        return Session(seed=seed, bars=bars, cursor_index=cursor)

    def _move(self, target: int) -> StepResult:
        s = self._session
        clamped = max(0, min(target, s.last_index))
        moved = clamped != s.cursor_index
        s.cursor_index = clamped

        manage = ManageResult()
        closed: ClosedTradeRecord | None = None
        if s.position is not None:
            manage = manage_position(s.position, s.current_bar, self._engine)
            if manage.evaluation.closed:
                closed = self._close(manage.evaluation.exit_price, manage.evaluation.reason)
            elif manage.breakeven_moved:
                self._emit("breakeven_moved", stop=s.position.stop_price, bar_index=clamped)

        self._notify()
        return StepResult(cursor_index=clamped, moved=moved, manage=manage, closed=closed)

    def _close(self, exit_price: float, reason: ExitReason) -> ClosedTradeRecord:
        s = self._session
        record = close_position(
            s.position, exit_price, reason, s.cursor_index, self._clock(), self._id_factory(),
        )
        self._journal.append(record)
        s.position = None
        self._emit("trade_closed", direction=record.direction.value, entry=record.entry,
                   exit=record.exit, r=round(record.r, 4), result=record.result.value,
                   reason=record.reason)
        return record

    def _on_playback_state(self, playing: bool) -> None:
        if playing:
            self._emit("playback_started", speed=self._player.speed, cursor=self._session.cursor_index)
        else:
            self._emit("playback_stopped", cursor=self._session.cursor_index)

    def _emit(self, event_type: str, **payload: Any) -> None:
        if self._event_callback:
            self._event_callback(event_type, payload)

    def _notify(self) -> None:
        for observer in list(self._observers):
            observer(self._session)
