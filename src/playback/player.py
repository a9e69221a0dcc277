"""
Timed playback: repeat "step +1" at an interval derived from a speed multiplier.

    interval = max(min_interval_ms, base_interval_ms / speed)

At most one callback is outstanding at any time. Pausing cancels it, so a
pause never leaves a half-applied step behind. Scheduling goes through any
object with ``call_later(delay_seconds, callback) -> handle`` where the
handle has ``cancel()``; an asyncio event loop qualifies, and
``SleepScheduler`` is the blocking single-threaded version the CLI uses.
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from typing import Any, Callable, Protocol

logger = logging.getLogger("btl.playback")

BASE_INTERVAL_MS = 350.0
MIN_INTERVAL_MS = 35.0


class Cancellable(Protocol):
    def cancel(self) -> Any: ...


class Scheduler(Protocol):
    def call_later(self, delay: float, callback: Callable[[], Any]) -> Cancellable: ...


def playback_interval(
    speed: float,
    base_interval_ms: float = BASE_INTERVAL_MS,
    min_interval_ms: float = MIN_INTERVAL_MS,
) -> float:
    """Seconds between steps for *speed*."""
    if speed <= 0:
        raise ValueError(f"Playback speed must be > 0, got {speed}")
    return max(min_interval_ms, base_interval_ms / speed) / 1000.0


@dataclass
class _PendingCall:
    delay: float
    callback: Callable[[], Any]
    cancelled: bool = False

    def cancel(self) -> None:
        self.cancelled = True


class SleepScheduler:
    """Cooperative scheduler: ``run()`` sleeps, fires, repeats until idle.

    Ctrl+C inside ``run()`` propagates as KeyboardInterrupt; the caller
    pauses playback, which cancels whatever is still pending.
    """

    def __init__(self, sleep: Callable[[float], Any] = time.sleep) -> None:
        self._sleep = sleep
        self._pending: list[_PendingCall] = []

    def call_later(self, delay: float, callback: Callable[[], Any]) -> _PendingCall:
        call = _PendingCall(delay, callback)
        self._pending.append(call)
        return call

    def run(self) -> int:
        """Fire pending callbacks in order. Returns how many fired."""
        fired = 0
        while self._pending:
            call = self._pending.pop(0)
            if call.cancelled:
                continue
            self._sleep(call.delay)
            if call.cancelled:
                continue
            call.callback()
            fired += 1
        return fired


class Player:
    """Play/pause state over a step function.

    Parameters
    ----------
    step:
        Advances the cursor by one bar (including auto-management).
    at_end:
        True when the cursor sits on the last bar.
    scheduler:
        Where the next tick is scheduled.
    on_state:
        Optional callback receiving True on start and False on stop.
    """

    def __init__(
        self,
        step: Callable[[], Any],
        at_end: Callable[[], bool],
        scheduler: Scheduler,
        *,
        speed: float = 1.0,
        base_interval_ms: float = BASE_INTERVAL_MS,
        min_interval_ms: float = MIN_INTERVAL_MS,
        on_state: Callable[[bool], Any] | None = None,
    ) -> None:
        self._step = step
        self._at_end = at_end
        self._scheduler = scheduler
        self._base_ms = base_interval_ms
        self._min_ms = min_interval_ms
        self._on_state = on_state
        self._playing = False
        self._handle: Cancellable | None = None
        self.speed = speed

    @property
    def playing(self) -> bool:
        return self._playing

    @property
    def speed(self) -> float:
        return self._speed

    @speed.setter
    def speed(self, value: float) -> None:
        playback_interval(value, self._base_ms, self._min_ms)  # validates
        self._speed = float(value)

    @property
    def interval(self) -> float:
        return playback_interval(self._speed, self._base_ms, self._min_ms)

    def play(self) -> bool:
        """Start playing. Returns False (no-op) if already playing."""
        if self._playing:
            return False
        self._playing = True
        logger.info("Playback started at %.2fx", self._speed)
        if self._on_state:
            self._on_state(True)
        self._tick()
        return True

    def pause(self) -> bool:
        """Stop playing and cancel the pending tick. Returns False if idle."""
        if self._handle is not None:
            self._handle.cancel()
            self._handle = None
        if not self._playing:
            return False
        self._playing = False
        logger.info("Playback stopped")
        if self._on_state:
            self._on_state(False)
        return True

    def _tick(self) -> None:
        self._handle = None
        if not self._playing:
            return
        if self._at_end():
            self.pause()
            return
        self._step()
        if self._playing:
            self._handle = self._scheduler.call_later(self.interval, self._tick)
