"""
Navigation targets on the synthetic 5-minute timeline.

Bar 0 is midnight of day 0. A day is ``day_length`` bars; "sessions" are
fixed blocks of ``session_length`` bars. Targets may lie past the last bar;
the controller clamps them.
"""

from __future__ import annotations

from config.engine_config import CalendarConfig


def next_day_open(index: int, cal: CalendarConfig) -> int:
    """First bar of the next day."""
    day_start = (index // cal.day_length) * cal.day_length
    return day_start + cal.day_length


def next_session(index: int, cal: CalendarConfig) -> int:
    """First bar of the next session block."""
    return (index // cal.session_length + 1) * cal.session_length


def next_ny_session(index: int, cal: CalendarConfig) -> int:
    """Today's New York open, or tomorrow's if it has already passed."""
    day_start = (index // cal.day_length) * cal.day_length
    target = day_start + cal.ny_offset
    if index >= target:
        target += cal.day_length
    return target
