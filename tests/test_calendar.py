"""Tests for calendar navigation targets (day open, session block, New York open)."""

import pytest

from config.engine_config import CalendarConfig
from playback.calendar import next_day_open, next_ny_session, next_session

CAL = CalendarConfig()


@pytest.mark.parametrize("index, expected", [(0, 288), (40, 288), (287, 288), (288, 576), (300, 576)])
def test_next_day_open(index: int, expected: int) -> None:
    assert next_day_open(index, CAL) == expected


@pytest.mark.parametrize("index, expected", [(0, 72), (40, 72), (72, 144), (143, 144)])
def test_next_session(index: int, expected: int) -> None:
    assert next_session(index, CAL) == expected


@pytest.mark.parametrize("index, expected", [
    (0, 156),
    (155, 156),
    (156, 444),    # already at the open: go to tomorrow's
    (200, 444),
    (300, 444),    # day 1 before its open
    (444, 732),
])
def test_next_ny_session(index: int, expected: int) -> None:
    assert next_ny_session(index, CAL) == expected


def test_custom_calendar() -> None:
    cal = CalendarConfig(day_length=100, session_length=25, ny_offset=50)
    assert next_day_open(10, cal) == 100
    assert next_session(30, cal) == 50
    assert next_ny_session(60, cal) == 150
