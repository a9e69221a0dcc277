"""Tests for structured JSON event logger."""

import io
import json

import pytest

from cli.main import _run_shell_line, _ShellState
from cli.structured_log import StructuredEventLogger


@pytest.fixture
def buf() -> io.StringIO:
    return io.StringIO()


@pytest.fixture
def logger(buf: io.StringIO) -> StructuredEventLogger:
    return StructuredEventLogger("EURUSD-1", enabled=True, stream=buf)


def _lines(buf: io.StringIO) -> list[dict]:
    return [json.loads(line) for line in buf.getvalue().strip().split("\n")]


class TestHandle:
    """Controller event_callback entry point."""

    def test_session_reset_json(self, logger: StructuredEventLogger, buf: io.StringIO) -> None:
        logger.handle("session_reset", {"seed": "EURUSD-1", "bars": 420, "cursor": 40, "abandoned_position": False})
        [record] = _lines(buf)
        assert record["event"] == "session_reset"
        assert record["seed"] == "EURUSD-1"
        assert record["bars"] == 420
        assert record["cursor"] == 40
        assert "ts" in record

    def test_passes_payload_through(self, logger: StructuredEventLogger, buf: io.StringIO) -> None:
        record = logger.handle("breakeven_moved", {"stop": 1.1, "bar_index": 52})
        assert record["event"] == "breakeven_moved"
        assert _lines(buf)[0]["bar_index"] == 52

    def test_trade_closed(self, logger: StructuredEventLogger, buf: io.StringIO) -> None:
        logger.handle("trade_closed", {
            "direction": "short", "entry": 1.1, "exit": 1.0988, "r": 2.0, "result": "Win", "reason": "TP",
        })
        [record] = _lines(buf)
        assert record["r"] == 2.0
        assert record["reason"] == "TP"
        assert record["seed"] == "EURUSD-1"

    def test_reset_updates_seed(self, logger: StructuredEventLogger, buf: io.StringIO) -> None:
        logger.handle("session_reset", {"seed": "GBPUSD-2", "bars": 420, "cursor": 40})
        logger.handle("playback_started", {"speed": 2.0, "cursor": 40})
        assert _lines(buf)[-1]["seed"] == "GBPUSD-2"

    def test_one_line_per_event(self, logger: StructuredEventLogger, buf: io.StringIO) -> None:
        logger.handle("entry_rejected", {"reason": "already_open"})
        logger.handle("playback_stopped", {"cursor": 41})
        assert [r["event"] for r in _lines(buf)] == ["entry_rejected", "playback_stopped"]


class TestError:

    def test_error(self, logger: StructuredEventLogger, buf: io.StringIO) -> None:
        logger.error(message="boom", detail="jump x")
        [record] = _lines(buf)
        assert record["event"] == "error"
        assert record["message"] == "boom"
        assert record["detail"] == "jump x"

    def test_failed_shell_command_reported(self, logger: StructuredEventLogger, buf: io.StringIO) -> None:
        state = _ShellState(controller=None, scheduler=None, sizing=None, events=logger)
        _run_shell_line(state, "bogus --now")
        _run_shell_line(state, "long 'unclosed")
        records = _lines(buf)
        assert [r["event"] for r in records] == ["error", "error"]
        assert "bogus" in records[0]["message"]
        assert records[0]["detail"] == "bogus --now"
        assert records[1]["detail"] == "long 'unclosed"


class TestDisabled:

    def test_disabled_writes_nothing(self, buf: io.StringIO) -> None:
        logger = StructuredEventLogger("EURUSD-1", enabled=False, stream=buf)
        record = logger.handle("entry_rejected", {"reason": "already_open"})
        assert buf.getvalue() == ""
        assert record["event"] == "entry_rejected"
