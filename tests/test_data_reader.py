"""Tests for the dashboard's read-only views over the journal."""

import json
from pathlib import Path

import pytest

import data_reader
from journal.store import JournalStore
from replay_core.contracts import NO_SETUP, ClosedTradeRecord, Direction, TradeResult


def _rec(i: int, r: float, setup: str = "") -> ClosedTradeRecord:
    return ClosedTradeRecord(
        id=f"t{i}", direction=Direction.LONG, entry=1.1, exit=1.1, r=r,
        result=TradeResult.from_r(r), reason="TP" if r > 0 else "SL",
        entry_index=40 + i, exit_index=41 + i,
        opened_at="2026-03-02T14:00:00+00:00", closed_at="2026-03-02T15:00:00+00:00",
        setup=setup,
    )


RECORDS = [_rec(0, 2.0, "breakout"), _rec(1, -1.0), _rec(2, 1.234, "breakout"), _rec(3, -1.0, "fade")]


def test_load_records_from_env(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    path = tmp_path / "journal.json"
    JournalStore(path).save(RECORDS)
    monkeypatch.setenv("BTL_JOURNAL_PATH", str(path))
    assert data_reader.load_records() == RECORDS


def test_load_records_missing_file(tmp_path: Path) -> None:
    assert data_reader.load_records(tmp_path / "nope.json") == []


def test_equity_curve_starts_at_zero() -> None:
    assert data_reader.get_equity_curve(RECORDS) == pytest.approx([0.0, 2.0, 1.0, 2.234, 1.234])
    assert data_reader.get_equity_curve([]) == [0.0]


def test_journal_rows_newest_first() -> None:
    rows = data_reader.get_journal_rows(RECORDS, limit=2)
    assert [row["id"] for row in rows] == ["t3", "t2"]
    assert rows[1]["r"] == 1.23


def test_setup_breakdown() -> None:
    breakdown = data_reader.get_setup_breakdown(RECORDS)
    assert breakdown == [
        {"setup": "(none)", "trades": 1, "win_rate": 0.0, "total_r": -1.0},
        {"setup": "breakout", "trades": 2, "win_rate": 100.0, "total_r": 3.23},
        {"setup": "fade", "trades": 1, "win_rate": 0.0, "total_r": -1.0},
    ]


def test_stats() -> None:
    stats = data_reader.get_stats(RECORDS)
    assert stats.count == 4
    assert stats.win_rate == 50.0


def test_setup_breakdown_merges_legacy_placeholder(tmp_path: Path) -> None:
    path = tmp_path / "journal.json"
    rows = [rec.to_dict() for rec in RECORDS]
    rows[0]["setup"] = NO_SETUP
    path.write_text(json.dumps(rows))
    breakdown = data_reader.get_setup_breakdown(data_reader.load_records(path))
    assert [row["setup"] for row in breakdown] == ["(none)", "breakout", "fade"]
    assert breakdown[0]["trades"] == 2
