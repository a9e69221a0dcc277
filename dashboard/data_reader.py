"""
Read-only data access for the backtestlab dashboard.
Reads the journal JSON written by the replay session and derives the views the page shows.
"""

import os
from pathlib import Path
from typing import Any

from journal.store import JournalStore
from replay_core.analytics import JournalStats, equity_curve, summarize
from replay_core.contracts import ClosedTradeRecord


def _journal_path() -> Path:
    """Journal file: BTL_JOURNAL_PATH if set, else repo root / data / journal.json."""
    if env := os.environ.get("BTL_JOURNAL_PATH"):
        return Path(env)
    return Path(__file__).resolve().parent.parent / "data" / "journal.json"


def load_records(path: Path | None = None) -> list[ClosedTradeRecord]:
    """All closed trades, oldest first. Empty when the file is missing or malformed."""
    return JournalStore(path or _journal_path()).load()


def get_stats(records: list[ClosedTradeRecord]) -> JournalStats:
    return summarize(records)


def get_equity_curve(records: list[ClosedTradeRecord]) -> list[float]:
    """Cumulative R after each trade, starting from 0."""
    return [0.0] + equity_curve(records)


def get_journal_rows(records: list[ClosedTradeRecord], limit: int | None = None) -> list[dict[str, Any]]:
    """Journal rows for a table, newest first."""
    rows = [rec.to_dict() for rec in reversed(records)]
    for row in rows:
        row["r"] = round(row["r"], 2)
    return rows[:limit] if limit else rows


def get_setup_breakdown(records: list[ClosedTradeRecord]) -> list[dict[str, Any]]:
    """Per-setup count, win rate and total R. Untagged trades group under "(none)"."""
    groups: dict[str, list[ClosedTradeRecord]] = {}
    for rec in records:
        groups.setdefault(rec.setup or "(none)", []).append(rec)
    out = []
    for setup, recs in sorted(groups.items()):
        stats = summarize(recs)
        out.append({
            "setup": setup,
            "trades": stats.count,
            "win_rate": round(stats.win_rate, 1),
            "total_r": round(stats.total_r, 2),
        })
    return out
