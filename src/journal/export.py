"""
CSV export of the journal.

Fields containing a comma, quote or newline are quoted, with inner quotes
doubled. An empty journal produces no export at all.
"""

from __future__ import annotations

import csv
import io
import logging
from pathlib import Path
from typing import Any, Sequence

from replay_core.contracts import ClosedTradeRecord

logger = logging.getLogger("btl.journal")

CSV_HEADER = ["direction", "setup", "entry", "exit", "r", "result", "reason", "openedAt", "closedAt", "notes"]


def _cell(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def journal_to_csv(records: Sequence[ClosedTradeRecord]) -> str | None:
    """CSV text for *records*, or None when there is nothing to export."""
    if not records:
        return None
    buf = io.StringIO()
    writer = csv.writer(buf, lineterminator="\n", quoting=csv.QUOTE_MINIMAL)
    writer.writerow(CSV_HEADER)
    for rec in records:
        row = rec.to_dict()
        writer.writerow([_cell(row[key]) for key in CSV_HEADER])
    return buf.getvalue().rstrip("\n")


def export_csv(records: Sequence[ClosedTradeRecord], path: str | Path) -> bool:
    """Write the CSV to *path*. Returns False (and writes nothing) when empty."""
    text = journal_to_csv(records)
    if text is None:
        logger.info("Journal is empty, nothing to export")
        return False
    out = Path(path)
    out.parent.mkdir(parents=True, exist_ok=True)
    out.write_text(text, encoding="utf-8")
    logger.info("Exported %d trade(s) to %s", len(records), out)
    return True
