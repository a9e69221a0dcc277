"""
Journal and account-size persistence: whole-file JSON documents.

The journal is read in full, appended to, and written back in full
(last writer wins; single user). Reads never raise: a missing or malformed
file degrades to an empty journal / default account sizes.
"""

from __future__ import annotations

import json
import logging
import os
import shutil
import tempfile
from datetime import datetime
from pathlib import Path
from typing import Any, Iterable

from replay_core.contracts import ClosedTradeRecord

logger = logging.getLogger("btl.journal")

DEFAULT_ACCOUNT_SIZE = 10_000.0
DEFAULT_ACCOUNT_SIZES = {"playback": DEFAULT_ACCOUNT_SIZE, "tradingview": DEFAULT_ACCOUNT_SIZE}
MIN_ACCOUNT_SIZE = 100.0


def _serialize(obj: Any) -> Any:
    if isinstance(obj, datetime):
        return obj.isoformat()
    if isinstance(obj, ClosedTradeRecord):
        return obj.to_dict()
    if isinstance(obj, dict):
        return {k: _serialize(v) for k, v in obj.items()}
    if isinstance(obj, (list, tuple)):
        return [_serialize(x) for x in obj]
    return obj


def _write_json(path: Path, payload: Any) -> None:
    """Write via a temp file in the same directory, then rename over *path*."""
    path.parent.mkdir(parents=True, exist_ok=True)
    fd, tmp = tempfile.mkstemp(dir=path.parent, prefix=f".{path.name}.", suffix=".tmp")
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            json.dump(_serialize(payload), f, indent=2)
        os.replace(tmp, path)
    except BaseException:
        Path(tmp).unlink(missing_ok=True)
        raise


def _read_json(path: Path) -> Any:
    """Parsed file content, or None when the file is missing/unreadable/not JSON."""
    if not path.exists():
        return None
    try:
        with open(path, encoding="utf-8") as f:
            return json.load(f)
    except (OSError, ValueError) as exc:
        logger.warning("Ignoring unreadable store %s: %s", path, exc)
        return None


class JournalStore:
    """Closed-trade journal stored as a JSON array of records.

    Rows that fail to parse are skipped on load. Before the next write the
    damaged file is copied to ``<name>.bak`` so the skipped rows survive.
    """

    def __init__(self, path: str | Path) -> None:
        self._path = Path(path)

    @property
    def path(self) -> Path:
        return self._path

    @property
    def backup_path(self) -> Path:
        return self._path.with_suffix(self._path.suffix + ".bak")

    def load(self) -> list[ClosedTradeRecord]:
        """All readable records, oldest first. Empty on missing or malformed data."""
        records, _ = self._read()
        return records

    def _read(self) -> tuple[list[ClosedTradeRecord], bool]:
        """Parsed records, and whether anything on disk had to be dropped."""
        raw = _read_json(self._path)
        if raw is None:
            return [], self._path.exists()
        if not isinstance(raw, list):
            logger.warning("Journal %s is not a list, treating as empty", self._path)
            return [], True
        records: list[ClosedTradeRecord] = []
        damaged = False
        for i, row in enumerate(raw):
            try:
                records.append(ClosedTradeRecord.from_dict(row))
            except (KeyError, TypeError, ValueError, AttributeError) as exc:
                logger.warning("Skipping malformed journal row %d in %s: %s", i, self._path, exc)
                damaged = True
        return records, damaged

    def save(self, records: Iterable[ClosedTradeRecord]) -> None:
        _write_json(self._path, list(records))

    def append(self, record: ClosedTradeRecord) -> list[ClosedTradeRecord]:
        """Load, append, save. Returns the new journal."""
        records, damaged = self._read()
        if damaged:
            shutil.copyfile(self._path, self.backup_path)
            logger.warning("Journal %s had unreadable data, copy kept at %s", self._path, self.backup_path)
        records.append(record)
        self.save(records)
        return records

    def clear(self) -> None:
        self.save([])


class AccountSizeStore:
    """Account size per backtest mode, stored as a JSON object."""

    def __init__(self, path: str | Path) -> None:
        self._path = Path(path)

    @property
    def path(self) -> Path:
        return self._path

    def load(self) -> dict[str, float]:
        """Stored sizes merged over the defaults. Defaults on malformed data."""
        sizes = dict(DEFAULT_ACCOUNT_SIZES)
        raw = _read_json(self._path)
        if not isinstance(raw, dict):
            if raw is not None:
                logger.warning("Account sizes %s is not a mapping, using defaults", self._path)
            return sizes
        for mode, value in raw.items():
            try:
                sizes[str(mode)] = float(value)
            except (TypeError, ValueError):
                logger.warning("Ignoring account size %r for mode %s", value, mode)
        return sizes

    def get(self, mode: str) -> float:
        """Account size for *mode*, never below the minimum."""
        return max(MIN_ACCOUNT_SIZE, self.load().get(mode, DEFAULT_ACCOUNT_SIZE))

    def set(self, mode: str, size: float) -> dict[str, float]:
        sizes = self.load()
        sizes[mode] = max(MIN_ACCOUNT_SIZE, float(size))
        _write_json(self._path, sizes)
        return sizes
