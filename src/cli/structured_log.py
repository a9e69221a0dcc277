"""
Structured JSON event logger.

Emits one JSON object per line to stderr, so a replay session can be piped
into a log aggregator or replayed from a file. The controller reports its
events through ``handle(event_type, payload)``.
"""

from __future__ import annotations

import json
import sys
from datetime import datetime, timezone
from typing import Any


class StructuredEventLogger:
    """Emit structured JSON events to a stream."""

    def __init__(
        self,
        seed: str,
        *,
        enabled: bool = True,
        stream: Any = None,
    ) -> None:
        self._seed = seed
        self._enabled = enabled
        self._stream = stream or sys.stderr

    def _emit(self, event_type: str, **fields: Any) -> dict:
        record = {
            "ts": datetime.now(timezone.utc).isoformat(),
            "event": event_type,
            "seed": self._seed,
            **fields,
        }
        if self._enabled:
            self._stream.write(json.dumps(record, default=str) + "\n")
            self._stream.flush()
        return record

    def handle(self, event_type: str, payload: dict) -> dict:
        """Controller ``event_callback`` entry point."""
        if event_type == "session_reset":
            self._seed = payload.get("seed", self._seed)
        return self._emit(event_type, **payload)

    def error(self, message: str, detail: str = "") -> dict:
        """A failed shell command, with the line that caused it."""
        return self._emit("error", message=message, detail=detail)
