"""Command timing and NDJSON lifecycle events on stderr."""

from __future__ import annotations

import os
import sys
import time
from datetime import datetime, timezone
from typing import IO, Any

import orjson

EVENTS_ENV = "XLT_EVENTS"
_TRUTHY = frozenset({"1", "true", "yes", "on"})
_FALSY = frozenset({"0", "false", "no", "off"})


class Timer:
    """``with Timer() as t: ...`` then read ``t.elapsed_ms``."""

    def __init__(self) -> None:
        self._started_ns = 0
        self.elapsed_ms = 0

    def __enter__(self) -> "Timer":
        self._started_ns = time.perf_counter_ns()
        return self

    def __exit__(self, *exc: Any) -> None:
        self.elapsed_ms = (time.perf_counter_ns() - self._started_ns) // 1_000_000


class EventEmitter:
    """Writes one JSON object per event (``event``, ``timestamp``, ``data``) when enabled."""

    def __init__(self, enabled: bool = False, stream: IO[str] | None = None) -> None:
        self.enabled = enabled
        self._stream = stream

    @classmethod
    def from_env(cls, default: bool = False) -> "EventEmitter":
        """``XLT_EVENTS`` overrides ``default`` when set to a recognised flag."""
        flag = os.environ.get(EVENTS_ENV, "").strip().lower()
        if flag in _TRUTHY:
            return cls(enabled=True)
        if flag in _FALSY:
            return cls(enabled=False)
        return cls(enabled=default)

    def emit(self, event: str, data: dict[str, Any] | None = None) -> None:
        if not self.enabled:
            return
        record = {
            "event": event,
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "data": data or {},
        }
        stream = self._stream or sys.stderr
        stream.write(orjson.dumps(record, default=str).decode())
        stream.write("\n")
        stream.flush()


_NULL_EMITTER = EventEmitter(enabled=False)


def null_emitter() -> EventEmitter:
    return _NULL_EMITTER
