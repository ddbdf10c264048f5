"""Settings: load ``xlt.yaml`` tool configuration."""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any

import yaml

from xltools.io.fileops import read_text_safe

CONFIG_FILENAME = "xlt.yaml"
CONFIG_ENV = "XLT_CONFIG"

DEFAULT_READ_MAX_BYTES = 50_000
DEFAULT_PREVIEW_ROWS = 50

_KNOWN_KEYS = frozenset({"read_max_bytes", "preview_rows", "lock", "lock_timeout", "events"})


class Settings:
    """Represents a loaded settings file (all keys optional)."""

    def __init__(self, data: dict[str, Any] | None = None) -> None:
        data = data or {}
        unknown = sorted(set(data) - _KNOWN_KEYS)
        if unknown:
            raise ValueError(f"Unknown settings keys: {', '.join(unknown)}")
        self.read_max_bytes: int = int(data.get("read_max_bytes", DEFAULT_READ_MAX_BYTES))
        self.preview_rows: int = int(data.get("preview_rows", DEFAULT_PREVIEW_ROWS))
        self.lock: bool = bool(data.get("lock", False))
        self.lock_timeout: float = float(data.get("lock_timeout", 0))
        self.events: bool = bool(data.get("events", False))
        if self.read_max_bytes <= 0:
            raise ValueError("read_max_bytes must be positive")
        if self.preview_rows <= 0:
            raise ValueError("preview_rows must be positive")

    @classmethod
    def load(cls, path: str | Path) -> "Settings":
        """Load settings from a YAML file."""
        data = yaml.safe_load(read_text_safe(path)) or {}
        if not isinstance(data, dict):
            raise ValueError(f"Settings file must contain a mapping: {path}")
        return cls(data)

    @classmethod
    def discover(cls, path: str | Path | None = None, *, cwd: str | Path | None = None) -> "Settings":
        """Explicit path, then ``$XLT_CONFIG``, then ``xlt.yaml`` in ``cwd``.

        Falls back to defaults when nothing is found.
        """
        if path:
            return cls.load(path)
        env_path = os.environ.get(CONFIG_ENV)
        if env_path:
            return cls.load(env_path)
        candidate = Path(cwd or Path.cwd()) / CONFIG_FILENAME
        if candidate.exists():
            return cls.load(candidate)
        return cls()
