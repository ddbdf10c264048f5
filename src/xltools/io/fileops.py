"""File helpers shared by the codecs and the CLI: backups, atomic replace, locking."""

from __future__ import annotations

import os
import shutil
import tempfile
from datetime import datetime, timezone
from pathlib import Path
from typing import IO

import portalocker

LOCK_SUFFIX = ".xlt.lock"


def backup(path: str | Path) -> str:
    """Copy ``path`` to ``<stem>.<UTC timestamp>.bak<suffix>`` beside it."""
    source = Path(path)
    stamp = datetime.now(timezone.utc).strftime("%Y%m%dT%H%M%SZ")
    copy = source.with_name(f"{source.stem}.{stamp}.bak{source.suffix}")
    shutil.copy2(source, copy)
    return str(copy)


def atomic_write(target: str | Path, data: bytes) -> None:
    """Replace ``target`` with ``data`` so readers never see a half-written file.

    The replacement keeps the permission bits of the file it replaces; a new
    file gets the process umask default.
    """
    target = Path(target)
    with tempfile.NamedTemporaryFile(
        "wb", dir=target.parent, prefix=".xlt_tmp_", suffix=target.suffix, delete=False
    ) as tmp:
        try:
            tmp.write(data)
            tmp.flush()
            os.fsync(tmp.fileno())
        except BaseException:
            tmp.close()
            os.unlink(tmp.name)
            raise
    try:
        if target.exists():
            shutil.copymode(target, tmp.name)
        else:
            os.chmod(tmp.name, 0o666 & ~_current_umask())
        os.replace(tmp.name, target)
    except OSError:
        os.unlink(tmp.name)
        raise


def _current_umask() -> int:
    mask = os.umask(0)
    os.umask(mask)
    return mask


def lock_path_for(workbook_path: str | Path) -> Path:
    resolved = Path(workbook_path).resolve()
    return resolved.with_name(resolved.name + LOCK_SUFFIX)


class WorkbookLock:
    """Advisory exclusive lock on a ``<file>.xlt.lock`` sidecar.

    Only other callers taking the same lock are excluded. ``timeout=0`` fails
    at once with :class:`portalocker.AlreadyLocked`; a positive timeout polls
    until it expires. The sidecar is left in place after release and records
    the pid of the last holder.
    """

    def __init__(self, workbook_path: str | Path, *, timeout: float = 0) -> None:
        self.workbook_path = Path(workbook_path).resolve()
        self.timeout = timeout
        self.lock_path = lock_path_for(self.workbook_path)
        self._lock = portalocker.Lock(
            str(self.lock_path),
            mode="a",
            timeout=timeout,
            check_interval=min(0.1, max(0.01, timeout / 20)) if timeout > 0 else 0,
            fail_when_locked=timeout <= 0,
        )

    def __enter__(self) -> "WorkbookLock":
        handle = self._lock.acquire()
        _stamp_holder(handle)
        return self

    def __exit__(self, exc_type: object, exc_val: object, exc_tb: object) -> None:
        self._lock.release()


def _stamp_holder(handle: IO[str]) -> None:
    handle.seek(0)
    handle.truncate()
    handle.write(f"pid={os.getpid()}\ntime={datetime.now(timezone.utc).isoformat()}\n")
    handle.flush()


def read_text_safe(path: str | Path) -> str:
    """Read a UTF-8 text file, dropping a leading BOM if present."""
    return Path(path).read_text(encoding="utf-8-sig")
