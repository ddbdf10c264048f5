"""WorkbookContext: loads a workbook file and exposes its sheets."""

from __future__ import annotations

import contextlib
from pathlib import Path
from typing import Iterable, Iterator

from xltools.config.settings import Settings
from xltools.contracts.requests import SheetDefinition
from xltools.contracts.responses import WorkbookMeta
from xltools.engine.document import Sheet, Workbook
from xltools.engine.grid import resolve_sheet
from xltools.engine.tabular import describe_sheet
from xltools.io.codec import create_workbook, open_workbook, save_workbook
from xltools.io.fileops import WorkbookLock
from xltools.observe.events import EventEmitter


class WorkbookContext:
    """Wraps a decoded :class:`Workbook` with the path it was read from.

    Every context re-reads the file; nothing is cached between operations.
    """

    @classmethod
    def create(
        cls,
        path: str | Path,
        sheets: Iterable[SheetDefinition],
        *,
        settings: Settings | None = None,
        emitter: EventEmitter | None = None,
    ) -> "WorkbookContext":
        """Create a new workbook file. Raises WorkbookExistsError if path exists."""
        settings = settings or Settings()
        emitter = emitter or EventEmitter(enabled=settings.events)
        doc = create_workbook(path, sheets, emitter=emitter)
        return cls(doc.path, settings=settings, emitter=emitter, doc=doc)

    def __init__(
        self,
        path: str | Path,
        *,
        settings: Settings | None = None,
        emitter: EventEmitter | None = None,
        doc: Workbook | None = None,
    ) -> None:
        self.path = Path(path).resolve()
        self.settings = settings or Settings()
        self.emitter = emitter or EventEmitter(enabled=self.settings.events)
        self.wb: Workbook = doc if doc is not None else open_workbook(self.path, emitter=self.emitter)

    def get_workbook_meta(self) -> WorkbookMeta:
        return WorkbookMeta(
            path=str(self.path),
            sheets=[describe_sheet(sheet) for sheet in self.wb],
        )

    def get_sheet(self, name: str | None = None) -> Sheet:
        return resolve_sheet(self.wb, name)

    def save(self, path: str | Path | None = None) -> bytes:
        """Serialise the workbook back to its own path (or ``path``)."""
        return save_workbook(self.wb, path or self.path, emitter=self.emitter)


@contextlib.contextmanager
def mutation_guard(path: str | Path, settings: Settings) -> Iterator[None]:
    """Hold the advisory workbook lock for a read-modify-write cycle when enabled.

    A missing file is left for WorkbookContext to report.
    """
    if not settings.lock or not Path(path).is_file():
        yield
        return
    with WorkbookLock(path, timeout=settings.lock_timeout):
        yield
