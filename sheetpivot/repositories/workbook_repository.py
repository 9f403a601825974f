from __future__ import annotations

import threading
import uuid
from dataclasses import dataclass

from ..domain.workbook import Workbook, Worksheet
from ..errors import SheetNotFoundError, WorkbookNotFoundError


@dataclass(frozen=True)
class WorkbookEntry:
    workbook_id: str
    filename: str
    source_path: str
    workbook: Workbook


class WorkbookRepository:
    """In-memory registry of immutable workbook snapshots.

    Readers get whatever snapshot is current; re-ingestion publishes a new
    entry under the lock instead of mutating the old one.
    """

    def __init__(self) -> None:
        self._entries: dict[str, WorkbookEntry] = {}
        self._lock = threading.Lock()

    def register(self, filename: str, source_path: str, workbook: Workbook) -> WorkbookEntry:
        entry = WorkbookEntry(str(uuid.uuid4()), filename, source_path, workbook)
        with self._lock:
            self._entries[entry.workbook_id] = entry
        return entry

    def replace(self, workbook_id: str, workbook: Workbook) -> WorkbookEntry:
        with self._lock:
            current = self._entries.get(workbook_id)
            if current is None:
                raise WorkbookNotFoundError(f"Workbook not found: {workbook_id}")
            entry = WorkbookEntry(workbook_id, current.filename, current.source_path, workbook)
            self._entries[workbook_id] = entry
        return entry

    def get(self, workbook_id: str) -> WorkbookEntry:
        entry = self._entries.get(workbook_id)
        if entry is None:
            raise WorkbookNotFoundError(f"Workbook not found: {workbook_id}")
        return entry

    def list_workbooks(self) -> list[WorkbookEntry]:
        with self._lock:
            return list(self._entries.values())

    def delete(self, workbook_id: str) -> None:
        with self._lock:
            if self._entries.pop(workbook_id, None) is None:
                raise WorkbookNotFoundError(f"Workbook not found: {workbook_id}")

    def resolve_sheet(self, workbook_id: str, sheet_name: str | None = None) -> Worksheet:
        """Sheet by exact name, or the workbook's first sheet when no name is given."""
        workbook = self.get(workbook_id).workbook
        sheet = workbook.default_sheet() if sheet_name is None else workbook.sheet(sheet_name)
        if sheet is None:
            raise SheetNotFoundError(
                f"Sheet {sheet_name!r} not found in workbook {workbook_id}"
                if sheet_name is not None
                else f"Workbook {workbook_id} has no sheets"
            )
        return sheet
