"""Repository layer for sheetpivot."""
from .workbook_repository import WorkbookEntry, WorkbookRepository

__all__ = ["WorkbookEntry", "WorkbookRepository"]
