from __future__ import annotations


class SheetPivotError(Exception):
    """Base error class for workbook ingestion and pivot queries."""


class WorkbookLoadError(SheetPivotError):
    """Raised when a workbook cannot be opened or has no readable sheets."""


class UnsupportedWorkbookError(WorkbookLoadError):
    """Raised when the file extension has no reader."""


class SheetReadError(SheetPivotError):
    """Raised by a reader when one sheet's cell range cannot be retrieved."""


class WorkbookNotFoundError(SheetPivotError):
    """Raised when no workbook snapshot is registered under an id."""


class SheetNotFoundError(SheetPivotError):
    """Raised when a workbook has no sheet with the requested name."""


class ProjectFileError(SheetPivotError):
    """Raised when a project document cannot be read, parsed, or written."""
