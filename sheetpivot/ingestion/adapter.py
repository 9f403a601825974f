"""
Convert raw reader output into typed, column-oriented workbooks.

A sheet that cannot be read is skipped and recorded in
``Workbook.skipped_sheets``; unrecognized cells degrade to strings.
"""
from __future__ import annotations

import datetime as dt
import logging
import math
import re
from pathlib import Path

from ..analytics.inference import infer_column_type
from ..domain.types import CellValue
from ..domain.workbook import Column, Workbook, Worksheet
from ..errors import SheetReadError, WorkbookLoadError
from .raw import RawCell, RawCellKind, RawRow, RawWorkbook
from .readers import open_raw_workbook

logger = logging.getLogger(__name__)

# Serial day zero for 1900-system workbooks, including the 1900 leap-year bug.
EXCEL_EPOCH = dt.date(1899, 12, 30)

_ISO_DATE_RE = re.compile(r"^\d{4}-\d{2}-\d{2}$")


def excel_serial_to_date(serial: float) -> dt.date:
    return EXCEL_EPOCH + dt.timedelta(days=math.floor(serial))


def parse_iso_date(text: str) -> dt.date | None:
    """Strict ``YYYY-MM-DD``; anything else (including a time part) is rejected."""
    if not _ISO_DATE_RE.match(text):
        return None
    try:
        return dt.date.fromisoformat(text)
    except ValueError:
        return None


def convert_cell(cell: RawCell) -> CellValue:
    kind = cell.kind
    if kind is RawCellKind.TEXT:
        return CellValue.string(cell.value)
    if kind in (RawCellKind.FLOAT, RawCellKind.INT):
        return CellValue.number(float(cell.value))
    if kind is RawCellKind.BOOL:
        return CellValue.boolean(cell.value)
    if kind is RawCellKind.DATETIME:
        try:
            return CellValue.date(excel_serial_to_date(float(cell.value)))
        except (OverflowError, ValueError):
            return CellValue.string(str(cell.value))
    if kind is RawCellKind.DATETIME_ISO:
        parsed = parse_iso_date(cell.value)
        return CellValue.date(parsed) if parsed is not None else CellValue.string(cell.value)
    if kind is RawCellKind.EMPTY:
        return CellValue.empty()
    return CellValue.string("" if cell.value is None else str(cell.value))


def _header_names(header_row: RawRow) -> list[str]:
    return [
        cell.value if cell.kind is RawCellKind.TEXT else f"Column {idx}"
        for idx, cell in enumerate(header_row, start=1)
    ]


def build_worksheet(name: str, rows: list[RawRow]) -> Worksheet:
    """Assemble one sheet: first row is the header, the rest fill columns by position."""
    headers = _header_names(rows[0]) if rows else []
    values: list[list[CellValue]] = [[] for _ in headers]

    for row in rows[1:]:
        for idx, cell in enumerate(row[:len(headers)]):
            values[idx].append(convert_cell(cell))

    columns = [
        Column(name=header, column_type=infer_column_type(cells), values=tuple(cells))
        for header, cells in zip(headers, values)
    ]
    return Worksheet.from_columns(name, columns)


def ingest_workbook(raw: RawWorkbook) -> Workbook:
    """Build a Workbook from every readable sheet of ``raw``.

    Raises WorkbookLoadError when the workbook has no sheets or none of them
    can be read.
    """
    names = list(raw.sheet_names())
    if not names:
        raise WorkbookLoadError("No sheets found in workbook")

    sheets: list[Worksheet] = []
    skipped: list[str] = []
    for name in names:
        try:
            rows = raw.worksheet_range(name)
        except SheetReadError as exc:
            logger.warning("Skipping unreadable sheet %r: %s", name, exc)
            skipped.append(name)
            continue
        sheets.append(build_worksheet(name, list(rows)))

    if not sheets:
        raise WorkbookLoadError(f"None of the {len(names)} sheet(s) could be read")

    return Workbook(sheets=tuple(sheets), skipped_sheets=tuple(skipped))


def load_workbook(path: str | Path) -> Workbook:
    """Open ``path`` with the matching reader and ingest it."""
    with open_raw_workbook(path) as raw:
        workbook = ingest_workbook(raw)
    logger.info(
        "Ingested %d sheet(s) from %s (%d skipped)",
        len(workbook.sheets), Path(path).name, len(workbook.skipped_sheets),
    )
    return workbook
