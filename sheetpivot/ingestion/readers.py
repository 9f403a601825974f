"""
Spreadsheet readers that expose workbooks as rows of raw cells.

openpyxl handles .xlsx/.xlsm, xlrd handles legacy .xls and pandas reads .csv.
"""
from __future__ import annotations

import datetime as dt
import logging
import re
import warnings
from enum import Enum
from pathlib import Path
from typing import Any

import openpyxl
import pandas as pd
import xlrd
from openpyxl.utils.datetime import to_excel

from ..errors import SheetReadError, UnsupportedWorkbookError, WorkbookLoadError
from .raw import RawCell, RawRow

logger = logging.getLogger(__name__)

# Days between the 1900 and 1904 date systems.
XLS_1904_OFFSET_DAYS = 1462

_NUMBER_RE = re.compile(r"^[+-]?(\d+(\.\d*)?|\.\d+)([eE][+-]?\d+)?$")
_INT_RE = re.compile(r"^[+-]?\d+$")
_ISO_SHAPE_RE = re.compile(r"^\d{4}-\d{2}-\d{2}")


class WorkbookFormat(str, Enum):
    XLSX = "xlsx"
    XLS = "xls"
    CSV = "csv"


def get_workbook_format(filename: str) -> WorkbookFormat | None:
    """Determine workbook format from filename extension."""
    ext = Path(filename).suffix.lower()
    if ext in (".xlsx", ".xlsm"):
        return WorkbookFormat.XLSX
    elif ext == ".xls":
        return WorkbookFormat.XLS
    elif ext == ".csv":
        return WorkbookFormat.CSV
    return None


class _Reader:
    def sheet_names(self) -> list[str]:
        raise NotImplementedError

    def worksheet_range(self, name: str) -> list[RawRow]:
        raise NotImplementedError

    def close(self) -> None:
        pass

    def __enter__(self):
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()


# ============================================================================
# openpyxl (.xlsx)
# ============================================================================

def openpyxl_cell(value: Any) -> RawCell:
    if value is None:
        return RawCell.empty()
    if isinstance(value, str):
        return RawCell.text(value)
    if isinstance(value, bool):
        return RawCell.bool_(value)
    if isinstance(value, int):
        return RawCell.int_(value)
    if isinstance(value, float):
        return RawCell.float_(value)
    if isinstance(value, (dt.datetime, dt.date, dt.time)):
        return RawCell.datetime(to_excel(value))
    return RawCell.other(value)


class OpenpyxlWorkbook(_Reader):
    """Cached cell values (``data_only``) of an .xlsx workbook."""

    def __init__(self, path: Path) -> None:
        try:
            self._wb = openpyxl.load_workbook(path, read_only=True, data_only=True)
        except Exception as exc:
            raise WorkbookLoadError(f"Cannot open workbook {path.name}: {exc}") from exc

    def sheet_names(self) -> list[str]:
        return list(self._wb.sheetnames)

    def worksheet_range(self, name: str) -> list[RawRow]:
        try:
            sheet = self._wb[name]
            return [
                [openpyxl_cell(v) for v in row]
                for row in sheet.iter_rows(values_only=True)
            ]
        except Exception as exc:
            raise SheetReadError(f"Cannot read sheet {name!r}: {exc}") from exc

    def close(self) -> None:
        self._wb.close()


# ============================================================================
# xlrd (.xls)
# ============================================================================

def xlrd_cell(cell: xlrd.sheet.Cell, datemode: int) -> RawCell:
    ctype = cell.ctype
    if ctype in (xlrd.XL_CELL_EMPTY, xlrd.XL_CELL_BLANK):
        return RawCell.empty()
    if ctype == xlrd.XL_CELL_TEXT:
        return RawCell.text(cell.value)
    if ctype == xlrd.XL_CELL_NUMBER:
        return RawCell.float_(cell.value)
    if ctype == xlrd.XL_CELL_DATE:
        serial = cell.value + (XLS_1904_OFFSET_DAYS if datemode == 1 else 0)
        return RawCell.datetime(serial)
    if ctype == xlrd.XL_CELL_BOOLEAN:
        return RawCell.bool_(bool(cell.value))
    if ctype == xlrd.XL_CELL_ERROR:
        return RawCell.other(xlrd.error_text_from_code.get(cell.value, f"#ERR{cell.value}"))
    return RawCell.other(cell.value)


class XlrdWorkbook(_Reader):
    """Legacy binary .xls workbook. 1904-system dates are rebased onto 1900."""

    def __init__(self, path: Path) -> None:
        try:
            self._book = xlrd.open_workbook(str(path), on_demand=True)
        except Exception as exc:
            raise WorkbookLoadError(f"Cannot open workbook {path.name}: {exc}") from exc

    def sheet_names(self) -> list[str]:
        return list(self._book.sheet_names())

    def worksheet_range(self, name: str) -> list[RawRow]:
        try:
            sheet = self._book.sheet_by_name(name)
            return [
                [xlrd_cell(cell, self._book.datemode) for cell in sheet.row(rx)]
                for rx in range(sheet.nrows)
            ]
        except Exception as exc:
            raise SheetReadError(f"Cannot read sheet {name!r}: {exc}") from exc

    def close(self) -> None:
        self._book.release_resources()


# ============================================================================
# pandas (.csv)
# ============================================================================

def csv_cell(value: Any) -> RawCell:
    if value is None or (not isinstance(value, str) and pd.isna(value)):
        return RawCell.empty()
    text = str(value)
    stripped = text.strip()
    if not stripped:
        return RawCell.empty()
    lowered = stripped.lower()
    if lowered in ("true", "false"):
        return RawCell.bool_(lowered == "true")
    if _INT_RE.match(stripped):
        return RawCell.int_(int(stripped))
    if _NUMBER_RE.match(stripped):
        return RawCell.float_(float(stripped))
    if _ISO_SHAPE_RE.match(stripped):
        return RawCell.datetime_iso(stripped)
    return RawCell.text(text)


def csv_header_cell(value: Any) -> RawCell:
    """Header fields are names, never data: keep them as text."""
    if value is None or (not isinstance(value, str) and pd.isna(value)):
        return RawCell.empty()
    text = str(value).strip()
    return RawCell.text(text) if text else RawCell.empty()


class CsvWorkbook(_Reader):
    """A CSV file exposed as a single sheet named after the file stem.

    Lines longer than the first line are truncated to its width.
    """

    def __init__(self, path: Path) -> None:
        if not path.is_file():
            raise WorkbookLoadError(f"Cannot open workbook {path.name}")
        self._path = path
        self._name = path.stem

    def sheet_names(self) -> list[str]:
        return [self._name]

    def worksheet_range(self, name: str) -> list[RawRow]:
        if name != self._name:
            raise SheetReadError(f"Unknown sheet {name!r}")
        try:
            with warnings.catch_warnings():
                warnings.simplefilter("ignore", pd.errors.ParserWarning)
                df = pd.read_csv(
                    self._path,
                    header=None,
                    dtype=str,
                    keep_default_na=False,
                    skip_blank_lines=False,
                    engine="python",
                    on_bad_lines=lambda fields: fields,
                )
        except pd.errors.EmptyDataError:
            return []
        except Exception as exc:
            raise SheetReadError(f"Cannot read sheet {name!r}: {exc}") from exc
        rows = list(df.itertuples(index=False, name=None))
        if not rows:
            return []
        header = [csv_header_cell(v) for v in rows[0]]
        return [header] + [[csv_cell(v) for v in row] for row in rows[1:]]


def open_raw_workbook(path: str | Path) -> _Reader:
    """Open ``path`` with the reader for its extension."""
    path = Path(path)
    fmt = get_workbook_format(path.name)
    if fmt is None:
        raise UnsupportedWorkbookError(f"Unsupported workbook type: {path.suffix or path.name}")
    if not path.exists():
        raise WorkbookLoadError(f"Workbook file not found: {path}")
    logger.debug("Opening %s as %s", path.name, fmt.value)
    if fmt == WorkbookFormat.XLSX:
        return OpenpyxlWorkbook(path)
    elif fmt == WorkbookFormat.XLS:
        return XlrdWorkbook(path)
    return CsvWorkbook(path)
