"""Workbook ingestion: reader adapters and typed conversion."""
from .adapter import (
    EXCEL_EPOCH,
    build_worksheet,
    convert_cell,
    excel_serial_to_date,
    ingest_workbook,
    load_workbook,
    parse_iso_date,
)
from .raw import RawCell, RawCellKind, RawWorkbook
from .readers import WorkbookFormat, get_workbook_format, open_raw_workbook

__all__ = [
    "EXCEL_EPOCH",
    "build_worksheet",
    "convert_cell",
    "excel_serial_to_date",
    "ingest_workbook",
    "load_workbook",
    "parse_iso_date",
    "RawCell",
    "RawCellKind",
    "RawWorkbook",
    "WorkbookFormat",
    "get_workbook_format",
    "open_raw_workbook",
]
