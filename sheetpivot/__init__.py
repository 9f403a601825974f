"""Spreadsheet ingestion, column type inference and pivot aggregation."""
from .analytics import AggregationKind, AggregationResult, QuerySpec, run_query
from .domain import CellValue, Column, ColumnType, Workbook, Worksheet
from .ingestion import ingest_workbook, load_workbook

__all__ = [
    "AggregationKind",
    "AggregationResult",
    "QuerySpec",
    "run_query",
    "CellValue",
    "Column",
    "ColumnType",
    "Workbook",
    "Worksheet",
    "ingest_workbook",
    "load_workbook",
]
