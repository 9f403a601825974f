"""Domain layer: typed cells and sheet storage."""
from .types import CellValue, ColumnType, format_number
from .workbook import Column, Worksheet, Workbook

__all__ = ["CellValue", "ColumnType", "format_number", "Column", "Worksheet", "Workbook"]
