"""
Cell values and column type tags.
"""
from __future__ import annotations

import datetime as dt
import math
from dataclasses import dataclass
from enum import Enum
from typing import Union

import numpy as np

CellPayload = Union[str, float, dt.date, bool, None]

EMPTY_DISPLAY = ""


class ColumnType(str, Enum):
    STRING = "String"
    NUMBER = "Number"
    DATE = "Date"
    BOOLEAN = "Boolean"
    EMPTY = "Empty"


def format_number(value: float) -> str:
    """Render a float the way a spreadsheet cell shows it: ``40.0`` -> ``"40"``."""
    if math.isnan(value):
        return "NaN"
    if math.isinf(value):
        return "inf" if value > 0 else "-inf"
    return np.format_float_positional(value, trim="-")


@dataclass(frozen=True)
class CellValue:
    """A single typed cell. ``kind`` selects which payload is meaningful.

    Use the named constructors rather than building instances directly so the
    payload always matches the tag.
    """
    kind: ColumnType
    payload: CellPayload = None

    @classmethod
    def string(cls, text: str) -> "CellValue":
        return cls(ColumnType.STRING, text)

    @classmethod
    def number(cls, value: float) -> "CellValue":
        return cls(ColumnType.NUMBER, float(value))

    @classmethod
    def date(cls, value: dt.date) -> "CellValue":
        if isinstance(value, dt.datetime):
            value = value.date()
        return cls(ColumnType.DATE, value)

    @classmethod
    def boolean(cls, value: bool) -> "CellValue":
        return cls(ColumnType.BOOLEAN, bool(value))

    @classmethod
    def empty(cls) -> "CellValue":
        return _EMPTY

    @property
    def column_type(self) -> ColumnType:
        return self.kind

    def display(self) -> str:
        if self.kind is ColumnType.STRING:
            return self.payload
        if self.kind is ColumnType.NUMBER:
            return format_number(self.payload)
        if self.kind is ColumnType.DATE:
            return self.payload.isoformat()
        if self.kind is ColumnType.BOOLEAN:
            return "true" if self.payload else "false"
        if self.kind is ColumnType.EMPTY:
            return EMPTY_DISPLAY
        raise ValueError(f"Unhandled cell kind: {self.kind}")

    def as_number(self) -> float | None:
        """Numeric projection; only ``Number`` cells have one."""
        if self.kind is ColumnType.NUMBER:
            return self.payload
        return None

    def to_python(self) -> CellPayload:
        return self.payload

    def __str__(self) -> str:
        return self.display()


_EMPTY = CellValue(ColumnType.EMPTY)
