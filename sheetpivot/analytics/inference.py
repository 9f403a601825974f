"""Column type inference over a full sequence of typed cells."""
from __future__ import annotations

from typing import Iterable

from ..domain.types import CellValue, ColumnType


def infer_column_type(values: Iterable[CellValue]) -> ColumnType:
    """Decide a column's declared type from every value it holds.

    Precedence, first match wins: any String, then any Date, then Boolean
    when no Number is present, then Number, else Empty. Bit-like numbers
    mixed with real booleans keep the column numeric.
    """
    seen: set[ColumnType] = set()
    for value in values:
        seen.add(value.column_type)
        if ColumnType.STRING in seen:
            return ColumnType.STRING

    if ColumnType.DATE in seen:
        return ColumnType.DATE
    if ColumnType.BOOLEAN in seen and ColumnType.NUMBER not in seen:
        return ColumnType.BOOLEAN
    if ColumnType.NUMBER in seen:
        return ColumnType.NUMBER
    return ColumnType.EMPTY
