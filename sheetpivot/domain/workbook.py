"""
Column-oriented sheet storage.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterable

import pandas as pd

from .types import CellValue, ColumnType


@dataclass(frozen=True)
class Column:
    """A named column of typed cells with its inferred type."""
    name: str
    column_type: ColumnType
    values: tuple[CellValue, ...] = ()

    def __len__(self) -> int:
        return len(self.values)

    def value_at(self, index: int) -> CellValue:
        """Cell at ``index``, or ``Empty`` when the column is shorter."""
        if 0 <= index < len(self.values):
            return self.values[index]
        return CellValue.empty()


@dataclass(frozen=True)
class Worksheet:
    name: str
    columns: tuple[Column, ...] = ()
    row_count: int = 0

    @classmethod
    def from_columns(cls, name: str, columns: Iterable[Column]) -> "Worksheet":
        cols = tuple(columns)
        return cls(name=name, columns=cols, row_count=len(cols[0]) if cols else 0)

    def column_names(self) -> list[str]:
        return [col.name for col in self.columns]

    def find_column(self, name: str) -> Column | None:
        """First column whose name matches exactly."""
        for col in self.columns:
            if col.name == name:
                return col
        return None

    def to_dataframe(self) -> pd.DataFrame:
        """Python-native values, one frame column per sheet column (positional)."""
        data = {
            idx: [col.value_at(i).to_python() for i in range(self.row_count)]
            for idx, col in enumerate(self.columns)
        }
        df = pd.DataFrame(data, columns=list(range(len(self.columns))), dtype=object)
        return df


@dataclass(frozen=True)
class Workbook:
    sheets: tuple[Worksheet, ...] = ()
    skipped_sheets: tuple[str, ...] = field(default_factory=tuple)

    def sheet_names(self) -> list[str]:
        return [s.name for s in self.sheets]

    def sheet(self, name: str) -> Worksheet | None:
        for s in self.sheets:
            if s.name == name:
                return s
        return None

    def default_sheet(self) -> Worksheet | None:
        return self.sheets[0] if self.sheets else None

