"""
Untyped cells as produced by spreadsheet readers.
"""
from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Protocol, Sequence


class RawCellKind(str, Enum):
    TEXT = "text"
    FLOAT = "float"
    INT = "int"
    BOOL = "bool"
    DATETIME = "datetime"
    DATETIME_ISO = "datetime_iso"
    EMPTY = "empty"
    OTHER = "other"


@dataclass(frozen=True)
class RawCell:
    """One reader cell. DATETIME carries a spreadsheet serial (days since epoch)."""
    kind: RawCellKind
    value: Any = None

    @classmethod
    def text(cls, value: str) -> "RawCell":
        return cls(RawCellKind.TEXT, value)

    @classmethod
    def float_(cls, value: float) -> "RawCell":
        return cls(RawCellKind.FLOAT, value)

    @classmethod
    def int_(cls, value: int) -> "RawCell":
        return cls(RawCellKind.INT, value)

    @classmethod
    def bool_(cls, value: bool) -> "RawCell":
        return cls(RawCellKind.BOOL, value)

    @classmethod
    def datetime(cls, serial: float) -> "RawCell":
        return cls(RawCellKind.DATETIME, serial)

    @classmethod
    def datetime_iso(cls, value: str) -> "RawCell":
        return cls(RawCellKind.DATETIME_ISO, value)

    @classmethod
    def empty(cls) -> "RawCell":
        return cls(RawCellKind.EMPTY)

    @classmethod
    def other(cls, value: Any) -> "RawCell":
        return cls(RawCellKind.OTHER, value)


RawRow = Sequence[RawCell]


class RawWorkbook(Protocol):
    """What the ingestion adapter needs from a spreadsheet reader."""

    def sheet_names(self) -> list[str]:
        ...

    def worksheet_range(self, name: str) -> list[RawRow]:
        """Rows of ``name``; raises SheetReadError if the sheet is unreadable."""
        ...
