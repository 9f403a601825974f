"""Compute sheet profiles post-ingestion."""
from __future__ import annotations

import logging
from typing import Any

import pandas as pd

from ..domain.types import ColumnType
from ..domain.workbook import Worksheet
from .models import ColumnProfile, SheetProfile

logger = logging.getLogger(__name__)


def profile_worksheet(sheet: Worksheet) -> SheetProfile:
    """Build a SheetProfile from the sheet's Python-native values.

    Short columns count their missing tail as nulls. Min/max are only
    computed for Number columns.
    """
    df = sheet.to_dataframe()
    total = sheet.row_count
    columns: list[ColumnProfile] = []

    for idx, col in enumerate(sheet.columns):
        series = df[idx]
        null_count = int(series.isna().sum())
        null_ratio = null_count / total if total else 0.0
        non_null = series.dropna()
        distinct_count = int(non_null.nunique())

        min_value: Any = None
        max_value: Any = None
        if col.column_type is ColumnType.NUMBER and not non_null.empty:
            numeric = pd.Series([v.as_number() for v in col.values], dtype="float64").dropna()
            if not numeric.empty:
                min_value = float(numeric.min())
                max_value = float(numeric.max())

        columns.append(ColumnProfile(
            name=col.name,
            column_type=col.column_type.value,
            null_ratio=round(null_ratio, 6),
            distinct_count=distinct_count,
            min_value=min_value,
            max_value=max_value,
        ))

    logger.debug("Profiled sheet %r: %d column(s), %d row(s)", sheet.name, len(columns), total)
    return SheetProfile(sheet_name=sheet.name, row_count=total, columns=columns)
