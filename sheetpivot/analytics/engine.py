"""Group-by aggregation over one worksheet.

The engine never raises for a well-formed sheet: unknown column names are
dropped, short columns read as ``Empty`` and empty numeric series aggregate
to ``0``. Groups are emitted in first-occurrence order.
"""
from __future__ import annotations

import logging
from typing import Sequence

from ..domain.types import format_number
from ..domain.workbook import Column, Worksheet
from .models import AggregationKind, AggregationResult, QuerySpec

logger = logging.getLogger(__name__)

PREVIEW_ROW_LIMIT = 25


def run_query(sheet: Worksheet, spec: QuerySpec) -> AggregationResult:
    if spec.is_empty():
        return preview_table(sheet)

    dimension_columns = select_columns(sheet, spec.dimensions)
    measure_columns = select_columns(sheet, spec.measures)

    groups: dict[tuple[str, ...], list[list[float]]] = {}
    for row_index in range(sheet.row_count):
        key = tuple(col.value_at(row_index).display() for col in dimension_columns)
        series = groups.get(key)
        if series is None:
            series = [[] for _ in measure_columns]
            groups[key] = series

        for idx, col in enumerate(measure_columns):
            number = col.value_at(row_index).as_number()
            if number is not None:
                series[idx].append(number)

    headers = [col.name for col in dimension_columns]
    for col in measure_columns:
        for agg in spec.aggregations:
            headers.append(f"{col.name} ({agg.value})")

    rows: list[list[str]] = []
    for key, measure_series in groups.items():
        row = list(key)
        for values in measure_series:
            for agg in spec.aggregations:
                row.append(format_aggregate(agg, values))
        rows.append(row)

    return AggregationResult(headers=headers, rows=rows)


def preview_table(sheet: Worksheet) -> AggregationResult:
    """First rows of the sheet, rendered as display strings."""
    rows = [
        [col.value_at(row_index).display() for col in sheet.columns]
        for row_index in range(min(sheet.row_count, PREVIEW_ROW_LIMIT))
    ]
    return AggregationResult(headers=sheet.column_names(), rows=rows)


def select_columns(sheet: Worksheet, names: Sequence[str]) -> list[Column]:
    selected: list[Column] = []
    for name in names:
        col = sheet.find_column(name)
        if col is None:
            logger.debug("Dropping unknown column %r for sheet %r", name, sheet.name)
            continue
        selected.append(col)
    return selected


def format_aggregate(agg: AggregationKind, values: Sequence[float]) -> str:
    if agg is AggregationKind.COUNT:
        return str(len(values))
    if agg is AggregationKind.SUM:
        return format_number(sum(values, 0.0))
    if not values:
        return "0"
    if agg is AggregationKind.AVG:
        return format_number(sum(values) / len(values))
    if agg is AggregationKind.MIN:
        return format_number(min(values))
    if agg is AggregationKind.MAX:
        return format_number(max(values))
    raise ValueError(f"Unhandled aggregation: {agg}")
