"""Non-fatal checks of a query against the sheet it will run on."""
from __future__ import annotations

import logging

from ..domain.types import ColumnType
from ..domain.workbook import Worksheet
from .models import QuerySpec

logger = logging.getLogger(__name__)


def validate_query(spec: QuerySpec, sheet: Worksheet) -> list[str]:
    """Return human-readable warnings for a query.

    The engine tolerates everything reported here, so this only logs.
    """
    warnings: list[str] = []
    if spec.is_empty():
        return warnings

    for name in spec.dimensions:
        if sheet.find_column(name) is None:
            warnings.append(f"Dimension column '{name}' not found in sheet '{sheet.name}'")

    for name in spec.measures:
        col = sheet.find_column(name)
        if col is None:
            warnings.append(f"Measure column '{name}' not found in sheet '{sheet.name}'")
        elif col.column_type is not ColumnType.NUMBER:
            warnings.append(
                f"Measure column '{name}' is {col.column_type.value}; "
                f"only numeric cells are aggregated"
            )

    if spec.measures and not spec.aggregations:
        warnings.append("Measures selected but no aggregations requested")

    if spec.filters:
        warnings.append(f"{len(spec.filters)} filter(s) ignored; filtering is not applied")

    for message in warnings:
        logger.warning("Query validation warning: %s", message)
    return warnings
