"""Type inference and pivot aggregation over ingested sheets."""
from .engine import PREVIEW_ROW_LIMIT, format_aggregate, preview_table, run_query, select_columns
from .executor import PivotExecutor
from .inference import infer_column_type
from .models import (
    AggregationKind,
    AggregationResult,
    ColumnProfile,
    QueryFilter,
    QuerySpec,
    SheetProfile,
)
from .profiler import profile_worksheet
from .validator import validate_query

__all__ = [
    "PREVIEW_ROW_LIMIT",
    "format_aggregate",
    "preview_table",
    "run_query",
    "select_columns",
    "PivotExecutor",
    "infer_column_type",
    "AggregationKind",
    "AggregationResult",
    "ColumnProfile",
    "QueryFilter",
    "QuerySpec",
    "SheetProfile",
    "profile_worksheet",
    "validate_query",
]
