from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, Field, model_validator


class AggregationKind(str, Enum):
    SUM = "Sum"
    AVG = "Avg"
    COUNT = "Count"
    MIN = "Min"
    MAX = "Max"


class QueryFilter(BaseModel):
    """Equality filter carried in the query; the engine does not apply it."""
    column: str
    equals: str


_LEGACY_KEYS = {"rows": "dimensions", "columns": "measures"}


class QuerySpec(BaseModel):
    """Pivot request: group by ``dimensions``, summarize ``measures``.

    A query with neither dimensions nor measures is the preview sentinel.
    Explicit JSON nulls for list fields are coerced to empty lists, and the
    legacy ``rows`` / ``columns`` keys are accepted for ``dimensions`` /
    ``measures`` so saved projects written by other tools still load.
    """
    dimensions: list[str] = Field(default_factory=list)
    measures: list[str] = Field(default_factory=list)
    aggregations: list[AggregationKind] = Field(default_factory=lambda: [AggregationKind.SUM])
    filters: list[QueryFilter] = Field(default_factory=list)

    @model_validator(mode="before")
    @classmethod
    def _normalize_input(cls, values: dict) -> dict:
        if isinstance(values, dict):
            values = dict(values)
            for legacy, key in _LEGACY_KEYS.items():
                if legacy in values and key not in values:
                    values[key] = values.pop(legacy)
            for key in ("dimensions", "measures", "aggregations", "filters"):
                if key in values and values[key] is None:
                    values[key] = []
        return values

    @classmethod
    def empty(cls) -> "QuerySpec":
        return cls()

    def is_empty(self) -> bool:
        return not self.dimensions and not self.measures

    def add_dimension(self, name: str) -> None:
        if name not in self.dimensions:
            self.dimensions.append(name)

    def add_measure(self, name: str) -> None:
        if name not in self.measures:
            self.measures.append(name)


class AggregationResult(BaseModel):
    """Stringified table handed to the presentation layer."""
    headers: list[str] = Field(default_factory=list)
    rows: list[list[str]] = Field(default_factory=list)


class ColumnProfile(BaseModel):
    """Per-column statistics."""
    name: str
    column_type: str
    null_ratio: float
    distinct_count: int
    min_value: float | None = None
    max_value: float | None = None


class SheetProfile(BaseModel):
    """Aggregate statistics for an ingested sheet."""
    sheet_name: str
    row_count: int
    columns: list[ColumnProfile] = Field(default_factory=list)
