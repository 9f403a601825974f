"""Contract tests for typed ingestion and pivot aggregation.

Verifies that:
- Cell values classify, display and project to numbers correctly
- Type inference follows String > Date > Boolean(no numbers) > Number > Empty
- Raw cell conversion handles serial dates, ISO text and unknown kinds
- Sheet assembly keeps short rows short and truncates long rows
- The engine previews, groups and aggregates with the empty-series law
"""
from __future__ import annotations

import datetime as dt
import logging

import pytest

from sheetpivot.analytics.engine import PREVIEW_ROW_LIMIT, format_aggregate, run_query
from sheetpivot.analytics.inference import infer_column_type
from sheetpivot.analytics.models import AggregationKind, QueryFilter, QuerySpec
from sheetpivot.analytics.profiler import profile_worksheet
from sheetpivot.analytics.validator import validate_query
from sheetpivot.domain.types import CellValue, ColumnType, format_number
from sheetpivot.domain.workbook import Column, Worksheet
from sheetpivot.errors import SheetReadError, WorkbookLoadError
from sheetpivot.ingestion.adapter import (
    EXCEL_EPOCH,
    build_worksheet,
    convert_cell,
    excel_serial_to_date,
    ingest_workbook,
)
from sheetpivot.ingestion.raw import RawCell


S = CellValue.string
N = CellValue.number
D = CellValue.date
B = CellValue.boolean
E = CellValue.empty


def _column(name: str, values: list[CellValue]) -> Column:
    return Column(name=name, column_type=infer_column_type(values), values=tuple(values))


class FakeRawWorkbook:
    """In-memory reader; sheets mapped to ``None`` fail to read."""

    def __init__(self, sheets: dict[str, list[list[RawCell]] | None]) -> None:
        self._sheets = sheets

    def sheet_names(self) -> list[str]:
        return list(self._sheets)

    def worksheet_range(self, name: str) -> list[list[RawCell]]:
        rows = self._sheets[name]
        if rows is None:
            raise SheetReadError(f"cannot read {name}")
        return rows


# ============================================================================
# Fixtures
# ============================================================================

@pytest.fixture
def sales_sheet() -> Worksheet:
    return Worksheet.from_columns("Sales", [
        _column("Region", [S("East"), S("West"), S("East")]),
        _column("Sales", [N(10), N(20), N(30)]),
    ])


@pytest.fixture
def mixed_sheet() -> Worksheet:
    return Worksheet.from_columns("Mixed", [
        _column("Region", [S("North"), S("South"), S("North"), E(), S("South")]),
        _column("Year", [N(2023), N(2023), N(2024), N(2024), N(2023)]),
        _column("Amount", [N(1.5), S("n/a"), N(2.5), N(4), E()]),
        _column("Active", [B(True), B(False), B(True), B(True), B(False)]),
    ])


# ============================================================================
# Cell Values
# ============================================================================

class TestCellValue:
    def test_number_display_drops_trailing_zero(self):
        assert N(40).display() == "40"
        assert N(2.5).display() == "2.5"
        assert N(-3).display() == "-3"

    def test_date_display_iso(self):
        assert D(dt.date(2024, 1, 15)).display() == "2024-01-15"

    def test_datetime_truncated_to_date(self):
        value = D(dt.datetime(2024, 1, 15, 13, 45))
        assert value.payload == dt.date(2024, 1, 15)

    def test_boolean_display_lowercase(self):
        assert B(True).display() == "true"
        assert B(False).display() == "false"

    def test_empty_distinct_from_empty_string(self):
        assert E().display() == ""
        assert S("").display() == ""
        assert E() != S("")
        assert E().column_type is ColumnType.EMPTY
        assert S("").column_type is ColumnType.STRING

    def test_numeric_projection_only_for_numbers(self):
        assert N(3).as_number() == 3.0
        assert S("3").as_number() is None
        assert B(True).as_number() is None
        assert D(dt.date(2024, 1, 1)).as_number() is None
        assert E().as_number() is None

    def test_format_number_special_values(self):
        assert format_number(float("nan")) == "NaN"
        assert format_number(float("inf")) == "inf"
        assert format_number(0.1 + 0.2) == "0.30000000000000004"


# ============================================================================
# Type Inference
# ============================================================================

class TestTypeInference:
    def test_any_string_wins(self):
        values = [N(1), D(dt.date(2024, 1, 1)), B(True), S("x"), E()]
        assert infer_column_type(values) is ColumnType.STRING

    def test_date_beats_number_and_boolean(self):
        assert infer_column_type([N(1), B(True), D(dt.date(2024, 1, 1))]) is ColumnType.DATE

    def test_boolean_only(self):
        assert infer_column_type([B(True), E(), B(False)]) is ColumnType.BOOLEAN

    def test_boolean_with_number_is_number(self):
        assert infer_column_type([B(True), N(0), B(False)]) is ColumnType.NUMBER

    def test_number_column(self):
        assert infer_column_type([N(1.5), E(), N(2)]) is ColumnType.NUMBER

    def test_all_empty(self):
        assert infer_column_type([E(), E()]) is ColumnType.EMPTY

    def test_zero_rows(self):
        assert infer_column_type([]) is ColumnType.EMPTY


# ============================================================================
# Cell Conversion
# ============================================================================

class TestCellConversion:
    def test_serial_to_date(self):
        serial = (dt.date(2024, 1, 15) - EXCEL_EPOCH).days
        value = convert_cell(RawCell.datetime(float(serial)))
        assert value == D(dt.date(2024, 1, 15))
        assert value.display() == "2024-01-15"

    def test_serial_time_component_truncated(self):
        assert excel_serial_to_date(45306.75) == dt.date(2024, 1, 15)

    def test_int_upcast(self):
        value = convert_cell(RawCell.int_(7))
        assert value.column_type is ColumnType.NUMBER
        assert value.as_number() == 7.0

    def test_float(self):
        assert convert_cell(RawCell.float_(1.25)) == N(1.25)

    def test_text_and_bool(self):
        assert convert_cell(RawCell.text("hello")) == S("hello")
        assert convert_cell(RawCell.bool_(False)) == B(False)

    def test_iso_text_exact(self):
        assert convert_cell(RawCell.datetime_iso("2024-02-29")) == D(dt.date(2024, 2, 29))

    def test_iso_text_with_time_falls_back(self):
        assert convert_cell(RawCell.datetime_iso("2024-02-29T10:00:00")) == S("2024-02-29T10:00:00")

    def test_iso_text_invalid_date_falls_back(self):
        assert convert_cell(RawCell.datetime_iso("2023-02-30")) == S("2023-02-30")

    def test_empty(self):
        assert convert_cell(RawCell.empty()) == E()

    def test_other_rendered_as_string(self):
        assert convert_cell(RawCell.other("#DIV/0!")) == S("#DIV/0!")
        assert convert_cell(RawCell.other(dt.timedelta(hours=1))) == S("1:00:00")


# ============================================================================
# Sheet Assembly
# ============================================================================

class TestSheetAssembly:
    def test_non_text_header_gets_synthetic_name(self):
        sheet = build_worksheet("S", [
            [RawCell.text("Name"), RawCell.float_(2024.0), RawCell.empty()],
            [RawCell.text("a"), RawCell.float_(1.0), RawCell.float_(2.0)],
        ])
        assert sheet.column_names() == ["Name", "Column 2", "Column 3"]

    def test_long_row_truncated(self):
        sheet = build_worksheet("S", [
            [RawCell.text("A"), RawCell.text("B")],
            [RawCell.float_(1.0), RawCell.float_(2.0), RawCell.float_(3.0)],
        ])
        assert len(sheet.columns) == 2
        assert sheet.row_count == 1

    def test_short_row_leaves_column_short(self):
        sheet = build_worksheet("S", [
            [RawCell.text("A"), RawCell.text("B")],
            [RawCell.float_(1.0), RawCell.float_(2.0)],
            [RawCell.float_(3.0)],
            [RawCell.float_(5.0), RawCell.float_(6.0)],
        ])
        a, b = sheet.columns
        assert sheet.row_count == 3
        assert len(a) == 3
        assert len(b) == 2
        assert b.value_at(2) == E()
        assert b.value_at(99) == E()

    def test_types_inferred_after_all_rows(self):
        sheet = build_worksheet("S", [
            [RawCell.text("Flag"), RawCell.text("Mixed")],
            [RawCell.bool_(True), RawCell.float_(1.0)],
            [RawCell.bool_(False), RawCell.text("x")],
        ])
        flag, mixed = sheet.columns
        assert flag.column_type is ColumnType.BOOLEAN
        assert mixed.column_type is ColumnType.STRING

    def test_empty_sheet(self):
        sheet = build_worksheet("Blank", [])
        assert sheet.columns == ()
        assert sheet.row_count == 0

    def test_header_only_sheet(self):
        sheet = build_worksheet("H", [[RawCell.text("A")]])
        assert sheet.row_count == 0
        assert sheet.columns[0].column_type is ColumnType.EMPTY


# ============================================================================
# Workbook Ingestion
# ============================================================================

class TestIngestWorkbook:
    def test_unreadable_sheet_skipped(self, caplog):
        raw = FakeRawWorkbook({
            "Good": [[RawCell.text("A")], [RawCell.float_(1.0)]],
            "Broken": None,
            "Also Good": [[RawCell.text("B")]],
        })
        with caplog.at_level(logging.WARNING):
            workbook = ingest_workbook(raw)
        assert workbook.sheet_names() == ["Good", "Also Good"]
        assert workbook.skipped_sheets == ("Broken",)
        assert "Broken" in caplog.text

    def test_no_sheets_is_error(self):
        with pytest.raises(WorkbookLoadError):
            ingest_workbook(FakeRawWorkbook({}))

    def test_all_sheets_unreadable_is_error(self):
        with pytest.raises(WorkbookLoadError):
            ingest_workbook(FakeRawWorkbook({"A": None, "B": None}))

    def test_sheet_lookup(self):
        workbook = ingest_workbook(FakeRawWorkbook({"One": [], "Two": []}))
        assert workbook.default_sheet().name == "One"
        assert workbook.sheet("Two").name == "Two"
        assert workbook.sheet("Three") is None


# ============================================================================
# Aggregation Engine
# ============================================================================

class TestPreview:
    def test_preview_capped(self):
        sheet = Worksheet.from_columns("Big", [
            _column("Idx", [N(i) for i in range(100)]),
            _column("Label", [S(f"row{i}") for i in range(100)]),
        ])
        result = run_query(sheet, QuerySpec.empty())
        assert result.headers == ["Idx", "Label"]
        assert len(result.rows) == PREVIEW_ROW_LIMIT == 25
        assert result.rows[0] == ["0", "row0"]
        assert result.rows[24] == ["24", "row24"]

    def test_preview_short_column_renders_empty(self):
        sheet = Worksheet.from_columns("Ragged", [
            _column("A", [N(1), N(2)]),
            _column("B", [S("x")]),
        ])
        result = run_query(sheet, QuerySpec.empty())
        assert result.rows == [["1", "x"], ["2", ""]]

    def test_empty_spec_with_aggregations_still_previews(self, sales_sheet):
        spec = QuerySpec(aggregations=[AggregationKind.MAX, AggregationKind.COUNT])
        result = run_query(sales_sheet, spec)
        assert result.headers == ["Region", "Sales"]
        assert len(result.rows) == 3


class TestGrouping:
    def test_region_sales_scenario(self, sales_sheet):
        spec = QuerySpec(
            dimensions=["Region"],
            measures=["Sales"],
            aggregations=[AggregationKind.SUM, AggregationKind.COUNT],
        )
        result = run_query(sales_sheet, spec)
        assert result.headers == ["Region", "Sales (Sum)", "Sales (Count)"]
        by_key = {row[0]: row[1:] for row in result.rows}
        assert by_key == {"East": ["40", "2"], "West": ["20", "1"]}

    def test_first_occurrence_order(self, sales_sheet):
        spec = QuerySpec(dimensions=["Region"], measures=["Sales"])
        result = run_query(sales_sheet, spec)
        assert [row[0] for row in result.rows] == ["East", "West"]

    def test_multi_key_groups(self, mixed_sheet):
        spec = QuerySpec(dimensions=["Region", "Year"], measures=["Amount"], aggregations=[AggregationKind.COUNT])
        result = run_query(mixed_sheet, spec)
        assert result.headers == ["Region", "Year", "Amount (Count)"]
        assert result.rows == [
            ["North", "2023", "1"],
            ["South", "2023", "0"],
            ["North", "2024", "1"],
            ["", "2024", "1"],
        ]

    def test_non_numeric_values_excluded(self, mixed_sheet):
        spec = QuerySpec(
            dimensions=["Region"],
            measures=["Amount"],
            aggregations=list(AggregationKind),
        )
        result = run_query(mixed_sheet, spec)
        assert result.headers == [
            "Region",
            "Amount (Sum)", "Amount (Avg)", "Amount (Count)", "Amount (Min)", "Amount (Max)",
        ]
        rows = {row[0]: row[1:] for row in result.rows}
        assert rows["North"] == ["4", "2", "2", "1.5", "2.5"]
        assert rows[""] == ["4", "4", "1", "4", "4"]

    def test_empty_series_law(self, mixed_sheet):
        spec = QuerySpec(dimensions=["Region"], measures=["Amount"], aggregations=list(AggregationKind))
        rows = {row[0]: row[1:] for row in run_query(mixed_sheet, spec).rows}
        assert rows["South"] == ["0", "0", "0", "0", "0"]

    def test_boolean_measure_never_counted(self, mixed_sheet):
        spec = QuerySpec(dimensions=["Region"], measures=["Active"], aggregations=[AggregationKind.COUNT])
        assert all(row[-1] == "0" for row in run_query(mixed_sheet, spec).rows)

    def test_measures_only_single_group(self, sales_sheet):
        spec = QuerySpec(measures=["Sales"], aggregations=[AggregationKind.AVG, AggregationKind.MAX])
        result = run_query(sales_sheet, spec)
        assert result.headers == ["Sales (Avg)", "Sales (Max)"]
        assert result.rows == [["20", "30"]]

    def test_dimensions_only(self, sales_sheet):
        result = run_query(sales_sheet, QuerySpec(dimensions=["Region"]))
        assert result.headers == ["Region"]
        assert result.rows == [["East"], ["West"]]

    def test_unknown_columns_dropped(self, sales_sheet):
        spec = QuerySpec(
            dimensions=["Region", "Country"],
            measures=["Profit", "Sales"],
            aggregations=[AggregationKind.SUM],
        )
        result = run_query(sales_sheet, spec)
        assert result.headers == ["Region", "Sales (Sum)"]
        assert all(len(row) == len(result.headers) for row in result.rows)

    def test_all_names_unknown(self, sales_sheet):
        spec = QuerySpec(dimensions=["Nope"], measures=["Missing"])
        result = run_query(sales_sheet, spec)
        assert result.headers == []
        assert result.rows == [[]]

    def test_zero_row_sheet(self):
        sheet = Worksheet.from_columns("Empty", [_column("A", []), _column("B", [])])
        result = run_query(sheet, QuerySpec(dimensions=["A"], measures=["B"]))
        assert result.headers == ["A", "B (Sum)"]
        assert result.rows == []

    def test_filters_are_not_applied(self, sales_sheet):
        spec = QuerySpec(
            dimensions=["Region"],
            measures=["Sales"],
            filters=[QueryFilter(column="Region", equals="West")],
        )
        assert len(run_query(sales_sheet, spec).rows) == 2

    def test_date_dimension_uses_display_string(self):
        sheet = Worksheet.from_columns("Dates", [
            _column("When", [D(dt.date(2024, 1, 15)), D(dt.date(2024, 1, 15))]),
            _column("Qty", [N(1), N(2)]),
        ])
        result = run_query(sheet, QuerySpec(dimensions=["When"], measures=["Qty"]))
        assert result.rows == [["2024-01-15", "3"]]


class TestFormatAggregate:
    def test_avg_fraction(self):
        assert format_aggregate(AggregationKind.AVG, [1.0, 2.0]) == "1.5"

    def test_empty_series(self):
        for agg in AggregationKind:
            assert format_aggregate(agg, []) == "0"


# ============================================================================
# Query Model
# ============================================================================

class TestQuerySpec:
    def test_empty_sentinel(self):
        spec = QuerySpec.empty()
        assert spec.is_empty()
        assert spec.aggregations == [AggregationKind.SUM]

    def test_add_dedupes(self):
        spec = QuerySpec.empty()
        spec.add_dimension("Region")
        spec.add_dimension("Region")
        spec.add_measure("Sales")
        spec.add_measure("Sales")
        assert spec.dimensions == ["Region"]
        assert spec.measures == ["Sales"]
        assert not spec.is_empty()

    def test_nulls_coerced(self):
        spec = QuerySpec.model_validate({"dimensions": None, "measures": ["Sales"], "filters": None})
        assert spec.dimensions == []
        assert spec.filters == []

    def test_aggregation_names(self):
        spec = QuerySpec.model_validate({"measures": ["x"], "aggregations": ["Avg", "Max"]})
        assert spec.aggregations == [AggregationKind.AVG, AggregationKind.MAX]


# ============================================================================
# Validator / Profiler
# ============================================================================

class TestValidator:
    def test_reports_unknown_and_non_numeric(self, mixed_sheet):
        spec = QuerySpec(
            dimensions=["Country"],
            measures=["Amount", "Ghost"],
            filters=[QueryFilter(column="Region", equals="North")],
        )
        warnings = validate_query(spec, mixed_sheet)
        assert any("Country" in w for w in warnings)
        assert any("Ghost" in w for w in warnings)
        assert any("Amount" in w and "String" in w for w in warnings)
        assert any("filter" in w for w in warnings)

    def test_clean_query_has_no_warnings(self, sales_sheet):
        spec = QuerySpec(dimensions=["Region"], measures=["Sales"])
        assert validate_query(spec, sales_sheet) == []

    def test_preview_has_no_warnings(self, sales_sheet):
        assert validate_query(QuerySpec.empty(), sales_sheet) == []


class TestProfiler:
    def test_profile_basic(self, mixed_sheet):
        profile = profile_worksheet(mixed_sheet)
        assert profile.row_count == 5
        by_name = {c.name: c for c in profile.columns}
        assert by_name["Region"].distinct_count == 2
        assert by_name["Region"].null_ratio == pytest.approx(0.2)
        assert by_name["Year"].column_type == "Number"
        assert by_name["Year"].min_value == 2023.0
        assert by_name["Year"].max_value == 2024.0
        assert by_name["Amount"].min_value is None

    def test_profile_short_column(self):
        sheet = Worksheet.from_columns("Ragged", [
            _column("A", [N(1), N(2), N(3), N(4)]),
            _column("B", [N(5)]),
        ])
        profile = profile_worksheet(sheet)
        b = profile.columns[1]
        assert b.null_ratio == pytest.approx(0.75)
        assert b.min_value == 5.0
