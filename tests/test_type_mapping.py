"""Tests for column type inference and page conversion."""

from datetime import date
from decimal import Decimal

import pytest

from reportforge.materializer.type_mapping import (
    convert_cell,
    infer_column_type,
    page_to_report_data,
    parse_wire_date,
)
from reportforge.models.report import ColumnHeader, Page


class TestInferColumnType:
    @pytest.mark.parametrize(
        "kind,expected",
        [
            ("INTEGER", int),
            ("integer", int),
            ("DOUBLE", float),
            ("CURRENCY", Decimal),
            ("TIME", float),
            ("FLOAT", float),
            ("PERCENT", float),
        ],
    )
    def test_declared_kinds(self, kind, expected):
        assert infer_column_type(ColumnHeader(name="ga:metric", kind=kind)) is expected

    def test_date_dimension(self):
        """The date dimension is a date even without a declared kind."""
        assert infer_column_type(ColumnHeader(name="ga:date")) is date
        assert infer_column_type(ColumnHeader(name="GA:DATE")) is date

    def test_unprefixed_date_dimension(self):
        """A transport sending bare names still gets a date column."""
        assert infer_column_type(ColumnHeader(name="date")) is date
        assert infer_column_type(ColumnHeader(name="Date")) is date

    def test_declared_kind_wins_over_name(self):
        assert infer_column_type(ColumnHeader(name="ga:date", kind="INTEGER")) is int

    def test_everything_else_is_string(self):
        assert infer_column_type(ColumnHeader(name="ga:country")) is str
        assert infer_column_type(ColumnHeader(name="ga:dateHour")) is str
        assert infer_column_type(ColumnHeader(name="ga:x", kind="STRING")) is str


class TestConvertCell:
    def test_integer(self):
        """An integer column holding "42" gives the number 42."""
        value = convert_cell("42", int)
        assert value == 42
        assert isinstance(value, int)

    def test_currency_is_exact(self):
        assert convert_cell("19.99", Decimal) == Decimal("19.99")

    def test_float(self):
        assert convert_cell("12.5", float) == 12.5

    def test_date(self):
        assert convert_cell("20240115", date) == date(2024, 1, 15)

    def test_string_is_verbatim(self):
        assert convert_cell(" (not set) ", str) == " (not set) "

    def test_none_passes_through(self):
        assert convert_cell(None, int) is None

    def test_bad_integer(self):
        with pytest.raises(ValueError):
            convert_cell("forty-two", int)


class TestParseWireDate:
    @pytest.mark.parametrize("value", ["2024-01-15", "2024115", "202401155", "2024011x", "20241301"])
    def test_rejects_bad_dates(self, value):
        with pytest.raises(ValueError):
            parse_wire_date(value)


class TestPageToReportData:
    def test_converts_page(self, first_page):
        data = page_to_report_data(first_page)
        assert data.column_names == ["date", "country", "sessions", "transactionRevenue"]
        assert [c.type for c in data.columns] == [date, str, int, Decimal]
        assert data.rows[0] == (date(2024, 1, 15), "Germany", 42, Decimal("19.99"))
        assert data.row_count == 2

    def test_empty_page(self):
        data = page_to_report_data(Page(column_headers=[ColumnHeader(name="ga:sessions", kind="INTEGER")]))
        assert data.column_names == ["sessions"]
        assert data.row_count == 0

    def test_row_arity_mismatch_fails_fast(self):
        page = Page(
            rows=[["Germany"]],
            column_headers=[ColumnHeader(name="ga:country"), ColumnHeader(name="ga:users", kind="INTEGER")],
        )
        with pytest.raises(ValueError):
            page_to_report_data(page)

    def test_unprefixed_headers(self):
        page = Page(
            rows=[["20240115", "7"]],
            column_headers=[ColumnHeader(name="date"), ColumnHeader(name="sessions", kind="INTEGER")],
        )
        data = page_to_report_data(page)
        assert data.rows[0] == (date(2024, 1, 15), 7)
