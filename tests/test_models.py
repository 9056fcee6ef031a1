"""Tests for request and report models."""

import io
import json
from collections import namedtuple
from dataclasses import dataclass
from datetime import date
from decimal import Decimal

import pytest
from pydantic import BaseModel

from reportforge.errors import InvalidArgumentError, OutOfRangeError
from reportforge.models.report import Column, ReportData, ReportResult
from reportforge.models.request import RequestConfiguration

PEOPLE = ["Dave Miscampbell", "Phil Oyston"]


@dataclass
class PersonRow:
    FirstName: str
    LastName: str


class PersonModel(BaseModel):
    FirstName: str
    LastName: str


class PersonBag:
    """Plain class with a no-arg constructor, filled by attribute."""

    FirstName: str = ""
    LastName: str = ""


PersonTuple = namedtuple("PersonTuple", ["FirstName", "LastName"])


class TestRequestConfiguration:
    def test_normalizes_names(self):
        config = RequestConfiguration(
            profile_id="ga:1",
            start_date=date(2024, 1, 1),
            end_date=date(2024, 1, 2),
            metrics=["ga:sessions"],
            dimensions=["ga:date"],
        )
        assert config.profile_id == "1"
        assert config.metrics == ("sessions",)
        assert config.dimensions == ("date",)

    def test_page_request_prefixes_names(self, request_config):
        page = request_config.page_request()
        assert page.metrics == ["ga:sessions", "ga:transactionRevenue"]
        assert page.dimensions == ["ga:date", "ga:country"]
        assert page.page_size == 1000
        assert page.page_cursor is None

    def test_page_request_cursor(self, request_config):
        page = request_config.page_request(cursor="1000", page_size=250)
        assert page.page_cursor == "1000"
        assert page.page_size == 250

    def test_document_uses_camel_case(self, request_config):
        doc = request_config.to_document()
        assert doc == {
            "profileId": "12345",
            "startDate": "2024-01-01",
            "endDate": "2024-01-31",
            "metrics": ["sessions", "transactionRevenue"],
            "dimensions": ["date", "country"],
        }

    def test_document_keeps_non_defaults(self):
        config = RequestConfiguration(
            profile_id="1",
            start_date=date(2024, 1, 1),
            end_date=date(2024, 1, 1),
            filter="ga:country==US",
            sort="-ga:sessions",
            segment="gaid::-1",
            max_results=50,
        )
        doc = config.to_document()
        assert doc["filter"] == "ga:country==US"
        assert doc["sort"] == "-ga:sessions"
        assert doc["segment"] == "gaid::-1"
        assert doc["maxResults"] == 50
        # empty lists are defaults and are left out
        assert "metrics" not in doc
        assert "dimensions" not in doc

    def test_json_round_trip(self, request_config):
        buffer = io.StringIO()
        request_config.export_to(buffer)
        restored = RequestConfiguration.from_document(json.loads(buffer.getvalue()))
        assert restored == request_config

    def test_document_defaults(self):
        """Absent fields take the builder defaults."""
        config = RequestConfiguration.from_document({"profileId": "1", "startDate": "2024-01-01"})
        assert config.end_date == date.today()
        assert config.max_results == 1000
        assert config.metrics == ()
        assert config.dimensions == ()
        assert config.filter is None

    def test_document_inverted_dates(self):
        with pytest.raises(OutOfRangeError):
            RequestConfiguration.from_document(
                {"profileId": "1", "startDate": "2024-02-01", "endDate": "2024-01-01"}
            )

    def test_document_max_results_out_of_range(self):
        with pytest.raises(OutOfRangeError):
            RequestConfiguration.from_document(
                {"profileId": "1", "startDate": "2024-01-01", "maxResults": 0}
            )

    def test_document_missing_profile(self):
        with pytest.raises(InvalidArgumentError):
            RequestConfiguration.from_document({"startDate": "2024-01-01"})

    def test_document_not_an_object(self):
        with pytest.raises(InvalidArgumentError):
            RequestConfiguration.from_document(["not", "a", "dict"])


class TestReportData:
    def test_rejects_duplicate_columns(self):
        with pytest.raises(ValueError):
            ReportData(columns=[Column("a"), Column("a")], rows=[])

    def test_rejects_bad_row_arity(self):
        with pytest.raises(ValueError):
            ReportData(columns=[Column("a"), Column("b")], rows=[("only one",)])

    def test_concat(self, people):
        merged = people.concat(ReportData(columns=list(people.columns), rows=[("Ann", "Lee")]))
        assert merged.row_count == 3
        assert merged.rows[-1] == ("Ann", "Lee")
        assert people.row_count == 2

    def test_rows_are_immutable(self):
        data = ReportData(columns=[Column("a")], rows=[["x"], ["y"]])
        assert data.rows == (("x",), ("y",))
        with pytest.raises(AttributeError):
            data.rows.append(("z",))

    def test_concat_keeps_rows_immutable(self, people):
        merged = people.concat(people)
        assert isinstance(merged.rows, tuple)
        assert isinstance(merged.columns, tuple)

    def test_concat_rejects_different_columns(self, people):
        other = ReportData(columns=[Column("Name")], rows=[("x",)])
        with pytest.raises(ValueError):
            people.concat(other)


class TestProjections:
    def test_as_table_is_identity(self, people):
        assert people.as_table() is people

    def test_as_table_is_read_only(self, people):
        """The identity projection can't be used to change the table."""
        table = people.as_table()
        with pytest.raises(TypeError):
            table.rows[0] = ("Ann", "Lee")
        assert people.rows[0] == ("Dave", "Miscampbell")

    def test_as_records(self, people):
        assert people.as_records()[0] == {"FirstName": "Dave", "LastName": "Miscampbell"}

    def test_as_json(self, people):
        """Json is a non-empty array with one object per row."""
        text = people.as_json()
        assert text
        decoded = json.loads(text)
        assert len(decoded) == people.row_count
        assert decoded[1] == {"FirstName": "Phil", "LastName": "Oyston"}

    def test_as_json_scalar_types(self):
        data = ReportData(
            columns=[Column("date", date), Column("revenue", Decimal), Column("sessions", int)],
            rows=[(date(2024, 1, 15), Decimal("19.99"), 42)],
        )
        assert json.loads(data.as_json()) == [
            {"date": "2024-01-15", "revenue": "19.99", "sessions": 42}
        ]

    @pytest.mark.parametrize("record_type", [PersonRow, PersonModel, PersonBag, PersonTuple])
    def test_to_objects_by_name(self, people, record_type):
        """Each record type gets rows mapped in order."""
        objects = list(people.to_objects(record_type))
        assert len(objects) == 2
        for person, expected in zip(objects, PEOPLE):
            assert person.FirstName + " " + person.LastName == expected

    def test_to_objects_positional(self, people):
        objects = list(people.to_objects(PersonTuple, by_name=False))
        assert objects[0] == PersonTuple("Dave", "Miscampbell")

    def test_to_objects_dict(self, people):
        assert list(people.to_objects(dict))[1] == {"FirstName": "Phil", "LastName": "Oyston"}

    def test_to_objects_is_lazy_and_restartable(self, people):
        """Every call gives a fresh generator over the same rows."""
        first = people.to_objects(PersonRow)
        second = people.to_objects(PersonRow)
        assert first is not second
        assert next(first).FirstName == "Dave"
        assert [p.FirstName for p in second] == ["Dave", "Phil"]
        assert [p.FirstName for p in people.to_objects(PersonRow)] == ["Dave", "Phil"]

    def test_projections_do_not_mutate(self, people):
        before = tuple(people.rows)
        people.as_json()
        people.as_records()
        list(people.to_objects(PersonRow))
        assert people.rows == before


class TestReportResult:
    def test_succeeded(self, people):
        result = ReportResult.succeeded(people, is_sampled=True)
        assert result.success
        assert result.data is people
        assert result.error is None
        assert result.is_sampled

    def test_failed(self):
        cause = RuntimeError("boom")
        result = ReportResult.failed("boom", cause)
        assert not result.success
        assert result.data is None
        assert result.error.message == "boom"
        assert result.error.cause is cause
        assert result.request is None

    def test_carries_request(self, people, request_config):
        assert ReportResult.succeeded(people, request=request_config).request is request_config
        assert ReportResult.failed("boom", request=request_config).request is request_config
