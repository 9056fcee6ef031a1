"""Pytest fixtures for ReportForge tests."""

import json
from datetime import date
from pathlib import Path

import pytest

from reportforge.client import ReportingService
from reportforge.models.report import Column, ColumnHeader, Page, ReportData
from reportforge.models.request import PageRequest, RequestConfiguration


class FakeTransport:
    """In-memory transport that hands out canned pages and records requests."""

    def __init__(self, pages: list[Page] | None = None, error: Exception | None = None) -> None:
        self.pages = list(pages or [])
        self.error = error
        self.requests: list[PageRequest] = []

    async def fetch_page(self, request: PageRequest) -> Page:
        self.requests.append(request)
        if self.error is not None:
            raise self.error
        if not self.pages:
            raise AssertionError("no more pages queued")
        return self.pages.pop(0)


HEADERS = [
    ColumnHeader(name="ga:date"),
    ColumnHeader(name="ga:country"),
    ColumnHeader(name="ga:sessions", kind="INTEGER"),
    ColumnHeader(name="ga:transactionRevenue", kind="CURRENCY"),
]


def make_page(rows: list[list[str]], more: bool = False, sampled: bool = False) -> Page:
    return Page(rows=rows, column_headers=HEADERS, more_available=more, sampled=sampled)


@pytest.fixture
def first_page() -> Page:
    return make_page(
        [
            ["20240115", "Germany", "42", "19.99"],
            ["20240116", "France", "17", "0.00"],
        ],
        more=True,
    )


@pytest.fixture
def second_page() -> Page:
    return make_page([["20240117", "Spain", "8", "5.50"]])


@pytest.fixture
def request_config() -> RequestConfiguration:
    return RequestConfiguration(
        profile_id="12345",
        start_date=date(2024, 1, 1),
        end_date=date(2024, 1, 31),
        metrics=("sessions", "transactionRevenue"),
        dimensions=("date", "country"),
    )


@pytest.fixture
def fake_transport(first_page: Page, second_page: Page) -> FakeTransport:
    return FakeTransport([first_page, second_page])


@pytest.fixture
def service(fake_transport: FakeTransport) -> ReportingService:
    return ReportingService(transport=fake_transport)


@pytest.fixture
def people() -> ReportData:
    """Two-column table of names, split into first and last."""
    return ReportData(
        columns=[Column("FirstName", str), Column("LastName", str)],
        rows=[("Dave", "Miscampbell"), ("Phil", "Oyston")],
    )


@pytest.fixture
def key_file(tmp_path: Path) -> Path:
    """A service account key file - contents don't matter until a token is needed."""
    path = tmp_path / "key.json"
    path.write_text(json.dumps({"type": "service_account", "client_email": "svc@example.com"}))
    return path


@pytest.fixture
def service_yaml(tmp_path: Path, key_file: Path) -> Path:
    path = tmp_path / "reporting.yaml"
    path.write_text(
        "reporting:\n"
        "  service_account_id: svc@example.com\n"
        f"  key_file: {key_file.name}\n"
        "  application_name: ReportForge Tests\n"
        "  gzip_enabled: false\n"
    )
    return path
