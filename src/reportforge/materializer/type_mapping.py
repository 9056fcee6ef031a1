"""Column type inference and page conversion.

the api sends every cell as a string and tells us a declared kind per metric
column. we map that kind to a python type and convert cells on the way in, so
an INTEGER column holding "42" comes out as 42.
"""

from datetime import date, datetime
from decimal import Decimal
from typing import Any

from reportforge.metadata import Dimensions, remove_prefix
from reportforge.models.report import Column, ColumnHeader, Page, ReportData

WIRE_DATE_FORMAT = "%Y%m%d"

# declared kind (lowercased) -> python type. float and percent are what the v4
# api actually declares for non-integer metrics, so they sit with double
KIND_TYPES: dict[str, type] = {
    "integer": int,
    "double": float,
    "float": float,
    "percent": float,
    "currency": Decimal,
    "time": float,
}


def infer_column_type(header: ColumnHeader) -> type:
    """Map a declared column kind to a python type.

    anything without a known kind is a string, except the date dimension,
    which matches with or without its ga: prefix.
    """
    kind = header.kind.lower()
    if kind in KIND_TYPES:
        return KIND_TYPES[kind]
    if remove_prefix(header.name.lower()) == Dimensions.DATE.lower():
        return date
    return str


def parse_wire_date(value: str) -> date:
    """Parse the api's fixed yyyyMMdd date format."""
    if len(value) != 8 or not value.isdigit():
        raise ValueError(f"Expected an 8 digit yyyyMMdd date, got {value!r}")
    return datetime.strptime(value, WIRE_DATE_FORMAT).date()


def convert_cell(value: Any, column_type: type) -> Any:
    """Convert one raw cell to column_type. None passes through untouched."""
    if value is None:
        return None
    if column_type is date:
        return parse_wire_date(str(value))
    if column_type is str:
        return value if isinstance(value, str) else str(value)
    return column_type(value)


def page_to_report_data(page: Page) -> ReportData:
    """Convert a raw page into a typed ReportData.

    column names lose their ga: prefix here. a row with the wrong number of
    cells raises ValueError - that's a broken response, not something to patch up.
    """
    columns = [
        Column(name=remove_prefix(header.name), type=infer_column_type(header))
        for header in page.column_headers
    ]

    rows = []
    for index, raw in enumerate(page.rows):
        if len(raw) != len(columns):
            raise ValueError(
                f"Row {index} has {len(raw)} cells but the page declares {len(columns)} columns"
            )
        rows.append(tuple(convert_cell(v, c.type) for v, c in zip(raw, columns)))

    return ReportData(columns=columns, rows=rows)
