"""Report pages, materialized tables and query results.

Page and ColumnHeader are the loosely-typed wire shape (everything is a string).
ReportData is the typed table we hand back to callers, with read-only
projections: the table itself, json, and arbitrary record types.

ReportResult is a tagged result - the client never raises at query time, so
callers check `success` before touching `data`.
"""

import json
from collections.abc import Iterator
from dataclasses import dataclass
from typing import Any, TypeVar

from pydantic import BaseModel, Field

from reportforge.materializer.mappers import MapperRegistry, init
from reportforge.models.request import RequestConfiguration

T = TypeVar("T")


class ColumnHeader(BaseModel):
    """A column as declared by the api - name plus its declared kind.

    dimensions come without a kind, metrics with INTEGER, CURRENCY, etc.
    """

    name: str
    kind: str = ""


class Page(BaseModel):
    """One page of raw report data from the transport."""

    rows: list[list[str]] = Field(default_factory=list)
    column_headers: list[ColumnHeader] = Field(default_factory=list)
    more_available: bool = False
    sampled: bool = False


@dataclass(frozen=True)
class Column:
    """A named, typed column of a ReportData."""

    name: str
    type: type = str


@dataclass
class ReportData:
    """An ordered set of typed columns plus positional rows.

    every row must have exactly one value per column and column names must be
    unique - both are checked up front, since a table that breaks them is a bug
    somewhere upstream rather than something a caller can recover from.
    """

    columns: tuple[Column, ...] = ()
    rows: tuple[tuple[Any, ...], ...] = ()

    def __post_init__(self) -> None:
        self.columns = tuple(self.columns)
        names = self.column_names
        if len(set(names)) != len(names):
            raise ValueError(f"Duplicate column names in report data: {names}")
        # immutable rows - as_table hands out self
        self.rows = tuple(tuple(row) for row in self.rows)
        for index, row in enumerate(self.rows):
            if len(row) != len(self.columns):
                raise ValueError(
                    f"Row {index} has {len(row)} values but the table has "
                    f"{len(self.columns)} columns"
                )

    @property
    def column_names(self) -> list[str]:
        return [c.name for c in self.columns]

    @property
    def row_count(self) -> int:
        return len(self.rows)

    def __len__(self) -> int:
        return len(self.rows)

    def concat(self, other: "ReportData") -> "ReportData":
        """Return a new table with other's rows appended.

        pages of the same report share a column set - if they don't, something
        is badly wrong and we'd rather fail than silently misalign values.
        """
        if other.column_names != self.column_names:
            raise ValueError(
                f"Cannot merge pages with different columns: "
                f"{self.column_names} vs {other.column_names}"
            )
        return ReportData(columns=self.columns, rows=self.rows + other.rows)

    # --- projections ---

    def as_table(self) -> "ReportData":
        """Identity projection - the table itself."""
        return self

    def as_records(self) -> list[dict[str, Any]]:
        """Rows as dicts keyed by column name."""
        names = self.column_names
        return [dict(zip(names, row)) for row in self.rows]

    def as_json(self, indent: int | None = None) -> str:
        """Rows as a json array of objects.

        dates come out as iso strings and decimals as strings (default=str),
        which keeps currency values exact.
        """
        return json.dumps(self.as_records(), indent=indent, default=str)

    def to_objects(
        self,
        record_type: type[T],
        by_name: bool = True,
        registry: MapperRegistry | None = None,
    ) -> Iterator[T]:
        """Lazily map each row onto record_type, in row order.

        by_name matches column names to fields/attributes; by_name=False passes
        values positionally. every call returns a fresh generator.
        """
        if registry is None:
            registry = init(MapperRegistry())
        mapper = registry.resolve(record_type)
        names = self.column_names
        return (mapper(record_type, names, row, by_name) for row in self.rows)


@dataclass(frozen=True)
class ReportError:
    """Why a query failed - a readable message and the original exception."""

    message: str
    cause: BaseException | None = None


@dataclass(frozen=True)
class ReportResult:
    """Outcome of a single report query.

    data is set iff success, error is set iff not. is_sampled is true when the
    api reported sampling on any page merged into data. request is the
    configuration that was run, so a batch of results can be told apart.
    """

    success: bool
    data: ReportData | None = None
    error: ReportError | None = None
    is_sampled: bool = False
    request: RequestConfiguration | None = None

    @classmethod
    def succeeded(
        cls,
        data: ReportData,
        is_sampled: bool = False,
        request: RequestConfiguration | None = None,
    ) -> "ReportResult":
        return cls(success=True, data=data, is_sampled=is_sampled, request=request)

    @classmethod
    def failed(
        cls,
        message: str,
        cause: BaseException | None = None,
        request: RequestConfiguration | None = None,
    ) -> "ReportResult":
        return cls(success=False, error=ReportError(message=message, cause=cause), request=request)
