"""Staged fluent builder for report requests.

the stages make the required bits impossible to skip:

    RequestBuilder().with_profile_id("12345")      -> DateRangeStage
        .for_date_range(date(2024, 1, 1))          -> MetricsStage
        .with_metrics("sessions", "users")         -> RequestConfigurer
        .with_dimensions("date")
        .filter_by("country", "==", "Germany")     -> CompositeFilterConfigurer
        .and_filter_by("sessions", ">", "10")
        .sort_by("sessions", descending=True)
        .build()                                   -> RequestConfiguration

every stage is a thin view over one shared _RequestState, so a stage object
handed back to the caller keeps working on the same request.
"""

from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import date, datetime
from pathlib import Path
from typing import Any, TextIO

from reportforge.builder.grammar import append_term, build_filter_term, build_sort_term
from reportforge.errors import InvalidArgumentError, OutOfRangeError
from reportforge.metadata import FilterOperator, remove_prefix
from reportforge.models.request import (
    DEFAULT_MAX_RESULTS,
    MAX_MAX_RESULTS,
    MIN_MAX_RESULTS,
    RequestConfiguration,
)
from reportforge.parser.loader import load_request


def _to_date(value: date | datetime | str) -> date:
    """Accept date, datetime or an iso string."""
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    try:
        return date.fromisoformat(value)
    except (TypeError, ValueError) as e:
        raise InvalidArgumentError(f"Not an ISO-8601 date: {value!r}") from e


@dataclass
class _RequestState:
    """Mutable working state shared by all stages of one builder."""

    profile_id: str | None = None
    start_date: date | None = None
    end_date: date = field(default_factory=date.today)
    metrics: list[str] = field(default_factory=list)
    dimensions: list[str] = field(default_factory=list)
    filter: str | None = None
    sort: str | None = None
    segment: str | None = None
    max_results: int = DEFAULT_MAX_RESULTS

    @classmethod
    def from_configuration(cls, config: RequestConfiguration) -> "_RequestState":
        return cls(
            profile_id=config.profile_id,
            start_date=config.start_date,
            end_date=config.end_date,
            metrics=list(config.metrics),
            dimensions=list(config.dimensions),
            filter=config.filter,
            sort=config.sort,
            segment=config.segment,
            max_results=config.max_results,
        )

    def freeze(self) -> RequestConfiguration:
        # the stages guarantee these for normal use - this catches a configuring
        # function that stopped half way through
        if self.profile_id is None:
            raise InvalidArgumentError("No profile id specified, use .with_profile_id()")
        if self.start_date is None:
            raise InvalidArgumentError("No date range specified, use .for_date_range()")
        return RequestConfiguration(
            profile_id=self.profile_id,
            start_date=self.start_date,
            end_date=self.end_date,
            metrics=tuple(self.metrics),
            dimensions=tuple(self.dimensions),
            filter=self.filter,
            sort=self.sort,
            segment=self.segment,
            max_results=self.max_results,
        )


class _Stage:
    def __init__(self, state: _RequestState) -> None:
        self._state = state


class RequestBuilder(_Stage):
    """Entry point: a fresh request needs a profile id first."""

    def __init__(self) -> None:
        super().__init__(_RequestState())

    def with_profile_id(self, value: str) -> "DateRangeStage":
        """Set the view/profile id. A leading "ga:" is stripped."""
        if not value or not str(value).strip():
            raise InvalidArgumentError("profile id must be specified")
        self._state.profile_id = remove_prefix(str(value).strip())
        return DateRangeStage(self._state)

    @classmethod
    def from_configuration(cls, config: RequestConfiguration) -> "RequestConfigurer":
        """Reopen a frozen configuration for further changes."""
        return RequestConfigurer(_RequestState.from_configuration(config))

    @classmethod
    def load_from(cls, path: str | Path) -> "RequestConfigurer":
        """Import a request exported with export_to, ready for further changes."""
        return cls.from_configuration(load_request(path))


class DateRangeStage(_Stage):
    def for_date_range(
        self, start_date: date | datetime | str, end_date: date | datetime | str | None = None
    ) -> "MetricsStage":
        """Set the report window, both ends inclusive. end_date defaults to today."""
        start = _to_date(start_date)
        end = _to_date(end_date) if end_date is not None else date.today()
        if start > end:
            raise OutOfRangeError("startDate must be less than or equal to endDate")
        self._state.start_date = start
        self._state.end_date = end
        return MetricsStage(self._state)


class MetricsStage(_Stage):
    def with_metrics(self, *metrics: str) -> "RequestConfigurer":
        """Set the metrics to query, in output column order."""
        self._state.metrics = [remove_prefix(m) for m in metrics]
        return RequestConfigurer(self._state)


class RequestConfigurer(_Stage):
    """General stage - everything optional, any order, then build()."""

    def with_dimensions(self, *dimensions: str) -> "RequestConfigurer":
        """Set the dimensions to break the metrics down by (replaces any previous)."""
        self._state.dimensions = [remove_prefix(d) for d in dimensions]
        return self

    def filter_by(
        self, field: str, operator: str | FilterOperator, value: str
    ) -> "CompositeFilterConfigurer":
        """Start a filter expression; chain and_filter_by/or_filter_by to extend it."""
        self._state.filter = build_filter_term(field, operator, value)
        return CompositeFilterConfigurer(self._state)

    def with_custom_filter(self, filter_expression: str) -> "RequestConfigurer":
        """Use filter_expression verbatim, replacing whatever was built so far."""
        self._state.filter = filter_expression
        return self

    def sort_by(self, field: str, descending: bool = False) -> "RequestConfigurer":
        """Add a sort key. Repeated calls sort by each key in call order."""
        self._state.sort = append_term(self._state.sort, ",", build_sort_term(field, descending))
        return self

    def custom(self, configure: Callable[["CustomConfigurer"], Any]) -> "RequestConfigurer":
        """Escape hatch for direct access to segment/filter/sort/max results."""
        configure(CustomConfigurer(self._state))
        return self

    def export_to(self, target: TextIO | str | Path) -> None:
        """Export the request as it stands to a json stream or file."""
        self.build().export_to(target)

    def build(self) -> RequestConfiguration:
        return self._state.freeze()


class CompositeFilterConfigurer(RequestConfigurer):
    """General stage with a filter in progress.

    terms are appended to one flat string with no grouping:
    filter_by(a).and_filter_by(b).or_filter_by(c) is "a;b,c".
    """

    def and_filter_by(
        self, field: str, operator: str | FilterOperator, value: str
    ) -> "CompositeFilterConfigurer":
        term = build_filter_term(field, operator, value)
        self._state.filter = append_term(self._state.filter, FilterOperator.AND, term)
        return self

    def or_filter_by(
        self, field: str, operator: str | FilterOperator, value: str
    ) -> "CompositeFilterConfigurer":
        term = build_filter_term(field, operator, value)
        self._state.filter = append_term(self._state.filter, FilterOperator.OR, term)
        return self


class CustomConfigurer(_Stage):
    """Direct setters passed to RequestConfigurer.custom().

    empty values are ignored, so callers can pass optional settings straight through.
    """

    def segment(self, value: str | None) -> "CustomConfigurer":
        if value and value.strip():
            self._state.segment = value
        return self

    def filter(self, value: str | None) -> "CustomConfigurer":
        if value and value.strip():
            self._state.filter = value
        return self

    def sort(self, value: str | None) -> "CustomConfigurer":
        if value and value.strip():
            self._state.sort = value
        return self

    def max_results(self, value: int = DEFAULT_MAX_RESULTS) -> "CustomConfigurer":
        if value < MIN_MAX_RESULTS or value > MAX_MAX_RESULTS:
            raise OutOfRangeError(
                f"max results must be between {MIN_MAX_RESULTS} and {MAX_MAX_RESULTS}"
            )
        self._state.max_results = value
        return self


def configure_request(configure: Callable[[RequestBuilder], Any]) -> RequestConfiguration:
    """Run a configuring function against a fresh builder and freeze the result.

    every stage shares the builder's state, so whatever stage the function
    returns (or nothing at all) the request is frozen from the start.
    """
    builder = RequestBuilder()
    configure(builder)
    return builder._state.freeze()
