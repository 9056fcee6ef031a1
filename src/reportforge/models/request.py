"""Pydantic models for report requests.

RequestConfiguration is the frozen output of the builder and the thing we
persist as json. PageRequest is what actually goes to the transport - one per
page, with the ga: prefixes put back on.
"""

import json
from datetime import date
from pathlib import Path
from typing import Any, Self, TextIO

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator, model_validator
from pydantic.alias_generators import to_camel
from pydantic_core import PydanticCustomError

from reportforge.errors import InvalidArgumentError, OutOfRangeError
from reportforge.metadata import remove_prefix, with_prefix

DEFAULT_MAX_RESULTS = 1000
MIN_MAX_RESULTS = 1
MAX_MAX_RESULTS = 10000

# fields that are left out of an export when they hold the builder default.
# endDate always goes out - "today" on export day is not "today" on import day
_EXPORT_DEFAULTS: dict[str, Any] = {
    "metrics": [],
    "dimensions": [],
    "maxResults": DEFAULT_MAX_RESULTS,
}

# pydantic error types that mean "value out of range" rather than "malformed"
_RANGE_ERRORS = {"date_range", "greater_than_equal", "less_than_equal"}


class RequestConfiguration(BaseModel):
    """An immutable, fully specified report request.

    field names are snake_case in python and camelCase in json - the json keys
    are part of the persistence format so don't rename them casually.
    """

    model_config = ConfigDict(frozen=True, alias_generator=to_camel, populate_by_name=True)

    profile_id: str
    start_date: date
    end_date: date = Field(default_factory=date.today)
    metrics: tuple[str, ...] = ()
    dimensions: tuple[str, ...] = ()
    filter: str | None = None
    sort: str | None = None
    segment: str | None = None
    max_results: int = Field(default=DEFAULT_MAX_RESULTS, ge=MIN_MAX_RESULTS, le=MAX_MAX_RESULTS)

    @field_validator("profile_id")
    @classmethod
    def _strip_profile_prefix(cls, value: str) -> str:
        return remove_prefix(value)

    @field_validator("metrics", "dimensions")
    @classmethod
    def _strip_field_prefixes(cls, value: tuple[str, ...]) -> tuple[str, ...]:
        return tuple(remove_prefix(name) for name in value)

    @model_validator(mode="after")
    def _check_date_range(self) -> Self:
        if self.start_date > self.end_date:
            raise PydanticCustomError(
                "date_range", "startDate must be less than or equal to endDate"
            )
        return self

    # --- persistence ---

    @classmethod
    def from_document(cls, document: dict[str, Any]) -> "RequestConfiguration":
        """Validate a parsed json document, mapping pydantic errors onto ours.

        absent fields fall back to the same defaults a fresh builder uses.
        """
        if not isinstance(document, dict):
            raise InvalidArgumentError("request configuration must be a json object")
        try:
            return cls.model_validate(document)
        except ValidationError as e:
            if any(err["type"] in _RANGE_ERRORS for err in e.errors()):
                raise OutOfRangeError(str(e)) from e
            raise InvalidArgumentError(f"Invalid request configuration: {e}") from e

    def to_document(self) -> dict[str, Any]:
        """Json-ready dict with default-valued fields omitted."""
        doc = self.model_dump(mode="json", by_alias=True, exclude_none=True)
        for key, default in _EXPORT_DEFAULTS.items():
            if doc.get(key) == default:
                doc.pop(key)
        return doc

    def to_json(self, indent: int | None = 2) -> str:
        return json.dumps(self.to_document(), indent=indent)

    def export_to(self, target: TextIO | str | Path) -> None:
        """Write the configuration as json to an open text stream or a file path."""
        if isinstance(target, (str, Path)):
            Path(target).write_text(self.to_json() + "\n", encoding="utf-8")
            return
        target.write(self.to_json())

    # --- transport ---

    def page_request(self, cursor: str | None = None, page_size: int | None = None) -> "PageRequest":
        """Build the transport request for one page of this report."""
        return PageRequest(
            profile_id=self.profile_id,
            start_date=self.start_date,
            end_date=self.end_date,
            metrics=[with_prefix(m) for m in self.metrics],
            dimensions=[with_prefix(d) for d in self.dimensions],
            filter=self.filter,
            sort=self.sort,
            segment=self.segment,
            page_size=page_size or self.max_results,
            page_cursor=cursor,
        )


class PageRequest(BaseModel):
    """One page request as handed to a ReportingTransport.

    metric and dimension names here are already prefixed.
    """

    model_config = ConfigDict(frozen=True)

    profile_id: str
    start_date: date
    end_date: date
    metrics: list[str]
    dimensions: list[str] = Field(default_factory=list)
    filter: str | None = None
    sort: str | None = None
    segment: str | None = None
    page_size: int = DEFAULT_MAX_RESULTS
    page_cursor: str | None = None  # offset into the full result, as a string
