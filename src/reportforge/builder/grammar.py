"""Filter and sort expression grammar.

filters and sorts travel as single flat strings ("ga:country==US;ga:sessions>10",
"-ga:sessions,ga:date"). these helpers build one term at a time and join terms;
composition is plain concatenation with no grouping, so mixing AND and OR in one
filter gets whatever precedence the api assigns to ";" and ",".
"""

from enum import Enum

from reportforge.errors import InvalidArgumentError
from reportforge.metadata import FilterOperator, with_prefix


def _text(value: str | Enum | None) -> str:
    # str-mixin enums format as "FilterOperator.EQUALS" under some pythons
    if isinstance(value, Enum):
        return str(value.value)
    return "" if value is None else str(value)


def _blank(value: str) -> bool:
    return not value or value.isspace()


def build_filter_term(field: str, operator: str | FilterOperator, value: str) -> str:
    """Build a single filter term, e.g. ("country", "==", "US") -> "ga:country==US".

    value is not escaped - commas, semicolons and backslashes are the caller's problem.
    """
    field, op, value = _text(field), _text(operator), _text(value)
    if _blank(field):
        raise InvalidArgumentError("filter field must be specified, see reportforge.metadata")
    if _blank(op):
        raise InvalidArgumentError(
            "filter operator must be specified, see reportforge.metadata.FilterOperator"
        )
    if _blank(value):
        raise InvalidArgumentError("filter value must be specified")
    return with_prefix(field) + op + value


def build_sort_term(field: str, descending: bool = False) -> str:
    """Build a single sort term, "-" prefixed when descending."""
    field = _text(field)
    if _blank(field):
        raise InvalidArgumentError("sort field must be specified, see reportforge.metadata")
    return ("-" if descending else "") + with_prefix(field)


def append_term(expression: str | None, separator: str | FilterOperator, term: str) -> str:
    """Append term to an existing flat expression, or start a new one."""
    if expression is None or _blank(expression):
        return term
    return expression + _text(separator) + term
