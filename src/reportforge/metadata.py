"""Field names, operators and prefix handling for the Core Reporting grammar.

every metric and dimension on the wire carries a "ga:" namespace prefix.
we store names without it (nicer column names, nicer json) and put it back
when talking to the api. nothing here validates names against the remote
schema - the constants are just there so callers don't have to remember them.
"""

from enum import Enum

PREFIX = "ga:"


def with_prefix(name: str) -> str:
    """Prepend the namespace prefix unless it's already there."""
    if name.startswith(PREFIX):
        return name
    return PREFIX + name


def remove_prefix(name: str) -> str:
    """Strip the namespace prefix if present, otherwise return name unchanged.

    a doubled prefix ("ga:ga:date") is stripped completely, so this stays idempotent.
    """
    while name.startswith(PREFIX):
        name = name[len(PREFIX):]
    return name


class FilterOperator(str, Enum):
    """Operators understood by the filter expression grammar.

    AND/OR are separators between terms rather than comparisons. the grammar
    has no parentheses, so "a;b,c" means whatever the api says it means
    (OR binds tighter than AND there).
    """

    EQUALS = "=="
    NOT_EQUALS = "!="
    GREATER_THAN = ">"
    LESS_THAN = "<"
    GREATER_THAN_OR_EQUAL = ">="
    LESS_THAN_OR_EQUAL = "<="
    CONTAINS = "=@"
    NOT_CONTAINS = "!@"
    REGEX = "=~"
    NOT_REGEX = "!~"

    AND = ";"
    OR = ","


class Dimensions:
    """Commonly used dimension names (unprefixed)."""

    DATE = "date"
    YEAR = "year"
    MONTH = "month"
    WEEK = "week"
    HOUR = "hour"
    COUNTRY = "country"
    CITY = "city"
    BROWSER = "browser"
    DEVICE_CATEGORY = "deviceCategory"
    SOURCE = "source"
    MEDIUM = "medium"
    SOURCE_MEDIUM = "sourceMedium"
    PAGE_PATH = "pagePath"
    PAGE_TITLE = "pageTitle"
    LANDING_PAGE_PATH = "landingPagePath"
    SEGMENT = "segment"


class Metrics:
    """Commonly used metric names (unprefixed)."""

    SESSIONS = "sessions"
    USERS = "users"
    NEW_USERS = "newUsers"
    PAGEVIEWS = "pageviews"
    UNIQUE_PAGEVIEWS = "uniquePageviews"
    BOUNCE_RATE = "bounceRate"
    BOUNCES = "bounces"
    AVG_SESSION_DURATION = "avgSessionDuration"
    SESSION_DURATION = "sessionDuration"
    TRANSACTIONS = "transactions"
    TRANSACTION_REVENUE = "transactionRevenue"
    GOAL_COMPLETIONS_ALL = "goalCompletionsAll"
