"""Exception hierarchy for ReportForge.

builder-time problems raise one of these straight away. query-time problems
never raise - they come back as a failed ReportResult, with the exception
kept as the cause.
"""


class ReportingError(Exception):
    """Base class for all ReportForge errors."""


class InvalidArgumentError(ReportingError, ValueError):
    """A filter/sort term or an imported document is malformed."""


class OutOfRangeError(ReportingError, ValueError):
    """A date range is inverted or max results is outside [1, 10000]."""


class NotFoundError(ReportingError, FileNotFoundError):
    """A configuration file to import does not exist."""


class ConfigurationInvalidError(ReportingError):
    """Service configuration (credentials, scope) failed validation."""


class QueryFailedError(ReportingError):
    """The reporting api returned something we can't turn into a table.

    only ever seen as ReportResult.error.cause - the client catches it.
    """
