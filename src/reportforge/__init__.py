"""ReportForge - a fluent query builder and result materializer for Google Analytics reporting."""

from reportforge.builder.request_builder import RequestBuilder, configure_request
from reportforge.builder.service_configurer import ServiceConfigurer
from reportforge.client import ReportingService
from reportforge.errors import (
    ConfigurationInvalidError,
    InvalidArgumentError,
    NotFoundError,
    OutOfRangeError,
    QueryFailedError,
    ReportingError,
)
from reportforge.metadata import Dimensions, FilterOperator, Metrics, remove_prefix, with_prefix
from reportforge.models import (
    Column,
    ReportData,
    ReportError,
    ReportResult,
    RequestConfiguration,
    ServiceConfiguration,
)

__all__ = [
    "Column",
    "ConfigurationInvalidError",
    "Dimensions",
    "FilterOperator",
    "InvalidArgumentError",
    "Metrics",
    "NotFoundError",
    "OutOfRangeError",
    "QueryFailedError",
    "ReportData",
    "ReportError",
    "ReportResult",
    "ReportingError",
    "ReportingService",
    "RequestBuilder",
    "RequestConfiguration",
    "ServiceConfiguration",
    "ServiceConfigurer",
    "configure_request",
    "remove_prefix",
    "with_prefix",
]
