"""Pydantic models and result types for ReportForge."""

from reportforge.models.report import (
    Column,
    ColumnHeader,
    Page,
    ReportData,
    ReportError,
    ReportResult,
)
from reportforge.models.request import PageRequest, RequestConfiguration
from reportforge.models.service import ServiceConfiguration

__all__ = [
    "Column",
    "ColumnHeader",
    "Page",
    "PageRequest",
    "ReportData",
    "ReportError",
    "ReportResult",
    "RequestConfiguration",
    "ServiceConfiguration",
]
