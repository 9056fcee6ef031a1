"""The transport boundary.

anything that can turn a PageRequest into a Page can back a ReportingService -
the http transport in production, an in-memory fake in tests.
"""

from typing import Protocol, runtime_checkable

from reportforge.models.report import Page
from reportforge.models.request import PageRequest


@runtime_checkable
class ReportingTransport(Protocol):
    async def fetch_page(self, request: PageRequest) -> Page:
        """Fetch one page. Raise on any transport or api error."""
        ...
