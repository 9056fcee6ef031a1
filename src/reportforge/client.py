"""ReportingService - the main interface for running report queries.

two-step like any query layer: freeze the request, then page through the
results. the paging loop is strictly sequential (each page's cursor depends on
the previous page) and everything that goes wrong in it comes back as a failed
ReportResult instead of an exception.
"""

import asyncio
import logging
from collections.abc import Callable
from pathlib import Path
from typing import Any

from reportforge.builder.request_builder import RequestBuilder, configure_request
from reportforge.builder.service_configurer import ServiceConfigurer
from reportforge.materializer.type_mapping import page_to_report_data
from reportforge.models.report import Page, ReportData, ReportResult
from reportforge.models.request import PageRequest, RequestConfiguration
from reportforge.models.service import ServiceConfiguration
from reportforge.transport.base import ReportingTransport
from reportforge.transport.http import HttpReportingTransport

logger = logging.getLogger(__name__)

ServiceSource = ServiceConfiguration | Callable[[ServiceConfigurer], Any]
RequestSource = RequestConfiguration | Callable[[RequestBuilder], Any]


class ReportingService:
    """Runs report requests against a ReportingTransport."""

    def __init__(
        self,
        configure: ServiceSource | None = None,
        *,
        transport: ReportingTransport | None = None,
    ) -> None:
        """Initialize the service.

        Args:
            configure: A ServiceConfiguration, or a function that configures a
                ServiceConfigurer. Validated here - a bad configuration raises
                ConfigurationInvalidError before any query runs.
            transport: Page transport to use. Defaults to the http transport
                built from the service configuration.
        """
        self.configuration: ServiceConfiguration | None = None
        if configure is not None or transport is None:
            self.configuration = self._build_configuration(configure)
        self.transport = transport or HttpReportingTransport(self.configuration)

    @classmethod
    def create(cls, service_account_id: str, key_file: str | Path) -> "ReportingService":
        """Shortcut for a service account id plus json key file."""
        return cls(lambda c: c.with_service_account(service_account_id, key_file))

    @staticmethod
    def _build_configuration(configure: ServiceSource | None) -> ServiceConfiguration:
        if isinstance(configure, ServiceConfiguration):
            return configure
        configurer = ServiceConfigurer()
        if configure is not None:
            configure(configurer)
        return configurer.build()

    def query(self, request: RequestSource, timeout: float | None = None) -> ReportResult:
        """Run a query and block until it completes.

        runs its own event loop, so don't call this from async code - use
        query_async there.
        """
        return asyncio.run(self.query_async(request, timeout=timeout))

    async def query_async(
        self, request: RequestSource, timeout: float | None = None
    ) -> ReportResult:
        """Run a query, following pages until done or max_results is reached.

        Args:
            request: A frozen RequestConfiguration, or a function that configures
                a RequestBuilder. Builder errors from the function are raised.
            timeout: Seconds allowed per page fetch. A timeout fails the query.

        Returns:
            ReportResult - check `success` before reading `data`.
        """
        config = self._resolve_request(request)
        try:
            data, sampled = await self._fetch_all(config, timeout)
        except Exception as e:
            logger.warning("Query for profile %s failed: %s", config.profile_id, e, exc_info=True)
            return ReportResult.failed(str(e) or e.__class__.__name__, e, request=config)

        logger.info(
            "Query for profile %s returned %d rows (sampled=%s)",
            config.profile_id,
            data.row_count,
            sampled,
        )
        return ReportResult.succeeded(data, is_sampled=sampled, request=config)

    def _resolve_request(self, request: RequestSource) -> RequestConfiguration:
        if isinstance(request, RequestConfiguration):
            return request
        return configure_request(request)

    async def _fetch_all(
        self, config: RequestConfiguration, timeout: float | None
    ) -> tuple[ReportData, bool]:
        page = await self._fetch_page(config.page_request(), timeout)
        data = page_to_report_data(page)
        sampled = page.sampled

        while page.more_available and data.row_count < config.max_results:
            cursor = str(data.row_count)
            remaining = config.max_results - data.row_count
            page = await self._fetch_page(config.page_request(cursor, remaining), timeout)
            if not page.rows:
                # "more available" with nothing in it would loop forever
                break
            data = data.concat(page_to_report_data(page))
            sampled = sampled or page.sampled

        return data, sampled

    async def _fetch_page(self, request: PageRequest, timeout: float | None) -> Page:
        logger.debug(
            "Fetching page for profile %s (cursor=%s, page_size=%d)",
            request.profile_id,
            request.page_cursor,
            request.page_size,
        )
        fetch = self.transport.fetch_page(request)
        if timeout is not None:
            page = await asyncio.wait_for(fetch, timeout)
        else:
            page = await fetch
        logger.debug("Page returned %d rows, more_available=%s", len(page.rows), page.more_available)
        return page
