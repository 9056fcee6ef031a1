"""Http transport for the Analytics Reporting API v4.

translates a PageRequest into a reports:batchGet document, posts it with httpx
and turns the first report of the response back into a Page. auth is a
google-auth service account credential; refreshing it is a blocking call, so
it runs in a worker thread.

no retries here - a failed call raises and the client reports the failure.
"""

import asyncio
import logging
from typing import Any

import httpx
from google.auth.transport.requests import Request
from google.oauth2 import service_account

from reportforge.errors import QueryFailedError
from reportforge.metadata import Dimensions, with_prefix
from reportforge.models.report import ColumnHeader, Page
from reportforge.models.request import PageRequest
from reportforge.models.service import ServiceConfiguration

logger = logging.getLogger(__name__)

BATCH_GET_URL = "https://analyticsreporting.googleapis.com/v4/reports:batchGet"
DEFAULT_TIMEOUT = 30.0

_SEGMENT_DIMENSION = with_prefix(Dimensions.SEGMENT)


def build_report_request(request: PageRequest) -> dict[str, Any]:
    """Translate a PageRequest into a batchGet request body."""
    dimensions = list(request.dimensions)
    report: dict[str, Any] = {
        "viewId": request.profile_id,
        "dateRanges": [
            {
                "startDate": request.start_date.isoformat(),
                "endDate": request.end_date.isoformat(),
            }
        ],
        "metrics": [{"expression": m} for m in request.metrics],
        "pageSize": request.page_size,
    }

    if request.filter:
        report["filtersExpression"] = request.filter

    if request.sort:
        report["orderBys"] = [
            {
                "fieldName": term.lstrip("-"),
                "sortOrder": "DESCENDING" if term.startswith("-") else "ASCENDING",
            }
            for term in (t.strip() for t in request.sort.split(","))
            if term
        ]

    if request.segment:
        report["segments"] = [{"segmentId": request.segment}]
        # the api rejects segmented requests without the segment dimension
        if _SEGMENT_DIMENSION not in dimensions:
            dimensions.append(_SEGMENT_DIMENSION)

    if dimensions:
        report["dimensions"] = [{"name": d} for d in dimensions]

    if request.page_cursor:
        report["pageToken"] = request.page_cursor

    return {"reportRequests": [report]}


def parse_report_response(body: dict[str, Any]) -> Page:
    """Turn the first report of a batchGet response into a Page."""
    reports = body.get("reports") if isinstance(body, dict) else None
    if not reports:
        raise QueryFailedError("Reporting api response contained no reports")
    report = reports[0]

    column_header = report.get("columnHeader") or {}
    headers = [ColumnHeader(name=name) for name in column_header.get("dimensions", [])]
    metric_entries = (column_header.get("metricHeader") or {}).get("metricHeaderEntries", [])
    headers.extend(ColumnHeader(name=e["name"], kind=e.get("type", "")) for e in metric_entries)

    data = report.get("data") or {}
    rows = []
    for row in data.get("rows", []):
        cells = list(row.get("dimensions", []))
        # one DateRangeValues per requested date range - we only ever send one
        metrics = row.get("metrics") or []
        if metrics:
            cells.extend(metrics[0].get("values", []))
        rows.append(cells)

    return Page(
        rows=rows,
        column_headers=headers,
        more_available=bool(report.get("nextPageToken")),
        sampled=bool(data.get("samplesReadCounts")) and bool(data.get("samplingSpaceSizes")),
    )


class HttpReportingTransport:
    """ReportingTransport backed by the public http api."""

    def __init__(
        self,
        configuration: ServiceConfiguration,
        credentials: Any = None,
        client: httpx.AsyncClient | None = None,
        timeout: float = DEFAULT_TIMEOUT,
        url: str = BATCH_GET_URL,
    ) -> None:
        self.configuration = configuration
        self.timeout = timeout
        self.url = url
        self._credentials = credentials  # lazy, see credentials property
        self._client = client

    @property
    def credentials(self) -> Any:
        """Service account credentials, created on first use."""
        if self._credentials is None:
            scopes = [self.configuration.scope]
            if self.configuration.key_info:
                self._credentials = service_account.Credentials.from_service_account_info(
                    self.configuration.key_info, scopes=scopes
                )
            else:
                self._credentials = service_account.Credentials.from_service_account_file(
                    str(self.configuration.key_file), scopes=scopes
                )
        return self._credentials

    async def _headers(self) -> dict[str, str]:
        credentials = self.credentials
        if not credentials.valid:
            await asyncio.to_thread(credentials.refresh, Request())

        headers = {
            "Authorization": f"Bearer {credentials.token}",
            "Accept-Encoding": "gzip" if self.configuration.gzip_enabled else "identity",
        }
        if self.configuration.user_agent:
            headers["User-Agent"] = self.configuration.user_agent
        return headers

    async def fetch_page(self, request: PageRequest) -> Page:
        body = build_report_request(request)
        headers = await self._headers()

        logger.debug(
            "POST %s view=%s cursor=%s page_size=%s",
            self.url,
            request.profile_id,
            request.page_cursor,
            request.page_size,
        )

        # a client per call unless one was injected - the sync entry point runs
        # each query in its own event loop and pooled connections can't cross loops
        if self._client is not None:
            response = await self._client.post(self.url, json=body, headers=headers)
        else:
            async with httpx.AsyncClient(timeout=self.timeout) as client:
                response = await client.post(self.url, json=body, headers=headers)

        logger.debug("Reporting api responded %s", response.status_code)
        response.raise_for_status()

        try:
            payload = response.json()
        except ValueError as e:
            raise QueryFailedError(f"Reporting api returned invalid json: {e}") from e
        return parse_report_response(payload)
