"""Pydantic model for the reporting service configuration.

built once per ReportingService by the ServiceConfigurer, which is where the
validation lives.
"""

from pathlib import Path
from typing import Any

from pydantic import BaseModel, ConfigDict

ANALYTICS_SCOPE = "https://www.googleapis.com/auth/analytics"
ANALYTICS_READONLY_SCOPE = "https://www.googleapis.com/auth/analytics.readonly"
VALID_SCOPES = (ANALYTICS_SCOPE, ANALYTICS_READONLY_SCOPE)


class ServiceConfiguration(BaseModel):
    """Credentials and http options for talking to the reporting api."""

    model_config = ConfigDict(frozen=True)

    service_account_id: str
    key_file: Path | None = None
    key_info: dict[str, Any] | None = None  # parsed service account json key
    scope: str = ANALYTICS_READONLY_SCOPE
    application_name: str = ""
    gzip_enabled: bool = True

    @property
    def user_agent(self) -> str:
        # mirrors the google client libraries, which tag gzip-enabled agents
        if self.gzip_enabled:
            return f"{self.application_name} (gzip)".strip()
        return self.application_name
