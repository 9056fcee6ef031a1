"""Fluent configurer for the reporting service credentials and options.

validation happens in build() so a service is never created with a config
that would only fail on the first query.
"""

from pathlib import Path
from typing import Any

from reportforge.errors import ConfigurationInvalidError
from reportforge.models.service import ANALYTICS_READONLY_SCOPE, VALID_SCOPES, ServiceConfiguration


class ServiceConfigurer:
    def __init__(self) -> None:
        self.service_account_id: str | None = None
        self.key_file: Path | None = None
        self.key_info: dict[str, Any] | None = None
        self.scope: str = ANALYTICS_READONLY_SCOPE
        self.application_name: str = ""
        self.gzip_enabled: bool = True

    def with_service_account(self, service_account_id: str, key_file: str | Path) -> "ServiceConfigurer":
        return self.with_service_account_id(service_account_id).with_key_file(key_file)

    def with_service_account_id(self, value: str) -> "ServiceConfigurer":
        self.service_account_id = value
        return self

    def with_key_file(self, path: str | Path) -> "ServiceConfigurer":
        """Use a service account json key file. The file must exist."""
        if not path or not Path(path).is_file():
            raise ConfigurationInvalidError(f"Unable to locate service account key file : [{path}]")
        self.key_file = Path(path)
        return self

    def with_key_info(self, info: dict[str, Any] | None) -> "ServiceConfigurer":
        """Use an already-parsed service account key. Empty is a no-op."""
        if info:
            self.key_info = dict(info)
        return self

    def with_scope(self, value: str | None) -> "ServiceConfigurer":
        self.scope = value if value and value.strip() else ANALYTICS_READONLY_SCOPE
        return self

    def with_application_name(self, value: str | None) -> "ServiceConfigurer":
        if value and value.strip():
            self.application_name = value
        return self

    def with_gzip_enabled(self, value: bool = True) -> "ServiceConfigurer":
        self.gzip_enabled = value
        return self

    def build(self) -> ServiceConfiguration:
        problem = self._validate()
        if problem:
            raise ConfigurationInvalidError(
                f"Invalid Google Analytics service configuration - {problem}"
            )
        return ServiceConfiguration(
            service_account_id=self.service_account_id,
            key_file=self.key_file,
            key_info=self.key_info,
            scope=self.scope,
            application_name=self.application_name,
            gzip_enabled=self.gzip_enabled,
        )

    def _validate(self) -> str | None:
        if not self.scope or not self.scope.strip():
            self.scope = ANALYTICS_READONLY_SCOPE
        if self.scope not in VALID_SCOPES:
            return f"Invalid analytics scope : [{self.scope}]"
        if not self.service_account_id or not self.service_account_id.strip():
            return "No service account id specified, use .with_service_account()"
        if self.key_file is None and not self.key_info:
            return "No service account key specified, use .with_key_file() or .with_key_info()"
        return None
