"""Loading and saving request and service configurations.

requests are json (they're meant to be exported, diffed and replayed).
the service configuration is yaml, same as any other hand-edited config file,
and it goes through the ServiceConfigurer so it gets the same validation as
code-built configs.
"""

import json
from pathlib import Path
from typing import Any

import yaml

from reportforge.builder.service_configurer import ServiceConfigurer
from reportforge.errors import ConfigurationInvalidError, InvalidArgumentError, NotFoundError
from reportforge.models.request import RequestConfiguration
from reportforge.models.service import ServiceConfiguration


def parse_request(document: str | dict[str, Any] | None) -> RequestConfiguration:
    """Build a RequestConfiguration from json text or an already-parsed dict."""
    if document is None:
        raise NotFoundError("No request configuration document given")
    if isinstance(document, str):
        try:
            document = json.loads(document)
        except json.JSONDecodeError as e:
            raise InvalidArgumentError(f"Request configuration is not valid json: {e}") from e
    return RequestConfiguration.from_document(document)


def load_request(path: str | Path) -> RequestConfiguration:
    """Load a request configuration exported with RequestConfiguration.export_to."""
    path = Path(path)
    if not path.is_file():
        raise NotFoundError(f"Request configuration not found: {path}")
    return parse_request(path.read_text(encoding="utf-8"))


def save_request(config: RequestConfiguration, path: str | Path) -> Path:
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    config.export_to(path)
    return path


def load_service_configuration(path: str | Path) -> ServiceConfiguration:
    """Load service credentials/options from a yaml file.

    the settings can sit at the top level or under a `reporting:` key, so the
    block can live inside a bigger application config file.
    """
    path = Path(path)
    if not path.is_file():
        raise ConfigurationInvalidError(f"Service configuration not found: {path}")

    with open(path) as f:
        try:
            data = yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            raise ConfigurationInvalidError(f"Service configuration is not valid yaml: {path}: {e}") from e

    if isinstance(data, dict):
        data = data.get("reporting", data)
    if not isinstance(data, dict):
        raise ConfigurationInvalidError(f"Service configuration must be a mapping: {path}")

    gzip_enabled = data.get("gzip_enabled", True)
    if not isinstance(gzip_enabled, bool):
        raise ConfigurationInvalidError(
            f"gzip_enabled must be true or false, got {gzip_enabled!r}: {path}"
        )

    key_file = data.get("key_file")
    if key_file is not None:
        # relative key paths are relative to the config file, not the cwd
        key_file = Path(key_file)
        if not key_file.is_absolute():
            key_file = path.parent / key_file

    configurer = (
        ServiceConfigurer()
        .with_service_account_id(data.get("service_account_id"))
        .with_scope(data.get("scope"))
        .with_application_name(data.get("application_name"))
        .with_gzip_enabled(gzip_enabled)
    )
    if key_file is not None:
        configurer.with_key_file(key_file)
    return configurer.build()
