from __future__ import annotations

from typing import Any, Mapping

import httpx

from yaml_source.config import Settings
from yaml_source.domain.ports.fetcher import DataFetcherProtocol
from yaml_source.errors import ConfigurationError
from yaml_source.infra.fetchers.file_fetcher import FileDataFetcher
from yaml_source.infra.fetchers.http_fetcher import HttpDataFetcher

DEFAULT_FETCHER = "http"


def _basic_credentials(configuration: Mapping[str, Any]) -> tuple[str | None, str | None]:
    auth = configuration.get("authentication")
    if auth is None:
        return None, None
    if not isinstance(auth, Mapping):
        raise ConfigurationError("'authentication' must be a mapping", option="authentication")
    plugin = auth.get("plugin", "basic")
    if plugin != "basic":
        raise ConfigurationError(f"Unsupported authentication plugin: {plugin}", option="authentication")
    return auth.get("username"), auth.get("password")


def create_fetcher(
    configuration: Mapping[str, Any],
    settings: Settings | None = None,
    transport: httpx.BaseTransport | None = None,
) -> DataFetcherProtocol:
    """
    Назначение:
        Создаёт fetcher по ключу data_fetcher_plugin (http|file).

    Поведение:
        - Неизвестный плагин -> ConfigurationError.
        - Параметры HTTP (timeout/retries/TLS) берутся из Settings.
    """
    settings = settings or Settings()
    plugin = configuration.get("data_fetcher_plugin") or DEFAULT_FETCHER

    if plugin == "file":
        return FileDataFetcher(baseDir=configuration.get("base_dir"))

    if plugin == "http":
        headers = configuration.get("headers") or {}
        if not isinstance(headers, Mapping):
            raise ConfigurationError("'headers' must be a mapping", option="headers")
        username, password = _basic_credentials(configuration)
        return HttpDataFetcher(
            headers={str(k): str(v) for k, v in headers.items()},
            username=username,
            password=password,
            timeoutSeconds=settings.timeout_seconds,
            tlsSkipVerify=settings.tls_skip_verify,
            caFile=settings.ca_file,
            retries=settings.retries,
            retryBackoffSeconds=settings.retry_backoff_seconds,
            transport=transport,
        )

    raise ConfigurationError(f"Unknown data_fetcher_plugin: {plugin}", option="data_fetcher_plugin")
