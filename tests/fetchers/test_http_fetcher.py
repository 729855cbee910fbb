from __future__ import annotations

import base64

import httpx
import pytest

from yaml_source.config import Settings
from yaml_source.errors import FetchError
from yaml_source.infra.fetchers.factory import create_fetcher
from yaml_source.infra.fetchers.http_fetcher import HttpDataFetcher
from yaml_source.parser import YamlDataParser


def make_fetcher(transport: httpx.BaseTransport, *, retries: int = 0, **kwargs) -> HttpDataFetcher:
    return HttpDataFetcher(
        retries=retries,
        retryBackoffSeconds=0,
        transport=transport,
        **kwargs,
    )


def test_get_response_content_returns_body_and_sends_headers():
    def responder(request: httpx.Request) -> httpx.Response:
        assert request.method == "GET"
        assert request.headers["X-Feed-Token"] == "abc"
        return httpx.Response(200, text="items: []\n")

    fetcher = make_fetcher(httpx.MockTransport(responder), headers={"X-Feed-Token": "abc"})

    assert fetcher.get_response_content("https://feeds.local/data.yml") == b"items: []\n"


def test_basic_authentication_header():
    def responder(request: httpx.Request) -> httpx.Response:
        expected = base64.b64encode(b"user:pass").decode("ascii")
        assert request.headers["Authorization"] == f"Basic {expected}"
        return httpx.Response(200, text="- 1\n")

    fetcher = make_fetcher(httpx.MockTransport(responder), username="user", password="pass")

    assert fetcher.get_response_content("https://feeds.local/data.yml") == b"- 1\n"


def test_retries_on_500_and_succeeds():
    calls = {"count": 0}

    def responder(request: httpx.Request) -> httpx.Response:
        calls["count"] += 1
        if calls["count"] == 1:
            return httpx.Response(503, text="busy")
        return httpx.Response(200, text="ok: true\n")

    fetcher = make_fetcher(httpx.MockTransport(responder), retries=2)

    assert fetcher.get_response_content("https://feeds.local/data.yml") == b"ok: true\n"
    assert calls["count"] == 2
    assert fetcher.getRetryAttempts() == 1


def test_non_retryable_status_raises_fetch_error():
    def responder(request: httpx.Request) -> httpx.Response:
        return httpx.Response(404, text="no such feed")

    fetcher = make_fetcher(httpx.MockTransport(responder), retries=3)

    with pytest.raises(FetchError) as excinfo:
        fetcher.get_response_content("https://feeds.local/missing.yml")

    err = excinfo.value
    assert err.status_code == 404
    assert err.body_snippet == "no such feed"
    assert err.code == "HTTP_ERROR"
    assert fetcher.getRetryAttempts() == 0


def test_network_error_after_retries():
    def responder(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("boom", request=request)

    fetcher = make_fetcher(httpx.MockTransport(responder), retries=1)

    with pytest.raises(FetchError) as excinfo:
        fetcher.get_response_content("https://feeds.local/data.yml")

    assert excinfo.value.code == "NETWORK_ERROR"
    assert fetcher.getRetryAttempts() == 1


def test_exhausted_retries_keep_http_error_code():
    def responder(request: httpx.Request) -> httpx.Response:
        return httpx.Response(503, text="x" * 500)

    fetcher = make_fetcher(httpx.MockTransport(responder), retries=1)

    with pytest.raises(FetchError) as excinfo:
        fetcher.get_response_content("https://feeds.local/data.yml")

    err = excinfo.value
    assert err.code == "HTTP_ERROR"
    assert err.status_code == 503
    assert err.retryable is True
    assert err.body_snippet == "x" * 200
    assert fetcher.getRetryAttempts() == 1


def test_factory_builds_http_fetcher_used_by_parser():
    def responder(request: httpx.Request) -> httpx.Response:
        assert request.headers["Accept"] == "application/x-yaml"
        return httpx.Response(200, text="data:\n  - {id: 10}\n  - {id: 11}\n")

    configuration = {
        "urls": ["https://feeds.local/data.yml"],
        "ids": ["id"],
        "item_selector": "/data/",
        "fields": ["id"],
        "headers": {"Accept": "application/x-yaml"},
    }
    fetcher = create_fetcher(
        configuration,
        Settings(retries=0, retry_backoff_seconds=0),
        transport=httpx.MockTransport(responder),
    )
    parser = YamlDataParser(configuration, fetcher=fetcher)

    assert isinstance(fetcher, HttpDataFetcher)
    assert list(parser) == [{"id": 10}, {"id": 11}]
