from __future__ import annotations

import time
from typing import Mapping

import httpx

from yaml_source.domain.error_codes import ErrorCode
from yaml_source.errors import FetchError


class HttpDataFetcher:
    def __init__(
        self,
        headers: Mapping[str, str] | None = None,
        username: str | None = None,
        password: str | None = None,
        timeoutSeconds: float = 20.0,
        tlsSkipVerify: bool = False,
        caFile: str | None = None,
        retries: int = 3,
        retryBackoffSeconds: float = 0.5,
        transport: httpx.BaseTransport | None = None,
    ):
        """
        Назначение:
            Получение содержимого источника по HTTP(S) с простой политикой ретраев.
        Контракт:
            - headers добавляются к каждому запросу.
            - username/password включают basic-аутентификацию.
            - retries/retryBackoffSeconds управляют повторными попытками (429/5xx/сеть).
        """
        verify: bool | str = True
        if tlsSkipVerify:
            verify = False
        elif caFile:
            verify = caFile

        auth = None
        if username:
            auth = httpx.BasicAuth(username, password or "")

        self.headers = dict(headers or {})
        self.retries = retries
        self.retryBackoffSeconds = retryBackoffSeconds
        self.retry_attempts = 0

        self.client = httpx.Client(
            timeout=timeoutSeconds,
            verify=verify,
            auth=auth,
            transport=transport,
            follow_redirects=True,
        )

    def getRetryAttempts(self) -> int:
        """Возвращает количество выполненных повторных попыток."""
        return self.retry_attempts

    def _should_retry(self, resp: httpx.Response) -> bool:
        """Решает, стоит ли повторить запрос (429 или 5xx)."""
        if resp.status_code == 429:
            return True
        if 500 <= resp.status_code <= 599:
            return True
        return False

    def _sleep_backoff(self, attempt: int) -> None:
        """Задержка с экспоненциальным ростом для ретраев."""
        delay = self.retryBackoffSeconds * (2 ** attempt)
        time.sleep(delay)

    def get_response_content(self, url: str) -> bytes:
        """GET с ретраями по 429/5xx и сетевым ошибкам; тело ответа 200 или FetchError."""
        attempt = 0
        while True:
            try:
                resp = self.client.get(url, headers=self.headers)
            except (httpx.TimeoutException, httpx.TransportError) as exc:
                if attempt >= self.retries:
                    raise FetchError(
                        f"Network error fetching {url}",
                        url=url,
                        code=ErrorCode.NETWORK_ERROR,
                    ) from exc
                self.retry_attempts += 1
                self._sleep_backoff(attempt)
                attempt += 1
                continue

            if resp.status_code == 200:
                return resp.content

            if self._should_retry(resp) and attempt < self.retries:
                self.retry_attempts += 1
                self._sleep_backoff(attempt)
                attempt += 1
                continue

            body_snippet = resp.text[:200] if resp.text else None
            raise FetchError(
                f"HTTP {resp.status_code} fetching {url}",
                url=url,
                status_code=resp.status_code,
                body_snippet=body_snippet,
                retryable=self._should_retry(resp),
                code=ErrorCode.HTTP_ERROR,
            )
