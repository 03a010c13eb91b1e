"""Async HTTP client with retries and an optional rate limit."""

from __future__ import annotations

from logging import getLogger
from typing import TYPE_CHECKING

import httpx
from aiolimiter import AsyncLimiter
from httpx_retries import Retry, RetryTransport

if TYPE_CHECKING:
    from types import TracebackType

    from syncstore.config.http_resilience import ResilienceConfig, RetryPolicy

log = getLogger(__name__)

RETRYABLE_METHODS = ("HEAD", "GET")


def build_retry(policy: RetryPolicy) -> Retry:
    return Retry(
        total=policy.total,
        backoff_factor=policy.backoff_factor,
        max_backoff_wait=policy.max_backoff_wait,
        respect_retry_after_header=policy.respect_retry_after_header,
        allowed_methods=RETRYABLE_METHODS,
        status_forcelist=tuple(policy.status_forcelist),
        retry_on_exceptions=policy.retry_on_exceptions,
    )


class ResilientClient:
    """``httpx.AsyncClient`` behind a retrying transport.

    ``transport`` replaces the network layer underneath the retries; tests pass an
    :class:`httpx.MockTransport` here.
    """

    def __init__(
        self,
        config: ResilienceConfig,
        *,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.config = config
        self._limiter = (
            AsyncLimiter(config.ratelimit.max_calls, config.ratelimit.per_seconds)
            if config.ratelimit
            else None
        )
        network = transport or httpx.AsyncHTTPTransport(
            limits=httpx.Limits(max_connections=config.max_connections)
        )
        self._client = httpx.AsyncClient(
            transport=RetryTransport(transport=network, retry=build_retry(config.retry)),
            timeout=config.timeout_seconds,
            follow_redirects=config.follow_redirects,
            headers=config.headers(),
        )
        log.debug(
            "HTTP client %s ready (timeout=%ss, retries=%s)",
            config.name,
            config.timeout_seconds,
            config.retry.total,
        )

    async def __aenter__(self) -> ResilientClient:
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._client.aclose()

    async def head(self, url: str) -> httpx.Response:
        return await self._send("HEAD", url)

    async def get(self, url: str) -> httpx.Response:
        return await self._send("GET", url)

    async def _send(self, method: str, url: str) -> httpx.Response:
        if self._limiter is None:
            return await self._client.request(method, url)
        async with self._limiter:
            return await self._client.request(method, url)
