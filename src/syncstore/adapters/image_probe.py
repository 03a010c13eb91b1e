"""HEAD-request probe for product image URLs."""

from __future__ import annotations

import asyncio
from logging import getLogger
from typing import TYPE_CHECKING

import httpx

from syncstore.adapters.http_resilience import ResilientClient
from syncstore.domain.ports import ImageProbeResult

if TYPE_CHECKING:
    from collections.abc import Callable, Sequence

    from syncstore.config.http_resilience import ResilienceConfig

log = getLogger(__name__)

DEFAULT_PROBE_CONCURRENCY = 10


class HttpImageProbe:
    """Check image URLs with bounded concurrency; each URL reports its own failure."""

    def __init__(
        self,
        *,
        resilience: ResilienceConfig,
        concurrency: int = DEFAULT_PROBE_CONCURRENCY,
        client_factory: Callable[[ResilienceConfig], ResilientClient] | None = None,
    ) -> None:
        if concurrency <= 0:
            raise ValueError("concurrency must be positive")
        self._resilience = resilience
        self._concurrency = concurrency
        self._client_factory = client_factory or ResilientClient

    def probe(self, urls: Sequence[str]) -> list[ImageProbeResult]:
        if not urls:
            return []
        return asyncio.run(self._probe_async(urls))

    async def _probe_async(self, urls: Sequence[str]) -> list[ImageProbeResult]:
        semaphore = asyncio.Semaphore(self._concurrency)
        async with self._client_factory(self._resilience) as client:

            async def check(url: str) -> ImageProbeResult:
                async with semaphore:
                    return await _probe_one(client, url)

            return list(await asyncio.gather(*(check(url) for url in urls)))


async def _probe_one(client: ResilientClient, url: str) -> ImageProbeResult:
    try:
        response = await client.head(url)
    except (httpx.HTTPError, httpx.InvalidURL) as exc:
        issue = str(exc) or type(exc).__name__
        log.debug("Image probe failed for %s: %s", url, issue)
        return ImageProbeResult(url=url, reachable=False, issue=issue)

    if response.is_success:
        return ImageProbeResult(url=url, reachable=True, status_code=response.status_code)
    return ImageProbeResult(
        url=url,
        reachable=False,
        status_code=response.status_code,
        issue=f"HTTP {response.status_code}",
    )
