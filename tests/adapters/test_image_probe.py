from __future__ import annotations

import asyncio
from collections.abc import Callable  # noqa: TC003

import httpx
import pytest

from syncstore.adapters.http_resilience import ResilientClient
from syncstore.adapters.image_probe import HttpImageProbe
from syncstore.config.http_resilience import RateLimit, ResilienceConfig, RetryPolicy

NO_RETRY = ResilienceConfig(name="images", retry=RetryPolicy.disabled())


def _mock_client_factory(
    handler: Callable[[httpx.Request], httpx.Response],
) -> Callable[[ResilienceConfig], ResilientClient]:
    def factory(resilience: ResilienceConfig) -> ResilientClient:
        return ResilientClient(resilience, transport=httpx.MockTransport(handler))

    return factory


def _handler(request: httpx.Request) -> httpx.Response:
    assert request.method == "HEAD"
    if request.url.path.endswith("missing.jpg"):
        return httpx.Response(404)
    if request.url.host == "offline.example.com":
        raise httpx.ConnectError("connection refused", request=request)
    return httpx.Response(200)


def test_probe_reports_each_url() -> None:
    probe = HttpImageProbe(
        resilience=NO_RETRY,
        concurrency=2,
        client_factory=_mock_client_factory(_handler),
    )
    urls = [
        "https://cdn.example.com/ok.jpg",
        "https://cdn.example.com/missing.jpg",
        "https://offline.example.com/any.jpg",
    ]

    results = probe.probe(urls)

    assert [result.url for result in results] == urls
    ok, missing, offline = results
    assert ok.reachable
    assert ok.status_code == 200
    assert not missing.reachable
    assert missing.status_code == 404
    assert missing.issue == "HTTP 404"
    assert not offline.reachable
    assert not offline.responded
    assert offline.issue == "connection refused"


def test_empty_url_list_makes_no_requests() -> None:
    def fail(request: httpx.Request) -> httpx.Response:
        raise AssertionError(f"unexpected request {request.url}")

    probe = HttpImageProbe(resilience=NO_RETRY, client_factory=_mock_client_factory(fail))

    assert probe.probe([]) == []


def test_concurrency_must_be_positive() -> None:
    with pytest.raises(ValueError, match="concurrency"):
        HttpImageProbe(resilience=NO_RETRY, concurrency=0)


def test_client_retries_unavailable_responses() -> None:
    calls: list[str] = []

    def flaky(request: httpx.Request) -> httpx.Response:
        calls.append(request.method)
        if len(calls) < 3:
            return httpx.Response(503)
        return httpx.Response(200)

    config = ResilienceConfig(name="images", retry=RetryPolicy(total=3, backoff_factor=0))

    async def fetch() -> httpx.Response:
        async with ResilientClient(config, transport=httpx.MockTransport(flaky)) as client:
            return await client.head("https://cdn.example.com/ok.jpg")

    response = asyncio.run(fetch())

    assert response.status_code == 200
    assert calls == ["HEAD", "HEAD", "HEAD"]


def test_client_sends_user_agent_through_rate_limiter() -> None:
    seen: list[str | None] = []

    def record(request: httpx.Request) -> httpx.Response:
        seen.append(request.headers.get("User-Agent"))
        return httpx.Response(200)

    config = ResilienceConfig(
        name="images",
        retry=RetryPolicy.disabled(),
        ratelimit=RateLimit(max_calls=5, per_seconds=1.0),
        user_agent="catalog-check/1.0",
    )

    async def fetch() -> int:
        async with ResilientClient(config, transport=httpx.MockTransport(record)) as client:
            response = await client.get("https://cdn.example.com/ok.jpg")
            return response.status_code

    assert asyncio.run(fetch()) == 200
    assert seen == ["catalog-check/1.0"]


def test_rate_limit_rejects_non_positive_values() -> None:
    with pytest.raises(ValueError, match="rate limit"):
        RateLimit(max_calls=0, per_seconds=1.0)
