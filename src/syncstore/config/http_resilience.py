"""Outbound HTTP settings for checking marketplace image URLs."""

from __future__ import annotations

from dataclasses import dataclass, field

import httpx

DEFAULT_USER_AGENT = "syncstore-image-probe/0.1"


@dataclass(slots=True, frozen=True)
class RetryPolicy:
    """Retries applied to idempotent probe requests (HEAD and GET only)."""

    total: int = 2
    backoff_factor: float = 0.25
    max_backoff_wait: float = 5.0
    respect_retry_after_header: bool = True
    status_forcelist: frozenset[int] = frozenset({429, 502, 503, 504})
    retry_on_exceptions: tuple[type[httpx.HTTPError], ...] = (
        httpx.TimeoutException,
        httpx.NetworkError,
    )

    @classmethod
    def disabled(cls) -> RetryPolicy:
        return cls(total=0)


@dataclass(slots=True, frozen=True)
class RateLimit:
    max_calls: int
    per_seconds: float

    def __post_init__(self) -> None:
        if self.max_calls <= 0 or self.per_seconds <= 0:
            raise ValueError("rate limit needs positive max_calls and per_seconds")


@dataclass(slots=True, frozen=True)
class ResilienceConfig:
    name: str
    timeout_seconds: float = 10.0
    retry: RetryPolicy = field(default_factory=RetryPolicy)
    ratelimit: RateLimit | None = None
    follow_redirects: bool = True
    max_connections: int = 20
    user_agent: str = DEFAULT_USER_AGENT

    def headers(self) -> dict[str, str]:
        return {"User-Agent": self.user_agent}
