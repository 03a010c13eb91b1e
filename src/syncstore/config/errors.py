"""Errors raised while reading settings."""

from __future__ import annotations

from syncstore.domain.errors import ConfigurationError


class InvalidConfigurationError(ConfigurationError):
    """An environment override is set but cannot be parsed."""

    def __init__(self, name: str, raw: str, expected: str) -> None:
        super().__init__(f"{name} must be {expected}, got {raw!r}")
        self.name = name
        self.raw = raw


__all__ = ["ConfigurationError", "InvalidConfigurationError"]
