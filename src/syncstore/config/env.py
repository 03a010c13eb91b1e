"""Typed readers for ``SYNCSTORE_*`` environment overrides.

Unset and blank variables both mean "use the default".
"""

from __future__ import annotations

import os
from pathlib import Path

from .errors import InvalidConfigurationError


def _read(name: str) -> str | None:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return None
    return raw.strip()


def optional_env_str(name: str, default: str) -> str:
    return _read(name) or default


def optional_env_int(name: str, default: int, *, minimum: int | None = None) -> int:
    raw = _read(name)
    if raw is None:
        return default
    try:
        value = int(raw)
    except ValueError as exc:
        raise InvalidConfigurationError(name, raw, "an integer") from exc
    if minimum is not None and value < minimum:
        raise InvalidConfigurationError(name, raw, f"at least {minimum}")
    return value


def optional_env_tuple(name: str, default: tuple[str, ...]) -> tuple[str, ...]:
    """Comma-separated list; empty items are dropped and case is normalised."""

    raw = _read(name)
    if raw is None:
        return default
    items = tuple(dict.fromkeys(item.strip().lower() for item in raw.split(",") if item.strip()))
    if not items:
        raise InvalidConfigurationError(name, raw, "a comma-separated list")
    return items


def optional_env_path(name: str) -> Path | None:
    raw = _read(name)
    return Path(raw).expanduser() if raw is not None else None
