"""Pricing configuration sources."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

from .env import optional_env_path

if TYPE_CHECKING:
    from pathlib import Path

DEFAULT_CURRENCY = "IDR"


@dataclass(frozen=True, slots=True)
class PricingConfig:
    fee_config_path: Path | None = None
    currency: str = DEFAULT_CURRENCY


def get_pricing_config() -> PricingConfig:
    return PricingConfig(fee_config_path=optional_env_path("SYNCSTORE_PRICING_CONFIG"))
