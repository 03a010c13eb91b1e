"""Immutable value objects embedded in master products."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime  # noqa: TC003
from typing import Any


@dataclass(frozen=True, slots=True)
class Dimensions:
    length: float = 0.0
    width: float = 0.0
    height: float = 0.0
    unit: str = "cm"

    @property
    def is_empty(self) -> bool:
        return not (self.length or self.width or self.height)


@dataclass(frozen=True, slots=True)
class ProductImage:
    url: str
    alt: str = ""
    is_primary: bool = False


@dataclass(frozen=True, slots=True)
class ProductCategory:
    id: str
    name: str
    path: tuple[str, ...] = ()
    level: int = 1


@dataclass(frozen=True, slots=True)
class PlatformPrice:
    price: int
    fee_percentage: float
    calculated_at: datetime


@dataclass(slots=True)
class ProductPricing:
    base_price: float
    currency: str = "IDR"
    platform_prices: dict[str, PlatformPrice] = field(default_factory=dict[str, PlatformPrice])


@dataclass(frozen=True, slots=True)
class SeoTitle:
    title: str
    similarity: float
    quality_score: float
    optimized_for: tuple[str, ...]
    generated_at: datetime


@dataclass(slots=True)
class ProductSeo:
    keywords: tuple[str, ...] = ()
    platform_titles: dict[str, SeoTitle] = field(default_factory=dict[str, SeoTitle])


@dataclass(frozen=True, slots=True)
class ProductVariant:
    sku: str
    name: str
    price: float | None = None
    attributes: dict[str, Any] = field(default_factory=dict[str, Any])
