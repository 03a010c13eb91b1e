"""Intermediate record produced by platform adapters."""

from __future__ import annotations

from dataclasses import dataclass

from syncstore.domain.model.platform_data import PlatformData  # noqa: TC001
from syncstore.domain.model.values import (  # noqa: TC001
    Dimensions,
    ProductCategory,
    ProductImage,
)


@dataclass(frozen=True, slots=True, kw_only=True)
class CanonicalRecord:
    platform: str
    platform_product_id: str
    name: str
    description: str
    base_price: float
    weight: float
    dimensions: Dimensions
    images: tuple[ProductImage, ...]
    category: ProductCategory
    brand: str
    platform_data: PlatformData
    estimated_fields: tuple[str, ...] = ()

    @property
    def business_key(self) -> tuple[str, str]:
        return (self.platform, self.platform_product_id)
