"""Pydantic models for Shopee product exports."""

from __future__ import annotations

from typing import Literal

from pydantic import Field, field_validator

from syncstore.adapters.listing_schema import (
    LenientModel,
    StrictListingModel,
    require_http_url,
)


class ShopeePriceInfo(LenientModel):
    current_price: float | None = None
    original_price: float | None = None


class ShopeeImage(LenientModel):
    image_url_list: list[str] = Field(default_factory=list[str])


class ShopeeDimension(LenientModel):
    package_length: float | None = None
    package_width: float | None = None
    package_height: float | None = None


class ShopeeBrand(LenientModel):
    brand_id: int | None = None
    original_brand_name: str | None = None


class ShopeeItem(LenientModel):
    item_id: str | None = None
    item_name: str | None = None
    description: str | None = None
    item_sku: str | None = None
    price: float | None = None
    price_info: ShopeePriceInfo | None = None
    weight: float | None = None
    dimension: ShopeeDimension | None = None
    image: ShopeeImage | None = None
    category_id: str | None = None
    brand: ShopeeBrand | None = None
    brand_name: str | None = None
    item_status: str | None = None
    has_model: bool | None = None
    create_time: int | None = None
    update_time: int | None = None


class ShopeeListingImage(StrictListingModel):
    image_url_list: list[str] = Field(min_length=1)
    image_id_list: list[str] = Field(default_factory=list[str])

    @field_validator("image_url_list")
    @classmethod
    def _urls(cls, value: list[str]) -> list[str]:
        return [require_http_url(url) for url in value]


class ShopeeListingDimension(StrictListingModel):
    package_length: float | None = Field(default=None, ge=0)
    package_width: float | None = Field(default=None, ge=0)
    package_height: float | None = Field(default=None, ge=0)


class ShopeeListingBrand(StrictListingModel):
    brand_id: int | None = None
    original_brand_name: str | None = None


class ShopeeListing(StrictListingModel):
    """Marketplace listing rules for a Shopee item."""

    item_id: int = Field(strict=True, gt=0)
    category_id: int = Field(strict=True, gt=0)
    item_name: str = Field(min_length=1, max_length=500)
    description: str | None = None
    item_sku: str | None = None
    create_time: int = Field(strict=True, gt=0)
    update_time: int = Field(strict=True, gt=0)
    image: ShopeeListingImage
    weight: float | None = Field(default=None, ge=0)
    dimension: ShopeeListingDimension | None = None
    item_status: Literal["NORMAL", "DELETED", "BANNED"]
    has_model: bool = False
    brand: ShopeeListingBrand | None = None
