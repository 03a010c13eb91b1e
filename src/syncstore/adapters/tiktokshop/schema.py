"""Pydantic models for TikTok Shop product exports."""

from __future__ import annotations

from typing import Literal

from pydantic import Field, field_validator

from syncstore.adapters.listing_schema import (
    LenientModel,
    StrictListingModel,
    require_http_url,
)

TikTokShopProductStatus = Literal[
    "DRAFT",
    "PENDING_REVIEW",
    "REJECTED",
    "ACTIVE",
    "SELLER_DEACTIVATED",
    "PLATFORM_DEACTIVATED",
    "FREEZE",
]


class TikTokShopImage(LenientModel):
    id: str | None = None
    url: str | None = None


class TikTokShopDimensions(LenientModel):
    length: float | None = None
    width: float | None = None
    height: float | None = None


class TikTokShopBrand(LenientModel):
    id: str | None = None
    name: str | None = None


class TikTokShopProduct(LenientModel):
    product_id: str | None = None
    product_name: str | None = None
    description: str | None = None
    price: float | None = None
    images: list[TikTokShopImage] = Field(default_factory=list["TikTokShopImage"])
    package_weight: float | None = None
    package_dimensions: TikTokShopDimensions | None = None
    category_id: str | None = None
    brand_name: str | None = None
    brand: TikTokShopBrand | None = None
    product_status: str | None = None
    include_tokopedia: bool | None = None
    create_time: int | None = None
    update_time: int | None = None


class TikTokShopListingImage(StrictListingModel):
    id: str
    url: str
    thumb_urls: list[str] = Field(default_factory=list[str])
    uri: str | None = None

    @field_validator("url")
    @classmethod
    def _url(cls, value: str) -> str:
        return require_http_url(value)


class TikTokShopListingDimensions(StrictListingModel):
    length: float | None = Field(default=None, ge=0)
    width: float | None = Field(default=None, ge=0)
    height: float | None = Field(default=None, ge=0)


class TikTokShopListingBrand(StrictListingModel):
    id: str
    name: str


class TikTokShopListing(StrictListingModel):
    """Marketplace listing rules for a TikTok Shop product."""

    product_id: str = Field(min_length=1)
    product_name: str = Field(min_length=1, max_length=500)
    description: str | None = None
    brand_name: str | None = None
    category_id: str = Field(min_length=1)
    product_status: TikTokShopProductStatus
    create_time: int = Field(strict=True, gt=0)
    update_time: int = Field(strict=True, gt=0)
    images: list[TikTokShopListingImage] = Field(min_length=1)
    brand: TikTokShopListingBrand | None = None
    package_weight: float | None = Field(default=None, ge=0)
    package_dimensions: TikTokShopListingDimensions | None = None
    include_tokopedia: bool = False
