"""Platform-specific listing payloads, tagged by ``kind``.

Each marketplace contributes its own typed variant. Payloads from platforms without a
dedicated adapter land in :class:`UnknownPlatformData` so that nothing is dropped.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Literal


@dataclass(frozen=True, slots=True, kw_only=True)
class ShopeeListingData:
    kind: Literal["shopee"] = "shopee"
    item_id: str
    item_status: str | None = None
    category_id: str | None = None
    item_sku: str | None = None
    has_model: bool = False
    create_time: int | None = None
    update_time: int | None = None
    payload: dict[str, Any] = field(default_factory=dict[str, Any])

    @property
    def platform(self) -> str:
        return "shopee"


@dataclass(frozen=True, slots=True, kw_only=True)
class TikTokShopListingData:
    kind: Literal["tiktokshop"] = "tiktokshop"
    product_id: str
    product_status: str | None = None
    category_id: str | None = None
    include_tokopedia: bool = False
    create_time: int | None = None
    update_time: int | None = None
    payload: dict[str, Any] = field(default_factory=dict[str, Any])

    @property
    def platform(self) -> str:
        return "tiktokshop"


@dataclass(frozen=True, slots=True, kw_only=True)
class UnknownPlatformData:
    kind: Literal["unknown"] = "unknown"
    source_platform: str
    payload: dict[str, Any] = field(default_factory=dict[str, Any])

    @property
    def platform(self) -> str:
        return self.source_platform


type PlatformData = ShopeeListingData | TikTokShopListingData | UnknownPlatformData
