"""Lookup of platform adapters by platform name."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

from syncstore.adapters.shopee import ShopeeAdapter
from syncstore.adapters.tiktokshop import TikTokShopAdapter
from syncstore.domain.errors import TransformError
from syncstore.domain.estimators import Estimators
from syncstore.domain.ports import ListingValidation

if TYPE_CHECKING:
    from collections.abc import Iterable, Mapping

    from syncstore.domain.model import CanonicalRecord
    from syncstore.domain.ports import PlatformAdapter


@dataclass(slots=True)
class UnsupportedPlatformAdapter:
    """Fallback for platforms without a dedicated adapter; every record fails."""

    name: str

    @property
    def platform(self) -> str:
        return self.name

    def native_id(self, raw: Mapping[str, Any]) -> str | None:
        for key in ("product_id", "item_id", "id"):
            value = raw.get(key)
            if value is not None and str(value).strip():
                return str(value)
        return None

    def normalize(self, raw: Mapping[str, Any]) -> CanonicalRecord | TransformError:
        return TransformError(
            f"Unsupported platform: {self.name}",
            platform=self.name,
            product_id=self.native_id(raw),
        )

    def validate_listing(self, raw: Mapping[str, Any]) -> ListingValidation:
        return ListingValidation(
            is_valid=False,
            errors=(f"platform: Unsupported platform {self.name}",),
        )


@dataclass(slots=True)
class AdapterRegistry:
    adapters: dict[str, PlatformAdapter] = field(default_factory=dict)

    def register(self, adapter: PlatformAdapter) -> None:
        self.adapters[adapter.platform] = adapter

    def resolve(self, platform: str) -> PlatformAdapter:
        adapter = self.adapters.get(platform)
        if adapter is None:
            return UnsupportedPlatformAdapter(platform)
        return adapter

    def supports(self, platform: str) -> bool:
        return platform in self.adapters

    @property
    def platforms(self) -> tuple[str, ...]:
        return tuple(self.adapters)


def default_registry(
    estimators: Estimators | None = None,
    *,
    extra: Iterable[PlatformAdapter] = (),
) -> AdapterRegistry:
    shared = estimators or Estimators()
    registry = AdapterRegistry()
    registry.register(ShopeeAdapter(estimators=shared))
    registry.register(TikTokShopAdapter(estimators=shared))
    for adapter in extra:
        registry.register(adapter)
    return registry


if TYPE_CHECKING:
    _check_fallback: PlatformAdapter = UnsupportedPlatformAdapter("unknown")
