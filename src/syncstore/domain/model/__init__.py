"""Domain model for the master catalog."""

from __future__ import annotations

from .canonical import CanonicalRecord
from .entity import Entity, Timestamped, new_id, utcnow
from .enums import (
    BatchState,
    ImportBatchStatus,
    JobState,
    Platform,
    ProductStatus,
    SyncLogStatus,
    SyncStatus,
)
from .platform_data import (
    PlatformData,
    ShopeeListingData,
    TikTokShopListingData,
    UnknownPlatformData,
)
from .product import ImportBatch, MasterProduct, PlatformMapping, SyncLogEntry
from .quality import QualityAssessment, assess_quality
from .values import (
    Dimensions,
    PlatformPrice,
    ProductCategory,
    ProductImage,
    ProductPricing,
    ProductSeo,
    ProductVariant,
    SeoTitle,
)

__all__ = [
    "BatchState",
    "CanonicalRecord",
    "Dimensions",
    "Entity",
    "ImportBatch",
    "ImportBatchStatus",
    "JobState",
    "MasterProduct",
    "Platform",
    "PlatformData",
    "PlatformMapping",
    "PlatformPrice",
    "ProductCategory",
    "ProductImage",
    "ProductPricing",
    "ProductSeo",
    "ProductStatus",
    "ProductVariant",
    "QualityAssessment",
    "SeoTitle",
    "ShopeeListingData",
    "SyncLogEntry",
    "SyncLogStatus",
    "SyncStatus",
    "TikTokShopListingData",
    "Timestamped",
    "UnknownPlatformData",
    "assess_quality",
    "new_id",
    "utcnow",
]
