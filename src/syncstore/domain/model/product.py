"""Master catalog aggregates."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime  # noqa: TC003
from typing import TYPE_CHECKING, Any
from uuid import UUID  # noqa: TC003

from syncstore.domain.model.entity import Entity, Timestamped, utcnow
from syncstore.domain.model.enums import (
    ImportBatchStatus,
    ProductStatus,
    SyncLogStatus,
    SyncStatus,
)
from syncstore.domain.model.quality import QualityAssessment, assess_quality
from syncstore.domain.model.values import (
    Dimensions,
    ProductCategory,
    ProductImage,
    ProductPricing,
    ProductSeo,
    ProductVariant,
)

if TYPE_CHECKING:
    from collections.abc import Iterable

    from syncstore.domain.model.platform_data import PlatformData


@dataclass(eq=False, kw_only=True)
class PlatformMapping(Entity):
    """Link from a master product to one external marketplace listing."""

    platform: str
    platform_product_id: str
    platform_data: PlatformData
    master_product_id: UUID | None = None
    sync_status: SyncStatus = SyncStatus.SYNCED
    is_active: bool = True
    last_sync_at: datetime | None = None
    created_at: datetime = field(default_factory=utcnow)

    @property
    def business_key(self) -> tuple[str, str]:
        return (self.platform, self.platform_product_id)

    def deactivate(self) -> None:
        self.is_active = False
        self.sync_status = SyncStatus.DISABLED


@dataclass(eq=False, kw_only=True)
class MasterProduct(Entity, Timestamped):
    """Canonical, platform-agnostic product record.

    ``data_quality_score`` together with the validation lists is derived state; the
    content mutators below refresh it so it never goes stale.
    """

    organization_id: str
    master_sku: str
    name: str
    description: str = ""
    weight: float = 0.0
    dimensions: Dimensions = field(default_factory=Dimensions)
    images: list[ProductImage] = field(default_factory=list[ProductImage])
    category: ProductCategory | None = None
    brand: str | None = None
    pricing: ProductPricing = field(default_factory=lambda: ProductPricing(base_price=0.0))
    seo: ProductSeo = field(default_factory=ProductSeo)
    variants: list[ProductVariant] = field(default_factory=list[ProductVariant])
    status: ProductStatus = ProductStatus.ACTIVE
    data_quality_score: int = 0
    validation_errors: list[str] = field(default_factory=list[str])
    validation_warnings: list[str] = field(default_factory=list[str])
    import_source: str | None = None
    imported_at: datetime | None = None
    import_batch_id: str | None = None

    platform_mappings: list[PlatformMapping] = field(
        default_factory=list[PlatformMapping], repr=False
    )

    @property
    def base_price(self) -> float:
        return self.pricing.base_price

    @property
    def active_mappings(self) -> tuple[PlatformMapping, ...]:
        return tuple(mapping for mapping in self.platform_mappings if mapping.is_active)

    def attach_mapping(self, mapping: PlatformMapping) -> None:
        mapping.master_product_id = self.id
        self.platform_mappings.append(mapping)
        self.refresh_quality()

    def assess_quality(self) -> QualityAssessment:
        return assess_quality(
            name=self.name,
            description=self.description,
            images=self.images,
            base_price=self.pricing.base_price,
            seo_titles=self.seo.platform_titles,
            mapping_count=len(self.active_mappings),
        )

    def refresh_quality(self) -> QualityAssessment:
        assessment = self.assess_quality()
        self.data_quality_score = assessment.score
        self.validation_errors = list(assessment.errors)
        self.validation_warnings = list(assessment.warnings)
        return assessment

    def rename(self, name: str) -> None:
        self.name = name
        self._content_changed()

    def update_description(self, description: str) -> None:
        self.description = description
        self._content_changed()

    def replace_images(self, images: Iterable[ProductImage]) -> None:
        self.images = list(images)
        self._content_changed()

    def set_base_price(self, base_price: float) -> None:
        self.pricing = ProductPricing(
            base_price=base_price,
            currency=self.pricing.currency,
            platform_prices=dict(self.pricing.platform_prices),
        )
        self._content_changed()

    def _content_changed(self) -> None:
        self.refresh_quality()
        self.touch()


@dataclass(eq=False, kw_only=True)
class ImportBatch(Entity):
    """Durable record of one catalog population run."""

    batch_id: str
    organization_id: str
    status: ImportBatchStatus = ImportBatchStatus.RUNNING
    import_type: str = "master_catalog_population"
    started_at: datetime = field(default_factory=utcnow)
    completed_at: datetime | None = None
    total_products: int = 0
    successful_products: int = 0
    failed_products: int = 0
    skipped_products: int = 0
    errors: list[dict[str, Any]] = field(default_factory=list[dict[str, Any]])
    warnings: list[dict[str, Any]] = field(default_factory=list[dict[str, Any]])
    config: dict[str, Any] = field(default_factory=dict[str, Any])


@dataclass(eq=False, kw_only=True)
class SyncLogEntry(Entity):
    """One processed record of a batch, kept after the live queue forgets it."""

    batch_id: str
    product_id: str
    platform: str
    status: SyncLogStatus
    error_code: str | None = None
    error_message: str | None = None
    attempts: int = 1
    synced_at: datetime = field(default_factory=utcnow)
