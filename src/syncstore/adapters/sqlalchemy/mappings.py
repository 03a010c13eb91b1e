"""SQLAlchemy mapping metadata for the catalog domain model."""

from __future__ import annotations

import logging
import uuid
from datetime import UTC, datetime
from functools import cache
from typing import TYPE_CHECKING, Annotated, Any

from pydantic import Field, TypeAdapter
from sqlalchemy import (
    JSON,
    Boolean,
    Column,
    DateTime,
    Dialect,
    Enum,
    Float,
    ForeignKey,
    Index,
    Integer,
    String,
    Table,
    Text,
    TypeDecorator,
    Uuid,
    orm,
    text,
)
from sqlalchemy.orm import configure_mappers, relationship

from syncstore.domain.model import (
    Dimensions,
    ImportBatch,
    ImportBatchStatus,
    MasterProduct,
    PlatformMapping,
    ProductCategory,
    ProductImage,
    ProductPricing,
    ProductSeo,
    ProductStatus,
    ProductVariant,
    ShopeeListingData,
    SyncLogEntry,
    SyncLogStatus,
    SyncStatus,
    TikTokShopListingData,
    UnknownPlatformData,
)

if TYPE_CHECKING:
    from sqlalchemy.engine import Engine

log = logging.getLogger(__name__)

UUIDColumnType = Uuid[uuid.UUID]

PLATFORM_DATA_ADAPTER: TypeAdapter[Any] = TypeAdapter(
    Annotated[
        ShopeeListingData | TikTokShopListingData | UnknownPlatformData,
        Field(discriminator="kind"),
    ]
)
DIMENSIONS_ADAPTER: TypeAdapter[Any] = TypeAdapter(Dimensions)
IMAGES_ADAPTER: TypeAdapter[Any] = TypeAdapter(list[ProductImage])
CATEGORY_ADAPTER: TypeAdapter[Any] = TypeAdapter(ProductCategory | None)
PRICING_ADAPTER: TypeAdapter[Any] = TypeAdapter(ProductPricing)
SEO_ADAPTER: TypeAdapter[Any] = TypeAdapter(ProductSeo)
VARIANTS_ADAPTER: TypeAdapter[Any] = TypeAdapter(list[ProductVariant])
STRINGS_ADAPTER: TypeAdapter[Any] = TypeAdapter(list[str])
RECORDS_ADAPTER: TypeAdapter[Any] = TypeAdapter(list[dict[str, Any]])
MAPPING_ADAPTER: TypeAdapter[Any] = TypeAdapter(dict[str, Any])


class UTCDateTime(TypeDecorator[datetime]):
    impl = DateTime(timezone=True)
    cache_ok = True

    def process_bind_param(self, value: datetime | None, dialect: Dialect) -> datetime | None:
        _ = dialect
        if value is None:
            return None
        if value.tzinfo is None:
            value = value.replace(tzinfo=UTC)
        return value.astimezone(UTC)

    def process_result_value(self, value: datetime | None, dialect: Dialect) -> datetime | None:
        _ = dialect
        if value is None:
            return None
        return value if value.tzinfo else value.replace(tzinfo=UTC)


class PydanticJSON(TypeDecorator[Any]):
    """JSON column whose Python side is validated through a pydantic ``TypeAdapter``."""

    impl = JSON
    cache_ok = True

    def __init__(self, adapter: TypeAdapter[Any]) -> None:
        super().__init__()
        self.adapter = adapter

    def process_bind_param(self, value: Any, dialect: Dialect) -> Any:
        _ = dialect
        if value is None:
            return None
        return self.adapter.dump_python(value, mode="json")

    def process_result_value(self, value: Any, dialect: Dialect) -> Any:
        _ = dialect
        if value is None:
            return None
        return self.adapter.validate_python(value)


mapper_registry = orm.registry()
mapper_registry.metadata.naming_convention = {
    "ix": "ix_%(column_0_label)s",
    "uq": "uq_%(table_name)s_%(column_0_label)s",
    "ck": "ck_%(table_name)s_%(constraint_name)s",
    "fk": "fk_%(table_name)s_%(column_0_label)s_%(referred_table_name)s",
    "pk": "pk_%(table_name)s",
}

master_product_table = Table(
    "master_product",
    mapper_registry.metadata,
    Column("id", UUIDColumnType, primary_key=True, default=uuid.uuid4),
    Column("organization_id", String(64), nullable=False, index=True),
    Column("master_sku", String(128), nullable=False, unique=True),
    Column("name", String(500), nullable=False),
    Column("description", Text, nullable=False, default=""),
    Column("weight", Float, nullable=False, default=0.0),
    Column("dimensions", PydanticJSON(DIMENSIONS_ADAPTER), nullable=False),
    Column("images", PydanticJSON(IMAGES_ADAPTER), nullable=False),
    Column("category", PydanticJSON(CATEGORY_ADAPTER), nullable=True),
    Column("brand", String(255), nullable=True),
    Column("pricing", PydanticJSON(PRICING_ADAPTER), nullable=False),
    Column("seo", PydanticJSON(SEO_ADAPTER), nullable=False),
    Column("variants", PydanticJSON(VARIANTS_ADAPTER), nullable=False),
    Column("status", Enum(ProductStatus, native_enum=False, length=32), nullable=False),
    Column("data_quality_score", Integer, nullable=False, default=0),
    Column("validation_errors", PydanticJSON(STRINGS_ADAPTER), nullable=False),
    Column("validation_warnings", PydanticJSON(STRINGS_ADAPTER), nullable=False),
    Column("import_source", String(64), nullable=True),
    Column("imported_at", UTCDateTime(), nullable=True),
    Column("import_batch_id", String(128), nullable=True, index=True),
    Column("created_at", UTCDateTime(), nullable=False),
    Column("updated_at", UTCDateTime(), nullable=False),
)

platform_mapping_table = Table(
    "platform_mapping",
    mapper_registry.metadata,
    Column("id", UUIDColumnType, primary_key=True, default=uuid.uuid4),
    Column(
        "master_product_id",
        UUIDColumnType,
        ForeignKey("master_product.id", ondelete="CASCADE"),
        nullable=True,
    ),
    Column("platform", String(32), nullable=False),
    Column("platform_product_id", String(128), nullable=False),
    Column("platform_data", PydanticJSON(PLATFORM_DATA_ADAPTER), nullable=False),
    Column("sync_status", Enum(SyncStatus, native_enum=False, length=32), nullable=False),
    Column("is_active", Boolean, nullable=False, default=True),
    Column("last_sync_at", UTCDateTime(), nullable=True),
    Column("created_at", UTCDateTime(), nullable=False),
    Index(
        "uq_platform_mapping_active_key",
        "platform",
        "platform_product_id",
        unique=True,
        sqlite_where=text("is_active = 1"),
        postgresql_where=text("is_active"),
    ),
    Index("ix_platform_mapping_key", "platform", "platform_product_id"),
)

import_batch_table = Table(
    "import_batch",
    mapper_registry.metadata,
    Column("id", UUIDColumnType, primary_key=True, default=uuid.uuid4),
    Column("batch_id", String(128), nullable=False, unique=True),
    Column("organization_id", String(64), nullable=False),
    Column("status", Enum(ImportBatchStatus, native_enum=False, length=32), nullable=False),
    Column("import_type", String(64), nullable=False),
    Column("started_at", UTCDateTime(), nullable=False),
    Column("completed_at", UTCDateTime(), nullable=True),
    Column("total_products", Integer, nullable=False, default=0),
    Column("successful_products", Integer, nullable=False, default=0),
    Column("failed_products", Integer, nullable=False, default=0),
    Column("skipped_products", Integer, nullable=False, default=0),
    Column("errors", PydanticJSON(RECORDS_ADAPTER), nullable=False),
    Column("warnings", PydanticJSON(RECORDS_ADAPTER), nullable=False),
    Column("config", PydanticJSON(MAPPING_ADAPTER), nullable=False),
)

sync_log_table = Table(
    "sync_log",
    mapper_registry.metadata,
    Column("id", UUIDColumnType, primary_key=True, default=uuid.uuid4),
    Column("batch_id", String(128), nullable=False, index=True),
    Column("product_id", String(128), nullable=False),
    Column("platform", String(32), nullable=False),
    Column("status", Enum(SyncLogStatus, native_enum=False, length=32), nullable=False),
    Column("error_code", String(64), nullable=True),
    Column("error_message", Text, nullable=True),
    Column("attempts", Integer, nullable=False, default=1),
    Column("synced_at", UTCDateTime(), nullable=False),
)


@cache
def start_mappers() -> orm.registry:
    """Configure SQLAlchemy mappers for the domain model."""

    log.info("Starting SQLAlchemy mappers")

    mapper_registry.map_imperatively(
        MasterProduct,
        master_product_table,
        properties={
            "platform_mappings": relationship(
                PlatformMapping,
                cascade="all, delete-orphan",
                order_by=platform_mapping_table.c.created_at,
            ),
        },
    )

    mapper_registry.map_imperatively(PlatformMapping, platform_mapping_table)
    mapper_registry.map_imperatively(ImportBatch, import_batch_table)
    mapper_registry.map_imperatively(SyncLogEntry, sync_log_table)

    configure_mappers()
    return mapper_registry


def create_all_tables(engine: Engine) -> None:
    """Create database tables for the mapped metadata."""

    log.info("Creating all tables")
    mapper_registry.metadata.create_all(engine)
