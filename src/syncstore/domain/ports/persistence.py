"""Ports for persisting catalog aggregates."""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

from syncstore.domain.model import (
    ImportBatch,
    MasterProduct,
    PlatformMapping,
    SyncLogEntry,
)

if TYPE_CHECKING:
    from uuid import UUID


@runtime_checkable
class Repository[TEntity](Protocol):
    """Minimal repository contract for a persistent aggregate store."""

    def add(self, entity: TEntity) -> None: ...


@runtime_checkable
class MasterProductRepository(Repository[MasterProduct], Protocol):
    """Persistence contract for master products, keyed by ``master_sku``."""

    def get(self, product_id: UUID) -> MasterProduct | None: ...

    def get_by_sku(self, master_sku: str) -> MasterProduct | None: ...

    def upsert(self, product: MasterProduct) -> MasterProduct: ...

    def list_all(self) -> list[MasterProduct]: ...

    def list_recent(self, limit: int) -> list[MasterProduct]: ...

    def count(self) -> int: ...


@runtime_checkable
class PlatformMappingRepository(Repository[PlatformMapping], Protocol):
    """Persistence contract for platform mappings."""

    def find_active(self, platform: str, platform_product_id: str) -> PlatformMapping | None: ...

    def deactivate(self, mapping: PlatformMapping) -> None: ...

    def list_all(self) -> list[PlatformMapping]: ...


@runtime_checkable
class ImportBatchRepository(Repository[ImportBatch], Protocol):
    """Persistence contract for import batch records."""

    def get_by_batch_id(self, batch_id: str) -> ImportBatch | None: ...


@runtime_checkable
class SyncLogRepository(Repository[SyncLogEntry], Protocol):
    """Persistence contract for the per-record sync log."""

    def list_for_batch(self, batch_id: str) -> list[SyncLogEntry]: ...
