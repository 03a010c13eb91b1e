"""Repository implementations backed by SQLAlchemy sessions."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from sqlalchemy import func, select
from sqlalchemy.exc import SQLAlchemyError

from syncstore.adapters.sqlalchemy.mappings import (
    import_batch_table,
    master_product_table,
    platform_mapping_table,
    sync_log_table,
)
from syncstore.domain.errors import FatalIOError, PersistenceError
from syncstore.domain.model import ImportBatch, MasterProduct, PlatformMapping, SyncLogEntry

if TYPE_CHECKING:
    from uuid import UUID

    from sqlalchemy import Executable, Result
    from sqlalchemy.orm import Session


class _SessionRepository:
    """Base for repositories sharing one session.

    Queries that fail inside the driver raise :class:`FatalIOError`: the store itself
    is unusable, not just the record at hand. Failed record writes raise
    :class:`PersistenceError` from the repository that flushes them.
    """

    def __init__(self, session: Session) -> None:
        self.session = session

    def _execute(self, stmt: Executable) -> Result[Any]:
        try:
            return self.session.execute(stmt)
        except SQLAlchemyError as exc:
            raise FatalIOError(f"Catalog store unavailable: {exc}") from exc

    def _get[T](self, entity: type[T], ident: UUID) -> T | None:
        try:
            return self.session.get(entity, ident)
        except SQLAlchemyError as exc:
            raise FatalIOError(f"Catalog store unavailable: {exc}") from exc


class SqlAlchemyMasterProductRepository(_SessionRepository):
    def add(self, entity: MasterProduct) -> None:
        self.session.add(entity)

    def get(self, product_id: UUID) -> MasterProduct | None:
        return self._get(MasterProduct, product_id)

    def get_by_sku(self, master_sku: str) -> MasterProduct | None:
        stmt = select(MasterProduct).where(master_product_table.c.master_sku == master_sku)
        return self._execute(stmt).scalar_one_or_none()

    def upsert(self, product: MasterProduct) -> MasterProduct:
        """Insert ``product`` or overwrite the stored row with the same ``master_sku``.

        The flush happens here so that constraint violations surface as
        :class:`PersistenceError` for this record only.
        """

        existing = self.get_by_sku(product.master_sku)
        if existing is None:
            target = product
            self.session.add(target)
        else:
            target = existing
            _overwrite(target, product)
        try:
            self.session.flush()
        except SQLAlchemyError as exc:
            raise PersistenceError(f"Cannot store {product.master_sku}: {exc}") from exc
        return target

    def list_all(self) -> list[MasterProduct]:
        stmt = select(MasterProduct).order_by(master_product_table.c.created_at)
        return list(self._execute(stmt).scalars())

    def list_recent(self, limit: int) -> list[MasterProduct]:
        stmt = (
            select(MasterProduct)
            .order_by(master_product_table.c.created_at.desc())
            .limit(limit)
        )
        return list(self._execute(stmt).scalars())

    def count(self) -> int:
        stmt = select(func.count()).select_from(master_product_table)
        return int(self._execute(stmt).scalar_one())


def _overwrite(target: MasterProduct, source: MasterProduct) -> None:
    target.organization_id = source.organization_id
    target.name = source.name
    target.description = source.description
    target.weight = source.weight
    target.dimensions = source.dimensions
    target.images = list(source.images)
    target.category = source.category
    target.brand = source.brand
    target.pricing = source.pricing
    target.seo = source.seo
    target.variants = list(source.variants)
    target.status = source.status
    target.import_source = source.import_source
    target.imported_at = source.imported_at
    target.import_batch_id = source.import_batch_id
    for mapping in list(source.platform_mappings):
        target.attach_mapping(mapping)
    target.refresh_quality()
    target.touch()


class SqlAlchemyPlatformMappingRepository(_SessionRepository):
    def add(self, entity: PlatformMapping) -> None:
        self.session.add(entity)

    def find_active(self, platform: str, platform_product_id: str) -> PlatformMapping | None:
        stmt = (
            select(PlatformMapping)
            .where(platform_mapping_table.c.platform == platform)
            .where(platform_mapping_table.c.platform_product_id == platform_product_id)
            .where(platform_mapping_table.c.is_active.is_(True))
        )
        return self._execute(stmt).scalars().first()

    def deactivate(self, mapping: PlatformMapping) -> None:
        """Retire ``mapping`` and re-score the product that owned it."""

        mapping.deactivate()
        if mapping.master_product_id is not None:
            self._refresh_owner(mapping.master_product_id)
        try:
            self.session.flush()
        except SQLAlchemyError as exc:
            raise PersistenceError(f"Cannot deactivate mapping {mapping.id}: {exc}") from exc

    def _refresh_owner(self, product_id: UUID) -> None:
        with self.session.no_autoflush:
            owner = self._get(MasterProduct, product_id)
            if owner is None:
                return
            try:
                owner.refresh_quality()
            except SQLAlchemyError as exc:
                raise FatalIOError(f"Catalog store unavailable: {exc}") from exc

    def list_all(self) -> list[PlatformMapping]:
        stmt = select(PlatformMapping).order_by(platform_mapping_table.c.created_at)
        return list(self._execute(stmt).scalars())


class SqlAlchemyImportBatchRepository(_SessionRepository):
    def add(self, entity: ImportBatch) -> None:
        self.session.add(entity)

    def get_by_batch_id(self, batch_id: str) -> ImportBatch | None:
        stmt = select(ImportBatch).where(import_batch_table.c.batch_id == batch_id)
        return self._execute(stmt).scalar_one_or_none()


class SqlAlchemySyncLogRepository(_SessionRepository):
    def add(self, entity: SyncLogEntry) -> None:
        self.session.add(entity)

    def list_for_batch(self, batch_id: str) -> list[SyncLogEntry]:
        stmt = (
            select(SyncLogEntry)
            .where(sync_log_table.c.batch_id == batch_id)
            .order_by(sync_log_table.c.synced_at)
        )
        return list(self._execute(stmt).scalars())

