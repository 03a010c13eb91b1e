from __future__ import annotations

from datetime import UTC, datetime
from typing import TYPE_CHECKING
from uuid import uuid4

import pytest

from syncstore.adapters.sqlalchemy.repositories import (
    SqlAlchemyImportBatchRepository,
    SqlAlchemyMasterProductRepository,
    SqlAlchemyPlatformMappingRepository,
    SqlAlchemySyncLogRepository,
)
from syncstore.domain.errors import FatalIOError, PersistenceError
from syncstore.domain.model import (
    Dimensions,
    ImportBatch,
    ImportBatchStatus,
    MasterProduct,
    PlatformMapping,
    PlatformPrice,
    ProductImage,
    ProductPricing,
    ShopeeListingData,
    SyncLogEntry,
    SyncLogStatus,
    SyncStatus,
)
from tests.helpers.fakes import StoreOutage

if TYPE_CHECKING:
    from sqlalchemy.engine import Engine
    from sqlalchemy.orm import Session


def _product(sku: str = "SH-1001-ABCDEF", name: str = "Carbon Fiber Frame") -> MasterProduct:
    return MasterProduct(
        organization_id="org-1",
        master_sku=sku,
        name=name,
        description="A sturdy frame for freestyle builds with replaceable arms.",
        weight=0.12,
        dimensions=Dimensions(length=25, width=20, height=5),
        images=[ProductImage(url="https://cdn.example.com/1.jpg", is_primary=True)],
        pricing=ProductPricing(
            base_price=150000,
            platform_prices={
                "shopee": PlatformPrice(
                    price=177503,
                    fee_percentage=15.0,
                    calculated_at=datetime(2024, 1, 1, tzinfo=UTC),
                )
            },
        ),
    )


def _mapping(item_id: str = "1001") -> PlatformMapping:
    return PlatformMapping(
        platform="shopee",
        platform_product_id=item_id,
        platform_data=ShopeeListingData(item_id=item_id, item_status="NORMAL"),
    )


def test_upsert_inserts_then_overwrites(sqlite_session: Session) -> None:
    repository = SqlAlchemyMasterProductRepository(sqlite_session)

    first = repository.upsert(_product())
    sqlite_session.commit()
    second = repository.upsert(_product(name="Carbon Fiber Frame V2"))
    sqlite_session.commit()

    assert second.id == first.id
    assert repository.count() == 1
    stored = repository.get_by_sku("SH-1001-ABCDEF")
    assert stored is not None
    assert stored.name == "Carbon Fiber Frame V2"


def test_json_columns_round_trip(sqlite_session: Session) -> None:
    repository = SqlAlchemyMasterProductRepository(sqlite_session)
    product = _product()
    product.attach_mapping(_mapping())
    sku = product.master_sku
    repository.upsert(product)
    sqlite_session.commit()
    sqlite_session.expunge_all()

    stored = repository.get_by_sku(sku)

    assert stored is not None
    assert stored.dimensions == Dimensions(length=25, width=20, height=5)
    assert stored.images[0].url == "https://cdn.example.com/1.jpg"
    assert stored.pricing.platform_prices["shopee"].price == 177503
    assert stored.platform_mappings[0].platform_data == ShopeeListingData(
        item_id="1001", item_status="NORMAL"
    )
    assert stored.platform_mappings[0].master_product_id == stored.id


def test_list_recent_orders_newest_first(sqlite_session: Session) -> None:
    repository = SqlAlchemyMasterProductRepository(sqlite_session)
    older = _product("SH-1-A")
    older.created_at = datetime(2024, 1, 1, tzinfo=UTC)
    newer = _product("SH-2-B")
    newer.created_at = datetime(2024, 6, 1, tzinfo=UTC)
    repository.upsert(older)
    repository.upsert(newer)
    sqlite_session.commit()

    assert [p.master_sku for p in repository.list_recent(1)] == ["SH-2-B"]
    assert [p.master_sku for p in repository.list_all()] == ["SH-1-A", "SH-2-B"]


def test_find_active_ignores_deactivated_mappings(sqlite_session: Session) -> None:
    products = SqlAlchemyMasterProductRepository(sqlite_session)
    mappings = SqlAlchemyPlatformMappingRepository(sqlite_session)
    product = _product()
    product.attach_mapping(_mapping())
    products.upsert(product)
    sqlite_session.commit()

    active = mappings.find_active("shopee", "1001")
    assert active is not None
    mappings.deactivate(active)
    sqlite_session.commit()

    assert mappings.find_active("shopee", "1001") is None
    (stored,) = mappings.list_all()
    assert stored.is_active is False
    assert stored.sync_status is SyncStatus.DISABLED


def test_import_batch_lookup(sqlite_session: Session) -> None:
    repository = SqlAlchemyImportBatchRepository(sqlite_session)
    repository.add(
        ImportBatch(
            batch_id="master_import_1",
            organization_id="org-1",
            errors=[{"product_id": "1", "message": "bad"}],
            config={"batch_size": 10},
        )
    )
    sqlite_session.commit()

    batch = repository.get_by_batch_id("master_import_1")

    assert batch is not None
    assert batch.status is ImportBatchStatus.RUNNING
    assert batch.errors == [{"product_id": "1", "message": "bad"}]
    assert batch.config == {"batch_size": 10}
    assert repository.get_by_batch_id("missing") is None


def test_sync_log_lists_entries_of_one_batch(sqlite_session: Session) -> None:
    repository = SqlAlchemySyncLogRepository(sqlite_session)
    repository.add(
        SyncLogEntry(
            batch_id="b1",
            product_id="1",
            platform="shopee",
            status=SyncLogStatus.SUCCESS,
            synced_at=datetime(2024, 1, 1, 10, tzinfo=UTC),
        )
    )
    repository.add(
        SyncLogEntry(
            batch_id="b1",
            product_id="2",
            platform="shopee",
            status=SyncLogStatus.FAILED,
            error_code="TRANSFORM_ERROR",
            synced_at=datetime(2024, 1, 1, 10, 5, tzinfo=UTC),
        )
    )
    repository.add(
        SyncLogEntry(batch_id="b2", product_id="3", platform="shopee", status=SyncLogStatus.SUCCESS)
    )
    sqlite_session.commit()

    entries = repository.list_for_batch("b1")

    assert [entry.product_id for entry in entries] == ["1", "2"]
    assert entries[1].error_code == "TRANSFORM_ERROR"
    assert entries[0].synced_at.tzinfo is not None


def test_reads_fail_fatally_when_store_is_unreachable(
    sqlite_engine: Engine, sqlite_session: Session
) -> None:
    products = SqlAlchemyMasterProductRepository(sqlite_session)
    mappings = SqlAlchemyPlatformMappingRepository(sqlite_session)

    with StoreOutage(sqlite_engine, lambda statement, _: statement.startswith("SELECT")):
        with pytest.raises(FatalIOError, match="Catalog store unavailable"):
            products.count()
        sqlite_session.rollback()
        with pytest.raises(FatalIOError, match="Catalog store unavailable"):
            products.get(uuid4())
        sqlite_session.rollback()
        with pytest.raises(FatalIOError, match="Catalog store unavailable"):
            mappings.find_active("shopee", "1001")


def test_upsert_write_failure_is_a_record_error(
    sqlite_engine: Engine, sqlite_session: Session
) -> None:
    repository = SqlAlchemyMasterProductRepository(sqlite_session)

    inserts = StoreOutage(sqlite_engine, lambda statement, _: statement.startswith("INSERT"))

    with inserts, pytest.raises(PersistenceError, match="Cannot store SH-1001-ABCDEF"):
        repository.upsert(_product())
