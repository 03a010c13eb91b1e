from __future__ import annotations

import threading
from collections import Counter
from collections.abc import Callable  # noqa: TC003
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

import pytest
from sqlalchemy import create_engine

from syncstore.adapters.job_queue import InMemoryJobQueue
from syncstore.adapters.registry import default_registry
from syncstore.adapters.shopee import ShopeeAdapter
from syncstore.adapters.sqlalchemy import start_mappers
from syncstore.adapters.sqlalchemy.migrations import upgrade_head
from syncstore.adapters.sqlalchemy.repositories import SqlAlchemyMasterProductRepository
from syncstore.adapters.sqlalchemy.unit_of_work import (
    SqlAlchemyCatalogUnitOfWork,
    shutdown,
    startup,
)
from syncstore.domain.catalog_population import (
    CatalogPopulator,
    PopulationConfig,
    SuccessPolicy,
    master_sku,
    render_import_report,
)
from syncstore.domain.model import ImportBatch, ImportBatchStatus, JobState, SyncLogStatus
from syncstore.domain.model.quality import NO_MAPPINGS_WARNING
from syncstore.domain.pricing import PricingEngine
from syncstore.domain.seo import SeoTitleGenerator
from tests.helpers.fakes import StoreOutage, UnreadableRawBatchStore
from tests.helpers.payloads import malformed_shopee_item, shopee_item, tiktok_product

if TYPE_CHECKING:
    from collections.abc import Mapping
    from pathlib import Path

    from sqlalchemy.engine import Engine

    from syncstore.adapters.raw_store import FileRawBatchStore
    from syncstore.domain.errors import TransformError
    from syncstore.domain.model import CanonicalRecord, MasterProduct
    from syncstore.domain.ports import ListingValidation, RawBatchStore

UnitOfWorkFactory = Callable[[], SqlAlchemyCatalogUnitOfWork]


def _config(**overrides: object) -> PopulationConfig:
    values: dict[str, object] = {"organization_id": "org-1", "batch_size": 2}
    values.update(overrides)
    return PopulationConfig(**values)  # type: ignore[arg-type]


def _populator(
    unit_of_work_factory: UnitOfWorkFactory,
    raw_store: RawBatchStore,
    job_queue: InMemoryJobQueue | None = None,
) -> CatalogPopulator:
    return CatalogPopulator(
        unit_of_work_factory=unit_of_work_factory,
        raw_store=raw_store,
        registry=default_registry(),
        pricing=PricingEngine(),
        seo=SeoTitleGenerator(),
        job_queue=job_queue,
    )


def test_master_sku_is_stable_per_batch() -> None:
    sku = master_sku("shopee", "1001", "org-1", "batch-1")

    assert sku.startswith("SH-1001-")
    assert len(sku.rsplit("-", 1)[1]) == 6
    assert sku == master_sku("shopee", "1001", "org-1", "batch-1")
    assert sku != master_sku("shopee", "1001", "org-1", "batch-2")
    assert master_sku("tiktokshop", "9", "org-1", "b").startswith("TT-9-")
    assert master_sku("website", "9", "org-1", "b").startswith("WE-9-")


@pytest.mark.parametrize(
    "overrides",
    [{"organization_id": " "}, {"batch_size": 0}, {"max_platform_workers": 0}],
)
def test_population_config_rejects_bad_values(overrides: dict[str, object]) -> None:
    with pytest.raises(ValueError, match="must"):
        _config(**overrides)


def test_populates_products_from_both_platforms(
    populator: CatalogPopulator,
    raw_store: FileRawBatchStore,
    sqlite_unit_of_work: UnitOfWorkFactory,
) -> None:
    raw_store.append("shopee", [shopee_item(1001), shopee_item(1002)], batch_id="s1")
    raw_store.append("tiktokshop", [tiktok_product("1729384756")], batch_id="t1")

    result = populator.populate_from_imports(_config(), import_batch_id="run-1")

    assert result.success
    assert (result.total_processed, result.success_count, result.error_count) == (3, 3, 0)
    assert result.summary["shopee"].mappings_created == 2
    assert result.summary["tiktokshop"].average_base_price == 200000
    with sqlite_unit_of_work() as uow:
        product = uow.repositories.products.get_by_sku(
            master_sku("shopee", "1001", "org-1", "run-1")
        )
        assert product is not None
        assert product.import_batch_id == "run-1"
        assert product.pricing.platform_prices["shopee"].price == 177503
        assert product.pricing.platform_prices["tiktokshop"].price == 184500
        assert set(product.seo.platform_titles) == {"shopee", "tiktokshop"}
        assert product.seo.keywords[:3] == ("carbon", "fiber", "frame")
        assert [m.platform_product_id for m in product.platform_mappings] == ["1001"]
        assert product.data_quality_score == 100
        batch = uow.repositories.import_batches.get_by_batch_id("run-1")
        assert batch is not None
        assert batch.status is ImportBatchStatus.COMPLETED
        assert batch.successful_products == 3


def test_malformed_records_fail_individually(
    populator: CatalogPopulator,
    raw_store: FileRawBatchStore,
    sqlite_unit_of_work: UnitOfWorkFactory,
    job_queue: InMemoryJobQueue,
) -> None:
    raw_store.append(
        "shopee",
        [
            shopee_item(1),
            malformed_shopee_item(2),
            shopee_item(3),
            malformed_shopee_item(4),
            shopee_item(5),
        ],
    )

    result = populator.populate_from_imports(_config(), import_batch_id="run-1")

    assert result.success
    assert (result.total_processed, result.success_count, result.error_count) == (5, 3, 2)
    assert {error.product_id for error in result.errors} == {"2", "4"}
    assert {error.code for error in result.errors} == {"TRANSFORM_ERROR"}
    with sqlite_unit_of_work() as uow:
        assert uow.repositories.products.count() == 3
        log_entries = uow.repositories.sync_log.list_for_batch("run-1")
    assert Counter(entry.status for entry in log_entries) == {
        SyncLogStatus.SUCCESS: 3,
        SyncLogStatus.FAILED: 2,
    }
    states = Counter(job.state for job in job_queue.jobs_for_batch("run-1"))
    assert states == {JobState.COMPLETED: 3, JobState.FAILED: 2}


def test_skip_existing_is_idempotent(
    populator: CatalogPopulator,
    raw_store: FileRawBatchStore,
    sqlite_unit_of_work: UnitOfWorkFactory,
) -> None:
    raw_store.append("shopee", [shopee_item(1), shopee_item(2)])
    raw_store.append("tiktokshop", [tiktok_product("3")])

    first = populator.populate_from_imports(_config(skip_existing=True))
    second = populator.populate_from_imports(_config(skip_existing=True))

    assert second.success
    assert second.skipped_products == first.success_count == 3
    assert second.success_count == 0
    with sqlite_unit_of_work() as uow:
        assert uow.repositories.products.count() == 3
        assert len(uow.repositories.mappings.list_all()) == 3


def test_reimport_without_skip_deactivates_previous_mapping(
    populator: CatalogPopulator,
    raw_store: FileRawBatchStore,
    sqlite_unit_of_work: UnitOfWorkFactory,
) -> None:
    raw_store.append("shopee", [shopee_item(1), shopee_item(2)])

    populator.populate_from_imports(_config(), import_batch_id="run-1")
    second = populator.populate_from_imports(_config(), import_batch_id="run-2")

    assert second.success_count == 2
    with sqlite_unit_of_work() as uow:
        assert uow.repositories.products.count() == 4
        mappings = uow.repositories.mappings.list_all()
        active = uow.repositories.mappings.find_active("shopee", "1")
        assert active is not None
        newest = uow.repositories.products.get_by_sku(
            master_sku("shopee", "1", "org-1", "run-2")
        )
        assert newest is not None
        assert active.master_product_id == newest.id
        superseded = uow.repositories.products.get_by_sku(
            master_sku("shopee", "1", "org-1", "run-1")
        )
        assert superseded is not None
        assert superseded.data_quality_score == 90
        assert superseded.validation_warnings == [NO_MAPPINGS_WARNING]
        assert newest.data_quality_score == 100
    assert sum(mapping.is_active for mapping in mappings) == 2
    assert len(mappings) == 4


def test_dry_run_writes_nothing(
    populator: CatalogPopulator,
    raw_store: FileRawBatchStore,
    sqlite_unit_of_work: UnitOfWorkFactory,
) -> None:
    raw_store.append("shopee", [shopee_item(1), malformed_shopee_item(2)])

    result = populator.populate_from_imports(_config(dry_run=True), import_batch_id="dry")

    assert result.dry_run
    assert (result.success_count, result.error_count) == (1, 1)
    with sqlite_unit_of_work() as uow:
        assert uow.repositories.products.count() == 0
        assert uow.repositories.mappings.list_all() == []
        assert uow.repositories.sync_log.list_for_batch("dry") == []
    assert populator.generate_report("dry") == "Import batch not found: dry"


def test_unreadable_batch_aborts_platform(sqlite_unit_of_work: UnitOfWorkFactory) -> None:
    store = UnreadableRawBatchStore("shopee", good=[shopee_item(1), shopee_item(2)])
    populator = _populator(sqlite_unit_of_work, store)

    result = populator.populate_from_imports(
        _config(batch_size=1, platforms=("shopee",)), import_batch_id="run-1"
    )

    assert not result.success
    assert result.summary["shopee"].aborted
    assert result.success_count == 2
    assert result.errors[-1].code == "FATAL_IO_ERROR"
    with sqlite_unit_of_work() as uow:
        batch = uow.repositories.import_batches.get_by_batch_id("run-1")
        assert batch is not None
        assert batch.status is ImportBatchStatus.FAILED


@pytest.mark.parametrize(
    ("records", "policy", "expected"),
    [
        ("mixed", SuccessPolicy.READ_SUCCEEDED, True),
        ("mixed", SuccessPolicy.ANY_RECORD_SUCCEEDED, True),
        ("mixed", SuccessPolicy.NO_RECORD_ERRORS, False),
        ("broken", SuccessPolicy.ANY_RECORD_SUCCEEDED, False),
        ("none", SuccessPolicy.ANY_RECORD_SUCCEEDED, True),
        ("none", SuccessPolicy.NO_RECORD_ERRORS, True),
    ],
)
def test_success_policies(
    populator: CatalogPopulator,
    raw_store: FileRawBatchStore,
    records: str,
    policy: SuccessPolicy,
    expected: bool,  # noqa: FBT001
) -> None:
    payloads = {
        "mixed": [shopee_item(1), malformed_shopee_item(2)],
        "broken": [malformed_shopee_item(1)],
        "none": [],
    }[records]
    if payloads:
        raw_store.append("shopee", payloads)

    result = populator.populate_from_imports(_config(success_policy=policy))

    assert result.success is expected


def test_per_target_warnings(
    populator: CatalogPopulator,
    raw_store: FileRawBatchStore,
) -> None:
    raw_store.append("shopee", [shopee_item(1, brand=None)])

    result = populator.populate_from_imports(_config(platforms=("shopee", "lazada")))

    assert result.success_count == 1
    messages = [warning.message for warning in result.warnings]
    assert "Estimated fields: brand" in messages
    assert any(message.startswith("Pricing skipped for lazada") for message in messages)
    assert any(message.startswith("SEO title skipped for lazada") for message in messages)
    assert result.summary["lazada"].processed == 0


def test_report_lists_counts_and_errors(
    populator: CatalogPopulator,
    raw_store: FileRawBatchStore,
) -> None:
    raw_store.append("shopee", [shopee_item(1), malformed_shopee_item(2)])
    populator.populate_from_imports(_config(), import_batch_id="run-1")

    report = populator.generate_report("run-1")

    assert "Batch ID: run-1" in report
    assert "Status: completed" in report
    assert "  Successful: 1" in report
    assert "  Failed: 1" in report
    assert "Errors (1):" in report
    assert "  - shopee:2: Malformed Shopee record" in report


def test_report_truncates_long_error_lists() -> None:
    batch = ImportBatch(
        batch_id="b1",
        organization_id="org-1",
        errors=[
            {"platform": "shopee", "product_id": str(index), "message": "bad"}
            for index in range(12)
        ],
    )

    report = render_import_report(batch)

    assert "Errors (12):" in report
    assert "  ... and 2 more errors" in report
    assert "Completed: -" in report
    assert "Warnings" not in report


def test_platforms_run_in_parallel_workers(tmp_path: Path, raw_store: FileRawBatchStore) -> None:
    engine = create_engine(f"sqlite+pysqlite:///{tmp_path / 'catalog.db'}", future=True)
    start_mappers()
    upgrade_head(engine=engine)
    startup(engine=engine, force=True)
    try:
        raw_store.append("shopee", [shopee_item(1), shopee_item(2)])
        raw_store.append("tiktokshop", [tiktok_product("3")])
        populator = _populator(SqlAlchemyCatalogUnitOfWork, raw_store)

        result = populator.populate_from_imports(
            _config(dry_run=True, max_platform_workers=2)
        )
    finally:
        shutdown()
        engine.dispose()

    assert list(result.summary) == ["shopee", "tiktokshop"]
    assert result.success_count == 3


def test_non_object_records_fail_individually(
    populator: CatalogPopulator,
    raw_store: FileRawBatchStore,
    job_queue: InMemoryJobQueue,
) -> None:
    raw_store.append("shopee", [shopee_item(1), None, shopee_item(2)])

    result = populator.populate_from_imports(
        _config(platforms=("shopee",)), import_batch_id="run-1"
    )

    assert result.success
    assert (result.total_processed, result.success_count, result.error_count) == (3, 2, 1)
    (error,) = result.errors
    assert error.code == "TRANSFORM_ERROR"
    assert error.product_id == "unknown"
    assert error.message == "Raw record is not an object: NoneType"
    states = Counter(job.state for job in job_queue.jobs_for_batch("run-1"))
    assert states == {JobState.COMPLETED: 2, JobState.FAILED: 1}


def _shopee_mapping_lookup(statement: str, parameters: tuple[Any, ...]) -> bool:
    return (
        statement.startswith("SELECT")
        and "FROM platform_mapping" in statement
        and "shopee" in parameters
    )


def test_store_outage_aborts_only_the_affected_platform(
    populator: CatalogPopulator,
    raw_store: FileRawBatchStore,
    sqlite_engine: Engine,
    sqlite_unit_of_work: UnitOfWorkFactory,
    job_queue: InMemoryJobQueue,
) -> None:
    raw_store.append("shopee", [shopee_item(1), shopee_item(2)])
    raw_store.append("tiktokshop", [tiktok_product("3")])

    with StoreOutage(sqlite_engine, _shopee_mapping_lookup) as outage:
        result = populator.populate_from_imports(_config(), import_batch_id="run-1")

    assert len(outage.refused) == 1
    assert not result.success
    assert result.summary["shopee"].aborted
    assert result.summary["shopee"].succeeded == 0
    assert result.summary["tiktokshop"].succeeded == 1
    (error,) = result.errors
    assert (error.platform, error.code) == ("shopee", "FATAL_IO_ERROR")
    assert "Catalog store unavailable" in error.message
    states = {job.product_id: job.state for job in job_queue.jobs_for_batch("run-1")}
    assert states == {"1": JobState.FAILED, "3": JobState.COMPLETED}
    with sqlite_unit_of_work() as uow:
        assert uow.repositories.products.count() == 1
        batch = uow.repositories.import_batches.get_by_batch_id("run-1")
        assert batch is not None
        assert batch.status is ImportBatchStatus.FAILED


def test_unwritable_store_returns_a_failed_result(
    populator: CatalogPopulator,
    raw_store: FileRawBatchStore,
    sqlite_engine: Engine,
) -> None:
    raw_store.append("shopee", [shopee_item(1)])

    with StoreOutage(sqlite_engine, lambda statement, _: statement.startswith("INSERT")):
        result = populator.populate_from_imports(_config(), import_batch_id="run-1")

    assert not result.success
    assert result.total_processed == 0
    (error,) = result.errors
    assert (error.platform, error.code) == ("catalog", "FATAL_IO_ERROR")


@dataclass(slots=True)
class _MirrorFeed:
    """Second source of Shopee listings registered under its own platform name."""

    name: str
    source: ShopeeAdapter = field(default_factory=ShopeeAdapter)

    @property
    def platform(self) -> str:
        return self.name

    def native_id(self, raw: Mapping[str, Any]) -> str | None:
        return self.source.native_id(raw)

    def normalize(self, raw: Mapping[str, Any]) -> CanonicalRecord | TransformError:
        return self.source.normalize(raw)

    def validate_listing(self, raw: Mapping[str, Any]) -> ListingValidation:
        return self.source.validate_listing(raw)


def test_parallel_writers_of_one_listing_keep_one_record(
    tmp_path: Path,
    raw_store: FileRawBatchStore,
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    engine = create_engine(f"sqlite+pysqlite:///{tmp_path / 'catalog.db'}", future=True)
    startup(engine=engine, force=True)
    both_ready = threading.Barrier(2)
    store_product = SqlAlchemyMasterProductRepository.upsert

    def upsert_together(
        self: SqlAlchemyMasterProductRepository, product: MasterProduct
    ) -> MasterProduct:
        both_ready.wait(timeout=10)
        return store_product(self, product)

    monkeypatch.setattr(SqlAlchemyMasterProductRepository, "upsert", upsert_together)
    raw_store.append("shopee", [shopee_item(1)])
    raw_store.append("shopee-mirror", [shopee_item(1)])
    populator = CatalogPopulator(
        unit_of_work_factory=SqlAlchemyCatalogUnitOfWork,
        raw_store=raw_store,
        registry=default_registry(extra=[_MirrorFeed("shopee-mirror")]),
        pricing=PricingEngine(),
        seo=SeoTitleGenerator(),
    )
    try:
        result = populator.populate_from_imports(
            _config(platforms=("shopee", "shopee-mirror"), max_platform_workers=2),
            import_batch_id="run-1",
        )
        with SqlAlchemyCatalogUnitOfWork() as uow:
            product_count = uow.repositories.products.count()
            active = [m for m in uow.repositories.mappings.list_all() if m.is_active]
    finally:
        shutdown()

    assert (result.total_processed, result.success_count, result.error_count) == (2, 1, 1)
    assert [error.code for error in result.errors] == ["PERSISTENCE_ERROR"]
    assert product_count == 1
    assert [(m.platform, m.platform_product_id) for m in active] == [("shopee", "1")]
