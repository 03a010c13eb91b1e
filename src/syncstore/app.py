"""Application orchestration entry points."""

from __future__ import annotations

from collections.abc import Callable
from logging import getLogger
from typing import TYPE_CHECKING

from syncstore.adapters.image_probe import HttpImageProbe
from syncstore.adapters.job_queue import InMemoryJobQueue
from syncstore.adapters.raw_store import FileRawBatchStore
from syncstore.adapters.registry import default_registry
from syncstore.adapters.sqlalchemy.unit_of_work import (
    SqlAlchemyCatalogUnitOfWork,
    is_started,
    startup,
)
from syncstore.config import (
    get_pricing_config,
    get_storage_config,
    get_sync_config,
    get_validation_config,
)
from syncstore.domain.catalog_population import (
    CatalogPopulator,
    PopulationConfig,
    PopulationResult,
    SuccessPolicy,
)
from syncstore.domain.data_quality import DataQualityValidator
from syncstore.domain.errors import ConfigurationError
from syncstore.domain.job_status import BatchJobStatus, JobStatusService, QueueStatistics
from syncstore.domain.ports.unit_of_work import CatalogUnitOfWork
from syncstore.domain.pricing import PricingEngine, dump_fee_configs
from syncstore.domain.seo import SeoTitleGenerator

if TYPE_CHECKING:
    from pathlib import Path

    from syncstore.adapters.registry import AdapterRegistry
    from syncstore.config import ValidationConfig
    from syncstore.domain.data_quality import ValidationReport
    from syncstore.domain.ports import ImageProbe, JobQueue, RawBatchStore

UnitOfWorkFactory = Callable[[], CatalogUnitOfWork]

log = getLogger(__name__)

# Jobs live only as long as this process and only for the newest finished batches; older
# status lookups fall back to the sync log.
JOB_QUEUE: JobQueue = InMemoryJobQueue()


def _ensure_started() -> None:
    if not is_started():
        startup()


def build_pricing_engine() -> PricingEngine:
    """Pricing engine from ``SYNCSTORE_PRICING_CONFIG`` or the built-in fee table."""

    config = get_pricing_config()
    if config.fee_config_path is None:
        return PricingEngine()
    log.info("Loading platform fee configuration from %s", config.fee_config_path)
    return PricingEngine.from_file(config.fee_config_path)


def build_raw_store() -> FileRawBatchStore:
    return FileRawBatchStore(get_storage_config().raw_imports_path())


def populate_master_catalog(
    *,
    organization_id: str | None = None,
    platforms: tuple[str, ...] | None = None,
    batch_size: int | None = None,
    skip_existing: bool = False,
    dry_run: bool = False,
    success_policy: SuccessPolicy = SuccessPolicy.READ_SUCCEEDED,
    max_platform_workers: int = 1,
    unit_of_work_factory: UnitOfWorkFactory | None = None,
    raw_store: RawBatchStore | None = None,
    registry: AdapterRegistry | None = None,
    pricing: PricingEngine | None = None,
    job_queue: JobQueue | None = None,
) -> PopulationResult:
    """Populate the master catalog from stored raw imports using the configured adapters."""

    _ensure_started()
    defaults = get_sync_config()
    config = PopulationConfig(
        organization_id=organization_id or defaults.organization_id,
        batch_size=batch_size or defaults.batch_size,
        skip_existing=skip_existing,
        dry_run=dry_run,
        platforms=platforms or defaults.platforms,
        success_policy=success_policy,
        max_platform_workers=max_platform_workers,
    )
    populator = CatalogPopulator(
        unit_of_work_factory=unit_of_work_factory or SqlAlchemyCatalogUnitOfWork,
        raw_store=raw_store or build_raw_store(),
        registry=registry or default_registry(),
        pricing=pricing or build_pricing_engine(),
        seo=SeoTitleGenerator(),
        job_queue=job_queue or JOB_QUEUE,
    )
    return populator.populate_from_imports(config)


def import_batch_report(
    import_batch_id: str,
    *,
    unit_of_work_factory: UnitOfWorkFactory | None = None,
) -> str:
    _ensure_started()
    populator = CatalogPopulator(
        unit_of_work_factory=unit_of_work_factory or SqlAlchemyCatalogUnitOfWork,
        raw_store=build_raw_store(),
        registry=default_registry(),
        pricing=PricingEngine(),
        seo=SeoTitleGenerator(),
    )
    return populator.generate_report(import_batch_id)


def validate_catalog(
    *,
    config: ValidationConfig | None = None,
    unit_of_work_factory: UnitOfWorkFactory | None = None,
    raw_store: RawBatchStore | None = None,
    registry: AdapterRegistry | None = None,
    image_probe: ImageProbe | None = None,
) -> ValidationReport:
    """Run every data quality stage against the stored catalog and raw imports."""

    _ensure_started()
    effective_config = config or get_validation_config()
    validator = DataQualityValidator(
        unit_of_work_factory=unit_of_work_factory or SqlAlchemyCatalogUnitOfWork,
        raw_store=raw_store or build_raw_store(),
        registry=registry or default_registry(),
        image_probe=image_probe
        or HttpImageProbe(
            resilience=effective_config.image_resilience,
            concurrency=effective_config.image_concurrency,
        ),
        config=effective_config,
    )
    report = validator.validate_all_data()
    log.info(
        "Validation finished: status=%s, score=%s, recommendations=%s",
        report.status,
        report.overall_score,
        len(report.recommendations),
    )
    return report


def batch_status(
    batch_id: str,
    *,
    unit_of_work_factory: UnitOfWorkFactory | None = None,
    job_queue: JobQueue | None = None,
) -> BatchJobStatus | None:
    _ensure_started()
    service = JobStatusService(
        queue=job_queue or JOB_QUEUE,
        unit_of_work_factory=unit_of_work_factory or SqlAlchemyCatalogUnitOfWork,
    )
    return service.get_batch_status(batch_id)


def queue_statistics(*, job_queue: JobQueue | None = None) -> QueueStatistics:
    service = JobStatusService(
        queue=job_queue or JOB_QUEUE,
        unit_of_work_factory=SqlAlchemyCatalogUnitOfWork,
    )
    return service.queue_statistics()


def export_pricing_configuration(destination: Path | None = None) -> str:
    """Serialise the active fee table; written to ``destination`` when given."""

    payload = dump_fee_configs(build_pricing_engine().export_configuration())
    if destination is not None:
        destination.write_text(payload + "\n", encoding="utf-8")
        log.info("Exported platform fee configuration to %s", destination)
    return payload


def import_pricing_configuration(source: Path, destination: Path | None = None) -> PricingEngine:
    """Validate a fee table from ``source`` and install it at the configured location."""

    engine = PricingEngine.from_file(source)
    target = destination or get_pricing_config().fee_config_path
    if target is None:
        raise ConfigurationError(
            "No destination for pricing configuration; set SYNCSTORE_PRICING_CONFIG or pass one"
        )
    target.parent.mkdir(parents=True, exist_ok=True)
    target.write_text(dump_fee_configs(engine.export_configuration()) + "\n", encoding="utf-8")
    log.info("Imported %s platform fee configs into %s", len(engine.all_platform_configs()), target)
    return engine
