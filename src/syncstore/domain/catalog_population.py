"""Populate the master catalog from raw marketplace batches.

Every raw record runs through its platform adapter, gets priced and titled for each
target platform, and is upserted as a :class:`MasterProduct` keyed by ``master_sku``.
Records fail independently: a bad record is logged against the import batch while
the rest of the run carries on.
"""

from __future__ import annotations

import hashlib
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from enum import StrEnum
from itertools import batched
from logging import getLogger
from time import time_ns
from typing import TYPE_CHECKING, Any
from uuid import uuid4

from syncstore.config.sync import DEFAULT_POPULATION_BATCH_SIZE, DEFAULT_POPULATION_PLATFORMS
from syncstore.domain import raw_records
from syncstore.domain.errors import (
    CatalogError,
    ConfigurationError,
    FatalIOError,
    PersistenceError,
    RecordError,
    RecordWarning,
    TransformError,
    ValidationError,
)
from syncstore.domain.model import (
    ImportBatch,
    ImportBatchStatus,
    MasterProduct,
    PlatformMapping,
    PlatformPrice,
    ProductPricing,
    ProductSeo,
    ProductStatus,
    SyncLogEntry,
    SyncLogStatus,
    utcnow,
)
from syncstore.domain.seo import extract_keywords

if TYPE_CHECKING:
    from collections.abc import Callable, Iterator

    from syncstore.adapters.registry import AdapterRegistry
    from syncstore.domain.model import CanonicalRecord
    from syncstore.domain.ports import (
        CatalogUnitOfWork,
        JobQueue,
        PlatformAdapter,
        RawBatchStore,
    )
    from syncstore.domain.pricing import PricingEngine
    from syncstore.domain.seo import SeoTitleGenerator

log = getLogger(__name__)

SKU_PREFIXES: dict[str, str] = {"shopee": "SH", "tiktokshop": "TT"}
SKU_SUFFIX_LENGTH = 6
REPORT_ERROR_LIMIT = 10
REPORT_WARNING_LIMIT = 5
STORE_PLATFORM = "catalog"


class SuccessPolicy(StrEnum):
    """How a population run decides whether it succeeded."""

    READ_SUCCEEDED = "read_succeeded"
    ANY_RECORD_SUCCEEDED = "any_record_succeeded"
    NO_RECORD_ERRORS = "no_record_errors"


@dataclass(frozen=True, slots=True, kw_only=True)
class PopulationConfig:
    organization_id: str
    batch_size: int = DEFAULT_POPULATION_BATCH_SIZE
    skip_existing: bool = False
    dry_run: bool = False
    platforms: tuple[str, ...] = DEFAULT_POPULATION_PLATFORMS
    success_policy: SuccessPolicy = SuccessPolicy.READ_SUCCEEDED
    max_platform_workers: int = 1

    def __post_init__(self) -> None:
        if not self.organization_id.strip():
            raise ValueError("organization_id must not be blank")
        if self.batch_size <= 0:
            raise ValueError("batch_size must be greater than zero")
        if self.max_platform_workers <= 0:
            raise ValueError("max_platform_workers must be greater than zero")

    def as_dict(self) -> dict[str, Any]:
        return {
            "organization_id": self.organization_id,
            "batch_size": self.batch_size,
            "skip_existing": self.skip_existing,
            "dry_run": self.dry_run,
            "platforms": list(self.platforms),
            "success_policy": str(self.success_policy),
            "max_platform_workers": self.max_platform_workers,
        }


@dataclass(slots=True)
class PlatformSummary:
    """Running counters for one source platform."""

    platform: str
    processed: int = 0
    succeeded: int = 0
    failed: int = 0
    skipped: int = 0
    mappings_created: int = 0
    aborted: bool = False
    base_price_total: float = 0.0
    platform_price_totals: dict[str, float] = field(default_factory=dict[str, float])
    platform_price_counts: dict[str, int] = field(default_factory=dict[str, int])
    seo_quality_total: float = 0.0
    seo_similarity_total: float = 0.0
    seo_titles: int = 0

    def record_product(self, product: MasterProduct) -> None:
        self.succeeded += 1
        self.base_price_total += product.base_price
        for target, price in product.pricing.platform_prices.items():
            self.platform_price_totals[target] = (
                self.platform_price_totals.get(target, 0.0) + price.price
            )
            self.platform_price_counts[target] = self.platform_price_counts.get(target, 0) + 1
        for title in product.seo.platform_titles.values():
            self.seo_quality_total += title.quality_score
            self.seo_similarity_total += title.similarity
            self.seo_titles += 1

    @property
    def average_base_price(self) -> float:
        return self.base_price_total / self.succeeded if self.succeeded else 0.0

    @property
    def average_platform_prices(self) -> dict[str, float]:
        return {
            target: total / self.platform_price_counts[target]
            for target, total in self.platform_price_totals.items()
        }

    @property
    def average_seo_quality(self) -> float:
        return self.seo_quality_total / self.seo_titles if self.seo_titles else 0.0

    @property
    def average_seo_similarity(self) -> float:
        return self.seo_similarity_total / self.seo_titles if self.seo_titles else 0.0


@dataclass(slots=True)
class PopulationResult:
    import_batch_id: str
    dry_run: bool
    success: bool = False
    total_processed: int = 0
    success_count: int = 0
    error_count: int = 0
    skipped_products: int = 0
    errors: list[RecordError] = field(default_factory=list[RecordError])
    warnings: list[RecordWarning] = field(default_factory=list[RecordWarning])
    summary: dict[str, PlatformSummary] = field(default_factory=dict[str, PlatformSummary])

    @property
    def read_succeeded(self) -> bool:
        return not any(summary.aborted for summary in self.summary.values())

    def merge(self, outcome: _PlatformOutcome) -> None:
        summary = outcome.summary
        self.summary[summary.platform] = summary
        self.total_processed += summary.processed
        self.success_count += summary.succeeded
        self.error_count += summary.failed
        self.skipped_products += summary.skipped
        self.errors.extend(outcome.errors)
        self.warnings.extend(outcome.warnings)

    def decide(self, policy: SuccessPolicy) -> bool:
        if not self.read_succeeded:
            return False
        if policy is SuccessPolicy.ANY_RECORD_SUCCEEDED:
            return self.success_count > 0 or self.error_count == 0
        if policy is SuccessPolicy.NO_RECORD_ERRORS:
            return self.error_count == 0
        return True


@dataclass(slots=True)
class _PlatformOutcome:
    summary: PlatformSummary
    errors: list[RecordError] = field(default_factory=list[RecordError])
    warnings: list[RecordWarning] = field(default_factory=list[RecordWarning])

    def fail(self, exc: CatalogError, product_id: str | None) -> RecordError:
        self.summary.failed += 1
        error = RecordError.from_exception(
            exc, product_id=product_id, platform=self.summary.platform
        )
        self.errors.append(error)
        return error

    def warn(self, product_id: str | None, message: str) -> None:
        self.warnings.append(
            RecordWarning(
                product_id=product_id or "unknown",
                platform=self.summary.platform,
                message=message,
            )
        )


def master_sku(platform: str, native_id: str, organization_id: str, import_batch_id: str) -> str:
    """``<prefix>-<native id>-<digest>``; the digest is stable per organization and batch."""

    prefix = SKU_PREFIXES.get(platform, platform[:2].upper())
    digest = hashlib.sha256(f"{organization_id}:{import_batch_id}".encode()).hexdigest()
    return f"{prefix}-{native_id}-{digest[:SKU_SUFFIX_LENGTH].upper()}"


def new_import_batch_id() -> str:
    return f"master_import_{time_ns() // 1_000_000}_{uuid4().hex[:6]}"


def validate_product(product: MasterProduct) -> None:
    if not product.name.strip():
        raise ValidationError("Product name must not be empty")
    if product.base_price <= 0:
        raise ValidationError("Base price must be greater than zero")
    if not product.images:
        raise ValidationError("Product must have at least one image")


class CatalogPopulator:
    def __init__(
        self,
        *,
        unit_of_work_factory: Callable[[], CatalogUnitOfWork],
        raw_store: RawBatchStore,
        registry: AdapterRegistry,
        pricing: PricingEngine,
        seo: SeoTitleGenerator,
        job_queue: JobQueue | None = None,
    ) -> None:
        self.unit_of_work_factory = unit_of_work_factory
        self.raw_store = raw_store
        self.registry = registry
        self.pricing = pricing
        self.seo = seo
        self.job_queue = job_queue

    def populate_from_imports(
        self,
        config: PopulationConfig,
        *,
        import_batch_id: str | None = None,
    ) -> PopulationResult:
        batch_id = import_batch_id or new_import_batch_id()
        result = PopulationResult(import_batch_id=batch_id, dry_run=config.dry_run)
        log.info(
            "Starting catalog population: batch=%s, platforms=%s, dry_run=%s, skip_existing=%s",
            batch_id,
            ",".join(config.platforms),
            config.dry_run,
            config.skip_existing,
        )

        if not config.dry_run:
            try:
                self._open_import_batch(batch_id, config)
            except FatalIOError as exc:
                log.error("Cannot open import batch %s: %s", batch_id, exc)
                result.errors.append(
                    RecordError.from_exception(exc, product_id=None, platform=STORE_PLATFORM)
                )
                return result
        try:
            for outcome in self._run_platforms(config, batch_id):
                result.merge(outcome)
        except Exception:
            if not config.dry_run:
                self._close_import_batch(result, ImportBatchStatus.FAILED)
            raise

        result.success = result.decide(config.success_policy)
        if not config.dry_run:
            status = ImportBatchStatus.COMPLETED if result.success else ImportBatchStatus.FAILED
            self._close_import_batch(result, status)

        log.info(
            "Finished catalog population: batch=%s, processed=%s, succeeded=%s, failed=%s, "
            "skipped=%s",
            batch_id,
            result.total_processed,
            result.success_count,
            result.error_count,
            result.skipped_products,
        )
        return result

    def generate_report(self, import_batch_id: str) -> str:
        with self.unit_of_work_factory() as uow:
            batch = uow.repositories.import_batches.get_by_batch_id(import_batch_id)
            if batch is None:
                return f"Import batch not found: {import_batch_id}"
            return render_import_report(batch)

    def build_product(
        self,
        record: CanonicalRecord,
        config: PopulationConfig,
        import_batch_id: str,
        outcome: _PlatformOutcome,
    ) -> MasterProduct:
        native_id = record.platform_product_id
        product = MasterProduct(
            organization_id=config.organization_id,
            master_sku=master_sku(
                record.platform, native_id, config.organization_id, import_batch_id
            ),
            name=record.name,
            description=record.description,
            weight=record.weight,
            dimensions=record.dimensions,
            images=list(record.images),
            category=record.category,
            brand=record.brand,
            pricing=ProductPricing(base_price=record.base_price),
            seo=ProductSeo(keywords=tuple(extract_keywords(record.name))),
            status=ProductStatus.ACTIVE,
            import_source=record.platform,
            imported_at=utcnow(),
            import_batch_id=import_batch_id,
        )
        if record.estimated_fields:
            outcome.warn(native_id, f"Estimated fields: {', '.join(record.estimated_fields)}")

        validate_product(product)

        for target in config.platforms:
            self._price_for(product, target, native_id, outcome)
            self._title_for(product, target, native_id, outcome)

        product.attach_mapping(
            PlatformMapping(
                platform=record.platform,
                platform_product_id=native_id,
                platform_data=record.platform_data,
                last_sync_at=utcnow(),
            )
        )
        return product

    def _price_for(
        self,
        product: MasterProduct,
        target: str,
        native_id: str,
        outcome: _PlatformOutcome,
    ) -> None:
        try:
            priced = self.pricing.calculate_platform_price(product.base_price, target)
        except ConfigurationError as exc:
            outcome.warn(native_id, f"Pricing skipped for {target}: {exc}")
            return
        fee_config = self.pricing.get_platform_config(target)
        product.pricing.platform_prices[target] = PlatformPrice(
            price=priced.final_price,
            fee_percentage=fee_config.fee_percentage if fee_config else 0.0,
            calculated_at=priced.calculated_at,
        )

    def _title_for(
        self,
        product: MasterProduct,
        target: str,
        native_id: str,
        outcome: _PlatformOutcome,
    ) -> None:
        try:
            generated = self.seo.generate_platform_title(product.name, target)
        except ConfigurationError as exc:
            outcome.warn(native_id, f"SEO title skipped for {target}: {exc}")
            return
        if not generated.in_similarity_band:
            outcome.warn(
                native_id,
                f"SEO title for {target} has {generated.similarity:.1f}% similarity, "
                "outside the 70-85% band",
            )
        product.seo.platform_titles[target] = generated.to_seo_title()

    def _run_platforms(
        self,
        config: PopulationConfig,
        batch_id: str,
    ) -> Iterator[_PlatformOutcome]:
        workers = min(config.max_platform_workers, len(config.platforms))
        if workers <= 1:
            for platform in config.platforms:
                yield self._process_platform(platform, config, batch_id)
            return
        with ThreadPoolExecutor(max_workers=workers, thread_name_prefix="populate") as pool:
            futures = [
                pool.submit(self._process_platform, platform, config, batch_id)
                for platform in config.platforms
            ]
            for future in futures:
                yield future.result()

    def _process_platform(
        self,
        platform: str,
        config: PopulationConfig,
        batch_id: str,
    ) -> _PlatformOutcome:
        outcome = _PlatformOutcome(summary=PlatformSummary(platform=platform))
        adapter = self.registry.resolve(platform)
        log.info("Processing %s records", platform)
        try:
            for chunk in batched(self._iter_records(platform), config.batch_size):
                with self.unit_of_work_factory() as uow:
                    for raw in chunk:
                        self._process_record(uow, adapter, raw, config, batch_id, outcome)
        except FatalIOError as exc:
            log.warning("Aborting %s: %s", platform, exc)
            outcome.summary.aborted = True
            outcome.errors.append(
                RecordError.from_exception(exc, product_id=None, platform=platform)
            )
        return outcome

    def _iter_records(self, platform: str) -> Iterator[object]:
        for batch in self.raw_store.iter_batches(platform):
            log.debug(
                "Reading %s batch %s (%s records)", platform, batch.batch_id, len(batch.products)
            )
            yield from batch.products

    def _process_record(
        self,
        uow: CatalogUnitOfWork,
        adapter: PlatformAdapter,
        raw: object,
        config: PopulationConfig,
        batch_id: str,
        outcome: _PlatformOutcome,
    ) -> None:
        summary = outcome.summary
        summary.processed += 1
        native_id = raw_records.native_id(adapter, raw)
        job_id = self._enqueue(batch_id, native_id, summary.platform)

        try:
            normalized = raw_records.normalize(adapter, raw)
            if isinstance(normalized, TransformError):
                raise normalized
            record = normalized
            mappings = uow.repositories.mappings
            existing = mappings.find_active(*record.business_key)
            if existing is not None and config.skip_existing:
                summary.skipped += 1
                self._finish_job(job_id)
                return

            product = self.build_product(record, config, batch_id, outcome)
            if not config.dry_run:
                if existing is not None:
                    mappings.deactivate(existing)
                uow.repositories.products.upsert(product)
                uow.repositories.sync_log.add(
                    SyncLogEntry(
                        batch_id=batch_id,
                        product_id=record.platform_product_id,
                        platform=summary.platform,
                        status=SyncLogStatus.SUCCESS,
                    )
                )
                uow.commit()
        except FatalIOError as exc:
            summary.failed += 1
            self._fail_job(
                job_id,
                RecordError.from_exception(exc, product_id=native_id, platform=summary.platform),
            )
            raise
        except CatalogError as exc:
            if isinstance(exc, PersistenceError):
                uow.rollback()
            error = outcome.fail(exc, native_id)
            log.debug("Record %s:%s failed: %s", summary.platform, error.product_id, exc)
            self._fail_job(job_id, error)
            if not config.dry_run:
                self._log_failure(uow, batch_id, error)
        else:
            summary.record_product(product)
            summary.mappings_created += len(product.platform_mappings)
            self._finish_job(job_id)

    def _log_failure(self, uow: CatalogUnitOfWork, batch_id: str, error: RecordError) -> None:
        uow.repositories.sync_log.add(
            SyncLogEntry(
                batch_id=batch_id,
                product_id=error.product_id,
                platform=error.platform,
                status=SyncLogStatus.FAILED,
                error_code=error.code,
                error_message=error.message,
            )
        )
        uow.commit()

    def _enqueue(self, batch_id: str, native_id: str | None, platform: str) -> str | None:
        if self.job_queue is None:
            return None
        job = self.job_queue.enqueue(
            batch_id=batch_id, product_id=native_id or "unknown", platform=platform
        )
        self.job_queue.start(job.job_id)
        return job.job_id

    def _finish_job(self, job_id: str | None) -> None:
        if self.job_queue is not None and job_id is not None:
            self.job_queue.complete(job_id)

    def _fail_job(self, job_id: str | None, error: RecordError) -> None:
        if self.job_queue is not None and job_id is not None:
            self.job_queue.fail(job_id, error_code=error.code, error_message=error.message)

    def _open_import_batch(self, batch_id: str, config: PopulationConfig) -> None:
        with self.unit_of_work_factory() as uow:
            uow.repositories.import_batches.add(
                ImportBatch(
                    batch_id=batch_id,
                    organization_id=config.organization_id,
                    config=config.as_dict(),
                )
            )
            uow.commit()

    def _close_import_batch(self, result: PopulationResult, status: ImportBatchStatus) -> None:
        try:
            self._store_import_totals(result, status)
        except FatalIOError as exc:
            log.error("Cannot close import batch %s: %s", result.import_batch_id, exc)
            result.errors.append(
                RecordError.from_exception(exc, product_id=None, platform=STORE_PLATFORM)
            )
            result.success = False

    def _store_import_totals(self, result: PopulationResult, status: ImportBatchStatus) -> None:
        with self.unit_of_work_factory() as uow:
            batch = uow.repositories.import_batches.get_by_batch_id(result.import_batch_id)
            if batch is None:
                log.warning("Import batch %s vanished before completion", result.import_batch_id)
                return
            batch.status = status
            batch.completed_at = utcnow()
            batch.total_products = result.total_processed
            batch.successful_products = result.success_count
            batch.failed_products = result.error_count
            batch.skipped_products = result.skipped_products
            batch.errors = [error.to_dict() for error in result.errors]
            batch.warnings = [warning.to_dict() for warning in result.warnings]
            uow.commit()


def render_import_report(batch: ImportBatch) -> str:
    started = batch.started_at.isoformat()
    completed = batch.completed_at.isoformat() if batch.completed_at else "-"
    lines = [
        "Master Catalog Population Report",
        "================================",
        "",
        f"Batch ID: {batch.batch_id}",
        f"Organization: {batch.organization_id}",
        f"Status: {batch.status}",
        f"Started: {started}",
        f"Completed: {completed}",
        "",
        "Results:",
        f"  Total Processed: {batch.total_products}",
        f"  Successful: {batch.successful_products}",
        f"  Failed: {batch.failed_products}",
        f"  Skipped: {batch.skipped_products}",
    ]
    lines.extend(_report_section("Errors", "errors", batch.errors, REPORT_ERROR_LIMIT))
    lines.extend(_report_section("Warnings", "warnings", batch.warnings, REPORT_WARNING_LIMIT))
    return "\n".join(lines) + "\n"


def _report_section(
    title: str,
    noun: str,
    entries: list[dict[str, Any]],
    limit: int,
) -> list[str]:
    if not entries:
        return []
    lines = ["", f"{title} ({len(entries)}):"]
    lines.extend(
        f"  - {entry.get('platform', '?')}:{entry.get('product_id', 'unknown')}: "
        f"{entry.get('message', '')}"
        for entry in entries[:limit]
    )
    if len(entries) > limit:
        lines.append(f"  ... and {len(entries) - limit} more {noun}")
    return lines
