"""The five validation stages.

Stages read through a shared :class:`ValidationContext` and return their report
section. Any exception a stage raises marks it degraded; the validator carries on
with the next stage.
"""

from __future__ import annotations

import math
from collections import Counter
from dataclasses import dataclass
from itertools import islice
from logging import getLogger
from typing import TYPE_CHECKING, Any, Protocol

from syncstore.domain.errors import CatalogError, TransformError
from syncstore.domain.raw_records import is_record, not_a_record
from syncstore.domain.model import assess_quality

from .report import (
    DataIntegrityValidation,
    DataTypeCheck,
    FieldCompleteness,
    FieldValidation,
    ImageCheck,
    ImageValidation,
    MasterCatalogValidation,
    ProductValidationSample,
    RawDataValidation,
    RawRecordSample,
    ReferentialIntegrity,
    ValueRangeCheck,
)

if TYPE_CHECKING:
    from collections.abc import Callable
    from uuid import UUID

    from syncstore.adapters.registry import AdapterRegistry
    from syncstore.config.validation import ValidationConfig
    from syncstore.domain.model import MasterProduct, PlatformMapping
    from syncstore.domain.ports import (
        CatalogUnitOfWork,
        ImageProbe,
        PlatformAdapter,
        RawBatchStore,
    )

    from .counters import ValidationCounters

log = getLogger(__name__)

REQUIRED_FIELDS = ("name", "base_price", "weight", "dimensions", "images", "category", "brand")
RAW_SAMPLE_LIMIT = 20
IMAGE_SAMPLE_LIMIT = 10
COMMON_ISSUE_LIMIT = 5
EXAMPLE_LIMIT = 5
NETWORK_ERROR = "Network error"


class StageDegradedError(CatalogError):
    """A stage ran but could not produce a meaningful result."""

    code = "STAGE_DEGRADED"


@dataclass(frozen=True, slots=True)
class CatalogSnapshot:
    products: tuple[MasterProduct, ...]
    mappings: tuple[PlatformMapping, ...]

    def mapping_counts(self) -> Counter[UUID | None]:
        return Counter(
            mapping.master_product_id for mapping in self.mappings if mapping.is_active
        )


class ValidationContext:
    """Collaborators shared by all stages, plus a lazily loaded catalog snapshot."""

    def __init__(
        self,
        *,
        unit_of_work_factory: Callable[[], CatalogUnitOfWork],
        raw_store: RawBatchStore,
        registry: AdapterRegistry,
        image_probe: ImageProbe,
        config: ValidationConfig,
        counters: ValidationCounters,
    ) -> None:
        self.unit_of_work_factory = unit_of_work_factory
        self.raw_store = raw_store
        self.registry = registry
        self.image_probe = image_probe
        self.config = config
        self.counters = counters
        self._catalog: CatalogSnapshot | None = None

    def catalog(self) -> CatalogSnapshot:
        if self._catalog is None:
            with self.unit_of_work_factory() as uow:
                products = tuple(uow.repositories.products.list_all())
                mappings = tuple(uow.repositories.mappings.list_all())
            self._catalog = CatalogSnapshot(products=products, mappings=mappings)
        return self._catalog

    def recent_products(self, limit: int) -> list[MasterProduct]:
        with self.unit_of_work_factory() as uow:
            return uow.repositories.products.list_recent(limit)


class ValidationStage[TResult](Protocol):
    name: str

    def run(self, context: ValidationContext) -> TResult: ...


class MasterCatalogStage:
    """Re-score every stored product with the structural quality rules."""

    name = "master_catalog"

    def run(self, context: ValidationContext) -> MasterCatalogValidation:
        catalog = context.catalog()
        counts = catalog.mapping_counts()
        samples: list[ProductValidationSample] = []
        status_breakdown: Counter[str] = Counter()
        score_total = 0
        valid = with_errors = with_warnings = error_count = warning_count = 0

        for product in catalog.products:
            assessment = assess_quality(
                name=product.name,
                description=product.description,
                images=product.images,
                base_price=product.pricing.base_price,
                seo_titles=product.seo.platform_titles,
                mapping_count=counts.get(product.id, 0),
            )
            score_total += assessment.score
            status_breakdown[str(product.status)] += 1
            error_count += len(assessment.errors)
            warning_count += len(assessment.warnings)
            valid += assessment.is_valid
            with_errors += bool(assessment.errors)
            with_warnings += bool(assessment.warnings)
            if len(samples) < context.config.catalog_sample_size:
                samples.append(
                    ProductValidationSample(
                        product_id=str(product.id),
                        master_sku=product.master_sku,
                        name=product.name,
                        is_valid=assessment.is_valid,
                        score=assessment.score,
                        errors=assessment.errors,
                        warnings=assessment.warnings,
                    )
                )

        total = len(catalog.products)
        return MasterCatalogValidation(
            total_master_products=total,
            valid_products=valid,
            invalid_products=total - valid,
            products_with_errors=with_errors,
            products_with_warnings=with_warnings,
            average_data_quality_score=round(score_total / total, 1) if total else 0.0,
            error_count=error_count,
            warning_count=warning_count,
            status_breakdown=dict(status_breakdown),
            samples=tuple(samples),
        )


def _is_number(value: Any) -> bool:
    return (
        isinstance(value, int | float)
        and not isinstance(value, bool)
        and math.isfinite(value)
    )


def _field_value(product: MasterProduct, field_name: str) -> Any:
    if field_name == "base_price":
        return product.pricing.base_price
    return getattr(product, field_name)


def _present(field_name: str, value: Any) -> bool:
    match field_name:
        case "name" | "brand":
            return isinstance(value, str) and bool(value.strip())
        case "base_price":
            return value is not None
        case "weight":
            return _is_number(value) and value > 0
        case "dimensions":
            return value is not None and not value.is_empty
        case "images":
            return bool(value)
        case _:
            return value is not None


def _valid(field_name: str, value: Any) -> bool:
    match field_name:
        case "name":
            return isinstance(value, str) and len(value.strip()) >= 3
        case "base_price":
            return _is_number(value) and value > 0
        case _:
            return _present(field_name, value)


class FieldValidationStage:
    """Completeness, type and range checks over the required product fields."""

    name = "field_validation"

    def run(self, context: ValidationContext) -> FieldValidation:
        products = context.catalog().products
        completeness: dict[str, FieldCompleteness] = {}
        for field_name in REQUIRED_FIELDS:
            values = [_field_value(product, field_name) for product in products]
            completeness[field_name] = FieldCompleteness(
                field_name=field_name,
                total_products=len(products),
                present_count=sum(_present(field_name, value) for value in values),
                valid_count=sum(_valid(field_name, value) for value in values),
            )
        return FieldValidation(
            completeness=completeness,
            data_types=(
                _type_check(products, "base_price", "number", _is_number),
                _type_check(products, "weight", "number", _is_number),
                _type_check(
                    products,
                    "name",
                    "string",
                    lambda value: isinstance(value, str) and bool(value),
                ),
            ),
            value_ranges=(
                _range_check(products, "base_price", minimum=0),
                _range_check(products, "weight", minimum=0),
            ),
        )


def _type_check(
    products: tuple[MasterProduct, ...],
    field_name: str,
    expected_type: str,
    predicate: Callable[[Any], bool],
) -> DataTypeCheck:
    valid = 0
    examples: list[str] = []
    for product in products:
        value = _field_value(product, field_name)
        if predicate(value):
            valid += 1
        elif len(examples) < EXAMPLE_LIMIT:
            examples.append(f"{value!r} ({type(value).__name__})")
    return DataTypeCheck(
        field_name=field_name,
        expected_type=expected_type,
        valid_count=valid,
        invalid_count=len(products) - valid,
        invalid_examples=tuple(examples),
    )


def _range_check(
    products: tuple[MasterProduct, ...],
    field_name: str,
    *,
    minimum: float | None = None,
    maximum: float | None = None,
) -> ValueRangeCheck:
    valid = 0
    out_of_range = 0
    examples: list[str] = []
    for product in products:
        value = _field_value(product, field_name)
        if not _is_number(value):
            continue
        reason = None
        if minimum is not None and value < minimum:
            reason = f"{value} below minimum {minimum}"
        elif maximum is not None and value > maximum:
            reason = f"{value} above maximum {maximum}"
        if reason is None:
            valid += 1
            continue
        out_of_range += 1
        if len(examples) < EXAMPLE_LIMIT:
            examples.append(reason)
    return ValueRangeCheck(
        field_name=field_name,
        minimum=minimum,
        maximum=maximum,
        valid_count=valid,
        out_of_range_count=out_of_range,
        out_of_range_examples=tuple(examples),
    )


class RawDataStage:
    """Spot check the first raw batches of every platform against the listing rules."""

    name = "raw_data"

    def run(self, context: ValidationContext) -> RawDataValidation:
        config = context.config
        counters = context.counters
        counters.reset()
        samples: list[RawRecordSample] = []

        for platform in config.platforms:
            counters.touch(platform)
            adapter = context.registry.resolve(platform)
            batches = islice(context.raw_store.iter_batches(platform), config.raw_sample_batches)
            for batch in batches:
                for raw in batch.products[: config.raw_sample_records]:
                    sample = _check_raw_record(adapter, platform, raw)
                    counters.record(platform, is_valid=sample.is_valid, errors=sample.errors)
                    if len(samples) < RAW_SAMPLE_LIMIT:
                        samples.append(sample)

        return RawDataValidation(platform_breakdown=counters.snapshot(), samples=tuple(samples))


def _check_raw_record(adapter: PlatformAdapter, platform: str, raw: object) -> RawRecordSample:
    if not is_record(raw):
        return RawRecordSample(
            platform=platform,
            product_id="unknown",
            is_valid=False,
            errors=(not_a_record(raw),),
            warnings=(),
        )
    listing = adapter.validate_listing(raw)
    errors = list(listing.errors)
    normalized = adapter.normalize(raw)
    if isinstance(normalized, TransformError):
        errors.append(str(normalized))
    return RawRecordSample(
        platform=platform,
        product_id=adapter.native_id(raw) or "unknown",
        is_valid=listing.is_valid and not isinstance(normalized, TransformError),
        errors=tuple(errors),
        warnings=listing.warnings,
        tokopedia_flag=listing.tokopedia_flag,
    )


class ImageAccessibilityStage:
    """HEAD-probe a sample of image URLs from the most recently created products."""

    name = "image_accessibility"

    def run(self, context: ValidationContext) -> ImageValidation:
        config = context.config
        owners: dict[str, str] = {}
        for product in context.recent_products(config.image_sample_cap):
            for image in product.images[: config.images_per_product]:
                if len(owners) >= config.image_sample_cap:
                    break
                owners.setdefault(image.url, str(product.id))

        if not owners:
            return ImageValidation(total_images_checked=0, valid_images=0, invalid_images=0)

        results = context.image_probe.probe(list(owners))
        if not any(result.responded for result in results):
            raise StageDegradedError(
                f"Network unavailable: none of {len(results)} image URLs produced an HTTP response"
            )

        issues: Counter[str] = Counter()
        checks: list[ImageCheck] = []
        for result in results:
            if not result.reachable:
                issues[_classify_issue(result.status_code, result.issue)] += 1
            checks.append(
                ImageCheck(
                    url=result.url,
                    product_id=owners.get(result.url, "unknown"),
                    is_accessible=result.reachable,
                    status_code=result.status_code,
                    issue=result.issue,
                )
            )
        valid = sum(1 for result in results if result.reachable)
        return ImageValidation(
            total_images_checked=len(results),
            valid_images=valid,
            invalid_images=len(results) - valid,
            common_issues=tuple(issues.most_common(COMMON_ISSUE_LIMIT)),
            samples=tuple(checks[:IMAGE_SAMPLE_LIMIT]),
        )


def _classify_issue(status_code: int | None, issue: str | None) -> str:
    if status_code is not None:
        return f"HTTP {status_code}"
    return f"{NETWORK_ERROR}: {issue}" if issue else NETWORK_ERROR


class DataIntegrityStage:
    """Duplicate keys, dangling mappings and implausible prices."""

    name = "data_integrity"

    def run(self, context: ValidationContext) -> DataIntegrityValidation:
        catalog = context.catalog()
        product_ids = {product.id for product in catalog.products}

        owners_by_key: dict[tuple[str, str], set[UUID | None]] = {}
        for mapping in catalog.mappings:
            owners_by_key.setdefault(mapping.business_key, set()).add(mapping.master_product_id)
        duplicate_keys = sum(len(owners) - 1 for owners in owners_by_key.values())
        sku_counts = Counter(product.master_sku for product in catalog.products)
        duplicate_skus = sum(count - 1 for count in sku_counts.values())

        orphaned = sum(
            1 for mapping in catalog.mappings if mapping.master_product_id not in product_ids
        )
        mapped_ids = {mapping.master_product_id for mapping in catalog.mappings}
        missing = sum(1 for product in catalog.products if product.id not in mapped_ids)
        inconsistent = sum(1 for product in catalog.products if _pricing_inconsistent(product))

        return DataIntegrityValidation(
            duplicate_products=duplicate_keys + duplicate_skus,
            orphaned_mappings=orphaned,
            missing_mappings=missing,
            inconsistent_pricing=inconsistent,
            referential_integrity=(
                ReferentialIntegrity(
                    relationship="master_product -> platform_mapping",
                    valid_references=len(catalog.mappings) - orphaned,
                    orphaned_records=orphaned,
                    missing_references=missing,
                ),
            ),
        )


def _pricing_inconsistent(product: MasterProduct) -> bool:
    base_price = product.pricing.base_price
    if base_price is None or base_price <= 0:
        return True
    return any(
        price.price <= 0 or price.price < base_price
        for price in product.pricing.platform_prices.values()
    )
