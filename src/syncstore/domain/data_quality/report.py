"""Result types of the data quality validator."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime  # noqa: TC003
from enum import StrEnum


class ValidationStatus(StrEnum):
    PASS = "PASS"
    WARNING = "WARNING"
    FAIL = "FAIL"


class RecommendationPriority(StrEnum):
    CRITICAL = "critical"
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"

    @property
    def rank(self) -> int:
        return _PRIORITY_RANK[self]


_PRIORITY_RANK = {
    RecommendationPriority.CRITICAL: 4,
    RecommendationPriority.HIGH: 3,
    RecommendationPriority.MEDIUM: 2,
    RecommendationPriority.LOW: 1,
}


class RecommendationCategory(StrEnum):
    DATA_QUALITY = "data_quality"
    FIELD_VALIDATION = "field_validation"
    IMAGE_VALIDATION = "image_validation"
    DATA_INTEGRITY = "data_integrity"
    PERFORMANCE = "performance"


@dataclass(frozen=True, slots=True, kw_only=True)
class Recommendation:
    priority: RecommendationPriority
    category: RecommendationCategory
    title: str
    description: str
    action_required: str
    expected_outcome: str
    affected_count: int | None = None


@dataclass(frozen=True, slots=True)
class StageFinding:
    """A stage that could not run; reported at warning level."""

    stage: str
    message: str
    severity: str = "warning"


@dataclass(frozen=True, slots=True, kw_only=True)
class ProductValidationSample:
    product_id: str
    master_sku: str
    name: str
    is_valid: bool
    score: int
    errors: tuple[str, ...]
    warnings: tuple[str, ...]


@dataclass(frozen=True, slots=True, kw_only=True)
class MasterCatalogValidation:
    total_master_products: int
    valid_products: int
    invalid_products: int
    products_with_errors: int
    products_with_warnings: int
    average_data_quality_score: float
    error_count: int
    warning_count: int
    status_breakdown: dict[str, int] = field(default_factory=dict[str, int])
    samples: tuple[ProductValidationSample, ...] = ()


@dataclass(frozen=True, slots=True, kw_only=True)
class RawPlatformValidation:
    platform: str
    total_products: int
    valid_products: int
    invalid_products: int
    common_errors: tuple[tuple[str, int], ...] = ()

    @property
    def validation_rate(self) -> float:
        if not self.total_products:
            return 0.0
        return round(self.valid_products / self.total_products * 100, 1)


@dataclass(frozen=True, slots=True, kw_only=True)
class RawRecordSample:
    platform: str
    product_id: str
    is_valid: bool
    errors: tuple[str, ...]
    warnings: tuple[str, ...]
    tokopedia_flag: bool | None = None


@dataclass(frozen=True, slots=True, kw_only=True)
class RawDataValidation:
    platform_breakdown: dict[str, RawPlatformValidation]
    samples: tuple[RawRecordSample, ...] = ()

    @property
    def total_raw_products(self) -> int:
        return sum(p.total_products for p in self.platform_breakdown.values())

    @property
    def valid_raw_products(self) -> int:
        return sum(p.valid_products for p in self.platform_breakdown.values())

    @property
    def invalid_raw_products(self) -> int:
        return sum(p.invalid_products for p in self.platform_breakdown.values())

    @property
    def validity_rate(self) -> float:
        if not self.total_raw_products:
            return 0.0
        return round(self.valid_raw_products / self.total_raw_products * 100, 1)


@dataclass(frozen=True, slots=True, kw_only=True)
class ImageCheck:
    url: str
    product_id: str
    is_accessible: bool
    status_code: int | None = None
    issue: str | None = None


@dataclass(frozen=True, slots=True, kw_only=True)
class ImageValidation:
    total_images_checked: int
    valid_images: int
    invalid_images: int
    common_issues: tuple[tuple[str, int], ...] = ()
    samples: tuple[ImageCheck, ...] = ()

    @property
    def accessibility_rate(self) -> float:
        if not self.total_images_checked:
            return 0.0
        return round(self.valid_images / self.total_images_checked * 100, 1)


@dataclass(frozen=True, slots=True, kw_only=True)
class FieldCompleteness:
    field_name: str
    total_products: int
    present_count: int
    valid_count: int

    @property
    def missing_count(self) -> int:
        return self.total_products - self.present_count

    @property
    def completeness_percentage(self) -> float:
        if not self.total_products:
            return 0.0
        return round(self.present_count / self.total_products * 100, 1)


@dataclass(frozen=True, slots=True, kw_only=True)
class DataTypeCheck:
    field_name: str
    expected_type: str
    valid_count: int
    invalid_count: int
    invalid_examples: tuple[str, ...] = ()


@dataclass(frozen=True, slots=True, kw_only=True)
class ValueRangeCheck:
    field_name: str
    minimum: float | None
    maximum: float | None
    valid_count: int
    out_of_range_count: int
    out_of_range_examples: tuple[str, ...] = ()


@dataclass(frozen=True, slots=True, kw_only=True)
class FieldValidation:
    completeness: dict[str, FieldCompleteness]
    data_types: tuple[DataTypeCheck, ...] = ()
    value_ranges: tuple[ValueRangeCheck, ...] = ()

    @property
    def required_fields_present(self) -> int:
        return sum(f.present_count for f in self.completeness.values())

    @property
    def required_fields_missing(self) -> int:
        return sum(f.missing_count for f in self.completeness.values())

    @property
    def completeness_rate(self) -> float:
        total = self.required_fields_present + self.required_fields_missing
        if not total:
            return 0.0
        return round(self.required_fields_present / total * 100, 1)


@dataclass(frozen=True, slots=True, kw_only=True)
class ReferentialIntegrity:
    relationship: str
    valid_references: int
    orphaned_records: int
    missing_references: int


@dataclass(frozen=True, slots=True, kw_only=True)
class DataIntegrityValidation:
    duplicate_products: int
    orphaned_mappings: int
    missing_mappings: int
    inconsistent_pricing: int
    referential_integrity: tuple[ReferentialIntegrity, ...] = ()

    @property
    def issue_categories(self) -> int:
        return sum(
            1
            for count in (
                self.duplicate_products,
                self.orphaned_mappings,
                self.missing_mappings,
                self.inconsistent_pricing,
            )
            if count > 0
        )


@dataclass(frozen=True, slots=True, kw_only=True)
class ValidationOverview:
    total_products_validated: int
    started_at: datetime
    ended_at: datetime
    platforms_covered: tuple[str, ...]
    stages_run: tuple[str, ...]
    degraded_stages: tuple[str, ...] = ()

    @property
    def duration_ms(self) -> int:
        return int((self.ended_at - self.started_at).total_seconds() * 1000)


@dataclass(frozen=True, slots=True, kw_only=True)
class ValidationReport:
    """Outcome of :meth:`DataQualityValidator.validate_all_data`.

    A section is ``None`` when its stage degraded; the matching entry in ``findings``
    says why.
    """

    overview: ValidationOverview
    master_catalog: MasterCatalogValidation | None
    raw_data: RawDataValidation | None
    images: ImageValidation | None
    fields: FieldValidation | None
    integrity: DataIntegrityValidation | None
    recommendations: tuple[Recommendation, ...]
    overall_score: float
    status: ValidationStatus
    findings: tuple[StageFinding, ...] = ()
