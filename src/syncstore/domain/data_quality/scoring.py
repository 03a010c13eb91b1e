"""Overall score, status and recommendations for a validation run."""

from __future__ import annotations

from typing import TYPE_CHECKING, Final

from .report import (
    Recommendation,
    RecommendationCategory,
    RecommendationPriority,
    ValidationStatus,
)

if TYPE_CHECKING:
    from collections.abc import Iterable, Mapping

    from .report import (
        DataIntegrityValidation,
        FieldValidation,
        ImageValidation,
        MasterCatalogValidation,
        RawDataValidation,
        StageFinding,
    )

COMPONENT_WEIGHTS: Final[dict[str, float]] = {
    "master_catalog": 30,
    "raw_data": 20,
    "image_accessibility": 15,
    "field_validation": 20,
    "data_integrity": 15,
}
INTEGRITY_PENALTY: Final[int] = 25

PASS_THRESHOLD: Final[float] = 90
WARNING_THRESHOLD: Final[float] = 70
MIN_ACCESSIBILITY: Final[float] = 50

LOW_QUALITY_SCORE: Final[float] = 80
LOW_ACCESSIBILITY: Final[float] = 90
LOW_COMPLETENESS: Final[float] = 90
LOW_RAW_VALIDITY: Final[float] = 90


def integrity_score(integrity: DataIntegrityValidation) -> float:
    return float(max(0, 100 - INTEGRITY_PENALTY * integrity.issue_categories))


def component_scores(
    *,
    master_catalog: MasterCatalogValidation | None,
    raw_data: RawDataValidation | None,
    images: ImageValidation | None,
    fields: FieldValidation | None,
    integrity: DataIntegrityValidation | None,
) -> dict[str, float]:
    """Score of every component that produced data; empty samples are left out."""

    scores: dict[str, float] = {}
    if master_catalog is not None:
        scores["master_catalog"] = master_catalog.average_data_quality_score
    if raw_data is not None and raw_data.total_raw_products:
        scores["raw_data"] = raw_data.validity_rate
    if images is not None and images.total_images_checked:
        scores["image_accessibility"] = images.accessibility_rate
    if fields is not None and fields.required_fields_present + fields.required_fields_missing:
        scores["field_validation"] = fields.completeness_rate
    if integrity is not None:
        scores["data_integrity"] = integrity_score(integrity)
    return scores


def overall_score(scores: Mapping[str, float]) -> float:
    """Weighted mean of ``scores``, renormalised over the components present."""

    total_weight = sum(COMPONENT_WEIGHTS[name] for name in scores)
    if not total_weight:
        return 0.0
    weighted = sum(COMPONENT_WEIGHTS[name] * score for name, score in scores.items())
    return round(weighted / total_weight, 1)


def determine_status(
    score: float,
    *,
    master_catalog: MasterCatalogValidation | None,
    images: ImageValidation | None,
    degraded: bool,
) -> ValidationStatus:
    if master_catalog is not None and master_catalog.total_master_products == 0:
        return ValidationStatus.FAIL
    if (
        images is not None
        and images.total_images_checked
        and images.accessibility_rate < MIN_ACCESSIBILITY
    ):
        return ValidationStatus.FAIL
    if score >= PASS_THRESHOLD:
        return ValidationStatus.WARNING if degraded else ValidationStatus.PASS
    if score >= WARNING_THRESHOLD:
        return ValidationStatus.WARNING
    return ValidationStatus.FAIL


def build_recommendations(
    *,
    master_catalog: MasterCatalogValidation | None,
    raw_data: RawDataValidation | None,
    images: ImageValidation | None,
    fields: FieldValidation | None,
    integrity: DataIntegrityValidation | None,
    findings: Iterable[StageFinding] = (),
) -> list[Recommendation]:
    recommendations: list[Recommendation] = []
    add = recommendations.append

    if master_catalog is not None:
        if master_catalog.total_master_products == 0:
            add(
                Recommendation(
                    priority=RecommendationPriority.CRITICAL,
                    category=RecommendationCategory.DATA_QUALITY,
                    title="No Master Products Found",
                    description="Master catalog is empty",
                    action_required="Run data import and population process",
                    expected_outcome="Master catalog populated with imported products",
                )
            )
        elif master_catalog.average_data_quality_score < LOW_QUALITY_SCORE:
            add(
                Recommendation(
                    priority=RecommendationPriority.HIGH,
                    category=RecommendationCategory.DATA_QUALITY,
                    title="Low Data Quality Score",
                    description=(
                        "Average data quality score is "
                        f"{master_catalog.average_data_quality_score:g}/100"
                    ),
                    action_required="Review and fix data validation errors",
                    expected_outcome="Achieve 90+ data quality score",
                    affected_count=master_catalog.products_with_errors,
                )
            )
        if master_catalog.products_with_warnings:
            add(
                Recommendation(
                    priority=RecommendationPriority.LOW,
                    category=RecommendationCategory.DATA_QUALITY,
                    title="Products with Warnings",
                    description="Some products have validation warnings",
                    action_required="Review and address validation warnings",
                    expected_outcome="Reduced warning count for better data quality",
                    affected_count=master_catalog.products_with_warnings,
                )
            )

    if images is not None and images.total_images_checked:
        if images.accessibility_rate < LOW_ACCESSIBILITY:
            add(
                Recommendation(
                    priority=RecommendationPriority.HIGH,
                    category=RecommendationCategory.IMAGE_VALIDATION,
                    title="Image Accessibility Issues",
                    description=f"{images.accessibility_rate:g}% of images are accessible",
                    action_required="Fix broken image URLs and hosting issues",
                    expected_outcome="Achieve 95%+ image accessibility rate",
                    affected_count=images.invalid_images,
                )
            )

    if fields is not None and fields.required_fields_missing:
        if fields.completeness_rate < LOW_COMPLETENESS:
            add(
                Recommendation(
                    priority=RecommendationPriority.HIGH,
                    category=RecommendationCategory.FIELD_VALIDATION,
                    title="Incomplete Required Fields",
                    description=f"Required fields are {fields.completeness_rate:g}% complete",
                    action_required="Fill in missing weight, dimensions, brand and images",
                    expected_outcome="Required field completeness above 95%",
                    affected_count=fields.required_fields_missing,
                )
            )

    if raw_data is not None and raw_data.total_raw_products:
        if raw_data.validity_rate < LOW_RAW_VALIDITY:
            add(
                Recommendation(
                    priority=RecommendationPriority.MEDIUM,
                    category=RecommendationCategory.DATA_QUALITY,
                    title="Raw Data Validation Failures",
                    description=f"{raw_data.validity_rate:g}% of sampled raw records are valid",
                    action_required="Inspect the most common raw data errors per platform",
                    expected_outcome="Raw data validity above 95%",
                    affected_count=raw_data.invalid_raw_products,
                )
            )

    if integrity is not None:
        recommendations.extend(_integrity_recommendations(integrity))

    for finding in findings:
        add(
            Recommendation(
                priority=RecommendationPriority.MEDIUM,
                category=RecommendationCategory.PERFORMANCE,
                title=f"Validation Stage Degraded: {finding.stage}",
                description=finding.message,
                action_required="Check connectivity and storage, then rerun validation",
                expected_outcome="All validation stages complete",
            )
        )

    return sorted(recommendations, key=lambda item: item.priority.rank, reverse=True)


def _integrity_recommendations(integrity: DataIntegrityValidation) -> list[Recommendation]:
    found: list[Recommendation] = []
    checks = (
        (
            integrity.duplicate_products,
            "Duplicate Products Found",
            "Multiple products share a SKU or a platform listing",
            "Review and merge or remove duplicate products",
            "Unique SKUs and listings for all products",
        ),
        (
            integrity.orphaned_mappings,
            "Orphaned Platform Mappings",
            "Platform mappings without corresponding master products",
            "Clean up orphaned mappings or restore missing products",
            "All mappings have valid product references",
        ),
        (
            integrity.missing_mappings,
            "Products Without Platform Mappings",
            "Master products that are not linked to any marketplace listing",
            "Re-import the source listings or archive the products",
            "Every product is linked to at least one listing",
        ),
        (
            integrity.inconsistent_pricing,
            "Inconsistent Pricing",
            "Products with a non-positive base price or platform prices below base",
            "Recalculate platform prices from the current fee configuration",
            "Platform prices at or above base price for every product",
        ),
    )
    for count, title, description, action, outcome in checks:
        if count:
            found.append(
                Recommendation(
                    priority=RecommendationPriority.MEDIUM,
                    category=RecommendationCategory.DATA_INTEGRITY,
                    title=title,
                    description=description,
                    action_required=action,
                    expected_outcome=outcome,
                    affected_count=count,
                )
            )
    return found
