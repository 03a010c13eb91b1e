from __future__ import annotations

from datetime import UTC, datetime, timedelta

from syncstore.domain.data_quality import (
    MasterCatalogValidation,
    Recommendation,
    RecommendationCategory,
    RecommendationPriority,
    StageFinding,
    ValidationOverview,
    ValidationReport,
    ValidationStatus,
    render_markdown,
)
from syncstore.domain.data_quality.rendering import NOT_AVAILABLE

STARTED = datetime(2024, 5, 1, 8, 0, tzinfo=UTC)


def _overview(**overrides: object) -> ValidationOverview:
    values: dict[str, object] = {
        "total_products_validated": 0,
        "started_at": STARTED,
        "ended_at": STARTED + timedelta(milliseconds=1500),
        "platforms_covered": ("shopee", "tiktokshop"),
        "stages_run": ("master_catalog", "data_integrity"),
    }
    values.update(overrides)
    return ValidationOverview(**values)  # type: ignore[arg-type]


def test_degraded_sections_render_placeholder() -> None:
    report = ValidationReport(
        overview=_overview(degraded_stages=("raw_data",)),
        master_catalog=None,
        raw_data=None,
        images=None,
        fields=None,
        integrity=None,
        recommendations=(),
        overall_score=0.0,
        status=ValidationStatus.FAIL,
        findings=(StageFinding(stage="raw_data", message="disk unavailable"),),
    )

    markdown = render_markdown(report)

    assert markdown.startswith("# Data Quality Validation Report\n")
    assert "**Status:** FAIL" in markdown
    assert "- Duration: 1500 ms" in markdown
    assert "- Degraded stages: raw_data" in markdown
    assert "  - raw_data: disk unavailable" in markdown
    assert markdown.count(NOT_AVAILABLE) == 5
    assert "No recommendations." in markdown


def test_sections_and_recommendations_render() -> None:
    report = ValidationReport(
        overview=_overview(total_products_validated=4),
        master_catalog=MasterCatalogValidation(
            total_master_products=4,
            valid_products=3,
            invalid_products=1,
            products_with_errors=1,
            products_with_warnings=2,
            average_data_quality_score=82.5,
            error_count=1,
            warning_count=3,
            status_breakdown={"active": 4},
        ),
        raw_data=None,
        images=None,
        fields=None,
        integrity=None,
        recommendations=(
            Recommendation(
                priority=RecommendationPriority.LOW,
                category=RecommendationCategory.DATA_QUALITY,
                title="Products with Warnings",
                description="Some products have validation warnings",
                action_required="Review and address validation warnings",
                expected_outcome="Reduced warning count for better data quality",
                affected_count=2,
            ),
        ),
        overall_score=82.5,
        status=ValidationStatus.WARNING,
    )

    markdown = render_markdown(report)

    assert "**Overall score:** 82.5/100" in markdown
    assert "## Master Catalog" in markdown
    assert "- Total products: 4" in markdown
    assert "- Status breakdown: active: 4" in markdown
    assert "### [LOW] Products with Warnings (2 affected)" in markdown
    assert "- Degraded stages: none" in markdown
    assert markdown.count(NOT_AVAILABLE) == 4
