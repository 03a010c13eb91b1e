from __future__ import annotations

import pytest

from syncstore.domain.data_quality import (
    DataIntegrityValidation,
    ImageValidation,
    MasterCatalogValidation,
    RecommendationPriority,
    StageFinding,
    ValidationStatus,
    determine_status,
    overall_score,
)
from syncstore.domain.data_quality.scoring import (
    build_recommendations,
    component_scores,
    integrity_score,
)


def _catalog(total: int = 10, score: float = 95, warnings: int = 0) -> MasterCatalogValidation:
    return MasterCatalogValidation(
        total_master_products=total,
        valid_products=total,
        invalid_products=0,
        products_with_errors=0,
        products_with_warnings=warnings,
        average_data_quality_score=score,
        error_count=0,
        warning_count=warnings,
    )


def _integrity(**counts: int) -> DataIntegrityValidation:
    values = {
        "duplicate_products": 0,
        "orphaned_mappings": 0,
        "missing_mappings": 0,
        "inconsistent_pricing": 0,
    }
    values.update(counts)
    return DataIntegrityValidation(**values)


def _images(valid: int, total: int) -> ImageValidation:
    return ImageValidation(
        total_images_checked=total, valid_images=valid, invalid_images=total - valid
    )


def test_overall_score_renormalises_missing_components() -> None:
    assert overall_score({"master_catalog": 100, "data_integrity": 50}) == 83.3
    assert overall_score({"raw_data": 80}) == 80.0
    assert overall_score({}) == 0.0


def test_component_scores_skip_empty_samples() -> None:
    scores = component_scores(
        master_catalog=_catalog(score=88),
        raw_data=None,
        images=_images(0, 0),
        fields=None,
        integrity=_integrity(duplicate_products=3, missing_mappings=1),
    )

    assert scores == {"master_catalog": 88, "data_integrity": 50.0}


def test_integrity_score_floors_at_zero() -> None:
    assert integrity_score(_integrity()) == 100.0
    everything = _integrity(
        duplicate_products=1, orphaned_mappings=1, missing_mappings=1, inconsistent_pricing=1
    )
    assert integrity_score(everything) == 0.0


@pytest.mark.parametrize(
    ("score", "degraded", "expected"),
    [
        (95, False, ValidationStatus.PASS),
        (95, True, ValidationStatus.WARNING),
        (90, False, ValidationStatus.PASS),
        (75, False, ValidationStatus.WARNING),
        (69.9, False, ValidationStatus.FAIL),
    ],
)
def test_status_thresholds(
    score: float,
    degraded: bool,  # noqa: FBT001
    expected: ValidationStatus,
) -> None:
    assert determine_status(score, master_catalog=_catalog(), images=None, degraded=degraded) is (
        expected
    )


def test_empty_catalog_or_broken_images_fail_regardless_of_score() -> None:
    assert (
        determine_status(99, master_catalog=_catalog(total=0), images=None, degraded=False)
        is ValidationStatus.FAIL
    )
    assert (
        determine_status(99, master_catalog=_catalog(), images=_images(4, 10), degraded=False)
        is ValidationStatus.FAIL
    )
    assert (
        determine_status(99, master_catalog=_catalog(), images=_images(5, 10), degraded=False)
        is ValidationStatus.PASS
    )


def test_recommendations_are_sorted_by_priority() -> None:
    recommendations = build_recommendations(
        master_catalog=_catalog(score=60, warnings=2),
        raw_data=None,
        images=None,
        fields=None,
        integrity=_integrity(orphaned_mappings=4),
        findings=[StageFinding(stage="raw_data", message="disk gone")],
    )

    assert [item.priority for item in recommendations] == [
        RecommendationPriority.HIGH,
        RecommendationPriority.MEDIUM,
        RecommendationPriority.MEDIUM,
        RecommendationPriority.LOW,
    ]
    assert recommendations[0].title == "Low Data Quality Score"
    assert recommendations[0].description == "Average data quality score is 60/100"
    orphaned = next(r for r in recommendations if r.title == "Orphaned Platform Mappings")
    assert orphaned.affected_count == 4
    assert recommendations[-1].affected_count == 2


def test_healthy_sections_need_no_recommendations() -> None:
    assert (
        build_recommendations(
            master_catalog=_catalog(),
            raw_data=None,
            images=_images(10, 10),
            fields=None,
            integrity=_integrity(),
        )
        == []
    )
