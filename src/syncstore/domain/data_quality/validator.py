"""Run all validation stages and assemble the report."""

from __future__ import annotations

from logging import getLogger
from typing import TYPE_CHECKING, Any

from syncstore.config.validation import ValidationConfig
from syncstore.domain.model import utcnow

from .counters import ValidationCounters
from .report import StageFinding, ValidationOverview, ValidationReport
from .scoring import build_recommendations, component_scores, determine_status, overall_score
from .stages import (
    DataIntegrityStage,
    FieldValidationStage,
    ImageAccessibilityStage,
    MasterCatalogStage,
    RawDataStage,
    ValidationContext,
)

if TYPE_CHECKING:
    from collections.abc import Callable

    from syncstore.adapters.registry import AdapterRegistry
    from syncstore.domain.ports import CatalogUnitOfWork, ImageProbe, RawBatchStore

    from .stages import ValidationStage

log = getLogger(__name__)


class DataQualityValidator:
    def __init__(
        self,
        *,
        unit_of_work_factory: Callable[[], CatalogUnitOfWork],
        raw_store: RawBatchStore,
        registry: AdapterRegistry,
        image_probe: ImageProbe,
        config: ValidationConfig | None = None,
    ) -> None:
        self.config = config or ValidationConfig()
        self.counters = ValidationCounters()
        self.unit_of_work_factory = unit_of_work_factory
        self.raw_store = raw_store
        self.registry = registry
        self.image_probe = image_probe

    def validate_all_data(self) -> ValidationReport:
        started_at = utcnow()
        log.info("Starting data quality validation")
        context = ValidationContext(
            unit_of_work_factory=self.unit_of_work_factory,
            raw_store=self.raw_store,
            registry=self.registry,
            image_probe=self.image_probe,
            config=self.config,
            counters=self.counters,
        )
        findings: list[StageFinding] = []
        stages_run: list[str] = []

        def run[TResult](stage: ValidationStage[TResult]) -> TResult | None:
            stages_run.append(stage.name)
            try:
                return stage.run(context)
            except Exception as exc:  # noqa: BLE001
                log.warning("Validation stage %s degraded: %s", stage.name, exc)
                findings.append(StageFinding(stage=stage.name, message=str(exc) or repr(exc)))
                return None

        master_catalog = run(MasterCatalogStage())
        fields = run(FieldValidationStage())
        raw_data = run(RawDataStage())
        images = run(ImageAccessibilityStage())
        integrity = run(DataIntegrityStage())

        sections: dict[str, Any] = {
            "master_catalog": master_catalog,
            "raw_data": raw_data,
            "images": images,
            "fields": fields,
            "integrity": integrity,
        }
        score = overall_score(component_scores(**sections))
        status = determine_status(
            score,
            master_catalog=master_catalog,
            images=images,
            degraded=bool(findings),
        )
        recommendations = build_recommendations(**sections, findings=findings)

        overview = ValidationOverview(
            total_products_validated=master_catalog.total_master_products if master_catalog else 0,
            started_at=started_at,
            ended_at=utcnow(),
            platforms_covered=self.config.platforms,
            stages_run=tuple(stages_run),
            degraded_stages=tuple(finding.stage for finding in findings),
        )
        log.info(
            "Finished data quality validation: score=%s, status=%s, degraded=%s",
            score,
            status,
            len(findings),
        )
        return ValidationReport(
            overview=overview,
            master_catalog=master_catalog,
            raw_data=raw_data,
            images=images,
            fields=fields,
            integrity=integrity,
            recommendations=tuple(recommendations),
            overall_score=score,
            status=status,
            findings=tuple(findings),
        )

