"""Multi-stage data quality validation of the master catalog."""

from __future__ import annotations

from .counters import ValidationCounters
from .rendering import render_markdown
from .report import (
    DataIntegrityValidation,
    FieldValidation,
    ImageValidation,
    MasterCatalogValidation,
    RawDataValidation,
    Recommendation,
    RecommendationCategory,
    RecommendationPriority,
    StageFinding,
    ValidationOverview,
    ValidationReport,
    ValidationStatus,
)
from .scoring import determine_status, overall_score
from .validator import DataQualityValidator

__all__ = [
    "DataIntegrityValidation",
    "DataQualityValidator",
    "FieldValidation",
    "ImageValidation",
    "MasterCatalogValidation",
    "RawDataValidation",
    "Recommendation",
    "RecommendationCategory",
    "RecommendationPriority",
    "StageFinding",
    "ValidationCounters",
    "ValidationOverview",
    "ValidationReport",
    "ValidationStatus",
    "determine_status",
    "overall_score",
    "render_markdown",
]
