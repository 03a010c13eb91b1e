"""Per-record data quality rules.

A master product starts from a 100 point baseline and loses points for every missing
or implausible required field. Errors describe defects that make the record unfit for
listing; warnings describe gaps that only hurt conversion.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Final

if TYPE_CHECKING:
    from collections.abc import Mapping, Sequence

    from syncstore.domain.model.values import ProductImage

QUALITY_BASELINE: Final[int] = 100

NAME_PENALTY: Final[int] = 20
DESCRIPTION_PENALTY: Final[int] = 15
SHORT_DESCRIPTION_PENALTY: Final[int] = 5
NO_IMAGES_PENALTY: Final[int] = 20
FEW_IMAGES_PENALTY: Final[int] = 5
BASE_PRICE_PENALTY: Final[int] = 25
NO_SEO_PENALTY: Final[int] = 5
NO_MAPPINGS_PENALTY: Final[int] = 10

MIN_NAME_LENGTH: Final[int] = 3
MIN_DESCRIPTION_LENGTH: Final[int] = 10
RECOMMENDED_DESCRIPTION_LENGTH: Final[int] = 50
RECOMMENDED_IMAGE_COUNT: Final[int] = 3

NAME_ERROR = "Product name is missing or too short"
DESCRIPTION_ERROR = "Product description is missing or too short"
IMAGES_ERROR = "No product images found"
BASE_PRICE_ERROR = "Invalid or missing base price"
SHORT_DESCRIPTION_WARNING = "Product description is shorter than 50 characters"
FEW_IMAGES_WARNING = "Less than 3 product images"
NO_SEO_WARNING = "No SEO titles generated"
NO_MAPPINGS_WARNING = "No active platform mappings"


@dataclass(frozen=True, slots=True)
class QualityAssessment:
    score: int
    errors: tuple[str, ...]
    warnings: tuple[str, ...]

    @property
    def is_valid(self) -> bool:
        return not self.errors


def assess_quality(
    *,
    name: str | None,
    description: str | None,
    images: Sequence[ProductImage],
    base_price: float | None,
    seo_titles: Mapping[str, object],
    mapping_count: int,
) -> QualityAssessment:
    score = QUALITY_BASELINE
    errors: list[str] = []
    warnings: list[str] = []

    if not name or len(name.strip()) < MIN_NAME_LENGTH:
        score -= NAME_PENALTY
        errors.append(NAME_ERROR)

    text = (description or "").strip()
    if len(text) < MIN_DESCRIPTION_LENGTH:
        score -= DESCRIPTION_PENALTY
        errors.append(DESCRIPTION_ERROR)
    elif len(text) < RECOMMENDED_DESCRIPTION_LENGTH:
        score -= SHORT_DESCRIPTION_PENALTY
        warnings.append(SHORT_DESCRIPTION_WARNING)

    if not images:
        score -= NO_IMAGES_PENALTY
        errors.append(IMAGES_ERROR)
    elif len(images) < RECOMMENDED_IMAGE_COUNT:
        score -= FEW_IMAGES_PENALTY
        warnings.append(FEW_IMAGES_WARNING)

    if base_price is None or base_price <= 0:
        score -= BASE_PRICE_PENALTY
        errors.append(BASE_PRICE_ERROR)

    if not seo_titles:
        score -= NO_SEO_PENALTY
        warnings.append(NO_SEO_WARNING)

    if mapping_count == 0:
        score -= NO_MAPPINGS_PENALTY
        warnings.append(NO_MAPPINGS_WARNING)

    return QualityAssessment(score=max(0, score), errors=tuple(errors), warnings=tuple(warnings))
