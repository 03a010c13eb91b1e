"""Shared pydantic building blocks for raw marketplace payloads."""

from __future__ import annotations

from typing import TYPE_CHECKING
from urllib.parse import urlparse

from pydantic import BaseModel, ConfigDict, field_validator

if TYPE_CHECKING:
    from pydantic import ValidationError as PydanticValidationError

DESCRIPTION_RECOMMENDED_LENGTH = 50
RECOMMENDED_IMAGE_COUNT = 3

SHORT_DESCRIPTION_WARNING = (
    "Product description is missing or too short (recommended: 50+ characters)"
)
MISSING_WEIGHT_WARNING = "Product weight is missing or zero (may affect shipping calculations)"
MISSING_DIMENSIONS_WARNING = "Product dimensions are missing (may affect shipping calculations)"
MISSING_BRAND_WARNING = "Brand information is missing"
FEW_IMAGES_WARNING = (
    "Less than 3 product images (recommended: 3+ images for better conversion)"
)


class LenientModel(BaseModel):
    """Forgiving parse of export payloads: unknown keys are dropped, blanks become None."""

    model_config = ConfigDict(extra="ignore", coerce_numbers_to_str=True)

    @field_validator("*", mode="before")
    @classmethod
    def _blank_to_none(cls, value: object) -> object:
        if isinstance(value, str) and not value.strip():
            return None
        return value


class StrictListingModel(BaseModel):
    model_config = ConfigDict(extra="ignore")


def require_http_url(value: str) -> str:
    parsed = urlparse(value)
    if parsed.scheme not in {"http", "https"} or not parsed.netloc:
        raise ValueError("Invalid url")
    return value


def format_validation_errors(exc: PydanticValidationError) -> tuple[str, ...]:
    messages: list[str] = []
    for error in exc.errors():
        location = ".".join(str(part) for part in error["loc"])
        messages.append(f"{location}: {error['msg']}")
    return tuple(messages)


def common_listing_warnings(
    *,
    description: str | None,
    weight: float | None,
    has_dimensions: bool,
    has_brand: bool,
    image_count: int,
) -> list[str]:
    warnings: list[str] = []
    if not description or len(description) < DESCRIPTION_RECOMMENDED_LENGTH:
        warnings.append(SHORT_DESCRIPTION_WARNING)
    if not weight:
        warnings.append(MISSING_WEIGHT_WARNING)
    if not has_dimensions:
        warnings.append(MISSING_DIMENSIONS_WARNING)
    if not has_brand:
        warnings.append(MISSING_BRAND_WARNING)
    if image_count < RECOMMENDED_IMAGE_COUNT:
        warnings.append(FEW_IMAGES_WARNING)
    return warnings
