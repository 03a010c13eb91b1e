"""TikTok Shop implementation of the platform adapter port."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

from pydantic import ValidationError as PydanticValidationError

from syncstore.adapters.listing_schema import (
    common_listing_warnings,
    format_validation_errors,
)
from syncstore.domain.errors import TransformError
from syncstore.domain.estimators import Estimators
from syncstore.domain.model import Platform
from syncstore.domain.ports import ListingValidation

from .schema import TikTokShopListing, TikTokShopProduct
from .translator import translate_product

if TYPE_CHECKING:
    from collections.abc import Mapping

    from syncstore.domain.model import CanonicalRecord
    from syncstore.domain.ports import PlatformAdapter

TIKTOKSHOP_NAME_LIMIT = 255
TIKTOKSHOP_DESCRIPTION_LIMIT = 5000
NAME_LIMIT_WARNING = "Product name exceeds TikTok Shop limit (255 characters)"
DESCRIPTION_LIMIT_WARNING = "Product description exceeds TikTok Shop limit (5000 characters)"


@dataclass(slots=True)
class TikTokShopAdapter:
    estimators: Estimators = field(default_factory=Estimators)

    @property
    def platform(self) -> str:
        return Platform.TIKTOKSHOP

    def native_id(self, raw: Mapping[str, Any]) -> str | None:
        value = raw.get("product_id")
        if value is None or str(value).strip() == "":
            return None
        return str(value)

    def normalize(self, raw: Mapping[str, Any]) -> CanonicalRecord | TransformError:
        product_id = self.native_id(raw)
        try:
            product = TikTokShopProduct.model_validate(raw)
        except PydanticValidationError as exc:
            details = "; ".join(format_validation_errors(exc))
            return TransformError(
                f"Malformed TikTok Shop record: {details}",
                platform=self.platform,
                product_id=product_id,
            )
        if product_id is None:
            return TransformError("Missing TikTok Shop product_id", platform=self.platform)
        return translate_product(
            product, product_id=product_id, raw=raw, estimators=self.estimators
        )

    def validate_listing(self, raw: Mapping[str, Any]) -> ListingValidation:
        try:
            listing = TikTokShopListing.model_validate(raw)
        except PydanticValidationError as exc:
            return ListingValidation(
                is_valid=False,
                errors=format_validation_errors(exc),
                tokopedia_flag=False,
            )

        has_brand = bool(listing.brand_name) or (
            listing.brand is not None and bool(listing.brand.name)
        )
        warnings = common_listing_warnings(
            description=listing.description,
            weight=listing.package_weight,
            has_dimensions=listing.package_dimensions is not None,
            has_brand=has_brand,
            image_count=len(listing.images),
        )
        if len(listing.product_name) > TIKTOKSHOP_NAME_LIMIT:
            warnings.append(NAME_LIMIT_WARNING)
        if listing.description and len(listing.description) > TIKTOKSHOP_DESCRIPTION_LIMIT:
            warnings.append(DESCRIPTION_LIMIT_WARNING)
        if listing.product_status != "ACTIVE":
            warnings.append(f"Product status is {listing.product_status}, not ACTIVE")
        return ListingValidation(
            is_valid=True,
            warnings=tuple(warnings),
            tokopedia_flag=listing.include_tokopedia,
        )


if TYPE_CHECKING:
    _check_adapter: PlatformAdapter = TikTokShopAdapter()
