"""Shopee implementation of the platform adapter port."""

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

from .schema import ShopeeItem, ShopeeListing
from .translator import translate_item

if TYPE_CHECKING:
    from collections.abc import Mapping

    from syncstore.domain.model import CanonicalRecord
    from syncstore.domain.ports import PlatformAdapter

SHOPEE_NAME_LIMIT = 120
NAME_LIMIT_WARNING = "Product name exceeds Shopee limit (120 characters)"


@dataclass(slots=True)
class ShopeeAdapter:
    estimators: Estimators = field(default_factory=Estimators)

    @property
    def platform(self) -> str:
        return Platform.SHOPEE

    def native_id(self, raw: Mapping[str, Any]) -> str | None:
        value = raw.get("item_id")
        if value is None or str(value).strip() == "":
            return None
        return str(value)

    def normalize(self, raw: Mapping[str, Any]) -> CanonicalRecord | TransformError:
        item_id = self.native_id(raw)
        try:
            item = ShopeeItem.model_validate(raw)
        except PydanticValidationError as exc:
            details = "; ".join(format_validation_errors(exc))
            return TransformError(
                f"Malformed Shopee record: {details}",
                platform=self.platform,
                product_id=item_id,
            )
        if item_id is None:
            return TransformError("Missing Shopee item_id", platform=self.platform)
        return translate_item(item, item_id=item_id, raw=raw, estimators=self.estimators)

    def validate_listing(self, raw: Mapping[str, Any]) -> ListingValidation:
        try:
            listing = ShopeeListing.model_validate(raw)
        except PydanticValidationError as exc:
            return ListingValidation(is_valid=False, errors=format_validation_errors(exc))

        dimension = listing.dimension
        warnings = common_listing_warnings(
            description=listing.description,
            weight=listing.weight,
            has_dimensions=dimension is not None and bool(dimension.package_length),
            has_brand=listing.brand is not None and bool(listing.brand.original_brand_name),
            image_count=len(listing.image.image_url_list),
        )
        if len(listing.item_name) > SHOPEE_NAME_LIMIT:
            warnings.append(NAME_LIMIT_WARNING)
        return ListingValidation(is_valid=True, warnings=tuple(warnings))


if TYPE_CHECKING:
    _check_adapter: PlatformAdapter = ShopeeAdapter()
