"""Translate Shopee payloads into canonical catalog records."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from syncstore.domain.model import (
    CanonicalRecord,
    Dimensions,
    Platform,
    ProductImage,
    ShopeeListingData,
)

if TYPE_CHECKING:
    from collections.abc import Mapping

    from syncstore.domain.estimators import Estimators

    from .schema import ShopeeItem


def translate_item(
    item: ShopeeItem,
    *,
    item_id: str,
    raw: Mapping[str, Any],
    estimators: Estimators,
) -> CanonicalRecord:
    defaults = estimators.defaults
    estimated: list[str] = []

    name = item.item_name
    if name is None:
        name = defaults.name
        estimated.append("name")

    description = item.description
    if description is None:
        description = defaults.description
        estimated.append("description")

    base_price = _listed_price(item)
    if base_price is None or base_price <= 0:
        base_price = estimators.price.estimate(item.item_name, item_id)
        estimated.append("base_price")

    images = _images(item)
    if not images:
        images = defaults.placeholder_images()
        estimated.append("images")

    brand = _brand(item)
    if brand is None:
        brand = defaults.brand
        estimated.append("brand")

    return CanonicalRecord(
        platform=Platform.SHOPEE,
        platform_product_id=item_id,
        name=name,
        description=description,
        base_price=base_price,
        weight=item.weight or 0.0,
        dimensions=_dimensions(item),
        images=images,
        category=defaults.category(item.category_id),
        brand=brand,
        platform_data=ShopeeListingData(
            item_id=item_id,
            item_status=item.item_status,
            category_id=item.category_id,
            item_sku=item.item_sku,
            has_model=bool(item.has_model),
            create_time=item.create_time,
            update_time=item.update_time,
            payload=dict(raw),
        ),
        estimated_fields=tuple(estimated),
    )


def _listed_price(item: ShopeeItem) -> float | None:
    if item.price:
        return item.price
    if item.price_info is not None and item.price_info.current_price:
        return item.price_info.current_price
    return None


def _images(item: ShopeeItem) -> tuple[ProductImage, ...]:
    if item.image is None:
        return ()
    return tuple(
        ProductImage(url=url, alt=f"Product image {index + 1}", is_primary=index == 0)
        for index, url in enumerate(item.image.image_url_list)
        if url
    )


def _dimensions(item: ShopeeItem) -> Dimensions:
    dimension = item.dimension
    if dimension is None:
        return Dimensions()
    return Dimensions(
        length=dimension.package_length or 0.0,
        width=dimension.package_width or 0.0,
        height=dimension.package_height or 0.0,
    )


def _brand(item: ShopeeItem) -> str | None:
    if item.brand is not None and item.brand.original_brand_name:
        return item.brand.original_brand_name
    return item.brand_name
