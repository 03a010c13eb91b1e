"""Translate TikTok Shop payloads into canonical catalog records."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from syncstore.domain.model import (
    CanonicalRecord,
    Dimensions,
    Platform,
    ProductImage,
    TikTokShopListingData,
)

if TYPE_CHECKING:
    from collections.abc import Mapping

    from syncstore.domain.estimators import Estimators

    from .schema import TikTokShopProduct


def translate_product(
    product: TikTokShopProduct,
    *,
    product_id: str,
    raw: Mapping[str, Any],
    estimators: Estimators,
) -> CanonicalRecord:
    defaults = estimators.defaults
    estimated: list[str] = []

    name = product.product_name
    if name is None:
        name = defaults.name
        estimated.append("name")

    description = product.description
    if description is None:
        description = defaults.description
        estimated.append("description")

    base_price = product.price
    if base_price is None or base_price <= 0:
        base_price = estimators.price.estimate(product.product_name, product_id)
        estimated.append("base_price")

    urls = [image.url for image in product.images if image.url]
    images = tuple(
        ProductImage(url=url, alt=f"Product image {index + 1}", is_primary=index == 0)
        for index, url in enumerate(urls)
    )
    if not images:
        images = defaults.placeholder_images()
        estimated.append("images")

    brand = product.brand_name
    if brand is None and product.brand is not None:
        brand = product.brand.name
    if brand is None:
        brand = defaults.brand
        estimated.append("brand")

    return CanonicalRecord(
        platform=Platform.TIKTOKSHOP,
        platform_product_id=product_id,
        name=name,
        description=description,
        base_price=base_price,
        weight=product.package_weight or 0.0,
        dimensions=_dimensions(product),
        images=images,
        category=defaults.category(product.category_id),
        brand=brand,
        platform_data=TikTokShopListingData(
            product_id=product_id,
            product_status=product.product_status,
            category_id=product.category_id,
            include_tokopedia=bool(product.include_tokopedia),
            create_time=product.create_time,
            update_time=product.update_time,
            payload=dict(raw),
        ),
        estimated_fields=tuple(estimated),
    )


def _dimensions(product: TikTokShopProduct) -> Dimensions:
    dimensions = product.package_dimensions
    if dimensions is None:
        return Dimensions()
    return Dimensions(
        length=dimensions.length or 0.0,
        width=dimensions.width or 0.0,
        height=dimensions.height or 0.0,
    )
