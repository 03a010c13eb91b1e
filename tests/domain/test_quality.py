from __future__ import annotations

from datetime import UTC, datetime

from syncstore.domain.model import (
    MasterProduct,
    PlatformMapping,
    ProductImage,
    ProductPricing,
    SeoTitle,
    ShopeeListingData,
    assess_quality,
)
from syncstore.domain.model.quality import (
    BASE_PRICE_ERROR,
    FEW_IMAGES_WARNING,
    IMAGES_ERROR,
    NO_MAPPINGS_WARNING,
    NO_SEO_WARNING,
    SHORT_DESCRIPTION_WARNING,
)

DESCRIPTION = "A sturdy frame for freestyle builds with replaceable arms and plates."


def _images(count: int) -> list[ProductImage]:
    return [ProductImage(url=f"https://cdn.example.com/{index}.jpg") for index in range(count)]


def _complete_product() -> MasterProduct:
    product = MasterProduct(
        organization_id="org-1",
        master_sku="SH-1-ABCDEF",
        name="Carbon Fiber Frame",
        description=DESCRIPTION,
        images=_images(3),
        pricing=ProductPricing(base_price=150000),
    )
    product.seo.platform_titles["shopee"] = SeoTitle(
        title="Carbon Fiber Frame murah",
        similarity=75.0,
        quality_score=88.0,
        optimized_for=("murah",),
        generated_at=datetime(2024, 1, 1, tzinfo=UTC),
    )
    product.attach_mapping(
        PlatformMapping(
            platform="shopee",
            platform_product_id="1",
            platform_data=ShopeeListingData(item_id="1"),
        )
    )
    return product


def test_complete_product_scores_full_marks() -> None:
    product = _complete_product()

    assert product.data_quality_score == 100
    assert product.validation_errors == []
    assert product.validation_warnings == []


def test_penalties_accumulate() -> None:
    assessment = assess_quality(
        name="ab",
        description="short",
        images=[],
        base_price=0,
        seo_titles={},
        mapping_count=0,
    )

    assert assessment.score == 100 - 20 - 15 - 20 - 25 - 5 - 10
    assert not assessment.is_valid
    assert BASE_PRICE_ERROR in assessment.errors
    assert IMAGES_ERROR in assessment.errors
    assert assessment.warnings == (NO_SEO_WARNING, NO_MAPPINGS_WARNING)


def test_soft_gaps_are_warnings() -> None:
    assessment = assess_quality(
        name="Frame",
        description="Twenty chars or more here",
        images=_images(1),
        base_price=1000,
        seo_titles={"shopee": object()},
        mapping_count=1,
    )

    assert assessment.is_valid
    assert assessment.score == 90
    assert assessment.warnings == (SHORT_DESCRIPTION_WARNING, FEW_IMAGES_WARNING)


def test_removing_images_never_raises_the_score() -> None:
    product = _complete_product()
    scores = [product.data_quality_score]

    for count in (2, 1, 0):
        product.replace_images(_images(count))
        scores.append(product.data_quality_score)

    assert scores == sorted(scores, reverse=True)
    assert scores[-1] == 80
    assert IMAGES_ERROR in product.validation_errors


def test_content_mutators_refresh_quality_and_touch() -> None:
    product = _complete_product()
    before = product.updated_at

    product.set_base_price(0)

    assert product.base_price == 0
    assert product.data_quality_score == 75
    assert BASE_PRICE_ERROR in product.validation_errors
    assert product.updated_at >= before


def test_deactivated_mapping_leaves_active_set() -> None:
    product = _complete_product()

    product.platform_mappings[0].deactivate()

    assert product.active_mappings == ()


def test_deactivated_mappings_do_not_count() -> None:
    product = _complete_product()
    (mapping,) = product.platform_mappings

    mapping.deactivate()
    assessment = product.refresh_quality()

    assert product.active_mappings == ()
    assert assessment.score == 90
    assert assessment.warnings == (NO_MAPPINGS_WARNING,)
