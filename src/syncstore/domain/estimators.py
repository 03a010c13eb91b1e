"""Best-effort fillers for fields a raw listing does not carry.

Adapters never invent values on their own; every guess comes from here so that the
resulting record can list which fields were estimated.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from syncstore.domain.model import ProductCategory, ProductImage

DEFAULT_ESTIMATED_PRICE = 50_000
PRICE_KEYWORDS: tuple[tuple[str, int], ...] = (
    ("frame", 150_000),
    ("motor", 200_000),
    ("battery", 300_000),
    ("esc", 180_000),
    ("propeller", 80_000),
)
PRICE_VARIATION_STEP = 1_000

PLACEHOLDER_IMAGE_URL = "https://via.placeholder.com/300x300?text=No+Image"
DEFAULT_CATEGORY_NAME = "Electronics"
DEFAULT_CATEGORY_PATH = ("Electronics", "Drone Parts")
DEFAULT_BRAND = "Unknown Brand"
DEFAULT_NAME = "Unnamed Product"
DEFAULT_DESCRIPTION = "No description available"


@dataclass(frozen=True, slots=True)
class PriceEstimator:
    """Guess a base price from keywords in the product name.

    The first matching keyword wins. Numeric platform ids add ``(id % 100) * 1000``
    so that otherwise identical guesses stay distinguishable.
    """

    default_price: int = DEFAULT_ESTIMATED_PRICE
    keywords: tuple[tuple[str, int], ...] = PRICE_KEYWORDS

    def estimate(self, name: str | None, native_id: str | None) -> float:
        lowered = (name or "").lower()
        price = self.default_price
        for keyword, keyword_price in self.keywords:
            if keyword in lowered:
                price = keyword_price
                break
        return float(price + _id_variation(native_id))


def _id_variation(native_id: str | None) -> int:
    if native_id is None or not native_id.isdigit():
        return 0
    return (int(native_id) % 100) * PRICE_VARIATION_STEP


@dataclass(frozen=True, slots=True)
class DefaultsEstimator:
    """Placeholder values for missing descriptive fields."""

    placeholder_image_url: str = PLACEHOLDER_IMAGE_URL
    brand: str = DEFAULT_BRAND
    name: str = DEFAULT_NAME
    description: str = DEFAULT_DESCRIPTION

    def placeholder_images(self) -> tuple[ProductImage, ...]:
        return (
            ProductImage(
                url=self.placeholder_image_url,
                alt="No image available",
                is_primary=True,
            ),
        )

    def category(self, category_id: str | None) -> ProductCategory:
        return ProductCategory(
            id=category_id or "unknown",
            name=DEFAULT_CATEGORY_NAME,
            path=DEFAULT_CATEGORY_PATH,
            level=len(DEFAULT_CATEGORY_PATH),
        )


@dataclass(frozen=True, slots=True)
class Estimators:
    price: PriceEstimator = field(default_factory=PriceEstimator)
    defaults: DefaultsEstimator = field(default_factory=DefaultsEstimator)
