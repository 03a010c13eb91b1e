"""TikTok Shop adapter package."""

from __future__ import annotations

from .adapter import TikTokShopAdapter
from .schema import TikTokShopListing, TikTokShopProduct
from .translator import translate_product

__all__ = ["TikTokShopAdapter", "TikTokShopListing", "TikTokShopProduct", "translate_product"]
