"""Shopee adapter package."""

from __future__ import annotations

from .adapter import ShopeeAdapter
from .schema import ShopeeItem, ShopeeListing
from .translator import translate_item

__all__ = ["ShopeeAdapter", "ShopeeItem", "ShopeeListing", "translate_item"]
