"""Fixture data the profiles draw ids, credentials and payloads from."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Final


@dataclass(frozen=True)
class PriceRange:
    min: float
    max: float


PRODUCT_IDS: Final = (1, 2, 3, 4, 5, 10, 15, 20, 25, 30)
PRODUCT_CATEGORY_IDS: Final = (1, 2, 3, 4, 5)
PRICE_RANGES: Final = (
    PriceRange(0, 50),
    PriceRange(50, 100),
    PriceRange(100, 500),
)

USER_IDS: Final = (1, 2, 3, 4, 5, 6, 7, 8, 9, 10)
LOGIN_EMAIL: Final = "john@mail.com"
LOGIN_PASSWORD: Final = "changeme"  # noqa: S105

CATEGORY_IDS: Final = (1, 2, 3, 4, 5)

SEARCH_TERMS: Final = ("phone", "computer", "clothes", "electronics", "shirt", "trending")

NEW_PRODUCT: Final[dict[str, object]] = {
    "title": "Performance Test Product",
    "description": "A product created during performance testing",
    "price": 99.99,
    "categoryId": 1,
    "images": ["https://via.placeholder.com/640x480?text=Test+Product"],
}

NEW_USER: Final[dict[str, object]] = {
    "name": "Test User",
    "email": "testuser@mail.com",
    "password": "testpassword123",
    "avatar": "https://via.placeholder.com/150x150?text=Test+User",
}

NEW_CATEGORY: Final[dict[str, object]] = {
    "name": "Test Category",
    "image": "https://via.placeholder.com/640x480?text=Test+Category",
}
