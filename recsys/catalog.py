"""
In-memory product catalog.

A Catalog is an immutable snapshot: products and preference rules are held
in tuples of frozen dataclasses, so any number of readers can share one
instance without locking. Replacing the data means building a new Catalog.
"""

import logging
from pathlib import Path
from typing import Dict, Iterable, List, Optional, Tuple, Union

from recsys.catalog_loader import LoadReport, load_catalog_file
from recsys.models import Preference, Product

logger = logging.getLogger(__name__)


class Catalog:
    """
    Read-only collection of Product records plus the Preference weight table.

    Usage:
        catalog = Catalog.from_file("data/catalog.txt")
        catalog.products()
        catalog.categories()   # distinct, first-seen order
    """

    def __init__(
        self,
        products: Iterable[Product] = (),
        preferences: Iterable[Preference] = (),
        report: Optional[LoadReport] = None,
    ):
        self.report = report or LoadReport()
        self._preferences: Tuple[Preference, ...] = tuple(preferences)

        # First occurrence wins, same policy as the loader.
        self._by_id: Dict[str, Product] = {}
        for product in products:
            if product.id in self._by_id:
                self.report.duplicates += 1
                logger.warning(
                    f"Duplicate product id {product.id!r} ignored (first occurrence kept)"
                )
                continue
            self._by_id[product.id] = product
        self._products: Tuple[Product, ...] = tuple(self._by_id.values())

    @classmethod
    def from_file(cls, path: Union[str, Path]) -> "Catalog":
        """
        Build a catalog from a sectioned text file.

        Raises:
            CatalogUnavailableError: If the file is missing or unreadable
        """
        result = load_catalog_file(path)
        return cls(result.products, result.preferences, report=result.report)

    @classmethod
    def empty(cls) -> "Catalog":
        return cls()

    def products(self) -> Tuple[Product, ...]:
        return self._products

    def preferences(self) -> Tuple[Preference, ...]:
        return self._preferences

    def categories(self) -> List[str]:
        """Distinct product categories in first-seen order."""
        return list(dict.fromkeys(p.category for p in self._products))

    def get_product(self, product_id) -> Optional[Product]:
        if product_id is None:
            return None
        return self._by_id.get(str(product_id))

    @property
    def is_empty(self) -> bool:
        return not self._products

    def __len__(self) -> int:
        return len(self._products)

    def __repr__(self) -> str:
        return (
            f"Catalog(products={len(self._products)}, "
            f"preferences={len(self._preferences)})"
        )


# =============================================================================
# SAMPLE DATASET
# Injected only when a caller explicitly asks for it (see
# ProductRecommender.load_catalog(fallback_to_sample=True)).
# =============================================================================

SAMPLE_PREFERENCES = [
    ("18-24", "M", "Electronics", 0.9),
    ("18-24", "F", "Clothing", 0.9),
    ("18-24", "F", "Beauty", 0.8),
    ("25-34", "M", "Electronics", 1.0),
    ("25-34", "M", "Sports", 0.7),
    ("25-34", "F", "Clothing", 0.8),
    ("25-34", "F", "Home", 0.6),
    ("35-44", "M", "Home", 0.7),
    ("35-44", "F", "Home", 0.9),
    ("45-54", "M", "Books", 0.8),
    ("45-54", "F", "Books", 0.8),
    ("55-64", "F", "Home", 0.8),
    ("65+", "M", "Books", 0.9),
]

SAMPLE_PRODUCTS = [
    ("1", "iPhone 15", "Electronics", 999.00, 4.8, ("smartphone", "apple")),
    ("2", "Galaxy S24", "Electronics", 899.00, 4.7, ("smartphone", "android")),
    ("3", "Running Shoes", "Clothing", 120.00, 4.5, ("shoes", "sports")),
    ("4", "Noise Cancelling Headphones", "Electronics", 349.00, 4.6, ("audio", "wireless")),
    ("5", "Denim Jacket", "Clothing", 89.99, 4.2, ("jacket", "casual")),
    ("6", "Yoga Mat", "Sports", 35.00, 4.4, ("fitness", "sports")),
    ("7", "Coffee Maker", "Home", 79.99, 4.3, ("kitchen", "coffee")),
    ("8", "Face Serum", "Beauty", 29.99, 4.1, ("skincare", "vitamin")),
    ("9", "Mystery Novel", "Books", 14.99, 4.6, ("fiction", "mystery")),
    ("10", "Smart Watch", "Electronics", 249.00, 4.4, ("wearable", "fitness")),
    ("11", "Cookbook", "Books", 24.99, 4.5, ("kitchen", "recipes")),
    ("12", "Desk Lamp", "Home", 39.99, 4.0, ("lighting", "office")),
]


def sample_catalog() -> Catalog:
    """Return a small fixed catalog used as an explicit fallback dataset."""
    preferences = [
        Preference(age_range=a, gender=g, category=c, weight=w)
        for a, g, c, w in SAMPLE_PREFERENCES
    ]
    products = [
        Product(id=i, name=n, category=c, price=p, rating=r, tags=t)
        for i, n, c, p, r, t in SAMPLE_PRODUCTS
    ]
    logger.info(f"Using sample catalog ({len(products)} products)")
    return Catalog(products, preferences, report=LoadReport(source="<sample>"))
