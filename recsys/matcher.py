"""
Matching predicates and list filters for catalog queries.

This module provides:
1. Text matching (case-insensitive substring)
2. Keyword matching over name, category and tags
3. Category and price-range membership
4. Tag overlap counting for similarity scoring

Filters always return a new list and keep catalog order. A query that
matches nothing returns an empty list, never raises.
"""

import logging
from typing import Iterable, List, Optional

from recsys.exceptions import InvalidArgumentError
from recsys.models import Product

logger = logging.getLogger(__name__)


def _normalize_text(text: Optional[str]) -> str:
    """Lowercase, None-safe form of a string for comparison."""
    if not text:
        return ""
    return str(text).lower()


def text_matches(haystack: Optional[str], needle: Optional[str]) -> bool:
    """
    Case-insensitive substring test.

    An empty needle is contained in every string; a missing haystack is
    treated as the empty string.
    """
    return _normalize_text(needle) in _normalize_text(haystack)


def product_matches_keyword(product: Product, keyword: Optional[str]) -> bool:
    """
    Check whether a keyword appears in the product's name, category or tags.

    A blank keyword matches nothing: an empty search is a "no results" query,
    not a request for the whole catalog.

    Args:
        product: Product to test
        keyword: Search text (case-insensitive)

    Returns:
        True if the keyword is a substring of any searchable field
    """
    if keyword is None or not str(keyword).strip():
        return False

    if text_matches(product.name, keyword) or text_matches(product.category, keyword):
        return True

    return any(text_matches(tag, keyword) for tag in product.tags)


def product_in_category(product: Product, category: str) -> bool:
    # Exact, case-sensitive: callers pick from Catalog.categories().
    return product.category == category


def product_in_price_range(product: Product, min_price: float, max_price: float) -> bool:
    """Inclusive bounds; an inverted range (min > max) contains nothing."""
    return min_price <= product.price <= max_price


def tag_overlap_count(a: Product, b: Product) -> int:
    """
    Number of distinct tags present on both products.

    Uses exact, case-sensitive equality ("Apple" and "apple" do not match),
    unlike keyword search.
    """
    if not a.tags or not b.tags:
        return 0
    return len(set(a.tags) & set(b.tags))


def filter_by_keyword(products: Iterable[Product], keyword: Optional[str]) -> List[Product]:
    products = list(products)
    filtered = [p for p in products if product_matches_keyword(p, keyword)]
    logger.debug(f"Keyword filter ({keyword!r}): {len(filtered)}/{len(products)} matched")
    return filtered


def filter_by_category(products: Iterable[Product], category: str) -> List[Product]:
    if category is None:
        raise InvalidArgumentError("category is required")

    return [p for p in products if product_in_category(p, category)]


def exclude_category(products: Iterable[Product], category: str) -> List[Product]:
    """Products whose category differs from the given one."""
    if category is None:
        raise InvalidArgumentError("category is required")

    return [p for p in products if not product_in_category(p, category)]


def filter_by_price_range(
    products: Iterable[Product],
    min_price: float,
    max_price: float
) -> List[Product]:
    """
    Filter products by an inclusive price range.

    Args:
        products: Products to filter
        min_price: Lower bound (inclusive)
        max_price: Upper bound (inclusive)

    Returns:
        Products priced within the range; empty when min_price > max_price

    Raises:
        InvalidArgumentError: If a bound is missing or not numeric
    """
    try:
        min_price = float(min_price)
        max_price = float(max_price)
    except (TypeError, ValueError) as e:
        raise InvalidArgumentError(
            f"price bounds must be numeric, got {min_price!r} and {max_price!r}"
        ) from e

    if min_price > max_price:
        logger.debug(f"Inverted price range {min_price}-{max_price}, no products match")
        return []

    products = list(products)
    filtered = [p for p in products if product_in_price_range(p, min_price, max_price)]
    logger.info(f"Price filter ({min_price}-{max_price}): {len(filtered)}/{len(products)} products passed")
    return filtered
