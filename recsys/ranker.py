"""
Stable top-N ranking.

Every ranked list in the engine goes through here. Ordering is by the
score (or rating) descending; equal keys keep their input order, which is
catalog order, so identical input always yields identical output.
"""

import logging
from typing import Iterable, List, Optional, Sequence

import numpy as np

from recsys.exceptions import InvalidArgumentError
from recsys.models import Product
from recsys.scorer import ScoredProduct

logger = logging.getLogger(__name__)


def validate_count(count: Optional[int], name: str = "count") -> Optional[int]:
    """
    Check a result-size argument.

    None means "no limit". Zero is allowed and yields an empty result.

    Raises:
        InvalidArgumentError: If count is negative or not an integer
    """
    if count is None:
        return None
    if isinstance(count, bool) or not isinstance(count, (int, np.integer)):
        raise InvalidArgumentError(f"{name} must be an integer, got {count!r}")
    if count < 0:
        raise InvalidArgumentError(f"{name} must be >= 0, got {count}")
    return int(count)


def _stable_descending_order(keys: Sequence[float]) -> np.ndarray:
    # Negating and sorting ascending with a stable sort gives descending
    # order while keeping equal keys in their original positions.
    return np.argsort(-np.asarray(keys, dtype=float), kind="stable")


def rank_scored(scored: Iterable[ScoredProduct], n: Optional[int] = None) -> List[ScoredProduct]:
    """
    Sort (product, score) pairs by score descending and keep the first ``n``.

    Args:
        scored: Pairs in catalog order
        n: Maximum number of results (None for all)

    Returns:
        At most ``n`` pairs; fewer when fewer are available
    """
    n = validate_count(n, "n")
    scored = list(scored)
    if not scored or n == 0:
        return []

    order = _stable_descending_order([score for _, score in scored])
    ranked = [scored[i] for i in order[:n]]

    logger.debug(f"Ranked {len(scored)} candidates, kept {len(ranked)}")
    return ranked


def rank_products(scored: Iterable[ScoredProduct], n: Optional[int] = None) -> List[Product]:
    """Same as rank_scored but returns only the products."""
    return [product for product, _ in rank_scored(scored, n)]


def rank_by_rating(products: Iterable[Product], n: Optional[int] = None) -> List[Product]:
    """Rating-only ranking used by top-rated, category and price listings."""
    return rank_products(((p, p.rating) for p in products), n)
