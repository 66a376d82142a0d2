"""
Relevance scoring for the recommendation engine.

Two scoring modes:

1. Demographic score
   score = rating × weight, where weight comes from the preference rule for
   (age range, gender, product category), or DEFAULT_PREFERENCE_WEIGHT (0.1)
   when no rule matches. Missing rules are the normal case, not an error.

2. Similarity score (relative to a reference product)
   similarity = 0.5 × [same category]
              + 0.1 × shared tag count
              + 0.1 × candidate rating
   Category equality dominates, each shared tag adds a little, and rating
   lifts better-reviewed items even when nothing else matches.

All functions are pure: they read Product/Preference values and return
numbers or new lists.
"""

import logging
from typing import Iterable, List, Tuple

from config import DEFAULT_PREFERENCE_WEIGHT, SIMILARITY_WEIGHTS
from recsys.matcher import tag_overlap_count
from recsys.models import Preference, Product

logger = logging.getLogger(__name__)

ScoredProduct = Tuple[Product, float]


def lookup_weight(
    preferences: Iterable[Preference],
    age_range: str,
    gender: str,
    category: str
) -> float:
    """
    Find the weight of the first rule matching (age range, gender, category).

    Gender and category compare case-insensitively; the age range label
    must match exactly.

    Returns:
        The matched rule's weight, or DEFAULT_PREFERENCE_WEIGHT
    """
    for preference in preferences:
        if preference.matches(age_range, gender, category):
            return preference.weight
    return DEFAULT_PREFERENCE_WEIGHT


def demographic_score(product: Product, weight: float) -> float:
    return product.rating * weight


def similarity_score(target: Product, candidate: Product) -> float:
    """Relevance of ``candidate`` to the reference product ``target``."""
    same_category = 1.0 if candidate.category == target.category else 0.0

    return (
        SIMILARITY_WEIGHTS["category"] * same_category
        + SIMILARITY_WEIGHTS["tag"] * tag_overlap_count(target, candidate)
        + SIMILARITY_WEIGHTS["rating"] * candidate.rating
    )


def score_demographic(
    products: Iterable[Product],
    preferences: Iterable[Preference],
    age_range: str,
    gender: str
) -> List[ScoredProduct]:
    """
    Pair every product with its demographic score, in input order.

    Args:
        products: Candidates to score
        preferences: Preference weight table
        age_range: Age range label, e.g. "25-34"
        gender: Gender code, e.g. "M"

    Returns:
        List of (product, score) tuples
    """
    preferences = tuple(preferences)
    weights = {}
    scored: List[ScoredProduct] = []

    for product in products:
        # One table scan per category, not per product
        if product.category not in weights:
            weights[product.category] = lookup_weight(
                preferences, age_range, gender, product.category
            )
        scored.append((product, demographic_score(product, weights[product.category])))

    logger.debug(
        "Demographic weights for %s/%s: %s", age_range, gender, weights
    )
    return scored


def score_similar(target: Product, products: Iterable[Product]) -> List[ScoredProduct]:
    """
    Score every product against ``target``, in input order.

    The target itself (matched by id) is never part of its own similarity set.
    """
    return [
        (candidate, similarity_score(target, candidate))
        for candidate in products
        if candidate.id != target.id
    ]
