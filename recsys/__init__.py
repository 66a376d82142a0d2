"""
Core package for the Catalog Recommendation Engine.

This module contains:
- catalog_loader: Sectioned text reader for products and preference rules
- catalog: Immutable in-memory catalog snapshot
- matcher: Keyword, category and price-range predicates
- scorer: Demographic and similarity scoring
- ranker: Stable top-N ranking
- recommender: Recommendation modes built on the above
"""

from .catalog import Catalog, sample_catalog
from .exceptions import CatalogUnavailableError, InvalidArgumentError, RecommendationError
from .models import Preference, Product
from .recommender import ProductRecommender, RecommendationPair, SearchResult, get_recommender

__all__ = [
    "Catalog",
    "sample_catalog",
    "Product",
    "Preference",
    "ProductRecommender",
    "RecommendationPair",
    "SearchResult",
    "get_recommender",
    "RecommendationError",
    "CatalogUnavailableError",
    "InvalidArgumentError",
]
