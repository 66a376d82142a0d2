"""
Product Recommender for the Catalog Recommendation Engine.

This module is the CORE of the recommendation engine. It composes the
matcher, scorer and ranker into the query modes the presentation layer
calls:

1. Demographic recommendations
   - Score every product as rating × preference weight for (age, gender)
   - Return the top N

2. Category browsing
   - In-category products ranked by rating
   - Plus demographic picks from the other categories

3. Keyword search
   - Keyword matches ranked by rating
   - Plus demographic picks from the whole catalog

4. Search with suggestions
   - Exact keyword matches
   - Plus a deduplicated "related items" list built from the similarity
     sets of every exact match

Plus the plain listings: top rated, price range, categories.

"No results" is always an empty list. Only contract violations (negative
counts, missing category/keyword) raise InvalidArgumentError.
"""

import logging
from pathlib import Path
from typing import Any, Dict, List, NamedTuple, Optional, Union

from config import (
    CATALOG_PATH,
    DEFAULT_CATEGORY_COUNT,
    DEFAULT_DEMOGRAPHIC_COUNT,
    DEFAULT_EXTRA_COUNT,
    DEFAULT_KEYWORD_COUNT,
    DEFAULT_TOP_RATED_COUNT,
    MAX_SUGGESTIONS,
)
from recsys.catalog import Catalog, sample_catalog
from recsys.exceptions import CatalogUnavailableError, InvalidArgumentError
from recsys.matcher import exclude_category, filter_by_category, filter_by_keyword, filter_by_price_range
from recsys.models import Product
from recsys.ranker import rank_by_rating, rank_products, validate_count
from recsys.scorer import score_demographic, score_similar

logger = logging.getLogger(__name__)


class RecommendationPair(NamedTuple):
    """Primary results plus extra (secondary) recommendations."""

    primary: List[Product]
    extra: List[Product]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "primary": [p.to_dict() for p in self.primary],
            "extra": [p.to_dict() for p in self.extra],
        }


class SearchResult(NamedTuple):
    """Exact keyword matches plus related-item suggestions (disjoint ids)."""

    exact: List[Product]
    suggestions: List[Product]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "exact": [p.to_dict() for p in self.exact],
            "suggestions": [p.to_dict() for p in self.suggestions],
        }


def _require(value, name: str):
    if value is None:
        raise InvalidArgumentError(f"{name} is required")
    return value


class ProductRecommender:
    """
    Recommendation engine over one immutable Catalog snapshot.

    Usage:
        recommender = ProductRecommender.get_instance()
        recommender.load_catalog("data/catalog.txt")

        recs = recommender.recommend_by_demographics("25-34", "M", count=5)
        pair = recommender.recommend_by_category("Electronics", "25-34", "M")
        result = recommender.search_with_suggestions("phone")
    """

    _instance: Optional['ProductRecommender'] = None

    def __init__(self, catalog: Optional[Catalog] = None):
        """Initialize the recommender (use get_instance() for the shared one)."""
        self._catalog: Catalog = catalog if catalog is not None else Catalog.empty()
        # False until a catalog is supplied or loaded; an empty catalog file still counts.
        self._catalog_available = catalog is not None
        logger.info(f"ProductRecommender initialized with {self._catalog!r}")

    @classmethod
    def get_instance(cls) -> 'ProductRecommender':
        """Get the singleton instance of ProductRecommender."""
        if cls._instance is None:
            cls._instance = ProductRecommender()
        return cls._instance

    @classmethod
    def reset_instance(cls) -> None:
        cls._instance = None

    # ------------------------------------------------------------------
    # Catalog management
    # ------------------------------------------------------------------

    @property
    def catalog(self) -> Catalog:
        return self._catalog

    @property
    def catalog_available(self) -> bool:
        """True once a catalog source (or the sample dataset) is in use."""
        return self._catalog_available

    def set_catalog(self, catalog: Catalog) -> None:
        """Swap in a new catalog snapshot."""
        self._catalog = catalog
        self._catalog_available = True
        logger.info(f"Catalog replaced: {catalog!r}")

    def load_catalog(
        self,
        path: Optional[Union[str, Path]] = None,
        fallback_to_sample: bool = False
    ) -> Catalog:
        """
        Load the catalog from a file and make it current.

        When the source is unavailable the caller decides what happens:
        with ``fallback_to_sample`` the built-in sample dataset is used,
        otherwise CatalogUnavailableError propagates and the current catalog
        is left untouched.

        Args:
            path: Catalog file (defaults to config.CATALOG_PATH)
            fallback_to_sample: Use the sample dataset if the file is missing

        Returns:
            The catalog now in use
        """
        path = Path(path) if path is not None else CATALOG_PATH

        try:
            catalog = Catalog.from_file(path)
        except CatalogUnavailableError:
            if not fallback_to_sample:
                raise
            logger.warning(f"Catalog {path} unavailable, falling back to sample data")
            catalog = sample_catalog()

        self.set_catalog(catalog)
        return catalog

    def categories(self) -> List[str]:
        return self._catalog.categories()

    def get_product(self, product_id) -> Optional[Product]:
        return self._catalog.get_product(product_id)

    def summary(self) -> Dict[str, Any]:
        """Counts for health checks and diagnostics."""
        return {
            "catalog_loaded": self._catalog_available,
            "products": len(self._catalog),
            "preferences": len(self._catalog.preferences()),
            "categories": len(self._catalog.categories()),
            "load_report": self._catalog.report.to_dict(),
        }

    # ------------------------------------------------------------------
    # Recommendation modes
    # ------------------------------------------------------------------

    def recommend_by_demographics(
        self,
        age_range: str,
        gender: str,
        count: int = DEFAULT_DEMOGRAPHIC_COUNT
    ) -> List[Product]:
        """
        Rank the whole catalog by demographic score.

        Args:
            age_range: Age range label, e.g. "25-34"
            gender: Gender code, e.g. "M"
            count: Number of products to return

        Returns:
            Up to ``count`` products, best score first
        """
        count = validate_count(count)
        _require(age_range, "age_range")
        _require(gender, "gender")

        scored = score_demographic(
            self._catalog.products(),
            self._catalog.preferences(),
            age_range,
            gender,
        )
        recommendations = rank_products(scored, count)

        logger.info(
            f"Demographic recommendations for {age_range}/{gender}: "
            f"{len(recommendations)} of {len(scored)}"
        )
        return recommendations

    def recommend_by_category(
        self,
        category: str,
        age_range: str,
        gender: str,
        category_count: int = DEFAULT_CATEGORY_COUNT,
        extra_count: int = DEFAULT_EXTRA_COUNT
    ) -> RecommendationPair:
        """
        Browse one category and add demographic picks from the others.

        The two lists are disjoint: extra recommendations never come from
        the browsed category.

        Args:
            category: Category to browse (exact, case-sensitive)
            age_range: Age range label
            gender: Gender code
            category_count: Size bound for the in-category list
            extra_count: Size bound for the extra list

        Returns:
            RecommendationPair(primary=in-category by rating,
                               extra=other categories by demographic score)
        """
        category_count = validate_count(category_count, "category_count")
        extra_count = validate_count(extra_count, "extra_count")
        _require(category, "category")
        _require(age_range, "age_range")
        _require(gender, "gender")

        products = self._catalog.products()

        in_category = filter_by_category(products, category)
        primary = rank_by_rating(in_category, category_count)

        outside = exclude_category(products, category)
        scored = score_demographic(outside, self._catalog.preferences(), age_range, gender)
        extra = rank_products(scored, extra_count)

        if not in_category:
            logger.info(f"Category '{category}' has no products")

        logger.info(
            f"Category recommendations for '{category}': "
            f"{len(primary)} in category, {len(extra)} extra"
        )
        return RecommendationPair(primary, extra)

    def recommend_by_keyword(
        self,
        keyword: str,
        age_range: str,
        gender: str,
        keyword_count: int = DEFAULT_KEYWORD_COUNT,
        extra_count: int = DEFAULT_EXTRA_COUNT
    ) -> RecommendationPair:
        """
        Keyword search plus demographic picks from the whole catalog.

        An empty keyword result is a normal outcome; the extra list is still
        computed. Extra picks may repeat keyword matches.

        Returns:
            RecommendationPair(primary=keyword matches by rating,
                               extra=demographic recommendations)
        """
        keyword_count = validate_count(keyword_count, "keyword_count")
        extra_count = validate_count(extra_count, "extra_count")
        _require(keyword, "keyword")

        matches = filter_by_keyword(self._catalog.products(), keyword)
        primary = rank_by_rating(matches, keyword_count)

        if not primary:
            logger.info(f"No products found matching keyword '{keyword}'")

        extra = self.recommend_by_demographics(age_range, gender, extra_count)
        return RecommendationPair(primary, extra)

    def suggest_similar_products(
        self,
        product_id,
        count: Optional[int] = MAX_SUGGESTIONS
    ) -> List[Product]:
        """
        Products most similar to one catalog product, excluding itself.

        Args:
            product_id: Reference product id
            count: Maximum number of suggestions (None for all)

        Returns:
            Ranked similar products; empty if the id is unknown
        """
        count = validate_count(count)
        _require(product_id, "product_id")

        target = self._catalog.get_product(product_id)
        if target is None:
            logger.info(f"Product {product_id} not in catalog, no similar products")
            return []

        return rank_products(score_similar(target, self._catalog.products()), count)

    def search_with_suggestions(
        self,
        query: str,
        max_suggestions: int = MAX_SUGGESTIONS
    ) -> SearchResult:
        """
        Keyword search with a related-items list.

        For each exact match (best rated first) its similarity set is walked
        in rank order and unseen products are appended to the suggestions.
        A product id already used, as an exact match or as an earlier
        suggestion, is never added again. Stops at ``max_suggestions``.

        Args:
            query: Free-text keyword
            max_suggestions: Size bound for the suggestion list

        Returns:
            SearchResult(exact, suggestions) with no id shared between them
        """
        max_suggestions = validate_count(max_suggestions, "max_suggestions")
        _require(query, "query")

        products = self._catalog.products()
        exact = rank_by_rating(filter_by_keyword(products, query))

        seen = {p.id for p in exact}
        suggestions: List[Product] = []

        for source in exact:
            if len(suggestions) >= max_suggestions:
                break
            for candidate in rank_products(score_similar(source, products)):
                if len(suggestions) >= max_suggestions:
                    break
                if candidate.id in seen:
                    continue
                seen.add(candidate.id)
                suggestions.append(candidate)

        logger.info(
            f"Search '{query}': {len(exact)} exact matches, {len(suggestions)} suggestions"
        )
        return SearchResult(exact, suggestions)

    def top_rated(self, count: int = DEFAULT_TOP_RATED_COUNT) -> List[Product]:
        count = validate_count(count)
        return rank_by_rating(self._catalog.products(), count)

    def filter_by_price(
        self,
        min_price: float,
        max_price: float,
        count: Optional[int] = None
    ) -> List[Product]:
        """
        Products priced within [min_price, max_price], best rated first.

        An inverted range returns an empty list.
        """
        count = validate_count(count)
        in_range = filter_by_price_range(self._catalog.products(), min_price, max_price)
        return rank_by_rating(in_range, count)


# Singleton accessor function
def get_recommender() -> ProductRecommender:
    """
    Get the singleton ProductRecommender instance.

    Usage:
        recommender = get_recommender()
        recommender.load_catalog(...)
        recs = recommender.recommend_by_demographics(...)
    """
    return ProductRecommender.get_instance()
