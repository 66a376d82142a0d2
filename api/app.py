"""
Flask API for the Catalog Recommendation Engine.

This module provides the REST API endpoints:
- GET  /health - Health check
- GET  /api/categories - Enumerate catalog categories
- POST /api/recommend/demographic - Demographic recommendations
- POST /api/recommend/category - Category browsing + extra picks
- POST /api/recommend/keyword - Keyword search + extra picks
- POST /api/search - Keyword search with related-item suggestions
- GET  /api/products/<product_id>/similar - Similar products
- GET  /api/products/top-rated - Top rated products
- GET  /api/products/price-range - Products within a price range

The engine performs no formatting; this layer only turns Product lists
into JSON.
"""

import logging
import time
from functools import wraps
from typing import Any, Dict, Optional

from flask import Flask, jsonify, request
from flask_cors import CORS

from config import (
    API_CONFIG,
    CATALOG_FALLBACK_TO_SAMPLE,
    CATALOG_PATH,
    DEFAULT_CATEGORY_COUNT,
    DEFAULT_DEMOGRAPHIC_COUNT,
    DEFAULT_EXTRA_COUNT,
    DEFAULT_KEYWORD_COUNT,
    DEFAULT_TOP_RATED_COUNT,
    LOGGING_CONFIG,
    MAX_COUNT,
    MAX_SUGGESTIONS,
)
from recsys.demographics import age_to_range, normalize_gender
from recsys.exceptions import CatalogUnavailableError, InvalidArgumentError
from recsys.recommender import ProductRecommender, get_recommender

# Configure logging
logging.basicConfig(
    level=getattr(logging, LOGGING_CONFIG["level"], logging.INFO),
    format=LOGGING_CONFIG["format"]
)
logger = logging.getLogger(__name__)


def _parse_count(value: Any, default: int, name: str = "count") -> int:
    """
    Read a count parameter from a request.

    Negative or non-integer values are rejected; large values are clamped
    to MAX_COUNT.
    """
    if value is None:
        return default
    if isinstance(value, bool):
        raise InvalidArgumentError(f"{name} must be an integer")
    if isinstance(value, float) and not value.is_integer():
        raise InvalidArgumentError(f"{name} must be a whole number, got {value!r}")
    try:
        count = int(value)
    except (TypeError, ValueError) as e:
        raise InvalidArgumentError(f"{name} must be an integer") from e
    if count < 0:
        raise InvalidArgumentError(f"{name} must be >= 0")
    return min(count, MAX_COUNT)


def _demographic_context(data: Dict[str, Any]):
    """
    Resolve (age_range, gender) from a request body.

    Accepts either an explicit "age_range" label or a numeric "age".
    """
    age_range = data.get("age_range")
    if not age_range:
        if data.get("age") is None:
            raise InvalidArgumentError("age_range or age is required")
        age_range = age_to_range(data["age"])
    return str(age_range), normalize_gender(data.get("gender"))


def _products_json(products):
    return [p.to_dict() for p in products]


def create_app(recommender: Optional[ProductRecommender] = None) -> Flask:
    """
    Create and configure the Flask application.

    Args:
        recommender: Engine to serve (defaults to the shared singleton)

    Returns:
        Configured Flask app instance
    """
    app = Flask(__name__)

    CORS(app, resources={
        r"/api/*": {
            "origins": "*",
            "methods": ["GET", "POST", "OPTIONS"],
            "allow_headers": ["Content-Type", "Authorization"]
        }
    })

    def _engine() -> ProductRecommender:
        return recommender if recommender is not None else get_recommender()

    @app.before_request
    def load_catalog_on_first_request():
        """
        Load the catalog lazily for API traffic only.

        A missing catalog file leaves the engine without data unless
        CATALOG_FALLBACK_TO_SAMPLE is set. API requests then get a 503
        "no catalog data" response instead of empty result lists.
        """
        if request.path.startswith("/health/live"):
            return None

        if recommender is None and not hasattr(app, "_catalog_load_attempted"):
            app._catalog_load_attempted = True
            try:
                get_recommender().load_catalog(
                    CATALOG_PATH,
                    fallback_to_sample=CATALOG_FALLBACK_TO_SAMPLE,
                )
            except CatalogUnavailableError as e:
                logger.error(f"No catalog data available: {e}")

        if (
            request.path.startswith("/api/")
            and request.method != "OPTIONS"
            and not _engine().catalog_available
        ):
            return jsonify({
                "success": False,
                "error": "No catalog data available"
            }), 503
        return None

    # Request timing decorator
    def timed_request(f):
        @wraps(f)
        def decorated_function(*args, **kwargs):
            start_time = time.time()
            response = f(*args, **kwargs)
            elapsed_ms = (time.time() - start_time) * 1000
            logger.info(f"{request.method} {request.path} completed in {elapsed_ms:.2f}ms")
            return response
        return decorated_function

    def api_errors(f):
        """Map engine exceptions onto JSON error responses."""
        @wraps(f)
        def decorated_function(*args, **kwargs):
            try:
                return f(*args, **kwargs)
            except InvalidArgumentError as e:
                return jsonify({"success": False, "error": str(e)}), 400
            except Exception as e:
                logger.error(f"Error in {request.path}: {e}")
                return jsonify({"success": False, "error": str(e)}), 500
        return decorated_function

    def _json_body() -> Dict[str, Any]:
        data = request.get_json(silent=True)
        if not data or not isinstance(data, dict):
            raise InvalidArgumentError("No JSON data provided")
        return data

    # Error handlers
    @app.errorhandler(400)
    def bad_request(error):
        return jsonify({
            "error": "Bad Request",
            "message": str(error.description)
        }), 400

    @app.errorhandler(404)
    def not_found(error):
        return jsonify({
            "error": "Not Found",
            "message": "The requested resource was not found"
        }), 404

    @app.errorhandler(500)
    def internal_error(error):
        logger.error(f"Internal error: {error}")
        return jsonify({
            "error": "Internal Server Error",
            "message": "An unexpected error occurred"
        }), 500

    # ==========================================================================
    # HEALTH CHECK ENDPOINTS
    # ==========================================================================

    @app.route("/health", methods=["GET"])
    @timed_request
    def health_check():
        """
        Health check endpoint.

        Example:
            GET /health
            Response: {"status": "healthy", "catalog_loaded": true, "products": 12, ...}
        """
        return jsonify({
            "status": "healthy",
            **_engine().summary(),
            "timestamp": time.time()
        }), 200

    @app.route("/health/live", methods=["GET"])
    @timed_request
    def health_live():
        """Liveness endpoint that never loads the catalog."""
        return jsonify({
            "status": "alive",
            "timestamp": time.time()
        }), 200

    # ==========================================================================
    # CATALOG ENDPOINTS
    # ==========================================================================

    @app.route("/api/categories", methods=["GET"])
    @timed_request
    @api_errors
    def list_categories():
        categories = _engine().categories()
        return jsonify({
            "success": True,
            "categories": categories,
            "count": len(categories)
        }), 200

    # ==========================================================================
    # RECOMMENDATION ENDPOINTS
    # ==========================================================================

    @app.route("/api/recommend/demographic", methods=["POST"])
    @timed_request
    @api_errors
    def recommend_demographic():
        """
        Recommendations ranked by rating × preference weight.

        Request Body:
        {
            "age_range": "25-34",     // or "age": 29
            "gender": "M",
            "count": 5
        }
        """
        data = _json_body()
        age_range, gender = _demographic_context(data)
        count = _parse_count(data.get("count"), DEFAULT_DEMOGRAPHIC_COUNT)

        products = _engine().recommend_by_demographics(age_range, gender, count)

        return jsonify({
            "success": True,
            "age_range": age_range,
            "gender": gender,
            "recommendations": _products_json(products),
            "count": len(products)
        }), 200

    @app.route("/api/recommend/category", methods=["POST"])
    @timed_request
    @api_errors
    def recommend_category():
        """
        Category browsing plus extra picks from other categories.

        Request Body:
        {
            "category": "Electronics",
            "age_range": "25-34",
            "gender": "M",
            "category_count": 3,
            "extra_count": 2
        }
        """
        data = _json_body()
        category = data.get("category")
        if not category:
            raise InvalidArgumentError("category is required")

        age_range, gender = _demographic_context(data)
        category_count = _parse_count(data.get("category_count"), DEFAULT_CATEGORY_COUNT, "category_count")
        extra_count = _parse_count(data.get("extra_count"), DEFAULT_EXTRA_COUNT, "extra_count")

        result = _engine().recommend_by_category(
            category=str(category),
            age_range=age_range,
            gender=gender,
            category_count=category_count,
            extra_count=extra_count,
        )

        return jsonify({
            "success": True,
            "category": category,
            **result.to_dict()
        }), 200

    @app.route("/api/recommend/keyword", methods=["POST"])
    @timed_request
    @api_errors
    def recommend_keyword():
        """
        Keyword matches plus demographic picks.

        An empty "primary" list means nothing matched the keyword.

        Request Body:
        {
            "keyword": "phone",
            "age_range": "25-34",
            "gender": "F",
            "keyword_count": 3,
            "extra_count": 2
        }
        """
        data = _json_body()
        keyword = data.get("keyword")
        if keyword is None:
            raise InvalidArgumentError("keyword is required")

        age_range, gender = _demographic_context(data)
        keyword_count = _parse_count(data.get("keyword_count"), DEFAULT_KEYWORD_COUNT, "keyword_count")
        extra_count = _parse_count(data.get("extra_count"), DEFAULT_EXTRA_COUNT, "extra_count")

        result = _engine().recommend_by_keyword(
            keyword=str(keyword),
            age_range=age_range,
            gender=gender,
            keyword_count=keyword_count,
            extra_count=extra_count,
        )

        return jsonify({
            "success": True,
            "keyword": keyword,
            "found": bool(result.primary),
            **result.to_dict()
        }), 200

    @app.route("/api/search", methods=["POST"])
    @timed_request
    @api_errors
    def search():
        """
        Keyword search with related-item suggestions.

        Request Body:
        {
            "query": "smartphone",
            "max_suggestions": 10
        }
        """
        data = _json_body()
        query = data.get("query")
        if query is None:
            raise InvalidArgumentError("query is required")

        max_suggestions = _parse_count(data.get("max_suggestions"), MAX_SUGGESTIONS, "max_suggestions")
        result = _engine().search_with_suggestions(str(query), max_suggestions)

        return jsonify({
            "success": True,
            "query": query,
            **result.to_dict()
        }), 200

    # ==========================================================================
    # PRODUCT LISTING ENDPOINTS
    # ==========================================================================

    @app.route("/api/products/<product_id>/similar", methods=["GET"])
    @timed_request
    @api_errors
    def similar_products(product_id: str):
        engine = _engine()
        if engine.get_product(product_id) is None:
            return jsonify({
                "success": False,
                "error": f"Product {product_id} not found"
            }), 404

        count = _parse_count(request.args.get("count"), MAX_SUGGESTIONS)
        products = engine.suggest_similar_products(product_id, count)

        return jsonify({
            "success": True,
            "product_id": product_id,
            "products": _products_json(products),
            "count": len(products)
        }), 200

    @app.route("/api/products/top-rated", methods=["GET"])
    @timed_request
    @api_errors
    def top_rated():
        count = _parse_count(request.args.get("count"), DEFAULT_TOP_RATED_COUNT)
        products = _engine().top_rated(count)

        return jsonify({
            "success": True,
            "products": _products_json(products),
            "count": len(products)
        }), 200

    @app.route("/api/products/price-range", methods=["GET"])
    @timed_request
    @api_errors
    def price_range():
        """
        Products within an inclusive price range, best rated first.

        Query Parameters:
        - min: Minimum price (required)
        - max: Maximum price (required)
        - count: Optional size bound
        """
        min_price = request.args.get("min")
        max_price = request.args.get("max")
        if min_price is None or max_price is None:
            raise InvalidArgumentError("min and max are required")

        count = request.args.get("count")
        count = _parse_count(count, MAX_COUNT) if count is not None else None

        products = _engine().filter_by_price(min_price, max_price, count)

        return jsonify({
            "success": True,
            "products": _products_json(products),
            "count": len(products)
        }), 200

    return app


# Create the app instance
app = create_app()


if __name__ == "__main__":
    """Run the Flask development server."""
    logger.info("Starting Catalog Recommendation API...")
    logger.info(f"Server: http://{API_CONFIG['host']}:{API_CONFIG['port']}")

    app.run(
        host=API_CONFIG["host"],
        port=API_CONFIG["port"],
        debug=API_CONFIG["debug"]
    )
