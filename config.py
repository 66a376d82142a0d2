"""
Configuration for the Catalog Recommendation Engine.

This file contains all configuration constants including:
- Catalog file paths
- Scoring weights for demographic and similarity ranking
- Demographic buckets (age ranges, gender codes)
- Default result sizes for each recommendation mode
"""

import os
from pathlib import Path

# =============================================================================
# PATH CONFIGURATION
# =============================================================================

# Base directory (project root)
BASE_DIR = Path(__file__).parent.absolute()

# Directory holding catalog source files
DATA_DIR = BASE_DIR / "data"

# Catalog source consumed at startup (sectioned, comma-delimited text)
CATALOG_PATH = Path(os.getenv("CATALOG_PATH", str(DATA_DIR / "catalog.txt")))

# When the catalog source is missing, load the built-in sample dataset instead
# of serving an empty catalog. Off by default: the caller decides.
CATALOG_FALLBACK_TO_SAMPLE = os.getenv("CATALOG_FALLBACK_TO_SAMPLE", "false").lower() == "true"


# =============================================================================
# CATALOG FILE FORMAT
# =============================================================================

# Section labels (matched case-insensitively)
PREFERENCES_SECTION = "[PREFERENCES]"
PRODUCTS_SECTION = "[PRODUCTS]"

# Lines starting with this marker are ignored
COMMENT_PREFIX = "#"

FIELD_DELIMITER = ","

# id, name, category, price, rating (tags follow)
MIN_PRODUCT_FIELDS = 5

# age range, gender, category, weight
PREFERENCE_FIELDS = 4

# First-column names that mark a section header row (compared case-insensitively)
PRODUCT_HEADER_NAMES = ("id", "productid", "product_id")
PREFERENCE_HEADER_NAMES = ("agerange", "age_range", "age range")


# =============================================================================
# SCORING PARAMETERS
# =============================================================================

# Weight applied when no (age range, gender, category) rule matches
DEFAULT_PREFERENCE_WEIGHT = 0.1

# Similarity between a reference product and a candidate:
#   category * [same category] + tag * shared_tags + rating * candidate_rating
SIMILARITY_WEIGHTS = {
    "category": 0.5,   # flat bonus for the same category (dominant signal)
    "tag": 0.1,        # per shared tag
    "rating": 0.1,     # small lift toward better-reviewed candidates
}


# =============================================================================
# RECOMMENDATION PARAMETERS
# =============================================================================

# Demographic ("direct") recommendations
DEFAULT_DEMOGRAPHIC_COUNT = 5

# Category browsing: in-category results + extra demographic picks
DEFAULT_CATEGORY_COUNT = 3
DEFAULT_EXTRA_COUNT = 2

# Keyword search: keyword matches + extra demographic picks
DEFAULT_KEYWORD_COUNT = 3

# Top-rated listing
DEFAULT_TOP_RATED_COUNT = 5

# Related-items list appended to a search
MAX_SUGGESTIONS = 10

# Upper bound accepted by the HTTP layer for any count parameter
MAX_COUNT = 50


# =============================================================================
# DEMOGRAPHICS
# =============================================================================

# (inclusive upper age, label); ages above the last bound use OLDEST_AGE_RANGE
AGE_RANGES = [
    (24, "18-24"),
    (34, "25-34"),
    (44, "35-44"),
    (54, "45-54"),
    (64, "55-64"),
]
OLDEST_AGE_RANGE = "65+"

# Used for ages below the youngest bucket
DEFAULT_AGE_RANGE = "18-24"
MIN_AGE = 18

VALID_GENDERS = ("M", "F")
DEFAULT_GENDER = "M"


# =============================================================================
# API CONFIGURATION
# =============================================================================

API_CONFIG = {
    "host": os.getenv("FLASK_HOST", "0.0.0.0"),
    "port": int(os.getenv("FLASK_PORT", 5001)),
    "debug": os.getenv("FLASK_DEBUG", "false").lower() == "true",
}


# =============================================================================
# LOGGING CONFIGURATION
# =============================================================================

LOGGING_CONFIG = {
    "level": os.getenv("LOG_LEVEL", "INFO"),
    "format": "%(asctime)s - %(name)s - %(levelname)s - %(message)s",
}
