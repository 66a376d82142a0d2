"""
Test Suite for catalog loading.

Tests:
1. Sectioned parsing (preferences + products)
2. Malformed-row recovery and diagnostics
3. Duplicate product ids (first occurrence kept)
4. File loading and the "no data" error
5. Catalog snapshot accessors
6. Demographic helpers (age ranges, gender codes)
"""

import pytest
import sys
from pathlib import Path

# Add project root to path
PROJECT_ROOT = Path(__file__).parent.parent
sys.path.insert(0, str(PROJECT_ROOT))

from recsys.catalog import Catalog, sample_catalog
from recsys.catalog_loader import load_catalog_file, parse_catalog_lines
from recsys.demographics import age_to_range, normalize_gender
from recsys.exceptions import CatalogUnavailableError, InvalidArgumentError
from recsys.models import Product
from recsys.recommender import ProductRecommender
from config import CATALOG_PATH


# =============================================================================
# TEST DATA
# =============================================================================

CATALOG_LINES = [
    "# comment",
    "",
    "[PREFERENCES]",
    "AgeRange,Gender,Category,Weight",
    "25-34,M,Electronics,1.0",
    "25-34,F,Clothing,abc",
    "18-24,F",
    "",
    "[PRODUCTS]",
    "ID,Name,Category,Price,Rating,Tag1,Tag2",
    "1,iPhone 15,Electronics,999.00,4.8,smartphone,apple",
    "2,Galaxy,Electronics,oops,4.7,smartphone",
    "3,Shoes,Clothing,120,not-a-rating,shoes",
    "4,Bare,Books,10,4.0",
    "1,Duplicate,Electronics,1,1.0",
    "5,Too,Few",
]


@pytest.fixture
def parsed():
    return parse_catalog_lines(CATALOG_LINES)


# =============================================================================
# TEST: PARSING
# =============================================================================

class TestSectionParsing:
    """Tests for the sectioned reader."""

    def test_preferences_parsed(self, parsed):
        assert len(parsed.preferences) == 1
        pref = parsed.preferences[0]
        assert (pref.age_range, pref.gender, pref.category, pref.weight) == (
            "25-34", "M", "Electronics", 1.0
        )

    def test_products_parsed(self, parsed):
        assert [p.id for p in parsed.products] == ["1", "2", "4"]

        iphone = parsed.products[0]
        assert iphone.name == "iPhone 15"
        assert iphone.price == 999.0
        assert iphone.rating == 4.8
        assert iphone.tags == ("smartphone", "apple")

    def test_variable_tag_arity(self, parsed):
        assert parsed.products[1].tags == ("smartphone",)
        assert parsed.products[2].tags == ()

    def test_header_rows_skipped(self, parsed):
        assert parsed.report.headers == 2

    def test_section_labels_ignore_case(self):
        result = parse_catalog_lines([
            "[preferences]",
            "35-44,F,Home,0.9",
            "[products]",
            "7,Coffee Maker,Home,79.99,4.3,kitchen",
        ])
        assert len(result.preferences) == 1
        assert len(result.products) == 1
        assert result.report.headers == 0

    def test_unlabelled_lines_are_products(self):
        result = parse_catalog_lines([
            "1,Lamp,Home,20,4.0,lighting",
            "2,Mug,Home,8,3.5",
        ])
        assert [p.name for p in result.products] == ["Lamp", "Mug"]
        assert result.preferences == []

    def test_fields_are_trimmed(self):
        result = parse_catalog_lines(["  1 , Desk Lamp , Home , 39.99 , 4.0 , office ,  "])
        product = result.products[0]
        assert product.name == "Desk Lamp"
        assert product.category == "Home"
        assert product.tags == ("office",)


class TestMalformedRows:
    """A bad row only costs that row."""

    def test_bad_rows_counted(self, parsed):
        # bad weight, short preference, bad rating, short product
        assert parsed.report.skipped == 4
        assert parsed.report.lines_read == len(CATALOG_LINES)

    def test_unparseable_price_becomes_zero(self, parsed):
        galaxy = parsed.products[1]
        assert galaxy.price == 0.0
        assert galaxy.rating == 4.7

    def test_negative_price_becomes_zero(self):
        result = parse_catalog_lines(["1,Refund,Misc,-5,3.0"])
        assert result.products[0].price == 0.0

    def test_preference_with_extra_fields_skipped(self):
        result = parse_catalog_lines(["[PREFERENCES]", "25-34,M,Electronics,1.0,extra"])
        assert result.preferences == []
        assert result.report.skipped == 1

    def test_malformed_first_row_is_not_a_header(self):
        result = parse_catalog_lines([
            "[PREFERENCES]",
            "25-34,F,Clothing,abc",
            "[PRODUCTS]",
            "1,Broken,Electronics,10,oops",
            "2,Mug,Home,8,3.5",
        ])
        assert result.report.headers == 0
        assert result.report.skipped == 2
        assert [p.id for p in result.products] == ["2"]

    def test_empty_input(self):
        result = parse_catalog_lines([])
        assert result.products == []
        assert result.preferences == []


class TestDuplicateIds:
    """Duplicate product ids keep the first occurrence."""

    def test_first_occurrence_wins(self, parsed):
        iphone = [p for p in parsed.products if p.id == "1"]
        assert len(iphone) == 1
        assert iphone[0].name == "iPhone 15"
        assert parsed.report.duplicates == 1


# =============================================================================
# TEST: FILE LOADING
# =============================================================================

class TestFileLoading:
    """Tests for reading catalog files."""

    def test_load_from_file(self, tmp_path):
        path = tmp_path / "catalog.txt"
        path.write_text("\n".join(CATALOG_LINES) + "\n", encoding="utf-8")

        result = load_catalog_file(path)
        assert len(result.products) == 3
        assert result.report.source == str(path)

    def test_missing_file_raises(self, tmp_path):
        with pytest.raises(CatalogUnavailableError):
            load_catalog_file(tmp_path / "missing.txt")

    def test_bundled_catalog_loads_cleanly(self):
        catalog = Catalog.from_file(CATALOG_PATH)
        assert len(catalog) > 0
        assert len(catalog.preferences()) > 0
        assert catalog.report.skipped == 0
        assert catalog.report.duplicates == 0


# =============================================================================
# TEST: CATALOG
# =============================================================================

class TestCatalog:
    """Tests for the immutable catalog snapshot."""

    def test_categories_first_seen_order(self):
        catalog = Catalog(parse_catalog_lines([
            "1,A,Electronics,1,4.0",
            "2,B,Clothing,1,4.0",
            "3,C,Electronics,1,4.0",
            "4,D,Books,1,4.0",
        ]).products)
        assert catalog.categories() == ["Electronics", "Clothing", "Books"]

    def test_direct_construction_drops_duplicate_ids(self):
        first = Product(id="1", name="First", category="Electronics", price=10.0, rating=4.0)
        second = Product(id="1", name="Second", category="Electronics", price=10.0, rating=5.0)
        other = Product(id="2", name="Other", category="Books", price=5.0, rating=3.0)

        catalog = Catalog([first, second, other])
        assert catalog.products() == (first, other)
        assert catalog.get_product("1") is first
        assert catalog.report.duplicates == 1

    def test_duplicate_ids_never_reach_results(self):
        catalog = Catalog([
            Product(id="1", name="Lamp", category="Home", price=10.0, rating=4.0),
            Product(id="1", name="Lamp", category="Home", price=10.0, rating=5.0),
        ])
        recommender = ProductRecommender(catalog)

        assert [p.id for p in recommender.top_rated()] == ["1"]
        assert [p.id for p in recommender.search_with_suggestions("lamp").exact] == ["1"]

    def test_get_product_by_int_or_str(self, parsed):
        catalog = Catalog(parsed.products, parsed.preferences)
        assert catalog.get_product(1).name == "iPhone 15"
        assert catalog.get_product("4").name == "Bare"
        assert catalog.get_product("404") is None
        assert catalog.get_product(None) is None

    def test_products_are_read_only(self, parsed):
        catalog = Catalog(parsed.products, parsed.preferences)
        assert isinstance(catalog.products(), tuple)
        with pytest.raises(AttributeError):
            catalog.products()[0].rating = 1.0

    def test_empty_catalog(self):
        catalog = Catalog.empty()
        assert catalog.is_empty
        assert len(catalog) == 0
        assert catalog.categories() == []

    def test_sample_catalog(self):
        catalog = sample_catalog()
        assert not catalog.is_empty
        assert catalog.report.source == "<sample>"


# =============================================================================
# TEST: DEMOGRAPHICS
# =============================================================================

class TestDemographics:
    """Tests for age bucketing and gender normalisation."""

    @pytest.mark.parametrize("age,expected", [
        (10, "18-24"),
        (18, "18-24"),
        (24, "18-24"),
        (25, "25-34"),
        (44, "35-44"),
        (54, "45-54"),
        (64, "55-64"),
        (65, "65+"),
        ("40", "35-44"),
    ])
    def test_age_to_range(self, age, expected):
        assert age_to_range(age) == expected

    def test_invalid_age_rejected(self):
        with pytest.raises(InvalidArgumentError):
            age_to_range("forty")
        with pytest.raises(InvalidArgumentError):
            age_to_range(None)

    def test_fractional_age_rejected(self):
        with pytest.raises(InvalidArgumentError):
            age_to_range(25.9)
        assert age_to_range(25.0) == "25-34"

    def test_gender_codes(self):
        assert normalize_gender("f") == "F"
        assert normalize_gender(" M ") == "M"
        assert normalize_gender("x") == "M"
        assert normalize_gender(None) == "M"


if __name__ == "__main__":
    pytest.main([__file__, "-v", "--tb=short"])
