"""
Catalog Loader for the Recommendation Engine.

Reads the line-oriented catalog source:

    # comment
    [PREFERENCES]
    AgeRange,Gender,Category,Weight
    25-34,M,Electronics,1.0

    [PRODUCTS]
    ID,Name,Category,Price,Rating,Tag1,Tag2
    1,iPhone 15,Electronics,999.00,4.8,smartphone,apple

The section label is reader state; preference rows and product rows are
parsed into two separate typed streams. A bad line only costs that line:
it is dropped and counted in the LoadReport, the rest of the file loads.
"""

import logging
import math
from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterable, List, Optional, Union

from config import (
    COMMENT_PREFIX,
    FIELD_DELIMITER,
    MIN_PRODUCT_FIELDS,
    PREFERENCE_FIELDS,
    PREFERENCE_HEADER_NAMES,
    PREFERENCES_SECTION,
    PRODUCT_HEADER_NAMES,
    PRODUCTS_SECTION,
)
from recsys.exceptions import CatalogUnavailableError
from recsys.models import Preference, Product

logger = logging.getLogger(__name__)

_PREFERENCES = "preferences"
_PRODUCTS = "products"

_SECTION_LABELS = {
    PREFERENCES_SECTION.upper(): _PREFERENCES,
    PRODUCTS_SECTION.upper(): _PRODUCTS,
}


@dataclass
class LoadReport:
    """Diagnostics collected while reading a catalog source."""

    source: str = "<memory>"
    lines_read: int = 0
    headers: int = 0
    skipped: int = 0
    duplicates: int = 0

    def to_dict(self):
        return {
            "source": self.source,
            "lines_read": self.lines_read,
            "headers": self.headers,
            "skipped": self.skipped,
            "duplicates": self.duplicates,
        }


@dataclass
class LoadResult:
    products: List[Product] = field(default_factory=list)
    preferences: List[Preference] = field(default_factory=list)
    report: LoadReport = field(default_factory=LoadReport)


def _parse_float(value: str) -> Optional[float]:
    """Parse a numeric field, returning None when it is not a finite number."""
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    return number if math.isfinite(number) else None


def _parse_price(value: str) -> float:
    """Prices never fail a record: unparseable or negative values become 0.0."""
    price = _parse_float(value.replace("$", "").strip())
    if price is None or price < 0:
        return 0.0
    return price


def _split(line: str) -> List[str]:
    return [token.strip() for token in line.split(FIELD_DELIMITER)]


def _parse_preference(tokens: List[str]) -> Optional[Preference]:
    if len(tokens) != PREFERENCE_FIELDS:
        return None

    age_range, gender, category, weight_str = tokens
    weight = _parse_float(weight_str)
    if weight is None or not age_range or not gender or not category:
        return None

    return Preference(
        age_range=age_range,
        gender=gender,
        category=category,
        weight=weight,
    )


def _parse_product(tokens: List[str]) -> Optional[Product]:
    if len(tokens) < MIN_PRODUCT_FIELDS:
        return None

    product_id, name, category, price_str, rating_str = tokens[:MIN_PRODUCT_FIELDS]
    rating = _parse_float(rating_str)
    if rating is None or not product_id or not name:
        return None

    tags = tuple(tag for tag in tokens[MIN_PRODUCT_FIELDS:] if tag)

    return Product(
        id=product_id,
        name=name,
        category=category,
        price=_parse_price(price_str),
        rating=rating,
        tags=tags,
    )


def _is_header(tokens: List[str], section: str) -> bool:
    """
    A header row is the first row of a section that names its columns: the
    first column is a known header name (e.g. "ID" or "AgeRange") and the
    numeric column does not parse. Any other row is read as data, so a
    malformed first record is counted as skipped.
    """
    if section == _PREFERENCES:
        index, names = PREFERENCE_FIELDS - 1, PREFERENCE_HEADER_NAMES
    else:
        index, names = MIN_PRODUCT_FIELDS - 1, PRODUCT_HEADER_NAMES
    if len(tokens) <= index or tokens[0].casefold() not in names:
        return False
    return _parse_float(tokens[index]) is None


def parse_catalog_lines(lines: Iterable[str], source: str = "<memory>") -> LoadResult:
    """
    Parse catalog records from an iterable of text lines.

    Lines before any section label are read as products, so a plain product
    list without labels is also accepted.

    Duplicate product ids keep the first occurrence; later rows with the same
    id are dropped and counted in ``report.duplicates``.

    Args:
        lines: Raw text lines (trailing newlines allowed)
        source: Label used in diagnostics

    Returns:
        LoadResult with products, preferences and a LoadReport
    """
    result = LoadResult(report=LoadReport(source=source))
    report = result.report

    section = _PRODUCTS
    expect_header = False
    seen_ids = set()

    for line_no, raw_line in enumerate(lines, start=1):
        report.lines_read += 1
        line = raw_line.strip()

        # Skip empty lines and comments
        if not line or line.startswith(COMMENT_PREFIX):
            continue

        label = _SECTION_LABELS.get(line.upper())
        if label is not None:
            section = label
            expect_header = True
            continue

        tokens = _split(line)

        if expect_header:
            expect_header = False
            if _is_header(tokens, section):
                report.headers += 1
                continue

        if section == _PREFERENCES:
            preference = _parse_preference(tokens)
            if preference is None:
                report.skipped += 1
                logger.debug(f"{source}:{line_no}: malformed preference row skipped")
                continue
            result.preferences.append(preference)
        else:
            product = _parse_product(tokens)
            if product is None:
                report.skipped += 1
                logger.debug(f"{source}:{line_no}: malformed product row skipped")
                continue
            if product.id in seen_ids:
                report.duplicates += 1
                logger.warning(
                    "%s:%d: duplicate product id %r ignored (first occurrence kept)",
                    source, line_no, product.id,
                )
                continue
            seen_ids.add(product.id)
            result.products.append(product)

    logger.info(
        f"Parsed {source}: {len(result.preferences)} preferences, "
        f"{len(result.products)} products "
        f"({report.skipped} skipped, {report.duplicates} duplicates)"
    )
    return result


def load_catalog_file(path: Union[str, Path]) -> LoadResult:
    """
    Load a catalog source file from disk.

    Raises:
        CatalogUnavailableError: If the file is missing or unreadable
    """
    path = Path(path)

    try:
        with open(path, "r", encoding="utf-8") as f:
            return parse_catalog_lines(f, source=str(path))
    except FileNotFoundError as e:
        logger.error(f"Catalog file not found: {path}")
        raise CatalogUnavailableError(f"Catalog file not found: {path}") from e
    except (OSError, UnicodeDecodeError) as e:
        logger.error(f"Unable to read catalog file {path}: {e}")
        raise CatalogUnavailableError(f"Unable to read catalog file: {path}") from e

