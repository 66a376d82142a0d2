"""
Load a catalog source file and print what the engine would see.

Reports parsed preference rules and products, skipped/duplicate rows and the
category distribution, so a data file can be checked before deployment.

Usage:
    python scripts/inspect_catalog.py [path/to/catalog.txt]

Defaults to config.CATALOG_PATH.
"""

import sys
from collections import Counter
from pathlib import Path

# Project root
PROJECT_ROOT = Path(__file__).parent.parent
sys.path.insert(0, str(PROJECT_ROOT))

from config import CATALOG_PATH
from recsys.catalog import Catalog
from recsys.exceptions import CatalogUnavailableError


def inspect_catalog(path: Path) -> int:
    """Print a summary of the catalog at ``path``. Returns an exit code."""
    print(f"Loading catalog from {path}...")

    try:
        catalog = Catalog.from_file(path)
    except CatalogUnavailableError as e:
        print(f"ERROR: {e}")
        return 1

    report = catalog.report
    print(f"Lines read:   {report.lines_read}")
    print(f"Header rows:  {report.headers}")
    print(f"Skipped rows: {report.skipped}")
    print(f"Duplicates:   {report.duplicates}")
    print(f"\nLoaded {len(catalog.preferences())} preferences, {len(catalog)} products")

    counts = Counter(p.category for p in catalog.products())
    print("\nCategory distribution:")
    for category in catalog.categories():
        print(f"  {category}: {counts[category]} products")

    if catalog.is_empty:
        print("\nWARNING: catalog has no products; every query will return empty results")

    return 0


if __name__ == "__main__":
    target = Path(sys.argv[1]) if len(sys.argv) > 1 else CATALOG_PATH
    sys.exit(inspect_catalog(target))
