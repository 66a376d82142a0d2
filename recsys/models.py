"""
Data model for the recommendation engine.

Products and preference rules are created once while the catalog is loaded
and never modified afterwards, so both are frozen dataclasses with tuple
fields.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, Tuple


@dataclass(frozen=True)
class Product:
    id: str
    name: str
    category: str
    price: float
    rating: float
    tags: Tuple[str, ...] = field(default_factory=tuple)

    def to_dict(self) -> Dict[str, Any]:
        """Plain dict for JSON responses."""
        return {
            "id": self.id,
            "name": self.name,
            "category": self.category,
            "price": self.price,
            "rating": self.rating,
            "tags": list(self.tags),
        }


@dataclass(frozen=True)
class Preference:
    """Weight multiplier for one (age range, gender, category) triple."""

    age_range: str
    gender: str
    category: str
    weight: float

    def matches(self, age_range: str, gender: str, category: str) -> bool:
        # Age range is an exact label; gender and category ignore case.
        return (
            self.age_range == age_range
            and self.gender.casefold() == str(gender).casefold()
            and self.category.casefold() == str(category).casefold()
        )
