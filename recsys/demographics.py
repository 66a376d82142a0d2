"""
Demographic context helpers: map a raw age to an age-range label and
normalise gender codes before preference lookup.
"""

import logging

from config import (
    AGE_RANGES,
    DEFAULT_AGE_RANGE,
    DEFAULT_GENDER,
    MIN_AGE,
    OLDEST_AGE_RANGE,
    VALID_GENDERS,
)
from recsys.exceptions import InvalidArgumentError

logger = logging.getLogger(__name__)


def age_to_range(age) -> str:
    """
    Map an age in years to its preference age-range label.

    Ages under MIN_AGE use DEFAULT_AGE_RANGE ("18-24").

    Raises:
        InvalidArgumentError: If age is not a whole number
    """
    if isinstance(age, bool):
        raise InvalidArgumentError(f"age must be an integer, got {age!r}")
    if isinstance(age, float) and not age.is_integer():
        raise InvalidArgumentError(f"age must be a whole number, got {age!r}")
    try:
        age = int(age)
    except (TypeError, ValueError) as e:
        raise InvalidArgumentError(f"age must be an integer, got {age!r}") from e

    if age < MIN_AGE:
        logger.info(f"Age {age} below {MIN_AGE}, using default range {DEFAULT_AGE_RANGE}")
        return DEFAULT_AGE_RANGE

    for upper, label in AGE_RANGES:
        if age <= upper:
            return label
    return OLDEST_AGE_RANGE


def normalize_gender(gender) -> str:
    """Upper-case a valid gender code; anything else falls back to DEFAULT_GENDER."""
    code = str(gender or "").strip().upper()
    if code in VALID_GENDERS:
        return code

    logger.info(f"Unrecognised gender {gender!r}, using default {DEFAULT_GENDER}")
    return DEFAULT_GENDER
