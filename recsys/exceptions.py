"""
Exception hierarchy for the recommendation engine.

"No matches" is never an exception: queries that find nothing return empty
lists. Exceptions are reserved for unreadable catalog sources and for calls
that break the engine's argument contract.
"""


class RecommendationError(Exception):
    """Base exception for the engine."""


class CatalogUnavailableError(RecommendationError):
    """Raised when a catalog source is missing or cannot be read."""


class InvalidArgumentError(RecommendationError, ValueError):
    """Raised for negative counts, missing identifiers and similar misuse."""
