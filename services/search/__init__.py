"""Geo-proximity agency search."""

from .distance import MILES_TO_METERS, haversine_meters
from .engine import (
    AgencySearchEngine,
    PassOutcome,
    SearchInputError,
    SearchQuery,
    SearchResult,
    normalize_postal_code,
)
from .store import AgencyStore, MongoAgencyStore, StoreQueryError, build_postal_code_filter

__all__ = [
    "MILES_TO_METERS",
    "haversine_meters",
    "AgencySearchEngine",
    "PassOutcome",
    "SearchInputError",
    "SearchQuery",
    "SearchResult",
    "normalize_postal_code",
    "AgencyStore",
    "MongoAgencyStore",
    "StoreQueryError",
    "build_postal_code_filter",
]
