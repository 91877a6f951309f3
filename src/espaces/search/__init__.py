"""
Búsqueda de listings.

Combina la caché del proceso, el fetcher y el motor de filtrado
para producir los resultados que muestra la UI.
"""

from espaces.search.cache import (
    CACHE_MISS,
    NOT_FOUND,
    ListingCache,
    get_listing_cache,
)
from espaces.search.engine import FilterEngine
from espaces.search.fetcher import ListingFetcher
from espaces.search.owner_stats import OwnerSummary
from espaces.search.service import ListingService

__all__ = [
    "CACHE_MISS",
    "NOT_FOUND",
    "ListingCache",
    "get_listing_cache",
    "FilterEngine",
    "ListingFetcher",
    "OwnerSummary",
    "ListingService",
]
