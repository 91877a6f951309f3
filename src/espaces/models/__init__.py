"""
Modelos de datos del sistema.

- PropertyRecord: listing normalizado
- PropertyDraft / PropertyUpdate: payloads de escritura
- FilterState: selección de filtros del usuario
"""

from espaces.models.property_record import (
    AMENITY_FIELDS,
    PropertyDraft,
    PropertyRecord,
    PropertyUpdate,
    normalize_property,
)
from espaces.models.filter_state import (
    PRICE_RANGE_OPTIONS,
    FilterState,
    PriceRange,
    get_price_range,
    range_for_price,
)

__all__ = [
    # Listings
    "AMENITY_FIELDS",
    "PropertyRecord",
    "PropertyDraft",
    "PropertyUpdate",
    "normalize_property",
    # Filtros
    "FilterState",
    "PriceRange",
    "PRICE_RANGE_OPTIONS",
    "get_price_range",
    "range_for_price",
]
