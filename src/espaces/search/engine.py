"""
Motor de filtrado de listings.

Implementa:
- Búsqueda: substring case-insensitive en título, dirección, ciudad o región
- Tipos: OR entre los tipos seleccionados (campo principal o legacy)
- Amenities: AND entre las amenities seleccionadas
- Precio: rango inclusivo en ambos extremos
"""

from collections.abc import Iterable

from espaces.models import FilterState, PropertyRecord, get_price_range

SEARCHABLE_FIELDS = ("title", "address", "city", "region")


class FilterEngine:
    """
    Aplica la selección de filtros a un conjunto de listings.

    Sin estado: cada cambio de filtros re-ejecuta el filtrado completo,
    O(n) sobre datos en memoria. El resultado es una subsecuencia de la
    entrada con el orden original.
    """

    def apply(
        self, records: Iterable[PropertyRecord], state: FilterState
    ) -> list[PropertyRecord]:
        return [record for record in records if self.matches(record, state)]

    def matches(self, record: PropertyRecord, state: FilterState) -> bool:
        """Verifica si un listing cumple todos los criterios activos."""
        return (
            self._matches_search(record, state.normalized_search_term)
            and self._matches_types(record, state.selected_types)
            and self._matches_amenities(record, state.selected_amenities)
            and self._matches_price(record, state.selected_price_range_id)
        )

    def _matches_search(self, record: PropertyRecord, term: str) -> bool:
        if not term:
            return True
        return any(
            term in (getattr(record, field, "") or "").lower()
            for field in SEARCHABLE_FIELDS
        )

    def _matches_types(self, record: PropertyRecord, selected: list[str]) -> bool:
        if not selected:
            return True
        # El backend usó históricamente dos campos para el mismo concepto
        candidates = {record.raw_property_type, record.space_type}
        # "other" como fallback de un valor desconocido no es un tipo elegible
        if record.property_type != "other":
            candidates.add(record.property_type)
        return any(candidate in selected for candidate in candidates if candidate)

    def _matches_amenities(self, record: PropertyRecord, selected: list[str]) -> bool:
        return all(record.has_amenity(amenity) for amenity in selected)

    def _matches_price(self, record: PropertyRecord, range_id) -> bool:
        price_range = get_price_range(range_id)
        if price_range is None:
            return True
        return price_range.contains(record.price)
