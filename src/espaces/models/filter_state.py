"""
Estado de filtros del usuario.

Mantiene la selección actual (búsqueda, tipos, amenities, rango de
precio) y deriva el flag "aplicado" y el contador del badge.
"""

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, computed_field

from espaces.config import PRICE_RANGES


class PriceRange(BaseModel):
    """Rango de precio del filtro. Ambos extremos son inclusivos."""

    model_config = ConfigDict(frozen=True)

    id: str
    label: str
    min: float
    max: float

    def contains(self, price: float) -> bool:
        return self.min <= price <= self.max


PRICE_RANGE_OPTIONS: list[PriceRange] = [PriceRange(**r) for r in PRICE_RANGES]
_PRICE_RANGES_BY_ID = {r.id: r for r in PRICE_RANGE_OPTIONS}


def get_price_range(range_id: Optional[str]) -> Optional[PriceRange]:
    """Busca un rango por ID; None si no existe."""
    if range_id is None:
        return None
    return _PRICE_RANGES_BY_ID.get(range_id)


def range_for_price(price: float) -> Optional[PriceRange]:
    """
    Asigna un precio a un único rango.

    Los rangos comparten extremos (100, 300, ...): en el borde gana
    el rango inferior.
    """
    for price_range in PRICE_RANGE_OPTIONS:
        if price_range.contains(price):
            return price_range
    return None


def _toggle(values: list[str], item: str) -> list[str]:
    if item in values:
        return [v for v in values if v != item]
    return [*values, item]


class FilterState(BaseModel):
    """
    Selección de filtros del usuario.

    Las mutaciones son síncronas y quedan visibles para la próxima
    llamada a FilterEngine.apply.
    """

    search_term: str = Field(default="", description="Texto libre de búsqueda")
    selected_types: list[str] = Field(
        default_factory=list, description="Tipos seleccionados (OR)"
    )
    selected_amenities: list[str] = Field(
        default_factory=list, description="Amenities requeridas (AND)"
    )
    selected_price_range_id: Optional[str] = Field(
        None, description="ID del rango de precio seleccionado"
    )

    @computed_field
    @property
    def is_applied(self) -> bool:
        return bool(
            self.selected_types
            or self.selected_amenities
            or self.selected_price_range_id is not None
        )

    @computed_field
    @property
    def active_filter_count(self) -> int:
        return (
            len(self.selected_types)
            + len(self.selected_amenities)
            + (1 if self.selected_price_range_id is not None else 0)
        )

    @property
    def normalized_search_term(self) -> str:
        return self.search_term.strip().lower()

    def set_search_term(self, term: Optional[str]) -> None:
        self.search_term = term or ""

    def toggle_type(self, type_id: str) -> None:
        self.selected_types = _toggle(self.selected_types, type_id)

    def toggle_amenity(self, amenity_id: str) -> None:
        self.selected_amenities = _toggle(self.selected_amenities, amenity_id)

    def set_price_range(self, range_id: Optional[str]) -> None:
        """
        Selección simple: volver a elegir el mismo rango lo deselecciona.

        Raises:
            ValueError: Si range_id no es un rango conocido
        """
        if range_id is None or range_id == self.selected_price_range_id:
            self.selected_price_range_id = None
            return
        if get_price_range(range_id) is None:
            raise ValueError(f"Rango de precio desconocido: {range_id}")
        self.selected_price_range_id = range_id

    def reset(self) -> None:
        """Limpia tipos, amenities y rango de precio. La búsqueda se mantiene."""
        self.selected_types = []
        self.selected_amenities = []
        self.selected_price_range_id = None
