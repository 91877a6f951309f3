"""
Servicio de listings expuesto a la capa de UI.

Combina caché, fetcher y motor de filtrado, y canaliza las
operaciones de escritura para que invaliden la caché.
"""

from typing import Optional, Union

import structlog

from espaces.api.repositories import PropertyRepository
from espaces.exceptions import ListingError
from espaces.models import FilterState, PropertyDraft, PropertyRecord, PropertyUpdate
from espaces.search.cache import CACHE_MISS, NOT_FOUND, ListingCache, get_listing_cache
from espaces.search.engine import FilterEngine
from espaces.search.fetcher import ListingFetcher
from espaces.search.owner_stats import (
    OwnerSummary,
    listings_for_owner,
    summarize_owner_listings,
)

logger = structlog.get_logger()

_UNSET = object()


class ListingService:
    """
    Fachada de búsqueda/filtrado de listings.

    Flujo:
    1. load_listings: lee la caché; en miss, fetch + write-through
    2. fetch_filtered: aplica FilterState sobre los listings cargados
    3. mutate_filter_state: re-filtra en memoria, sin red
    """

    def __init__(
        self,
        repository: Optional[PropertyRepository] = None,
        cache: Optional[ListingCache] = None,
        fetcher: Optional[ListingFetcher] = None,
        engine: Optional[FilterEngine] = None,
        state: Optional[FilterState] = None,
    ):
        self.cache = cache or get_listing_cache()
        self.repository = repository or PropertyRepository(cache=self.cache)
        self.fetcher = fetcher or ListingFetcher(
            repository=self.repository, cache=self.cache
        )
        self.engine = engine or FilterEngine()
        self.state = state or FilterState()
        self._listings: list[PropertyRecord] = []

    async def load_listings(self, force: bool = False) -> list[PropertyRecord]:
        """
        Obtiene los listings, desde la caché si sigue vigente.

        Si el fetch falla se conservan los últimos listings cargados y el
        error se propaga para que la UI ofrezca reintentar.
        """
        if force:
            self.cache.invalidate()
        else:
            cached = self.cache.read()
            if cached is not CACHE_MISS:
                self._listings = cached
                return cached

        try:
            records = await self.fetcher.fetch()
        except ListingError as e:
            logger.error(
                "No se pudieron cargar los listings",
                error=str(e),
                kept=len(self._listings),
            )
            raise
        self._listings = records
        return records

    async def fetch_filtered(
        self, state: Optional[FilterState] = None
    ) -> list[PropertyRecord]:
        """Carga los listings y aplica los filtros (los del servicio por defecto)."""
        records = await self.load_listings()
        return self.engine.apply(records, state or self.state)

    def current_results(self) -> list[PropertyRecord]:
        """Re-filtra los últimos listings cargados con el estado actual."""
        return self.engine.apply(self._listings, self.state)

    def get_filter_state(self) -> FilterState:
        return self.state

    def get_active_filter_count(self) -> int:
        return self.state.active_filter_count

    def mutate_filter_state(
        self,
        *,
        search_term: Optional[str] = None,
        toggle_type: Optional[str] = None,
        toggle_amenity: Optional[str] = None,
        price_range=_UNSET,
        reset: bool = False,
    ) -> list[PropertyRecord]:
        """
        Aplica mutaciones al estado de filtros y devuelve el resultado.

        El reset se aplica primero; price_range=None limpia el rango.

        Raises:
            ValueError: Si price_range no es un rango conocido
        """
        if reset:
            self.state.reset()
        if search_term is not None:
            self.state.set_search_term(search_term)
        if toggle_type is not None:
            self.state.toggle_type(toggle_type)
        if toggle_amenity is not None:
            self.state.toggle_amenity(toggle_amenity)
        if price_range is not _UNSET:
            self.state.set_price_range(price_range)
        return self.current_results()

    async def get_listing(self, listing_id: str) -> PropertyRecord:
        """
        Busca un listing en la caché y, si no está, en el backend.

        Raises:
            NotFoundError: Si no existe en ningún lado
        """
        cached = self.cache.lookup_by_id(listing_id)
        if cached is not NOT_FOUND:
            logger.debug("Usando listing en caché", listing_id=listing_id)
            return cached
        return await self.repository.get_by_id(listing_id)

    async def create_listing(self, draft: PropertyDraft) -> dict:
        return await self.repository.create(draft)

    async def update_listing(
        self, listing_id: str, changes: Union[PropertyUpdate, dict]
    ) -> dict:
        return await self.repository.update(listing_id, changes)

    async def delete_listing(self, listing_id: str) -> None:
        await self.repository.delete(listing_id)

    async def owner_listings(self, owner_id: str) -> list[PropertyRecord]:
        records = await self.load_listings()
        return listings_for_owner(records, owner_id)

    async def owner_summary(self, owner_id: str) -> OwnerSummary:
        """Estadísticas del dashboard: total, activos, pendientes e ingresos."""
        return summarize_owner_listings(await self.owner_listings(owner_id))
