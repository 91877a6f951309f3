"""
Obtención de listings del API.

Trae la colección completa, la normaliza y la escribe en la caché.
Un solo fetch en vuelo por caché: los llamadores concurrentes esperan
la misma tarea.
"""

import asyncio
from typing import Optional

import structlog

from espaces.api.repositories import PropertyRepository
from espaces.exceptions import NotFoundError, ProtocolError
from espaces.models import PropertyRecord, normalize_property
from espaces.search.cache import ListingCache, get_listing_cache

logger = structlog.get_logger()


def normalize_listings(raw_listings: list) -> list[PropertyRecord]:
    """
    Normaliza cada elemento crudo, preservando el orden del servidor.

    Los elementos mal formados se descartan con un warning.
    """
    records = []
    for raw in raw_listings:
        try:
            records.append(normalize_property(raw))
        except ProtocolError as e:
            logger.warning("Listing descartado", error=str(e))
    return records


class ListingFetcher:
    """Trae /properties del backend y hace write-through a la caché."""

    def __init__(
        self,
        repository: Optional[PropertyRepository] = None,
        cache: Optional[ListingCache] = None,
    ):
        self.cache = cache or get_listing_cache()
        self.repository = repository or PropertyRepository(cache=self.cache)

    @property
    def in_flight(self) -> bool:
        return self.cache.pending_fetch() is not None

    async def fetch(self) -> list[PropertyRecord]:
        """
        Trae y normaliza todos los listings.

        Si ya hay un fetch en curso sobre la misma caché y la misma
        generación, se reutiliza (aunque lo haya iniciado otro fetcher).
        Tras un invalidate() se inicia uno nuevo. Cancelar al llamador no
        cancela el fetch compartido: termina y escribe en la caché.

        Raises:
            NetworkError: Falla de transporte
            ProtocolError: Respuesta con forma inesperada
        """
        task = self.cache.pending_fetch()
        if task is None:
            generation = self.cache.generation
            task = asyncio.ensure_future(self._fetch_and_store(generation))
            task.add_done_callback(self._on_done)
            self.cache.track_fetch(task, generation)
        return await asyncio.shield(task)

    async def _fetch_and_store(self, generation: int) -> list[PropertyRecord]:
        logger.info("Obteniendo listings del API")
        try:
            raw_listings = await self.repository.list_raw()
        except NotFoundError as e:
            raise ProtocolError("El endpoint de listings respondió 404") from e

        records = normalize_listings(raw_listings)
        self.cache.write(records, generation=generation)
        logger.info(
            "Listings obtenidos",
            received=len(raw_listings),
            normalized=len(records),
        )
        return records

    def _on_done(self, task: asyncio.Task):
        # Marca la excepción como recuperada aunque nadie espere la tarea
        if not task.cancelled() and task.exception() is not None:
            logger.error("Error obteniendo listings", error=str(task.exception()))
