"""
Cache en memoria del último fetch completo de listings.

Instancia única por proceso: cualquier operación de escritura
(create/update/delete) la invalida, venga de la pantalla que venga.
"""

import asyncio
import enum
import time
from functools import lru_cache
from typing import Callable, Optional, Union

import structlog

from espaces.config import get_settings
from espaces.models import PropertyRecord

logger = structlog.get_logger()


class CacheSignal(enum.Enum):
    MISS = "cache_miss"
    NOT_FOUND = "not_found"


CACHE_MISS = CacheSignal.MISS
NOT_FOUND = CacheSignal.NOT_FOUND


def _epoch_millis() -> int:
    return int(time.time() * 1000)


class ListingCache:
    """
    Snapshot ordenado de listings con ventana de validez fija.

    El orden del snapshot es el de la respuesta del servidor (orden
    "recomendado" por defecto).
    """

    def __init__(
        self,
        ttl_ms: Optional[int] = None,
        clock: Optional[Callable[[], int]] = None,
    ):
        self.ttl_ms = ttl_ms if ttl_ms is not None else get_settings().cache_ttl_ms
        self._clock = clock or _epoch_millis
        self._snapshot: list[PropertyRecord] = []
        self._fetched_at: Optional[int] = None
        self._generation = 0
        self._pending: Optional[asyncio.Task] = None
        self._pending_generation: Optional[int] = None

    @property
    def snapshot(self) -> list[PropertyRecord]:
        return list(self._snapshot)

    @property
    def fetched_at_epoch_millis(self) -> Optional[int]:
        return self._fetched_at

    @property
    def generation(self) -> int:
        """Se incrementa en cada invalidate(); permite descartar writes viejos."""
        return self._generation

    def is_valid(self) -> bool:
        if self._fetched_at is None:
            return False
        return self._clock() - self._fetched_at < self.ttl_ms

    def read(self) -> Union[list[PropertyRecord], CacheSignal]:
        """Devuelve el snapshot si sigue vigente, o CACHE_MISS."""
        if not self.is_valid():
            return CACHE_MISS
        logger.debug("Usando listings en caché", count=len(self._snapshot))
        return list(self._snapshot)

    def write(
        self, records: list[PropertyRecord], generation: Optional[int] = None
    ) -> bool:
        """
        Reemplaza el snapshot y marca el timestamp.

        Args:
            records: Listings normalizados
            generation: Generación leída al iniciar el fetch (opcional)

        Returns:
            False si el write se descartó por venir de un fetch anterior
            a un invalidate()
        """
        if generation is not None and generation != self._generation:
            logger.info(
                "Write de caché descartado por invalidación",
                fetch_generation=generation,
                current_generation=self._generation,
            )
            return False
        self._snapshot = list(records)
        self._fetched_at = self._clock()
        return True

    def invalidate(self):
        """Limpia snapshot y timestamp sin condiciones."""
        self._snapshot = []
        self._fetched_at = None
        self._generation += 1
        logger.debug("Caché de listings invalidada", generation=self._generation)

    def pending_fetch(self) -> Optional[asyncio.Task]:
        """
        Fetch en curso para la generación actual, si lo hay.

        Un fetch iniciado antes de un invalidate() no se reutiliza: sus
        datos son previos a la escritura que invalidó.
        """
        if self._pending is None or self._pending.done():
            return None
        if self._pending_generation != self._generation:
            return None
        return self._pending

    def track_fetch(self, task: asyncio.Task, generation: int):
        """Registra el fetch en curso; lo comparten todos los fetchers de esta caché."""
        self._pending = task
        self._pending_generation = generation

    def lookup_by_id(self, listing_id: str) -> Union[PropertyRecord, CacheSignal]:
        """Busca en el snapshot, sin disparar fetch. NOT_FOUND si no está."""
        listing_id = str(listing_id)
        for record in self._snapshot:
            if record.id == listing_id:
                return record
        return NOT_FOUND


@lru_cache
def get_listing_cache() -> ListingCache:
    """Obtiene la caché de listings del proceso (singleton cacheado)."""
    return ListingCache()
