"""
Repositorio para operaciones CRUD sobre /properties.

Toda escritura exitosa invalida la caché de listings del proceso.
"""

from typing import Awaitable, Optional, Union

import structlog

from espaces.api.envelope import unwrap_collection, unwrap_item
from espaces.api.http_client import ApiClient, get_api_client
from espaces.exceptions import ProtocolError
from espaces.models import (
    PropertyDraft,
    PropertyRecord,
    PropertyUpdate,
    normalize_property,
)

logger = structlog.get_logger()


class PropertyRepository:
    """Repositorio del recurso /properties del backend."""

    RESOURCE = "/properties"

    def __init__(self, client: Optional[ApiClient] = None, cache=None):
        self._client = client or get_api_client()
        if cache is None:
            from espaces.search.cache import get_listing_cache

            cache = get_listing_cache()
        self._cache = cache

    @property
    def client(self) -> ApiClient:
        return self._client

    @property
    def cache(self):
        return self._cache

    async def list_raw(self) -> list:
        """
        Obtiene los listings crudos (sin normalizar).

        Raises:
            NetworkError, ProtocolError, NotFoundError
        """
        body = await self.client.get_json(self.RESOURCE)
        return unwrap_collection(body)

    async def get_by_id(self, listing_id: str) -> PropertyRecord:
        """
        Obtiene un listing directamente del backend.

        Raises:
            NotFoundError: Si el backend responde 404
            ProtocolError: Si la respuesta no es un listing válido
        """
        body = await self.client.get_json(f"{self.RESOURCE}/{listing_id}")
        return normalize_property(unwrap_item(body))

    async def create(self, draft: PropertyDraft) -> dict:
        """
        Crea un listing.

        Returns:
            El registro creado según lo devuelve el backend
        """
        body = await self._send_write(
            self.client.post_json(self.RESOURCE, draft.to_api_dict())
        )
        self.cache.invalidate()
        logger.info("Listing creado", owner_id=draft.owner_id, title=draft.title)
        return self._unwrap_write(body)

    async def update(
        self, listing_id: str, changes: Union[PropertyUpdate, dict]
    ) -> dict:
        """Actualiza un listing con los campos indicados."""
        if isinstance(changes, PropertyUpdate):
            payload = changes.to_api_dict()
        else:
            payload = PropertyUpdate.model_validate(changes).to_api_dict()
        body = await self._send_write(
            self.client.put_json(f"{self.RESOURCE}/{listing_id}", payload)
        )
        self.cache.invalidate()
        logger.info("Listing actualizado", listing_id=listing_id, fields=sorted(payload))
        return self._unwrap_write(body)

    async def delete(self, listing_id: str) -> None:
        """Elimina un listing."""
        await self._send_write(self.client.delete(f"{self.RESOURCE}/{listing_id}"))
        self.cache.invalidate()
        logger.info("Listing eliminado", listing_id=listing_id)

    async def _send_write(self, request: Awaitable):
        """
        Ejecuta un request de escritura.

        Un ProtocolError implica status 2xx con body ilegible: el backend
        ya aplicó el cambio, así que la caché se invalida igual.
        """
        try:
            return await request
        except ProtocolError as e:
            self.cache.invalidate()
            logger.warning("Escritura aplicada con respuesta ilegible", error=str(e))
            raise

    @staticmethod
    def _unwrap_write(body) -> dict:
        if isinstance(body, dict) and isinstance(body.get("data"), dict):
            return body["data"]
        return body if isinstance(body, dict) else {}
