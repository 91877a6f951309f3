"""
Cliente HTTP del backend de propiedades.

Singleton para la conexión al API REST.
"""

import asyncio
import json
from functools import lru_cache
from typing import Any, Optional

import aiohttp
import structlog

from espaces.config import get_settings
from espaces.exceptions import NetworkError, NotFoundError, ProtocolError

logger = structlog.get_logger()


class ApiClient:
    """Wrapper de aiohttp.ClientSession con el manejo de errores del API."""

    def __init__(
        self,
        base_url: Optional[str] = None,
        timeout_seconds: Optional[float] = None,
        token: Optional[str] = None,
    ):
        settings = get_settings()
        self.base_url = (base_url or settings.api_base_url).rstrip("/")
        self._timeout = aiohttp.ClientTimeout(
            total=timeout_seconds or settings.api_timeout_seconds
        )
        self._token = token if token is not None else settings.api_token
        self._session: Optional[aiohttp.ClientSession] = None
        self._loop: Optional[asyncio.AbstractEventLoop] = None

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.close()

    def _get_session(self) -> aiohttp.ClientSession:
        """
        Crea la sesión de forma lazy (requiere un event loop corriendo).

        La sesión queda atada al loop que la creó. Si el cliente se reusa
        desde otro loop (otro asyncio.run) se crea una sesión nueva.
        """
        loop = asyncio.get_running_loop()
        if self._session is not None and self._loop is not loop:
            logger.debug("Event loop distinto, se descarta la sesión anterior")
            self._session = None
        if self._session is None or self._session.closed:
            headers = {"Content-Type": "application/json"}
            if self._token:
                headers["Authorization"] = f"Bearer {self._token}"
            self._session = aiohttp.ClientSession(timeout=self._timeout, headers=headers)
            self._loop = loop
        return self._session

    async def close(self):
        """Cierra la sesión y libera conexiones."""
        # Una sesión de otro loop no se puede cerrar desde este
        same_loop = self._loop is asyncio.get_running_loop()
        if self._session and not self._session.closed and same_loop:
            await self._session.close()
        self._session = None

    async def request(
        self, method: str, path: str, payload: Optional[dict] = None
    ) -> Any:
        """
        Ejecuta un request y devuelve el body JSON decodificado.

        Args:
            method: Verbo HTTP
            path: Path relativo a base_url (ej: /properties/12)
            payload: Body JSON opcional

        Returns:
            Body decodificado, o None si la respuesta vino vacía

        Raises:
            NotFoundError: Si el backend responde 404
            NetworkError: Falla de transporte o status HTTP de error
            ProtocolError: Body que no es JSON válido
        """
        url = f"{self.base_url}/{path.lstrip('/')}"
        try:
            async with self._get_session().request(method, url, json=payload) as response:
                text = await response.text()
                if response.status == 404:
                    raise NotFoundError(path.rstrip("/").rsplit("/", 1)[-1])
                if response.status >= 400:
                    message = self._error_message(text) or f"Error HTTP: {response.status}"
                    logger.warning(
                        "Respuesta de error del API",
                        method=method,
                        url=url,
                        status=response.status,
                    )
                    raise NetworkError(message, status=response.status)
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            logger.error("Error de red", method=method, url=url, error=str(e))
            raise NetworkError(f"No se pudo contactar {url}: {e}") from e

        if not text.strip():
            return None
        try:
            return json.loads(text)
        except json.JSONDecodeError as e:
            raise ProtocolError(f"Respuesta no JSON de {method} {url}") from e

    @staticmethod
    def _error_message(text: str) -> Optional[str]:
        """Extrae el campo 'message' de un body de error, si existe."""
        try:
            body = json.loads(text)
        except (json.JSONDecodeError, TypeError):
            return None
        if isinstance(body, dict) and "message" in body:
            return str(body["message"])
        return None

    async def get_json(self, path: str) -> Any:
        return await self.request("GET", path)

    async def post_json(self, path: str, payload: dict) -> Any:
        return await self.request("POST", path, payload)

    async def put_json(self, path: str, payload: dict) -> Any:
        return await self.request("PUT", path, payload)

    async def delete(self, path: str) -> Any:
        return await self.request("DELETE", path)


@lru_cache
def get_api_client() -> ApiClient:
    """
    Obtiene el cliente del API (singleton cacheado).

    Reutilizable entre distintos asyncio.run: la sesión HTTP se recrea
    cuando cambia el event loop.

    Returns:
        ApiClient configurado desde Settings
    """
    settings = get_settings()
    client = ApiClient()
    logger.info("Cliente del API inicializado", url=settings.api_base_url)
    return client
