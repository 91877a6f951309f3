"""
Taxonomía de errores del cliente de listings.

NetworkError y ProtocolError se muestran igual al usuario (estado
reintentable); NotFoundError se muestra como detalle vacío.
"""

from typing import Optional


class ListingError(Exception):
    """Error base de operaciones sobre listings."""

    retryable: bool = True


class NetworkError(ListingError):
    """Falla de transporte: host inalcanzable, timeout o status HTTP de error."""

    def __init__(self, message: str, status: Optional[int] = None):
        super().__init__(message)
        self.status = status


class ProtocolError(ListingError):
    """La respuesta no tiene ninguna de las formas aceptadas."""


class NotFoundError(ListingError):
    """El listing pedido no existe ni en cache ni en el backend."""

    retryable = False

    def __init__(self, listing_id: str):
        super().__init__(f"Listing no encontrado: {listing_id}")
        self.listing_id = listing_id
