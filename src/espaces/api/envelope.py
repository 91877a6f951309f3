"""
Desempaquetado de respuestas del API.

El backend responde {"success": true, "data": ...} o directamente el
payload (array u objeto); se aceptan ambas formas.
"""

from typing import Any

from espaces.exceptions import ProtocolError


def _is_envelope(body: Any) -> bool:
    return isinstance(body, dict) and body.get("success") is True and "data" in body


def unwrap_collection(body: Any) -> list:
    """
    Extrae la lista de listings de la respuesta de GET /properties.

    Raises:
        ProtocolError: Si el body no es un envelope con lista ni un array
    """
    if _is_envelope(body) and isinstance(body["data"], list):
        return body["data"]
    if isinstance(body, list):
        return body
    shape = sorted(body) if isinstance(body, dict) else type(body).__name__
    raise ProtocolError(f"Formato de respuesta inválido: {shape}")


def unwrap_item(body: Any) -> dict:
    """
    Extrae un listing de la respuesta de GET /properties/{id}.

    Raises:
        ProtocolError: Si el body no contiene un objeto
    """
    if _is_envelope(body) and isinstance(body["data"], dict):
        return body["data"]
    if isinstance(body, dict) and "success" not in body:
        return body
    raise ProtocolError("Formato de respuesta inválido para un listing")
