"""
Módulo de acceso al API.

Provee el cliente HTTP y operaciones CRUD sobre /properties.
"""

from espaces.api.http_client import get_api_client, ApiClient
from espaces.api.envelope import unwrap_collection, unwrap_item
from espaces.api.repositories import PropertyRepository

__all__ = [
    "get_api_client",
    "ApiClient",
    "unwrap_collection",
    "unwrap_item",
    "PropertyRepository",
]
