"""
Configuración centralizada del sistema.
Carga variables de entorno y define settings globales.
"""

from functools import lru_cache
from pathlib import Path
from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

# Encontrar la raíz del proyecto (donde está el .env)
# config.py -> espaces/ -> src/ -> project root
_PROJECT_ROOT = Path(__file__).resolve().parent.parent.parent
_ENV_FILE = _PROJECT_ROOT / ".env"


class Settings(BaseSettings):
    """Configuración principal de la aplicación."""

    model_config = SettingsConfigDict(
        env_file=str(_ENV_FILE),
        env_file_encoding="utf-8",
        env_prefix="ESPACES_",
        case_sensitive=False,
        extra="ignore",
    )

    # API de propiedades
    api_base_url: str = Field(
        "http://localhost:3000/api", description="URL base del backend de propiedades"
    )
    api_timeout_seconds: float = Field(
        10.0, gt=0, description="Timeout total por request (segundos)"
    )
    api_token: Optional[str] = Field(
        None, description="Token Bearer opcional para el header Authorization"
    )

    # Cache de listings
    cache_ttl_ms: int = Field(
        60_000, ge=0, description="Ventana de validez del snapshot de listings (ms)"
    )

    # Normalización
    default_rating: float = Field(4.8, description="Rating cuando el backend no lo envía")
    placeholder_image_url: str = Field(
        "/placeholder.svg", description="Imagen por defecto si image_url es null"
    )
    default_country: str = Field("fr", description="País por defecto de un listing")

    # Logging
    log_level: str = Field("INFO", description="Nivel de logging")


@lru_cache
def get_settings() -> Settings:
    """Obtiene la configuración cacheada."""
    return Settings()


# Constantes del sistema
PROPERTY_TYPES = ["office", "residential", "coworking", "meeting-room", "other"]

PROPERTY_STATUSES = ["available", "booked", "maintenance", "pending", "active"]

# Tipos de espacio ofrecidos en el filtro (campo legacy "type")
SPACE_TYPE_OPTIONS = {
    "bureau_prive": "Bureau privé",
    "espace_partage": "Espace partagé",
    "salle_reunion": "Salle de réunion",
}

# Orden canónico de amenities con su etiqueta para UI
AMENITY_OPTIONS = {
    "wifi": "Wifi haut débit",
    "parking": "Parking",
    "kitchen": "Cuisine",
    "coffee": "Café/Thé",
    "reception": "Réception",
    "secured": "Sécurisé",
    "accessible": "Accessible",
    "printers": "Imprimantes",
    "flexible_hours": "Horaires flexibles",
}

PRICE_RANGES = [
    {"id": "range1", "label": "Moins de 100€", "min": 0, "max": 100},
    {"id": "range2", "label": "100€ - 300€", "min": 100, "max": 300},
    {"id": "range3", "label": "300€ - 500€", "min": 300, "max": 500},
    {"id": "range4", "label": "500€ - 1000€", "min": 500, "max": 1000},
    {"id": "range5", "label": "Plus de 1000€", "min": 1000, "max": 10000},
]
