"""
Modelo normalizado de un listing (PropertyRecord).

Toda la coerción de los datos crudos del backend (0/1 vs booleanos,
precios como string, campos nulos) se hace acá, una sola vez, en el
borde del fetch. El resto del sistema sólo ve valores canónicos.
"""

import math
from typing import Any, Literal, Optional

from pydantic import (
    AliasChoices,
    BaseModel,
    ConfigDict,
    Field,
    ValidationError,
    computed_field,
    field_validator,
    model_validator,
)

from espaces.config import AMENITY_OPTIONS, PROPERTY_STATUSES, PROPERTY_TYPES, get_settings
from espaces.exceptions import ProtocolError

PropertyType = Literal["office", "residential", "coworking", "meeting-room", "other"]
PropertyStatus = Literal["available", "booked", "maintenance", "pending", "active"]

AMENITY_FIELDS: tuple[str, ...] = tuple(AMENITY_OPTIONS)

_PROPERTY_TYPE_ALIASES = {
    "meeting_room": "meeting-room",
    "meeting room": "meeting-room",
}

# Orden en que la UI lista los equipamientos de una tarjeta
_AMENITY_DISPLAY = [
    ("wifi", "Wifi haut débit"),
    ("parking", "Parking sécurisé"),
    ("meeting_rooms", "Salles de réunion"),
    ("kitchen", "Cuisine équipée"),
    ("coffee", "Café/Thé"),
    ("reception", "Réception"),
    ("secured", "Sécurisé"),
    ("printers", "Imprimantes"),
    ("flexible_hours", "Horaires flexibles"),
    ("accessible", "Accessible"),
]


def coerce_flag(value: Any) -> bool:
    """La base guarda booleanos como 0/1: sólo 1 o True cuentan como verdadero."""
    if isinstance(value, bool):
        return value
    return isinstance(value, (int, float)) and value == 1


def coerce_number(value: Any, default: Optional[float] = None) -> Optional[float]:
    """Convierte números o strings numéricos a float; devuelve default si no se puede."""
    if value is None or isinstance(value, bool):
        return default
    if isinstance(value, (int, float)):
        result = float(value)
    else:
        text = str(value).strip()
        if not text:
            return default
        try:
            result = float(text)
        except ValueError:
            return default
    if math.isnan(result) or math.isinf(result):
        return default
    return result


def _coerce_count(value: Any) -> int:
    number = coerce_number(value, 0.0)
    return max(0, int(number))


class PropertyRecord(BaseModel):
    """
    Listing normalizado, tal como lo consume el FilterEngine.

    Invariante: precio y flags de amenities siempre en su forma
    canónica (float / bool).
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="ignore")

    # Identificación
    id: str = Field(..., description="ID estable y único del listing")
    owner_id: Optional[str] = Field(None, description="ID del propietario")

    # Descripción
    title: str = Field(default="", description="Título del anuncio")
    description: str = Field(default="", description="Descripción libre")
    address: str = Field(default="", description="Dirección")
    city: str = Field(default="", description="Ciudad")
    zipcode: str = Field(default="", description="Código postal")
    region: str = Field(default="", description="Región")
    country: str = Field(
        default_factory=lambda: get_settings().default_country, description="País"
    )

    # Comercial
    price: float = Field(..., description="Precio mensual, sin moneda")
    property_type: PropertyType = Field(default="other", description="Tipo principal")
    raw_property_type: str = Field(
        default="",
        description="Valor de property_type tal como llegó del backend",
    )
    space_type: str = Field(
        default="",
        validation_alias=AliasChoices("space_type", "type"),
        description="Tipo legacy (campo 'type'): bureau_prive, espace_partage, ...",
    )
    status: PropertyStatus = Field(default="pending", description="Estado del listing")

    # Capacidad
    workstations: int = Field(default=0, ge=0, description="Puestos de trabajo")
    meeting_rooms: int = Field(default=0, ge=0, description="Salas de reunión")
    area: float = Field(default=0.0, ge=0, description="Superficie en m²")

    # Amenities
    wifi: bool = False
    parking: bool = False
    kitchen: bool = False
    coffee: bool = False
    reception: bool = False
    secured: bool = False
    accessible: bool = False
    flexible_hours: bool = False
    printers: bool = False

    # Calidad
    rating: float = Field(
        default_factory=lambda: get_settings().default_rating,
        description="Rating promedio",
    )
    review_count: int = Field(
        default=0,
        ge=0,
        validation_alias=AliasChoices("review_count", "reviews"),
        description="Cantidad de reseñas",
    )

    # Media
    image_url: str = Field(
        default_factory=lambda: get_settings().placeholder_image_url,
        validation_alias=AliasChoices("image_url", "image"),
        description="URL de la imagen principal",
    )

    @model_validator(mode="before")
    @classmethod
    def _keep_raw_property_type(cls, data: Any) -> Any:
        # property_type se reduce al enum; el filtro por tipo compara el valor crudo
        if isinstance(data, dict) and "raw_property_type" not in data:
            data = {**data, "raw_property_type": data.get("property_type")}
        return data

    @field_validator("id", mode="before")
    @classmethod
    def _validate_id(cls, value: Any) -> str:
        if value is None or isinstance(value, bool) or str(value).strip() == "":
            raise ValueError("id ausente")
        return str(value).strip()

    @field_validator("owner_id", mode="before")
    @classmethod
    def _validate_owner_id(cls, value: Any) -> Optional[str]:
        if value is None or str(value).strip() == "":
            return None
        return str(value).strip()

    @field_validator(
        "title", "description", "address", "city", "zipcode", "region", "space_type",
        "raw_property_type",
        mode="before",
    )
    @classmethod
    def _validate_text(cls, value: Any) -> str:
        return "" if value is None else str(value).strip()

    @field_validator("country", mode="before")
    @classmethod
    def _validate_country(cls, value: Any) -> str:
        text = "" if value is None else str(value).strip()
        return text or get_settings().default_country

    @field_validator("price", mode="before")
    @classmethod
    def _validate_price(cls, value: Any) -> float:
        price = coerce_number(value)
        if price is None:
            raise ValueError(f"precio inválido: {value!r}")
        return price

    @field_validator("property_type", mode="before")
    @classmethod
    def _validate_property_type(cls, value: Any) -> str:
        text = "" if value is None else str(value).strip().lower()
        text = _PROPERTY_TYPE_ALIASES.get(text, text)
        return text if text in PROPERTY_TYPES else "other"

    @field_validator("status", mode="before")
    @classmethod
    def _validate_status(cls, value: Any) -> str:
        text = "" if value is None else str(value).strip().lower()
        return text if text in PROPERTY_STATUSES else "pending"

    @field_validator("workstations", "meeting_rooms", "review_count", mode="before")
    @classmethod
    def _validate_counts(cls, value: Any) -> int:
        return _coerce_count(value)

    @field_validator("area", mode="before")
    @classmethod
    def _validate_area(cls, value: Any) -> float:
        return max(0.0, coerce_number(value, 0.0))

    @field_validator(*AMENITY_FIELDS, mode="before")
    @classmethod
    def _validate_flags(cls, value: Any) -> bool:
        return coerce_flag(value)

    @field_validator("rating", mode="before")
    @classmethod
    def _validate_rating(cls, value: Any) -> float:
        return coerce_number(value, get_settings().default_rating)

    @field_validator("image_url", mode="before")
    @classmethod
    def _validate_image_url(cls, value: Any) -> str:
        text = "" if value is None else str(value).strip()
        return text or get_settings().placeholder_image_url

    @computed_field
    @property
    def amenities(self) -> list[str]:
        """IDs de amenities presentes, en orden canónico."""
        return [name for name in AMENITY_FIELDS if getattr(self, name)]

    def has_amenity(self, amenity_id: str) -> bool:
        """IDs desconocidos nunca matchean."""
        if amenity_id not in AMENITY_FIELDS:
            return False
        return getattr(self, amenity_id)

    def amenity_labels(self) -> list[str]:
        """Etiquetas de equipamientos para mostrar en la tarjeta del listing."""
        labels = []
        for field, label in _AMENITY_DISPLAY:
            if field == "meeting_rooms":
                if self.meeting_rooms > 0:
                    labels.append(label)
            elif getattr(self, field):
                labels.append(label)
        return labels


def normalize_property(raw: Any) -> PropertyRecord:
    """
    Normaliza un listing crudo del backend.

    Raises:
        ProtocolError: Si el elemento no es un objeto o le faltan id/precio
    """
    if not isinstance(raw, dict):
        raise ProtocolError(f"Listing con formato inválido: {type(raw).__name__}")
    try:
        return PropertyRecord.model_validate(raw)
    except ValidationError as e:
        raise ProtocolError(f"Listing inválido (id={raw.get('id')!r}): {e}") from e


class PropertyDraft(BaseModel):
    """Datos para crear un listing desde el dashboard del propietario."""

    model_config = ConfigDict(populate_by_name=True)

    owner_id: str = Field(..., description="ID del propietario")
    title: str = Field(..., description="Título del anuncio")
    address: str = Field(..., description="Dirección")
    city: str = Field(..., description="Ciudad")
    zipcode: str = Field(..., description="Código postal")
    country: str = Field(default_factory=lambda: get_settings().default_country)
    region: str = Field(default="")
    price: float = Field(..., gt=0, description="Precio mensual, debe ser positivo")
    space_type: str = Field(default="coworking", alias="type")
    property_type: PropertyType = Field(default="office")
    status: PropertyStatus = Field(default="pending")
    description: str = Field(default="")
    workstations: int = Field(default=1, ge=0)
    meeting_rooms: int = Field(default=0, ge=0)
    area: float = Field(default=0.0, ge=0)
    amenities: list[str] = Field(default_factory=list)
    bedrooms: int = Field(default=0, ge=0)
    bathrooms: int = Field(default=0, ge=0)
    images: list[str] = Field(default_factory=list)

    @field_validator("owner_id", mode="before")
    @classmethod
    def _validate_owner_id(cls, value: Any) -> str:
        return "" if value is None else str(value)

    @field_validator("title", "address", "city", "zipcode")
    @classmethod
    def _required_text(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("campo obligatorio")
        return value

    def to_api_dict(self) -> dict:
        """Convierte a diccionario para el POST al backend."""
        return self.model_dump(by_alias=True)


class PropertyUpdate(BaseModel):
    """Cambios parciales sobre un listing: sólo se envían los campos seteados."""

    model_config = ConfigDict(populate_by_name=True)

    title: Optional[str] = None
    description: Optional[str] = None
    address: Optional[str] = None
    city: Optional[str] = None
    zipcode: Optional[str] = None
    country: Optional[str] = None
    region: Optional[str] = None
    price: Optional[float] = Field(None, gt=0)
    space_type: Optional[str] = Field(None, alias="type")
    property_type: Optional[PropertyType] = None
    status: Optional[PropertyStatus] = None
    workstations: Optional[int] = Field(None, ge=0)
    meeting_rooms: Optional[int] = Field(None, ge=0)
    area: Optional[float] = Field(None, ge=0)
    wifi: Optional[bool] = None
    parking: Optional[bool] = None
    kitchen: Optional[bool] = None
    coffee: Optional[bool] = None
    reception: Optional[bool] = None
    secured: Optional[bool] = None
    accessible: Optional[bool] = None
    flexible_hours: Optional[bool] = None
    printers: Optional[bool] = None
    image_url: Optional[str] = None

    def to_api_dict(self) -> dict:
        """Convierte a diccionario para el PUT al backend."""
        return self.model_dump(by_alias=True, exclude_unset=True)
