"""
Resumen del dashboard del propietario.
"""

from collections.abc import Iterable
from dataclasses import dataclass

from espaces.models import PropertyRecord


@dataclass
class OwnerSummary:
    """Estadísticas de los listings de un propietario."""

    total: int
    active: int
    pending: int
    revenue: float  # Suma de precios mensuales


def listings_for_owner(
    records: Iterable[PropertyRecord], owner_id: str
) -> list[PropertyRecord]:
    owner_id = str(owner_id)
    return [r for r in records if r.owner_id == owner_id]


def summarize_owner_listings(records: Iterable[PropertyRecord]) -> OwnerSummary:
    records = list(records)
    return OwnerSummary(
        total=len(records),
        active=sum(1 for r in records if r.status == "active"),
        pending=sum(1 for r in records if r.status == "pending"),
        revenue=sum(r.price for r in records),
    )
