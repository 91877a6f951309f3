import asyncio
from typing import Any, Optional

import pytest

from espaces.api import PropertyRepository
from espaces.exceptions import NotFoundError
from espaces.search import ListingCache, ListingFetcher, ListingService


class FakeClock:
    """Reloj en milisegundos controlado por el test."""

    def __init__(self, start: int = 1_700_000_000_000):
        self.now = start

    def __call__(self) -> int:
        return self.now

    def advance(self, ms: int):
        self.now += ms


class FakeApiClient:
    """Reemplazo en memoria de ApiClient que registra las llamadas."""

    def __init__(self, collection: Any = None, items: Optional[dict] = None):
        self.collection = collection if collection is not None else []
        self.items = items or {}
        self.calls: list[tuple[str, str]] = []
        self.payloads: list[Any] = []
        self.gate: Optional[asyncio.Event] = None
        self.error: Optional[Exception] = None

    async def get_json(self, path: str) -> Any:
        self.calls.append(("GET", path))
        # La respuesta refleja el estado del servidor al recibir el request
        collection = self.collection
        if self.gate is not None:
            await self.gate.wait()
        if self.error is not None:
            raise self.error
        if path == "/properties":
            return collection
        listing_id = path.rsplit("/", 1)[-1]
        if listing_id not in self.items:
            raise NotFoundError(listing_id)
        return self.items[listing_id]

    async def post_json(self, path: str, payload: dict) -> Any:
        self.calls.append(("POST", path))
        self.payloads.append(payload)
        return {"success": True, "data": {"id": "99", **payload}}

    async def put_json(self, path: str, payload: dict) -> Any:
        self.calls.append(("PUT", path))
        self.payloads.append(payload)
        return {"success": True, "data": payload}

    async def delete(self, path: str) -> Any:
        self.calls.append(("DELETE", path))
        return None

    def count(self, method: str, path: str) -> int:
        return self.calls.count((method, path))


@pytest.fixture
def raw_listings() -> list[dict]:
    return [
        {
            "id": 1,
            "owner_id": 7,
            "title": "Bureau lumineux Part-Dieu",
            "address": "12 rue Garibaldi",
            "city": "Lyon",
            "region": "Auvergne-Rhône-Alpes",
            "price": "50",
            "type": "bureau_prive",
            "property_type": "office",
            "status": "active",
            "wifi": 1,
            "parking": 0,
            "coffee": 1,
            "meeting_rooms": 1,
        },
        {
            "id": 2,
            "owner_id": 7,
            "title": "Open space Marais",
            "address": "3 rue des Archives",
            "city": "Paris",
            "region": "Île-de-France",
            "price": 250,
            "type": "espace_partage",
            "property_type": "coworking",
            "status": "pending",
            "wifi": 0,
            "parking": 1,
        },
        {
            "id": 3,
            "owner_id": 8,
            "title": "Salle de réunion Bellecour",
            "address": "1 place Bellecour",
            "city": "Lyon",
            "price": 100,
            "type": "salle_reunion",
            "property_type": "meeting_room",
            "status": "available",
            "wifi": True,
            "parking": True,
            "kitchen": 1,
        },
        {
            "id": 4,
            "owner_id": 7,
            "title": "Plateau Sfax centre",
            "address": "Avenue Habib Bourguiba",
            "city": "Sfax",
            "price": 1200.5,
            "property_type": "office",
            "status": "active",
            "wifi": 1,
            "parking": 1,
            "secured": 1,
        },
    ]


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def cache(clock) -> ListingCache:
    return ListingCache(ttl_ms=60_000, clock=clock)


@pytest.fixture
def api_client(raw_listings) -> FakeApiClient:
    return FakeApiClient(
        collection={"success": True, "data": raw_listings},
        items={str(r["id"]): {"success": True, "data": r} for r in raw_listings},
    )


@pytest.fixture
def repository(api_client, cache) -> PropertyRepository:
    return PropertyRepository(client=api_client, cache=cache)


@pytest.fixture
def fetcher(repository, cache) -> ListingFetcher:
    return ListingFetcher(repository=repository, cache=cache)


@pytest.fixture
def service(repository, cache, fetcher) -> ListingService:
    return ListingService(repository=repository, cache=cache, fetcher=fetcher)
