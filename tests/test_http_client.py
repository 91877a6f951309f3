import asyncio

import pytest
from aiohttp import web
from aiohttp import test_utils

from espaces.api import ApiClient, PropertyRepository
from espaces.exceptions import NetworkError, NotFoundError, ProtocolError
from espaces.models import PropertyDraft
from espaces.search import ListingCache, ListingService

REQUESTS = web.AppKey("requests", list)

LISTINGS = [
    {"id": 1, "title": "Bureau Lac 2", "city": "Tunis", "price": "800", "wifi": 1},
    {"id": 2, "title": "Coworking Menzah", "city": "Tunis", "price": 120, "wifi": 0},
]


def _build_app() -> web.Application:
    app = web.Application()
    app[REQUESTS] = []

    async def list_properties(request):
        app[REQUESTS].append((request.method, request.path, request.headers.get("Authorization")))
        return web.json_response({"success": True, "data": LISTINGS})

    async def get_property(request):
        listing_id = request.match_info["id"]
        for listing in LISTINGS:
            if str(listing["id"]) == listing_id:
                return web.json_response(listing)
        return web.json_response({"message": "Propriété non trouvée"}, status=404)

    async def create_property(request):
        payload = await request.json()
        app[REQUESTS].append((request.method, request.path, payload))
        return web.json_response({"success": True, "data": {"id": 3, **payload}}, status=201)

    async def delete_property(request):
        app[REQUESTS].append((request.method, request.path, None))
        return web.Response(status=204)

    async def broken(request):
        return web.Response(text="<html>oops</html>", content_type="text/html")

    async def create_property_html(request):
        payload = await request.json()
        app[REQUESTS].append((request.method, request.path, payload))
        return web.Response(text="<html>created</html>", content_type="text/html", status=201)

    async def server_error(request):
        return web.json_response({"message": "Erreur serveur"}, status=500)

    app.router.add_get("/api/properties", list_properties)
    app.router.add_get("/api/properties/{id}", get_property)
    app.router.add_post("/api/properties", create_property)
    app.router.add_delete("/api/properties/{id}", delete_property)
    app.router.add_get("/api/broken", broken)
    app.router.add_get("/api/error", server_error)
    app.router.add_post("/legacy/properties", create_property_html)
    return app


@pytest.fixture
async def server():
    test_server = test_utils.TestServer(_build_app())
    await test_server.start_server()
    yield test_server
    await test_server.close()


@pytest.fixture
def base_url(server) -> str:
    return str(server.make_url("/api"))


async def test_get_json_decodes_envelope(base_url):
    async with ApiClient(base_url=base_url) as client:
        body = await client.get_json("/properties")
    assert body["success"] is True
    assert len(body["data"]) == 2


async def test_bearer_token_sent(server, base_url):
    async with ApiClient(base_url=base_url, token="secret") as client:
        await client.get_json("/properties")
    assert server.app[REQUESTS][-1][2] == "Bearer secret"


async def test_404_raises_not_found(base_url):
    async with ApiClient(base_url=base_url) as client:
        with pytest.raises(NotFoundError) as exc_info:
            await client.get_json("/properties/42")
    assert exc_info.value.listing_id == "42"


async def test_error_status_raises_network_error_with_message(base_url):
    async with ApiClient(base_url=base_url) as client:
        with pytest.raises(NetworkError) as exc_info:
            await client.get_json("/error")
    assert exc_info.value.status == 500
    assert str(exc_info.value) == "Erreur serveur"


async def test_non_json_body_raises_protocol_error(base_url):
    async with ApiClient(base_url=base_url) as client:
        with pytest.raises(ProtocolError):
            await client.get_json("/broken")


async def test_empty_body_returns_none(base_url):
    async with ApiClient(base_url=base_url) as client:
        assert await client.delete("/properties/1") is None


async def test_unreachable_host_raises_network_error():
    async with ApiClient(base_url="http://127.0.0.1:1/api", timeout_seconds=2) as client:
        with pytest.raises(NetworkError) as exc_info:
            await client.get_json("/properties")
    assert exc_info.value.status is None


async def test_service_end_to_end(server, base_url):
    cache = ListingCache(ttl_ms=60_000)
    async with ApiClient(base_url=base_url) as client:
        service = ListingService(
            repository=PropertyRepository(client=client, cache=cache), cache=cache
        )

        results = service.mutate_filter_state(toggle_amenity="wifi")
        assert results == []

        results = await service.fetch_filtered()
        assert [r.id for r in results] == ["1"]
        assert results[0].price == 800.0

        detail = await service.get_listing("2")
        assert detail.wifi is False

        await service.delete_listing("2")
        assert cache.fetched_at_epoch_millis is None

    methods = [entry[0] for entry in server.app[REQUESTS]]
    assert methods == ["GET", "DELETE"]


async def test_create_posts_payload_and_invalidates(server, base_url):
    cache = ListingCache(ttl_ms=60_000)
    async with ApiClient(base_url=base_url) as client:
        repository = PropertyRepository(client=client, cache=cache)
        await repository.list_raw()
        cache.write([])

        created = await repository.create(
            PropertyDraft(
                owner_id="7",
                title="Bureau Berges du Lac",
                address="Rue du Lac Biwa",
                city="Tunis",
                zipcode="1053",
                price=650,
            )
        )

    assert created["id"] == 3
    assert created["title"] == "Bureau Berges du Lac"
    assert cache.fetched_at_epoch_millis is None
    method, path, payload = server.app[REQUESTS][-1]
    assert (method, path) == ("POST", "/api/properties")
    assert payload["type"] == "coworking"


async def test_created_with_non_json_body_still_invalidates(server):
    cache = ListingCache(ttl_ms=60_000)
    cache.write([])
    async with ApiClient(base_url=str(server.make_url("/legacy"))) as client:
        repository = PropertyRepository(client=client, cache=cache)
        with pytest.raises(ProtocolError):
            await repository.create(
                PropertyDraft(
                    owner_id="7",
                    title="Bureau Berges du Lac",
                    address="Rue du Lac Biwa",
                    city="Tunis",
                    zipcode="1053",
                    price=650,
                )
            )

    assert cache.fetched_at_epoch_millis is None
    assert cache.generation == 1
    assert server.app[REQUESTS][-1][:2] == ("POST", "/legacy/properties")


def test_client_reused_across_event_loops_gets_fresh_session():
    client = ApiClient(base_url="http://127.0.0.1:1/api")

    async def open_session():
        return client._get_session()

    async def open_and_close():
        session = client._get_session()
        await client.close()
        return session

    first = asyncio.run(open_session())
    second = asyncio.run(open_and_close())

    assert first is not second
    assert second.closed
    assert client._session is None
