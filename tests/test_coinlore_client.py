"""HTTP-клиент против локального aiohttp сервера."""

import json

import pytest
import pytest_asyncio
from aiohttp import web
from aiohttp.test_utils import TestServer

from coinlist.services.crypto import CoinloreClient, MappingError, NetworkError
from config.settings import ApiSettings
from tests.fakes import bitcoin_ticker, make_ticker


async def tickers(request: web.Request) -> web.Response:
    start = int(request.query["start"])
    limit = int(request.query["limit"])
    data = [make_ticker(i) for i in range(start, min(start + limit, 7))]
    # источник отдаёт JSON с text/html, поэтому клиент разбирает тело сам
    return web.Response(
        text=json.dumps({"data": data, "info": {"coins_num": 7, "time": 1}}),
        content_type="text/html",
    )


async def ticker(request: web.Request) -> web.Response:
    if request.query.get("id") == "bitcoin":
        return web.json_response([bitcoin_ticker()])
    if request.query.get("id") == "garbage":
        return web.Response(text="<html>oops</html>")
    return web.Response(status=500, text="internal error")


@pytest_asyncio.fixture
async def client():
    app = web.Application()
    app.router.add_get("/api/tickers/", tickers)
    app.router.add_get("/api/ticker/", ticker)
    server = TestServer(app)
    await server.start_server()
    api = CoinloreClient(ApiSettings(base_url=str(server.make_url("/")), request_timeout=5))
    try:
        yield api
    finally:
        await api.close()
        await server.close()


@pytest.mark.asyncio
async def test_list_page_passes_offset_and_limit(client):
    payload = await client.list_page(3, 6)

    assert [row["id"] for row in payload["data"]] == ["96"]
    assert payload["info"]["coins_num"] == 7


@pytest.mark.asyncio
async def test_get_by_id_returns_raw_list(client):
    payload = await client.get_by_id("bitcoin")

    assert payload[0]["symbol"] == "BTC"


@pytest.mark.asyncio
async def test_http_error_carries_status(client):
    with pytest.raises(NetworkError) as excinfo:
        await client.get_by_id("ethereum")

    assert excinfo.value.status_code == 500
    assert str(excinfo.value) == "Request failed with status code 500"


@pytest.mark.asyncio
async def test_non_json_body_is_mapping_error(client):
    with pytest.raises(MappingError):
        await client.get_by_id("garbage")


@pytest.mark.asyncio
async def test_unreachable_host_is_network_error():
    api = CoinloreClient(ApiSettings(base_url="http://127.0.0.1:9", request_timeout=2))
    try:
        with pytest.raises(NetworkError) as excinfo:
            await api.list_page(5, 0)
    finally:
        await api.close()

    assert excinfo.value.status_code is None
    assert excinfo.value.cause is not None
