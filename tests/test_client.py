from types import SimpleNamespace

import aiohttp
import pytest
import pytest_asyncio
from aiohttp import web
from aiohttp.test_utils import TestServer

from solana_block_monitor.client import RpcClient, RpcError


@pytest_asyncio.fixture
async def rpc_server():
    state = SimpleNamespace(requests=[], responses={}, base_url="")

    async def handle(request):
        body = await request.json()
        state.requests.append((request.match_info["key"], body))
        status, payload = state.responses[body["method"]]
        if isinstance(payload, str):
            return web.Response(status=status, text=payload)
        payload = {"jsonrpc": "2.0", "id": body["id"], **payload}
        return web.json_response(payload, status=status)

    app = web.Application()
    app.router.add_post("/{key}", handle)
    server = TestServer(app)
    await server.start_server()
    state.base_url = f"http://{server.host}:{server.port}"
    try:
        yield state
    finally:
        await server.close()


def test_url_joins_key():
    client = RpcClient("http://rpc.example.com", "placeholder")
    assert client.url == "http://rpc.example.com/placeholder"


@pytest.mark.asyncio
async def test_get_slot(rpc_server):
    rpc_server.responses["getSlot"] = (200, {"result": 287})
    async with RpcClient(rpc_server.base_url, "placeholder") as client:
        slot = await client.get_slot()
    assert slot == 287
    key, body = rpc_server.requests[0]
    assert key == "placeholder"
    assert body["method"] == "getSlot"
    assert body["params"] == [{"commitment": "confirmed"}]
    assert body["jsonrpc"] == "2.0"


@pytest.mark.asyncio
async def test_get_blocks(rpc_server):
    rpc_server.responses["getBlocks"] = (200, {"result": [10, 12, 15]})
    async with RpcClient(rpc_server.base_url, "placeholder") as client:
        blocks = await client.get_blocks(10, 20)
    assert blocks == [10, 12, 15]
    _, body = rpc_server.requests[0]
    assert body["method"] == "getBlocks"
    assert body["params"] == [10, 20, {"commitment": "confirmed"}]


@pytest.mark.asyncio
async def test_request_ids_are_distinct(rpc_server):
    rpc_server.responses["getSlot"] = (200, {"result": 1})
    async with RpcClient(rpc_server.base_url, "placeholder") as client:
        await client.get_slot()
        await client.get_slot()
    ids = [body["id"] for _, body in rpc_server.requests]
    assert len(set(ids)) == 2


@pytest.mark.asyncio
async def test_rpc_error_response(rpc_server):
    rpc_server.responses["getBlocks"] = (
        200,
        {"error": {"code": -32602, "message": "Invalid params"}},
    )
    async with RpcClient(rpc_server.base_url, "placeholder") as client:
        with pytest.raises(RpcError) as info:
            await client.get_blocks(5, 1)
    assert info.value.code == -32602
    assert "Invalid params" in str(info.value)


@pytest.mark.asyncio
async def test_http_error_status(rpc_server):
    rpc_server.responses["getSlot"] = (500, "boom")
    async with RpcClient(rpc_server.base_url, "placeholder") as client:
        with pytest.raises(RpcError) as info:
            await client.get_slot()
    assert "500" in str(info.value)


@pytest.mark.asyncio
async def test_invalid_json_body(rpc_server):
    rpc_server.responses["getSlot"] = (200, "not json")
    async with RpcClient(rpc_server.base_url, "placeholder") as client:
        with pytest.raises(RpcError):
            await client.get_slot()


@pytest.mark.asyncio
async def test_unexpected_result_type(rpc_server):
    rpc_server.responses["getSlot"] = (200, {"result": "many"})
    rpc_server.responses["getBlocks"] = (200, {"result": [1, "two"]})
    async with RpcClient(rpc_server.base_url, "placeholder") as client:
        with pytest.raises(RpcError):
            await client.get_slot()
        with pytest.raises(RpcError):
            await client.get_blocks(1, 2)


@pytest.mark.asyncio
async def test_external_session_left_open(rpc_server):
    rpc_server.responses["getSlot"] = (200, {"result": 3})
    async with aiohttp.ClientSession() as session:
        client = RpcClient(rpc_server.base_url, "placeholder", session)
        assert await client.get_slot() == 3
        await client.close()
        assert session.closed is False