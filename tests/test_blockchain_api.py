# -----------------------------------------------------------------------------
# Project: ForkForge v0.1
# File:    test_blockchain_api.py
# (c)      2025-2026 Wolfgang Lohmann
# License: MIT
# -----------------------------------------------------------------------------

import asyncio
import socket

import pytest
import pytest_asyncio
from aiohttp import web
from aiohttp.test_utils import TestServer as AiohttpTestServer

from forkforge.blockchain_api import fetch_rest_headers, rest_headers_url
from forkforge.errors import DecodeError, RESTError, TransportError

from chain_helpers import make_chain


class RestStub:
    """Answers /rest/headers requests with whatever the test configures."""

    def __init__(self):
        self.status = 200
        self.body = b""
        self.delay = 0.0
        self.requests = []

    async def handler(self, request):
        self.requests.append((int(request.match_info["count"]), request.match_info["start"]))
        if self.delay:
            await asyncio.sleep(self.delay)
        return web.Response(status=self.status, body=self.body)


@pytest_asyncio.fixture
async def rest_node():
    stub = RestStub()
    app = web.Application()
    app.router.add_get("/rest/headers/{count:\\d+}/{start:[0-9a-f]+}.bin", stub.handler)
    async with AiohttpTestServer(app) as server:
        stub.rpc_url = f"{server.host}:{server.port}"
        yield stub


def test_rest_url():
    assert rest_headers_url("127.0.0.1:8332", 2000, "ab" * 32) == \
        f"http://127.0.0.1:8332/rest/headers/2000/{'ab' * 32}.bin"


@pytest.mark.asyncio
async def test_two_headers_in_server_order(rest_node):
    chain = make_chain(2, start_height=500)
    rest_node.body = b"".join(info.header.serialize() for info in chain)

    headers = await fetch_rest_headers(rest_node.rpc_url, 2000, chain[0].block_hash)

    assert [h.block_hash for h in headers] == [info.block_hash for info in chain]
    assert rest_node.requests == [(2000, chain[0].block_hash)]


@pytest.mark.asyncio
async def test_empty_body_gives_no_headers(rest_node):
    assert await fetch_rest_headers(rest_node.rpc_url, 10, "ab" * 32) == []


@pytest.mark.asyncio
async def test_non_200_is_a_rest_error(rest_node):
    rest_node.status = 404
    rest_node.body = b"Block not found"

    with pytest.raises(RESTError) as excinfo:
        await fetch_rest_headers(rest_node.rpc_url, 10, "ab" * 32)

    assert excinfo.value.status == 404
    assert excinfo.value.reason == "Not Found"
    assert excinfo.value.body == "Block not found"


@pytest.mark.asyncio
async def test_truncated_payload_discards_batch(rest_node):
    chain = make_chain(2)
    rest_node.body = b"".join(info.header.serialize() for info in chain) + b"\x00" * 7

    with pytest.raises(DecodeError):
        await fetch_rest_headers(rest_node.rpc_url, 10, chain[0].block_hash)


@pytest.mark.asyncio
async def test_timeout_is_a_transport_error(rest_node):
    rest_node.delay = 1.0

    with pytest.raises(TransportError):
        await fetch_rest_headers(rest_node.rpc_url, 10, "ab" * 32, timeout=0.1)


@pytest.mark.asyncio
async def test_connection_refused_is_a_transport_error():
    with socket.socket() as s:
        s.bind(("127.0.0.1", 0))
        port = s.getsockname()[1]

    with pytest.raises(TransportError) as excinfo:
        await fetch_rest_headers(f"127.0.0.1:{port}", 10, "ab" * 32)
    assert not isinstance(excinfo.value, RESTError)
