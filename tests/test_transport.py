from __future__ import annotations

import asyncio
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

import aiohttp
import pytest
from aiohttp import web
from aiohttp import test_utils

from pyfallmon._transport import HttpTransport
from pyfallmon.config import FallMonConfig
from pyfallmon.exceptions import FallMonProtocolError, FallMonTransportError
from pyfallmon.pollers import SensorFeedPoller
from pyfallmon.state.events import PollPhase
from pyfallmon.state.store import MonitorState


async def _stats(_request: web.Request) -> web.Response:
    return web.json_response({"status_0_count": 3, "total_devices": 10})


async def _echo(request: web.Request) -> web.Response:
    body = await request.json()
    return web.json_response({"content_type": request.content_type, "received": body})


async def _broken(_request: web.Request) -> web.Response:
    return web.Response(status=500, text="internal error")


async def _not_json(_request: web.Request) -> web.Response:
    return web.Response(status=200, text="<html>maintenance</html>")


async def _bad_encoding(_request: web.Request) -> web.Response:
    return web.Response(status=200, body=b'{"data": [\xff\xfe]}', content_type="application/json", charset="utf-8")


async def _slow(_request: web.Request) -> web.Response:
    await asyncio.sleep(0.5)
    return web.json_response({})


@asynccontextmanager
async def _transport(request_timeout: float = 1.0) -> AsyncIterator[HttpTransport]:
    app = web.Application()
    app.router.add_get("/get_device_stats", _stats)
    app.router.add_post("/fall-detection", _echo)
    app.router.add_get("/broken", _broken)
    app.router.add_get("/not_json", _not_json)
    app.router.add_get("/slow", _slow)
    app.router.add_get("/show_data", _bad_encoding)
    server = test_utils.TestServer(app)
    await server.start_server()
    config = FallMonConfig(
        base_url=str(server.make_url("/")),
        poll_interval=1.0,
        request_timeout=request_timeout,
    )
    try:
        async with aiohttp.ClientSession() as session:
            yield HttpTransport(config, session)
    finally:
        await server.close()


@pytest.mark.asyncio
async def test_get_json_decodes_body() -> None:
    async with _transport() as transport:
        assert await transport.get_json("/get_device_stats") == {"status_0_count": 3, "total_devices": 10}


@pytest.mark.asyncio
async def test_post_json_sends_json_content_type() -> None:
    async with _transport() as transport:
        result = await transport.post_json("/fall-detection", {"device_id": "test7", "api_key": "k"})

    assert result == {
        "content_type": "application/json",
        "received": {"device_id": "test7", "api_key": "k"},
    }


@pytest.mark.asyncio
async def test_non_success_status_is_protocol_error() -> None:
    async with _transport() as transport:
        with pytest.raises(FallMonProtocolError) as exc_info:
            await transport.get_json("/broken")

    assert exc_info.value.status_code == 500
    assert exc_info.value.endpoint == "/broken"


@pytest.mark.asyncio
async def test_invalid_json_is_protocol_error() -> None:
    async with _transport() as transport:
        with pytest.raises(FallMonProtocolError, match="Invalid JSON"):
            await transport.get_json("/not_json")


@pytest.mark.asyncio
async def test_timeout_is_transport_error() -> None:
    async with _transport(request_timeout=0.05) as transport:
        with pytest.raises(FallMonTransportError, match="/slow"):
            await transport.get_json("/slow")


@pytest.mark.asyncio
async def test_connection_refused_is_transport_error() -> None:
    server = test_utils.TestServer(web.Application())
    await server.start_server()
    base_url = str(server.make_url("/"))
    await server.close()

    config = FallMonConfig(base_url=base_url)
    async with aiohttp.ClientSession() as session:
        transport = HttpTransport(config, session)
        with pytest.raises(FallMonTransportError):
            await transport.get_json("/get_device_stats")


@pytest.mark.asyncio
async def test_undecodable_body_is_protocol_error() -> None:
    async with _transport() as transport:
        with pytest.raises(FallMonProtocolError, match="Invalid JSON") as exc_info:
            await transport.get_json("/show_data")

    assert exc_info.value.status_code == 200
    assert isinstance(exc_info.value.__cause__, UnicodeDecodeError)


@pytest.mark.asyncio
async def test_undecodable_feed_skips_poll_cycle() -> None:
    state = MonitorState()
    async with _transport() as transport:
        poller = SensorFeedPoller(transport, state)
        outcome = await poller.poll_once()

    assert outcome.phase == PollPhase.SKIPPING
    assert state.failure_count(poller.name) == 1
    assert len(state.ledger) == 0
