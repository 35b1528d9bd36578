"""
Unit Tests for the websockets-based stream transport
====================================================

Runs a local ``websockets`` server on an ephemeral port so the real socket
lifecycle (connect, on_open, receive loop, close) is exercised without
reaching OKX.
"""

import asyncio
import json
import socket as stdlib_socket

import pytest
import pytest_asyncio
import websockets

from market_price.core.exceptions import TransportNotReadyError
from market_price.infrastructure.exchanges.okx.websocket_transport import (
    WebsocketStreamSocket,
    WebsocketTransport,
)


async def wait_until(predicate, timeout=2.0):
    deadline = asyncio.get_running_loop().time() + timeout
    while not predicate():
        if asyncio.get_running_loop().time() > deadline:
            raise AssertionError("condition not reached before timeout")
        await asyncio.sleep(0.01)


def unused_port():
    with stdlib_socket.socket(stdlib_socket.AF_INET, stdlib_socket.SOCK_STREAM) as s:
        s.bind(("127.0.0.1", 0))
        return s.getsockname()[1]


@pytest_asyncio.fixture
async def ticker_server():
    """Echo-style server: answers every subscribe frame with one ticker per instrument."""
    received = []

    async def handler(connection):
        async for message in connection:
            frame = json.loads(message)
            received.append(frame)
            if frame.get("op") == "subscribe":
                for arg in frame["args"]:
                    await connection.send(json.dumps({
                        "arg": arg,
                        "data": [{"instId": arg["instId"], "last": "100.0"}]
                    }))

    async with websockets.serve(handler, "127.0.0.1", 0) as server:
        port = server.sockets[0].getsockname()[1]
        yield f"ws://127.0.0.1:{port}", received


class TestWebsocketStreamSocket:

    @pytest.mark.asyncio
    async def test_send_before_connect_raises_not_ready(self, logger):
        socket = WebsocketStreamSocket("ws://127.0.0.1:1", logger=logger)

        assert socket.is_connecting
        with pytest.raises(TransportNotReadyError):
            await socket.send("{}")

    @pytest.mark.asyncio
    async def test_open_handler_and_receive_loop(self, logger, ticker_server):
        url, received = ticker_server
        messages = []
        transport = WebsocketTransport(logger=logger)

        socket = transport.open(url)
        subscribe = json.dumps({"op": "subscribe", "args": [{"channel": "tickers", "instId": "BTC-USDT"}]})

        async def on_open():
            await socket.send(subscribe)

        socket.on_open = on_open
        socket.on_message = messages.append

        await wait_until(lambda: len(messages) == 1)

        assert socket.is_open
        assert received[0]["op"] == "subscribe"
        assert json.loads(messages[0])["data"][0]["instId"] == "BTC-USDT"
        assert socket.messages_received == 1

        await socket.close()
        assert not socket.is_open

    @pytest.mark.asyncio
    async def test_handler_errors_do_not_end_receive_loop(self, logger, ticker_server):
        url, _ = ticker_server
        calls = []
        socket = WebsocketTransport(logger=logger).open(url)

        def on_message(raw):
            calls.append(raw)
            if len(calls) == 1:
                raise RuntimeError("handler bug")

        async def on_open():
            await socket.send(json.dumps({"op": "subscribe", "args": [
                {"channel": "tickers", "instId": "BTC-USDT"},
                {"channel": "tickers", "instId": "ETH-USDT"},
            ]}))

        socket.on_open = on_open
        socket.on_message = on_message

        await wait_until(lambda: len(calls) == 2)

        assert logger.error.call_args[0][0] == "okx_websocket.handler_error"
        await socket.close()

    @pytest.mark.asyncio
    async def test_close_is_idempotent_and_later_send_ignored(self, logger, ticker_server):
        url, received = ticker_server
        socket = WebsocketTransport(logger=logger).open(url)
        await wait_until(lambda: socket.is_open)

        await socket.close()
        await socket.close()
        await socket.send(json.dumps({"op": "unsubscribe", "args": []}))

        assert not socket.is_open
        assert received == []

    @pytest.mark.asyncio
    async def test_connect_failure_logged_and_socket_ended(self, logger):
        socket = WebsocketTransport(logger=logger).open(f"ws://127.0.0.1:{unused_port()}")

        await wait_until(lambda: not socket.is_connecting)

        assert not socket.is_open
        assert logger.error.call_args[0][0] == "okx_websocket.connect_failed"
        # sending on an ended socket is a no-op
        await socket.send("{}")
        await socket.close()

    @pytest.mark.asyncio
    async def test_close_while_connecting_cancels_task(self, logger):
        socket = WebsocketStreamSocket("ws://127.0.0.1:1", logger=logger)
        socket.start()

        await socket.close()

        assert socket._task.done()
        assert not socket.is_open
