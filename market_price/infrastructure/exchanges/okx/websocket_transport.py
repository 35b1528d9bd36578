"""
OKX WebSocket Transport
=======================
Duplex stream transport built on the ``websockets`` library.

``open()`` returns a socket immediately; connecting, the open callback and the
receive loop all run in one background asyncio task per socket.
"""

import asyncio
import inspect
from typing import Any, Optional

import websockets
from websockets.exceptions import ConnectionClosed, WebSocketException

from ....core.exceptions import TransportNotReadyError
from ....core.logger import StructuredLogger, get_logger
from ....domain.interfaces.market_data import FrameHandler, IStreamSocket, IStreamTransport, OpenHandler


class WebsocketStreamSocket(IStreamSocket):
    """
    One websocket connection with settable ``on_open``/``on_message`` handlers.

    Lifecycle: CONNECTING -> OPEN -> ENDED. Sending while CONNECTING raises
    TransportNotReadyError; sending after the connection ended is a no-op.
    """

    def __init__(
        self,
        url: str,
        logger: StructuredLogger,
        ping_interval: Optional[float] = 20.0,
        ping_timeout: Optional[float] = 30.0,
        close_timeout: Optional[float] = 5.0,
    ):
        self.url = url
        self.logger = logger
        self.ping_interval = ping_interval
        self.ping_timeout = ping_timeout
        self.close_timeout = close_timeout

        self.on_open: Optional[OpenHandler] = None
        self.on_message: Optional[FrameHandler] = None

        self._websocket: Optional[Any] = None
        self._task: Optional[asyncio.Task] = None
        self._ended = False
        self._closed = False
        self.messages_received = 0

    @property
    def is_open(self) -> bool:
        return self._websocket is not None and not self._ended and not self._closed

    @property
    def is_connecting(self) -> bool:
        return self._websocket is None and not self._ended

    def start(self) -> None:
        """Schedule the connection task on the running loop."""
        if self._task is None:
            self._task = asyncio.get_running_loop().create_task(self._run())

    async def _run(self) -> None:
        try:
            self._websocket = await websockets.connect(
                self.url,
                ping_interval=self.ping_interval,
                ping_timeout=self.ping_timeout,
                close_timeout=self.close_timeout
            )
        except asyncio.CancelledError:
            self._ended = True
            return
        except (OSError, WebSocketException, asyncio.TimeoutError) as e:
            self._ended = True
            self.logger.error("okx_websocket.connect_failed", {
                "url": self.url,
                "error": str(e),
                "error_type": type(e).__name__
            })
            return

        self.logger.debug("okx_websocket.connected", {"url": self.url})

        try:
            await self._invoke(self.on_open, "on_open")
            async for message in self._websocket:
                self.messages_received += 1
                await self._invoke(self.on_message, "on_message", message)

        except ConnectionClosed as e:
            self.logger.warning("okx_websocket.connection_closed", {
                "url": self.url,
                "code": getattr(e, 'code', None),
                "reason": getattr(e, 'reason', str(e))
            })
        except asyncio.CancelledError:
            self.logger.debug("okx_websocket.receive_loop_cancelled", {"url": self.url})
        finally:
            self._ended = True

    async def _invoke(self, handler: Optional[Any], name: str, *args: Any) -> None:
        """Run a sync or async handler; handler failures never end the receive loop."""
        if handler is None:
            return
        try:
            result = handler(*args)
            if inspect.isawaitable(result):
                await result
        except (ConnectionClosed, asyncio.CancelledError):
            raise
        except Exception as e:
            self.logger.error("okx_websocket.handler_error", {
                "url": self.url,
                "handler": name,
                "error": str(e),
                "error_type": type(e).__name__
            })

    async def send(self, text: str) -> None:
        if self._ended or self._closed:
            self.logger.debug("okx_websocket.send_after_close_ignored", {"url": self.url})
            return
        if self._websocket is None:
            raise TransportNotReadyError(self.url)
        await self._websocket.send(text)

    async def close(self) -> None:
        if self._closed:
            return

        if self._websocket is not None and not self._ended:
            await self._websocket.close()
        self._closed = True

        task = self._task
        if task is not None and not task.done() and task is not asyncio.current_task():
            task.cancel()
            try:
                await task
            except asyncio.CancelledError:
                pass


class WebsocketTransport(IStreamTransport):
    """Opens WebsocketStreamSocket connections sharing one configuration."""

    def __init__(
        self,
        logger: Optional[StructuredLogger] = None,
        ping_interval: Optional[float] = 20.0,
        ping_timeout: Optional[float] = 30.0,
        close_timeout: Optional[float] = 5.0,
    ):
        self.logger = logger or get_logger(__name__)
        self.ping_interval = ping_interval
        self.ping_timeout = ping_timeout
        self.close_timeout = close_timeout

    def open(self, url: str) -> WebsocketStreamSocket:
        socket = WebsocketStreamSocket(
            url,
            logger=self.logger,
            ping_interval=self.ping_interval,
            ping_timeout=self.ping_timeout,
            close_timeout=self.close_timeout,
        )
        socket.start()
        return socket
