"""
Subscription Manager
====================
Owns the single live ticker subscription.

State Machine:
    [IDLE] ──start()──► [ACTIVE]
       ▲                   │
       └──────stop()───────┘
                           │ send/close failed
                           ▼
                  sleep(retry interval), retry stop sequence
                  (forever by default, or until the policy's max_attempts,
                  then TransportCloseError with the channel still ACTIVE)
"""

import asyncio
import time
from enum import Enum
from typing import Awaitable, Callable, List, Optional

from ...core.exceptions import SubscriptionStateError, TransportCloseError
from ...core.logger import StructuredLogger, get_logger
from ...domain.interfaces.market_data import FrameHandler, IStreamSocket, IStreamTransport
from ...domain.models.market_data import ActiveChannel, SubscriptionMessage, SubscriptionOp
from ...infrastructure.exchanges.retry_policy import CloseRetryPolicy

SleepFn = Callable[[float], Awaitable[None]]


class SubscriptionState(Enum):
    IDLE = "idle"
    ACTIVE = "active"


class Subscription:
    """
    Handle returned by ``SubscriptionManager.start``.

    ``unsubscribe()`` tears the channel down only while it is still the
    manager's active channel; a handle of a replaced subscription is inert.
    """

    def __init__(self, manager: 'SubscriptionManager', channel: ActiveChannel):
        self._manager = manager
        self.channel = channel

    @property
    def instruments(self) -> List[str]:
        return self.channel.message.instruments

    @property
    def is_active(self) -> bool:
        return self._manager.active_channel is self.channel

    async def unsubscribe(self) -> bool:
        if not self.is_active:
            return True
        return await self._manager.stop()


class SubscriptionManager:
    """
    Opens and tears down the one active channel on a stream URL.

    Not safe for overlapping calls: callers serialize start/stop.
    """

    def __init__(
        self,
        transport: IStreamTransport,
        stream_url: str,
        retry_policy: Optional[CloseRetryPolicy] = None,
        logger: Optional[StructuredLogger] = None,
        sleep: Optional[SleepFn] = None,
        verbose: bool = True,
    ):
        self.transport = transport
        self.stream_url = stream_url
        self.retry_policy = retry_policy or CloseRetryPolicy()
        self.logger = logger or get_logger(__name__)
        self._sleep = sleep or asyncio.sleep
        self.verbose = verbose

        self._active_channel: Optional[ActiveChannel] = None
        self.close_failures = 0

    @property
    def state(self) -> SubscriptionState:
        return SubscriptionState.ACTIVE if self._active_channel is not None else SubscriptionState.IDLE

    @property
    def is_active(self) -> bool:
        return self._active_channel is not None

    @property
    def active_channel(self) -> Optional[ActiveChannel]:
        return self._active_channel

    def start(self, instruments: List[str], on_frame: FrameHandler) -> Subscription:
        """
        Open a channel subscribed to ``instruments`` and route its frames to ``on_frame``.

        Returns without waiting for the connection: the subscribe frame is
        sent by the socket's open handler.

        Raises:
            SubscriptionStateError: if a channel is already active
        """
        if self._active_channel is not None:
            raise SubscriptionStateError(
                "A subscription is already active; stop() it before starting a new one"
            )

        message = SubscriptionMessage.for_instruments(instruments)

        self.logger.debug("subscription_manager.opening", {
            "url": self.stream_url,
            "instruments": message.instruments
        })
        socket = self.transport.open(self.stream_url)
        socket.on_open = self._make_open_handler(socket, message)
        socket.on_message = on_frame

        channel = ActiveChannel(socket=socket, message=message, opened_at=time.time())
        self._active_channel = channel

        self._info("subscription_manager.started", {
            "url": self.stream_url,
            "instrument_count": len(message.args)
        })
        return Subscription(self, channel)

    def _info(self, event_type: str, data: dict) -> None:
        if self.verbose:
            self.logger.info(event_type, data)

    def _make_open_handler(self, socket: IStreamSocket, message: SubscriptionMessage):
        async def _send_subscribe() -> None:
            await socket.send(message.to_wire())
            self.logger.debug("subscription_manager.subscribe_sent", {
                "instruments": message.instruments
            })
        return _send_subscribe

    async def stop(self) -> bool:
        """
        Tear down the active channel; succeeds immediately when idle.

        The held message is flipped to ``unsubscribe`` and sent, then the
        socket is closed and its handler cleared. Failures are retried after
        the policy's interval until the sequence succeeds.

        Returns:
            True once the manager is idle

        Raises:
            TransportCloseError: when a bounded policy runs out of attempts
        """
        attempt = 0
        while self._active_channel is not None:
            channel = self._active_channel
            channel.message.op = SubscriptionOp.UNSUBSCRIBE
            attempt += 1

            try:
                self.logger.debug("subscription_manager.closing", {
                    "attempt": attempt,
                    "instruments": channel.message.instruments
                })
                await channel.socket.send(channel.message.to_wire())
                await channel.socket.close()
            except Exception as e:
                self.close_failures += 1
                self.logger.error("subscription_manager.close_failed", {
                    "attempt": attempt,
                    "error": str(e),
                    "error_type": type(e).__name__,
                    "will_retry": self.retry_policy.should_retry(attempt)
                })
                if not self.retry_policy.should_retry(attempt):
                    raise TransportCloseError(attempt, e) from e
                await self._sleep(self.retry_policy.delay_for(attempt))
                continue

            channel.socket.on_message = None
            self._active_channel = None
            self._info("subscription_manager.stopped", {
                "attempts": attempt,
                "instrument_count": len(channel.message.args)
            })

        return True
