"""
Market Data Interfaces - Ports for market data collaborators
============================================================
Abstract interfaces for the instrument directory and the streaming transport
without coupling to a specific exchange or socket library.
"""

from abc import ABC, abstractmethod
from typing import Any, Awaitable, Callable, List, Optional, Union

from ..models.market_data import MarketType

FrameHandler = Callable[[Any], Any]
OpenHandler = Callable[[], Union[None, Awaitable[None]]]


class IInstrumentFetcher(ABC):
    """
    Interface for instrument directories.
    Returns the instrument ids traded on a market type.
    """

    @abstractmethod
    async def fetch(self, market_type: MarketType) -> List[str]:
        """Fetch instrument ids, raising CurrencyFetchError on failure"""
        pass

    async def close(self) -> None:
        """Release network resources held by the fetcher"""
        pass


class IStreamSocket(ABC):
    """
    Interface for one duplex stream connection.

    ``on_open`` is invoked once the connection is ready; ``on_message`` receives
    every inbound text frame and may be replaced or cleared at any time.
    """

    on_open: Optional[OpenHandler] = None
    on_message: Optional[FrameHandler] = None

    @abstractmethod
    async def send(self, text: str) -> None:
        """Send a text frame"""
        pass

    @abstractmethod
    async def close(self) -> None:
        """Close the connection"""
        pass


class IStreamTransport(ABC):
    """Interface for opening stream connections"""

    @abstractmethod
    def open(self, url: str) -> IStreamSocket:
        """
        Start connecting to ``url`` and return the socket immediately.
        The connection completes in the background, after which the
        socket calls ``on_open``.
        """
        pass
