"""
Shared pytest fixtures for unit tests
=====================================

Provides a mock StructuredLogger plus in-memory doubles for the instrument
fetcher and the stream transport, so the service can be driven without
network access.
"""

import inspect
from typing import Any, Dict, List, Optional

import pytest
from unittest.mock import MagicMock

from market_price.core.logger import StructuredLogger
from market_price.domain.interfaces.market_data import IInstrumentFetcher, IStreamSocket, IStreamTransport
from market_price.domain.models.market_data import MarketType


class FakeSocket(IStreamSocket):
    """Stream socket double recording frames; failures are scripted per call."""

    def __init__(self, url: str):
        self.url = url
        self.on_open = None
        self.on_message = None
        self.sent: List[str] = []
        self.closed = False
        self.send_failures = 0
        self.close_failures = 0
        self.close_calls = 0

    async def send(self, text: str) -> None:
        if self.send_failures:
            self.send_failures -= 1
            raise ConnectionError("send failed")
        self.sent.append(text)

    async def close(self) -> None:
        self.close_calls += 1
        if self.close_failures:
            self.close_failures -= 1
            raise ConnectionError("close failed")
        self.closed = True

    async def simulate_open(self) -> None:
        result = self.on_open()
        if inspect.isawaitable(result):
            await result

    async def deliver(self, raw: Any) -> None:
        if self.on_message is None:
            return
        result = self.on_message(raw)
        if inspect.isawaitable(result):
            await result


class FakeTransport(IStreamTransport):
    def __init__(self):
        self.sockets: List[FakeSocket] = []

    def open(self, url: str) -> FakeSocket:
        socket = FakeSocket(url)
        self.sockets.append(socket)
        return socket

    @property
    def open_sockets(self) -> List[FakeSocket]:
        return [s for s in self.sockets if not s.closed]


class FakeFetcher(IInstrumentFetcher):
    def __init__(self, instruments: Optional[Dict[MarketType, List[str]]] = None, error: Exception = None):
        self.instruments = instruments or {}
        self.error = error
        self.calls: List[MarketType] = []
        self.closed = False

    async def fetch(self, market_type: MarketType) -> List[str]:
        self.calls.append(market_type)
        if self.error is not None:
            raise self.error
        return list(self.instruments.get(market_type, []))

    async def close(self) -> None:
        self.closed = True


@pytest.fixture
def logger():
    """Mock StructuredLogger for capturing log calls"""
    mock_logger = MagicMock(spec=StructuredLogger)
    mock_logger.info = MagicMock()
    mock_logger.warning = MagicMock()
    mock_logger.error = MagicMock()
    mock_logger.debug = MagicMock()
    return mock_logger


@pytest.fixture
def transport():
    return FakeTransport()


@pytest.fixture
def spot_instruments():
    return ["BTC-USDT", "ETH-USDT", "BTC-USD", "SOL-USDT", "ETH-BTC", "XRP-EUR", "DOGE-USDT"]


@pytest.fixture
def fetcher(spot_instruments):
    return FakeFetcher({
        MarketType.SPOT: spot_instruments,
        MarketType.SWAP: ["BTC-USDT-SWAP", "ETH-USDT-SWAP", "SOL-USDT-SWAP"],
    })
