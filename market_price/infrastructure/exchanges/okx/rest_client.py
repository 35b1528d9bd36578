"""
OKX Instruments REST Client
===========================
Fetches the instrument directory of a market type from the OKX public API.
"""

import asyncio
from typing import Any, List, Optional

import aiohttp

from ....core.exceptions import CurrencyFetchError
from ....core.logger import StructuredLogger, get_logger
from ....domain.interfaces.market_data import IInstrumentFetcher
from ....domain.models.market_data import MarketType
from ...config.settings import DEFAULT_OKX_REST_URL


class OkxInstrumentClient(IInstrumentFetcher):
    """
    GET ``<rest_url><MARKET_TYPE>`` and return the ``instId`` of every entry.

    The HTTP session is created lazily and reused until ``close()``.
    """

    def __init__(
        self,
        rest_url: str = DEFAULT_OKX_REST_URL,
        timeout_seconds: float = 10.0,
        logger: Optional[StructuredLogger] = None,
        session: Optional[aiohttp.ClientSession] = None,
    ):
        self.rest_url = rest_url
        self.timeout_seconds = timeout_seconds
        self.logger = logger or get_logger(__name__)
        self.session = session
        self._owns_session = session is None

        self.total_requests = 0
        self.failed_requests = 0

    async def start(self) -> None:
        """Initialize HTTP session"""
        if not self.session:
            timeout = aiohttp.ClientTimeout(total=self.timeout_seconds, connect=min(5.0, self.timeout_seconds))
            self.session = aiohttp.ClientSession(
                timeout=timeout,
                headers={"User-Agent": "MarketPriceService/1.0"}
            )
            self._owns_session = True
            self.logger.debug("okx_rest_client.started")

    async def close(self) -> None:
        """Close HTTP session"""
        if self.session and self._owns_session:
            await self.session.close()
            self.logger.debug("okx_rest_client.stopped")
        self.session = None

    def build_url(self, market_type: MarketType) -> str:
        return f"{self.rest_url}{MarketType.parse(market_type).value.upper()}"

    async def fetch(self, market_type: MarketType) -> List[str]:
        """
        Fetch instrument ids for ``market_type``.

        Raises:
            CurrencyFetchError: on transport errors, non-200 status, OKX error
                envelopes or bodies without a ``data`` list
        """
        market_type = MarketType.parse(market_type)
        url = self.build_url(market_type)

        if not self.session:
            await self.start()

        self.total_requests += 1
        try:
            async with self.session.get(url) as response:
                if response.status != 200:
                    raise CurrencyFetchError(market_type.value, url, f"HTTP {response.status}",
                                             status=response.status)
                body = await response.json(content_type=None)
        except CurrencyFetchError:
            self.failed_requests += 1
            raise
        except (aiohttp.ClientError, asyncio.TimeoutError, ValueError) as e:
            self.failed_requests += 1
            raise CurrencyFetchError(market_type.value, url, f"{type(e).__name__}: {e}") from e

        try:
            instruments = self._extract_instruments(body, market_type, url)
        except CurrencyFetchError:
            self.failed_requests += 1
            raise
        except (TypeError, AttributeError) as e:
            self.failed_requests += 1
            raise CurrencyFetchError(market_type.value, url, f"unexpected response body: {e}") from e

        self.logger.debug("okx_rest_client.instruments_fetched", {
            "market_type": market_type.value,
            "count": len(instruments)
        })
        return instruments

    @staticmethod
    def _extract_instruments(body: Any, market_type: MarketType, url: str) -> List[str]:
        code = body.get("code")
        if code is not None and str(code) != "0":
            raise CurrencyFetchError(market_type.value, url, f"OKX error {code}: {body.get('msg', '')}")

        data = body.get("data")
        if not isinstance(data, list):
            raise TypeError("'data' is not a list")

        return [item["instId"] for item in data if isinstance(item, dict) and item.get("instId")]
