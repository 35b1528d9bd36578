"""
Market Price Service
====================
Streams live tickers for one page of a market's instruments at a time.

Each ``get()`` closes the previous subscription, resolves the requested page
from a per-market instrument cache (fetching the directory on first use) and
opens a new subscription whose frames are unwrapped and handed to the
caller's callback.
"""

import asyncio
from typing import Any, AsyncIterator, Dict, List, Optional, Union

from ...core.exceptions import InvalidCallbackError
from ...core.logger import StructuredLogger, get_logger
from ...domain.interfaces.market_data import IInstrumentFetcher, IStreamTransport
from ...domain.models.market_data import ActiveChannel, CurrencyEnum, MarketType
from ...domain.repositories.currency_repository import DEFAULT_PAGE_SIZE, CurrencyRepo
from ...infrastructure.config.settings import DEFAULT_OKX_REST_URL, DEFAULT_OKX_STREAM_URL
from ...infrastructure.exchanges.okx.rest_client import OkxInstrumentClient
from ...infrastructure.exchanges.okx.websocket_transport import WebsocketTransport
from ...infrastructure.exchanges.retry_policy import CloseRetryPolicy
from .frame_adapter import SubscriptionCallback, adapt_callback
from .subscription_manager import Subscription, SubscriptionManager

MarketTypeLike = Union[MarketType, str]
CurrencyFilter = Optional[Union[CurrencyEnum, str]]


class MarketPriceService:
    """
    Single-subscription ticker service over OKX public market data.

    Calls to ``get``/``dispose`` must be serialized by the caller; at most one
    subscription is active at any time.
    """

    def __init__(
        self,
        verbose: bool = True,
        stream_url: Optional[str] = None,
        rest_url: Optional[str] = None,
        page_size: Optional[int] = None,
        *,
        fetcher: Optional[IInstrumentFetcher] = None,
        transport: Optional[IStreamTransport] = None,
        retry_policy: Optional[CloseRetryPolicy] = None,
        logger: Optional[StructuredLogger] = None,
    ):
        """
        Args:
            verbose: Log lifecycle events at INFO; errors are logged either way
            stream_url: WebSocket URL override, empty keeps the OKX default
            rest_url: Instruments URL override, empty keeps the OKX default
            page_size: Instruments per page, falsy keeps the default of 10
            fetcher: Instrument directory, defaults to OkxInstrumentClient(rest_url)
            transport: Stream transport, defaults to WebsocketTransport
            retry_policy: Close retry policy, defaults to 300 ms forever
            logger: Structured logger
        """
        self.verbose = verbose
        self.stream_url = stream_url or DEFAULT_OKX_STREAM_URL
        self.rest_url = rest_url or DEFAULT_OKX_REST_URL
        self.page_size = page_size or DEFAULT_PAGE_SIZE
        self.logger = logger or get_logger(__name__)

        self.fetcher = fetcher or OkxInstrumentClient(self.rest_url, logger=self.logger)
        self.subscriptions = SubscriptionManager(
            transport=transport or WebsocketTransport(logger=self.logger),
            stream_url=self.stream_url,
            retry_policy=retry_policy,
            logger=self.logger,
            verbose=verbose,
        )

        self._currency_repos: Dict[MarketType, CurrencyRepo] = {}
        self._subscription: Optional[Subscription] = None

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    async def get(
        self,
        page: int,
        market_type: MarketTypeLike,
        callback: SubscriptionCallback,
        second_side_currency: CurrencyFilter = None,
    ) -> None:
        """
        Replace the current subscription with one for ``page`` of ``market_type``.

        Raises:
            InvalidCallbackError: if ``callback`` is missing or not callable
            CurrencyFetchError: if the instrument directory cannot be fetched
        """
        if callback is None or not callable(callback):
            self.logger.error("market_price_service.invalid_callback", {
                "callback_type": type(callback).__name__
            })
            raise InvalidCallbackError("invalid callback passed to start new subscription")

        market_type = MarketType.parse(market_type)

        self._info("market_price_service.closing_current_subscription")
        await self.subscriptions.stop()
        self._subscription = None

        self._info("market_price_service.resolving_instruments", {
            "market_type": market_type.value,
            "page": page,
            "second_side_currency": getattr(second_side_currency, "value", second_side_currency)
        })
        instruments = await self._find_currencies_by_market(market_type, page, second_side_currency)

        self._subscription = self.subscriptions.start(instruments, adapt_callback(callback, self.logger))
        self._info("market_price_service.subscription_started", {
            "market_type": market_type.value,
            "page": page,
            "instruments": self._subscription.instruments
        })

    async def stream(
        self,
        page: int,
        market_type: MarketTypeLike,
        second_side_currency: CurrencyFilter = None,
        max_queue_size: int = 100,
    ) -> AsyncIterator[Any]:
        """
        Async iterator over ticker updates for one page.

        Updates are buffered in a bounded queue; when it is full the oldest
        update is dropped. Leaving the iteration unsubscribes, unless a later
        ``get()`` already replaced this subscription.
        """
        queue: asyncio.Queue = asyncio.Queue(maxsize=max_queue_size)

        def _enqueue(ticker: Any) -> None:
            try:
                queue.put_nowait(ticker)
            except asyncio.QueueFull:
                try:
                    queue.get_nowait()
                    queue.put_nowait(ticker)
                except asyncio.QueueEmpty:
                    pass

        await self.get(page, market_type, _enqueue, second_side_currency)
        subscription = self._subscription

        try:
            while True:
                yield await queue.get()
        finally:
            if subscription is not None and subscription.is_active:
                await subscription.unsubscribe()
                self._subscription = None

    async def dispose(self) -> None:
        """Close the active subscription and release network resources."""
        self._info("market_price_service.disposing")
        await self.subscriptions.stop()
        self._subscription = None
        await self.fetcher.close()
        self._info("market_price_service.disposed")

    def get_page_size(self, market_type: MarketTypeLike) -> int:
        repo = self._cached_repo(market_type)
        return repo.get_page_size() if repo is not None else 0

    def get_page_count(self, market_type: MarketTypeLike) -> int:
        repo = self._cached_repo(market_type)
        return repo.get_page_count() if repo is not None else 0

    @property
    def active_channel(self) -> Optional[ActiveChannel]:
        return self.subscriptions.active_channel

    async def __aenter__(self) -> 'MarketPriceService':
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.dispose()

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _info(self, event_type: str, data: Dict[str, Any] = None) -> None:
        if self.verbose:
            self.logger.info(event_type, data)

    def _cached_repo(self, market_type: MarketTypeLike) -> Optional[CurrencyRepo]:
        try:
            return self._currency_repos.get(MarketType.parse(market_type))
        except ValueError:
            return None

    async def _find_currencies_by_market(
        self,
        market_type: MarketType,
        page: int,
        second_side_currency: CurrencyFilter,
    ) -> List[str]:
        repo = self._currency_repos.get(market_type)
        if repo is None:
            repo = await self._fetch_currencies_by_market(market_type)
            self._currency_repos[market_type] = repo
        return repo.get(page, second_side_currency)

    async def _fetch_currencies_by_market(self, market_type: MarketType) -> CurrencyRepo:
        self._info("market_price_service.fetching_currencies", {"market_type": market_type.value})
        try:
            currencies = await self.fetcher.fetch(market_type)
        except Exception as e:
            self.logger.error("market_price_service.fetch_failed", {
                "market_type": market_type.value,
                "error": str(e),
                "error_type": type(e).__name__
            })
            raise

        repo = CurrencyRepo(currencies, self.page_size)
        self._info("market_price_service.currencies_fetched", {
            "market_type": market_type.value,
            "count": len(repo),
            "page_size": repo.get_page_size(),
            "page_count": repo.get_page_count()
        })
        return repo
