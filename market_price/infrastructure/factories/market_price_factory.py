"""
Market Price Service Factory
============================
Builds a MarketPriceService and its collaborators from AppSettings.
"""

from typing import TYPE_CHECKING, Optional

from ...application.services.market_price_service import MarketPriceService
from ..exchanges.okx.rest_client import OkxInstrumentClient
from ..exchanges.okx.websocket_transport import WebsocketTransport
from ..exchanges.retry_policy import CloseRetryPolicy

if TYPE_CHECKING:
    from ...core.logger import StructuredLogger
    from ..config.settings import AppSettings


class MarketPriceServiceFactory:
    """Factory for creating market price services based on settings"""

    def __init__(self, settings: 'AppSettings', logger: 'StructuredLogger'):
        self.settings = settings
        self.logger = logger

    def create(self, page_size: Optional[int] = None, verbose: Optional[bool] = None) -> MarketPriceService:
        """
        Create a market price service wired with the OKX REST client, the
        websocket transport and the configured close retry policy.

        Args:
            page_size: Override of the configured page size
            verbose: Override of the configured verbosity
        """
        config = self.settings.market_price

        fetcher = OkxInstrumentClient(
            rest_url=config.rest_url,
            timeout_seconds=config.request_timeout_seconds,
            logger=self.logger
        )
        transport = WebsocketTransport(
            logger=self.logger,
            ping_interval=config.ping_interval_seconds,
            ping_timeout=config.ping_timeout_seconds
        )
        retry_policy = CloseRetryPolicy.from_settings(config)

        self.logger.debug("market_price_factory.creating_service", {
            "stream_url": config.stream_url,
            "rest_url": config.rest_url,
            "page_size": page_size or config.page_size,
            "close_retry_interval_seconds": retry_policy.interval_seconds,
            "close_retry_max_attempts": retry_policy.max_attempts
        })

        return MarketPriceService(
            verbose=config.verbose if verbose is None else verbose,
            stream_url=config.stream_url,
            rest_url=config.rest_url,
            page_size=page_size or config.page_size,
            fetcher=fetcher,
            transport=transport,
            retry_policy=retry_policy,
            logger=self.logger
        )
