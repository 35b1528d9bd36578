"""
Market Price Service
====================
One live OKX ticker subscription at a time over a paginated, cached
instrument directory.
"""

from .application.services.market_price_service import MarketPriceService
from .domain.models.market_data import CurrencyEnum, MarketType, TickerData
from .domain.repositories.currency_repository import CurrencyRepo

__version__ = "1.0.0"

__all__ = [
    "MarketPriceService",
    "CurrencyRepo",
    "CurrencyEnum",
    "MarketType",
    "TickerData",
]
