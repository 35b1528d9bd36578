"""
Factory classes for dependency injection
"""

from .market_price_factory import MarketPriceServiceFactory

__all__ = ['MarketPriceServiceFactory']
