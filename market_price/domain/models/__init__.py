"""
Domain Models - Core Business Entities
======================================
Pure data models representing market price concepts.
"""

from .market_data import (
    TICKERS_CHANNEL,
    MarketType,
    CurrencyEnum,
    SubscriptionOp,
    SubscriptionArg,
    SubscriptionMessage,
    TickerData,
    ActiveChannel,
)

__all__ = [
    'TICKERS_CHANNEL',
    'MarketType', 'CurrencyEnum',
    'SubscriptionOp', 'SubscriptionArg', 'SubscriptionMessage',
    'TickerData', 'ActiveChannel',
]
