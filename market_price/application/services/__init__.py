"""
Application Services
"""

from .frame_adapter import FrameAdapter, MalformedFrame, ParsedFrame, adapt_callback, parse_frame
from .subscription_manager import Subscription, SubscriptionManager, SubscriptionState
from .market_price_service import MarketPriceService

__all__ = [
    'FrameAdapter', 'MalformedFrame', 'ParsedFrame', 'adapt_callback', 'parse_frame',
    'Subscription', 'SubscriptionManager', 'SubscriptionState',
    'MarketPriceService',
]
