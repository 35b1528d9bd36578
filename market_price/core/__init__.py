"""
Core module for the market price service: structured logging and exceptions.
"""

from .exceptions import (
    MarketPriceError,
    InvalidCallbackError,
    CurrencyFetchError,
    TransportError,
    TransportNotReadyError,
    TransportCloseError,
    SubscriptionStateError,
    InvalidPageStateError,
)
from .logger import StructuredLogger, get_logger

__all__ = [
    'MarketPriceError',
    'InvalidCallbackError',
    'CurrencyFetchError',
    'TransportError',
    'TransportNotReadyError',
    'TransportCloseError',
    'SubscriptionStateError',
    'InvalidPageStateError',
    'StructuredLogger',
    'get_logger',
]
