"""
Core Exceptions - Market Price Service
======================================
Centralized exception definitions for the market price service.
"""

from typing import Optional


class MarketPriceError(Exception):
    """Base exception for market price service operations."""
    pass


class InvalidCallbackError(MarketPriceError, ValueError):
    """
    Raised when a subscription is requested without a usable callback.

    The callback is mandatory; there is no default no-op handler.
    """
    def __init__(self, message: str = None):
        self.message = message or "invalid callback"
        super().__init__(self.message)


class CurrencyFetchError(MarketPriceError):
    """
    Raised when the instrument list for a market type cannot be fetched.

    The per-market cache is never modified when this is raised, so the
    next request for the same market type fetches again.
    """
    def __init__(self, market_type: str, url: str, reason: str, status: Optional[int] = None):
        self.market_type = market_type
        self.url = url
        self.reason = reason
        self.status = status
        self.message = f"Cannot fetch {market_type} market currencies from {url}: {reason}"
        super().__init__(self.message)


class TransportError(MarketPriceError):
    """Base exception for streaming transport failures."""
    pass


class TransportNotReadyError(TransportError):
    """Raised when sending on a socket whose connection is not open yet."""
    def __init__(self, url: str):
        self.url = url
        self.message = f"Socket for {url} is still connecting"
        super().__init__(self.message)


class TransportCloseError(TransportError):
    """
    Raised when closing the active subscription failed and the close retry
    budget is exhausted.

    Only reachable with a bounded CloseRetryPolicy; the default policy
    retries forever.
    """
    def __init__(self, attempts: int, last_error: Exception):
        self.attempts = attempts
        self.last_error = last_error
        self.message = f"Cannot close subscription after {attempts} attempts: {last_error}"
        super().__init__(self.message)


class SubscriptionStateError(MarketPriceError):
    """Raised when starting a subscription while another one is still active."""
    pass


class InvalidPageStateError(MarketPriceError):
    """Raised when a page count is requested from a repository without a usable page size."""
    def __init__(self, page_size: int, total: int):
        self.page_size = page_size
        self.total = total
        self.message = f"Page size {page_size} cannot paginate {total} currencies"
        super().__init__(self.message)
