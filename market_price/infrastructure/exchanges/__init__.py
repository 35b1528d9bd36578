"""
Exchange integrations and transport policies.
"""

from .retry_policy import CloseRetryPolicy

__all__ = ["CloseRetryPolicy"]
