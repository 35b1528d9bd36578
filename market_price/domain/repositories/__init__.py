"""
Domain Repositories
"""

from .currency_repository import CurrencyRepo, DEFAULT_PAGE_SIZE

__all__ = ['CurrencyRepo', 'DEFAULT_PAGE_SIZE']
