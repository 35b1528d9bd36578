"""
Currency Repository
===================
Deduplicated, paginated view over one market type's instrument list.
"""

import math
from typing import Iterable, List, Optional, Tuple, Union

from ...core.exceptions import InvalidPageStateError
from ..models.market_data import CurrencyEnum

DEFAULT_PAGE_SIZE = 10
MIN_PAGE_SIZE = 1


class CurrencyRepo:
    """
    Immutable, insertion-ordered instrument directory with 1-based paging.

    Page size rules:
    - requested size is used when positive, otherwise DEFAULT_PAGE_SIZE
    - when the size reaches the number of instruments it is reduced to
      ``count - 1`` so a page never holds the whole directory
    - the result never drops below MIN_PAGE_SIZE
    """

    def __init__(self, currencies: Optional[Iterable[str]] = None, page_size: Optional[int] = None):
        # dict keeps first-occurrence order while dropping duplicates
        self._currencies: Tuple[str, ...] = tuple(dict.fromkeys(currencies or ()))

        effective = page_size if page_size and page_size > 0 else DEFAULT_PAGE_SIZE
        total = len(self._currencies)
        if effective >= total:
            effective = total - 1
        self._page_size = max(effective, MIN_PAGE_SIZE)

    def get(self, page: int, second_side_currency: Optional[Union[CurrencyEnum, str]] = None) -> List[str]:
        """
        Return the instruments on ``page`` (1-based).

        With ``second_side_currency`` only instruments containing it
        (case-insensitive) are paged. Pages outside the range are empty.
        """
        if page < 1:
            return []

        currencies = self._currencies
        needle = getattr(second_side_currency, "value", second_side_currency)
        if needle:
            needle = needle.upper()
            currencies = tuple(c for c in currencies if needle in c.upper())

        start = (page - 1) * self._page_size
        end = page * self._page_size
        return list(currencies[start:end])

    def get_page_size(self) -> int:
        return self._page_size

    def get_page_count(self) -> int:
        total = len(self._currencies)
        if total == 0:
            return 0
        if self._page_size <= 0:
            raise InvalidPageStateError(self._page_size, total)
        return math.ceil(total / self._page_size)

    @property
    def currencies(self) -> Tuple[str, ...]:
        return self._currencies

    def __len__(self) -> int:
        return len(self._currencies)

    def __repr__(self) -> str:
        return f"CurrencyRepo(currencies={len(self._currencies)}, page_size={self._page_size})"
