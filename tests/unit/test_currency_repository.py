"""
Unit Tests for CurrencyRepo
===========================

Test Coverage:
- Deduplication keeps first-occurrence order
- Page size defaulting and clamping (including the floor of 1)
- 1-based page windows and out-of-range pages
- Case-insensitive second-side currency filter
- Page count
"""

import pytest

from market_price.core.exceptions import InvalidPageStateError
from market_price.domain.models.market_data import CurrencyEnum
from market_price.domain.repositories.currency_repository import CurrencyRepo, DEFAULT_PAGE_SIZE


class TestDeduplication:

    def test_duplicates_removed_in_first_occurrence_order(self):
        repo = CurrencyRepo(["B", "A", "B", "C", "A"], 2)
        assert repo.currencies == ("B", "A", "C")
        assert len(repo) == 3

    def test_distinct_count_is_case_sensitive(self):
        repo = CurrencyRepo(["btc-usdt", "BTC-USDT", "btc-usdt"], 1)
        assert len(repo) == len({"btc-usdt", "BTC-USDT"})

    def test_empty_and_missing_input(self):
        assert len(CurrencyRepo()) == 0
        assert len(CurrencyRepo([], 5)) == 0


class TestPageSize:

    def test_requested_size_kept_when_smaller_than_count(self):
        repo = CurrencyRepo([f"I{i}" for i in range(20)], 5)
        assert repo.get_page_size() == 5

    def test_default_used_for_missing_or_non_positive_size(self):
        currencies = [f"I{i}" for i in range(30)]
        assert CurrencyRepo(currencies).get_page_size() == DEFAULT_PAGE_SIZE
        assert CurrencyRepo(currencies, 0).get_page_size() == DEFAULT_PAGE_SIZE
        assert CurrencyRepo(currencies, -3).get_page_size() == DEFAULT_PAGE_SIZE

    def test_size_above_count_clamped_to_count_minus_one(self):
        repo = CurrencyRepo(["A", "B", "C", "D", "E"], 10)
        assert repo.get_page_size() == 4

    def test_size_equal_to_count_clamped(self):
        repo = CurrencyRepo(["A", "B", "C"], 3)
        assert repo.get_page_size() == 2

    def test_default_clamped_for_small_directory(self):
        repo = CurrencyRepo(["A", "B", "C"])
        assert repo.get_page_size() == 2

    @pytest.mark.parametrize("currencies", [[], ["ONLY"]])
    def test_page_size_never_below_one(self, currencies):
        repo = CurrencyRepo(currencies, 10)
        assert repo.get_page_size() == 1

    def test_empty_directory_with_default_size(self):
        repo = CurrencyRepo([])
        assert repo.get_page_size() == 1
        assert repo.get_page_count() == 0

    def test_clamp_uses_deduplicated_count(self):
        repo = CurrencyRepo(["A", "A", "B", "B", "C"], 4)
        assert repo.get_page_size() == 2


class TestPagination:

    def test_five_items_requested_ten(self):
        repo = CurrencyRepo(["A", "B", "C", "D", "E"], 10)
        assert repo.get_page_count() == 2
        assert repo.get(1) == ["A", "B", "C", "D"]
        assert repo.get(2) == ["E"]

    def test_pages_reconstruct_full_list(self):
        currencies = [f"INST-{i}" for i in range(23)]
        repo = CurrencyRepo(currencies, 5)

        collected = []
        for page in range(1, repo.get_page_count() + 1):
            collected.extend(repo.get(page))

        assert collected == currencies

    def test_out_of_range_pages_are_empty(self):
        repo = CurrencyRepo(["A", "B", "C", "D", "E"], 2)
        assert repo.get(4) == []
        assert repo.get(100) == []
        assert repo.get(0) == []
        assert repo.get(-1) == []

    def test_empty_repo(self):
        repo = CurrencyRepo([], 10)
        assert repo.get(1) == []
        assert repo.get_page_count() == 0

    def test_single_item_repo(self):
        repo = CurrencyRepo(["ONLY"], 10)
        assert repo.get(1) == ["ONLY"]
        assert repo.get_page_count() == 1

    def test_returned_page_is_a_copy(self):
        repo = CurrencyRepo(["A", "B", "C"], 2)
        page = repo.get(1)
        page.append("Z")
        assert repo.get(1) == ["A", "B"]


class TestFilter:

    def test_filter_is_case_insensitive_substring(self):
        repo = CurrencyRepo(["BTC-USDT", "ETH-USDT", "BTC-USD"], 10)
        # page size clamps to 2, both USDT pairs fit on page 1
        assert repo.get(1, "usdt") == ["BTC-USDT", "ETH-USDT"]

    def test_filter_applies_page_window_to_filtered_list(self):
        repo = CurrencyRepo(["BTC-USDT", "ETH-BTC", "ETH-USDT", "XRP-EUR", "SOL-USDT", "DOGE-USDT"], 2)
        assert repo.get(1, "USDT") == ["BTC-USDT", "ETH-USDT"]
        assert repo.get(2, "USDT") == ["SOL-USDT", "DOGE-USDT"]
        assert repo.get(3, "USDT") == []

    def test_filter_accepts_currency_enum(self):
        repo = CurrencyRepo(["BTC-EUR", "ETH-USDT", "xrp-eur"], 5)
        assert repo.get(1, CurrencyEnum.EUR) == ["BTC-EUR", "xrp-eur"]

    def test_empty_filter_means_no_filter(self):
        repo = CurrencyRepo(["A", "B", "C"], 5)
        assert repo.get(1, "") == repo.get(1)
        assert repo.get(1, None) == repo.get(1)

    def test_filter_without_matches(self):
        repo = CurrencyRepo(["BTC-USDT", "ETH-USDT"], 5)
        assert repo.get(1, "TRY") == []


class TestPageCountGuard:

    def test_invalid_page_state_raised_for_unusable_page_size(self):
        repo = CurrencyRepo(["A", "B", "C"], 2)
        repo._page_size = 0

        with pytest.raises(InvalidPageStateError) as exc_info:
            repo.get_page_count()

        assert exc_info.value.total == 3
