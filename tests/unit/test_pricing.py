"""Tests for pricing helpers."""

import pytest

from divtrack.core.models import CardPrice, CardPriceEntry
from divtrack.core.pricing import (
    build_price_entry,
    get_card_value,
    get_net_profit,
    get_total_deck_cost,
    prefer_cached,
    sum_visible_values,
)


class TestPreferCached:
    """Tests for per-field cache precedence."""

    def test_cached_value_wins(self):
        assert prefer_cached(10.0, 99.0) == 10.0

    def test_zero_is_a_real_cached_value(self):
        assert prefer_cached(0.0, 99.0) == 0.0
        assert prefer_cached(0, 5) == 0

    def test_none_falls_back_to_live(self):
        assert prefer_cached(None, 99.0) == 99.0


class TestDeckCost:
    """Tests for deck cost and net profit."""

    def test_total_deck_cost(self):
        assert get_total_deck_cost(3.0, 50) == 150.0

    def test_no_snapshot_costs_nothing(self):
        assert get_total_deck_cost(None, 50) == 0.0

    def test_net_profit(self):
        assert get_net_profit(10000.0, 150.0) == 9850.0

    def test_net_profit_can_be_negative(self):
        assert get_net_profit(0.0, 150.0) == -150.0

    def test_card_value(self):
        assert get_card_value(5000.0, 2) == 10000.0


class TestBuildPriceEntry:
    """Tests for per-card price entries."""

    def test_priced_card(self):
        entry = build_price_entry(CardPrice(chaos_value=5000.0, divine_value=33.3), 2, False)
        assert entry.chaos_value == 5000.0
        assert entry.divine_value == 33.3
        assert entry.total_value == 10000.0
        assert entry.hide_price is False

    def test_unpriced_card_is_all_zeros(self):
        entry = build_price_entry(None, 7, True)
        assert entry == CardPriceEntry(
            chaos_value=0.0, divine_value=0.0, total_value=0.0, hide_price=True
        )

    def test_hidden_card_keeps_its_price(self):
        entry = build_price_entry(CardPrice(chaos_value=2.0, divine_value=0.01), 3, True)
        assert entry.total_value == 6.0
        assert entry.hide_price is True


class TestSumVisibleValues:
    """Tests for channel totals."""

    def test_skips_hidden_and_missing_entries(self):
        entries = [
            CardPriceEntry(chaos_value=1.0, divine_value=0.0, total_value=10.0, hide_price=False),
            CardPriceEntry(chaos_value=1.0, divine_value=0.0, total_value=99.0, hide_price=True),
            None,
            CardPriceEntry(chaos_value=1.0, divine_value=0.0, total_value=5.5, hide_price=False),
        ]
        assert sum_visible_values(entries) == pytest.approx(15.5)

    def test_empty(self):
        assert sum_visible_values([]) == 0.0
