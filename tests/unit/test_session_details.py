"""Tests for session detail assembly."""

from datetime import datetime

import pytest

from divtrack.core.models import (
    CardPrice,
    ChannelPrices,
    DivinationCardInfo,
    PriceSnapshot,
    SessionCard,
    SessionDetails,
)
from divtrack.core.session_details import assemble_session_detail, build_card_entry


@pytest.fixture
def session():
    return SessionDetails(
        id="s1",
        game="poe1",
        league_id="league-settlers",
        league="Settlers",
        snapshot_id="snap-1",
        started_at=datetime(2026, 3, 1, 10, 0, 0),
        ended_at=datetime(2026, 3, 1, 11, 0, 0),
        total_count=50,
        is_active=False,
    )


@pytest.fixture
def snapshot():
    return PriceSnapshot(
        id="snap-1",
        league_id="league-settlers",
        fetched_at=datetime(2026, 3, 1, 9, 0, 0),
        exchange=ChannelPrices(
            chaos_to_divine_ratio=150.0,
            card_prices={"The Doctor": CardPrice(chaos_value=5000.0, divine_value=33.3)},
        ),
        stash=ChannelPrices(
            chaos_to_divine_ratio=145.0,
            card_prices={"The Doctor": CardPrice(chaos_value=4800.0, divine_value=33.1)},
        ),
        deck_cost=3.0,
    )


class TestBuildCardEntry:
    """Tests for per-card rows."""

    def test_no_snapshot_omits_prices(self):
        entry = build_card_entry(SessionCard(card_name="The Doctor", count=2), None)
        assert entry.name == "The Doctor"
        assert entry.count == 2
        assert entry.exchange_price is None
        assert entry.stash_price is None

    def test_no_metadata_omits_divination_card(self, snapshot):
        entry = build_card_entry(SessionCard(card_name="The Doctor", count=2), snapshot)
        assert entry.divination_card is None

    def test_metadata_is_cleaned(self, snapshot):
        info = DivinationCardInfo(
            id="poe1_the-doctor",
            stack_size=8,
            description="desc",
            reward_html="[[Headhunter|Headhunter Leather Belt]]",
            art_src="art.png",
            flavour_html=None,
            rarity=1,
        )
        entry = build_card_entry(
            SessionCard(card_name="The Doctor", count=2, divination_card=info), snapshot
        )
        assert entry.divination_card.reward_html == "Headhunter Leather Belt"
        assert entry.divination_card.flavour_html == ""
        assert entry.divination_card.rarity == 1
        # The source metadata is not modified
        assert info.reward_html == "[[Headhunter|Headhunter Leather Belt]]"

    def test_zero_stack_size_metadata_is_kept(self, snapshot):
        info = DivinationCardInfo(
            id="x", stack_size=0, description="", reward_html="", art_src="", flavour_html=""
        )
        entry = build_card_entry(SessionCard(card_name="X", count=1, divination_card=info), None)
        assert entry.divination_card is not None
        assert entry.divination_card.stack_size == 0

    def test_unpriced_card_gets_zero_entries(self, snapshot):
        entry = build_card_entry(SessionCard(card_name="Rain of Chaos", count=30), snapshot)
        assert entry.exchange_price.total_value == 0.0
        assert entry.exchange_price.chaos_value == 0.0
        assert entry.stash_price.total_value == 0.0

    def test_hide_flags_are_per_channel(self, snapshot):
        card = SessionCard(card_name="The Doctor", count=2, hide_price_exchange=True)
        entry = build_card_entry(card, snapshot)
        assert entry.exchange_price.hide_price is True
        assert entry.stash_price.hide_price is False


class TestAssembleSessionDetail:
    """Tests for assemble_session_detail."""

    def test_priced_session_totals(self, session, snapshot):
        cards = [SessionCard(card_name="The Doctor", count=2)]
        detail = assemble_session_detail(session, cards, snapshot)

        assert detail.total_count == 50
        assert detail.league == "Settlers"
        assert detail.price_snapshot is snapshot
        assert detail.totals.exchange.total_value == 10000.0
        assert detail.totals.stash.total_value == 9600.0
        assert detail.totals.total_deck_cost == 150.0
        assert detail.totals.stacked_deck_chaos_cost == 3.0
        assert detail.totals.exchange.net_profit == 9850.0
        assert detail.totals.stash.net_profit == 9450.0
        assert detail.totals.exchange.chaos_to_divine_ratio == 150.0
        assert detail.totals.stash.chaos_to_divine_ratio == 145.0

    def test_hidden_exchange_only_affects_exchange(self, session, snapshot):
        cards = [SessionCard(card_name="The Doctor", count=2, hide_price_exchange=True)]
        detail = assemble_session_detail(session, cards, snapshot)

        assert detail.totals.exchange.total_value == 0.0
        assert detail.totals.exchange.net_profit == -150.0
        assert detail.totals.stash.total_value == 9600.0
        # The card still reports its price
        assert detail.cards[0].exchange_price.total_value == 10000.0

    def test_without_snapshot_no_totals(self, session):
        cards = [SessionCard(card_name="The Doctor", count=2)]
        detail = assemble_session_detail(session, cards, None)

        assert detail.totals is None
        assert detail.price_snapshot is None
        assert detail.cards[0].exchange_price is None

    def test_empty_ledger(self, session, snapshot):
        detail = assemble_session_detail(session, [], snapshot)
        assert detail.cards == []
        assert detail.totals.exchange.total_value == 0.0
        assert detail.totals.exchange.net_profit == -150.0
