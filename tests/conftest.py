"""Pytest configuration and shared fixtures."""

from datetime import datetime
from pathlib import Path

import pytest

from divtrack.core.models import (
    CardPrice,
    ChannelPrices,
    DivinationCard,
    League,
    PriceSnapshot,
    Session,
    SessionCard,
)
from divtrack.db.connection import Database
from divtrack.db.repository import Repository


@pytest.fixture
def fixtures_dir():
    """Get the fixtures directory path."""
    return Path(__file__).parent / "fixtures"


@pytest.fixture
def db(tmp_path):
    """Create a temporary database for each test."""
    database = Database(tmp_path / "test.db")
    database.connect()
    yield database
    database.close()


@pytest.fixture
def repo(db):
    """Create a repository for each test."""
    return Repository(db)


@pytest.fixture
def league_id(repo):
    """A poe1 league to attach sessions and snapshots to."""
    return repo.upsert_league(League(id="league-settlers", game="poe1", name="Settlers"))


@pytest.fixture
def snapshot_id(repo, league_id):
    """Snapshot pricing The Doctor and Rain of Chaos, deck cost 3 chaos."""
    snapshot = PriceSnapshot(
        id="snap-1",
        league_id=league_id,
        fetched_at=datetime(2026, 3, 1, 12, 0, 0),
        exchange=ChannelPrices(
            chaos_to_divine_ratio=150.0,
            card_prices={
                "The Doctor": CardPrice(chaos_value=5000.0, divine_value=33.3),
                "Rain of Chaos": CardPrice(chaos_value=1.0, divine_value=0.0067),
            },
        ),
        stash=ChannelPrices(
            chaos_to_divine_ratio=145.0,
            card_prices={
                "The Doctor": CardPrice(chaos_value=4800.0, divine_value=33.1, confidence=2),
                "Rain of Chaos": CardPrice(chaos_value=0.5, divine_value=0.0034),
            },
        ),
        deck_cost=3.0,
    )
    return repo.upsert_snapshot(snapshot)


@pytest.fixture
def add_session(repo, league_id):
    """Factory inserting a session with its ledger entries.

    cards: iterable of (name, count) or (name, count, hide_exchange, hide_stash)
    """

    def _add(
        session_id: str,
        started_at: datetime,
        cards=(),
        snapshot_id=None,
        total_count: int = 50,
        ended_at=None,
        is_active: bool = False,
        game: str = "poe1",
    ) -> str:
        sid = repo.upsert_session(
            Session(
                id=session_id,
                game=game,
                league_id=league_id,
                started_at=started_at,
                ended_at=ended_at,
                total_count=total_count,
                is_active=is_active,
                snapshot_id=snapshot_id,
            )
        )
        for card in cards:
            name, count, *flags = card
            hide_exchange, hide_stash = flags if flags else (False, False)
            repo.upsert_session_card(
                sid,
                SessionCard(
                    card_name=name,
                    count=count,
                    hide_price_exchange=hide_exchange,
                    hide_price_stash=hide_stash,
                ),
            )
        return sid

    return _add


@pytest.fixture
def doctor_card(repo):
    """Catalog entry for The Doctor with wiki markup in its HTML fields."""
    card = DivinationCard(
        id="poe1_the-doctor",
        name="The Doctor",
        game="poe1",
        stack_size=8,
        description="A rare card",
        reward_html="[[File:Headhunter.png]] [[Headhunter|Headhunter Leather Belt]]",
        art_src="https://example.com/doctor.png",
        flavour_html="Time  for [[Medicine]]",
    )
    repo.upsert_divination_card(card)
    return card
