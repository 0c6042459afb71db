"""Seed import - load leagues, snapshots, cards and sessions from JSON."""

import json
from dataclasses import dataclass, replace
from datetime import datetime
from pathlib import Path
from typing import Any, Optional

from divtrack.config.logging import get_logger
from divtrack.core.models import (
    CardPrice,
    ChannelPrices,
    DivinationCard,
    League,
    PriceSnapshot,
    Session,
    SessionCard,
    SessionSummaryCache,
)
from divtrack.db.repository import Repository

logger = get_logger()

_SUMMARY_METRICS = (
    "duration_minutes",
    "total_decks_opened",
    "total_exchange_value",
    "total_stash_value",
    "total_exchange_net_profit",
    "total_stash_net_profit",
    "exchange_chaos_to_divine",
    "stash_chaos_to_divine",
    "stacked_deck_chaos_cost",
)


@dataclass
class SeedCounts:
    """Number of rows imported per entity."""

    leagues: int = 0
    snapshots: int = 0
    divination_cards: int = 0
    card_rarities: int = 0
    sessions: int = 0
    session_cards: int = 0
    summaries: int = 0


def _parse_ts(value: Optional[str]) -> Optional[datetime]:
    return datetime.fromisoformat(value) if value else None


def _channel_from_json(data: dict[str, Any]) -> ChannelPrices:
    return ChannelPrices(
        chaos_to_divine_ratio=float(data["chaos_to_divine_ratio"]),
        card_prices={
            name: CardPrice(
                chaos_value=float(price["chaos_value"]),
                divine_value=float(price["divine_value"]),
                confidence=int(price.get("confidence", 1)),
            )
            for name, price in data.get("card_prices", {}).items()
        },
    )


def _summary_from_json(session_id: str, data: dict[str, Any]) -> SessionSummaryCache:
    return SessionSummaryCache(
        session_id=session_id,
        game=data.get("game"),
        league=data.get("league"),
        started_at=_parse_ts(data.get("started_at")),
        ended_at=_parse_ts(data.get("ended_at")),
        **{name: data.get(name) for name in _SUMMARY_METRICS},
    )


def _snapshot_from_json(data: dict[str, Any]) -> PriceSnapshot:
    return PriceSnapshot(
        id=data.get("id"),
        league_id=data["league_id"],
        fetched_at=datetime.fromisoformat(data["fetched_at"]),
        exchange=_channel_from_json(data["exchange"]),
        stash=_channel_from_json(data["stash"]),
        deck_cost=float(data.get("stacked_deck_chaos_cost", 0)),
    )


def _card_from_json(data: dict[str, Any]) -> DivinationCard:
    return DivinationCard(
        id=data.get("id") or f"{data['game']}_{data['name']}",
        name=data["name"],
        game=data["game"],
        stack_size=int(data["stack_size"]),
        description=data.get("description", ""),
        reward_html=data.get("reward_html", ""),
        art_src=data.get("art_src", ""),
        flavour_html=data.get("flavour_html"),
        from_boss=bool(data.get("from_boss", False)),
    )


def _session_from_json(
    data: dict[str, Any],
) -> tuple[Session, list[SessionCard], Optional[SessionSummaryCache]]:
    session = Session(
        id=data.get("id"),
        game=data["game"],
        league_id=data["league_id"],
        started_at=datetime.fromisoformat(data["started_at"]),
        ended_at=_parse_ts(data.get("ended_at")),
        total_count=int(data.get("total_count", 0)),
        is_active=bool(data.get("is_active", False)),
        snapshot_id=data.get("snapshot_id"),
    )
    cards = [
        SessionCard(
            card_name=card_data["card_name"],
            count=int(card_data["count"]),
            hide_price_exchange=bool(card_data.get("hide_price_exchange", False)),
            hide_price_stash=bool(card_data.get("hide_price_stash", False)),
        )
        for card_data in data.get("cards", [])
    ]
    summary_data = data.get("summary")
    summary = _summary_from_json(session.id, summary_data) if summary_data is not None else None
    return session, cards, summary


def load_seed(repo: Repository, seed_file: Path) -> SeedCounts:
    """
    Import a JSON seed file into the database.

    Leagues are matched on (game, name); sessions and snapshots refer to
    leagues by the id used in the seed file. Snapshots and sessions that
    already exist are updated, so importing the same file twice leaves
    the database unchanged.

    The whole file is parsed into models first, so a badly formatted value
    or missing field raises before anything is written.

    Raises:
        OSError: If the file cannot be read
        json.JSONDecodeError: If the file is not valid JSON
        KeyError: If a required field is missing
        ValueError: If a value has the wrong format
    """
    with open(seed_file, "r", encoding="utf-8") as f:
        data = json.load(f)

    leagues = [
        League(
            id=league_data.get("id"),
            game=league_data["game"],
            name=league_data["name"],
            start_date=league_data.get("start_date"),
            end_date=league_data.get("end_date"),
        )
        for league_data in data.get("leagues", [])
    ]
    snapshots = [_snapshot_from_json(snap_data) for snap_data in data.get("snapshots", [])]
    cards = [_card_from_json(card_data) for card_data in data.get("divination_cards", [])]
    rarities = [
        (
            rarity_data["game"],
            rarity_data["league"],
            rarity_data["card_name"],
            int(rarity_data["rarity"]),
        )
        for rarity_data in data.get("card_rarities", [])
    ]
    sessions = [_session_from_json(session_data) for session_data in data.get("sessions", [])]

    counts = SeedCounts()
    league_ids: dict[str, str] = {}

    for league in leagues:
        stored_id = repo.upsert_league(league)
        league_ids[league.id or stored_id] = stored_id
        counts.leagues += 1

    for snapshot in snapshots:
        league_id = league_ids.get(snapshot.league_id, snapshot.league_id)
        repo.upsert_snapshot(replace(snapshot, league_id=league_id))
        counts.snapshots += 1

    for card in cards:
        repo.upsert_divination_card(card)
        counts.divination_cards += 1

    for rarity in rarities:
        repo.upsert_card_rarity(*rarity)
        counts.card_rarities += 1

    for session, session_cards, summary in sessions:
        session.league_id = league_ids.get(session.league_id, session.league_id)
        session_id = repo.upsert_session(session)
        counts.sessions += 1

        for card in session_cards:
            repo.upsert_session_card(session_id, card)
            counts.session_cards += 1

        if summary is not None:
            summary.session_id = session_id
            repo.upsert_session_summary(summary)
            counts.summaries += 1

    logger.info(
        f"Seed imported from {seed_file}: {counts.sessions} sessions, "
        f"{counts.snapshots} snapshots, {counts.divination_cards} cards"
    )
    return counts
