"""Repository - CRUD operations for all entities."""

import uuid
from datetime import datetime, timezone
from typing import Optional

from divtrack.core.models import (
    DEFAULT_CARD_RARITY,
    CardPrice,
    ChannelPrices,
    DivinationCard,
    DivinationCardInfo,
    League,
    PriceChannel,
    PriceSnapshot,
    Session,
    SessionCard,
    SessionDetails,
    SessionSummaryCache,
    SessionValuationInput,
)
from divtrack.db.connection import Database


def _new_id() -> str:
    return str(uuid.uuid4())


def _parse_ts(value: Optional[str]) -> Optional[datetime]:
    return datetime.fromisoformat(value) if value else None


def _format_ts(value: Optional[datetime]) -> Optional[str]:
    """Store timestamps as naive UTC so text ordering matches time ordering."""
    if value is None:
        return None
    if value.tzinfo is not None:
        value = value.astimezone(timezone.utc).replace(tzinfo=None)
    return value.isoformat()


# Live card value of a session in one channel: sum of count * chaos_value over
# visible ledger entries priced in the session's snapshot. 0 when the session
# has no snapshot or nothing is priced.
_LIVE_VALUE_SQL = """
COALESCE((
    SELECT SUM(sc.count * scp.chaos_value)
    FROM session_cards sc
    JOIN snapshot_card_prices scp
      ON scp.snapshot_id = s.snapshot_id
     AND scp.card_name = sc.card_name
     AND scp.price_source = '{channel}'
    WHERE sc.session_id = s.id
      AND sc.hide_price_{channel} = 0
), 0)
"""

_VALUATION_SELECT = f"""
SELECT
    s.id,
    s.game,
    s.started_at,
    s.ended_at,
    s.total_count,
    s.is_active,
    l.name AS league_name,
    snap.stacked_deck_chaos_cost AS snap_deck_cost,
    snap.exchange_chaos_to_divine AS snap_exchange_ratio,
    snap.stash_chaos_to_divine AS snap_stash_ratio,
    ss.session_id AS ss_session_id,
    ss.game AS ss_game,
    ss.league AS ss_league,
    ss.started_at AS ss_started_at,
    ss.ended_at AS ss_ended_at,
    ss.duration_minutes AS ss_duration_minutes,
    ss.total_decks_opened AS ss_total_decks_opened,
    ss.total_exchange_value AS ss_total_exchange_value,
    ss.total_stash_value AS ss_total_stash_value,
    ss.total_exchange_net_profit AS ss_total_exchange_net_profit,
    ss.total_stash_net_profit AS ss_total_stash_net_profit,
    ss.exchange_chaos_to_divine AS ss_exchange_chaos_to_divine,
    ss.stash_chaos_to_divine AS ss_stash_chaos_to_divine,
    ss.stacked_deck_chaos_cost AS ss_stacked_deck_chaos_cost,
    {_LIVE_VALUE_SQL.format(channel='exchange')} AS live_exchange_value,
    {_LIVE_VALUE_SQL.format(channel='stash')} AS live_stash_value
FROM sessions s
JOIN leagues l ON l.id = s.league_id
LEFT JOIN snapshots snap ON snap.id = s.snapshot_id
LEFT JOIN session_summaries ss ON ss.session_id = s.id
"""

# Sessions holding at least one card whose name contains the search term.
# instr() is case-sensitive and treats % and _ literally.
_CARD_NAME_FILTER = """
s.total_count > 0
AND EXISTS (
    SELECT 1 FROM session_cards sc
    WHERE sc.session_id = s.id AND instr(sc.card_name, ?) > 0
)
"""

_SUMMARY_FIELDS = (
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


class Repository:
    """Data access layer for all entities."""

    def __init__(self, db: Database) -> None:
        self.db = db

    # --- Settings ---

    def get_setting(self, key: str) -> Optional[str]:
        """Get a setting value by key."""
        row = self.db.fetchone("SELECT value FROM settings WHERE key = ?", (key,))
        return row["value"] if row else None

    def set_setting(self, key: str, value: str) -> None:
        """Set a setting value."""
        self.db.execute(
            "INSERT OR REPLACE INTO settings (key, value, updated_at) VALUES (?, ?, ?)",
            (key, value, datetime.now().isoformat()),
        )

    # --- Leagues ---

    def upsert_league(self, league: League) -> str:
        """Insert a league, or return the id of the existing (game, name) row."""
        row = self.db.fetchone(
            "SELECT id FROM leagues WHERE game = ? AND name = ?",
            (league.game, league.name),
        )
        if row:
            return row["id"]

        league_id = league.id or _new_id()
        self.db.execute(
            """INSERT INTO leagues (id, name, game, start_date, end_date)
               VALUES (?, ?, ?, ?, ?)""",
            (league_id, league.name, league.game, league.start_date, league.end_date),
        )
        return league_id

    def get_league(self, league_id: str) -> Optional[League]:
        """Get a league by ID."""
        row = self.db.fetchone("SELECT * FROM leagues WHERE id = ?", (league_id,))
        if not row:
            return None
        return League(
            id=row["id"],
            game=row["game"],
            name=row["name"],
            start_date=row["start_date"],
            end_date=row["end_date"],
        )

    # --- Price snapshots ---

    def upsert_snapshot(self, snapshot: PriceSnapshot) -> str:
        """
        Insert or update a snapshot and replace its card prices.

        The snapshot row is updated in place so sessions pointing at it
        keep their reference.
        """
        snapshot_id = snapshot.id or _new_id()
        prices = [
            (
                snapshot_id,
                card_name,
                channel.value,
                price.chaos_value,
                price.divine_value,
                price.confidence,
            )
            for channel in PriceChannel
            for card_name, price in snapshot.channel(channel).card_prices.items()
        ]
        with self.db.transaction() as cursor:
            cursor.execute(
                """INSERT INTO snapshots (id, league_id, fetched_at, exchange_chaos_to_divine,
                                          stash_chaos_to_divine, stacked_deck_chaos_cost)
                   VALUES (?, ?, ?, ?, ?, ?)
                   ON CONFLICT(id) DO UPDATE SET
                       league_id = excluded.league_id,
                       fetched_at = excluded.fetched_at,
                       exchange_chaos_to_divine = excluded.exchange_chaos_to_divine,
                       stash_chaos_to_divine = excluded.stash_chaos_to_divine,
                       stacked_deck_chaos_cost = excluded.stacked_deck_chaos_cost""",
                (
                    snapshot_id,
                    snapshot.league_id,
                    _format_ts(snapshot.fetched_at),
                    snapshot.exchange.chaos_to_divine_ratio,
                    snapshot.stash.chaos_to_divine_ratio,
                    snapshot.deck_cost,
                ),
            )
            cursor.execute("DELETE FROM snapshot_card_prices WHERE snapshot_id = ?", (snapshot_id,))
            cursor.executemany(
                """INSERT INTO snapshot_card_prices
                   (snapshot_id, card_name, price_source, chaos_value, divine_value, confidence)
                   VALUES (?, ?, ?, ?, ?, ?)""",
                prices,
            )
        return snapshot_id

    def load_snapshot(self, snapshot_id: str) -> Optional[PriceSnapshot]:
        """Load a snapshot with both channels of card prices, or None if missing."""
        row = self.db.fetchone("SELECT * FROM snapshots WHERE id = ?", (snapshot_id,))
        if not row:
            return None

        prices: dict[str, dict[str, CardPrice]] = {ch.value: {} for ch in PriceChannel}
        price_rows = self.db.fetchall(
            "SELECT * FROM snapshot_card_prices WHERE snapshot_id = ?",
            (snapshot_id,),
        )
        for price_row in price_rows:
            prices[price_row["price_source"]][price_row["card_name"]] = CardPrice(
                chaos_value=price_row["chaos_value"],
                divine_value=price_row["divine_value"],
                confidence=price_row["confidence"],
            )

        return PriceSnapshot(
            id=row["id"],
            league_id=row["league_id"],
            fetched_at=datetime.fromisoformat(row["fetched_at"]),
            exchange=ChannelPrices(
                chaos_to_divine_ratio=row["exchange_chaos_to_divine"],
                card_prices=prices[PriceChannel.EXCHANGE.value],
            ),
            stash=ChannelPrices(
                chaos_to_divine_ratio=row["stash_chaos_to_divine"],
                card_prices=prices[PriceChannel.STASH.value],
            ),
            deck_cost=row["stacked_deck_chaos_cost"] or 0.0,
        )

    # --- Sessions ---

    def upsert_session(self, session: Session) -> str:
        """Insert or update a session and return its ID.

        Updating keeps the session's ledger entries and summary.
        """
        session_id = session.id or _new_id()
        self.db.execute(
            """INSERT INTO sessions (id, game, league_id, snapshot_id, started_at, ended_at,
                                     total_count, is_active)
               VALUES (?, ?, ?, ?, ?, ?, ?, ?)
               ON CONFLICT(id) DO UPDATE SET
                   game = excluded.game,
                   league_id = excluded.league_id,
                   snapshot_id = excluded.snapshot_id,
                   started_at = excluded.started_at,
                   ended_at = excluded.ended_at,
                   total_count = excluded.total_count,
                   is_active = excluded.is_active""",
            (
                session_id,
                session.game,
                session.league_id,
                session.snapshot_id,
                _format_ts(session.started_at),
                _format_ts(session.ended_at),
                session.total_count,
                1 if session.is_active else 0,
            ),
        )
        return session_id

    def end_session(self, session_id: str, ended_at: datetime) -> None:
        """Mark a session finished."""
        self.db.execute(
            "UPDATE sessions SET ended_at = ?, is_active = 0 WHERE id = ?",
            (_format_ts(ended_at), session_id),
        )

    def get_session(self, session_id: str) -> Optional[SessionDetails]:
        """Get a session by ID with its league name."""
        row = self.db.fetchone(
            """SELECT s.*, l.name AS league_name
               FROM sessions s
               JOIN leagues l ON l.id = s.league_id
               WHERE s.id = ?""",
            (session_id,),
        )
        if not row:
            return None
        return self._row_to_session_details(row)

    def _row_to_session_details(self, row) -> SessionDetails:
        return SessionDetails(
            id=row["id"],
            game=row["game"],
            league_id=row["league_id"],
            league=row["league_name"],
            snapshot_id=row["snapshot_id"],
            started_at=datetime.fromisoformat(row["started_at"]),
            ended_at=_parse_ts(row["ended_at"]),
            total_count=row["total_count"],
            is_active=bool(row["is_active"]),
        )

    def count_sessions(self, game: str) -> int:
        """Count all sessions of a game, active and finished."""
        row = self.db.fetchone(
            """SELECT COUNT(*) AS total
               FROM sessions s
               JOIN leagues l ON l.id = s.league_id
               WHERE s.game = ?""",
            (game,),
        )
        return row["total"] if row else 0

    def get_session_valuation_page(
        self, game: str, limit: int, offset: int
    ) -> list[SessionValuationInput]:
        """Get valuation inputs for one page of sessions, newest first."""
        rows = self.db.fetchall(
            _VALUATION_SELECT
            + """WHERE s.game = ?
                 ORDER BY s.started_at DESC, s.id DESC
                 LIMIT ? OFFSET ?""",
            (game, limit, offset),
        )
        return [self._row_to_valuation_input(row) for row in rows]

    def search_session_valuation_page(
        self, game: str, card_name: str, limit: int, offset: int
    ) -> list[SessionValuationInput]:
        """Get valuation inputs for sessions that produced a matching card."""
        rows = self.db.fetchall(
            _VALUATION_SELECT
            + "WHERE s.game = ? AND "
            + _CARD_NAME_FILTER
            + """ORDER BY s.started_at DESC, s.id DESC
                 LIMIT ? OFFSET ?""",
            (game, card_name, limit, offset),
        )
        return [self._row_to_valuation_input(row) for row in rows]

    def count_sessions_by_card_name(self, game: str, card_name: str) -> int:
        """Count distinct sessions that produced a matching card."""
        row = self.db.fetchone(
            """SELECT COUNT(*) AS total
               FROM sessions s
               JOIN leagues l ON l.id = s.league_id
               WHERE s.game = ? AND """
            + _CARD_NAME_FILTER,
            (game, card_name),
        )
        return row["total"] if row else 0

    def _row_to_valuation_input(self, row) -> SessionValuationInput:
        summary = None
        if row["ss_session_id"] is not None:
            summary = SessionSummaryCache(
                session_id=row["ss_session_id"],
                game=row["ss_game"],
                league=row["ss_league"],
                started_at=_parse_ts(row["ss_started_at"]),
                ended_at=_parse_ts(row["ss_ended_at"]),
                **{name: row[f"ss_{name}"] for name in _SUMMARY_FIELDS},
            )

        return SessionValuationInput(
            session_id=row["id"],
            game=row["game"],
            league=row["league_name"],
            started_at=datetime.fromisoformat(row["started_at"]),
            ended_at=_parse_ts(row["ended_at"]),
            is_active=bool(row["is_active"]),
            total_count=row["total_count"],
            live_exchange_value=float(row["live_exchange_value"]),
            live_stash_value=float(row["live_stash_value"]),
            snapshot_deck_cost=row["snap_deck_cost"],
            snapshot_exchange_chaos_to_divine=row["snap_exchange_ratio"],
            snapshot_stash_chaos_to_divine=row["snap_stash_ratio"],
            summary=summary,
        )

    # --- Session cards ---

    def upsert_session_card(self, session_id: str, card: SessionCard) -> None:
        """Insert or update a ledger entry for a session."""
        now = datetime.now().isoformat()
        self.db.execute(
            """INSERT INTO session_cards (session_id, card_name, count, hide_price_exchange,
                                          hide_price_stash, first_seen_at, last_seen_at)
               VALUES (?, ?, ?, ?, ?, ?, ?)
               ON CONFLICT(session_id, card_name) DO UPDATE SET
                   count = excluded.count,
                   hide_price_exchange = excluded.hide_price_exchange,
                   hide_price_stash = excluded.hide_price_stash,
                   last_seen_at = excluded.last_seen_at""",
            (
                session_id,
                card.card_name,
                card.count,
                1 if card.hide_price_exchange else 0,
                1 if card.hide_price_stash else 0,
                now,
                now,
            ),
        )

    def set_card_hidden(
        self, session_id: str, card_name: str, channel: PriceChannel, hidden: bool
    ) -> None:
        """Toggle whether a card's price counts toward one channel's totals."""
        column = f"hide_price_{channel.value}"
        self.db.execute(
            f"UPDATE session_cards SET {column} = ? WHERE session_id = ? AND card_name = ?",
            (1 if hidden else 0, session_id, card_name),
        )

    def get_session_cards(self, session_id: str) -> list[SessionCard]:
        """Get a session's ledger with catalog metadata and league rarity."""
        rows = self.db.fetchall(
            """SELECT
                   sc.card_name,
                   sc.count,
                   sc.hide_price_exchange,
                   sc.hide_price_stash,
                   dc.id AS dc_id,
                   dc.stack_size AS dc_stack_size,
                   dc.description AS dc_description,
                   dc.reward_html AS dc_reward_html,
                   dc.art_src AS dc_art_src,
                   dc.flavour_html AS dc_flavour_html,
                   dcr.rarity AS dc_rarity
               FROM session_cards sc
               JOIN sessions s ON s.id = sc.session_id
               JOIN leagues l ON l.id = s.league_id
               LEFT JOIN divination_cards dc
                 ON dc.game = s.game AND dc.name = sc.card_name
               LEFT JOIN divination_card_rarities dcr
                 ON dcr.game = s.game AND dcr.league = l.name AND dcr.card_name = sc.card_name
               WHERE sc.session_id = ?
               ORDER BY sc.card_name""",
            (session_id,),
        )
        return [self._row_to_session_card(row) for row in rows]

    def _row_to_session_card(self, row) -> SessionCard:
        info = None
        if row["dc_id"] is not None:
            info = DivinationCardInfo(
                id=row["dc_id"],
                stack_size=row["dc_stack_size"],
                description=row["dc_description"],
                reward_html=row["dc_reward_html"],
                art_src=row["dc_art_src"],
                flavour_html=row["dc_flavour_html"],
                rarity=row["dc_rarity"] if row["dc_rarity"] is not None else DEFAULT_CARD_RARITY,
            )
        return SessionCard(
            card_name=row["card_name"],
            count=row["count"],
            hide_price_exchange=bool(row["hide_price_exchange"]),
            hide_price_stash=bool(row["hide_price_stash"]),
            divination_card=info,
        )

    # --- Session summaries ---

    def upsert_session_summary(self, summary: SessionSummaryCache) -> None:
        """Insert or replace the cached aggregates of a session."""
        self.db.execute(
            """INSERT OR REPLACE INTO session_summaries
               (session_id, game, league, started_at, ended_at, duration_minutes,
                total_decks_opened, total_exchange_value, total_stash_value,
                total_exchange_net_profit, total_stash_net_profit,
                exchange_chaos_to_divine, stash_chaos_to_divine, stacked_deck_chaos_cost)
               VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)""",
            (
                summary.session_id,
                summary.game,
                summary.league,
                _format_ts(summary.started_at),
                _format_ts(summary.ended_at),
                *(getattr(summary, name) for name in _SUMMARY_FIELDS),
            ),
        )

    def get_session_summary(self, session_id: str) -> Optional[SessionSummaryCache]:
        """Get the cached aggregates of a session, or None."""
        row = self.db.fetchone(
            "SELECT * FROM session_summaries WHERE session_id = ?", (session_id,)
        )
        if not row:
            return None
        return SessionSummaryCache(
            session_id=row["session_id"],
            game=row["game"],
            league=row["league"],
            started_at=_parse_ts(row["started_at"]),
            ended_at=_parse_ts(row["ended_at"]),
            **{name: row[name] for name in _SUMMARY_FIELDS},
        )

    # --- Divination card catalog ---

    def upsert_divination_card(self, card: DivinationCard) -> None:
        """Insert or update a catalog card, keyed by (game, name)."""
        self.db.execute(
            """INSERT INTO divination_cards (id, name, stack_size, description, reward_html,
                                             art_src, flavour_html, game, from_boss)
               VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?)
               ON CONFLICT(game, name) DO UPDATE SET
                   stack_size = excluded.stack_size,
                   description = excluded.description,
                   reward_html = excluded.reward_html,
                   art_src = excluded.art_src,
                   flavour_html = excluded.flavour_html,
                   from_boss = excluded.from_boss,
                   updated_at = datetime('now')""",
            (
                card.id,
                card.name,
                card.stack_size,
                card.description,
                card.reward_html,
                card.art_src,
                card.flavour_html,
                card.game,
                1 if card.from_boss else 0,
            ),
        )

    def upsert_card_rarity(self, game: str, league: str, card_name: str, rarity: int) -> None:
        """Set a card's rarity for one league."""
        self.db.execute(
            """INSERT OR REPLACE INTO divination_card_rarities (game, league, card_name, rarity, last_updated)
               VALUES (?, ?, ?, ?, ?)""",
            (game, league, card_name, rarity, datetime.now().isoformat()),
        )
