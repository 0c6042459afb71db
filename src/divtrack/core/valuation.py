"""Session valuation - resolves aggregate metrics for one session.

Every metric that has both a cached summary field and a live definition is
resolved per field: the summary value when the summary row exists and the
field is not None, otherwise the live value.
"""

from datetime import datetime
from typing import Any, Optional

from divtrack.core.models import SessionSummaryCache, SessionSummaryView, SessionValuationInput
from divtrack.core.pricing import get_net_profit, get_total_deck_cost, prefer_cached


def duration_minutes(started_at: datetime, ended_at: Optional[datetime]) -> Optional[int]:
    """Whole minutes between start and end, truncated toward zero.

    Returns None for a session that has not ended.
    """
    if ended_at is None:
        return None
    return int((ended_at - started_at).total_seconds() / 60)


def _cached(summary: Optional[SessionSummaryCache], attr: str) -> Any:
    if summary is None:
        return None
    return getattr(summary, attr)


def resolve_summary(data: SessionValuationInput) -> SessionSummaryView:
    """Resolve a session's aggregate metrics from its summary and live data."""
    summary = data.summary

    total_deck_cost = get_total_deck_cost(data.snapshot_deck_cost, data.total_count)
    live_exchange_net = get_net_profit(data.live_exchange_value, total_deck_cost)
    live_stash_net = get_net_profit(data.live_stash_value, total_deck_cost)

    return SessionSummaryView(
        session_id=data.session_id,
        game=data.game,
        league=data.league,
        started_at=data.started_at,
        ended_at=data.ended_at,
        is_active=data.is_active,
        duration_minutes=prefer_cached(
            _cached(summary, "duration_minutes"),
            duration_minutes(data.started_at, data.ended_at),
        ),
        total_decks_opened=prefer_cached(
            _cached(summary, "total_decks_opened"), data.total_count
        ),
        total_exchange_value=prefer_cached(
            _cached(summary, "total_exchange_value"), data.live_exchange_value
        ),
        total_stash_value=prefer_cached(
            _cached(summary, "total_stash_value"), data.live_stash_value
        ),
        total_exchange_net_profit=prefer_cached(
            _cached(summary, "total_exchange_net_profit"), live_exchange_net
        ),
        total_stash_net_profit=prefer_cached(
            _cached(summary, "total_stash_net_profit"), live_stash_net
        ),
        exchange_chaos_to_divine=prefer_cached(
            _cached(summary, "exchange_chaos_to_divine"),
            prefer_cached(data.snapshot_exchange_chaos_to_divine, 0.0),
        ),
        stash_chaos_to_divine=prefer_cached(
            _cached(summary, "stash_chaos_to_divine"),
            prefer_cached(data.snapshot_stash_chaos_to_divine, 0.0),
        ),
        stacked_deck_chaos_cost=prefer_cached(
            _cached(summary, "stacked_deck_chaos_cost"),
            prefer_cached(data.snapshot_deck_cost, 0.0),
        ),
    )
