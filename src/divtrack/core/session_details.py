"""Per-session card breakdown assembly."""

from typing import Optional

from divtrack.core.markup import clean_wiki_markup
from divtrack.core.models import (
    ChannelTotals,
    DivinationCardInfo,
    PriceChannel,
    PriceSnapshot,
    SessionCard,
    SessionCardEntry,
    SessionDetail,
    SessionDetails,
    SessionTotals,
)
from divtrack.core.pricing import (
    build_price_entry,
    get_net_profit,
    get_total_deck_cost,
    sum_visible_values,
)


def clean_card_info(info: DivinationCardInfo) -> DivinationCardInfo:
    """Copy of the card metadata with wiki markup removed from the HTML fields."""
    return DivinationCardInfo(
        id=info.id,
        stack_size=info.stack_size,
        description=info.description,
        reward_html=clean_wiki_markup(info.reward_html),
        art_src=info.art_src,
        flavour_html=clean_wiki_markup(info.flavour_html),
        rarity=info.rarity,
    )


def build_card_entry(card: SessionCard, snapshot: Optional[PriceSnapshot]) -> SessionCardEntry:
    """Build one card row. Price blocks exist only when a snapshot is loaded."""
    entry = SessionCardEntry(name=card.card_name, count=card.count)

    if card.divination_card is not None:
        entry.divination_card = clean_card_info(card.divination_card)

    if snapshot is not None:
        entry.exchange_price = build_price_entry(
            snapshot.exchange.get(card.card_name),
            card.count,
            card.is_hidden(PriceChannel.EXCHANGE),
        )
        entry.stash_price = build_price_entry(
            snapshot.stash.get(card.card_name),
            card.count,
            card.is_hidden(PriceChannel.STASH),
        )

    return entry


def build_totals(
    entries: list[SessionCardEntry],
    snapshot: PriceSnapshot,
    total_count: int,
) -> SessionTotals:
    """Totals over visible card values, net of the decks opened."""
    exchange_total = sum_visible_values(e.exchange_price for e in entries)
    stash_total = sum_visible_values(e.stash_price for e in entries)
    total_deck_cost = get_total_deck_cost(snapshot.deck_cost, total_count)

    return SessionTotals(
        exchange=ChannelTotals(
            total_value=exchange_total,
            net_profit=get_net_profit(exchange_total, total_deck_cost),
            chaos_to_divine_ratio=snapshot.exchange.chaos_to_divine_ratio,
        ),
        stash=ChannelTotals(
            total_value=stash_total,
            net_profit=get_net_profit(stash_total, total_deck_cost),
            chaos_to_divine_ratio=snapshot.stash.chaos_to_divine_ratio,
        ),
        stacked_deck_chaos_cost=snapshot.deck_cost,
        total_deck_cost=total_deck_cost,
    )


def assemble_session_detail(
    session: SessionDetails,
    cards: list[SessionCard],
    snapshot: Optional[PriceSnapshot],
) -> SessionDetail:
    """
    Assemble the detail view of a session.

    Args:
        session: Session fields with league name
        cards: Ledger entries with catalog metadata
        snapshot: Loaded price snapshot, or None when the session has none
                  or it could not be loaded

    Returns:
        SessionDetail; totals and price_snapshot are None without a snapshot
    """
    entries = [build_card_entry(card, snapshot) for card in cards]

    return SessionDetail(
        total_count=session.total_count,
        started_at=session.started_at,
        ended_at=session.ended_at,
        league=session.league,
        cards=entries,
        price_snapshot=snapshot,
        totals=build_totals(entries, snapshot, session.total_count) if snapshot is not None else None,
    )
