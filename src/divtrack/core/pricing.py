"""Pricing calculation utilities.

Centralized helpers for card values, deck cost and net profit. Shared by the
aggregate valuation and the per-session detail breakdown so both apply the
same arithmetic.
"""

from typing import Iterable, Optional, TypeVar

from divtrack.core.models import CardPrice, CardPriceEntry

T = TypeVar("T")


def prefer_cached(cached: Optional[T], live: T) -> T:
    """Return the cached value unless it is missing (None).

    Zero is a real cached value and wins over the live one.
    """
    return cached if cached is not None else live


def get_card_value(chaos_value: float, count: int) -> float:
    """Total chaos value of `count` copies of a card."""
    return chaos_value * count


def get_total_deck_cost(deck_cost: Optional[float], total_count: int) -> float:
    """Chaos spent on decks for a session (0 when there is no snapshot).

    Args:
        deck_cost: Chaos cost of one deck from the snapshot, or None
        total_count: Decks opened in the session

    Returns:
        deck_cost * total_count
    """
    if deck_cost is None:
        return 0.0
    return deck_cost * total_count


def get_net_profit(total_value: float, total_deck_cost: float) -> float:
    """Card value minus what the decks cost."""
    return total_value - total_deck_cost


def build_price_entry(price: Optional[CardPrice], count: int, hide_price: bool) -> CardPriceEntry:
    """Price a ledger entry in one channel.

    Unpriced cards still get an entry (all zeros) so the hide flag can be shown.
    Hidden cards keep their real price; hiding only affects totals.
    """
    if price is None:
        return CardPriceEntry(
            chaos_value=0.0,
            divine_value=0.0,
            total_value=0.0,
            hide_price=hide_price,
        )
    return CardPriceEntry(
        chaos_value=price.chaos_value,
        divine_value=price.divine_value,
        total_value=get_card_value(price.chaos_value, count),
        hide_price=hide_price,
    )


def sum_visible_values(entries: Iterable[Optional[CardPriceEntry]]) -> float:
    """Sum total_value over entries that exist and are not hidden."""
    total = 0.0
    for entry in entries:
        if entry is not None and not entry.hide_price:
            total += entry.total_value
    return total
