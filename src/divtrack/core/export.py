"""CSV export of a session's card breakdown."""

from typing import Optional

from divtrack.core.models import CardPriceEntry, SessionDetail

CSV_HEADER = (
    "Card Name,Count,Exchange Chaos,Exchange Total,Exchange Hidden,"
    "Stash Chaos,Stash Total,Stash Hidden"
)


def _quote(text: str) -> str:
    return '"' + text.replace('"', '""') + '"'


def _price_columns(entry: Optional[CardPriceEntry]) -> str:
    if entry is None:
        return ",,"
    hidden = "yes" if entry.hide_price else "no"
    return f"{entry.chaos_value:.2f},{entry.total_value:.2f},{hidden}"


def build_session_csv(detail: SessionDetail) -> str:
    """
    Render a session detail as CSV text.

    One row per card, followed by a summary section. Price columns are
    empty when the session has no snapshot.
    """
    lines = [CSV_HEADER]

    for card in sorted(detail.cards, key=lambda c: c.count, reverse=True):
        lines.append(
            f"{_quote(card.name)},{card.count},"
            f"{_price_columns(card.exchange_price)},{_price_columns(card.stash_price)}"
        )

    lines.append("")
    lines.append("Summary")
    lines.append(f"League,{_quote(detail.league)}")
    lines.append(f"Started,{detail.started_at.isoformat()}")
    lines.append(f"Ended,{detail.ended_at.isoformat() if detail.ended_at else ''}")
    lines.append(f"Decks Opened,{detail.total_count}")

    if detail.totals is not None:
        totals = detail.totals
        lines.append(f"Stacked Deck Cost (chaos),{totals.stacked_deck_chaos_cost:.2f}")
        lines.append(f"Total Deck Cost (chaos),{totals.total_deck_cost:.2f}")
        lines.append(f"Exchange Value (chaos),{totals.exchange.total_value:.2f}")
        lines.append(f"Exchange Net Profit (chaos),{totals.exchange.net_profit:.2f}")
        lines.append(f"Stash Value (chaos),{totals.stash.total_value:.2f}")
        lines.append(f"Stash Net Profit (chaos),{totals.stash.net_profit:.2f}")

    return "\n".join(lines) + "\n"
