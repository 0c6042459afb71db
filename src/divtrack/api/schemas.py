"""Pydantic schemas for API responses."""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel


class SessionSummaryResponse(BaseModel):
    """Resolved aggregate metrics of one session."""

    session_id: str
    game: str
    league: str
    started_at: datetime
    ended_at: Optional[datetime] = None
    is_active: bool
    duration_minutes: Optional[int] = None  # None while the session is running
    total_decks_opened: int
    total_exchange_value: float
    total_stash_value: float
    total_exchange_net_profit: float
    total_stash_net_profit: float
    exchange_chaos_to_divine: float
    stash_chaos_to_divine: float
    stacked_deck_chaos_cost: float


class SessionListResponse(BaseModel):
    """Paginated session list (also used for card search results)."""

    sessions: list[SessionSummaryResponse]
    total: int
    page: int
    page_size: int
    total_pages: int


class DivinationCardResponse(BaseModel):
    """Catalog metadata of a card, markup already cleaned."""

    id: str
    stack_size: int
    description: str
    reward_html: str
    art_src: str
    flavour_html: str
    rarity: int


class CardPriceEntryResponse(BaseModel):
    """A card's price in one channel."""

    chaos_value: float
    divine_value: float
    total_value: float  # chaos_value * count
    hide_price: bool


class SessionCardResponse(BaseModel):
    """One ledger entry of a session detail.

    divination_card, exchange_price and stash_price are omitted from the
    JSON when they do not apply.
    """

    name: str
    count: int
    divination_card: Optional[DivinationCardResponse] = None
    exchange_price: Optional[CardPriceEntryResponse] = None
    stash_price: Optional[CardPriceEntryResponse] = None


class CardPriceResponse(BaseModel):
    """Snapshot price of one card."""

    chaos_value: float
    divine_value: float
    confidence: int


class ChannelPricesResponse(BaseModel):
    """Snapshot prices of one channel."""

    chaos_to_divine_ratio: float
    card_prices: dict[str, CardPriceResponse]


class PriceSnapshotResponse(BaseModel):
    """Price snapshot attached to a session."""

    id: Optional[str] = None
    fetched_at: datetime
    stacked_deck_chaos_cost: float
    exchange: ChannelPricesResponse
    stash: ChannelPricesResponse


class ChannelTotalsResponse(BaseModel):
    """Session value in one channel."""

    total_value: float
    net_profit: float
    chaos_to_divine_ratio: float


class SessionTotalsResponse(BaseModel):
    """Totals of a priced session."""

    exchange: ChannelTotalsResponse
    stash: ChannelTotalsResponse
    stacked_deck_chaos_cost: float
    total_deck_cost: float


class SessionDetailResponse(BaseModel):
    """Per-card breakdown of a session.

    price_snapshot and totals are omitted when the session has no snapshot.
    """

    total_count: int
    started_at: datetime
    ended_at: Optional[datetime] = None
    league: str
    cards: list[SessionCardResponse]
    price_snapshot: Optional[PriceSnapshotResponse] = None
    totals: Optional[SessionTotalsResponse] = None


class StatusResponse(BaseModel):
    """Server status response."""

    status: str
    version: str
    db_path: str
    schema_version: Optional[str] = None
    game: str
    session_count: int
