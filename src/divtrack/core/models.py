"""Core domain models - dataclasses with no I/O dependencies."""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Optional

GAMES = ("poe1", "poe2")

# Rarity used when a league has no rarity data for a card
DEFAULT_CARD_RARITY = 4


class PriceChannel(Enum):
    """Market a card price was taken from."""

    EXCHANGE = "exchange"
    STASH = "stash"


@dataclass
class League:
    """A game league that sessions and snapshots belong to."""

    id: Optional[str]  # None until persisted
    game: str
    name: str
    start_date: Optional[str] = None
    end_date: Optional[str] = None


# --- Price snapshots ---


@dataclass(frozen=True)
class CardPrice:
    """Price of one card in one channel."""

    chaos_value: float
    divine_value: float
    confidence: int = 1  # 1=high, 2=medium, 3=low


@dataclass(frozen=True)
class ChannelPrices:
    """All card prices for one channel of a snapshot."""

    chaos_to_divine_ratio: float
    card_prices: dict[str, CardPrice] = field(default_factory=dict)

    def get(self, card_name: str) -> Optional[CardPrice]:
        return self.card_prices.get(card_name)


@dataclass(frozen=True)
class PriceSnapshot:
    """Immutable point-in-time price table for a league."""

    id: Optional[str]
    league_id: str
    fetched_at: datetime
    exchange: ChannelPrices
    stash: ChannelPrices
    deck_cost: float = 0.0  # Chaos cost of one stacked deck

    def channel(self, channel: PriceChannel) -> ChannelPrices:
        if channel is PriceChannel.EXCHANGE:
            return self.exchange
        return self.stash


# --- Sessions ---


@dataclass
class Session:
    """A recorded interval of card-opening activity in one league."""

    id: Optional[str]  # None until persisted
    game: str
    league_id: str
    started_at: datetime
    ended_at: Optional[datetime] = None
    total_count: int = 0  # Decks opened
    is_active: bool = False
    snapshot_id: Optional[str] = None


@dataclass
class SessionDetails:
    """Raw session fields plus the league name, before any valuation."""

    id: str
    game: str
    league_id: str
    league: str
    snapshot_id: Optional[str]
    started_at: datetime
    ended_at: Optional[datetime]
    total_count: int
    is_active: bool


@dataclass
class DivinationCardInfo:
    """Divination card metadata attached to a ledger entry."""

    id: str
    stack_size: int
    description: str
    reward_html: str
    art_src: str
    flavour_html: Optional[str]
    rarity: int = DEFAULT_CARD_RARITY


@dataclass
class DivinationCard:
    """Divination card catalog row."""

    id: str
    name: str
    game: str
    stack_size: int
    description: str
    reward_html: str
    art_src: str
    flavour_html: Optional[str] = None
    from_boss: bool = False


@dataclass
class SessionCard:
    """Ledger entry: how many of a card a session produced."""

    card_name: str
    count: int
    hide_price_exchange: bool = False
    hide_price_stash: bool = False
    divination_card: Optional[DivinationCardInfo] = None  # None = no catalog entry

    def is_hidden(self, channel: PriceChannel) -> bool:
        if channel is PriceChannel.EXCHANGE:
            return self.hide_price_exchange
        return self.hide_price_stash


@dataclass
class SessionSummaryCache:
    """Precomputed session aggregates. Any metric may be None."""

    session_id: str
    game: Optional[str] = None
    league: Optional[str] = None
    started_at: Optional[datetime] = None
    ended_at: Optional[datetime] = None
    duration_minutes: Optional[int] = None
    total_decks_opened: Optional[int] = None
    total_exchange_value: Optional[float] = None
    total_stash_value: Optional[float] = None
    total_exchange_net_profit: Optional[float] = None
    total_stash_net_profit: Optional[float] = None
    exchange_chaos_to_divine: Optional[float] = None
    stash_chaos_to_divine: Optional[float] = None
    stacked_deck_chaos_cost: Optional[float] = None


@dataclass
class SessionValuationInput:
    """Everything needed to resolve one session's aggregate metrics.

    Live values are computed by the storage layer from the ledger and the
    attached snapshot. Snapshot fields are None when the session has no
    (loadable) snapshot.
    """

    session_id: str
    game: str
    league: str
    started_at: datetime
    ended_at: Optional[datetime]
    is_active: bool
    total_count: int
    live_exchange_value: float
    live_stash_value: float
    snapshot_deck_cost: Optional[float] = None
    snapshot_exchange_chaos_to_divine: Optional[float] = None
    snapshot_stash_chaos_to_divine: Optional[float] = None
    summary: Optional[SessionSummaryCache] = None


@dataclass
class SessionSummaryView:
    """Resolved aggregate metrics for one session (list/search rows)."""

    session_id: str
    game: str
    league: str
    started_at: datetime
    ended_at: Optional[datetime]
    is_active: bool
    duration_minutes: Optional[int]
    total_decks_opened: int
    total_exchange_value: float
    total_stash_value: float
    total_exchange_net_profit: float
    total_stash_net_profit: float
    exchange_chaos_to_divine: float
    stash_chaos_to_divine: float
    stacked_deck_chaos_cost: float


@dataclass
class SessionsPage:
    """One page of session summaries."""

    sessions: list[SessionSummaryView]
    total: int
    page: int
    page_size: int
    total_pages: int


# --- Session detail breakdown ---


@dataclass
class CardPriceEntry:
    """Price of a ledger entry in one channel."""

    chaos_value: float
    divine_value: float
    total_value: float
    hide_price: bool


@dataclass
class SessionCardEntry:
    """Per-card row of a session detail. None fields are absent, not zero."""

    name: str
    count: int
    divination_card: Optional[DivinationCardInfo] = None
    exchange_price: Optional[CardPriceEntry] = None
    stash_price: Optional[CardPriceEntry] = None


@dataclass
class ChannelTotals:
    """Aggregate value of a session in one channel."""

    total_value: float
    net_profit: float
    chaos_to_divine_ratio: float


@dataclass
class SessionTotals:
    """Totals block of a priced session detail."""

    exchange: ChannelTotals
    stash: ChannelTotals
    stacked_deck_chaos_cost: float
    total_deck_cost: float


@dataclass
class SessionDetail:
    """Full per-card breakdown of one session."""

    total_count: int
    started_at: datetime
    ended_at: Optional[datetime]
    league: str
    cards: list[SessionCardEntry]
    price_snapshot: Optional[PriceSnapshot] = None
    totals: Optional[SessionTotals] = None
