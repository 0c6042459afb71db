"""Sessions API routes."""

from dataclasses import asdict
from typing import Literal, Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from fastapi.responses import Response

from divtrack.api.dependencies import get_preferences, get_repository
from divtrack.api.schemas import (
    CardPriceEntryResponse,
    CardPriceResponse,
    ChannelPricesResponse,
    ChannelTotalsResponse,
    DivinationCardResponse,
    PriceSnapshotResponse,
    SessionCardResponse,
    SessionDetailResponse,
    SessionListResponse,
    SessionSummaryResponse,
    SessionTotalsResponse,
)
from divtrack.config.preferences import Preferences
from divtrack.config.settings import MAX_PAGE_SIZE
from divtrack.core.export import build_session_csv
from divtrack.core.models import (
    CardPriceEntry,
    ChannelPrices,
    ChannelTotals,
    PriceSnapshot,
    SessionCardEntry,
    SessionDetail,
    SessionsPage,
)
from divtrack.db.repository import Repository
from divtrack.services.sessions import SessionsService

router = APIRouter(prefix="/api/sessions", tags=["sessions"])

Game = Literal["poe1", "poe2"]


def _page_to_response(page: SessionsPage) -> SessionListResponse:
    return SessionListResponse(
        sessions=[SessionSummaryResponse(**asdict(s)) for s in page.sessions],
        total=page.total,
        page=page.page,
        page_size=page.page_size,
        total_pages=page.total_pages,
    )


def _price_entry_to_response(entry: CardPriceEntry) -> CardPriceEntryResponse:
    return CardPriceEntryResponse(
        chaos_value=entry.chaos_value,
        divine_value=entry.divine_value,
        total_value=entry.total_value,
        hide_price=entry.hide_price,
    )


def _card_to_response(card: SessionCardEntry) -> SessionCardResponse:
    # Only set the optional blocks that apply so exclude_unset drops the rest
    fields: dict = {"name": card.name, "count": card.count}
    if card.divination_card is not None:
        info = card.divination_card
        fields["divination_card"] = DivinationCardResponse(
            id=info.id,
            stack_size=info.stack_size,
            description=info.description,
            reward_html=info.reward_html,
            art_src=info.art_src,
            flavour_html=info.flavour_html or "",
            rarity=info.rarity,
        )
    if card.exchange_price is not None:
        fields["exchange_price"] = _price_entry_to_response(card.exchange_price)
    if card.stash_price is not None:
        fields["stash_price"] = _price_entry_to_response(card.stash_price)
    return SessionCardResponse(**fields)


def _channel_prices_to_response(prices: ChannelPrices) -> ChannelPricesResponse:
    return ChannelPricesResponse(
        chaos_to_divine_ratio=prices.chaos_to_divine_ratio,
        card_prices={
            name: CardPriceResponse(
                chaos_value=price.chaos_value,
                divine_value=price.divine_value,
                confidence=price.confidence,
            )
            for name, price in prices.card_prices.items()
        },
    )


def _snapshot_to_response(snapshot: PriceSnapshot) -> PriceSnapshotResponse:
    return PriceSnapshotResponse(
        id=snapshot.id,
        fetched_at=snapshot.fetched_at,
        stacked_deck_chaos_cost=snapshot.deck_cost,
        exchange=_channel_prices_to_response(snapshot.exchange),
        stash=_channel_prices_to_response(snapshot.stash),
    )


def _channel_totals_to_response(totals: ChannelTotals) -> ChannelTotalsResponse:
    return ChannelTotalsResponse(
        total_value=totals.total_value,
        net_profit=totals.net_profit,
        chaos_to_divine_ratio=totals.chaos_to_divine_ratio,
    )


def _detail_to_response(detail: SessionDetail) -> SessionDetailResponse:
    fields: dict = {
        "total_count": detail.total_count,
        "started_at": detail.started_at,
        "ended_at": detail.ended_at,
        "league": detail.league,
        "cards": [_card_to_response(card) for card in detail.cards],
    }
    if detail.price_snapshot is not None:
        fields["price_snapshot"] = _snapshot_to_response(detail.price_snapshot)
    if detail.totals is not None:
        fields["totals"] = SessionTotalsResponse(
            exchange=_channel_totals_to_response(detail.totals.exchange),
            stash=_channel_totals_to_response(detail.totals.stash),
            stacked_deck_chaos_cost=detail.totals.stacked_deck_chaos_cost,
            total_deck_cost=detail.totals.total_deck_cost,
        )
    return SessionDetailResponse(**fields)


@router.get("", response_model=SessionListResponse)
def list_sessions(
    game: Optional[Game] = None,
    page: int = Query(1, ge=1),
    page_size: Optional[int] = Query(None, ge=1, le=MAX_PAGE_SIZE),
    repo: Repository = Depends(get_repository),
    prefs: Preferences = Depends(get_preferences),
) -> SessionListResponse:
    """List sessions newest first with resolved totals and net profit."""
    service = SessionsService(repo)
    result = service.list_sessions(
        game or prefs.selected_game,
        page,
        page_size or prefs.sessions_page_size,
    )
    return _page_to_response(result)


@router.get("/search", response_model=SessionListResponse)
def search_sessions(
    card_name: str = Query(..., min_length=1),
    game: Optional[Game] = None,
    page: int = Query(1, ge=1),
    page_size: Optional[int] = Query(None, ge=1, le=MAX_PAGE_SIZE),
    repo: Repository = Depends(get_repository),
    prefs: Preferences = Depends(get_preferences),
) -> SessionListResponse:
    """Find sessions that produced a card whose name contains card_name (case-sensitive)."""
    service = SessionsService(repo)
    result = service.search_by_card(
        game or prefs.selected_game,
        card_name,
        page,
        page_size or prefs.sessions_page_size,
    )
    return _page_to_response(result)


@router.get(
    "/{session_id}",
    response_model=SessionDetailResponse,
    response_model_exclude_unset=True,
)
def get_session(
    session_id: str,
    repo: Repository = Depends(get_repository),
) -> SessionDetailResponse:
    """Get the per-card breakdown of a session."""
    detail = SessionsService(repo).get_session_detail(session_id)
    if detail is None:
        raise HTTPException(status_code=404, detail="Session not found")
    return _detail_to_response(detail)


@router.get("/{session_id}/csv")
def export_session_csv(
    session_id: str,
    repo: Repository = Depends(get_repository),
) -> Response:
    """Export the per-card breakdown of a session as a CSV file."""
    detail = SessionsService(repo).get_session_detail(session_id)
    if detail is None:
        raise HTTPException(status_code=404, detail="Session not found")

    filename = f"divtrack-session-{session_id}.csv"
    return Response(
        content=build_session_csv(detail),
        media_type="text/csv",
        headers={
            "Content-Disposition": f'attachment; filename="{filename}"',
        },
    )
