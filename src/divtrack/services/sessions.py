"""Session services - list, search and detail views of farming sessions."""

import math
from typing import Optional

from divtrack.config.logging import get_logger
from divtrack.core.models import SessionDetail, SessionDetails, SessionsPage, SessionSummaryView
from divtrack.core.session_details import assemble_session_detail
from divtrack.core.valuation import resolve_summary
from divtrack.db.repository import Repository

logger = get_logger()


class SessionValuator:
    """Resolves aggregate metrics for sessions stored in the repository."""

    def __init__(self, repository: Repository) -> None:
        self.repository = repository

    def count_sessions(self, game: str) -> int:
        return self.repository.count_sessions(game)

    def list_sessions(self, game: str, limit: int, offset: int) -> list[SessionSummaryView]:
        """Resolved summaries for one page of sessions, newest first."""
        rows = self.repository.get_session_valuation_page(game, limit, offset)
        return [resolve_summary(row) for row in rows]

    def get_session_by_id(self, session_id: str) -> Optional[SessionDetails]:
        return self.repository.get_session(session_id)

    def search_sessions_by_card_name(
        self, game: str, card_name: str, limit: int, offset: int
    ) -> list[SessionSummaryView]:
        """Resolved summaries for sessions that produced a card matching card_name."""
        rows = self.repository.search_session_valuation_page(game, card_name, limit, offset)
        return [resolve_summary(row) for row in rows]

    def count_sessions_by_card_name(self, game: str, card_name: str) -> int:
        return self.repository.count_sessions_by_card_name(game, card_name)


class SessionDetailAssembler:
    """Builds the per-card breakdown of a single session."""

    def __init__(self, repository: Repository) -> None:
        self.repository = repository

    def assemble(self, session_id: str) -> Optional[SessionDetail]:
        """
        Assemble the detail view for a session.

        Args:
            session_id: Session to load

        Returns:
            SessionDetail, or None if the session does not exist
        """
        session = self.repository.get_session(session_id)
        if session is None:
            return None

        snapshot = None
        if session.snapshot_id:
            snapshot = self.repository.load_snapshot(session.snapshot_id)
            if snapshot is None:
                logger.warning(
                    f"Session {session_id} references missing snapshot {session.snapshot_id}, "
                    "showing cards without prices"
                )

        cards = self.repository.get_session_cards(session_id)
        logger.debug(f"Assembling session {session_id}: {len(cards)} cards")
        return assemble_session_detail(session, cards, snapshot)


def _page_count(total: int, page_size: int) -> int:
    if page_size <= 0:
        return 0
    return math.ceil(total / page_size)


class SessionsService:
    """Page-oriented entry point used by the API and CLI."""

    def __init__(self, repository: Repository) -> None:
        self.valuator = SessionValuator(repository)
        self.assembler = SessionDetailAssembler(repository)

    def list_sessions(self, game: str, page: int, page_size: int) -> SessionsPage:
        """Get one page of resolved session summaries."""
        offset = (page - 1) * page_size
        sessions = self.valuator.list_sessions(game, page_size, offset)
        total = self.valuator.count_sessions(game)
        return SessionsPage(
            sessions=sessions,
            total=total,
            page=page,
            page_size=page_size,
            total_pages=_page_count(total, page_size),
        )

    def get_session_detail(self, session_id: str) -> Optional[SessionDetail]:
        return self.assembler.assemble(session_id)

    def search_by_card(self, game: str, card_name: str, page: int, page_size: int) -> SessionsPage:
        """Get one page of sessions that produced a card matching card_name."""
        offset = (page - 1) * page_size
        sessions = self.valuator.search_sessions_by_card_name(game, card_name, page_size, offset)
        total = self.valuator.count_sessions_by_card_name(game, card_name)
        return SessionsPage(
            sessions=sessions,
            total=total,
            page=page,
            page_size=page_size,
            total_pages=_page_count(total, page_size),
        )
