"""FastAPI application factory."""

from typing import Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from divtrack.api import dependencies
from divtrack.api.routes import sessions
from divtrack.api.schemas import StatusResponse
from divtrack.config.preferences import Preferences, load_preferences
from divtrack.db.connection import Database
from divtrack.db.repository import Repository
from divtrack.version import __version__


def create_app(db: Database, preferences: Optional[Preferences] = None) -> FastAPI:
    """
    Create and configure the FastAPI application.

    Args:
        db: Connected database
        preferences: Query defaults (loaded from the preferences file if None)

    Returns:
        Configured FastAPI application
    """
    app = FastAPI(
        title="DivTrack API",
        description="Divination card farming session tracker API",
        version=__version__,
    )

    # CORS middleware for local development
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    repo = Repository(db)
    prefs = preferences if preferences is not None else load_preferences()

    def get_repository() -> Repository:
        return repo

    def get_preferences() -> Preferences:
        return prefs

    app.dependency_overrides[dependencies.get_repository] = get_repository
    app.dependency_overrides[dependencies.get_preferences] = get_preferences

    app.include_router(sessions.router)

    app.state.db = db
    app.state.repo = repo
    app.state.preferences = prefs

    @app.get("/api/status", response_model=StatusResponse, tags=["status"])
    def get_status() -> StatusResponse:
        """Get server status."""
        return StatusResponse(
            status="ok",
            version=__version__,
            db_path=str(db.db_path),
            schema_version=repo.get_setting("schema_version"),
            game=prefs.selected_game,
            session_count=repo.count_sessions(prefs.selected_game),
        )

    return app
