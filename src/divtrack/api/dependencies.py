"""FastAPI dependency injection utilities.

Provides shared dependencies for API routes, configured by app factory.
"""

from divtrack.config.preferences import Preferences
from divtrack.db.repository import Repository


def get_repository() -> Repository:
    """Dependency injection for repository - set by app factory.

    This function is replaced by app.py's create_app() with an actual
    repository instance via dependency_overrides.

    Raises:
        NotImplementedError: If not configured
    """
    raise NotImplementedError("Repository not configured")


def get_preferences() -> Preferences:
    """Dependency injection for user preferences - set by app factory.

    Raises:
        NotImplementedError: If not configured
    """
    raise NotImplementedError("Preferences not configured")
