"""Configuration and settings management."""

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

from divtrack.core.models import GAMES

DB_FILE_NAME = "divtrack.db"

DEFAULT_GAME = "poe1"
DEFAULT_PAGE_SIZE = 20
MAX_PAGE_SIZE = 100


def get_default_db_path() -> Path:
    """
    Get the default database path.

    Uses %LOCALAPPDATA%/DivTrack/divtrack.db on Windows.
    """
    local_app_data = os.environ.get("LOCALAPPDATA")
    if local_app_data:
        return Path(local_app_data) / "DivTrack" / DB_FILE_NAME
    # Fallback
    return Path.home() / ".divtrack" / DB_FILE_NAME


def get_portable_db_path() -> Path:
    """
    Get the portable database path (beside executable).

    Returns:
        Path to data/divtrack.db in current directory
    """
    return Path.cwd() / "data" / DB_FILE_NAME


@dataclass
class Settings:
    """Application settings."""

    # Path to database file
    db_path: Path = field(default_factory=get_default_db_path)

    # Use portable mode (data beside exe)
    portable: bool = False

    # JSON seed file imported by `init --seed`
    seed_file: Optional[Path] = None

    # Game used when a command does not name one
    game: str = DEFAULT_GAME

    # Sessions per page for list/search output
    page_size: int = DEFAULT_PAGE_SIZE

    # Page number for list/search output, starting at 1
    page: int = 1

    def __post_init__(self) -> None:
        """Apply portable mode if enabled."""
        if self.portable:
            self.db_path = get_portable_db_path()

    @classmethod
    def from_args(
        cls,
        db_path: Optional[str] = None,
        portable: bool = False,
        seed_file: Optional[str] = None,
        game: Optional[str] = None,
        page_size: Optional[int] = None,
        page: Optional[int] = None,
    ) -> "Settings":
        """
        Create settings from CLI arguments.

        Args:
            db_path: Override database path
            portable: Use portable mode
            seed_file: Path to JSON seed file
            game: Game identifier ("poe1" or "poe2")
            page_size: Sessions per page
            page: Page number, starting at 1
        """
        return cls(
            db_path=Path(db_path) if db_path else get_default_db_path(),
            portable=portable,
            seed_file=Path(seed_file) if seed_file else None,
            game=game or DEFAULT_GAME,
            page_size=page_size if page_size is not None else DEFAULT_PAGE_SIZE,
            page=page if page is not None else 1,
        )

    def validate(self) -> list[str]:
        """
        Validate settings.

        Returns:
            List of error messages (empty if valid)
        """
        errors = []

        if self.seed_file and not self.seed_file.exists():
            errors.append(f"Seed file not found: {self.seed_file}")

        if self.game not in GAMES:
            errors.append(f"Unknown game: {self.game} (expected one of {', '.join(GAMES)})")

        if self.page_size < 1 or self.page_size > MAX_PAGE_SIZE:
            errors.append(f"Page size must be between 1 and {MAX_PAGE_SIZE}")

        if self.page < 1:
            errors.append("Page must be 1 or greater")

        return errors
