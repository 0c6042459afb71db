"""User preferences management - stored as JSON file."""

import json
from dataclasses import asdict, dataclass
from pathlib import Path
from typing import Any, Optional

from divtrack.config.paths import get_data_dir
from divtrack.config.settings import DEFAULT_GAME, DEFAULT_PAGE_SIZE

PREFS_FILENAME = "preferences.json"


@dataclass
class Preferences:
    """User preferences with defaults."""
    selected_game: str = DEFAULT_GAME
    sessions_page_size: int = DEFAULT_PAGE_SIZE


def get_prefs_path(data_dir: Optional[Path] = None) -> Path:
    """Get the path to the preferences file."""
    return (data_dir or get_data_dir()) / PREFS_FILENAME


def load_preferences(data_dir: Optional[Path] = None) -> Preferences:
    """Load preferences from file, returning defaults if not found."""
    prefs_path = get_prefs_path(data_dir)

    if prefs_path.exists():
        try:
            with open(prefs_path, "r", encoding="utf-8") as f:
                data = json.load(f)
            return Preferences(
                selected_game=data.get("selected_game", DEFAULT_GAME),
                sessions_page_size=int(data.get("sessions_page_size", DEFAULT_PAGE_SIZE)),
            )
        except (json.JSONDecodeError, IOError, ValueError):
            pass

    return Preferences()


def save_preferences(prefs: Preferences, data_dir: Optional[Path] = None) -> bool:
    """Save preferences to file."""
    prefs_path = get_prefs_path(data_dir)

    try:
        prefs_path.parent.mkdir(parents=True, exist_ok=True)
        with open(prefs_path, "w", encoding="utf-8") as f:
            json.dump(asdict(prefs), f, indent=2, ensure_ascii=False)
        return True
    except IOError:
        return False


def update_preference(key: str, value: Any, data_dir: Optional[Path] = None) -> bool:
    """Update a single preference and save."""
    prefs = load_preferences(data_dir)

    if hasattr(prefs, key):
        setattr(prefs, key, value)
        return save_preferences(prefs, data_dir)

    return False
