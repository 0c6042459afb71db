"""Database schema - DDL statements for SQLite."""

SCHEMA_VERSION = 4  # Bumped for snapshot deck cost and summary net profit

# Settings table - key/value configuration
CREATE_SETTINGS = """
CREATE TABLE IF NOT EXISTS settings (
    key TEXT PRIMARY KEY,
    value TEXT NOT NULL,
    updated_at TEXT NOT NULL DEFAULT (datetime('now'))
)
"""

# Leagues - one row per (game, league name)
CREATE_LEAGUES = """
CREATE TABLE IF NOT EXISTS leagues (
    id TEXT PRIMARY KEY,
    name TEXT NOT NULL,
    game TEXT NOT NULL,
    start_date TEXT,
    end_date TEXT,
    created_at TEXT NOT NULL DEFAULT (datetime('now')),
    UNIQUE(game, name)
)
"""

# Price snapshots - reusable across sessions, immutable once written
CREATE_SNAPSHOTS = """
CREATE TABLE IF NOT EXISTS snapshots (
    id TEXT PRIMARY KEY,
    league_id TEXT NOT NULL,
    fetched_at TEXT NOT NULL,
    exchange_chaos_to_divine REAL NOT NULL,
    stash_chaos_to_divine REAL NOT NULL,
    stacked_deck_chaos_cost REAL NOT NULL DEFAULT 0,
    created_at TEXT NOT NULL DEFAULT (datetime('now')),
    FOREIGN KEY (league_id) REFERENCES leagues(id) ON DELETE CASCADE
)
"""

CREATE_SNAPSHOTS_INDEX = """
CREATE INDEX IF NOT EXISTS idx_snapshots_league_fetched ON snapshots(league_id, fetched_at DESC)
"""

# Snapshot card prices - one row per (snapshot, card, channel)
CREATE_SNAPSHOT_CARD_PRICES = """
CREATE TABLE IF NOT EXISTS snapshot_card_prices (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    snapshot_id TEXT NOT NULL,
    card_name TEXT NOT NULL,
    price_source TEXT NOT NULL CHECK(price_source IN ('exchange', 'stash')),
    chaos_value REAL NOT NULL,
    divine_value REAL NOT NULL,
    confidence INTEGER NOT NULL DEFAULT 1 CHECK(confidence IN (1, 2, 3)),
    FOREIGN KEY (snapshot_id) REFERENCES snapshots(id) ON DELETE CASCADE,
    UNIQUE(snapshot_id, card_name, price_source)
)
"""

CREATE_SNAPSHOT_CARD_PRICES_INDEX = """
CREATE INDEX IF NOT EXISTS idx_snapshot_prices_snapshot ON snapshot_card_prices(snapshot_id)
"""

# Sessions - farming sessions
CREATE_SESSIONS = """
CREATE TABLE IF NOT EXISTS sessions (
    id TEXT PRIMARY KEY,
    game TEXT NOT NULL,
    league_id TEXT NOT NULL,
    snapshot_id TEXT,
    started_at TEXT NOT NULL,
    ended_at TEXT,
    total_count INTEGER NOT NULL DEFAULT 0,
    is_active INTEGER NOT NULL DEFAULT 0,
    created_at TEXT NOT NULL DEFAULT (datetime('now')),
    FOREIGN KEY (league_id) REFERENCES leagues(id) ON DELETE CASCADE,
    FOREIGN KEY (snapshot_id) REFERENCES snapshots(id) ON DELETE SET NULL
)
"""

CREATE_SESSIONS_GAME_INDEX = """
CREATE INDEX IF NOT EXISTS idx_sessions_game ON sessions(game)
"""

CREATE_SESSIONS_STARTED_INDEX = """
CREATE INDEX IF NOT EXISTS idx_sessions_started ON sessions(started_at DESC)
"""

# Session cards - the per-session card ledger
CREATE_SESSION_CARDS = """
CREATE TABLE IF NOT EXISTS session_cards (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    session_id TEXT NOT NULL,
    card_name TEXT NOT NULL,
    count INTEGER NOT NULL DEFAULT 0,
    hide_price_exchange INTEGER NOT NULL DEFAULT 0,
    hide_price_stash INTEGER NOT NULL DEFAULT 0,
    first_seen_at TEXT NOT NULL DEFAULT (datetime('now')),
    last_seen_at TEXT NOT NULL DEFAULT (datetime('now')),
    FOREIGN KEY (session_id) REFERENCES sessions(id) ON DELETE CASCADE,
    UNIQUE(session_id, card_name)
)
"""

CREATE_SESSION_CARDS_SESSION_INDEX = """
CREATE INDEX IF NOT EXISTS idx_session_cards_session ON session_cards(session_id)
"""

CREATE_SESSION_CARDS_NAME_INDEX = """
CREATE INDEX IF NOT EXISTS idx_session_cards_name ON session_cards(card_name)
"""

# Session summaries - precomputed aggregates (any metric may be NULL)
CREATE_SESSION_SUMMARIES = """
CREATE TABLE IF NOT EXISTS session_summaries (
    session_id TEXT PRIMARY KEY,
    game TEXT,
    league TEXT,
    started_at TEXT,
    ended_at TEXT,
    duration_minutes INTEGER,
    total_decks_opened INTEGER,
    total_exchange_value REAL,
    total_stash_value REAL,
    exchange_chaos_to_divine REAL,
    stash_chaos_to_divine REAL,
    stacked_deck_chaos_cost REAL,
    total_exchange_net_profit REAL,
    total_stash_net_profit REAL,
    created_at TEXT NOT NULL DEFAULT (datetime('now')),
    FOREIGN KEY (session_id) REFERENCES sessions(id) ON DELETE CASCADE
)
"""

# Divination cards - static reference data
CREATE_DIVINATION_CARDS = """
CREATE TABLE IF NOT EXISTS divination_cards (
    id TEXT PRIMARY KEY,
    name TEXT NOT NULL,
    stack_size INTEGER NOT NULL,
    description TEXT NOT NULL,
    reward_html TEXT NOT NULL,
    art_src TEXT NOT NULL,
    flavour_html TEXT,
    game TEXT NOT NULL CHECK(game IN ('poe1', 'poe2')),
    from_boss INTEGER NOT NULL DEFAULT 0 CHECK(from_boss IN (0, 1)),
    created_at TEXT NOT NULL DEFAULT (datetime('now')),
    updated_at TEXT NOT NULL DEFAULT (datetime('now')),
    UNIQUE(game, name)
)
"""

# Divination card rarities - league-specific
CREATE_DIVINATION_CARD_RARITIES = """
CREATE TABLE IF NOT EXISTS divination_card_rarities (
    game TEXT NOT NULL,
    league TEXT NOT NULL,
    card_name TEXT NOT NULL,
    rarity INTEGER NOT NULL CHECK(rarity >= 0 AND rarity <= 4),
    last_updated TEXT NOT NULL DEFAULT (datetime('now')),
    PRIMARY KEY (game, league, card_name)
)
"""

ALL_CREATE_STATEMENTS = [
    CREATE_SETTINGS,
    CREATE_LEAGUES,
    CREATE_SNAPSHOTS,
    CREATE_SNAPSHOTS_INDEX,
    CREATE_SNAPSHOT_CARD_PRICES,
    CREATE_SNAPSHOT_CARD_PRICES_INDEX,
    CREATE_SESSIONS,
    CREATE_SESSIONS_GAME_INDEX,
    CREATE_SESSIONS_STARTED_INDEX,
    CREATE_SESSION_CARDS,
    CREATE_SESSION_CARDS_SESSION_INDEX,
    CREATE_SESSION_CARDS_NAME_INDEX,
    CREATE_SESSION_SUMMARIES,
    CREATE_DIVINATION_CARDS,
    CREATE_DIVINATION_CARD_RARITIES,
]
