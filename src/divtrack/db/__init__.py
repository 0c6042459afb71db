"""SQLite storage layer."""
