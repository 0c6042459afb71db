"""Configuration, paths, preferences and logging."""
