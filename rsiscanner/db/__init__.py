"""SQLite persistence for user settings."""

from rsiscanner.db.store import SettingsStore

__all__ = ["SettingsStore"]
