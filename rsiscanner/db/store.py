"""SQLite key-value store for scanner settings."""

import json
import logging
import sqlite3
from pathlib import Path
from typing import Any, Optional

logger = logging.getLogger(__name__)


class SettingsStore:
    """SQLite-backed store of JSON blobs keyed by name.

    Values are stored as JSON text. A value that cannot be decoded is
    treated as absent, so readers always fall back to their default.
    """

    REQUIRED_TABLES = ["settings"]

    def __init__(self, db_path: Path):
        """Initialize the settings store.

        Args:
            db_path: Path to the SQLite database file.
        """
        self.db_path = db_path
        self._ensure_db_dir()
        self._init_schema()

    def _ensure_db_dir(self) -> None:
        """Ensure the database directory exists."""
        self.db_path.parent.mkdir(parents=True, exist_ok=True)

    def _get_connection(self) -> sqlite3.Connection:
        """Get a database connection."""
        conn = sqlite3.connect(self.db_path)
        conn.row_factory = sqlite3.Row
        return conn

    def _init_schema(self) -> None:
        """Initialize database schema on first run."""
        conn = self._get_connection()
        try:
            cursor = conn.cursor()
            cursor.execute("""
                CREATE TABLE IF NOT EXISTS settings (
                    key TEXT PRIMARY KEY,
                    value TEXT NOT NULL
                )
            """)
            conn.commit()
        finally:
            conn.close()

    def get_tables(self) -> list[str]:
        """Get list of all tables in the database."""
        conn = self._get_connection()
        try:
            cursor = conn.cursor()
            cursor.execute(
                "SELECT name FROM sqlite_master WHERE type='table' AND name NOT LIKE 'sqlite_%'"
            )
            return [row["name"] for row in cursor.fetchall()]
        finally:
            conn.close()

    def get_raw(self, key: str) -> Optional[str]:
        """Get the stored text for a key, or None if missing."""
        conn = self._get_connection()
        try:
            cursor = conn.cursor()
            cursor.execute("SELECT value FROM settings WHERE key = ?", (key,))
            row = cursor.fetchone()
            return row["value"] if row else None
        finally:
            conn.close()

    def set_raw(self, key: str, value: str) -> None:
        """Store text for a key as-is, replacing any existing value."""
        conn = self._get_connection()
        try:
            cursor = conn.cursor()
            cursor.execute(
                "INSERT OR REPLACE INTO settings (key, value) VALUES (?, ?)",
                (key, value),
            )
            conn.commit()
        finally:
            conn.close()

    def get_json(self, key: str, default: Any = None) -> Any:
        """Get a decoded JSON value.

        Args:
            key: Setting name.
            default: Returned when the key is missing or malformed.

        Returns:
            The decoded value, or default.
        """
        raw = self.get_raw(key)
        if raw is None:
            return default
        try:
            return json.loads(raw)
        except json.JSONDecodeError:
            logger.warning("Ignoring malformed value for setting %r", key)
            return default

    def set_json(self, key: str, value: Any) -> None:
        """Store a value as JSON."""
        self.set_raw(key, json.dumps(value))

    def delete(self, key: str) -> None:
        """Remove a key. Missing keys are ignored."""
        conn = self._get_connection()
        try:
            cursor = conn.cursor()
            cursor.execute("DELETE FROM settings WHERE key = ?", (key,))
            conn.commit()
        finally:
            conn.close()

    def keys(self) -> list[str]:
        """Get all stored keys, sorted."""
        conn = self._get_connection()
        try:
            cursor = conn.cursor()
            cursor.execute("SELECT key FROM settings ORDER BY key")
            return [row["key"] for row in cursor.fetchall()]
        finally:
            conn.close()
