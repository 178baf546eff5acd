"""
SQLite State Store for the menu trainer.

Key-value persistence of the application state: one JSON blob per
namespace. The store also hosts the current state snapshot; every change is
a reducer applied through transition(), which writes through immediately.

Database location: ~/.menu_trainer/state.db (see Settings.data_dir)
"""

from __future__ import annotations

import json
import sqlite3
from collections.abc import Callable
from datetime import datetime
from pathlib import Path

from loguru import logger

from .profile import AppState

SCHEMA_VERSION = 1

# from_dict() raises these when a blob is valid JSON with the wrong shape
DECODE_ERRORS = (json.JSONDecodeError, KeyError, TypeError, ValueError, AttributeError)

# =============================================================================
# State Store
# =============================================================================


class StateStore:
    """
    SQLite-backed persistence for the application state.

    Handles:
    - Versioned JSON blob per namespace
    - Fallback to a fresh state when the stored blob is unreadable
    - Backup before reset, restore from backup
    """

    DEFAULT_DB_PATH = Path.home() / ".menu_trainer" / "state.db"
    DEFAULT_NAMESPACE = "mastros-menu-app-storage"

    def __init__(self, db_path: Path | None = None, namespace: str = DEFAULT_NAMESPACE):
        """
        Initialize the state store.

        Args:
            db_path: Custom database path (defaults to ~/.menu_trainer/state.db)
            namespace: Key of the state blob
        """
        self.db_path = db_path or self.DEFAULT_DB_PATH
        self.db_path.parent.mkdir(parents=True, exist_ok=True)
        self.namespace = namespace

        self._conn: sqlite3.Connection | None = None
        self._state: AppState | None = None
        self._init_schema()

        logger.info(f"StateStore initialized at {self.db_path}")

    @property
    def conn(self) -> sqlite3.Connection:
        """Get or create database connection."""
        if self._conn is None:
            self._conn = sqlite3.connect(str(self.db_path))
            self._conn.row_factory = sqlite3.Row
        return self._conn

    def _init_schema(self) -> None:
        """Initialize database schema."""
        cursor = self.conn.cursor()
        cursor.execute("""
            CREATE TABLE IF NOT EXISTS kv_store (
                key TEXT PRIMARY KEY,
                value TEXT NOT NULL,
                updated_at TIMESTAMP
            )
        """)
        self.conn.commit()

    # =========================================================================
    # Blob Operations
    # =========================================================================

    def load(self) -> AppState:
        """
        Read the stored state.

        Returns:
            Stored AppState, or a fresh one if nothing is stored or the blob
            cannot be decoded
        """
        cursor = self.conn.cursor()
        cursor.execute("SELECT value FROM kv_store WHERE key = ?", (self.namespace,))
        row = cursor.fetchone()

        if row is None:
            return AppState()

        try:
            payload = json.loads(row["value"])
            return AppState.from_dict(payload["state"])
        except DECODE_ERRORS as e:
            logger.warning(f"Stored state for {self.namespace!r} is unreadable, starting fresh: {e}")
            return AppState()

    def save(self, state: AppState) -> None:
        """Write the state blob."""
        payload = json.dumps({"version": SCHEMA_VERSION, "state": state.to_dict()})
        cursor = self.conn.cursor()
        cursor.execute(
            """
            INSERT INTO kv_store (key, value, updated_at) VALUES (?, ?, ?)
            ON CONFLICT(key) DO UPDATE SET
                value = excluded.value,
                updated_at = excluded.updated_at
        """,
            (self.namespace, payload, datetime.now().isoformat()),
        )
        self.conn.commit()
        self._state = state

    # =========================================================================
    # Snapshot & Transitions
    # =========================================================================

    @property
    def state(self) -> AppState:
        """Current state snapshot (loaded on first access)."""
        if self._state is None:
            self._state = self.load()
        return self._state

    def transition(self, reducer: Callable[..., AppState], *args, **kwargs) -> AppState:
        """
        Apply a reducer to the current state and persist the result.

        Args:
            reducer: Function (state, *args, **kwargs) -> AppState
            *args, **kwargs: Extra reducer arguments

        Returns:
            The new state
        """
        new_state = reducer(self.state, *args, **kwargs)
        if new_state is not self._state:
            self.save(new_state)
        return new_state

    # =========================================================================
    # Reset & Backup
    # =========================================================================

    @property
    def backup_dir(self) -> Path:
        return self.db_path.parent / "backups"

    def backup(self) -> Path:
        """Write the current state to a timestamped JSON file."""
        self.backup_dir.mkdir(exist_ok=True)
        timestamp = datetime.now().strftime("%Y%m%d_%H%M%S_%f")
        backup_file = self.backup_dir / f"progress_backup_{timestamp}.json"

        with open(backup_file, "w", encoding="utf-8") as f:
            json.dump(
                {
                    "timestamp": timestamp,
                    "namespace": self.namespace,
                    "version": SCHEMA_VERSION,
                    "state": self.state.to_dict(),
                },
                f,
                indent=2,
            )

        logger.info(f"Backup saved: {backup_file}")
        return backup_file

    def reset(self, backup: bool = True) -> Path | None:
        """
        Replace the stored state with a fresh one.

        Args:
            backup: Save the current state to a backup file first

        Returns:
            Backup file path, or None if no backup was written
        """
        backup_file = self.backup() if backup else None
        self.save(AppState())
        logger.info(f"Progress reset for {self.namespace!r}")
        return backup_file

    def list_backups(self) -> list[Path]:
        """Backup files, most recent first."""
        if not self.backup_dir.exists():
            return []
        return sorted(self.backup_dir.glob("progress_backup_*.json"), reverse=True)

    def restore(self, backup_file: Path | None = None) -> AppState | None:
        """
        Restore the state from a backup file.

        Args:
            backup_file: File to restore. If None, uses the most recent backup.

        Returns:
            The restored state, or None if no usable backup was found
        """
        if backup_file is None:
            backups = self.list_backups()
            if not backups:
                logger.warning("No backup files found")
                return None
            backup_file = backups[0]

        if not backup_file.exists():
            logger.warning(f"Backup file not found: {backup_file}")
            return None

        try:
            with open(backup_file, encoding="utf-8") as f:
                data = json.load(f)
            state = AppState.from_dict(data["state"])
        except DECODE_ERRORS as e:
            logger.warning(f"Backup {backup_file.name} is unreadable: {e}")
            return None

        self.save(state)
        logger.info(f"Restored state from {backup_file.name}")
        return state

    def close(self) -> None:
        """Close the database connection."""
        if self._conn:
            self._conn.close()
            self._conn = None
