# =============================================================================
# publi_core/offline/local_database.py
# Local SQLite Key-Value Slots
# =============================================================================
"""
LocalDatabase - SQLite-backed durable key-value slots.

Features:
- Automatic schema creation
- One row per named slot, replaced whole on every write
- Per-slot size quota
- Thread-local connections
"""

from __future__ import annotations
import sqlite3
import threading
from contextlib import contextmanager
from datetime import datetime
from pathlib import Path
from typing import List, Optional
import logging

from publi_core.errors import StorageQuotaError

logger = logging.getLogger(__name__)


class LocalDatabase:
    """
    Durable named slots holding serialized text.

    Usage:
        db = LocalDatabase(Path("local_data/publimanager.db"))
        db.initialize()
        db.set_value("publimanager_data_v2", payload)
    """

    DEFAULT_QUOTA_BYTES = 5 * 1024 * 1024

    SCHEMA = """
        CREATE TABLE IF NOT EXISTS local_storage (
            key TEXT PRIMARY KEY,
            value TEXT NOT NULL,
            updated_at TEXT DEFAULT CURRENT_TIMESTAMP
        )
    """

    def __init__(self, db_path: Path, quota_bytes: Optional[int] = None):
        """
        Initialize local database.

        Args:
            db_path: Path to SQLite database file
            quota_bytes: Maximum encoded size of a single slot value
        """
        self.db_path = Path(db_path)
        self.quota_bytes = quota_bytes or self.DEFAULT_QUOTA_BYTES
        self._ensure_directory()
        self._local = threading.local()
        self._initialized = False

    def _ensure_directory(self) -> None:
        self.db_path.parent.mkdir(parents=True, exist_ok=True)

    def _get_connection(self) -> sqlite3.Connection:
        """Get thread-local database connection."""
        if not hasattr(self._local, 'connection') or self._local.connection is None:
            self._local.connection = sqlite3.connect(
                str(self.db_path),
                check_same_thread=False,
            )
            self._local.connection.row_factory = sqlite3.Row
        return self._local.connection

    @contextmanager
    def transaction(self):
        """Context manager for database transactions."""
        conn = self._get_connection()
        try:
            yield conn
            conn.commit()
        except Exception:
            conn.rollback()
            raise

    def initialize(self) -> None:
        """Initialize database schema."""
        if self._initialized:
            return

        with self.transaction() as conn:
            conn.execute(self.SCHEMA)

        self._initialized = True
        logger.info(f"Local database initialized at: {self.db_path}")

    def get_value(self, key: str) -> Optional[str]:
        """Read a slot; None when it was never written."""
        self.initialize()
        row = self._get_connection().execute(
            "SELECT value FROM local_storage WHERE key = ?",
            [key]
        ).fetchone()
        return row["value"] if row else None

    def set_value(self, key: str, value: str) -> None:
        """
        Replace a slot in a single transaction.

        Raises:
            StorageQuotaError: If the encoded value exceeds the quota
            sqlite3.Error: If the write fails
        """
        size = len(value.encode("utf-8"))
        if size > self.quota_bytes:
            raise StorageQuotaError(
                f"Slot '{key}' would hold {size} bytes, quota is {self.quota_bytes}",
                size_bytes=size,
                quota_bytes=self.quota_bytes,
            )

        self.initialize()
        with self.transaction() as conn:
            conn.execute(
                """
                INSERT INTO local_storage (key, value, updated_at)
                VALUES (?, ?, ?)
                ON CONFLICT(key) DO UPDATE
                SET value = excluded.value, updated_at = excluded.updated_at
                """,
                [key, value, datetime.now().isoformat()]
            )

    def keys(self) -> List[str]:
        self.initialize()
        rows = self._get_connection().execute(
            "SELECT key FROM local_storage ORDER BY key"
        ).fetchall()
        return [row["key"] for row in rows]

    def close(self) -> None:
        """Close database connection."""
        if hasattr(self._local, 'connection') and self._local.connection:
            self._local.connection.close()
            self._local.connection = None
