# =============================================================================
# publi_core/server/storage.py
# Single-Row SQLite Storage for the Remote Document
# =============================================================================
"""
The remote side keeps exactly one row: the whole serialized document plus
the time it was last replaced. Every write is an upsert of row ``id = 1``;
there is no versioning, so concurrent writers simply overwrite each other.
"""

from __future__ import annotations
import json
import sqlite3
import threading
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, Optional
import logging

logger = logging.getLogger(__name__)


class DocumentRowStorage:
    """Persistence of the remote singleton document."""

    SCHEMA = """
        CREATE TABLE IF NOT EXISTS application_data (
            id INTEGER PRIMARY KEY CHECK (id = 1),
            data TEXT NOT NULL,
            updated_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
        )
    """

    def __init__(self, db_path: Path):
        self.db_path = Path(db_path)
        self.db_path.parent.mkdir(parents=True, exist_ok=True)
        self._lock = threading.Lock()
        self._initialized = False

    def _connect(self) -> sqlite3.Connection:
        conn = sqlite3.connect(str(self.db_path))
        conn.row_factory = sqlite3.Row
        return conn

    def initialize(self) -> None:
        """Create the table if needed."""
        if self._initialized:
            return
        with self._lock:
            conn = self._connect()
            try:
                with conn:
                    conn.execute(self.SCHEMA)
            finally:
                conn.close()
            self._initialized = True
        logger.info(f"Document storage ready at: {self.db_path}")

    def read(self) -> Optional[str]:
        """
        Return the stored document text, or None before the first write.

        Raises:
            sqlite3.Error: On storage failure
        """
        self.initialize()
        conn = self._connect()
        try:
            row = conn.execute("SELECT data FROM application_data WHERE id = 1").fetchone()
        finally:
            conn.close()
        return row["data"] if row else None

    def read_document(self) -> Optional[Dict[str, Any]]:
        """
        Return the stored document parsed, or None.

        Raises:
            sqlite3.Error: On storage failure
            ValueError: If the stored text is not valid JSON
        """
        raw = self.read()
        return json.loads(raw) if raw is not None else None

    def write(self, document: Dict[str, Any]) -> str:
        """
        Replace the stored document.

        Returns:
            The new ``updated_at`` timestamp (UTC, ISO 8601)

        Raises:
            sqlite3.Error: On storage failure
        """
        self.initialize()
        data = json.dumps(document, ensure_ascii=False)
        updated_at = datetime.now(timezone.utc).isoformat()

        with self._lock:
            conn = self._connect()
            try:
                with conn:
                    conn.execute(
                        """
                        INSERT INTO application_data (id, data, updated_at)
                        VALUES (1, ?, ?)
                        ON CONFLICT(id) DO UPDATE
                        SET data = excluded.data, updated_at = excluded.updated_at
                        """,
                        [data, updated_at],
                    )
            finally:
                conn.close()

        logger.info(f"Document saved at {updated_at} ({len(data)} chars)")
        return updated_at

    def last_updated(self) -> Optional[str]:
        self.initialize()
        conn = self._connect()
        try:
            row = conn.execute(
                "SELECT updated_at FROM application_data WHERE id = 1"
            ).fetchone()
        finally:
            conn.close()
        return row["updated_at"] if row else None
