# =============================================================================
# publi_core/offline/media_store.py
# Media Side-Store for Large Image Payloads
# =============================================================================
"""
MediaStore - async key-value storage for base64 data URLs.

Images (author photos, imprint logos, brand assets) are kept out of the
AppData document so they never count against the document slot quota.
The store lives in its own SQLite file and has no link to the document:
orphaned images and references without an image are both expected.

Usage:
------
media = MediaStore(Path("local_data/publimanager_media.db"))

await media.save("SYSTEM_BRAND_LOGO", data_url)
logo = await media.get("SYSTEM_BRAND_LOGO")   # None if never saved
"""

from __future__ import annotations
import asyncio
import base64
import sqlite3
from datetime import datetime
from pathlib import Path
from typing import Dict, List, Optional
import logging

from publi_core.errors import MediaStoreError

logger = logging.getLogger(__name__)

BRAND_LOGO_KEY = "SYSTEM_BRAND_LOGO"
BRAND_FAVICON_KEY = "SYSTEM_BRAND_FAVICON"
BRANDING_KEYS = (BRAND_LOGO_KEY, BRAND_FAVICON_KEY)


def encode_data_url(raw: bytes, mime_type: str) -> str:
    """Build a base64 data URL from uploaded bytes."""
    encoded = base64.b64encode(raw).decode("ascii")
    return f"data:{mime_type};base64,{encoded}"


class MediaStore:
    """
    Async durable storage for image data URLs keyed by owner id.

    SQLite calls run in a worker thread; the schema is created once, on
    first use, even when several coroutines race to use the store.
    """

    SCHEMA = """
        CREATE TABLE IF NOT EXISTS media (
            key TEXT PRIMARY KEY,
            data_url TEXT NOT NULL,
            updated_at TEXT DEFAULT CURRENT_TIMESTAMP
        )
    """

    def __init__(self, db_path: Path):
        self.db_path = Path(db_path)
        self._init_lock: Optional[asyncio.Lock] = None
        self._initialized = False

    def _lock(self) -> asyncio.Lock:
        if self._init_lock is None:
            self._init_lock = asyncio.Lock()
        return self._init_lock

    def _connect(self) -> sqlite3.Connection:
        conn = sqlite3.connect(str(self.db_path))
        conn.row_factory = sqlite3.Row
        return conn

    def _create_schema(self) -> None:
        self.db_path.parent.mkdir(parents=True, exist_ok=True)
        conn = self._connect()
        try:
            with conn:
                conn.execute(self.SCHEMA)
        finally:
            conn.close()

    async def init(self) -> None:
        """Create the backing store if needed; safe to call concurrently."""
        if self._initialized:
            return

        async with self._lock():
            if self._initialized:
                return
            try:
                await asyncio.to_thread(self._create_schema)
            except (sqlite3.Error, OSError) as e:
                raise MediaStoreError(
                    f"Could not open media store at {self.db_path}: {e}",
                    operation="init",
                ) from e
            self._initialized = True
            logger.info(f"Media store initialized at: {self.db_path}")

    async def _run(self, operation: str, key: Optional[str], sql: str, params: List) -> List[sqlite3.Row]:
        await self.init()

        def work() -> List[sqlite3.Row]:
            conn = self._connect()
            try:
                with conn:
                    return conn.execute(sql, params).fetchall()
            finally:
                conn.close()

        try:
            return await asyncio.to_thread(work)
        except (sqlite3.Error, OSError) as e:
            raise MediaStoreError(
                f"Media {operation} failed: {e}", key=key, operation=operation
            ) from e

    async def get(self, key: str) -> Optional[str]:
        """Return the data URL for ``key`` or None."""
        if not key:
            return None
        rows = await self._run("get", key, "SELECT data_url FROM media WHERE key = ?", [key])
        return rows[0]["data_url"] if rows else None

    async def save(self, key: str, data_url: str) -> None:
        """Store or overwrite the data URL for ``key``."""
        if not key:
            raise MediaStoreError("Media key must not be empty", operation="save")
        await self._run(
            "save",
            key,
            """
            INSERT INTO media (key, data_url, updated_at) VALUES (?, ?, ?)
            ON CONFLICT(key) DO UPDATE
            SET data_url = excluded.data_url, updated_at = excluded.updated_at
            """,
            [key, data_url, datetime.now().isoformat()],
        )
        logger.debug(f"Saved media '{key}' ({len(data_url)} chars)")

    async def delete(self, key: str) -> None:
        await self._run("delete", key, "DELETE FROM media WHERE key = ?", [key])

    async def get_all(self) -> Dict[str, str]:
        """Map every stored key to its data URL."""
        rows = await self._run("get_all", None, "SELECT key, data_url FROM media ORDER BY key", [])
        return {row["key"]: row["data_url"] for row in rows}

    async def clear(self) -> None:
        await self._run("clear", None, "DELETE FROM media", [])
        logger.info("Media store cleared")

    async def reset_branding(self) -> None:
        """Drop the custom brand logo and favicon."""
        for key in BRANDING_KEYS:
            await self.delete(key)
