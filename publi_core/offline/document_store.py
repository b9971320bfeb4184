# =============================================================================
# publi_core/offline/document_store.py
# Document Store - Local Copy of the AppData Document
# =============================================================================
"""
DocumentStore - sole reader/writer of the local document slot.

Every helper is a full read-modify-write: the document is read from the
slot, one collection is changed, and the whole document is written back.
A failed write leaves the last saved snapshot in place and alerts the user.

Usage:
------
store = DocumentStore(LocalDatabase(path))

doc = store.get_data()
store.add_item("books", {"id": "b1", "title": "Test"})
store.books.delete("b1")
"""

from __future__ import annotations
import json
import sqlite3
import uuid
from datetime import datetime
from typing import Any, Dict, Optional, Union
import logging

from publi_core.data.models import (
    AppData,
    Book,
    ENTITY_TYPES,
    HistoryRecord,
    Imprint,
    Pseudonym,
    Record,
    SaleRecord,
    Series,
    Task,
    seed_document,
)
from publi_core.data.repositories import CollectionRepository
from publi_core.errors import (
    AlertSink,
    CorruptDocumentError,
    DocumentValidationError,
    StorageQuotaError,
    alert_user,
    handle_error,
)
from publi_core.offline.local_database import LocalDatabase

logger = logging.getLogger(__name__)


def log_action(
    book_id: str,
    book_title: str,
    action: str,
    details: Optional[str],
    doc: AppData,
) -> AppData:
    """
    Append a history entry to a snapshot without saving it.

    The input snapshot is not modified, so callers can batch several
    changes and persist once with ``save_data``.

    Returns:
        A new snapshot ending with the new HistoryRecord
    """
    updated = doc.copy()
    updated.history.append(
        HistoryRecord(
            id=f"h-{uuid.uuid4().hex[:12]}",
            book_id=book_id,
            book_title=book_title,
            action=action,
            timestamp=datetime.now().isoformat(),
            details=details,
        )
    )
    return updated


class DocumentStore:
    """
    Local persistence for the AppData document.

    Attributes:
        imprints, pseudonyms, series, books, tasks, sales, history:
            Typed repositories over each collection
    """

    STORAGE_KEY = "publimanager_data_v2"

    def __init__(self, database: LocalDatabase, alert: Optional[AlertSink] = None):
        """
        Args:
            database: Local slot storage
            alert: Sink for user-visible failures (defaults to a Streamlit banner)
        """
        self.database = database
        self._alert = alert or alert_user

        self.imprints = CollectionRepository(self, "imprints", Imprint)
        self.pseudonyms = CollectionRepository(self, "pseudonyms", Pseudonym)
        self.series = CollectionRepository(self, "series", Series)
        self.books = CollectionRepository(self, "books", Book)
        self.tasks = CollectionRepository(self, "tasks", Task)
        self.sales = CollectionRepository(self, "sales", SaleRecord)
        self.history = CollectionRepository(self, "history", HistoryRecord)

    log_action = staticmethod(log_action)

    # =========================================================================
    # DOCUMENT READ / WRITE
    # =========================================================================

    @staticmethod
    def decode(raw: Union[str, bytes], source: str = "local slot") -> AppData:
        """
        Parse a serialized document (text or UTF-8 bytes).

        Raises:
            CorruptDocumentError: If the text is not a valid document
        """
        try:
            if isinstance(raw, bytes):
                raw = raw.decode("utf-8-sig")
            payload = json.loads(raw)
        except UnicodeDecodeError as e:
            raise CorruptDocumentError(f"Document is not UTF-8 text: {e}", source=source) from e
        except json.JSONDecodeError as e:
            raise CorruptDocumentError(f"Document is not valid JSON: {e}", source=source) from e

        try:
            return AppData.from_dict(payload)
        except DocumentValidationError as e:
            raise CorruptDocumentError(
                f"Document has an invalid shape: {e.message}",
                source=source,
                details=dict(e.details),
            ) from e

    def get_data(self) -> AppData:
        """
        Read the local document.

        Never raises: a missing, unreadable or corrupt slot yields the seed
        document.
        """
        try:
            raw = self.database.get_value(self.STORAGE_KEY)
        except (sqlite3.Error, OSError) as e:
            logger.error(f"Could not read local document, using seed: {e}")
            return seed_document()

        if raw is None:
            return seed_document()

        try:
            return self.decode(raw)
        except CorruptDocumentError as e:
            logger.warning(f"Local document is corrupt, using seed: {e}")
            return seed_document()

    def save_data(self, doc: AppData) -> bool:
        """
        Write the full document to the local slot.

        Returns:
            True if written; False (with a user alert) if it did not fit or
            the write failed. Nothing is partially written.
        """
        try:
            payload = json.dumps(doc.to_dict(), ensure_ascii=False)
            self.database.set_value(self.STORAGE_KEY, payload)
        except StorageQuotaError as e:
            handle_error(
                e,
                user_message=(
                    "Local storage is full: the latest changes were not saved. "
                    "Remove large images or push the data to the server."
                ),
                alert=self._alert,
            )
            return False
        except (sqlite3.Error, OSError, TypeError, ValueError) as e:
            handle_error(
                e,
                user_message=f"Could not save data locally: {e}",
                alert=self._alert,
            )
            return False

        logger.debug(f"Saved local document ({len(payload)} chars)")
        return True

    # =========================================================================
    # COLLECTION HELPERS
    # =========================================================================

    @staticmethod
    def _coerce(collection: str, item: Union[Record, Dict[str, Any]]) -> Record:
        entity_type = ENTITY_TYPES.get(collection)
        if entity_type is None:
            raise DocumentValidationError(
                f"Unknown collection '{collection}'", collection=collection
            )
        if isinstance(item, dict):
            return entity_type.from_dict(item)
        if not isinstance(item, entity_type):
            raise DocumentValidationError(
                f"'{collection}' holds {entity_type.__name__}, got {type(item).__name__}",
                collection=collection,
            )
        return item

    def add_item(self, collection: str, item: Union[Record, Dict[str, Any]]) -> bool:
        """
        Append an item to a collection and save.

        Returns:
            Save outcome; False without writing if the id is already taken
        """
        item = self._coerce(collection, item)
        data = self.get_data()
        items = data.collection(collection)

        if any(existing.id == item.id for existing in items):
            self._alert(f"An entry with id '{item.id}' already exists in {collection}", "warning")
            return False

        items.append(item)
        return self.save_data(data)

    def update_item(self, collection: str, item: Union[Record, Dict[str, Any]]) -> bool:
        """
        Replace the item sharing ``item.id`` and save.

        Unknown ids are a no-op: nothing is written and False is returned.
        """
        item = self._coerce(collection, item)
        data = self.get_data()
        items = data.collection(collection)

        for index, existing in enumerate(items):
            if existing.id == item.id:
                items[index] = item
                return self.save_data(data)

        logger.debug(f"update_item: no '{item.id}' in {collection}, nothing to do")
        return False

    def delete_item(self, collection: str, item_id: str) -> bool:
        """Remove every item with ``item_id`` from a collection and save."""
        data = self.get_data()
        items = data.collection(collection)
        items[:] = [existing for existing in items if existing.id != item_id]
        return self.save_data(data)

    # =========================================================================
    # BACKUP
    # =========================================================================

    def export_data(self) -> str:
        """Serialize the local document as a JSON backup."""
        return json.dumps(self.get_data().to_dict(), indent=2, ensure_ascii=False)

    def import_data(self, raw: Union[str, bytes]) -> bool:
        """
        Replace the local document with a JSON backup (text or uploaded bytes).

        Returns:
            True if the backup was valid and saved
        """
        try:
            doc = self.decode(raw, source="backup")
        except CorruptDocumentError as e:
            handle_error(e, user_message="The backup file is not a valid document", alert=self._alert)
            return False

        duplicates = doc.duplicate_ids()
        if duplicates:
            handle_error(
                DocumentValidationError(
                    "Backup contains duplicate ids", details={"duplicates": duplicates}
                ),
                alert=self._alert,
            )
            return False

        return self.save_data(doc)

    def reset(self) -> bool:
        """Replace the local document with the seed."""
        return self.save_data(seed_document())
