# =============================================================================
# publi_core/data/repositories.py
# Typed Collection Repositories
# =============================================================================
"""
One repository per document collection, all sharing the same interface.

    store.books.add(Book(id="b1", title="Test"))
    store.books.get("b1")
    store.books.delete("b1")

Every write goes through the DocumentStore helpers, so each call is a full
read-modify-write of the document.
"""

from __future__ import annotations
from typing import TYPE_CHECKING, Generic, List, Optional, Type, TypeVar

from publi_core.data.models import ENTITY_TYPES, Record
from publi_core.errors import DocumentValidationError

if TYPE_CHECKING:
    from publi_core.offline.document_store import DocumentStore

E = TypeVar("E", bound=Record)


class CollectionRepository(Generic[E]):
    """Typed add/update/delete access to one collection."""

    def __init__(self, store: DocumentStore, collection: str, entity_type: Type[E]):
        if ENTITY_TYPES.get(collection) is not entity_type:
            raise DocumentValidationError(
                f"{entity_type.__name__} is not stored in '{collection}'",
                collection=collection,
            )
        self.store = store
        self.collection = collection
        self.entity_type = entity_type

    def _check(self, item: E) -> None:
        if not isinstance(item, self.entity_type):
            raise DocumentValidationError(
                f"Expected {self.entity_type.__name__}, got {type(item).__name__}",
                collection=self.collection,
            )

    def list(self) -> List[E]:
        return self.store.get_data().collection(self.collection)

    def get(self, item_id: str) -> Optional[E]:
        return self.store.get_data().resolve(self.collection, item_id)

    def add(self, item: E) -> bool:
        self._check(item)
        return self.store.add_item(self.collection, item)

    def update(self, item: E) -> bool:
        self._check(item)
        return self.store.update_item(self.collection, item)

    def delete(self, item_id: str) -> bool:
        return self.store.delete_item(self.collection, item_id)

    def __repr__(self) -> str:
        return f"CollectionRepository({self.collection!r}, {self.entity_type.__name__})"
