from publi_core.data.models import (
    AppData,
    AppSettings,
    Book,
    COLLECTIONS,
    ENTITY_TYPES,
    ExternalLink,
    HistoryRecord,
    Imprint,
    Pseudonym,
    SaleRecord,
    Series,
    Task,
    seed_document,
)
from publi_core.data.repositories import CollectionRepository

__all__ = [
    "AppData",
    "AppSettings",
    "Book",
    "COLLECTIONS",
    "ENTITY_TYPES",
    "ExternalLink",
    "HistoryRecord",
    "Imprint",
    "Pseudonym",
    "SaleRecord",
    "Series",
    "Task",
    "seed_document",
    "CollectionRepository",
]
