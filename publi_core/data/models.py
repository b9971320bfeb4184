# =============================================================================
# publi_core/data/models.py
# Document Model for PubliManager
# =============================================================================
"""
Typed view over the AppData document.

The document travels as JSON with camelCase keys (``pseudonymId``,
``releaseDate`` ...). Each record maps those keys onto snake_case attributes
and keeps any key it does not know in ``extra`` so documents written by
other clients survive a load/save cycle unchanged.
"""

from __future__ import annotations
import copy
from dataclasses import dataclass, field, fields
from typing import Any, Dict, List, Optional, Tuple, Type, TypeVar

from publi_core.errors import DocumentValidationError

R = TypeVar("R", bound="Record")


def wire_field(
    key: Optional[str] = None,
    default: Any = None,
    *,
    factory: Any = None,
    item: Any = None,
    record: Any = None,
):
    """
    Declare a document field.

    Args:
        key: JSON key (defaults to the attribute name)
        default: Default value; fields defaulting to None are omitted when unset
        factory: Default factory for mutable defaults
        item: Record type of list elements
        record: Record type of a nested object
    """
    metadata = {"wire": key, "item": item, "record": record}
    if factory is not None:
        return field(default_factory=factory, metadata=metadata)
    return field(default=default, metadata=metadata)


class Record:
    """Mixin providing JSON conversion for document dataclasses."""

    # Attributes that must be non-empty strings
    REQUIRED: Tuple[str, ...] = ()

    @classmethod
    def _wire_fields(cls):
        return [f for f in fields(cls) if f.name != "extra"]

    @staticmethod
    def _wire_key(f) -> str:
        return f.metadata.get("wire") or f.name

    @classmethod
    def from_dict(cls: Type[R], payload: Any) -> R:
        """
        Build a record from its JSON form.

        Raises:
            DocumentValidationError: If the payload is not an object or a
                required attribute is missing
        """
        if not isinstance(payload, dict):
            raise DocumentValidationError(
                f"{cls.__name__} must be a JSON object, got {type(payload).__name__}"
            )

        values: Dict[str, Any] = {}
        known = set()
        for f in cls._wire_fields():
            key = cls._wire_key(f)
            known.add(key)
            if key not in payload:
                continue

            value = payload[key]
            item_type = f.metadata.get("item")
            record_type = f.metadata.get("record")
            if item_type is not None:
                if not isinstance(value, list):
                    raise DocumentValidationError(
                        f"{cls.__name__}.{key} must be a list", field=key
                    )
                value = [item_type.from_dict(v) for v in value]
            elif record_type is not None:
                value = record_type.from_dict(value)
            else:
                value = copy.deepcopy(value)
            values[f.name] = value

        for name in cls.REQUIRED:
            if not isinstance(values.get(name), str) or not values[name]:
                raise DocumentValidationError(
                    f"{cls.__name__} requires a non-empty string '{name}'",
                    field=name,
                    details={"payload_keys": sorted(payload.keys())},
                )

        extra = {k: copy.deepcopy(v) for k, v in payload.items() if k not in known}
        return cls(**values, extra=extra)

    def to_dict(self) -> Dict[str, Any]:
        """Return the JSON form of the record."""
        out: Dict[str, Any] = {}
        for f in self._wire_fields():
            value = getattr(self, f.name)
            if value is None and f.default is None:
                continue

            if f.metadata.get("item") is not None:
                value = [v.to_dict() for v in value]
            elif f.metadata.get("record") is not None:
                value = value.to_dict()
            else:
                value = copy.deepcopy(value)
            out[self._wire_key(f)] = value

        out.update(copy.deepcopy(self.extra))
        return out


# =============================================================================
# ENTITIES
# =============================================================================

@dataclass
class Imprint(Record):
    """Publishing label."""
    REQUIRED = ("id",)

    id: str = ""
    name: str = ""
    language: str = ""
    logo_url: Optional[str] = wire_field("logoUrl")
    extra: Dict[str, Any] = field(default_factory=dict, repr=False)


@dataclass
class Pseudonym(Record):
    """Pen name an author publishes under."""
    REQUIRED = ("id",)

    id: str = ""
    name: str = ""
    bio: str = ""
    photo_url: Optional[str] = wire_field("photoUrl")
    standard_acknowledgments: Optional[str] = wire_field("standardAcknowledgments")
    extra: Dict[str, Any] = field(default_factory=dict, repr=False)


@dataclass
class Series(Record):
    REQUIRED = ("id",)

    id: str = ""
    name: str = ""
    description: str = ""
    extra: Dict[str, Any] = field(default_factory=dict, repr=False)


@dataclass
class Book(Record):
    """
    Catalogue entry.

    ``pseudonym_id``, ``imprint_id`` and ``series_id`` are soft references;
    they may point at deleted records.
    """
    REQUIRED = ("id",)

    id: str = ""
    title: str = ""
    pseudonym_id: str = wire_field("pseudonymId", "")
    imprint_id: str = wire_field("imprintId", "")
    description: str = ""
    series_id: Optional[str] = wire_field("seriesId")
    series_order: Optional[int] = wire_field("seriesOrder")
    short_summary: Optional[str] = wire_field("shortSummary")
    isbn: Optional[str] = None
    asin: Optional[str] = None
    platforms: List[str] = wire_field(factory=list)
    formats: List[str] = wire_field(factory=list)
    price: float = 0
    release_date: str = wire_field("releaseDate", "")
    status: str = "Draft"
    cover_url: Optional[str] = wire_field("coverUrl")
    amazon_link: Optional[str] = wire_field("amazonLink")
    d2d_link: Optional[str] = wire_field("d2dLink")
    drive_folder_url: Optional[str] = wire_field("driveFolderUrl")
    kindle_unlimited: bool = wire_field("kindleUnlimited", False)
    ku_strategy: bool = wire_field("kuStrategy", False)
    extra: Dict[str, Any] = field(default_factory=dict, repr=False)


@dataclass
class Task(Record):
    REQUIRED = ("id",)

    id: str = ""
    book_id: str = wire_field("bookId", "")
    title: str = ""
    description: str = ""
    due_date: str = wire_field("dueDate", "")
    completed: bool = False
    type: str = "Production"
    extra: Dict[str, Any] = field(default_factory=dict, repr=False)


@dataclass
class SaleRecord(Record):
    """Monthly royalty line for one book on one platform."""
    REQUIRED = ("id",)

    id: str = ""
    book_id: str = wire_field("bookId", "")
    year: int = 0
    month: int = 0
    units: int = 0
    kenpc: int = 0
    revenue: float = 0
    platform: str = "KDP"
    currency: Optional[str] = None
    extra: Dict[str, Any] = field(default_factory=dict, repr=False)


@dataclass
class HistoryRecord(Record):
    """Append-only audit entry."""
    REQUIRED = ("id",)

    id: str = ""
    book_id: str = wire_field("bookId", "")
    book_title: str = wire_field("bookTitle", "")
    action: str = ""
    timestamp: str = ""
    details: Optional[str] = None
    extra: Dict[str, Any] = field(default_factory=dict, repr=False)


@dataclass
class ExternalLink(Record):
    REQUIRED = ("id",)

    id: str = ""
    name: str = ""
    url: str = ""
    icon: Optional[str] = None
    extra: Dict[str, Any] = field(default_factory=dict, repr=False)


@dataclass
class AppSettings(Record):
    view_mode: str = wire_field("viewMode", "grid")
    custom_actions: List[str] = wire_field("customActions", factory=list)
    external_links: List[ExternalLink] = wire_field(
        "externalLinks", factory=list, item=ExternalLink
    )
    extra: Dict[str, Any] = field(default_factory=dict, repr=False)


# =============================================================================
# DOCUMENT
# =============================================================================

COLLECTIONS: Tuple[str, ...] = (
    "imprints",
    "pseudonyms",
    "series",
    "books",
    "tasks",
    "sales",
    "history",
)

ENTITY_TYPES: Dict[str, Type[Record]] = {
    "imprints": Imprint,
    "pseudonyms": Pseudonym,
    "series": Series,
    "books": Book,
    "tasks": Task,
    "sales": SaleRecord,
    "history": HistoryRecord,
}

# Soft reference attribute -> target collection
REFERENCES: Dict[str, str] = {
    "pseudonym_id": "pseudonyms",
    "imprint_id": "imprints",
    "series_id": "series",
    "book_id": "books",
}


@dataclass
class AppData(Record):
    """The whole application document."""
    imprints: List[Imprint] = wire_field(factory=list, item=Imprint)
    pseudonyms: List[Pseudonym] = wire_field(factory=list, item=Pseudonym)
    series: List[Series] = wire_field(factory=list, item=Series)
    books: List[Book] = wire_field(factory=list, item=Book)
    tasks: List[Task] = wire_field(factory=list, item=Task)
    sales: List[SaleRecord] = wire_field(factory=list, item=SaleRecord)
    history: List[HistoryRecord] = wire_field(factory=list, item=HistoryRecord)
    settings: AppSettings = wire_field(factory=AppSettings, record=AppSettings)
    extra: Dict[str, Any] = field(default_factory=dict, repr=False)

    def collection(self, name: str) -> List[Any]:
        """Return the live list backing a collection."""
        if name not in COLLECTIONS:
            raise DocumentValidationError(
                f"Unknown collection '{name}'", collection=name
            )
        return getattr(self, name)

    def copy(self) -> AppData:
        return copy.deepcopy(self)

    def duplicate_ids(self) -> Dict[str, List[str]]:
        """Ids appearing more than once, per collection."""
        duplicates: Dict[str, List[str]] = {}
        for name in COLLECTIONS:
            seen = set()
            repeated = []
            for item in getattr(self, name):
                if item.id in seen and item.id not in repeated:
                    repeated.append(item.id)
                seen.add(item.id)
            if repeated:
                duplicates[name] = repeated
        return duplicates

    def resolve(self, collection: str, item_id: Optional[str]) -> Optional[Any]:
        """
        Follow a soft reference.

        Returns None for an unset id or a deleted target, which views render
        as "unknown/deleted".
        """
        if not item_id:
            return None
        for item in self.collection(collection):
            if item.id == item_id:
                return item
        return None

    def dangling_references(self) -> List[Tuple[str, str, str, str]]:
        """
        List soft references whose target no longer exists.

        Returns:
            Tuples of (collection, item id, attribute, missing id)
        """
        dangling = []
        for name in ("books", "tasks", "sales"):
            for item in getattr(self, name):
                for attr, target in REFERENCES.items():
                    ref = getattr(item, attr, None)
                    if ref and self.resolve(target, ref) is None:
                        dangling.append((name, item.id, attr, ref))
        return dangling


def seed_document() -> AppData:
    """Starter document used when nothing has been saved yet."""
    return AppData(
        imprints=[
            Imprint(id="1", name="Sello Aurora", language="Español"),
            Imprint(id="2", name="Moonlight Press", language="Inglés"),
        ],
        pseudonyms=[
            Pseudonym(id="1", name="Elena R. S.", bio="Escritora de suspense."),
            Pseudonym(id="2", name="John Doe", bio="Ficción contemporánea."),
        ],
        series=[
            Series(id="s1", name="Crónicas del Abismo", description="Fantasía oscura."),
        ],
    )
