# =============================================================================
# publi_core/offline/__init__.py
# Local-First Persistence for PubliManager
# =============================================================================
"""
Local-First Persistence Module

The whole application state is one AppData document. It always lives in a
local slot and may also live on a remote single-row store.

Architecture:
------------
┌──────────────────────────────────────────────────────────┐
│                  DataSourceResolver                       │
│      fetch_data() -> server | empty_server | local        │
└──────────────────────────────────────────────────────────┘
              │                           │
              ▼                           ▼
   ┌──────────────────┐        ┌──────────────────┐
   │  DocumentStore   │        │ RemoteSyncClient │
   │  (local slot)    │        │ (GET/POST JSON)  │
   └──────────────────┘        └──────────────────┘
              │                           │
              ▼                           ▼
   ┌──────────────────┐        ┌──────────────────┐
   │ SQLite (local)   │        │ /api/data server │
   └──────────────────┘        └──────────────────┘

   ┌──────────────────┐
   │   MediaStore     │  images, separate SQLite file
   └──────────────────┘

Usage:
------
from publi_core.bootstrap import build_services

services = build_services()
resolved = services.resolver.fetch_data()
services.store.books.add(book)
services.resolver.refresh_data()
"""

from publi_core.offline.local_database import LocalDatabase

from publi_core.offline.document_store import (
    DocumentStore,
    log_action,
)

from publi_core.offline.media_store import (
    MediaStore,
    encode_data_url,
    BRAND_LOGO_KEY,
    BRAND_FAVICON_KEY,
)

from publi_core.offline.remote_client import (
    RemoteSyncClient,
    RemoteConfig,
    RemoteFetchResult,
)

from publi_core.offline.resolver import (
    DataSourceResolver,
    DataSource,
    ResolvedData,
    DocumentChanged,
    ServerSource,
    EmptyServerSource,
    LocalSource,
    classify,
)

__all__ = [
    # Local storage
    "LocalDatabase",
    "DocumentStore",
    "log_action",
    # Media
    "MediaStore",
    "encode_data_url",
    "BRAND_LOGO_KEY",
    "BRAND_FAVICON_KEY",
    # Remote
    "RemoteSyncClient",
    "RemoteConfig",
    "RemoteFetchResult",
    # Resolver (main API)
    "DataSourceResolver",
    "DataSource",
    "ResolvedData",
    "DocumentChanged",
    "ServerSource",
    "EmptyServerSource",
    "LocalSource",
    "classify",
]
