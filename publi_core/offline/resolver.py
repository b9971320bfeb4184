# =============================================================================
# publi_core/offline/resolver.py
# Data Source Resolver - Single Entry Point for Loading the Document
# =============================================================================
"""
DataSourceResolver - decides, on every load, which document is active.

    remote reachable + document   -> server        (local slot mirrored)
    remote reachable + no document -> empty_server (local doc, offer upload)
    remote unreachable            -> local         (local doc, show offline)

There is no stored mode: each ``fetch_data()`` probes the remote again.
Promoting local data to the server only happens through the explicit
``force_push_to_server()``.

Usage:
------
resolver = DataSourceResolver(store, remote)

resolved = resolver.fetch_data()
if resolved.source is DataSource.EMPTY_SERVER and resolved.has_local_data:
    resolver.force_push_to_server()
"""

from __future__ import annotations
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Callable, ClassVar, Dict, List, Optional, Union
import logging

from publi_core.data.models import AppData, seed_document
from publi_core.logging import LogContext
from publi_core.offline.document_store import DocumentStore
from publi_core.offline.remote_client import RemoteFetchResult, RemoteSyncClient

logger = logging.getLogger(__name__)


class DataSource(str, Enum):
    """Where the active document came from."""
    SERVER = "server"
    EMPTY_SERVER = "empty_server"
    LOCAL = "local"


# =============================================================================
# CLASSIFICATION
# =============================================================================

@dataclass
class ServerSource:
    """Remote reachable and holding a document."""
    data: AppData
    source: ClassVar[DataSource] = DataSource.SERVER


@dataclass
class EmptyServerSource:
    """Remote reachable but empty; the local document stays active."""
    data: AppData
    has_local_data: bool = False
    source: ClassVar[DataSource] = DataSource.EMPTY_SERVER


@dataclass
class LocalSource:
    """Remote unreachable; the local document is the only truth."""
    data: AppData
    error: Optional[str] = None
    source: ClassVar[DataSource] = DataSource.LOCAL


SourceState = Union[ServerSource, EmptyServerSource, LocalSource]


def classify(probe: RemoteFetchResult, local_doc: AppData) -> SourceState:
    """
    Pick the authoritative document from a remote probe and the local copy.

    Args:
        probe: Result of RemoteSyncClient.fetch()
        local_doc: Current Document Store snapshot

    Returns:
        Exactly one of ServerSource, EmptyServerSource, LocalSource
    """
    if not probe.reachable:
        return LocalSource(data=local_doc, error=probe.error)
    if probe.data is None:
        return EmptyServerSource(
            data=local_doc,
            has_local_data=local_doc != seed_document(),
        )
    return ServerSource(data=probe.data)


@dataclass
class ResolvedData:
    """Active document plus how it was obtained."""
    data: AppData
    source: DataSource
    has_local_data: bool = False
    error: Optional[str] = None
    resolved_at: datetime = field(default_factory=datetime.now)

    @property
    def is_connected(self) -> bool:
        return self.source is not DataSource.LOCAL


# Callback payload for "document changed" notifications
DocumentChanged = ResolvedData


# =============================================================================
# RESOLVER
# =============================================================================

class DataSourceResolver:
    """
    Combines the Document Store and the Remote Sync Client.

    Subscribers registered with ``register_callback`` receive the new
    ResolvedData after every ``refresh_data()``.
    """

    def __init__(self, store: DocumentStore, remote: RemoteSyncClient):
        self.store = store
        self.remote = remote
        self._callbacks: List[Callable[[DocumentChanged], None]] = []
        self._last: Optional[ResolvedData] = None

    def fetch_data(self) -> ResolvedData:
        """
        Probe the remote and return the active document.

        Never raises. A ``server`` result also overwrites the local slot so
        the offline fallback stays current.
        """
        local_doc = self.store.get_data()
        probe = self.remote.fetch()
        state = classify(probe, local_doc)

        if isinstance(state, ServerSource):
            if not self.store.save_data(state.data):
                logger.warning("Could not mirror the server document locally")
            resolved = ResolvedData(data=state.data, source=state.source)
        elif isinstance(state, EmptyServerSource):
            resolved = ResolvedData(
                data=state.data,
                source=state.source,
                has_local_data=state.has_local_data,
            )
        else:
            resolved = ResolvedData(data=state.data, source=state.source, error=state.error)

        logger.info(f"Active data source: {resolved.source.value}")
        self._last = resolved
        return resolved

    def force_push_to_server(self) -> bool:
        """
        Overwrite the remote document with the local one.

        Only ever called on explicit user request.

        Returns:
            True if the server accepted the document
        """
        with LogContext(logger, "Pushing local document to server"):
            return self.remote.push(self.store.get_data())

    # =========================================================================
    # CHANGE NOTIFICATIONS
    # =========================================================================

    def refresh_data(self) -> ResolvedData:
        """Re-resolve after a mutation and notify subscribers."""
        resolved = self.fetch_data()
        self._notify_callbacks(resolved)
        return resolved

    def register_callback(self, callback: Callable[[DocumentChanged], None]) -> None:
        """Register a callback for document changes."""
        if callback not in self._callbacks:
            self._callbacks.append(callback)

    def unregister_callback(self, callback: Callable[[DocumentChanged], None]) -> None:
        """Remove a registered callback."""
        if callback in self._callbacks:
            self._callbacks.remove(callback)

    def _notify_callbacks(self, resolved: ResolvedData) -> None:
        for callback in list(self._callbacks):
            try:
                callback(resolved)
            except Exception as e:
                logger.error(f"Error in document callback: {e}")

    def get_status_display(self) -> Dict[str, Any]:
        """Get source information for UI display."""
        last = self._last
        return {
            "source": last.source.value if last else None,
            "is_connected": last.is_connected if last else False,
            "offer_upload": bool(last and last.source is DataSource.EMPTY_SERVER and last.has_local_data),
            "remote_url": self.remote.url,
            "resolved_at": last.resolved_at.isoformat() if last else None,
            "error": last.error if last else None,
        }
