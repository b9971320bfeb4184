# =============================================================================
# publi_core/bootstrap.py
# Construction of the Persistence Services
# =============================================================================
"""
All persistence objects are built once per process and handed to the UI
explicitly (the Streamlit entry point caches the result with
``st.cache_resource``).
"""

from __future__ import annotations
from dataclasses import dataclass
from typing import Optional

from publi_core.config import AppConfig, load_config
from publi_core.errors import AlertSink
from publi_core.logging import get_logger
from publi_core.offline.document_store import DocumentStore
from publi_core.offline.local_database import LocalDatabase
from publi_core.offline.media_store import MediaStore
from publi_core.offline.remote_client import RemoteConfig, RemoteSyncClient
from publi_core.offline.resolver import DataSourceResolver

logger = get_logger(__name__)


@dataclass
class AppServices:
    config: AppConfig
    store: DocumentStore
    media: MediaStore
    remote: RemoteSyncClient
    resolver: DataSourceResolver


def build_services(
    config: Optional[AppConfig] = None,
    alert: Optional[AlertSink] = None,
) -> AppServices:
    """
    Wire the document store, media store, remote client and resolver.

    Args:
        config: Settings (loaded from env/secrets when omitted)
        alert: Sink for user-visible storage failures
    """
    config = config or load_config()

    database = LocalDatabase(config.local_db_path, quota_bytes=config.local_quota_bytes)
    store = DocumentStore(database, alert=alert)
    media = MediaStore(config.media_db_path)
    remote = RemoteSyncClient(
        RemoteConfig(base_url=config.remote_url, timeout=config.remote_timeout)
    )
    resolver = DataSourceResolver(store, remote)

    logger.info(f"Services ready (remote: {remote.url}, local: {config.local_db_path})")
    return AppServices(
        config=config,
        store=store,
        media=media,
        remote=remote,
        resolver=resolver,
    )
