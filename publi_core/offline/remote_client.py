# =============================================================================
# publi_core/offline/remote_client.py
# HTTP Client for the Remote Document Singleton
# =============================================================================
"""
RemoteSyncClient - reads and replaces the single remote document.

Every call is a fresh round-trip; nothing is cached. Failures never raise
out of ``fetch``/``push``: they become ``reachable=False`` or ``False``.
"""

from __future__ import annotations
from dataclasses import dataclass
from typing import Any, Dict, Optional
import logging

import requests

from publi_core.data.models import AppData
from publi_core.errors import (
    DocumentValidationError,
    RemoteStorageError,
    RemoteUnavailableError,
)

logger = logging.getLogger(__name__)


@dataclass
class RemoteConfig:
    """Configuration for the remote persistence endpoint"""
    base_url: str = "http://localhost:3001"
    timeout: float = 10.0
    endpoint: str = "api/data"
    headers: Optional[Dict[str, str]] = None


@dataclass
class RemoteFetchResult:
    """Outcome of a remote read."""
    data: Optional[AppData]
    reachable: bool
    error: Optional[str] = None


class RemoteSyncClient:
    """
    Client for ``GET/POST /api/data``.

    Usage:
        client = RemoteSyncClient(RemoteConfig(base_url="http://nas:3001"))
        result = client.fetch()
        if result.reachable and result.data is None:
            client.push(local_doc)
    """

    def __init__(self, config: RemoteConfig, session: Optional[Any] = None):
        """
        Args:
            config: Endpoint configuration
            session: HTTP session with a requests-compatible ``request``
        """
        self.config = config
        self.session = session or requests.Session()

        if config.headers:
            self.session.headers.update(config.headers)

    @property
    def url(self) -> str:
        return f"{self.config.base_url.rstrip('/')}/{self.config.endpoint}"

    def _make_request(self, method: str, data: Optional[Dict] = None):
        """
        Issue one request.

        Raises:
            RemoteUnavailableError: On timeout or connection failure
            RemoteStorageError: On a non-success status
        """
        try:
            response = self.session.request(
                method=method,
                url=self.url,
                json=data,
                timeout=self.config.timeout,
            )
        except requests.exceptions.RequestException as e:
            raise RemoteUnavailableError(
                f"Remote request failed: {e}", url=self.url
            ) from e

        if not 200 <= response.status_code < 300:
            message = ""
            try:
                body = response.json()
                if isinstance(body, dict):
                    message = body.get("error", "")
            except ValueError:
                pass
            raise RemoteStorageError(
                f"Remote answered {response.status_code} {message}".strip(),
                status_code=response.status_code,
                url=self.url,
            )
        return response

    def fetch(self) -> RemoteFetchResult:
        """
        Read the remote document.

        Returns:
            ``reachable=False`` on network failure, error status or an
            unreadable body; ``data=None`` when the server holds no document
        """
        try:
            response = self._make_request("GET")
            payload = response.json()
        except RemoteUnavailableError as e:
            logger.info(f"Remote unreachable: {e.message}")
            return RemoteFetchResult(data=None, reachable=False, error=e.message)
        except RemoteStorageError as e:
            logger.warning(f"Remote storage failure: {e}")
            return RemoteFetchResult(data=None, reachable=False, error=e.message)
        except ValueError as e:
            logger.warning(f"Remote returned a non-JSON body: {e}")
            return RemoteFetchResult(data=None, reachable=False, error=str(e))

        if payload is None or payload == {}:
            logger.info("Remote reachable but holds no document")
            return RemoteFetchResult(data=None, reachable=True)

        try:
            doc = AppData.from_dict(payload)
        except DocumentValidationError as e:
            logger.warning(f"Remote document is invalid: {e}")
            return RemoteFetchResult(data=None, reachable=False, error=e.message)

        return RemoteFetchResult(data=doc, reachable=True)

    def push(self, doc: AppData) -> bool:
        """
        Replace the remote document with ``doc``.

        Returns:
            True on a success response
        """
        try:
            self._make_request("POST", data=doc.to_dict())
        except (RemoteUnavailableError, RemoteStorageError) as e:
            logger.error(f"Push failed: {e}")
            return False

        logger.info("Remote document replaced")
        return True
