import asyncio
import copy
from typing import Any, MutableMapping, Optional

import streamlit as st

from publi_core.errors import AlertSink, alert_user, error_boundary
from publi_core.offline.media_store import encode_data_url
from publi_core.offline.resolver import DataSource

# Central registry for session-state keys used across the app.
SESSION_DEFAULTS = {
    "app_data": None,
    "data_source": None,
    "has_local_data": False,
    "source_error": None,
    "sync_status": {},
    "_data_loaded": False,
}


def _state(state: Optional[MutableMapping[str, Any]]) -> MutableMapping[str, Any]:
    return st.session_state if state is None else state


def _store_resolved(resolved, services, state: MutableMapping[str, Any]) -> None:
    state["app_data"] = resolved.data
    state["data_source"] = resolved.source.value
    state["has_local_data"] = resolved.has_local_data
    state["source_error"] = resolved.error
    state["sync_status"] = services.resolver.get_status_display()
    state["_data_loaded"] = True


def init_state(services, state: Optional[MutableMapping[str, Any]] = None) -> None:
    """Initialize session state and resolve the active document once per session."""
    state = _state(state)
    for k, v in SESSION_DEFAULTS.items():
        if k not in state:
            state[k] = copy.deepcopy(v)

    if not state.get("_data_loaded", False):
        _store_resolved(services.resolver.fetch_data(), services, state)


def refresh_data(services, state: Optional[MutableMapping[str, Any]] = None) -> None:
    """Re-resolve the document after a mutation and publish it to the session."""
    _store_resolved(services.resolver.refresh_data(), services, _state(state))


def sync_local_changes(
    services,
    state: Optional[MutableMapping[str, Any]] = None,
    alert: Optional[AlertSink] = None,
) -> bool:
    """
    Publish a completed local write (restore, import) and re-resolve.

    While the server is authoritative the next resolve would mirror the
    server copy over the local slot, so the local document is pushed
    first. A failed push alerts and skips the refresh, leaving the local
    write in place.

    Returns:
        True if the change is now part of the active document
    """
    state = _state(state)
    if state.get("data_source") == DataSource.SERVER.value:
        if not services.resolver.force_push_to_server():
            (alert or alert_user)(
                "Saved on this device only: the server rejected the upload. "
                "Push again before reconnecting or the change will be replaced.",
                "error",
            )
            return False

    refresh_data(services, state)
    return True


def clear_session(state: Optional[MutableMapping[str, Any]] = None) -> None:
    """Forget the resolved document so the next run probes the remote again."""
    state = _state(state)
    for k, v in SESSION_DEFAULTS.items():
        state[k] = copy.deepcopy(v)


@error_boundary(default_return=False, error_message="The image could not be attached")
def attach_image(media, key: str, raw: bytes, mime_type: str) -> bool:
    """
    Store an uploaded image under ``key``.

    A failing media store leaves the entity without an image; the document
    itself is never touched.
    """
    asyncio.run(media.save(key, encode_data_url(raw, mime_type)))
    return True


@error_boundary(default_return=None)
def load_image(media, key: str) -> Optional[str]:
    """Return the stored data URL for ``key``, or None."""
    return asyncio.run(media.get(key))


@error_boundary(default_return=False, error_message="Branding could not be reset")
def reset_branding(media) -> bool:
    asyncio.run(media.reset_branding())
    return True
