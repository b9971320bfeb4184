# =============================================================================
# publi_core/errors/__init__.py
# Centralized Error Handling for PubliManager
# =============================================================================

from .exceptions import (
    PubliManagerError,
    StorageQuotaError,
    CorruptDocumentError,
    DocumentValidationError,
    MediaStoreError,
    RemoteUnavailableError,
    RemoteStorageError,
    ConfigurationError,
)

from .handlers import (
    AlertSink,
    alert_user,
    handle_error,
    error_boundary,
)

__all__ = [
    # Exceptions
    "PubliManagerError",
    "StorageQuotaError",
    "CorruptDocumentError",
    "DocumentValidationError",
    "MediaStoreError",
    "RemoteUnavailableError",
    "RemoteStorageError",
    "ConfigurationError",
    # Handlers
    "AlertSink",
    "alert_user",
    "handle_error",
    "error_boundary",
]
