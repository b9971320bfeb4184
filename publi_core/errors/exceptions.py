# =============================================================================
# publi_core/errors/exceptions.py
# Custom Exception Hierarchy for PubliManager
# =============================================================================

from typing import Optional, Dict, Any


class PubliManagerError(Exception):
    """
    Base exception for all PubliManager errors.

    Attributes:
        message: Human-readable error description
        code: Machine-readable error code (e.g., "STORE_001")
        details: Additional context as a dictionary
        recoverable: Whether the error can be recovered from
    """

    def __init__(
        self,
        message: str,
        code: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
        recoverable: bool = True,
    ):
        super().__init__(message)
        self.message = message
        self.code = code or "PM_000"
        self.details = details or {}
        self.recoverable = recoverable

    def __str__(self) -> str:
        base = f"[{self.code}] {self.message}"
        if self.details:
            base += f" | Details: {self.details}"
        return base

    def to_dict(self) -> Dict[str, Any]:
        """Convert exception to dictionary for logging/serialization"""
        return {
            "error_type": self.__class__.__name__,
            "code": self.code,
            "message": self.message,
            "details": self.details,
            "recoverable": self.recoverable,
        }


# =============================================================================
# LOCAL STORAGE EXCEPTIONS
# =============================================================================

class StorageQuotaError(PubliManagerError):
    """Raised when a document does not fit in the local slot"""

    def __init__(
        self,
        message: str,
        size_bytes: Optional[int] = None,
        quota_bytes: Optional[int] = None,
        **kwargs,
    ):
        details = kwargs.pop("details", {})
        if size_bytes is not None:
            details["size_bytes"] = size_bytes
        if quota_bytes is not None:
            details["quota_bytes"] = quota_bytes

        super().__init__(
            message=message,
            code="STORE_001",
            details=details,
            **kwargs,
        )


class CorruptDocumentError(PubliManagerError):
    """Raised when a stored document cannot be decoded"""

    def __init__(self, message: str, source: Optional[str] = None, **kwargs):
        details = kwargs.pop("details", {})
        if source:
            details["source"] = source

        super().__init__(
            message=message,
            code="STORE_002",
            details=details,
            **kwargs,
        )


class DocumentValidationError(PubliManagerError):
    """Raised when a document or collection name fails validation"""

    def __init__(
        self,
        message: str,
        collection: Optional[str] = None,
        field: Optional[str] = None,
        **kwargs,
    ):
        details = kwargs.pop("details", {})
        if collection:
            details["collection"] = collection
        if field:
            details["field"] = field

        super().__init__(
            message=message,
            code="STORE_003",
            details=details,
            **kwargs,
        )


# =============================================================================
# MEDIA EXCEPTIONS
# =============================================================================

class MediaStoreError(PubliManagerError):
    """Raised when the media side-store fails"""

    def __init__(
        self,
        message: str,
        key: Optional[str] = None,
        operation: Optional[str] = None,
        **kwargs,
    ):
        details = kwargs.pop("details", {})
        if key:
            details["key"] = key
        if operation:
            details["operation"] = operation

        super().__init__(
            message=message,
            code="MEDIA_001",
            details=details,
            **kwargs,
        )


# =============================================================================
# REMOTE EXCEPTIONS
# =============================================================================

class RemoteUnavailableError(PubliManagerError):
    """Raised when the remote endpoint cannot be reached"""

    def __init__(self, message: str, url: Optional[str] = None, **kwargs):
        details = kwargs.pop("details", {})
        if url:
            details["url"] = url

        super().__init__(
            message=message,
            code="REMOTE_001",
            details=details,
            **kwargs,
        )


class RemoteStorageError(PubliManagerError):
    """Raised when the remote endpoint answers with a failure"""

    def __init__(
        self,
        message: str,
        status_code: Optional[int] = None,
        url: Optional[str] = None,
        **kwargs,
    ):
        details = kwargs.pop("details", {})
        if status_code is not None:
            details["status_code"] = status_code
        if url:
            details["url"] = url

        super().__init__(
            message=message,
            code="REMOTE_002",
            details=details,
            **kwargs,
        )


# =============================================================================
# CONFIGURATION EXCEPTIONS
# =============================================================================

class ConfigurationError(PubliManagerError):
    """Raised when configuration is invalid or missing"""

    def __init__(
        self,
        message: str,
        config_key: Optional[str] = None,
        expected_type: Optional[str] = None,
        **kwargs,
    ):
        details = kwargs.pop("details", {})
        if config_key:
            details["config_key"] = config_key
        if expected_type:
            details["expected_type"] = expected_type

        super().__init__(
            message=message,
            code="CONFIG_001",
            details=details,
            recoverable=False,
            **kwargs,
        )
