# =============================================================================
# publi_core/errors/handlers.py
# Error Handling Utilities for PubliManager
# =============================================================================

from __future__ import annotations
import functools
import traceback
from typing import Optional, Callable, TypeVar, Any
import streamlit as st

from publi_core.logging import get_logger
from .exceptions import PubliManagerError

logger = get_logger(__name__)

T = TypeVar("T")

# Signature of the user-facing alert sink: (message, level)
AlertSink = Callable[[str, str], None]


def alert_user(message: str, level: str = "error") -> None:
    """
    Show a blocking banner to the operator and log it.

    Outside a running Streamlit script the call only logs.

    Args:
        message: Text shown to the user
        level: "error", "warning" or "info"
    """
    log = logger.error if level == "error" else logger.warning
    log(f"User alert: {message}")

    if level == "error":
        st.error(message)
    elif level == "warning":
        st.warning(message)
    else:
        st.info(message)


def handle_error(
    error: Exception,
    show_user_message: bool = True,
    log_error: bool = True,
    user_message: Optional[str] = None,
    alert: Optional[AlertSink] = None,
) -> None:
    """
    Centralized error handling function.

    Args:
        error: The exception to handle
        show_user_message: Whether to display the error to the user
        log_error: Whether to log the error
        user_message: Custom message to show user (uses error message if None)
        alert: Alert sink to use instead of the Streamlit banner
    """
    if isinstance(error, PubliManagerError):
        message = user_message or error.message
        code = error.code
        details = error.details
        recoverable = error.recoverable
    else:
        message = user_message or str(error)
        code = "UNKNOWN"
        details = {"traceback": "".join(traceback.format_exception(type(error), error, error.__traceback__))}
        recoverable = True

    if log_error:
        logger.error(
            f"[{code}] {message}",
            extra={"details": details},
            # Unraised errors have no traceback to attach
            exc_info=error if error.__traceback__ is not None else None,
        )

    if show_user_message:
        sink = alert or alert_user
        if recoverable:
            sink(f"Error: {message}", "error")
        else:
            sink(f"Critical Error: {message}. Please check the configuration.", "error")


def error_boundary(
    default_return: Any = None,
    error_message: Optional[str] = None,
    log: bool = True,
):
    """
    Decorator to wrap functions with error handling.

    Usage:
        @error_boundary(default_return=False, error_message="Upload failed")
        def upload_cover(book_id: str, raw: bytes) -> bool:
            ...
    """
    def decorator(func: Callable[..., T]) -> Callable[..., Optional[T]]:
        @functools.wraps(func)
        def wrapper(*args, **kwargs) -> Optional[T]:
            try:
                return func(*args, **kwargs)
            except Exception as e:
                if log:
                    logger.error(
                        f"Error in {func.__name__}: {e}",
                        exc_info=True,
                    )
                if error_message:
                    alert_user(error_message)
                return default_return

        return wrapper

    return decorator
