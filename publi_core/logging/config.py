# =============================================================================
# publi_core/logging/config.py
# Logging Configuration for PubliManager
# =============================================================================

import logging
import sys
import time
from datetime import date
from pathlib import Path
from typing import Union

LOG_FORMAT = "%(asctime)s | %(name)s | %(levelname)s | %(message)s"
LOG_DIR = Path("logs")

# Chatty at INFO: HTTP clients used by the sync client and tests, uvicorn access log
QUIET_LOGGERS = ("urllib3", "httpx", "httpcore", "uvicorn.access")


def setup_logging(level: Union[int, str] = logging.INFO, log_to_file: bool = True) -> None:
    """
    Configure logging for the Streamlit app and the persistence service.

    Args:
        level: Level or level name; unknown names fall back to INFO
        log_to_file: Also write ``logs/publimanager_<date>.log``
    """
    if isinstance(level, str):
        resolved = getattr(logging, level.upper(), None)
        level = resolved if isinstance(resolved, int) else logging.INFO

    handlers = [logging.StreamHandler(sys.stdout)]
    if log_to_file:
        LOG_DIR.mkdir(exist_ok=True)
        handlers.append(logging.FileHandler(LOG_DIR / f"publimanager_{date.today()}.log"))

    logging.basicConfig(level=level, format=LOG_FORMAT, handlers=handlers, force=True)

    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)


def get_logger(name: str) -> logging.Logger:
    return logging.getLogger(name)


class LogContext:
    """
    Time an operation and log its outcome.

        with LogContext(logger, "Pushing local document to server"):
            remote.push(doc)
    """

    def __init__(self, logger: logging.Logger, operation: str):
        self.logger = logger
        self.operation = operation
        self._started = 0.0

    def __enter__(self):
        self._started = time.perf_counter()
        self.logger.info(f"{self.operation}: started")
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        elapsed = time.perf_counter() - self._started
        if exc_type is None:
            self.logger.info(f"{self.operation}: done in {elapsed:.2f}s")
        else:
            self.logger.error(f"{self.operation}: failed after {elapsed:.2f}s: {exc_val}")
        return False
