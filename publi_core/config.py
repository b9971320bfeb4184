# =============================================================================
# publi_core/config.py
# Runtime Configuration for PubliManager
# =============================================================================
"""
Configuration is read, in order of precedence, from:

1. process environment (optionally seeded from a ``.env`` file),
2. the ``[remote]`` section of ``.streamlit/secrets.toml``,
3. built-in defaults.

Expected secrets.toml format:

    [remote]
    url = "http://localhost:3001"
    timeout = 10
"""

from __future__ import annotations
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Callable, Dict, Optional

from dotenv import load_dotenv

from publi_core.errors import ConfigurationError
from publi_core.logging import get_logger

logger = get_logger(__name__)

PROJECT_ROOT = Path(__file__).parent.parent
LOCAL_DATA_DIR = PROJECT_ROOT / "local_data"

MIB = 1024 * 1024


@dataclass
class AppConfig:
    """Settings shared by the client side and the persistence service."""
    remote_url: str = "http://localhost:3001"
    remote_timeout: float = 10.0
    local_db_path: Path = LOCAL_DATA_DIR / "publimanager.db"
    media_db_path: Path = LOCAL_DATA_DIR / "publimanager_media.db"
    local_quota_bytes: int = 5 * MIB
    server_db_path: Path = LOCAL_DATA_DIR / "database.sqlite"
    server_host: str = "0.0.0.0"
    server_port: int = 3001
    max_body_bytes: int = 50 * MIB
    log_level: str = "INFO"


# env var -> (field, parser)
ENV_VARS: Dict[str, tuple] = {
    "PUBLIMANAGER_REMOTE_URL": ("remote_url", str),
    "PUBLIMANAGER_REMOTE_TIMEOUT": ("remote_timeout", float),
    "PUBLIMANAGER_LOCAL_DB": ("local_db_path", Path),
    "PUBLIMANAGER_MEDIA_DB": ("media_db_path", Path),
    "PUBLIMANAGER_LOCAL_QUOTA_BYTES": ("local_quota_bytes", int),
    "PUBLIMANAGER_SERVER_DB": ("server_db_path", Path),
    "PUBLIMANAGER_SERVER_HOST": ("server_host", str),
    "PORT": ("server_port", int),
    "PUBLIMANAGER_MAX_BODY_BYTES": ("max_body_bytes", int),
    "PUBLIMANAGER_LOG_LEVEL": ("log_level", str),
}


def _parse(key: str, raw: Any, parser: Callable[[Any], Any]) -> Any:
    try:
        value = parser(raw)
    except (TypeError, ValueError) as e:
        raise ConfigurationError(
            f"Invalid value for {key}: {raw!r}",
            config_key=key,
            expected_type=parser.__name__,
        ) from e

    if isinstance(value, (int, float)) and value <= 0:
        raise ConfigurationError(
            f"{key} must be positive, got {raw!r}",
            config_key=key,
            expected_type=parser.__name__,
        )
    return value


def _load_secrets() -> Dict[str, Any]:
    """Read the optional [remote] section of Streamlit secrets."""
    try:
        import streamlit as st
        if "remote" in st.secrets:
            return dict(st.secrets["remote"])
    except Exception as e:
        # No secrets file outside a configured Streamlit deployment
        logger.debug(f"Streamlit secrets not available: {e}")
    return {}


def load_config(
    env: Optional[Dict[str, str]] = None,
    secrets: Optional[Dict[str, Any]] = None,
    dotenv_path: Optional[Path] = None,
) -> AppConfig:
    """
    Build an AppConfig.

    Args:
        env: Environment mapping (defaults to os.environ after loading .env)
        secrets: Remote secrets mapping (defaults to Streamlit secrets)
        dotenv_path: Explicit .env file to load

    Returns:
        Populated AppConfig

    Raises:
        ConfigurationError: If a value cannot be parsed
    """
    if env is None:
        load_dotenv(dotenv_path, override=False)
        env = dict(os.environ)
    if secrets is None:
        secrets = _load_secrets()

    config = AppConfig()

    if "url" in secrets:
        config.remote_url = _parse("remote.url", secrets["url"], str)
    if "timeout" in secrets:
        config.remote_timeout = _parse("remote.timeout", secrets["timeout"], float)

    for key, (attr, parser) in ENV_VARS.items():
        if env.get(key):
            setattr(config, attr, _parse(key, env[key], parser))

    config.remote_url = config.remote_url.rstrip("/")
    return config
