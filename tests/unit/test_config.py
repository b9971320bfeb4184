# =============================================================================
# tests/unit/test_config.py
# Unit Tests for Runtime Configuration
# =============================================================================

import os
from pathlib import Path

import pytest

from publi_core.config import AppConfig, load_config
from publi_core.errors import ConfigurationError


class TestLoadConfig:

    def test_defaults(self):
        config = load_config(env={}, secrets={})

        assert config == AppConfig()
        assert config.remote_url == "http://localhost:3001"
        assert config.local_quota_bytes == 5 * 1024 * 1024

    def test_secrets_set_remote(self):
        config = load_config(env={}, secrets={"url": "http://nas:3001/", "timeout": 3})

        assert config.remote_url == "http://nas:3001"
        assert config.remote_timeout == 3.0

    def test_env_overrides_secrets(self):
        config = load_config(
            env={"PUBLIMANAGER_REMOTE_URL": "http://env:9000"},
            secrets={"url": "http://secret:3001"},
        )

        assert config.remote_url == "http://env:9000"

    def test_env_paths_and_numbers(self, tmp_path):
        config = load_config(
            env={
                "PUBLIMANAGER_LOCAL_DB": str(tmp_path / "a.db"),
                "PUBLIMANAGER_LOCAL_QUOTA_BYTES": "1024",
                "PORT": "8080",
            },
            secrets={},
        )

        assert config.local_db_path == Path(tmp_path / "a.db")
        assert config.local_quota_bytes == 1024
        assert config.server_port == 8080

    def test_invalid_number(self):
        with pytest.raises(ConfigurationError):
            load_config(env={"PUBLIMANAGER_REMOTE_TIMEOUT": "soon"}, secrets={})

    def test_non_positive_number(self):
        with pytest.raises(ConfigurationError):
            load_config(env={"PORT": "0"}, secrets={})

    def test_dotenv_file(self, tmp_path, monkeypatch):
        monkeypatch.delenv("PUBLIMANAGER_MAX_BODY_BYTES", raising=False)
        env_file = tmp_path / ".env"
        env_file.write_text("PUBLIMANAGER_MAX_BODY_BYTES=4096\n")

        config = load_config(secrets={}, dotenv_path=env_file)

        os.environ.pop("PUBLIMANAGER_MAX_BODY_BYTES", None)
        assert config.max_body_bytes == 4096
