"""Tests for configuration management."""

from pathlib import Path

import pytest

from zapscan import config


def _write_project_env(project_dir: Path, text: str) -> None:
    storage = project_dir / ".zapscan"
    storage.mkdir(parents=True, exist_ok=True)
    (storage / ".env").write_text(text)


class TestLoadEnvFile:
    """Tests for load_env_file."""

    def test_load_env_file_missing_returns_empty(self, temp_dir: Path) -> None:
        assert config.load_env_file(temp_dir / ".env") == {}

    def test_load_env_file_parses_and_strips(self, temp_dir: Path) -> None:
        env_path = temp_dir / ".env"
        env_path.write_text("# relay\n\nZAPSCAN_PROXY_URL=\"http://relay:3001\"\nZAPSCAN_API_KEY='k'\n")
        assert config.load_env_file(env_path) == {
            "ZAPSCAN_PROXY_URL": "http://relay:3001",
            "ZAPSCAN_API_KEY": "k",
        }


class TestLoadGlobalConfig:
    """Tests for load_global_config."""

    def test_missing_returns_empty(self) -> None:
        assert config.load_global_config() == {}

    def test_loads_yml(self) -> None:
        config_dir = config.global_config_dir()
        config_dir.mkdir()
        (config_dir / "config.yml").write_text("ZAPSCAN_POLL_INTERVAL: 0.5\nZAPSCAN_PATH_PREFIX: ''\n")
        assert config.load_global_config() == {
            "ZAPSCAN_POLL_INTERVAL": 0.5,
            "ZAPSCAN_PATH_PREFIX": "",
        }

    def test_non_mapping_yml_ignored(self) -> None:
        config_dir = config.global_config_dir()
        config_dir.mkdir()
        (config_dir / "config.yml").write_text("- just\n- a list\n")
        assert config.load_global_config() == {}


class TestGetConfig:
    """Tests for get_config priority."""

    def test_env_beats_project_and_global(
        self, monkeypatch: pytest.MonkeyPatch, temp_dir: Path
    ) -> None:
        project = temp_dir / "proj"
        _write_project_env(project, "ZAPSCAN_PROXY_URL=http://project:3001\n")
        config_dir = config.global_config_dir()
        config_dir.mkdir()
        (config_dir / "config.yml").write_text("ZAPSCAN_PROXY_URL: http://global:3001\n")

        assert config.get_proxy_url(project) == "http://project:3001"
        assert config.get_proxy_url() == "http://global:3001"

        monkeypatch.setenv("ZAPSCAN_PROXY_URL", "http://env:3001")
        assert config.get_proxy_url(project) == "http://env:3001"

    def test_defaults(self) -> None:
        assert config.get_proxy_url() == "http://localhost:3001"
        assert config.get_path_prefix() == "/zap"
        assert config.get_api_key() is None
        assert config.get_log_level() == "WARNING"
        assert config.get_history_path() == config.global_config_dir() / "history.json"

    def test_history_path_override(self, monkeypatch: pytest.MonkeyPatch, temp_dir: Path) -> None:
        monkeypatch.setenv("ZAPSCAN_HISTORY_PATH", str(temp_dir / "h.json"))
        assert config.get_history_path() == temp_dir / "h.json"


class TestScanSettings:
    """Tests for ScanSettings.from_config."""

    def test_defaults(self) -> None:
        settings = config.load_scan_settings()
        assert settings.proxy_url == "http://localhost:3001"
        assert settings.request_timeout == 30.0
        assert settings.status_timeout == 5.0
        assert settings.probe_timeout == 10.0
        assert settings.poll_interval == 2.0
        assert settings.spider_max_attempts == 30
        assert settings.quick_max_attempts == 60
        assert settings.full_max_attempts == 300

    def test_overrides_from_env(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("ZAPSCAN_TIMEOUT", "12.5")
        monkeypatch.setenv("ZAPSCAN_FULL_MAX_ATTEMPTS", "0")
        monkeypatch.setenv("ZAPSCAN_API_KEY", "secret")

        settings = config.ScanSettings.from_config()

        assert settings.request_timeout == 12.5
        assert settings.full_max_attempts == 0
        assert settings.api_key == "secret"

    def test_invalid_numbers_fall_back(self, monkeypatch: pytest.MonkeyPatch, temp_dir: Path) -> None:
        project = temp_dir / "proj"
        _write_project_env(project, "ZAPSCAN_POLL_INTERVAL=soon\nZAPSCAN_QUICK_MAX_ATTEMPTS=-4\n")

        settings = config.ScanSettings.from_config(project)

        assert settings.poll_interval == 2.0
        assert settings.quick_max_attempts == 60
