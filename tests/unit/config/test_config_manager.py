"""Unit tests for ConfigManager layering."""

import os
from unittest.mock import patch

import pytest

from settings_sync.config.config_manager import ConfigManager, deep_merge
from settings_sync.config.env_manager import EnvManager
from settings_sync.core.exceptions import ConfigError


@pytest.fixture
def clean_env():
    with patch.dict(os.environ, {}, clear=True):
        yield


@pytest.mark.usefixtures("clean_env")
class TestConfigManager:
    """Test configuration loading from defaults, YAML and environment."""

    def test_defaults_without_sources(self):
        config = ConfigManager().load_config()

        assert config.provider.default_base_url == "http://localhost:1234"
        assert config.provider.request_timeout == 10.0
        assert config.provider.connection_test_timeout == 5.0
        assert config.provider.refresh_interval == 300.0
        assert config.log_level == "INFO"

    def test_yaml_files_merge_in_order(self, tmp_path):
        base = tmp_path / "base.yaml"
        local = tmp_path / "local.yaml"
        base.write_text(
            "provider:\n  refresh_interval: 120\n  request_timeout: 3\n"
            "log_level: warning\n",
            encoding="utf-8",
        )
        local.write_text("provider:\n  refresh_interval: 30\n", encoding="utf-8")

        manager = ConfigManager([base, local])
        config = manager.load_config()

        assert config.provider.refresh_interval == 30
        assert config.provider.request_timeout == 3
        assert config.log_level == "WARNING"
        assert manager.config is config

    def test_environment_wins_over_yaml(self, tmp_path):
        path = tmp_path / "config.yaml"
        path.write_text("provider:\n  refresh_interval: 120\n", encoding="utf-8")

        with patch.dict(
            os.environ, {"SETTINGS_SYNC_PROVIDER__REFRESH_INTERVAL": "15"}
        ):
            config = ConfigManager([path], EnvManager()).load_config()

        assert config.provider.refresh_interval == 15

    def test_missing_and_empty_files_are_skipped(self, tmp_path):
        empty = tmp_path / "empty.yaml"
        empty.write_text("", encoding="utf-8")
        listing = tmp_path / "list.yaml"
        listing.write_text("- 1\n- 2\n", encoding="utf-8")

        config = ConfigManager(
            [tmp_path / "missing.yaml", empty, listing]
        ).load_config()

        assert config.provider.refresh_interval == 300.0

    def test_invalid_yaml_raises(self, tmp_path):
        path = tmp_path / "broken.yaml"
        path.write_text("provider: [unclosed", encoding="utf-8")

        with pytest.raises(ConfigError, match="Failed to load config"):
            ConfigManager([path]).load_config()

    def test_undecodable_yaml_raises(self, tmp_path):
        path = tmp_path / "latin1.yaml"
        path.write_bytes(b"provider:\n  default_base_url: http://h\xe9te:1234\n")

        with pytest.raises(ConfigError, match="Failed to load config"):
            ConfigManager([path]).load_config()

    def test_invalid_values_raise(self, tmp_path):
        path = tmp_path / "bad.yaml"
        path.write_text("provider:\n  refresh_interval: 0\n", encoding="utf-8")

        with pytest.raises(ConfigError, match="Invalid configuration"):
            ConfigManager([path]).load_config()

    def test_deep_merge_does_not_mutate_inputs(self):
        base = {"provider": {"request_timeout": 1}}
        overlay = {"provider": {"refresh_interval": 2}}

        merged = deep_merge(base, overlay)

        assert merged == {"provider": {"request_timeout": 1, "refresh_interval": 2}}
        assert base == {"provider": {"request_timeout": 1}}
