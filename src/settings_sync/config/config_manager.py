"""Configuration manager layering defaults, YAML files and environment variables."""

from __future__ import annotations

from collections.abc import Iterator
from copy import deepcopy
from pathlib import Path
from typing import Any

import yaml
from pydantic import ValidationError

from settings_sync.config.env_manager import EnvManager
from settings_sync.config.schemas import AppConfig
from settings_sync.core.exceptions import ConfigError
from settings_sync.utils.logging import get_logger

logger = get_logger("config.config_manager")


def deep_merge(base: dict[str, Any], overlay: dict[str, Any]) -> dict[str, Any]:
    """Return ``base`` updated with ``overlay``; nested mappings merge key by key."""
    merged = deepcopy(base)
    for key, value in overlay.items():
        current = merged.get(key)
        if isinstance(current, dict) and isinstance(value, dict):
            merged[key] = deep_merge(current, value)
        else:
            merged[key] = deepcopy(value)
    return merged


class ConfigManager:
    """Loads the application configuration.

    Later layers win:

    1. schema defaults
    2. YAML files, in the order given
    3. ``SETTINGS_SYNC_*`` environment variables
    """

    def __init__(
        self,
        config_paths: list[Path | str] | None = None,
        env_manager: EnvManager | None = None,
    ):
        self.env_manager = env_manager or EnvManager()
        self.config_paths = [Path(p).expanduser() for p in (config_paths or [])]
        self._config: AppConfig | None = None

    @property
    def config(self) -> AppConfig | None:
        """The configuration produced by the last ``load_config()``."""
        return self._config

    def load_config(self) -> AppConfig:
        """Merge every layer and validate the result.

        Raises:
            ConfigError: If a file cannot be parsed or the merged values are invalid
        """
        logger.info("Loading configuration")
        config_data: dict[str, Any] = {}
        for source, layer in self._layers():
            config_data = deep_merge(config_data, layer)
            logger.debug(f"Applied configuration layer from {source}")

        try:
            config = AppConfig.from_dict(config_data)
        except ValidationError as e:
            message = f"Invalid configuration: {e}"
            logger.error(message)
            raise ConfigError(message) from e

        self._config = config
        logger.info("Configuration loaded")
        return config

    def _layers(self) -> Iterator[tuple[str, dict[str, Any]]]:
        for path in self.config_paths:
            data = self._load_yaml_file(path)
            if data:
                yield str(path), data

        env_data = self.env_manager.get_config_from_env()
        if env_data:
            yield "environment", env_data

    def _load_yaml_file(self, file_path: Path) -> dict[str, Any] | None:
        """Read one YAML layer; missing, empty or non-mapping files yield None.

        Raises:
            ConfigError: If the file exists but is not valid YAML
        """
        if not file_path.exists():
            logger.debug(f"Skipping missing config file {file_path}")
            return None

        try:
            data = yaml.safe_load(file_path.read_text(encoding="utf-8"))
        except (yaml.YAMLError, OSError, UnicodeDecodeError) as e:
            raise ConfigError(f"Failed to load config from {file_path}: {e}") from e

        if data is None:
            logger.warning(f"Config file {file_path} is empty")
            return None
        if not isinstance(data, dict):
            logger.warning(f"Ignoring {file_path}: top level is not a mapping")
            return None
        return data
