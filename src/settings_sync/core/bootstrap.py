"""Application bootstrap sequence and dependency wiring."""

import logging
from pathlib import Path

from settings_sync.config.config_manager import ConfigManager
from settings_sync.config.env_manager import EnvManager
from settings_sync.config.path_manager import PathManager
from settings_sync.config.schemas import AppConfig
from settings_sync.core.exceptions import ConfigError
from settings_sync.core.notifications import NotificationCenter
from settings_sync.providers.client import ModelListingClient
from settings_sync.settings.aggregator import SettingsAggregator
from settings_sync.store.file_store import FileConfigurationStore
from settings_sync.utils.logging import get_logger, setup_logging

logger = get_logger("core.bootstrap")


def _setup_environment(env_manager: EnvManager) -> None:
    """Load .env files into the process environment."""
    try:
        env_manager.load_env_files()
    except ConfigError as e:
        logger.warning("Failed to load .env files: %s", e)


def load_config(
    config_paths: list[Path | str] | None = None,
    *,
    env_manager: EnvManager | None = None,
) -> AppConfig:
    """Load application configuration from YAML files and the environment."""
    env_manager = env_manager or EnvManager()
    _setup_environment(env_manager)
    return ConfigManager(config_paths, env_manager=env_manager).load_config()


def build_client(config: AppConfig) -> ModelListingClient:
    return ModelListingClient(
        request_timeout=config.provider.request_timeout,
        connection_test_timeout=config.provider.connection_test_timeout,
    )


def build_store(
    config: AppConfig, *, home: Path | None = None
) -> FileConfigurationStore:
    paths = PathManager(config.paths, home=home)
    return FileConfigurationStore(
        paths.get_settings_path(), paths.get_preferences_path()
    )


def bootstrap(
    config_paths: list[Path | str] | None = None,
    *,
    log_level: int | None = None,
    config: AppConfig | None = None,
    notifier: NotificationCenter | None = None,
) -> SettingsAggregator:
    """Initialize logging and configuration and build a settings aggregator.

    Args:
        config_paths: Optional YAML configuration files
        log_level: Override the configured log level
        config: Optional pre-built configuration (for testing)
        notifier: Optional notification center shared with the caller

    Returns:
        A SettingsAggregator wired to the file store; call ``load()`` next

    Raises:
        ConfigError: If the configuration is invalid
    """
    setup_logging(level=log_level or logging.INFO)
    logger.debug("Starting application bootstrap")

    config = config or load_config(config_paths)
    if log_level is None:
        logging.getLogger().setLevel(config.log_level)

    aggregator = SettingsAggregator(
        build_store(config),
        client=build_client(config),
        notifier=notifier,
        config=config,
    )
    logger.debug("Application bootstrap completed")
    return aggregator
