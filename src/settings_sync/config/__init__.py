"""Configuration management for Settings Sync."""

from .config_manager import ConfigManager
from .env_manager import EnvManager
from .path_manager import PathManager
from .schemas import AppConfig, ClaudeSettings, PermissionsSettings, ProviderConfig

__all__ = [
    "AppConfig",
    "ClaudeSettings",
    "ConfigManager",
    "EnvManager",
    "PathManager",
    "PermissionsSettings",
    "ProviderConfig",
]
