"""Core building blocks shared by every Settings Sync subsystem."""

from .exceptions import (
    CLIError,
    ConfigError,
    DeferredCommitFailedError,
    LoadDegradedError,
    SaveFailedError,
    SettingsError,
    SettingsSyncError,
    StoreError,
)
from .notifications import Notification, NotificationCenter, NotificationLevel

__all__ = [
    "CLIError",
    "ConfigError",
    "DeferredCommitFailedError",
    "LoadDegradedError",
    "Notification",
    "NotificationCenter",
    "NotificationLevel",
    "SaveFailedError",
    "SettingsError",
    "SettingsSyncError",
    "StoreError",
]
