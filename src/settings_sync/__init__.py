"""Settings Sync - working-copy settings management with local provider integration."""

__version__ = "0.1.0"

from . import config, core, providers, settings, store, utils

# Main settings aggregator
from .settings.aggregator import SettingsAggregator

__all__ = [
    "SettingsAggregator",
    "config",
    "core",
    "providers",
    "settings",
    "store",
    "utils",
]
