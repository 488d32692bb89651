"""CLI commands for Settings Sync."""

from . import env, permissions, provider, settings

__all__ = ["env", "permissions", "provider", "settings"]
