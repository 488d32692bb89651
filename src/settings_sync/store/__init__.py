"""Persistence backends for settings and preferences."""

from .file_store import FileConfigurationStore

__all__ = ["FileConfigurationStore"]
