"""File-backed configuration store.

The settings document is JSON (the format the CLI reading it expects); the
single-value preferences live in a small YAML mapping next to it. File access
runs in a worker thread so callers on the event loop are never blocked.
"""

from __future__ import annotations

import asyncio
import json
from pathlib import Path
from typing import Any

import yaml

from settings_sync.core.exceptions import StoreError
from settings_sync.utils.logging import get_logger

logger = get_logger("store.file_store")


class FileConfigurationStore:
    """ConfigurationStore backed by ``settings.json`` and a preferences YAML file."""

    def __init__(self, settings_path: Path, preferences_path: Path):
        self.settings_path = Path(settings_path)
        self.preferences_path = Path(preferences_path)
        self._lock = asyncio.Lock()

    # ── single-value preferences ────────────────────────────────────────────

    async def get_setting(self, key: str) -> str | None:
        try:
            preferences = await asyncio.to_thread(self._read_preferences)
        except StoreError as e:
            logger.warning("Could not read preference %s: %s", key, e)
            return None

        value = preferences.get(key)
        if value is None:
            return None
        if isinstance(value, bool):
            return "true" if value else "false"
        return str(value)

    async def save_setting(self, key: str, value: str) -> None:
        async with self._lock:
            await asyncio.to_thread(self._write_preference, key, value)
        logger.debug("Saved preference %s", key)

    def _read_preferences(self) -> dict[str, Any]:
        if not self.preferences_path.exists():
            return {}
        try:
            with open(self.preferences_path, encoding="utf-8") as f:
                data = yaml.safe_load(f) or {}
        except (yaml.YAMLError, OSError, UnicodeDecodeError) as e:
            raise StoreError(
                f"Failed to read preferences from {self.preferences_path}: {e}"
            ) from e
        if not isinstance(data, dict):
            raise StoreError(
                f"Preferences file {self.preferences_path} is not a mapping"
            )
        return data

    def _write_preference(self, key: str, value: str) -> None:
        try:
            preferences = self._read_preferences()
        except StoreError:
            logger.warning(
                "Replacing unreadable preferences file %s", self.preferences_path
            )
            preferences = {}
        preferences[key] = str(value)
        try:
            self.preferences_path.parent.mkdir(parents=True, exist_ok=True)
            with open(self.preferences_path, "w", encoding="utf-8") as f:
                yaml.safe_dump(preferences, f, default_flow_style=False)
        except (OSError, yaml.YAMLError, UnicodeError) as e:
            raise StoreError(
                f"Failed to save preference {key} to {self.preferences_path}: {e}"
            ) from e

    # ── settings document ───────────────────────────────────────────────────

    async def get_claude_settings(self) -> Any:
        return await asyncio.to_thread(self._read_settings)

    async def save_claude_settings(self, settings: dict[str, Any]) -> None:
        async with self._lock:
            await asyncio.to_thread(self._write_settings, settings)
        logger.info("Settings saved to %s", self.settings_path)

    def _read_settings(self) -> Any:
        if not self.settings_path.exists():
            logger.debug("Settings file %s does not exist", self.settings_path)
            return {}
        try:
            with open(self.settings_path, encoding="utf-8") as f:
                return json.load(f)
        except (OSError, ValueError) as e:
            raise StoreError(
                f"Failed to read settings from {self.settings_path}: {e}"
            ) from e

    def _write_settings(self, settings: dict[str, Any]) -> None:
        tmp_path = self.settings_path.with_suffix(self.settings_path.suffix + ".tmp")
        try:
            self.settings_path.parent.mkdir(parents=True, exist_ok=True)
            with open(tmp_path, "w", encoding="utf-8") as f:
                json.dump(settings, f, indent=2, ensure_ascii=False)
                f.write("\n")
            tmp_path.replace(self.settings_path)
        except (OSError, TypeError, ValueError) as e:
            tmp_path.unlink(missing_ok=True)
            raise StoreError(
                f"Failed to save settings to {self.settings_path}: {e}"
            ) from e
