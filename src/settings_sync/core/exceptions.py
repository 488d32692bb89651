from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from settings_sync.settings.aggregator import SaveReport


class SettingsSyncError(Exception):
    """Base exception for all Settings Sync errors.

    The message is automatically prefixed with the subsystem name in square brackets.
    """

    subsystem = "core"

    def __init__(self, message: str, *, subsystem: str | None = None) -> None:
        self.subsystem = subsystem or self.subsystem
        self.message = message
        super().__init__(f"[{self.subsystem}] {message}")


# ─── Subsystem-level exceptions ───────────────────────────────────────────────


class ConfigError(SettingsSyncError):
    """Raised for application configuration loading or parsing errors."""

    subsystem = "config"


class StoreError(SettingsSyncError):
    """Raised when the configuration store cannot read or write a value."""

    subsystem = "store"


class SettingsError(SettingsSyncError):
    """Raised for issues with the working settings copy."""

    subsystem = "settings"


class CLIError(SettingsSyncError):
    """Raised for CLI-specific logic or user input issues."""

    subsystem = "cli"


# ─── Settings lifecycle conditions ────────────────────────────────────────────


class LoadDegradedError(SettingsError):
    """The persisted document was missing or malformed; an empty one was used."""


class SaveFailedError(SettingsError):
    """Persisting the canonical settings document failed; nothing was saved."""


class DeferredCommitFailedError(SettingsError):
    """One or more deferred sub-module commits failed after the settings were saved."""

    def __init__(self, report: SaveReport) -> None:
        self.report = report
        names = ", ".join(sorted(report.failed))
        super().__init__(
            f"Settings were saved, but these changes could not be committed: {names}"
        )

    @property
    def failed(self) -> dict[str, str]:
        return self.report.failed
