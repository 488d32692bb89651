"""
Settings aggregator.

Owns the working copy of the user's settings document and composes the
permission rule lists, the environment variable map, the provider
integration controller and the deferred sub-module changes. Edits land in
memory immediately; ``save()`` commits them in three ordered phases:

1. rebuild the canonical document from the working copy and the lists,
2. persist it (abort everything on failure),
3. commit each pending deferred change independently.
"""

from __future__ import annotations

from copy import deepcopy
from typing import Any

from pydantic import BaseModel, Field, ValidationError

from settings_sync.config.schemas import AppConfig, ClaudeSettings
from settings_sync.core.exceptions import (
    DeferredCommitFailedError,
    LoadDegradedError,
    SaveFailedError,
    StoreError,
)
from settings_sync.core.notifications import NotificationCenter
from settings_sync.core.protocols import IConfigurationStore, IModelListingClient
from settings_sync.providers.controller import ProviderIntegrationController
from settings_sync.settings.deferred import DeferredChangeTracker
from settings_sync.settings.entries import EnvironmentVariableMap, PermissionRuleList
from settings_sync.utils.logging import get_logger

logger = get_logger("settings.aggregator")

KEY_STARTUP_INTRO = "startup_intro_enabled"

# Top-level fields that update() validates before accepting.
_VALIDATED_FIELDS = {
    "includeCoAuthoredBy",
    "verbose",
    "cleanupPeriodDays",
    "apiKeyHelper",
}


class SaveReport(BaseModel):
    """Outcome of a save."""

    settings_saved: bool = False
    committed: list[str] = Field(default_factory=list)
    failed: dict[str, str] = Field(default_factory=dict)

    @property
    def ok(self) -> bool:
        return self.settings_saved and not self.failed


class SettingsAggregator:
    """Top-level orchestrator for loading, editing and saving settings."""

    def __init__(
        self,
        store: IConfigurationStore,
        *,
        client: IModelListingClient | None = None,
        notifier: NotificationCenter | None = None,
        config: AppConfig | None = None,
    ):
        self._config = config or AppConfig()
        self._store = store
        self.notifier = notifier or NotificationCenter()

        self._settings: dict[str, Any] = {}
        self.allow_rules = PermissionRuleList("allow")
        self.deny_rules = PermissionRuleList("deny")
        self.env_vars = EnvironmentVariableMap()
        self.deferred = DeferredChangeTracker()
        self.provider = ProviderIntegrationController(
            store,
            self.env_vars,
            client=client,
            notifier=self.notifier,
            config=self._config.provider,
        )

        self.startup_intro_enabled = True
        self.load_error: LoadDegradedError | None = None
        self.loaded = False

    # ── views ───────────────────────────────────────────────────────────────

    @property
    def settings(self) -> dict[str, Any]:
        """A copy of the working document."""
        return deepcopy(self._settings)

    @property
    def typed_settings(self) -> ClaudeSettings:
        """The canonical document validated against the settings schema."""
        return ClaudeSettings.from_document(self.build_settings())

    def rules(self, kind: str) -> PermissionRuleList:
        if kind == "allow":
            return self.allow_rules
        if kind == "deny":
            return self.deny_rules
        raise ValueError(f"Unknown permission list: {kind!r} (expected allow or deny)")

    # ── load ────────────────────────────────────────────────────────────────

    async def load(self) -> None:
        """Pull the persisted document and preferences into the working copy.

        A missing or malformed document is replaced by an empty one; the
        condition is kept in ``load_error`` and surfaced, never raised.
        """
        logger.info("Loading settings")
        self.load_error = None

        document = await self._fetch_document()
        self._settings = document
        self._parse_permissions(document.get("permissions"))
        self._parse_env(document.get("env"))

        startup_intro = await self._store.get_setting(KEY_STARTUP_INTRO)
        self.startup_intro_enabled = startup_intro is None or startup_intro == "true"

        await self.provider.load_preferences()
        self.loaded = True
        logger.info(
            "Settings loaded",
            extra={
                "allow_rules": len(self.allow_rules),
                "deny_rules": len(self.deny_rules),
                "env_vars": len(self.env_vars),
            },
        )

    async def _fetch_document(self) -> dict[str, Any]:
        try:
            document = await self._store.get_claude_settings()
        except StoreError as e:
            self._record_degraded_load(str(e), cause=e)
            return {}

        if not isinstance(document, dict):
            self._record_degraded_load(
                f"settings document is a {type(document).__name__}, not an object"
            )
            return {}
        return deepcopy(document)

    def _record_degraded_load(
        self, reason: str, cause: Exception | None = None
    ) -> None:
        error = LoadDegradedError(f"Using empty settings: {reason}")
        error.__cause__ = cause
        self.load_error = error
        logger.warning(str(error))
        self.notifier.error(
            "Failed to load settings. Please ensure ~/.claude directory exists."
        )

    def _parse_permissions(self, permissions: Any) -> None:
        self.allow_rules.load([])
        self.deny_rules.load([])
        if not isinstance(permissions, dict):
            return
        if isinstance(permissions.get("allow"), list):
            self.allow_rules.load(permissions["allow"])
        if isinstance(permissions.get("deny"), list):
            self.deny_rules.load(permissions["deny"])

    def _parse_env(self, env: Any) -> None:
        self.env_vars.load(env if isinstance(env, dict) else {})

    # ── edits ───────────────────────────────────────────────────────────────

    def update(self, field: str, value: Any) -> None:
        """Set a top-level field on the working document; ``None`` removes it.

        Owned scalar fields are validated first and the working copy is left
        untouched if the value is rejected.

        Raises:
            ValueError: If the value is invalid for an owned field
        """
        if field in _VALIDATED_FIELDS and value is not None:
            try:
                ClaudeSettings.model_validate({field: value})
            except ValidationError as e:
                raise ValueError(f"Invalid value for {field}: {value!r}") from e

        if value is None:
            self._settings.pop(field, None)
        else:
            self._settings[field] = deepcopy(value)

    async def set_startup_intro(self, enabled: bool) -> bool:
        """Persist the startup intro preference immediately."""
        self.startup_intro_enabled = enabled
        try:
            await self._store.save_setting(
                KEY_STARTUP_INTRO, "true" if enabled else "false"
            )
        except StoreError as e:
            logger.error(f"Failed to save startup intro preference: {e}")
            self.notifier.error("Failed to update startup intro preference")
            return False
        return True

    # ── save ────────────────────────────────────────────────────────────────

    def build_settings(self) -> dict[str, Any]:
        """Canonical document: working copy plus the filtered rule and env lists."""
        document = deepcopy(self._settings)

        permissions = document.get("permissions")
        permissions = dict(permissions) if isinstance(permissions, dict) else {}
        permissions["allow"] = self.allow_rules.to_persisted()
        permissions["deny"] = self.deny_rules.to_persisted()
        document["permissions"] = permissions
        document["env"] = self.env_vars.to_persisted()
        return document

    async def save(self) -> SaveReport:
        """Persist the working copy, then commit pending deferred changes.

        Returns:
            The report of a fully successful save

        Raises:
            SaveFailedError: If the settings document could not be persisted;
                no deferred change was attempted
            DeferredCommitFailedError: If the document was saved but at least
                one deferred change failed to commit
        """
        canonical = self.build_settings()

        try:
            await self._store.save_claude_settings(deepcopy(canonical))
        except StoreError as e:
            logger.error(f"Failed to save settings: {e}")
            self.notifier.error("Failed to save settings")
            raise SaveFailedError(f"Failed to save settings: {e.message}") from e

        self._settings = canonical
        report = SaveReport(settings_saved=True)

        commits = await self.deferred.commit_pending()
        report.committed = commits.committed
        report.failed = commits.failed

        if report.failed:
            error = DeferredCommitFailedError(report)
            logger.warning(str(error))
            self.notifier.error(error.message)
            raise error

        logger.info("Settings saved successfully")
        self.notifier.success("Settings saved successfully!")
        return report

    async def close(self) -> None:
        """Tear down the session, stopping background provider refreshes."""
        await self.provider.shutdown()
