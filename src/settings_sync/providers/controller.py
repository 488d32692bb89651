"""
Provider integration controller.

Owns the enable/disable state of the local provider integration, discovers
models over HTTP, keeps the selected model, and writes the derived
environment overrides into the working ``env`` map. Discovery results are
guarded by a request generation so that a superseded call never overwrites
the outcome of a newer one.
"""

from __future__ import annotations

import asyncio
from datetime import datetime, timezone
from enum import Enum

from pydantic import BaseModel, Field

from settings_sync.config.schemas import ProviderConfig
from settings_sync.core.exceptions import StoreError
from settings_sync.core.notifications import NotificationCenter
from settings_sync.core.protocols import IConfigurationStore, IModelListingClient
from settings_sync.providers.client import ModelListingClient, ProviderHealth
from settings_sync.providers.exceptions import ProviderError
from settings_sync.settings.entries import EnvironmentVariableMap
from settings_sync.utils.logging import get_logger

logger = get_logger("providers.controller")

KEY_ENABLED = "lm_studio_enabled"
KEY_URL = "lm_studio_url"
KEY_SELECTED_MODEL = "lm_studio_selected_model"

ANTHROPIC_API_BASE = "ANTHROPIC_API_BASE"
ANTHROPIC_MODEL = "ANTHROPIC_MODEL"
OPENAI_API_BASE = "OPENAI_API_BASE"
OVERRIDE_KEYS = (ANTHROPIC_API_BASE, ANTHROPIC_MODEL, OPENAI_API_BASE)


class ProviderStatus(str, Enum):
    DISABLED = "disabled"
    LOADING = "enabled-loading"
    READY = "enabled-ready"
    ERROR = "enabled-error"


class ProviderIntegrationState(BaseModel):
    """Snapshot of the provider integration."""

    enabled: bool = False
    base_url: str = "http://localhost:1234"
    available_models: list[str] = Field(default_factory=list)
    selected_model: str = ""
    in_flight_generation: int = Field(
        default=0, ge=0, description="Generation of the most recently issued discovery"
    )
    last_refresh: datetime | None = Field(
        default=None, description="When a discovery result was last applied"
    )
    status: ProviderStatus = ProviderStatus.DISABLED
    last_error: str | None = None


def derive_overrides(base_url: str, model: str) -> dict[str, str]:
    """Environment overrides that route inference to the local provider."""
    api_base = f"{base_url.rstrip('/')}/v1"
    return {
        ANTHROPIC_API_BASE: api_base,
        ANTHROPIC_MODEL: model,
        OPENAI_API_BASE: api_base,
    }


class ProviderIntegrationController:
    """State machine for the local provider integration."""

    def __init__(
        self,
        store: IConfigurationStore,
        env: EnvironmentVariableMap,
        *,
        client: IModelListingClient | None = None,
        notifier: NotificationCenter | None = None,
        config: ProviderConfig | None = None,
    ):
        self._config = config or ProviderConfig()
        self._store = store
        self._env = env
        self._client = client or ModelListingClient(
            request_timeout=self._config.request_timeout,
            connection_test_timeout=self._config.connection_test_timeout,
        )
        self._notifier = notifier or NotificationCenter()
        self._state = ProviderIntegrationState(base_url=self._config.default_base_url)
        self._refresh_task: asyncio.Task | None = None
        self._background: set[asyncio.Task] = set()

    # ── read-only views ─────────────────────────────────────────────────────

    @property
    def state(self) -> ProviderIntegrationState:
        return self._state.model_copy(deep=True)

    @property
    def client(self) -> IModelListingClient:
        return self._client

    @property
    def status(self) -> ProviderStatus:
        return self._state.status

    @property
    def enabled(self) -> bool:
        return self._state.enabled

    @property
    def refresh_active(self) -> bool:
        return self._refresh_task is not None and not self._refresh_task.done()

    # ── lifecycle ───────────────────────────────────────────────────────────

    async def load_preferences(self) -> None:
        """Restore persisted preferences; resumes discovery if previously enabled."""
        enabled = await self._store.get_setting(KEY_ENABLED)
        url = await self._store.get_setting(KEY_URL)
        selected_model = await self._store.get_setting(KEY_SELECTED_MODEL)

        self._state.enabled = enabled == "true"
        self._state.base_url = url or self._config.default_base_url
        self._state.selected_model = selected_model or ""
        self._state.available_models = []
        self._state.last_error = None

        if not self._state.enabled:
            self._state.status = ProviderStatus.DISABLED
            return

        logger.info(f"Provider integration enabled for {self._state.base_url}")
        self._state.status = ProviderStatus.LOADING
        self.recompute_overrides()
        self._start_refresh_timer()
        await self.discover_models()

    async def shutdown(self) -> None:
        """Stop the refresh timer and wait for background discoveries to settle."""
        self._cancel_refresh_timer()
        if self._background:
            await asyncio.gather(*self._background, return_exceptions=True)

    # ── user operations ─────────────────────────────────────────────────────

    async def toggle_enabled(self, enabled: bool) -> None:
        if enabled:
            logger.info("Enabling provider integration")
            self._state.enabled = True
            self._state.status = ProviderStatus.LOADING
            self.recompute_overrides()
            await self._persist(KEY_ENABLED, "true")
            self._start_refresh_timer()
            await self.discover_models()
            return

        logger.info("Disabling provider integration")
        self._state.enabled = False
        self._state.status = ProviderStatus.DISABLED
        self._state.last_error = None
        self._advance_generation()
        self._cancel_refresh_timer()
        self.recompute_overrides()
        await self._persist(KEY_ENABLED, "false")

    async def discover_models(self, *, announce: bool = True) -> bool:
        """Refresh the model list from the provider.

        Args:
            announce: Whether a successful refresh produces a notification

        Returns:
            True if this call's result was applied, False if it failed or was
            superseded by a newer call or by disabling the integration
        """
        if not self._state.enabled:
            logger.debug("Skipping model discovery while the integration is disabled")
            return False

        generation = self._advance_generation()
        base_url = self._state.base_url
        self._state.status = ProviderStatus.LOADING

        try:
            models = await self._client.fetch_models(base_url)
        except ProviderError as err:
            if self._is_stale(generation):
                logger.debug(
                    f"Discarding failed discovery #{generation} for {base_url}"
                )
                return False
            self._state.available_models = []
            self._state.status = ProviderStatus.ERROR
            self._state.last_error = (
                f"Failed to fetch models from {base_url}: {err.message}"
            )
            logger.error(self._state.last_error)
            self._notifier.error(self._state.last_error)
            return False

        if self._is_stale(generation):
            logger.debug(f"Discarding stale discovery #{generation} for {base_url}")
            return False

        self._state.available_models = list(models)
        self._state.last_refresh = datetime.now(timezone.utc)
        self._state.status = ProviderStatus.READY
        self._state.last_error = None

        if not models:
            message = f"No models found at {base_url}. Make sure a model is loaded."
            logger.warning(message)
            self._notifier.warning(message)
            return True

        if not self._state.selected_model:
            first_model = models[0]
            logger.info(f"Auto-selected first model: {first_model}")
            self._state.selected_model = first_model
            await self._persist(KEY_SELECTED_MODEL, first_model)
            self.recompute_overrides()

        if announce:
            self._notifier.success(f"Successfully loaded {len(models)} models")
        return True

    async def select_model(self, name: str) -> bool:
        """Choose the model inference is routed to; only valid while enabled."""
        if not self._state.enabled:
            logger.warning(
                f"Ignoring model selection {name!r}: integration is disabled"
            )
            self._notifier.warning("Enable the local provider before selecting a model")
            return False

        self._state.selected_model = name
        await self._persist(KEY_SELECTED_MODEL, name)
        self.recompute_overrides()
        return True

    async def change_base_url(self, url: str) -> None:
        url = url.strip()
        self._state.base_url = url
        await self._persist(KEY_URL, url)

        if not self._state.enabled:
            return

        # Results still in flight for the previous URL must not land.
        self._advance_generation()
        self.recompute_overrides()
        self._start_refresh_timer()
        await self.discover_models()

    async def test_connection(self) -> bool:
        """Check the configured endpoint and refresh the model list on success."""
        base_url = self._state.base_url
        connected = await self._client.test_connection(base_url)

        if not connected:
            message = (
                f"Failed to connect to {base_url}. Make sure the server is running "
                "and its local server option is enabled."
            )
            logger.warning(message)
            self._notifier.error(message)
            return False

        self._notifier.success(f"Successfully connected to {base_url}")
        await self.discover_models()
        return True

    async def check_status(self, base_url: str | None = None) -> ProviderHealth:
        """Diagnostics for an endpoint, the configured one by default."""
        base_url = base_url or self._state.base_url
        if isinstance(self._client, ModelListingClient):
            return await self._client.check_status(base_url)
        connected = await self._client.test_connection(base_url)
        return ProviderHealth(url=base_url, reachable=connected)

    # ── derived state ───────────────────────────────────────────────────────

    def recompute_overrides(self) -> None:
        """Bring the derived environment overrides in line with the current state."""
        if not self._state.enabled:
            for key in OVERRIDE_KEYS:
                self._env.discard_key(key)
            return

        if not self._state.selected_model or not self._state.base_url:
            return

        overrides = derive_overrides(self._state.base_url, self._state.selected_model)
        for key, value in overrides.items():
            self._env.upsert(key, value)

    # ── internals ───────────────────────────────────────────────────────────

    def _advance_generation(self) -> int:
        self._state.in_flight_generation += 1
        return self._state.in_flight_generation

    def _is_stale(self, generation: int) -> bool:
        return (
            not self._state.enabled
            or generation != self._state.in_flight_generation
        )

    async def _persist(self, key: str, value: str) -> bool:
        try:
            await self._store.save_setting(key, value)
        except StoreError as err:
            logger.error(f"Failed to persist {key}: {err}")
            self._notifier.error(f"Failed to save preference {key}: {err.message}")
            return False
        return True

    def _start_refresh_timer(self) -> None:
        self._cancel_refresh_timer()
        self._refresh_task = asyncio.create_task(
            self._refresh_loop(), name="provider-model-refresh"
        )
        logger.info(
            f"Started model refresh every {self._config.refresh_interval:g}s"
        )

    def _cancel_refresh_timer(self) -> None:
        task, self._refresh_task = self._refresh_task, None
        if task is not None and not task.done():
            task.cancel()
            logger.info("Stopped model refresh timer")

    async def _refresh_loop(self) -> None:
        while True:
            await asyncio.sleep(self._config.refresh_interval)
            if not self._state.enabled:
                return
            # Run detached so cancelling the timer never aborts an HTTP call.
            task = asyncio.create_task(self._timed_refresh())
            self._background.add(task)
            task.add_done_callback(self._background.discard)

    async def _timed_refresh(self) -> None:
        try:
            await self.discover_models(announce=False)
        except Exception:
            logger.exception("Unexpected error during scheduled model refresh")
