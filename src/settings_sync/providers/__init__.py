"""Local OpenAI-compatible provider integration."""

from .client import ModelListingClient, ProviderHealth, models_url
from .controller import (
    OVERRIDE_KEYS,
    ProviderIntegrationController,
    ProviderIntegrationState,
    ProviderStatus,
    derive_overrides,
)
from .exceptions import (
    ProviderError,
    ProviderMalformedResponseError,
    ProviderUnreachableError,
)

__all__ = [
    "OVERRIDE_KEYS",
    "ModelListingClient",
    "ProviderError",
    "ProviderHealth",
    "ProviderIntegrationController",
    "ProviderIntegrationState",
    "ProviderMalformedResponseError",
    "ProviderStatus",
    "ProviderUnreachableError",
    "derive_overrides",
    "models_url",
]
