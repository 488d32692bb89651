"""Protocols (interfaces) for core components.

This module defines abstract interfaces (using Protocol) that establish contracts
between the settings core and its external collaborators, helping to reduce
coupling and improve testability.
"""

from typing import Any, Protocol, runtime_checkable


@runtime_checkable
class IConfigurationStore(Protocol):
    """Persistence for single-value preferences and the structured settings document.

    No transactional guarantee is assumed across keys: every call may fail on
    its own.
    """

    async def get_setting(self, key: str) -> str | None:
        """Read a single preference.

        Returns:
            The stored string, or None when absent or on any failure.
            Implementations never raise.
        """
        ...

    async def save_setting(self, key: str, value: str) -> None:
        """Persist a single preference.

        Raises:
            StoreError: If the value could not be written
        """
        ...

    async def get_claude_settings(self) -> Any:
        """Read the structured settings document.

        Returns:
            The decoded document. Callers must check that it is a mapping.

        Raises:
            StoreError: If the document could not be read or decoded
        """
        ...

    async def save_claude_settings(self, settings: dict[str, Any]) -> None:
        """Persist the structured settings document wholesale.

        Raises:
            StoreError: If the document could not be written
        """
        ...


@runtime_checkable
class IDeferredChange(Protocol):
    """A sub-module edit staged in memory until the aggregate save runs."""

    def has_pending_change(self) -> bool:
        """Whether the sub-module holds an uncommitted edit."""
        ...

    async def commit(self) -> None:
        """Write the staged edit. Raises on failure."""
        ...

    def clear_pending(self) -> None:
        """Mark the staged edit as committed."""
        ...


@runtime_checkable
class IModelListingClient(Protocol):
    """Access to the model-listing surface of an OpenAI-compatible server."""

    async def fetch_models(self, base_url: str) -> list[str]:
        """Return the model identifiers the server advertises, in response order.

        Raises:
            ProviderUnreachableError: On network errors, timeouts or non-success status
            ProviderMalformedResponseError: If the body lacks the model-list shape
        """
        ...

    async def test_connection(self, base_url: str) -> bool:
        """Lightweight reachability check. Never raises."""
        ...
