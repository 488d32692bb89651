from __future__ import annotations

import asyncio
from copy import deepcopy
from typing import Any

import pytest

from settings_sync.core.exceptions import StoreError
from settings_sync.core.notifications import NotificationCenter


def pytest_configure(config):
    config.addinivalue_line("markers", "asyncio: mark test as async")


def pytest_collection_modifyitems(config, items):
    """Mark coroutine tests as asyncio tests."""
    for item in items:
        if hasattr(item, "function") and asyncio.iscoroutinefunction(item.function):
            item.add_marker(pytest.mark.asyncio)


class InMemoryStore:
    """ConfigurationStore fake with switchable failures."""

    def __init__(
        self,
        document: Any = None,
        preferences: dict[str, str] | None = None,
    ):
        self.document = {} if document is None else deepcopy(document)
        self.preferences: dict[str, str] = dict(preferences or {})
        self.saved_documents: list[dict[str, Any]] = []
        self.fail_load = False
        self.fail_save = False
        self.fail_save_setting = False

    async def get_setting(self, key: str) -> str | None:
        return self.preferences.get(key)

    async def save_setting(self, key: str, value: str) -> None:
        if self.fail_save_setting:
            raise StoreError(f"cannot write {key}")
        self.preferences[key] = value

    async def get_claude_settings(self) -> Any:
        if self.fail_load:
            raise StoreError("settings.json is unreadable")
        return deepcopy(self.document)

    async def save_claude_settings(self, settings: dict[str, Any]) -> None:
        if self.fail_save:
            raise StoreError("disk full")
        self.document = deepcopy(settings)
        self.saved_documents.append(deepcopy(settings))


class ScriptedModelClient:
    """Model-listing client fake keyed by base URL.

    A response may be a list of model ids or an exception to raise. Setting
    ``gates[url]`` to an ``asyncio.Event`` holds calls for that URL until the
    event is set.
    """

    def __init__(self, responses: dict[str, Any] | None = None, reachable: bool = True):
        self.responses: dict[str, Any] = dict(responses or {})
        self.gates: dict[str, asyncio.Event] = {}
        self.reachable = reachable
        self.calls: list[str] = []
        self.checked_urls: list[str] = []

    async def fetch_models(self, base_url: str) -> list[str]:
        self.calls.append(base_url)
        response = self.responses.get(base_url, [])
        gate = self.gates.get(base_url)
        if gate is not None:
            await gate.wait()
        if isinstance(response, Exception):
            raise response
        return list(response)

    async def test_connection(self, base_url: str) -> bool:
        self.checked_urls.append(base_url)
        return self.reachable


@pytest.fixture
def store():
    return InMemoryStore()


@pytest.fixture
def model_client():
    return ScriptedModelClient()


@pytest.fixture
def notifier():
    return NotificationCenter()


@pytest.fixture
def store_factory():
    return InMemoryStore


@pytest.fixture
def client_factory():
    return ScriptedModelClient
