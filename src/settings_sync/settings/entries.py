"""Editable, UI-addressable collections backing the settings document.

Entries carry synthetic ids that exist only for the editing session; the
persisted form is rebuilt from values on save.
"""

from __future__ import annotations

import itertools
from collections.abc import Iterable, Iterator, Mapping
from typing import Any

from pydantic import BaseModel

from settings_sync.utils.logging import get_logger

logger = get_logger("settings.entries")


def _is_blank(value: str | None) -> bool:
    return not value or not str(value).strip()


class PermissionRule(BaseModel):
    id: str
    value: str = ""


class EnvironmentVariable(BaseModel):
    id: str
    key: str = ""
    value: str = ""


class _EntryList:
    """Shared id bookkeeping for the ordered entry collections."""

    def __init__(self, prefix: str):
        self.prefix = prefix
        self._entries: list[Any] = []
        self._ids = itertools.count()

    def _new_id(self) -> str:
        return f"{self.prefix}-{next(self._ids)}"

    def _reset(self) -> None:
        self._entries = []
        self._ids = itertools.count()

    def _find(self, entry_id: str) -> Any | None:
        return next((e for e in self._entries if e.id == entry_id), None)

    def remove(self, entry_id: str) -> bool:
        """Delete the entry with ``entry_id``; returns False if it was absent."""
        entry = self._find(entry_id)
        if entry is None:
            return False
        self._entries.remove(entry)
        return True

    def ids(self) -> list[str]:
        return [e.id for e in self._entries]

    def __iter__(self) -> Iterator[Any]:
        return iter(list(self._entries))

    def __len__(self) -> int:
        return len(self._entries)


class PermissionRuleList(_EntryList):
    """Ordered permission rules for one list (``allow`` or ``deny``)."""

    def __init__(self, kind: str):
        super().__init__(kind)
        self.kind = kind

    def load(self, rules: Iterable[Any]) -> None:
        """Replace the contents, assigning ids by position."""
        self._reset()
        for rule in rules:
            value = rule if isinstance(rule, str) else str(rule)
            self._entries.append(PermissionRule(id=self._new_id(), value=value))

    def add(self, value: str = "") -> PermissionRule:
        rule = PermissionRule(id=self._new_id(), value=value)
        self._entries.append(rule)
        return rule

    def update(self, entry_id: str, value: str) -> bool:
        rule = self._find(entry_id)
        if rule is None:
            return False
        rule.value = value
        return True

    def find_by_value(self, value: str) -> PermissionRule | None:
        return next((r for r in self._entries if r.value == value), None)

    def to_persisted(self) -> list[str]:
        return [r.value for r in self._entries if not _is_blank(r.value)]


class EnvironmentVariableMap(_EntryList):
    """Ordered environment variables; keys need not be unique while editing."""

    def __init__(self):
        super().__init__("env")

    def load(self, variables: Mapping[str, Any]) -> None:
        """Replace the contents, assigning ids by mapping position."""
        self._reset()
        for key, value in variables.items():
            self._entries.append(
                EnvironmentVariable(
                    id=self._new_id(),
                    key=str(key),
                    value="" if value is None else str(value),
                )
            )

    def add(self, key: str = "", value: str = "") -> EnvironmentVariable:
        variable = EnvironmentVariable(id=self._new_id(), key=key, value=value)
        self._entries.append(variable)
        return variable

    def update(
        self, entry_id: str, *, key: str | None = None, value: str | None = None
    ) -> bool:
        variable = self._find(entry_id)
        if variable is None:
            return False
        if key is not None:
            variable.key = key
        if value is not None:
            variable.value = value
        return True

    def get(self, key: str) -> str | None:
        variable = next((v for v in self._entries if v.key == key), None)
        return variable.value if variable else None

    def upsert(self, key: str, value: str) -> EnvironmentVariable:
        """Set ``key`` on its first entry, appending one if none exists."""
        variable = next((v for v in self._entries if v.key == key), None)
        if variable is None:
            return self.add(key, value)
        variable.value = value
        return variable

    def discard_key(self, key: str) -> int:
        """Remove every entry named ``key``; returns how many were removed."""
        before = len(self._entries)
        self._entries = [v for v in self._entries if v.key != key]
        removed = before - len(self._entries)
        if removed:
            logger.debug("Removed %d entries for %s", removed, key)
        return removed

    def to_persisted(self) -> dict[str, str]:
        env: dict[str, str] = {}
        for variable in self._entries:
            if not _is_blank(variable.key) and not _is_blank(variable.value):
                env[variable.key] = str(variable.value)
        return env
