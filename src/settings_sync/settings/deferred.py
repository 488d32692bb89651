"""Deferred sub-module changes committed by the aggregate save."""

from __future__ import annotations

from collections.abc import Awaitable, Callable

from pydantic import BaseModel, Field

from settings_sync.core.protocols import IDeferredChange
from settings_sync.utils.logging import get_logger

logger = get_logger("settings.deferred")

# Sub-modules that stage edits until save, in commit order.
BINARY_PATH = "binaryPath"
USER_HOOKS = "userHooks"
PROXY_SETTINGS = "proxySettings"
DEFAULT_SUB_MODULES = (BINARY_PATH, USER_HOOKS, PROXY_SETTINGS)


class StagedChange:
    """Ready-made ``IDeferredChange`` for sub-modules that stage a single edit.

    The sub-module calls ``mark_pending()`` when it detects a local edit and
    supplies the coroutine that writes it.
    """

    def __init__(self, commit_fn: Callable[[], Awaitable[None]]):
        self._commit_fn = commit_fn
        self._pending = False

    def mark_pending(self, pending: bool = True) -> None:
        self._pending = pending

    def has_pending_change(self) -> bool:
        return self._pending

    async def commit(self) -> None:
        await self._commit_fn()

    def clear_pending(self) -> None:
        self._pending = False


class CommitReport(BaseModel):
    """Outcome of committing every pending deferred change."""

    committed: list[str] = Field(default_factory=list)
    failed: dict[str, str] = Field(default_factory=dict)

    @property
    def ok(self) -> bool:
        return not self.failed


class DeferredChangeTracker:
    """Registry of per-sub-module pending flags and commit operations."""

    def __init__(self):
        self._changes: dict[str, IDeferredChange] = {}

    def register(self, name: str, change: IDeferredChange) -> None:
        if not isinstance(change, IDeferredChange):
            raise TypeError(f"{name} does not implement the deferred change contract")
        if name in self._changes:
            logger.debug("Replacing deferred change for %s", name)
        self._changes[name] = change

    def unregister(self, name: str) -> None:
        self._changes.pop(name, None)

    def get(self, name: str) -> IDeferredChange | None:
        return self._changes.get(name)

    def pending(self) -> list[str]:
        """Names of sub-modules holding uncommitted edits, in commit order."""
        return [
            name for name in self._ordered() if self._changes[name].has_pending_change()
        ]

    def has_pending(self) -> bool:
        return bool(self.pending())

    def _ordered(self) -> list[str]:
        known = [n for n in DEFAULT_SUB_MODULES if n in self._changes]
        return known + [n for n in self._changes if n not in DEFAULT_SUB_MODULES]

    async def commit_pending(self) -> CommitReport:
        """Commit each pending change in turn.

        A failing commit does not stop the others; only successful commits
        have their pending flag cleared.
        """
        report = CommitReport()
        for name in self.pending():
            change = self._changes[name]
            try:
                await change.commit()
            except Exception as e:
                logger.warning(
                    "Deferred commit for %s failed: %s", name, e, exc_info=True
                )
                report.failed[name] = str(e) or type(e).__name__
                continue
            change.clear_pending()
            report.committed.append(name)
            logger.info("Committed deferred change for %s", name)
        return report
