"""Shared plumbing for CLI commands: one load → edit → save → close session."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import AsyncIterator, Coroutine
from contextlib import asynccontextmanager
from typing import Any, TypeVar

from rich.console import Console

from settings_sync.core.bootstrap import bootstrap
from settings_sync.core.notifications import NotificationCenter, NotificationLevel
from settings_sync.settings.aggregator import SettingsAggregator

console = Console()

T = TypeVar("T")

_LEVEL_STYLES = {
    NotificationLevel.SUCCESS: "green",
    NotificationLevel.INFO: "cyan",
    NotificationLevel.WARNING: "yellow",
    NotificationLevel.ERROR: "red",
}


def run(coro: Coroutine[Any, Any, T]) -> T:
    return asyncio.run(coro)


def render_notifications(notifier: NotificationCenter) -> None:
    for notification in notifier.pending:
        style = _LEVEL_STYLES[notification.level]
        console.print(f"[{style}]{notification.message}[/{style}]")
    notifier.dismiss_all()


@asynccontextmanager
async def open_session(
    *, save: bool, log_level: str = "WARNING"
) -> AsyncIterator[SettingsAggregator]:
    """Load settings, yield the aggregator, then save (if asked) and close."""
    level = getattr(logging, log_level.upper(), logging.WARNING)
    aggregator = bootstrap(log_level=level)
    await aggregator.load()
    try:
        yield aggregator
        if save:
            await aggregator.save()
    finally:
        await aggregator.close()
        render_notifications(aggregator.notifier)
