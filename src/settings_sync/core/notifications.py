"""Transient, dismissible user notifications.

Rendering is left to the surface that owns the screen; this module only keeps
the queue of messages the core wants the user to see.
"""

from __future__ import annotations

import time
from collections import deque
from enum import Enum

from pydantic import BaseModel, Field

from settings_sync.utils.logging import get_logger

logger = get_logger("core.notifications")


class NotificationLevel(str, Enum):
    SUCCESS = "success"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"


class Notification(BaseModel):
    """A single message queued for the user."""

    id: int = Field(description="Sequence number, unique per center")
    message: str = Field(description="Human readable text")
    level: NotificationLevel = Field(default=NotificationLevel.INFO)
    created_at: float = Field(
        default_factory=time.time, description="Unix timestamp of creation"
    )


class NotificationCenter:
    """Bounded queue of notifications awaiting dismissal."""

    def __init__(self, max_items: int = 50):
        self._items: deque[Notification] = deque(maxlen=max_items)
        self._next_id = 0

    def notify(
        self, message: str, level: NotificationLevel = NotificationLevel.INFO
    ) -> Notification:
        self._next_id += 1
        notification = Notification(id=self._next_id, message=message, level=level)
        self._items.append(notification)
        logger.debug("Queued %s notification: %s", level.value, message)
        return notification

    def success(self, message: str) -> Notification:
        return self.notify(message, NotificationLevel.SUCCESS)

    def info(self, message: str) -> Notification:
        return self.notify(message, NotificationLevel.INFO)

    def warning(self, message: str) -> Notification:
        return self.notify(message, NotificationLevel.WARNING)

    def error(self, message: str) -> Notification:
        return self.notify(message, NotificationLevel.ERROR)

    def dismiss(self, notification_id: int) -> bool:
        """Remove a notification; returns False if it was already gone."""
        for item in self._items:
            if item.id == notification_id:
                self._items.remove(item)
                return True
        return False

    def dismiss_all(self) -> None:
        self._items.clear()

    @property
    def pending(self) -> list[Notification]:
        return list(self._items)

    @property
    def latest(self) -> Notification | None:
        return self._items[-1] if self._items else None

    def messages(self, level: NotificationLevel | None = None) -> list[str]:
        return [n.message for n in self._items if level is None or n.level == level]
