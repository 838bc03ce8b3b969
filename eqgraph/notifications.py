"""Classified user-facing messages emitted by the workspace."""

import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum

logger = logging.getLogger(__name__)


class NotificationLevel(str, Enum):
    """Classification of a notification."""

    SUCCESS = "success"
    ERROR = "error"
    WARNING = "warning"
    INFO = "info"


_LOG_LEVELS = {
    NotificationLevel.SUCCESS: logging.INFO,
    NotificationLevel.INFO: logging.INFO,
    NotificationLevel.WARNING: logging.WARNING,
    NotificationLevel.ERROR: logging.WARNING,
}


@dataclass(frozen=True)
class Notification:
    """A single message for the user."""

    message: str
    level: NotificationLevel
    node: str | None = None
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    def __str__(self) -> str:
        return f"{self.level.value.upper()}: {self.message}"


Listener = Callable[[Notification], None]


class Notifier:
    """Keeps a bounded history of notifications and fans them out."""

    def __init__(self, history_limit: int = 200):
        self._listeners: list[Listener] = []
        self._history: list[Notification] = []
        self._history_limit = history_limit

    @property
    def history(self) -> list[Notification]:
        """Get a copy of the retained notifications, oldest first."""
        return list(self._history)

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Register a listener.

        Returns:
            A function that removes the listener again.
        """
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def notify(
        self, message: str, level: NotificationLevel, node: str | None = None
    ) -> Notification:
        notification = Notification(message=message, level=NotificationLevel(level), node=node)
        logger.log(_LOG_LEVELS[notification.level], "%s", notification)

        self._history.append(notification)
        if len(self._history) > self._history_limit:
            del self._history[: len(self._history) - self._history_limit]

        for listener in list(self._listeners):
            listener(notification)
        return notification

    def success(self, message: str, node: str | None = None) -> Notification:
        return self.notify(message, NotificationLevel.SUCCESS, node)

    def error(self, message: str, node: str | None = None) -> Notification:
        return self.notify(message, NotificationLevel.ERROR, node)

    def warning(self, message: str, node: str | None = None) -> Notification:
        return self.notify(message, NotificationLevel.WARNING, node)

    def info(self, message: str, node: str | None = None) -> Notification:
        return self.notify(message, NotificationLevel.INFO, node)

    def last(self, level: NotificationLevel | None = None) -> Notification | None:
        """Get the most recent notification, optionally of one level."""
        for notification in reversed(self._history):
            if level is None or notification.level == level:
                return notification
        return None

    def clear_history(self) -> None:
        self._history.clear()
