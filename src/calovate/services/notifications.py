"""Notification side-channel for user-visible messages."""

import logging
from collections import deque
from dataclasses import dataclass, field
from typing import Protocol

from calovate.domain.notifications import Notification, Severity

_logger = logging.getLogger(__name__)


class Notifier(Protocol):
    """Receives notifications for the presentation layer."""

    def notify(self, notification: Notification) -> None:
        """Deliver a notification without waiting for acknowledgment."""


@dataclass
class NotificationFeed(Notifier):
    """Bounded buffer of notifications drained by the API."""

    max_size: int = 50
    _items: deque[Notification] = field(init=False)

    def __post_init__(self) -> None:
        self._items = deque(maxlen=self.max_size)

    def notify(self, notification: Notification) -> None:
        level = logging.INFO
        if notification.severity is Severity.ERROR:
            level = logging.WARNING
        _logger.log(level, "%s: %s", notification.title, notification.description)
        self._items.append(notification)

    def drain(self) -> list[Notification]:
        """Return and clear buffered notifications, oldest first."""
        items = list(self._items)
        self._items.clear()
        return items


def send_notification(
    notifier: Notifier,
    title: str,
    description: str,
    severity: Severity = Severity.SUCCESS,
) -> None:
    """Deliver a notification, logging instead of raising on failure."""
    try:
        notifier.notify(
            Notification(title=title, description=description, severity=severity)
        )
    except Exception:
        _logger.exception("Failed to deliver notification: %s", title)
