"""Transient user notifications emitted by store operations"""

import logging
from collections import deque
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Deque, List, Protocol

from financeflow.config import settings


@dataclass
class Notification:
    level: str  # "success" or "error"
    message: str
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))


class Notifier(Protocol):
    def success(self, message: str) -> None: ...

    def error(self, message: str) -> None: ...


class NotificationCenter:
    """Keeps the most recent notifications until a client drains them"""

    def __init__(self, max_items: int | None = None):
        self._items: Deque[Notification] = deque(maxlen=max_items or settings.notification_history)

    def success(self, message: str) -> None:
        self._push(Notification(level="success", message=message))

    def error(self, message: str) -> None:
        self._push(Notification(level="error", message=message))

    def pending(self) -> List[Notification]:
        return list(self._items)

    def drain(self) -> List[Notification]:
        items = list(self._items)
        self._items.clear()
        return items

    def _push(self, notification: Notification) -> None:
        logging.info(
            "Notification emitted",
            extra={"notification_level": notification.level, "notification": notification.message},
        )
        self._items.append(notification)
