from __future__ import annotations
from datetime import datetime
from typing import List
from uuid import uuid4

from models import AppNotification, NotificationType

MAX_NOTIFICATIONS = 50


class NotificationFeed:
    """In-app notification list, newest first, keeping only the latest `limit` entries."""

    def __init__(self, limit: int = MAX_NOTIFICATIONS):
        if limit < 1:
            raise ValueError("Notification limit must be at least 1.")
        self.limit = limit
        self._items: List[AppNotification] = []

    def add(
        self,
        message: str,
        type: NotificationType = "info",
        now: datetime | None = None,
    ) -> AppNotification:
        item = AppNotification(
            id=str(uuid4()),
            message=message,
            timestamp=now or datetime.now(),
            type=type,
        )
        self._items = [item, *self._items][: self.limit]
        return item

    def mark_read(self, notification_id: str) -> None:
        self._items = [
            n.model_copy(update={"read": True}) if n.id == notification_id else n
            for n in self._items
        ]

    def mark_all_read(self) -> None:
        self._items = [n.model_copy(update={"read": True}) for n in self._items]

    def clear(self) -> None:
        self._items = []

    @property
    def items(self) -> List[AppNotification]:
        return list(self._items)

    @property
    def unread_count(self) -> int:
        return sum(1 for n in self._items if not n.read)

    def __len__(self) -> int:
        return len(self._items)
