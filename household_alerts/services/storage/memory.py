"""
In-Memory Storage

Used by tests and by hosts that persist nothing. Copies on the way in and
out so callers cannot mutate what the backend holds.
"""

from collections import deque
from typing import Optional

from household_alerts.models.audit import AuditEvent
from household_alerts.models.notification import Notification
from household_alerts.services.storage.interface import (
    AuditStorageInterface,
    NotificationStorageInterface,
)


class InMemoryNotificationStorage(NotificationStorageInterface):

    def __init__(self, notifications: Optional[list[Notification]] = None):
        self._notifications = [n.model_copy() for n in notifications or []]
        self.save_count = 0

    def load(self) -> list[Notification]:
        return [n.model_copy() for n in self._notifications]

    def save(self, notifications: list[Notification]) -> None:
        self._notifications = [n.model_copy() for n in notifications]
        self.save_count += 1


class InMemoryAuditStorage(AuditStorageInterface):
    """
    Bounded audit buffer. The oldest events fall off once max_events is
    reached; max_events=0 keeps everything.
    """

    def __init__(self, max_events: int = 500):
        self._events: deque[AuditEvent] = deque(maxlen=max_events or None)

    def append_event(self, event: AuditEvent) -> bool:
        self._events.append(event)
        return True

    def get_recent_events(self, limit: int = 100) -> list[AuditEvent]:
        return list(reversed(self._events))[:limit]

    def get_events_by_entity(
        self,
        entity_type: str,
        entity_id: str,
    ) -> list[AuditEvent]:
        return [
            e for e in self._events
            if e.entity_type == entity_type
            and (e.entity_id == entity_id or entity_id in e.details.get("notification_ids", []))
        ]

    def __len__(self) -> int:
        return len(self._events)
