"""
Notification Store

Holds the notification collection and owns every change to it.

DESIGN DECISIONS:
1. The store is an explicitly constructed instance, passed to whatever
   schedules evaluation. There is no module-level store.
2. Insertion is idempotent: a notification whose id is already present is
   ignored, even if the existing copy was dismissed. Only clear_dismissed()
   frees an id for reuse.
3. Newest first: inserted notifications go to the front of the collection,
   keeping the order they arrived in within one batch.
4. Dismissal hides, it does not delete. Dismissed entries stay (audit
   trail) until clear_dismissed() purges them.
5. Every operation takes the same lock, so insert-if-absent stays atomic
   when a multi-threaded host triggers evaluations concurrently.
"""

import threading
from datetime import datetime
from typing import Iterable, Iterator, Optional

import structlog

from household_alerts.audit import AuditLogger
from household_alerts.models.notification import Notification
from household_alerts.services.storage import NotificationStorageInterface, StorageError


logger = structlog.get_logger(__name__)


def _now() -> datetime:
    return datetime.now().astimezone()


class NotificationStore:
    """
    In-memory notification collection with optional persistence.

    When a storage backend is given, the collection is loaded from it on
    construction and written back after every mutation that changed
    something.
    """

    def __init__(
        self,
        storage: Optional[NotificationStorageInterface] = None,
        audit_logger: Optional[AuditLogger] = None,
    ):
        self._storage = storage
        self._audit_logger = audit_logger
        self._lock = threading.RLock()
        self._notifications: list[Notification] = []
        self._ids: set[str] = set()

        if self._storage is not None:
            for notification in self._storage.load():
                if notification.id not in self._ids:
                    self._notifications.append(notification)
                    self._ids.add(notification.id)
            logger.info("notifications_loaded", count=len(self._notifications))

    # -------------------------------------------------------------------------
    # Insertion
    # -------------------------------------------------------------------------

    def add_notification(self, notification: Notification) -> bool:
        """Add one notification. Returns False if its id is already present."""
        return bool(self.add_notifications([notification]))

    def add_notifications(self, notifications: Iterable[Notification]) -> list[Notification]:
        """
        Insert the notifications whose id is not present yet.

        Existing entries are never overwritten. Duplicate ids inside the
        batch keep only the first occurrence.

        Returns:
            The notifications actually inserted, in batch order
        """
        with self._lock:
            incoming: list[Notification] = []
            seen: set[str] = set()
            for notification in notifications:
                if notification.id in self._ids or notification.id in seen:
                    continue
                seen.add(notification.id)
                # The store owns its copies; callers keep theirs untouched.
                incoming.append(notification.model_copy(deep=True))

            if not incoming:
                return []

            self._notifications = incoming + self._notifications
            self._ids.update(seen)
            self._persist("add_notifications")

        logger.info("notifications_added", count=len(incoming))
        if self._audit_logger:
            self._audit_logger.log_notifications_created([n.id for n in incoming])
        return [n.model_copy(deep=True) for n in incoming]

    # -------------------------------------------------------------------------
    # Read / dismiss
    # -------------------------------------------------------------------------

    def mark_as_read(self, notification_id: str) -> bool:
        """
        Mark one notification as read. dismissed_at is left as it is.

        Returns:
            False if no notification has this id
        """
        with self._lock:
            index = self._index_of(notification_id)
            if index is None:
                return False
            current = self._notifications[index]
            if not current.read:
                self._notifications[index] = current.model_copy(update={"read": True})
                self._persist("mark_as_read")

        if self._audit_logger:
            self._audit_logger.log_notification_read(notification_id)
        return True

    def mark_all_as_read(self) -> int:
        """Mark every notification as read. Returns how many changed."""
        with self._lock:
            changed = 0
            for index, current in enumerate(self._notifications):
                if not current.read:
                    self._notifications[index] = current.model_copy(update={"read": True})
                    changed += 1
            if changed:
                self._persist("mark_all_as_read")

        if self._audit_logger and changed:
            self._audit_logger.log_notification_read(None)
        return changed

    def dismiss(self, notification_id: str) -> bool:
        """
        Dismiss one notification: sets dismissed_at and read=True.

        Idempotent: dismissing twice keeps the first timestamp.

        Returns:
            False if no notification has this id
        """
        with self._lock:
            index = self._index_of(notification_id)
            if index is None:
                return False
            current = self._notifications[index]
            if current.dismissed_at is not None and current.read:
                return True
            self._notifications[index] = current.model_copy(update={
                "read": True,
                "dismissed_at": current.dismissed_at or _now(),
            })
            self._persist("dismiss")

        if self._audit_logger:
            self._audit_logger.log_notification_dismissed([notification_id])
        return True

    def dismiss_all(self) -> int:
        """Dismiss every active notification. Returns how many were dismissed."""
        with self._lock:
            dismissed_at = _now()
            dismissed_ids = []
            for index, current in enumerate(self._notifications):
                if current.dismissed_at is None:
                    self._notifications[index] = current.model_copy(update={
                        "read": True,
                        "dismissed_at": dismissed_at,
                    })
                    dismissed_ids.append(current.id)
            if dismissed_ids:
                self._persist("dismiss_all")

        if self._audit_logger:
            self._audit_logger.log_notification_dismissed(dismissed_ids)
        return len(dismissed_ids)

    def clear_dismissed(self) -> int:
        """
        Purge dismissed notifications from the collection.

        Their ids become free again, so a condition that is still true will
        be re-inserted by the next evaluation.

        Returns:
            Number of notifications purged
        """
        with self._lock:
            kept = [n for n in self._notifications if n.dismissed_at is None]
            purged = len(self._notifications) - len(kept)
            if purged:
                self._notifications = kept
                self._ids = {n.id for n in kept}
                self._persist("clear_dismissed")

        logger.info("dismissed_cleared", count=purged)
        if self._audit_logger and purged:
            self._audit_logger.log_dismissed_cleared(purged)
        return purged

    # -------------------------------------------------------------------------
    # Views
    # -------------------------------------------------------------------------

    def unread_count(self) -> int:
        """Unread notifications that are not dismissed (the badge number)."""
        with self._lock:
            return sum(1 for n in self._notifications if n.is_unread)

    def active_notifications(self) -> list[Notification]:
        """Notifications that are not dismissed, newest first."""
        with self._lock:
            return [n.model_copy(deep=True) for n in self._notifications if n.is_active]

    def all_notifications(self) -> list[Notification]:
        """Every notification, dismissed ones included."""
        with self._lock:
            return [n.model_copy(deep=True) for n in self._notifications]

    def get(self, notification_id: str) -> Optional[Notification]:
        with self._lock:
            index = self._index_of(notification_id)
            if index is None:
                return None
            return self._notifications[index].model_copy(deep=True)

    def __contains__(self, notification_id: object) -> bool:
        with self._lock:
            return notification_id in self._ids

    def __len__(self) -> int:
        with self._lock:
            return len(self._notifications)

    def __iter__(self) -> Iterator[Notification]:
        return iter(self.all_notifications())

    # -------------------------------------------------------------------------
    # Internals
    # -------------------------------------------------------------------------

    def _index_of(self, notification_id: str) -> Optional[int]:
        if notification_id not in self._ids:
            return None
        for index, notification in enumerate(self._notifications):
            if notification.id == notification_id:
                return index
        return None

    def _persist(self, operation: str) -> None:
        """Write the collection to storage. Caller holds the lock."""
        if self._storage is None:
            return
        try:
            self._storage.save(self._notifications)
        except StorageError as e:
            logger.error("notification_storage_failed", operation=operation, error=str(e))
            if self._audit_logger:
                self._audit_logger.log_storage_error(operation, str(e))
            raise
