"""
Abstract Storage Interface

DESIGN DECISION: The notification store keeps its collection in memory and
hands it to a storage backend after every mutation. The backend is behind an
interface so that:
1. Tests run against in-memory storage
2. The host can persist to a local JSON file (device storage)
3. A real database can replace either without touching the store

The interface is intentionally tiny: load the whole collection, save the
whole collection. Collections are small (one household).
"""

from abc import ABC, abstractmethod

from household_alerts.models.audit import AuditEvent
from household_alerts.models.notification import Notification


class NotificationStorageInterface(ABC):
    """
    Abstract interface for notification persistence.

    Implementations store the collection under a fixed namespace.
    """

    @abstractmethod
    def load(self) -> list[Notification]:
        """
        Load the persisted collection, in store order.

        Returns:
            The notifications, or an empty list if nothing was saved yet

        Raises:
            CorruptDataError: If the persisted data cannot be parsed
            StorageError: If the backend cannot be read
        """
        pass

    @abstractmethod
    def save(self, notifications: list[Notification]) -> None:
        """
        Replace the persisted collection.

        Raises:
            StorageError: If the write fails
        """
        pass


class AuditStorageInterface(ABC):
    """
    Abstract interface for audit log storage.

    Audit logs are append-only - we never delete or modify them.
    """

    @abstractmethod
    def append_event(self, event: AuditEvent) -> bool:
        """
        Append an audit event to the log.

        Returns:
            True if logged successfully
        """
        pass

    @abstractmethod
    def get_recent_events(self, limit: int = 100) -> list[AuditEvent]:
        """
        Get the most recent audit events (newest first).
        """
        pass

    @abstractmethod
    def get_events_by_entity(
        self,
        entity_type: str,
        entity_id: str,
    ) -> list[AuditEvent]:
        """
        Get all events for a specific entity, in chronological order.
        """
        pass


class StorageError(Exception):
    """Base exception for storage operations."""
    pass


class CorruptDataError(StorageError):
    """Persisted data exists but cannot be parsed."""
    pass
