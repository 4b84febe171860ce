"""
Storage Services Package

Provides abstract interfaces and concrete implementations for persisting
notifications and audit events. Local JSON file and in-memory backends are
included; both are swappable behind the interfaces.
"""

from household_alerts.services.storage.interface import (
    AuditStorageInterface,
    CorruptDataError,
    NotificationStorageInterface,
    StorageError,
)
from household_alerts.services.storage.memory import (
    InMemoryAuditStorage,
    InMemoryNotificationStorage,
)
from household_alerts.services.storage.local_file import (
    LocalFileNotificationStorage,
)

__all__ = [
    # Interfaces
    "AuditStorageInterface",
    "NotificationStorageInterface",
    # Exceptions
    "CorruptDataError",
    "StorageError",
    # Implementations
    "InMemoryAuditStorage",
    "InMemoryNotificationStorage",
    "LocalFileNotificationStorage",
]
