"""Services package."""

from household_alerts.services.storage import (
    AuditStorageInterface,
    CorruptDataError,
    InMemoryAuditStorage,
    InMemoryNotificationStorage,
    LocalFileNotificationStorage,
    NotificationStorageInterface,
    StorageError,
)

__all__ = [
    # Storage services
    "AuditStorageInterface",
    "CorruptDataError",
    "InMemoryAuditStorage",
    "InMemoryNotificationStorage",
    "LocalFileNotificationStorage",
    "NotificationStorageInterface",
    "StorageError",
]
