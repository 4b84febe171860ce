"""Notification store package."""

from household_alerts.store.notification_store import NotificationStore

__all__ = ["NotificationStore"]
