"""
Audit Models for Household Alerts

Every change to the notification collection is recorded:
1. Which notifications an evaluation pass created
2. Which ones the user read, dismissed or purged
3. Which snapshot entities were skipped as malformed

DESIGN DECISION: Audit events are append-only. We never delete or modify them.
"""

from datetime import datetime
from enum import Enum
from typing import Any, Optional
from uuid import UUID, uuid4

from pydantic import BaseModel, Field


class AuditEventType(str, Enum):
    """Types of events we audit."""
    # Evaluation
    EVALUATION_COMPLETED = "evaluation_completed"
    ENTITY_SKIPPED = "entity_skipped"

    # Store mutations
    NOTIFICATIONS_CREATED = "notifications_created"
    NOTIFICATION_READ = "notification_read"
    NOTIFICATION_DISMISSED = "notification_dismissed"
    DISMISSED_CLEARED = "dismissed_cleared"

    # Engine lifecycle
    ENGINE_STARTED = "engine_started"
    ENGINE_STOPPED = "engine_stopped"

    # System events
    SYSTEM_ERROR = "system_error"
    STORAGE_ERROR = "storage_error"


class AuditSeverity(str, Enum):
    """Severity level for audit events."""
    DEBUG = "debug"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"


class AuditEvent(BaseModel):
    """
    A single audit event.

    This is the core unit of our audit trail.
    """

    # Identity
    event_id: UUID = Field(
        default_factory=uuid4,
        description="Unique event identifier"
    )
    timestamp: datetime = Field(
        default_factory=lambda: datetime.now().astimezone(),
        description="When the event occurred"
    )

    # Event classification
    event_type: AuditEventType = Field(
        ...,
        description="Type of event"
    )
    severity: AuditSeverity = Field(
        default=AuditSeverity.INFO,
        description="Event severity"
    )

    # Context - what entity is this about?
    entity_type: Optional[str] = Field(
        default=None,
        description="Type of entity (e.g., 'notification', 'budget', 'trip')"
    )
    entity_id: Optional[str] = Field(
        default=None,
        description="ID of the entity this event relates to"
    )

    # Correlation - all events of one evaluation pass share it
    correlation_id: Optional[UUID] = None

    description: str = Field(
        ...,
        max_length=500,
        description="Human-readable description of what happened"
    )
    details: dict[str, Any] = Field(default_factory=dict)

    error_message: Optional[str] = None

    is_user_action: bool = Field(
        default=False,
        description="Was this triggered by a user action?"
    )

    def to_log_dict(self) -> dict:
        """
        Convert to a dictionary suitable for structured logging.
        """
        return {
            "event_id": str(self.event_id),
            "timestamp": self.timestamp.isoformat(),
            "event_type": self.event_type.value,
            "severity": self.severity.value,
            "entity_type": self.entity_type,
            "entity_id": self.entity_id,
            "correlation_id": str(self.correlation_id) if self.correlation_id else None,
            "description": self.description,
            "details": self.details,
            "error_message": self.error_message,
            "is_user_action": self.is_user_action,
        }


class AuditEventBuilder:
    """
    Helper class to build audit events with common patterns.

    Usage:
        event = AuditEventBuilder.notifications_created(ids, correlation_id)
        event = AuditEventBuilder.notification_dismissed(notification_id)
    """

    @staticmethod
    def evaluation_completed(
        candidate_count: int,
        skipped_count: int,
        language: str,
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.EVALUATION_COMPLETED,
            correlation_id=correlation_id,
            description=f"Rules evaluated: {candidate_count} candidates, {skipped_count} skipped",
            details={
                "candidate_count": candidate_count,
                "skipped_count": skipped_count,
                "language": language,
            },
        )

    @staticmethod
    def entity_skipped(
        rule: str,
        entity_type: str,
        entity_id: Optional[str],
        reason: str,
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.ENTITY_SKIPPED,
            severity=AuditSeverity.WARNING,
            entity_type=entity_type,
            entity_id=entity_id,
            correlation_id=correlation_id,
            description=f"Malformed {entity_type} skipped by {rule} rule",
            details={"rule": rule},
            error_message=reason,
        )

    @staticmethod
    def notifications_created(
        notification_ids: list[str],
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.NOTIFICATIONS_CREATED,
            entity_type="notification",
            correlation_id=correlation_id,
            description=f"{len(notification_ids)} notification(s) created",
            details={"notification_ids": notification_ids},
        )

    @staticmethod
    def notification_read(notification_id: Optional[str]) -> AuditEvent:
        """notification_id None means 'mark all as read'."""
        return AuditEvent(
            event_type=AuditEventType.NOTIFICATION_READ,
            entity_type="notification",
            entity_id=notification_id,
            description=(
                f"Notification read: {notification_id}"
                if notification_id else "All notifications marked as read"
            ),
            is_user_action=True,
        )

    @staticmethod
    def notification_dismissed(notification_ids: list[str]) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.NOTIFICATION_DISMISSED,
            entity_type="notification",
            entity_id=notification_ids[0] if len(notification_ids) == 1 else None,
            description=f"{len(notification_ids)} notification(s) dismissed",
            details={"notification_ids": notification_ids},
            is_user_action=True,
        )

    @staticmethod
    def dismissed_cleared(purged_count: int) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.DISMISSED_CLEARED,
            entity_type="notification",
            description=f"Purged {purged_count} dismissed notification(s)",
            details={"purged_count": purged_count},
            is_user_action=True,
        )

    @staticmethod
    def engine_started(interval_seconds: float) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.ENGINE_STARTED,
            description=f"Periodic evaluation started (every {interval_seconds:g}s)",
            details={"interval_seconds": interval_seconds},
        )

    @staticmethod
    def engine_stopped() -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.ENGINE_STOPPED,
            description="Periodic evaluation stopped",
        )

    @staticmethod
    def storage_error(
        operation: str,
        error_message: str,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.STORAGE_ERROR,
            severity=AuditSeverity.ERROR,
            description=f"Storage error during {operation}",
            error_message=error_message,
            details={"operation": operation},
        )

    @staticmethod
    def system_error(
        error_type: str,
        error_message: str,
        details: Optional[dict] = None,
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.SYSTEM_ERROR,
            severity=AuditSeverity.ERROR,
            description=f"System error: {error_type}",
            error_message=error_message,
            details=details or {},
            correlation_id=correlation_id,
        )
