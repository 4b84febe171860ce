"""
Audit Logger

DESIGN DECISION: Every change to the notification collection is logged.
This provides:
1. Traceability of why a notification exists
2. Debugging capability when a rule skips an entity
3. A history of what the user read and dismissed

The audit logger:
- Is synchronous, like the store that calls it
- Gracefully handles failures (never breaks a store mutation)
- Supports correlation IDs to group the events of one evaluation pass
"""

from typing import Optional
from uuid import UUID, uuid4

import structlog

from household_alerts.models.audit import AuditEvent, AuditEventBuilder
from household_alerts.services.storage import AuditStorageInterface, StorageError


# Configure structlog for local logging
structlog.configure(
    processors=[
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
        structlog.processors.JSONRenderer()
    ],
    wrapper_class=structlog.stdlib.BoundLogger,
    context_class=dict,
    logger_factory=structlog.stdlib.LoggerFactory(),
    cache_logger_on_first_use=True,
)


class AuditLogger:
    """
    Central audit logging service.

    Logs events both to:
    1. Structured local log (for debugging)
    2. An audit storage backend, when one is configured
    """

    def __init__(
        self,
        storage: Optional[AuditStorageInterface] = None,
    ):
        """
        Initialize audit logger.

        Args:
            storage: Storage backend for persistence.
                    If None, only logs locally.
        """
        self._storage = storage
        self._logger = structlog.get_logger(__name__)

    @property
    def storage(self) -> Optional[AuditStorageInterface]:
        return self._storage

    def log(self, event: AuditEvent) -> bool:
        """
        Log an audit event.

        Always logs locally. Persists to storage if available.

        Returns True if storage write succeeded (or no storage configured).
        """
        log_dict = event.to_log_dict()

        if event.severity.value in ("error", "critical"):
            self._logger.error("audit_event", **log_dict)
        elif event.severity.value == "warning":
            self._logger.warning("audit_event", **log_dict)
        else:
            self._logger.info("audit_event", **log_dict)

        if self._storage is not None:
            try:
                return self._storage.append_event(event)
            except StorageError as e:
                # Log failure but don't raise
                self._logger.error(
                    "audit_storage_failed",
                    error=str(e),
                    event_id=str(event.event_id),
                )
                return False

        return True

    def log_evaluation_completed(
        self,
        candidate_count: int,
        skipped_count: int,
        language: str,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        self.log(AuditEventBuilder.evaluation_completed(
            candidate_count=candidate_count,
            skipped_count=skipped_count,
            language=language,
            correlation_id=correlation_id,
        ))

    def log_entity_skipped(
        self,
        rule: str,
        entity_type: str,
        entity_id: Optional[str],
        reason: str,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        """Log a malformed snapshot entity that a rule ignored."""
        self.log(AuditEventBuilder.entity_skipped(
            rule=rule,
            entity_type=entity_type,
            entity_id=entity_id,
            reason=reason,
            correlation_id=correlation_id,
        ))

    def log_notifications_created(
        self,
        notification_ids: list[str],
        correlation_id: Optional[UUID] = None,
    ) -> None:
        if not notification_ids:
            return
        self.log(AuditEventBuilder.notifications_created(
            notification_ids=notification_ids,
            correlation_id=correlation_id,
        ))

    def log_notification_read(self, notification_id: Optional[str] = None) -> None:
        self.log(AuditEventBuilder.notification_read(notification_id))

    def log_notification_dismissed(self, notification_ids: list[str]) -> None:
        if not notification_ids:
            return
        self.log(AuditEventBuilder.notification_dismissed(notification_ids))

    def log_dismissed_cleared(self, purged_count: int) -> None:
        self.log(AuditEventBuilder.dismissed_cleared(purged_count))

    def log_engine_started(self, interval_seconds: float) -> None:
        self.log(AuditEventBuilder.engine_started(interval_seconds))

    def log_engine_stopped(self) -> None:
        self.log(AuditEventBuilder.engine_stopped())

    def log_storage_error(self, operation: str, error_message: str) -> None:
        self.log(AuditEventBuilder.storage_error(operation, error_message))

    def log_error(
        self,
        error_type: str,
        error_message: str,
        details: Optional[dict] = None,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        """Log an error."""
        self.log(AuditEventBuilder.system_error(
            error_type=error_type,
            error_message=error_message,
            details=details,
            correlation_id=correlation_id,
        ))


def create_correlation_id() -> UUID:
    """
    Create a new correlation ID for tracking related events.

    Use one per evaluation pass and pass it to every event it produces.
    """
    return uuid4()
