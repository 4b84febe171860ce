"""
Data Models Package

This package contains all Pydantic models used by Household Alerts.
All data flowing through the engine must conform to these schemas.
"""

from household_alerts.models.notification import (
    ActionTarget,
    Notification,
    NotificationCategory,
    NotificationModule,
    NotificationType,
)
from household_alerts.models.entities import (
    Budget,
    BudgetPeriod,
    BudgetType,
    Debt,
    FinanceSnapshot,
    Goal,
    LifeSnapshot,
    PantryItem,
    ShoppingItem,
    StateSnapshot,
    Transaction,
    TransactionType,
    Trip,
)
from household_alerts.models.audit import (
    AuditEvent,
    AuditEventBuilder,
    AuditEventType,
    AuditSeverity,
)

__all__ = [
    # Notification models
    "ActionTarget",
    "Notification",
    "NotificationCategory",
    "NotificationModule",
    "NotificationType",
    # Snapshot entities
    "Budget",
    "BudgetPeriod",
    "BudgetType",
    "Debt",
    "FinanceSnapshot",
    "Goal",
    "LifeSnapshot",
    "PantryItem",
    "ShoppingItem",
    "StateSnapshot",
    "Transaction",
    "TransactionType",
    "Trip",
    # Audit models
    "AuditEvent",
    "AuditEventBuilder",
    "AuditEventType",
    "AuditSeverity",
]
