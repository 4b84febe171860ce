"""
Notification Models

A notification is the only output of the rule evaluator and the only thing
the notification store holds.

DESIGN DECISION: The notification id is NOT random. It is built from the
rule kind, the entity that triggered it and, where a condition may fire
again later, a period or threshold bucket. The store uses it as the dedupe
key, so re-evaluating an unchanged condition never produces a second copy.

Python attributes are snake_case; the JSON form uses the camelCase names
the host application persists (createdAt, dismissedAt, ...).
"""

from datetime import datetime
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel


# =============================================================================
# ENUMS
# =============================================================================

class NotificationType(str, Enum):
    """Visual severity of a notification."""
    WARNING = "warning"
    DANGER = "danger"
    SUCCESS = "success"
    INFO = "info"


class NotificationModule(str, Enum):
    """Application area a notification belongs to."""
    FINANCE = "finance"
    LIFE = "life"
    SYSTEM = "system"


class NotificationCategory(str, Enum):
    """What kind of entity triggered the notification."""
    BUDGET = "budget"
    GOAL = "goal"
    DEBT = "debt"
    PANTRY = "pantry"
    TRIP = "trip"
    SHOPPING = "shopping"
    SYSTEM = "system"


# =============================================================================
# NOTIFICATION
# =============================================================================

class ActionTarget(BaseModel):
    """Where the host UI navigates when the action button is pressed."""

    app: str = Field(..., min_length=1)
    tab: Optional[str] = None


class Notification(BaseModel):
    """
    A single notification.

    Created by the rule evaluator with read=False and no dismissed_at.
    Only the NotificationStore changes read/dismissed_at afterwards.
    """
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        use_enum_values=False,
    )

    id: str = Field(
        ...,
        min_length=1,
        description="Deterministic dedupe key (rule kind + entity + bucket)"
    )
    type: NotificationType
    module: NotificationModule
    category: NotificationCategory
    title: str
    message: str
    action_label: Optional[str] = None
    action_target: Optional[ActionTarget] = None
    read: bool = False
    created_at: datetime = Field(
        default_factory=lambda: datetime.now().astimezone(),
        description="When the evaluator produced the notification"
    )
    dismissed_at: Optional[datetime] = None

    @field_validator('id')
    @classmethod
    def validate_id(cls, v: str) -> str:
        """Ids are used as keys; surrounding whitespace would split duplicates."""
        if v != v.strip():
            raise ValueError("Notification id must not have surrounding whitespace")
        return v

    @property
    def is_active(self) -> bool:
        """Active means not dismissed."""
        return self.dismissed_at is None

    @property
    def is_unread(self) -> bool:
        """Unread and still active - what the badge counter shows."""
        return not self.read and self.dismissed_at is None

    def to_storage_dict(self) -> dict:
        """Serialize with camelCase keys and ISO timestamps."""
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)
