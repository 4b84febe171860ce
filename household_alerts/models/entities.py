"""
Snapshot Entities

Read-only shapes of the finance and life state the rule evaluator inspects.
They mirror what the host's state containers hold; the evaluator validates
each entity separately so one malformed record only removes itself from the
pass.

Fields a rule needs but which the host sometimes leaves out (a transaction
without a category, a trip without a start date) are Optional here. The
rules decide what to do when they are missing.
"""

from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel


class _Entity(BaseModel):
    """Common config: accept host camelCase and Python snake_case names."""
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        str_strip_whitespace=True,
        extra="ignore",
        frozen=True,
    )

    id: str = Field(..., min_length=1)

    @field_validator('id', mode='before')
    @classmethod
    def coerce_id(cls, v: Any) -> Any:
        """Host ids can be numeric; the dedupe key needs text."""
        if isinstance(v, int) and not isinstance(v, bool):
            return str(v)
        return v


def _date_only(v: Any) -> Any:
    """Host dates are sometimes full ISO timestamps; rules only need the day.

    Forms leave unset dates as "", which means no date.
    """
    if isinstance(v, str) and not v.strip():
        return None
    if isinstance(v, datetime):
        return v.date()
    if isinstance(v, str) and len(v) > 10 and v[10] in "T ":
        return v[:10]
    return v


# =============================================================================
# FINANCE
# =============================================================================

class TransactionType(str, Enum):
    INCOME = "INCOME"
    EXPENSE = "EXPENSE"
    TRANSFER = "TRANSFER"


class BudgetPeriod(str, Enum):
    MONTHLY = "MONTHLY"
    YEARLY = "YEARLY"
    CUSTOM = "CUSTOM"


class BudgetType(str, Enum):
    """
    FIXED budgets use `limit` directly.
    PERCENTAGE budgets are a share of the income in the same period.
    """
    FIXED = "FIXED"
    PERCENTAGE = "PERCENTAGE"


class Transaction(_Entity):
    type: TransactionType
    amount: Decimal
    date: date
    category: Optional[str] = None
    sub_category: Optional[str] = None
    description: Optional[str] = None
    account_id: Optional[str] = None

    normalize_date = field_validator('date', mode='before')(_date_only)


class Budget(_Entity):
    category: str = Field(..., min_length=1)
    sub_category: Optional[str] = None
    limit: Decimal = Field(..., ge=0)
    period: BudgetPeriod = BudgetPeriod.MONTHLY
    budget_type: BudgetType = BudgetType.FIXED
    percentage: Optional[Decimal] = Field(default=None, ge=0)
    start_date: Optional[date] = None
    end_date: Optional[date] = None

    normalize_dates = field_validator('start_date', 'end_date', mode='before')(_date_only)


class Goal(_Entity):
    name: str
    target_amount: Decimal
    current_amount: Decimal = Decimal("0")
    deadline: Optional[date] = None

    normalize_deadline = field_validator('deadline', mode='before')(_date_only)


class Debt(_Entity):
    """
    The host stores the payment day as text ("15"), hence the coercion.
    """
    name: str
    min_payment: Decimal = Decimal("0")
    due_date: int = Field(..., ge=1, le=31, description="Day of month the payment is due")
    remaining_balance: Optional[Decimal] = None

    @field_validator('due_date', mode='before')
    @classmethod
    def parse_due_day(cls, v: Any) -> Any:
        if isinstance(v, str):
            return int(v.strip())
        return v


# =============================================================================
# LIFE
# =============================================================================

class PantryItem(_Entity):
    name: str
    quantity: Decimal = Decimal("0")
    unit: Optional[str] = None
    expiry_date: Optional[date] = None
    low_stock_threshold: Optional[Decimal] = Field(default=None, ge=0)

    normalize_expiry = field_validator('expiry_date', mode='before')(_date_only)

    @field_validator('quantity', mode='before')
    @classmethod
    def missing_quantity_is_empty(cls, v: Any) -> Any:
        return Decimal("0") if v is None else v


class ShoppingItem(_Entity):
    name: str
    quantity: Decimal = Decimal("1")
    unit: Optional[str] = None
    checked: bool = False
    estimated_price: Optional[Decimal] = Field(
        default=None,
        ge=0,
        description="Estimated price per unit"
    )

    @property
    def estimated_cost(self) -> Decimal:
        if self.estimated_price is None:
            return Decimal("0")
        return self.estimated_price * self.quantity


class Trip(_Entity):
    destination: str
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    budget: Decimal = Decimal("0")
    spent: Decimal = Decimal("0")

    normalize_dates = field_validator('start_date', 'end_date', mode='before')(_date_only)


# =============================================================================
# SNAPSHOTS
# =============================================================================

class FinanceSnapshot(BaseModel):
    """
    Finance slice of the state passed to the evaluator.

    Items are NOT validated here - the evaluator validates them one by one
    so a single bad record cannot reject the whole snapshot.
    """
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        frozen=True,
        arbitrary_types_allowed=True,
    )

    budgets: list[Any] = Field(default_factory=list)
    transactions: list[Any] = Field(default_factory=list)
    goals: list[Any] = Field(default_factory=list)
    debts: list[Any] = Field(default_factory=list)
    currency: str = "EUR"

    @field_validator('budgets', 'transactions', 'goals', 'debts', mode='before')
    @classmethod
    def none_as_empty(cls, v: Any) -> Any:
        return [] if v is None else v

    @field_validator('currency', mode='before')
    @classmethod
    def default_currency(cls, v: Any) -> Any:
        return v or "EUR"


class LifeSnapshot(BaseModel):
    """Life slice of the state passed to the evaluator."""
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        frozen=True,
        arbitrary_types_allowed=True,
    )

    pantry_items: list[Any] = Field(default_factory=list)
    shopping_list: list[Any] = Field(default_factory=list)
    trips: list[Any] = Field(default_factory=list)

    @field_validator('pantry_items', 'shopping_list', 'trips', mode='before')
    @classmethod
    def none_as_empty(cls, v: Any) -> Any:
        return [] if v is None else v


class StateSnapshot(BaseModel):
    """Everything one evaluation pass needs, as handed over by the host."""
    model_config = ConfigDict(frozen=True)

    finance: FinanceSnapshot = Field(default_factory=FinanceSnapshot)
    life: LifeSnapshot = Field(default_factory=LifeSnapshot)
    language: Optional[str] = None
