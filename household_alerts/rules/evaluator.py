"""
Notification Rule Evaluator

A pure function over a state snapshot: finance + life state in,
candidate notifications out. Nothing in the snapshot is modified.

ID SCHEME (the dedupe key):
    {rule}-{entity id}[-{bucket}]

    budget-exceeded-{id}-{period}           period = YYYY-MM | YYYY | start_end
    budget-warning-{id}-{period}-{pct}      pct rounded down to 5% steps
    goal-completed-{id}
    goal-deadline-{id}-{days left}
    debt-due-{id}-{YYYY-MM of the payment}
    pantry-empty-{id} / pantry-low-{id}
    pantry-expired-{id}-{expiry} / pantry-expiring-{id}-{expiry}
    shopping-pending-{count} / shopping-cost-{amount bucket}
    trip-overrun-{id} / trip-soon-{id}-{days left}

Same snapshot + same calendar day = same ids. A bucket is part of the id
only where the condition should be able to fire again after dismissal
(new month, next 5% step, one day closer to a deadline).

THRESHOLDS are inclusive: spend == limit x 80% is a warning, spend == limit
is exceeded. All numbers come from RuleSettings.

FAILURE SEMANTICS: an entity that fails validation, or breaks a rule's
arithmetic, is skipped for that rule and logged. The pass continues.
"""

import calendar
from datetime import date, datetime, timedelta
from decimal import ROUND_FLOOR, ROUND_HALF_UP, Decimal
from typing import Any, Iterator, Optional, Type, TypeVar, Union
from uuid import UUID

import structlog
from pydantic import BaseModel, ValidationError

from household_alerts.audit import AuditLogger, create_correlation_id
from household_alerts.config import EngineSettings, RuleSettings, get_settings
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
    Transaction,
    TransactionType,
    Trip,
)
from household_alerts.models.notification import (
    ActionTarget,
    Notification,
    NotificationCategory,
    NotificationModule,
    NotificationType,
)
from household_alerts.rules.i18n import (
    format_money,
    format_quantity,
    resolve_language,
    translate,
)


logger = structlog.get_logger(__name__)

EntityT = TypeVar("EntityT", bound=BaseModel)

# Errors a single entity can raise inside a rule without the pass failing.
ENTITY_ERRORS = (ValidationError, ValueError, TypeError, ArithmeticError, AttributeError)

HUNDRED = Decimal("100")


def _percent(part: Decimal, whole: Decimal) -> Decimal:
    if whole <= 0:
        return Decimal("0")
    return part * HUNDRED / whole


def _round_pct(pct: Decimal) -> int:
    return int(pct.quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def _to_decimal(value: Union[int, float]) -> Decimal:
    return Decimal(str(value))


class RuleEvaluator:
    """
    Runs every rule family over one snapshot.

    One evaluator can be reused across passes; it keeps no state between
    calls apart from its settings.
    """

    def __init__(
        self,
        settings: Optional[RuleSettings] = None,
        engine_settings: Optional[EngineSettings] = None,
        audit_logger: Optional[AuditLogger] = None,
    ):
        self._settings = settings or get_settings().rules
        self._engine_settings = engine_settings or get_settings().engine
        self._audit_logger = audit_logger

    @property
    def settings(self) -> RuleSettings:
        return self._settings

    def evaluate(
        self,
        finance: Union[FinanceSnapshot, dict],
        life: Union[LifeSnapshot, dict],
        language: Optional[str] = None,
        now: Optional[datetime] = None,
        correlation_id: Optional[UUID] = None,
    ) -> list[Notification]:
        """
        Evaluate all rules.

        Args:
            finance: Budgets, transactions, goals, debts and currency
            life: Pantry items, shopping list and trips
            language: Message language tag; unsupported tags fall back
            now: Evaluation time (defaults to the current local time)
            correlation_id: Groups the audit events of this pass

        Returns:
            One notification per triggered condition, in rule order
        """
        if isinstance(finance, dict):
            finance = FinanceSnapshot.model_validate(finance)
        if isinstance(life, dict):
            life = LifeSnapshot.model_validate(life)

        pass_ = _EvaluationPass(
            settings=self._settings,
            language=resolve_language(
                language or self._engine_settings.default_language,
                self._engine_settings.fallback_language,
            ),
            now=now or datetime.now().astimezone(),
            currency=finance.currency,
            audit_logger=self._audit_logger,
            correlation_id=correlation_id or create_correlation_id(),
        )

        pass_.budget_rules(finance.budgets, finance.transactions)
        pass_.goal_rules(finance.goals)
        pass_.debt_rules(finance.debts)
        pass_.pantry_rules(life.pantry_items)
        pass_.shopping_rules(life.shopping_list)
        pass_.trip_rules(life.trips)

        logger.info(
            "rules_evaluated",
            candidates=len(pass_.results),
            skipped=pass_.skipped,
            language=pass_.language,
        )
        if self._audit_logger:
            self._audit_logger.log_evaluation_completed(
                candidate_count=len(pass_.results),
                skipped_count=pass_.skipped,
                language=pass_.language,
                correlation_id=pass_.correlation_id,
            )

        return pass_.results


class _EvaluationPass:
    """State of one evaluate() call: clock, language and collected results."""

    def __init__(
        self,
        settings: RuleSettings,
        language: str,
        now: datetime,
        currency: str,
        audit_logger: Optional[AuditLogger],
        correlation_id: UUID,
    ):
        self.settings = settings
        self.language = language
        self.now = now
        self.today: date = now.date()
        self.currency = currency
        self.audit_logger = audit_logger
        self.correlation_id = correlation_id
        self.results: list[Notification] = []
        self.skipped = 0

    # -------------------------------------------------------------------------
    # Helpers
    # -------------------------------------------------------------------------

    def t(self, key: str, **variables) -> str:
        return translate(self.language, key, **variables)

    def money(self, amount: Decimal) -> str:
        return format_money(amount, self.currency)

    def emit(
        self,
        id: str,
        type: NotificationType,
        module: NotificationModule,
        category: NotificationCategory,
        title: str,
        message: str,
        action_key: str,
        app: str,
        tab: str,
    ) -> None:
        self.results.append(Notification(
            id=id,
            type=type,
            module=module,
            category=category,
            title=title,
            message=message,
            action_label=self.t(action_key),
            action_target=ActionTarget(app=app, tab=tab),
            read=False,
            created_at=self.now,
        ))

    def skip(self, rule: str, entity_type: str, item: Any, error: Exception) -> None:
        self.skipped += 1
        entity_id = _raw_id(item)
        logger.warning(
            "rule_entity_skipped",
            rule=rule,
            entity_type=entity_type,
            entity_id=entity_id,
            error=str(error),
        )
        if self.audit_logger:
            self.audit_logger.log_entity_skipped(
                rule=rule,
                entity_type=entity_type,
                entity_id=entity_id,
                reason=str(error),
                correlation_id=self.correlation_id,
            )

    def coerce(
        self,
        model: Type[EntityT],
        items: list[Any],
        rule: str,
    ) -> Iterator[EntityT]:
        """Validate items one at a time, skipping the malformed ones."""
        entity_type = model.__name__.lower()
        for item in items or []:
            if isinstance(item, model):
                yield item
                continue
            try:
                if isinstance(item, BaseModel):
                    item = item.model_dump()
                yield model.model_validate(item)
            except ENTITY_ERRORS as e:
                self.skip(rule, entity_type, item, e)

    # -------------------------------------------------------------------------
    # Finance: budgets
    # -------------------------------------------------------------------------

    def budget_window(self, budget: Budget) -> Optional[tuple[date, date, str]]:
        """(first day, last day, period bucket) of the budget's current period."""
        year, month = self.today.year, self.today.month
        if budget.period == BudgetPeriod.MONTHLY:
            last_day = calendar.monthrange(year, month)[1]
            return date(year, month, 1), date(year, month, last_day), f"{year:04d}-{month:02d}"
        if budget.period == BudgetPeriod.YEARLY:
            return date(year, 1, 1), date(year, 12, 31), f"{year:04d}"
        if budget.start_date and budget.end_date:
            return (
                budget.start_date,
                budget.end_date,
                f"{budget.start_date.isoformat()}_{budget.end_date.isoformat()}",
            )
        return None

    def budget_rules(self, budgets: list[Any], transactions: list[Any]) -> None:
        budgets = list(self.coerce(Budget, budgets, "budget"))
        if not budgets:
            return
        valid_transactions = list(self.coerce(Transaction, transactions, "budget"))

        for budget in budgets:
            try:
                self.budget_rule(budget, valid_transactions)
            except ENTITY_ERRORS as e:
                self.skip("budget", "budget", budget, e)

    def budget_rule(self, budget: Budget, transactions: list[Transaction]) -> None:
        window = self.budget_window(budget)
        if window is None:
            return
        start, end, period = window

        in_window = [tx for tx in transactions if start <= tx.date <= end]
        spent = sum(
            (abs(tx.amount) for tx in in_window if _matches_budget(tx, budget)),
            Decimal("0"),
        )

        limit = budget.limit
        if budget.budget_type == BudgetType.PERCENTAGE and budget.percentage is not None:
            income = sum(
                (abs(tx.amount) for tx in in_window if tx.type == TransactionType.INCOME),
                Decimal("0"),
            )
            limit = income * budget.percentage / HUNDRED

        if limit <= 0:
            return

        # Compare scaled values so 400 vs 500 x 80% stays exact.
        scaled_spent = spent * HUNDRED
        pct = _percent(spent, limit)
        variables = {
            "cat": budget.category,
            "spent": self.money(spent),
            "limit": self.money(limit),
        }

        if scaled_spent >= limit * self.settings.budget_danger_percent:
            self.emit(
                id=f"budget-exceeded-{budget.id}-{period}",
                type=NotificationType.DANGER,
                module=NotificationModule.FINANCE,
                category=NotificationCategory.BUDGET,
                title=self.t("budget.exceeded.title"),
                message=self.t("budget.exceeded.msg", **variables),
                action_key="budget.action",
                app="finance",
                tab="budgets",
            )
        elif scaled_spent >= limit * self.settings.budget_warning_percent:
            step = Decimal(self.settings.budget_warning_bucket_percent)
            bucket = int((pct / step).to_integral_value(rounding=ROUND_FLOOR) * step)
            self.emit(
                id=f"budget-warning-{budget.id}-{period}-{bucket}",
                type=NotificationType.WARNING,
                module=NotificationModule.FINANCE,
                category=NotificationCategory.BUDGET,
                title=self.t("budget.warning.title", pct=_round_pct(pct)),
                message=self.t("budget.warning.msg", **variables),
                action_key="budget.action",
                app="finance",
                tab="budgets",
            )

    # -------------------------------------------------------------------------
    # Finance: goals
    # -------------------------------------------------------------------------

    def goal_rules(self, goals: list[Any]) -> None:
        for goal in self.coerce(Goal, goals, "goal"):
            try:
                self.goal_rule(goal)
            except ENTITY_ERRORS as e:
                self.skip("goal", "goal", goal, e)

    def goal_rule(self, goal: Goal) -> None:
        if goal.target_amount <= 0:
            return
        pct = _percent(goal.current_amount, goal.target_amount)

        if goal.current_amount >= goal.target_amount:
            self.emit(
                id=f"goal-completed-{goal.id}",
                type=NotificationType.SUCCESS,
                module=NotificationModule.FINANCE,
                category=NotificationCategory.GOAL,
                title=self.t("goal.completed.title"),
                message=self.t("goal.completed.msg", name=goal.name),
                action_key="goal.action",
                app="finance",
                tab="goals",
            )
            return

        if goal.deadline is None:
            return
        days = (goal.deadline - self.today).days
        if 0 <= days <= self.settings.goal_deadline_window_days \
                and pct < self.settings.goal_deadline_max_progress_percent:
            self.emit(
                id=f"goal-deadline-{goal.id}-{days}",
                type=NotificationType.WARNING,
                module=NotificationModule.FINANCE,
                category=NotificationCategory.GOAL,
                title=self.t("goal.deadline.title"),
                message=self.t("goal.deadline.msg", name=goal.name, days=days, pct=_round_pct(pct)),
                action_key="goal.action",
                app="finance",
                tab="goals",
            )

    # -------------------------------------------------------------------------
    # Finance: debts
    # -------------------------------------------------------------------------

    def next_payment_date(self, due_day: int) -> Optional[date]:
        """
        First date within the lookahead window that is a payment day.

        Short months pay on their last day (due day 31 -> 30 April).
        """
        for offset in range(self.settings.debt_due_lookahead_days + 1):
            day = self.today + timedelta(days=offset)
            last_day = calendar.monthrange(day.year, day.month)[1]
            if day.day == min(due_day, last_day):
                return day
        return None

    def debt_rules(self, debts: list[Any]) -> None:
        for debt in self.coerce(Debt, debts, "debt"):
            try:
                self.debt_rule(debt)
            except ENTITY_ERRORS as e:
                self.skip("debt", "debt", debt, e)

    def debt_rule(self, debt: Debt) -> None:
        payment_date = self.next_payment_date(debt.due_date)
        if payment_date is None:
            return
        self.emit(
            id=f"debt-due-{debt.id}-{payment_date.year:04d}-{payment_date.month:02d}",
            type=NotificationType.WARNING,
            module=NotificationModule.FINANCE,
            category=NotificationCategory.DEBT,
            title=self.t("debt.due.title"),
            message=self.t("debt.due.msg", name=debt.name, amount=self.money(debt.min_payment)),
            action_key="debt.action",
            app="finance",
            tab="debts",
        )

    # -------------------------------------------------------------------------
    # Life: pantry
    # -------------------------------------------------------------------------

    def pantry_rules(self, items: list[Any]) -> None:
        for item in self.coerce(PantryItem, items, "pantry"):
            try:
                self.pantry_rule(item)
            except ENTITY_ERRORS as e:
                self.skip("pantry", "pantryitem", item, e)

    def pantry_rule(self, item: PantryItem) -> None:
        notify = dict(
            module=NotificationModule.LIFE,
            category=NotificationCategory.PANTRY,
            action_key="pantry.action",
            app="life",
            tab="kitchen",
        )

        if item.quantity <= 0:
            self.emit(
                id=f"pantry-empty-{item.id}",
                type=NotificationType.WARNING,
                title=self.t("pantry.empty.title"),
                message=self.t("pantry.empty.msg", name=item.name),
                **notify,
            )
            # Nothing left to expire.
            return

        threshold = item.low_stock_threshold
        if threshold is None:
            threshold = _to_decimal(self.settings.pantry_default_low_stock)
        if item.quantity <= threshold:
            self.emit(
                id=f"pantry-low-{item.id}",
                type=NotificationType.INFO,
                title=self.t("pantry.low.title"),
                message=self.t(
                    "pantry.low.msg",
                    name=item.name,
                    qty=format_quantity(item.quantity),
                    unit=item.unit or "",
                ).rstrip(),
                **notify,
            )

        if item.expiry_date is None:
            return
        days = (item.expiry_date - self.today).days
        expiry = item.expiry_date.isoformat()
        if days < 0:
            self.emit(
                id=f"pantry-expired-{item.id}-{expiry}",
                type=NotificationType.WARNING,
                title=self.t("pantry.expired.title"),
                message=self.t("pantry.expired.msg", name=item.name, date=expiry),
                **notify,
            )
        elif days <= self.settings.pantry_expiry_lookahead_days:
            self.emit(
                id=f"pantry-expiring-{item.id}-{expiry}",
                type=NotificationType.WARNING,
                title=self.t("pantry.expiring.title"),
                message=self.t("pantry.expiring.msg", name=item.name, days=days),
                **notify,
            )

    # -------------------------------------------------------------------------
    # Life: shopping list
    # -------------------------------------------------------------------------

    def shopping_rules(self, items: list[Any]) -> None:
        pending = [i for i in self.coerce(ShoppingItem, items, "shopping") if not i.checked]
        if not pending:
            return

        notify = dict(
            type=NotificationType.INFO,
            module=NotificationModule.LIFE,
            category=NotificationCategory.SHOPPING,
            action_key="shopping.action",
            app="life",
            tab="kitchen-list",
        )

        count = len(pending)
        if count >= self.settings.shopping_pending_min_items:
            self.emit(
                id=f"shopping-pending-{count}",
                title=self.t("shopping.pending.title"),
                message=self.t("shopping.pending.msg", count=count),
                **notify,
            )

        try:
            total = sum((i.estimated_cost for i in pending), Decimal("0"))
            threshold = _to_decimal(self.settings.shopping_cost_threshold)
        except ENTITY_ERRORS as e:
            self.skip("shopping", "shoppingitem", None, e)
            return
        if total >= threshold:
            multiple = (total / threshold).to_integral_value(rounding=ROUND_FLOOR)
            bucket = format_quantity(multiple * threshold)
            self.emit(
                id=f"shopping-cost-{bucket}",
                title=self.t("shopping.cost.title"),
                message=self.t("shopping.cost.msg", amount=self.money(total)),
                **notify,
            )

    # -------------------------------------------------------------------------
    # Life: trips
    # -------------------------------------------------------------------------

    def trip_rules(self, trips: list[Any]) -> None:
        for trip in self.coerce(Trip, trips, "trip"):
            try:
                self.trip_rule(trip)
            except ENTITY_ERRORS as e:
                self.skip("trip", "trip", trip, e)

    def trip_rule(self, trip: Trip) -> None:
        notify = dict(
            module=NotificationModule.LIFE,
            category=NotificationCategory.TRIP,
            action_key="trip.action",
            app="life",
            tab="travel",
        )

        if trip.budget > 0 and trip.spent > trip.budget:
            self.emit(
                id=f"trip-overrun-{trip.id}",
                type=NotificationType.DANGER,
                title=self.t("trip.overrun.title"),
                message=self.t(
                    "trip.overrun.msg",
                    name=trip.destination,
                    spent=self.money(trip.spent),
                    budget=self.money(trip.budget),
                ),
                **notify,
            )

        if trip.start_date is None:
            return
        days = (trip.start_date - self.today).days
        if 0 <= days <= self.settings.trip_departure_window_days:
            self.emit(
                id=f"trip-soon-{trip.id}-{days}",
                type=NotificationType.INFO,
                title=self.t("trip.soon.title"),
                message=self.t("trip.soon.msg", name=trip.destination, days=days),
                **notify,
            )


def _matches_budget(tx: Transaction, budget: Budget) -> bool:
    """Expense in the budget's category (and sub-category when it has one)."""
    if tx.type != TransactionType.EXPENSE or not tx.category:
        return False
    if tx.category != budget.category:
        return False
    if budget.sub_category and tx.sub_category != budget.sub_category:
        return False
    return True


def _raw_id(item: Any) -> Optional[str]:
    if isinstance(item, dict):
        value = item.get("id")
    else:
        value = getattr(item, "id", None)
    return str(value) if value is not None else None


def evaluate_rules(
    finance: Union[FinanceSnapshot, dict],
    life: Union[LifeSnapshot, dict],
    language: str = "ES",
    now: Optional[datetime] = None,
    settings: Optional[RuleSettings] = None,
) -> list[Notification]:
    """
    Evaluate every rule against one snapshot.

    Convenience wrapper around RuleEvaluator for callers that need no
    audit trail.
    """
    return RuleEvaluator(settings=settings).evaluate(
        finance,
        life,
        language=language,
        now=now,
    )
