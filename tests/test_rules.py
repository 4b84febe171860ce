"""
Tests for the rule evaluator.

Every test runs at the fixed clock from conftest (2026-10-15 09:30).
"""

import copy
import pytest
from datetime import datetime
from decimal import Decimal

from conftest import NOW, expense, finance, ids, life

from household_alerts.config import RuleSettings
from household_alerts.models import (
    Budget,
    Goal,
    NotificationCategory,
    NotificationModule,
    NotificationType,
)
from household_alerts.rules import evaluate_rules, format_money, resolve_language


def budget(limit=500, **kwargs):
    data = {"id": "b1", "category": "Alimentación", "limit": limit}
    data.update(kwargs)
    return data


def run(evaluator, finance_snapshot=None, life_snapshot=None, language="ES", now=NOW):
    return evaluator.evaluate(
        finance_snapshot or finance(),
        life_snapshot or life(),
        language=language,
        now=now,
    )


class TestBudgetRules:
    """Budget overrun and warning."""

    def test_exceeded_budget_danger(self, evaluator):
        snapshot = finance(
            budgets=[budget()],
            transactions=[expense("t1", 300), expense("t2", 220)],
        )
        results = run(evaluator, snapshot)

        assert ids(results) == ["budget-exceeded-b1-2026-10"]
        n = results[0]
        assert n.type == NotificationType.DANGER
        assert n.module == NotificationModule.FINANCE
        assert n.category == NotificationCategory.BUDGET
        assert n.read is False
        assert n.created_at == NOW
        assert "Alimentación" in n.message
        assert "520 €" in n.message
        assert n.action_target.tab == "budgets"

    def test_id_stable_while_still_over(self, evaluator):
        over_520 = finance(budgets=[budget()], transactions=[expense("t1", 520)])
        over_510 = finance(budgets=[budget()], transactions=[expense("t1", 510)])
        assert ids(run(evaluator, over_520)) == ids(run(evaluator, over_510))

    @pytest.mark.parametrize("spent, expected", [
        ("399.99", []),
        ("400", ["budget-warning-b1-2026-10-80"]),
        ("449.99", ["budget-warning-b1-2026-10-85"]),
        ("499.99", ["budget-warning-b1-2026-10-95"]),
        ("500", ["budget-exceeded-b1-2026-10"]),
        ("500.01", ["budget-exceeded-b1-2026-10"]),
    ])
    def test_threshold_boundaries(self, evaluator, spent, expected):
        """Both thresholds are inclusive (>=)."""
        snapshot = finance(budgets=[budget()], transactions=[expense("t1", spent)])
        assert ids(run(evaluator, snapshot)) == expected

    def test_warning_title_shows_rounded_percent(self, evaluator):
        snapshot = finance(budgets=[budget()], transactions=[expense("t1", "432.60")])
        results = run(evaluator, snapshot, language="EN")
        assert results[0].type == NotificationType.WARNING
        assert results[0].title == "📊 Budget at 87%"

    def test_only_current_month_expenses_in_category(self, evaluator):
        snapshot = finance(
            budgets=[budget()],
            transactions=[
                expense("t1", 300),
                expense("t2", 300, day="2026-09-30"),
                expense("t3", 300, category="Ocio"),
                {"id": "t4", "type": "INCOME", "amount": 3000, "date": "2026-10-01",
                 "category": "Alimentación"},
            ],
        )
        assert run(evaluator, snapshot) == []

    def test_sub_category_budget(self, evaluator):
        snapshot = finance(
            budgets=[budget(limit=100, subCategory="Supermercados")],
            transactions=[
                expense("t1", 90, sub_category="Supermercados"),
                expense("t2", 90, sub_category="Comercio Local"),
            ],
        )
        assert ids(run(evaluator, snapshot)) == ["budget-warning-b1-2026-10-90"]

    def test_yearly_budget_bucket(self, evaluator):
        snapshot = finance(
            budgets=[budget(limit=1000, period="YEARLY")],
            transactions=[expense("t1", 600, day="2026-02-10"), expense("t2", 500)],
        )
        assert ids(run(evaluator, snapshot)) == ["budget-exceeded-b1-2026"]

    def test_custom_budget_window(self, evaluator):
        snapshot = finance(
            budgets=[budget(limit=100, period="CUSTOM", startDate="2026-10-10", endDate="2026-10-20")],
            transactions=[expense("t1", 100, day="2026-10-10"), expense("t2", 500, day="2026-10-09")],
        )
        assert ids(run(evaluator, snapshot)) == ["budget-exceeded-b1-2026-10-10_2026-10-20"]

    def test_custom_budget_without_dates_is_ignored(self, evaluator):
        snapshot = finance(
            budgets=[budget(limit=100, period="CUSTOM")],
            transactions=[expense("t1", 900)],
        )
        assert run(evaluator, snapshot) == []

    def test_percentage_budget_uses_period_income(self, evaluator):
        snapshot = finance(
            budgets=[budget(limit=0, budgetType="PERCENTAGE", percentage=10)],
            transactions=[
                {"id": "i1", "type": "INCOME", "amount": 2000, "date": "2026-10-01", "category": "Nómina"},
                expense("t1", 200),
            ],
        )
        results = run(evaluator, snapshot)
        assert ids(results) == ["budget-exceeded-b1-2026-10"]
        assert "200 €" in results[0].message

    def test_percentage_budget_without_income_is_ignored(self, evaluator):
        snapshot = finance(
            budgets=[budget(limit=0, budgetType="PERCENTAGE", percentage=10)],
            transactions=[expense("t1", 200)],
        )
        assert run(evaluator, snapshot) == []

    def test_zero_limit_is_ignored(self, evaluator):
        snapshot = finance(budgets=[budget(limit=0)], transactions=[expense("t1", 10)])
        assert run(evaluator, snapshot) == []

    def test_custom_thresholds(self, engine_settings, now):
        from household_alerts.rules import RuleEvaluator

        evaluator = RuleEvaluator(
            settings=RuleSettings(budget_warning_percent=50, budget_warning_bucket_percent=10),
            engine_settings=engine_settings,
        )
        snapshot = finance(budgets=[budget()], transactions=[expense("t1", 260)])
        assert ids(run(evaluator, snapshot)) == ["budget-warning-b1-2026-10-50"]


class TestMalformedInput:
    """A bad entity is skipped, never fatal."""

    def test_transaction_without_category_excluded(self, evaluator):
        snapshot = finance(
            budgets=[budget()],
            transactions=[expense("t1", 100), expense("t2", 1000, category=None)],
        )
        assert run(evaluator, snapshot) == []

    def test_unparseable_transaction_skipped(self, evaluator):
        snapshot = finance(
            budgets=[budget()],
            transactions=[
                {"id": "t9", "type": "EXPENSE", "amount": "lots", "date": "2026-10-02"},
                {"id": "t10"},
                expense("t1", 520),
            ],
        )
        assert ids(run(evaluator, snapshot)) == ["budget-exceeded-b1-2026-10"]

    def test_malformed_budget_does_not_block_others(self, evaluator):
        snapshot = finance(
            budgets=[{"id": "broken", "category": "Alimentación"}, budget()],
            transactions=[expense("t1", 520)],
        )
        assert ids(run(evaluator, snapshot)) == ["budget-exceeded-b1-2026-10"]

    def test_malformed_entities_in_every_family(self, evaluator):
        snapshot_f = finance(
            goals=[{"id": "g1", "name": "Sin objetivo"}],
            debts=[{"id": "d1", "name": "Tarjeta", "dueDate": "pronto"}],
        )
        snapshot_l = life(
            pantryItems=[{"name": "sin id"}],
            shoppingList=[{"id": "s1"}],
            trips=[{"id": "t1", "destination": "Roma", "spent": "mucho"}],
        )
        assert run(evaluator, snapshot_f, snapshot_l) == []

    def test_entity_skips_are_audited(self, rule_settings, engine_settings):
        from household_alerts.audit import AuditLogger
        from household_alerts.models import AuditEventType
        from household_alerts.rules import RuleEvaluator
        from household_alerts.services.storage import InMemoryAuditStorage

        audit_storage = InMemoryAuditStorage()
        evaluator = RuleEvaluator(
            settings=rule_settings,
            engine_settings=engine_settings,
            audit_logger=AuditLogger(audit_storage),
        )
        snapshot = finance(budgets=[budget()], transactions=[{"id": "t9", "amount": "x"}])
        run(evaluator, snapshot)

        event_types = [e.event_type for e in audit_storage.get_recent_events()]
        assert AuditEventType.ENTITY_SKIPPED in event_types
        assert AuditEventType.EVALUATION_COMPLETED in event_types


class TestGoalRules:

    def test_completed_goal_success(self, evaluator):
        snapshot = finance(goals=[{"id": "g1", "name": "Vacaciones", "targetAmount": 1000, "currentAmount": 1000}])
        results = run(evaluator, snapshot)
        assert ids(results) == ["goal-completed-g1"]
        assert results[0].type == NotificationType.SUCCESS
        assert "Vacaciones" in results[0].message

    def test_completed_goal_id_has_no_time_bucket(self, evaluator):
        snapshot = finance(goals=[{"id": "g1", "name": "Coche", "targetAmount": 500, "currentAmount": 800}])
        first = run(evaluator, snapshot, now=NOW)
        later = run(evaluator, snapshot, now=datetime(2027, 3, 1, 12, 0))
        assert ids(first) == ids(later) == ["goal-completed-g1"]

    def test_deadline_within_window(self, evaluator):
        snapshot = finance(goals=[Goal(
            id="g1", name="Máster", target_amount=1000, current_amount=100, deadline="2026-10-25",
        )])
        results = run(evaluator, snapshot, language="EN")
        assert ids(results) == ["goal-deadline-g1-10"]
        assert results[0].type == NotificationType.WARNING
        assert results[0].message == '"Máster" is due in 10 days and you\'re at 10%'

    @pytest.mark.parametrize("deadline, expected", [
        ("2026-10-15", ["goal-deadline-g1-0"]),
        ("2026-11-14", ["goal-deadline-g1-30"]),
        ("2026-11-15", []),
        ("2026-10-14", []),
    ])
    def test_deadline_window_edges(self, evaluator, deadline, expected):
        snapshot = finance(goals=[{
            "id": "g1", "name": "Fondo", "targetAmount": 1000, "currentAmount": 999, "deadline": deadline,
        }])
        assert ids(run(evaluator, snapshot)) == expected

    def test_zero_target_ignored(self, evaluator):
        snapshot = finance(goals=[{"id": "g1", "name": "Vacío", "targetAmount": 0, "currentAmount": 0}])
        assert run(evaluator, snapshot) == []


class TestDebtRules:

    def _debt(self, due):
        return {"id": "d1", "name": "Hipoteca", "dueDate": due, "minPayment": 650}

    @pytest.mark.parametrize("due, expected", [
        ("15", ["debt-due-d1-2026-10"]),
        ("16", ["debt-due-d1-2026-10"]),
        ("17", []),
        ("14", []),
    ])
    def test_due_today_or_tomorrow(self, evaluator, due, expected):
        results = run(evaluator, finance(debts=[self._debt(due)]))
        assert ids(results) == expected

    def test_message_has_min_payment(self, evaluator):
        results = run(evaluator, finance(debts=[self._debt("15")]), language="EN")
        assert results[0].type == NotificationType.WARNING
        assert results[0].category == NotificationCategory.DEBT
        assert results[0].message == 'Minimum payment due for "Hipoteca": 650 €'

    def test_due_date_in_next_month(self, evaluator):
        results = run(evaluator, finance(debts=[self._debt("1")]), now=datetime(2026, 10, 31, 8, 0))
        assert ids(results) == ["debt-due-d1-2026-11"]

    def test_short_month_pays_on_last_day(self, evaluator):
        results = run(evaluator, finance(debts=[self._debt("31")]), now=datetime(2026, 4, 30, 8, 0))
        assert ids(results) == ["debt-due-d1-2026-04"]


class TestPantryRules:

    def test_empty_and_low_stock(self, evaluator):
        snapshot = life(pantryItems=[
            {"id": "p1", "name": "Leche", "quantity": 0, "unit": "l"},
            {"id": "p2", "name": "Arroz", "quantity": 1, "unit": "kg"},
            {"id": "p3", "name": "Harina", "quantity": 5, "unit": "kg"},
            {"id": "p4", "name": "Huevos", "quantity": 5, "unit": "pcs", "lowStockThreshold": 6},
        ])
        results = run(evaluator, life_snapshot=snapshot, language="EN")

        assert ids(results) == ["pantry-empty-p1", "pantry-low-p2", "pantry-low-p4"]
        assert results[0].type == NotificationType.WARNING
        assert results[1].type == NotificationType.INFO
        assert results[1].message == 'Low stock of "Arroz": 1 kg'

    @pytest.mark.parametrize("expiry, expected", [
        ("2026-10-10", ["pantry-expired-p1-2026-10-10"]),
        ("2026-10-15", ["pantry-expiring-p1-2026-10-15"]),
        ("2026-10-18", ["pantry-expiring-p1-2026-10-18"]),
        ("2026-10-19", []),
    ])
    def test_expiry(self, evaluator, expiry, expected):
        snapshot = life(pantryItems=[
            {"id": "p1", "name": "Yogur", "quantity": 4, "expiryDate": expiry},
        ])
        results = run(evaluator, life_snapshot=snapshot)
        assert ids(results) == expected
        assert all(n.type == NotificationType.WARNING for n in results)

    def test_out_of_stock_item_does_not_expire(self, evaluator):
        snapshot = life(pantryItems=[
            {"id": "p1", "name": "Yogur", "quantity": 0, "expiryDate": "2026-10-01"},
        ])
        assert ids(run(evaluator, life_snapshot=snapshot)) == ["pantry-empty-p1"]

    def test_missing_quantity_counts_as_empty(self, evaluator):
        snapshot = life(pantryItems=[
            {"id": "p1", "name": "Sal", "quantity": None, "expiryDate": ""},
        ])
        assert ids(run(evaluator, life_snapshot=snapshot)) == ["pantry-empty-p1"]


class TestShoppingRules:

    def test_pending_items(self, evaluator):
        snapshot = life(shoppingList=[
            {"id": "s1", "name": "Pan"},
            {"id": "s2", "name": "Leche"},
            {"id": "s3", "name": "Café", "checked": True},
        ])
        results = run(evaluator, life_snapshot=snapshot, language="EN")
        assert ids(results) == ["shopping-pending-2"]
        assert results[0].type == NotificationType.INFO
        assert results[0].message == "You have 2 item(s) to buy"

    def test_cost_threshold(self, evaluator):
        snapshot = life(shoppingList=[
            {"id": "s1", "name": "Aceite", "quantity": 2, "estimatedPrice": 30},
            {"id": "s2", "name": "Jamón", "quantity": 1, "estimatedPrice": 50},
            {"id": "s3", "name": "Vino", "quantity": 3, "estimatedPrice": 40, "checked": True},
        ])
        results = run(evaluator, life_snapshot=snapshot)
        assert ids(results) == ["shopping-pending-2", "shopping-cost-100"]
        assert "110 €" in results[1].message

    def test_cost_below_threshold(self, evaluator):
        snapshot = life(shoppingList=[
            {"id": "s1", "name": "Aceite", "quantity": 1, "estimatedPrice": "99.99"},
        ])
        assert ids(run(evaluator, life_snapshot=snapshot)) == ["shopping-pending-1"]

    def test_everything_checked(self, evaluator):
        snapshot = life(shoppingList=[{"id": "s1", "name": "Pan", "checked": True}])
        assert run(evaluator, life_snapshot=snapshot) == []


class TestTripRules:

    def test_overrun(self, evaluator):
        snapshot = life(trips=[{"id": "t1", "destination": "Lisboa", "budget": 1000, "spent": 1200}])
        results = run(evaluator, life_snapshot=snapshot)
        assert ids(results) == ["trip-overrun-t1"]
        assert results[0].type == NotificationType.DANGER
        assert results[0].category == NotificationCategory.TRIP

    def test_spent_equal_to_budget_is_not_overrun(self, evaluator):
        snapshot = life(trips=[{"id": "t1", "destination": "Lisboa", "budget": 1000, "spent": 1000}])
        assert run(evaluator, life_snapshot=snapshot) == []

    def test_departure_soon(self, evaluator):
        snapshot = life(trips=[{
            "id": "t1", "destination": "Roma", "startDate": "2026-10-20", "budget": 800, "spent": 100,
        }])
        results = run(evaluator, life_snapshot=snapshot, language="FR")
        assert ids(results) == ["trip-soon-t1-5"]
        assert results[0].message == '"Roma" part dans 5 jours'

    def test_departure_outside_window(self, evaluator):
        snapshot = life(trips=[{"id": "t1", "destination": "Roma", "startDate": "2026-10-23"}])
        assert run(evaluator, life_snapshot=snapshot) == []

    def test_blank_start_date_keeps_overrun(self, evaluator):
        snapshot = life(trips=[{
            "id": "t1", "destination": "Lisboa", "startDate": "", "budget": 100, "spent": 150,
        }])
        assert ids(run(evaluator, life_snapshot=snapshot)) == ["trip-overrun-t1"]


class TestDeterminismAndLocalization:

    def _snapshots(self):
        f = finance(
            budgets=[budget()],
            transactions=[expense("t1", 520)],
            goals=[{"id": "g1", "name": "Coche", "targetAmount": 500, "currentAmount": 500}],
            debts=[{"id": "d1", "name": "Préstamo", "dueDate": "16", "minPayment": 120}],
        )
        l = life(
            pantryItems=[{"id": "p1", "name": "Leche", "quantity": 0}],
            shoppingList=[{"id": "s1", "name": "Pan"}],
            trips=[{"id": "t1", "destination": "Roma", "startDate": "2026-10-20", "budget": 10, "spent": 20}],
        )
        return f, l

    def test_same_day_same_ids(self, evaluator):
        f, l = self._snapshots()
        morning = run(evaluator, f, l, now=datetime(2026, 10, 15, 0, 5))
        evening = run(evaluator, f, l, now=datetime(2026, 10, 15, 23, 55))
        assert ids(morning) == ids(evening)
        assert len(ids(morning)) == len(set(ids(morning))) == 7

    def test_snapshot_not_mutated(self, evaluator):
        raw_finance = {
            "budgets": [budget()],
            "transactions": [expense("t1", 520)],
            "currency": "EUR",
        }
        before = copy.deepcopy(raw_finance)
        evaluate_rules(raw_finance, {}, language="ES", now=NOW)
        assert raw_finance == before

    def test_languages(self, evaluator):
        snapshot = finance(budgets=[budget()], transactions=[expense("t1", 520)])
        assert run(evaluator, snapshot, language="ES")[0].title == "⚠️ Presupuesto superado"
        assert run(evaluator, snapshot, language="en-GB")[0].title == "⚠️ Budget exceeded"
        assert run(evaluator, snapshot, language="fr")[0].title == "⚠️ Budget dépassé"

    def test_unsupported_language_falls_back(self, evaluator):
        snapshot = finance(budgets=[budget()], transactions=[expense("t1", 520)])
        results = run(evaluator, snapshot, language="de-DE")
        assert results[0].title == "⚠️ Budget exceeded"
        assert results[0].action_label == "View budgets"

    def test_resolve_language(self):
        assert resolve_language("es_MX") == "ES"
        assert resolve_language(None, fallback="FR") == "FR"
        assert resolve_language("pt", fallback="xx") == "EN"

    def test_format_money(self):
        assert format_money(Decimal("520"), "EUR") == "520 €"
        assert format_money(Decimal("1249.5"), "EUR") == "1.250 €"
        assert format_money(Decimal("-30"), "GBP") == "-30 £"
        assert format_money(Decimal("10"), "MXN") == "10 MXN"

    def test_models_and_dicts_give_same_result(self, evaluator):
        as_dicts = finance(budgets=[budget()], transactions=[expense("t1", 520)])
        as_models = finance(
            budgets=[Budget(id="b1", category="Alimentación", limit=500)],
            transactions=[expense("t1", 520)],
        )
        assert ids(run(evaluator, as_dicts)) == ids(run(evaluator, as_models))
