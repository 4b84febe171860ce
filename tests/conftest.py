"""Shared fixtures: a fixed clock and snapshot builders."""

from datetime import datetime
from decimal import Decimal

import pytest

from household_alerts.config import EngineSettings, RuleSettings
from household_alerts.models import (
    FinanceSnapshot,
    LifeSnapshot,
    Notification,
    NotificationCategory,
    NotificationModule,
    NotificationType,
)
from household_alerts.rules import RuleEvaluator


# Thursday 15 October 2026, mid-morning
NOW = datetime(2026, 10, 15, 9, 30)


@pytest.fixture
def now():
    return NOW


@pytest.fixture
def rule_settings():
    return RuleSettings()


@pytest.fixture
def engine_settings(tmp_path):
    return EngineSettings(storage_dir=str(tmp_path))


@pytest.fixture
def evaluator(rule_settings, engine_settings):
    return RuleEvaluator(settings=rule_settings, engine_settings=engine_settings)


def finance(**kwargs) -> FinanceSnapshot:
    return FinanceSnapshot(**kwargs)


def life(**kwargs) -> LifeSnapshot:
    return LifeSnapshot(**kwargs)


def expense(id, amount, day="2026-10-05", category="Alimentación", sub_category=None):
    return {
        "id": id,
        "type": "EXPENSE",
        "amount": str(amount),
        "date": day,
        "category": category,
        "subCategory": sub_category,
        "description": "compra",
    }


def make_notification(id, title="Title", **kwargs) -> Notification:
    defaults = dict(
        type=NotificationType.INFO,
        module=NotificationModule.SYSTEM,
        category=NotificationCategory.SYSTEM,
        message="Message",
    )
    defaults.update(kwargs)
    return Notification(id=id, title=title, **defaults)


def ids(notifications) -> list[str]:
    return [n.id for n in notifications]


D = Decimal
