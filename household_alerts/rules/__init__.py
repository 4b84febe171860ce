"""Notification rules package."""

from household_alerts.rules.evaluator import RuleEvaluator, evaluate_rules
from household_alerts.rules.i18n import (
    SUPPORTED_LANGUAGES,
    format_money,
    resolve_language,
    translate,
)

__all__ = [
    "RuleEvaluator",
    "SUPPORTED_LANGUAGES",
    "evaluate_rules",
    "format_money",
    "resolve_language",
    "translate",
]
