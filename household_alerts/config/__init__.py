"""Configuration package."""

from household_alerts.config.settings import (
    EngineSettings,
    RuleSettings,
    Settings,
    get_settings,
    validate_all_settings,
)

__all__ = [
    "EngineSettings",
    "RuleSettings",
    "Settings",
    "get_settings",
    "validate_all_settings",
]
