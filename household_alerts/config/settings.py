"""
Configuration Management for Household Alerts

Uses pydantic-settings for type-safe configuration from environment variables.

DESIGN DECISION: Every rule threshold lives here as a named setting.
Nothing in the evaluator hard-codes a number, so each threshold can be
overridden per test or per deployment.
"""

from functools import lru_cache
from pathlib import Path

from pydantic import Field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class RuleSettings(BaseSettings):
    """Thresholds used by the rule evaluator."""

    model_config = SettingsConfigDict(
        env_prefix="ALERTS_RULES_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    # Budgets
    budget_warning_percent: int = Field(
        default=80,
        ge=1,
        le=100,
        description="Spend percentage (inclusive) at which a budget warning fires"
    )
    budget_danger_percent: int = Field(
        default=100,
        ge=1,
        description="Spend percentage (inclusive) at which a budget is exceeded"
    )
    budget_warning_bucket_percent: int = Field(
        default=5,
        ge=1,
        le=100,
        description="Width of the percentage buckets a warning re-triggers on"
    )

    # Goals
    goal_deadline_window_days: int = Field(
        default=30,
        ge=0,
        description="Days before a goal deadline to start warning"
    )
    goal_deadline_max_progress_percent: int = Field(
        default=100,
        ge=0,
        le=100,
        description="Only warn about goals whose progress is below this percentage"
    )

    # Debts
    debt_due_lookahead_days: int = Field(
        default=1,
        ge=0,
        le=31,
        description="Warn when the next debt payment day is within this many days"
    )

    # Pantry
    pantry_default_low_stock: float = Field(
        default=1,
        ge=0,
        description="Low-stock threshold for items without their own"
    )
    pantry_expiry_lookahead_days: int = Field(
        default=3,
        ge=0,
        description="Warn when an item expires within this many days"
    )

    # Shopping
    shopping_pending_min_items: int = Field(
        default=1,
        ge=1,
        description="Pending items needed before the shopping reminder fires"
    )
    shopping_cost_threshold: float = Field(
        default=100.0,
        gt=0,
        description="Estimated cost of pending items that triggers a cost notice"
    )

    # Trips
    trip_departure_window_days: int = Field(
        default=7,
        ge=0,
        description="Days before departure to announce an upcoming trip"
    )

    @model_validator(mode='after')
    def validate_budget_thresholds(self) -> 'RuleSettings':
        """Warning must fire before the budget is exceeded."""
        if self.budget_warning_percent >= self.budget_danger_percent:
            raise ValueError(
                "budget_warning_percent must be below budget_danger_percent"
            )
        return self


class EngineSettings(BaseSettings):
    """Scheduling, localization and persistence settings."""

    model_config = SettingsConfigDict(
        env_prefix="ALERTS_ENGINE_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    evaluation_interval_seconds: float = Field(
        default=300.0,
        gt=0,
        description="Seconds between background evaluations"
    )
    default_language: str = Field(
        default="ES",
        description="Language used when the caller does not pass one"
    )
    fallback_language: str = Field(
        default="EN",
        description="Language used when the requested one is unsupported"
    )

    # Persistence
    persist: bool = Field(
        default=False,
        description="Persist notifications to local storage"
    )
    storage_namespace: str = Field(
        default="onyx_notifications",
        min_length=1,
        description="Key under which notifications are persisted"
    )
    storage_dir: str = Field(
        default=".alerts",
        description="Directory for the local JSON store"
    )

    # Audit
    audit_buffer_size: int = Field(
        default=500,
        ge=0,
        description="How many audit events to keep in memory"
    )

    @field_validator('default_language', 'fallback_language')
    @classmethod
    def normalize_language(cls, v: str) -> str:
        return v.strip().upper()

    @property
    def storage_path(self) -> Path:
        """Full path of the JSON file backing the store."""
        return Path(self.storage_dir) / f"{self.storage_namespace}.json"


class Settings(BaseSettings):
    """
    Root settings container.

    Aggregates all sub-settings for easy access.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    @property
    def rules(self) -> RuleSettings:
        return RuleSettings()

    @property
    def engine(self) -> EngineSettings:
        return EngineSettings()


@lru_cache()
def get_settings() -> Settings:
    """
    Get application settings (cached).

    Call get_settings.cache_clear() to reload if needed.
    """
    return Settings()


def validate_all_settings() -> dict[str, bool]:
    """
    Validate all settings are properly configured.

    Returns a dict of {setting_name: is_valid}.
    Useful for startup checks.
    """
    results = {}

    settings = get_settings()

    try:
        _ = settings.rules
        results["rules"] = True
    except ValueError as e:
        results["rules"] = False
        results["rules_error"] = str(e)

    try:
        _ = settings.engine
        results["engine"] = True
    except ValueError as e:
        results["engine"] = False
        results["engine_error"] = str(e)

    return results
