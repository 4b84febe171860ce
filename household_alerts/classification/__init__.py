"""Merchant keyword classification package."""

from household_alerts.classification.classifier import (
    Classification,
    MerchantClassifier,
    classify,
    classify_transactions,
)
from household_alerts.classification.merchant_mappings import (
    MERCHANT_MAPPINGS,
    MerchantMapping,
)

__all__ = [
    "Classification",
    "MERCHANT_MAPPINGS",
    "MerchantClassifier",
    "MerchantMapping",
    "classify",
    "classify_transactions",
]
