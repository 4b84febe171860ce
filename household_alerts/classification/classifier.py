"""
Merchant Classifier

Assigns a raw bank description ("PAGO EN MERCADONA MADRID") to a
category/sub-category pair by keyword matching.

Rules:
- Comparison is case-insensitive (everything is upper-cased)
- A keyword matches if it is a substring of the description
- Mappings are tried in list order and the FIRST match wins,
  not the best or longest one
- No match is not an error: the result is None (uncategorized)

Pure and re-entrant: safe to call once per transaction in a batch.
"""

from typing import Any, Iterable, Optional, Sequence

from pydantic import BaseModel, ConfigDict

from household_alerts.classification.merchant_mappings import (
    MERCHANT_MAPPINGS,
    MerchantMapping,
)


class Classification(BaseModel):
    """Result of a successful classification."""
    model_config = ConfigDict(frozen=True)

    category: str
    sub_category: Optional[str] = None


class MerchantClassifier:
    """
    Keyword classifier over an ordered mapping list.

    The list is copied into a tuple on construction; later changes to the
    caller's list do not affect an existing classifier.
    """

    def __init__(self, mappings: Optional[Sequence[MerchantMapping]] = None):
        self._mappings: tuple[MerchantMapping, ...] = tuple(
            MERCHANT_MAPPINGS if mappings is None else mappings
        )

    @property
    def mappings(self) -> tuple[MerchantMapping, ...]:
        return self._mappings

    def classify(self, description: Optional[str]) -> Optional[Classification]:
        """
        Classify one description.

        Returns:
            The first matching mapping's category, or None
        """
        if not description:
            return None

        normalized = description.upper()

        for mapping in self._mappings:
            if any(keyword in normalized for keyword in mapping.keywords):
                return Classification(
                    category=mapping.category,
                    sub_category=mapping.sub_category,
                )

        return None

    def classify_many(
        self,
        descriptions: Iterable[Optional[str]],
    ) -> list[Optional[Classification]]:
        return [self.classify(d) for d in descriptions]


_default_classifier = MerchantClassifier()


def classify(description: Optional[str]) -> Optional[Classification]:
    """Classify with the built-in merchant table."""
    return _default_classifier.classify(description)


def classify_transactions(
    transactions: Iterable[Any],
) -> list[tuple[Any, Optional[Classification]]]:
    """
    Classify a batch of transactions by their description.

    Accepts Transaction models or raw dicts. Input is never modified.

    Returns:
        List of (transaction, Classification | None) pairs, in input order
    """
    results = []
    for tx in transactions:
        if isinstance(tx, dict):
            description = tx.get("description")
        else:
            description = getattr(tx, "description", None)
        if not isinstance(description, str):
            description = None
        results.append((tx, _default_classifier.classify(description)))
    return results
