# spend_tracker/credits.py
"""
User adjustments layered over parsed transactions.

A credit marks part or all of a purchase as reimbursed; a category override
moves a transaction to another category. Both are keyed by
:func:`~spend_tracker.core.models.transaction_key` and never modify the
transaction itself: the effective values are computed on every read.
"""
from __future__ import annotations

import logging
import math
from typing import Dict, Optional

from spend_tracker.core.models import AVAILABLE_CATEGORIES, Transaction
from spend_tracker.storage import (
    CATEGORY_OVERRIDES_NAMESPACE,
    CREDITS_NAMESPACE,
    JsonStorage,
)

logger = logging.getLogger(__name__)


class InvalidCreditError(ValueError):
    pass


class InvalidCategoryError(ValueError):
    pass


def adjusted_amount(amount: float, credit: Optional[float]) -> float:
    """Shrink ``amount`` toward zero by ``credit`` without flipping its sign."""
    if credit is None:
        return amount
    remaining = max(0.0, abs(amount) - credit)
    return -remaining if amount < 0 else remaining


def net_contribution(amount: float) -> float:
    """Contribution of an effective amount to net spend: purchases add, returns subtract."""
    if amount < 0:
        return abs(amount)
    return -amount


class CreditStore:
    """
    Credits and category overrides, loaded once from ``storage`` and written
    back in full after every change.
    """

    def __init__(self, storage: Optional[JsonStorage] = None):
        self.storage = storage
        self._credits: Dict[str, float] = {}
        self._overrides: Dict[str, str] = {}
        if storage is not None:
            self._credits = self._load_map(CREDITS_NAMESPACE, float)
            self._overrides = self._load_map(CATEGORY_OVERRIDES_NAMESPACE, str)

    def _load_map(self, namespace, value_type):
        raw = self.storage.get(namespace, {})
        if not isinstance(raw, dict):
            logger.warning("Ignoring malformed %s document", namespace)
            return {}
        loaded = {}
        for key, value in raw.items():
            try:
                loaded[key] = value_type(value)
            except (TypeError, ValueError):
                logger.warning("Ignoring malformed %s entry %r", namespace, key)
        return loaded

    def _persist(self, namespace, value):
        if self.storage is not None:
            self.storage.put(namespace, value)

    @property
    def credits(self) -> Dict[str, float]:
        return dict(self._credits)

    @property
    def category_overrides(self) -> Dict[str, str]:
        return dict(self._overrides)

    def credit_for(self, key: str) -> Optional[float]:
        return self._credits.get(key)

    def set_credit(self, tx: Transaction, credit) -> float:
        try:
            value = float(credit)
        except (TypeError, ValueError):
            raise InvalidCreditError(f"Credit must be a number, got {credit!r}")
        if not math.isfinite(value) or value < 0:
            raise InvalidCreditError(f"Credit must be a non-negative number, got {credit!r}")
        if value > abs(tx.amount):
            raise InvalidCreditError(
                f"Credit {value:.2f} exceeds transaction amount {abs(tx.amount):.2f}"
            )
        self._credits = {**self._credits, tx.key: value}
        self._persist(CREDITS_NAMESPACE, self._credits)
        logger.info("Recorded credit of %.2f for %s", value, tx.key)
        return value

    def remove_credit(self, key: str) -> None:
        if key not in self._credits:
            return
        self._credits = {k: v for k, v in self._credits.items() if k != key}
        self._persist(CREDITS_NAMESPACE, self._credits)

    def effective_amount(self, tx: Transaction) -> float:
        return adjusted_amount(tx.amount, self._credits.get(tx.key))

    def set_category_override(self, tx: Transaction, category: str) -> None:
        if category not in AVAILABLE_CATEGORIES:
            raise InvalidCategoryError(
                f"Unknown category {category!r}; choose one of {', '.join(AVAILABLE_CATEGORIES)}"
            )
        self._overrides = {**self._overrides, tx.key: category}
        self._persist(CATEGORY_OVERRIDES_NAMESPACE, self._overrides)

    def remove_category_override(self, key: str) -> None:
        if key not in self._overrides:
            return
        self._overrides = {k: v for k, v in self._overrides.items() if k != key}
        self._persist(CATEGORY_OVERRIDES_NAMESPACE, self._overrides)

    def effective_category(self, tx: Transaction) -> str:
        return self._overrides.get(tx.key) or tx.category
