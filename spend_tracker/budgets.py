# spend_tracker/budgets.py
from __future__ import annotations

import logging
import math
import re
import uuid
from collections import Counter
from dataclasses import asdict, dataclass, field, replace
from datetime import datetime, timedelta
from typing import Dict, Iterable, List, Optional

from spend_tracker.core.models import Transaction
from spend_tracker.storage import ALERTS_NAMESPACE, BUDGETS_NAMESPACE, JsonStorage

logger = logging.getLogger(__name__)

RECURRING_MIN_COUNT = 3
UNUSUAL_MULTIPLIER = 3
UNUSUAL_MIN_SAMPLE = 10
UNUSUAL_ALERT_WINDOW = timedelta(days=7)

_MERCHANT_PREFIX_RX = re.compile(r"[*#0-9]")


@dataclass
class BudgetLimit:
    category: str
    monthly_limit: float
    alert_threshold: float = 80.0  # percent of the limit

    def __post_init__(self):
        if not self.category:
            raise ValueError("Budget needs a category")
        self.monthly_limit = float(self.monthly_limit)
        self.alert_threshold = float(self.alert_threshold)
        if not math.isfinite(self.monthly_limit) or self.monthly_limit <= 0:
            raise ValueError(
                f"Budget limit for {self.category} must be positive, got {self.monthly_limit}"
            )
        if not math.isfinite(self.alert_threshold) or self.alert_threshold <= 0:
            raise ValueError(
                f"Alert threshold for {self.category} must be positive, got {self.alert_threshold}"
            )

    @classmethod
    def from_config(cls, entry) -> "BudgetLimit":
        try:
            return cls(
                category=entry.get('category'),
                monthly_limit=entry.get('monthly_limit', 0),
                alert_threshold=entry.get('alert_threshold', 80.0),
            )
        except (TypeError, ValueError) as e:
            raise ValueError(f"Invalid budget entry {entry}: {e}")

    def to_dict(self):
        return asdict(self)


@dataclass
class SpendingAlert:
    type: str
    message: str
    category: Optional[str] = None
    amount: Optional[float] = None
    id: str = field(default_factory=lambda: f"alert-{uuid.uuid4().hex[:12]}")
    timestamp: datetime = field(default_factory=datetime.now)
    dismissed: bool = False

    def to_dict(self):
        data = asdict(self)
        data['timestamp'] = self.timestamp.isoformat()
        return data

    @classmethod
    def from_dict(cls, data) -> "SpendingAlert":
        data = dict(data)
        data['timestamp'] = datetime.fromisoformat(data['timestamp'])
        return cls(**data)

    def duplicates(self, other: "SpendingAlert", now: datetime) -> bool:
        """True if ``self`` is a still-open alert covering the same thing as ``other``."""
        if self.dismissed or self.type != other.type:
            return False
        if other.category is not None:
            return self.category == other.category
        if other.type == "unusual_spending" and now - self.timestamp >= UNUSUAL_ALERT_WINDOW:
            return False
        return self.message == other.message


def check_budgets(
    budgets: Iterable[BudgetLimit], category_spending: Dict[str, float]
) -> List[SpendingAlert]:
    """Alert for each budget that is exceeded or past its warning threshold."""
    alerts = []
    for budget in budgets:
        spent = category_spending.get(budget.category, 0.0)
        percentage = spent / budget.monthly_limit * 100
        if percentage >= 100:
            alerts.append(SpendingAlert(
                type="budget_exceeded",
                category=budget.category,
                message=(
                    f"Budget exceeded for {budget.category}! Spent ${spent:.2f} "
                    f"of ${budget.monthly_limit:.2f} budget."
                ),
                amount=spent - budget.monthly_limit,
            ))
        elif percentage >= budget.alert_threshold:
            alerts.append(SpendingAlert(
                type="budget_warning",
                category=budget.category,
                message=(
                    f"{percentage:.0f}% of {budget.category} budget used "
                    f"(${spent:.2f} of ${budget.monthly_limit:.2f})"
                ),
                amount=spent,
            ))
    return alerts


def merchant_prefix(description: str) -> str:
    return _MERCHANT_PREFIX_RX.split(description, maxsplit=1)[0].strip()


def detect_anomalies(transactions: List[Transaction]) -> List[SpendingAlert]:
    """Flag merchants that recur 3+ times and purchases over 3x the average size."""
    alerts = []

    counts = Counter(merchant_prefix(tx.description) for tx in transactions)
    for merchant, count in counts.items():
        if merchant and count >= RECURRING_MIN_COUNT:
            alerts.append(SpendingAlert(
                type="recurring_detected",
                message=f"Recurring charge detected: {merchant} appears {count} times this period",
            ))

    amounts = [abs(tx.amount) for tx in transactions if tx.amount != 0]
    if len(amounts) > UNUSUAL_MIN_SAMPLE:
        average = sum(amounts) / len(amounts)
        threshold = average * UNUSUAL_MULTIPLIER
        for tx in transactions:
            size = abs(tx.amount)
            if size > threshold:
                alerts.append(SpendingAlert(
                    type="unusual_spending",
                    message=(
                        f"Unusually large transaction: {tx.description} - ${size:.2f} "
                        f"({size / average * 100:.0f}% above average)"
                    ),
                    amount=size,
                ))
    return alerts


class BudgetStore:
    """
    Budgets and raised alerts, loaded once from ``storage`` and written back
    in full after every change. Budgets from config act as defaults that a
    stored budget for the same category replaces.
    """

    def __init__(self, storage: Optional[JsonStorage] = None, defaults: Iterable[BudgetLimit] = ()):
        self.storage = storage
        self._defaults = {b.category: b for b in defaults}
        self._budgets: Dict[str, BudgetLimit] = {}
        self._alerts: List[SpendingAlert] = []
        if storage is not None:
            self._budgets = self._load_budgets()
            self._alerts = self._load_alerts()

    def _load_budgets(self):
        loaded = {}
        for entry in self._load_list(BUDGETS_NAMESPACE):
            try:
                budget = BudgetLimit.from_config(entry)
            except (AttributeError, ValueError) as e:
                logger.warning("Ignoring stored budget %r: %s", entry, e)
                continue
            loaded[budget.category] = budget
        return loaded

    def _load_alerts(self):
        loaded = []
        for entry in self._load_list(ALERTS_NAMESPACE):
            try:
                loaded.append(SpendingAlert.from_dict(entry))
            except (KeyError, TypeError, ValueError) as e:
                logger.warning("Ignoring stored alert %r: %s", entry, e)
        return loaded

    def _load_list(self, namespace):
        raw = self.storage.get(namespace, [])
        if not isinstance(raw, list):
            logger.warning("Ignoring malformed %s document", namespace)
            return []
        return raw

    def _persist_budgets(self):
        if self.storage is not None:
            self.storage.put(BUDGETS_NAMESPACE, [b.to_dict() for b in self._budgets.values()])

    def _persist_alerts(self):
        if self.storage is not None:
            self.storage.put(ALERTS_NAMESPACE, [a.to_dict() for a in self._alerts])

    @property
    def budgets(self) -> List[BudgetLimit]:
        merged = dict(self._defaults)
        merged.update(self._budgets)
        return list(merged.values())

    @property
    def alerts(self) -> List[SpendingAlert]:
        return list(self._alerts)

    @property
    def open_alerts(self) -> List[SpendingAlert]:
        return [a for a in self._alerts if not a.dismissed]

    def set_budget(self, category: str, monthly_limit: float, alert_threshold: float = 80.0) -> BudgetLimit:
        budget = BudgetLimit(category, monthly_limit, alert_threshold)
        self._budgets = {**self._budgets, category: budget}
        self._persist_budgets()
        return budget

    def remove_budget(self, category: str) -> bool:
        if category not in self._budgets:
            return False
        self._budgets = {k: v for k, v in self._budgets.items() if k != category}
        self._persist_budgets()
        return True

    def record(self, candidates: Iterable[SpendingAlert], now: Optional[datetime] = None) -> List[SpendingAlert]:
        """
        Keep the candidates not already covered by an open alert, newest
        first, and return the ones that were added.
        """
        now = now or datetime.now()
        added = []
        for alert in candidates:
            if any(existing.duplicates(alert, now) for existing in added + self._alerts):
                continue
            added.append(alert)
        if added:
            self._alerts = list(reversed(added)) + self._alerts
            self._persist_alerts()
        return added

    def dismiss(self, alert_id: str) -> bool:
        if not any(a.id == alert_id and not a.dismissed for a in self._alerts):
            return False
        self._alerts = [
            replace(a, dismissed=True) if a.id == alert_id else a for a in self._alerts
        ]
        self._persist_alerts()
        return True
