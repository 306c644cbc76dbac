# spend_tracker/recurring.py
from __future__ import annotations

from typing import Iterable, List, Optional

from spend_tracker.core.models import MONTHS, Transaction

RENT_ENTRY = {
    "description": "Monthly Rent Payment",
    "category": "Rent",
    "amount": 3335.0,
    "card": "checking",
}


def _entry_amount(entry) -> float:
    try:
        amount = float(entry.get("amount", 0.0))
    except (TypeError, ValueError):
        raise ValueError(f"Unrecognized amount in recurring entry: {entry}")
    if amount == 0:
        raise ValueError(f"Missing 'amount' in recurring entry: {entry}")
    return amount


def _expand_entry(entry, year: int) -> List[Transaction]:
    description = entry.get("description")
    if not description:
        raise ValueError(f"Missing 'description' in recurring entry: {entry}")

    # Recurring obligations are always money leaving the account
    amount = -abs(_entry_amount(entry))
    category = entry.get("category") or "Other"
    card = entry.get("card", "checking")

    return [
        Transaction(
            date=f"{index + 1:02d}/01/{year}",
            description=description,
            category=category,
            amount=amount,
            month=month,
            card=card,
            is_return=False,
        )
        for index, month in enumerate(MONTHS)
    ]


def synthetic_ledger(
    entries: Optional[Iterable[dict]],
    year: int,
) -> List[Transaction]:
    """Expand fixed monthly obligations into one transaction per month of ``year``."""
    if not entries:
        return []
    expanded = []
    for entry in entries:
        expanded.extend(_expand_entry(entry, year))
    return expanded


def rent_transactions(year: int, amount: float = RENT_ENTRY["amount"]) -> List[Transaction]:
    return synthetic_ledger([dict(RENT_ENTRY, amount=amount)], year)
