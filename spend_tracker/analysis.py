# spend_tracker/analysis.py
"""
Spending aggregations over effective (credit-adjusted, re-categorized)
transactions.

Every total here is a *net* figure: a purchase adds its magnitude, a return
subtracts its amount. Summing ``abs(amount)`` across the board would count
refunds as extra spending.
"""
from __future__ import annotations

from collections import defaultdict
from typing import Dict, Iterable, List, Optional, Tuple

import pandas as pd

from spend_tracker.core.models import MONTHS, Transaction
from spend_tracker.credits import CreditStore, net_contribution

ALL_CARDS = "all"


def filter_transactions(
    transactions: Iterable[Transaction],
    card: Optional[str] = None,
    month: Optional[str] = None,
) -> List[Transaction]:
    """Keep transactions on ``card`` (``"all"``/None for every card) in ``month`` (``"Jan"``...)."""
    selected = []
    for tx in transactions:
        if card not in (None, ALL_CARDS) and tx.card != card:
            continue
        if month is not None and tx.month != month:
            continue
        selected.append(tx)
    return selected


def net_spend(transactions: Iterable[Transaction], store: CreditStore) -> float:
    return sum(net_contribution(store.effective_amount(tx)) for tx in transactions)


def spending_by_category(
    transactions: Iterable[Transaction], store: CreditStore
) -> Dict[str, float]:
    """Net spend per effective category, largest first, positive totals only."""
    totals = defaultdict(float)
    for tx in transactions:
        cat = store.effective_category(tx) or "Other"
        totals[cat] += net_contribution(store.effective_amount(tx))
    ranked = sorted(
        ((cat, value) for cat, value in totals.items() if value > 0),
        key=lambda item: item[1],
        reverse=True,
    )
    return dict(ranked)


def spending_by_month(
    transactions: Iterable[Transaction], store: CreditStore
) -> List[Tuple[str, float]]:
    """Net spend for each of the twelve months, floored at zero."""
    totals = defaultdict(float)
    for tx in transactions:
        totals[tx.month] += net_contribution(store.effective_amount(tx))
    return [(month, max(0.0, totals[month])) for month in MONTHS]


def purchase_count(transactions: Iterable[Transaction]) -> int:
    return sum(1 for tx in transactions if tx.amount < 0)


def average_purchase(transactions: List[Transaction], store: CreditStore) -> float:
    count = purchase_count(transactions)
    if not count:
        return 0.0
    return net_spend(transactions, store) / count


def monthly_frame(transactions: Iterable[Transaction], store: CreditStore) -> pd.DataFrame:
    """
    Net spend pivoted to one row per month and one column per effective
    category, with a ``Total`` column. Months without activity are zero rows.
    """
    rows = [
        {
            'month': tx.month,
            'category': store.effective_category(tx),
            'net': net_contribution(store.effective_amount(tx)),
        }
        for tx in transactions
    ]
    if not rows:
        return pd.DataFrame(index=pd.Index(MONTHS, name='month'), data={'Total': 0.0})

    df = pd.DataFrame(rows)
    pivot = df.pivot_table(
        index='month', columns='category', values='net', aggfunc='sum', fill_value=0.0
    )
    pivot = pivot.reindex(MONTHS, fill_value=0.0)
    pivot.columns.name = None
    pivot['Total'] = pivot.sum(axis=1)
    return pivot
