# spend_tracker/merchants.py
"""
Merchant name normalization for search and the top-merchants leaderboard.

Each pipeline is an ordered list of pure ``str -> str`` steps so that every
step can be exercised on its own. The search pipeline is aggressive (it
strips processor prefixes and reference numbers so variants of one merchant
collapse together); the leaderboard pipeline only trims order ids.
"""
from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Callable, Iterable, List

from spend_tracker.credits import CreditStore, net_contribution
from spend_tracker.core.models import Transaction

MIN_NAME_LENGTH = 3
SEARCH_NAME_LENGTH = 40
LEADERBOARD_NAME_LENGTH = 30
SEARCH_LIMIT = 10
LEADERBOARD_LIMIT = 30


def upper_case(name: str) -> str:
    return name.upper()


def drop_after_star(name: str) -> str:
    return re.sub(r"\*.*$", "", name)


def drop_long_digit_runs(name: str) -> str:
    return re.sub(r"\d{5,}", "", name)


def drop_reference_numbers(name: str) -> str:
    return re.sub(r"\s+#\d+", "", name)


def drop_after_dash(name: str) -> str:
    return re.sub(r"\s+-\s+.*", "", name)


def drop_trailing_date(name: str) -> str:
    return re.sub(r"\s+\d{1,2}/\d{1,2}$", "", name)


def drop_tst_prefix(name: str) -> str:
    return re.sub(r"^TST(\*\s*|\s+)", "", name)


def drop_sp_prefix(name: str) -> str:
    return re.sub(r"^SP\s+", "", name)


def drop_dd_prefix(name: str) -> str:
    return re.sub(r"^DD\s+\*", "", name)


def expand_amazon_marketplace(name: str) -> str:
    # the order id after "US*" goes with the tag
    return re.sub(r"AMZN\s+MKTP\s+US\*\S*", "AMAZON ", name, flags=re.I)


def merge_amazon_variants(name: str) -> str:
    return re.sub(
        r"^AMAZON(?:\.COM|\s+MKTP(?:\s+US)?|\s+MARKETPLACE)(?=\s|$)", "AMAZON", name
    )


def collapse_whitespace(limit: int) -> Callable[[str], str]:
    def step(name: str) -> str:
        return re.sub(r"\s+", " ", name).strip()[:limit]
    step.__name__ = f"collapse_whitespace_{limit}"
    return step


SEARCH_STEPS: List[Callable[[str], str]] = [
    upper_case,
    # processor tags carry their own "*", so they go before the truncation
    drop_tst_prefix,
    drop_sp_prefix,
    drop_dd_prefix,
    expand_amazon_marketplace,
    drop_after_star,
    drop_long_digit_runs,
    drop_reference_numbers,
    drop_after_dash,
    drop_trailing_date,
    merge_amazon_variants,
    collapse_whitespace(SEARCH_NAME_LENGTH),
]

LEADERBOARD_STEPS: List[Callable[[str], str]] = [
    drop_after_star,
    drop_long_digit_runs,
    collapse_whitespace(LEADERBOARD_NAME_LENGTH),
]


def apply_steps(name: str, steps: Iterable[Callable[[str], str]]) -> str:
    for step in steps:
        name = step(name)
    return name


def normalize_merchant(description: str) -> str:
    return apply_steps(description, SEARCH_STEPS)


def leaderboard_merchant(description: str) -> str:
    return apply_steps(description, LEADERBOARD_STEPS)


@dataclass
class MerchantTotal:
    name: str
    total: float = 0.0
    count: int = 0
    largest: float = 0.0
    transactions: List[Transaction] = field(default_factory=list)

    def add(self, tx: Transaction, amount: float) -> None:
        self.total += net_contribution(amount)
        if amount < 0:
            self.largest = max(self.largest, abs(amount))
        self.count += 1
        self.transactions.append(tx)


def search_merchants(
    transactions: Iterable[Transaction],
    query: str,
    store: CreditStore,
    limit: int = SEARCH_LIMIT,
) -> List[MerchantTotal]:
    """
    Group transactions matching ``query`` by normalized merchant.

    A transaction matches when the query appears in either its normalized
    name or its raw description (case-insensitive). Results are ordered by
    absolute net spend.
    """
    query = query.strip().lower()
    if not query:
        return []

    groups = {}
    for tx in transactions:
        name = normalize_merchant(tx.description)
        if query not in name.lower() and query not in tx.description.lower():
            continue
        if name not in groups:
            groups[name] = MerchantTotal(name)
        groups[name].add(tx, store.effective_amount(tx))

    results = [g for g in groups.values() if len(g.name) >= MIN_NAME_LENGTH]
    results.sort(key=lambda g: abs(g.total), reverse=True)
    return results[:limit]


def top_merchants(
    transactions: Iterable[Transaction],
    store: CreditStore,
    sort_by: str = "total",
    limit: int = LEADERBOARD_LIMIT,
) -> List[MerchantTotal]:
    """Merchants with positive net spend, ordered by ``total`` or ``largest`` purchase."""
    if sort_by not in ("total", "largest"):
        raise ValueError(f"Unsupported sort '{sort_by}'.")

    groups = {}
    for tx in transactions:
        name = leaderboard_merchant(tx.description)
        if len(name) < MIN_NAME_LENGTH:
            continue
        if name not in groups:
            groups[name] = MerchantTotal(name)
        groups[name].add(tx, store.effective_amount(tx))

    results = [g for g in groups.values() if g.total > 0]
    results.sort(key=lambda g: getattr(g, sort_by), reverse=True)
    return results[:limit]
