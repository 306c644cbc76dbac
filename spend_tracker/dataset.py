# spend_tracker/dataset.py
"""
Builds the one in-memory dataset every query runs against: all configured
statements parsed, plus the synthetic ledger for the detected year.
"""
from __future__ import annotations

import logging
import os
from collections import defaultdict
from dataclasses import dataclass
from typing import Dict, Iterable, List, Tuple

from spend_tracker.core.categorizer import fill_categories
from spend_tracker.core.models import Transaction
from spend_tracker.core.year import detect_data_year
from spend_tracker.loaders import get_loader
from spend_tracker.recurring import synthetic_ledger

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Dataset:
    transactions: Tuple[Transaction, ...]
    year: int

    @property
    def cards(self) -> List[str]:
        seen = []
        for tx in self.transactions:
            if tx.card not in seen:
                seen.append(tx.card)
        return seen

    def for_card(self, card: str) -> List[Transaction]:
        return [tx for tx in self.transactions if tx.card == card]

    def __len__(self):
        return len(self.transactions)

    def __iter__(self):
        return iter(self.transactions)


def aggregate(statement_groups: Iterable[Iterable[Transaction]], ledger: Iterable[Transaction] = ()) -> Tuple[Transaction, ...]:
    """Concatenate per-card lists in order. Nothing is deduplicated."""
    merged = []
    for group in statement_groups:
        merged.extend(group)
    merged.extend(ledger)
    return tuple(merged)


def build_dataset(statement_groups, recurring_entries=None, categories=None) -> Dataset:
    groups = [list(g) for g in statement_groups]
    year = detect_data_year([tx for g in groups for tx in g])
    groups = [fill_categories(g, categories) for g in groups]
    ledger = synthetic_ledger(recurring_entries, year)
    return Dataset(transactions=aggregate(groups, ledger), year=year)


def load_dataset(config) -> Dataset:
    """Parse every statement named in ``config['statements']`` and build the dataset."""
    data_dir = config.get('data_dir', 'data')
    groups = []
    for card, entry in config.get('statements', {}).items():
        loader = get_loader(entry['loader'], config)
        if loader.card != card:
            raise RuntimeError(
                f"Loader '{entry['loader']}' produces '{loader.card}' transactions, "
                f"but is configured for '{card}'"
            )
        path = os.path.join(data_dir, entry['file'])
        txs = loader.load(path)
        logger.info("Parsed %d transaction(s) for %s from %s", len(txs), card, path)
        groups.append(txs)

    dataset = build_dataset(
        groups,
        recurring_entries=config.get('recurring_transactions'),
        categories=config.get('categories'),
    )
    logger.info("Loaded %d transaction(s) for %d", len(dataset), dataset.year)
    return dataset


def duplicate_keys(transactions: Iterable[Transaction]) -> Dict[str, List[str]]:
    """
    Transaction keys that appear on more than one card, mapped to those cards.
    Such rows are kept in the dataset; this only reports them.
    """
    cards_by_key = defaultdict(list)
    for tx in transactions:
        if tx.card not in cards_by_key[tx.key]:
            cards_by_key[tx.key].append(tx.card)
    return {key: cards for key, cards in cards_by_key.items() if len(cards) > 1}
