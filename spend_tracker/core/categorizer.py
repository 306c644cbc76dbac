# spend_tracker/core/categorizer.py
from dataclasses import replace

UNCATEGORIZED = "Other"


def categorize(tx, categories_map):
    name = tx.description.lower()
    for cat, keywords in categories_map.items():
        for kw in keywords:
            if kw.lower() in name:
                return cat
    return None


def fill_categories(transactions, categories_map):
    """Relabel issuer-uncategorized transactions using keyword rules."""
    if not categories_map:
        return list(transactions)
    filled = []
    for tx in transactions:
        if tx.category == UNCATEGORIZED:
            cat = categorize(tx, categories_map)
            if cat:
                tx = replace(tx, category=cat)
        filled.append(tx)
    return filled
