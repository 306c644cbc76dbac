# spend_tracker/core/year.py
from collections import Counter
from datetime import date


def year_from_date(date_str):
    """Year component of an ``MM/DD/YYYY`` string, or the current year."""
    parts = date_str.split('/')
    if len(parts) >= 3:
        try:
            return int(parts[2])
        except ValueError:
            pass
    return date.today().year


def detect_data_year(transactions):
    """
    Return the most common year across ``transactions``.

    Ties go to the highest year; an empty list gives the current year.
    """
    counts = Counter(year_from_date(tx.date) for tx in transactions)
    if not counts:
        return date.today().year
    return max(counts.items(), key=lambda item: (item[1], item[0]))[0]
