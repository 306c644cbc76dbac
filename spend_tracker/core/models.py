# spend_tracker/core/models.py
from dataclasses import dataclass

MONTHS = ["Jan", "Feb", "Mar", "Apr", "May", "Jun",
          "Jul", "Aug", "Sep", "Oct", "Nov", "Dec"]

CARDS = ("chase-sapphire", "amazon", "amex", "checking")

AVAILABLE_CATEGORIES = (
    "Food & Drink",
    "Groceries",
    "Shopping",
    "Travel",
    "Health & Wellness",
    "Bills & Utilities",
    "Entertainment",
    "Gas",
    "Professional Services",
    "Personal",
    "Rent",
)


def month_from_date(date_str):
    """Return the three-letter month for an ``MM/DD/YYYY`` string."""
    try:
        index = int(date_str.split('/')[0]) - 1
    except ValueError:
        return MONTHS[0]
    return MONTHS[index] if 0 <= index < 12 else MONTHS[0]


def _format_amount(amount):
    # -50.0 and -50 must produce the same key
    value = float(amount)
    return str(int(value)) if value.is_integer() else repr(value)


def transaction_key(date, description, amount):
    return f"{date}|{description}|{_format_amount(amount)}"


@dataclass(frozen=True)
class Transaction:
    date: str
    description: str
    category: str
    amount: float
    month: str
    card: str
    is_return: bool = False

    @property
    def key(self):
        return transaction_key(self.date, self.description, self.amount)
