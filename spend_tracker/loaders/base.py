# spend_tracker/loaders/base.py
import logging
import math
import re
from abc import ABC, abstractmethod

from spend_tracker.core.models import Transaction, month_from_date

logger = logging.getLogger(__name__)

_DATE_RX = re.compile(r"^\d{1,2}/\d{1,2}/\d{4}$")
_MAX_LOGGED_ERRORS = 5


class RowError(ValueError):
    """A statement row that cannot be turned into a Transaction."""


class BaseLoader(ABC):
    card = None
    min_fields = 0

    @abstractmethod
    def parse_row(self, parts):
        """
        Return a Transaction for one split CSV row, or None if the row is a
        payment that should be filtered out. Raise RowError for malformed rows.
        """
        pass

    def parse(self, text):
        """Parse statement ``text``, skipping the header and malformed rows."""
        lines = text.strip().split('\n')
        transactions = []
        errors = []
        if len(lines) < 2:
            logger.warning("%s: CSV has no data rows", self.card)
            return transactions

        for lineno, line in enumerate(lines[1:], start=2):
            line = line.strip()
            if not line:
                continue
            parts = line.split(',')
            try:
                if len(parts) < self.min_fields:
                    raise RowError(
                        f"Invalid format (expected {self.min_fields}+ columns, "
                        f"got {len(parts)})"
                    )
                tx = self.parse_row([p.strip() for p in parts])
            except RowError as e:
                errors.append(f"Line {lineno}: {e}")
                continue
            if tx is not None:
                transactions.append(tx)

        if errors:
            logger.warning("%s: Found %d error(s): %s", self.card, len(errors),
                           errors[:_MAX_LOGGED_ERRORS])
            if len(errors) > _MAX_LOGGED_ERRORS:
                logger.warning("%s: ... and %d more", self.card,
                               len(errors) - _MAX_LOGGED_ERRORS)
        return transactions

    def load(self, file_path):
        """Read ``file_path`` and parse it; unreadable files yield nothing."""
        try:
            with open(file_path, encoding='utf-8') as f:
                text = f.read()
        except OSError as e:
            logger.error("Failed to read %s: %s", file_path, e)
            return []
        return self.parse(text)

    def build(self, date, description, category, amount, is_return):
        return Transaction(
            date=date,
            description=description.replace('"', '').strip(),
            category=category or "Other",
            amount=amount,
            month=month_from_date(date),
            card=self.card,
            is_return=is_return,
        )


def check_required(date, description, amount_str):
    if not date or not description or not amount_str:
        raise RowError("Missing required fields")


def parse_amount(amount_str):
    try:
        amount = float(amount_str)
    except ValueError:
        raise RowError(f'Invalid amount "{amount_str}"')
    if not math.isfinite(amount):
        raise RowError(f'Invalid amount "{amount_str}"')
    return amount


def check_date(date):
    if not _DATE_RX.match(date):
        raise RowError(f'Invalid date format "{date}" (expected MM/DD/YYYY)')
