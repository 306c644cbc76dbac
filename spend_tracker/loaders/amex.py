# spend_tracker/loaders/amex.py
from spend_tracker.loaders.base import (
    BaseLoader, check_date, check_required, parse_amount,
)

_PAYMENT_MARKERS = ("PAYMENT", "AUTOPAY")


class AmexLoader(BaseLoader):
    """
    Loader for Amex CSV exports.

    Expected columns (header row skipped):
      0: Date (MM/DD/YYYY)
      1: Description
      2: Amount   (positive = purchase, negative = credit)
      3: Category

    Amex reports purchases as positive, so amounts are negated on the way in.
    """
    card = "amex"
    min_fields = 4

    def parse_row(self, parts):
        date, description, amount_str, category = parts[0], parts[1], parts[2], parts[3]
        if any(marker in description for marker in _PAYMENT_MARKERS):
            return None

        check_required(date, description, amount_str)
        amount = parse_amount(amount_str)
        check_date(date)

        return self.build(date, description, category, -amount,
                          is_return=amount < 0)
