# spend_tracker/loaders/chase.py
from spend_tracker.loaders.base import (
    BaseLoader, check_date, check_required, parse_amount,
)

_PAYMENT_TYPE = "Payment"
_AUTOPAY_DESC = "AUTOMATIC PAYMENT"


class ChaseLoader(BaseLoader):
    """
    Loader for Chase-style CSV exports, shared by the Sapphire and Amazon
    cards. Amounts already use the canonical sign: negative is a purchase,
    positive is a return or credit.

    Expected columns (header row skipped):
      0: Transaction Date (MM/DD/YYYY)
      1: Post Date        (ignored)
      2: Description
      3: Category
      4: Type             ("Sale", "Return", "Payment", ...)
      5: Amount
      6: Memo             (ignored, optional)

    Rows of type "Payment" or mentioning "AUTOMATIC PAYMENT" are the card
    being paid off and are dropped.
    """
    min_fields = 6

    def __init__(self, card="chase-sapphire"):
        self.card = card

    def parse_row(self, parts):
        date, description, category, tx_type, amount_str = (
            parts[0], parts[2], parts[3], parts[4], parts[5]
        )
        if tx_type == _PAYMENT_TYPE or _AUTOPAY_DESC in description:
            return None

        check_required(date, description, amount_str)
        amount = parse_amount(amount_str)
        check_date(date)

        return self.build(date, description, category, amount,
                          is_return=amount > 0)


class AmazonLoader(ChaseLoader):
    def __init__(self):
        super().__init__(card="amazon")
