# spend_tracker/outputs/csv_output.py

import os
import csv
import logging
from spend_tracker.outputs.base import BaseOutput

logger = logging.getLogger(__name__)

COLUMNS = [
    'date', 'card', 'description', 'category', 'amount',
    'credit', 'effective_amount', 'is_return',
]


def _date_key(tx):
    month, day, year = tx.date.split("/")
    return int(year), int(month), int(day)


class CSVOutput(BaseOutput):
    """
    Writes the dataset to a single CSV file named Spending<Year>.csv with
    credits and category overrides applied, sorted by date (oldest first).
    The original amount is kept next to the effective one.
    """
    def __init__(self, config):
        self.config     = config
        self.output_dir = config.get('output_dir', 'data')

    def write(self, dataset, store):
        if not dataset.transactions:
            logger.info("No transactions to write.")
            return None

        os.makedirs(self.output_dir, exist_ok=True)
        ordered = sorted(dataset.transactions, key=_date_key)
        out_path = os.path.join(self.output_dir, f"Spending{dataset.year}.csv")

        with open(out_path, 'w', newline='') as f:
            writer = csv.writer(f)
            writer.writerow(COLUMNS)
            for tx in ordered:
                credit = store.credit_for(tx.key)
                writer.writerow([
                    tx.date,
                    tx.card,
                    tx.description,
                    store.effective_category(tx),
                    f"{tx.amount:.2f}",
                    '' if credit is None else f"{credit:.2f}",
                    f"{store.effective_amount(tx):.2f}",
                    'yes' if tx.is_return else 'no',
                ])

        logger.info("Written %d transactions to %s", len(ordered), out_path)
        return out_path
