import pytest

from spend_tracker.analysis import (
    average_purchase,
    filter_transactions,
    monthly_frame,
    net_spend,
    purchase_count,
    spending_by_category,
    spending_by_month,
)
from spend_tracker.core.models import MONTHS, Transaction
from spend_tracker.credits import CreditStore
from spend_tracker.loaders.chase import ChaseLoader

SCENARIO_CSV = (
    "H\n12/15/2025,_,WHOLE FOODS,Groceries,Sale,-50.00\n"
    "12/13/2025,_,AMAZON REFUND,Shopping,Return,30.00"
)


def _tx(description, amount, category='Shopping', month='Dec', card='amex'):
    return Transaction(date='12/01/2025', description=description, category=category,
                       amount=amount, month=month, card=card, is_return=amount > 0)


def test_end_to_end_net_spend_is_not_abs_sum():
    txs = ChaseLoader().parse(SCENARIO_CSV)
    assert len(txs) == 2

    assert net_spend(txs, CreditStore()) == 20.0
    assert sum(abs(tx.amount) for tx in txs) == 80.0


def test_category_totals_use_overrides_and_hide_non_positive():
    txs = [
        _tx('A', -40.0, 'Groceries'),
        _tx('B', -10.0, 'Shopping'),
        _tx('C', 25.0, 'Shopping'),
        _tx('D', -5.0, 'Gas'),
    ]
    store = CreditStore()
    store.set_category_override(txs[3], 'Groceries')

    assert spending_by_category(txs, store) == {'Groceries': 45.0}


def test_month_totals_are_floored_and_complete():
    txs = [_tx('A', -40.0, month='Jan'), _tx('B', 60.0, month='Feb')]
    months = spending_by_month(txs, CreditStore())

    assert [m for m, _ in months] == MONTHS
    assert dict(months)['Jan'] == 40.0
    assert dict(months)['Feb'] == 0.0


def test_counts_and_average():
    txs = [_tx('A', -40.0), _tx('B', -20.0), _tx('C', 30.0)]
    store = CreditStore()

    assert purchase_count(txs) == 2
    assert average_purchase(txs, store) == 15.0
    assert average_purchase([], store) == 0.0


def test_filter_by_card_and_month():
    txs = [_tx('A', -1.0, card='amex', month='Jan'), _tx('B', -1.0, card='amazon', month='Feb')]

    assert [t.description for t in filter_transactions(txs, card='amex')] == ['A']
    assert [t.description for t in filter_transactions(txs, card='all', month='Feb')] == ['B']
    assert len(filter_transactions(txs)) == 2


def test_monthly_frame_pivots_net_spend():
    txs = [
        _tx('A', -40.0, 'Groceries', month='Jan'),
        _tx('B', 10.0, 'Groceries', month='Jan'),
        _tx('C', -5.0, 'Gas', month='Mar'),
    ]
    frame = monthly_frame(txs, CreditStore())

    assert list(frame.index) == MONTHS
    assert frame.loc['Jan', 'Groceries'] == pytest.approx(30.0)
    assert frame.loc['Mar', 'Total'] == pytest.approx(5.0)
    assert frame.loc['Feb', 'Total'] == 0


def test_monthly_frame_empty():
    frame = monthly_frame([], CreditStore())
    assert list(frame.index) == MONTHS
    assert frame['Total'].sum() == 0
