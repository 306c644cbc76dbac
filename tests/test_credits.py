import json

import pytest

from spend_tracker.core.models import Transaction, transaction_key
from spend_tracker.credits import (
    CreditStore,
    InvalidCategoryError,
    InvalidCreditError,
    adjusted_amount,
    net_contribution,
)
from spend_tracker.storage import (
    CATEGORY_OVERRIDES_NAMESPACE,
    CREDITS_NAMESPACE,
    JsonStorage,
)

PURCHASE = Transaction(date='12/15/2025', description='WHOLE FOODS', category='Groceries',
                       amount=-50.0, month='Dec', card='chase-sapphire')
RETURN = Transaction(date='12/13/2025', description='AMAZON REFUND', category='Shopping',
                     amount=30.0, month='Dec', card='chase-sapphire', is_return=True)


def test_transaction_key_is_pipe_delimited_and_stable():
    assert PURCHASE.key == '12/15/2025|WHOLE FOODS|-50'
    assert transaction_key('1/1/2025', 'X', -50) == transaction_key('1/1/2025', 'X', -50.0)
    assert transaction_key('1/1/2025', 'X', -25.5) == '1/1/2025|X|-25.5'


def test_no_credit_and_zero_credit_leave_amount_unchanged():
    store = CreditStore()
    assert store.effective_amount(PURCHASE) == -50.0

    store.set_credit(PURCHASE, 0)
    assert store.effective_amount(PURCHASE) == -50.0


def test_partial_and_full_credit_shrink_toward_zero():
    store = CreditStore()
    store.set_credit(PURCHASE, 20)
    assert store.effective_amount(PURCHASE) == -30.0

    store.set_credit(PURCHASE, 50)
    assert store.effective_amount(PURCHASE) == 0


@pytest.mark.parametrize('amount', [-50.0, 30.0, -0.01])
@pytest.mark.parametrize('credit', [0.0, 0.01, 10.0, 100.0])
def test_adjusted_amount_never_flips_sign_or_grows(amount, credit):
    result = adjusted_amount(amount, credit)
    assert abs(result) <= abs(amount)
    assert result == 0 or (result < 0) == (amount < 0)


def test_net_contribution_subtracts_returns():
    assert net_contribution(-50.0) == 50.0
    assert net_contribution(30.0) == -30.0
    assert net_contribution(-50.0) + net_contribution(30.0) == 20.0


@pytest.mark.parametrize('bad', ['abc', None, -1, 50.01, float('nan'), float('inf')])
def test_invalid_credit_is_rejected_and_state_preserved(tmp_path, bad):
    storage = JsonStorage(tmp_path)
    store = CreditStore(storage)
    store.set_credit(PURCHASE, 10)

    with pytest.raises(InvalidCreditError):
        store.set_credit(PURCHASE, bad)

    assert store.credits == {PURCHASE.key: 10.0}
    assert storage.get(CREDITS_NAMESPACE) == {PURCHASE.key: 10.0}


def test_credits_write_through_and_reload(tmp_path):
    storage = JsonStorage(tmp_path)
    store = CreditStore(storage)
    store.set_credit(PURCHASE, 12.5)

    on_disk = json.loads((tmp_path / f'{CREDITS_NAMESPACE}.json').read_text())
    assert on_disk == {PURCHASE.key: 12.5}

    reloaded = CreditStore(storage)
    assert reloaded.effective_amount(PURCHASE) == -37.5

    reloaded.remove_credit(PURCHASE.key)
    assert storage.get(CREDITS_NAMESPACE) == {}
    assert CreditStore(storage).effective_amount(PURCHASE) == -50.0


def test_category_override_layers_over_issuer_category(tmp_path):
    storage = JsonStorage(tmp_path)
    store = CreditStore(storage)
    assert store.effective_category(RETURN) == 'Shopping'

    store.set_category_override(RETURN, 'Personal')
    assert store.effective_category(RETURN) == 'Personal'
    assert RETURN.category == 'Shopping'
    assert storage.get(CATEGORY_OVERRIDES_NAMESPACE) == {RETURN.key: 'Personal'}

    store.remove_category_override(RETURN.key)
    assert store.effective_category(RETURN) == 'Shopping'


def test_unknown_category_is_rejected():
    store = CreditStore()
    with pytest.raises(InvalidCategoryError):
        store.set_category_override(RETURN, 'Snacks')
    assert store.category_overrides == {}


def test_malformed_stored_entries_are_ignored(tmp_path):
    storage = JsonStorage(tmp_path)
    storage.put(CREDITS_NAMESPACE, {PURCHASE.key: 'lots', 'other': 3})

    store = CreditStore(storage)
    assert store.credits == {'other': 3.0}
