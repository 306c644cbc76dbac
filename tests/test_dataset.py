import pytest

from spend_tracker.config import load_config
from spend_tracker.dataset import aggregate, build_dataset, duplicate_keys, load_dataset
from spend_tracker.loaders.amex import AmexLoader
from spend_tracker.loaders.chase import ChaseLoader

CHASE_CSV = """Transaction Date,Post Date,Description,Category,Type,Amount,Memo
12/15/2024,12/16/2024,WHOLE FOODS,Groceries,Sale,-50.00,
12/13/2024,12/14/2024,AMAZON REFUND,Shopping,Return,30.00,
12/14/2024,12/15/2024,CORNER DELI,,Sale,-8.00,"""

AMEX_CSV = """Date,Description,Amount,Category
12/15/2024,WHOLE FOODS,50.00,Groceries
01/02/2025,NETFLIX,15.99,Entertainment"""


def _write_statements(tmp_path):
    (tmp_path / 'chase-sapphire.csv').write_text(CHASE_CSV)
    (tmp_path / 'amex.csv').write_text(AMEX_CSV)


def test_load_dataset_merges_cards_and_adds_rent_for_detected_year(tmp_path):
    _write_statements(tmp_path)
    cfg = load_config()
    cfg['data_dir'] = str(tmp_path)

    dataset = load_dataset(cfg)

    assert dataset.year == 2024
    assert dataset.cards == ['chase-sapphire', 'amex', 'checking']
    assert len(dataset.for_card('chase-sapphire')) == 3
    assert len(dataset.for_card('amazon')) == 0
    rent = dataset.for_card('checking')
    assert len(rent) == 12
    assert all(tx.date.endswith('/2024') for tx in rent)
    assert len(dataset) == 3 + 2 + 12


def test_dataset_is_immutable(tmp_path):
    dataset = build_dataset([ChaseLoader().parse(CHASE_CSV)])
    assert isinstance(dataset.transactions, tuple)
    with pytest.raises(AttributeError):
        dataset.year = 1999


def test_keyword_categories_fill_other(tmp_path):
    dataset = build_dataset(
        [ChaseLoader().parse(CHASE_CSV)],
        categories={'Food & Drink': ['deli']},
    )
    deli = [tx for tx in dataset if tx.description == 'CORNER DELI'][0]
    assert deli.category == 'Food & Drink'


def test_aggregate_keeps_duplicates_and_reports_them():
    chase = ChaseLoader().parse(CHASE_CSV)
    amex = AmexLoader().parse(AMEX_CSV)
    merged = aggregate([chase, amex])

    whole_foods = [tx for tx in merged if tx.description == 'WHOLE FOODS']
    assert len(whole_foods) == 2

    assert duplicate_keys(merged) == {
        '12/15/2024|WHOLE FOODS|-50': ['chase-sapphire', 'amex'],
    }


def test_missing_statement_files_are_empty(tmp_path):
    cfg = load_config()
    cfg['data_dir'] = str(tmp_path)
    cfg['recurring_transactions'] = []

    dataset = load_dataset(cfg)
    assert len(dataset) == 0


def test_loader_card_mismatch_is_a_config_error(tmp_path):
    cfg = load_config()
    cfg['data_dir'] = str(tmp_path)
    cfg['statements'] = {'amazon': {'file': 'amex.csv', 'loader': 'amex'}}

    with pytest.raises(RuntimeError):
        load_dataset(cfg)


def test_unknown_loader_name_is_a_config_error(tmp_path):
    cfg = load_config()
    cfg['data_dir'] = str(tmp_path)
    cfg['statements'] = {'amex': {'file': 'amex.csv', 'loader': 'discover'}}

    with pytest.raises(RuntimeError, match="Unknown loader 'discover'"):
        load_dataset(cfg)
