import logging

import pytest
import yaml

from spend_tracker.config import DEFAULT_CONFIG, load_config
from spend_tracker.dataset import load_dataset


def test_defaults_without_path():
    cfg = load_config()
    assert cfg == DEFAULT_CONFIG
    cfg['statements'].clear()
    assert DEFAULT_CONFIG['statements']


def test_yaml_is_merged_over_defaults(tmp_path):
    path = tmp_path / 'config.yaml'
    path.write_text(yaml.safe_dump({
        'data_dir': 'statements',
        'statements': {'amex': {'file': 'amex-2025.csv'}},
        'bank_loaders': {'discover': 'my_loaders.DiscoverLoader'},
        'budgets': [{'category': 'Gas', 'monthly_limit': 100}],
    }))

    cfg = load_config(str(path))
    assert cfg['data_dir'] == 'statements'
    assert cfg['statements'] == {'amex': {'file': 'amex-2025.csv'}}
    assert cfg['bank_loaders']['amex'] == 'spend_tracker.loaders.amex.AmexLoader'
    assert cfg['budgets'][0]['category'] == 'Gas'


def test_non_mapping_config_rejected(tmp_path):
    path = tmp_path / 'config.yaml'
    path.write_text('- just\n- a list\n')
    with pytest.raises(ValueError):
        load_config(str(path))


def test_statements_can_drop_a_default_card(tmp_path, caplog):
    data_dir = tmp_path / 'data'
    data_dir.mkdir()
    (data_dir / 'amex.csv').write_text('Date,Description,Amount,Category\n12/15/2025,NETFLIX,15.99,Entertainment')
    path = tmp_path / 'config.yaml'
    path.write_text(yaml.safe_dump({
        'data_dir': str(data_dir),
        'statements': {'amex': {'file': 'amex.csv', 'loader': 'amex'}},
        'recurring_transactions': [],
    }))

    with caplog.at_level(logging.ERROR):
        dataset = load_dataset(load_config(str(path)))

    assert dataset.cards == ['amex']
    assert 'Failed to read' not in caplog.text
