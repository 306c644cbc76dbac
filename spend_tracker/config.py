# spend_tracker/config.py
import copy

import yaml

from spend_tracker.recurring import RENT_ENTRY

DEFAULT_CONFIG = {
    'data_dir': 'data',
    'storage_dir': '.spend_tracker',
    'output_dir': 'data',
    'statements': {
        'chase-sapphire': {'file': 'chase-sapphire.csv', 'loader': 'chase'},
        'amazon': {'file': 'amazon.csv', 'loader': 'amazon'},
        'amex': {'file': 'amex.csv', 'loader': 'amex'},
    },
    'bank_loaders': {
        'chase': 'spend_tracker.loaders.chase.ChaseLoader',
        'amazon': 'spend_tracker.loaders.chase.AmazonLoader',
        'amex': 'spend_tracker.loaders.amex.AmexLoader',
    },
    'output_modules': {
        'csv': 'spend_tracker.outputs.csv_output.CSVOutput',
    },
    'recurring_transactions': [RENT_ENTRY],
    'categories': {},
    'budgets': [],
}


# replaced as a whole so a config can drop a default card
REPLACED_KEYS = {'statements'}


def _merge(base, override, top_level=True):
    merged = dict(base)
    for key, value in override.items():
        if top_level and key in REPLACED_KEYS:
            merged[key] = value
        elif isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = _merge(merged[key], value, top_level=False)
        else:
            merged[key] = value
    return merged


def load_config(path=None):
    """
    Load a YAML config and merge it over DEFAULT_CONFIG. With no path the
    defaults are returned as-is.
    """
    cfg = copy.deepcopy(DEFAULT_CONFIG)
    if path is None:
        return cfg
    with open(path) as f:
        data = yaml.safe_load(f) or {}
    if not isinstance(data, dict):
        raise ValueError(f"Config file {path} must contain a mapping, got {type(data).__name__}")
    return _merge(cfg, data)
