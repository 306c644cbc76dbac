# spend_tracker/loaders/__init__.py
from importlib import import_module


def get_loader(name, config):
    """Instantiate the statement loader registered as ``name`` in ``bank_loaders``."""
    registry = config.get('bank_loaders', {})
    if name not in registry:
        raise RuntimeError(
            f"Unknown loader '{name}'. Configured loaders: {', '.join(sorted(registry))}"
        )
    module_name, cls_name = registry[name].rsplit('.', 1)
    return getattr(import_module(module_name), cls_name)()
