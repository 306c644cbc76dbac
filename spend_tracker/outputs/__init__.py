# spend_tracker/outputs/__init__.py
from importlib import import_module


def get_output(name, config):
    """Instantiate the output registered as ``name`` in ``output_modules``."""
    registry = config.get('output_modules', {})
    if name not in registry:
        raise RuntimeError(f"No output module configured for '{name}'")
    module_name, cls_name = registry[name].rsplit('.', 1)
    return getattr(import_module(module_name), cls_name)(config)
