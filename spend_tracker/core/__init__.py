# spend_tracker/core/__init__.py
