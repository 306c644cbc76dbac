# spend_tracker/__init__.py
