# spend_tracker/storage.py
from __future__ import annotations

import json
import logging
import os
import tempfile
from pathlib import Path
from typing import Any

logger = logging.getLogger(__name__)

CREDITS_NAMESPACE = "spending-credits"
CATEGORY_OVERRIDES_NAMESPACE = "spending-category-overrides"
BUDGETS_NAMESPACE = "money-tracker-budgets"
ALERTS_NAMESPACE = "money-tracker-alerts"


class JsonStorage:
    """Key/value JSON documents kept as one file per namespace in a directory."""

    def __init__(self, directory: str | os.PathLike):
        self.directory = Path(directory)

    def _path(self, namespace: str) -> Path:
        return self.directory / f"{namespace}.json"

    def get(self, namespace: str, default: Any = None) -> Any:
        path = self._path(namespace)
        if not path.exists():
            return default
        try:
            with open(path, encoding="utf-8") as f:
                return json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            logger.error("Error reading storage key %r: %s", namespace, e)
            return default

    def put(self, namespace: str, value: Any) -> None:
        self.directory.mkdir(parents=True, exist_ok=True)
        fd, tmp = tempfile.mkstemp(dir=self.directory, suffix=".tmp")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(value, f, indent=2, sort_keys=True)
            os.replace(tmp, self._path(namespace))
        except Exception:
            Path(tmp).unlink(missing_ok=True)
            raise
