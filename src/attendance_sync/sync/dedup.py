from __future__ import annotations

import logging
import threading

from ..common.json_store import JsonFileStore
from ..core.constants import PUNCH_KEY_SEPARATOR

logger = logging.getLogger(__name__)


def punch_key(employee_code: str, raw_punch_time: str) -> str:
    """Dedupe key built from the raw upstream timestamp string, never a reformatted one."""
    return f"{employee_code}{PUNCH_KEY_SEPARATOR}{raw_punch_time}"


class ProcessedPunchCache:
    """Persisted set of punches that were already recorded and notified."""

    def __init__(self, store: JsonFileStore):
        self._store = store
        self._keys: set[str] = set()
        self._lock = threading.Lock()

    def load(self) -> None:
        data = self._store.read(default=[])
        if not isinstance(data, list):
            logger.warning("Processed punch file %s is not a list, starting empty", self._store.path)
            data = []
        with self._lock:
            self._keys = {str(k) for k in data}

    def save(self) -> None:
        with self._lock:
            snapshot = sorted(self._keys)
        self._store.write(snapshot)

    def is_duplicate(self, key: str) -> bool:
        with self._lock:
            return key in self._keys

    def mark_processed(self, key: str) -> None:
        with self._lock:
            self._keys.add(key)

    def __len__(self) -> int:
        return len(self._keys)
