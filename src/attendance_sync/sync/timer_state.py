from __future__ import annotations

import logging
from typing import Optional

from ..common.json_store import JsonFileStore

logger = logging.getLogger(__name__)


class RunningTimerState:
    """user id -> id of the in-progress timer last seen for that user."""

    def __init__(self, store: JsonFileStore):
        self._store = store
        self._timers: dict[str, str] = {}

    def load(self) -> None:
        data = self._store.read(default={})
        if not isinstance(data, dict):
            logger.warning("Timer state file %s is not an object, starting empty", self._store.path)
            data = {}
        self._timers = {str(k): str(v) for k, v in data.items() if v}

    def save(self) -> None:
        self._store.write(dict(self._timers))

    def get(self, user_id: str) -> Optional[str]:
        return self._timers.get(user_id)

    def set(self, user_id: str, timer_id: str) -> None:
        self._timers[user_id] = timer_id

    def clear(self, user_id: str) -> None:
        self._timers.pop(user_id, None)
