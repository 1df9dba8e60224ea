from __future__ import annotations

import logging
from datetime import datetime, timedelta
from typing import Callable, Optional

from ..common.datetime_utils import now_local, to_local
from ..common.json_store import JsonFileStore
from ..core.constants import DEFAULT_CURSOR_LOOKBACK_MINUTES, DEFAULT_OVERLAP_SECONDS

logger = logging.getLogger(__name__)

EPOCH = datetime(1970, 1, 1)


class SyncCursorStore:
    """Remembers how far a poller has successfully consumed its source."""

    def __init__(
        self,
        store: JsonFileStore,
        *,
        overlap: timedelta = timedelta(seconds=DEFAULT_OVERLAP_SECONDS),
        clock: Callable[[], datetime] = now_local,
    ):
        self._store = store
        self._overlap = overlap
        self._clock = clock

    def get_last_fetched_at(self) -> datetime:
        data = self._store.read(default={})
        raw = data.get("lastFetchedAt") if isinstance(data, dict) else None
        if raw:
            try:
                text = str(raw)
                if text.endswith("Z"):
                    text = text[:-1] + "+00:00"
                # stored values may carry an offset, windows are local wall-clock
                return to_local(datetime.fromisoformat(text))
            except (TypeError, ValueError):
                logger.warning("Ignoring unreadable cursor value %r", raw)
        return self._clock() - timedelta(minutes=DEFAULT_CURSOR_LOOKBACK_MINUTES)

    def set_last_fetched_at(self, value: datetime) -> None:
        self._store.write({"lastFetchedAt": value.isoformat()})

    def next_window(self, now: Optional[datetime] = None) -> tuple[datetime, datetime]:
        """[cursor - overlap, now], never starting before the epoch."""
        end = now or self._clock()
        start = max(self.get_last_fetched_at() - self._overlap, EPOCH)
        return start, end
