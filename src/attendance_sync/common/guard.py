from __future__ import annotations

import logging
import threading
from contextlib import contextmanager
from typing import Iterator

logger = logging.getLogger(__name__)


class RunGuard:
    """Skip (never queue) a cycle while the previous one is still running."""

    def __init__(self, name: str):
        self._name = name
        self._lock = threading.Lock()

    @contextmanager
    def try_run(self) -> Iterator[bool]:
        acquired = self._lock.acquire(blocking=False)
        if not acquired:
            logger.warning("%s cycle still running, skipping this run", self._name)
        try:
            yield acquired
        finally:
            if acquired:
                self._lock.release()
