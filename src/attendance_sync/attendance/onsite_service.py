from __future__ import annotations

import logging
from datetime import datetime
from typing import Optional, Protocol

from ..common.guard import RunGuard
from ..core.exceptions import AuthExpiredError
from ..device.model import RawPunch, to_event
from ..ledger.service import LedgerService
from ..notifications.sender import Notifier, notify
from ..sync.cursor import SyncCursorStore
from ..sync.dedup import ProcessedPunchCache, punch_key
from .model import OnSitePollResult

logger = logging.getLogger(__name__)


class TransactionSource(Protocol):
    def fetch_transactions(self, start: datetime, end: datetime) -> list[RawPunch]:
        raise NotImplementedError

    def authenticate(self, username: Optional[str] = None, password: Optional[str] = None) -> str:
        raise NotImplementedError


class OnSiteSyncService:
    """Use case: pull new terminal punches into the ledger and announce them.

    Per punch the order is ledger write, then notification, then marking the
    punch processed. A crash in between re-delivers the punch next cycle,
    which the write-once ledger absorbs.
    """

    def __init__(
        self,
        device: TransactionSource,
        ledger: LedgerService,
        processed: ProcessedPunchCache,
        cursor: SyncCursorStore,
        notifier: Notifier,
        *,
        guard: Optional[RunGuard] = None,
    ):
        self._device = device
        self._ledger = ledger
        self._processed = processed
        self._cursor = cursor
        self._notifier = notifier
        self._guard = guard or RunGuard("on-site poll")

    def poll(self, *, raise_notification_errors: bool = False) -> OnSitePollResult:
        with self._guard.try_run() as acquired:
            if not acquired:
                return OnSitePollResult(skipped=True)

            self._processed.load()
            start, end = self._cursor.next_window()
            logger.info("Fetching punches %s -> %s", start, end)

            punches = self._fetch(start, end)
            result = OnSitePollResult(window_start=start, window_end=end, fetched=len(punches))
            # upstream order decides which break slot fills first, do not re-sort
            for punch in punches:
                self._process(punch, result, raise_notification_errors)

            self._cursor.set_last_fetched_at(end)
            logger.info(
                "On-site cycle done: %d fetched, %d recorded, %d duplicates",
                result.fetched, result.recorded, result.duplicates,
            )
            return result

    def refresh_token(self, username: Optional[str] = None, password: Optional[str] = None) -> str:
        return self._device.authenticate(username, password)

    def _fetch(self, start: datetime, end: datetime) -> list[RawPunch]:
        for attempt in range(2):
            try:
                return self._device.fetch_transactions(start, end)
            except AuthExpiredError:
                if attempt:
                    raise
                logger.warning("Device token expired or invalid, re-authenticating")
                self._device.authenticate()
        return []

    def _process(self, punch: RawPunch, result: OnSitePollResult, raise_notification_errors: bool) -> None:
        key = punch_key(punch.emp_code, punch.punch_time)
        if self._processed.is_duplicate(key):
            result.duplicates += 1
            return

        try:
            timestamp = punch.timestamp
        except ValueError:
            logger.warning("Unreadable punch time %r for %s, skipping", punch.punch_time, punch.emp_code)
            return

        event = to_event(punch)
        if event is None:
            logger.warning("No ledger slot for status %r (%s)", punch.status, punch.emp_code)
        else:
            self._ledger.upsert(event)
            result.recorded += 1

        notify(
            self._notifier,
            raise_errors=raise_notification_errors,
            label=punch.display_label,
            timestamp=timestamp,
            status=punch.status,
        )
        self._processed.mark_processed(key)
        self._processed.save()
