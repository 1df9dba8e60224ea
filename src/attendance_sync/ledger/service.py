from __future__ import annotations

import logging
import threading
from typing import Optional

from ..common.datetime_utils import format_minutes, parse_hhmm
from ..core.enums import EventKind, EventSource
from .calculator.base import WorkTimeCalculator
from .calculator.standard_calculator import StandardWorkTimeCalculator
from .model import AttendanceEvent, AttendanceRow, TimePair
from .repository import LedgerRepository

logger = logging.getLogger(__name__)

_ON_SITE_KINDS = {EventKind.CHECK_IN, EventKind.CHECK_OUT, EventKind.BREAK_START, EventKind.BREAK_END}


class LedgerService:
    """Upsert engine for the per-employee-per-day attendance ledger.

    Every time slot is write-once: the first punch of a kind wins and later
    ones (duplicates, late deliveries) are ignored. The project label is the
    exception and always takes the latest non-empty value.

    Each upsert is a full read-modify-write of the ledger, so calls are
    serialised on an internal lock shared by both pollers.
    """

    def __init__(
        self,
        repository: LedgerRepository,
        *,
        calculator: Optional[WorkTimeCalculator] = None,
        lock: Optional[threading.Lock] = None,
    ):
        self._repository = repository
        self._calculator = calculator or StandardWorkTimeCalculator()
        self._lock = lock or threading.Lock()

    def upsert(self, event: AttendanceEvent) -> AttendanceRow:
        with self._lock:
            rows = self._repository.load_rows()
            row = next((r for r in rows if r.matches(event)), None)
            created = row is None
            if row is None:
                row = AttendanceRow.blank_for(event)
                rows.append(row)

            changed = self._apply(row, event)
            if created or changed:
                self._repository.save_rows(rows)
            return row

    def _apply(self, row: AttendanceRow, event: AttendanceEvent) -> bool:
        if event.kind in _ON_SITE_KINDS and event.source != EventSource.ON_SITE:
            logger.warning("Ignoring %s from %s: on-site slots only", event.kind.value, event.source.value)
            return False

        time_of_day = event.time_of_day
        written = False

        if event.kind == EventKind.CHECK_IN:
            if not row.check_in:
                row.check_in = time_of_day
                written = True

        elif event.kind == EventKind.CHECK_OUT:
            if not row.check_out:
                row.check_out = time_of_day
                written = True
                self._recompute(row)

        elif event.kind == EventKind.BREAK_START:
            written = self._fill_pair(row.breaks, time_of_day, end=False)

        elif event.kind == EventKind.BREAK_END:
            written = self._fill_pair(row.breaks, time_of_day, end=True)
            if written and row.check_out:
                # out-of-order break after checkout must not leave totals stale
                self._recompute(row)

        elif event.kind == EventKind.REMOTE_START:
            written = self._fill_pair(row.remotes, time_of_day, end=False)

        elif event.kind == EventKind.REMOTE_END:
            written = self._fill_pair(row.remotes, time_of_day, end=True)
            if written and event.duration_seconds > 0:
                total = parse_hhmm(row.remote_work_time) + event.duration_seconds // 60
                row.remote_work_time = format_minutes(total)

        project_changed = bool(event.project) and row.project != event.project
        if project_changed:
            row.project = event.project

        if written or project_changed:
            row.source = event.source.value
            logger.info(
                "Ledger %s %s %s -> %s", row.employee_key, row.work_date.isoformat(), event.kind.value, time_of_day
            )
        return written or project_changed

    @staticmethod
    def _fill_pair(pairs: list[TimePair], time_of_day: str, *, end: bool) -> bool:
        side = "end" if end else "start"
        if any(getattr(p, side) == time_of_day for p in pairs):
            return False
        for pair in pairs:
            if not getattr(pair, side):
                setattr(pair, side, time_of_day)
                return True
        logger.warning("All %s slots full, dropping %s", side, time_of_day)
        return False

    def _recompute(self, row: AttendanceRow) -> None:
        total = self._calculator.compute_work_time(row)
        if total is not None:
            row.total_work_time = total
