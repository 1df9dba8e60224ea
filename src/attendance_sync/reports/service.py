from __future__ import annotations

import logging
import time
from collections import defaultdict
from datetime import date, datetime, timedelta, tzinfo
from datetime import time as dtime
from typing import Callable, Optional, Protocol

from ..common.datetime_utils import format_time_of_day, to_local
from ..core.constants import BREAK_SLOTS
from ..core.enums import ReportPeriod
from ..core.exceptions import AuthExpiredError, ValidationError
from ..device.model import RawPunch
from ..ledger.calculator.base import WorkTimeCalculator
from ..ledger.calculator.standard_calculator import StandardWorkTimeCalculator
from ..ledger.model import AttendanceRow, TimePair
from ..tracking.model import TimeEntry, TrackedUser
from .model import MergedReportRow, ReportData, SummaryRow

logger = logging.getLogger(__name__)


class ReportPunchSource(Protocol):
    def fetch_report_page(
        self, start_date: date, end_date: date, url: Optional[str] = None
    ) -> tuple[list[RawPunch], Optional[str]]:
        raise NotImplementedError

    def authenticate(self, username: Optional[str] = None, password: Optional[str] = None) -> str:
        raise NotImplementedError


class ReportEntrySource(Protocol):
    def list_users(self) -> list[TrackedUser]:
        raise NotImplementedError

    def list_entries(self, user_id: str, start: datetime, end: datetime) -> list[TimeEntry]:
        raise NotImplementedError

    def get_project_name(self, project_id: Optional[str]) -> Optional[str]:
        raise NotImplementedError


def _join_key(name: str, work_date: date) -> tuple[str, date]:
    return name.strip().lower(), work_date


def bucket_for(work_date: date, period: ReportPeriod, range_start: date, range_end: date) -> tuple[date, str]:
    """(bucket start, label) for a day; weeks run Monday-Sunday, clipped to the range."""
    if period == ReportPeriod.MONTHLY:
        return work_date.replace(day=1), work_date.strftime("%Y-%m")
    if period == ReportPeriod.WEEKLY:
        monday = work_date - timedelta(days=work_date.weekday())
        start = max(monday, range_start)
        end = min(monday + timedelta(days=6), range_end)
        return start, f"{start.isoformat()} - {end.isoformat()}"
    return work_date, work_date.isoformat()


class MergeReportService:
    """On-demand report joining terminal punches and tracked time for a date range."""

    def __init__(
        self,
        device: ReportPunchSource,
        tracking: ReportEntrySource,
        *,
        calculator: Optional[WorkTimeCalculator] = None,
        tz: Optional[tzinfo] = None,
        inter_user_delay: float = 0.0,
        sleep: Callable[[float], None] = time.sleep,
    ):
        self._device = device
        self._tracking = tracking
        self._calculator = calculator or StandardWorkTimeCalculator()
        self._tz = tz
        self._inter_user_delay = float(inter_user_delay)
        self._sleep = sleep

    def build_report(self, *, start: date, end: date, period: ReportPeriod = ReportPeriod.DAILY) -> ReportData:
        rows = self.build_merged_rows(start=start, end=end)
        summary = [] if period == ReportPeriod.DAILY else self.summarize(rows, period=period, start=start, end=end)
        return ReportData(rows=rows, summary=summary)

    def build_merged_rows(self, *, start: date, end: date) -> list[MergedReportRow]:
        if start > end:
            raise ValidationError("Start date must not be after end date")

        onsite = self._onsite_rows(self._collect_punches(start, end))
        remote = self._remote_rows(start, end)

        by_key: dict[tuple[str, date], list[MergedReportRow]] = defaultdict(list)
        for row in onsite:
            by_key[_join_key(row.name, row.work_date)].append(row)

        unmatched: list[MergedReportRow] = []
        for rrow in remote:
            target = next(
                (r for r in by_key.get(_join_key(rrow.name, rrow.work_date), []) if r.remote_minutes is None),
                None,
            )
            if target is None:
                unmatched.append(rrow)
                continue
            target.remote_check_in = rrow.remote_check_in
            target.remote_check_out = rrow.remote_check_out
            target.remote_minutes = rrow.remote_minutes
            target.projects = rrow.projects

        unmatched.sort(key=lambda r: (r.work_date, r.name.lower()))
        return onsite + unmatched

    def summarize(
        self, rows: list[MergedReportRow], *, period: ReportPeriod, start: date, end: date
    ) -> list[SummaryRow]:
        buckets: dict[tuple[date, str], SummaryRow] = {}
        for row in rows:
            bucket_start, label = bucket_for(row.work_date, period, start, end)
            key = (bucket_start, row.name.strip().lower())
            s = buckets.get(key)
            if not s:
                s = SummaryRow(period=label, period_start=bucket_start, name=row.name)
                buckets[key] = s
            if row.employee_code and not s.employee_code:
                s.employee_code = row.employee_code
            s.days += 1
            s.onsite_minutes += row.onsite_minutes or 0
            s.remote_minutes += row.remote_minutes or 0

        return sorted(buckets.values(), key=lambda s: (s.period_start, s.name.lower()))

    def _collect_punches(self, start: date, end: date) -> list[RawPunch]:
        punches: list[RawPunch] = []
        seen: set[str] = set()
        url: Optional[str] = None
        while True:
            page, url = self._fetch_page(start, end, url)
            punches.extend(page)
            if not url or url in seen:
                break
            seen.add(url)
        logger.info("Collected %d terminal punches for %s..%s", len(punches), start, end)
        return punches

    def _fetch_page(self, start: date, end: date, url: Optional[str]) -> tuple[list[RawPunch], Optional[str]]:
        for attempt in range(2):
            try:
                return self._device.fetch_report_page(start, end, url)
            except AuthExpiredError:
                if attempt:
                    raise
                logger.warning("Device token expired or invalid, re-authenticating")
                self._device.authenticate()
        return [], None

    def _onsite_rows(self, punches: list[RawPunch]) -> list[MergedReportRow]:
        groups: dict[tuple[str, date], list[tuple[datetime, RawPunch]]] = defaultdict(list)
        for punch in punches:
            try:
                ts = punch.timestamp
            except ValueError:
                logger.warning("Skipping report punch with unreadable time %r", punch.punch_time)
                continue
            groups[(punch.emp_code, ts.date())].append((ts, punch))

        rows: list[MergedReportRow] = []
        for (emp_code, work_date), items in groups.items():
            items.sort(key=lambda item: item[0])
            times = [format_time_of_day(ts) for ts, _ in items]

            day = AttendanceRow(name=items[0][1].full_name, user_id=emp_code, work_date=work_date)
            day.check_in = times[0]
            if len(times) > 1:
                day.check_out = times[-1]
            middle = times[1:-1]
            for i, pair in enumerate(day.breaks):
                if 2 * i < len(middle):
                    pair.start = middle[2 * i]
                if 2 * i + 1 < len(middle):
                    pair.end = middle[2 * i + 1]
            if len(middle) > 2 * BREAK_SLOTS:
                logger.warning("%s on %s has more punches than break slots", emp_code, work_date)

            rows.append(
                MergedReportRow(
                    name=day.name,
                    employee_code=emp_code,
                    work_date=work_date,
                    check_in=day.check_in,
                    check_out=day.check_out,
                    breaks=[TimePair(p.start, p.end) for p in day.breaks],
                    onsite_minutes=self._calculator.worked_minutes(day),
                )
            )

        rows.sort(key=lambda r: (r.work_date, r.name.lower()))
        return rows

    def _remote_rows(self, start: date, end: date) -> list[MergedReportRow]:
        range_start = datetime.combine(start, dtime.min)
        range_end = datetime.combine(end, dtime.max)

        rows: list[MergedReportRow] = []
        for i, user in enumerate(self._tracking.list_users()):
            if i and self._inter_user_delay > 0:
                self._sleep(self._inter_user_delay)

            days: dict[date, list[TimeEntry]] = defaultdict(list)
            for entry in self._tracking.list_entries(user.user_id, range_start, range_end):
                if entry.start is None:
                    continue
                days[to_local(entry.start, self._tz).date()].append(entry)

            for work_date, entries in sorted(days.items()):
                starts = [to_local(e.start, self._tz) for e in entries]
                ends = [to_local(e.end, self._tz) for e in entries if e.end is not None]
                projects = sorted(
                    {p for p in (e.project_name or self._tracking.get_project_name(e.project_id) for e in entries) if p}
                )
                rows.append(
                    MergedReportRow(
                        name=user.name,
                        work_date=work_date,
                        remote_check_in=min(starts),
                        remote_check_out=max(ends) if ends else None,
                        remote_minutes=sum(e.duration_seconds for e in entries) // 60,
                        projects=projects,
                    )
                )
        return rows
