from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Optional

from ..common.datetime_utils import format_time_of_day
from ..core.constants import BREAK_SLOTS, REMOTE_SLOTS
from ..core.enums import EventKind, EventSource


@dataclass(frozen=True)
class AttendanceEvent:
    """A punch or timer transition after translation from its source payload.

    On-site events carry the device employee code; remote events only know
    the tracked user's display name, so `employee_code` stays empty.
    """

    employee_name: str
    timestamp: datetime
    kind: EventKind
    source: EventSource
    employee_code: str = ""
    project: Optional[str] = None
    duration_seconds: int = 0

    @property
    def employee_key(self) -> str:
        return self.employee_code or self.employee_name

    @property
    def work_date(self) -> date:
        return self.timestamp.date()

    @property
    def time_of_day(self) -> str:
        return format_time_of_day(self.timestamp)


@dataclass
class TimePair:
    start: str = ""
    end: str = ""

    @property
    def complete(self) -> bool:
        return bool(self.start and self.end)


def _blank_pairs(count: int) -> list[TimePair]:
    return [TimePair() for _ in range(count)]


@dataclass
class AttendanceRow:
    """Domain entity: one ledger row per employee per day."""

    name: str
    user_id: str
    work_date: date
    check_in: str = ""
    check_out: str = ""
    breaks: list[TimePair] = field(default_factory=lambda: _blank_pairs(BREAK_SLOTS))
    remotes: list[TimePair] = field(default_factory=lambda: _blank_pairs(REMOTE_SLOTS))
    total_work_time: str = ""
    remote_work_time: str = ""
    project: str = ""
    source: str = ""

    @classmethod
    def blank_for(cls, event: AttendanceEvent) -> "AttendanceRow":
        return cls(name=event.employee_name, user_id=event.employee_code, work_date=event.work_date)

    @property
    def employee_key(self) -> str:
        return self.user_id or self.name

    def matches(self, event: AttendanceEvent) -> bool:
        # Device rows are keyed by employee code, time-tracking rows by name only.
        if self.work_date != event.work_date:
            return False
        if event.employee_code:
            return self.user_id == event.employee_code
        return not self.user_id and self.name == event.employee_name
