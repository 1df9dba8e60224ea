from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Optional

from ..common.datetime_utils import format_minutes, format_time_of_day
from ..ledger.model import TimePair


def _minutes(value: Optional[int]) -> str:
    return format_minutes(value) if value is not None else ""


def _clock(value: Optional[datetime]) -> str:
    return format_time_of_day(value) if value is not None else ""


@dataclass
class MergedReportRow:
    """Read-model: one employee-day with on-site and remote columns side by side."""

    name: str
    work_date: date
    employee_code: str = ""
    check_in: str = ""
    check_out: str = ""
    breaks: list[TimePair] = field(default_factory=list)
    onsite_minutes: Optional[int] = None
    remote_check_in: Optional[datetime] = None
    remote_check_out: Optional[datetime] = None
    remote_minutes: Optional[int] = None
    projects: list[str] = field(default_factory=list)

    @property
    def total_minutes(self) -> int:
        return (self.onsite_minutes or 0) + (self.remote_minutes or 0)

    def as_dict(self) -> dict:
        data = {
            "name": self.name,
            "employee_code": self.employee_code,
            "work_date": self.work_date.isoformat(),
            "check_in": self.check_in,
            "check_out": self.check_out,
        }
        for i, pair in enumerate(self.breaks, start=1):
            data[f"break{i}_start"] = pair.start
            data[f"break{i}_end"] = pair.end
        data.update(
            {
                "onsite_work_time": _minutes(self.onsite_minutes),
                "remote_check_in": _clock(self.remote_check_in),
                "remote_check_out": _clock(self.remote_check_out),
                "remote_work_time": _minutes(self.remote_minutes),
                "total_work_time": format_minutes(self.total_minutes),
                "projects": ", ".join(self.projects),
            }
        )
        return data


@dataclass
class SummaryRow:
    period: str
    period_start: date
    name: str
    employee_code: str = ""
    days: int = 0
    onsite_minutes: int = 0
    remote_minutes: int = 0

    @property
    def total_minutes(self) -> int:
        return self.onsite_minutes + self.remote_minutes

    def as_dict(self) -> dict:
        return {
            "period": self.period,
            "name": self.name,
            "employee_code": self.employee_code,
            "days": self.days,
            "onsite_work_time": format_minutes(self.onsite_minutes),
            "remote_work_time": format_minutes(self.remote_minutes),
            "total_work_time": format_minutes(self.total_minutes),
        }


@dataclass(frozen=True)
class ReportData:
    rows: list[MergedReportRow]
    summary: list[SummaryRow]
