from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from ..common.datetime_utils import parse_device_timestamp
from ..core.enums import EventKind, EventSource
from ..ledger.model import AttendanceEvent

_STATUS_KINDS = {
    "check in": EventKind.CHECK_IN,
    "check out": EventKind.CHECK_OUT,
    "break out": EventKind.BREAK_START,
    "break start": EventKind.BREAK_START,
    "break in": EventKind.BREAK_END,
    "break end": EventKind.BREAK_END,
}


@dataclass(frozen=True)
class RawPunch:
    """One transaction as returned by the terminal API (fields kept as strings)."""

    emp_code: str
    first_name: str
    last_name: str
    punch_time: str
    status: str

    @classmethod
    def from_api(cls, data: dict) -> "RawPunch":
        punch_time = str(data.get("punch_time") or "").strip()
        att_date = str(data.get("att_date") or "").strip()
        # report endpoints split date and clock time
        if att_date and len(punch_time) <= 8:
            punch_time = f"{att_date} {punch_time}"
        return cls(
            emp_code=str(data.get("emp_code") or "").strip(),
            first_name=str(data.get("first_name") or "").strip(),
            last_name=str(data.get("last_name") or "").strip(),
            punch_time=punch_time,
            status=str(data.get("punch_state_display") or "").strip(),
        )

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}" if self.last_name else self.first_name

    @property
    def display_label(self) -> str:
        return f"{self.full_name} ({self.emp_code})"

    @property
    def timestamp(self) -> datetime:
        return parse_device_timestamp(self.punch_time)


def kind_for_status(status: str) -> Optional[EventKind]:
    return _STATUS_KINDS.get(" ".join(status.lower().split()))


def to_event(punch: RawPunch) -> Optional[AttendanceEvent]:
    """Translate a raw punch into a ledger event; None for labels the ledger has no slot for."""
    kind = kind_for_status(punch.status)
    if kind is None:
        return None
    return AttendanceEvent(
        employee_name=punch.full_name,
        employee_code=punch.emp_code,
        timestamp=punch.timestamp,
        kind=kind,
        source=EventSource.ON_SITE,
    )
