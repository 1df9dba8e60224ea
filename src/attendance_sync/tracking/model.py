from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from ..common.datetime_utils import parse_iso_duration, parse_iso_instant


@dataclass(frozen=True)
class TrackedUser:
    user_id: str
    name: str

    @classmethod
    def from_api(cls, data: dict) -> "TrackedUser":
        return cls(user_id=str(data.get("id") or ""), name=str(data.get("name") or "").strip())


@dataclass(frozen=True)
class TimeEntry:
    """One timer interval; `end` is None while the timer is still running."""

    entry_id: str
    project_id: Optional[str]
    start: Optional[datetime]
    end: Optional[datetime]
    duration_seconds: int = 0
    project_name: Optional[str] = None

    @classmethod
    def from_api(cls, data: dict) -> "TimeEntry":
        interval = data.get("timeInterval") or {}
        start = parse_iso_instant(interval.get("start"))
        end = parse_iso_instant(interval.get("end"))
        duration = parse_iso_duration(interval.get("duration"))
        if not duration and start and end and end > start:
            duration = int((end - start).total_seconds())

        project = data.get("project")
        project_name = project.get("name") if isinstance(project, dict) else None
        return cls(
            entry_id=str(data.get("id") or ""),
            project_id=data.get("projectId") or None,
            start=start,
            end=end,
            duration_seconds=duration,
            project_name=project_name,
        )
