from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Optional

from ...common.datetime_utils import format_minutes
from ..model import AttendanceRow


class WorkTimeCalculator(ABC):
    """Calculator interface (Strategy Pattern for derived durations)."""

    @abstractmethod
    def worked_minutes(self, row: AttendanceRow) -> Optional[int]:
        raise NotImplementedError

    def compute_work_time(self, row: AttendanceRow) -> Optional[str]:
        minutes = self.worked_minutes(row)
        if minutes is None:
            return None
        return format_minutes(minutes)
