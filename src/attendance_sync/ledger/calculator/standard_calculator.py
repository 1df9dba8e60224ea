from __future__ import annotations

from typing import Optional

from ...common.datetime_utils import parse_time_of_day
from ..model import AttendanceRow, TimePair
from .base import WorkTimeCalculator


def break_minutes(pairs: list[TimePair]) -> int:
    """Sum of complete break pairs; half-recorded or inverted pairs count as zero."""
    total = 0
    for pair in pairs:
        if not pair.complete:
            continue
        start = parse_time_of_day(pair.start)
        end = parse_time_of_day(pair.end)
        if start and end and end > start:
            total += end - start
    return total


class StandardWorkTimeCalculator(WorkTimeCalculator):
    """Standard rule: (check-out - check-in) - complete breaks, None when negative or unknown."""

    def worked_minutes(self, row: AttendanceRow) -> Optional[int]:
        if not row.check_in or not row.check_out:
            return None

        check_in = parse_time_of_day(row.check_in)
        check_out = parse_time_of_day(row.check_out)
        if not check_in or not check_out:
            return None

        minutes = (check_out - check_in) - break_minutes(row.breaks)
        if minutes < 0:
            return None
        return minutes
