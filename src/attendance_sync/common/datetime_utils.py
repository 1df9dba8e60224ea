from __future__ import annotations

import re
from datetime import date, datetime, timezone, tzinfo
from typing import Optional
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from ..core.constants import DEVICE_TIMESTAMP_FORMAT, LEDGER_DATE_FORMAT, TIME_OF_DAY_FORMAT

_CLOCK_RE = re.compile(r"^(\d{1,2}):(\d{1,2})(?:\s*([AaPp])\.?\s*[Mm]\.?)?$")
_ISO_DURATION_RE = re.compile(
    r"^P(?:(?P<days>\d+)D)?(?:T(?:(?P<hours>\d+)H)?(?:(?P<minutes>\d+)M)?(?:(?P<seconds>\d+(?:\.\d+)?)S)?)?$"
)


def parse_iso_date(value: str) -> date:
    """Parse YYYY-MM-DD string into date."""
    return datetime.strptime(value, "%Y-%m-%d").date()


def now_local() -> datetime:
    """Current local time.

    Note: Wrapped so tests can patch/mocked easier.
    """
    return datetime.now()


def parse_time_of_day(text: Optional[str]) -> int:
    """Parse "H:MM" or "H:MM AM/PM" into minutes since midnight.

    Returns 0 for empty or malformed input. Callers treat 0 as "absent",
    a real midnight punch is never recorded through this path.
    """
    if not text or not isinstance(text, str):
        return 0
    match = _CLOCK_RE.match(" ".join(text.split()))
    if not match:
        return 0

    hours = int(match.group(1))
    minutes = int(match.group(2))
    meridiem = (match.group(3) or "").lower()
    if minutes > 59:
        return 0
    if meridiem:
        if hours < 1 or hours > 12:
            return 0
        if meridiem == "p" and hours < 12:
            hours += 12
        elif meridiem == "a" and hours == 12:
            hours = 0
    elif hours > 23:
        return 0
    return hours * 60 + minutes


def format_time_of_day(value: datetime) -> str:
    return value.strftime(TIME_OF_DAY_FORMAT)


def format_ledger_date(value: date) -> str:
    return value.strftime(LEDGER_DATE_FORMAT)


def parse_ledger_date(value: str) -> date:
    return datetime.strptime(value.strip(), LEDGER_DATE_FORMAT).date()


def format_minutes(minutes: int) -> str:
    """Zero-padded HH:MM for a non-negative minute count."""
    return f"{minutes // 60:02d}:{minutes % 60:02d}"


def parse_hhmm(value: Optional[str]) -> int:
    """Inverse of format_minutes; anything unparsable counts as 0."""
    if not value:
        return 0
    parts = str(value).strip().split(":")
    if len(parts) != 2 or not parts[0].isdigit() or not parts[1].isdigit():
        return 0
    return int(parts[0]) * 60 + int(parts[1])


def parse_device_timestamp(value: str) -> datetime:
    return datetime.strptime(value.strip(), DEVICE_TIMESTAMP_FORMAT)


def format_device_timestamp(value: datetime) -> str:
    return value.strftime(DEVICE_TIMESTAMP_FORMAT)


def parse_iso_instant(value: Optional[str]) -> Optional[datetime]:
    """Parse an ISO-8601 instant such as "2024-01-01T09:00:00Z" (aware, UTC when suffixed Z)."""
    if not value:
        return None
    text = value.strip()
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    try:
        parsed = datetime.fromisoformat(text)
    except ValueError:
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def resolve_timezone(name: Optional[str]) -> Optional[tzinfo]:
    if not name:
        return None
    try:
        return ZoneInfo(name)
    except ZoneInfoNotFoundError:
        return None


def to_local(value: datetime, tz: Optional[tzinfo] = None) -> datetime:
    """Convert an aware instant to naive local wall-clock time."""
    if value.tzinfo is None:
        return value
    return value.astimezone(tz).replace(tzinfo=None)


def parse_iso_duration(value: Optional[str]) -> int:
    """ISO-8601 duration ("PT1H5M30S") to whole seconds; 0 when absent or malformed."""
    if not value:
        return 0
    match = _ISO_DURATION_RE.match(value.strip())
    if not match:
        return 0
    parts = {k: float(v) for k, v in match.groupdict().items() if v}
    return int(
        parts.get("days", 0) * 86400
        + parts.get("hours", 0) * 3600
        + parts.get("minutes", 0) * 60
        + parts.get("seconds", 0)
    )


def format_duration_text(total_seconds: int) -> str:
    """Render seconds as "1h 5m", "45m 10s" or "0s"."""
    total_seconds = max(int(total_seconds), 0)
    hours, rest = divmod(total_seconds, 3600)
    minutes, seconds = divmod(rest, 60)

    parts: list[str] = []
    if hours:
        parts.append(f"{hours}h")
    if minutes:
        parts.append(f"{minutes}m")
    if seconds or not parts:
        parts.append(f"{seconds}s")
    return " ".join(parts)
