from __future__ import annotations

from enum import Enum


class EventKind(str, Enum):
    """Normalised attendance event kind, independent of the source."""

    CHECK_IN = "CHECK_IN"
    CHECK_OUT = "CHECK_OUT"
    BREAK_START = "BREAK_START"
    BREAK_END = "BREAK_END"
    REMOTE_START = "REMOTE_START"
    REMOTE_END = "REMOTE_END"


class EventSource(str, Enum):
    """Which side of the ledger row an event fills."""

    ON_SITE = "Zkteco"
    REMOTE = "Clockify"


class ReportPeriod(str, Enum):
    DAILY = "daily"
    WEEKLY = "weekly"
    MONTHLY = "monthly"
