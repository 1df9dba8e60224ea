from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional


@dataclass
class OnSitePollResult:
    window_start: Optional[datetime] = None
    window_end: Optional[datetime] = None
    fetched: int = 0
    recorded: int = 0
    duplicates: int = 0
    skipped: bool = False

    def as_dict(self) -> dict:
        return {
            "window_start": self.window_start.isoformat() if self.window_start else None,
            "window_end": self.window_end.isoformat() if self.window_end else None,
            "fetched": self.fetched,
            "recorded": self.recorded,
            "duplicates": self.duplicates,
            "skipped": self.skipped,
        }


@dataclass
class RemotePollResult:
    users: int = 0
    sign_ins: int = 0
    sign_offs: int = 0
    skipped: bool = False

    def as_dict(self) -> dict:
        return {
            "users": self.users,
            "sign_ins": self.sign_ins,
            "sign_offs": self.sign_offs,
            "skipped": self.skipped,
        }
