from __future__ import annotations

from typing import Protocol, Sequence

from .model import AttendanceRow


class LedgerRepository(Protocol):
    def load_rows(self) -> list[AttendanceRow]:
        raise NotImplementedError

    def save_rows(self, rows: Sequence[AttendanceRow]) -> None:
        raise NotImplementedError
