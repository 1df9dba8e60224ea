from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Sequence

import pandas as pd

from ..common.datetime_utils import format_ledger_date, parse_ledger_date
from ..core.constants import BREAK_SLOTS, DEFAULT_SHEET_NAME, REMOTE_SLOTS
from ..core.exceptions import StorageError
from .model import AttendanceRow, TimePair
from .repository import LedgerRepository

logger = logging.getLogger(__name__)


def _pair_headers(prefix: str, count: int) -> list[str]:
    headers: list[str] = []
    for i in range(1, count + 1):
        headers += [f"{prefix}{i}_Start", f"{prefix}{i}_End"]
    return headers


LEDGER_HEADERS = (
    ["Name", "UserID", "Date", "Check_In", "Check_Out"]
    + _pair_headers("Break", BREAK_SLOTS)
    + _pair_headers("Remote", REMOTE_SLOTS)
    + ["Total_Work_Time", "Remote_Work_Time", "Project", "Source"]
)


def row_to_record(row: AttendanceRow) -> dict[str, str]:
    record = {
        "Name": row.name,
        "UserID": row.user_id,
        "Date": format_ledger_date(row.work_date),
        "Check_In": row.check_in,
        "Check_Out": row.check_out,
        "Total_Work_Time": row.total_work_time,
        "Remote_Work_Time": row.remote_work_time,
        "Project": row.project,
        "Source": row.source,
    }
    for i, pair in enumerate(row.breaks, start=1):
        record[f"Break{i}_Start"] = pair.start
        record[f"Break{i}_End"] = pair.end
    for i, pair in enumerate(row.remotes, start=1):
        record[f"Remote{i}_Start"] = pair.start
        record[f"Remote{i}_End"] = pair.end
    return record


def record_to_row(record: dict) -> AttendanceRow:
    def cell(name: str) -> str:
        return str(record.get(name, "") or "").strip()

    return AttendanceRow(
        name=cell("Name"),
        user_id=cell("UserID"),
        work_date=parse_ledger_date(cell("Date")),
        check_in=cell("Check_In"),
        check_out=cell("Check_Out"),
        breaks=[TimePair(cell(f"Break{i}_Start"), cell(f"Break{i}_End")) for i in range(1, BREAK_SLOTS + 1)],
        remotes=[TimePair(cell(f"Remote{i}_Start"), cell(f"Remote{i}_End")) for i in range(1, REMOTE_SLOTS + 1)],
        total_work_time=cell("Total_Work_Time"),
        remote_work_time=cell("Remote_Work_Time"),
        project=cell("Project"),
        source=cell("Source"),
    )


class ExcelLedgerRepository(LedgerRepository):
    """Ledger persisted as one sheet of an .xlsx workbook (pandas + openpyxl).

    The whole sheet is read and rewritten on every save; other sheets in the
    workbook are carried over untouched.
    """

    def __init__(self, path: Path, sheet_name: str = DEFAULT_SHEET_NAME):
        self._path = Path(path)
        self._sheet_name = sheet_name

    def _read_workbook(self) -> dict[str, pd.DataFrame]:
        if not self._path.exists():
            return {}
        try:
            return pd.read_excel(self._path, sheet_name=None, dtype=str, engine="openpyxl")
        except Exception as exc:
            raise StorageError(f"Cannot read ledger workbook {self._path}: {exc}") from exc

    def load_rows(self) -> list[AttendanceRow]:
        sheets = self._read_workbook()
        df = sheets.get(self._sheet_name)
        if df is None or df.empty:
            return []

        rows: list[AttendanceRow] = []
        for record in df.fillna("").to_dict(orient="records"):
            try:
                rows.append(record_to_row(record))
            except ValueError as exc:
                # Dropping the row here would erase it on the next save.
                raise StorageError(f"Unreadable ledger date {record.get('Date')!r} in {self._path}") from exc
        return rows

    def save_rows(self, rows: Sequence[AttendanceRow]) -> None:
        sheets = self._read_workbook()
        sheets[self._sheet_name] = pd.DataFrame([row_to_record(r) for r in rows], columns=LEDGER_HEADERS)

        tmp_path = self._path.with_name(f".{self._path.stem}.tmp{self._path.suffix}")
        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            with pd.ExcelWriter(tmp_path, engine="openpyxl") as writer:
                for name, df in sheets.items():
                    df.to_excel(writer, sheet_name=name, index=False)
            os.replace(tmp_path, self._path)
            logger.debug("Ledger saved: %d rows -> %s", len(rows), self._path)
        except (OSError, ValueError) as exc:
            # openpyxl rejects control characters with a ValueError subclass
            raise StorageError(f"Cannot write ledger workbook {self._path}: {exc}") from exc
