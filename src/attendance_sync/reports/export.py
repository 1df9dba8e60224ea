from __future__ import annotations

import io

import pandas as pd

from .model import ReportData


def report_to_workbook(report: ReportData) -> io.BytesIO:
    """Render the merged report as an in-memory .xlsx (Daily + Summary sheets)."""
    daily = pd.DataFrame([r.as_dict() for r in report.rows])
    summary = pd.DataFrame([s.as_dict() for s in report.summary])

    output = io.BytesIO()
    with pd.ExcelWriter(output, engine="openpyxl") as writer:
        daily.to_excel(writer, index=False, sheet_name="Daily")
        if not summary.empty:
            summary.to_excel(writer, index=False, sheet_name="Summary")

    output.seek(0)
    return output
