from __future__ import annotations

import csv
import io

from .model import Report

NO_DATA = "No data available"


def report_filename(report: Report) -> str:
    return f"attendance_{report.type.value}_{report.generated_at.strftime('%Y%m%d_%H%M%S')}.csv"


def report_to_csv(report: Report) -> str:
    """Rows of any report type as CSV text; columns follow the first row."""
    rows = report.rows
    out = io.StringIO()
    if not rows:
        out.write(NO_DATA + "\n")
        return out.getvalue()

    writer = csv.DictWriter(out, fieldnames=list(rows[0].keys()), extrasaction="ignore")
    writer.writeheader()
    for row in rows:
        writer.writerow({k: ("" if v is None else v) for k, v in row.items()})
    return out.getvalue()
