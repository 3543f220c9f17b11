"""CSV formatter for Pentest Scheduler."""

import csv
import io

from ..models import AnalysisRun
from .base import BaseFormatter

HEADER = [
    "Repository",
    "Priority",
    "Risk Score",
    "Change Percentage",
    "Commit Count",
    "Files Changed",
    "Lines Added",
    "Lines Deleted",
    "Last Commit Date",
    "Path",
    "Error",
]


class CsvFormatter(BaseFormatter):
    """One row per repository; error rows leave the metric columns empty."""

    def format(self, run: AnalysisRun) -> str:
        output = io.StringIO()
        writer = csv.writer(output)
        writer.writerow(HEADER)
        for r in run.records:
            if r.is_error:
                writer.writerow([r.name, "ERROR", "", "", "", "", "", "", "", str(r.path), r.error])
                continue
            last_commit = (
                r.last_commit_time.strftime("%Y-%m-%d %H:%M:%S") if r.last_commit_time else ""
            )
            writer.writerow([
                r.name, r.priority.value,
                f"{r.risk_score:.2f}", f"{r.change_percentage:.2f}",
                r.commit_count, r.files_changed, r.lines_added, r.lines_deleted,
                last_commit, str(r.path), "",
            ])
        return output.getvalue()
