"""JSON formatter for Pentest Scheduler."""

import json

from ..models import AnalysisRun
from .base import BaseFormatter


class JsonFormatter(BaseFormatter):
    """Render the run as an indented JSON document."""

    def format(self, run: AnalysisRun) -> str:
        return json.dumps(run.to_dict(), indent=2) + "\n"
