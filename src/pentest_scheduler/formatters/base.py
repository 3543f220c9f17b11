"""Base formatter interface for Pentest Scheduler output rendering.

Formatters only present an AnalysisRun; scores, tiers and percentages are
taken as computed.
"""

import sys
from abc import ABC, abstractmethod
from typing import Optional

from rich.console import Console

from ..models import AnalysisRun


class BaseFormatter(ABC):
    """Abstract base class for output formatters."""

    @abstractmethod
    def format(self, run: AnalysisRun) -> str:
        """Return formatted string representation of the run."""

    def render(self, run: AnalysisRun, console: Optional[Console] = None) -> None:
        """Write the run to stdout."""
        sys.stdout.write(self.format(run))
