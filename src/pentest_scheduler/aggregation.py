"""Filter and order per-repository records into an AnalysisRun."""

from __future__ import annotations

from datetime import datetime, timedelta
from pathlib import Path
from typing import List, Sequence, Tuple

from .config import AnalysisConfig
from .logging_config import get_logger
from .models import AnalysisRun, RepositoryRecord

logger = get_logger(__name__)


def _sort_key(record: RepositoryRecord) -> Tuple[float, float]:
    return (-record.risk_score, -record.change_percentage)


class ResultAggregator:
    """Apply the inclusion filters and the risk ordering."""

    def __init__(self, min_change_threshold: float = 0.0, include_inactive: bool = False):
        self.min_change_threshold = min_change_threshold
        self.include_inactive = include_inactive

    @classmethod
    def from_config(cls, config: AnalysisConfig) -> "ResultAggregator":
        return cls(
            min_change_threshold=config.min_change_threshold,
            include_inactive=config.include_inactive,
        )

    def keep(self, record: RepositoryRecord) -> bool:
        """Whether a record belongs in the report. Error records always do."""
        if record.is_error:
            return True
        if record.commit_count == 0 and not self.include_inactive:
            return False
        if record.change_percentage < self.min_change_threshold:
            return False
        return True

    def aggregate(
        self,
        records: Sequence[RepositoryRecord],
        *,
        generated_at: datetime,
        period: timedelta,
        root_dir: Path,
        total_discovered: int,
        cancelled: bool = False,
    ) -> AnalysisRun:
        """Build the run from records given in discovery order.

        Scored records come first, by risk score then change percentage,
        both descending. sorted() is stable, so ties keep discovery order.
        Error records follow, in discovery order.
        """
        scored: List[RepositoryRecord] = []
        failed: List[RepositoryRecord] = []
        for record in records:
            if not self.keep(record):
                logger.debug("Filtered out %s", record.name)
                continue
            (failed if record.is_error else scored).append(record)

        ordered = sorted(scored, key=_sort_key) + failed

        return AnalysisRun(
            generated_at=generated_at,
            period=period,
            root_dir=root_dir,
            total_discovered=total_discovered,
            active_count=len(scored),
            records=tuple(ordered),
            analyzed_count=len(records),
            cancelled=cancelled,
        )
