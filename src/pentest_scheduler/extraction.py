"""Window-scoped commit and line metrics for one repository."""

from __future__ import annotations

from datetime import datetime
from pathlib import Path

from .discovery import GIT_MARKER
from .exceptions import OracleError, RepositoryAnalysisError
from .logging_config import get_logger
from .models import ChangeStats
from .oracle import VersionControlOracle

logger = get_logger(__name__)


class ChangeStatsExtractor:
    """Ask the oracle what happened in a repository since ``cutoff``."""

    def __init__(self, oracle: VersionControlOracle, marker: str = GIT_MARKER):
        self.oracle = oracle
        self.marker = marker

    def extract(self, repo_path: Path, cutoff: datetime) -> ChangeStats:
        """Collect commit count, last commit time and line churn.

        No commits in the window is a normal result: every window metric is
        zero, while ``last_commit_time`` still reports HEAD's commit time.

        Raises:
            RepositoryAnalysisError: If the repository is gone or git fails
        """
        if not (repo_path / self.marker).is_dir():
            raise RepositoryAnalysisError(repo_path, "Not a valid git repository")

        try:
            commit_count = self.oracle.commit_count_since(repo_path, cutoff)
            last_commit_time = self.oracle.last_commit_timestamp(repo_path)
        except OracleError as e:
            raise RepositoryAnalysisError(repo_path, f"Failed to get commit info: {e.reason}") from e

        if commit_count < 0:
            raise RepositoryAnalysisError(
                repo_path, f"Failed to get commit info: negative commit count {commit_count}"
            )

        if commit_count == 0:
            logger.debug("%s: no commits since %s", repo_path.name, cutoff.isoformat())
            return ChangeStats(commit_count=0, last_commit_time=last_commit_time)

        try:
            totals = self.oracle.change_stats_since(repo_path, cutoff)
        except OracleError as e:
            raise RepositoryAnalysisError(repo_path, f"Failed to get change stats: {e.reason}") from e

        return ChangeStats(
            commit_count=commit_count,
            last_commit_time=last_commit_time,
            files_changed=totals.files_changed,
            lines_added=totals.lines_added,
            lines_deleted=totals.lines_deleted,
        )
