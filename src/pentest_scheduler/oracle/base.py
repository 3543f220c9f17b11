"""Query interface the analysis core needs from a version-control backend."""

from abc import ABC, abstractmethod
from datetime import datetime
from pathlib import Path
from typing import Optional, Sequence

from .numstat import NumstatTotals


class VersionControlOracle(ABC):
    """Answers history and size questions about one repository at a time.

    Implementations raise OracleError for tool failures. A repository whose
    HEAD has no commits is not a failure: it reports zero commits, no last
    commit and no changes.
    """

    @abstractmethod
    def commit_count_since(self, repo_path: Path, cutoff: datetime) -> int:
        """Number of commits reachable from HEAD committed at or after ``cutoff``."""

    @abstractmethod
    def last_commit_timestamp(self, repo_path: Path) -> Optional[datetime]:
        """Commit time of HEAD, or None if there are no commits."""

    @abstractmethod
    def change_stats_since(self, repo_path: Path, cutoff: datetime) -> NumstatTotals:
        """Distinct files touched and lines added/deleted by commits since ``cutoff``."""

    @abstractmethod
    def tracked_files(self, repo_path: Path) -> Sequence[str]:
        """Paths of currently tracked files, relative to ``repo_path``."""

    @abstractmethod
    def line_count(self, path: Path) -> int:
        """Number of lines in the file at ``path``."""
