"""Analysis-related exceptions: per-repository failures and oracle output."""

from pathlib import Path
from typing import Dict, Optional, Sequence

from .base import PentestSchedulerError


class AnalysisError(PentestSchedulerError):
    """Base class for analysis-related errors."""
    pass


class RepositoryAnalysisError(AnalysisError):
    """Raised when a single repository cannot be analyzed.

    Recorded on that repository's record; other repositories carry on.
    """

    def __init__(self, repo_path: Path, reason: str):
        super().__init__(
            f"Cannot analyze repository: {repo_path}",
            details={"repository": str(repo_path), "reason": reason},
        )
        self.repo_path = repo_path
        self.reason = reason


class OracleError(AnalysisError):
    """Raised when the version-control tool fails to answer a query."""

    def __init__(self, command: Sequence[str], reason: str, returncode: Optional[int] = None):
        details: Dict[str, str] = {"command": " ".join(command)}
        if returncode is not None:
            details["returncode"] = str(returncode)

        super().__init__(reason, details=details)
        self.command = list(command)
        self.reason = reason
        self.returncode = returncode


class MalformedMetricError(AnalysisError):
    """Raised when one line of oracle output does not parse as a number."""

    def __init__(self, line: str, reason: str):
        super().__init__(
            f"Malformed metric line: {line!r}",
            details={"reason": reason},
        )
        self.line = line
        self.reason = reason
