"""Discovery exceptions: failures while walking the repositories directory."""

from pathlib import Path

from .base import PentestSchedulerError


class DiscoveryError(PentestSchedulerError):
    """Raised when the directory walk fails.

    Fatal for the whole run: a partial repository list would understate
    what needs testing.
    """

    def __init__(self, path: Path, reason: str):
        super().__init__(
            f"Repository discovery failed at {path}",
            details={"path": str(path), "reason": reason},
        )
        self.path = path
        self.reason = reason
