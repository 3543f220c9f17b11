"""Current size of a repository's tracked content, in lines."""

from pathlib import Path

from .exceptions import OracleError
from .logging_config import get_logger
from .oracle import VersionControlOracle

logger = get_logger(__name__)

# Floor for the change-percentage denominator
MIN_SIZE = 1


class SizeEstimator:
    """Sum line counts over the files git currently tracks."""

    def __init__(self, oracle: VersionControlOracle):
        self.oracle = oracle

    def estimate(self, repo_path: Path) -> int:
        """Total tracked lines, never less than MIN_SIZE.

        Files that cannot be read (deleted in the working tree, submodule
        directories) are skipped. If the file list itself is unavailable the
        floor is returned.
        """
        try:
            files = self.oracle.tracked_files(repo_path)
        except OracleError as e:
            logger.warning("%s: cannot list tracked files: %s", repo_path.name, e.reason)
            return MIN_SIZE

        total = 0
        for rel_path in files:
            try:
                total += self.oracle.line_count(repo_path / rel_path)
            except OracleError as e:
                logger.debug("%s: skipping %s: %s", repo_path.name, rel_path, e.reason)

        return max(total, MIN_SIZE)
