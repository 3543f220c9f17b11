"""Answer repository queries by running git as a subprocess."""

from __future__ import annotations

import os
import subprocess
from datetime import datetime, timezone
from pathlib import Path
from typing import List, Optional, Sequence

from ..exceptions import OracleError
from ..logging_config import get_logger
from .base import VersionControlOracle
from .numstat import NumstatTotals, parse_numstat

logger = get_logger(__name__)

# stderr fragments git emits when HEAD is unborn (no commits yet)
_NO_COMMITS_SIGNATURES = (
    "does not have any commits yet",
    "ambiguous argument 'HEAD': unknown revision",
    "bad default revision 'HEAD'",
    "bad revision 'HEAD'",
)

_READ_CHUNK = 1024 * 1024


def _since_arg(cutoff: datetime) -> str:
    if cutoff.tzinfo is None:
        cutoff = cutoff.replace(tzinfo=timezone.utc)
    return "--since=" + cutoff.astimezone(timezone.utc).strftime("%Y-%m-%d %H:%M:%S +0000")


class GitOracle(VersionControlOracle):
    """Git-backed oracle. Every invocation is bounded by ``timeout`` seconds."""

    def __init__(self, timeout: float = 60.0, git: str = "git"):
        self.timeout = timeout
        self.git = git

    def commit_count_since(self, repo_path: Path, cutoff: datetime) -> int:
        out = self._run(repo_path, ["rev-list", "--count", _since_arg(cutoff), "HEAD"])
        if out is None:
            return 0
        return self._parse_int(out, ["rev-list", "--count"])

    def last_commit_timestamp(self, repo_path: Path) -> Optional[datetime]:
        out = self._run(repo_path, ["log", "-1", "--format=%ct", "HEAD"])
        if out is None or not out.strip():
            return None
        seconds = self._parse_int(out, ["log", "-1"])
        return datetime.fromtimestamp(seconds, tz=timezone.utc)

    def change_stats_since(self, repo_path: Path, cutoff: datetime) -> NumstatTotals:
        out = self._run(
            repo_path,
            ["log", _since_arg(cutoff), "--numstat", "--no-renames", "--format=", "HEAD"],
        )
        if out is None:
            return NumstatTotals(0, 0, 0)
        return parse_numstat(out.splitlines())

    def tracked_files(self, repo_path: Path) -> Sequence[str]:
        out = self._run(repo_path, ["ls-files", "-z"])
        if out is None:
            return []
        return [p for p in out.split("\0") if p]

    def line_count(self, path: Path) -> int:
        lines = 0
        last = b""
        try:
            with open(path, "rb") as f:
                while True:
                    chunk = f.read(_READ_CHUNK)
                    if not chunk:
                        break
                    lines += chunk.count(b"\n")
                    last = chunk[-1:]
        except OSError as e:
            raise OracleError(["read", str(path)], e.strerror or str(e))
        if last and last != b"\n":
            lines += 1
        return lines

    def _run(self, repo_path: Path, args: List[str]) -> Optional[str]:
        """Run a git command in ``repo_path``.

        Returns stdout, or None when the command failed only because HEAD has
        no commits.

        Raises:
            OracleError: On a missing binary, timeout or any other failure
        """
        cmd = [self.git, "-C", str(repo_path), *args]
        try:
            result = subprocess.run(
                cmd,
                capture_output=True,
                text=True,
                encoding="utf-8",
                errors="replace",
                timeout=self.timeout,
                env={**os.environ, "LC_ALL": "C", "GIT_TERMINAL_PROMPT": "0"},
            )
        except FileNotFoundError:
            raise OracleError(cmd, f"{self.git} executable not found")
        except subprocess.TimeoutExpired:
            raise OracleError(cmd, f"timed out after {self.timeout:g}s")

        if result.returncode != 0:
            stderr = result.stderr.strip()
            if any(sig in stderr for sig in _NO_COMMITS_SIGNATURES):
                logger.debug("%s has no commits yet", repo_path)
                return None
            raise OracleError(
                cmd, stderr or f"exited with status {result.returncode}", result.returncode
            )
        return result.stdout

    @staticmethod
    def _parse_int(out: str, command: List[str]) -> int:
        try:
            return int(out.strip())
        except ValueError:
            raise OracleError(command, f"unexpected output: {out.strip()!r}")
