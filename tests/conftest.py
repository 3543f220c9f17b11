"""Shared test fixtures for Pentest Scheduler tests."""

import os
import shutil
import subprocess
import time
from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import Dict, List, Optional, Sequence

import pytest

from pentest_scheduler.exceptions import OracleError
from pentest_scheduler.oracle import NumstatTotals, VersionControlOracle

NOW = datetime(2024, 6, 1, 12, 0, 0, tzinfo=timezone.utc)

requires_git = pytest.mark.skipif(shutil.which("git") is None, reason="git not installed")


class FakeRepo:
    """Canned oracle answers for one repository."""

    def __init__(
        self,
        commits: int = 0,
        last_commit: Optional[datetime] = None,
        files: int = 0,
        added: int = 0,
        deleted: int = 0,
        lines: Optional[Dict[str, int]] = None,
        fail_on: Optional[str] = None,
        delay: float = 0.0,
    ):
        self.commits = commits
        self.last_commit = last_commit
        self.totals = NumstatTotals(files, added, deleted)
        self.lines = lines if lines is not None else {"README.md": 100}
        self.fail_on = fail_on
        self.delay = delay


class FakeOracle(VersionControlOracle):
    """In-memory oracle keyed by repository name."""

    def __init__(self, repos: Dict[str, FakeRepo]):
        self.repos = repos
        self.calls: List[str] = []

    def _repo(self, repo_path: Path, query: str) -> FakeRepo:
        self.calls.append(f"{repo_path.name}:{query}")
        repo = self.repos[repo_path.name]
        if repo.delay:
            time.sleep(repo.delay)
        if repo.fail_on == query:
            raise OracleError(["git", query], f"fatal: {query} exploded", 128)
        return repo

    def commit_count_since(self, repo_path: Path, cutoff: datetime) -> int:
        return self._repo(repo_path, "commit_count").commits

    def last_commit_timestamp(self, repo_path: Path) -> Optional[datetime]:
        return self._repo(repo_path, "last_commit").last_commit

    def change_stats_since(self, repo_path: Path, cutoff: datetime) -> NumstatTotals:
        return self._repo(repo_path, "change_stats").totals

    def tracked_files(self, repo_path: Path) -> Sequence[str]:
        return list(self._repo(repo_path, "tracked_files").lines)

    def line_count(self, path: Path) -> int:
        repo = self.repos[path.parent.name]
        if repo.fail_on == "line_count":
            raise OracleError(["read", str(path)], "No such file or directory")
        return repo.lines[path.name]


def make_repo_dirs(root: Path, *names: str) -> List[Path]:
    """Create directories that look like repositories (``name/.git``)."""
    paths = []
    for name in names:
        repo = root / name
        (repo / ".git").mkdir(parents=True)
        paths.append(repo)
    return paths


@pytest.fixture
def now():
    return NOW


@pytest.fixture
def days_ago():
    def _days_ago(days: float) -> datetime:
        return NOW - timedelta(days=days)

    return _days_ago


def git(repo: Path, *args: str, date: Optional[datetime] = None) -> str:
    """Run git in ``repo`` with a deterministic identity and optional commit date."""
    env = {
        **os.environ,
        "GIT_AUTHOR_NAME": "Test",
        "GIT_AUTHOR_EMAIL": "test@test.com",
        "GIT_COMMITTER_NAME": "Test",
        "GIT_COMMITTER_EMAIL": "test@test.com",
    }
    if date is not None:
        stamp = date.strftime("%Y-%m-%dT%H:%M:%S+0000")
        env["GIT_AUTHOR_DATE"] = stamp
        env["GIT_COMMITTER_DATE"] = stamp
    result = subprocess.run(
        ["git", "-C", str(repo), "-c", "commit.gpgsign=false", *args],
        capture_output=True,
        text=True,
        env=env,
        check=True,
    )
    return result.stdout


def commit_file(repo: Path, name: str, content: str, date: datetime) -> None:
    path = repo / name
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content)
    git(repo, "add", name)
    git(repo, "commit", "-q", "-m", f"update {name}", date=date)


@pytest.fixture
def git_repo(tmp_path):
    """Factory creating an initialized, empty git repository."""

    def _make(name: str = "repo", root: Optional[Path] = None) -> Path:
        repo = (root or tmp_path) / name
        repo.mkdir(parents=True)
        git(repo, "init", "-q")
        return repo

    return _make
