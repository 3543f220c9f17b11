"""Tests for the git-backed oracle against real repositories."""

import subprocess
from datetime import datetime, timedelta, timezone

import pytest

from pentest_scheduler.exceptions import OracleError
from pentest_scheduler.oracle import GitOracle, NumstatTotals

from conftest import commit_file, git, requires_git

pytestmark = requires_git

T0 = datetime(2024, 1, 10, 12, 0, 0, tzinfo=timezone.utc)


@pytest.fixture
def history_repo(git_repo):
    """Three commits: one old, two recent (one binary)."""
    repo = git_repo("history")
    commit_file(repo, "old.txt", "a\nb\nc\n", T0)
    commit_file(repo, "src/new.txt", "1\n2\n", T0 + timedelta(days=30))
    (repo / "logo.bin").write_bytes(b"\x00\x01\x02\x00")
    git(repo, "add", "logo.bin")
    git(repo, "commit", "-q", "-m", "binary", date=T0 + timedelta(days=31))
    return repo


class TestGitOracle:
    def test_commit_count_since(self, history_repo):
        oracle = GitOracle()
        assert oracle.commit_count_since(history_repo, T0 + timedelta(days=20)) == 2
        assert oracle.commit_count_since(history_repo, T0 - timedelta(days=1)) == 3
        assert oracle.commit_count_since(history_repo, T0 + timedelta(days=60)) == 0

    def test_last_commit_timestamp(self, history_repo):
        assert GitOracle().last_commit_timestamp(history_repo) == T0 + timedelta(days=31)

    def test_change_stats_since(self, history_repo):
        totals = GitOracle().change_stats_since(history_repo, T0 + timedelta(days=20))
        assert totals == NumstatTotals(files_changed=2, lines_added=2, lines_deleted=0)

    def test_tracked_files_and_line_count(self, history_repo):
        oracle = GitOracle()
        files = sorted(oracle.tracked_files(history_repo))
        assert files == ["logo.bin", "old.txt", "src/new.txt"]
        assert oracle.line_count(history_repo / "old.txt") == 3

    def test_empty_repository_is_not_an_error(self, git_repo):
        repo = git_repo("empty")
        oracle = GitOracle()
        assert oracle.commit_count_since(repo, T0) == 0
        assert oracle.last_commit_timestamp(repo) is None
        assert oracle.change_stats_since(repo, T0) == NumstatTotals(0, 0, 0)
        assert oracle.tracked_files(repo) == []

    def test_not_a_repository_raises(self, tmp_path):
        plain = tmp_path / "plain"
        plain.mkdir()
        with pytest.raises(OracleError) as exc_info:
            GitOracle().commit_count_since(plain, T0)
        assert "not a git repository" in exc_info.value.reason.lower()
        assert exc_info.value.returncode != 0

    def test_missing_binary(self, history_repo):
        with pytest.raises(OracleError, match="executable not found"):
            GitOracle(git="definitely-not-git-xyz").commit_count_since(history_repo, T0)

    def test_timeout(self, history_repo, monkeypatch):
        def fake_run(cmd, **kwargs):
            raise subprocess.TimeoutExpired(cmd, kwargs["timeout"])

        monkeypatch.setattr(subprocess, "run", fake_run)
        with pytest.raises(OracleError, match="timed out after 2s"):
            GitOracle(timeout=2).last_commit_timestamp(history_repo)


class TestLineCount:
    def test_trailing_line_without_newline(self, tmp_path):
        f = tmp_path / "f.txt"
        f.write_bytes(b"one\ntwo")
        assert GitOracle().line_count(f) == 2

    def test_empty_file(self, tmp_path):
        f = tmp_path / "empty.txt"
        f.write_bytes(b"")
        assert GitOracle().line_count(f) == 0

    def test_missing_file(self, tmp_path):
        with pytest.raises(OracleError):
            GitOracle().line_count(tmp_path / "gone.txt")
