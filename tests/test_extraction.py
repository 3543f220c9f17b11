"""Tests for ChangeStatsExtractor and SizeEstimator."""

import pytest

from pentest_scheduler.exceptions import RepositoryAnalysisError
from pentest_scheduler.extraction import ChangeStatsExtractor
from pentest_scheduler.models import ChangeStats
from pentest_scheduler.sizing import MIN_SIZE, SizeEstimator

from conftest import FakeOracle, FakeRepo, make_repo_dirs


class TestChangeStatsExtractor:
    def test_collects_window_metrics(self, tmp_path, now, days_ago):
        (repo,) = make_repo_dirs(tmp_path, "api")
        oracle = FakeOracle({"api": FakeRepo(4, days_ago(3), files=2, added=30, deleted=5)})
        stats = ChangeStatsExtractor(oracle).extract(repo, days_ago(180))
        assert stats == ChangeStats(
            commit_count=4,
            last_commit_time=days_ago(3),
            files_changed=2,
            lines_added=30,
            lines_deleted=5,
        )

    def test_zero_commits_zeroes_window_but_keeps_last_commit(self, tmp_path, days_ago):
        (repo,) = make_repo_dirs(tmp_path, "old")
        oracle = FakeOracle({"old": FakeRepo(0, days_ago(400), files=9, added=9, deleted=9)})
        stats = ChangeStatsExtractor(oracle).extract(repo, days_ago(180))
        assert stats == ChangeStats(commit_count=0, last_commit_time=days_ago(400))
        assert "old:change_stats" not in oracle.calls

    def test_commit_info_failure(self, tmp_path, days_ago):
        (repo,) = make_repo_dirs(tmp_path, "bad")
        oracle = FakeOracle({"bad": FakeRepo(fail_on="commit_count")})
        with pytest.raises(RepositoryAnalysisError) as exc_info:
            ChangeStatsExtractor(oracle).extract(repo, days_ago(180))
        assert exc_info.value.reason == "Failed to get commit info: fatal: commit_count exploded"

    def test_change_stats_failure(self, tmp_path, days_ago):
        (repo,) = make_repo_dirs(tmp_path, "bad")
        oracle = FakeOracle({"bad": FakeRepo(2, days_ago(1), fail_on="change_stats")})
        with pytest.raises(RepositoryAnalysisError, match="Cannot analyze repository") as exc_info:
            ChangeStatsExtractor(oracle).extract(repo, days_ago(180))
        assert exc_info.value.reason.startswith("Failed to get change stats:")

    def test_missing_marker(self, tmp_path, days_ago):
        plain = tmp_path / "plain"
        plain.mkdir()
        with pytest.raises(RepositoryAnalysisError) as exc_info:
            ChangeStatsExtractor(FakeOracle({})).extract(plain, days_ago(180))
        assert exc_info.value.reason == "Not a valid git repository"

    def test_negative_count_rejected(self, tmp_path, days_ago):
        (repo,) = make_repo_dirs(tmp_path, "odd")
        oracle = FakeOracle({"odd": FakeRepo(-1)})
        with pytest.raises(RepositoryAnalysisError, match="Cannot analyze"):
            ChangeStatsExtractor(oracle).extract(repo, days_ago(180))


class TestSizeEstimator:
    def test_sums_tracked_lines(self, tmp_path):
        (repo,) = make_repo_dirs(tmp_path, "api")
        oracle = FakeOracle({"api": FakeRepo(lines={"a.py": 120, "b.py": 80})})
        assert SizeEstimator(oracle).estimate(repo) == 200

    def test_zero_lines_floors_to_one(self, tmp_path):
        (repo,) = make_repo_dirs(tmp_path, "empty")
        oracle = FakeOracle({"empty": FakeRepo(lines={"blank.txt": 0})})
        assert SizeEstimator(oracle).estimate(repo) == MIN_SIZE == 1

    def test_no_tracked_files_floors_to_one(self, tmp_path):
        (repo,) = make_repo_dirs(tmp_path, "bare")
        oracle = FakeOracle({"bare": FakeRepo(lines={})})
        assert SizeEstimator(oracle).estimate(repo) == 1

    def test_listing_failure_floors_to_one(self, tmp_path):
        (repo,) = make_repo_dirs(tmp_path, "broken")
        oracle = FakeOracle({"broken": FakeRepo(fail_on="tracked_files")})
        assert SizeEstimator(oracle).estimate(repo) == 1

    def test_unreadable_files_skipped(self, tmp_path):
        (repo,) = make_repo_dirs(tmp_path, "gone")
        oracle = FakeOracle({"gone": FakeRepo(lines={"a.py": 50}, fail_on="line_count")})
        assert SizeEstimator(oracle).estimate(repo) == 1
