"""Tests for the risk score and priority tiers."""

from datetime import timedelta

import pytest

from pentest_scheduler.models import ChangeStats, Priority
from pentest_scheduler.scoring import (
    RiskScorer,
    change_component,
    change_percentage,
    commit_component,
    priority_for,
    recency_component,
)


class TestComponents:
    """Each weighted factor on its own."""

    def test_change_component_weight(self):
        assert change_component(12.34) == pytest.approx(4.936)
        assert change_component(0.0) == 0.0

    def test_commit_component_caps_at_thirty(self):
        assert commit_component(0) == 0.0
        assert commit_component(4) == 12.0
        assert commit_component(10) == 30.0
        assert commit_component(45) == 30.0

    @pytest.mark.parametrize(
        "days, expected",
        [
            (0, 30.0),
            (6.99, 30.0),
            (7, 20.0),
            (29.5, 20.0),
            (30, 10.0),
            (89, 10.0),
            (90, 0.0),
            (3650, 0.0),
        ],
    )
    def test_recency_steps(self, now, days, expected):
        assert recency_component(now - timedelta(days=days), now) == expected

    def test_recency_without_commits_is_zero(self, now):
        """A repository that never had a commit earns no recency points."""
        assert recency_component(None, now) == 0.0


class TestChangePercentage:
    def test_basic_ratio(self):
        assert change_percentage(50, 200) == pytest.approx(25.0)

    def test_zero_size_uses_denominator_one(self):
        """Zero-size repositories never divide by zero."""
        assert change_percentage(3, 0) == pytest.approx(300.0)
        assert change_percentage(0, 0) == 0.0

    def test_can_exceed_hundred(self):
        assert change_percentage(500, 100) == pytest.approx(500.0)


class TestPriority:
    @pytest.mark.parametrize(
        "score, expected",
        [
            (100.0, Priority.HIGH),
            (70.0, Priority.HIGH),
            (69.999, Priority.MEDIUM),
            (40.0, Priority.MEDIUM),
            (39.999, Priority.LOW),
            (0.0, Priority.LOW),
        ],
    )
    def test_thresholds_inclusive_at_lower_bound(self, score, expected):
        assert priority_for(score) is expected


class TestRiskScorer:
    def test_medium_scenario(self, now, days_ago):
        """45 commits, 12.34% change, committed 2 days ago -> 64.936, MEDIUM."""
        stats = ChangeStats(commit_count=45, last_commit_time=days_ago(2))
        result = RiskScorer(now).score(stats, 12.34)
        assert result.score == pytest.approx(64.936)
        assert result.priority is Priority.MEDIUM

    def test_score_capped_at_hundred(self, now, days_ago):
        stats = ChangeStats(commit_count=20, last_commit_time=days_ago(1))
        result = RiskScorer(now).score(stats, 250.0)
        assert result.score == 100.0
        assert result.priority is Priority.HIGH

    def test_empty_repository_scores_zero(self, now):
        result = RiskScorer(now).score(ChangeStats(), 0.0)
        assert result.score == 0.0
        assert result.priority is Priority.LOW

    def test_inactive_window_still_gets_recency(self, now, days_ago):
        """No commits in the window but HEAD is 20 days old."""
        stats = ChangeStats(commit_count=0, last_commit_time=days_ago(20))
        result = RiskScorer(now).score(stats, 0.0)
        assert result.score == 20.0
        assert result.priority is Priority.LOW

    def test_high_threshold_exact(self, now, days_ago):
        stats = ChangeStats(commit_count=10, last_commit_time=days_ago(1))
        result = RiskScorer(now).score(stats, 25.0)
        assert result.score == pytest.approx(70.0)
        assert result.priority is Priority.HIGH
