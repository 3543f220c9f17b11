"""Composite risk score and priority tier.

score = min(change% * 0.4 + min(commits * 3, 30) + recency, 100)

where recency is 30 / 20 / 10 / 0 for a last commit less than 7 / 30 / 90
days old / older (or never).
"""

from __future__ import annotations

from datetime import datetime
from typing import NamedTuple, Optional

from .models import ChangeStats, Priority

CHANGE_WEIGHT = 0.4
COMMIT_WEIGHT = 3.0
COMMIT_CAP = 30.0
MAX_SCORE = 100.0

# (days since last commit, points), first match wins
RECENCY_STEPS = (
    (7, 30.0),
    (30, 20.0),
    (90, 10.0),
)

HIGH_THRESHOLD = 70.0
MEDIUM_THRESHOLD = 40.0

_SECONDS_PER_DAY = 86400.0


class RiskAssessment(NamedTuple):
    score: float
    priority: Priority


def change_percentage(total_changes: int, repository_size: int) -> float:
    """Changed lines as a percentage of the repository's line count."""
    return total_changes / max(repository_size, 1) * 100


def change_component(percentage: float) -> float:
    return percentage * CHANGE_WEIGHT


def commit_component(commit_count: int) -> float:
    return min(commit_count * COMMIT_WEIGHT, COMMIT_CAP)


def recency_component(last_commit_time: Optional[datetime], now: datetime) -> float:
    # A repository without commits is not "very old"; it simply scores nothing
    if last_commit_time is None:
        return 0.0
    days = (now - last_commit_time).total_seconds() / _SECONDS_PER_DAY
    for limit, points in RECENCY_STEPS:
        if days < limit:
            return points
    return 0.0


def priority_for(score: float) -> Priority:
    if score >= HIGH_THRESHOLD:
        return Priority.HIGH
    elif score >= MEDIUM_THRESHOLD:
        return Priority.MEDIUM
    else:
        return Priority.LOW


class RiskScorer:
    """Score repositories relative to a fixed ``now``."""

    def __init__(self, now: datetime):
        self.now = now

    def score(self, stats: ChangeStats, percentage: float) -> RiskAssessment:
        raw = (
            change_component(percentage)
            + commit_component(stats.commit_count)
            + recency_component(stats.last_commit_time, self.now)
        )
        score = min(raw, MAX_SCORE)
        return RiskAssessment(score=score, priority=priority_for(score))
