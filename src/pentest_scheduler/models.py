"""Data models for Pentest Scheduler"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta
from enum import Enum
from pathlib import Path
from typing import Any, Dict, Optional, Tuple

from .config import format_period


class Priority(str, Enum):
    """Coarse risk bucket used for pentest triage."""

    HIGH = "HIGH"
    MEDIUM = "MEDIUM"
    LOW = "LOW"


@dataclass(frozen=True)
class ChangeStats:
    """Window-scoped activity of one repository, as reported by git."""

    commit_count: int = 0
    last_commit_time: Optional[datetime] = None  # None if HEAD has no commits
    files_changed: int = 0
    lines_added: int = 0
    lines_deleted: int = 0

    @property
    def total_changes(self) -> int:
        return self.lines_added + self.lines_deleted


@dataclass(frozen=True)
class RepositoryRecord:
    """Analysis outcome for a single repository.

    Either ``error`` is set and every derived field is None, or ``error`` is
    None and the derived fields are all populated.
    """

    name: str
    path: Path
    commit_count: int = 0
    last_commit_time: Optional[datetime] = None
    files_changed: int = 0
    lines_added: int = 0
    lines_deleted: int = 0

    # Derived
    repository_size: Optional[int] = None
    change_percentage: Optional[float] = None
    risk_score: Optional[float] = None
    priority: Optional[Priority] = None

    error: Optional[str] = None

    def __post_init__(self) -> None:
        derived = (self.repository_size, self.change_percentage, self.risk_score, self.priority)
        if self.error is not None:
            if any(v is not None for v in derived):
                raise ValueError("error records must not carry derived metrics")
            return
        if any(v is None for v in derived):
            raise ValueError("records without an error need every derived metric")
        if not 0.0 <= self.risk_score <= 100.0:
            raise ValueError(f"risk_score out of range: {self.risk_score}")
        if self.change_percentage < 0:
            raise ValueError(f"change_percentage must be non-negative: {self.change_percentage}")

    @classmethod
    def failed(cls, path: Path, reason: str) -> "RepositoryRecord":
        return cls(name=path.name, path=path, error=reason)

    @property
    def total_changes(self) -> int:
        return self.lines_added + self.lines_deleted

    @property
    def is_error(self) -> bool:
        return self.error is not None

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {
            "name": self.name,
            "path": str(self.path),
        }
        if self.is_error:
            data["error"] = self.error
            return data
        data.update(
            {
                "last_commit_date": (
                    self.last_commit_time.isoformat() if self.last_commit_time else None
                ),
                "commit_count": self.commit_count,
                "files_changed": self.files_changed,
                "lines_added": self.lines_added,
                "lines_deleted": self.lines_deleted,
                "lines_modified": self.total_changes,
                "total_changes": self.total_changes,
                "repository_size": self.repository_size,
                "change_percentage": self.change_percentage,
                "risk_score": self.risk_score,
                "recommended_priority": self.priority.value,
            }
        )
        return data


@dataclass(frozen=True)
class AnalysisRun:
    """Everything one invocation produced, in presentation order."""

    generated_at: datetime
    period: timedelta
    root_dir: Path
    total_discovered: int
    active_count: int
    records: Tuple[RepositoryRecord, ...] = ()
    analyzed_count: int = 0  # repositories that produced a record, before filtering
    cancelled: bool = False  # interrupted before every repository was started

    @property
    def errors(self) -> Tuple[RepositoryRecord, ...]:
        return tuple(r for r in self.records if r.is_error)

    def count_by_priority(self, priority: Priority) -> int:
        return sum(1 for r in self.records if r.priority is priority)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "generated_at": self.generated_at.isoformat(),
            "time_period": format_period(self.period),
            "repositories_dir": str(self.root_dir),
            "total_repositories": self.total_discovered,
            "active_repositories": self.active_count,
            "analyzed_repositories": self.analyzed_count,
            "cancelled": self.cancelled,
            "results": [r.to_dict() for r in self.records],
        }
