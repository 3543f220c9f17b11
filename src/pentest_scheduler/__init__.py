"""
Pentest Scheduler - Repository Change Analysis

Finds every git repository under a directory, measures how much each one
changed during a recent time window and ranks them into HIGH / MEDIUM / LOW
priority tiers for security testing.
"""

__version__ = "0.1.0"

from .config import AnalysisConfig, load_config, parse_period
from .models import AnalysisRun, ChangeStats, Priority, RepositoryRecord
from .pipeline import analyze_repositories

__all__ = [
    "analyze_repositories",  # Main entry point
    "AnalysisConfig",
    "AnalysisRun",
    "ChangeStats",
    "Priority",
    "RepositoryRecord",
    "load_config",
    "parse_period",
]
