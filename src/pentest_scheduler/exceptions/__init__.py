"""Exception hierarchy for Pentest Scheduler."""

from .analysis import (
    AnalysisError,
    MalformedMetricError,
    OracleError,
    RepositoryAnalysisError,
)
from .base import PentestSchedulerError
from .config import (
    ConfigurationError,
    InvalidConfigError,
    InvalidPathError,
)
from .discovery import DiscoveryError

__all__ = [
    "PentestSchedulerError",
    "DiscoveryError",
    "AnalysisError",
    "RepositoryAnalysisError",
    "OracleError",
    "MalformedMetricError",
    "ConfigurationError",
    "InvalidConfigError",
    "InvalidPathError",
]
