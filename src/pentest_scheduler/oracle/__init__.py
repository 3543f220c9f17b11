"""Version-control query backends."""

from .base import VersionControlOracle
from .git import GitOracle
from .numstat import NumstatTotals, parse_numstat

__all__ = [
    "VersionControlOracle",
    "GitOracle",
    "NumstatTotals",
    "parse_numstat",
]
