"""Output formatters for Pentest Scheduler."""

from enum import Enum

from .base import BaseFormatter
from .csv_formatter import CsvFormatter
from .json_formatter import JsonFormatter
from .table_formatter import TableFormatter


class OutputFormat(str, Enum):
    """Report formats accepted by --format."""

    TABLE = "table"
    JSON = "json"
    CSV = "csv"


FORMATS = tuple(f.value for f in OutputFormat)


def get_formatter(name: str) -> BaseFormatter:
    """Get a formatter instance by name.

    Args:
        name: One of "table", "json", "csv" (case-insensitive)

    Raises:
        ValueError: If name is not recognized
    """
    formatters = {
        "table": TableFormatter,
        "json": JsonFormatter,
        "csv": CsvFormatter,
    }
    cls = formatters.get(name.lower())
    if cls is None:
        raise ValueError(f"Unknown formatter: {name!r}. Choose from: {', '.join(sorted(formatters))}")
    return cls()


__all__ = [
    "BaseFormatter",
    "TableFormatter",
    "JsonFormatter",
    "CsvFormatter",
    "FORMATS",
    "OutputFormat",
    "get_formatter",
]
