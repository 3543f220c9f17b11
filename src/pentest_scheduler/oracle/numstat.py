"""Parse ``git log --numstat`` output."""

from typing import Iterable, NamedTuple, Set

from ..exceptions import MalformedMetricError
from ..logging_config import get_logger

logger = get_logger(__name__)

# git prints "-" instead of counts for binary files
BINARY_MARKER = "-"


class NumstatTotals(NamedTuple):
    files_changed: int
    lines_added: int
    lines_deleted: int


def parse_count(field: str, line: str) -> int:
    """Parse one insertion/deletion count.

    Raises:
        MalformedMetricError: If ``field`` is a binary marker or not a
            non-negative integer
    """
    if field == BINARY_MARKER:
        raise MalformedMetricError(line, "binary file")
    try:
        value = int(field)
    except ValueError:
        raise MalformedMetricError(line, f"not a number: {field!r}")
    if value < 0:
        raise MalformedMetricError(line, f"negative count: {value}")
    return value


def parse_numstat(lines: Iterable[str]) -> NumstatTotals:
    """Sum numstat lines of the form ``added<TAB>deleted<TAB>path``.

    A count that does not parse contributes zero; the path still counts as
    changed. Blank lines and lines with fewer than three fields are ignored.
    """
    files: Set[str] = set()
    added = 0
    deleted = 0

    for raw in lines:
        line = raw.strip()
        if not line:
            continue

        parts = line.split(None, 2)
        if len(parts) < 3:
            logger.debug("Ignoring numstat line without a path: %r", line)
            continue

        added_field, deleted_field, path = parts
        files.add(path)

        try:
            added += parse_count(added_field, line)
        except MalformedMetricError as e:
            logger.debug("Skipping insertions: %s", e)
        try:
            deleted += parse_count(deleted_field, line)
        except MalformedMetricError as e:
            logger.debug("Skipping deletions: %s", e)

    return NumstatTotals(files_changed=len(files), lines_added=added, lines_deleted=deleted)
