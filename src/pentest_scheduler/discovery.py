"""Locate git repositories beneath a directory."""

from __future__ import annotations

import os
from enum import Enum
from pathlib import Path
from typing import Callable, List, Tuple

from .exceptions import DiscoveryError
from .logging_config import get_logger

logger = get_logger(__name__)

GIT_MARKER = ".git"


class WalkAction(Enum):
    """What the walker should do after visiting an entry."""

    CONTINUE = "continue"
    SKIP_SUBTREE = "skip_subtree"


Visitor = Callable[[Path, bool], WalkAction]


def walk_tree(root: Path, visitor: Visitor, follow_symlinks: bool = False) -> None:
    """Depth-first, pre-order walk below ``root``.

    Entries of each directory are visited in name order. ``visitor`` is
    called with ``(path, is_dir)`` and returns SKIP_SUBTREE to keep the walk
    out of a directory.

    Raises:
        DiscoveryError: On any filesystem error; the walk is not resumed.
    """
    stack = _list_dir(root, follow_symlinks)
    while stack:
        path, is_dir = stack.pop()
        if visitor(path, is_dir) is WalkAction.CONTINUE and is_dir:
            stack.extend(_list_dir(path, follow_symlinks))


def _list_dir(directory: Path, follow_symlinks: bool) -> List[Tuple[Path, bool]]:
    """Entries of ``directory`` in reverse name order, ready to push on a stack."""
    try:
        with os.scandir(directory) as it:
            entries = sorted(it, key=lambda e: e.name, reverse=True)
        return [(Path(e.path), e.is_dir(follow_symlinks=follow_symlinks)) for e in entries]
    except OSError as e:
        raise DiscoveryError(directory, e.strerror or str(e)) from e


class RepositoryDiscoverer:
    """Find repository roots: directories holding a ``.git`` directory."""

    def __init__(self, marker: str = GIT_MARKER, follow_symlinks: bool = False):
        self.marker = marker
        self.follow_symlinks = follow_symlinks

    def discover(self, root: Path) -> List[Path]:
        """Return repository roots in traversal order.

        Raises:
            DiscoveryError: If ``root`` is not a readable directory or any
                part of the walk fails.
        """
        root = Path(root).resolve()
        if not root.exists():
            raise DiscoveryError(root, "directory does not exist")
        if not root.is_dir():
            raise DiscoveryError(root, "not a directory")

        repositories: List[Path] = []

        def visit(path: Path, is_dir: bool) -> WalkAction:
            if is_dir and path.name == self.marker:
                repositories.append(path.parent)
                return WalkAction.SKIP_SUBTREE
            return WalkAction.CONTINUE

        walk_tree(root, visit, follow_symlinks=self.follow_symlinks)
        logger.info("Found %d potential repositories under %s", len(repositories), root)
        return repositories