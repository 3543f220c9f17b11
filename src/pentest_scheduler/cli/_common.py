"""Shared CLI helpers."""

from rich.console import Console

# Reports go to stdout; banners, summaries and errors to stderr
console = Console()
err_console = Console(stderr=True)
