"""Configuration loading and management for Pentest Scheduler.

Configuration sources are merged in priority order:
    1. Defaults (defined in AnalysisConfig)
    2. Global config (~/.pentest-scheduler.toml)
    3. Project config (./pentest-scheduler.toml)
    4. Explicit config file
    5. Environment variables (PENTEST_* prefix)
    6. CLI overrides (passed as kwargs)

Example:
    >>> config = load_config(root_dir="~/dev", period="3m", min_change_threshold=5.0)
    >>> config.period.days
    90
"""

from __future__ import annotations

import os
import re
from dataclasses import dataclass, field
from datetime import timedelta
from pathlib import Path
from typing import Any, Literal, Optional, get_type_hints

from .exceptions import ConfigurationError, InvalidConfigError

Verbosity = Literal["quiet", "normal", "verbose"]

# Calendar shorthands accepted by --period; a month is 30 days, a year 365.
_NAMED_PERIODS = {
    "1m": 30,
    "1month": 30,
    "3m": 90,
    "3months": 90,
    "6m": 180,
    "6months": 180,
    "1y": 365,
    "1year": 365,
    "2y": 730,
    "2years": 730,
}

_UNIT_SECONDS = {
    "ns": 1e-9,
    "us": 1e-6,
    "µs": 1e-6,
    "μs": 1e-6,
    "ms": 1e-3,
    "s": 1.0,
    "m": 60.0,
    "h": 3600.0,
    "d": 86400.0,
    "w": 604800.0,
}

_DURATION_PART = r"(\d+(?:\.\d*)?|\.\d+)(ns|us|µs|μs|ms|s|m|h|d|w)"
_DURATION_RE = re.compile(_DURATION_PART)
_DURATION_FULL_RE = re.compile(f"(?:{_DURATION_PART})+")

DEFAULT_PERIOD = timedelta(days=180)


def parse_period(text: str) -> timedelta:
    """Parse a time-window string into a timedelta.

    Accepts the calendar shorthands (``1m``, ``3months``, ``1y``...) and
    duration strings built from ``<number><unit>`` parts such as ``720h``,
    ``1h30m`` or ``14d``.

    Raises:
        InvalidConfigError: If the string is empty, malformed or not positive
    """
    value = text.strip().lower()
    if not value:
        raise InvalidConfigError("period", text, "period must not be empty")

    days = _NAMED_PERIODS.get(value)
    if days is not None:
        return timedelta(days=days)

    if not _DURATION_FULL_RE.fullmatch(value):
        raise InvalidConfigError(
            "period", text, "expected e.g. 1m, 3m, 6m, 1y, 2y or a duration like 720h"
        )

    seconds = sum(
        float(number) * _UNIT_SECONDS[unit] for number, unit in _DURATION_RE.findall(value)
    )
    if seconds <= 0:
        raise InvalidConfigError("period", text, "period must be positive")
    return timedelta(seconds=seconds)


def format_period(period: timedelta) -> str:
    """Render a period compactly, e.g. ``180d`` or ``36h``."""
    total = int(period.total_seconds())
    if total % 86400 == 0:
        return f"{total // 86400}d"
    if total % 3600 == 0:
        return f"{total // 3600}h"
    if total % 60 == 0:
        return f"{total // 60}m"
    return f"{period.total_seconds():g}s"


@dataclass(frozen=True)
class AnalysisConfig:
    """Resolved configuration handed to the analysis pipeline.

    Attributes:
        What to analyze:
            root_dir: Directory searched for git repositories
            period: Time window; only commits in [now - period, now] count

        Filtering:
            min_change_threshold: Drop repositories whose change percentage
                is below this value
            include_inactive: Keep repositories with no commits in the window

        Performance tuning:
            workers: Concurrent repository analyses (None = auto-detect)
            oracle_timeout_seconds: Timeout for each git invocation

        Traversal:
            follow_symlinks: Descend into symlinked directories

        Output control:
            verbosity: Logging verbosity level
    """

    root_dir: Path = field(default_factory=lambda: Path("."))
    period: timedelta = DEFAULT_PERIOD

    # Filtering
    min_change_threshold: float = 0.0
    include_inactive: bool = False

    # Performance tuning
    workers: Optional[int] = None
    oracle_timeout_seconds: float = 60.0

    # Traversal
    follow_symlinks: bool = False

    # Output control
    verbosity: Verbosity = "normal"

    def __post_init__(self) -> None:
        """Validate configuration after initialization."""
        if self.period <= timedelta(0):
            raise ValueError("period must be positive")
        if self.min_change_threshold < 0:
            raise ValueError("min_change_threshold must be non-negative")
        if self.workers is not None and self.workers < 1:
            raise ValueError("workers must be at least 1")
        if self.oracle_timeout_seconds <= 0:
            raise ValueError("oracle_timeout_seconds must be positive")
        if self.verbosity not in ("quiet", "normal", "verbose"):
            raise ValueError("verbosity must be one of quiet, normal, verbose")

    @property
    def effective_workers(self) -> int:
        """Worker count with auto-detection resolved."""
        if self.workers is not None:
            return self.workers
        return min(32, (os.cpu_count() or 1) + 4)


def load_config(config_file: Optional[Path] = None, **overrides) -> AnalysisConfig:
    """Load configuration with auto-discovery and merging.

    Args:
        config_file: Optional explicit config file path
        **overrides: Direct overrides (typically from CLI flags). ``None``
            values are ignored so unset CLI options fall through.

    Returns:
        Validated AnalysisConfig instance

    Raises:
        ConfigurationError: If a config file is invalid or missing
        InvalidConfigError: If a value cannot be parsed
    """
    merged: dict = {}

    global_config = Path.home() / ".pentest-scheduler.toml"
    if global_config.exists():
        try:
            merged.update(_load_toml_file(global_config))
        except Exception as e:
            raise ConfigurationError(f"Invalid global config '{global_config}': {e}")

    project_config = Path.cwd() / "pentest-scheduler.toml"
    if project_config.exists():
        try:
            merged.update(_load_toml_file(project_config))
        except Exception as e:
            raise ConfigurationError(f"Invalid project config '{project_config}': {e}")

    if config_file is not None:
        if not config_file.exists():
            raise ConfigurationError(f"Config file not found: {config_file}")
        try:
            merged.update(_load_toml_file(config_file))
        except Exception as e:
            raise ConfigurationError(f"Invalid config file '{config_file}': {e}")

    merged.update(_load_env_vars())

    # Convert verbosity boolean flags to string
    if overrides.pop("verbose", False):
        overrides["verbosity"] = "verbose"
    if overrides.pop("quiet", False):
        overrides["verbosity"] = "quiet"

    merged.update({k: v for k, v in overrides.items() if v is not None})

    if "period" in merged and isinstance(merged["period"], str):
        merged["period"] = parse_period(merged["period"])
    if "root_dir" in merged:
        merged["root_dir"] = Path(os.path.expanduser(str(merged["root_dir"])))

    try:
        return AnalysisConfig(**merged)
    except (TypeError, ValueError) as e:
        raise ConfigurationError(f"Invalid configuration: {e}")


def _load_env_vars() -> dict[str, Any]:
    """Load configuration from PENTEST_* environment variables.

    Supported environment variables:
        PENTEST_ROOT_DIR: path
        PENTEST_PERIOD: period string (6m, 1y, 720h, ...)
        PENTEST_MIN_CHANGE_THRESHOLD: float
        PENTEST_INCLUDE_INACTIVE: bool (true/false/1/0)
        PENTEST_WORKERS: int
        PENTEST_ORACLE_TIMEOUT_SECONDS: float
        PENTEST_FOLLOW_SYMLINKS: bool
        PENTEST_VERBOSITY: quiet/normal/verbose

    Returns:
        Dict of field_name -> parsed_value for any PENTEST_* vars found.
    """
    type_hints = get_type_hints(AnalysisConfig)

    result: dict[str, Any] = {}

    for field_name in AnalysisConfig.__dataclass_fields__:
        env_key = f"PENTEST_{field_name.upper()}"
        env_value = os.environ.get(env_key)

        if env_value is None:
            continue

        type_hint = type_hints.get(field_name)
        if type_hint is None:
            continue

        try:
            parsed = _parse_env_value(env_value, type_hint)
        except ValueError as e:
            raise InvalidConfigError(env_key, env_value, str(e))
        if parsed is not None:
            result[field_name] = parsed

    return result


def _parse_env_value(value: str, type_hint: Any) -> Any:
    """Parse environment variable string to the correct type.

    Raises:
        ValueError: If value can't be parsed to expected type
    """
    origin = getattr(type_hint, "__origin__", None)

    # Optional[X] is Union[X, None]
    args = getattr(type_hint, "__args__", ())
    if type(None) in args:
        non_none_types = [t for t in args if t is not type(None)]
        if non_none_types:
            type_hint = non_none_types[0]

    if type_hint is bool:
        lower = value.lower()
        if lower in ("true", "1", "yes", "on"):
            return True
        elif lower in ("false", "0", "no", "off"):
            return False
        else:
            raise ValueError(f"expected true/false, got '{value}'")

    if type_hint is int:
        return int(value)

    if type_hint is float:
        return float(value)

    if type_hint is Path:
        return Path(value)

    # Periods stay strings here; load_config parses them once merged
    if type_hint is timedelta:
        return value

    if type_hint is str or origin is Literal:
        return value

    return None


def _load_toml_file(path: Path) -> dict:
    """Load TOML file and return parsed dict.

    Raises:
        ConfigurationError: If no TOML parser is available
        Exception: If TOML parsing fails
    """
    try:
        # Python 3.11+ has tomllib in stdlib
        import tomllib
    except ModuleNotFoundError:
        try:
            import tomli as tomllib  # type: ignore
        except ImportError:
            raise ConfigurationError(
                "TOML support requires Python 3.11+ or 'tomli' package. "
                "Install with: pip install tomli"
            )

    with open(path, "rb") as f:
        return tomllib.load(f)
