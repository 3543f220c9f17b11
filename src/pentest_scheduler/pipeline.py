"""Run the whole analysis: discover, analyze concurrently, aggregate.

Example:
    >>> from pentest_scheduler import analyze_repositories, load_config
    >>> run = analyze_repositories(load_config(root_dir="~/dev", period="6m"))
    >>> [r.name for r in run.records][:3]
    ['payments-api', 'auth-service', 'web-frontend']
"""

from __future__ import annotations

import threading
from concurrent.futures import FIRST_COMPLETED, Future, ThreadPoolExecutor, wait
from datetime import datetime, timezone
from pathlib import Path
from typing import Callable, Dict, List, Optional, Tuple

from .aggregation import ResultAggregator
from .config import AnalysisConfig
from .discovery import RepositoryDiscoverer
from .exceptions import RepositoryAnalysisError
from .extraction import ChangeStatsExtractor
from .logging_config import get_logger
from .models import AnalysisRun, RepositoryRecord
from .oracle import GitOracle, VersionControlOracle
from .scoring import RiskScorer, change_percentage
from .sizing import MIN_SIZE, SizeEstimator

logger = get_logger(__name__)


def analyze_repository(
    repo_path: Path,
    cutoff: datetime,
    extractor: ChangeStatsExtractor,
    estimator: SizeEstimator,
    scorer: RiskScorer,
) -> RepositoryRecord:
    """Produce the record for one repository.

    Failures confined to this repository come back as an error record.
    """
    try:
        stats = extractor.extract(repo_path, cutoff)
    except RepositoryAnalysisError as e:
        logger.warning("%s: %s", repo_path.name, e.reason)
        return RepositoryRecord.failed(repo_path, e.reason)

    # With no changed lines the percentage is 0 for any size
    size = estimator.estimate(repo_path) if stats.total_changes else MIN_SIZE
    percentage = change_percentage(stats.total_changes, size)
    assessment = scorer.score(stats, percentage)

    return RepositoryRecord(
        name=repo_path.name,
        path=repo_path,
        commit_count=stats.commit_count,
        last_commit_time=stats.last_commit_time,
        files_changed=stats.files_changed,
        lines_added=stats.lines_added,
        lines_deleted=stats.lines_deleted,
        repository_size=size,
        change_percentage=percentage,
        risk_score=assessment.score,
        priority=assessment.priority,
    )


def analyze_repositories(
    config: AnalysisConfig,
    oracle: Optional[VersionControlOracle] = None,
    now: Optional[datetime] = None,
    cancel_event: Optional[threading.Event] = None,
) -> AnalysisRun:
    """Analyze every repository under ``config.root_dir``.

    Args:
        config: Resolved configuration
        oracle: Query backend (default: GitOracle with the configured timeout)
        now: Reference time for the window and recency (default: current
            UTC). A naive value is taken as UTC.
        cancel_event: Once set, no further repositories are started;
            running ones finish and the run is marked cancelled

    Returns:
        The aggregated AnalysisRun

    Raises:
        DiscoveryError: If the directory walk fails
    """
    now = now or datetime.now(timezone.utc)
    if now.tzinfo is None:
        now = now.replace(tzinfo=timezone.utc)
    oracle = oracle or GitOracle(timeout=config.oracle_timeout_seconds)
    cancel_event = cancel_event or threading.Event()

    root = Path(config.root_dir).resolve()
    repositories = RepositoryDiscoverer(follow_symlinks=config.follow_symlinks).discover(root)
    total = len(repositories)

    cutoff = now - config.period
    extractor = ChangeStatsExtractor(oracle)
    estimator = SizeEstimator(oracle)
    scorer = RiskScorer(now)

    def work(index: int, repo_path: Path) -> RepositoryRecord:
        logger.info("[%d/%d] Analyzing: %s", index + 1, total, repo_path.name)
        try:
            return analyze_repository(repo_path, cutoff, extractor, estimator, scorer)
        except Exception as e:
            logger.exception("Unexpected error analyzing %s", repo_path)
            return RepositoryRecord.failed(repo_path, f"Unexpected error: {e}")

    results, launched = _run_bounded(repositories, work, config.effective_workers, cancel_event)
    cancelled = launched < total
    if cancelled:
        logger.warning("Analysis cancelled: %d of %d repositories analyzed", launched, total)

    # Barrier passed: every launched repository has a record
    records = [results[i] for i in sorted(results)]

    return ResultAggregator.from_config(config).aggregate(
        records,
        generated_at=now,
        period=config.period,
        root_dir=root,
        total_discovered=total,
        cancelled=cancelled,
    )


def _run_bounded(
    items: List[Path],
    work: Callable[[int, Path], RepositoryRecord],
    workers: int,
    cancel_event: threading.Event,
) -> Tuple[Dict[int, RepositoryRecord], int]:
    """Run ``work`` over ``items`` with at most ``workers`` in flight.

    Returns the records by item index and how many items were started.
    A first KeyboardInterrupt sets ``cancel_event`` and drains running work;
    a second one propagates without waiting for it.
    """
    results: Dict[int, RepositoryRecord] = {}
    pending: Dict[Future, int] = {}
    queue = iter(enumerate(items))
    launched = 0

    executor = ThreadPoolExecutor(max_workers=workers)
    try:
        while True:
            while not cancel_event.is_set() and len(pending) < workers:
                nxt = next(queue, None)
                if nxt is None:
                    break
                index, item = nxt
                pending[executor.submit(work, index, item)] = index
                launched += 1

            if not pending:
                break

            try:
                done, _ = wait(pending, return_when=FIRST_COMPLETED)
            except KeyboardInterrupt:
                if cancel_event.is_set():
                    raise
                logger.warning("Interrupted; finishing %d running analyses", len(pending))
                cancel_event.set()
                continue

            for future in done:
                results[pending.pop(future)] = future.result()
    except BaseException:
        executor.shutdown(wait=False, cancel_futures=True)
        raise

    executor.shutdown(wait=True)
    return results, launched
