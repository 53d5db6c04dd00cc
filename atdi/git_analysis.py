"""
git_analysis.py

Mines version-control history to measure how much of each file's effort goes
into keeping the lights on (fixes, chores, refactors) versus adding value
(features), and flags files that look atrophied.
"""

import os
import posixpath
import sys
from concurrent.futures import ThreadPoolExecutor
from datetime import datetime, timezone
from pathlib import Path
from typing import Dict, Iterable, List, NamedTuple, Optional, Sequence

import git

from .config import (
    DEFAULT_CONFIG, YELLOW, RESET, get_config_value,
    get_configured_threshold_months, get_configured_ktlo_critical_ratio,
    get_configured_history_workers
)
from .debt_scorer import utc_timestamp
from .errors import HistoryUnavailableError
from .models import (
    AtrophyCandidate, AtrophyReport, SEVERITY_HIGH, SEVERITY_MEDIUM,
    ATROPHY_HIGH, ATROPHY_LOW
)

MAINTENANCE = 'maintenance'
VALUE = 'value'

# Checked in this order; the first bucket with a hit wins
MAINTENANCE_KEYWORDS = ('fix', 'chore', 'refactor', 'debug')
VALUE_KEYWORDS = ('feat', 'feature', 'add', 'implement')

GIT_DATE_FORMAT = '%Y-%m-%d %H:%M:%S %z'
SECONDS_PER_MONTH = 30 * 24 * 60 * 60


# =============================================================================
# HISTORY PROVIDERS
# =============================================================================

class HistoryProvider:
    """
    The three history queries the atrophy scan needs.

    Implementations raise HistoryUnavailableError when a query fails.
    """

    def list_tracked_files(self, subpath: str = '') -> List[str]:
        raise NotImplementedError

    def commit_messages(self, file_path: str) -> List[str]:
        raise NotImplementedError

    def last_commit_timestamp(self, file_path: str) -> Optional[str]:
        raise NotImplementedError


class GitHistoryProvider(HistoryProvider):
    """
    HistoryProvider backed by a Git working tree through GitPython.

    Paths going in and out are relative to ``project_root``, which may sit
    below the repository root (a package inside a monorepo).
    """

    def __init__(self, project_root):
        """
        Args:
            project_root: Any directory inside the working tree.

        Raises:
            HistoryUnavailableError: if no Git repository contains ``project_root``.
        """
        self.project_root = Path(project_root)
        try:
            self.repo = git.Repo(self.project_root, search_parent_directories=True)
        except (git.exc.InvalidGitRepositoryError, git.exc.NoSuchPathError) as e:
            raise HistoryUnavailableError(f"Not a valid Git repository: {self.project_root}") from e
        if self.repo.working_tree_dir is None:
            raise HistoryUnavailableError(f"Repository has no working tree: {self.repo.git_dir}")

        prefix = os.path.relpath(os.path.realpath(self.project_root), os.path.realpath(self.repo.working_tree_dir))
        self.prefix = '' if prefix == '.' else Path(prefix).as_posix()

    def _repo_path(self, file_path: str) -> str:
        return posixpath.join(self.prefix, file_path) if self.prefix else file_path

    def list_tracked_files(self, subpath: str = '') -> List[str]:
        """Tracked files under ``subpath`` of the project, relative to the project root."""
        pathspec = self._repo_path(subpath) if subpath else self.prefix
        args = ['--', pathspec] if pathspec else []
        try:
            output = self.repo.git.ls_files(*args)
        except git.exc.GitCommandError as e:
            raise HistoryUnavailableError(f"git ls-files failed: {e}") from e

        files = [line for line in output.split('\n') if line]
        if not self.prefix:
            return files
        strip = self.prefix + '/'
        return [f[len(strip):] for f in files if f.startswith(strip)]

    def commit_messages(self, file_path: str) -> List[str]:
        """Subject line of every commit touching ``file_path``, newest first."""
        try:
            return [commit.summary for commit in self.repo.iter_commits(paths=self._repo_path(file_path))]
        except (git.exc.GitCommandError, ValueError) as e:
            raise HistoryUnavailableError(f"git log failed for {file_path}: {e}") from e

    def last_commit_timestamp(self, file_path: str) -> Optional[str]:
        """Author date of the newest commit touching ``file_path``, e.g. '2024-05-01 12:00:00 +0200'."""
        try:
            last_commit = next(self.repo.iter_commits(paths=self._repo_path(file_path), max_count=1))
        except StopIteration:
            return None
        except (git.exc.GitCommandError, ValueError) as e:
            raise HistoryUnavailableError(f"git log failed for {file_path}: {e}") from e
        return last_commit.authored_datetime.strftime(GIT_DATE_FORMAT)


# =============================================================================
# CLASSIFICATION
# =============================================================================

def classify_commit_message(message: str) -> Optional[str]:
    """
    Classifies a commit message as maintenance, value, or neither.

    Matching is a case-insensitive substring test. A message hitting both
    keyword sets ("fix: add fallback") counts as maintenance only.
    """
    lower = message.lower()
    if any(keyword in lower for keyword in MAINTENANCE_KEYWORDS):
        return MAINTENANCE
    if any(keyword in lower for keyword in VALUE_KEYWORDS):
        return VALUE
    return None


def compute_ktlo_ratio(messages: Iterable[str]) -> float:
    maintenance_count = 0
    value_count = 0
    for message in messages:
        bucket = classify_commit_message(message)
        if bucket == MAINTENANCE:
            maintenance_count += 1
        elif bucket == VALUE:
            value_count += 1
    total = maintenance_count + value_count
    return maintenance_count / total if total else 0.0


def parse_git_timestamp(value: str) -> datetime:
    """Parse a '%ai' style or ISO-8601 timestamp into an aware datetime."""
    value = value.strip()
    try:
        parsed = datetime.strptime(value, GIT_DATE_FORMAT)
    except ValueError:
        parsed = datetime.fromisoformat(value.replace('Z', '+00:00'))
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def months_between(then: datetime, now: datetime) -> float:
    """Elapsed time in 30-day months."""
    return (now - then).total_seconds() / SECONDS_PER_MONTH


# =============================================================================
# ATROPHY SCAN
# =============================================================================

class FileHistory(NamedTuple):
    path: str
    entries: int
    ktlo_ratio: float
    last_modified: Optional[str]


def _read_history(provider: HistoryProvider, file_path: str, min_entries: int) -> Optional[FileHistory]:
    messages = provider.commit_messages(file_path)
    if len(messages) < min_entries:
        return None
    return FileHistory(
        path=file_path,
        entries=len(messages),
        ktlo_ratio=compute_ktlo_ratio(messages),
        last_modified=provider.last_commit_timestamp(file_path)
    )


def _safe_read_history(provider, file_path, min_entries):
    try:
        return _read_history(provider, file_path, min_entries)
    except HistoryUnavailableError as e:
        print(f"{YELLOW}Warning: Skipping {file_path}: {e}{RESET}", file=sys.stderr)
        return None


def evaluate_file(
    history: FileHistory,
    threshold_months: float,
    ktlo_critical_ratio: float,
    now: datetime,
    high_min_entries: int = DEFAULT_CONFIG["high_ktlo_min_entries"]
) -> Optional[AtrophyCandidate]:
    """
    Returns the candidate for one file, or None if it looks healthy.

    High maintenance effort takes precedence; inactivity is only checked for
    files that are not already flagged HIGH.
    """
    ratio = history.ktlo_ratio
    if ratio > ktlo_critical_ratio and history.entries > high_min_entries:
        return AtrophyCandidate(
            path=history.path,
            ktlo_ratio=round(ratio, 2),
            last_modified=history.last_modified or '',
            reason=f"High Maintenance Effort ({ratio * 100:.0f}% KTLO)",
            severity=SEVERITY_HIGH
        )
    if history.last_modified is None:
        return None
    if months_between(parse_git_timestamp(history.last_modified), now) > threshold_months:
        return AtrophyCandidate(
            path=history.path,
            ktlo_ratio=round(ratio, 2),
            last_modified=history.last_modified,
            reason=f"Long-term Inactivity (> {threshold_months:g} months)",
            severity=SEVERITY_MEDIUM
        )
    return None


def scan_atrophy(
    provider: HistoryProvider,
    tracked_files: Sequence[str],
    threshold_months: float = DEFAULT_CONFIG["threshold_months"],
    ktlo_critical_ratio: float = DEFAULT_CONFIG["ktlo_critical_ratio"],
    now: Optional[datetime] = None,
    max_workers: int = 1,
    min_entries: int = DEFAULT_CONFIG["min_log_entries"],
    high_min_entries: int = DEFAULT_CONFIG["high_ktlo_min_entries"],
    level_candidate_count: int = DEFAULT_CONFIG["atrophy_level_candidate_count"],
    scan_date: Optional[str] = None
) -> AtrophyReport:
    """
    Scans the history of every tracked file and reports atrophy candidates.

    Files with fewer than ``min_entries`` commits are too new to judge. With
    ``max_workers`` above 1 the per-file queries run in a thread pool; the
    candidates are sorted the same way regardless.
    """
    now = now or datetime.now(timezone.utc)
    files = list(dict.fromkeys(tracked_files))

    if max_workers > 1 and len(files) > 1:
        with ThreadPoolExecutor(max_workers=max_workers) as pool:
            histories = list(pool.map(lambda f: _safe_read_history(provider, f, min_entries), files))
    else:
        histories = [_safe_read_history(provider, f, min_entries) for f in files]

    candidates = []
    for history in histories:
        if history is None:
            continue
        candidate = evaluate_file(history, threshold_months, ktlo_critical_ratio, now, high_min_entries)
        if candidate is not None:
            candidates.append(candidate)

    candidates.sort(key=lambda c: (-c.ktlo_ratio, c.path))
    return AtrophyReport(
        scan_date=scan_date or utc_timestamp(),
        atrophy_level=ATROPHY_HIGH if len(candidates) > level_candidate_count else ATROPHY_LOW,
        candidates=tuple(candidates)
    )


def unavailable_report(cause) -> AtrophyReport:
    """Empty report for a history that cannot be queried; prints the warning."""
    warning = f"Failed to analyze git history: {cause}"
    print(f"{YELLOW}Warning: {warning}{RESET}", file=sys.stderr)
    return AtrophyReport(utc_timestamp(), ATROPHY_LOW, (), warning)


class AtrophyScanner:
    """
    Runs the atrophy scan with thresholds taken from a configuration dict.
    """

    def __init__(self, provider: Optional[HistoryProvider], config: Optional[Dict] = None):
        """
        Args:
            provider: The history source, or None when none could be opened.
            config: Configuration dictionary; missing keys use the defaults.
        """
        self.provider = provider
        self.config = config or {}

    def has_history(self) -> bool:
        return self.provider is not None

    def scan(self, subpath: Optional[str] = None, now: Optional[datetime] = None) -> AtrophyReport:
        """
        Lists the tracked files under ``subpath`` and scans them.

        When the history cannot be queried at all the report has no
        candidates and carries a warning.
        """
        if subpath is None:
            subpath = get_config_value(self.config, "history_subpath")
        if self.provider is None:
            return unavailable_report("no version-control history available")
        try:
            tracked_files = self.provider.list_tracked_files(subpath)
        except HistoryUnavailableError as e:
            return unavailable_report(e)

        return scan_atrophy(
            self.provider,
            tracked_files,
            threshold_months=get_configured_threshold_months(self.config),
            ktlo_critical_ratio=get_configured_ktlo_critical_ratio(self.config),
            now=now,
            max_workers=get_configured_history_workers(self.config),
            min_entries=int(get_config_value(self.config, "min_log_entries")),
            high_min_entries=int(get_config_value(self.config, "high_ktlo_min_entries")),
            level_candidate_count=int(get_config_value(self.config, "atrophy_level_candidate_count"))
        )
