"""
Commit collection service for Git Timesheet.

Queries `git log` in each configured repository, one at a time, and parses
the `date | subject` lines into CommitRecord values. A repository that
cannot be queried is skipped and recorded as a SourceFailure; collection
always returns whatever records it gathered.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Callable, Iterable, List, Optional, Sequence, Union

from timesheet.config import TimesheetConfig, get_config
from timesheet.types import (
    LOG_SEPARATOR,
    CollectionProgress,
    CollectionResult,
    CommitRecord,
    QueryWindow,
    SourceFailure,
)
from worklog.git_log import GitQueryError, run_git_log

logger = logging.getLogger(__name__)


def project_label(path: Union[str, Path]) -> str:
    """
    Derive the project tag from the final segment of a repository path.

    Both "/" and "\\" are treated as separators so Windows-style paths
    label the same way on every platform.
    """
    normalized = str(path).replace("\\", "/").rstrip("/")
    return normalized.rsplit("/", 1)[-1] if normalized else ""


def parse_log_line(line: str, project: str) -> CommitRecord:
    """
    Parse one `date | subject` line.

    Only the first separator is significant; a subject that itself contains
    " | " is kept whole. A line with no separator becomes a record with an
    empty date and the whole line as its message.
    """
    date, sep, message = line.partition(LOG_SEPARATOR)
    if not sep:
        logger.warning(f"Malformed log line in {project}: {line!r}")
        return CommitRecord(date="", message=line, project=project)
    return CommitRecord(date=date, message=message, project=project)


def parse_log_output(output: str, project: str) -> List[CommitRecord]:
    """Parse full `git log` stdout, keeping the order git returned."""
    records = []
    for line in output.split("\n"):
        line = line.rstrip("\r")
        if not line:
            continue
        records.append(parse_log_line(line, project))
    return records


class CommitCollector:
    """
    Service for collecting commit records across several repositories.

    Repositories are queried sequentially in the order given; records are
    concatenated in that order without re-sorting.
    """

    def __init__(
        self,
        config: Optional[TimesheetConfig] = None,
        runner: Optional[Callable[..., str]] = None,
    ):
        """
        Initialize the collector.

        Args:
            config: Configuration instance. If None, uses global config.
            runner: Callable(repo_path, window, author) returning git log stdout.
                If None, runs `git log`.
        """
        self.config = config if config is not None else get_config()
        self._runner = runner if runner is not None else run_git_log
        logger.debug("CommitCollector initialized")

    def collect_repository(
        self,
        repo_path: Union[str, Path],
        window: QueryWindow,
        author: Optional[str] = None,
    ) -> List[CommitRecord]:
        """
        Collect records from a single repository.

        Raises:
            GitQueryError: If the repository cannot be queried
        """
        project = project_label(repo_path)
        output = self._runner(repo_path, window, author)
        records = parse_log_output(output, project)
        logger.info(f"Found {len(records)} commits in {project}")
        return records

    def collect(
        self,
        paths: Optional[Sequence[Union[str, Path]]] = None,
        window: Optional[QueryWindow] = None,
        author: Optional[str] = None,
        progress_callback: Optional[Callable[[CollectionProgress], None]] = None,
        should_stop: Optional[Callable[[], bool]] = None,
    ) -> CollectionResult:
        """
        Collect records from every repository, skipping those that fail.

        Args:
            paths: Repository paths. If None, uses configured repositories.
            window: Date window. If None, uses the configured window.
            author: Author filter. If None, uses the configured author.
            progress_callback: Optional callback for progress updates
            should_stop: Optional callable checked before each repository;
                returning True ends collection with the records gathered so far

        Returns:
            CollectionResult with records and per-repository failures

        Raises:
            ValueError: If no window is given and none is configured
        """
        if paths is None:
            paths = self.config.get_repository_paths()
        if window is None:
            window = self.config.get_window()
            if window is None:
                raise ValueError("No query window given and none configured")
        if author is None:
            author = self.config.collection.author

        if window.is_inverted:
            logger.warning(f"Query window is inverted ({window.since} > {window.until}); expect no commits")

        total = len(paths)
        logger.info(f"Collecting commits from {total} repositories ({window.since} to {window.until})")
        result = CollectionResult()

        for idx, repo_path in enumerate(paths, start=1):
            if should_stop is not None and should_stop():
                logger.info(f"Collection stopped before {repo_path} ({idx - 1} of {total} queried)")
                break

            project = project_label(repo_path)
            if progress_callback:
                progress_callback(CollectionProgress(
                    total_sources=total,
                    current_source=idx,
                    current_project=project,
                    phase="collecting",
                    message=f"Reading {project}...",
                ))

            try:
                result.records.extend(self.collect_repository(repo_path, window, author))
            except GitQueryError as e:
                logger.warning(f"Skipping {repo_path}: {e.reason}")
                result.failures.append(SourceFailure(path=str(repo_path), reason=e.reason))
            except Exception as e:
                reason = f"{type(e).__name__}: {e}"
                logger.warning(f"Skipping {repo_path}: {reason}", exc_info=True)
                result.failures.append(SourceFailure(path=str(repo_path), reason=reason))

        if progress_callback:
            progress_callback(CollectionProgress(
                total_sources=total,
                current_source=total,
                current_project="",
                phase="complete",
                message=f"Collected {len(result.records)} commits",
            ))

        logger.info(
            f"Collection complete: {len(result.records)} commits, {len(result.failures)} skipped repositories"
        )
        return result


def collect_commits(
    paths: Iterable[Union[str, Path]],
    window: QueryWindow,
    author: Optional[str] = None,
) -> CollectionResult:
    """Collect commits with default settings."""
    return CommitCollector(TimesheetConfig()).collect(list(paths), window, author or "")

