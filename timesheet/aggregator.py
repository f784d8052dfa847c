"""
Daily aggregation for Git Timesheet.

Groups commit records by date string into timesheet rows and renders the
flat raw log. Everything here is a pure function of its input.
"""

from __future__ import annotations

import logging
from pathlib import Path
from dataclasses import replace
from typing import Dict, Iterable, List, Mapping, Optional, Sequence, Tuple, Union

from timesheet.collector import CommitCollector
from timesheet.config import DEFAULT_HOURS, DEFAULT_TASK, TimesheetConfig, get_config
from timesheet.types import CommitRecord, DailyRow, ExtractionResult, QueryWindow

logger = logging.getLogger(__name__)

SUMMARY_SEPARATOR = "; "


def group_by_date(records: Iterable[CommitRecord]) -> Dict[str, List[str]]:
    """Map each date string to its tagged messages, in input order."""
    grouped: Dict[str, List[str]] = {}
    for record in records:
        grouped.setdefault(record.date, []).append(record.tagged_message)
    return grouped


def build_rows(
    records: Iterable[CommitRecord],
    task: str = DEFAULT_TASK,
    hours: float = DEFAULT_HOURS,
) -> List[DailyRow]:
    """Build one DailyRow per distinct date, sorted by date string."""
    grouped = group_by_date(records)
    return [
        DailyRow(
            date=date,
            task=task,
            summary=SUMMARY_SEPARATOR.join(grouped[date]),
            hours=hours,
        )
        for date in sorted(grouped)
    ]


def render_raw_log(records: Iterable[CommitRecord]) -> str:
    return "\n".join(record.log_line for record in records)


def apply_summaries(rows: Sequence[DailyRow], summaries: Mapping[str, str]) -> List[DailyRow]:
    """
    Return copies of rows with summaries replaced where a date is mapped.

    Args:
        rows: Rows produced by the aggregator
        summaries: Mapping of date to replacement summary text

    Returns:
        New list of DailyRow; unmapped rows are returned unchanged
    """
    return [
        replace(row, summary=summaries[row.date]) if row.date in summaries else row
        for row in rows
    ]


class DailyAggregator:
    """Service that turns collected commits into timesheet rows."""

    def __init__(self, config: Optional[TimesheetConfig] = None):
        self.config = config if config is not None else get_config()

    def aggregate(self, records: Sequence[CommitRecord]) -> Tuple[List[DailyRow], str]:
        """
        Group records into rows and render the raw log.

        Args:
            records: Commit records in collector order

        Returns:
            Tuple of (rows sorted by date, raw log string)
        """
        rows = build_rows(records, task=self.config.rows.task, hours=self.config.rows.hours)
        raw = render_raw_log(records)
        logger.debug(f"Aggregated {len(records)} commits into {len(rows)} rows")
        return rows, raw


def extract_timesheet(
    paths: Optional[Sequence[Union[str, Path]]] = None,
    window: Optional[QueryWindow] = None,
    author: Optional[str] = None,
    config: Optional[TimesheetConfig] = None,
    collector: Optional[CommitCollector] = None,
) -> ExtractionResult:
    """
    Collect commits and aggregate them into an ExtractionResult.

    Args:
        paths: Repository paths. If None, uses configured repositories.
        window: Date window. If None, uses the configured window.
        author: Author filter. If None, uses the configured author.
        config: Configuration instance. If None, uses global config.
        collector: Collector to use. If None, one is built from config.

    Returns:
        ExtractionResult with raw log, sorted rows, and skipped repositories
    """
    config = config if config is not None else get_config()
    collector = collector if collector is not None else CommitCollector(config)

    collected = collector.collect(paths, window, author)
    rows, raw = DailyAggregator(config).aggregate(collected.records)

    return ExtractionResult(raw=raw, table_rows=rows, failures=list(collected.failures))
