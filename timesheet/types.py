"""
Type definitions and data structures for Git Timesheet.

This module provides strongly-typed data structures for representing
commit records, per-day timesheet rows, and collection results.
"""

from __future__ import annotations

from dataclasses import dataclass, field, asdict
from typing import List, Dict, Any

LOG_SEPARATOR = " | "


@dataclass(frozen=True)
class QueryWindow:
    """
    Date boundaries for a log query.

    Attributes:
        since: Start date (ISO format YYYY-MM-DD)
        until: End date (ISO format YYYY-MM-DD)
    """
    since: str
    until: str

    @property
    def is_inverted(self) -> bool:
        """Return True if since sorts after until (the query matches nothing)."""
        return self.since > self.until


@dataclass(frozen=True)
class CommitRecord:
    """
    One parsed `git log` entry.

    Attributes:
        date: Short commit date as rendered by git (YYYY-MM-DD)
        message: Commit subject, kept whole even if it contains the separator
        project: Project tag derived from the repository path
    """
    date: str
    message: str
    project: str

    @property
    def tagged_message(self) -> str:
        return f"[{self.project}] {self.message}"

    @property
    def log_line(self) -> str:
        return f"{self.date}{LOG_SEPARATOR}{self.tagged_message}"


@dataclass(frozen=True)
class DailyRow:
    """
    One timesheet row covering every commit made on a date.

    Attributes:
        date: Calendar date shared by all commits in the row
        task: Placeholder task label
        summary: Tagged commit messages joined with "; "
        hours: Placeholder hours value
        extra1: Reserved for caller use
        extra2: Reserved for caller use
    """
    date: str
    task: str
    summary: str
    hours: float
    extra1: str = ""
    extra2: str = ""

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class SourceFailure:
    """A repository that contributed no records, and why."""
    path: str
    reason: str


@dataclass
class CollectionResult:
    """
    Records gathered across all repositories plus per-source failures.

    Attributes:
        records: Commit records in path order, then git log order
        failures: Repositories that were skipped
    """
    records: List[CommitRecord] = field(default_factory=list)
    failures: List[SourceFailure] = field(default_factory=list)

    @property
    def succeeded(self) -> bool:
        """Return True if no repository was skipped."""
        return not self.failures

    @property
    def projects(self) -> List[str]:
        """Return project tags in first-seen order."""
        seen: Dict[str, None] = {}
        for record in self.records:
            seen.setdefault(record.project, None)
        return list(seen)


@dataclass
class ExtractionResult:
    """
    Combined collector and aggregator output.

    Attributes:
        raw: Newline-joined log of every record in original order
        table_rows: Daily rows sorted by date
        failures: Repositories that were skipped
    """
    raw: str = ""
    table_rows: List[DailyRow] = field(default_factory=list)
    failures: List[SourceFailure] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        """
        Return the result in the `{raw, tableRows}` shape consumed by UIs.

        Returns:
            Dictionary with 'raw' and 'tableRows' keys
        """
        return {
            "raw": self.raw,
            "tableRows": [row.to_dict() for row in self.table_rows],
        }


@dataclass
class CollectionProgress:
    """
    Progress tracking for multi-repository collection.

    Attributes:
        total_sources: Number of repositories to query
        current_source: Index of the repository being queried
        current_project: Project tag of the repository being queried
        phase: Current phase ("collecting" or "complete")
        message: Optional status message
    """
    total_sources: int
    current_source: int
    current_project: str
    phase: str
    message: str = ""

    @property
    def percentage(self) -> float:
        if self.total_sources == 0:
            return 100.0
        return (self.current_source / self.total_sources) * 100.0

    @property
    def is_complete(self) -> bool:
        return self.phase == "complete"


@dataclass
class ExportOptions:
    """
    Configuration options for exporting an extraction result.

    Attributes:
        format: Export format (markdown, csv, json, raw)
        include_raw: Append the raw log to markdown/json output
        include_failures: List skipped repositories in markdown/json output
    """
    format: str = "markdown"
    include_raw: bool = False
    include_failures: bool = True

    @property
    def file_extension(self) -> str:
        format_map = {
            "markdown": "md",
            "md": "md",
            "csv": "csv",
            "json": "json",
            "raw": "txt",
            "text": "txt",
        }
        return format_map.get(self.format.lower(), "md")
