"""
Git Timesheet Core Module
=========================

Provides the core functionality for Git Timesheet including:
- Type definitions and data structures
- Configuration management
- Commit collection across repositories
- Daily aggregation into timesheet rows
- LLM-powered day summaries
- Multi-format export

Version: 1.0.0
"""

__version__ = "1.0.0"

# Type definitions
from .types import (
    QueryWindow,
    CommitRecord,
    DailyRow,
    SourceFailure,
    CollectionResult,
    ExtractionResult,
    CollectionProgress,
    ExportOptions,
)

# Configuration management
from .config import (
    CollectionConfig,
    RowConfig,
    OllamaConfig,
    ExportConfig,
    TimesheetConfig,
    get_config,
    reload_config,
    reset_config,
)

# Commit collector
from .collector import (
    CommitCollector,
    collect_commits,
    parse_log_line,
)

# Daily aggregator
from .aggregator import (
    DailyAggregator,
    apply_summaries,
    build_rows,
    extract_timesheet,
    render_raw_log,
)

# Day summarizer
from .summarizer import (
    DaySummarizer,
    OllamaDaySummarizer,
    PlaceholderSummarizer,
    SummarizationError,
    make_summarizer,
)

# Export service
from .exporter import (
    Exporter,
)

__all__ = [
    # Version
    "__version__",
    # Types
    "QueryWindow",
    "CommitRecord",
    "DailyRow",
    "SourceFailure",
    "CollectionResult",
    "ExtractionResult",
    "CollectionProgress",
    "ExportOptions",
    # Config
    "CollectionConfig",
    "RowConfig",
    "OllamaConfig",
    "ExportConfig",
    "TimesheetConfig",
    "get_config",
    "reload_config",
    "reset_config",
    # Collector
    "CommitCollector",
    "collect_commits",
    "parse_log_line",
    # Aggregator
    "DailyAggregator",
    "apply_summaries",
    "build_rows",
    "extract_timesheet",
    "render_raw_log",
    # Summarizer
    "DaySummarizer",
    "OllamaDaySummarizer",
    "PlaceholderSummarizer",
    "SummarizationError",
    "make_summarizer",
    # Exporter
    "Exporter",
]
