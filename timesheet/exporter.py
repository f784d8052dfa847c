"""
Multi-format export service for Git Timesheet.

Provides export functionality for extraction results as Markdown tables,
CSV, JSON, or the plain raw log.
"""

from __future__ import annotations

import json
import logging
from datetime import datetime
from pathlib import Path
from typing import List, Optional

import pandas as pd

from timesheet.config import TimesheetConfig, get_config
from timesheet.types import ExportOptions, ExtractionResult, QueryWindow

logger = logging.getLogger(__name__)

ROW_COLUMNS = ["date", "task", "summary", "hours", "extra1", "extra2"]


def _escape_cell(value: object) -> str:
    return str(value).replace("|", "\\|").replace("\n", " ")


class Exporter:
    """
    Service for exporting extraction results in multiple formats.
    """

    def __init__(self, config: Optional[TimesheetConfig] = None):
        """
        Initialize the exporter.

        Args:
            config: Configuration instance. If None, uses global config.
        """
        self.config = config if config is not None else get_config()
        logger.debug(f"Default export format: {self.config.export.default_format}")

    def export(
        self,
        result: ExtractionResult,
        options: Optional[ExportOptions] = None,
    ) -> str:
        """
        Export an extraction result to the specified format.

        Args:
            result: ExtractionResult to export
            options: Export options. If None, uses defaults.

        Returns:
            Formatted string content

        Raises:
            ValueError: If format is not supported
        """
        if options is None:
            options = ExportOptions(format=self.config.export.default_format)

        logger.info(f"Exporting timesheet to {options.format} format")
        format_lower = options.format.lower()

        if format_lower in ("markdown", "md"):
            return self.to_markdown(result, options)
        elif format_lower == "csv":
            return self.to_csv(result)
        elif format_lower == "json":
            return self.to_json(result, options)
        elif format_lower in ("raw", "text", "txt"):
            return result.raw
        else:
            raise ValueError(f"Unsupported export format: {options.format}")

    def to_dataframe(self, result: ExtractionResult) -> pd.DataFrame:
        return pd.DataFrame([row.to_dict() for row in result.table_rows], columns=ROW_COLUMNS)

    def to_csv(self, result: ExtractionResult) -> str:
        """
        Export rows as CSV with a header line.

        Returns:
            CSV-formatted string
        """
        logger.debug("Generating CSV export")
        return self.to_dataframe(result).to_csv(index=False, lineterminator="\n")

    def to_markdown(self, result: ExtractionResult, options: ExportOptions) -> str:
        """
        Export rows as a Markdown table.

        Args:
            result: ExtractionResult to export
            options: Export options

        Returns:
            Markdown-formatted string
        """
        logger.debug("Generating Markdown export")
        lines: List[str] = []

        lines.append("# Timesheet")
        lines.append("")
        lines.append(f"**Generated:** {datetime.now().strftime('%Y-%m-%d %H:%M:%S')}")
        lines.append("")

        if result.table_rows:
            lines.append("| " + " | ".join(c.capitalize() for c in ROW_COLUMNS) + " |")
            lines.append("|" + "---|" * len(ROW_COLUMNS))
            for row in result.table_rows:
                cells = [_escape_cell(row.to_dict()[c]) for c in ROW_COLUMNS]
                lines.append("| " + " | ".join(cells) + " |")
        else:
            lines.append("No commits found in the selected period.")
        lines.append("")

        if options.include_failures and result.failures:
            lines.append("## Skipped Repositories")
            lines.append("")
            for failure in result.failures:
                lines.append(f"- `{failure.path}`: {failure.reason}")
            lines.append("")

        if options.include_raw and result.raw:
            lines.append("## Raw Log")
            lines.append("")
            lines.append("```")
            lines.append(result.raw)
            lines.append("```")
            lines.append("")

        return "\n".join(lines)

    def to_json(self, result: ExtractionResult, options: ExportOptions) -> str:
        """
        Export as JSON in the `{raw, tableRows}` shape.

        The raw log is always included; skipped repositories are added under
        "failures" when requested.
        """
        logger.debug("Generating JSON export")
        data = result.to_dict()
        if options.include_failures:
            data["failures"] = [{"path": f.path, "reason": f.reason} for f in result.failures]
        return json.dumps(data, indent=2, ensure_ascii=False)

    def generate_filename(self, window: QueryWindow, options: ExportOptions) -> str:
        """
        Generate filename based on the configured pattern and query window.

        Returns:
            Filename string
        """
        pattern = self.config.export.filename_pattern

        filename = pattern.replace("{since}", window.since)
        filename = filename.replace("{until}", window.until)
        filename = filename.replace("{date}", datetime.now().strftime("%Y-%m-%d"))
        filename = f"{filename}.{options.file_extension}"

        logger.debug(f"Generated filename: {filename}")
        return filename

    def save_to_file(
        self,
        result: ExtractionResult,
        window: QueryWindow,
        options: Optional[ExportOptions] = None,
        output_path: Optional[Path] = None,
    ) -> Path:
        """
        Export an extraction result and save to file.

        Args:
            result: ExtractionResult to export
            window: Query window the result covers (used in the filename)
            options: Export options. If None, uses defaults.
            output_path: Optional explicit output path.
                        If None, uses config export directory.

        Returns:
            Path to saved file
        """
        if options is None:
            options = ExportOptions(format=self.config.export.default_format)

        content = self.export(result, options)

        if output_path is None:
            output_path = self.config.get_export_directory() / self.generate_filename(window, options)

        output_path.parent.mkdir(parents=True, exist_ok=True)
        output_path.write_text(content, encoding="utf-8")
        logger.info(f"Export saved to: {output_path}")

        return output_path
