"""
Configuration management system for Git Timesheet.

Provides YAML-based configuration with environment variable overrides,
automatic config file discovery, and sensible defaults. Repository paths
and author identity are never hardcoded; they come from the config file,
the environment, or the caller.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field, asdict
from pathlib import Path
from typing import List, Optional

import yaml

from timesheet.types import QueryWindow
from worklog.date_utils import get_today_date

logger = logging.getLogger(__name__)

DEFAULT_TASK = "Development Work"
DEFAULT_HOURS = 8
DEFAULT_PLACEHOLDER_SUMMARY = "Summary unavailable"


@dataclass
class CollectionConfig:
    """
    Configuration for commit collection.

    Attributes:
        repositories: Local repository paths to query, in order
        author: Author filter passed to git log (empty = all authors)
        since: Default window start (YYYY-MM-DD), None = resolved by mode
        until: Default window end (YYYY-MM-DD), None = resolved by mode
    """
    repositories: List[str] = field(default_factory=list)
    author: str = ""
    since: Optional[str] = None
    until: Optional[str] = None


@dataclass
class RowConfig:
    """
    Placeholder values written into every timesheet row.

    Attributes:
        task: Task label for each row
        hours: Hours value for each row
        placeholder_summary: Text used when day summarization fails
    """
    task: str = DEFAULT_TASK
    hours: float = DEFAULT_HOURS
    placeholder_summary: str = DEFAULT_PLACEHOLDER_SUMMARY


@dataclass
class OllamaConfig:
    """
    Configuration for Ollama LLM integration.

    Attributes:
        enabled: Whether to use Ollama for day summaries
        model: Model name to use (e.g., "llama3")
        endpoint: Ollama server endpoint URL
        timeout: Request timeout in seconds
    """
    enabled: bool = True
    model: str = "llama3"
    endpoint: str = "http://localhost:11434"
    timeout: int = 120


@dataclass
class ExportConfig:
    """
    Configuration for exporting timesheets.

    Attributes:
        default_format: Default export format (markdown, csv, json, raw)
        output_directory: Directory to save exported files
        filename_pattern: Pattern for export filenames (supports {since}, {until}, {date})
    """
    default_format: str = "markdown"
    output_directory: str = "~/Downloads"
    filename_pattern: str = "timesheet_{since}_{until}"


@dataclass
class TimesheetConfig:
    """
    Complete Git Timesheet configuration.

    Aggregates all configuration sections and provides methods for
    loading, saving, and managing configuration files.
    """
    collection: CollectionConfig = field(default_factory=CollectionConfig)
    rows: RowConfig = field(default_factory=RowConfig)
    ollama: OllamaConfig = field(default_factory=OllamaConfig)
    export: ExportConfig = field(default_factory=ExportConfig)

    @classmethod
    def load(cls, config_path: Optional[Path] = None) -> TimesheetConfig:
        """
        Load configuration from a YAML file or discover default config file.

        Args:
            config_path: Explicit path to config file. If None, searches default locations.

        Returns:
            TimesheetConfig instance with loaded settings

        Raises:
            FileNotFoundError: If explicit config_path is provided but doesn't exist
            ValueError: If the file is not valid YAML or has unknown fields
        """
        if config_path is not None:
            if not config_path.exists():
                raise FileNotFoundError(f"Configuration file not found: {config_path}")
            logger.info(f"Loading configuration from: {config_path}")
            return cls._load_from_file(config_path)

        found_config = cls._find_config_file()
        if found_config:
            logger.info(f"Found configuration file: {found_config}")
            return cls._load_from_file(found_config)

        logger.info("No configuration file found, using defaults")
        return cls.from_dict({})

    @classmethod
    def _find_config_file(cls) -> Optional[Path]:
        """
        Search for configuration file in default locations.

        Search order:
            1. ./timesheet.yaml
            2. ./config.yaml
            3. ~/.timesheet/config.yaml
            4. ~/.config/timesheet/config.yaml

        Returns:
            Path to first found config file, or None
        """
        search_paths = [
            Path.cwd() / "timesheet.yaml",
            Path.cwd() / "config.yaml",
            Path.home() / ".timesheet" / "config.yaml",
            Path.home() / ".config" / "timesheet" / "config.yaml",
        ]

        for path in search_paths:
            if path.exists() and path.is_file():
                logger.debug(f"Found config file at: {path}")
                return path

        logger.debug("No config file found in default locations")
        return None

    @classmethod
    def _load_from_file(cls, config_path: Path) -> TimesheetConfig:
        """
        Parse YAML configuration file and create config instance.

        Args:
            config_path: Path to YAML configuration file

        Returns:
            TimesheetConfig instance populated from file
        """
        try:
            with open(config_path, "r", encoding="utf-8") as f:
                data = yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            logger.error(f"Failed to parse YAML config: {e}")
            raise ValueError(f"Invalid YAML configuration: {e}") from e

        if not isinstance(data, dict):
            raise ValueError(f"Configuration root must be a mapping, got {type(data).__name__}")

        logger.debug(f"Loaded configuration data: {data}")
        config = cls.from_dict(data)
        logger.info("Configuration loaded successfully")
        return config

    @classmethod
    def from_dict(cls, data: dict) -> TimesheetConfig:
        """
        Build a config from nested dictionaries, applying environment overrides.

        Raises:
            ValueError: If a section contains unknown fields
        """
        data = cls._apply_env_overrides(data)

        try:
            return cls(
                collection=CollectionConfig(**(data.get("collection") or {})),
                rows=RowConfig(**(data.get("rows") or {})),
                ollama=OllamaConfig(**(data.get("ollama") or {})),
                export=ExportConfig(**(data.get("export") or {})),
            )
        except TypeError as e:
            logger.error(f"Invalid configuration structure: {e}")
            raise ValueError(f"Configuration has invalid fields: {e}") from e

    @classmethod
    def _apply_env_overrides(cls, data: dict) -> dict:
        """
        Override configuration values with environment variables.

        Supported environment variables:
            - TIMESHEET_AUTHOR: Overrides collection.author
            - TIMESHEET_REPOS: Overrides collection.repositories (os.pathsep separated)
            - TIMESHEET_MODEL: Overrides ollama.model
            - TIMESHEET_OLLAMA_ENDPOINT: Overrides ollama.endpoint

        Args:
            data: Configuration dictionary

        Returns:
            Modified configuration dictionary with env var overrides
        """
        data = dict(data)
        data["collection"] = dict(data.get("collection") or {})
        data["ollama"] = dict(data.get("ollama") or {})

        if "TIMESHEET_AUTHOR" in os.environ:
            data["collection"]["author"] = os.environ["TIMESHEET_AUTHOR"]
            logger.debug(f"Applied TIMESHEET_AUTHOR override: {os.environ['TIMESHEET_AUTHOR']}")

        if "TIMESHEET_REPOS" in os.environ:
            repos = [p for p in os.environ["TIMESHEET_REPOS"].split(os.pathsep) if p.strip()]
            data["collection"]["repositories"] = repos
            logger.debug(f"Applied TIMESHEET_REPOS override: {repos}")

        if "TIMESHEET_MODEL" in os.environ:
            data["ollama"]["model"] = os.environ["TIMESHEET_MODEL"]
            logger.debug(f"Applied TIMESHEET_MODEL override: {os.environ['TIMESHEET_MODEL']}")

        if "TIMESHEET_OLLAMA_ENDPOINT" in os.environ:
            data["ollama"]["endpoint"] = os.environ["TIMESHEET_OLLAMA_ENDPOINT"]
            logger.debug(
                f"Applied TIMESHEET_OLLAMA_ENDPOINT override: {os.environ['TIMESHEET_OLLAMA_ENDPOINT']}"
            )

        return data

    def save(self, config_path: Optional[Path] = None) -> Path:
        """
        Save configuration to a YAML file.

        Args:
            config_path: Path to save config file. If None, saves to ~/.timesheet/config.yaml

        Returns:
            Path the configuration was written to
        """
        if config_path is None:
            config_path = Path.home() / ".timesheet" / "config.yaml"

        config_path.parent.mkdir(parents=True, exist_ok=True)
        data = asdict(self)

        try:
            with open(config_path, "w", encoding="utf-8") as f:
                yaml.safe_dump(data, f, default_flow_style=False, sort_keys=False)
            logger.info(f"Configuration saved to: {config_path}")
        except OSError as e:
            logger.error(f"Failed to save configuration: {e}", exc_info=True)
            raise

        return config_path

    def get_repository_paths(self) -> List[str]:
        """Return configured repository paths with ~ expanded."""
        return [os.path.expanduser(p) for p in self.collection.repositories]

    def get_window(self) -> Optional[QueryWindow]:
        """
        Return the configured query window, if a start date is set.

        A missing `until` defaults to today, the same as `--since` alone.

        Returns:
            QueryWindow or None
        """
        if self.collection.since:
            until = self.collection.until or get_today_date()
            return QueryWindow(str(self.collection.since), str(until))
        return None

    def get_export_directory(self) -> Path:
        """
        Get the export directory with ~ expansion.

        Returns:
            Fully expanded Path object
        """
        export_dir = Path(os.path.expanduser(self.export.output_directory))
        export_dir.mkdir(parents=True, exist_ok=True)
        return export_dir


# Global configuration instance
_global_config: Optional[TimesheetConfig] = None


def get_config() -> TimesheetConfig:
    """
    Get or create the global configuration instance.

    Returns:
        Global TimesheetConfig instance
    """
    global _global_config

    if _global_config is None:
        logger.debug("Initializing global configuration")
        _global_config = TimesheetConfig.load()

    return _global_config


def reload_config(config_path: Optional[Path] = None) -> TimesheetConfig:
    """
    Reload the global configuration from file.

    Args:
        config_path: Optional explicit path to config file

    Returns:
        Reloaded TimesheetConfig instance
    """
    global _global_config

    logger.info("Reloading configuration")
    _global_config = TimesheetConfig.load(config_path)

    return _global_config


def reset_config() -> TimesheetConfig:
    """
    Reset the global configuration to defaults.

    Returns:
        New TimesheetConfig instance with default values
    """
    global _global_config

    logger.info("Resetting configuration to defaults")
    _global_config = TimesheetConfig()

    return _global_config
