"""
Platform-aware logging configuration for Git Timesheet.

Provides cross-platform logging setup with appropriate default log file locations
for Linux, macOS, and Windows.
"""

import logging
import sys
from pathlib import Path
from typing import Optional

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
LOG_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def get_default_log_file() -> Path:
    """
    Get the default log file path based on the current platform.

    Returns:
        Path: Platform-specific log file path
            - Linux: ~/.local/state/git-timesheet/timesheet.log
            - macOS: ~/Library/Logs/GitTimesheet/timesheet.log
            - Windows: %LOCALAPPDATA%\\GitTimesheet\\timesheet.log
    """
    if sys.platform == "darwin":
        log_dir = Path.home() / "Library" / "Logs" / "GitTimesheet"
    elif sys.platform == "win32":
        log_dir = Path.home() / "AppData" / "Local" / "GitTimesheet"
    else:
        log_dir = Path.home() / ".local" / "state" / "git-timesheet"

    log_dir.mkdir(parents=True, exist_ok=True)
    return log_dir / "timesheet.log"


def setup_logging(
    level: int = logging.INFO,
    log_file: Optional[Path] = None,
    console: bool = True,
) -> logging.Logger:
    """
    Set up logging with file and/or console handlers.

    Console output goes to stderr so that timesheet output on stdout
    stays clean for piping.

    Args:
        level: Logging level (e.g., logging.DEBUG, logging.INFO)
        log_file: Path to log file. If None, uses platform default.
        console: Whether to enable console logging

    Returns:
        logging.Logger: Configured root logger
    """
    logger = logging.getLogger()
    logger.setLevel(level)
    logger.handlers.clear()

    formatter = logging.Formatter(fmt=LOG_FORMAT, datefmt=LOG_DATE_FORMAT)

    try:
        if log_file is None:
            log_file = get_default_log_file()
        file_handler = logging.FileHandler(log_file, encoding="utf-8")
        file_handler.setLevel(level)
        file_handler.setFormatter(formatter)
        logger.addHandler(file_handler)
    except OSError as e:
        print(f"Warning: Could not set up file logging at {log_file}: {e}", file=sys.stderr)

    if console:
        console_handler = logging.StreamHandler(sys.stderr)
        console_handler.setLevel(level)
        console_handler.setFormatter(formatter)
        logger.addHandler(console_handler)

    return logger


def setup_default_logging(verbose: bool = False, log_file: Optional[Path] = None) -> logging.Logger:
    """
    Set up logging with sensible defaults: DEBUG when verbose, WARNING otherwise.

    Example:
        >>> logger = setup_default_logging(verbose=True)
        >>> logger.debug("Detailed debug information")
    """
    level = logging.DEBUG if verbose else logging.WARNING
    return setup_logging(level=level, log_file=log_file, console=True)
