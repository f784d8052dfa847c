# worklog/git_log.py
from __future__ import annotations

import logging
import os
import subprocess
from pathlib import Path
from typing import TYPE_CHECKING, List, Optional, Union

if TYPE_CHECKING:
    from timesheet.types import QueryWindow

logger = logging.getLogger(__name__)

LOG_FORMAT = "%ad | %s"


class GitQueryError(Exception):
    """Raised when `git log` cannot be run for a repository."""

    def __init__(self, repo_path: Union[str, Path], reason: str):
        self.repo_path = str(repo_path)
        self.reason = reason
        super().__init__(f"{self.repo_path}: {reason}")


def find_git_repos(root_path: Path) -> list[Path]:
    git_repos = []
    for dirpath, dirnames, filenames in os.walk(root_path):
        if ".git" in dirnames or ".git" in filenames:
            git_repos.append(Path(dirpath))
            dirnames[:] = []  # Don't recurse into subfolders
    return sorted(git_repos)


def build_log_command(window: QueryWindow, author: Optional[str] = None) -> List[str]:
    cmd = [
        "git", "log",
        "--all",
        f"--since={window.since} 00:00",
        f"--until={window.until} 23:59:59",
        f"--pretty=format:{LOG_FORMAT}",
        "--date=short",
    ]
    if author:
        cmd.append(f"--author={author}")
    return cmd


def run_git_log(
    repo_path: Union[str, Path],
    window: QueryWindow,
    author: Optional[str] = None,
) -> str:
    """
    Run `git log` inside repo_path and return its stdout.

    Raises:
        GitQueryError: If the path is missing, git is unavailable, or git exits non-zero
    """
    cmd = build_log_command(window, author)
    logger.debug(f"Running {cmd} in {repo_path}")

    try:
        result = subprocess.run(
            cmd,
            cwd=repo_path,
            stdout=subprocess.PIPE,
            stderr=subprocess.PIPE,
            text=True,
            encoding="utf-8",
            errors="replace",
        )
    except OSError as e:
        # cwd missing / not a directory, or git binary not found
        raise GitQueryError(repo_path, f"{type(e).__name__}: {e}") from e

    if result.returncode != 0:
        stderr = (result.stderr or "").strip() or f"git exited with status {result.returncode}"
        raise GitQueryError(repo_path, stderr)

    return result.stdout
