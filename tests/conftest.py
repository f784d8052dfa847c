"""Shared fixtures for Git Timesheet tests."""

import logging

import pytest

from timesheet import config as config_module
from timesheet.config import TimesheetConfig
from timesheet.types import CommitRecord, QueryWindow


@pytest.fixture(autouse=True)
def isolated_environment(monkeypatch, tmp_path):
    """Keep tests away from real config files, env overrides, and log handlers."""
    for var in ("TIMESHEET_AUTHOR", "TIMESHEET_REPOS", "TIMESHEET_MODEL", "TIMESHEET_OLLAMA_ENDPOINT"):
        monkeypatch.delenv(var, raising=False)
    monkeypatch.setenv("HOME", str(tmp_path / "home"))
    monkeypatch.chdir(tmp_path)
    monkeypatch.setattr(config_module, "_global_config", None)

    root = logging.getLogger()
    saved_handlers = list(root.handlers)
    saved_level = root.level
    yield
    logging.disable(logging.NOTSET)
    root.handlers[:] = saved_handlers
    root.setLevel(saved_level)


@pytest.fixture
def config():
    return TimesheetConfig()


@pytest.fixture
def window():
    return QueryWindow("2024-01-01", "2024-01-31")


@pytest.fixture
def sample_records():
    return [
        CommitRecord(date="2024-01-02", project="p1", message="A"),
        CommitRecord(date="2024-01-02", project="p2", message="B"),
        CommitRecord(date="2024-01-01", project="p1", message="C"),
    ]
