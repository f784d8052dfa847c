"""Tests for YAML configuration loading and environment overrides."""

import os
from pathlib import Path

import pytest
import yaml

from timesheet.config import TimesheetConfig, get_config, reload_config, reset_config
from timesheet.types import QueryWindow


def test_defaults_have_no_machine_specific_values():
    config = TimesheetConfig()
    assert config.collection.repositories == []
    assert config.collection.author == ""
    assert config.get_window() is None
    assert config.rows.task == "Development Work"
    assert config.rows.hours == 8


def test_load_from_explicit_file(tmp_path):
    path = tmp_path / "custom.yaml"
    path.write_text(
        """
collection:
  repositories: [~/dev/api, /srv/web]
  author: dev@example.com
  since: 2024-01-01
  until: 2024-01-31
rows:
  hours: 6
ollama:
  model: mistral
""",
        encoding="utf-8",
    )

    config = TimesheetConfig.load(path)

    assert config.collection.author == "dev@example.com"
    assert config.rows.hours == 6
    assert config.ollama.model == "mistral"
    assert config.get_window() == QueryWindow("2024-01-01", "2024-01-31")
    assert config.get_repository_paths() == [os.path.expanduser("~/dev/api"), "/srv/web"]


def test_window_with_since_only_runs_until_today(monkeypatch):
    monkeypatch.setattr("timesheet.config.get_today_date", lambda: "2024-02-10")
    config = TimesheetConfig()
    config.collection.since = "2024-01-01"
    assert config.get_window() == QueryWindow("2024-01-01", "2024-02-10")

    config.collection.since = ""
    config.collection.until = "2024-01-31"
    assert config.get_window() is None


def test_missing_explicit_file_raises(tmp_path):
    with pytest.raises(FileNotFoundError):
        TimesheetConfig.load(tmp_path / "nope.yaml")


def test_invalid_yaml_raises_value_error(tmp_path):
    path = tmp_path / "bad.yaml"
    path.write_text("collection: [unclosed", encoding="utf-8")
    with pytest.raises(ValueError, match="Invalid YAML"):
        TimesheetConfig.load(path)


def test_unknown_field_raises_value_error(tmp_path):
    path = tmp_path / "bad.yaml"
    path.write_text("rows:\n  colour: blue\n", encoding="utf-8")
    with pytest.raises(ValueError, match="invalid fields"):
        TimesheetConfig.load(path)


def test_discovers_config_in_working_directory(tmp_path):
    (tmp_path / "timesheet.yaml").write_text("collection:\n  author: found@example.com\n", encoding="utf-8")
    assert TimesheetConfig.load().collection.author == "found@example.com"


def test_no_config_file_uses_defaults():
    assert TimesheetConfig.load() == TimesheetConfig()


def test_environment_overrides(monkeypatch, tmp_path):
    monkeypatch.setenv("TIMESHEET_AUTHOR", "env@example.com")
    monkeypatch.setenv("TIMESHEET_REPOS", os.pathsep.join(["/a", "/b", ""]))
    monkeypatch.setenv("TIMESHEET_MODEL", "qwen")
    monkeypatch.setenv("TIMESHEET_OLLAMA_ENDPOINT", "http://gpu:11434")
    path = tmp_path / "c.yaml"
    path.write_text("collection:\n  author: file@example.com\n", encoding="utf-8")

    config = TimesheetConfig.load(path)

    assert config.collection.author == "env@example.com"
    assert config.collection.repositories == ["/a", "/b"]
    assert config.ollama.model == "qwen"
    assert config.ollama.endpoint == "http://gpu:11434"


def test_save_round_trips(tmp_path):
    config = TimesheetConfig()
    config.collection.author = "me@example.com"
    config.collection.repositories = ["/r/one"]

    path = config.save(tmp_path / "out" / "config.yaml")

    data = yaml.safe_load(path.read_text(encoding="utf-8"))
    assert data["collection"]["author"] == "me@example.com"
    assert TimesheetConfig.load(path) == config


def test_global_config_helpers(tmp_path):
    first = get_config()
    assert get_config() is first

    path = tmp_path / "g.yaml"
    path.write_text("rows:\n  task: Review\n", encoding="utf-8")
    assert reload_config(Path(path)).rows.task == "Review"
    assert get_config().rows.task == "Review"

    assert reset_config().rows.task == "Development Work"
