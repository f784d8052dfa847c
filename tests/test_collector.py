"""Tests for commit log parsing and multi-repository collection."""

import logging

import pytest

from timesheet.collector import (
    CommitCollector,
    parse_log_line,
    parse_log_output,
    project_label,
)
from timesheet.types import CommitRecord, QueryWindow
from worklog.git_log import GitQueryError


def make_runner(outputs):
    """Build a fake git runner: path -> stdout, or an exception to raise."""
    calls = []

    def runner(repo_path, window, author):
        calls.append((str(repo_path), window, author))
        value = outputs[str(repo_path)]
        if isinstance(value, Exception):
            raise value
        return value

    runner.calls = calls
    return runner


def test_parse_line_splits_on_first_separator():
    record = parse_log_line("2024-01-02 | fix: a | b thing", "api")
    assert record == CommitRecord(date="2024-01-02", message="fix: a | b thing", project="api")


def test_parse_line_keeps_empty_subject():
    record = parse_log_line("2024-01-02 | ", "api")
    assert record.date == "2024-01-02"
    assert record.message == ""


def test_parse_line_without_separator_uses_whole_line(caplog):
    with caplog.at_level(logging.WARNING):
        record = parse_log_line("garbage line", "api")
    assert record.date == ""
    assert record.message == "garbage line"
    assert "Malformed log line" in caplog.text


def test_parse_output_skips_blank_lines_and_keeps_order():
    output = "2024-01-03 | third\r\n\n2024-01-01 | first\n"
    records = parse_log_output(output, "web")
    assert [r.message for r in records] == ["third", "first"]
    assert all(r.project == "web" for r in records)


@pytest.mark.parametrize("path,expected", [
    ("/home/me/dev/api", "api"),
    ("/home/me/dev/api/", "api"),
    ("D:/sapper-unified-ui-react", "sapper-unified-ui-react"),
    ("C:\\work\\apaas-3-ui", "apaas-3-ui"),
    ("relative", "relative"),
])
def test_project_label(path, expected):
    assert project_label(path) == expected


def test_collect_concatenates_in_path_order(config, window):
    runner = make_runner({
        "/r/one": "2024-01-05 | newest\n2024-01-02 | older",
        "/r/two": "2024-01-03 | middle",
    })
    result = CommitCollector(config, runner=runner).collect(["/r/one", "/r/two"], window, "me@x.io")

    assert [(r.project, r.message) for r in result.records] == [
        ("one", "newest"),
        ("one", "older"),
        ("two", "middle"),
    ]
    assert result.succeeded
    assert result.projects == ["one", "two"]
    assert runner.calls == [("/r/one", window, "me@x.io"), ("/r/two", window, "me@x.io")]


def test_failed_sources_are_skipped_and_reported(config, window, caplog):
    runner = make_runner({
        "/missing": GitQueryError("/missing", "FileNotFoundError: no such directory"),
        "/ok": "2024-01-02 | works",
        "/broken": RuntimeError("boom"),
    })
    with caplog.at_level(logging.WARNING):
        result = CommitCollector(config, runner=runner).collect(["/missing", "/ok", "/broken"], window, "")

    assert [r.message for r in result.records] == ["works"]
    assert [f.path for f in result.failures] == ["/missing", "/broken"]
    assert result.failures[0].reason == "FileNotFoundError: no such directory"
    assert "RuntimeError: boom" in result.failures[1].reason
    assert not result.succeeded
    assert "Skipping /missing" in caplog.text


def test_all_sources_failing_yields_empty_result(config, window):
    runner = make_runner({
        "/a": GitQueryError("/a", "not a git repository"),
        "/b": GitQueryError("/b", "not a git repository"),
    })
    result = CommitCollector(config, runner=runner).collect(["/a", "/b"], window, "")
    assert result.records == []
    assert len(result.failures) == 2


def test_empty_path_list(config, window):
    result = CommitCollector(config, runner=make_runner({})).collect([], window, "")
    assert result.records == []
    assert result.failures == []


def test_defaults_come_from_config(config):
    config.collection.repositories = ["/r/one"]
    config.collection.author = "dev@example.com"
    config.collection.since = "2024-02-01"
    config.collection.until = "2024-02-29"
    runner = make_runner({"/r/one": "2024-02-10 | x"})

    result = CommitCollector(config, runner=runner).collect()

    assert len(result.records) == 1
    assert runner.calls == [("/r/one", QueryWindow("2024-02-01", "2024-02-29"), "dev@example.com")]


def test_missing_window_raises(config):
    with pytest.raises(ValueError):
        CommitCollector(config, runner=make_runner({})).collect(["/r"])


def test_should_stop_returns_partial_result(config, window):
    runner = make_runner({"/a": "2024-01-02 | a", "/b": "2024-01-03 | b"})
    stops = iter([False, True])

    result = CommitCollector(config, runner=runner).collect(
        ["/a", "/b"], window, "", should_stop=lambda: next(stops)
    )

    assert [r.message for r in result.records] == ["a"]
    assert len(runner.calls) == 1


def test_progress_callback_reports_each_source(config, window):
    runner = make_runner({"/a": "", "/b": ""})
    updates = []

    CommitCollector(config, runner=runner).collect(["/a", "/b"], window, "", progress_callback=updates.append)

    assert [u.phase for u in updates] == ["collecting", "collecting", "complete"]
    assert [u.current_project for u in updates[:2]] == ["a", "b"]
    assert updates[-1].is_complete
    assert updates[-1].percentage == 100.0


def test_inverted_window_is_passed_through(config):
    runner = make_runner({"/a": ""})
    inverted = QueryWindow("2024-02-01", "2024-01-01")
    assert inverted.is_inverted

    result = CommitCollector(config, runner=runner).collect(["/a"], inverted, "")

    assert result.records == []
    assert runner.calls[0][1] == inverted
