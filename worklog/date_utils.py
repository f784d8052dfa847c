from __future__ import annotations

import re
from datetime import datetime, timedelta
from typing import Optional, Tuple

import click

DATE_FORMAT = "%Y-%m-%d"
_ISO_DATE_RE = re.compile(r"^\d{4}-\d{2}-\d{2}$")


def get_today_date() -> str:
    return datetime.now().strftime(DATE_FORMAT)


def get_past_days_date(days: int) -> str:
    return (datetime.now() - timedelta(days=days)).strftime(DATE_FORMAT)


def get_first_day_of_month() -> str:
    return datetime.now().replace(day=1).strftime(DATE_FORMAT)


def validate_date(value: str, param_name: str = "date") -> str:
    if not _ISO_DATE_RE.match(value):
        raise click.BadParameter(f"{param_name} must be YYYY-MM-DD, got {value!r}")
    try:
        datetime.strptime(value, DATE_FORMAT)
    except ValueError:
        raise click.BadParameter(f"{param_name} must be YYYY-MM-DD, got {value!r}")
    return value


def resolve_date_range(mode: str, since: Optional[str] = None, until: Optional[str] = None) -> Tuple[str, str]:
    """Convert a mode string plus optional explicit bounds into (since, until)."""
    mode = mode.lower()
    if since:
        since = validate_date(since, "--since")
    if until:
        until = validate_date(until, "--until")

    if mode == "custom":
        if not since:
            raise click.BadParameter("custom mode requires --since YYYY-MM-DD")
        return since, until or get_today_date()
    elif mode == "today":
        default_since = get_today_date()
    elif mode == "weekly":
        default_since = get_past_days_date(7)
    elif mode == "monthly":
        default_since = get_first_day_of_month()
    else:
        raise click.BadParameter("Invalid --mode. Use today, weekly, monthly, or custom")

    return since or default_since, until or get_today_date()
