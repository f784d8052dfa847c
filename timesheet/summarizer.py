"""
Day summarization for Git Timesheet.

Sends every timesheet row to an Ollama-served model in one request and
maps the reply back to dates. Summarization is best-effort: any failure
turns into a placeholder summary per row and never reaches the caller.
"""

from __future__ import annotations

import logging
import re
from typing import Any, Dict, List, Optional, Protocol, Sequence

from ollama import Client

from timesheet.config import TimesheetConfig, get_config
from timesheet.types import DailyRow

logger = logging.getLogger(__name__)

SECTION_DELIMITER = "\n---\n"

_SECTION_SPLIT_RE = re.compile(r"\r?\n[ \t]*-{3,}[ \t]*\r?\n")
_DATE_PREFIX_RE = re.compile(r"^\s*\**(\d{4}-\d{2}-\d{2})\**\s*[:\-]\s*(.*)$", re.DOTALL)

SYSTEM_PROMPT = """
    You are a timesheet assistant.
    For each working day you are given the list of commits made that day.
    Write a short, natural-language summary (1-2 sentences) of the work done.
    Avoid hashes, file paths and project tags in brackets.
    """


class SummarizationError(Exception):
    """Exception raised when the model reply cannot be used."""
    pass


class DaySummarizer(Protocol):
    """Anything that turns rows into a date -> summary mapping."""

    def summarize(self, rows: Sequence[DailyRow]) -> Dict[str, str]:
        ...


def build_prompt(rows: Sequence[DailyRow]) -> str:
    """
    Compose the single user prompt for a batch of rows.

    Each row is listed as `date: summary`; the model is asked to answer in
    the same order, one section per date, each starting with the date.
    """
    lines = [f"{row.date}: {row.summary}" for row in rows]
    return (
        "Summarize each day below.\n\n"
        + "\n".join(lines)
        + "\n\nReply with exactly one section per day, in the same order. "
        "Start each section with the date followed by a colon. "
        "Separate sections with a line containing only ---. No preface, no headers."
    )


def split_sections(text: str) -> List[str]:
    sections = _SECTION_SPLIT_RE.split(text.strip())
    return [s.strip() for s in sections if s.strip()]


def parse_response(text: Optional[str], rows: Sequence[DailyRow], placeholder: str) -> Dict[str, str]:
    """
    Map a model reply back onto row dates.

    Sections that start with one of the requested dates are matched by date
    and their order does not matter; any other section (a preface, a sign-off)
    is ignored. Only when no section carries a requested date are sections
    aligned with rows by position. Rows left without a section get the
    placeholder.

    Args:
        text: Raw reply body
        rows: Rows that were sent, in request order
        placeholder: Text for rows with no usable summary

    Returns:
        Dictionary mapping every row date to a summary string
    """
    result = {row.date: placeholder for row in rows}
    if not text or not text.strip():
        logger.warning("Empty summarization reply, using placeholders")
        return result

    sections = split_sections(text)
    requested = set(result)
    keyed: Dict[str, str] = {}
    for section in sections:
        m = _DATE_PREFIX_RE.match(section)
        if m and m.group(1) in requested:
            keyed.setdefault(m.group(1), m.group(2).strip())

    if keyed:
        logger.debug(f"Matched {len(keyed)} of {len(sections)} sections by date")
        for date, summary in keyed.items():
            if summary:
                result[date] = summary
        return result

    if len(sections) != len(rows):
        logger.warning(f"Got {len(sections)} summaries for {len(rows)} rows, aligning by position")

    for row, section in zip(rows, sections):
        m = _DATE_PREFIX_RE.match(section)
        if m and m.group(1) == row.date:
            section = m.group(2).strip()
        if section:
            result[row.date] = section
    return result


class PlaceholderSummarizer:
    """Summarizer used when the LLM is disabled; never touches the network."""

    def __init__(self, placeholder: str):
        self.placeholder = placeholder

    def summarize(self, rows: Sequence[DailyRow]) -> Dict[str, str]:
        return {row.date: self.placeholder for row in rows}


class OllamaDaySummarizer:
    """
    Summarizer backed by an Ollama chat model.

    One chat request is made per batch of rows, not per row.
    """

    def __init__(self, config: Optional[TimesheetConfig] = None, client: Optional[Any] = None):
        """
        Initialize the summarizer.

        Args:
            config: Configuration instance. If None, uses global config.
            client: Pre-built Ollama client. If None, one is created lazily.
        """
        self.config = config if config is not None else get_config()
        self._client = client
        logger.debug(f"OllamaDaySummarizer using model {self.config.ollama.model}")

    @property
    def placeholder(self) -> str:
        return self.config.rows.placeholder_summary

    def _get_client(self) -> Any:
        if self._client is None:
            logger.info(f"Connecting to Ollama at {self.config.ollama.endpoint}")
            self._client = Client(host=self.config.ollama.endpoint, timeout=self.config.ollama.timeout)
        return self._client

    def _request(self, prompt: str) -> str:
        """
        Send the prompt and return the reply text.

        Raises:
            SummarizationError: If the reply has no text content
        """
        resp = self._get_client().chat(
            model=self.config.ollama.model,
            messages=[
                {"role": "system", "content": SYSTEM_PROMPT.strip()},
                {"role": "user", "content": prompt},
            ],
        )
        try:
            content = resp["message"]["content"]
        except (KeyError, TypeError) as e:
            raise SummarizationError(f"Malformed response: {e}") from e
        if not isinstance(content, str) or not content.strip():
            raise SummarizationError("Empty response from model")
        logger.debug(f"Received response from Ollama ({len(content)} chars)")
        return content

    def summarize(self, rows: Sequence[DailyRow]) -> Dict[str, str]:
        """
        Summarize every row in one request.

        Args:
            rows: Timesheet rows to summarize

        Returns:
            Dictionary mapping each row date to a generated or placeholder summary
        """
        if not rows:
            return {}

        logger.info(f"Requesting day summaries for {len(rows)} rows")
        try:
            content = self._request(build_prompt(rows))
        except Exception as e:
            logger.warning(f"Day summarization failed: {type(e).__name__}: {e}, using placeholders")
            return {row.date: self.placeholder for row in rows}

        return parse_response(content, rows, self.placeholder)


def make_summarizer(config: Optional[TimesheetConfig] = None) -> DaySummarizer:
    """Return an Ollama summarizer, or a placeholder one if the LLM is disabled."""
    config = config if config is not None else get_config()
    if not config.ollama.enabled:
        logger.info("LLM summarization disabled in config")
        return PlaceholderSummarizer(config.rows.placeholder_summary)
    return OllamaDaySummarizer(config)


def check_connection(config: Optional[TimesheetConfig] = None, client: Optional[Any] = None) -> Dict[str, Any]:
    """
    Test the Ollama connection and return status information.

    Returns:
        Dictionary with:
            - available (bool): Whether the server answered
            - models (list): List of available model names
            - error (str|None): Error message if unavailable
    """
    config = config if config is not None else get_config()

    if not config.ollama.enabled:
        return {"available": False, "models": [], "error": "LLM summarization disabled in configuration"}

    try:
        if client is None:
            client = Client(host=config.ollama.endpoint, timeout=config.ollama.timeout)
        models_response = client.list()

        available_models: List[str] = []
        if hasattr(models_response, "models"):
            available_models = [model.model for model in models_response.models]
        elif isinstance(models_response, dict) and "models" in models_response:
            available_models = [m.get("name", m.get("model", "")) for m in models_response["models"]]

        logger.info(f"Ollama connection successful, {len(available_models)} models available")
        return {"available": True, "models": available_models, "error": None}

    except Exception as e:
        logger.error(f"Ollama connection test failed: {e}")
        return {"available": False, "models": [], "error": str(e)}
