import logging
import sys
from pathlib import Path

import click

from timesheet.aggregator import apply_summaries, extract_timesheet
from timesheet.config import TimesheetConfig, get_config, reload_config
from timesheet.exporter import Exporter
from timesheet.summarizer import check_connection, make_summarizer
from timesheet.types import ExportOptions, QueryWindow
from worklog.date_utils import resolve_date_range
from worklog.git_log import find_git_repos
from worklog.logging_config import setup_default_logging

logger = logging.getLogger(__name__)

FORMATS = ["table", "raw", "json", "csv", "markdown"]


@click.group()
@click.option('--verbose', '-v', is_flag=True, help="Enable verbose (DEBUG level) logging")
@click.option('--quiet', '-q', is_flag=True, help="Suppress all logging output")
@click.option('--config', 'config_path', type=click.Path(dir_okay=False, path_type=Path),
              help="Path to a YAML config file")
@click.pass_context
def cli(ctx, verbose, quiet, config_path):
    """Git Timesheet - turn your commits into daily timesheet rows."""
    ctx.ensure_object(dict)

    if quiet:
        logging.disable(logging.CRITICAL)
    else:
        setup_default_logging(verbose=verbose)

    try:
        ctx.obj['config'] = reload_config(config_path) if config_path else get_config()
    except (FileNotFoundError, ValueError) as e:
        raise click.ClickException(str(e))

    logger.debug(f"CLI initialized (verbose={verbose}, quiet={quiet})")


def _resolve_window(config: TimesheetConfig, mode, since, until) -> QueryWindow:
    if mode is None:
        configured = config.get_window()
        if not since and not until and configured is not None:
            return configured
        mode = "custom" if since else "weekly"
    since, until = resolve_date_range(mode, since, until)
    return QueryWindow(since, until)


def _format_table(result) -> str:
    if not result.table_rows:
        return "No commits found in the selected period."
    lines = []
    for row in result.table_rows:
        lines.append(f"{row.date} | {row.task} | {row.hours}h | {row.summary}")
    return "\n".join(lines)


@cli.command()
@click.option('--repo', 'repos', multiple=True, help="Repository path to read (repeatable)")
@click.option('--root', type=click.Path(file_okay=False), help="Also read every Git repo found under this folder")
@click.option('--author', default=None, help="Author filter (defaults to the configured author)")
@click.option('--mode', type=click.Choice(["today", "weekly", "monthly", "custom"]), default=None,
              help="Date window mode; custom requires --since")
@click.option('--since', default=None, help="Window start, YYYY-MM-DD")
@click.option('--until', default=None, help="Window end, YYYY-MM-DD")
@click.option('--format', 'fmt', type=click.Choice(FORMATS), default="table", help="Output format")
@click.option('--summarize', is_flag=True, help="Replace row summaries with LLM day summaries")
@click.option('--output', type=click.Path(dir_okay=False, path_type=Path), help="Optional: Path to save output")
@click.option('--save', is_flag=True, help="Save to the configured export directory")
@click.pass_context
def extract(ctx, repos, root, author, mode, since, until, fmt, summarize, output, save):
    """Collect commits and print daily timesheet rows."""
    config: TimesheetConfig = ctx.obj['config']
    window = _resolve_window(config, mode, since, until)

    paths = list(repos) or config.get_repository_paths()
    if root:
        paths += [str(p) for p in find_git_repos(Path(root).expanduser())]
    if not paths:
        raise click.UsageError("No repositories given. Use --repo, --root, or set collection.repositories.")

    logger.info(f"Starting extract (repos={len(paths)}, window={window.since}..{window.until})")

    try:
        result = extract_timesheet(paths, window, author, config=config)

        for failure in result.failures:
            click.echo(f"⚠️  Skipped {failure.path}: {failure.reason}", err=True)

        if summarize and result.table_rows:
            summaries = make_summarizer(config).summarize(result.table_rows)
            result.table_rows = apply_summaries(result.table_rows, summaries)

        exporter = Exporter(config)
        if fmt == "table":
            click.echo(_format_table(result))
        else:
            click.echo(exporter.export(result, ExportOptions(format=fmt)))

        if output or save:
            # table output is saved in the configured export format
            file_format = config.export.default_format if fmt == "table" else fmt
            saved = exporter.save_to_file(
                result, window, ExportOptions(format=file_format), output_path=output
            )
            click.echo(f"\n✅ Saved to {saved}", err=True)

    except Exception as e:
        logger.error(f"Unexpected error in extract command: {type(e).__name__}: {e}", exc_info=True)
        click.echo(f"\n❌ Unexpected error: {e}", err=True)
        sys.exit(1)


@cli.command()
@click.pass_context
def check(ctx):
    """Check the Ollama connection and list available models."""
    config: TimesheetConfig = ctx.obj['config']
    click.echo(f"🔍 Checking Ollama at {config.ollama.endpoint}...\n")

    status = check_connection(config)
    if not status["available"]:
        click.echo(f"❌ Ollama check failed:\n{status['error']}", err=True)
        sys.exit(1)

    click.echo("✅ Successfully connected to Ollama server")
    click.echo("\n📦 Available models:")
    if not status["models"]:
        click.echo("   (No models found)")
    for model in status["models"]:
        marker = "✓" if config.ollama.model in model else "-"
        click.echo(f"   {marker} {model}")

    if not any(config.ollama.model in m for m in status["models"]):
        click.echo(f"\n⚠️  Warning: {config.ollama.model} model not found")
        click.echo(f"   Run: ollama pull {config.ollama.model}")
        sys.exit(1)


@cli.command('init-config')
@click.argument('path', type=click.Path(dir_okay=False, path_type=Path), default="timesheet.yaml")
@click.option('--force', is_flag=True, help="Overwrite an existing file")
def init_config(path, force):
    """Write a default configuration file."""
    if path.exists() and not force:
        raise click.ClickException(f"{path} already exists (use --force to overwrite)")
    saved = TimesheetConfig().save(path)
    click.echo(f"✅ Wrote default configuration to {saved}")


if __name__ == "__main__":
    cli()
