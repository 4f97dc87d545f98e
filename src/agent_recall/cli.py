from __future__ import annotations

import logging
from datetime import datetime
from pathlib import Path

import typer
from rich.console import Console
from rich.logging import RichHandler

from agent_recall.adapters import parse_session_file
from agent_recall.config import SOURCES, default_input_paths
from agent_recall.models import DEFAULT_LIMIT, SearchOptions
from agent_recall.render import render_results_json, render_results_table, render_session_json
from agent_recall.search import search_sessions
from agent_recall.utils import parse_iso_datetime

app = typer.Typer(
    help="Claude Code & Pi Agent session search: what did we do, and where did we leave off.",
    no_args_is_help=True,
)


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
        force=True,
    )


def _parse_date(value: str | None, flag: str) -> datetime | None:
    if value is None:
        return None
    try:
        return parse_iso_datetime(value.strip())
    except ValueError:
        raise typer.BadParameter(f"Invalid date format for {flag}: {value}") from None


def _split_tools(value: str | None) -> tuple[str, ...] | None:
    if not value:
        return None
    tools = tuple(t.strip() for t in value.split(",") if t.strip())
    return tools or None


def _resolve_directories(source: str, dirs: list[Path] | None) -> list[Path]:
    if dirs:
        return [d.expanduser() for d in dirs]
    return default_input_paths(source)


@app.command("search")
def search_command(
    query: str | None = typer.Option(None, "--query", "-q", help="Search sessions by text."),
    days: int | None = typer.Option(None, "--days", "-d", help="Limit to sessions ended in the last N days."),
    since: str | None = typer.Option(None, "--since", help="Sessions ended after this date (YYYY-MM-DD)."),
    until: str | None = typer.Option(None, "--until", help="Sessions ended before this date (YYYY-MM-DD)."),
    tools: str | None = typer.Option(None, "--tools", "-t", help="Filter by tools (comma-separated)."),
    file_pattern: str | None = typer.Option(None, "--file-pattern", "-f", help="Filter by file path substring."),
    limit: int = typer.Option(DEFAULT_LIMIT, "--limit", "-l", help="Maximum number of results."),
    dirs: list[Path] | None = typer.Option(None, "--dir", help="Sessions directory (repeatable, overrides --source)."),
    source: str = typer.Option("all", "--source", "-s", help="Session source: claude, pi, or all."),
    output_format: str = typer.Option("json", "--format", help="Output format: json or table."),
    no_redact: bool = typer.Option(False, "--no-redact", help="Do not redact API keys or tokens in output."),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Log skipped transcripts to stderr."),
) -> None:
    """Search session transcripts and print matching sessions."""
    _configure_logging(verbose)
    source = source.strip().lower()
    if source not in SOURCES:
        raise typer.BadParameter("--source must be one of: claude, pi, all")
    if output_format not in ("json", "table"):
        raise typer.BadParameter("--format must be json or table")
    if limit <= 0:
        raise typer.BadParameter("--limit must be a positive integer")
    if days is not None and days < 0:
        raise typer.BadParameter("--days must not be negative")

    options = SearchOptions(
        query=query,
        days=days,
        since=_parse_date(since, "--since"),
        until=_parse_date(until, "--until"),
        tools=_split_tools(tools),
        file_pattern=file_pattern,
        limit=limit,
        source=source,
    )
    results = search_sessions(_resolve_directories(source, dirs), options)

    if output_format == "table":
        console = Console()
        console.print(render_results_table(results, redact=not no_redact))
        console.print(f"[dim]{len(results)} session(s)[/]")
        return
    typer.echo(render_results_json(results, redact=not no_redact))


@app.command("parse")
def parse_command(
    transcript: Path = typer.Argument(..., help="Path to a .jsonl transcript."),
    no_redact: bool = typer.Option(False, "--no-redact", help="Do not redact API keys or tokens in output."),
) -> None:
    """Print the normalized summary of a single transcript."""
    session = parse_session_file(transcript.expanduser())
    if session is None:
        typer.echo(f"No session could be recovered from {transcript}", err=True)
        raise typer.Exit(1)
    typer.echo(render_session_json(session, redact=not no_redact))


def main() -> None:
    app()


if __name__ == "__main__":
    main()
