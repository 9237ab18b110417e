from __future__ import annotations

"""
flowlens CLI Wrapper (Typer + Rich)

Local-only CLI over the transaction query and recurrence engine.

All paths are resolved from a single workspace root:
  --data-dir / FLOWLENS_DATA env var / current working directory
"""

import logging
from pathlib import Path
from typing import List, Optional

import typer
from rich.logging import RichHandler

from flowlens.config import DEFAULT_MAX_OCCURRENCES
from flowlens.workspace import ENV_VAR, Workspace

APP_HELP = "flowlens CLI (local-only)"
HELP_PRESET = "Preset range: last30, thisWeek, thisMonth, thisYear, allTime"
HELP_MONTH = "Calendar month as YYYY-MM"
HELP_YEAR = "Calendar year"
HELP_START = "Custom range start (YYYY-MM-DD or ISO timestamp)"
HELP_END = "Custom range end (YYYY-MM-DD or ISO timestamp)"

app = typer.Typer(no_args_is_help=True, add_completion=False, help=APP_HELP)


@app.callback()
def main(
    ctx: typer.Context,
    data_dir: Optional[Path] = typer.Option(
        None,
        "--data-dir",
        envvar=ENV_VAR,
        help="Workspace root directory (default: current directory)",
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Show engine debug logging"),
):
    """flowlens CLI: all paths resolved from a single workspace root."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        handlers=[RichHandler(show_path=False)],
        force=True,
    )
    ctx.ensure_object(dict)
    ctx.obj["workspace"] = Workspace.resolve(data_dir)


def _ws(ctx: typer.Context) -> Workspace:
    return ctx.obj["workspace"]


@app.command(name="range")
def date_range(
    preset: Optional[str] = typer.Argument(None, help=HELP_PRESET),
    month: Optional[str] = typer.Option(None, "--month", "-m", help=HELP_MONTH),
    year: Optional[int] = typer.Option(None, "--year", "-y", help=HELP_YEAR),
    start: Optional[str] = typer.Option(None, "--start", help=HELP_START),
    end: Optional[str] = typer.Option(None, "--end", help=HELP_END),
):
    """Resolve a date range selection into inclusive start/end timestamps.

    Examples:
      flowlens range last30
      flowlens range --month 2024-03
      flowlens range --start 2024-03-10 --end 2024-03-01
    """
    from flowlens.cli.command import date_range as cmd_date_range

    code = cmd_date_range.run(preset=preset, month=month, year=year, start=start, end=end)
    raise typer.Exit(code=code)


@app.command()
def query(
    ctx: typer.Context,
    account: List[str] = typer.Option([], "--account", "-a", help="Account ID (repeatable)"),
    category: List[str] = typer.Option([], "--category", "-c", help="Category ID (repeatable)"),
    tag: List[str] = typer.Option([], "--tag", "-t", help="Tag ID (repeatable)"),
    type_: List[str] = typer.Option([], "--type", help="expense, income or transfer (repeatable)"),
    currency: List[str] = typer.Option([], "--currency", help="Currency code (repeatable)"),
    pending: str = typer.Option("all", "--pending", help="all, pending or notPending"),
    attachments: str = typer.Option("all", "--attachments", help="all, has or none"),
    group_by: str = typer.Option("day", "--group-by", "-g", help="hour, day, week, month, year or allTime"),
    preset: Optional[str] = typer.Option(None, "--preset", "-p", help=HELP_PRESET),
    month: Optional[str] = typer.Option(None, "--month", "-m", help=HELP_MONTH),
    year: Optional[int] = typer.Option(None, "--year", "-y", help=HELP_YEAR),
    start: Optional[str] = typer.Option(None, "--start", help=HELP_START),
    end: Optional[str] = typer.Option(None, "--end", help=HELP_END),
    search: str = typer.Option("", "--search", "-s", help="Search text"),
    match: str = typer.Option("smart", "--match", help="smart, partial, exact or untitled"),
    include_notes: bool = typer.Option(False, "--include-notes", help="Search notes as well as titles"),
    saved: Optional[str] = typer.Option(None, "--saved", help="Start from a saved filter in config/filters.yml"),
    save_as: Optional[str] = typer.Option(None, "--save", help="Store the effective filter and search under this name"),
    ascending: bool = typer.Option(False, "--ascending", help="Oldest first (default: newest first)"),
):
    """Filter, search and group transactions from data/transactions.json.

    Examples:
      flowlens query --type expense --month 2024-03
      flowlens query -a CHQ -a SAVINGS --preset last30 --group-by week
      flowlens query --search "rent apt" --include-notes
      flowlens query --match untitled
      flowlens query --type expense --tag food --save groceries
    """
    from flowlens.cli.command import query as cmd_query

    code = cmd_query.run(
        workspace=_ws(ctx),
        accounts=account,
        categories=category,
        tags=tag,
        types=type_,
        currencies=currency,
        pending=pending,
        attachments=attachments,
        group_by=group_by,
        preset=preset,
        month=month,
        year=year,
        start=start,
        end=end,
        search=search,
        match=match,
        include_notes=include_notes,
        saved=saved,
        save_as=save_as,
        ascending=ascending,
    )
    raise typer.Exit(code=code)


@app.command()
def occurrences(
    frequency: str = typer.Option(..., "--frequency", "-f", help="daily, weekly, biweekly, monthly or yearly"),
    start: str = typer.Option(..., "--start", help="First occurrence (YYYY-MM-DD or ISO timestamp)"),
    until: Optional[str] = typer.Option(None, "--until", help="Last allowed occurrence date"),
    count: Optional[int] = typer.Option(None, "--count", "-n", help="Total number of occurrences"),
    window_start: Optional[str] = typer.Option(None, "--from", help="Window start (default: rule start)"),
    window_end: Optional[str] = typer.Option(None, "--to", help="Window end (default: one year after start)"),
    limit: int = typer.Option(DEFAULT_MAX_OCCURRENCES, "--limit", min=1, help="Max occurrences to list"),
):
    """Project the occurrences of a recurrence rule.

    Examples:
      flowlens occurrences -f monthly --start 2024-01-31 --count 6
      flowlens occurrences -f biweekly --start 2024-01-05 --until 2024-06-30
      flowlens occurrences -f daily --start 2024-01-01 -n 3 --from 2024-01-02 --to 2024-01-10
    """
    from flowlens.cli.command import occurrences as cmd_occurrences

    code = cmd_occurrences.run(
        frequency=frequency,
        start=start,
        until=until,
        count=count,
        window_start=window_start,
        window_end=window_end,
        limit=limit,
    )
    raise typer.Exit(code=code)


if __name__ == "__main__":
    app()  # pragma: no cover
