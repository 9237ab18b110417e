from __future__ import annotations

"""
Build a recurrence rule from CLI options and list its occurrences in a window.
"""

from datetime import timedelta
from typing import Optional

from pydantic import ValidationError
from rich.markup import escape
from rich.table import Table

from flowlens.config import DEFAULT_MAX_OCCURRENCES
from flowlens.model.recurrence import AfterOccurrences, Frequency, InvalidRecurrenceError, Never, OnDate
from flowlens.services.recurrence_service import (
    build_rule,
    describe_rule,
    project_occurrences,
    to_rrule_string,
)
from .util import console, fmt_moment, parse_moment

DEFAULT_WINDOW_DAYS = 365


def run(
    *,
    frequency: str,
    start: str,
    until: Optional[str] = None,
    count: Optional[int] = None,
    window_start: Optional[str] = None,
    window_end: Optional[str] = None,
    limit: int = DEFAULT_MAX_OCCURRENCES,
) -> int:
    """Print a rule's description, RRULE string and projected occurrences.

    The window defaults to one year from the rule's start.

    Returns an exit code (0 for success, 1 for an invalid rule).
    """
    if until is not None and count is not None:
        console.print("[red]Error:[/] --until and --count are mutually exclusive")
        return 1

    try:
        start_date = parse_moment(start)
        if count is not None:
            end = AfterOccurrences(count=count)
        elif until is not None:
            end = OnDate(date=parse_moment(until))
        else:
            end = Never()
        rule = build_rule(Frequency(frequency), start_date, end)
        lo = parse_moment(window_start) if window_start else start_date
        hi = parse_moment(window_end) if window_end else start_date + timedelta(days=DEFAULT_WINDOW_DAYS)
    except InvalidRecurrenceError as e:
        console.print(f"[red]Invalid recurrence:[/] {escape(str(e))}")
        return 1
    except (ValueError, ValidationError) as e:
        console.print(f"[red]Error:[/] {escape(str(e))}")
        return 1

    console.print(f"[bold]{describe_rule(rule)}[/]")
    console.print(to_rrule_string(rule), style="dim", markup=False)

    table = Table(title=f"Occurrences {fmt_moment(lo)} – {fmt_moment(hi)}", show_lines=False)
    table.add_column("#", justify="right", style="dim")
    table.add_column("Date", style="cyan", no_wrap=True)
    table.add_column("Weekday")
    n = 0
    for n, occurrence in enumerate(project_occurrences(rule, lo, hi, limit), start=1):
        table.add_row(str(n), fmt_moment(occurrence), occurrence.strftime("%A"))

    if n == 0:
        console.print("[yellow]No occurrences in the window.[/]")
        return 0
    console.print(table)
    return 0
