from __future__ import annotations

"""
Resolve a date range selection and print its concrete bounds.
"""

from datetime import datetime
from typing import Optional

from pydantic import ValidationError
from rich.markup import escape
from rich.table import Table

from flowlens.model.date_range import ByMonth, ByYear, Custom, DateRangeSelector, Preset, PresetId
from flowlens.services.date_range_service import range_label, resolve
from .util import console, parse_moment


def build_selector(
    *,
    preset: Optional[str] = None,
    month: Optional[str] = None,
    year: Optional[int] = None,
    start: Optional[str] = None,
    end: Optional[str] = None,
) -> Optional[DateRangeSelector]:
    """Turn CLI options into a selector; None when no option was given.

    Raises:
        ValueError: if options conflict or cannot be parsed
    """
    given = [opt for opt in (preset, month, year, start or end) if opt is not None]
    if len(given) > 1:
        raise ValueError("Use only one of a preset, --month, --year or --start/--end")
    if preset is not None:
        return Preset(id=PresetId(preset))
    if month is not None:
        y, _, m = month.partition("-")
        return ByMonth(year=int(y), month_index=int(m) - 1)
    if year is not None:
        return ByYear(year=year)
    if start is not None or end is not None:
        a = parse_moment(start or end)
        b = parse_moment(end or start)
        return Custom(start=a, end=b)
    return None


def run(
    *,
    preset: Optional[str] = None,
    month: Optional[str] = None,
    year: Optional[int] = None,
    start: Optional[str] = None,
    end: Optional[str] = None,
    now: Optional[datetime] = None,
) -> int:
    """Print the resolved range for a selection.

    Returns an exit code (0 for success, 1 for invalid input).
    """
    try:
        selector = build_selector(preset=preset, month=month, year=year, start=start, end=end)
    except (ValueError, ValidationError) as e:
        console.print(f"[red]Error:[/] {escape(str(e))}")
        return 1
    if selector is None:
        console.print("[red]Error:[/] Provide a preset, --month, --year or --start/--end")
        return 1

    resolved = resolve(selector, now or datetime.now())

    table = Table(title=range_label(resolved), show_lines=False)
    table.add_column("Bound", style="bold")
    table.add_column("Timestamp", style="cyan", no_wrap=True)
    table.add_row("Start", resolved.start.isoformat(sep=" "))
    table.add_row("End", resolved.end.isoformat(sep=" "))
    console.print(table)
    return 0
