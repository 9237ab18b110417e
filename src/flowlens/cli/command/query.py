from __future__ import annotations

"""
Query the transaction snapshot with filters, a date range and a search, and
render the grouped result as Rich tables.
"""

from datetime import datetime
from typing import Optional, Sequence

import yaml
from pydantic import ValidationError
from rich.markup import escape
from rich.table import Table
from rich.text import Text

from flowlens.config import UNTITLED_PLACEHOLDER
from flowlens.model.filters import AttachmentFilter, FilterDimension, FilterState, GroupBy, PendingFilter
from flowlens.model.search import SearchMatchType, SearchState
from flowlens.model.transaction_io import SavedFilter, SavedFilterConfig, load_saved_filters, save_saved_filters
from flowlens.services import filter_service
from flowlens.services.date_range_service import range_label, resolve
from flowlens.services.query_service import SortOrder, query_sections
from flowlens.workspace import Workspace
from .date_range import build_selector
from .util import console, fmt_amount, fmt_moment, read_ledger


def build_filter_state(
    *,
    accounts: Sequence[str] = (),
    categories: Sequence[str] = (),
    tags: Sequence[str] = (),
    types: Sequence[str] = (),
    currencies: Sequence[str] = (),
    pending: str = "all",
    attachments: str = "all",
    group_by: str = "day",
    base: Optional[FilterState] = None,
) -> FilterState:
    """Fold CLI options into a FilterState by toggling each id in turn."""
    state = base or filter_service.clear_all()
    for dimension, ids in (
        (FilterDimension.accounts, accounts),
        (FilterDimension.categories, categories),
        (FilterDimension.tags, tags),
        (FilterDimension.type, types),
        (FilterDimension.currency, currencies),
    ):
        for item_id in ids:
            state = filter_service.toggle(state, dimension, item_id)
    update = {}
    if pending != PendingFilter.all:
        update["pending_filter"] = PendingFilter(pending)
    if attachments != AttachmentFilter.all:
        update["attachment_filter"] = AttachmentFilter(attachments)
    if group_by != GroupBy.day:
        update["group_by"] = GroupBy(group_by)
    return state.model_copy(update=update) if update else state


def _load_saved(workspace: Workspace) -> Optional[SavedFilterConfig]:
    try:
        return load_saved_filters(workspace.filters_config)
    except (ValidationError, yaml.YAMLError) as e:
        source = escape(str(workspace.filters_config))
        console.print(f"[red]Error:[/] Invalid saved filters in {source}: {escape(str(e))}")
        return None


def run(
    *,
    workspace: Workspace,
    accounts: Sequence[str] = (),
    categories: Sequence[str] = (),
    tags: Sequence[str] = (),
    types: Sequence[str] = (),
    currencies: Sequence[str] = (),
    pending: str = "all",
    attachments: str = "all",
    group_by: str = "day",
    preset: Optional[str] = None,
    month: Optional[str] = None,
    year: Optional[int] = None,
    start: Optional[str] = None,
    end: Optional[str] = None,
    search: str = "",
    match: str = "smart",
    include_notes: bool = False,
    saved: Optional[str] = None,
    save_as: Optional[str] = None,
    ascending: bool = False,
    now: Optional[datetime] = None,
) -> int:
    """Run a transaction query against the workspace snapshot.

    When `save_as` is given, the effective filter and search are stored under
    that name in config/filters.yml before the result is rendered.

    Returns an exit code (0 for success, 1 for error).
    """
    try:
        ledger = read_ledger(workspace.transactions_path)
    except (FileNotFoundError, ValidationError) as e:
        console.print(f"[red]Error:[/] {escape(str(e))}")
        return 1

    try:
        search_state = SearchState(query=search, match_type=SearchMatchType(match), include_notes=include_notes)
    except ValueError as e:
        console.print(f"[red]Error:[/] {escape(str(e))}")
        return 1

    base_filters: Optional[FilterState] = None
    config: Optional[SavedFilterConfig] = None
    if saved or save_as:
        config = _load_saved(workspace)
        if config is None:
            return 1
    if saved:
        entry = config.saved.get(saved)
        if entry is None:
            console.print(f"[red]Error:[/] No saved filter named [bold]{escape(saved)}[/]")
            return 1
        base_filters = entry.filters
        if not search:
            search_state = entry.search

    try:
        filter_state = build_filter_state(
            accounts=accounts,
            categories=categories,
            tags=tags,
            types=types,
            currencies=currencies,
            pending=pending,
            attachments=attachments,
            group_by=group_by,
            base=base_filters,
        )
        selector = build_selector(preset=preset, month=month, year=year, start=start, end=end)
    except (ValueError, ValidationError) as e:
        console.print(f"[red]Error:[/] {escape(str(e))}")
        return 1

    if save_as:
        entries = {**config.saved, save_as: SavedFilter(filters=filter_state, search=search_state)}
        save_saved_filters(workspace.filters_config, SavedFilterConfig(saved=entries))
        console.print(f"[green]Saved filter[/] [bold]{escape(save_as)}[/]")

    date_range = resolve(selector, now or datetime.now()) if selector is not None else None
    sections = query_sections(
        ledger.transactions,
        filter_state,
        date_range,
        search_state,
        SortOrder.ascending if ascending else SortOrder.descending,
    )

    if not sections:
        scope = range_label(date_range) if date_range is not None else "all dates"
        console.print(f"[yellow]No transactions match[/] ({scope}).")
        return 0

    active = [
        filter_service.dimension_label(filter_state, d, ledger.accounts)
        for d in filter_service.active_dimensions(filter_state)
    ]
    if active:
        console.print(Text("Filters: " + ", ".join(active), style="dim"))

    for section in sections:
        table = Table(title=section.title, show_lines=False)
        table.add_column("Date", style="cyan", no_wrap=True)
        table.add_column("Title", style="white")
        table.add_column("Type", style="magenta", no_wrap=True)
        table.add_column("Amount", justify="right")
        table.add_column("Currency", style="magenta", no_wrap=True)
        table.add_column("TxnID8", style="dim", no_wrap=True)
        for txn in section.transactions:
            title = Text(txn.title or UNTITLED_PLACEHOLDER)
            if txn.is_pending:
                title.append(" (pending)", style="yellow")
            table.add_row(
                fmt_moment(txn.date),
                title,
                txn.type.value,
                fmt_amount(txn.amount),
                txn.currency,
                txn.transaction_id[:8],
            )
        table.add_row("", "", "", Text(""), "", "")
        for currency, total in sorted(section.totals.items()):
            table.add_row("", Text("Net", style="bold"), "", fmt_amount(total), currency, "")
        console.print(table)
    return 0
