"""
Query service - runs a transaction list query and groups the result.

run() is the composition point of the filter, date range and search services:
it keeps transactions inside the resolved range that match both the filter
state and the search, then sorts them by date. group_into_sections() buckets a
sorted result for display using FilterState.group_by.

The predicates are independent and commutative; evaluation order only affects
how early a row is rejected.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from dataclasses import dataclass, field
from datetime import datetime
from enum import StrEnum

from flowlens.config import WEEK_STARTS_ON
from flowlens.model.date_range import ResolvedDateRange
from flowlens.model.filters import GROUP_BY_LABELS, FilterState, GroupBy
from flowlens.model.search import DEFAULT_SEARCH_STATE, SearchState
from flowlens.model.transaction import Transaction, TransactionType
from flowlens.services import filter_service, search_service
from flowlens.services.date_range_service import start_of_week

logger = logging.getLogger(__name__)


class SortOrder(StrEnum):
    ascending = "ascending"
    descending = "descending"


@dataclass
class TransactionSection:
    """One display group of a query result."""

    key: str
    title: str
    transactions: list[Transaction] = field(default_factory=list)
    totals: dict[str, float] = field(default_factory=dict)  # currency -> signed sum


def _sort_key(txn: Transaction) -> tuple:
    return (txn.date, txn.created_at or datetime.min, txn.transaction_id)


def run(
    transactions: Iterable[Transaction],
    filter_state: FilterState,
    date_range: ResolvedDateRange | None = None,
    search_state: SearchState = DEFAULT_SEARCH_STATE,
    sort_order: SortOrder = SortOrder.descending,
) -> list[Transaction]:
    """Filter and sort a transaction collection.

    Args:
        transactions: Candidate transactions (from the store)
        filter_state: Active filters
        date_range: Inclusive range; None applies no date restriction
        search_state: Free-text search
        sort_order: Date order of the result; ties fall back to
            created_at then transaction_id

    Returns:
        Matching transactions in the requested order
    """
    result = [
        txn
        for txn in transactions
        if (date_range is None or date_range.contains(txn.date))
        and filter_service.matches(filter_state, txn)
        and search_service.match(search_state, txn)
    ]
    result.sort(key=_sort_key, reverse=SortOrder(sort_order) == SortOrder.descending)
    logger.debug("Query matched %d transaction(s)", len(result))
    return result


def transaction_contribution(txn_type: TransactionType, amount: float) -> float:
    """Signed contribution to a total: income adds, expense subtracts, transfers are neutral."""
    if txn_type == TransactionType.income:
        return amount
    if txn_type == TransactionType.expense:
        return -amount
    return 0.0


def section_key_and_title(
    moment: datetime,
    group_by: GroupBy,
    week_starts_on: int = WEEK_STARTS_ON,
) -> tuple[str, str]:
    """Bucket key and header title for a transaction date."""
    if group_by == GroupBy.hour:
        hour = moment.strftime("%I").lstrip("0")
        title = f"{moment.strftime('%b')} {moment.day}, {moment.year} {hour} {moment.strftime('%p')}"
        return moment.strftime("%Y-%m-%d-%H"), title
    if group_by == GroupBy.week:
        week_start = start_of_week(moment, week_starts_on)
        iso_year, iso_week, _ = week_start.isocalendar()
        return f"{iso_year}-W{iso_week:02d}", f"Week of {week_start.strftime('%b')} {week_start.day}"
    if group_by == GroupBy.month:
        return moment.strftime("%Y-%m"), moment.strftime("%B %Y")
    if group_by == GroupBy.year:
        return moment.strftime("%Y"), moment.strftime("%Y")
    if group_by == GroupBy.all_time:
        return "all", GROUP_BY_LABELS[GroupBy.all_time]
    return moment.strftime("%Y-%m-%d"), f"{moment.strftime('%A, %b')} {moment.day}"


def group_into_sections(
    transactions: Iterable[Transaction],
    group_by: GroupBy,
    week_starts_on: int = WEEK_STARTS_ON,
) -> list[TransactionSection]:
    """Group an already-sorted result into sections in first-seen order.

    Each section keeps its rows in input order and carries per-currency
    signed totals.
    """
    sections: dict[str, TransactionSection] = {}
    for txn in transactions:
        key, title = section_key_and_title(txn.date, group_by, week_starts_on)
        section = sections.get(key)
        if section is None:
            section = sections[key] = TransactionSection(key=key, title=title)
        section.transactions.append(txn)
        section.totals[txn.currency] = section.totals.get(txn.currency, 0.0) + (
            transaction_contribution(txn.type, txn.amount)
        )
    return list(sections.values())


def query_sections(
    transactions: Iterable[Transaction],
    filter_state: FilterState,
    date_range: ResolvedDateRange | None = None,
    search_state: SearchState = DEFAULT_SEARCH_STATE,
    sort_order: SortOrder = SortOrder.descending,
    week_starts_on: int = WEEK_STARTS_ON,
) -> list[TransactionSection]:
    """run() followed by group_into_sections() using filter_state.group_by."""
    rows = run(transactions, filter_state, date_range, search_state, sort_order)
    return group_into_sections(rows, filter_state.group_by, week_starts_on)


__all__ = [
    "SortOrder",
    "TransactionSection",
    "group_into_sections",
    "query_sections",
    "run",
    "section_key_and_title",
    "transaction_contribution",
]
