"""
Filter service - pure transformations over FilterState.

Handles:
- Toggling one id in a set-valued dimension
- Clearing one dimension or all of them
- Deciding whether a dimension is active and whether a transaction matches
- Chip labels for the filter header

All functions return new FilterState values; nothing is mutated in place.
"""

from __future__ import annotations

from collections.abc import Iterable

from flowlens.model.date_range import ResolvedDateRange
from flowlens.model.filters import (
    ATTACHMENT_LABELS,
    DEFAULT_FILTER_STATE,
    ENUM_DIMENSIONS,
    GROUP_BY_LABELS,
    PENDING_LABELS,
    SET_DIMENSIONS,
    AttachmentFilter,
    FilterDimension,
    FilterState,
    PendingFilter,
)
from flowlens.model.search import SearchState
from flowlens.model.transaction import Account, Transaction, TransactionType
from flowlens.services.search_service import is_search_active


def _set_field(dimension: FilterDimension) -> str:
    try:
        return SET_DIMENSIONS[FilterDimension(dimension)]
    except KeyError:
        raise ValueError(f"'{dimension}' is not a set-valued filter dimension") from None


def toggle(state: FilterState, dimension: FilterDimension, item_id: str) -> FilterState:
    """Add `item_id` to the dimension's set, or remove it if already present.

    Raises:
        ValueError: if `dimension` is enum-valued (pending, attachments, groupBy).
    """
    field = _set_field(dimension)
    if field == "type_filters":
        item_id = TransactionType(item_id)
    current: frozenset = getattr(state, field)
    updated = current - {item_id} if item_id in current else current | {item_id}
    return state.model_copy(update={field: updated})


def clear(state: FilterState, dimension: FilterDimension) -> FilterState:
    """Empty a set-valued dimension or reset an enum-valued one to its default."""
    dimension = FilterDimension(dimension)
    if dimension in SET_DIMENSIONS:
        field = SET_DIMENSIONS[dimension]
        return state.model_copy(update={field: frozenset()})
    field = ENUM_DIMENSIONS[dimension]
    return state.model_copy(update={field: getattr(DEFAULT_FILTER_STATE, field)})


def clear_all() -> FilterState:
    """Return the identity filter."""
    return FilterState()


def is_active(state: FilterState, dimension: FilterDimension) -> bool:
    """True iff the dimension can exclude an otherwise-matching transaction.

    Grouping never excludes anything, so groupBy is never active here even
    when it differs from its default (see has_any_filter).
    """
    dimension = FilterDimension(dimension)
    if dimension in SET_DIMENSIONS:
        return bool(getattr(state, SET_DIMENSIONS[dimension]))
    if dimension == FilterDimension.group_by:
        return False
    field = ENUM_DIMENSIONS[dimension]
    return getattr(state, field) != getattr(DEFAULT_FILTER_STATE, field)


def active_dimensions(state: FilterState) -> list[FilterDimension]:
    return [d for d in FilterDimension if is_active(state, d)]


def matches(state: FilterState, txn: Transaction) -> bool:
    """AND across dimensions, OR within each inclusion set."""
    if state.account_ids and txn.account_id not in state.account_ids:
        return False
    if state.category_ids and (
        txn.category_id is None or txn.category_id not in state.category_ids
    ):
        return False
    if state.tag_ids and state.tag_ids.isdisjoint(txn.tag_ids):
        return False
    if state.type_filters and txn.type not in state.type_filters:
        return False
    if state.currency_ids and txn.currency not in state.currency_ids:
        return False

    if state.pending_filter == PendingFilter.pending and not txn.is_pending:
        return False
    if state.pending_filter == PendingFilter.not_pending and txn.is_pending:
        return False

    if state.attachment_filter == AttachmentFilter.has and not txn.has_attachments:
        return False
    if state.attachment_filter == AttachmentFilter.none and txn.has_attachments:
        return False

    return True


def has_any_filter(
    state: FilterState,
    search: SearchState | None = None,
    date_range: ResolvedDateRange | None = None,
) -> bool:
    """Whether a "clear all" action would change anything."""
    if search is not None and is_search_active(search):
        return True
    if date_range is not None:
        return True
    return state != DEFAULT_FILTER_STATE


def available_currencies(accounts: Iterable[Account]) -> list[str]:
    """Distinct currency codes across accounts, in first-seen order."""
    seen: dict[str, None] = {}
    for account in accounts:
        if account.currency:
            seen.setdefault(account.currency, None)
    return list(seen)


def _count_label(count: int, singular: str, plural: str) -> str:
    return f"1 {singular}" if count == 1 else f"{count} {plural}"


def dimension_label(
    state: FilterState,
    dimension: FilterDimension,
    accounts: Iterable[Account] = (),
) -> str:
    """Chip label for one dimension of the filter header.

    Args:
        state: Current filter state
        dimension: Dimension to label
        accounts: Known accounts; used to detect "all accounts" and
            "all currencies" selections

    Returns:
        Short human-readable label
    """
    dimension = FilterDimension(dimension)
    accounts = list(accounts)

    if dimension == FilterDimension.accounts:
        n = len(state.account_ids)
        if n == 0:
            return "Accounts"
        if accounts and n == len(accounts):
            return "All"
        return f"{n} acct"

    if dimension == FilterDimension.categories:
        n = len(state.category_ids)
        return "Categories" if n == 0 else _count_label(n, "category", "categories")

    if dimension == FilterDimension.tags:
        n = len(state.tag_ids)
        return "Tags" if n == 0 else _count_label(n, "tag", "tags")

    if dimension == FilterDimension.type:
        n = len(state.type_filters)
        if n == 0:
            return "Type"
        if n == len(TransactionType):
            return "All types"
        return f"{n} type" if n == 1 else f"{n} types"

    if dimension == FilterDimension.currency:
        n = len(state.currency_ids)
        if n == 0:
            return "Currency"
        currencies = available_currencies(accounts)
        if currencies and n == len(currencies):
            return "All currencies"
        if n == 1:
            return next(iter(state.currency_ids))
        return f"{n} currencies"

    if dimension == FilterDimension.pending:
        if state.pending_filter == PendingFilter.all:
            return "Pending Status"
        return PENDING_LABELS[state.pending_filter]

    if dimension == FilterDimension.attachments:
        return ATTACHMENT_LABELS[state.attachment_filter]

    return GROUP_BY_LABELS[state.group_by]


__all__ = [
    "active_dimensions",
    "available_currencies",
    "clear",
    "clear_all",
    "dimension_label",
    "has_any_filter",
    "is_active",
    "matches",
    "toggle",
]
