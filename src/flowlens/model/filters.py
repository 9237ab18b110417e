from __future__ import annotations

"""
Filter state for transaction list views.

Scope
- Immutable value type; mutators live in flowlens.services.filter_service and
  always return a new FilterState.
- Set-valued dimensions are frozensets: an empty set means "no restriction",
  never "exclude everything". Equality is set equality, so insertion order of
  selected ids never matters.
"""

from enum import StrEnum

from pydantic import BaseModel, ConfigDict, Field, field_serializer

from flowlens.model.transaction import TransactionType


class PendingFilter(StrEnum):
    all = "all"
    pending = "pending"
    not_pending = "notPending"


class AttachmentFilter(StrEnum):
    all = "all"
    has = "has"
    none = "none"


class GroupBy(StrEnum):
    """Section bucket used when rendering a query result."""

    hour = "hour"
    day = "day"
    week = "week"
    month = "month"
    year = "year"
    all_time = "allTime"


class FilterDimension(StrEnum):
    """One independently toggleable axis of a FilterState."""

    accounts = "accounts"
    categories = "categories"
    tags = "tags"
    type = "type"
    currency = "currency"
    pending = "pending"
    attachments = "attachments"
    group_by = "groupBy"


# Dimension -> FilterState field holding its value
SET_DIMENSIONS: dict[FilterDimension, str] = {
    FilterDimension.accounts: "account_ids",
    FilterDimension.categories: "category_ids",
    FilterDimension.tags: "tag_ids",
    FilterDimension.type: "type_filters",
    FilterDimension.currency: "currency_ids",
}

ENUM_DIMENSIONS: dict[FilterDimension, str] = {
    FilterDimension.pending: "pending_filter",
    FilterDimension.attachments: "attachment_filter",
    FilterDimension.group_by: "group_by",
}


class FilterState(BaseModel):
    """Active multi-select filters for a transaction list.

    A default-constructed FilterState is the identity filter: it matches every
    transaction.
    """

    model_config = ConfigDict(frozen=True)

    account_ids: frozenset[str] = Field(default_factory=frozenset)
    category_ids: frozenset[str] = Field(default_factory=frozenset)
    tag_ids: frozenset[str] = Field(default_factory=frozenset)
    type_filters: frozenset[TransactionType] = Field(default_factory=frozenset)
    pending_filter: PendingFilter = PendingFilter.all
    attachment_filter: AttachmentFilter = AttachmentFilter.all
    currency_ids: frozenset[str] = Field(default_factory=frozenset)
    group_by: GroupBy = GroupBy.day

    @field_serializer("account_ids", "category_ids", "tag_ids", "type_filters", "currency_ids")
    def _serialize_sorted(self, value: frozenset) -> list:
        # Stable output for saved filter files
        return sorted(value)


DEFAULT_FILTER_STATE = FilterState()

GROUP_BY_LABELS: dict[GroupBy, str] = {
    GroupBy.hour: "Hour",
    GroupBy.day: "Day",
    GroupBy.week: "Week",
    GroupBy.month: "Month",
    GroupBy.year: "Year",
    GroupBy.all_time: "All time",
}

PENDING_LABELS: dict[PendingFilter, str] = {
    PendingFilter.all: "All",
    PendingFilter.pending: "Pending",
    PendingFilter.not_pending: "Not Pending",
}

ATTACHMENT_LABELS: dict[AttachmentFilter, str] = {
    AttachmentFilter.all: "Attachments",
    AttachmentFilter.has: "Has Attachments",
    AttachmentFilter.none: "Has No Attachments",
}


__all__ = [
    "ATTACHMENT_LABELS",
    "AttachmentFilter",
    "DEFAULT_FILTER_STATE",
    "ENUM_DIMENSIONS",
    "FilterDimension",
    "FilterState",
    "GROUP_BY_LABELS",
    "GroupBy",
    "PENDING_LABELS",
    "PendingFilter",
    "SET_DIMENSIONS",
]
