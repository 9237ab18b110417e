from __future__ import annotations

"""
Canonical transaction models consumed by the query engine.

Scope
- Pure Pydantic v2 models; no I/O.
- Mirrors the shape of rows handed over by the local store: one row per
  transaction with its account, category, tags and attachment references.
- The store owns persistence; these models are read-only snapshots.
"""

from datetime import datetime
from enum import StrEnum

from pydantic import BaseModel, Field, computed_field, field_validator

from flowlens.config import DEFAULT_CURRENCY


class TransactionType(StrEnum):
    """Direction of money movement."""

    expense = "expense"
    income = "income"
    transfer = "transfer"


class Account(BaseModel):
    """Account summary used for filter labels (currency set, "all accounts")."""

    account_id: str
    name: str = ""
    currency: str = DEFAULT_CURRENCY


class Transaction(BaseModel):
    """A single transaction row joined with its account currency and tags.

    `date` is the naive local timestamp the user assigned to the transaction.
    `currency` is the currency of the owning account.
    """

    transaction_id: str
    date: datetime
    title: str = ""
    notes: str | None = None
    amount: float = 0.0
    type: TransactionType = TransactionType.expense
    account_id: str
    currency: str = DEFAULT_CURRENCY
    category_id: str | None = None
    tag_ids: list[str] = Field(default_factory=list)
    is_pending: bool = False
    attachments: list[str] = Field(
        default_factory=list, description="Attachment file references (store-relative)"
    )
    created_at: datetime | None = None

    @field_validator("date", "created_at")
    @classmethod
    def _to_local_naive(cls, value: datetime | None) -> datetime | None:
        # Offset-aware timestamps are converted to local wall time
        if value is not None and value.tzinfo is not None:
            return value.astimezone().replace(tzinfo=None)
        return value

    @computed_field  # type: ignore[misc]
    @property
    def has_attachments(self) -> bool:
        return bool(self.attachments)


__all__ = [
    "Account",
    "Transaction",
    "TransactionType",
]
