from __future__ import annotations

"""
Recurrence rules for recurring transactions.

Scope
- Pure Pydantic v2 models. Build rules through
  flowlens.services.recurrence_service.build_rule, which raises
  InvalidRecurrenceError for impossible end conditions instead of a pydantic
  ValidationError.
- The end condition is a tagged variant: exactly one of Never, OnDate or
  AfterOccurrences is active.
"""

from datetime import datetime
from enum import StrEnum
from typing import Annotated, Literal, Union

from pydantic import BaseModel, ConfigDict, Field, model_validator


class InvalidRecurrenceError(ValueError):
    """Raised when a recurrence selection cannot form a valid rule."""


class Frequency(StrEnum):
    daily = "daily"
    weekly = "weekly"
    biweekly = "biweekly"
    monthly = "monthly"
    yearly = "yearly"


class Never(BaseModel):
    model_config = ConfigDict(frozen=True)

    kind: Literal["never"] = "never"


class OnDate(BaseModel):
    """Last allowed occurrence instant (inclusive)."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["onDate"] = "onDate"
    date: datetime


class AfterOccurrences(BaseModel):
    """Stop after `count` occurrences counted from the rule's start date.

    Construction accepts any integer so that build_rule can report a
    non-positive count as InvalidRecurrenceError.
    """

    model_config = ConfigDict(frozen=True)

    kind: Literal["afterOccurrences"] = "afterOccurrences"
    count: int


RecurrenceEnd = Annotated[
    Union[Never, OnDate, AfterOccurrences], Field(discriminator="kind")
]


class RecurrenceRule(BaseModel):
    model_config = ConfigDict(frozen=True)

    frequency: Frequency
    start_date: datetime
    end: RecurrenceEnd = Field(default_factory=Never)

    @model_validator(mode="after")
    def _validate_count(self) -> RecurrenceRule:
        if isinstance(self.end, AfterOccurrences) and self.end.count < 1:
            raise ValueError(f"Occurrence count must be at least 1, got {self.end.count}")
        return self


__all__ = [
    "AfterOccurrences",
    "Frequency",
    "InvalidRecurrenceError",
    "Never",
    "OnDate",
    "RecurrenceEnd",
    "RecurrenceRule",
]
