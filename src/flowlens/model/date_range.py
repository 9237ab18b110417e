from __future__ import annotations

"""
Date range selectors and resolved ranges.

A selector is what a date picker produces (a preset, a month, a year or an
explicit start/end). flowlens.services.date_range_service.resolve turns any
selector into a ResolvedDateRange whose bounds are inclusive day boundaries.
"""

from datetime import date, datetime
from enum import StrEnum
from typing import Annotated, Literal, Union

from pydantic import BaseModel, ConfigDict, Field, model_validator


class PresetId(StrEnum):
    last30 = "last30"
    this_week = "thisWeek"
    this_month = "thisMonth"
    this_year = "thisYear"
    all_time = "allTime"


class Preset(BaseModel):
    model_config = ConfigDict(frozen=True)

    kind: Literal["preset"] = "preset"
    id: PresetId


class ByMonth(BaseModel):
    """Calendar month; month_index is 0-based (0 = January).

    Out-of-range indexes roll over into neighbouring years.
    """

    model_config = ConfigDict(frozen=True)

    kind: Literal["byMonth"] = "byMonth"
    year: int
    month_index: int


class ByYear(BaseModel):
    model_config = ConfigDict(frozen=True)

    kind: Literal["byYear"] = "byYear"
    year: int


class Custom(BaseModel):
    """Explicit bounds in either order; the resolver sorts them."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["custom"] = "custom"
    start: datetime
    end: datetime

    @model_validator(mode="before")
    @classmethod
    def _promote_dates(cls, data):
        # Plain dates are accepted and treated as midnight
        if isinstance(data, dict):
            for key in ("start", "end"):
                value = data.get(key)
                if isinstance(value, date) and not isinstance(value, datetime):
                    data = {**data, key: datetime(value.year, value.month, value.day)}
        return data


DateRangeSelector = Annotated[
    Union[Preset, ByMonth, ByYear, Custom], Field(discriminator="kind")
]


class ResolvedDateRange(BaseModel):
    """Concrete interval; both bounds inclusive. Invariant: start <= end."""

    model_config = ConfigDict(frozen=True)

    start: datetime
    end: datetime

    @model_validator(mode="after")
    def _validate_order(self) -> ResolvedDateRange:
        if self.start > self.end:
            raise ValueError(f"Range start {self.start} is after end {self.end}")
        return self

    def contains(self, moment: datetime) -> bool:
        return self.start <= moment <= self.end


__all__ = [
    "ByMonth",
    "ByYear",
    "Custom",
    "DateRangeSelector",
    "Preset",
    "PresetId",
    "ResolvedDateRange",
]
