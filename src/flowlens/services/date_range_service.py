"""
Date range service - resolves picker selections into concrete intervals.

resolve() is pure and total: `now` is an argument rather than a clock read,
inverted custom bounds are swapped, and month indexes outside 0..11 roll over
into neighbouring years. Bounds that would fall outside the years datetime can
represent (1..9999) saturate at the first or last representable day. Pickers
should still keep years within MIN_YEAR..MAX_YEAR (see clamp_year).
"""

from __future__ import annotations

import calendar
import logging
from datetime import MAXYEAR, MINYEAR, date, datetime, time, timedelta

from flowlens.config import ALL_TIME_EPOCH_YEAR, MAX_YEAR, MIN_YEAR, WEEK_STARTS_ON
from flowlens.model.date_range import (
    ByMonth,
    ByYear,
    Custom,
    DateRangeSelector,
    Preset,
    PresetId,
    ResolvedDateRange,
)

logger = logging.getLogger(__name__)

PRESET_LABELS: dict[PresetId, str] = {
    PresetId.last30: "Last 30 days",
    PresetId.this_week: "This week",
    PresetId.this_month: "This month",
    PresetId.this_year: "This year",
    PresetId.all_time: "All time",
}


def start_of_day(moment: datetime | date) -> datetime:
    return datetime.combine(_as_date(moment), time.min)


def end_of_day(moment: datetime | date) -> datetime:
    return datetime.combine(_as_date(moment), time.max)


def _as_date(moment: datetime | date) -> date:
    return moment.date() if isinstance(moment, datetime) else moment


def _shift_days(day: date, days: int) -> date:
    try:
        return day + timedelta(days=days)
    except OverflowError:
        return date.max if days > 0 else date.min


def start_of_week(moment: datetime | date, week_starts_on: int = WEEK_STARTS_ON) -> datetime:
    day = _as_date(moment)
    offset = (day.weekday() - week_starts_on) % 7
    return start_of_day(_shift_days(day, -offset))


def _month_bounds(year: int, month_index: int) -> ResolvedDateRange:
    year += month_index // 12
    month = month_index % 12 + 1
    if year > MAXYEAR:
        year, month = MAXYEAR, 12
    elif year < MINYEAR:
        year, month = MINYEAR, 1
    last_day = calendar.monthrange(year, month)[1]
    return ResolvedDateRange(
        start=start_of_day(date(year, month, 1)),
        end=end_of_day(date(year, month, last_day)),
    )


def _year_bounds(year: int) -> ResolvedDateRange:
    year = min(MAXYEAR, max(MINYEAR, year))
    return ResolvedDateRange(
        start=start_of_day(date(year, 1, 1)),
        end=end_of_day(date(year, 12, 31)),
    )


def _resolve_preset(preset_id: PresetId, now: datetime, week_starts_on: int) -> ResolvedDateRange:
    if preset_id == PresetId.last30:
        return ResolvedDateRange(
            start=start_of_day(_shift_days(_as_date(now), -29)),
            end=end_of_day(now),
        )
    if preset_id == PresetId.this_week:
        start = start_of_week(now, week_starts_on)
        return ResolvedDateRange(start=start, end=end_of_day(_shift_days(start.date(), 6)))
    if preset_id == PresetId.this_month:
        return _month_bounds(now.year, now.month - 1)
    if preset_id == PresetId.this_year:
        return _year_bounds(now.year)
    # A clock set before the epoch still yields a valid range
    epoch = min(date(ALL_TIME_EPOCH_YEAR, 1, 1), _as_date(now))
    return ResolvedDateRange(start=start_of_day(epoch), end=end_of_day(now))


def resolve(
    selector: DateRangeSelector,
    now: datetime,
    week_starts_on: int = WEEK_STARTS_ON,
) -> ResolvedDateRange:
    """Turn a range selector into inclusive start-of-day / end-of-day bounds.

    Args:
        selector: Preset, ByMonth, ByYear or Custom selection
        now: Reference instant for relative presets
        week_starts_on: First weekday of a week (0 = Monday ... 6 = Sunday)

    Returns:
        ResolvedDateRange with start <= end
    """
    if isinstance(selector, Preset):
        resolved = _resolve_preset(selector.id, now, week_starts_on)
    elif isinstance(selector, ByMonth):
        resolved = _month_bounds(selector.year, selector.month_index)
    elif isinstance(selector, ByYear):
        resolved = _year_bounds(selector.year)
    elif isinstance(selector, Custom):
        lo, hi = sorted((selector.start, selector.end))
        resolved = ResolvedDateRange(start=start_of_day(lo), end=end_of_day(hi))
    else:
        raise TypeError(f"Unsupported date range selector: {selector!r}")

    logger.debug("Resolved %r to %s .. %s", selector, resolved.start, resolved.end)
    return resolved


def clamp_year(value: object, fallback: int) -> int:
    """Parse a user-entered year and clamp it to MIN_YEAR..MAX_YEAR.

    Unparseable input returns `fallback` unchanged, mirroring how the by-year
    picker falls back to the current year.
    """
    try:
        year = int(str(value).strip())
    except (TypeError, ValueError):
        return fallback
    return min(MAX_YEAR, max(MIN_YEAR, year))


def preset_label(preset_id: PresetId) -> str:
    return PRESET_LABELS[PresetId(preset_id)]


def _short_month_day(moment: datetime) -> str:
    return f"{moment.strftime('%b')} {moment.day}"


def range_label(date_range: ResolvedDateRange | None) -> str:
    """Chip label such as "Mar 1 – Mar 31"; "This month" when nothing is selected."""
    if date_range is None:
        return PRESET_LABELS[PresetId.this_month]
    return f"{_short_month_day(date_range.start)} – {_short_month_day(date_range.end)}"


__all__ = [
    "PRESET_LABELS",
    "clamp_year",
    "end_of_day",
    "preset_label",
    "range_label",
    "resolve",
    "start_of_day",
    "start_of_week",
]
