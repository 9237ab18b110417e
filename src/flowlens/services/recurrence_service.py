"""
Recurrence service - builds recurrence rules and projects their occurrences.

Handles:
- Building a validated RecurrenceRule from a frequency, start and end condition
- Projecting occurrences inside a window (lazy, bounded, restartable)
- Finding the next occurrence after an anchor and planning which occurrences a
  recurring transaction still needs materialized
- Describing rules for display and exchanging them as RFC 5545 RRULE strings

Occurrence k of a rule is always computed from the rule's start date (start +
k steps), never from the previous occurrence. That keeps monthly rules on their
original day of month after a short month (Jan 31 -> Feb 28 -> Mar 31) and
lets AfterOccurrences caps count from the start no matter where a window begins.
"""

from __future__ import annotations

import logging
from collections.abc import Iterator
from datetime import datetime, timedelta

from dateutil.parser import isoparse
from dateutil.relativedelta import relativedelta
from dateutil.rrule import DAILY, MONTHLY, WEEKLY, YEARLY, rrule, rrulestr

from flowlens.config import DEFAULT_MAX_OCCURRENCES
from flowlens.model.recurrence import (
    AfterOccurrences,
    Frequency,
    InvalidRecurrenceError,
    Never,
    OnDate,
    RecurrenceEnd,
    RecurrenceRule,
)

logger = logging.getLogger(__name__)

# Frequency -> (RRULE freq, interval)
RRULE_FREQUENCIES: dict[Frequency, tuple[int, int]] = {
    Frequency.daily: (DAILY, 1),
    Frequency.weekly: (WEEKLY, 1),
    Frequency.biweekly: (WEEKLY, 2),
    Frequency.monthly: (MONTHLY, 1),
    Frequency.yearly: (YEARLY, 1),
}

_RRULE_FREQ_NAMES = {"DAILY": DAILY, "WEEKLY": WEEKLY, "MONTHLY": MONTHLY, "YEARLY": YEARLY}

_FIXED_STEPS: dict[Frequency, timedelta] = {
    Frequency.daily: timedelta(days=1),
    Frequency.weekly: timedelta(weeks=1),
    Frequency.biweekly: timedelta(weeks=2),
}


def build_rule(
    frequency: Frequency,
    start_date: datetime,
    end: RecurrenceEnd | None = None,
) -> RecurrenceRule:
    """Build a recurrence rule.

    Args:
        frequency: How often the transaction repeats
        start_date: Exact instant of the first occurrence (not normalized)
        end: Never (default), OnDate or AfterOccurrences

    Returns:
        RecurrenceRule

    Raises:
        InvalidRecurrenceError: if an AfterOccurrences count is below 1
    """
    end = end if end is not None else Never()
    if isinstance(end, AfterOccurrences) and end.count < 1:
        raise InvalidRecurrenceError(f"Occurrence count must be at least 1, got {end.count}")

    rule = RecurrenceRule(frequency=Frequency(frequency), start_date=start_date, end=end)
    logger.debug("Built %s rule starting %s ending %r", rule.frequency, rule.start_date, rule.end)
    return rule


def occurrence_at(rule: RecurrenceRule, index: int) -> datetime:
    """The index-th occurrence of a rule (0 = start date), ignoring its end condition."""
    if rule.frequency in _FIXED_STEPS:
        return rule.start_date + _FIXED_STEPS[rule.frequency] * index
    if rule.frequency == Frequency.monthly:
        return rule.start_date + relativedelta(months=index)
    return rule.start_date + relativedelta(years=index)


def _first_index_near(rule: RecurrenceRule, moment: datetime) -> int:
    """An occurrence index at or before the first occurrence >= moment."""
    if moment <= rule.start_date:
        return 0
    if rule.frequency in _FIXED_STEPS:
        step = _FIXED_STEPS[rule.frequency]
        return (moment - rule.start_date) // step
    start = rule.start_date
    months = (moment.year - start.year) * 12 + (moment.month - start.month)
    if rule.frequency == Frequency.monthly:
        return max(0, months - 1)
    return max(0, months // 12 - 1)


def _within_end(rule: RecurrenceRule, index: int, occurrence: datetime) -> bool:
    if isinstance(rule.end, AfterOccurrences):
        return index < rule.end.count
    if isinstance(rule.end, OnDate):
        return occurrence <= rule.end.date
    return True


def project_occurrences(
    rule: RecurrenceRule,
    window_start: datetime,
    window_end: datetime,
    max_results: int | None = DEFAULT_MAX_OCCURRENCES,
) -> Iterator[datetime]:
    """Lazily yield the rule's occurrences that fall inside a window.

    Yields occurrences >= max(rule.start_date, window_start) in increasing
    order and stops at the first of: an occurrence after window_end, the
    rule's end condition, or max_results occurrences yielded. Calling again
    with the same arguments reproduces the same sequence.

    Args:
        rule: Recurrence rule to project
        window_start: Inclusive lower bound
        window_end: Inclusive upper bound
        max_results: Cap on yielded occurrences (None = bounded by the window only)
    """
    if max_results is not None and max_results <= 0:
        return

    emitted = 0
    index = _first_index_near(rule, window_start)
    while True:
        try:
            occurrence = occurrence_at(rule, index)
        except (OverflowError, ValueError):
            # Stepped past datetime.max; nothing representable remains
            logger.debug("Projection stopped at datetime bounds after index %d", index)
            return
        if not _within_end(rule, index, occurrence):
            logger.debug("Projection stopped by rule end %r at index %d", rule.end, index)
            return
        if occurrence > window_end:
            return
        if occurrence >= window_start:
            yield occurrence
            emitted += 1
            if max_results is not None and emitted >= max_results:
                return
        index += 1


def count_occurrences_between(start: datetime, end: datetime, frequency: Frequency) -> int:
    """Number of occurrences from start to end, both inclusive; 0 if end < start."""
    if end < start:
        return 0
    rule = build_rule(frequency, start, OnDate(date=end))
    return sum(1 for _ in project_occurrences(rule, start, end, max_results=None))


def next_occurrence(
    rule: RecurrenceRule,
    window_start: datetime,
    window_end: datetime,
    anchor: datetime,
) -> datetime | None:
    """The first occurrence after `anchor` inside [window_start, window_end].

    When the anchor lies before the window, an occurrence exactly on
    window_start counts; otherwise the search is strictly after the anchor so
    an occurrence already generated at the anchor is skipped.
    """
    if anchor > window_end:
        return None
    inclusive = anchor < window_start
    search_from = window_start if inclusive else anchor
    for occurrence in project_occurrences(rule, search_from, window_end, max_results=None):
        if inclusive or occurrence > anchor:
            return occurrence
    return None


def due_occurrences(
    rule: RecurrenceRule,
    anchor: datetime,
    last_generated: datetime | None = None,
    limit: int = DEFAULT_MAX_OCCURRENCES,
) -> list[datetime]:
    """Occurrences a recurring transaction still needs written to the store.

    Returns every missed occurrence before `anchor` (catch-up) plus exactly one
    at or after `anchor` (one ahead), all strictly after `last_generated`.
    Nothing is due once an occurrence at or past the anchor already exists.

    Args:
        rule: Recurrence rule of the recurring transaction
        anchor: Reference instant, usually "now"
        last_generated: Date of the latest materialized occurrence, if any
        limit: Cap on the number of occurrences returned
    """
    if last_generated is not None and last_generated >= anchor:
        return []

    search_from = last_generated if last_generated is not None else rule.start_date
    due: list[datetime] = []
    for occurrence in project_occurrences(rule, search_from, datetime.max, max_results=None):
        if last_generated is not None and occurrence <= last_generated:
            continue
        due.append(occurrence)
        if occurrence >= anchor or len(due) >= limit:
            break

    logger.debug("%d occurrence(s) due for rule starting %s", len(due), rule.start_date)
    return due


def _ordinal(n: int) -> str:
    if 10 <= n % 100 <= 20:
        suffix = "th"
    else:
        suffix = {1: "st", 2: "nd", 3: "rd"}.get(n % 10, "th")
    return f"{n}{suffix}"


def describe_rule(rule: RecurrenceRule) -> str:
    """Human label such as "Every month, 15th, 3 times"."""
    start = rule.start_date
    if rule.frequency == Frequency.daily:
        text = "Every day"
    elif rule.frequency == Frequency.weekly:
        text = f"Every week, {start.strftime('%A')}"
    elif rule.frequency == Frequency.biweekly:
        text = f"Every 2 weeks, {start.strftime('%A')}"
    elif rule.frequency == Frequency.monthly:
        text = f"Every month, {_ordinal(start.day)}"
    else:
        text = f"Every year, {start.strftime('%B')} {start.day}"

    if isinstance(rule.end, AfterOccurrences):
        times = "time" if rule.end.count == 1 else "times"
        text += f", {rule.end.count} {times}"
    elif isinstance(rule.end, OnDate):
        until = rule.end.date
        text += f", until {until.strftime('%b')} {until.day}, {until.year}"
    return text


def to_rrule_string(rule: RecurrenceRule) -> str:
    """Encode a rule as a DTSTART + RRULE string (RFC 5545).

    Biweekly rules become WEEKLY;INTERVAL=2. The string is for storage and
    interchange; projection keeps its own month-end clamping.
    """
    freq, interval = RRULE_FREQUENCIES[rule.frequency]
    kwargs = {}
    if isinstance(rule.end, OnDate):
        kwargs["until"] = rule.end.date
    elif isinstance(rule.end, AfterOccurrences):
        kwargs["count"] = rule.end.count
    return str(rrule(freq, interval=interval, dtstart=rule.start_date, **kwargs))


def _naive(moment: datetime) -> datetime:
    # Rules are kept in local wall time
    return moment.replace(tzinfo=None) if moment.tzinfo is not None else moment


def from_rrule_string(text: str) -> RecurrenceRule:
    """Parse a DTSTART + RRULE string produced by to_rrule_string.

    Raises:
        InvalidRecurrenceError: if the string is malformed or uses a
            frequency/interval combination with no Frequency counterpart
    """
    try:
        rrulestr(text, forceset=False)
    except (ValueError, TypeError) as e:
        raise InvalidRecurrenceError(f"Invalid RRULE string: {e}") from e

    dtstart: datetime | None = None
    params: dict[str, str] = {}
    for line in text.strip().splitlines():
        name, _, value = line.strip().partition(":")
        if name.upper().startswith("DTSTART"):
            dtstart = _naive(isoparse(value))
        elif name.upper() == "RRULE":
            for part in value.split(";"):
                key, _, val = part.partition("=")
                params[key.upper()] = val

    if dtstart is None:
        raise InvalidRecurrenceError("RRULE string has no DTSTART")

    freq = _RRULE_FREQ_NAMES.get(params.get("FREQ", "").upper())
    interval = int(params.get("INTERVAL", "1"))
    frequency = next(
        (f for f, spec in RRULE_FREQUENCIES.items() if spec == (freq, interval)),
        None,
    )
    if frequency is None:
        raise InvalidRecurrenceError(
            f"Unsupported recurrence FREQ={params.get('FREQ')} INTERVAL={interval}"
        )

    end: RecurrenceEnd
    if "COUNT" in params:
        end = AfterOccurrences(count=int(params["COUNT"]))
    elif "UNTIL" in params:
        end = OnDate(date=_naive(isoparse(params["UNTIL"])))
    else:
        end = Never()
    return build_rule(frequency, dtstart, end)


__all__ = [
    "build_rule",
    "count_occurrences_between",
    "describe_rule",
    "due_occurrences",
    "from_rrule_string",
    "next_occurrence",
    "occurrence_at",
    "project_occurrences",
    "to_rrule_string",
]
