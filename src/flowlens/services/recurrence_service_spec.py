from __future__ import annotations

"""Tests for recurrence_service: rule building, projection and RRULE exchange."""

from datetime import datetime

import pytest

from flowlens.model.recurrence import (
    AfterOccurrences,
    Frequency,
    InvalidRecurrenceError,
    Never,
    OnDate,
)
from flowlens.services.recurrence_service import (
    build_rule,
    count_occurrences_between,
    describe_rule,
    due_occurrences,
    from_rrule_string,
    next_occurrence,
    occurrence_at,
    project_occurrences,
    to_rrule_string,
)

FAR_FUTURE = datetime(2100, 1, 1)


class DescribeBuildRule:
    def it_should_default_to_never_ending(self):
        rule = build_rule(Frequency.weekly, datetime(2024, 1, 1, 9, 30))

        assert rule.end == Never()
        assert rule.start_date == datetime(2024, 1, 1, 9, 30)

    @pytest.mark.parametrize("count", [0, -3])
    def it_should_reject_non_positive_occurrence_counts(self, count):
        with pytest.raises(InvalidRecurrenceError):
            build_rule(Frequency.daily, datetime(2024, 1, 1), AfterOccurrences(count=count))

    def it_should_accept_a_single_occurrence(self):
        rule = build_rule(Frequency.daily, datetime(2024, 1, 1), AfterOccurrences(count=1))

        assert list(project_occurrences(rule, datetime(2024, 1, 1), FAR_FUTURE)) == [datetime(2024, 1, 1)]


class DescribeProjectOccurrences:
    def it_should_step_fixed_frequencies(self):
        start = datetime(2024, 1, 1, 8)
        daily = build_rule(Frequency.daily, start)
        biweekly = build_rule(Frequency.biweekly, start)

        assert list(project_occurrences(daily, start, datetime(2024, 1, 3, 8))) == [
            datetime(2024, 1, 1, 8),
            datetime(2024, 1, 2, 8),
            datetime(2024, 1, 3, 8),
        ]
        assert list(project_occurrences(biweekly, start, datetime(2024, 2, 1))) == [
            datetime(2024, 1, 1, 8),
            datetime(2024, 1, 15, 8),
            datetime(2024, 1, 29, 8),
        ]

    def it_should_clamp_monthly_rules_without_drifting(self):
        rule = build_rule(Frequency.monthly, datetime(2023, 1, 31))

        assert list(project_occurrences(rule, datetime(2023, 1, 1), datetime(2023, 4, 30))) == [
            datetime(2023, 1, 31),
            datetime(2023, 2, 28),
            datetime(2023, 3, 31),
            datetime(2023, 4, 30),
        ]

    def it_should_clamp_yearly_rules_on_leap_day(self):
        rule = build_rule(Frequency.yearly, datetime(2024, 2, 29))

        assert list(project_occurrences(rule, datetime(2024, 1, 1), datetime(2028, 12, 31))) == [
            datetime(2024, 2, 29),
            datetime(2025, 2, 28),
            datetime(2026, 2, 28),
            datetime(2027, 2, 28),
            datetime(2028, 2, 29),
        ]

    def it_should_count_occurrence_caps_from_the_start_date(self):
        rule = build_rule(Frequency.daily, datetime(2024, 1, 1), AfterOccurrences(count=3))

        result = list(project_occurrences(rule, datetime(2024, 1, 2), datetime(2024, 1, 10)))

        assert result == [datetime(2024, 1, 2), datetime(2024, 1, 3)]

    def it_should_stop_at_an_end_date(self):
        end = datetime(2024, 4, 15, 10)
        rule = build_rule(Frequency.monthly, datetime(2024, 1, 15, 9), OnDate(date=end))

        result = list(project_occurrences(rule, datetime(2024, 1, 1), FAR_FUTURE))

        assert result == [
            datetime(2024, 1, 15, 9),
            datetime(2024, 2, 15, 9),
            datetime(2024, 3, 15, 9),
            datetime(2024, 4, 15, 9),
        ]
        assert result[-1] <= end

    def it_should_never_yield_before_the_start_date(self):
        rule = build_rule(Frequency.weekly, datetime(2024, 3, 13, 12))

        result = list(project_occurrences(rule, datetime(2024, 1, 1), datetime(2024, 3, 27, 12)))

        assert result[0] == datetime(2024, 3, 13, 12)
        assert len(result) == 3

    def it_should_return_nothing_when_the_window_precedes_the_start(self):
        rule = build_rule(Frequency.daily, datetime(2024, 6, 1))

        assert list(project_occurrences(rule, datetime(2024, 1, 1), datetime(2024, 5, 31))) == []

    def it_should_cap_results(self):
        rule = build_rule(Frequency.daily, datetime(2024, 1, 1))

        assert len(list(project_occurrences(rule, datetime(2024, 1, 1), FAR_FUTURE, max_results=5))) == 5
        assert list(project_occurrences(rule, datetime(2024, 1, 1), FAR_FUTURE, max_results=0)) == []

    def it_should_cap_by_default(self):
        rule = build_rule(Frequency.daily, datetime(2024, 1, 1))

        assert len(list(project_occurrences(rule, datetime(2024, 1, 1), FAR_FUTURE))) == 500

    def it_should_be_restartable(self):
        rule = build_rule(Frequency.monthly, datetime(2024, 1, 31), AfterOccurrences(count=6))
        window = (datetime(2024, 3, 1), datetime(2024, 12, 31))

        assert list(project_occurrences(rule, *window)) == list(project_occurrences(rule, *window))

    def it_should_start_mid_series_without_replaying_from_the_start(self):
        rule = build_rule(Frequency.monthly, datetime(2000, 1, 31))

        result = list(project_occurrences(rule, datetime(2024, 2, 1), datetime(2024, 3, 31)))

        assert result == [datetime(2024, 2, 29), datetime(2024, 3, 31)]

    def it_should_stop_at_datetime_bounds(self):
        rule = build_rule(Frequency.yearly, datetime(9997, 6, 1))

        result = list(project_occurrences(rule, datetime(9997, 1, 1), datetime.max, max_results=None))

        assert result == [datetime(9997, 6, 1), datetime(9998, 6, 1), datetime(9999, 6, 1)]


class DescribeOccurrenceAt:
    def it_should_compute_from_the_start_date(self):
        rule = build_rule(Frequency.monthly, datetime(2023, 1, 31))

        assert occurrence_at(rule, 0) == datetime(2023, 1, 31)
        assert occurrence_at(rule, 2) == datetime(2023, 3, 31)


class DescribeCountOccurrencesBetween:
    def it_should_count_both_ends_inclusive(self):
        assert count_occurrences_between(datetime(2024, 1, 1), datetime(2024, 1, 31), Frequency.daily) == 31
        assert count_occurrences_between(datetime(2024, 1, 1), datetime(2024, 1, 29), Frequency.weekly) == 5

    def it_should_count_clamped_months(self):
        assert count_occurrences_between(datetime(2023, 1, 31), datetime(2023, 12, 31), Frequency.monthly) == 12

    def it_should_return_zero_for_a_reversed_range(self):
        assert count_occurrences_between(datetime(2024, 2, 1), datetime(2024, 1, 1), Frequency.daily) == 0


class DescribeNextOccurrence:
    @pytest.fixture
    def rule(self):
        return build_rule(Frequency.monthly, datetime(2024, 1, 15))

    def it_should_find_the_first_occurrence_after_the_anchor(self, rule):
        window = (datetime(2024, 1, 1), datetime(2024, 12, 31))

        assert next_occurrence(rule, *window, anchor=datetime(2024, 2, 15)) == datetime(2024, 3, 15)

    def it_should_start_at_the_window_when_the_anchor_precedes_it(self, rule):
        window = (datetime(2024, 1, 1), datetime(2024, 12, 31))

        assert next_occurrence(rule, *window, anchor=datetime(2023, 12, 20)) == datetime(2024, 1, 15)

    def it_should_include_an_occurrence_on_the_window_start(self):
        rule = build_rule(Frequency.daily, datetime(2024, 1, 1))

        result = next_occurrence(rule, datetime(2024, 1, 5), datetime(2024, 1, 31), anchor=datetime(2024, 1, 3))

        assert result == datetime(2024, 1, 5)

    def it_should_skip_an_occurrence_on_the_anchor(self):
        rule = build_rule(Frequency.daily, datetime(2024, 1, 1))

        result = next_occurrence(rule, datetime(2024, 1, 5), datetime(2024, 1, 31), anchor=datetime(2024, 1, 5))

        assert result == datetime(2024, 1, 6)

    def it_should_return_none_past_the_window(self, rule):
        window = (datetime(2024, 1, 1), datetime(2024, 3, 31))

        assert next_occurrence(rule, *window, anchor=datetime(2024, 4, 1)) is None
        assert next_occurrence(rule, *window, anchor=datetime(2024, 3, 15)) is None


class DescribeDueOccurrences:
    @pytest.fixture
    def rule(self):
        return build_rule(Frequency.daily, datetime(2024, 1, 1))

    def it_should_catch_up_and_stay_one_ahead(self, rule):
        result = due_occurrences(rule, anchor=datetime(2024, 1, 3, 12))

        assert result == [
            datetime(2024, 1, 1),
            datetime(2024, 1, 2),
            datetime(2024, 1, 3),
            datetime(2024, 1, 4),
        ]

    def it_should_resume_after_the_last_generated_occurrence(self, rule):
        result = due_occurrences(rule, anchor=datetime(2024, 1, 3, 12), last_generated=datetime(2024, 1, 2))

        assert result == [datetime(2024, 1, 3), datetime(2024, 1, 4)]

    def it_should_return_nothing_once_ahead_of_the_anchor(self, rule):
        assert due_occurrences(rule, anchor=datetime(2024, 1, 3), last_generated=datetime(2024, 1, 4)) == []

    def it_should_honour_the_rule_end(self):
        rule = build_rule(Frequency.daily, datetime(2024, 1, 1), AfterOccurrences(count=2))

        assert due_occurrences(rule, anchor=datetime(2024, 1, 10)) == [datetime(2024, 1, 1), datetime(2024, 1, 2)]

    def it_should_respect_the_limit(self, rule):
        assert len(due_occurrences(rule, anchor=datetime(2024, 12, 31), limit=2)) == 2


class DescribeDescribeRule:
    def it_should_describe_monthly_rules_with_a_count(self):
        rule = build_rule(Frequency.monthly, datetime(2024, 1, 15), AfterOccurrences(count=3))

        assert describe_rule(rule) == "Every month, 15th, 3 times"

    def it_should_describe_weekly_rules_by_weekday(self):
        assert describe_rule(build_rule(Frequency.weekly, datetime(2024, 3, 13))) == "Every week, Wednesday"
        assert describe_rule(build_rule(Frequency.biweekly, datetime(2024, 3, 13))) == "Every 2 weeks, Wednesday"

    def it_should_describe_yearly_rules_with_an_end_date(self):
        rule = build_rule(Frequency.yearly, datetime(2024, 1, 15), OnDate(date=datetime(2025, 3, 1)))

        assert describe_rule(rule) == "Every year, January 15, until Mar 1, 2025"

    @pytest.mark.parametrize(
        "day, expected",
        [(1, "1st"), (2, "2nd"), (3, "3rd"), (4, "4th"), (11, "11th"), (12, "12th"), (13, "13th"), (22, "22nd"), (31, "31st")],
    )
    def it_should_use_ordinal_days(self, day, expected):
        rule = build_rule(Frequency.monthly, datetime(2024, 1, day))

        assert describe_rule(rule) == f"Every month, {expected}"

    def it_should_use_singular_for_one_time(self):
        rule = build_rule(Frequency.daily, datetime(2024, 1, 1), AfterOccurrences(count=1))

        assert describe_rule(rule) == "Every day, 1 time"


class DescribeRRuleStrings:
    def it_should_encode_biweekly_as_a_weekly_interval(self):
        rule = build_rule(Frequency.biweekly, datetime(2024, 1, 1), AfterOccurrences(count=3))

        text = to_rrule_string(rule)

        assert "DTSTART:20240101T000000" in text
        assert "FREQ=WEEKLY" in text
        assert "INTERVAL=2" in text
        assert "COUNT=3" in text

    @pytest.mark.parametrize(
        "frequency, end",
        [
            (Frequency.daily, Never()),
            (Frequency.biweekly, AfterOccurrences(count=4)),
            (Frequency.monthly, OnDate(date=datetime(2025, 3, 1))),
        ],
    )
    def it_should_parse_its_own_output(self, frequency, end):
        rule = build_rule(frequency, datetime(2024, 1, 31, 9), end)

        assert from_rrule_string(to_rrule_string(rule)) == rule

    def it_should_reject_unsupported_frequencies(self):
        with pytest.raises(InvalidRecurrenceError):
            from_rrule_string("DTSTART:20240101T000000\nRRULE:FREQ=HOURLY")

    def it_should_require_a_start(self):
        with pytest.raises(InvalidRecurrenceError):
            from_rrule_string("RRULE:FREQ=DAILY")

    def it_should_reject_malformed_text(self):
        with pytest.raises(InvalidRecurrenceError):
            from_rrule_string("DTSTART:20240101T000000\nRRULE:FREQ=DAILY;BOGUS=1")
