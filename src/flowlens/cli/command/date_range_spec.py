from __future__ import annotations

from datetime import datetime

import pytest

from flowlens.cli.command.date_range import build_selector, run
from flowlens.model.date_range import ByMonth, ByYear, Custom, Preset, PresetId

NOW = datetime(2024, 3, 13, 15, 45)


class DescribeBuildSelector:
    def it_should_map_a_month_option_to_a_zero_based_index(self):
        assert build_selector(month="2024-03") == ByMonth(year=2024, month_index=2)

    def it_should_map_presets_and_years(self):
        assert build_selector(preset="thisWeek") == Preset(id=PresetId.this_week)
        assert build_selector(year=2023) == ByYear(year=2023)

    def it_should_use_one_custom_bound_for_both_ends(self):
        assert build_selector(start="2024-03-10") == Custom(start=datetime(2024, 3, 10), end=datetime(2024, 3, 10))

    def it_should_return_none_without_options(self):
        assert build_selector() is None

    def it_should_reject_more_than_one_selection(self):
        with pytest.raises(ValueError):
            build_selector(preset="last30", month="2024-03")


class DescribeDateRangeCommand:
    def it_should_print_the_resolved_bounds(self, capsys):
        rc = run(preset="thisMonth", now=NOW)

        out = capsys.readouterr().out
        assert rc == 0
        assert "2024-03-01 00:00:00" in out
        assert "2024-03-31 23:59:59" in out

    def it_should_swap_reversed_custom_bounds(self, capsys):
        rc = run(start="2024-03-10", end="2024-03-01", now=NOW)

        out = capsys.readouterr().out
        assert rc == 0
        assert out.index("2024-03-01 00:00:00") < out.index("2024-03-10 23:59:59")

    def it_should_fail_on_an_unknown_preset(self):
        assert run(preset="nextWeek", now=NOW) == 1

    def it_should_fail_without_a_selection(self):
        assert run(now=NOW) == 1
