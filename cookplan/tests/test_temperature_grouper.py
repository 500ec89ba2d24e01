"""
Unit tests for temperature grouping.
"""

import pytest

from cookplan.engine.temperature_grouper import (
    calculate_grouping_stats,
    group_by_temperature,
)


class TestGroupByTemperature:
    """Tests for the greedy single-pass grouping."""

    def test_empty_input_gives_no_groups(self):
        assert group_by_temperature([]) == []

    def test_single_item_forms_its_own_group(self, make_item):
        groups = group_by_temperature([make_item("fries", temperature=200)])

        assert len(groups) == 1
        assert groups[0].target_temperature == 200
        assert [i.name for i in groups[0].items] == ["fries"]

    def test_groups_are_ascending_by_temperature(self, mixed_items):
        groups = group_by_temperature(mixed_items)

        assert [g.target_temperature for g in groups] == [180, 200]
        assert [i.name for i in groups[0].items] == ["brussels", "broccoli"]
        assert [i.name for i in groups[1].items] == ["chicken", "potatoes"]

    def test_item_exactly_at_tolerance_joins_group(self, make_item):
        items = [make_item("a", temperature=180), make_item("b", temperature=190)]

        groups = group_by_temperature(items)

        assert len(groups) == 1
        assert groups[0].target_temperature == 185

    def test_item_beyond_tolerance_starts_new_group(self, make_item):
        items = [make_item("a", temperature=180), make_item("b", temperature=191)]

        groups = group_by_temperature(items)

        assert [g.target_temperature for g in groups] == [180, 191]

    def test_running_average_decides_membership(self, make_item):
        # 180, 188 -> average 184; 194 is within 10 of 184
        items = [
            make_item("a", temperature=180),
            make_item("b", temperature=188),
            make_item("c", temperature=194),
        ]

        groups = group_by_temperature(items)

        assert len(groups) == 1
        assert groups[0].target_temperature == 187

    def test_target_temperature_rounds_half_up(self, make_item):
        items = [make_item("a", temperature=181), make_item("b", temperature=182)]

        groups = group_by_temperature(items)

        assert groups[0].target_temperature == 182

    def test_every_member_is_within_tolerance_of_running_average(self, make_item):
        temps = [80, 85, 92, 100, 150, 155, 161, 200, 205, 209, 215, 260]
        items = [make_item(f"item-{t}", temperature=t) for t in temps]

        groups = group_by_temperature(items)

        for group in groups:
            total = 0.0
            for index, item in enumerate(group.items):
                if index:
                    assert abs(item.temperature - total / index) <= 10
                total += item.temperature

    def test_every_item_lands_in_exactly_one_group(self, mixed_items):
        groups = group_by_temperature(mixed_items)

        grouped_ids = [item.id for group in groups for item in group.items]
        assert sorted(grouped_ids) == sorted(item.id for item in mixed_items)

    def test_custom_tolerance(self, make_item):
        items = [make_item("a", temperature=180), make_item("b", temperature=200)]

        assert len(group_by_temperature(items, tolerance=20)) == 1
        assert len(group_by_temperature(items, tolerance=5)) == 2


class TestGroupingStats:
    """Tests for grouping efficiency stats."""

    def test_stats_for_mixed_items(self, mixed_items):
        stats = calculate_grouping_stats(group_by_temperature(mixed_items))

        assert stats.temperature_groups == 2
        assert stats.total_items == 4
        assert stats.parallel_items == 4
        assert stats.sequential_phases == 4
        assert stats.batched_phases == 2

    def test_single_item_groups_are_not_parallel(self, make_item):
        items = [make_item("a", temperature=100), make_item("b", temperature=200)]

        stats = calculate_grouping_stats(group_by_temperature(items))

        assert stats.parallel_items == 0

    @pytest.mark.parametrize("groups", [[]])
    def test_stats_for_no_groups(self, groups):
        stats = calculate_grouping_stats(groups)

        assert stats.temperature_groups == 0
        assert stats.total_items == 0
