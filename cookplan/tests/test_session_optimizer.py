"""
Unit tests for the cooking session optimizer.

Covers automatic temperature grouping, manual batches and the summary helpers.
"""

import pytest

from cookplan.engine.session_optimizer import (
    CookingSessionOptimizer,
    estimate_total_time,
    get_optimization_summary,
    optimize_cooking_session,
    validate_items,
)
from cookplan.models.schemas import (
    CookingBatch, OptimizationMode, OptimizationOptions, OptimizationResult,
)


@pytest.fixture
def optimizer():
    return CookingSessionOptimizer(rest_between_phases=2)


def manual(*batches):
    return OptimizationOptions(mode=OptimizationMode.MANUAL_BATCHES, batches=list(batches))


class TestAutoOptimization:
    """Tests for automatic temperature grouping."""

    def test_empty_items_give_zero_result(self, optimizer):
        result = optimizer.optimize([])

        assert result.phases == []
        assert result.total_minutes == 0
        assert result.temperature_groups == 0
        assert result.parallel_items == 0
        assert result.efficiency_gain == 0

    def test_single_cluster(self, optimizer, chicken_and_potatoes):
        result = optimizer.optimize(chicken_and_potatoes)

        assert len(result.phases) == 1
        phase = result.phases[0]
        assert phase.target_temperature == 200
        assert phase.total_duration_minutes == 25
        assert phase.rest_minutes_after == 0
        assert [(e.minute_offset, e.instruction) for e in phase.events] == [
            (0, "Add chicken"),
            (5, "Add potatoes"),
            (12, "Shake/flip chicken"),
            (25, "Remove chicken, Remove potatoes"),
        ]
        assert result.total_minutes == 25
        assert result.efficiency_gain == 20
        assert result.parallel_items == 2

    def test_scheduled_items_carry_offsets(self, optimizer, chicken_and_potatoes):
        result = optimizer.optimize(chicken_and_potatoes)
        scheduled = {item.name: item for item in result.scheduled_items}

        assert scheduled["chicken"].start_offset_minutes == 0
        assert scheduled["potatoes"].start_offset_minutes == 5
        assert scheduled["potatoes"].end_offset_minutes == 25
        assert {item.phase_id for item in result.scheduled_items} == {"phase-0"}

    def test_two_phases_with_rest(self, optimizer, mixed_items):
        result = optimizer.optimize(mixed_items)

        assert [p.target_temperature for p in result.phases] == [180, 200]
        assert [p.rest_minutes_after for p in result.phases] == [2, 0]
        assert result.total_minutes == 12 + 2 + 25
        assert result.temperature_groups == 2
        assert result.parallel_items == 4
        assert result.efficiency_gain == 8 + 20

    def test_total_minutes_is_durations_plus_rests(self, optimizer, make_item):
        items = [
            make_item("a", temperature=100, time_minutes=10),
            make_item("b", temperature=150, time_minutes=20),
            make_item("c", temperature=200, time_minutes=30),
        ]

        result = optimizer.optimize(items)

        durations = sum(p.total_duration_minutes for p in result.phases)
        assert result.total_minutes == durations + 2 * (len(result.phases) - 1)

    def test_single_item_phases_save_nothing(self, optimizer, make_item):
        items = [
            make_item("a", temperature=100, time_minutes=10),
            make_item("b", temperature=200, time_minutes=20),
        ]

        result = optimizer.optimize(items)

        assert result.efficiency_gain == 0
        assert result.parallel_items == 0

    def test_every_item_in_exactly_one_phase(self, optimizer, mixed_items):
        result = optimizer.optimize(mixed_items)

        phase_ids = [item_id for phase in result.phases for item_id in phase.item_ids]
        assert sorted(phase_ids) == sorted(item.id for item in mixed_items)

    def test_optimization_is_idempotent(self, optimizer, mixed_items):
        first = optimizer.optimize(mixed_items)
        second = optimizer.optimize(mixed_items)

        assert first.model_dump() == second.model_dump()

    def test_out_of_range_values_are_clamped(self, optimizer, make_item):
        item = make_item("pizza", temperature=180, time_minutes=10)
        # model_construct skips validation, like data loaded from an old store
        raw = item.model_construct(**{**item.model_dump(), "temperature": 300, "time_minutes": 500})

        result = optimizer.optimize([raw])

        assert result.phases[0].target_temperature == 260
        assert result.phases[0].total_duration_minutes == 120

    def test_custom_rest(self, mixed_items):
        result = CookingSessionOptimizer(rest_between_phases=5).optimize(mixed_items)

        assert result.total_minutes == 12 + 5 + 25


class TestManualBatches:
    """Tests for user-defined batches."""

    def test_batches_define_phases_in_order(self, optimizer, mixed_items):
        first = CookingBatch(id="batch-a", order=2, item_ids=["chicken", "broccoli"])
        second = CookingBatch(id="batch-b", order=1, item_ids=["potatoes"])

        result = optimizer.optimize(mixed_items, manual(first, second))

        assert [p.id for p in result.phases] == ["batch-b", "batch-a"]
        assert result.phases[1].target_temperature == 190
        assert result.phases[1].total_duration_minutes == 25

    def test_empty_batch_is_skipped(self, optimizer, chicken_and_potatoes):
        full = CookingBatch(order=1, item_ids=["chicken", "potatoes"])
        empty = CookingBatch(order=2, item_ids=[])

        result = optimizer.optimize(chicken_and_potatoes, manual(full, empty))

        assert len(result.phases) == 1
        assert result.phases[0].rest_minutes_after == 0
        assert result.total_minutes == 25

    def test_unassigned_items_are_not_cooked(self, optimizer, mixed_items):
        batch = CookingBatch(order=1, item_ids=["chicken"])

        result = optimizer.optimize(mixed_items, manual(batch))

        assert result.phases[0].item_ids == ["chicken"]
        assert [item.id for item in result.scheduled_items] == ["chicken"]

    def test_no_batches_give_zero_result(self, optimizer, mixed_items):
        result = optimizer.optimize(mixed_items, manual())

        assert result.phases == []
        assert result.total_minutes == 0

    def test_unknown_item_ids_are_ignored(self, optimizer, chicken_and_potatoes):
        batch = CookingBatch(order=1, item_ids=["ghost", "potatoes"])

        result = optimizer.optimize(chicken_and_potatoes, manual(batch))

        assert result.phases[0].item_ids == ["potatoes"]

    def test_repeated_item_in_one_batch_cooks_once(self, optimizer, make_item):
        batch = CookingBatch(order=1, item_ids=["chicken", "chicken"])

        result = optimizer.optimize([make_item("chicken", time_minutes=25)], manual(batch))

        assert result.phases[0].item_ids == ["chicken"]
        assert [(e.minute_offset, e.instruction) for e in result.phases[0].events] == [
            (0, "Add chicken"),
            (25, "Remove chicken"),
        ]
        assert result.efficiency_gain == 0
        assert result.parallel_items == 0

    def test_item_listed_in_two_batches_stays_in_the_first(self, optimizer, chicken_and_potatoes):
        first = CookingBatch(order=1, item_ids=["chicken"])
        second = CookingBatch(order=2, item_ids=["chicken", "potatoes"])

        result = optimizer.optimize(chicken_and_potatoes, manual(second, first))

        assert [p.item_ids for p in result.phases] == [["chicken"], ["potatoes"]]
        assert [item.id for item in result.scheduled_items] == ["chicken", "potatoes"]
        assert result.total_minutes == 25 + 2 + 20
        assert result.efficiency_gain == 0

    def test_mismatched_temperatures_still_cook_together(self, optimizer, make_item):
        items = [
            make_item("steak", temperature=230, time_minutes=10),
            make_item("veg", temperature=160, time_minutes=15),
        ]
        batch = CookingBatch(order=1, item_ids=["steak", "veg"])

        result = optimizer.optimize(items, manual(batch))

        assert len(result.phases) == 1
        assert result.phases[0].target_temperature == 195
        assert result.efficiency_gain == 10


class TestEstimates:

    def test_estimate_matches_full_optimization(self, optimizer, mixed_items):
        assert optimizer.estimate_total_time(mixed_items) == optimizer.optimize(mixed_items).total_minutes

    def test_estimate_of_nothing(self, optimizer):
        assert optimizer.estimate_total_time([]) == 0

    def test_module_helpers_use_defaults(self, mixed_items):
        assert estimate_total_time(mixed_items) == 39
        assert optimize_cooking_session(mixed_items).total_minutes == 39

    def test_validate_items_returns_copies(self, chicken_and_potatoes):
        validated = validate_items(chicken_and_potatoes)

        assert validated[0] is not chicken_and_potatoes[0]
        assert validated[0].model_dump() == chicken_and_potatoes[0].model_dump()


class TestSummary:

    def test_empty_result(self):
        assert get_optimization_summary(OptimizationResult()) == "No items to cook"

    def test_full_summary(self, optimizer, mixed_items):
        summary = get_optimization_summary(optimizer.optimize(mixed_items))

        assert summary.splitlines() == [
            "Total time: 39 minutes",
            "Temperature phases: 2",
            "Items cooking in parallel: 4",
            "Time saved vs sequential: ~28 min",
        ]

    def test_summary_omits_zero_savings(self, optimizer, make_item):
        summary = get_optimization_summary(optimizer.optimize([make_item("fries")]))

        assert "parallel" not in summary
        assert "saved" not in summary
