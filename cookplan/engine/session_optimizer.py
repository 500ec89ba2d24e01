"""
Cooking session optimizer.
Orders items into single-temperature phases and staggers them so each phase
finishes all at once, minimizing total time in a one-chamber cooker.
"""
import logging
from typing import List, Optional

from cookplan.config import settings
from cookplan.models.schemas import (
    CookingBatch, CookingPhase, OptimizationMode, OptimizationOptions,
    OptimizationResult, SessionItem,
)
from cookplan.engine.event_generator import consolidate_events, generate_phase_events
from cookplan.engine.stagger_calculator import calculate_staggered_times, calculate_time_saved
from cookplan.engine.temperature_grouper import calculate_grouping_stats, group_by_temperature
from cookplan.engine.temperature_hints import get_average_temperature

logger = logging.getLogger(__name__)


def validate_items(items: List[SessionItem]) -> List[SessionItem]:
    """Return copies of the items with temperature and duration clamped to range."""
    return [SessionItem.model_validate(item.model_dump()) for item in items]


class CookingSessionOptimizer:
    """
    Build a phased cooking plan from a flat list of items.

    Supports two modes:
    - auto: items are grouped by temperature (within the configured tolerance)
    - manual_batches: the user's batches decide what cooks together; only the
      timing inside each batch is optimized

    Example input:
      - Chicken: 25min @ 200C
      - Potatoes: 20min @ 200C
      - Brussels: 12min @ 180C
      - Broccoli: 8min @ 180C

    Output phases:
      Phase 1 (180C, 12min): Brussels at 0:00, Broccoli at 4:00
      Phase 2 (200C, 25min): Chicken at 0:00, Potatoes at 5:00
    """

    def __init__(self, rest_between_phases: Optional[int] = None):
        """
        Initialize the optimizer.

        Args:
            rest_between_phases: Minutes between phases. Defaults to config.
        """
        self.rest_between_phases = (
            settings.rest_between_phases_minutes
            if rest_between_phases is None else rest_between_phases
        )

    def optimize(
        self,
        items: List[SessionItem],
        options: Optional[OptimizationOptions] = None,
    ) -> OptimizationResult:
        """
        Optimize a cooking session.

        Args:
            items: Items to cook. Out-of-range values are clamped, not rejected.
            options: Mode selection; auto grouping when omitted.

        Returns:
            OptimizationResult. Empty input gives a zero-valued result.
        """
        validated = validate_items(items)

        if options is not None and options.mode == OptimizationMode.MANUAL_BATCHES:
            return self._optimize_with_manual_batches(validated, options.batches)

        return self._optimize_auto_grouped(validated)

    def _optimize_auto_grouped(self, items: List[SessionItem]) -> OptimizationResult:
        """Group by temperature, then stagger each group."""
        if not items:
            return OptimizationResult()

        groups = group_by_temperature(items)
        stats = calculate_grouping_stats(groups)

        phase_plans = [
            (f"phase-{index}", group.target_temperature, group.items)
            for index, group in enumerate(groups)
        ]
        result = self._build_result(phase_plans)
        result.temperature_groups = stats.temperature_groups
        result.parallel_items = stats.parallel_items

        logger.debug(
            f"Auto-grouped {len(items)} items into {len(groups)} phases "
            f"({result.total_minutes} min, saves {result.efficiency_gain} min)"
        )
        return result

    def _optimize_with_manual_batches(
        self,
        items: List[SessionItem],
        batches: List[CookingBatch],
    ) -> OptimizationResult:
        """Respect the user's batches; only timing within each batch is optimized."""
        if not items or not batches:
            return OptimizationResult()

        items_by_id = {item.id: item for item in items}
        phase_plans = []
        claimed = set()

        for batch in sorted(batches, key=lambda b: b.order):
            # An item cooks once: the first batch (and first position) listing it wins
            batch_items = []
            for item_id in batch.item_ids:
                if item_id in items_by_id and item_id not in claimed:
                    batch_items.append(items_by_id[item_id])
                    claimed.add(item_id)

            # Empty batches are skipped entirely
            if not batch_items:
                continue

            phase_plans.append((batch.id, get_average_temperature(batch_items), batch_items))

        result = self._build_result(phase_plans)
        logger.debug(
            f"Planned {len(phase_plans)} manual batches "
            f"({result.total_minutes} min, saves {result.efficiency_gain} min)"
        )
        return result

    def _build_result(self, phase_plans: List[tuple]) -> OptimizationResult:
        """
        Stagger, generate events and accumulate totals for ordered phases.

        Args:
            phase_plans: (phase_id, target_temperature, items) in cooking order.
        """
        phases: List[CookingPhase] = []
        scheduled_items: List[SessionItem] = []
        total_minutes = 0
        time_saved = 0
        parallel_items = 0

        for index, (phase_id, target_temperature, phase_items) in enumerate(phase_plans):
            stagger = calculate_staggered_times(phase_items)
            time_saved += calculate_time_saved(phase_items, stagger.phase_duration)

            if len(phase_items) > 1:
                parallel_items += len(phase_items)

            events = consolidate_events(
                generate_phase_events(stagger.staggered_items, target_temperature, phase_id),
                phase_id,
            )

            # Rest after every phase except the last
            rest_after = self.rest_between_phases if index < len(phase_plans) - 1 else 0

            phases.append(CookingPhase(
                id=phase_id,
                order=index,
                target_temperature=target_temperature,
                total_duration_minutes=stagger.phase_duration,
                item_ids=[item.id for item in stagger.staggered_items],
                rest_minutes_after=rest_after,
                events=events,
            ))
            scheduled_items.extend(
                item.model_copy(update={"phase_id": phase_id})
                for item in stagger.staggered_items
            )

            total_minutes += stagger.phase_duration + rest_after

        return OptimizationResult(
            phases=phases,
            total_minutes=total_minutes,
            temperature_groups=len(phases),
            parallel_items=parallel_items,
            efficiency_gain=time_saved,
            scheduled_items=scheduled_items,
        )

    def estimate_total_time(self, items: List[SessionItem]) -> int:
        """Quick estimate of total cooking time without generating events."""
        groups = group_by_temperature(validate_items(items))

        total = 0
        for index, group in enumerate(groups):
            total += max(item.time_minutes for item in group.items)
            if index < len(groups) - 1:
                total += self.rest_between_phases

        return total


def optimize_cooking_session(
    items: List[SessionItem],
    options: Optional[OptimizationOptions] = None,
) -> OptimizationResult:
    """Optimize items with the configured defaults."""
    return CookingSessionOptimizer().optimize(items, options)


def estimate_total_time(items: List[SessionItem]) -> int:
    """Estimate total minutes with the configured defaults."""
    return CookingSessionOptimizer().estimate_total_time(items)


def get_optimization_summary(result: OptimizationResult) -> str:
    """Get a summary of the optimization for display."""
    if not result.phases:
        return "No items to cook"

    lines = [
        f"Total time: {result.total_minutes} minutes",
        f"Temperature phases: {result.temperature_groups}",
    ]

    if result.parallel_items > 0:
        lines.append(f"Items cooking in parallel: {result.parallel_items}")

    if result.efficiency_gain > 0:
        lines.append(f"Time saved vs sequential: ~{result.efficiency_gain} min")

    return "\n".join(lines)
