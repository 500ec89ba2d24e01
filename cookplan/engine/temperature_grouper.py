"""
Temperature grouping for cooking sessions.
Partitions items into clusters that can share one chamber temperature.
"""
from dataclasses import dataclass, field
from typing import List, Optional

from cookplan.config import settings
from cookplan.models.schemas import SessionItem
from cookplan.utils.sanitization import round_half_up


@dataclass
class TemperatureGroup:
    """Items that cook together at one target temperature."""

    target_temperature: int
    items: List[SessionItem] = field(default_factory=list)


@dataclass
class GroupingStats:
    """Efficiency stats for a grouping."""

    temperature_groups: int
    total_items: int
    parallel_items: int
    sequential_phases: int
    batched_phases: int


def group_by_temperature(
    items: List[SessionItem],
    tolerance: Optional[float] = None,
) -> List[TemperatureGroup]:
    """
    Group items by similar temperature in a single greedy pass.

    Items are sorted ascending by temperature. Each item joins the current
    group when it lies within the tolerance of the group's running average,
    otherwise the group is closed and a new one starts with that item. This
    keeps the phase count low while bounding the spread inside a phase; it is
    not a globally optimal partition.

    Args:
        items: Validated session items.
        tolerance: Max distance (C) from the running average. Defaults to config.

    Returns:
        Groups in ascending temperature order. Empty input gives an empty list.
    """
    if not items:
        return []

    limit = settings.temperature_tolerance_celsius if tolerance is None else tolerance
    ordered = sorted(items, key=lambda item: item.temperature)

    groups: List[TemperatureGroup] = []
    current: List[SessionItem] = []
    running_total = 0.0

    for item in ordered:
        if current:
            running_average = running_total / len(current)
            if abs(item.temperature - running_average) <= limit:
                current.append(item)
                running_total += item.temperature
                continue
            groups.append(_close_group(current, running_total))

        current = [item]
        running_total = float(item.temperature)

    groups.append(_close_group(current, running_total))
    return groups


def _close_group(items: List[SessionItem], running_total: float) -> TemperatureGroup:
    """Freeze a group with its rounded average as the target temperature."""
    return TemperatureGroup(
        target_temperature=round_half_up(running_total / len(items)),
        items=list(items),
    )


def calculate_grouping_stats(groups: List[TemperatureGroup]) -> GroupingStats:
    """Calculate efficiency stats for the grouping."""
    total_items = sum(len(group.items) for group in groups)
    parallel_items = sum(len(group.items) for group in groups if len(group.items) > 1)

    return GroupingStats(
        temperature_groups=len(groups),
        total_items=total_items,
        parallel_items=parallel_items,
        # If we cooked everything sequentially vs batched
        sequential_phases=total_items,
        batched_phases=len(groups),
    )
