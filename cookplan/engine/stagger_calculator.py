"""
Staggered start times within a cooking phase.

Example: Chicken (25min), Potatoes (20min), Broccoli (8min)
- Phase duration = 25min (longest item)
- Chicken starts at 0:00, Potatoes at 5:00, Broccoli at 17:00
- Everything comes out at 25:00
"""
from dataclasses import dataclass, field
from typing import List

from cookplan.models.schemas import SessionItem
from cookplan.utils.sanitization import round_half_up


@dataclass
class StaggerResult:
    """Items annotated with offsets, plus the phase length."""

    staggered_items: List[SessionItem] = field(default_factory=list)
    phase_duration: int = 0


def calculate_staggered_times(items: List[SessionItem]) -> StaggerResult:
    """
    Calculate start offsets so all items finish together.

    Args:
        items: Items of one phase.

    Returns:
        StaggerResult with annotated copies sorted by start offset (earliest
        additions first; ties keep input order) and the phase duration.
    """
    if not items:
        return StaggerResult()

    # The longest cooking time sets the phase duration
    phase_duration = max(item.time_minutes for item in items)

    staggered = [
        item.model_copy(update={
            "start_offset_minutes": phase_duration - item.time_minutes,
            "end_offset_minutes": phase_duration,
        })
        for item in items
    ]
    staggered.sort(key=lambda item: item.start_offset_minutes)

    return StaggerResult(staggered_items=staggered, phase_duration=phase_duration)


def calculate_time_saved(items: List[SessionItem], phase_duration: int) -> int:
    """
    Minutes saved by cooking items together instead of one after another.

    Sequential cost is the sum of all cook times; parallel cost is the phase
    duration. Zero for a single item.
    """
    sequential_time = sum(item.time_minutes for item in items)
    return max(0, sequential_time - phase_duration)


def format_minute_offset(minutes: float) -> str:
    """
    Format a minute offset as M:SS.

    Rounds to the nearest second, so 5.999 becomes "6:00".
    """
    mins, secs = divmod(round_half_up(minutes * 60), 60)
    return f"{mins}:{secs:02d}"
