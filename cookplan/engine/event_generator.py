"""
Timeline events for a cooking phase.
Turns staggered items into minute-stamped add / shake / remove instructions.
"""
import logging
from itertools import groupby
from typing import List

from cookplan.models.schemas import EventStep, EventType, PhaseEvent, SessionItem
from cookplan.engine.stagger_calculator import format_minute_offset

logger = logging.getLogger(__name__)

INSTRUCTION_SEPARATOR = ", "


def generate_phase_events(
    staggered_items: List[SessionItem],
    phase_temperature: int,
    phase_id: str = "phase",
) -> List[PhaseEvent]:
    """
    Generate one event per instruction for a phase.

    Each item gets an add event at its start offset, a shake reminder halfway
    through its own cook time (when requested) and a remove event at its end
    offset.

    Args:
        staggered_items: Items with start/end offsets from the stagger calculator.
        phase_temperature: Target temperature of the phase (for logging only).
        phase_id: Prefix for the generated event ids.

    Returns:
        Events sorted by minute offset; same-minute events keep item order.
    """
    steps: List[tuple] = []

    for item in staggered_items:
        start = item.start_offset_minutes or 0
        end = item.end_offset_minutes if item.end_offset_minutes is not None else start + item.time_minutes

        steps.append((start, EventStep(
            event_type=EventType.ADD_ITEM,
            item_id=item.id,
            item_name=item.name,
            instruction=f"Add {item.name}",
        )))

        if item.shake_halfway:
            steps.append((start + item.time_minutes // 2, EventStep(
                event_type=EventType.SHAKE_REMINDER,
                item_id=item.id,
                item_name=item.name,
                instruction=f"Shake/flip {item.name}",
            )))

        steps.append((end, EventStep(
            event_type=EventType.REMOVE_ITEM,
            item_id=item.id,
            item_name=item.name,
            instruction=f"Remove {item.name}",
        )))

    # sort is stable, so same-minute steps stay in item order
    steps.sort(key=lambda entry: entry[0])

    events = [
        PhaseEvent(
            id=f"{phase_id}-step-{index}",
            minute_offset=minute,
            event_type=step.event_type,
            instruction=step.instruction,
            steps=[step],
        )
        for index, (minute, step) in enumerate(steps)
    ]
    logger.debug(
        f"Generated {len(events)} events for {len(staggered_items)} items at {phase_temperature}C"
    )
    return events


def consolidate_events(events: List[PhaseEvent], phase_id: str = "phase") -> List[PhaseEvent]:
    """
    Merge events that share a minute offset into one combined instruction.

    E.g. two removals at minute 25 become "Remove chicken, Remove potatoes".
    The merged event keeps every constituent step, so it only counts as
    completed once all of them are done.
    """
    ordered = sorted(events, key=lambda event: event.minute_offset)
    consolidated: List[PhaseEvent] = []

    for minute, same_minute in groupby(ordered, key=lambda event: event.minute_offset):
        same_minute = list(same_minute)
        steps = [step.model_copy() for event in same_minute for step in event.steps]
        event_types = {step.event_type for step in steps}

        consolidated.append(PhaseEvent(
            id=f"{phase_id}-event-{len(consolidated)}",
            minute_offset=minute,
            event_type=event_types.pop() if len(event_types) == 1 else EventType.MIXED,
            instruction=INSTRUCTION_SEPARATOR.join(event.instruction for event in same_minute),
            steps=steps,
            completed=bool(steps) and all(step.completed for step in steps),
        ))

    return consolidated


def get_event_description(event: PhaseEvent) -> str:
    """Human-readable event line, e.g. "5:00 - Add potatoes"."""
    return f"{format_minute_offset(event.minute_offset)} - {event.instruction}"
