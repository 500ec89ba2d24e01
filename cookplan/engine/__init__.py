"""
Cooking-session scheduling engine.

Data flows one way: items are grouped into phases (temperature_grouper, or
the user's batches via batch_manager), staggered so each phase finishes at
once (stagger_calculator), turned into instructions (event_generator) and
summarized (session_optimizer). session_executor then runs the plan live.
"""

from cookplan.engine.temperature_grouper import (
    TemperatureGroup, GroupingStats, group_by_temperature, calculate_grouping_stats,
)
from cookplan.engine.stagger_calculator import (
    StaggerResult, calculate_staggered_times, calculate_time_saved, format_minute_offset,
)
from cookplan.engine.event_generator import (
    generate_phase_events, consolidate_events, get_event_description,
)
from cookplan.engine.temperature_hints import (
    calculate_temperature_hint, get_average_temperature, get_longest_cook_time,
)
from cookplan.engine.session_optimizer import (
    CookingSessionOptimizer, optimize_cooking_session, estimate_total_time,
    get_optimization_summary, validate_items,
)
from cookplan.engine.batch_manager import BatchManager
from cookplan.engine.phase_timer import PhaseTimer
from cookplan.engine.session_executor import ExecutionState, SessionExecutor

__all__ = [
    # Grouping
    "TemperatureGroup",
    "GroupingStats",
    "group_by_temperature",
    "calculate_grouping_stats",
    # Staggering
    "StaggerResult",
    "calculate_staggered_times",
    "calculate_time_saved",
    "format_minute_offset",
    # Events
    "generate_phase_events",
    "consolidate_events",
    "get_event_description",
    # Hints
    "calculate_temperature_hint",
    "get_average_temperature",
    "get_longest_cook_time",
    # Orchestration
    "CookingSessionOptimizer",
    "optimize_cooking_session",
    "estimate_total_time",
    "get_optimization_summary",
    "validate_items",
    # Batches
    "BatchManager",
    # Execution
    "PhaseTimer",
    "ExecutionState",
    "SessionExecutor",
]
