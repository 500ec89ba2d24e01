"""
Temperature compatibility hints for manual batches.

Helps users judge whether the items they grouped together can share one
chamber temperature:
- ok: spread within 10C, cook at the average
- warning: 10-25C spread, works but not ideal
- mismatch: more than 25C, consider separate batches
"""
from typing import List

from cookplan.config import settings
from cookplan.models.schemas import HintSeverity, SessionItem, TemperatureHint
from cookplan.utils.sanitization import round_half_up

WARNING_SPREAD_CELSIUS = 25


def get_average_temperature(items: List[SessionItem]) -> int:
    """Rounded average temperature of a batch; the default temperature when empty."""
    if not items:
        return settings.default_temperature
    return round_half_up(sum(item.temperature for item in items) / len(items))


def get_longest_cook_time(items: List[SessionItem]) -> int:
    """Longest cook time in a batch (determines phase duration)."""
    if not items:
        return 0
    return max(item.time_minutes for item in items)


def calculate_temperature_hint(items: List[SessionItem]) -> TemperatureHint:
    """Classify the temperature spread of a group of items."""
    if not items:
        return TemperatureHint(severity=HintSeverity.OK, message="No items")

    temps = [item.temperature for item in items]
    low, high = min(temps), max(temps)

    if len(items) == 1:
        return TemperatureHint(
            severity=HintSeverity.OK,
            message=f"{low}C",
            min_temperature=low,
            max_temperature=high,
        )

    spread = high - low
    midpoint = round_half_up((low + high) / 2)

    if spread <= settings.temperature_tolerance_celsius:
        severity = HintSeverity.OK
        message = f"Good match ({midpoint}C)"
    elif spread <= WARNING_SPREAD_CELSIUS:
        severity = HintSeverity.WARNING
        message = f"{spread}C range - cook at {midpoint}C"
    else:
        severity = HintSeverity.MISMATCH
        message = f"{spread}C gap - consider separate batches"

    return TemperatureHint(
        severity=severity,
        message=message,
        min_temperature=low,
        max_temperature=high,
    )
