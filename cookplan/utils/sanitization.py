"""
Input sanitization utilities for cooking session data.

Items come from a casual data-entry form, so nothing here rejects input:
numbers are clamped to the nearest valid bound and free text is stripped of
markup. The Annotated types below apply the same rules inside Pydantic models.
"""
import math
import re
from typing import Annotated, Any, Optional

from pydantic import AfterValidator, BeforeValidator

from cookplan.config import settings


def _to_float(value: Any) -> float:
    """Coerce a raw value to float; anything unparseable becomes NaN."""
    if isinstance(value, bool):
        return float(value)
    try:
        return float(value)
    except (TypeError, ValueError):
        return math.nan


def round_half_up(value: float) -> int:
    """Round to the nearest integer with .5 always rounding up."""
    return int(math.floor(value + 0.5))


def clamp_temperature(value: Any) -> int:
    """
    Clamp a temperature to the configured chamber range.

    Non-finite or too-low values fall back to the default temperature rather
    than the minimum, since they usually mean "not entered yet".

    Examples:
        >>> clamp_temperature(300)
        260
        >>> clamp_temperature(float("nan"))
        180
        >>> clamp_temperature(50)
        180
    """
    temp = _to_float(value)
    if not math.isfinite(temp) or temp < settings.min_temperature:
        return settings.default_temperature
    return round_half_up(min(temp, settings.max_temperature))


def clamp_duration(value: Any) -> int:
    """
    Clamp a cook duration (minutes) to the configured range.

    Examples:
        >>> clamp_duration(0)
        1
        >>> clamp_duration(500)
        120
    """
    minutes = _to_float(value)
    if not math.isfinite(minutes):
        return settings.min_duration_minutes
    clamped = max(settings.min_duration_minutes, min(minutes, settings.max_duration_minutes))
    return round_half_up(clamped)


def sanitize_text_input(value: Optional[str]) -> Optional[str]:
    """
    Strip markup and surrounding whitespace from free text (item names, notes).

    Examples:
        >>> sanitize_text_input("  <b>Chicken</b> wings ")
        'Chicken wings'
    """
    if not value:
        return value

    # Remove HTML tags
    value = re.sub(r'<[^>]*>', '', value)
    # Remove javascript:, data:, and vbscript: URIs
    value = re.sub(r'(?i)(javascript|data|vbscript):', '', value)

    return value.strip()


def require_text(value: str) -> str:
    """Reject text that sanitizing left empty, e.g. a name that was only markup."""
    if not value:
        raise ValueError("must contain text after markup is removed")
    return value


# Annotated types for use in Pydantic models
# Usage: temperature: ClampedTemperature = 180
ClampedTemperature = Annotated[int, BeforeValidator(clamp_temperature)]
ClampedDuration = Annotated[int, BeforeValidator(clamp_duration)]
SanitizedStr = Annotated[str, AfterValidator(sanitize_text_input)]
SanitizedName = Annotated[str, AfterValidator(sanitize_text_input), AfterValidator(require_text)]
