"""
CookPlan utility modules.
"""
from cookplan.utils.sanitization import (
    clamp_temperature,
    clamp_duration,
    round_half_up,
    sanitize_text_input,
    require_text,
    ClampedTemperature,
    ClampedDuration,
    SanitizedStr,
    SanitizedName,
)

__all__ = [
    "clamp_temperature",
    "clamp_duration",
    "round_half_up",
    "sanitize_text_input",
    "require_text",
    "ClampedTemperature",
    "ClampedDuration",
    "SanitizedStr",
    "SanitizedName",
]
