"""
Pydantic data models for the CookPlan cooking-session engine.
"""
from datetime import datetime
from enum import Enum
from typing import List, Optional
from uuid import uuid4

from pydantic import BaseModel, ConfigDict, Field

from cookplan.utils.sanitization import (
    ClampedDuration, ClampedTemperature, SanitizedName, SanitizedStr,
)


def generate_id() -> str:
    """Generate a new random identifier for items, batches and sessions."""
    return str(uuid4())


class SessionStatus(str, Enum):
    """Lifecycle of a cooking session."""
    BUILDING = "building"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


class OptimizationMode(str, Enum):
    """How items are grouped into phases."""
    AUTO = "auto"
    MANUAL_BATCHES = "manual_batches"


class EventType(str, Enum):
    """Kind of instruction within a phase timeline."""
    ADD_ITEM = "add_item"
    SHAKE_REMINDER = "shake_reminder"
    REMOVE_ITEM = "remove_item"
    MIXED = "mixed"  # Consolidated event combining different kinds


class HintSeverity(str, Enum):
    """Temperature compatibility of items grouped together."""
    OK = "ok"
    WARNING = "warning"
    MISMATCH = "mismatch"


class QuickAddItem(BaseModel):
    """User input for a new item; values are clamped, never rejected."""
    name: SanitizedName = Field(..., description="Display name")
    temperature: ClampedTemperature = Field(default=180, description="Target temperature (C)")
    time_minutes: ClampedDuration = Field(default=10, description="Cook duration in minutes")
    shake_halfway: bool = Field(default=False, description="Needs a mid-cook shake or flip")


class SessionItem(BaseModel):
    """One thing being cooked in a session."""
    id: str = Field(default_factory=generate_id)
    name: SanitizedName
    temperature: ClampedTemperature = 180
    time_minutes: ClampedDuration = 10
    shake_halfway: bool = False
    source_recipe_id: Optional[str] = None

    # Manual-mode assignment; None means the item sits in the unassigned pool
    batch_id: Optional[str] = None

    # Computed by the optimizer, not user-editable
    phase_id: Optional[str] = None
    start_offset_minutes: Optional[int] = None
    end_offset_minutes: Optional[int] = None

    model_config = ConfigDict(
        validate_assignment=True,
        json_schema_extra={
            "examples": [
                {
                    "name": "chicken wings",
                    "temperature": 200,
                    "time_minutes": 25,
                    "shake_halfway": True,
                }
            ]
        },
    )

    def clear_schedule(self) -> None:
        """Drop optimizer-computed fields."""
        self.phase_id = None
        self.start_offset_minutes = None
        self.end_offset_minutes = None


class CookingBatch(BaseModel):
    """A user-defined, ordered group of items that cook together."""
    id: str = Field(default_factory=generate_id)
    order: int = Field(..., ge=1, description="Cooking order, unique within a session")
    item_ids: List[str] = Field(default_factory=list)
    user_notes: Optional[SanitizedStr] = None
    target_temperature: Optional[int] = Field(
        default=None,
        description="Suggested temperature, only set on auto-suggested batches"
    )


class EventStep(BaseModel):
    """One constituent instruction of a (possibly consolidated) event."""
    event_type: EventType
    item_id: Optional[str] = None
    item_name: Optional[str] = None
    instruction: str
    completed: bool = False


class PhaseEvent(BaseModel):
    """A timestamped instruction within a phase."""
    id: str
    minute_offset: int = Field(..., ge=0)
    event_type: EventType
    instruction: str
    steps: List[EventStep] = Field(default_factory=list)
    completed: bool = False

    @property
    def item_ids(self) -> List[str]:
        """Items this event refers to, in instruction order."""
        return [step.item_id for step in self.steps if step.item_id]

    def mark_step_done(self, index: int) -> None:
        """Mark one constituent instruction done; the event completes with the last one."""
        if 0 <= index < len(self.steps):
            self.steps[index].completed = True
        self.completed = bool(self.steps) and all(step.completed for step in self.steps)

    def mark_done(self) -> None:
        """Mark every constituent instruction done."""
        for step in self.steps:
            step.completed = True
        self.completed = True


class CookingPhase(BaseModel):
    """One run of the heating chamber at a single target temperature."""
    id: str
    order: int = Field(..., ge=0)
    target_temperature: int
    total_duration_minutes: int = Field(..., ge=0)
    item_ids: List[str] = Field(default_factory=list)
    rest_minutes_after: int = Field(default=0, ge=0)
    events: List[PhaseEvent] = Field(default_factory=list)
    completed_at: Optional[datetime] = None


class OptimizationOptions(BaseModel):
    """Caller-selected optimization mode."""
    mode: OptimizationMode = OptimizationMode.AUTO
    batches: List[CookingBatch] = Field(default_factory=list)


class OptimizationResult(BaseModel):
    """Optimized cooking plan with summary metrics."""
    phases: List[CookingPhase] = Field(default_factory=list)
    total_minutes: int = 0
    temperature_groups: int = 0
    parallel_items: int = 0
    efficiency_gain: int = Field(default=0, description="Minutes saved vs sequential cooking")
    scheduled_items: List[SessionItem] = Field(
        default_factory=list,
        description="Items annotated with phase id and offsets"
    )

    model_config = {
        "json_schema_extra": {
            "examples": [
                {
                    "phases": [],
                    "total_minutes": 39,
                    "temperature_groups": 2,
                    "parallel_items": 4,
                    "efficiency_gain": 28,
                }
            ]
        }
    }


class TemperatureHint(BaseModel):
    """How well the temperatures of a batch's items agree."""
    severity: HintSeverity
    message: str
    min_temperature: int = 0
    max_temperature: int = 0


class SessionProgress(BaseModel):
    """Execution progress across phases."""
    current_phase: int = 0  # 1-based for display
    total_phases: int = 0
    percent_complete: int = 0


class CookingSession(BaseModel):
    """The live cooking session (aggregate root)."""
    id: str = Field(default_factory=generate_id)
    status: SessionStatus = SessionStatus.BUILDING
    items: List[SessionItem] = Field(default_factory=list)
    batches: List[CookingBatch] = Field(default_factory=list)
    phases: List[CookingPhase] = Field(default_factory=list)
    use_manual_batching: bool = False
    total_estimated_minutes: int = 0
    current_phase_index: Optional[int] = None
    current_event_index: int = 0
    created_at: datetime = Field(default_factory=datetime.now)
    updated_at: datetime = Field(default_factory=datetime.now)
    started_at: Optional[datetime] = None
    completed_at: Optional[datetime] = None

    @property
    def is_editable(self) -> bool:
        """Items and batches may only change while the session is being built."""
        return self.status == SessionStatus.BUILDING

    @property
    def is_terminal(self) -> bool:
        return self.status in (SessionStatus.COMPLETED, SessionStatus.CANCELLED)

    def get_item(self, item_id: str) -> Optional[SessionItem]:
        """Get item by id."""
        for item in self.items:
            if item.id == item_id:
                return item
        return None

    def get_batch(self, batch_id: str) -> Optional[CookingBatch]:
        """Get batch by id."""
        for batch in self.batches:
            if batch.id == batch_id:
                return batch
        return None

    def get_unassigned_items(self) -> List[SessionItem]:
        """Items that belong to no batch (derived, never stored)."""
        return [item for item in self.items if not item.batch_id]

    def touch(self) -> None:
        self.updated_at = datetime.now()
