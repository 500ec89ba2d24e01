"""
Live execution of an optimized cooking session.

State machine:

    not_started -> running(phase, event) -> phase_complete -> running(phase + 1, 0)
                -> ... -> session_complete

cancelled is reachable from any non-terminal state. Each phase gets its own
countdown; the previous phase's tick source is always released before the
next one is acquired, so two timers never overlap.
"""
import logging
from datetime import datetime
from enum import Enum
from typing import Callable, List, Optional

from cookplan.models.schemas import (
    CookingPhase, CookingSession, PhaseEvent, SessionProgress, SessionStatus,
)
from cookplan.engine.phase_timer import PhaseTimer
from cookplan.services.notification_service import NotificationService
from cookplan.utils.sanitization import round_half_up

logger = logging.getLogger(__name__)


class ExecutionState(str, Enum):
    """Where the executor is in the session."""
    NOT_STARTED = "not_started"
    RUNNING = "running"
    PHASE_COMPLETE = "phase_complete"
    SESSION_COMPLETE = "session_complete"
    CANCELLED = "cancelled"


TERMINAL_STATES = (ExecutionState.SESSION_COMPLETE, ExecutionState.CANCELLED)

StateListener = Callable[[ExecutionState, ExecutionState], None]


class SessionExecutor:
    """
    Drive a cooking session through its phases and events.

    Misuse (completing an event with no current phase, acting on a finished
    session) is ignored rather than raised; the UI calling these methods only
    needs to re-render from the read-only accessors.
    """

    def __init__(
        self,
        session: CookingSession,
        notifier: Optional[NotificationService] = None,
        auto_tick: bool = True,
        tick_interval: Optional[float] = None,
        on_finish: Optional[Callable[[CookingSession], None]] = None,
    ):
        """
        Initialize the executor.

        Args:
            session: Optimized session to execute (mutated in place).
            notifier: Fired when a phase countdown reaches zero.
            auto_tick: Run a background tick thread per phase. Tests drive tick() by hand.
            tick_interval: Seconds between background ticks. Defaults to config.
            on_finish: Called with the session once it completes or is cancelled
                (typically persists it).
        """
        self.session = session
        self._notifier = notifier or NotificationService()
        self._auto_tick = auto_tick
        self._tick_interval = tick_interval
        self._on_finish = on_finish
        self._listeners: List[StateListener] = []
        self._timer: Optional[PhaseTimer] = None
        self._state = self._initial_state()

        # Resuming a session that was already in progress
        if self._state == ExecutionState.RUNNING:
            self._acquire_timer(self.get_current_phase())

    def _initial_state(self) -> ExecutionState:
        status = self.session.status
        if status == SessionStatus.COMPLETED:
            return ExecutionState.SESSION_COMPLETE
        if status == SessionStatus.CANCELLED:
            return ExecutionState.CANCELLED
        if status == SessionStatus.IN_PROGRESS and self.get_current_phase() is not None:
            return ExecutionState.RUNNING
        return ExecutionState.NOT_STARTED

    # State helpers

    @property
    def state(self) -> ExecutionState:
        return self._state

    def add_listener(self, listener: StateListener) -> None:
        """Subscribe to (old_state, new_state) transitions."""
        self._listeners.append(listener)

    def _set_state(self, new_state: ExecutionState) -> None:
        old_state = self._state
        self._state = new_state
        logger.info(f"Session {self.session.id}: {old_state.value} -> {new_state.value}")
        for listener in self._listeners:
            listener(old_state, new_state)

    def _acquire_timer(self, phase: CookingPhase) -> None:
        self._release_timer()
        self._timer = PhaseTimer(
            seconds=phase.total_duration_minutes * 60,
            on_expire=self._on_timer_expired,
            tick_interval=self._tick_interval,
        )
        if self._auto_tick:
            self._timer.open()

    def _release_timer(self) -> None:
        if self._timer is not None:
            self._timer.close()
            self._timer = None

    def _on_timer_expired(self) -> None:
        phase = self.get_current_phase()
        logger.info(f"Timer finished for phase {phase.order + 1 if phase else '?'}")
        self._notifier.notify()

    def _enter_phase(self, index: int) -> None:
        self.session.current_phase_index = index
        self.session.current_event_index = 0
        self.session.touch()
        self._acquire_timer(self.session.phases[index])
        self._set_state(ExecutionState.RUNNING)

    def _finish_phase(self) -> None:
        index = self.session.current_phase_index
        phase = self.session.phases[index]
        phase.completed_at = datetime.now()
        self._release_timer()
        self._set_state(ExecutionState.PHASE_COMPLETE)

        if index >= len(self.session.phases) - 1:
            self.complete_session()
        else:
            self._enter_phase(index + 1)

    # Transitions

    def start(self) -> bool:
        """Begin cooking the first phase. Requires an optimized, unstarted session."""
        if self._state != ExecutionState.NOT_STARTED:
            logger.debug(f"Ignoring start: executor is {self._state.value}")
            return False
        if not self.session.phases:
            logger.debug(f"Ignoring start: session {self.session.id} has no phases")
            return False

        self.session.status = SessionStatus.IN_PROGRESS
        self.session.started_at = datetime.now()
        self._enter_phase(0)
        return True

    def complete_event(self) -> bool:
        """
        Mark the current event done and advance.

        After the phase's last event the phase completes: the session moves
        to the next phase, or completes if this was the last one.
        """
        if self._state != ExecutionState.RUNNING:
            logger.debug(f"Ignoring complete_event: executor is {self._state.value}")
            return False

        phase = self.get_current_phase()
        if phase is None:
            return False

        event = self.get_current_event()
        if event is not None:
            event.mark_done()

        if self.session.current_event_index >= len(phase.events) - 1:
            self._finish_phase()
        else:
            self.session.current_event_index += 1
            self.session.touch()
        return True

    def complete_phase(self) -> bool:
        """Skip to the next phase regardless of timer or event state."""
        if self._state != ExecutionState.RUNNING or self.get_current_phase() is None:
            logger.debug(f"Ignoring complete_phase: executor is {self._state.value}")
            return False

        self._finish_phase()
        return True

    def complete_session(self) -> bool:
        """Finish the session."""
        if self._state not in (ExecutionState.RUNNING, ExecutionState.PHASE_COMPLETE):
            logger.debug(f"Ignoring complete_session: executor is {self._state.value}")
            return False

        self._release_timer()
        self.session.status = SessionStatus.COMPLETED
        self.session.completed_at = datetime.now()
        self.session.touch()
        self._set_state(ExecutionState.SESSION_COMPLETE)

        if self._on_finish is not None:
            self._on_finish(self.session)
        return True

    def cancel_session(self) -> bool:
        """Stop the session immediately. Accepted from any non-terminal state."""
        if self._state in TERMINAL_STATES:
            logger.debug(f"Ignoring cancel_session: executor is {self._state.value}")
            return False

        self._release_timer()
        self.session.status = SessionStatus.CANCELLED
        self.session.touch()
        self._set_state(ExecutionState.CANCELLED)

        if self._on_finish is not None:
            self._on_finish(self.session)
        return True

    # Timer controls

    def start_timer(self) -> None:
        if self._state == ExecutionState.RUNNING and self._timer is not None:
            self._timer.start()

    def pause_timer(self) -> None:
        if self._timer is not None:
            self._timer.pause()

    def toggle_timer(self) -> None:
        if self.timer_running:
            self.pause_timer()
        else:
            self.start_timer()

    def tick(self) -> None:
        """Advance the current phase's countdown by one second."""
        if self._state == ExecutionState.RUNNING and self._timer is not None:
            self._timer.tick()

    @property
    def remaining_seconds(self) -> int:
        return self._timer.remaining_seconds if self._timer is not None else 0

    @property
    def timer_running(self) -> bool:
        return self._timer is not None and self._timer.running

    @property
    def has_active_tick_source(self) -> bool:
        return self._timer is not None and self._timer.is_open

    # Read-only accessors

    def get_current_phase(self) -> Optional[CookingPhase]:
        index = self.session.current_phase_index
        if index is None or not 0 <= index < len(self.session.phases):
            return None
        return self.session.phases[index]

    def get_current_event(self) -> Optional[PhaseEvent]:
        phase = self.get_current_phase()
        if phase is None:
            return None
        index = self.session.current_event_index
        if 0 <= index < len(phase.events):
            return phase.events[index]
        return None

    def get_upcoming_events(self, limit: int = 3) -> List[PhaseEvent]:
        """Next not-yet-completed events of the current phase."""
        phase = self.get_current_phase()
        if phase is None:
            return []
        pending = [e for e in phase.events[self.session.current_event_index:] if not e.completed]
        return pending[:limit]

    def get_progress(self) -> SessionProgress:
        total = len(self.session.phases)
        if total == 0:
            return SessionProgress()

        completed = sum(1 for phase in self.session.phases if phase.completed_at is not None)
        return SessionProgress(
            current_phase=(self.session.current_phase_index or 0) + 1,
            total_phases=total,
            percent_complete=round_half_up(completed / total * 100),
        )

    # Resource handling

    def close(self) -> None:
        """Release the tick source (e.g. when the view goes away). State is kept."""
        self._release_timer()

    def __enter__(self) -> "SessionExecutor":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()
