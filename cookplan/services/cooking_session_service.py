"""
Cooking session service.

Owns the single live session and routes every change through the engine
(batch manager, optimizer, executor) so invariants are enforced in one place.
"""
import logging
from typing import List, Optional

from cookplan.models.schemas import (
    CookingSession, OptimizationMode, OptimizationOptions, OptimizationResult,
    QuickAddItem, SessionItem, SessionStatus,
)
from cookplan.engine.batch_manager import BatchManager
from cookplan.engine.session_executor import SessionExecutor
from cookplan.engine.session_optimizer import CookingSessionOptimizer
from cookplan.errors import CookPlanError, SessionNotFoundError
from cookplan.services.notification_service import NotificationService
from cookplan.services.session_store import SessionStore

logger = logging.getLogger(__name__)

# Fields a caller may change on an existing item
EDITABLE_ITEM_FIELDS = {"name", "temperature", "time_minutes", "shake_halfway"}


class CookingSessionService:
    """
    Build, optimize, start and persist cooking sessions.

    Without a store the service works purely in memory.
    """

    def __init__(
        self,
        store: Optional[SessionStore] = None,
        optimizer: Optional[CookingSessionOptimizer] = None,
    ):
        """
        Initialize the service.

        Args:
            store: Optional persistence for sessions.
            optimizer: Optional optimizer. Defaults to configured rest times.
        """
        self.store = store
        self.optimizer = optimizer or CookingSessionOptimizer()
        self.current_session: Optional[CookingSession] = None
        self.last_result: Optional[OptimizationResult] = None

    # Session lifecycle

    def create_session(self) -> CookingSession:
        """Start a new, empty session."""
        self.current_session = CookingSession()
        self.last_result = None
        logger.info(f"Created cooking session {self.current_session.id}")
        return self.current_session

    def load_session(self, session_id: str) -> CookingSession:
        """
        Make a stored session the live one.

        Raises:
            SessionNotFoundError: No store configured or unknown id.
        """
        if self.store is None:
            raise SessionNotFoundError(session_id)
        self.current_session = self.store.get(session_id)
        self.last_result = None
        return self.current_session

    def load_recent_sessions(self, limit: Optional[int] = None) -> List[CookingSession]:
        if self.store is None:
            return []
        return self.store.list_recent(limit)

    def delete_session(self, session_id: str) -> bool:
        deleted = self.store.delete(session_id) if self.store is not None else False
        if self.current_session is not None and self.current_session.id == session_id:
            self.current_session = None
        return deleted

    def save_session(self, session: Optional[CookingSession] = None) -> None:
        """Persist a session (the live one by default) if a store is configured."""
        session = session or self.current_session
        if self.store is not None and session is not None:
            self.store.save(session)

    def _finish_session(self, session: CookingSession) -> None:
        """Persist a completed or cancelled session and release the live handle."""
        if self.current_session is session:
            self.current_session = None
            self.last_result = None
        self.save_session(session)

    def _editable_session(self) -> Optional[CookingSession]:
        session = self.current_session
        if session is None or not session.is_editable:
            return None
        return session

    def _invalidate_plan(self, session: CookingSession) -> None:
        session.phases = []
        session.total_estimated_minutes = 0
        for item in session.items:
            item.clear_schedule()
        session.touch()
        self.last_result = None

    # Item management

    def add_item(self, item: QuickAddItem, source_recipe_id: Optional[str] = None) -> Optional[SessionItem]:
        """Add an item to the live session. Values are clamped, never rejected."""
        session = self._editable_session()
        if session is None:
            return None

        new_item = SessionItem(
            name=item.name,
            temperature=item.temperature,
            time_minutes=item.time_minutes,
            shake_halfway=item.shake_halfway,
            source_recipe_id=source_recipe_id,
        )
        session.items.append(new_item)
        self._invalidate_plan(session)
        return new_item

    def add_item_from_recipe(
        self,
        recipe_id: str,
        name: str,
        temperature: float,
        time_minutes: float,
        shake_halfway: bool = False,
    ) -> Optional[SessionItem]:
        """Add an item whose settings come from a stored recipe."""
        return self.add_item(
            QuickAddItem(
                name=name,
                temperature=temperature,
                time_minutes=time_minutes,
                shake_halfway=shake_halfway,
            ),
            source_recipe_id=recipe_id,
        )

    def update_item(self, item_id: str, **updates) -> Optional[SessionItem]:
        """Change an item's user-editable fields."""
        session = self._editable_session()
        if session is None:
            return None

        item = session.get_item(item_id)
        if item is None:
            return None

        for field_name, value in updates.items():
            if field_name not in EDITABLE_ITEM_FIELDS:
                logger.debug(f"Ignoring non-editable item field '{field_name}'")
                continue
            setattr(item, field_name, value)

        self._invalidate_plan(session)
        return item

    def remove_item(self, item_id: str) -> bool:
        """Remove an item, also dropping it from whichever batch held it."""
        session = self._editable_session()
        if session is None or session.get_item(item_id) is None:
            return False

        session.items = [item for item in session.items if item.id != item_id]
        for batch in session.batches:
            if item_id in batch.item_ids:
                batch.item_ids = [i for i in batch.item_ids if i != item_id]
        self._invalidate_plan(session)
        return True

    def clear_items(self) -> None:
        """Remove every item and batch."""
        session = self._editable_session()
        if session is None:
            return
        session.items = []
        session.batches = []
        self._invalidate_plan(session)

    @property
    def batches(self) -> Optional[BatchManager]:
        """Batch manager bound to the live session."""
        if self.current_session is None:
            return None
        return BatchManager(self.current_session)

    # Optimization

    def optimize_session(self) -> Optional[OptimizationResult]:
        """
        Compute phases for the live session.

        Manual batches are used when manual batching is on and at least one
        batch exists; otherwise items are grouped automatically.
        """
        session = self._editable_session()
        if session is None or not session.items:
            return None

        options = None
        if session.use_manual_batching and session.batches:
            options = OptimizationOptions(mode=OptimizationMode.MANUAL_BATCHES, batches=session.batches)

        result = self.optimizer.optimize(session.items, options)

        schedule = {item.id: item for item in result.scheduled_items}
        for item in session.items:
            scheduled = schedule.get(item.id)
            if scheduled is None:
                item.clear_schedule()
                continue
            item.phase_id = scheduled.phase_id
            item.start_offset_minutes = scheduled.start_offset_minutes
            item.end_offset_minutes = scheduled.end_offset_minutes

        session.phases = result.phases
        session.total_estimated_minutes = result.total_minutes
        session.touch()
        self.last_result = result
        return result

    def reset_optimization(self) -> None:
        session = self._editable_session()
        if session is not None:
            self._invalidate_plan(session)

    # Execution

    def create_executor(
        self,
        notifier: Optional[NotificationService] = None,
        auto_tick: bool = True,
        tick_interval: Optional[float] = None,
    ) -> Optional[SessionExecutor]:
        """Executor for the live session; finished sessions are persisted and released."""
        if self.current_session is None:
            return None
        return SessionExecutor(
            self.current_session,
            notifier=notifier,
            auto_tick=auto_tick,
            tick_interval=tick_interval,
            on_finish=self._finish_session,
        )

    def start_session(
        self,
        notifier: Optional[NotificationService] = None,
        auto_tick: bool = True,
        tick_interval: Optional[float] = None,
    ) -> Optional[SessionExecutor]:
        """
        Freeze the plan and begin cooking.

        Optimizes first if no phases are computed yet. Returns None when the
        session has nothing to cook or is not being built.

        Raises:
            CookPlanError: The started session could not be stored. The session
                is back in building status and no tick source is left running.
        """
        session = self._editable_session()
        if session is None:
            return None
        if not session.phases:
            self.optimize_session()
        if not session.phases:
            return None

        executor = self.create_executor(notifier=notifier, auto_tick=auto_tick, tick_interval=tick_interval)
        executor.start()
        try:
            self.save_session(session)
        except CookPlanError:
            # Nobody can reach the executor, so stop its tick source and hand
            # the session back for editing
            executor.close()
            session.status = SessionStatus.BUILDING
            session.started_at = None
            session.current_phase_index = None
            session.current_event_index = 0
            session.touch()
            logger.warning(f"Could not start cooking session {session.id}; returned it to building")
            raise
        return executor

    def cancel_session(self, executor: Optional[SessionExecutor] = None) -> bool:
        """
        Cancel the live session.

        A session that never started is simply dropped; a running one is
        stopped and stored as cancelled.
        """
        session = self.current_session
        if session is None:
            return False

        if executor is not None:
            cancelled = executor.cancel_session()
        elif session.status == SessionStatus.IN_PROGRESS:
            cancelled = SessionExecutor(session, auto_tick=False, on_finish=self._finish_session).cancel_session()
        else:
            cancelled = True

        self.current_session = None
        return cancelled
