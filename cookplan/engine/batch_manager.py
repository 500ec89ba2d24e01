"""
Manual batch management for a cooking session.

Batches are the user's alternative to automatic temperature grouping. All
mutations go through BatchManager so that the session keeps two invariants:

- every item belongs to at most one batch, and item.batch_id agrees with the
  batch's item_ids
- "unassigned" is simply the set of items with no batch_id; it is never stored

Mutations are ignored unless the session is still being built, and each one
drops any previously computed phases.
"""
import logging
from typing import List, Optional

from cookplan.models.schemas import CookingBatch, CookingSession, SessionItem, TemperatureHint
from cookplan.engine.temperature_grouper import group_by_temperature
from cookplan.engine.temperature_hints import calculate_temperature_hint
from cookplan.utils.sanitization import sanitize_text_input

logger = logging.getLogger(__name__)


class BatchManager:
    """Create, delete, fill and reorder the batches of one session."""

    def __init__(self, session: CookingSession):
        """
        Bind the manager to a session.

        Args:
            session: Live session, mutated in place.
        """
        self.session = session

    def _can_edit(self, operation: str) -> bool:
        if self.session.is_editable:
            return True
        logger.debug(f"Ignoring {operation}: session {self.session.id} is {self.session.status.value}")
        return False

    def _invalidate_plan(self) -> None:
        """Batches changed, so any computed phases are stale."""
        self.session.phases = []
        self.session.total_estimated_minutes = 0
        for item in self.session.items:
            item.clear_schedule()
        self.session.touch()

    def _renumber(self) -> None:
        for index, batch in enumerate(self.session.batches):
            batch.order = index + 1

    # Batch lifecycle

    def create_batch(self) -> Optional[CookingBatch]:
        """Append an empty batch with the next order and switch to manual batching."""
        if not self._can_edit("create_batch"):
            return None

        next_order = max((b.order for b in self.session.batches), default=0) + 1
        batch = CookingBatch(order=next_order)
        self.session.batches.append(batch)
        self.session.use_manual_batching = True
        self._invalidate_plan()
        return batch

    def delete_batch(self, batch_id: str) -> bool:
        """
        Remove a batch and release its items back to the unassigned pool.

        Items are never deleted. Remaining batches are renumbered 1..n.
        """
        if not self._can_edit("delete_batch"):
            return False
        if self.session.get_batch(batch_id) is None:
            return False

        for item in self.session.items:
            if item.batch_id == batch_id:
                item.batch_id = None

        self.session.batches = [b for b in self.session.batches if b.id != batch_id]
        self._renumber()
        self._invalidate_plan()
        return True

    def reorder_batches(self, from_index: int, to_index: int) -> bool:
        """Move a batch to another position in the cooking order."""
        if not self._can_edit("reorder_batches"):
            return False

        batches = self.session.batches
        if not (0 <= from_index < len(batches) and 0 <= to_index < len(batches)):
            return False

        moved = batches.pop(from_index)
        batches.insert(to_index, moved)
        self._renumber()
        self._invalidate_plan()
        return True

    def update_batch_notes(self, batch_id: str, notes: str) -> bool:
        """Attach a free-text note to a batch. Does not affect the plan."""
        batch = self.session.get_batch(batch_id)
        if batch is None:
            return False
        batch.user_notes = sanitize_text_input(notes)
        self.session.touch()
        return True

    # Item assignment

    def move_item_between_batches(
        self,
        item_id: str,
        from_batch_id: Optional[str],
        to_batch_id: Optional[str],
        target_index: Optional[int] = None,
    ) -> bool:
        """
        Move an item between batches or to/from the unassigned pool.

        Args:
            item_id: Item to move.
            from_batch_id: Source batch, or None for the unassigned pool.
            to_batch_id: Target batch, or None for the unassigned pool.
            target_index: Position in the target batch; appended when omitted.

        Returns:
            True when the session changed.
        """
        if not self._can_edit("move_item_between_batches"):
            return False

        item = self.session.get_item(item_id)
        if item is None:
            return False

        if from_batch_id == to_batch_id:
            if to_batch_id is None or target_index is None:
                return False
            # Same batch with an index is a reorder, not a move
            batch = self.session.get_batch(to_batch_id)
            if batch is None or item_id not in batch.item_ids:
                return False
            return self.reorder_items_in_batch(to_batch_id, batch.item_ids.index(item_id), target_index)

        target = None
        if to_batch_id is not None:
            target = self.session.get_batch(to_batch_id)
            if target is None:
                return False
        if from_batch_id is not None and self.session.get_batch(from_batch_id) is None:
            return False

        # Drop the item from every batch, not just the source, so it can never
        # end up in two places
        for batch in self.session.batches:
            if item_id in batch.item_ids:
                batch.item_ids = [i for i in batch.item_ids if i != item_id]

        if target is not None:
            _insert_at(target.item_ids, item_id, target_index)
        item.batch_id = to_batch_id

        self._invalidate_plan()
        return True

    def assign_item_to_batch(self, item_id: str, batch_id: str, index: Optional[int] = None) -> bool:
        """Assign an item to a batch wherever it currently is."""
        item = self.session.get_item(item_id)
        if item is None:
            return False
        if item.batch_id == batch_id:
            if index is None:
                return False
            return self.move_item_between_batches(item_id, batch_id, batch_id, index)
        return self.move_item_between_batches(item_id, item.batch_id, batch_id, index)

    def unassign_item(self, item_id: str) -> bool:
        """Return an item to the unassigned pool."""
        item = self.session.get_item(item_id)
        if item is None or item.batch_id is None:
            return False
        return self.move_item_between_batches(item_id, item.batch_id, None)

    def reorder_items_in_batch(self, batch_id: str, from_index: int, to_index: int) -> bool:
        """Reposition a member within the same batch."""
        if not self._can_edit("reorder_items_in_batch"):
            return False

        batch = self.session.get_batch(batch_id)
        if batch is None:
            return False

        item_ids = list(batch.item_ids)
        if not (0 <= from_index < len(item_ids) and 0 <= to_index < len(item_ids)):
            return False
        if from_index == to_index:
            return False

        moved = item_ids.pop(from_index)
        item_ids.insert(to_index, moved)
        batch.item_ids = item_ids
        self._invalidate_plan()
        return True

    def toggle_manual_batching(self, enabled: bool) -> None:
        """Switch manual batching on or off; switching off clears all batches."""
        if not self._can_edit("toggle_manual_batching"):
            return

        self.session.use_manual_batching = enabled
        if not enabled:
            self.session.batches = []
            for item in self.session.items:
                item.batch_id = None
        self._invalidate_plan()

    # Suggestions

    def auto_suggest_batches(self) -> List[CookingBatch]:
        """
        Propose batches from automatic temperature grouping.

        Considers every item, assigned or not. Nothing is committed until
        apply_batch_suggestion is called.
        """
        groups = group_by_temperature(self.session.items)
        return [
            CookingBatch(
                order=index + 1,
                item_ids=[item.id for item in group.items],
                target_temperature=group.target_temperature,
            )
            for index, group in enumerate(groups)
        ]

    def apply_batch_suggestion(self, batches: List[CookingBatch]) -> bool:
        """Replace the session's batches with a suggestion, overwriting manual ones."""
        if not self._can_edit("apply_batch_suggestion"):
            return False

        known_ids = {item.id for item in self.session.items}
        claimed = set()
        committed: List[CookingBatch] = []

        for batch in sorted(batches, key=lambda b: b.order):
            # First batch wins for an item listed twice; unknown ids are dropped
            item_ids = []
            for item_id in batch.item_ids:
                if item_id in known_ids and item_id not in claimed:
                    item_ids.append(item_id)
                    claimed.add(item_id)
            committed.append(batch.model_copy(update={"item_ids": item_ids}))

        owner = {item_id: batch.id for batch in committed for item_id in batch.item_ids}
        for item in self.session.items:
            item.batch_id = owner.get(item.id)

        self.session.batches = committed
        self._renumber()
        self.session.use_manual_batching = True
        self._invalidate_plan()
        return True

    # Read-only views

    def get_unassigned_items(self) -> List[SessionItem]:
        """Items not in any batch."""
        return self.session.get_unassigned_items()

    def get_batch_items(self, batch_id: str) -> List[SessionItem]:
        """Members of a batch in batch order."""
        batch = self.session.get_batch(batch_id)
        if batch is None:
            return []
        items = (self.session.get_item(item_id) for item_id in batch.item_ids)
        return [item for item in items if item is not None]

    def get_batch_temperature_hint(self, batch_id: str) -> TemperatureHint:
        """Temperature compatibility of a batch's members."""
        return calculate_temperature_hint(self.get_batch_items(batch_id))


def _insert_at(values: List[str], value: str, index: Optional[int]) -> None:
    if index is None or index >= len(values):
        values.append(value)
    else:
        values.insert(max(0, index), value)
