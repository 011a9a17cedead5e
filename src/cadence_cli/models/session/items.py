"""Task assignment for focus slots."""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass

from .constants import ITEM_ADDED, ITEM_DELETED, ITEM_MOVED, ITEM_TOGGLED
from .errors import InvalidItem, UnknownSlot
from .plan import FocusTask, Plan, Slot, new_id

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ItemMutationEvent:
    """Fired after a task is added, moved, toggled or deleted."""

    action: str
    item_id: str
    slot_id: str
    target_slot_id: str | None = None


class ItemAssigner:
    """Owns the tasks of a focus plan and moves them between slots.

    Mutations never touch slot status or the clock, so they are allowed both
    while planning and in the middle of a running session.
    """

    def __init__(
        self,
        plan: Plan,
        on_change: Callable[[ItemMutationEvent], None] | None = None,
    ):
        self.plan = plan
        self._on_change = on_change

    def _emit(self, event: ItemMutationEvent) -> None:
        logger.debug("item %s: %s", event.action, event.item_id)
        if self._on_change:
            self._on_change(event)

    def _writable_slot(self, slot_id: str) -> Slot:
        slot = self.plan.slot(slot_id)
        if slot is None:
            raise UnknownSlot(f"Slot '{slot_id}' not found")
        if slot.is_exercise:
            raise InvalidItem("Logged sets cannot be edited or reassigned")
        return slot

    def find(self, item_id: str) -> tuple[Slot, FocusTask] | None:
        """Locate a task and the slot that holds it."""
        for slot in self.plan.slots:
            if slot.is_exercise:
                continue
            for item in slot.items:
                if item.id == item_id:
                    return slot, item
        return None

    def add_item(self, slot_id: str, text: str) -> FocusTask:
        """Append a new task to the end of a slot.

        Raises:
            InvalidItem: If the text is empty or whitespace only.
            UnknownSlot: If the slot does not exist.
        """
        if not text or not text.strip():
            raise InvalidItem("Task text cannot be empty")
        slot = self._writable_slot(slot_id)
        task = FocusTask(id=new_id(), text=text.strip())
        slot.items.append(task)
        self._emit(ItemMutationEvent(ITEM_ADDED, task.id, slot.id))
        return task

    def move_item(self, item_id: str, from_slot_id: str, direction: int) -> Slot | None:
        """Move a task to the previous (-1) or next (+1) slot.

        Moving past either end of the plan leaves the task where it is and
        returns its current slot. Returns None if the task is not in
        *from_slot_id*.
        """
        if direction not in (-1, 1):
            raise ValueError(f"direction must be -1 or +1, got {direction}")

        source = self.plan.slot(from_slot_id)
        if source is None or source.is_exercise:
            return None
        position = next(
            (i for i, item in enumerate(source.items) if item.id == item_id), None
        )
        if position is None:
            return None

        target_index = source.index + direction
        if target_index < 0 or target_index >= len(self.plan.slots):
            return source

        target = self.plan.slots[target_index]
        target.items.append(source.items.pop(position))
        self._emit(ItemMutationEvent(ITEM_MOVED, item_id, source.id, target.id))
        return target

    def toggle_item(self, item_id: str) -> FocusTask | None:
        found = self.find(item_id)
        if found is None:
            return None
        slot, item = found
        item.done = not item.done
        self._emit(ItemMutationEvent(ITEM_TOGGLED, item_id, slot.id))
        return item

    def delete_item(self, item_id: str) -> bool:
        found = self.find(item_id)
        if found is None:
            return False
        slot, item = found
        slot.items.remove(item)
        self._emit(ItemMutationEvent(ITEM_DELETED, item_id, slot.id))
        return True

    def all_items(self) -> list[FocusTask]:
        return [item for slot in self.plan.slots if not slot.is_exercise for item in slot.items]
