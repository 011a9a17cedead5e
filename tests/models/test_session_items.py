"""Tests for task assignment in focus plans."""

from __future__ import annotations

import random

import pytest

from cadence_cli.models.session.errors import InvalidItem, UnknownSlot
from cadence_cli.models.session.generator import generate_focus_plan, generate_workout_plan
from cadence_cli.models.session.items import ItemAssigner


@pytest.fixture()
def plan():
    return generate_focus_plan(90, 25, 5, 15, 4)


@pytest.fixture()
def events():
    return []


@pytest.fixture()
def assigner(plan, events):
    return ItemAssigner(plan, on_change=events.append)


class TestAddItem:
    def test_appends_to_slot(self, plan, assigner, events):
        first = assigner.add_item(plan.slots[0].id, "Write report")
        second = assigner.add_item(plan.slots[0].id, "  Review PR  ")
        assert [t.text for t in plan.slots[0].items] == ["Write report", "Review PR"]
        assert first.done is False
        assert second.id != first.id
        assert [e.action for e in events] == ["added", "added"]

    @pytest.mark.parametrize("text", ["", "   "])
    def test_blank_text_rejected(self, plan, assigner, text):
        with pytest.raises(InvalidItem):
            assigner.add_item(plan.slots[0].id, text)
        assert plan.slots[0].items == []

    def test_unknown_slot(self, assigner):
        with pytest.raises(UnknownSlot):
            assigner.add_item("nope", "Task")

    def test_workout_slots_reject_tasks(self):
        workout = generate_workout_plan([{"name": "Squat"}])
        with pytest.raises(InvalidItem):
            ItemAssigner(workout).add_item(workout.slots[0].id, "Task")


class TestMoveItem:
    def test_move_down_appends_to_next_slot(self, plan, assigner, events):
        existing = assigner.add_item(plan.slots[1].id, "Existing")
        task = assigner.add_item(plan.slots[0].id, "Move me")
        target = assigner.move_item(task.id, plan.slots[0].id, 1)
        assert target is plan.slots[1]
        assert plan.slots[0].items == []
        assert [t.id for t in plan.slots[1].items] == [existing.id, task.id]
        assert events[-1].action == "moved"
        assert events[-1].target_slot_id == plan.slots[1].id

    def test_move_up(self, plan, assigner):
        task = assigner.add_item(plan.slots[2].id, "Task")
        assigner.move_item(task.id, plan.slots[2].id, -1)
        assert plan.slots[1].items == [task]

    def test_move_past_first_slot_is_noop(self, plan, assigner, events):
        task = assigner.add_item(plan.slots[0].id, "Task")
        events.clear()
        result = assigner.move_item(task.id, plan.slots[0].id, -1)
        assert result is plan.slots[0]
        assert plan.slots[0].items == [task]
        assert events == []

    def test_move_past_last_slot_is_noop(self, plan, assigner):
        last = plan.slots[-1]
        task = assigner.add_item(last.id, "Task")
        assert assigner.move_item(task.id, last.id, 1) is last
        assert last.items == [task]

    def test_move_from_wrong_slot_returns_none(self, plan, assigner):
        task = assigner.add_item(plan.slots[0].id, "Task")
        assert assigner.move_item(task.id, plan.slots[1].id, 1) is None
        assert plan.slots[0].items == [task]

    def test_invalid_direction(self, plan, assigner):
        task = assigner.add_item(plan.slots[0].id, "Task")
        with pytest.raises(ValueError):
            assigner.move_item(task.id, plan.slots[0].id, 2)

    def test_move_keeps_slot_status(self, plan, assigner):
        plan.slots[0].status = "active"
        task = assigner.add_item(plan.slots[0].id, "Task")
        assigner.move_item(task.id, plan.slots[0].id, 1)
        assert plan.slots[0].status == "active"
        assert plan.slots[1].status == "pending"


class TestToggleAndDelete:
    def test_toggle_flips_done(self, plan, assigner):
        task = assigner.add_item(plan.slots[0].id, "Task")
        assert assigner.toggle_item(task.id).done is True
        assert assigner.toggle_item(task.id).done is False

    def test_toggle_unknown_returns_none(self, assigner):
        assert assigner.toggle_item("missing") is None

    def test_delete(self, plan, assigner, events):
        task = assigner.add_item(plan.slots[0].id, "Task")
        assert assigner.delete_item(task.id) is True
        assert plan.slots[0].items == []
        assert events[-1].action == "deleted"
        assert assigner.delete_item(task.id) is False

    def test_all_items_in_slot_order(self, plan, assigner):
        a = assigner.add_item(plan.slots[1].id, "A")
        b = assigner.add_item(plan.slots[0].id, "B")
        assert assigner.all_items() == [b, a]


@pytest.mark.parametrize("seed", range(8))
def test_every_task_stays_in_exactly_one_slot(plan, assigner, seed):
    rng = random.Random(seed)
    live: set[str] = set()

    for step in range(200):
        op = rng.choice(["add", "move", "move_edge", "toggle", "delete"])
        if op == "add" or not live:
            task = assigner.add_item(rng.choice(plan.slots).id, f"task {step}")
            live.add(task.id)
        elif op == "move":
            item_id = rng.choice(sorted(live))
            slot, _ = assigner.find(item_id)
            assigner.move_item(item_id, slot.id, rng.choice([-1, 1]))
        elif op == "move_edge":
            item_id = rng.choice(sorted(live))
            slot, _ = assigner.find(item_id)
            direction = -1 if slot.index == 0 else 1
            if slot.index in (0, len(plan.slots) - 1):
                assert assigner.move_item(item_id, slot.id, direction) is slot
            else:
                assigner.move_item(item_id, plan.slots[0].id, direction)
        elif op == "toggle":
            assigner.toggle_item(rng.choice(sorted(live)))
        else:
            item_id = rng.choice(sorted(live))
            assert assigner.delete_item(item_id) is True
            live.discard(item_id)

        ids = [item.id for slot in plan.slots for item in slot.items]
        assert len(ids) == len(set(ids))
        assert set(ids) == live
