"""Plan, slot and item models for timed activity sessions."""

from __future__ import annotations

import uuid
from dataclasses import asdict, dataclass, field

from .constants import (
    PLAN_FOCUS,
    SLOT_EXERCISE,
    STATUS_ACTIVE,
    STATUS_COMPLETED,
    STATUS_PENDING,
    PlanKind,
    RepsOrTime,
    SlotKind,
    SlotStatus,
)


def new_id() -> str:
    """Generate a unique identifier for plans, slots and items."""
    return uuid.uuid4().hex


@dataclass
class FocusTask:
    """A task planned into a focus slot."""

    id: str
    text: str
    done: bool = False

    def to_dict(self) -> dict:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: dict) -> FocusTask:
        return cls(id=str(data["id"]), text=str(data["text"]), done=bool(data["done"]))


@dataclass(frozen=True)
class SetRecord:
    """A logged workout set. Produced by execution, never reassigned."""

    set_number: int
    reps: int | None
    weight: float | None
    timestamp: int  # epoch milliseconds

    @property
    def volume(self) -> float:
        return (self.reps or 0) * (self.weight or 0)

    def to_dict(self) -> dict:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: dict) -> SetRecord:
        return cls(
            set_number=int(data["set_number"]),
            reps=data.get("reps"),
            weight=data.get("weight"),
            timestamp=int(data["timestamp"]),
        )


@dataclass
class Slot:
    """One schedulable unit of a plan: a focus work block or one exercise."""

    id: str
    index: int
    kind: SlotKind
    planned_duration_seconds: int | None
    items: list = field(default_factory=list)
    status: SlotStatus = STATUS_PENDING

    # Exercise attributes, unused for work slots
    name: str = ""
    sets_planned: int = 1
    reps_or_time: RepsOrTime = "reps"
    target_reps: str | None = None
    rest_seconds: int = 0
    is_bodyweight: bool = False

    @property
    def is_exercise(self) -> bool:
        return self.kind == SLOT_EXERCISE

    @property
    def is_timed(self) -> bool:
        return bool(self.planned_duration_seconds)

    @property
    def sets_logged(self) -> int:
        return len(self.items) if self.is_exercise else 0

    def to_dict(self) -> dict:
        data = asdict(self)
        data["items"] = [item.to_dict() for item in self.items]
        return data

    @classmethod
    def from_dict(cls, data: dict) -> Slot:
        kind = data["kind"]
        item_cls = SetRecord if kind == SLOT_EXERCISE else FocusTask
        return cls(
            id=str(data["id"]),
            index=int(data["index"]),
            kind=kind,
            planned_duration_seconds=data.get("planned_duration_seconds"),
            items=[item_cls.from_dict(item) for item in data.get("items", [])],
            status=data.get("status", STATUS_PENDING),
            name=data.get("name", ""),
            sets_planned=int(data.get("sets_planned", 1)),
            reps_or_time=data.get("reps_or_time", "reps"),
            target_reps=data.get("target_reps"),
            rest_seconds=int(data.get("rest_seconds", 0)),
            is_bodyweight=bool(data.get("is_bodyweight", False)),
        )


@dataclass
class Plan:
    """Ordered sequence of slots generated once from caller input.

    Break parameters live on the plan because breaks happen between slots,
    never as slots of their own.
    """

    id: str
    kind: PlanKind
    slots: list[Slot]
    name: str = ""
    break_minutes: int = 0
    long_break_minutes: int = 0
    sessions_until_long_break: int = 0

    def __len__(self) -> int:
        return len(self.slots)

    @property
    def is_focus(self) -> bool:
        return self.kind == PLAN_FOCUS

    @property
    def work_minutes(self) -> int:
        return (self.slots[0].planned_duration_seconds or 0) // 60

    def slot(self, slot_id: str) -> Slot | None:
        for slot in self.slots:
            if slot.id == slot_id:
                return slot
        return None

    def active_slot(self) -> Slot | None:
        for slot in self.slots:
            if slot.status == STATUS_ACTIVE:
                return slot
        return None

    def completed_count(self) -> int:
        return sum(1 for slot in self.slots if slot.status == STATUS_COMPLETED)

    def reset_statuses(self) -> None:
        """Put every slot back to pending (a fresh run of the same plan)."""
        for slot in self.slots:
            slot.status = STATUS_PENDING

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "kind": self.kind,
            "name": self.name,
            "break_minutes": self.break_minutes,
            "long_break_minutes": self.long_break_minutes,
            "sessions_until_long_break": self.sessions_until_long_break,
            "slots": [slot.to_dict() for slot in self.slots],
        }

    @classmethod
    def from_dict(cls, data: dict) -> Plan:
        return cls(
            id=str(data["id"]),
            kind=data["kind"],
            name=data.get("name", ""),
            break_minutes=int(data.get("break_minutes", 0)),
            long_break_minutes=int(data.get("long_break_minutes", 0)),
            sessions_until_long_break=int(data.get("sessions_until_long_break", 0)),
            slots=[Slot.from_dict(slot) for slot in data["slots"]],
        )
