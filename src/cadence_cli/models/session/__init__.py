"""Timed activity session engine shared by focus and workout mode."""

from .clock import PhaseExpired, SessionClock
from .engine import PhaseTransitionNotification, SessionEngine, SessionView
from .errors import (
    IllegalStateTransition,
    InvalidConfiguration,
    InvalidItem,
    SessionError,
    UnknownSlot,
)
from .generator import (
    generate_focus_plan,
    generate_focus_plan_from_config,
    generate_workout_plan,
)
from .items import ItemAssigner, ItemMutationEvent
from .persistence import (
    InMemorySnapshotRepository,
    JsonFileSnapshotRepository,
    SessionPersistence,
    Snapshot,
    SnapshotRepository,
)
from .plan import FocusTask, Plan, SetRecord, Slot
from .recorder import CompletionRecorder, ExerciseLog, FocusCompletion, WorkoutCompletion
from .scheduler import FocusScheduler, PhaseScheduler, WorkoutScheduler, scheduler_for
from .timing import Clock, SystemClock, VirtualClock

__all__ = [
    "Clock",
    "CompletionRecorder",
    "ExerciseLog",
    "FocusCompletion",
    "FocusScheduler",
    "FocusTask",
    "IllegalStateTransition",
    "InMemorySnapshotRepository",
    "InvalidConfiguration",
    "InvalidItem",
    "ItemAssigner",
    "ItemMutationEvent",
    "JsonFileSnapshotRepository",
    "PhaseExpired",
    "PhaseScheduler",
    "PhaseTransitionNotification",
    "Plan",
    "SessionClock",
    "SessionEngine",
    "SessionError",
    "SessionPersistence",
    "SessionView",
    "SetRecord",
    "Slot",
    "Snapshot",
    "SnapshotRepository",
    "SystemClock",
    "UnknownSlot",
    "VirtualClock",
    "WorkoutCompletion",
    "WorkoutScheduler",
    "generate_focus_plan",
    "generate_focus_plan_from_config",
    "generate_workout_plan",
    "scheduler_for",
]
