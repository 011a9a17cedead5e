"""Turn focus settings or workout templates into session plans."""

from __future__ import annotations

from collections.abc import Sequence

from pydantic import ValidationError

from cadence_cli.models.config_models import ExerciseTemplate, FocusSettings

from .constants import PLAN_FOCUS, PLAN_WORKOUT, SLOT_EXERCISE, SLOT_WORK
from .errors import InvalidConfiguration
from .plan import Plan, Slot, new_id


def _require_int(name: str, value: object, minimum: int) -> int:
    if isinstance(value, bool) or not isinstance(value, int):
        raise InvalidConfiguration(f"{name} must be an integer, got {value!r}")
    if value < minimum:
        raise InvalidConfiguration(f"{name} must be >= {minimum}, got {value}")
    return value


def generate_focus_plan(
    total_minutes: int,
    work_minutes: int,
    break_minutes: int,
    long_break_minutes: int,
    sessions_until_long_break: int,
) -> Plan:
    """Split the available time into equal work slots.

    The slot count is ``total // (work + break)``, clamped to at least one
    slot. Break durations are kept on the plan, not on the slots.

    Raises:
        InvalidConfiguration: If any parameter is out of range.
    """
    _require_int("total_minutes", total_minutes, 1)
    _require_int("work_minutes", work_minutes, 1)
    _require_int("break_minutes", break_minutes, 1)
    _require_int("long_break_minutes", long_break_minutes, 1)
    _require_int("sessions_until_long_break", sessions_until_long_break, 2)

    count = max(1, total_minutes // (work_minutes + break_minutes))
    slots = [
        Slot(
            id=new_id(),
            index=i,
            kind=SLOT_WORK,
            planned_duration_seconds=work_minutes * 60,
            name=f"Session {i + 1}",
        )
        for i in range(count)
    ]
    return Plan(
        id=new_id(),
        kind=PLAN_FOCUS,
        slots=slots,
        name=f"{count} x {work_minutes}m focus",
        break_minutes=break_minutes,
        long_break_minutes=long_break_minutes,
        sessions_until_long_break=sessions_until_long_break,
    )


def generate_focus_plan_from_config(settings: FocusSettings) -> Plan:
    """Generate a focus plan from stored settings."""
    return generate_focus_plan(
        total_minutes=settings.total_minutes,
        work_minutes=settings.work_minutes,
        break_minutes=settings.break_minutes,
        long_break_minutes=settings.long_break_minutes,
        sessions_until_long_break=settings.sessions_until_long_break,
    )


def _coerce_exercise(raw: ExerciseTemplate | dict, position: int) -> ExerciseTemplate:
    if isinstance(raw, ExerciseTemplate):
        return raw
    try:
        return ExerciseTemplate.model_validate(raw)
    except ValidationError as e:
        raise InvalidConfiguration(f"Exercise #{position + 1} is invalid: {e}") from e


def generate_workout_plan(
    exercise_templates: Sequence[ExerciseTemplate | dict],
    name: str = "Workout",
) -> Plan:
    """Create one exercise slot per authored exercise, in order.

    Timed exercises carry ``time_per_set`` as their planned duration; rep-based
    exercises have no duration.

    Raises:
        InvalidConfiguration: If the template is empty or an exercise is invalid.
    """
    if not exercise_templates:
        raise InvalidConfiguration("A workout needs at least one exercise")

    exercises = [_coerce_exercise(raw, i) for i, raw in enumerate(exercise_templates)]

    slots = []
    for i, exercise in enumerate(exercises):
        timed = exercise.reps_or_time == "time"
        slots.append(
            Slot(
                id=new_id(),
                index=i,
                kind=SLOT_EXERCISE,
                planned_duration_seconds=exercise.time_per_set if timed else None,
                name=exercise.name,
                sets_planned=exercise.sets_planned,
                reps_or_time=exercise.reps_or_time,
                target_reps=None if timed else exercise.target_reps,
                rest_seconds=exercise.rest_seconds,
                is_bodyweight=exercise.is_bodyweight,
            )
        )
    return Plan(id=new_id(), kind=PLAN_WORKOUT, slots=slots, name=name)
