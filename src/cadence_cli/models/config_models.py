"""Configuration models for Cadence CLI.

Focus settings and workout templates are the caller-supplied inputs from which
session plans are generated. They are stored in ``config.json`` together with
the remaining application settings.
"""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, Field, field_validator, model_validator


class FocusSettings(BaseModel):
    """Parameters from which a focus plan is generated."""

    total_minutes: int = Field(default=240, ge=1, description="Time available")
    work_minutes: int = Field(default=25, ge=1)
    break_minutes: int = Field(default=5, ge=1)
    long_break_minutes: int = Field(default=15, ge=1)
    sessions_until_long_break: int = Field(default=4, ge=2)
    auto_start_next_phase: bool = Field(
        default=False, description="Start breaks and work blocks without a keypress"
    )


class FocusPreset(BaseModel):
    """Named work/break split offered when planning."""

    work_minutes: int = Field(..., ge=1)
    break_minutes: int = Field(..., ge=1)
    long_break_minutes: int = Field(..., ge=1)
    description: str = ""


DEFAULT_PRESETS: dict[str, FocusPreset] = {
    "classic": FocusPreset(
        work_minutes=25,
        break_minutes=5,
        long_break_minutes=15,
        description="Classic Pomodoro",
    ),
    "extended": FocusPreset(
        work_minutes=50,
        break_minutes=10,
        long_break_minutes=30,
        description="Extended Focus",
    ),
}


class ExerciseTemplate(BaseModel):
    """One authored exercise of a workout."""

    name: str = Field(..., description="Exercise name")
    sets_planned: int = Field(default=3, ge=1)
    reps_or_time: Literal["reps", "time"] = "reps"
    target_reps: str | None = Field(default="8-12")
    time_per_set: int | None = Field(default=30, description="Seconds per timed set")
    rest_seconds: int = Field(default=90, ge=0)
    is_bodyweight: bool = False
    notes: str = ""

    @field_validator("name")
    @classmethod
    def validate_name(cls, v: str) -> str:
        if not v or not v.strip():
            raise ValueError("name cannot be empty")
        return v.strip()

    @model_validator(mode="after")
    def validate_timed(self) -> ExerciseTemplate:
        if self.reps_or_time == "time" and (
            self.time_per_set is None or self.time_per_set < 1
        ):
            raise ValueError("timed exercises need time_per_set >= 1")
        return self


class WorkoutTemplate(BaseModel):
    """An ordered list of exercises saved under a name."""

    name: str
    exercises: list[ExerciseTemplate] = Field(default_factory=list)

    def get_exercise(self, name: str) -> ExerciseTemplate | None:
        for exercise in self.exercises:
            if exercise.name == name:
                return exercise
        return None


class AppConfig(BaseModel):
    """Main Cadence configuration."""

    focus: FocusSettings = Field(default_factory=FocusSettings)
    presets: dict[str, FocusPreset] = Field(default_factory=dict)
    workouts: dict[str, WorkoutTemplate] = Field(default_factory=dict)
    sound_enabled: bool = Field(default=True)

    def get_presets(self) -> dict[str, FocusPreset]:
        """Built-in presets overlaid with custom ones."""
        return {**DEFAULT_PRESETS, **self.presets}

    def get_workout(self, name: str) -> WorkoutTemplate:
        try:
            return self.workouts[name]
        except KeyError:
            raise ValueError(f"Workout '{name}' not found") from None

    def add_workout(self, workout: WorkoutTemplate) -> None:
        """Add a new workout.

        Raises:
            ValueError: If a workout with the same name already exists
        """
        if workout.name in self.workouts:
            raise ValueError(
                f"Workout '{workout.name}' already exists."
                " Use a different name or delete the existing workout first."
            )
        self.workouts[workout.name] = workout

    def remove_workout(self, name: str) -> None:
        if name not in self.workouts:
            raise ValueError(f"Workout '{name}' not found")
        del self.workouts[name]
