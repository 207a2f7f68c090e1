"""Input records consumed by the analytics engine."""

from __future__ import annotations

import datetime
from dataclasses import dataclass, field
from typing import Any, Optional


def _pick(data: dict, *keys: str, default: Any = None) -> Any:
    for key in keys:
        if key in data:
            return data[key]
    return default


@dataclass(frozen=True)
class SetEntry:
    weight: Optional[float] = None
    reps: Optional[int] = None
    rpe: Optional[float] = None

    @classmethod
    def from_dict(cls, data: dict) -> "SetEntry":
        return cls(
            weight=data.get("weight"),
            reps=data.get("reps"),
            rpe=data.get("rpe"),
        )


@dataclass(frozen=True)
class ExerciseEntry:
    exercise_id: str
    sets: tuple[SetEntry, ...] = ()

    @classmethod
    def from_dict(cls, data: dict) -> "ExerciseEntry":
        sets = tuple(SetEntry.from_dict(s) for s in data.get("sets") or [])
        return cls(exercise_id=str(_pick(data, "exercise_id", "exerciseId", default="")), sets=sets)


@dataclass(frozen=True)
class WorkoutRecord:
    """A workout as stored by the session subsystem.

    Timestamps are kept as received (datetime, ISO string, epoch seconds or a
    ``{"seconds": ..., "nanoseconds": ...}`` mapping); normalization happens
    in :mod:`day_bucketer`. ``completed_at`` of ``None`` marks a workout that
    is still in progress.
    """

    id: str
    started_at: Any = None
    completed_at: Any = None
    duration_seconds: Optional[float] = None
    exercises: tuple[ExerciseEntry, ...] = ()

    @property
    def is_completed(self) -> bool:
        return self.completed_at is not None

    @classmethod
    def from_dict(cls, data: dict) -> "WorkoutRecord":
        exercises = tuple(
            ExerciseEntry.from_dict(e) for e in data.get("exercises") or []
        )
        duration = _pick(data, "duration_seconds", "durationSeconds")
        return cls(
            id=str(data.get("id", "")),
            started_at=_pick(data, "started_at", "startedAt"),
            completed_at=_pick(data, "completed_at", "completedAt"),
            duration_seconds=float(duration) if duration is not None else None,
            exercises=exercises,
        )


@dataclass(frozen=True)
class ScheduleDay:
    date: datetime.date
    template_id: Optional[str] = None
    completed: bool = False
    workout_id: Optional[str] = None

    @property
    def is_rest(self) -> bool:
        return self.template_id is None

    @classmethod
    def from_dict(cls, data: dict) -> "ScheduleDay":
        day = data["date"]
        if isinstance(day, str):
            day = datetime.date.fromisoformat(day[:10])
        elif isinstance(day, datetime.datetime):
            day = day.date()
        return cls(
            date=day,
            template_id=_pick(data, "template_id", "templateId"),
            completed=bool(data.get("completed", False)),
            workout_id=_pick(data, "workout_id", "workoutId"),
        )


@dataclass(frozen=True)
class MuscleGroups:
    primary: str
    secondary: tuple[str, ...] = ()

    @classmethod
    def from_dict(cls, data: dict) -> "MuscleGroups":
        secondary = _pick(data, "secondary", "secondaryMuscles", default=[]) or []
        return cls(
            primary=str(_pick(data, "primary", "muscleGroup")),
            secondary=tuple(str(m) for m in secondary),
        )


@dataclass(frozen=True)
class StreakConfig:
    max_rest_days_per_week: int = 0
    streak_type: str = "daily"

    def __post_init__(self) -> None:
        if self.max_rest_days_per_week < 0:
            raise ValueError("max_rest_days_per_week must be non-negative")
        if self.streak_type not in ("daily", "weekly"):
            raise ValueError("streak_type must be 'daily' or 'weekly'")

    @classmethod
    def from_dict(cls, data: dict) -> "StreakConfig":
        return cls(
            max_rest_days_per_week=int(
                _pick(data, "max_rest_days_per_week", "maxRestDaysPerWeek", default=0)
            ),
            streak_type=str(_pick(data, "streak_type", "streakType", default="daily")),
        )


@dataclass(frozen=True)
class PeriodRange:
    """Half-open range of local calendar days ``[start, end)``."""

    start: datetime.date
    end: datetime.date

    def __post_init__(self) -> None:
        if self.end < self.start:
            raise ValueError("period end must not precede start")

    @property
    def days(self) -> int:
        return (self.end - self.start).days

    def contains(self, day: datetime.date) -> bool:
        return self.start <= day < self.end

    def iter_days(self):
        for offset in range(self.days):
            yield self.start + datetime.timedelta(days=offset)


@dataclass(frozen=True)
class FetchWindow:
    name: str
    start: datetime.date
    covers: PeriodRange = field(compare=False)
