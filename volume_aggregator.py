"""Training volume at set, exercise, workout and muscle-group granularity."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Callable, Iterable, List, Optional

from algorithms import MathTools
from day_bucketer import DayBucketer, date_range
from errors import UnresolvedExercise
from models import ExerciseEntry, MuscleGroups, PeriodRange, SetEntry, WorkoutRecord

logger = logging.getLogger(__name__)

MuscleResolver = Callable[[str], Optional[MuscleGroups]]


@dataclass(frozen=True)
class VolumeTrendPoint:
    key: str
    volume: float
    workouts: int
    sets: int


@dataclass(frozen=True)
class MuscleVolumeShare:
    muscle: str
    volume: float
    hits: int
    percentage: float


@dataclass
class MuscleDistribution:
    shares: List[MuscleVolumeShare] = field(default_factory=list)
    unresolved_count: int = 0


@dataclass(frozen=True)
class VolumeTotals:
    workouts: int
    sets: int
    volume: float
    average_volume: float


class VolumeAggregator:
    """Compute volume series from completed workouts.

    Muscle attribution gives an exercise's whole volume to its primary group
    and again to every secondary group, so the shares describe muscle-group
    hits and their sum exceeds the tonnage actually lifted.
    """

    def __init__(self, bucketer: DayBucketer | None = None) -> None:
        self.bucketer = bucketer or DayBucketer()

    @staticmethod
    def _counts(entry: SetEntry) -> bool:
        if entry.weight is None or entry.reps is None:
            return False
        if entry.weight < 0:
            raise ValueError("weight must be non-negative")
        if entry.reps < 0:
            raise ValueError("reps must be non-negative")
        return True

    @classmethod
    def set_volume(cls, entry: SetEntry) -> float:
        """Return weight times reps, or 0 when either is missing."""
        if not cls._counts(entry):
            return 0.0
        return float(entry.reps) * float(entry.weight)

    @classmethod
    def exercise_volume(cls, exercise: ExerciseEntry) -> float:
        return MathTools.volume(
            (s.reps, float(s.weight)) for s in exercise.sets if cls._counts(s)
        )

    @classmethod
    def workout_volume(cls, workout: WorkoutRecord) -> float:
        return sum((cls.exercise_volume(e) for e in workout.exercises), 0.0)

    @staticmethod
    def set_count(workout: WorkoutRecord) -> int:
        return sum(len(e.sets) for e in workout.exercises)

    def totals(self, workouts: Iterable[WorkoutRecord]) -> VolumeTotals:
        """Return workout, set and volume totals for completed workouts."""
        done = [w for w in workouts if w.is_completed]
        volume = sum((self.workout_volume(w) for w in done), 0.0)
        average = volume / len(done) if done else 0.0
        return VolumeTotals(
            workouts=len(done),
            sets=sum(self.set_count(w) for w in done),
            volume=round(volume, 2),
            average_volume=round(average, 2),
        )

    def _point(self, key: str, workouts: list[WorkoutRecord]) -> VolumeTrendPoint:
        return VolumeTrendPoint(
            key=key,
            volume=round(sum((self.workout_volume(w) for w in workouts), 0.0), 2),
            workouts=len(workouts),
            sets=sum(self.set_count(w) for w in workouts),
        )

    def volume_trend(
        self,
        workouts: Iterable[WorkoutRecord],
        granularity: str = "day",
        period: PeriodRange | None = None,
    ) -> List[VolumeTrendPoint]:
        """Return one point per day or week that has workouts."""
        if granularity not in ("day", "week"):
            raise ValueError("granularity must be 'day' or 'week'")
        records = list(workouts)
        if period is not None:
            records = self.bucketer.within(records, period)
        if granularity == "day":
            days = self.bucketer.bucket_by_day(records)
            return [self._point(key, items) for key, items in days.buckets.items()]
        weeks = self.bucketer.bucket_by_week(
            records, until=period.end if period is not None else None
        )
        return [
            self._point(week.week_start.isoformat(), week.records)
            for week in weeks.weeks
            if week.records
        ]

    def daily_volume_map(
        self, workouts: Iterable[WorkoutRecord], period: PeriodRange
    ) -> dict[str, float]:
        """Return volume per day of ``period`` with empty days set to 0."""
        result = {day.isoformat(): 0.0 for day in date_range(period.start, period.end)}
        days = self.bucketer.bucket_by_day(self.bucketer.within(workouts, period))
        for key, items in days.buckets.items():
            result[key] = round(sum((self.workout_volume(w) for w in items), 0.0), 2)
        return result

    @staticmethod
    def _resolve(resolve: MuscleResolver, exercise_id: str) -> Optional[MuscleGroups]:
        try:
            groups = resolve(exercise_id)
        except UnresolvedExercise:
            groups = None
        if groups is None:
            logger.debug("no muscle groups for exercise %s", exercise_id)
        return groups

    def _attributed(
        self, workout: WorkoutRecord, resolve: MuscleResolver
    ) -> tuple[list[tuple[str, float]], int]:
        hits: list[tuple[str, float]] = []
        unresolved = 0
        for exercise in workout.exercises:
            groups = self._resolve(resolve, exercise.exercise_id)
            if groups is None:
                unresolved += 1
                continue
            volume = self.exercise_volume(exercise)
            muscles = [groups.primary] + [
                m for m in dict.fromkeys(groups.secondary) if m != groups.primary
            ]
            for muscle in muscles:
                hits.append((muscle, volume))
        return hits, unresolved

    def muscle_distribution(
        self,
        workouts: Iterable[WorkoutRecord],
        resolve: MuscleResolver,
        period: PeriodRange | None = None,
    ) -> MuscleDistribution:
        """Return muscle-group hit counts and shares, most-hit group first.

        ``percentage`` is the share of all hits; ``volume`` is kept alongside
        for charts that weigh groups by load.
        """
        records = [w for w in workouts if w.is_completed]
        if period is not None:
            records = self.bucketer.within(records, period)
        volumes: dict[str, float] = {}
        counts: dict[str, int] = {}
        unresolved = 0
        for workout in records:
            hits, missing = self._attributed(workout, resolve)
            unresolved += missing
            for muscle, volume in hits:
                volumes[muscle] = volumes.get(muscle, 0.0) + volume
                counts[muscle] = counts.get(muscle, 0) + 1
        total = sum(counts.values())
        shares = [
            MuscleVolumeShare(
                muscle=muscle,
                volume=round(volume, 2),
                hits=counts[muscle],
                percentage=round(counts[muscle] / total * 100, 2) if total > 0 else 0.0,
            )
            for muscle, volume in volumes.items()
        ]
        shares.sort(key=lambda s: (-s.hits, s.muscle))
        return MuscleDistribution(shares=shares, unresolved_count=unresolved)

    def muscle_volume_by_day(
        self,
        workouts: Iterable[WorkoutRecord],
        resolve: MuscleResolver,
        period: PeriodRange | None = None,
    ) -> dict[str, dict[str, float]]:
        """Return attributed muscle volume keyed by local day."""
        records = list(workouts)
        if period is not None:
            records = self.bucketer.within(records, period)
        result: dict[str, dict[str, float]] = {}
        for key, items in self.bucketer.bucket_by_day(records).buckets.items():
            day: dict[str, float] = {}
            for workout in items:
                for muscle, volume in self._attributed(workout, resolve)[0]:
                    day[muscle] = round(day.get(muscle, 0.0) + volume, 2)
            result[key] = day
        return result
