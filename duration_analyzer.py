"""Workout duration statistics."""

from __future__ import annotations

import datetime
from dataclasses import dataclass
from typing import Iterable, List, Optional

from algorithms import MathTools
from day_bucketer import DayBucketer
from models import PeriodRange, WorkoutRecord
from volume_aggregator import VolumeAggregator

TREND_LABELS = ("increasing", "stable", "decreasing")


@dataclass(frozen=True)
class DurationExtreme:
    value: float
    date: datetime.date


@dataclass(frozen=True)
class DurationTrend:
    direction: str
    value: float


@dataclass(frozen=True)
class DurationStats:
    count: int
    average: float
    average_minutes: int
    shortest: DurationExtreme
    longest: DurationExtreme
    trend: DurationTrend


@dataclass(frozen=True)
class DurationPoint:
    date: datetime.date
    duration: float
    volume: float
    exercise_count: int


class DurationAnalyzer:
    """Summarize how long completed workouts took.

    Workouts with an unknown duration are left out entirely rather than
    counted as zero-length sessions.
    """

    def __init__(self, bucketer: DayBucketer | None = None) -> None:
        self.bucketer = bucketer or DayBucketer()

    def _timed(
        self, workouts: Iterable[WorkoutRecord], period: Optional[PeriodRange]
    ) -> list[tuple[datetime.date, WorkoutRecord]]:
        dated, _skipped = self.bucketer.dated(workouts)
        timed = [
            (day, w)
            for day, w in dated
            if w.duration_seconds is not None
            and w.duration_seconds >= 0
            and (period is None or period.contains(day))
        ]
        timed.sort(key=lambda item: item[0])
        return timed

    @staticmethod
    def trend(durations: List[float]) -> DurationTrend:
        """Compare the recent half of ``durations`` against the earlier half."""
        if len(durations) < 2:
            return DurationTrend(direction="stable", value=0.0)
        half = len(durations) // 2
        earlier = MathTools.mean(durations[:half])
        recent = MathTools.mean(durations[len(durations) - half :])
        change = MathTools.percent_change(recent, earlier)
        if change is None:
            return DurationTrend(direction="stable", value=0.0)
        return DurationTrend(
            direction=MathTools.classify_change(change, TREND_LABELS),
            value=round(change, 2),
        )

    def duration_stats(
        self,
        workouts: Iterable[WorkoutRecord],
        period: Optional[PeriodRange] = None,
    ) -> Optional[DurationStats]:
        """Return duration statistics or ``None`` without any known duration."""
        timed = self._timed(workouts, period)
        if not timed:
            return None
        durations = [float(w.duration_seconds) for _day, w in timed]
        shortest = min(timed, key=lambda item: item[1].duration_seconds)
        longest = max(timed, key=lambda item: item[1].duration_seconds)
        average = MathTools.mean(durations)
        return DurationStats(
            count=len(durations),
            average=round(average, 2),
            average_minutes=int(round(average / 60)),
            shortest=DurationExtreme(float(shortest[1].duration_seconds), shortest[0]),
            longest=DurationExtreme(float(longest[1].duration_seconds), longest[0]),
            trend=self.trend(durations),
        )

    def duration_trend(
        self,
        workouts: Iterable[WorkoutRecord],
        period: Optional[PeriodRange] = None,
    ) -> List[DurationPoint]:
        """Return one point per timed workout, oldest first."""
        return [
            DurationPoint(
                date=day,
                duration=float(w.duration_seconds),
                volume=round(VolumeAggregator.workout_volume(w), 2),
                exercise_count=len(w.exercises),
            )
            for day, w in self._timed(workouts, period)
        ]
