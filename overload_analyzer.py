"""Week-over-week progressive overload classification."""

from __future__ import annotations

import datetime
from dataclasses import dataclass, field
from typing import Iterable, List, Optional

from algorithms import MathTools
from day_bucketer import DayBucketer
from models import PeriodRange, WorkoutRecord
from volume_aggregator import VolumeAggregator

WEEK_LABELS = ("progressing", "maintaining", "regressing")
OVERALL_LABELS = ("on_track", "maintaining", "regressing")


@dataclass(frozen=True)
class WeeklyOverload:
    week_start: datetime.date
    volume: float
    workouts: int
    change: float
    comparable: bool
    status: str


@dataclass(frozen=True)
class OverloadSummary:
    weeks_progressing: int
    total_weeks: int
    progress_rate: float
    avg_increase: float
    overall_status: str
    next_week_target: float
    weeks: List[WeeklyOverload] = field(default_factory=list)


class ProgressiveOverloadAnalyzer:
    """Classify weekly volume changes against a fixed ±2.5% threshold.

    A week whose predecessor has no volume has no meaningful change: it is
    reported with ``change == 0`` and ``comparable == False`` and does not
    count toward the summary.
    """

    def __init__(self, bucketer: DayBucketer | None = None) -> None:
        self.bucketer = bucketer or DayBucketer()

    @staticmethod
    def classify(change: Optional[float]) -> str:
        return MathTools.classify_change(change, WEEK_LABELS)

    def weekly_overload(
        self,
        workouts: Iterable[WorkoutRecord],
        period: Optional[PeriodRange] = None,
    ) -> List[WeeklyOverload]:
        """Return one entry per week with the change from the week before."""
        records = list(workouts)
        if period is not None:
            records = self.bucketer.within(records, period)
        buckets = self.bucketer.bucket_by_week(
            records, until=period.end if period is not None else None
        )
        result: List[WeeklyOverload] = []
        previous: Optional[float] = None
        for week in buckets.weeks:
            volume = round(
                sum((VolumeAggregator.workout_volume(w) for w in week.records), 0.0), 2
            )
            change = (
                MathTools.percent_change(volume, previous) if previous is not None else None
            )
            result.append(
                WeeklyOverload(
                    week_start=week.week_start,
                    volume=volume,
                    workouts=len(week.records),
                    change=round(change, 2) if change is not None else 0.0,
                    comparable=change is not None,
                    status=self.classify(change),
                )
            )
            previous = volume
        return result

    def summary(
        self,
        workouts: Iterable[WorkoutRecord],
        period: Optional[PeriodRange] = None,
    ) -> Optional[OverloadSummary]:
        """Return the overload summary or ``None`` with fewer than two weeks."""
        weeks = self.weekly_overload(workouts, period)
        if len(weeks) < 2:
            return None
        # Unrounded changes, so classification is not skewed by display rounding.
        changes = [
            MathTools.percent_change(week.volume, previous.volume)
            for previous, week in zip(weeks, weeks[1:])
            if week.comparable
        ]
        progressing = sum(1 for w in weeks if w.comparable and w.status == "progressing")
        total = len(changes)
        avg_increase = MathTools.mean(changes)
        target = max(0.0, weeks[-1].volume * (1 + avg_increase / 100))
        return OverloadSummary(
            weeks_progressing=progressing,
            total_weeks=total,
            progress_rate=round(progressing / total * 100, 2) if total else 0.0,
            avg_increase=round(avg_increase, 2),
            overall_status=MathTools.classify_change(avg_increase, OVERALL_LABELS),
            next_week_target=round(target, 2),
            weeks=weeks,
        )
