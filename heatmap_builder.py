"""Calendar heatmap of daily training volume."""

from __future__ import annotations

import datetime
from dataclasses import dataclass, field
from typing import Iterable, List, Tuple

from algorithms import MathTools
from day_bucketer import DayBucketer
from models import PeriodRange, WorkoutRecord
from volume_aggregator import VolumeAggregator

GRID_WEEKS = 53


@dataclass(frozen=True)
class HeatmapCell:
    date: datetime.date
    day_key: str
    volume: float
    level: int
    is_today: bool
    is_in_period: bool


@dataclass(frozen=True)
class MonthLabel:
    month: int
    year: int
    week_index: int


@dataclass
class HeatmapGrid:
    weeks: List[List[HeatmapCell]] = field(default_factory=list)
    thresholds: Tuple[float, float] = (0.0, 0.0)
    total_volume: float = 0.0
    active_days: int = 0
    month_labels: List[MonthLabel] = field(default_factory=list)

    @property
    def cells(self) -> List[HeatmapCell]:
        return [cell for week in self.weeks for cell in week]

    @property
    def is_empty(self) -> bool:
        return self.active_days == 0


class HeatmapBuilder:
    """Lay out one cell per day in week columns, newest week last.

    Levels are tertiles of the non-zero daily volumes inside the requested
    period, so the scale follows the user's own typical volume. Days outside
    the period stay in the grid for layout but are left out of thresholds
    and totals. A period without activity falls back to the whole grid for
    its thresholds.
    """

    def __init__(self, bucketer: DayBucketer | None = None, weeks: int = GRID_WEEKS) -> None:
        if not 1 <= weeks <= GRID_WEEKS:
            raise ValueError(f"weeks must be between 1 and {GRID_WEEKS}")
        self.bucketer = bucketer or DayBucketer()
        self.weeks = weeks

    def grid_range(self, now) -> PeriodRange:
        today = self.bucketer.today(now)
        end = self.bucketer.start_of_week(today) + datetime.timedelta(days=7)
        return PeriodRange(end - datetime.timedelta(days=7 * self.weeks), end)

    @staticmethod
    def level(volume: float, thresholds: Tuple[float, float]) -> int:
        if volume <= 0:
            return 0
        low, high = thresholds
        if volume <= low:
            return 1
        if volume <= high:
            return 2
        return 3

    def build(
        self,
        workouts: Iterable[WorkoutRecord],
        period: PeriodRange,
        now,
    ) -> HeatmapGrid:
        today = self.bucketer.today(now)
        grid = self.grid_range(now)
        buckets = self.bucketer.bucket_by_day(self.bucketer.within(workouts, grid))
        volumes = {
            key: round(sum((VolumeAggregator.workout_volume(w) for w in items), 0.0), 2)
            for key, items in buckets.buckets.items()
        }
        in_period = [
            volume
            for key, volume in volumes.items()
            if period.contains(datetime.date.fromisoformat(key)) and volume > 0
        ]
        # An idle period still needs a scale for the rest of the grid.
        scale = in_period or [v for v in volumes.values() if v > 0]
        thresholds = MathTools.tertile_thresholds(scale)
        result = HeatmapGrid(
            thresholds=thresholds,
            total_volume=round(sum(in_period), 2),
            active_days=len(in_period),
        )
        day = grid.start
        for index in range(self.weeks):
            column: List[HeatmapCell] = []
            for _ in range(7):
                key = day.isoformat()
                volume = volumes.get(key, 0.0)
                column.append(
                    HeatmapCell(
                        date=day,
                        day_key=key,
                        volume=volume,
                        level=self.level(volume, thresholds),
                        is_today=day == today,
                        is_in_period=period.contains(day),
                    )
                )
                if day.day == 1:
                    result.month_labels.append(MonthLabel(day.month, day.year, index))
                day += datetime.timedelta(days=1)
            result.weeks.append(column)
        return result
