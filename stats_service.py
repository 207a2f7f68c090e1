from __future__ import annotations

import datetime
import logging
from typing import Any, Callable, Iterable, List, Optional

from adherence_engine import AdherenceEngine, AdherenceSummary
from config import resolve_timezone
from day_bucketer import DayBucketer
from duration_analyzer import DurationAnalyzer, DurationPoint, DurationStats
from heatmap_builder import HeatmapBuilder, HeatmapGrid
from models import (
    FetchWindow,
    MuscleGroups,
    PeriodRange,
    ScheduleDay,
    StreakConfig,
    WorkoutRecord,
)
from overload_analyzer import OverloadSummary, ProgressiveOverloadAnalyzer
from period_resolver import PeriodResolver
from settings_schema import AnalyticsSettings
from volume_aggregator import (
    MuscleDistribution,
    VolumeAggregator,
    VolumeTotals,
    VolumeTrendPoint,
)

logger = logging.getLogger(__name__)


class StatisticsService:
    """Compute workout analytics for a selected period.

    The collaborators are plain callables: ``get_completed_workouts`` receives
    the :class:`FetchWindow` to load, ``get_schedule_days`` the start and
    exclusive end of the adherence window. Results are memoized per
    ``(operation, period, dataset_version, local day)``; bump the dataset
    version with :meth:`mark_changed` whenever the underlying data changes.
    """

    def __init__(
        self,
        get_completed_workouts: Callable[[FetchWindow], Iterable[WorkoutRecord]],
        get_schedule_days: Optional[
            Callable[[datetime.date, datetime.date], Iterable[ScheduleDay]]
        ] = None,
        resolve_muscle_groups: Optional[Callable[[str], Optional[MuscleGroups]]] = None,
        get_streak_config: Optional[Callable[[], StreakConfig]] = None,
        settings: AnalyticsSettings | None = None,
    ) -> None:
        self.settings = settings or AnalyticsSettings()
        self.get_completed_workouts = get_completed_workouts
        self.get_schedule_days = get_schedule_days
        self.resolve_muscle_groups = resolve_muscle_groups or (lambda _id: None)
        self.get_streak_config = get_streak_config
        tz = resolve_timezone(self.settings.timezone)
        self.bucketer = DayBucketer(tz=tz, week_start_day=self.settings.week_start_day)
        self.periods = PeriodResolver(tz=tz, week_start_day=self.settings.week_start_day)
        self.volume = VolumeAggregator(self.bucketer)
        self.durations = DurationAnalyzer(self.bucketer)
        self.overload = ProgressiveOverloadAnalyzer(self.bucketer)
        self.adherence_engine = AdherenceEngine(
            self.bucketer,
            adherence_weeks=self.settings.adherence_weeks,
            adherence_weight=self.settings.consistency_adherence_weight,
        )
        self.heatmaps = HeatmapBuilder(self.bucketer, weeks=self.settings.heatmap_weeks)
        self.dataset_version = 0
        self._cache: dict[tuple, Any] = {}

    def clear_cache(self) -> None:
        """Clear any cached statistics."""
        self._cache.clear()

    def mark_changed(self) -> int:
        """Record that the workout or schedule data changed."""
        self.dataset_version += 1
        # Entries keyed by older versions can never be hit again.
        self._cache.clear()
        return self.dataset_version

    def _cached(
        self, name: str, period_id: Optional[str], now: Any, compute: Callable[[], Any]
    ) -> Any:
        key = (name, period_id, self.dataset_version, self.bucketer.today(now))
        if key not in self._cache:
            logger.info("computing %s for period %s", name, period_id)
            self._cache[key] = compute()
        return self._cache[key]

    def _load(self, period_id: str, now: Any) -> tuple[List[WorkoutRecord], PeriodRange]:
        def compute() -> tuple[List[WorkoutRecord], PeriodRange]:
            window = self.periods.fetch_window(period_id, now)
            workouts = [w for w in self.get_completed_workouts(window) if w.is_completed]
            first = None
            if period_id == "allTime":
                dated, _skipped = self.bucketer.dated(workouts)
                if dated:
                    first = min(day for day, _w in dated)
            period = self.periods.resolve(period_id, now, first)
            return workouts, period

        return self._cached("workouts", period_id, now, compute)

    def period_range(self, period_id: str, now: Any) -> PeriodRange:
        return self._load(period_id, now)[1]

    def data_quality(self, period_id: str, now: Any) -> dict[str, int]:
        """Return how many loaded workouts were skipped for bad timestamps."""
        workouts, _period = self._load(period_id, now)
        _dated, skipped = self.bucketer.dated(workouts)
        return {"workouts": len(workouts), "skipped": skipped}

    def totals(self, period_id: str, now: Any) -> VolumeTotals:
        def compute() -> VolumeTotals:
            workouts, period = self._load(period_id, now)
            return self.volume.totals(self.bucketer.within(workouts, period))

        return self._cached("totals", period_id, now, compute)

    def volume_trend(
        self, period_id: str, now: Any, granularity: str = "day"
    ) -> List[VolumeTrendPoint]:
        def compute() -> List[VolumeTrendPoint]:
            workouts, period = self._load(period_id, now)
            return self.volume.volume_trend(workouts, granularity, period)

        return self._cached(f"volume_trend:{granularity}", period_id, now, compute)

    def daily_volume(self, period_id: str, now: Any) -> dict[str, float]:
        def compute() -> dict[str, float]:
            workouts, period = self._load(period_id, now)
            return self.volume.daily_volume_map(workouts, period)

        return self._cached("daily_volume", period_id, now, compute)

    def muscle_distribution(self, period_id: str, now: Any) -> MuscleDistribution:
        def compute() -> MuscleDistribution:
            workouts, period = self._load(period_id, now)
            return self.volume.muscle_distribution(
                workouts, self.resolve_muscle_groups, period
            )

        return self._cached("muscle_distribution", period_id, now, compute)

    def duration_stats(self, period_id: str, now: Any) -> Optional[DurationStats]:
        def compute() -> Optional[DurationStats]:
            workouts, period = self._load(period_id, now)
            return self.durations.duration_stats(workouts, period)

        return self._cached("duration_stats", period_id, now, compute)

    def duration_trend(self, period_id: str, now: Any) -> List[DurationPoint]:
        def compute() -> List[DurationPoint]:
            workouts, period = self._load(period_id, now)
            return self.durations.duration_trend(workouts, period)

        return self._cached("duration_trend", period_id, now, compute)

    def progressive_overload(self, period_id: str, now: Any) -> Optional[OverloadSummary]:
        def compute() -> Optional[OverloadSummary]:
            workouts, period = self._load(period_id, now)
            return self.overload.summary(workouts, period)

        return self._cached("progressive_overload", period_id, now, compute)

    def streak_config(self) -> StreakConfig:
        if self.get_streak_config is not None:
            return self.get_streak_config()
        return StreakConfig(
            max_rest_days_per_week=self.settings.max_rest_days_per_week,
            streak_type=self.settings.streak_type,
        )

    def _load_range(self, name: str, covers: PeriodRange, now: Any) -> List[WorkoutRecord]:
        """Load completed workouts for a range that no named period matches."""

        def compute() -> List[WorkoutRecord]:
            window = FetchWindow(name="all", start=covers.start, covers=covers)
            records = self.get_completed_workouts(window)
            return self.bucketer.within([w for w in records if w.is_completed], covers)

        return self._cached(f"range:{name}", None, now, compute)

    def adherence(self, now: Any) -> AdherenceSummary:
        """Return schedule adherence for the lookback window ending this week."""

        def compute() -> AdherenceSummary:
            window = self.adherence_engine.window(now)
            schedule: Iterable[ScheduleDay] = []
            if self.get_schedule_days is not None:
                schedule = self.get_schedule_days(window.start, window.end)
            workouts = self._load_range("adherence", window, now)
            return self.adherence_engine.summarize(
                schedule, now, self.streak_config(), workouts
            )

        return self._cached("adherence", None, now, compute)

    def heatmap(self, period_id: str, now: Any) -> HeatmapGrid:
        """Return the calendar grid; the selected period only drives scaling."""

        def compute() -> HeatmapGrid:
            workouts = self._load_range("heatmap", self.heatmaps.grid_range(now), now)
            period = self.period_range(period_id, now)
            return self.heatmaps.build(workouts, period, now)

        return self._cached("heatmap", period_id, now, compute)

    def overview(self, period_id: str, now: Any) -> dict[str, Any]:
        """Return a summary of the main figures for ``period_id``."""
        totals = self.totals(period_id, now)
        durations = self.duration_stats(period_id, now)
        overload = self.progressive_overload(period_id, now)
        adherence = self.adherence(now)
        period = self.period_range(period_id, now)
        return {
            "period": period_id,
            "start": period.start.isoformat(),
            "end": period.end.isoformat(),
            "workouts": totals.workouts,
            "sets": totals.sets,
            "volume": totals.volume,
            "avg_volume": totals.average_volume,
            "avg_duration_minutes": durations.average_minutes if durations else None,
            "overload_status": overload.overall_status if overload else None,
            "adherence": adherence.overall.percentage,
            "current_streak": adherence.streak.current,
            "consistency_score": adherence.consistency_score,
            "skipped": self.data_quality(period_id, now)["skipped"],
        }
