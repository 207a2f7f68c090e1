"""Schedule adherence, streaks and consistency."""

from __future__ import annotations

import datetime
import logging
from dataclasses import dataclass, field
from typing import Callable, Iterable, List, Optional

import pandas as pd

from algorithms import MathTools
from day_bucketer import DayBucketer, date_range
from gamification_service import Achievement, GamificationService
from models import PeriodRange, ScheduleDay, StreakConfig, WorkoutRecord

logger = logging.getLogger(__name__)

COMPLETED = "completed"
MISSED = "missed"
PLANNED = "planned"
REST = "rest"

DEFAULT_ADHERENCE_WEEKS = 12
TREND_WEEKS = 4
TREND_POINTS = 10.0


def consistency_score(
    adherence_pct: Optional[float],
    current_streak: int,
    longest_streak: int,
    adherence_weight: float = 0.7,
) -> int:
    """Blend adherence with how close the current streak is to the best one.

    This is a tunable heuristic. The result is clamped to 0-100.
    """
    adherence = adherence_pct if adherence_pct is not None else 0.0
    ratio = current_streak / longest_streak * 100 if longest_streak > 0 else 0.0
    weight = MathTools.clamp(adherence_weight, 0.0, 1.0)
    score = weight * adherence + (1 - weight) * ratio
    return int(round(MathTools.clamp(score, 0.0, 100.0)))


@dataclass(frozen=True)
class ClassifiedDay:
    date: datetime.date
    status: str


@dataclass(frozen=True)
class OverallAdherence:
    planned: int
    completed: int
    missed: int
    percentage: Optional[float]


@dataclass(frozen=True)
class WeeklyAdherence:
    week_start: datetime.date
    planned: int
    completed: int
    missed: int
    percentage: Optional[float]


@dataclass(frozen=True)
class StreakInfo:
    current: int
    longest: int
    unit: str


@dataclass(frozen=True)
class AdherenceSummary:
    window: PeriodRange
    days: List[ClassifiedDay]
    overall: OverallAdherence
    weekly: List[WeeklyAdherence]
    streak: StreakInfo
    consistency_score: int
    achievements: List[Achievement] = field(default_factory=list)
    best_week: Optional[WeeklyAdherence] = None
    average_workouts_per_week: float = 0.0
    trend: str = "stable"


def _percentage(completed: int, missed: int) -> Optional[float]:
    if completed + missed == 0:
        return None
    return round(completed / (completed + missed) * 100, 2)


class AdherenceEngine:
    """Compare planned schedule days against logged workouts.

    The walk is bounded to ``adherence_weeks`` full weeks ending with the
    current one, so streaks are computed over the window only.
    """

    def __init__(
        self,
        bucketer: DayBucketer | None = None,
        adherence_weeks: int = DEFAULT_ADHERENCE_WEEKS,
        score: Callable[..., int] = consistency_score,
        adherence_weight: float = 0.7,
        gamification: GamificationService | None = None,
    ) -> None:
        if adherence_weeks <= 0:
            raise ValueError("adherence_weeks must be positive")
        self.bucketer = bucketer or DayBucketer()
        self.adherence_weeks = adherence_weeks
        self.score = score
        self.adherence_weight = adherence_weight
        self.gamification = gamification or GamificationService()

    def window(self, now) -> PeriodRange:
        today = self.bucketer.today(now)
        week_start = self.bucketer.start_of_week(today)
        start = week_start - datetime.timedelta(days=7 * (self.adherence_weeks - 1))
        return PeriodRange(start, week_start + datetime.timedelta(days=7))

    @staticmethod
    def classify_day(
        entry: Optional[ScheduleDay],
        day: datetime.date,
        today: datetime.date,
        logged: bool = False,
    ) -> str:
        if entry is None or entry.is_rest:
            return REST
        if entry.completed or entry.workout_id is not None or logged:
            return COMPLETED
        if day < today:
            return MISSED
        return PLANNED

    def classify(
        self,
        schedule: Iterable[ScheduleDay],
        now,
        workouts: Iterable[WorkoutRecord] = (),
    ) -> List[ClassifiedDay]:
        """Return the status of every day in the adherence window."""
        today = self.bucketer.today(now)
        window = self.window(now)
        entries: dict[datetime.date, ScheduleDay] = {}
        for entry in schedule:
            if not window.contains(entry.date):
                continue
            known = entries.get(entry.date)
            if known is None or (known.is_rest and not entry.is_rest) or entry.completed:
                entries[entry.date] = entry
        dated, _skipped = self.bucketer.dated(workouts)
        logged_days = {day for day, _w in dated}
        return [
            ClassifiedDay(day, self.classify_day(entries.get(day), day, today, day in logged_days))
            for day in date_range(window.start, window.end)
        ]

    @staticmethod
    def overall(days: Iterable[ClassifiedDay]) -> OverallAdherence:
        statuses = [d.status for d in days]
        completed = statuses.count(COMPLETED)
        missed = statuses.count(MISSED)
        return OverallAdherence(
            planned=completed + missed + statuses.count(PLANNED),
            completed=completed,
            missed=missed,
            percentage=_percentage(completed, missed),
        )

    def weekly(self, days: List[ClassifiedDay]) -> List[WeeklyAdherence]:
        """Group classified days into weeks, oldest first."""
        weeks: dict[datetime.date, list[ClassifiedDay]] = {}
        for day in days:
            weeks.setdefault(self.bucketer.start_of_week(day.date), []).append(day)
        result = []
        for week_start in sorted(weeks):
            summary = self.overall(weeks[week_start])
            result.append(
                WeeklyAdherence(
                    week_start=week_start,
                    planned=summary.planned,
                    completed=summary.completed,
                    missed=summary.missed,
                    percentage=summary.percentage,
                )
            )
        return result

    @staticmethod
    def _runs(counted: List[bool], breaks: List[bool]) -> tuple[int, int]:
        """Return (current, longest) run lengths; the current run ends last."""
        current = longest = 0
        for is_counted, is_break in zip(counted, breaks):
            if is_break:
                current = 0
            elif is_counted:
                current += 1
                longest = max(longest, current)
        return current, longest

    def daily_streak(
        self, days: List[ClassifiedDay], today: datetime.date, max_missed: int = 0
    ) -> StreakInfo:
        """Return day streaks where rest days neither count nor break a run.

        A missed day is tolerated while the missed days in the 7-day window
        ending on it do not exceed ``max_missed``.
        """
        past = [d for d in days if d.date <= today]
        missed = pd.Series([1 if d.status == MISSED else 0 for d in past], dtype=float)
        rolling = missed.rolling(7, min_periods=1).sum().tolist() if len(past) else []
        breaks = [
            d.status == MISSED and count > max_missed for d, count in zip(past, rolling)
        ]
        counted = [d.status == COMPLETED for d in past]
        current, longest = self._runs(counted, breaks)
        return StreakInfo(current=current, longest=longest, unit="days")

    def weekly_streak(
        self, weekly: List[WeeklyAdherence], today: datetime.date, max_missed: int = 0
    ) -> StreakInfo:
        """Return week streaks; a week breaks once it has too many missed days."""
        past = [w for w in weekly if w.week_start <= today]
        breaks = [w.missed > max_missed for w in past]
        counted = [w.completed > 0 for w in past]
        current, longest = self._runs(counted, breaks)
        return StreakInfo(current=current, longest=longest, unit="weeks")

    @staticmethod
    def trend(weekly: List[WeeklyAdherence]) -> str:
        """Compare the last four weeks' adherence with the four before."""
        if len(weekly) < TREND_WEEKS * 2:
            return "stable"
        recent = [w.percentage for w in weekly[-TREND_WEEKS:] if w.percentage is not None]
        previous = [
            w.percentage
            for w in weekly[-TREND_WEEKS * 2 : -TREND_WEEKS]
            if w.percentage is not None
        ]
        if not recent or not previous:
            return "stable"
        diff = MathTools.mean(recent) - MathTools.mean(previous)
        if diff > TREND_POINTS:
            return "improving"
        if diff < -TREND_POINTS:
            return "declining"
        return "stable"

    def summarize(
        self,
        schedule: Iterable[ScheduleDay],
        now,
        config: StreakConfig | None = None,
        workouts: Iterable[WorkoutRecord] = (),
    ) -> AdherenceSummary:
        """Return adherence, streaks, consistency and achievements."""
        config = config or StreakConfig()
        today = self.bucketer.today(now)
        days = self.classify(schedule, now, workouts)
        overall = self.overall(days)
        weekly = self.weekly(days)
        if config.streak_type == "weekly":
            streak = self.weekly_streak(weekly, today, config.max_rest_days_per_week)
        else:
            streak = self.daily_streak(days, today, config.max_rest_days_per_week)
        rated = [w for w in weekly if w.percentage is not None]
        best_week = None
        for week in rated:
            if best_week is None or week.percentage > best_week.percentage:
                best_week = week
        logger.debug(
            "adherence window %s..%s: %s completed, %s missed",
            days[0].date,
            days[-1].date,
            overall.completed,
            overall.missed,
        )
        return AdherenceSummary(
            window=self.window(now),
            days=days,
            overall=overall,
            weekly=weekly,
            streak=streak,
            consistency_score=self.score(
                overall.percentage,
                streak.current,
                streak.longest,
                adherence_weight=self.adherence_weight,
            ),
            achievements=self.gamification.achievements(
                streak.current,
                streak.longest,
                overall.percentage,
                config.streak_type,
            ),
            best_week=best_week,
            average_workouts_per_week=round(overall.completed / len(weekly), 1),
            trend=self.trend(weekly),
        )
