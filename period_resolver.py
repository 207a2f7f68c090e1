"""Resolve named analytics periods to concrete local-day ranges."""

from __future__ import annotations

import datetime
import logging
from typing import Any, Optional

import pandas as pd

from day_bucketer import DayBucketer
from errors import InvalidPeriod
from models import FetchWindow, PeriodRange

logger = logging.getLogger(__name__)

PERIOD_IDS: tuple[str, ...] = (
    "thisWeek",
    "last7Days",
    "last14Days",
    "last30Days",
    "thisMonth",
    "lastMonth",
    "last90Days",
    "thisYear",
    "allTime",
)

ROLLING_DAYS: dict[str, int] = {
    "last7Days": 7,
    "last14Days": 14,
    "last30Days": 30,
    "last90Days": 90,
}

DEFAULT_PERIOD = "last30Days"

# Raw-data windows the workout store can load, smallest first.
FETCH_WINDOWS: tuple[str, ...] = ("week", "month", "quarter", "year")


def shift_months(day: datetime.date, months: int) -> datetime.date:
    """Return ``day`` moved by ``months`` calendar months (clamped to month end)."""
    return (pd.Timestamp(day) + pd.DateOffset(months=months)).date()


def month_start(day: datetime.date) -> datetime.date:
    return day.replace(day=1)


class PeriodResolver:
    """Map period identifiers to half-open ``[start, end)`` day ranges."""

    def __init__(
        self, tz: Optional[datetime.tzinfo] = None, week_start_day: int = 0
    ) -> None:
        self.bucketer = DayBucketer(tz=tz, week_start_day=week_start_day)

    @staticmethod
    def validate(period_id: Any) -> str:
        if period_id not in PERIOD_IDS:
            raise InvalidPeriod(period_id)
        return period_id

    def resolve(
        self,
        period_id: str,
        now: Any,
        first_workout: Any = None,
    ) -> PeriodRange:
        """Return the day range of ``period_id`` anchored to ``now``.

        ``first_workout`` is only used by ``allTime``; without it the range
        falls back to the current calendar month.
        """
        self.validate(period_id)
        today = self.bucketer.today(now)
        tomorrow = today + datetime.timedelta(days=1)
        if period_id in ROLLING_DAYS:
            days = ROLLING_DAYS[period_id]
            return PeriodRange(tomorrow - datetime.timedelta(days=days), tomorrow)
        if period_id == "thisWeek":
            return PeriodRange(self.bucketer.start_of_week(today), tomorrow)
        if period_id == "thisMonth":
            return PeriodRange(month_start(today), tomorrow)
        if period_id == "lastMonth":
            this_month = month_start(today)
            return PeriodRange(shift_months(this_month, -1), this_month)
        if period_id == "thisYear":
            return PeriodRange(datetime.date(today.year, 1, 1), tomorrow)
        # allTime
        if first_workout is None:
            return PeriodRange(month_start(today), tomorrow)
        first_day = self.bucketer.local_date(first_workout)
        return PeriodRange(min(first_day, today), tomorrow)

    def comparison_range(
        self,
        period_id: str,
        now: Any,
        first_workout: Any = None,
    ) -> Optional[PeriodRange]:
        """Return the range a period is compared against, if any."""
        current = self.resolve(period_id, now, first_workout)
        if period_id == "allTime":
            return None
        if period_id in ROLLING_DAYS or period_id == "thisWeek":
            length = datetime.timedelta(days=current.days)
            return PeriodRange(current.start - length, current.start)
        if period_id in ("thisMonth", "lastMonth"):
            return PeriodRange(shift_months(current.start, -1), current.start)
        # thisYear
        return PeriodRange(datetime.date(current.start.year - 1, 1, 1), current.start)

    def fetch_window(
        self,
        period_id: str,
        now: Any,
        first_workout: Any = None,
    ) -> FetchWindow:
        """Return the smallest raw-data window that covers ``period_id``.

        ``allTime`` never gets less than a year: its start is only known once
        the history has been loaded.
        """
        period = self.resolve(period_id, now, first_workout)
        today = self.bucketer.today(now)
        starts = {
            "week": today - datetime.timedelta(days=7),
            "month": shift_months(today, -1),
            "quarter": shift_months(today, -3),
            "year": shift_months(today, -12),
        }
        candidates = FETCH_WINDOWS if period_id != "allTime" else ("year",)
        for name in candidates:
            if starts[name] <= period.start:
                return FetchWindow(name=name, start=starts[name], covers=period)
        logger.debug("period %s exceeds the yearly fetch window", period_id)
        return FetchWindow(name="all", start=period.start, covers=period)
