"""Normalize timestamps to local calendar days and group records by day/week."""

from __future__ import annotations

import datetime
import logging
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any, Callable, Iterable, Iterator, Optional

from errors import MalformedTimestamp

logger = logging.getLogger(__name__)


@dataclass
class DayBuckets:
    buckets: dict[str, list] = field(default_factory=dict)
    skipped_count: int = 0


@dataclass
class WeekBucket:
    week_start: datetime.date
    records: list = field(default_factory=list)
    is_partial: bool = False

    @property
    def week_end(self) -> datetime.date:
        """Exclusive end of the 7-day window."""
        return self.week_start + datetime.timedelta(days=7)


@dataclass
class WeekBuckets:
    weeks: list[WeekBucket] = field(default_factory=list)
    skipped_count: int = 0


def date_range(start: datetime.date, end: datetime.date) -> Iterator[datetime.date]:
    """Yield every day in ``[start, end)``."""
    day = start
    while day < end:
        yield day
        day += datetime.timedelta(days=1)


def start_of_week(day: datetime.date, week_start_day: int = 0) -> datetime.date:
    """Return the first day of the week containing ``day`` (Monday=0)."""
    if not 0 <= week_start_day <= 6:
        raise ValueError("week_start_day must be between 0 and 6")
    diff = (day.weekday() - week_start_day) % 7
    return day - datetime.timedelta(days=diff)


class DayBucketer:
    """Assign records to calendar days in the viewer's timezone.

    ``tz`` is the viewer's timezone; ``None`` means the system local zone.
    Naive datetimes and ISO strings without an offset are taken as local
    wall-clock time, aware values are converted before the day is taken.
    """

    def __init__(
        self, tz: Optional[datetime.tzinfo] = None, week_start_day: int = 0
    ) -> None:
        if not 0 <= week_start_day <= 6:
            raise ValueError("week_start_day must be between 0 and 6")
        self.tz = tz
        self.week_start_day = week_start_day

    def to_datetime(self, value: Any) -> datetime.datetime:
        """Normalize ``value`` to a datetime in the viewer's timezone."""
        if value is None or isinstance(value, bool):
            raise MalformedTimestamp(value)
        if isinstance(value, datetime.datetime):
            dt = value
        elif isinstance(value, datetime.date):
            return datetime.datetime.combine(value, datetime.time(), self.tz)
        elif isinstance(value, str):
            text = value.strip()
            if text.endswith("Z"):
                text = text[:-1] + "+00:00"
            try:
                dt = datetime.datetime.fromisoformat(text)
            except ValueError as exc:
                raise MalformedTimestamp(value) from exc
        elif isinstance(value, (int, float)):
            dt = self._from_epoch(value, 0, value)
        elif isinstance(value, Mapping):
            dt = self._from_epoch(value.get("seconds"), value.get("nanoseconds"), value)
        elif hasattr(value, "seconds"):
            dt = self._from_epoch(
                getattr(value, "seconds"), getattr(value, "nanoseconds", 0), value
            )
        else:
            raise MalformedTimestamp(value)
        if dt.tzinfo is None:
            return dt if self.tz is None else dt.replace(tzinfo=self.tz)
        return dt.astimezone(self.tz)

    @staticmethod
    def _from_epoch(seconds: Any, nanoseconds: Any, original: Any) -> datetime.datetime:
        if isinstance(seconds, bool) or not isinstance(seconds, (int, float)):
            raise MalformedTimestamp(original)
        nanos = nanoseconds if isinstance(nanoseconds, (int, float)) else 0
        try:
            return datetime.datetime.fromtimestamp(
                seconds + nanos / 1e9, tz=datetime.timezone.utc
            )
        except (OverflowError, OSError, ValueError) as exc:
            raise MalformedTimestamp(original) from exc

    def local_date(self, value: Any) -> datetime.date:
        """Return the viewer-local calendar day of ``value``."""
        if isinstance(value, datetime.date) and not isinstance(value, datetime.datetime):
            return value
        return self.to_datetime(value).date()

    def day_key(self, value: Any) -> str:
        """Return ``value`` as a ``YYYY-MM-DD`` local day key."""
        return self.local_date(value).isoformat()

    def today(self, now: Any) -> datetime.date:
        return self.local_date(now)

    def start_of_week(self, day: datetime.date) -> datetime.date:
        return start_of_week(day, self.week_start_day)

    def dated(
        self,
        records: Iterable,
        timestamp: Optional[Callable[[Any], Any]] = None,
    ) -> tuple[list[tuple[datetime.date, Any]], int]:
        dated: list[tuple[datetime.date, Any]] = []
        skipped = 0
        for record in records:
            if timestamp is None:
                if not getattr(record, "is_completed", True):
                    continue
                value = record.completed_at
            else:
                value = timestamp(record)
            try:
                day = self.local_date(value)
            except MalformedTimestamp:
                skipped += 1
                logger.debug(
                    "skipping record %s with malformed timestamp %r",
                    getattr(record, "id", None),
                    value,
                )
                continue
            dated.append((day, record))
        return dated, skipped

    def within(self, records: Iterable, period, timestamp=None) -> list:
        """Return the records whose local day falls inside ``period``."""
        dated, _skipped = self.dated(records, timestamp)
        return [record for day, record in dated if period.contains(day)]

    def bucket_by_day(
        self,
        records: Iterable,
        timestamp: Optional[Callable[[Any], Any]] = None,
    ) -> DayBuckets:
        """Group ``records`` by local day key in chronological order."""
        dated, skipped = self.dated(records, timestamp)
        dated.sort(key=lambda item: item[0])
        result = DayBuckets(skipped_count=skipped)
        for day, record in dated:
            result.buckets.setdefault(day.isoformat(), []).append(record)
        return result

    def bucket_by_week(
        self,
        records: Iterable,
        timestamp: Optional[Callable[[Any], Any]] = None,
        until: Optional[datetime.date] = None,
    ) -> WeekBuckets:
        """Group ``records`` into contiguous 7-day windows.

        Windows run from the week of the earliest record to the week of the
        latest one, empty weeks in between included. When ``until`` cuts the
        last window short it is flagged as partial.
        """
        dated, skipped = self.dated(records, timestamp)
        result = WeekBuckets(skipped_count=skipped)
        if not dated:
            return result
        dated.sort(key=lambda item: item[0])
        first = self.start_of_week(dated[0][0])
        last = self.start_of_week(dated[-1][0])
        count = (last - first).days // 7 + 1
        weeks = [
            WeekBucket(week_start=first + datetime.timedelta(days=7 * i))
            for i in range(count)
        ]
        for day, record in dated:
            weeks[(day - first).days // 7].records.append(record)
        if until is not None and weeks[-1].week_end > until:
            weeks[-1].is_partial = True
        result.weeks = weeks
        return result
