import datetime
import os
import sys
import unittest

sys.path.append(os.path.dirname(os.path.dirname(__file__)))
from duration_analyzer import DurationAnalyzer
from models import ExerciseEntry, PeriodRange, SetEntry, WorkoutRecord


def timed(wid: str, completed_at: str, seconds) -> WorkoutRecord:
    return WorkoutRecord(
        id=wid,
        completed_at=completed_at,
        duration_seconds=seconds,
        exercises=(ExerciseEntry("bench", (SetEntry(weight=100, reps=5),)),),
    )


class DurationAnalyzerTestCase(unittest.TestCase):
    def setUp(self) -> None:
        self.analyzer = DurationAnalyzer()

    def test_single_workout(self) -> None:
        stats = self.analyzer.duration_stats([timed("1", "2024-03-04T10:00:00", 3600)])
        self.assertEqual(stats.count, 1)
        self.assertEqual(stats.average, 3600.0)
        self.assertEqual(stats.average_minutes, 60)
        self.assertEqual(stats.shortest.value, stats.longest.value)
        self.assertEqual(stats.shortest.date, datetime.date(2024, 3, 4))
        self.assertEqual(stats.trend.direction, "stable")
        self.assertEqual(stats.trend.value, 0.0)

    def test_unknown_durations_are_ignored(self) -> None:
        records = [
            timed("1", "2024-03-04T10:00:00", None),
            timed("2", "2024-03-05T10:00:00", 1200),
            timed("3", "2024-03-06T10:00:00", 2400),
        ]
        stats = self.analyzer.duration_stats(records)
        self.assertEqual(stats.count, 2)
        self.assertEqual(stats.average, 1800.0)
        self.assertEqual(stats.shortest.date, datetime.date(2024, 3, 5))
        self.assertEqual(stats.longest.value, 2400.0)

    def test_no_durations(self) -> None:
        self.assertIsNone(self.analyzer.duration_stats([]))
        self.assertIsNone(
            self.analyzer.duration_stats([timed("1", "2024-03-04T10:00:00", None)])
        )

    def test_trend_halves(self) -> None:
        trend = self.analyzer.trend([1800, 1800, 3600, 3600])
        self.assertEqual(trend.direction, "increasing")
        self.assertEqual(trend.value, 100.0)
        # The middle value of an odd series is left out.
        trend = self.analyzer.trend([100, 5000, 50])
        self.assertEqual(trend.direction, "decreasing")
        self.assertEqual(trend.value, -50.0)
        self.assertEqual(self.analyzer.trend([1000, 1010]).direction, "stable")
        trend = self.analyzer.trend([100000, 102496])
        self.assertEqual(trend.direction, "stable")
        self.assertEqual(trend.value, 2.5)

    def test_duration_trend_in_period(self) -> None:
        period = PeriodRange(datetime.date(2024, 3, 5), datetime.date(2024, 3, 7))
        records = [
            timed("3", "2024-03-06T10:00:00", 2400),
            timed("1", "2024-03-04T10:00:00", 600),
            timed("2", "2024-03-05T10:00:00", 1200),
        ]
        points = self.analyzer.duration_trend(records, period)
        self.assertEqual([p.duration for p in points], [1200.0, 2400.0])
        self.assertEqual(points[0].volume, 500.0)
        self.assertEqual(points[0].exercise_count, 1)


if __name__ == "__main__":
    unittest.main()
