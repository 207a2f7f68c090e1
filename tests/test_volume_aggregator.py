import datetime
import os
import sys
import unittest

sys.path.append(os.path.dirname(os.path.dirname(__file__)))
from errors import UnresolvedExercise
from models import ExerciseEntry, MuscleGroups, PeriodRange, SetEntry, WorkoutRecord
from volume_aggregator import VolumeAggregator

MUSCLES = {
    "bench": MuscleGroups("chest", ("triceps", "shoulders")),
    "squat": MuscleGroups("quads", ("glutes",)),
}


def resolve(exercise_id: str):
    if exercise_id == "mystery":
        raise UnresolvedExercise(exercise_id)
    return MUSCLES.get(exercise_id)


def workout(wid: str, completed_at: str, *exercises: ExerciseEntry) -> WorkoutRecord:
    return WorkoutRecord(id=wid, completed_at=completed_at, exercises=tuple(exercises))


def exercise(exercise_id: str, *sets) -> ExerciseEntry:
    return ExerciseEntry(exercise_id, tuple(SetEntry(weight=w, reps=r) for w, r in sets))


class VolumeAggregatorTestCase(unittest.TestCase):
    def setUp(self) -> None:
        self.agg = VolumeAggregator()

    def test_set_volume(self) -> None:
        self.assertEqual(self.agg.set_volume(SetEntry(weight=100, reps=5)), 500.0)
        self.assertEqual(self.agg.set_volume(SetEntry(weight=None, reps=5)), 0.0)
        self.assertEqual(self.agg.set_volume(SetEntry(weight=100, reps=None)), 0.0)
        self.assertEqual(self.agg.set_volume(SetEntry(weight=0, reps=10)), 0.0)
        with self.assertRaises(ValueError):
            self.agg.set_volume(SetEntry(weight=-1, reps=5))
        with self.assertRaises(ValueError):
            self.agg.set_volume(SetEntry(weight=10, reps=-5))

    def test_workout_volume(self) -> None:
        w = workout(
            "1",
            "2024-03-04T10:00:00",
            exercise("bench", (100, 5), (100, 5), (None, 8)),
            exercise("squat", (140, 3)),
        )
        self.assertEqual(self.agg.exercise_volume(w.exercises[0]), 1000.0)
        self.assertEqual(self.agg.workout_volume(w), 1420.0)
        self.assertEqual(self.agg.set_count(w), 4)

    def test_totals_ignore_in_progress(self) -> None:
        records = [
            workout("1", "2024-03-04T10:00:00", exercise("bench", (100, 5))),
            workout("2", "2024-03-05T10:00:00", exercise("bench", (50, 10), (50, 10))),
            WorkoutRecord(id="open", exercises=(exercise("bench", (100, 100)),)),
        ]
        totals = self.agg.totals(records)
        self.assertEqual(totals.workouts, 2)
        self.assertEqual(totals.sets, 3)
        self.assertEqual(totals.volume, 1500.0)
        self.assertEqual(totals.average_volume, 750.0)
        self.assertEqual(self.agg.totals([]).average_volume, 0.0)

    def test_daily_trend_merges_same_day(self) -> None:
        records = [
            workout("2", "2024-03-05T18:00:00", exercise("bench", (100, 5))),
            workout("1", "2024-03-04T10:00:00", exercise("bench", (100, 5))),
            workout("3", "2024-03-05T08:00:00", exercise("squat", (100, 10))),
        ]
        trend = self.agg.volume_trend(records)
        self.assertEqual([p.key for p in trend], ["2024-03-04", "2024-03-05"])
        self.assertEqual(trend[1].volume, 1500.0)
        self.assertEqual(trend[1].workouts, 2)

    def test_weekly_trend_drops_empty_weeks(self) -> None:
        records = [
            workout("1", "2024-03-04T10:00:00", exercise("bench", (100, 5))),
            workout("2", "2024-03-20T10:00:00", exercise("bench", (100, 6))),
        ]
        trend = self.agg.volume_trend(records, "week")
        self.assertEqual([p.key for p in trend], ["2024-03-04", "2024-03-18"])
        self.assertEqual([p.volume for p in trend], [500.0, 600.0])
        with self.assertRaises(ValueError):
            self.agg.volume_trend(records, "month")

    def test_daily_volume_map_fills_gaps(self) -> None:
        period = PeriodRange(datetime.date(2024, 3, 4), datetime.date(2024, 3, 7))
        records = [
            workout("1", "2024-03-05T10:00:00", exercise("bench", (100, 5))),
            workout("2", "2024-03-08T10:00:00", exercise("bench", (100, 5))),
        ]
        self.assertEqual(
            self.agg.daily_volume_map(records, period),
            {"2024-03-04": 0.0, "2024-03-05": 500.0, "2024-03-06": 0.0},
        )

    def test_muscle_distribution(self) -> None:
        records = [
            workout(
                "1",
                "2024-03-04T10:00:00",
                exercise("bench", (100, 5)),
                exercise("squat", (100, 10)),
                exercise("mystery", (50, 10)),
                exercise("unknown", (50, 10)),
            ),
        ]
        dist = self.agg.muscle_distribution(records, resolve)
        self.assertEqual(dist.unresolved_count, 2)
        by_muscle = {s.muscle: s for s in dist.shares}
        self.assertEqual(set(by_muscle), {"chest", "triceps", "shoulders", "quads", "glutes"})
        # Secondary muscles receive the full exercise volume.
        self.assertEqual(by_muscle["triceps"].volume, 500.0)
        self.assertEqual(by_muscle["quads"].volume, 1000.0)
        self.assertEqual(
            [s.muscle for s in dist.shares], ["chest", "glutes", "quads", "shoulders", "triceps"]
        )
        self.assertEqual(by_muscle["quads"].percentage, 20.0)
        self.assertAlmostEqual(sum(s.percentage for s in dist.shares), 100.0, places=1)

    def test_muscle_distribution_ranks_by_hits(self) -> None:
        muscles = {"leg_press": MuscleGroups("legs"), "curl": MuscleGroups("arms")}
        records = [
            workout("1", "2024-03-04T10:00:00", exercise("leg_press", (1000, 1))),
            workout(
                "2",
                "2024-03-05T10:00:00",
                exercise("curl", (100, 1)),
                exercise("curl", (100, 1)),
                exercise("curl", (100, 1)),
            ),
        ]
        dist = self.agg.muscle_distribution(records, muscles.get)
        self.assertEqual(
            [(s.muscle, s.hits, s.percentage) for s in dist.shares],
            [("arms", 3, 75.0), ("legs", 1, 25.0)],
        )
        self.assertEqual(dist.shares[1].volume, 1000.0)

    def test_muscle_distribution_empty(self) -> None:
        dist = self.agg.muscle_distribution([], resolve)
        self.assertEqual(dist.shares, [])
        self.assertEqual(dist.unresolved_count, 0)

    def test_muscle_volume_by_day(self) -> None:
        records = [workout("1", "2024-03-04T10:00:00", exercise("squat", (100, 10)))]
        self.assertEqual(
            self.agg.muscle_volume_by_day(records, resolve),
            {"2024-03-04": {"quads": 1000.0, "glutes": 1000.0}},
        )


if __name__ == "__main__":
    unittest.main()
