import os
import sys
import unittest

sys.path.append(os.path.dirname(os.path.dirname(__file__)))
from algorithms import MathTools


class MathToolsTestCase(unittest.TestCase):
    def test_constants(self) -> None:
        self.assertAlmostEqual(MathTools.TREND_THRESHOLD, 2.5)

    def test_clamp(self) -> None:
        self.assertEqual(MathTools.clamp(5, 0, 10), 5)
        self.assertEqual(MathTools.clamp(-1, 0, 10), 0)
        self.assertEqual(MathTools.clamp(11, 0, 10), 10)
        with self.assertRaises(ValueError):
            MathTools.clamp(1, 2, 1)

    def test_volume(self) -> None:
        sets = [(10, 100.0), (5, 150.0)]
        self.assertEqual(MathTools.volume(sets), 10 * 100.0 + 5 * 150.0)
        self.assertEqual(MathTools.volume([]), 0.0)

    def test_mean(self) -> None:
        self.assertAlmostEqual(MathTools.mean([1, 2, 3, 4]), 2.5)
        self.assertEqual(MathTools.mean([]), 0.0)

    def test_percent_change(self) -> None:
        self.assertAlmostEqual(MathTools.percent_change(5500, 5000), 10.0)
        self.assertAlmostEqual(MathTools.percent_change(4500, 5000), -10.0)
        self.assertIsNone(MathTools.percent_change(100, 0))

    def test_classify_change_bounds(self) -> None:
        self.assertEqual(MathTools.classify_change(2.5), "progressing")
        self.assertEqual(MathTools.classify_change(2.49), "maintaining")
        self.assertEqual(MathTools.classify_change(0.0), "maintaining")
        self.assertEqual(MathTools.classify_change(-2.49), "maintaining")
        self.assertEqual(MathTools.classify_change(-2.5), "regressing")
        self.assertEqual(MathTools.classify_change(None), "maintaining")
        self.assertEqual(MathTools.classify_change(2.496), "maintaining")
        self.assertEqual(MathTools.classify_change(-2.496), "maintaining")

    def test_classify_change_custom_labels(self) -> None:
        labels = ("increasing", "stable", "decreasing")
        self.assertEqual(MathTools.classify_change(30, labels), "increasing")
        self.assertEqual(MathTools.classify_change(-30, labels), "decreasing")

    def test_tertile_thresholds(self) -> None:
        low, high = MathTools.tertile_thresholds([0, 100, 200, 300, 400])
        self.assertAlmostEqual(low, 200.0)
        self.assertAlmostEqual(high, 300.0)
        self.assertEqual(MathTools.tertile_thresholds([]), (0.0, 0.0))
        self.assertEqual(MathTools.tertile_thresholds([0, 0]), (0.0, 0.0))


if __name__ == "__main__":
    unittest.main()
