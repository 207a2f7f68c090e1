from typing import Iterable, Optional, Sequence, Tuple
import numpy as np


class MathTools:
    """Provides numeric helpers shared by the analytics components."""

    TREND_THRESHOLD: float = 2.5
    # Absorbs float noise so an exact ±2.5 lands on the closed bound.
    EPSILON: float = 1e-9

    @staticmethod
    def clamp(value: float, min_value: float, max_value: float) -> float:
        """Clamp ``value`` to the inclusive range [min_value, max_value]."""
        if min_value > max_value:
            raise ValueError("min_value must not exceed max_value")
        return max(min_value, min(value, max_value))

    @staticmethod
    def volume(sets: Iterable[Tuple[int, float]]) -> float:
        """Compute training volume as the sum of reps times weight."""
        vol = 0.0
        for reps, weight in sets:
            vol += reps * weight
        return vol

    @staticmethod
    def mean(values: Iterable[float]) -> float:
        """Return the arithmetic mean of ``values`` or 0.0 when empty."""
        data = list(values)
        if not data:
            return 0.0
        return float(np.mean(np.array(data, dtype=float)))

    @staticmethod
    def percent_change(current: float, previous: float) -> Optional[float]:
        """Return the change from ``previous`` to ``current`` in percent.

        ``None`` is returned when ``previous`` is zero since the ratio is
        undefined.
        """
        if previous == 0:
            return None
        return (current - previous) / previous * 100

    @classmethod
    def classify_change(
        cls,
        change: Optional[float],
        labels: Sequence[str] = ("progressing", "maintaining", "regressing"),
    ) -> str:
        """Map a percentage change onto ``labels`` (up, flat, down).

        Both bounds are closed: exactly +2.5 is up and exactly -2.5 is down.
        An undefined change maps to the flat label.
        """
        up, flat, down = labels
        if change is None:
            return flat
        if change >= cls.TREND_THRESHOLD - cls.EPSILON:
            return up
        if change <= -cls.TREND_THRESHOLD + cls.EPSILON:
            return down
        return flat

    @staticmethod
    def tertile_thresholds(values: Iterable[float]) -> Tuple[float, float]:
        """Return the 1/3 and 2/3 quantiles of ``values``."""
        arr = np.array([v for v in values if v > 0], dtype=float)
        if arr.size == 0:
            return (0.0, 0.0)
        low, high = np.quantile(arr, [1 / 3, 2 / 3])
        return (float(low), float(high))
