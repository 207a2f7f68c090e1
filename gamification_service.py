from __future__ import annotations

from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class Achievement:
    id: str
    name: str
    description: str


@dataclass(frozen=True)
class AchievementRule:
    id: str
    name: str
    metric: str
    daily_threshold: float
    weekly_threshold: float

    def threshold(self, streak_type: str) -> float:
        if self.metric == "adherence" or streak_type == "daily":
            return self.daily_threshold
        return self.weekly_threshold


ACHIEVEMENT_RULES: tuple[AchievementRule, ...] = (
    AchievementRule("on-fire", "On Fire", "current_streak", 7, 2),
    AchievementRule("unstoppable", "Unstoppable", "current_streak", 14, 4),
    AchievementRule("legendary", "Legendary", "current_streak", 30, 8),
    AchievementRule("obsessed", "Obsessed", "current_streak", 60, 12),
    AchievementRule("consistent", "Consistent", "adherence", 80, 80),
    AchievementRule("dedicated", "Dedicated", "adherence", 90, 90),
    AchievementRule("perfect", "Perfect", "adherence", 100, 100),
    AchievementRule("streak-master", "Streak Master", "longest_streak", 14, 4),
)


class GamificationService:
    """Evaluate achievement unlocks against streak and adherence figures.

    Every rule is checked on its own, so several achievements can be active
    at the same time.
    """

    def __init__(self, rules: tuple[AchievementRule, ...] = ACHIEVEMENT_RULES) -> None:
        self.rules = rules

    @staticmethod
    def _describe(rule: AchievementRule, threshold: float, streak_type: str) -> str:
        if rule.metric == "adherence":
            return f"{threshold:g}%+ adherence"
        unit = "day" if streak_type == "daily" else "week"
        prefix = "Best: " if rule.metric == "longest_streak" else ""
        return f"{prefix}{threshold:g} {unit} streak"

    def achievements(
        self,
        current_streak: int,
        longest_streak: int,
        adherence: Optional[float],
        streak_type: str = "daily",
    ) -> list[Achievement]:
        """Return the unlocked achievements in table order."""
        values = {
            "current_streak": current_streak,
            "longest_streak": longest_streak,
            "adherence": adherence,
        }
        unlocked: list[Achievement] = []
        for rule in self.rules:
            value = values[rule.metric]
            threshold = rule.threshold(streak_type)
            if value is None or value < threshold:
                continue
            unlocked.append(
                Achievement(
                    id=rule.id,
                    name=rule.name,
                    description=self._describe(rule, threshold, streak_type),
                )
            )
        return unlocked
