from typing import Literal

from pydantic import BaseModel, Field, ValidationError

from period_resolver import DEFAULT_PERIOD, PERIOD_IDS


class AnalyticsSettings(BaseModel):
    timezone: str = "local"
    week_start_day: int = Field(0, ge=0, le=6)
    adherence_weeks: int = Field(12, ge=1, le=52)
    max_rest_days_per_week: int = Field(0, ge=0, le=6)
    streak_type: Literal["daily", "weekly"] = "daily"
    default_period: str = DEFAULT_PERIOD
    consistency_adherence_weight: float = Field(0.7, ge=0.0, le=1.0)
    heatmap_weeks: int = Field(53, ge=1, le=53)


def validate_settings(data: dict) -> AnalyticsSettings:
    try:
        settings = AnalyticsSettings(**data)
    except ValidationError as e:
        raise ValueError(str(e))
    if settings.default_period not in PERIOD_IDS:
        raise ValueError(f"unknown default_period: {settings.default_period}")
    return settings
