import datetime
import logging
import os
from typing import Optional
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

import yaml

from settings_schema import AnalyticsSettings, validate_settings

APP_VERSION = "1.0.0"

logger = logging.getLogger(__name__)


class YamlConfig:
    """Load and save analytics settings to a YAML file."""

    def __init__(self, path: Optional[str] = None) -> None:
        self.path = path or os.environ.get("ANALYTICS_SETTINGS", "settings.yaml")

    def load(self) -> dict:
        if not os.path.exists(self.path):
            return {}
        with open(self.path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}
        if not isinstance(data, dict):
            raise ValueError(f"{self.path} must contain a mapping")
        return data

    def save(self, data: dict) -> None:
        validate_settings(data)
        with open(self.path, "w", encoding="utf-8") as f:
            yaml.safe_dump(dict(data), f)

    def settings(self) -> AnalyticsSettings:
        """Return validated settings with defaults for missing keys."""
        data = self.load()
        logger.debug("loaded %d settings from %s", len(data), self.path)
        return validate_settings(data)


def resolve_timezone(name: str) -> Optional[datetime.tzinfo]:
    """Return the tzinfo for ``name``; ``local`` means the system zone."""
    if name in ("", "local"):
        return None
    try:
        return ZoneInfo(name)
    except (ZoneInfoNotFoundError, ValueError) as exc:
        raise ValueError(f"unknown timezone: {name}") from exc


def load_settings(path: Optional[str] = None) -> AnalyticsSettings:
    return YamlConfig(path).settings()
