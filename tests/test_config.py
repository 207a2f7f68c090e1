import datetime
import os
import sys
import tempfile
import unittest

import yaml

sys.path.append(os.path.dirname(os.path.dirname(__file__)))
from config import YamlConfig, load_settings, resolve_timezone
from settings_schema import validate_settings


class YamlConfigTest(unittest.TestCase):
    def setUp(self) -> None:
        self.tmp = tempfile.TemporaryDirectory()
        self.path = os.path.join(self.tmp.name, "settings.yaml")

    def tearDown(self) -> None:
        self.tmp.cleanup()

    def test_missing_file_uses_defaults(self) -> None:
        settings = load_settings(self.path)
        self.assertEqual(settings.timezone, "local")
        self.assertEqual(settings.adherence_weeks, 12)
        self.assertEqual(settings.default_period, "last30Days")
        self.assertAlmostEqual(settings.consistency_adherence_weight, 0.7)

    def test_save_and_load(self) -> None:
        cfg = YamlConfig(self.path)
        cfg.save({"week_start_day": 6, "streak_type": "weekly"})
        with open(self.path, "r", encoding="utf-8") as f:
            self.assertEqual(yaml.safe_load(f)["week_start_day"], 6)
        settings = cfg.settings()
        self.assertEqual(settings.week_start_day, 6)
        self.assertEqual(settings.streak_type, "weekly")
        self.assertEqual(settings.max_rest_days_per_week, 0)

    def test_invalid_values_rejected(self) -> None:
        cfg = YamlConfig(self.path)
        with self.assertRaises(ValueError):
            cfg.save({"week_start_day": 7})
        self.assertFalse(os.path.exists(self.path))
        with self.assertRaises(ValueError):
            validate_settings({"streak_type": "monthly"})
        with self.assertRaises(ValueError):
            validate_settings({"default_period": "lastDecade"})
        with self.assertRaises(ValueError):
            validate_settings({"adherence_weeks": 0})

    def test_non_mapping_file(self) -> None:
        with open(self.path, "w", encoding="utf-8") as f:
            f.write("- just\n- a list\n")
        with self.assertRaises(ValueError):
            YamlConfig(self.path).load()

    def test_path_from_environment(self) -> None:
        os.environ["ANALYTICS_SETTINGS"] = self.path
        try:
            self.assertEqual(YamlConfig().path, self.path)
        finally:
            os.environ.pop("ANALYTICS_SETTINGS", None)

    def test_resolve_timezone(self) -> None:
        self.assertIsNone(resolve_timezone("local"))
        self.assertIsNone(resolve_timezone(""))
        tz = resolve_timezone("Europe/Berlin")
        self.assertEqual(
            datetime.datetime(2024, 7, 1, tzinfo=tz).utcoffset(), datetime.timedelta(hours=2)
        )
        with self.assertRaises(ValueError):
            resolve_timezone("Mars/Olympus_Mons")


if __name__ == "__main__":
    unittest.main()
