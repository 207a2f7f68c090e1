import argparse
import dataclasses
import datetime
import json
import logging
from typing import Any, Optional

from config import load_settings, resolve_timezone
from errors import MalformedTimestamp
from models import FetchWindow, MuscleGroups, ScheduleDay, StreakConfig, WorkoutRecord
from period_resolver import PERIOD_IDS, PeriodResolver
from stats_service import StatisticsService

HEATMAP_GLYPHS = " .oO"


def _read_json(path: Optional[str], default: Any) -> Any:
    if not path:
        return default
    with open(path, "r", encoding="utf-8") as f:
        return json.load(f)


def load_workouts(path: Optional[str]) -> list[WorkoutRecord]:
    return [WorkoutRecord.from_dict(w) for w in _read_json(path, [])]


def load_schedule(path: Optional[str]) -> list[ScheduleDay]:
    return [ScheduleDay.from_dict(d) for d in _read_json(path, [])]


def load_muscles(path: Optional[str]) -> dict[str, MuscleGroups]:
    data = _read_json(path, {})
    return {str(key): MuscleGroups.from_dict(value) for key, value in data.items()}


def parse_now(value: Optional[str]) -> datetime.datetime:
    if not value:
        return datetime.datetime.now().astimezone()
    try:
        return datetime.datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError as exc:
        raise MalformedTimestamp(value) from exc


def build_service(
    workouts_path: Optional[str],
    schedule_path: Optional[str] = None,
    muscles_path: Optional[str] = None,
    settings_path: Optional[str] = None,
    streak_path: Optional[str] = None,
) -> StatisticsService:
    """Create a service backed by JSON exports of the document store."""
    workouts = load_workouts(workouts_path)
    schedule = load_schedule(schedule_path)
    muscles = load_muscles(muscles_path)
    settings = load_settings(settings_path)
    get_streak_config = None
    if streak_path:
        streak = StreakConfig.from_dict(_read_json(streak_path, {}))
        get_streak_config = lambda: streak  # noqa: E731

    def get_completed_workouts(window: FetchWindow) -> list[WorkoutRecord]:
        # JSON exports are small; the store-side window filter is left to the engine.
        return [w for w in workouts if w.is_completed]

    def get_schedule_days(start: datetime.date, end: datetime.date) -> list[ScheduleDay]:
        return [d for d in schedule if start <= d.date < end]

    return StatisticsService(
        get_completed_workouts,
        get_schedule_days=get_schedule_days,
        resolve_muscle_groups=muscles.get,
        get_streak_config=get_streak_config,
        settings=settings,
    )


def _jsonable(value: Any) -> Any:
    if dataclasses.is_dataclass(value) and not isinstance(value, type):
        return _jsonable(dataclasses.asdict(value))
    if isinstance(value, dict):
        return {str(k): _jsonable(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [_jsonable(v) for v in value]
    if isinstance(value, (datetime.date, datetime.datetime)):
        return value.isoformat()
    return value


def report(service: StatisticsService, period_id: str, now: Any) -> dict:
    """Collect every analytics view for ``period_id`` into one document."""
    adherence = service.adherence(now)
    return _jsonable(
        {
            "overview": service.overview(period_id, now),
            "volume_trend": service.volume_trend(period_id, now, "day"),
            "weekly_volume": service.volume_trend(period_id, now, "week"),
            "muscle_distribution": service.muscle_distribution(period_id, now),
            "duration_stats": service.duration_stats(period_id, now),
            "overload": service.progressive_overload(period_id, now),
            "adherence": {
                "overall": adherence.overall,
                "streak": adherence.streak,
                "achievements": adherence.achievements,
                "trend": adherence.trend,
            },
        }
    )


def period_table(now: Any, tz: Optional[datetime.tzinfo] = None, week_start_day: int = 0) -> list[dict]:
    resolver = PeriodResolver(tz=tz, week_start_day=week_start_day)
    rows = []
    for period_id in PERIOD_IDS:
        period = resolver.resolve(period_id, now)
        window = resolver.fetch_window(period_id, now)
        rows.append(
            {
                "period": period_id,
                "start": period.start.isoformat(),
                "end": period.end.isoformat(),
                "days": period.days,
                "fetch": window.name,
            }
        )
    return rows


def render_heatmap(service: StatisticsService, period_id: str, now: Any) -> str:
    """Render the grid as seven text rows, one column per week."""
    grid = service.heatmap(period_id, now)
    lines = []
    for weekday in range(7):
        lines.append("".join(HEATMAP_GLYPHS[week[weekday].level] for week in grid.weeks))
    lines.append(
        f"{grid.active_days} active days, total volume {grid.total_volume:g}"
    )
    return "\n".join(lines)


def main(argv: Optional[list[str]] = None) -> None:
    parser = argparse.ArgumentParser(description="Workout analytics commands")
    parser.add_argument("--log-level", default="WARNING")
    sub = parser.add_subparsers(dest="cmd", required=True)

    def add_data_args(p: argparse.ArgumentParser) -> None:
        p.add_argument("--workouts", required=True)
        p.add_argument("--schedule")
        p.add_argument("--muscles")
        p.add_argument("--streak")
        p.add_argument("--settings")
        p.add_argument("--period", choices=PERIOD_IDS)
        p.add_argument("--now")

    rep = sub.add_parser("report")
    add_data_args(rep)

    per = sub.add_parser("periods")
    per.add_argument("--now")
    per.add_argument("--settings")
    per.add_argument("--week-start", type=int)

    heat = sub.add_parser("heatmap")
    add_data_args(heat)

    args = parser.parse_args(argv)
    logging.basicConfig(level=args.log_level.upper())
    now = parse_now(args.now)

    if args.cmd == "periods":
        settings = load_settings(args.settings)
        week_start = args.week_start if args.week_start is not None else settings.week_start_day
        rows = period_table(now, resolve_timezone(settings.timezone), week_start)
        print(json.dumps(rows, indent=2))
        return

    service = build_service(
        args.workouts, args.schedule, args.muscles, args.settings, args.streak
    )
    period_id = args.period or service.settings.default_period
    if args.cmd == "report":
        print(json.dumps(report(service, period_id, now), indent=2))
    elif args.cmd == "heatmap":
        print(render_heatmap(service, period_id, now))


if __name__ == "__main__":
    main()
