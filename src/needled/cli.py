"""CLI: estado de la semana de inyección, rachas de hábitos y exportación Excel."""

from __future__ import annotations

import argparse
import logging
import sys
from collections.abc import Sequence
from datetime import datetime
from pathlib import Path
from typing import Any

import structlog

from needled.config import TrackerConfig, load_config
from needled.excel_writer import ExcelLayout, write_adherence_xlsx
from needled.model import HabitDay, InjectionRecord
from needled.report import (
    adherence_summary,
    assign_dose_numbers,
    habits_to_frame,
    injections_to_frame,
)
from needled.sources.habits import HabitLogPaths, HabitLogSource
from needled.sources.injections import InjectionLogPaths, InjectionLogSource
from needled.streaks import calculate_streaks, is_perfect_day

logger = structlog.get_logger(__name__)


def configure_logging(level: str = "WARNING") -> None:
    """Console logging to stderr at ``level``."""
    structlog.configure(
        processors=[
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.dev.ConsoleRenderer(colors=False),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(
            logging.getLevelName(level.upper())
        ),
        logger_factory=structlog.PrintLoggerFactory(file=sys.stderr),
        cache_logger_on_first_use=False,
    )


def parse_args(argv: Sequence[str] | None = None) -> argparse.Namespace:
    """Parse command-line arguments.

    Returns:
        Parsed argparse namespace.
    """
    parser = argparse.ArgumentParser(
        description="Adherencia GLP-1: semana de inyección, pluma y rachas."
    )
    parser.add_argument(
        "--data-dir",
        default=str(Path.home() / ".needled"),
        help="Directorio con injections.csv, habits.csv y config.json.",
    )
    parser.add_argument(
        "--config",
        default=None,
        help="Archivo de configuracion JSON (default: <data-dir>/config.json).",
    )
    parser.add_argument(
        "--log-level",
        default="WARNING",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Nivel de log (stderr).",
    )
    sub = parser.add_subparsers(dest="command", required=True)
    sub.add_parser("status", help="Estado de la semana y de la pluma.")
    sub.add_parser("streaks", help="Racha actual y mejor racha.")
    export = sub.add_parser("export", help="Exporta el resumen a Excel.")
    export.add_argument(
        "--out-dir",
        default=None,
        help="Directorio de salida (default: export_dir o <data-dir>/salidas).",
    )
    return parser.parse_args(argv)


def main(argv: Sequence[str] | None = None) -> int:
    """Run the CLI.

    Returns:
        Exit code (0 on success).
    """
    ns = parse_args(argv)
    configure_logging(ns.log_level)
    data_dir = Path(ns.data_dir).expanduser().resolve()
    if not data_dir.exists():
        raise FileNotFoundError(str(data_dir))
    config_path = Path(ns.config).expanduser() if ns.config else data_dir / "config.json"
    config = load_config(config_path)
    now = datetime.now(tz=config.local_tz())

    if ns.command == "streaks":
        habits = _load_habits(data_dir, required=True)
        return _print_streaks(habits, now)

    records = _load_injections(data_dir, config)
    habits = _load_habits(data_dir, required=False)
    summary = adherence_summary(records, habits, config, now)

    if ns.command == "status":
        _print_status(summary)
        return 0

    out_dir = _export_dir(ns.out_dir, config, data_dir)
    ts = now.strftime("%Y-%m-%d_%H-%M-%S")
    out_path = out_dir / f"needled_adherencia_{ts}.xlsx"
    write_adherence_xlsx(
        injections_to_frame(records, config.injection_day),
        habits_to_frame(habits, now),
        summary,
        out_path,
        ExcelLayout(),
    )
    print(f"OK: Injections: {len(records)}")
    print(f"OK: Habit days: {len(habits)}")
    print(f"OK: Output: {out_path}")
    return 0


def _load_injections(data_dir: Path, config: TrackerConfig) -> list[InjectionRecord]:
    source = InjectionLogSource(InjectionLogPaths(root=data_dir), config.local_tz())
    if not source.csv_path.exists():
        logger.warning("injection_log_missing", path=str(source.csv_path))
        return []
    return assign_dose_numbers(source.load_records(), config)


def _load_habits(data_dir: Path, *, required: bool) -> dict[str, HabitDay]:
    source = HabitLogSource(HabitLogPaths(root=data_dir))
    if required:
        source.validate()
    elif not source.csv_path.exists():
        logger.warning("habit_log_missing", path=str(source.csv_path))
        return {}
    return source.load_habits()


def _export_dir(out_dir: str | None, config: TrackerConfig, data_dir: Path) -> Path:
    if out_dir:
        return Path(out_dir).expanduser()
    if config.export_dir:
        return Path(config.export_dir).expanduser()
    return data_dir / "salidas"


def _print_status(summary: dict[str, Any]) -> None:
    status = summary["status"]
    line = f"Status: {status}"
    if status == "upcoming" and summary["days_until"]:
        line += f" (in {summary['days_until']} days)"
    elif status == "overdue":
        line += f" ({summary['days_overdue']} days late)"
    print(line)
    print(
        "Week: "
        f"{summary['week_start']:%Y-%m-%d} -> {summary['week_end']:%Y-%m-%d}"
    )
    print(f"Suggested site: {summary['suggested_site_label']}")
    dose = f"{summary['next_dose']}/{summary['doses_per_pen']}"
    if summary["next_is_bonus"]:
        dose = "bonus"
    print(f"Next dose: {dose}")
    print(f"Doses remaining in pen: {summary['doses_remaining_in_pen']}")
    print(
        f"Streak: {summary['current_streak']} (best {summary['best_streak']})"
    )
    print(f"Perfect days this week: {summary['perfect_days_this_week']}/7")


def _print_streaks(habits: dict[str, HabitDay], now: datetime) -> int:
    result = calculate_streaks(habits, now)
    perfect = sum(1 for habit in habits.values() if is_perfect_day(habit))
    print(f"Perfect days: {perfect}")
    print(f"Current streak: {result.current_streak}")
    print(f"Best streak: {result.best_streak}")
    return 0
