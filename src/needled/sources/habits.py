"""Lectura de hábitos diarios (habits.csv)."""

from __future__ import annotations

from dataclasses import dataclass

import structlog
from dateutil import parser as date_parser

from needled.model import HabitDay
from needled.sources.base import DataSource, SourcePaths, parse_flag

logger = structlog.get_logger(__name__)

HABIT_COLUMNS = ["water", "nutrition", "exercise"]


@dataclass(frozen=True)
class HabitLogPaths(SourcePaths):
    """Paths for the habit log."""

    # root: folder containing habits.csv


class HabitLogSource(DataSource):
    """Daily habits reader: date, water, nutrition, exercise."""

    filename = "habits.csv"

    def required_columns(self) -> list[str]:
        return ["date", *HABIT_COLUMNS]

    def load_habits(self) -> dict[str, HabitDay]:
        """Parse the CSV into a ``YYYY-MM-DD -> HabitDay`` map.

        Duplicate dates keep the last row.

        Raises:
            ValueError: If columns are missing or a date/flag is malformed.
        """
        df = self.read_frame()
        self.check_columns(df)
        out: dict[str, HabitDay] = {}
        for row in df.to_dict(orient="records"):
            raw_date = str(row["date"]).strip()
            if not raw_date:
                continue
            out[_normalize_date(raw_date)] = HabitDay(
                water=parse_flag(row["water"]),
                nutrition=parse_flag(row["nutrition"]),
                exercise=parse_flag(row["exercise"]),
            )
        logger.info("habits_loaded", path=str(self.csv_path), days=len(out))
        return out


def _normalize_date(raw: str) -> str:
    """ISO date, optionally with a time part; the time is dropped."""
    try:
        return date_parser.isoparse(raw).date().isoformat()
    except ValueError as exc:
        raise ValueError(f"Invalid habit date: {raw!r}") from exc
