"""Lectura del registro de inyecciones (injections.csv)."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, tzinfo
from typing import Any

import structlog
from dateutil import parser as date_parser
from dateutil import tz

from needled.model import InjectionRecord
from needled.sites import parse_site
from needled.sources.base import DataSource, SourcePaths, parse_flag

logger = structlog.get_logger(__name__)


@dataclass(frozen=True)
class InjectionLogPaths(SourcePaths):
    """Paths for the injection log."""

    # root: folder containing injections.csv


class InjectionLogSource(DataSource):
    """Injection log reader: date, site, dose_number, bonus."""

    filename = "injections.csv"

    def __init__(self, paths: SourcePaths, local_tz: tzinfo | None = None) -> None:
        super().__init__(paths)
        self._local_tz = local_tz or tz.UTC

    def required_columns(self) -> list[str]:
        return ["date"]

    def load_records(self) -> list[InjectionRecord]:
        """Parse the CSV into records sorted by timestamp.

        Returns:
            List of injection records.

        Raises:
            ValueError: If the date column is missing or a value is malformed.
        """
        df = self.read_frame()
        self.check_columns(df)
        out = [
            _row_to_record(row, self._local_tz)
            for row in df.to_dict(orient="records")
            if str(row.get("date", "")).strip()
        ]
        out.sort(key=lambda r: r.timestamp)
        unknown = sum(1 for r in out if r.site is None)
        logger.info(
            "injections_loaded",
            path=str(self.csv_path),
            count=len(out),
            unknown_sites=unknown,
        )
        return out


def _row_to_record(row: dict[str, Any], local_tz: tzinfo) -> InjectionRecord:
    return InjectionRecord(
        timestamp=_parse_timestamp(row["date"], local_tz),
        site=parse_site(row.get("site")),
        dose_number=_parse_dose_number(row.get("dose_number")),
        was_bonus_dose=parse_flag(row.get("bonus")),
    )


def _parse_timestamp(raw: Any, local_tz: tzinfo) -> datetime:
    """Parse ISO date/datetime; naive values are local time."""
    try:
        ts = date_parser.isoparse(str(raw).strip())
    except ValueError as exc:
        raise ValueError(f"Invalid injection date: {raw!r}") from exc
    if ts.tzinfo is None:
        return ts.replace(tzinfo=local_tz)
    return ts.astimezone(local_tz)


def _parse_dose_number(raw: Any) -> int | None:
    if raw is None:
        return None
    text = str(raw).strip()
    if not text:
        return None
    try:
        value = int(float(text))
    except ValueError as exc:
        raise ValueError(f"Invalid dose_number: {raw!r}") from exc
    return value if value >= 1 else None
