"""Resumen de adherencia: tablas de inyecciones y hábitos + estado actual."""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from dataclasses import replace
from datetime import date, datetime
from typing import Any

import pandas as pd

from needled.config import TrackerConfig
from needled.dose_cycle import next_dose_number, pen_position
from needled.model import HabitDay, InjectionRecord
from needled.schedule import day_of_week, injection_status, is_schedule_day
from needled.sites import next_site, site_label
from needled.streaks import calculate_streaks, is_perfect_day
from needled.trends import date_string, week_dates

INJECTION_COLUMNS = [
    "date",
    "datetime",
    "weekday",
    "site",
    "site_label",
    "dose_number",
    "bonus",
    "on_schedule",
]

HABIT_FRAME_COLUMNS = [
    "date",
    "weekday",
    "water",
    "nutrition",
    "exercise",
    "perfect",
    "streak_day",
]


def assign_dose_numbers(
    records: Sequence[InjectionRecord], config: TrackerConfig
) -> list[InjectionRecord]:
    """Fill missing dose numbers by replaying the pen cycle.

    Records must be sorted by timestamp. Logged numbers are kept as-is and
    the cycle continues from them. The first injection without a number
    takes ``config.current_dose_in_pen``.
    """
    out: list[InjectionRecord] = []
    last: InjectionRecord | None = None
    for record in records:
        if record.dose_number is None:
            cycle = config.dose_cycle(
                was_bonus_dose=last.was_bonus_dose if last else False
            )
            if last is None:
                number = config.current_dose_in_pen
            else:
                number = next_dose_number(last.dose_number, cycle)
            is_bonus = cycle.tracks_bonus_dose and number == cycle.bonus_dose_number
            record = replace(
                record,
                dose_number=number,
                was_bonus_dose=record.was_bonus_dose or is_bonus,
            )
        out.append(record)
        last = record
    return out


def injections_to_frame(
    records: Sequence[InjectionRecord], injection_day: int
) -> pd.DataFrame:
    """Convert injection records to a DataFrame, one row per injection."""
    rows = [
        {
            "date": r.timestamp.date(),
            "datetime": r.timestamp,
            "weekday": day_of_week(r.timestamp),
            "site": r.site.value if r.site else pd.NA,
            "site_label": site_label(r.site) if r.site else pd.NA,
            "dose_number": r.dose_number if r.dose_number is not None else pd.NA,
            "bonus": r.was_bonus_dose,
            "on_schedule": is_schedule_day(r.timestamp, injection_day),
        }
        for r in records
    ]
    if not rows:
        return pd.DataFrame(columns=INJECTION_COLUMNS)
    df = pd.DataFrame(rows, columns=INJECTION_COLUMNS)
    df["dose_number"] = df["dose_number"].astype("Int64")
    return df.sort_values("datetime").reset_index(drop=True)


def habits_to_frame(habits: Mapping[str, HabitDay], today: date) -> pd.DataFrame:
    """One row per recorded day with perfect flag and day-in-streak number."""
    if not habits:
        return pd.DataFrame(columns=HABIT_FRAME_COLUMNS)
    streaks = calculate_streaks(habits, today)
    rows: list[dict[str, object]] = []
    for key in sorted(habits):
        habit = habits[key]
        day = date.fromisoformat(key)
        rows.append(
            {
                "date": day,
                "weekday": day_of_week(day),
                "water": habit.water,
                "nutrition": habit.nutrition,
                "exercise": habit.exercise,
                "perfect": is_perfect_day(habit),
                "streak_day": streaks.streak_day_numbers.get(key, pd.NA),
            }
        )
    df = pd.DataFrame(rows, columns=HABIT_FRAME_COLUMNS)
    df["streak_day"] = df["streak_day"].astype("Int64")
    return df


def adherence_summary(
    records: Sequence[InjectionRecord],
    habits: Mapping[str, HabitDay],
    config: TrackerConfig,
    now: datetime,
) -> dict[str, Any]:
    """Current status of injections, pen and habits.

    Args:
        records: Injection records sorted by timestamp (dose numbers filled).
        habits: Habit map keyed by ``YYYY-MM-DD``.
        config: User configuration.
        now: Reference time supplied by the caller.

    Returns:
        Flat dict ready to print or export.
    """
    status = injection_status(
        now, config.injection_day, [r.timestamp for r in records]
    )
    last = records[-1] if records else None
    cycle = config.dose_cycle(was_bonus_dose=last.was_bonus_dose if last else False)
    pen = pen_position(
        last.dose_number if last else None,
        cycle,
        start_dose=config.current_dose_in_pen,
    )
    suggested = next_site(last.site if last else None)
    streaks = calculate_streaks(habits, now)
    perfect_this_week = sum(
        1 for day in week_dates(now) if is_perfect_day(habits.get(date_string(day)))
    )
    return {
        "status": status.status.value,
        "days_until": status.days_until,
        "days_overdue": status.days_overdue,
        "week_start": status.window.start,
        "week_end": status.window.end,
        "last_injection": last.timestamp if last else None,
        "suggested_site": suggested.value,
        "suggested_site_label": site_label(suggested),
        "doses_per_pen": cycle.doses_per_pen,
        "next_dose": pen.next_dose,
        "next_is_bonus": (
            cycle.tracks_bonus_dose and pen.next_dose == cycle.bonus_dose_number
        ),
        "standard_doses_remaining": pen.standard_remaining,
        "doses_remaining_in_pen": pen.total_remaining,
        "bonus_available": pen.bonus_available,
        "current_streak": streaks.current_streak,
        "best_streak": streaks.best_streak,
        "perfect_days_this_week": perfect_this_week,
    }


def summary_to_frame(summary: Mapping[str, Any]) -> pd.DataFrame:
    """Two-column (metric, value) frame for the summary sheet."""
    return pd.DataFrame(
        {"metric": list(summary.keys()), "value": list(summary.values())}
    )
