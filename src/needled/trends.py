"""Tendencias de peso y fechas de la semana para la grilla de hábitos.

El resumen usa ``week_dates``; las funciones de peso son API para quien
registre pesajes por su cuenta.
"""

from __future__ import annotations

from datetime import date, datetime, timedelta
from typing import Literal

from needled.schedule import day_of_week

KG_TO_LBS = 2.20462

WeightUnit = Literal["kg", "lbs"]


def kg_to_lbs(kg: float) -> float:
    return kg * KG_TO_LBS


def lbs_to_kg(lbs: float) -> float:
    return lbs / KG_TO_LBS


def format_weight(weight: float, unit: WeightUnit) -> str:
    """Format a weight with one decimal, e.g. ``82.4 kg``."""
    return f"{weight:.1f} {unit}"


def week_change(current: float, previous: float | None) -> float | None:
    """Week-over-week change rounded to 1 decimal; None without a previous."""
    if previous is None:
        return None
    return round(current - previous, 1)


def total_change(current: float, start_weight: float) -> float:
    return round(current - start_weight, 1)


def goal_progress(current: float, start: float, goal: float | None) -> float | None:
    """Percent of the target loss achieved (can exceed 100).

    Returns None when there is no goal or the goal is not below the start.
    """
    if goal is None:
        return None
    target_loss = start - goal
    if target_loss <= 0:
        return None
    return round((start - current) / target_loss * 100, 1)


def week_dates(moment: date) -> list[date]:
    """Monday..Sunday dates of the calendar week containing ``moment``."""
    day = moment.date() if isinstance(moment, datetime) else moment
    monday = day - timedelta(days=day_of_week(day))
    return [monday + timedelta(days=i) for i in range(7)]


def date_string(moment: date) -> str:
    return moment.strftime("%Y-%m-%d")
