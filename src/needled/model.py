"""Modelos tipados para dosis, semana de inyección, sitios y hábitos diarios."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum


class InjectionSite(str, Enum):
    """Body sites in rotation order."""

    ABDOMEN_LEFT = "ABDOMEN_LEFT"
    ABDOMEN_RIGHT = "ABDOMEN_RIGHT"
    THIGH_LEFT = "THIGH_LEFT"
    THIGH_RIGHT = "THIGH_RIGHT"
    UPPER_ARM_LEFT = "UPPER_ARM_LEFT"
    UPPER_ARM_RIGHT = "UPPER_ARM_RIGHT"


class InjectionStatus(str, Enum):
    """Where the user stands in the current injection week."""

    DONE = "done"
    DUE = "due"
    UPCOMING = "upcoming"
    OVERDUE = "overdue"


class DosingMode(str, Enum):
    """Standard pens vs. custom (microdose) pens."""

    STANDARD = "STANDARD"
    MICRODOSE = "MICRODOSE"


@dataclass(frozen=True)
class DoseCycleConfig:
    """Pen configuration for the dose cycle.

    ``doses_per_pen`` must be >= 1; the calculators do not check it.
    ``was_bonus_dose`` tells whether the immediately preceding dose was the
    bonus (golden) dose.
    """

    doses_per_pen: int
    tracks_bonus_dose: bool = False
    was_bonus_dose: bool = False

    @property
    def bonus_dose_number(self) -> int:
        return self.doses_per_pen + 1


@dataclass(frozen=True)
class PenPosition:
    """Snapshot of the pen after the last logged dose."""

    next_dose: int
    standard_remaining: int
    total_remaining: int
    bonus_available: bool
    on_bonus_dose: bool


@dataclass(frozen=True)
class ScheduleWindow:
    """One 7-day injection week (start 00:00, end 23:59:59.999)."""

    start: datetime
    end: datetime

    def contains(self, moment: datetime) -> bool:
        return self.start <= moment <= self.end


@dataclass(frozen=True)
class ScheduleStatus:
    """Status of the current injection week as shown to the user."""

    status: InjectionStatus
    days_until: int
    days_overdue: int
    window: ScheduleWindow


@dataclass(frozen=True)
class HabitDay:
    """Daily habits: water, nutrition and exercise."""

    water: bool = False
    nutrition: bool = False
    exercise: bool = False

    @property
    def is_perfect(self) -> bool:
        return self.water and self.nutrition and self.exercise


@dataclass(frozen=True)
class StreakResult:
    """Streaks found in a set of habit days."""

    current_streak: int = 0
    best_streak: int = 0
    streak_day_numbers: dict[str, int] = field(default_factory=dict)


@dataclass(frozen=True)
class InjectionRecord:
    """One logged injection (timestamped)."""

    timestamp: datetime
    site: InjectionSite | None = None
    dose_number: int | None = None
    was_bonus_dose: bool = False
