"""Rachas de días perfectos (agua + nutrición + ejercicio)."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from datetime import date, datetime, timedelta

from needled.model import HabitDay, StreakResult

MIN_STREAK_LENGTH = 2


@dataclass(frozen=True)
class _Run:
    start: int
    length: int


def is_perfect_day(habit: HabitDay | None) -> bool:
    """All three habits done; a missing record is not perfect."""
    if habit is None:
        return False
    return habit.is_perfect


def calculate_streaks(
    habits: Mapping[str, HabitDay | None],
    today: date,
) -> StreakResult:
    """Find streaks of consecutive perfect days.

    Args:
        habits: Sparse map of ``YYYY-MM-DD`` strings to habit records.
        today: Reference day for the active streak (date or datetime).

    Returns:
        Current streak (active if it ends today or yesterday), best streak and
        the 1-based day number of every date inside a streak of 2+ days.
    """
    dates = sorted(habits)
    if not dates:
        return StreakResult()

    runs: list[_Run] = []
    run_start = -1
    run_length = 0

    def close_run() -> None:
        if run_length >= MIN_STREAK_LENGTH:
            runs.append(_Run(start=run_start, length=run_length))

    for i, day in enumerate(dates):
        if not is_perfect_day(habits[day]):
            close_run()
            run_start, run_length = -1, 0
            continue
        if run_start != -1 and _is_consecutive(dates[i - 1], day):
            run_length += 1
            continue
        # Un hueco en el registro corta la racha igual que un día fallado.
        close_run()
        run_start, run_length = i, 1
    close_run()

    day_numbers: dict[str, int] = {}
    for run in runs:
        for offset in range(run.length):
            day_numbers[dates[run.start + offset]] = offset + 1

    best = max((run.length for run in runs), default=0)
    current = 0
    if runs:
        last = runs[-1]
        last_day = dates[last.start + last.length - 1]
        ref = _as_date(today)
        if last_day in (ref.isoformat(), (ref - timedelta(days=1)).isoformat()):
            current = last.length

    return StreakResult(
        current_streak=current,
        best_streak=best,
        streak_day_numbers=day_numbers,
    )


def _as_date(value: date) -> date:
    # datetime es subclase de date
    return value.date() if isinstance(value, datetime) else value


def _is_consecutive(previous: str, current: str) -> bool:
    try:
        prev_day = date.fromisoformat(previous)
        cur_day = date.fromisoformat(current)
    except ValueError:
        return False
    return cur_day - prev_day == timedelta(days=1)
