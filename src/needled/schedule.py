"""Semana de inyección anclada a un día configurable (0 = lunes, 6 = domingo).

La semana de inyección no coincide con la semana calendario: empieza a las
00:00 del día de inyección más reciente y termina seis días después a las
23:59:59.999. "Ahora" siempre lo pasa quien llama.
"""

from __future__ import annotations

from collections.abc import Iterable
from datetime import date, datetime, time

from dateutil.relativedelta import FR, MO, SA, SU, TH, TU, WE, relativedelta

from needled.model import InjectionStatus, ScheduleStatus, ScheduleWindow

_WEEKDAYS = (MO, TU, WE, TH, FR, SA, SU)


def day_of_week(moment: date) -> int:
    """Weekday with 0 = Monday, 6 = Sunday.

    Every weekday comparison in the engine goes through here.
    """
    return moment.weekday()


def weekday_from_sunday_index(sunday_index: int) -> int:
    """Convert a 0 = Sunday weekday index (JS, cron, ``%w``) to 0 = Monday."""
    return (sunday_index + 6) % 7


def _as_datetime(moment: date) -> datetime:
    if isinstance(moment, datetime):
        return moment
    return datetime.combine(moment, time())


def _days_since(moment: date, injection_day: int) -> int:
    return (day_of_week(moment) - injection_day + 7) % 7


def week_start(moment: date, injection_day: int) -> datetime:
    """Most recent (inclusive) injection day at local midnight.

    Args:
        moment: Reference date or datetime; tzinfo is preserved.
        injection_day: Anchor weekday (0 = Monday).

    Returns:
        Start of the injection week containing ``moment``.
    """
    return _as_datetime(moment) + relativedelta(
        weekday=_WEEKDAYS[injection_day](-1),
        hour=0,
        minute=0,
        second=0,
        microsecond=0,
    )


def week_end(moment: date, injection_day: int) -> datetime:
    """Six days after :func:`week_start`, at 23:59:59.999."""
    return week_start(moment, injection_day) + relativedelta(
        days=6,
        hour=23,
        minute=59,
        second=59,
        microsecond=999000,
    )


def schedule_window(moment: date, injection_day: int) -> ScheduleWindow:
    return ScheduleWindow(
        start=week_start(moment, injection_day),
        end=week_end(moment, injection_day),
    )


def is_schedule_day(moment: date, injection_day: int) -> bool:
    return day_of_week(moment) == injection_day


def days_until(moment: date, injection_day: int) -> int:
    """Days to the next injection day (0..6, 0 on the day itself)."""
    return (injection_day - day_of_week(moment) + 7) % 7


def days_overdue(moment: date, injection_day: int) -> int:
    """Days since the most recent injection day (0..6, 0 on the day itself)."""
    return _days_since(moment, injection_day)


def derive_status(
    *,
    has_window_record: bool,
    is_schedule_day: bool,
    has_prior_record: bool,
    days_until: int,
    days_overdue: int,
) -> InjectionStatus:
    """Classify the week: done > due > upcoming > overdue.

    A user with no history is never overdue, and a tie between distance to
    the next injection day and distance since the last one is upcoming.
    """
    if has_window_record:
        return InjectionStatus.DONE
    if is_schedule_day:
        return InjectionStatus.DUE
    if not has_prior_record or days_until <= days_overdue:
        return InjectionStatus.UPCOMING
    return InjectionStatus.OVERDUE


def injection_status(
    now: datetime,
    injection_day: int,
    injection_times: Iterable[datetime],
) -> ScheduleStatus:
    """Status of the current injection week given the logged injection times.

    ``days_until`` is only reported when upcoming and ``days_overdue`` only
    when overdue; both are 0 otherwise.
    """
    window = schedule_window(now, injection_day)
    times = list(injection_times)
    status = derive_status(
        has_window_record=any(window.contains(t) for t in times),
        is_schedule_day=is_schedule_day(now, injection_day),
        has_prior_record=bool(times),
        days_until=days_until(now, injection_day),
        days_overdue=days_overdue(now, injection_day),
    )
    return ScheduleStatus(
        status=status,
        days_until=(
            days_until(now, injection_day)
            if status is InjectionStatus.UPCOMING
            else 0
        ),
        days_overdue=(
            days_overdue(now, injection_day)
            if status is InjectionStatus.OVERDUE
            else 0
        ),
        window=window,
    )
