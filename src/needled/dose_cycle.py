"""Ciclo de dosis dentro de una pluma multidosis, con dosis extra opcional.

Numeracion: ``1..doses_per_pen`` son dosis estandar y ``doses_per_pen + 1``
es la dosis extra ("golden dose") que queda en la pluma cuando se usa entera.
Todas las funciones son puras y asumen ``doses_per_pen >= 1``.
"""

from __future__ import annotations

from decimal import ROUND_FLOOR, Decimal

from needled.model import DoseCycleConfig, PenPosition


def next_dose_number(last_dose_number: int | None, config: DoseCycleConfig) -> int:
    """Return the dose number for the next injection.

    Args:
        last_dose_number: Dose number of the most recent injection, or None if
            there is no history.
        config: Pen configuration.

    Returns:
        Next dose number; ``doses_per_pen + 1`` means the bonus dose.
    """
    if last_dose_number is None:
        return 1
    if config.was_bonus_dose:
        # La dosis extra siempre cierra la pluma.
        return 1
    if last_dose_number >= config.doses_per_pen:
        if config.tracks_bonus_dose and last_dose_number == config.doses_per_pen:
            return config.bonus_dose_number
        return 1
    return last_dose_number + 1


def standard_doses_remaining(next_dose: int, doses_per_pen: int) -> int:
    """Standard doses left counting ``next_dose`` itself; bonus excluded."""
    if next_dose > doses_per_pen:
        return 0
    return max(0, doses_per_pen - next_dose + 1)


def doses_remaining_in_pen(current_dose: int | None, config: DoseCycleConfig) -> int:
    """Total doses left after ``current_dose`` (the last one taken).

    None means a full, untouched pen. The bonus dose counts when tracked.
    """
    bonus = 1 if config.tracks_bonus_dose else 0
    if current_dose is None:
        return config.doses_per_pen + bonus
    if current_dose > config.doses_per_pen:
        return 0
    return max(0, config.doses_per_pen - current_dose) + bonus


def is_bonus_available(current_dose: int | None, config: DoseCycleConfig) -> bool:
    """True right after the last standard dose when the bonus is tracked."""
    return config.tracks_bonus_dose and current_dose == config.doses_per_pen


def is_on_bonus_dose(current_dose: int | None, config: DoseCycleConfig) -> bool:
    return config.tracks_bonus_dose and current_dose == config.bonus_dose_number


def doses_per_pen_from_strength(
    pen_strength_mg: float, dose_amount_mg: float
) -> int:
    """Doses that fit in a custom pen: ``floor(strength / dose)``, at least 1.

    Decimal arithmetic avoids float artifacts (0.3 / 0.1 is 3 doses, not 2).
    Non-positive dose amounts return the clamp instead of raising.
    """
    if dose_amount_mg <= 0:
        return 1
    ratio = Decimal(str(pen_strength_mg)) / Decimal(str(dose_amount_mg))
    return max(1, int(ratio.to_integral_value(rounding=ROUND_FLOOR)))


def pen_position(
    last_dose_number: int | None,
    config: DoseCycleConfig,
    start_dose: int = 1,
) -> PenPosition:
    """Bundle the pen counters for a "doses remaining" card.

    Args:
        last_dose_number: Dose number of the most recent injection, or None.
        config: Pen configuration.
        start_dose: Position in the pen for a user with no history yet
            (someone who started tracking mid-pen).

    Returns:
        Next dose and remaining counters.
    """
    if last_dose_number is None:
        next_dose = start_dose
        # Las dosis anteriores a la inicial se gastaron antes del registro.
        current = start_dose - 1 if start_dose > 1 else None
        on_bonus = is_on_bonus_dose(start_dose, config)
    else:
        next_dose = next_dose_number(last_dose_number, config)
        # Si la siguiente es la 1, la pluma en curso esta intacta.
        current = None if next_dose == 1 else last_dose_number
        on_bonus = is_on_bonus_dose(current, config)
    return PenPosition(
        next_dose=next_dose,
        standard_remaining=standard_doses_remaining(next_dose, config.doses_per_pen),
        total_remaining=doses_remaining_in_pen(current, config),
        bonus_available=is_bonus_available(current, config),
        on_bonus_dose=on_bonus,
    )
