from __future__ import annotations

import pytest

from needled.dose_cycle import (
    doses_per_pen_from_strength,
    doses_remaining_in_pen,
    is_bonus_available,
    is_on_bonus_dose,
    next_dose_number,
    pen_position,
    standard_doses_remaining,
)
from needled.model import DoseCycleConfig

PEN = DoseCycleConfig(doses_per_pen=4)
PEN_WITH_BONUS = DoseCycleConfig(doses_per_pen=4, tracks_bonus_dose=True)


def test_first_dose_without_history() -> None:
    assert next_dose_number(None, PEN) == 1
    assert next_dose_number(None, PEN_WITH_BONUS) == 1


def test_cycle_without_bonus_wraps_to_new_pen() -> None:
    seq = []
    last = None
    for _ in range(6):
        last = next_dose_number(last, PEN)
        seq.append(last)
    assert seq == [1, 2, 3, 4, 1, 2]


def test_cycle_with_bonus_enters_bonus_then_new_pen() -> None:
    assert next_dose_number(3, PEN_WITH_BONUS) == 4
    assert next_dose_number(4, PEN_WITH_BONUS) == 5
    after_bonus = DoseCycleConfig(
        doses_per_pen=4, tracks_bonus_dose=True, was_bonus_dose=True
    )
    assert next_dose_number(5, after_bonus) == 1


def test_was_bonus_dose_always_starts_new_pen() -> None:
    cfg = DoseCycleConfig(doses_per_pen=4, was_bonus_dose=True)
    assert next_dose_number(2, cfg) == 1


def test_above_pen_size_without_bonus_flag_starts_new_pen() -> None:
    assert next_dose_number(5, PEN_WITH_BONUS) == 1
    assert next_dose_number(9, PEN) == 1


def test_single_dose_pen() -> None:
    cfg = DoseCycleConfig(doses_per_pen=1, tracks_bonus_dose=True)
    assert next_dose_number(None, cfg) == 1
    assert next_dose_number(1, cfg) == 2


@pytest.mark.parametrize(
    ("next_dose", "expected"),
    [(1, 4), (3, 2), (4, 1), (5, 0), (9, 0)],
)
def test_standard_doses_remaining(next_dose: int, expected: int) -> None:
    assert standard_doses_remaining(next_dose, 4) == expected


def test_doses_remaining_in_pen_counts_bonus_when_tracked() -> None:
    assert doses_remaining_in_pen(None, PEN) == 4
    assert doses_remaining_in_pen(None, PEN_WITH_BONUS) == 5
    assert doses_remaining_in_pen(2, PEN) == 2
    assert doses_remaining_in_pen(4, PEN) == 0
    assert doses_remaining_in_pen(4, PEN_WITH_BONUS) == 1
    assert doses_remaining_in_pen(5, PEN_WITH_BONUS) == 0


def test_bonus_flags() -> None:
    assert is_bonus_available(4, PEN_WITH_BONUS) is True
    assert is_bonus_available(3, PEN_WITH_BONUS) is False
    assert is_bonus_available(4, PEN) is False
    assert is_bonus_available(None, PEN_WITH_BONUS) is False
    assert is_on_bonus_dose(5, PEN_WITH_BONUS) is True
    assert is_on_bonus_dose(5, PEN) is False
    assert is_on_bonus_dose(4, PEN_WITH_BONUS) is False


@pytest.mark.parametrize(
    ("strength", "dose", "expected"),
    [
        (8, 2, 4),
        (8, 0, 1),
        (8, -1, 1),
        (10, 2.5, 4),
        (7.5, 2, 3),
        (0.3, 0.1, 3),
        (1, 2, 1),
    ],
)
def test_doses_per_pen_from_strength(
    strength: float, dose: float, expected: int
) -> None:
    assert doses_per_pen_from_strength(strength, dose) == expected


def test_pen_position_before_bonus() -> None:
    pos = pen_position(4, PEN_WITH_BONUS)
    assert pos.next_dose == 5
    assert pos.standard_remaining == 0
    assert pos.total_remaining == 1
    assert pos.bonus_available is True
    assert pos.on_bonus_dose is False


def test_pen_position_after_bonus_is_fresh_pen() -> None:
    cfg = DoseCycleConfig(doses_per_pen=4, tracks_bonus_dose=True, was_bonus_dose=True)
    pos = pen_position(5, cfg)
    assert pos.next_dose == 1
    assert pos.standard_remaining == 4
    assert pos.total_remaining == 5
    assert pos.bonus_available is False


def test_same_inputs_same_outputs() -> None:
    assert pen_position(2, PEN) == pen_position(2, PEN)
    assert next_dose_number(4, PEN_WITH_BONUS) == next_dose_number(4, PEN_WITH_BONUS)


def test_pen_position_after_last_standard_dose_is_fresh_pen() -> None:
    pos = pen_position(4, PEN)
    assert pos.next_dose == 1
    assert pos.standard_remaining == 4
    assert pos.total_remaining == 4
    assert pos.bonus_available is False
    assert pos.on_bonus_dose is False


def test_pen_position_mid_pen() -> None:
    pos = pen_position(2, PEN)
    assert pos.next_dose == 3
    assert pos.total_remaining == 2


def test_pen_position_new_user_starting_mid_pen() -> None:
    pos = pen_position(None, PEN, start_dose=3)
    assert pos.next_dose == 3
    assert pos.standard_remaining == 2
    assert pos.total_remaining == 2


def test_pen_position_new_user_starting_on_bonus() -> None:
    pos = pen_position(None, PEN_WITH_BONUS, start_dose=5)
    assert pos.next_dose == 5
    assert pos.standard_remaining == 0
    assert pos.total_remaining == 1
    assert pos.bonus_available is True
    assert pos.on_bonus_dose is True


def test_pen_position_new_user_default_start() -> None:
    pos = pen_position(None, PEN)
    assert pos.next_dose == 1
    assert pos.total_remaining == 4
