from __future__ import annotations

from datetime import date, datetime

import pytest

from needled.trends import (
    date_string,
    format_weight,
    goal_progress,
    kg_to_lbs,
    lbs_to_kg,
    total_change,
    week_change,
    week_dates,
)


def test_kg_lbs_conversion() -> None:
    assert kg_to_lbs(100) == pytest.approx(220.462)
    assert lbs_to_kg(kg_to_lbs(82.5)) == pytest.approx(82.5)


def test_format_weight_one_decimal() -> None:
    assert format_weight(82.44, "kg") == "82.4 kg"
    assert format_weight(180, "lbs") == "180.0 lbs"


def test_week_change() -> None:
    assert week_change(80.0, None) is None
    assert week_change(80.0, 81.3) == -1.3


def test_total_change() -> None:
    assert total_change(75.5, 90.0) == -14.5


def test_goal_progress() -> None:
    assert goal_progress(85.0, 95.0, 75.0) == 50.0
    assert goal_progress(70.0, 95.0, 75.0) == 125.0
    assert goal_progress(85.0, 95.0, None) is None
    assert goal_progress(85.0, 95.0, 100.0) is None


def test_week_dates_monday_to_sunday() -> None:
    days = week_dates(date(2026, 10, 21))
    assert days[0] == date(2026, 10, 19)
    assert days[-1] == date(2026, 10, 25)
    assert len(days) == 7
    assert week_dates(datetime(2026, 10, 25, 22, 0)) == days


def test_date_string() -> None:
    assert date_string(date(2026, 1, 5)) == "2026-01-05"
