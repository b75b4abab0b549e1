from __future__ import annotations

import json
from pathlib import Path

import pytest

from needled.config import (
    TrackerConfig,
    load_config,
    reset_current_dose,
    resolve_doses_per_pen,
    save_config,
    validate_config,
)
from needled.model import DosingMode


def test_missing_file_returns_defaults(tmp_path: Path) -> None:
    config = load_config(tmp_path / "config.json")
    assert config == TrackerConfig()
    assert config.dose_cycle().doses_per_pen == 4


def test_load_merges_over_defaults(tmp_path: Path) -> None:
    p = tmp_path / "config.json"
    p.write_text(
        json.dumps(
            {
                "injection_day": "2",
                "tracks_bonus_dose": True,
                "timezone": "America/Argentina/Buenos_Aires",
                "unknown": "ignored",
            }
        ),
        encoding="utf-8",
    )
    config = load_config(p)
    assert config.injection_day == 2
    assert config.tracks_bonus_dose is True
    assert config.doses_per_pen == 4
    assert config.local_tz() is not None


def test_microdose_resolves_doses_from_strength(tmp_path: Path) -> None:
    p = tmp_path / "config.json"
    p.write_text(
        json.dumps(
            {
                "dosing_mode": "microdose",
                "pen_strength_mg": 10,
                "dose_amount_mg": 2.5,
            }
        ),
        encoding="utf-8",
    )
    config = load_config(p)
    assert config.dosing_mode is DosingMode.MICRODOSE
    assert config.dose_cycle().doses_per_pen == 4


def test_resolve_doses_per_pen_standard_ignores_strength() -> None:
    assert resolve_doses_per_pen(DosingMode.STANDARD, 10, 2.5, 6) == 6
    assert resolve_doses_per_pen(DosingMode.MICRODOSE, None, 2.5, 6) == 6


def test_dose_cycle_carries_bonus_flags() -> None:
    cycle = TrackerConfig(tracks_bonus_dose=True).dose_cycle(was_bonus_dose=True)
    assert cycle.tracks_bonus_dose is True
    assert cycle.was_bonus_dose is True


def test_invalid_json_raises(tmp_path: Path) -> None:
    p = tmp_path / "config.json"
    p.write_text("not json", encoding="utf-8")
    with pytest.raises(ValueError, match="Invalid config JSON"):
        load_config(p)


def test_non_object_json_raises(tmp_path: Path) -> None:
    p = tmp_path / "config.json"
    p.write_text("[1, 2]", encoding="utf-8")
    with pytest.raises(ValueError, match="JSON object"):
        load_config(p)


@pytest.mark.parametrize(
    ("changes", "message"),
    [
        ({"injection_day": 7}, "injection_day"),
        ({"doses_per_pen": 0}, "doses_per_pen"),
        ({"current_dose_in_pen": 0}, "current_dose_in_pen"),
        ({"pen_strength_mg": 200.0}, "pen_strength_mg"),
        ({"dose_amount_mg": 0.0}, "dose_amount_mg"),
        ({"dosing_mode": DosingMode.MICRODOSE}, "Microdose"),
        ({"timezone": "Nowhere/Atlantis"}, "Unknown timezone"),
    ],
)
def test_validate_config_rejects(changes: dict[str, object], message: str) -> None:
    config = TrackerConfig(**changes)  # type: ignore[arg-type]
    with pytest.raises(ValueError, match=message):
        validate_config(config)


def test_unknown_dosing_mode_raises(tmp_path: Path) -> None:
    p = tmp_path / "config.json"
    p.write_text(json.dumps({"dosing_mode": "weekly"}), encoding="utf-8")
    with pytest.raises(ValueError, match="dosing_mode"):
        load_config(p)


def test_bad_integer_raises(tmp_path: Path) -> None:
    p = tmp_path / "config.json"
    p.write_text(json.dumps({"injection_day": "wed"}), encoding="utf-8")
    with pytest.raises(ValueError, match="injection_day"):
        load_config(p)


def test_save_then_load(tmp_path: Path) -> None:
    config = TrackerConfig(
        injection_day=5,
        dosing_mode=DosingMode.MICRODOSE,
        pen_strength_mg=7.5,
        dose_amount_mg=1.25,
        export_dir="/data/out",
    )
    p = tmp_path / "nested" / "config.json"
    save_config(config, p)
    assert load_config(p) == config


@pytest.mark.parametrize("value", [4.7, "4.7"])
def test_fractional_integer_raises(tmp_path: Path, value: object) -> None:
    p = tmp_path / "config.json"
    p.write_text(json.dumps({"doses_per_pen": value}), encoding="utf-8")
    with pytest.raises(ValueError, match="doses_per_pen must be an integer"):
        load_config(p)


def test_whole_float_is_accepted(tmp_path: Path) -> None:
    p = tmp_path / "config.json"
    p.write_text(json.dumps({"doses_per_pen": 4.0}), encoding="utf-8")
    assert load_config(p).doses_per_pen == 4


def test_load_current_dose_in_pen(tmp_path: Path) -> None:
    p = tmp_path / "config.json"
    p.write_text(json.dumps({"current_dose_in_pen": 3}), encoding="utf-8")
    assert load_config(p).current_dose_in_pen == 3


@pytest.mark.parametrize(
    ("config", "expected"),
    [
        (TrackerConfig(current_dose_in_pen=4), 4),
        (TrackerConfig(current_dose_in_pen=5), 1),
        (TrackerConfig(current_dose_in_pen=5, tracks_bonus_dose=True), 5),
        (TrackerConfig(current_dose_in_pen=6, tracks_bonus_dose=True), 1),
        (TrackerConfig(current_dose_in_pen=3, doses_per_pen=2), 1),
    ],
)
def test_reset_current_dose(config: TrackerConfig, expected: int) -> None:
    assert reset_current_dose(config).current_dose_in_pen == expected


def test_load_resets_current_dose_past_pen_end(tmp_path: Path) -> None:
    p = tmp_path / "config.json"
    p.write_text(
        json.dumps({"doses_per_pen": 4, "current_dose_in_pen": 7}), encoding="utf-8"
    )
    assert load_config(p).current_dose_in_pen == 1


def test_save_writes_reset_current_dose(tmp_path: Path) -> None:
    p = tmp_path / "config.json"
    save_config(TrackerConfig(doses_per_pen=2, current_dose_in_pen=3), p)
    assert json.loads(p.read_text(encoding="utf-8"))["current_dose_in_pen"] == 1
