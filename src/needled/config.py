"""Configuracion del usuario: día de inyección, pluma y zona horaria."""

from __future__ import annotations

import json
from dataclasses import asdict, dataclass, replace
from datetime import tzinfo
from pathlib import Path
from typing import Any

import structlog
from dateutil import tz

from needled.dose_cycle import doses_per_pen_from_strength
from needled.model import DoseCycleConfig, DosingMode

logger = structlog.get_logger(__name__)

MIN_DOSES_PER_PEN = 1
MAX_DOSES_PER_PEN = 50
PEN_STRENGTH_RANGE_MG = (0.5, 100.0)
DOSE_AMOUNT_RANGE_MG = (0.1, 50.0)


@dataclass(frozen=True)
class TrackerConfig:
    """Configuracion persistida del usuario."""

    injection_day: int = 0
    dosing_mode: DosingMode = DosingMode.STANDARD
    doses_per_pen: int = 4
    tracks_bonus_dose: bool = False
    pen_strength_mg: float | None = None
    dose_amount_mg: float | None = None
    current_dose_in_pen: int = 1
    timezone: str = "UTC"
    export_dir: str = ""

    def dose_cycle(self, was_bonus_dose: bool = False) -> DoseCycleConfig:
        """Build the dose-cycle config, resolving custom pens."""
        return DoseCycleConfig(
            doses_per_pen=resolve_doses_per_pen(
                self.dosing_mode,
                self.pen_strength_mg,
                self.dose_amount_mg,
                self.doses_per_pen,
            ),
            tracks_bonus_dose=self.tracks_bonus_dose,
            was_bonus_dose=was_bonus_dose,
        )

    def local_tz(self) -> tzinfo:
        zone = tz.gettz(self.timezone)
        if zone is None:
            raise ValueError(f"Unknown timezone: {self.timezone}")
        return zone


def resolve_doses_per_pen(
    mode: DosingMode,
    pen_strength_mg: float | None,
    dose_amount_mg: float | None,
    doses_per_pen: int,
) -> int:
    """Microdose pens derive doses from strength; standard pens use the count."""
    if (
        mode is DosingMode.MICRODOSE
        and pen_strength_mg is not None
        and dose_amount_mg is not None
    ):
        return doses_per_pen_from_strength(pen_strength_mg, dose_amount_mg)
    return doses_per_pen


def validate_config(config: TrackerConfig) -> None:
    """Check ranges and required fields.

    Raises:
        ValueError: If any value is out of range or inconsistent.
    """
    if not 0 <= config.injection_day <= 6:
        raise ValueError(
            f"injection_day must be 0 (Monday) to 6 (Sunday), got {config.injection_day}"
        )
    if not MIN_DOSES_PER_PEN <= config.doses_per_pen <= MAX_DOSES_PER_PEN:
        raise ValueError(
            f"doses_per_pen must be between {MIN_DOSES_PER_PEN} and "
            f"{MAX_DOSES_PER_PEN}, got {config.doses_per_pen}"
        )
    _check_range("pen_strength_mg", config.pen_strength_mg, PEN_STRENGTH_RANGE_MG)
    _check_range("dose_amount_mg", config.dose_amount_mg, DOSE_AMOUNT_RANGE_MG)
    if config.current_dose_in_pen < 1:
        raise ValueError(
            f"current_dose_in_pen must be at least 1, got {config.current_dose_in_pen}"
        )
    if config.dosing_mode is DosingMode.MICRODOSE and (
        config.pen_strength_mg is None or config.dose_amount_mg is None
    ):
        raise ValueError("Microdose mode requires pen strength and dose amount")
    config.local_tz()


def reset_current_dose(config: TrackerConfig) -> TrackerConfig:
    """Start a new pen when ``current_dose_in_pen`` no longer fits the pen.

    The last valid position is ``doses_per_pen``, plus one when the bonus
    dose is tracked.
    """
    cycle = config.dose_cycle()
    max_dose = cycle.doses_per_pen + (1 if cycle.tracks_bonus_dose else 0)
    if config.current_dose_in_pen <= max_dose:
        return config
    logger.info(
        "current_dose_reset",
        current_dose_in_pen=config.current_dose_in_pen,
        max_dose=max_dose,
    )
    return replace(config, current_dose_in_pen=1)


def _check_range(name: str, value: float | None, bounds: tuple[float, float]) -> None:
    if value is None:
        return
    low, high = bounds
    if not low <= value <= high:
        raise ValueError(f"{name} must be between {low} and {high}, got {value}")


def load_config(path: Path) -> TrackerConfig:
    """Devuelve configuracion guardada o defaults.

    Args:
        path: JSON file; a missing file means defaults.

    Returns:
        Validated configuration.

    Raises:
        ValueError: If the file is not a JSON object or a value is invalid.
    """
    if not path.exists():
        logger.debug("config_defaults", path=str(path))
        return TrackerConfig()
    try:
        raw: Any = json.loads(path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as exc:
        raise ValueError(f"Invalid config JSON in {path}: {exc}") from exc
    if not isinstance(raw, dict):
        raise ValueError(f"Config in {path} must be a JSON object")

    config = _from_mapping(raw)
    validate_config(config)
    config = reset_current_dose(config)
    logger.debug("config_loaded", path=str(path), injection_day=config.injection_day)
    return config


def save_config(config: TrackerConfig, path: Path) -> None:
    """Guarda la configuracion como JSON."""
    validate_config(config)
    config = reset_current_dose(config)
    path.parent.mkdir(parents=True, exist_ok=True)
    payload = asdict(config)
    payload["dosing_mode"] = config.dosing_mode.value
    path.write_text(json.dumps(payload, indent=2), encoding="utf-8")


def _from_mapping(raw: dict[str, Any]) -> TrackerConfig:
    known = {k: v for k, v in raw.items() if k in TrackerConfig.__dataclass_fields__}
    config = replace(TrackerConfig(), **known)
    mode = config.dosing_mode
    if not isinstance(mode, DosingMode):
        try:
            mode = DosingMode(str(mode).upper())
        except ValueError as exc:
            raise ValueError(f"Unknown dosing_mode: {mode}") from exc
    return replace(
        config,
        dosing_mode=mode,
        injection_day=_as_int("injection_day", config.injection_day),
        doses_per_pen=_as_int("doses_per_pen", config.doses_per_pen),
        current_dose_in_pen=_as_int(
            "current_dose_in_pen", config.current_dose_in_pen
        ),
        tracks_bonus_dose=bool(config.tracks_bonus_dose),
        pen_strength_mg=_as_float("pen_strength_mg", config.pen_strength_mg),
        dose_amount_mg=_as_float("dose_amount_mg", config.dose_amount_mg),
        timezone=str(config.timezone),
        export_dir=str(config.export_dir or ""),
    )


def _as_int(name: str, value: object) -> int:
    if isinstance(value, bool) or not isinstance(value, int | float | str):
        raise ValueError(f"{name} must be an integer, got {value!r}")
    if isinstance(value, float) and not value.is_integer():
        raise ValueError(f"{name} must be an integer, got {value!r}")
    try:
        return int(value)
    except ValueError as exc:
        raise ValueError(f"{name} must be an integer, got {value!r}") from exc


def _as_float(name: str, value: object) -> float | None:
    if value is None:
        return None
    if isinstance(value, bool) or not isinstance(value, int | float | str):
        raise ValueError(f"{name} must be a number, got {value!r}")
    try:
        return float(value)
    except ValueError as exc:
        raise ValueError(f"{name} must be a number, got {value!r}") from exc
