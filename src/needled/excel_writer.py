"""Exportación Excel del resumen de adherencia (resumen, inyecciones, hábitos)."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from datetime import date, datetime
from pathlib import Path
from typing import Any

import pandas as pd
import structlog
from openpyxl.styles import Alignment, Border, Font, Side

from needled.report import summary_to_frame

logger = structlog.get_logger(__name__)

_WEEKDAY_LABELS: tuple[str, ...] = ("Mon", "Tue", "Wed", "Thu", "Fri", "Sat", "Sun")

_HEADER_MAP: dict[str, str] = {
    "metric": "Metric",
    "value": "Value",
    "weekday": "Day",
    "datetime": "Date / Time",
    "date": "Date",
    "site_label": "Site",
    "dose_number": "Dose #",
    "bonus": "Bonus",
    "on_schedule": "On schedule",
    "water": "Water",
    "nutrition": "Nutrition",
    "exercise": "Exercise",
    "perfect": "Perfect day",
    "streak_day": "Streak day",
}

_COLUMN_WIDTHS: dict[str, int] = {
    "Metric": 26,
    "Value": 28,
    "Day": 6,
    "Date / Time": 18,
    "Date": 12,
    "Site": 16,
    "Dose #": 8,
    "Bonus": 8,
    "On schedule": 12,
    "Water": 8,
    "Nutrition": 10,
    "Exercise": 10,
    "Perfect day": 12,
    "Streak day": 11,
}

_NUMBER_FORMATS: dict[str, str] = {
    "Date / Time": "dd/mm/yyyy hh:mm",
    "Date": "dd/mm/yyyy",
    "Dose #": "0",
    "Streak day": "0",
}


@dataclass(frozen=True)
class ExcelLayout:
    """Sheet names for the adherence workbook."""

    summary_sheet: str = "Summary"
    injections_sheet: str = "Injections"
    habits_sheet: str = "Habits"


def _weekday_label(i: object) -> str:
    """Convierte índice 0-6 (lunes-domingo) a etiqueta de 3 letras."""
    try:
        if i is None or (isinstance(i, float) and pd.isna(i)):
            return ""
        if isinstance(i, int | float):
            idx = int(i)
            return _WEEKDAY_LABELS[idx] if 0 <= idx < 7 else ""
        return ""
    except (ValueError, TypeError):
        return ""


def _naive(value: object) -> object:
    """Excel no admite timezone: se escribe la hora local sin tzinfo."""
    if isinstance(value, datetime) and value.tzinfo is not None:
        return value.replace(tzinfo=None)
    return value


def _prepare_injections(df: pd.DataFrame) -> pd.DataFrame:
    out = df.copy()
    if "weekday" in out.columns:
        out["weekday"] = out["weekday"].map(_weekday_label)
    if "datetime" in out.columns:
        out["datetime"] = out["datetime"].map(_naive)
    out = out.drop(columns=[c for c in ("date", "site") if c in out.columns])
    return _weekday_first(out)


def _prepare_habits(df: pd.DataFrame) -> pd.DataFrame:
    out = df.copy()
    if "weekday" in out.columns:
        out["weekday"] = out["weekday"].map(_weekday_label)
    return _weekday_first(out)


def _weekday_first(df: pd.DataFrame) -> pd.DataFrame:
    if "weekday" not in df.columns:
        return df
    cols = ["weekday"] + [c for c in df.columns if c != "weekday"]
    return df[cols]


def _summary_value(value: object) -> object:
    if value is None:
        return ""
    if isinstance(value, datetime):
        return value.strftime("%d/%m/%Y %H:%M")
    if isinstance(value, date):
        return value.strftime("%d/%m/%Y")
    if isinstance(value, bool):
        return "yes" if value else "no"
    return value


def write_adherence_xlsx(
    injections: pd.DataFrame,
    habits: pd.DataFrame,
    summary: Mapping[str, Any],
    out_path: Path,
    layout: ExcelLayout,
) -> None:
    """Write the adherence workbook.

    Args:
        injections: Frame from ``report.injections_to_frame``.
        habits: Frame from ``report.habits_to_frame``.
        summary: Dict from ``report.adherence_summary``.
        out_path: Output path for the XLSX file.
        layout: Sheet names.
    """
    out_path.parent.mkdir(parents=True, exist_ok=True)

    summary_df = summary_to_frame(
        {k: _summary_value(v) for k, v in summary.items()}
    )
    sheets = [
        (layout.summary_sheet, summary_df),
        (layout.injections_sheet, _prepare_injections(injections)),
        (layout.habits_sheet, _prepare_habits(habits)),
    ]

    with pd.ExcelWriter(out_path, engine="openpyxl") as writer:
        for name, frame in sheets:
            frame.rename(columns=_HEADER_MAP).to_excel(
                writer, index=False, sheet_name=name
            )
            _format_sheet(writer.book[name])

    logger.info(
        "adherence_export_written",
        path=str(out_path),
        injections=len(injections),
        habit_days=len(habits),
    )


def _style_header_row(ws: Any) -> None:
    """Aplica fuente negrita, alineación y borde a la fila de cabecera."""
    thin = Side(style="thin")
    border = Border(left=thin, right=thin, top=thin, bottom=thin)
    header_font = Font(bold=True)
    center = Alignment(horizontal="center", vertical="center", wrap_text=True)
    for cell in ws[1]:
        cell.font = header_font
        cell.alignment = center
        cell.border = border


def _style_body_rows(ws: Any) -> None:
    thin = Side(style="thin")
    border = Border(left=thin, right=thin, top=thin, bottom=thin)
    center = Alignment(horizontal="center", vertical="center")
    for row in ws.iter_rows(min_row=2):
        for cell in row:
            cell.alignment = center
            cell.border = border


def _get_header_col_index(ws: Any) -> dict[str, int]:
    """Devuelve mapa nombre de cabecera -> índice de columna (1-based)."""
    headers = [str(cell.value) for cell in ws[1]]
    return {name: idx + 1 for idx, name in enumerate(headers)}


def _apply_column_widths(ws: Any, col_index: dict[str, int]) -> None:
    for header, width in _COLUMN_WIDTHS.items():
        idx = col_index.get(header)
        if idx is not None:
            letter = ws.cell(row=1, column=idx).column_letter
            ws.column_dimensions[letter].width = width


def _apply_number_formats(ws: Any, col_index: dict[str, int]) -> None:
    for row in ws.iter_rows(min_row=2):
        for header, fmt in _NUMBER_FORMATS.items():
            idx = col_index.get(header)
            if idx is not None:
                row[idx - 1].number_format = fmt


def _format_sheet(ws: Any) -> None:
    """Apply borders, widths and number formats to a worksheet.

    Args:
        ws: openpyxl worksheet.
    """
    _style_header_row(ws)
    _style_body_rows(ws)
    col_index = _get_header_col_index(ws)
    _apply_column_widths(ws, col_index)
    _apply_number_formats(ws, col_index)
