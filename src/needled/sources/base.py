"""Clases base para los registros CSV que exporta la app."""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from pathlib import Path

import pandas as pd

_TRUE_VALUES = {"1", "true", "t", "yes", "y", "si", "sí", "x"}
_FALSE_VALUES = {"", "0", "false", "f", "no", "n", "nan", "none"}


@dataclass(frozen=True)
class SourcePaths:
    """Container for source directories."""

    root: Path


class DataSource(ABC):
    """Abstract CSV log source."""

    filename: str = ""

    def __init__(self, paths: SourcePaths) -> None:
        """Create a data source.

        Args:
            paths: Source paths configuration.
        """
        self._paths = paths

    @property
    def csv_path(self) -> Path:
        return self._paths.root / self.filename

    def validate(self) -> None:
        """Validate that the data directory and the CSV exist.

        Raises:
            FileNotFoundError: If required files are missing.
        """
        if not self._paths.root.exists():
            raise FileNotFoundError(str(self._paths.root))
        if not self.csv_path.exists():
            raise FileNotFoundError(str(self.csv_path))

    def read_frame(self) -> pd.DataFrame:
        """Read the CSV with stripped, lower-cased column names."""
        df = pd.read_csv(self.csv_path, dtype=str, keep_default_na=False)
        return df.rename(columns={c: c.strip().lower() for c in df.columns})

    @abstractmethod
    def required_columns(self) -> list[str]:
        """Columns that must be present in the CSV."""

    def check_columns(self, df: pd.DataFrame) -> None:
        missing = [c for c in self.required_columns() if c not in df.columns]
        if missing:
            raise ValueError(f"{self.csv_path.name} is missing columns: {missing}")


def parse_flag(value: object) -> bool:
    """Parse checkbox-like CSV values (1/0, true/false, si/no, x)."""
    if value is None or (isinstance(value, float) and pd.isna(value)):
        return False
    text = str(value).strip().lower()
    if text in _TRUE_VALUES:
        return True
    if text in _FALSE_VALUES:
        return False
    raise ValueError(f"Not a boolean flag: {value!r}")
