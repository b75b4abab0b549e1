"""Punto de entrada: python -m needled."""

from __future__ import annotations

from needled.cli import main

if __name__ == "__main__":
    raise SystemExit(main())
