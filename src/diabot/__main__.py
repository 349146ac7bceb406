"""Punto de entrada: python -m diabot."""

from __future__ import annotations

from diabot.cli import main

if __name__ == "__main__":
    raise SystemExit(main())
