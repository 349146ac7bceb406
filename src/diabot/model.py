"""Modelos tipados para lecturas de glucosa y datos de Nightscout."""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum

_UNIT_NAMES: dict[str, str] = {
    "mmol": "MMOL",
    "mmol/l": "MMOL",
    "mg/dl": "MGDL",
    "mgdl": "MGDL",
    "mg": "MGDL",
}


class GlucoseUnit(Enum):
    """Blood glucose units. AMBIGUOUS marks an unknown source unit."""

    MMOL = "mmol/L"
    MGDL = "mg/dL"
    AMBIGUOUS = "ambiguous"

    @property
    def label(self) -> str:
        return self.value

    @classmethod
    def by_name(cls, name: str | None) -> GlucoseUnit | None:
        """Map a Nightscout unit name ("mmol", "mg/dl", ...) to a unit."""
        if name is None:
            return None
        member = _UNIT_NAMES.get(name.strip().lower())
        return cls[member] if member else None


@dataclass(frozen=True)
class GlucoseReading:
    """One glucose measurement event (timestamped)."""

    timestamp: datetime
    mg_dl: int
    mmol_l: float
    direction: str | None = None


@dataclass(frozen=True)
class NightscoutData:
    """Readings plus the display settings of a Nightscout instance.

    ``top`` and ``bottom`` are the target range limits in mg/dL.
    """

    entries: Sequence[GlucoseReading] = field(default_factory=tuple)
    units: str | None = None
    top: int = 180
    bottom: int = 70
