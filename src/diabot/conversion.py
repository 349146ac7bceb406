"""Conversión de glucosa entre mmol/L y mg/dL."""

from __future__ import annotations

import math
from dataclasses import dataclass

from diabot.errors import ArgumentError, StateError
from diabot.model import GlucoseUnit

MGDL_PER_MMOL = 18.016

# Values in this closed range are plausible in both units.
_AMBIGUOUS_LOW = 25.0
_AMBIGUOUS_HIGH = 50.0


def round_to(value: float, precision: int) -> float:
    """Round half up to ``precision`` decimals."""
    scale = 10**precision
    return math.floor(value * scale + 0.5) / scale


def _to_mgdl(value: float) -> int:
    return int(round_to(value, 0))


@dataclass(frozen=True)
class ConversionResult:
    """Result of converting one BG value.

    Use :meth:`explicit` or :meth:`ambiguous` instead of the raw constructor.
    Values are normalised once: ``original`` and ``mmol`` to one decimal,
    ``mgdl`` to a whole number.
    """

    original: float
    mmol: float
    mgdl: int
    input_unit: GlucoseUnit

    def __post_init__(self) -> None:
        object.__setattr__(self, "original", round_to(self.original, 1))
        object.__setattr__(self, "mmol", round_to(self.mmol, 1))
        object.__setattr__(self, "mgdl", _to_mgdl(self.mgdl))

    @classmethod
    def explicit(
        cls, original: float, conversion: float, input_unit: GlucoseUnit
    ) -> ConversionResult:
        """Create a result for a value whose unit is known.

        Raises:
            ArgumentError: If ``input_unit`` is AMBIGUOUS.
        """
        if input_unit is GlucoseUnit.AMBIGUOUS:
            raise ArgumentError(
                "single conversion constructor must contain explicit input unit"
            )
        if input_unit is GlucoseUnit.MMOL:
            return cls(
                original=original,
                mmol=original,
                mgdl=_to_mgdl(conversion),
                input_unit=input_unit,
            )
        return cls(
            original=original,
            mmol=conversion,
            mgdl=_to_mgdl(original),
            input_unit=input_unit,
        )

    @classmethod
    def ambiguous(
        cls, original: float, mmol_conversion: float, mgdl_conversion: float
    ) -> ConversionResult:
        """Create a result for a value that could be in either unit."""
        return cls(
            original=original,
            mmol=mmol_conversion,
            mgdl=_to_mgdl(mgdl_conversion),
            input_unit=GlucoseUnit.AMBIGUOUS,
        )

    @property
    def is_ambiguous(self) -> bool:
        return self.input_unit is GlucoseUnit.AMBIGUOUS

    @property
    def converted(self) -> float:
        """The value in the unit opposite to the input unit.

        Raises:
            StateError: For ambiguous conversions; read ``mmol``/``mgdl``.
        """
        if self.input_unit is GlucoseUnit.AMBIGUOUS:
            raise StateError(
                "cannot retrieve specific unit result for ambiguous conversion"
            )
        if self.input_unit is GlucoseUnit.MGDL:
            return self.mmol
        return float(self.mgdl)


def guess_unit(value: float) -> GlucoseUnit:
    """Guess the unit of a bare BG value."""
    if value < _AMBIGUOUS_LOW:
        return GlucoseUnit.MMOL
    if value > _AMBIGUOUS_HIGH:
        return GlucoseUnit.MGDL
    return GlucoseUnit.AMBIGUOUS


def convert(value: float, unit: GlucoseUnit | None = None) -> ConversionResult:
    """Convert ``value``; the unit is guessed when not given.

    Raises:
        ArgumentError: If the value is outside (0, 999).
    """
    if not 0 < value < 999:
        raise ArgumentError(f"Glucose value `{value}` is out of range")

    if unit is None or unit is GlucoseUnit.AMBIGUOUS:
        unit = guess_unit(value)

    if unit is GlucoseUnit.MMOL:
        return ConversionResult.explicit(value, value * MGDL_PER_MMOL, unit)
    if unit is GlucoseUnit.MGDL:
        return ConversionResult.explicit(value, value / MGDL_PER_MMOL, unit)
    return ConversionResult.ambiguous(
        value, value / MGDL_PER_MMOL, value * MGDL_PER_MMOL
    )


def parse_unit(text: str) -> GlucoseUnit:
    """Parse a user-typed unit name.

    Raises:
        ArgumentError: If the name is not a known unit.
    """
    unit = GlucoseUnit.by_name(text)
    if unit is None:
        raise ArgumentError(f"Unknown glucose unit `{text}`")
    return unit
