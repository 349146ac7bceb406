"""Comando de conversión de glucosa."""

from __future__ import annotations

from diabot.commands.registry import CommandContext, Reply
from diabot.conversion import ConversionResult, convert, parse_unit
from diabot.errors import ArgumentError
from diabot.model import GlucoseUnit


def _fmt(value: float) -> str:
    return f"{value:g}"


def format_conversion(result: ConversionResult) -> str:
    """Human-readable reply for a conversion."""
    if result.is_ambiguous:
        return (
            "*I'm not sure if you gave me mmol/L or mg/dL, "
            "so I'll give you both.*\n"
            f"{_fmt(result.original)} mg/dL is **{_fmt(result.mmol)} mmol/L**\n"
            f"{_fmt(result.original)} mmol/L is **{result.mgdl} mg/dL**"
        )
    if result.input_unit is GlucoseUnit.MMOL:
        return f"{_fmt(result.original)} mmol/L is {result.mgdl} mg/dL"
    return f"{_fmt(result.original)} mg/dL is {_fmt(result.converted)} mmol/L"


def convert_command(ctx: CommandContext) -> Reply:
    """``convert <value> [unit]``."""
    args = ctx.args.split()
    if not 1 <= len(args) <= 2:
        raise ArgumentError("Usage: convert <value> [mmol|mgdl]")

    try:
        value = float(args[0].replace(",", "."))
    except ValueError:
        raise ArgumentError(f"`{args[0]}` is not a number") from None

    unit = parse_unit(args[1]) if len(args) == 2 else None
    return Reply(format_conversion(convert(value, unit)))
