"""Gráfico de tendencia de glucosa (series por color y por unidad)."""

from __future__ import annotations

import io
import uuid
from collections.abc import Sequence
from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum

import matplotlib

matplotlib.use("Agg")  # headless backend for servers

import matplotlib.pyplot as plt
import pandas as pd
from matplotlib.ticker import FuncFormatter

from diabot.conversion import MGDL_PER_MMOL
from diabot.errors import ArgumentError
from diabot.model import GlucoseReading, GlucoseUnit, NightscoutData

HIDDEN_COLOUR = "#00000000"
X_TICK_COLOUR = "#585858"


class GraphTheme(Enum):
    """Colour theme of the chart."""

    LIGHT = "light"
    DARK = "dark"


class PlottingStyle(Enum):
    """How readings are drawn."""

    SCATTER = "scatter"
    LINE = "line"


@dataclass(frozen=True)
class GraphSettings:
    """Theme, plot style and range colours for each theme."""

    theme: GraphTheme = GraphTheme.DARK
    plot_mode: PlottingStyle = PlottingStyle.SCATTER
    high_light_colour: str = "#e69500"
    low_light_colour: str = "#d62728"
    in_range_light_colour: str = "#2a7f3f"
    high_dark_colour: str = "#ffb347"
    low_dark_colour: str = "#ff6961"
    in_range_dark_colour: str = "#77dd77"


_THEME_STYLE: dict[GraphTheme, dict[str, str]] = {
    GraphTheme.LIGHT: {"background": "#ffffff", "text": "#333333", "grid": "#cccccc"},
    # Discord background colour
    GraphTheme.DARK: {"background": "#36393f", "text": "#ffffff", "grid": "#5c5f66"},
}


@dataclass(frozen=True)
class ChartSeries:
    """One renderable series: (relative hours, glucose) pairs on one axis group."""

    name: str
    points: tuple[tuple[float, float], ...]
    colour: str
    unit: GlucoseUnit
    y_axis_group: int
    marker: str = "o"
    render_style: PlottingStyle = PlottingStyle.SCATTER
    line_colour: str | None = None


def classify_colour(mgdl: int, top: int, bottom: int, settings: GraphSettings) -> str:
    """Return the display colour for a BG value in mg/dL.

    Line charts can't colour single points, so LINE mode always gets the
    in-range colour.
    """
    line_graph = settings.plot_mode is PlottingStyle.LINE

    if settings.theme is GraphTheme.LIGHT:
        high = settings.high_light_colour
        low = settings.low_light_colour
        in_range = settings.in_range_light_colour
    else:
        high = settings.high_dark_colour
        low = settings.low_dark_colour
        in_range = settings.in_range_dark_colour

    if line_graph:
        return in_range
    if mgdl > top:
        return high
    if mgdl < bottom:
        return low
    return in_range


def relative_hours(timestamp: datetime, now: datetime) -> float:
    """Hours from ``now`` to ``timestamp``; negative for past readings.

    Whole seconds only, truncated towards zero.
    """
    seconds = int((timestamp - now).total_seconds())
    return seconds / 3600


def _require_non_ambiguous(unit: GlucoseUnit) -> None:
    if unit is GlucoseUnit.AMBIGUOUS:
        raise ArgumentError("Glucose unit cannot be ambiguous")


def _series_data(
    readings: Sequence[GlucoseReading], unit: GlucoseUnit, now: datetime
) -> dict[float, float]:
    """Map relative hours to the glucose value in ``unit``.

    Readings with the same x value collapse into one point (last one wins).
    """
    _require_non_ambiguous(unit)
    data: dict[float, float] = {}
    for reading in readings:
        value = reading.mg_dl if unit is GlucoseUnit.MGDL else reading.mmol_l
        data[relative_hours(reading.timestamp, now)] = value
    return data


def build_series(
    readings: Sequence[GlucoseReading],
    units: str | None,
    top: int,
    bottom: int,
    settings: GraphSettings,
    *,
    now: datetime | None = None,
    has_series: bool = False,
) -> list[ChartSeries]:
    """Split readings into series by range colour and by unit.

    Args:
        readings: BG readings to plot.
        units: Unit name configured on the Nightscout instance, if known.
        top: Upper target limit in mg/dL.
        bottom: Lower target limit in mg/dL.
        settings: Theme and plot style.
        now: Reference time for the x axis (defaults to current UTC time).
        has_series: Whether the chart already holds series. Only matters
            when ``units`` is unknown.

    Returns:
        One series per (unit, colour) pair, mmol/L series first.
    """
    if not readings:
        return []
    now = now or datetime.now(timezone.utc)

    ranges: dict[str, list[GlucoseReading]] = {}
    for reading in readings:
        colour = classify_colour(reading.mg_dl, top, bottom, settings)
        ranges.setdefault(colour, []).append(reading)

    configured = GlucoseUnit.by_name(units)
    out: list[ChartSeries] = []
    for unit in GlucoseUnit:
        if unit is GlucoseUnit.AMBIGUOUS:
            continue

        # Without configured units, the first unit added to an empty chart wins.
        if configured is not None:
            preferred = configured is unit
        else:
            preferred = not (has_series or out)

        # mg/dL is more precise, so the mmol/L series only drives its axis.
        hidden = unit is GlucoseUnit.MMOL

        for range_colour, entries in ranges.items():
            data = _series_data(entries, unit, now)
            colour = HIDDEN_COLOUR if hidden else range_colour
            line = settings.plot_mode is PlottingStyle.LINE
            out.append(
                ChartSeries(
                    name=str(uuid.uuid4()),
                    points=tuple(data.items()),
                    colour=colour,
                    unit=unit,
                    y_axis_group=0 if preferred else 1,
                    render_style=settings.plot_mode,
                    line_colour=colour if line else None,
                )
            )
    return out


def find_min_max(
    readings: Sequence[GlucoseReading], unit: GlucoseUnit
) -> tuple[float, float]:
    """Y axis bounds for ``readings`` in ``unit``.

    Bounds are computed in mg/dL and converted, so the mg/dL and mmol/L axes
    stay aligned.
    """
    _require_non_ambiguous(unit)
    if not readings:
        raise ArgumentError("No readings to scale")

    frame = pd.DataFrame({"glucose_mg_dl": [r.mg_dl for r in readings]})
    low = float(frame["glucose_mg_dl"].min())
    high = float(frame["glucose_mg_dl"].max())
    padding = max((high - low) * 0.1, 10.0)
    low = max(low - padding, 0.0)
    high = high + padding

    if unit is GlucoseUnit.MMOL:
        return low / MGDL_PER_MMOL, high / MGDL_PER_MMOL
    return low, high


def _format_hours(value: float, _pos: int | None = None) -> str:
    text = f"{value:.1f}".rstrip("0").rstrip(".")
    if text == "-0":
        text = "0"
    return f"{text}h"


class BgGraph:
    """BG chart: axis setup, series from Nightscout data, PNG rendering."""

    def __init__(
        self, settings: GraphSettings, width: int = 833, height: int = 500
    ) -> None:
        self.settings = settings
        self.width = width
        self.height = height
        self.series: list[ChartSeries] = []
        self.axis_titles: dict[int, str] = {}
        self.axis_bounds: dict[int, tuple[float, float]] = {}
        self.right_axis_group: int | None = None

    def setup_axes(self, preferred_unit: GlucoseUnit) -> BgGraph:
        """Assign axis group 0 to the preferred unit; mmol/L goes on the right.

        Raises:
            ArgumentError: If ``preferred_unit`` is AMBIGUOUS.
        """
        _require_non_ambiguous(preferred_unit)
        mmol_group = 0 if preferred_unit is GlucoseUnit.MMOL else 1
        mgdl_group = 0 if preferred_unit is GlucoseUnit.MGDL else 1

        self.axis_titles = {mgdl_group: "MG/DL", mmol_group: "MMOL/L"}
        self.right_axis_group = mmol_group
        return self

    def add_entries(
        self, nightscout: NightscoutData, now: datetime | None = None
    ) -> BgGraph:
        """Add a Nightscout instance's readings to the chart."""
        self.setup_axes(GlucoseUnit.by_name(nightscout.units) or GlucoseUnit.MMOL)
        readings = list(nightscout.entries)

        new_series = build_series(
            readings,
            nightscout.units,
            nightscout.top,
            nightscout.bottom,
            self.settings,
            now=now,
            has_series=bool(self.series),
        )
        for series in new_series:
            self.axis_bounds[series.y_axis_group] = find_min_max(
                readings, series.unit
            )
        self.series.extend(new_series)
        return self

    def render(self) -> bytes:
        """Draw the chart and return it as PNG bytes."""
        style = _THEME_STYLE[self.settings.theme]
        fig, primary = plt.subplots(
            figsize=(self.width / 100, self.height / 100), dpi=100
        )
        secondary = primary.twinx()
        axes = {0: primary, 1: secondary}

        fig.set_facecolor(style["background"])
        primary.set_facecolor(style["background"])
        secondary.set_facecolor("none")

        if self.right_axis_group == 0:
            primary.yaxis.tick_right()
            primary.yaxis.set_label_position("right")
            secondary.yaxis.tick_left()
            secondary.yaxis.set_label_position("left")

        for group, title in self.axis_titles.items():
            axes[group].set_ylabel(title, color=style["text"])
        for ax in axes.values():
            ax.tick_params(axis="y", colors=style["text"])
            for spine in ax.spines.values():
                spine.set_color(style["grid"])

        for series in self.series:
            ax = axes[series.y_axis_group]
            xs = [x for x, _ in series.points]
            ys = [y for _, y in series.points]
            if series.render_style is PlottingStyle.LINE:
                ax.plot(
                    xs,
                    ys,
                    color=series.line_colour,
                    marker=series.marker,
                    markersize=3,
                    markerfacecolor=series.colour,
                    markeredgecolor=series.colour,
                )
            else:
                ax.scatter(xs, ys, color=series.colour, marker=series.marker, s=12)

        for group, (low, high) in self.axis_bounds.items():
            axes[group].set_ylim(low, high)

        primary.xaxis.set_major_formatter(FuncFormatter(_format_hours))
        primary.tick_params(axis="x", colors=X_TICK_COLOUR)
        # horizontal grid lines follow the preferred unit's ticks
        primary.grid(axis="y", color=style["grid"], linewidth=0.8)
        primary.grid(axis="x", visible=False)

        buf = io.BytesIO()
        fig.tight_layout()
        fig.savefig(buf, format="png", facecolor=fig.get_facecolor())
        plt.close(fig)
        return buf.getvalue()
