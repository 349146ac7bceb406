from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest

from diabot.conversion import MGDL_PER_MMOL
from diabot.errors import ArgumentError
from diabot.graph import (
    HIDDEN_COLOUR,
    BgGraph,
    GraphSettings,
    GraphTheme,
    PlottingStyle,
    build_series,
    classify_colour,
    find_min_max,
    _format_hours,
    relative_hours,
)
from diabot.model import GlucoseReading, GlucoseUnit, NightscoutData

NOW = datetime(2026, 1, 31, 12, 0, tzinfo=timezone.utc)
LIGHT = GraphSettings(theme=GraphTheme.LIGHT)
DARK = GraphSettings(theme=GraphTheme.DARK)


def _reading(minutes_ago: int, mg_dl: int) -> GlucoseReading:
    return GlucoseReading(
        timestamp=NOW - timedelta(minutes=minutes_ago),
        mg_dl=mg_dl,
        mmol_l=round(mg_dl / MGDL_PER_MMOL, 1),
    )


def test_classify_light_scatter() -> None:
    assert classify_colour(200, 180, 70, LIGHT) == LIGHT.high_light_colour
    assert classify_colour(60, 180, 70, LIGHT) == LIGHT.low_light_colour
    assert classify_colour(120, 180, 70, LIGHT) == LIGHT.in_range_light_colour


def test_classify_thresholds_are_exclusive() -> None:
    assert classify_colour(180, 180, 70, DARK) == DARK.in_range_dark_colour
    assert classify_colour(70, 180, 70, DARK) == DARK.in_range_dark_colour
    assert classify_colour(181, 180, 70, DARK) == DARK.high_dark_colour
    assert classify_colour(69, 180, 70, DARK) == DARK.low_dark_colour


@pytest.mark.parametrize("theme", [GraphTheme.LIGHT, GraphTheme.DARK])
@pytest.mark.parametrize("mgdl", [20, 120, 400])
def test_classify_line_style_is_always_in_range(theme: GraphTheme, mgdl: int) -> None:
    settings = GraphSettings(theme=theme, plot_mode=PlottingStyle.LINE)
    expected = (
        settings.in_range_light_colour
        if theme is GraphTheme.LIGHT
        else settings.in_range_dark_colour
    )
    assert classify_colour(mgdl, 180, 70, settings) == expected


def test_relative_hours_is_negative_for_past_readings() -> None:
    assert relative_hours(NOW - timedelta(minutes=90), NOW) == -1.5
    assert relative_hours(NOW + timedelta(hours=2), NOW) == 2.0


def test_relative_hours_truncates_to_whole_seconds() -> None:
    ts = NOW - timedelta(seconds=1, milliseconds=900)
    assert relative_hours(ts, NOW) == -1 / 3600


@pytest.mark.parametrize(
    ("hours", "label"),
    [(-0.04, "0h"), (0.0, "0h"), (-2.5, "-2.5h"), (3.0, "3h"), (-11.96, "-12h")],
)
def test_hour_ticks_have_no_negative_zero(hours: float, label: str) -> None:
    assert _format_hours(hours) == label


def test_build_series_empty() -> None:
    assert build_series([], "mg/dl", 180, 70, LIGHT, now=NOW) == []


def test_build_series_groups_by_colour_and_unit() -> None:
    readings = [
        _reading(20, 200),
        _reading(15, 120),
        _reading(10, 60),
        _reading(5, 210),
    ]
    series = build_series(readings, "mg/dl", 180, 70, LIGHT, now=NOW)

    assert [s.unit for s in series] == [GlucoseUnit.MMOL] * 3 + [GlucoseUnit.MGDL] * 3
    mmol, mgdl = series[:3], series[3:]

    assert all(s.colour == HIDDEN_COLOUR for s in mmol)
    assert all(s.y_axis_group == 1 for s in mmol)
    assert all(s.y_axis_group == 0 for s in mgdl)
    assert [s.colour for s in mgdl] == [
        LIGHT.high_light_colour,
        LIGHT.in_range_light_colour,
        LIGHT.low_light_colour,
    ]

    high = mgdl[0]
    assert high.points == ((-20 / 60, 200), (-5 / 60, 210))
    assert mmol[0].points == ((-20 / 60, readings[0].mmol_l), (-5 / 60, readings[3].mmol_l))
    assert len({s.name for s in series}) == 6
    assert all(s.line_colour is None for s in series)


def test_build_series_mmol_preferred() -> None:
    series = build_series([_reading(5, 100)], "mmol", 180, 70, DARK, now=NOW)
    by_unit = {s.unit: s for s in series}
    assert by_unit[GlucoseUnit.MMOL].y_axis_group == 0
    assert by_unit[GlucoseUnit.MGDL].y_axis_group == 1
    # mmol/L stays hidden even when preferred
    assert by_unit[GlucoseUnit.MMOL].colour == HIDDEN_COLOUR


def test_build_series_unknown_units_prefers_first_unit() -> None:
    series = build_series([_reading(5, 100)], None, 180, 70, DARK, now=NOW)
    by_unit = {s.unit: s for s in series}
    assert by_unit[GlucoseUnit.MMOL].y_axis_group == 0
    assert by_unit[GlucoseUnit.MGDL].y_axis_group == 1


def test_build_series_unknown_units_with_existing_series() -> None:
    series = build_series(
        [_reading(5, 100)], "", 180, 70, DARK, now=NOW, has_series=True
    )
    assert {s.y_axis_group for s in series} == {1}


def test_build_series_line_mode() -> None:
    settings = GraphSettings(theme=GraphTheme.DARK, plot_mode=PlottingStyle.LINE)
    readings = [_reading(10, 250), _reading(5, 50)]
    series = build_series(readings, "mg/dl", 180, 70, settings, now=NOW)

    assert len(series) == 2
    mmol, mgdl = series
    assert mgdl.colour == settings.in_range_dark_colour
    assert mgdl.line_colour == settings.in_range_dark_colour
    assert mmol.line_colour == HIDDEN_COLOUR
    assert mgdl.render_style is PlottingStyle.LINE
    assert mgdl.marker == "o"


def test_build_series_collapses_duplicate_timestamps() -> None:
    readings = [_reading(5, 100), _reading(10, 110), _reading(5, 120)]
    series = build_series(readings, "mg/dl", 180, 70, LIGHT, now=NOW)
    mgdl = [s for s in series if s.unit is GlucoseUnit.MGDL]
    assert mgdl[0].points == ((-5 / 60, 120), (-10 / 60, 110))


def test_find_min_max_pads_range() -> None:
    readings = [_reading(10, 100), _reading(5, 200)]
    assert find_min_max(readings, GlucoseUnit.MGDL) == (90.0, 210.0)
    low, high = find_min_max(readings, GlucoseUnit.MMOL)
    assert low == pytest.approx(90.0 / MGDL_PER_MMOL)
    assert high == pytest.approx(210.0 / MGDL_PER_MMOL)


def test_find_min_max_minimum_padding_and_floor() -> None:
    assert find_min_max([_reading(5, 50)], GlucoseUnit.MGDL) == (40.0, 60.0)
    assert find_min_max([_reading(5, 5)], GlucoseUnit.MGDL) == (0.0, 15.0)


def test_find_min_max_rejects_bad_input() -> None:
    with pytest.raises(ArgumentError):
        find_min_max([], GlucoseUnit.MGDL)
    with pytest.raises(ArgumentError, match="ambiguous"):
        find_min_max([_reading(5, 100)], GlucoseUnit.AMBIGUOUS)


def test_setup_axes() -> None:
    graph = BgGraph(DARK).setup_axes(GlucoseUnit.MGDL)
    assert graph.axis_titles == {0: "MG/DL", 1: "MMOL/L"}
    assert graph.right_axis_group == 1

    graph.setup_axes(GlucoseUnit.MMOL)
    assert graph.axis_titles == {1: "MG/DL", 0: "MMOL/L"}
    assert graph.right_axis_group == 0

    with pytest.raises(ArgumentError):
        graph.setup_axes(GlucoseUnit.AMBIGUOUS)


def test_add_entries_empty_leaves_axis_groups_unset() -> None:
    graph = BgGraph(LIGHT).add_entries(NightscoutData(entries=[], units=None), now=NOW)
    assert graph.series == []
    assert graph.axis_bounds == {}


def test_add_entries_records_bounds_per_group() -> None:
    data = NightscoutData(
        entries=[_reading(10, 100), _reading(5, 200)], units="mg/dl"
    )
    graph = BgGraph(LIGHT).add_entries(data, now=NOW)
    assert len(graph.series) == 4
    assert graph.axis_bounds[0] == (90.0, 210.0)
    assert graph.axis_bounds[1][0] == pytest.approx(90.0 / MGDL_PER_MMOL)


@pytest.mark.parametrize("plot_mode", [PlottingStyle.SCATTER, PlottingStyle.LINE])
@pytest.mark.parametrize("units", ["mg/dl", "mmol"])
def test_render_returns_png(plot_mode: PlottingStyle, units: str) -> None:
    data = NightscoutData(
        entries=[_reading(30, 250), _reading(20, 150), _reading(10, 55)],
        units=units,
    )
    settings = GraphSettings(theme=GraphTheme.LIGHT, plot_mode=plot_mode)
    png = BgGraph(settings, width=400, height=240).add_entries(data, now=NOW).render()
    assert png.startswith(b"\x89PNG")
