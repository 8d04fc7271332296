import datetime as dt

import pytest

from kpiplot.canvas import Polyline, Rect, Text
from kpiplot.chart import (
    PlotArea,
    build_chart,
    chart_title,
    date_ticks,
    draw_chart,
    nice_step,
    value_range,
    value_ticks,
)
from kpiplot.errors import UnplottableValues
from kpiplot.models import Point, Series


def make_series(values, start=dt.date(2024, 1, 1), step=1):
    return Series(
        name="Sessions",
        points=[Point(date=start + dt.timedelta(days=i * step), value=v) for i, v in enumerate(values)],
    )


def test_value_range_pads_ten_percent():
    assert value_range([-10.0, 90.0]) == pytest.approx((-20.0, 100.0))


def test_value_range_clamps_at_zero_for_non_negative_data():
    low, high = value_range([5.0, 105.0])
    assert low == 0.0
    assert high == pytest.approx(115.0)


@pytest.mark.parametrize("value,expected", [
    (10.0, (9.0, 11.0)),
    (1000.0, (950.0, 1050.0)),
    (0.0, (0.0, 1.0)),
    (-4.0, (-5.0, -3.0)),
])
def test_constant_series_gets_minimum_span(value, expected):
    assert value_range([value, value]) == pytest.approx(expected)


def test_nice_step_is_1_2_5():
    assert nice_step(0.0, 115.0) == 20.0
    assert nice_step(0.0, 1.0) == 0.2
    assert nice_step(950.0, 1050.0) == 20.0


def test_value_ticks_inside_range_and_labelled():
    ticks = value_ticks(0.0, 115.0)
    assert [t.value for t in ticks] == [0.0, 20.0, 40.0, 60.0, 80.0, 100.0]
    assert [t.label for t in ticks][-1] == "100"
    assert value_ticks(0.0, 1.0)[1].label == "0.2"
    assert value_ticks(0.0, 12000.0)[-1].label == "12,000"


def test_value_labels_drop_trailing_zeros():
    labels = [t.label for t in value_ticks(0.0, 1.0)]
    assert labels == ["0", "0.2", "0.4", "0.6", "0.8", "1"]
    assert [t.label for t in value_ticks(-1.0, 1.5)][:3] == ["-1", "-0.5", "0"]


@pytest.mark.parametrize("values", [
    [1e308, -1e308],
    [1.7e308, 1.7e308],
])
def test_value_range_rejects_unplottable_span(values):
    with pytest.raises(UnplottableValues):
        value_range(values)


def test_year_ticks_over_long_ranges():
    ticks = date_ticks(dt.date(1990, 6, 1), dt.date(2030, 1, 1))
    assert [t.label for t in ticks] == [str(y) for y in range(1995, 2031, 5)]


@pytest.mark.parametrize("days", [3, 10, 30, 60, 89, 120, 200, 365, 700, 1500])
def test_date_tick_density(days):
    start = dt.date(2024, 1, 1)
    ticks = date_ticks(start, start + dt.timedelta(days=days))
    assert len(ticks) <= 12
    if days >= 10:
        assert len(ticks) >= 4
    assert all(start <= t.value <= start + dt.timedelta(days=days) for t in ticks)


def test_weekly_ticks_start_on_monday():
    ticks = date_ticks(dt.date(2024, 1, 3), dt.date(2024, 2, 20))
    assert ticks[0].value == dt.date(2024, 1, 8)
    assert all(t.value.weekday() == 0 for t in ticks)


def test_monthly_ticks_on_first_of_month():
    ticks = date_ticks(dt.date(2024, 1, 15), dt.date(2024, 9, 30))
    assert [t.value for t in ticks] == [dt.date(2024, m, 1) for m in range(2, 10)]
    assert ticks[0].label == "Feb 2024"


def test_single_point_chart_is_not_degenerate():
    chart = build_chart(make_series([42.0]), "t", "#000000")
    assert chart.x_axis.minimum < chart.x_axis.maximum
    assert chart.y_axis.minimum < chart.y_axis.maximum
    assert chart.x_axis.minimum <= dt.date(2024, 1, 1) <= chart.x_axis.maximum
    assert chart.y_axis.minimum <= 42.0 <= chart.y_axis.maximum


def test_axes_contain_all_values():
    values = [3.0, -7.5, 12.0, 0.5, 8.0]
    chart = build_chart(make_series(values, step=9), "t", "#000000")
    assert chart.y_axis.minimum <= min(values)
    assert chart.y_axis.maximum >= max(values)
    assert chart.x_axis.minimum == dt.date(2024, 1, 1)
    assert chart.x_axis.maximum == dt.date(2024, 1, 1) + dt.timedelta(days=36)


def test_chart_title():
    assert chart_title("Sessions") == "Sessions"
    assert chart_title("Sessions", 99) == "Sessions for Experience ID 99"


def test_draw_chart_polyline_in_date_order_inside_plot_area():
    series = make_series([5.0, 15.0, 10.0])
    chart = build_chart(series, "Sessions", "#ffa500", subtitle="sub")
    canvas = draw_chart(chart)
    area = PlotArea(chart)

    (line,) = canvas.polylines()
    assert isinstance(line, Polyline)
    assert line.gid == "series-0"
    assert line.color == "#ffa500"
    assert len(line.points) == 3
    xs = [x for x, _ in line.points]
    assert xs == sorted(xs)
    assert xs[0] == pytest.approx(area.left)
    assert xs[-1] == pytest.approx(area.right)
    for _, y in line.points:
        assert area.top <= y <= area.bottom
    # higher value -> smaller canvas y
    assert line.points[1][1] < line.points[0][1]

    texts = [p.text for p in canvas.primitives if isinstance(p, Text)]
    assert "Sessions" in texts
    assert "sub" in texts


def test_frame_drawn_over_grid_and_under_series():
    canvas = draw_chart(build_chart(make_series([5.0, 15.0, 10.0]), "Sessions", "#ffa500"))
    kinds = [type(p).__name__ for p in canvas.primitives]
    frame = max(i for i, p in enumerate(canvas.primitives) if isinstance(p, Rect) and p.stroke)
    assert max(i for i, k in enumerate(kinds) if k == "Line") < frame
    assert kinds.index("Polyline") > frame
