"""
Chart layout.

build_chart() computes axis ranges and ticks from the data; draw_chart()
lays the chart out onto a Canvas. Nothing here knows about output formats.
"""

from __future__ import annotations

import datetime as dt
import logging
import math
from typing import List, Optional, Sequence, Tuple

from .canvas import Canvas
from .errors import UnplottableValues
from .models import Chart, DateTick, PlottedSeries, Series, ValueTick, XAxis, YAxis
from .rules import (
    BACKGROUND,
    CANVAS_HEIGHT,
    CANVAS_WIDTH,
    CAPTION_SIZE,
    CONSTANT_SPAN_FRACTION,
    CONSTANT_SPAN_MIN,
    FOREGROUND,
    GRID_COLOR,
    MARGIN_BOTTOM,
    MARGIN_LEFT,
    MARGIN_RIGHT,
    MARGIN_TOP,
    MAX_X_TICKS,
    MAX_Y_TICKS,
    SERIES_WIDTH,
    SUBTITLE_COLOR,
    SUBTITLE_SIZE,
    TICK_LABEL_SIZE,
    TICK_LENGTH,
    TITLE_SIZE,
    X_LABEL_FORMATS,
    X_TICK_INTERVALS,
    Y_PADDING,
)

logger = logging.getLogger(__name__)


# --- Y scale ---

def value_range(values: Sequence[float]) -> Tuple[float, float]:
    """Padded [min, max]; never zero-height, never below 0 for non-negative data."""
    lo, hi = min(values), max(values)
    # normalized series are often flat up to rounding error
    if math.isclose(lo, hi, rel_tol=1e-9, abs_tol=1e-12):
        mid = (lo + hi) / 2
        half = max(CONSTANT_SPAN_MIN, abs(mid) * CONSTANT_SPAN_FRACTION)
        low, high = mid - half, mid + half
    else:
        pad = (hi - lo) * Y_PADDING
        low, high = lo - pad, hi + pad
    if lo >= 0:
        low = max(low, 0.0)
    if not (math.isfinite(low) and math.isfinite(high) and math.isfinite(high - low)):
        raise UnplottableValues(f"Cannot fit values between {lo!r} and {hi!r} on an axis")
    return low, high


def _ticks_for_step(lo: float, hi: float, step: float) -> List[float]:
    eps = step * 1e-9
    first = math.ceil((lo - eps) / step)
    last = math.floor((hi + eps) / step)
    return [round(k * step, 12) + 0.0 for k in range(first, last + 1)]


def nice_step(lo: float, hi: float, max_ticks: int = MAX_Y_TICKS) -> float:
    """Smallest 1/2/5 x 10^k step giving at most max_ticks ticks in [lo, hi]."""
    exp = math.floor(math.log10(hi - lo)) + 1
    best = 10.0 ** exp
    while True:
        for mult in (5, 2, 1):
            step = mult * 10.0 ** (exp - 1)
            if len(_ticks_for_step(lo, hi, step)) > max_ticks:
                return best
            best = step
        exp -= 1


def format_value(value: float, step: float) -> str:
    decimals = max(0, -math.floor(math.log10(step) + 1e-9))
    label = f"{value:,.{decimals}f}"
    if "." in label:
        label = label.rstrip("0").rstrip(".")
    return "0" if label == "-0" else label


def value_ticks(lo: float, hi: float, max_ticks: int = MAX_Y_TICKS) -> List[ValueTick]:
    step = nice_step(lo, hi, max_ticks)
    return [ValueTick(value=v, label=format_value(v, step)) for v in _ticks_for_step(lo, hi, step)]


# --- X scale ---

def date_range(dates: Sequence[dt.date]) -> Tuple[dt.date, dt.date]:
    start, end = min(dates), max(dates)
    if start == end:
        day = dt.timedelta(days=1)
        return start - day, end + day
    return start, end


def _month_start(index: int) -> dt.date:
    return dt.date(index // 12, index % 12 + 1, 1)


def _date_ticks(start: dt.date, end: dt.date, unit: str, step: int) -> List[dt.date]:
    if unit in ("day", "week"):
        first = start
        days = step
        if unit == "week":
            first = start + dt.timedelta(days=(7 - start.weekday()) % 7)
            days = 7 * step
        span = (end - first).days
        return [first + dt.timedelta(days=n) for n in range(0, span + 1, days)] if span >= 0 else []

    if unit == "month":
        lo = start.year * 12 + start.month - 1 + (start.day > 1)
        hi = end.year * 12 + end.month - 1
        return [_month_start(m) for m in range(lo, hi + 1) if m % step == 0]

    lo = start.year + (start > dt.date(start.year, 1, 1))
    return [dt.date(y, 1, 1) for y in range(lo, end.year + 1) if y % step == 0]


def date_ticks(start: dt.date, end: dt.date, max_ticks: int = MAX_X_TICKS) -> List[DateTick]:
    """Ticks at the finest readable interval that keeps at most max_ticks."""
    for unit, step in X_TICK_INTERVALS:
        ticks = _date_ticks(start, end, unit, step)
        if len(ticks) <= max_ticks:
            break
    logger.debug("x ticks every %d %s(s): %d ticks", step, unit, len(ticks))
    return [DateTick(value=d, label=d.strftime(X_LABEL_FORMATS[unit])) for d in ticks]


# --- Chart ---

def chart_title(kpi_name: str, experience_id: Optional[int] = None) -> str:
    if experience_id is None:
        return kpi_name
    return f"{kpi_name} for Experience ID {experience_id}"


def build_chart(series: Series, title: str, color: str, subtitle: Optional[str] = None) -> Chart:
    start, end = date_range(series.dates)
    low, high = value_range(series.values)
    return Chart(
        title=title,
        subtitle=subtitle,
        x_axis=XAxis(minimum=start, maximum=end, ticks=date_ticks(start, end)),
        y_axis=YAxis(minimum=low, maximum=high, ticks=value_ticks(low, high)),
        series=[PlottedSeries(label=series.name, color=color, points=series.points)],
        y_caption=series.name,
    )


class PlotArea:
    """Maps data coordinates into the canvas rectangle inside the margins."""

    def __init__(self, chart: Chart, width: int = CANVAS_WIDTH, height: int = CANVAS_HEIGHT):
        self.left = MARGIN_LEFT
        self.top = MARGIN_TOP
        self.right = width - MARGIN_RIGHT
        self.bottom = height - MARGIN_BOTTOM
        self._x0 = chart.x_axis.minimum.toordinal()
        self._x_span = chart.x_axis.maximum.toordinal() - self._x0
        self._y0 = chart.y_axis.minimum
        self._y_span = chart.y_axis.maximum - chart.y_axis.minimum

    def x(self, date: dt.date) -> float:
        return self.left + (date.toordinal() - self._x0) / self._x_span * (self.right - self.left)

    def y(self, value: float) -> float:
        return self.bottom - (value - self._y0) / self._y_span * (self.bottom - self.top)


def draw_chart(chart: Chart, width: int = CANVAS_WIDTH, height: int = CANVAS_HEIGHT) -> Canvas:
    canvas = Canvas(width=width, height=height)
    area = PlotArea(chart, width, height)
    center = (area.left + area.right) / 2

    canvas.rect(0, 0, width, height, fill=BACKGROUND)
    canvas.text(width / 2, 45, chart.title, TITLE_SIZE, FOREGROUND, ha="center", va="center", weight="bold")
    if chart.subtitle:
        canvas.text(width / 2, 85, chart.subtitle, SUBTITLE_SIZE, SUBTITLE_COLOR,
                    ha="center", va="center", style="italic")

    for tick in chart.y_axis.ticks:
        y = area.y(tick.value)
        canvas.line(area.left, y, area.right, y, GRID_COLOR)
        canvas.line(area.left - TICK_LENGTH, y, area.left, y, FOREGROUND)
        canvas.text(area.left - TICK_LENGTH - 4, y, tick.label, TICK_LABEL_SIZE, FOREGROUND,
                    ha="right", va="center")

    for tick in chart.x_axis.ticks:
        x = area.x(tick.value)
        canvas.line(x, area.top, x, area.bottom, GRID_COLOR)
        canvas.line(x, area.bottom, x, area.bottom + TICK_LENGTH, FOREGROUND)
        canvas.text(x, area.bottom + TICK_LENGTH + 4, tick.label, TICK_LABEL_SIZE, FOREGROUND,
                    ha="center", va="top")

    canvas.rect(area.left, area.top, area.right - area.left, area.bottom - area.top, stroke=FOREGROUND)
    canvas.text(center, height - 20, chart.x_caption, CAPTION_SIZE, FOREGROUND, ha="center", va="bottom")
    if chart.y_caption:
        canvas.text(25, (area.top + area.bottom) / 2, chart.y_caption, CAPTION_SIZE, FOREGROUND,
                    ha="center", va="center", rotation=90)

    for i, plotted in enumerate(chart.series):
        canvas.polyline(
            [(area.x(p.date), area.y(p.value)) for p in plotted.points],
            plotted.color,
            SERIES_WIDTH,
            gid=f"series-{i}",
        )
    return canvas
