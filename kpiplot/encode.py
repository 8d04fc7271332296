"""
Canvas -> image bytes.

Both backends replay canvas primitives onto a bare matplotlib Figure whose
single axes spans the whole figure with limits (0, width) x (height, 0), so
canvas units map linearly onto the output. Figures are never registered
with pyplot. Some SVG settings are only read from the global rcParams, so
every encode holds a module lock while those are swapped in.
"""

from __future__ import annotations

import io
import logging
import threading
from pathlib import Path
from typing import Dict, Union

import matplotlib
from matplotlib.figure import Figure
from matplotlib.lines import Line2D
from matplotlib.patches import Rectangle

from .canvas import Canvas, Line, Polyline, Rect, Text
from .errors import UnsupportedFormat
from .rules import FONT_FAMILY, MEDIA_TYPES, RASTER_DPI, SVG_HASH_SALT, VECTOR_DPI

logger = logging.getLogger(__name__)

_RENDER_LOCK = threading.Lock()


class MatplotlibBackend:
    format = ""
    dpi = RASTER_DPI
    rc: Dict[str, object] = {}
    metadata: Dict[str, object] = {}

    @property
    def media_type(self) -> str:
        return MEDIA_TYPES[self.format]

    def _points(self, units: float) -> float:
        # matplotlib sizes are in points; canvas units are output pixels
        return units * 72.0 / self.dpi

    def _draw(self, ax, primitive) -> None:
        if isinstance(primitive, Rect):
            ax.add_patch(Rectangle(
                (primitive.x, primitive.y), primitive.width, primitive.height,
                facecolor=primitive.fill or "none",
                edgecolor=primitive.stroke or "none",
                linewidth=self._points(primitive.stroke_width) if primitive.stroke else 0,
            ))
        elif isinstance(primitive, Line):
            ax.add_line(Line2D(
                [primitive.x1, primitive.x2], [primitive.y1, primitive.y2],
                color=primitive.color, linewidth=self._points(primitive.width),
                solid_capstyle="butt",
            ))
        elif isinstance(primitive, Polyline):
            xs = [x for x, _ in primitive.points]
            ys = [y for _, y in primitive.points]
            ax.add_line(Line2D(
                xs, ys,
                color=primitive.color, linewidth=self._points(primitive.width),
                # a lone point would otherwise draw nothing
                marker="o" if len(xs) == 1 else "None",
                markersize=self._points(4 * primitive.width),
                solid_joinstyle="round",
                snap=False,
                gid=primitive.gid,
            ))
        elif isinstance(primitive, Text):
            ax.text(
                primitive.x, primitive.y, primitive.text,
                fontsize=self._points(primitive.size),
                color=primitive.color,
                family=FONT_FAMILY,
                ha=primitive.ha,
                va=primitive.va,
                fontweight=primitive.weight,
                fontstyle=primitive.style,
                rotation=primitive.rotation,
                parse_math=False,
            )
        else:
            raise TypeError(f"unknown canvas primitive {type(primitive).__name__}")

    def encode(self, canvas: Canvas) -> bytes:
        with _RENDER_LOCK, matplotlib.rc_context(self.rc):
            fig = Figure(figsize=(canvas.width / self.dpi, canvas.height / self.dpi), dpi=self.dpi)
            ax = fig.add_axes((0, 0, 1, 1))
            ax.set_xlim(0, canvas.width)
            ax.set_ylim(canvas.height, 0)
            ax.set_axis_off()
            for primitive in canvas.primitives:
                self._draw(ax, primitive)

            buf = io.BytesIO()
            fig.savefig(buf, format=self.format, dpi=self.dpi, metadata=self.metadata)
        data = buf.getvalue()
        logger.debug("encoded %d primitives as %s (%d bytes)", len(canvas.primitives), self.format, len(data))
        return data


class RasterBackend(MatplotlibBackend):
    format = "png"
    dpi = RASTER_DPI


class VectorBackend(MatplotlibBackend):
    format = "svg"
    dpi = VECTOR_DPI
    rc = {
        "svg.fonttype": "none",
        "svg.hashsalt": SVG_HASH_SALT,
        "path.simplify": False,
    }
    metadata = {"Date": None}


BACKENDS: Dict[str, MatplotlibBackend] = {
    "png": RasterBackend(),
    "svg": VectorBackend(),
}


def check_format(fmt: str) -> str:
    key = fmt.lower().lstrip(".")
    if key not in BACKENDS:
        raise UnsupportedFormat(fmt)
    return key


def format_for_path(path: Union[str, Path]) -> str:
    suffix = Path(path).suffix
    if not suffix:
        raise UnsupportedFormat(str(path))
    return check_format(suffix)


def encode_canvas(canvas: Canvas, fmt: str) -> bytes:
    return BACKENDS[check_format(fmt)].encode(canvas)
