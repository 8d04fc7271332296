"""
Device-independent drawing surface.

Coordinates are canvas units with the origin at the top-left corner and y
growing downwards. Backends translate them to pixels or SVG units when the
canvas is encoded.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Optional, Tuple, Union


@dataclass(frozen=True)
class Rect:
    x: float
    y: float
    width: float
    height: float
    fill: Optional[str] = None
    stroke: Optional[str] = None
    stroke_width: float = 1.0


@dataclass(frozen=True)
class Line:
    x1: float
    y1: float
    x2: float
    y2: float
    color: str
    width: float = 1.0


@dataclass(frozen=True)
class Polyline:
    points: Tuple[Tuple[float, float], ...]
    color: str
    width: float = 1.0
    gid: Optional[str] = None


@dataclass(frozen=True)
class Text:
    x: float
    y: float
    text: str
    size: float
    color: str
    # matplotlib alignment names
    ha: str = "left"
    va: str = "baseline"
    weight: str = "normal"
    style: str = "normal"
    rotation: float = 0.0


Primitive = Union[Rect, Line, Polyline, Text]


@dataclass
class Canvas:
    width: int
    height: int
    primitives: List[Primitive] = field(default_factory=list)

    def rect(self, x, y, width, height, **style) -> None:
        self.primitives.append(Rect(x, y, width, height, **style))

    def line(self, x1, y1, x2, y2, color, width=1.0) -> None:
        self.primitives.append(Line(x1, y1, x2, y2, color, width))

    def polyline(self, points, color, width=1.0, gid=None) -> None:
        self.primitives.append(Polyline(tuple((float(x), float(y)) for x, y in points), color, width, gid))

    def text(self, x, y, text, size, color, **style) -> None:
        self.primitives.append(Text(x, y, text, size, color, **style))

    def polylines(self) -> List[Polyline]:
        return [p for p in self.primitives if isinstance(p, Polyline)]
