from __future__ import annotations

import datetime as dt
from enum import Enum
from pathlib import Path
from typing import Dict, List, Literal, Optional, Tuple, Union

from pydantic import BaseModel, ConfigDict, Field, model_validator

from .rules import BENCHMARK_WORD


class Kpi(str, Enum):
    DAILY_ACTIVE_USERS = "Daily Active Users"
    MONTHLY_ACTIVE_USERS = "Monthly Active Users"
    SESSIONS = "Sessions"
    TOTAL_PLAYTIME = "Total Playtime"
    DAILY_REVENUE = "Daily Revenue"
    PAYING_USERS = "Paying Users"

    @classmethod
    def match_header(cls, cell: str) -> Optional[Tuple["Kpi", bool]]:
        """
        Match a header cell against the supported KPIs.

        Returns (kpi, is_benchmark), or None for an unrelated column.
        Accepts "<KPI>", "<KPI> Benchmark" and "Benchmark <KPI>".
        """
        name = " ".join(cell.split()).lower()
        benchmark = False
        if name.endswith(" " + BENCHMARK_WORD):
            name = name[: -len(BENCHMARK_WORD) - 1]
            benchmark = True
        elif name.startswith(BENCHMARK_WORD + " "):
            name = name[len(BENCHMARK_WORD) + 1:]
            benchmark = True

        for kpi in cls:
            if kpi.value.lower() == name:
                return kpi, benchmark
        return None


class _Frozen(BaseModel):
    model_config = ConfigDict(frozen=True)


# --- Parsed input ---

class Column(_Frozen):
    index: int
    name: str
    kpi: Kpi
    benchmark: bool = False


class Record(_Frozen):
    row: int
    date: dt.date
    values: Dict[str, Optional[float]] = Field(default_factory=dict)


class Table(_Frozen):
    columns: List[Column]
    records: List[Record]
    experience_id: Optional[int] = None


# --- Series ---

class Point(_Frozen):
    date: dt.date
    value: float


class Series(_Frozen):
    name: str
    points: List[Point]

    @model_validator(mode="after")
    def _dates_strictly_increasing(self) -> "Series":
        for prev, cur in zip(self.points, self.points[1:]):
            if cur.date <= prev.date:
                raise ValueError(f"series {self.name!r} dates not strictly increasing at {cur.date}")
        return self

    @property
    def dates(self) -> List[dt.date]:
        return [p.date for p in self.points]

    @property
    def values(self) -> List[float]:
        return [p.value for p in self.points]

    def __len__(self) -> int:
        return len(self.points)


class BenchmarkPresent(_Frozen):
    status: Literal["present"] = "present"
    series: Series


class BenchmarkAbsent(_Frozen):
    status: Literal["absent"] = "absent"
    reason: str


Benchmark = Union[BenchmarkPresent, BenchmarkAbsent]


class SeriesPair(_Frozen):
    kpi: Kpi
    analytics: Series
    benchmark: Benchmark = Field(discriminator="status")


class NormalizedSeries(Series):
    benchmark_mean: float


# --- Chart ---

class DateTick(_Frozen):
    value: dt.date
    label: str


class ValueTick(_Frozen):
    value: float
    label: str


class XAxis(_Frozen):
    minimum: dt.date
    maximum: dt.date
    ticks: List[DateTick] = Field(default_factory=list)


class YAxis(_Frozen):
    minimum: float
    maximum: float
    ticks: List[ValueTick] = Field(default_factory=list)


class PlottedSeries(_Frozen):
    label: str
    color: str
    points: List[Point]


class Chart(_Frozen):
    title: str
    subtitle: Optional[str] = None
    x_axis: XAxis
    y_axis: YAxis
    series: List[PlottedSeries]
    x_caption: str = "Date"
    y_caption: str = ""


# --- Results and reports ---

class ReportItem(BaseModel):
    row: Optional[int] = None
    column: Optional[str] = None
    issue: str
    value: Optional[str] = None
    action: str


class RenderResult(BaseModel):
    image: bytes
    format: str
    media_type: str
    normalized: bool = False
    points: int = 0
    warnings: List[ReportItem] = Field(default_factory=list)


class RenderOptions(BaseModel):
    input_path: Path
    output_path: Path = Path("plot.png")
    normalize: bool = False
    no_open: bool = False


# --- API envelopes ---

class EncodedImage(BaseModel):
    sha256: str
    format: str
    media_type: str
    content_b64: str


class ReportSummary(BaseModel):
    points: int = 0
    warnings: int = 0
    normalized: bool = False


class RenderReport(BaseModel):
    summary: ReportSummary
    warnings: List[ReportItem] = Field(default_factory=list)


class RenderResponse(BaseModel):
    image: EncodedImage
    report: RenderReport


class HealthResponse(BaseModel):
    ok: bool = True
