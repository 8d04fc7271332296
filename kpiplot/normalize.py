"""
Benchmark-ratio normalization.

Each analytics point is scaled by mean(benchmark) / benchmark at the same
date, which flattens out platform-wide swings the benchmark captures.
"""

from __future__ import annotations

import logging
from typing import List, Tuple

from .models import BenchmarkPresent, NormalizedSeries, Point, ReportItem, SeriesPair

logger = logging.getLogger(__name__)


def benchmark_mean(values: List[float]) -> float:
    # Summed in date order so the result is reproducible
    total = 0.0
    for value in values:
        total += value
    return total / len(values)


def normalize_series(pair: SeriesPair) -> Tuple[NormalizedSeries, List[ReportItem]]:
    if not isinstance(pair.benchmark, BenchmarkPresent):
        raise ValueError("normalize_series requires a present benchmark series")

    bench = pair.benchmark.series
    mean = benchmark_mean(bench.values)
    by_date = {p.date: p.value for p in bench.points}
    warnings: List[ReportItem] = []

    points: List[Point] = []
    for point in pair.analytics.points:
        reference = by_date.get(point.date)
        if reference is None:
            points.append(point)
            continue
        if reference == 0.0:
            logger.debug("benchmark is zero on %s; point left unnormalized", point.date)
            warnings.append(ReportItem(
                column=bench.name,
                issue="zero_benchmark",
                value=point.date.isoformat(),
                action="left_unnormalized",
            ))
            points.append(point)
            continue
        points.append(Point(date=point.date, value=point.value * (mean / reference)))

    normalized = NormalizedSeries(name=pair.analytics.name, points=points, benchmark_mean=mean)
    return normalized, warnings
