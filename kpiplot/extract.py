from __future__ import annotations

import logging
from typing import Dict, List, Optional

from .errors import EmptyInput, UnrecognizedHeader
from .models import (
    BenchmarkAbsent,
    BenchmarkPresent,
    Column,
    Point,
    Record,
    Series,
    SeriesPair,
    Table,
)

logger = logging.getLogger(__name__)


def target_columns(table: Table) -> tuple[Column, Optional[Column]]:
    """First analytics KPI in header order, and its benchmark column if any."""
    analytics = next((c for c in table.columns if not c.benchmark), None)
    if analytics is None:
        raise UnrecognizedHeader("Header has benchmark columns but no analytics column")
    benchmark = next((c for c in table.columns if c.benchmark and c.kpi == analytics.kpi), None)
    return analytics, benchmark


def _latest_per_date(records: List[Record]) -> List[Record]:
    by_date: Dict = {}
    for record in records:
        if record.date in by_date:
            logger.debug("row %d repeats date %s; keeping the later row", record.row, record.date)
        by_date[record.date] = record
    return [by_date[d] for d in sorted(by_date)]


def extract_series(table: Table) -> SeriesPair:
    analytics_col, bench_col = target_columns(table)
    logger.debug("plotting %s (benchmark column: %s)", analytics_col.name, bench_col and bench_col.name)

    # Drop analytics gaps first so a gap never shadows an earlier valid row
    usable = [r for r in table.records if r.values.get(analytics_col.name) is not None]
    usable = _latest_per_date(usable)
    if not usable:
        raise EmptyInput(f"No values in column {analytics_col.name!r}")

    analytics = Series(
        name=analytics_col.name,
        points=[Point(date=r.date, value=r.values[analytics_col.name]) for r in usable],
    )

    if bench_col is None:
        benchmark = BenchmarkAbsent(reason=f"no benchmark column for {analytics_col.kpi.value}")
    else:
        bench_points = [
            Point(date=r.date, value=r.values[bench_col.name])
            for r in usable
            if r.values.get(bench_col.name) is not None
        ]
        if bench_points:
            benchmark = BenchmarkPresent(series=Series(name=bench_col.name, points=bench_points))
        else:
            benchmark = BenchmarkAbsent(reason=f"column {bench_col.name!r} has no values")

    return SeriesPair(kpi=analytics_col.kpi, analytics=analytics, benchmark=benchmark)
