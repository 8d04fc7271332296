import datetime as dt

import pytest

from kpiplot.errors import EmptyInput, UnrecognizedHeader
from kpiplot.extract import extract_series
from kpiplot.models import BenchmarkAbsent, BenchmarkPresent, Kpi
from kpiplot.parse import parse_table


def pair_for(text):
    return extract_series(parse_table(text.encode("utf-8")))


def test_pairs_analytics_with_benchmark():
    pair = pair_for(
        "Date,Daily Active Users,Daily Active Users Benchmark\n"
        "2024-01-01,100,50\n"
        "2024-01-02,110,55\n"
    )
    assert pair.kpi is Kpi.DAILY_ACTIVE_USERS
    assert pair.analytics.values == [100.0, 110.0]
    assert isinstance(pair.benchmark, BenchmarkPresent)
    assert pair.benchmark.series.values == [50.0, 55.0]


def test_missing_analytics_drops_benchmark_in_lockstep():
    pair = pair_for(
        "Date,Sessions,Sessions Benchmark\n"
        "2024-01-01,10,1\n"
        "2024-01-02,,2\n"
        "2024-01-03,30,3\n"
    )
    assert pair.analytics.dates == [dt.date(2024, 1, 1), dt.date(2024, 1, 3)]
    assert pair.benchmark.series.dates == [dt.date(2024, 1, 1), dt.date(2024, 1, 3)]


def test_sparse_benchmark_keeps_present_points():
    pair = pair_for(
        "Date,Sessions,Sessions Benchmark\n"
        "2024-01-01,10,\n"
        "2024-01-02,20,4\n"
    )
    assert len(pair.analytics) == 2
    assert pair.benchmark.series.dates == [dt.date(2024, 1, 2)]


def test_no_benchmark_column_is_absent():
    pair = pair_for("Date,Sessions\n2024-01-01,10\n")
    assert isinstance(pair.benchmark, BenchmarkAbsent)
    assert "Sessions" in pair.benchmark.reason


def test_empty_benchmark_column_is_absent():
    pair = pair_for("Date,Sessions,Sessions Benchmark\n2024-01-01,10,\n2024-01-02,11,\n")
    assert isinstance(pair.benchmark, BenchmarkAbsent)


def test_other_kpis_benchmark_is_not_used():
    pair = pair_for("Date,Sessions,Paying Users Benchmark\n2024-01-01,10,3\n")
    assert isinstance(pair.benchmark, BenchmarkAbsent)


def test_first_kpi_in_header_order_wins():
    pair = pair_for("Date,Paying Users,Sessions\n2024-01-01,1,2\n")
    assert pair.kpi is Kpi.PAYING_USERS


def test_sorted_by_date_and_later_duplicate_wins():
    pair = pair_for(
        "Date,Sessions\n"
        "2024-01-03,3\n"
        "2024-01-01,1\n"
        "2024-01-03,33\n"
    )
    assert pair.analytics.dates == [dt.date(2024, 1, 1), dt.date(2024, 1, 3)]
    assert pair.analytics.values == [1.0, 33.0]


def test_all_analytics_missing():
    with pytest.raises(EmptyInput):
        pair_for("Date,Sessions,Sessions Benchmark\n2024-01-01,,4\n")


def test_benchmark_only_header():
    with pytest.raises(UnrecognizedHeader):
        pair_for("Date,Sessions Benchmark\n2024-01-01,4\n")
