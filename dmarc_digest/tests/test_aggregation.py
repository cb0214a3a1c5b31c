from datetime import datetime, timezone

import pytest

from dmarc_digest.aggregation import (
    DeduplicationStrategy,
    aggregate,
    deduplicate,
    flatten_records,
    sort_reports,
    timeframe,
)
from dmarc_digest.model import DateRange
from dmarc_digest.model.tests.sample_data import create_feedback


def ids(reports):
    return [report.report_metadata.report_id for report in reports]


def test_sorts_by_begin():
    reports = [
        create_feedback(report_id="c", begin=300, end=400),
        create_feedback(report_id="a", begin=100, end=200),
        create_feedback(report_id="b", begin=200, end=300),
    ]
    assert ids(sort_reports(reports)) == ["a", "b", "c"]


def test_sort_is_stable():
    reports = [
        create_feedback(report_id="x", begin=100),
        create_feedback(report_id="y", begin=100),
    ]
    assert ids(sort_reports(reports)) == ["x", "y"]


def test_adjacent_deduplication_keeps_first_of_each_run():
    first = create_feedback(report_id="1", begin=100, end=150)
    second = create_feedback(report_id="1", begin=100, end=200)
    reports = [first, second, create_feedback(report_id="2", begin=300)]

    deduplicated = deduplicate(reports)

    assert ids(deduplicated) == ["1", "2"]
    assert deduplicated[0] is first


def test_adjacent_deduplication_keeps_non_adjacent_duplicates():
    reports = [
        create_feedback(report_id="1", begin=100),
        create_feedback(report_id="2", begin=200),
        create_feedback(report_id="1", begin=300),
    ]
    assert ids(deduplicate(reports, DeduplicationStrategy.ADJACENT)) == ["1", "2", "1"]


def test_report_id_deduplication_drops_all_duplicates():
    reports = [
        create_feedback(report_id="1", begin=100),
        create_feedback(report_id="2", begin=200),
        create_feedback(report_id="1", begin=300),
    ]
    assert ids(deduplicate(reports, DeduplicationStrategy.REPORT_ID)) == ["1", "2"]


def test_timeframe_spans_all_reports():
    reports = [
        create_feedback(report_id="1", begin=200, end=250),
        create_feedback(report_id="2", begin=100, end=150),
        create_feedback(report_id="3", begin=300, end=290),
    ]
    assert timeframe(reports) == DateRange(
        begin=datetime.fromtimestamp(100, tz=timezone.utc),
        end=datetime.fromtimestamp(290, tz=timezone.utc),
    )


def test_timeframe_of_nothing_is_none():
    assert timeframe([]) is None


def test_flatten_records_keeps_order():
    reports = [create_feedback(report_id="1"), create_feedback(report_id="2")]
    assert [r.identifiers.header_from for r in flatten_records(reports)] == [
        "report-1.example.com",
        "report-2.example.com",
    ]


@pytest.mark.parametrize("strategy", list(DeduplicationStrategy))
def test_aggregate(strategy):
    reports = [
        create_feedback(report_id="late", begin=500, end=600),
        create_feedback(report_id="early", begin=100, end=200),
        create_feedback(report_id="early", begin=100, end=200),
    ]

    result = aggregate(reports, strategy)

    assert ids(result.reports) == ["early", "late"]
    assert [r.identifiers.header_from for r in result.records] == [
        "report-early.example.com",
        "report-late.example.com",
    ]
    assert result.timeframe == DateRange(
        begin=datetime.fromtimestamp(100, tz=timezone.utc),
        end=datetime.fromtimestamp(600, tz=timezone.utc),
    )


def test_aggregate_of_nothing():
    result = aggregate([])
    assert result.reports == ()
    assert result.records == ()
    assert result.timeframe is None
