from dataclasses import dataclass
from enum import Enum
from itertools import groupby
from typing import Iterable, List, Optional, Tuple

from dmarc_digest.model.dmarc_aggregate_report import DateRange, Feedback, Record


class DeduplicationStrategy(Enum):
    # Only reports with equal IDs that are next to each other after sorting.
    ADJACENT = "adjacent"
    REPORT_ID = "report_id"


@dataclass(frozen=True)
class Aggregate:
    reports: Tuple[Feedback, ...]
    records: Tuple[Record, ...]
    timeframe: Optional[DateRange]


def _report_id(report: Feedback) -> str:
    return report.report_metadata.report_id


def sort_reports(reports: Iterable[Feedback]) -> List[Feedback]:
    return sorted(reports, key=lambda report: report.report_metadata.date_range.begin)


def deduplicate(
    reports: Iterable[Feedback],
    strategy: DeduplicationStrategy = DeduplicationStrategy.ADJACENT,
) -> List[Feedback]:
    """Drops repeated reports, keeping the first one of each report ID."""
    if strategy is DeduplicationStrategy.ADJACENT:
        return [next(group) for _, group in groupby(reports, key=_report_id)]

    seen = set()
    unique = []
    for report in reports:
        if _report_id(report) not in seen:
            seen.add(_report_id(report))
            unique.append(report)
    return unique


def timeframe(reports: Iterable[Feedback]) -> Optional[DateRange]:
    date_ranges = [report.report_metadata.date_range for report in reports]
    if not date_ranges:
        return None
    return DateRange(
        begin=min(date_range.begin for date_range in date_ranges),
        end=max(date_range.end for date_range in date_ranges),
    )


def flatten_records(reports: Iterable[Feedback]) -> List[Record]:
    return [record for report in reports for record in report.records]


def aggregate(
    reports: Iterable[Feedback],
    strategy: DeduplicationStrategy = DeduplicationStrategy.ADJACENT,
) -> Aggregate:
    retained = deduplicate(sort_reports(reports), strategy)
    return Aggregate(
        reports=tuple(retained),
        records=tuple(flatten_records(retained)),
        timeframe=timeframe(retained),
    )
