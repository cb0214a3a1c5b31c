"""Plain text presentation of normalized reports."""

from datetime import datetime
from typing import Iterable, List, Optional, Sequence

from dmarc_digest.aggregation import Aggregate
from dmarc_digest.model.dmarc_aggregate_report import (
    DateRange,
    DkimAuthResult,
    DmarcresultType,
    Feedback,
    PolicyOverrideReason,
    Record,
    SpfAuthResult,
)

RECORD_COLUMNS = (
    "From domain",
    "IP address",
    "Count",
    "Disposition",
    "Override Reasons",
    "DKIM",
    "SPF",
    "DKIM Auth Result",
    "SPF Auth Result",
)

_GREEN = "\x1b[92m"
_RED = "\x1b[91m"
_RESET = "\x1b[0m"


def format_timestamp(moment: datetime) -> str:
    return moment.strftime("%Y-%m-%d %H:%M:%S UTC")


def format_date_range(date_range: DateRange) -> str:
    return f"{format_timestamp(date_range.begin)} to {format_timestamp(date_range.end)}"


def format_reason(reason: PolicyOverrideReason) -> str:
    text = reason.raw_type or reason.type.value
    if reason.comment:
        text += f" ({reason.comment})"
    return text


def format_dkim_auth_result(result: DkimAuthResult) -> str:
    details = [f"d={result.domain}"]
    if result.selector:
        details.append(f"selector={result.selector}")
    if result.human_result:
        details.append(f"human_result={result.human_result}")
    return f"{result.result.value} ({', '.join(details)})"


def format_spf_auth_result(result: SpfAuthResult) -> str:
    details = [f"d={result.domain}"]
    if result.scope:
        details.append(f"scope={result.scope.value}")
    return f"{result.result.value} ({', '.join(details)})"


def _join(items: Iterable[str]) -> str:
    return ", ".join(items)


def record_row(record: Record) -> List[str]:
    evaluated = record.row.policy_evaluated
    return [
        record.identifiers.header_from,
        str(record.row.source_ip),
        str(record.row.count),
        evaluated.disposition.value,
        _join(format_reason(reason) for reason in evaluated.reasons),
        evaluated.dkim.value,
        evaluated.spf.value,
        _join(format_dkim_auth_result(dkim) for dkim in record.auth_results.dkim),
        _join(format_spf_auth_result(spf) for spf in record.auth_results.spf),
    ]


def _colorize(cell: str, result: DmarcresultType) -> str:
    color = _GREEN if result is DmarcresultType.PASS_VALUE else _RED
    return f"{color}{cell}{_RESET}"


def _format_line(cells: Sequence[str], widths: Sequence[int]) -> List[str]:
    return [f" {cell.ljust(width)} " for cell, width in zip(cells, widths)]


def build_records_table(records: Sequence[Record], *, colors: bool = False) -> str:
    """Renders records as a table in the style of psql output."""
    rows = [record_row(record) for record in records]
    widths = [
        max([len(header)] + [len(row[i]) for row in rows])
        for i, header in enumerate(RECORD_COLUMNS)
    ]

    lines = [
        "|".join(_format_line(RECORD_COLUMNS, widths)).rstrip(),
        "+".join("-" * (width + 2) for width in widths),
    ]
    for record, row in zip(records, rows):
        cells = _format_line(row, widths)
        if colors:
            evaluated = record.row.policy_evaluated
            cells[5] = _colorize(cells[5], evaluated.dkim)
            cells[6] = _colorize(cells[6], evaluated.spf)
        lines.append("|".join(cells).rstrip())
    return "\n".join(lines)


def _section(title: str) -> List[str]:
    return [f" {title}", "-" * (len(title) + 2)]


def render_feedback(feedback: Feedback, *, colors: bool = False) -> str:
    metadata = feedback.report_metadata
    policy = feedback.policy_published

    lines = _section("DMARC Report Details")
    if feedback.version is not None:
        lines.append(f"Version: {feedback.version}")
    lines.append(f"Provider: {metadata.org_name}")
    lines.append(f"Coverage: {format_date_range(metadata.date_range)}")
    lines.append(f"Report ID: {metadata.report_id}")
    lines.append(f"Email contact: {metadata.email}")
    if metadata.extra_contact_info:
        lines.append(f"Extra contact: {metadata.extra_contact_info}")
    lines.append(f"Errors: {_join(metadata.errors) or 'none'}")
    lines.append("")

    lines.extend(_section("Policy Details"))
    lines.append(f"Domain: {policy.domain}")
    lines.append(f"Policy: {policy.p.value}")
    lines.append(f"Sub-domain policy: {policy.sp.value}")
    if policy.adkim:
        lines.append(f"DKIM alignment: {policy.adkim.value}")
    if policy.aspf:
        lines.append(f"SPF alignment: {policy.aspf.value}")
    lines.append(f"Percentage: {policy.pct}")
    if policy.fo:
        lines.append(f"Failure options: {policy.fo}")
    lines.append("")

    lines.append(build_records_table(feedback.records, colors=colors))
    return "\n".join(lines) + "\n"


def render_timeframe(date_range: Optional[DateRange]) -> str:
    if date_range is None:
        return "Timeframe: no reports"
    return f"Timeframe: {format_date_range(date_range)}"


def render_aggregate(aggregate: Aggregate, *, colors: bool = False) -> str:
    return "\n".join(
        [
            render_timeframe(aggregate.timeframe),
            "",
            build_records_table(aggregate.records, colors=colors),
        ]
    )
