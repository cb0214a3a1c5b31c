"""Permissive xsdata bindings for the DMARC aggregate report XML.

Every leaf is kept as optional text so that no vendor deviation fails the
parse itself. Typing, defaults and validation happen in
:mod:`dmarc_digest.model.normalization`.
"""

from dataclasses import dataclass, field
from typing import List, Optional


def _element():
    return field(
        default=None,
        metadata={"type": "Element", "namespace": ""},
    )


def _elements():
    return field(
        default_factory=list,
        metadata={"type": "Element", "namespace": ""},
    )


@dataclass
class DateRangeType:
    begin: Optional[str] = _element()
    end: Optional[str] = _element()


@dataclass
class ReportMetadataType:
    org_name: Optional[str] = _element()
    email: Optional[str] = _element()
    extra_contact_info: Optional[str] = _element()
    report_id: Optional[str] = _element()
    date_range: Optional[DateRangeType] = _element()
    # Misspelling emitted by some report generators.
    data_range: Optional[DateRangeType] = _element()
    error: List[str] = _elements()


@dataclass
class PolicyPublishedType:
    domain: Optional[str] = _element()
    adkim: Optional[str] = _element()
    aspf: Optional[str] = _element()
    p: Optional[str] = _element()
    sp: Optional[str] = _element()
    pct: Optional[str] = _element()
    fo: Optional[str] = _element()


@dataclass
class PolicyOverrideReasonType:
    type: Optional[str] = _element()
    comment: Optional[str] = _element()


@dataclass
class PolicyEvaluatedType:
    disposition: Optional[str] = _element()
    dkim: Optional[str] = _element()
    spf: Optional[str] = _element()
    reason: List[PolicyOverrideReasonType] = _elements()


@dataclass
class RowType:
    source_ip: Optional[str] = _element()
    count: Optional[str] = _element()
    policy_evaluated: Optional[PolicyEvaluatedType] = _element()


@dataclass
class IdentifierType:
    envelope_to: Optional[str] = _element()
    envelope_from: Optional[str] = _element()
    header_from: Optional[str] = _element()


@dataclass
class DkimAuthResultType:
    class Meta:
        name = "DKIMAuthResultType"

    domain: Optional[str] = _element()
    selector: Optional[str] = _element()
    result: Optional[str] = _element()
    human_result: Optional[str] = _element()


@dataclass
class SpfAuthResultType:
    class Meta:
        name = "SPFAuthResultType"

    domain: Optional[str] = _element()
    scope: Optional[str] = _element()
    result: Optional[str] = _element()


@dataclass
class AuthResultType:
    dkim: List[DkimAuthResultType] = _elements()
    spf: List[SpfAuthResultType] = _elements()


@dataclass
class RecordType:
    row: Optional[RowType] = _element()
    identifiers: Optional[IdentifierType] = _element()
    auth_results: Optional[AuthResultType] = _element()


@dataclass
class FeedbackType:
    class Meta:
        name = "feedback"

    version: Optional[str] = _element()
    report_metadata: Optional[ReportMetadataType] = _element()
    policy_published: Optional[PolicyPublishedType] = _element()
    record: List[RecordType] = _elements()
