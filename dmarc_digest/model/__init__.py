from dmarc_digest.model.dmarc_aggregate_report import (
    AlignmentType,
    AuthResult,
    DateRange,
    DispositionType,
    DkimAuthResult,
    DkimresultType,
    DmarcresultType,
    Feedback,
    Identifier,
    PolicyEvaluated,
    PolicyOverrideReason,
    PolicyOverrideType,
    PolicyPublished,
    Record,
    ReportMetadata,
    Row,
    SpfAuthResult,
    SpfdomainScope,
    SpfresultType,
)

__all__ = [
    "AlignmentType",
    "AuthResult",
    "DateRange",
    "DispositionType",
    "DkimAuthResult",
    "DkimresultType",
    "DmarcresultType",
    "Feedback",
    "Identifier",
    "PolicyEvaluated",
    "PolicyOverrideReason",
    "PolicyOverrideType",
    "PolicyPublished",
    "Record",
    "ReportMetadata",
    "Row",
    "SpfAuthResult",
    "SpfdomainScope",
    "SpfresultType",
]
