"""Conversion between the permissive XML bindings and the canonical model.

Report generators deviate from the aggregate report schema in a number of
ways. The lenient parts are handled here: optional elements get their
defaults, ``sp`` inherits ``p``, ``fo`` defaults to an empty string and
unknown override reasons become ``PolicyOverrideType.OTHER``. Everything
else that cannot be typed raises :class:`SchemaError`.
"""

import re
from datetime import datetime, timezone
from enum import Enum
from ipaddress import ip_address
from typing import List, Optional, Type, TypeVar

from dmarc_digest.errors import SchemaError
from dmarc_digest.model import xml_bindings as x
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

E = TypeVar("E", bound=Enum)
T = TypeVar("T")

# int() also accepts underscores and non-ASCII digits.
_INTEGER = re.compile(r"[+-]?[0-9]+")


def _required(value: Optional[T], path: str) -> T:
    if value is None:
        raise SchemaError(path, "missing required element")
    return value


def _text(value: Optional[str], path: str) -> str:
    return _required(value, path).strip()


def _optional_text(value: Optional[str]) -> Optional[str]:
    return None if value is None else value.strip()


def _enum(enum_cls: Type[E], value: Optional[str], path: str) -> E:
    text = _text(value, path)
    try:
        return enum_cls(text.lower())
    except ValueError:
        raise SchemaError(
            path, f"'{text}' is not a valid {enum_cls.__name__}"
        ) from None


def _optional_enum(enum_cls: Type[E], value: Optional[str], path: str) -> Optional[E]:
    if value is None or not value.strip():
        return None
    return _enum(enum_cls, value, path)


def _int(value: Optional[str], path: str, *, minimum=None, maximum=None) -> int:
    text = _text(value, path)
    if not _INTEGER.fullmatch(text):
        raise SchemaError(path, f"'{text}' is not an integer")
    number = int(text)
    if (minimum is not None and number < minimum) or (
        maximum is not None and number > maximum
    ):
        raise SchemaError(path, f"{number} is out of range")
    return number


def _timestamp(value: Optional[str], path: str) -> datetime:
    seconds = _int(value, path)
    try:
        return datetime.fromtimestamp(seconds, tz=timezone.utc)
    except (OverflowError, OSError, ValueError) as err:
        raise SchemaError(path, f"invalid timestamp {seconds}: {err}") from None


def _normalize_date_range(raw: x.ReportMetadataType, path: str) -> DateRange:
    if raw.date_range is not None:
        date_range, path = raw.date_range, f"{path}/date_range"
    else:
        date_range = _required(raw.data_range, f"{path}/date_range")
        path = f"{path}/data_range"
    return DateRange(
        begin=_timestamp(date_range.begin, f"{path}/begin"),
        end=_timestamp(date_range.end, f"{path}/end"),
    )


def _normalize_metadata(raw: Optional[x.ReportMetadataType], path: str) -> ReportMetadata:
    raw = _required(raw, path)
    return ReportMetadata(
        org_name=_text(raw.org_name, f"{path}/org_name"),
        email=_text(raw.email, f"{path}/email"),
        extra_contact_info=_optional_text(raw.extra_contact_info),
        report_id=_text(raw.report_id, f"{path}/report_id"),
        date_range=_normalize_date_range(raw, path),
        errors=tuple(error.strip() for error in raw.error if error is not None),
    )


def _normalize_policy_published(
    raw: Optional[x.PolicyPublishedType], path: str
) -> PolicyPublished:
    raw = _required(raw, path)
    p = _enum(DispositionType, raw.p, f"{path}/p")
    sp = _optional_enum(DispositionType, raw.sp, f"{path}/sp")
    return PolicyPublished(
        domain=_text(raw.domain, f"{path}/domain"),
        adkim=_optional_enum(AlignmentType, raw.adkim, f"{path}/adkim"),
        aspf=_optional_enum(AlignmentType, raw.aspf, f"{path}/aspf"),
        p=p,
        # Subdomains inherit the domain policy unless stated otherwise.
        sp=p if sp is None else sp,
        pct=_int(raw.pct, f"{path}/pct", minimum=0, maximum=100),
        fo=_optional_text(raw.fo) or "",
    )


def _normalize_reason(raw: x.PolicyOverrideReasonType) -> PolicyOverrideReason:
    text = _optional_text(raw.type)
    comment = _optional_text(raw.comment)
    if not text:
        return PolicyOverrideReason(comment=comment)
    try:
        return PolicyOverrideReason(
            type=PolicyOverrideType(text.lower()), comment=comment
        )
    except ValueError:
        return PolicyOverrideReason(
            type=PolicyOverrideType.OTHER, comment=comment, raw_type=text
        )


def _normalize_row(raw: Optional[x.RowType], path: str) -> Row:
    raw = _required(raw, path)
    source_ip = _text(raw.source_ip, f"{path}/source_ip")
    try:
        ip = ip_address(source_ip)
    except ValueError:
        raise SchemaError(
            f"{path}/source_ip", f"'{source_ip}' is not an IP address"
        ) from None

    evaluated_path = f"{path}/policy_evaluated"
    evaluated = _required(raw.policy_evaluated, evaluated_path)
    return Row(
        source_ip=ip,
        count=_int(raw.count, f"{path}/count", minimum=0),
        policy_evaluated=PolicyEvaluated(
            disposition=_enum(
                DispositionType, evaluated.disposition, f"{evaluated_path}/disposition"
            ),
            dkim=_enum(DmarcresultType, evaluated.dkim, f"{evaluated_path}/dkim"),
            spf=_enum(DmarcresultType, evaluated.spf, f"{evaluated_path}/spf"),
            reasons=tuple(_normalize_reason(reason) for reason in evaluated.reason),
        ),
    )


def _normalize_identifiers(raw: Optional[x.IdentifierType], path: str) -> Identifier:
    raw = _required(raw, path)
    return Identifier(
        envelope_to=_optional_text(raw.envelope_to),
        envelope_from=_optional_text(raw.envelope_from),
        header_from=_text(raw.header_from, f"{path}/header_from"),
    )


def _normalize_dkim(raw: x.DkimAuthResultType, path: str) -> DkimAuthResult:
    return DkimAuthResult(
        domain=_text(raw.domain, f"{path}/domain"),
        selector=_optional_text(raw.selector),
        result=_enum(DkimresultType, raw.result, f"{path}/result"),
        human_result=_optional_text(raw.human_result),
    )


def _normalize_spf(raw: x.SpfAuthResultType, path: str) -> SpfAuthResult:
    return SpfAuthResult(
        domain=_text(raw.domain, f"{path}/domain"),
        scope=_optional_enum(SpfdomainScope, raw.scope, f"{path}/scope"),
        result=_enum(SpfresultType, raw.result, f"{path}/result"),
    )


def _normalize_auth_results(
    raw: Optional[x.AuthResultType], path: str
) -> AuthResult:
    raw = _required(raw, path)
    if not raw.spf:
        raise SchemaError(f"{path}/spf", "at least one SPF result is required")
    return AuthResult(
        dkim=tuple(
            _normalize_dkim(dkim, f"{path}/dkim[{i}]")
            for i, dkim in enumerate(raw.dkim, start=1)
        ),
        spf=tuple(
            _normalize_spf(spf, f"{path}/spf[{i}]")
            for i, spf in enumerate(raw.spf, start=1)
        ),
    )


def _normalize_record(raw: x.RecordType, path: str) -> Record:
    return Record(
        row=_normalize_row(raw.row, f"{path}/row"),
        identifiers=_normalize_identifiers(raw.identifiers, f"{path}/identifiers"),
        auth_results=_normalize_auth_results(raw.auth_results, f"{path}/auth_results"),
    )


def normalize_feedback(raw: x.FeedbackType) -> Feedback:
    path = "feedback"
    version = _optional_text(raw.version)
    try:
        parsed_version = float(version) if version else None
    except ValueError:
        raise SchemaError(f"{path}/version", f"'{version}' is not a number") from None

    if not raw.record:
        raise SchemaError(f"{path}/record", "at least one record is required")

    return Feedback(
        version=parsed_version,
        report_metadata=_normalize_metadata(
            raw.report_metadata, f"{path}/report_metadata"
        ),
        policy_published=_normalize_policy_published(
            raw.policy_published, f"{path}/policy_published"
        ),
        records=tuple(
            _normalize_record(record, f"{path}/record[{i}]")
            for i, record in enumerate(raw.record, start=1)
        ),
    )


def _value(member: Optional[Enum]) -> Optional[str]:
    return None if member is None else member.value


def _epoch(moment: datetime) -> str:
    return str(int(moment.timestamp()))


def _denormalize_reasons(
    reasons: List[PolicyOverrideReason],
) -> List[x.PolicyOverrideReasonType]:
    return [
        x.PolicyOverrideReasonType(
            type=reason.raw_type or reason.type.value, comment=reason.comment
        )
        for reason in reasons
    ]


def _denormalize_record(record: Record) -> x.RecordType:
    evaluated = record.row.policy_evaluated
    return x.RecordType(
        row=x.RowType(
            source_ip=str(record.row.source_ip),
            count=str(record.row.count),
            policy_evaluated=x.PolicyEvaluatedType(
                disposition=evaluated.disposition.value,
                dkim=evaluated.dkim.value,
                spf=evaluated.spf.value,
                reason=_denormalize_reasons(list(evaluated.reasons)),
            ),
        ),
        identifiers=x.IdentifierType(
            envelope_to=record.identifiers.envelope_to,
            envelope_from=record.identifiers.envelope_from,
            header_from=record.identifiers.header_from,
        ),
        auth_results=x.AuthResultType(
            dkim=[
                x.DkimAuthResultType(
                    domain=dkim.domain,
                    selector=dkim.selector,
                    result=dkim.result.value,
                    human_result=dkim.human_result,
                )
                for dkim in record.auth_results.dkim
            ],
            spf=[
                x.SpfAuthResultType(
                    domain=spf.domain,
                    scope=_value(spf.scope),
                    result=spf.result.value,
                )
                for spf in record.auth_results.spf
            ],
        ),
    )


def denormalize_feedback(feedback: Feedback) -> x.FeedbackType:
    metadata = feedback.report_metadata
    policy = feedback.policy_published
    return x.FeedbackType(
        version=None if feedback.version is None else str(feedback.version),
        report_metadata=x.ReportMetadataType(
            org_name=metadata.org_name,
            email=metadata.email,
            extra_contact_info=metadata.extra_contact_info,
            report_id=metadata.report_id,
            date_range=x.DateRangeType(
                begin=_epoch(metadata.date_range.begin),
                end=_epoch(metadata.date_range.end),
            ),
            error=list(metadata.errors),
        ),
        policy_published=x.PolicyPublishedType(
            domain=policy.domain,
            adkim=_value(policy.adkim),
            aspf=_value(policy.aspf),
            p=policy.p.value,
            sp=policy.sp.value,
            pct=str(policy.pct),
            fo=policy.fo,
        ),
        record=[_denormalize_record(record) for record in feedback.records],
    )
