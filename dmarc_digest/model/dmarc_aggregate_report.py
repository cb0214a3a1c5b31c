from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from ipaddress import IPv4Address, IPv6Address
from typing import Optional, Tuple, Union


class AlignmentType(Enum):
    R = "r"
    S = "s"


class DispositionType(Enum):
    NONE_VALUE = "none"
    QUARANTINE = "quarantine"
    REJECT = "reject"


class DmarcresultType(Enum):
    PASS_VALUE = "pass"
    FAIL = "fail"


class PolicyOverrideType(Enum):
    FORWARDED = "forwarded"
    SAMPLED_OUT = "sampled_out"
    TRUSTED_FORWARDER = "trusted_forwarder"
    MAILING_LIST = "mailing_list"
    LOCAL_POLICY = "local_policy"
    OTHER = "other"


class DkimresultType(Enum):
    NONE_VALUE = "none"
    PASS_VALUE = "pass"
    FAIL = "fail"
    POLICY = "policy"
    NEUTRAL = "neutral"
    TEMPERROR = "temperror"
    PERMERROR = "permerror"


class SpfdomainScope(Enum):
    HELO = "helo"
    MFROM = "mfrom"


class SpfresultType(Enum):
    NONE_VALUE = "none"
    NEUTRAL = "neutral"
    PASS_VALUE = "pass"
    FAIL = "fail"
    SOFTFAIL = "softfail"
    # Commonly implemented as "unknown".
    TEMPERROR = "temperror"
    # Commonly implemented as "error".
    PERMERROR = "permerror"


@dataclass(frozen=True)
class DateRange:
    """Time range in UTC covered by the messages in a report."""

    begin: datetime
    end: datetime


@dataclass(frozen=True)
class ReportMetadata:
    org_name: str
    email: str
    report_id: str
    date_range: DateRange
    extra_contact_info: Optional[str] = None
    errors: Tuple[str, ...] = ()


@dataclass(frozen=True)
class PolicyPublished:
    """The DMARC policy that applied to the messages in a report.

    ``sp`` is always set: producers that omit it get the value of ``p``.
    """

    domain: str
    p: DispositionType
    sp: DispositionType
    pct: int
    fo: str = ""
    adkim: Optional[AlignmentType] = None
    aspf: Optional[AlignmentType] = None


@dataclass(frozen=True)
class PolicyOverrideReason:
    """Why the applied disposition differs from the published policy.

    Producers use override types outside the schema. Those map to
    ``PolicyOverrideType.OTHER`` and the original text is kept in
    ``raw_type``.
    """

    type: PolicyOverrideType = PolicyOverrideType.OTHER
    comment: Optional[str] = None
    raw_type: Optional[str] = None


@dataclass(frozen=True)
class PolicyEvaluated:
    disposition: DispositionType
    dkim: DmarcresultType
    spf: DmarcresultType
    reasons: Tuple[PolicyOverrideReason, ...] = ()


@dataclass(frozen=True)
class Row:
    source_ip: Union[IPv4Address, IPv6Address]
    count: int
    policy_evaluated: PolicyEvaluated


@dataclass(frozen=True)
class Identifier:
    header_from: str
    envelope_to: Optional[str] = None
    envelope_from: Optional[str] = None


@dataclass(frozen=True)
class DkimAuthResult:
    domain: str
    result: DkimresultType
    selector: Optional[str] = None
    human_result: Optional[str] = None


@dataclass(frozen=True)
class SpfAuthResult:
    domain: str
    result: SpfresultType
    scope: Optional[SpfdomainScope] = None


@dataclass(frozen=True)
class AuthResult:
    spf: Tuple[SpfAuthResult, ...]
    dkim: Tuple[DkimAuthResult, ...] = ()


@dataclass(frozen=True)
class Record:
    row: Row
    identifiers: Identifier
    auth_results: AuthResult


@dataclass(frozen=True)
class Feedback:
    report_metadata: ReportMetadata
    policy_published: PolicyPublished
    records: Tuple[Record, ...] = field(default_factory=tuple)
    version: Optional[float] = None
