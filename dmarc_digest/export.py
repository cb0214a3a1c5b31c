import json
from datetime import datetime
from enum import Enum
from ipaddress import IPv4Address, IPv6Address
from typing import Any, Dict, Iterable, List, Union

from dataclasses_serialization.json import JSONSerializer

from dmarc_digest.model.dmarc_aggregate_report import (
    AlignmentType,
    DispositionType,
    DkimresultType,
    DmarcresultType,
    Feedback,
    PolicyOverrideType,
    SpfdomainScope,
    SpfresultType,
)


def _enum_serializer(member: Enum) -> str:
    return member.value


for _enum_cls in (
    AlignmentType,
    DispositionType,
    DkimresultType,
    DmarcresultType,
    PolicyOverrideType,
    SpfdomainScope,
    SpfresultType,
):
    JSONSerializer.register_serializer(_enum_cls)(_enum_serializer)


# false positive, pylint: disable=no-value-for-parameter
@JSONSerializer.register_serializer(datetime)
def datetime_serializer(moment: datetime) -> str:
    return moment.isoformat()


@JSONSerializer.register_serializer(IPv4Address)
def ipv4_serializer(address: IPv4Address) -> str:
    return str(address)


@JSONSerializer.register_serializer(IPv6Address)
def ipv6_serializer(address: IPv6Address) -> str:
    return str(address)


@JSONSerializer.register_serializer(tuple)
def tuple_serializer(items: tuple) -> List[Any]:
    return [JSONSerializer.serialize(item) for item in items]


def feedback_to_json(feedback: Feedback) -> Dict[str, Any]:
    return JSONSerializer.serialize(feedback)


def reports_to_json(reports: Iterable[Feedback], indent: Union[int, None] = 2) -> str:
    return json.dumps([feedback_to_json(report) for report in reports], indent=indent)
