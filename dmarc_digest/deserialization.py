import gzip
import io
import re
import zlib
from typing import Callable, Dict
from zipfile import BadZipFile, ZipFile

import structlog
from xsdata.exceptions import ParserError
from xsdata.formats.dataclass.context import XmlContext
from xsdata.formats.dataclass.parsers.config import ParserConfig
from xsdata.formats.dataclass.parsers.xml import XmlParser
from xsdata.formats.dataclass.serializers import XmlSerializer

from dmarc_digest.errors import (
    ArchiveExtractionError,
    SchemaError,
    UnsupportedAttachmentError,
    XmlDecodeError,
)
from dmarc_digest.mbox import MailMessage
from dmarc_digest.model.dmarc_aggregate_report import Feedback
from dmarc_digest.model.normalization import denormalize_feedback, normalize_feedback
from dmarc_digest.model.xml_bindings import FeedbackType

logger = structlog.get_logger()

# Elements are bound by local name. Default namespace declarations such as
# xmlns="urn:ietf:params:xml:ns:dmarc-2.0" would move them out of reach.
default_namespace_regex = re.compile(r"""\s+xmlns\s*=\s*(?:"[^"]*"|'[^']*')""")


def _decode_utf8(payload: bytes) -> str:
    try:
        return payload.decode("utf-8")
    except UnicodeDecodeError as err:
        raise XmlDecodeError(str(err)) from err


def handle_application_gzip(gzip_bytes: bytes) -> str:
    try:
        payload = gzip.decompress(gzip_bytes)
    except (OSError, EOFError, zlib.error) as err:
        raise ArchiveExtractionError("application/gzip", str(err)) from err
    return _decode_utf8(payload)


def handle_application_zip(zip_bytes: bytes) -> str:
    try:
        with ZipFile(io.BytesIO(zip_bytes), "r") as zip_file:
            names = zip_file.namelist()
            if not names:
                raise ArchiveExtractionError("application/zip", "archive is empty")
            if len(names) > 1:
                logger.debug("zip_has_multiple_entries", entries=names)
            with zip_file.open(names[0], "r") as f:
                payload = f.read()
    # RuntimeError: encrypted entry, NotImplementedError: unknown compression.
    except (
        BadZipFile,
        OSError,
        EOFError,
        zlib.error,
        RuntimeError,
        NotImplementedError,
        ValueError,
    ) as err:
        raise ArchiveExtractionError("application/zip", str(err)) from err
    return _decode_utf8(payload)


content_type_handlers: Dict[str, Callable[[bytes], str]] = {
    "application/gzip": handle_application_gzip,
    "application/zip": handle_application_zip,
}


def is_supported_attachment(content_type: str) -> bool:
    return content_type.lower() in content_type_handlers


def decode_attachment(content_type: str, body: bytes) -> str:
    """Returns the XML text contained in a compressed report attachment."""
    try:
        handler = content_type_handlers[content_type.lower()]
    except KeyError:
        raise UnsupportedAttachmentError([content_type]) from None
    return handler(body)


def _create_parser() -> XmlParser:
    return XmlParser(
        context=XmlContext(), config=ParserConfig(fail_on_unknown_properties=False)
    )


def parse_report(xml: str) -> Feedback:
    xml = default_namespace_regex.sub("", xml.lstrip("\ufeff \t\r\n"))
    try:
        raw = _create_parser().from_string(xml, FeedbackType)
    except (ParserError, SyntaxError) as err:
        raise SchemaError("feedback", str(err)) from err
    return normalize_feedback(raw)


def serialize_report(feedback: Feedback) -> str:
    return XmlSerializer(context=XmlContext()).render(denormalize_feedback(feedback))


def get_aggregate_report_from_message(message: MailMessage) -> Feedback:
    parts = message.parts()
    for part in parts:
        if is_supported_attachment(part.content_type):
            return parse_report(decode_attachment(part.content_type, part.body))
    raise UnsupportedAttachmentError(part.content_type for part in parts)
