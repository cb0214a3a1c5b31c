import gzip
import io
import struct
from email.message import EmailMessage
from typing import Iterable, Optional
from zipfile import ZipFile

from dmarc_digest.model.tests.sample_data import create_sample_xml

REPORT_FILENAME = "reporter.com!mydomain.de!1607299200!1607385599"


def zip_bytes(xml: str, filename: str = f"{REPORT_FILENAME}.xml") -> bytes:
    compressed = io.BytesIO()
    with ZipFile(compressed, "w") as zip_file:
        zip_file.writestr(filename, xml)
    return compressed.getvalue()


def patched_zip_bytes(
    xml: str, *, flag_bits: int = 0, compress_type: int = 0
) -> bytes:
    """Stored zip whose entry headers claim other flag bits or compression."""
    data = bytearray(zip_bytes(xml))
    local = data.find(b"PK\x03\x04")
    central = data.find(b"PK\x01\x02")
    struct.pack_into("<HH", data, local + 6, flag_bits, compress_type)
    struct.pack_into("<HH", data, central + 8, flag_bits, compress_type)
    return bytes(data)


def gzip_bytes(xml: str) -> bytes:
    return gzip.compress(xml.encode("utf-8"))


def create_email(
    *,
    subject: Optional[str] = "Report domain: mydomain.de",
    attachment: Optional[bytes] = None,
    subtype: str = "zip",
    filename: str = f"{REPORT_FILENAME}.zip",
    content: Optional[str] = None,
) -> EmailMessage:
    msg = EmailMessage()
    if subject is not None:
        msg["Subject"] = subject
    msg["From"] = "noreply-dmarc-support@google.com"
    msg["To"] = "dmarc-feedback@mydomain.de"
    if content:
        msg.set_content(content)
    if attachment is not None:
        msg.add_attachment(
            attachment, maintype="application", subtype=subtype, filename=filename
        )
    return msg


def create_zip_report_email(
    *, report_id: str = "12598866915817748661", subject: Optional[str] = None, **kwargs
) -> EmailMessage:
    return create_email(
        subject=subject or f"Report domain: mydomain.de Report-ID: {report_id}",
        attachment=zip_bytes(create_sample_xml(report_id=report_id, **kwargs)),
    )


def create_gzip_report_email(
    *, report_id: str = "12598866915817748661", **kwargs
) -> EmailMessage:
    return create_email(
        attachment=gzip_bytes(create_sample_xml(report_id=report_id, **kwargs)),
        subtype="gzip",
        filename=f"{REPORT_FILENAME}.xml.gz",
    )


def create_mbox(messages: Iterable[EmailMessage], preamble: bytes = b"") -> bytes:
    content = preamble
    for msg in messages:
        content += b"From noreply-dmarc-support@google.com Mon Dec  7 12:00:00 2020\n"
        content += msg.as_bytes() + b"\n"
    return content
