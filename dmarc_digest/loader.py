from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Union

import structlog

from dmarc_digest.deserialization import get_aggregate_report_from_message
from dmarc_digest.errors import MboxReadError, ReportExtractionError
from dmarc_digest.mbox import MailMessage, MboxSplitter
from dmarc_digest.model.dmarc_aggregate_report import Feedback

logger = structlog.get_logger()

NO_SUBJECT = "<no subject>"


@dataclass(frozen=True)
class Diagnostic:
    """A message that was skipped because no report could be taken from it."""

    subject: str
    error: ReportExtractionError

    def __str__(self):
        return f"Skipped email with subject '{self.subject}': {self.error}"


@dataclass
class LoadResult:
    reports: List[Feedback] = field(default_factory=list)
    diagnostics: List[Diagnostic] = field(default_factory=list)


def read_mbox(path: Union[Path, str]) -> bytes:
    try:
        with open(path, "rb") as f:
            return f.read()
    except OSError as err:
        raise MboxReadError(path, err) from err


def load_reports_from_bytes(content: Union[bytes, str]) -> LoadResult:
    """Extracts the aggregate reports of all messages in an mbox.

    :class:`~dmarc_digest.errors.MailStructureError` is raised for a message
    that cannot be parsed at all. Any other failure only skips the message
    and is recorded as a :class:`Diagnostic`.
    """
    result = LoadResult()
    for index, raw in enumerate(MboxSplitter(content), start=1):
        message = MailMessage.from_bytes(raw)
        subject = NO_SUBJECT
        try:
            subject = message.subject
            logger.debug("processing_email", index=index, subject=subject)
            result.reports.append(get_aggregate_report_from_message(message))
        except ReportExtractionError as err:
            logger.debug("skipping_email", index=index, subject=subject, error=str(err))
            result.diagnostics.append(Diagnostic(subject, err))
    logger.debug(
        "mbox_processed",
        reports=len(result.reports),
        skipped=len(result.diagnostics),
    )
    return result


def load_reports(path: Union[Path, str]) -> LoadResult:
    return load_reports_from_bytes(read_mbox(path))
