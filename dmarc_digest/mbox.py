import re
from dataclasses import dataclass
from email import errors, policy
from email.message import EmailMessage
from email.parser import BytesParser
from typing import Iterator, List, Optional, Union

from dmarc_digest.errors import MailStructureError, MissingSubjectError

# Not conformant to RFC 4155: "From " lines inside a body are not unescaped
# and split the message just like a real separator.
_SEPARATOR = re.compile(rb"^From [^\n]*(?:\n|\Z)", re.MULTILINE)

_STRUCTURAL_DEFECTS = (
    errors.NoBoundaryInMultipartDefect,
    errors.StartBoundaryNotFoundDefect,
    errors.MultipartInvariantViolationDefect,
)


class MboxSplitter:
    """Splits the content of an mbox file into raw messages.

    Iterating yields the bytes between consecutive ``From `` separator lines.
    Anything before the first separator is discarded. Each iteration starts
    from the beginning again.
    """

    def __init__(self, content: Union[bytes, str]):
        if isinstance(content, str):
            content = content.encode("utf-8")
        self.content = content

    def __iter__(self) -> Iterator[bytes]:
        start = None
        for separator in _SEPARATOR.finditer(self.content):
            if start is not None:
                yield self.content[start : separator.start()]
            start = separator.end()
        if start is not None:
            yield self.content[start:]


@dataclass(frozen=True)
class MailPart:
    content_type: str
    body: bytes
    filename: Optional[str] = None


class MailMessage:
    def __init__(self, message: EmailMessage):
        self.message = message

    @classmethod
    def from_bytes(cls, raw: bytes) -> "MailMessage":
        try:
            message = BytesParser(policy=policy.default).parsebytes(raw)
        except errors.MessageError as err:
            raise MailStructureError(str(err)) from err

        for part in message.walk():
            for defect in part.defects:
                if isinstance(defect, _STRUCTURAL_DEFECTS):
                    raise MailStructureError(
                        f"{type(defect).__name__} in {part.get_content_type()} part"
                    )
        return cls(message)

    @property
    def subject(self) -> str:
        subject = self.message.get("subject")
        if subject is None:
            raise MissingSubjectError()
        return str(subject)

    def parts(self) -> List[MailPart]:
        return [
            MailPart(
                content_type=part.get_content_type(),
                body=part.get_payload(decode=True) or b"",
                filename=part.get_filename(),
            )
            for part in self.message.walk()
            if not part.is_multipart()
        ]
