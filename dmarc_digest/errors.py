class DmarcDigestError(Exception):
    pass


class ConfigurationError(DmarcDigestError):
    pass


class MboxReadError(DmarcDigestError):
    def __init__(self, path, cause: Exception):
        super().__init__(path, cause)
        self.path = path
        self.cause = cause

    def __str__(self):
        return f"Failed to read mbox file '{self.path}': {self.cause}"


class MailStructureError(DmarcDigestError):
    def __init__(self, reason: str):
        super().__init__(reason)
        self.reason = reason

    def __str__(self):
        return f"Malformed email: {self.reason}"


class ReportExtractionError(DmarcDigestError):
    """A single email did not yield a report. Never fatal for a batch."""


class MissingSubjectError(ReportExtractionError):
    def __str__(self):
        return "Could not parse subject from email."


class UnsupportedAttachmentError(ReportExtractionError):
    def __init__(self, content_types=()):
        self.content_types = tuple(content_types)
        super().__init__(self.content_types)

    def __str__(self):
        found = ", ".join(self.content_types) or "none"
        return f"No supported report attachment found (content types: {found})."


class ArchiveExtractionError(ReportExtractionError):
    def __init__(self, content_type: str, reason: str):
        super().__init__(content_type, reason)
        self.content_type = content_type
        self.reason = reason

    def __str__(self):
        return f"Failed to extract {self.content_type} attachment: {self.reason}"


class XmlDecodeError(ReportExtractionError):
    def __init__(self, reason: str):
        super().__init__(reason)
        self.reason = reason

    def __str__(self):
        return f"Report payload is not valid UTF-8: {self.reason}"


class SchemaError(ReportExtractionError):
    def __init__(self, path: str, cause: str):
        super().__init__(path, cause)
        self.path = path
        self.cause = cause

    def __str__(self):
        return f"Invalid aggregate report at '{self.path}': {self.cause}"
