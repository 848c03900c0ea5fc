"""Exceptions raised by the external tool wrappers."""


class DocumentParseError(Exception):
    """Uploaded document could not be read."""


class UnsupportedFileType(Exception):
    """Uploaded document is neither PDF nor DOCX."""


class AnalysisError(Exception):
    """AI analysis could not be produced."""


class AnalysisUnavailable(AnalysisError):
    """AI provider is not configured."""


class MediaRejected(Exception):
    """Inbound media URL is not a Twilio media URL."""


class MediaTooLarge(Exception):
    """Inbound media is larger than the upload limit."""
