"""CV document type detection and text extraction."""

from pathlib import Path

from atsboost.tools.docx_parser import parse_docx
from atsboost.tools.errors import UnsupportedFileType
from atsboost.tools.pdf_parser import parse_pdf

PDF_MIME = "application/pdf"
DOCX_MIME = "application/vnd.openxmlformats-officedocument.wordprocessingml.document"

ALLOWED_TYPES = {
    ".pdf": PDF_MIME,
    ".docx": DOCX_MIME,
}


def detect_file_type(filename: str | None, content_type: str | None) -> str:
    """
    Return the canonical MIME type of an upload, or raise UnsupportedFileType.

    The declared content type wins when it is one we accept; otherwise the
    extension decides (browsers and WhatsApp often send application/octet-stream).
    """
    if content_type:
        mime = content_type.split(";")[0].strip().lower()
        if mime in ALLOWED_TYPES.values():
            return mime

    suffix = Path(filename or "").suffix.lower()
    if suffix in ALLOWED_TYPES:
        return ALLOWED_TYPES[suffix]

    raise UnsupportedFileType("Only PDF and DOCX files are supported")


def extract_cv_text(filename: str | None, content_type: str | None, content: bytes) -> tuple[str, str]:
    """Return (mime type, extracted text) for an uploaded CV."""
    mime = detect_file_type(filename, content_type)
    if mime == PDF_MIME:
        return mime, parse_pdf(content)
    return mime, parse_docx(content)


def extract_cv_text_from_path(file_path: str) -> str:
    path = Path(file_path)
    _, text = extract_cv_text(path.name, None, path.read_bytes())
    return text
