"""
PDF text extraction for CV uploads.

Extracts text content from PDF files using pypdf.
"""

from io import BytesIO

from pypdf import PdfReader
from pypdf.errors import PdfReadError

from atsboost.tools.errors import DocumentParseError


def parse_pdf(pdf_content: bytes) -> str:
    """
    Extract text from a PDF file.

    Args:
        pdf_content: Raw bytes of the PDF file

    Returns:
        Extracted text content from all pages, separated by blank lines
    """
    try:
        reader = PdfReader(BytesIO(pdf_content))
        text_parts = []

        for page in reader.pages:
            page_text = page.extract_text()
            if page_text:
                text_parts.append(page_text)

    except (PdfReadError, ValueError, KeyError) as e:
        raise DocumentParseError(f"Failed to parse PDF: {e}") from e

    return "\n\n".join(text_parts)
