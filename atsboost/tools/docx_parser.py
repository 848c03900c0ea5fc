"""DOCX text extraction for CV uploads (python-docx)."""

from io import BytesIO
from zipfile import BadZipFile

from docx import Document
from docx.opc.exceptions import PackageNotFoundError

from atsboost.tools.errors import DocumentParseError


def parse_docx(docx_content: bytes) -> str:
    """
    Extract text from a Word document.

    Paragraphs come first, followed by table rows (CV templates often put
    skills and contact details in tables). Cells in a row are joined with " | ".
    """
    try:
        document = Document(BytesIO(docx_content))
    except (BadZipFile, PackageNotFoundError, KeyError, ValueError) as e:
        raise DocumentParseError(f"Failed to parse DOCX: {e}") from e

    lines = [p.text for p in document.paragraphs if p.text.strip()]

    for table in document.tables:
        for row in table.rows:
            cells = []
            for cell in row.cells:
                text = cell.text.strip()
                # Merged cells repeat across the row
                if text and text not in cells:
                    cells.append(text)
            if cells:
                lines.append(" | ".join(cells))

    return "\n".join(lines)
