"""CV document type detection and text extraction."""

from io import BytesIO

import pytest
from docx import Document
from pypdf import PdfWriter

from atsboost.tools.documents import DOCX_MIME, PDF_MIME, detect_file_type, extract_cv_text
from atsboost.tools.docx_parser import parse_docx
from atsboost.tools.errors import DocumentParseError, UnsupportedFileType
from atsboost.tools.pdf_parser import parse_pdf


def make_docx() -> bytes:
    document = Document()
    document.add_paragraph("Lerato Khumalo")
    document.add_paragraph("Financial Accountant, Cape Town")
    table = document.add_table(rows=2, cols=2)
    table.cell(0, 0).text = "Skills"
    table.cell(0, 1).text = "Excel, SAP, budgeting"
    table.cell(1, 0).text = "Qualification"
    table.cell(1, 1).text = "BCom Accounting (NQF 7)"
    buffer = BytesIO()
    document.save(buffer)
    return buffer.getvalue()


def make_blank_pdf() -> bytes:
    writer = PdfWriter()
    writer.add_blank_page(width=595, height=842)
    buffer = BytesIO()
    writer.write(buffer)
    return buffer.getvalue()


@pytest.mark.parametrize(
    "filename,content_type,expected",
    [
        ("cv.pdf", "application/pdf", PDF_MIME),
        ("cv.PDF", "application/octet-stream", PDF_MIME),
        ("cv.docx", None, DOCX_MIME),
        ("upload", DOCX_MIME, DOCX_MIME),
    ],
)
def test_detect_file_type(filename, content_type, expected):
    assert detect_file_type(filename, content_type) == expected


@pytest.mark.parametrize(
    "filename,content_type",
    [("cv.doc", "application/msword"), ("cv.txt", "text/plain"), ("photo.png", "image/png"), (None, None)],
)
def test_only_pdf_and_docx_are_accepted(filename, content_type):
    with pytest.raises(UnsupportedFileType):
        detect_file_type(filename, content_type)


def test_parse_docx_reads_paragraphs_and_tables():
    text = parse_docx(make_docx())
    assert "Lerato Khumalo" in text
    assert "Skills | Excel, SAP, budgeting" in text
    assert "BCom Accounting (NQF 7)" in text


def test_extract_cv_text_dispatches_on_type():
    mime, text = extract_cv_text("lerato.docx", None, make_docx())
    assert mime == DOCX_MIME
    assert "Financial Accountant" in text


def test_blank_pdf_has_no_text():
    assert parse_pdf(make_blank_pdf()).strip() == ""


def test_corrupt_documents_raise_parse_errors():
    with pytest.raises(DocumentParseError):
        parse_pdf(b"this is not a pdf")
    with pytest.raises(DocumentParseError):
        parse_docx(b"this is not a docx")
