"""Tests for PDF text extraction."""

import io
from unittest.mock import MagicMock, patch

import pytest
from pypdf import PdfWriter

from src.ingestion import DocumentExtractionError, extract_text_from_pdf


def fake_page(text):
    page = MagicMock()
    page.extract_text.return_value = text
    return page


def blank_pdf_bytes() -> bytes:
    writer = PdfWriter()
    writer.add_blank_page(width=200, height=200)
    buffer = io.BytesIO()
    writer.write(buffer)
    return buffer.getvalue()


class TestExtractTextFromPdf:
    """Test extract_text_from_pdf."""

    def test_page_markers(self):
        """Every page is preceded by its marker, empty pages included."""
        reader = MagicMock()
        reader.pages = [fake_page("Phép cộng"), fake_page(""), fake_page("Phép trừ")]

        with patch("src.ingestion.pdf_extractor.PdfReader", return_value=reader):
            text = extract_text_from_pdf(b"%PDF-fake")

        assert text == (
            "--- TRANG 1 ---\nPhép cộng\n\n"
            "--- TRANG 2 ---\n\n\n"
            "--- TRANG 3 ---\nPhép trừ\n\n"
        )

    def test_garbage_bytes(self):
        with pytest.raises(DocumentExtractionError):
            extract_text_from_pdf(b"this is not a pdf at all")

    def test_pdf_without_text(self):
        """A PDF with no extractable text (e.g. a scan) is rejected."""
        with pytest.raises(DocumentExtractionError) as exc_info:
            extract_text_from_pdf(blank_pdf_bytes())

        assert "scan" in str(exc_info.value)

    def test_page_extraction_failure_skipped(self):
        """One unreadable page does not sink the document."""
        broken = MagicMock()
        broken.extract_text.side_effect = KeyError("/Font")
        reader = MagicMock()
        reader.pages = [broken, fake_page("Bảng cửu chương")]

        with patch("src.ingestion.pdf_extractor.PdfReader", return_value=reader):
            text = extract_text_from_pdf(b"%PDF-fake")

        assert "--- TRANG 1 ---" in text
        assert "Bảng cửu chương" in text
