"""PDF text extraction for reference documents attached to a game idea."""

import io
import logging

from pypdf import PdfReader
from pypdf.errors import PdfReadError

logger = logging.getLogger(__name__)

PAGE_MARKER = "--- TRANG {page_number} ---"


class DocumentExtractionError(Exception):
    """Raised when a document is unreadable or contains no text."""


def extract_text_from_pdf(data: bytes) -> str:
    """Extract plain text from a PDF, page by page.

    Args:
        data: Raw PDF bytes.

    Returns:
        Text of every page, each preceded by a ``--- TRANG n ---`` marker.

    Raises:
        DocumentExtractionError: If the PDF cannot be read or has no text
            (e.g. a scanned image PDF).
    """
    try:
        reader = PdfReader(io.BytesIO(data))
        pages = list(reader.pages)
    except (PdfReadError, ValueError, OSError) as e:
        logger.warning(f"Could not open PDF: {e}")
        raise DocumentExtractionError(f"Không thể đọc file PDF. Chi tiết: {e}") from e

    parts = []
    for page_number, page in enumerate(pages, 1):
        try:
            page_text = page.extract_text() or ""
        except (PdfReadError, ValueError, KeyError) as e:
            logger.warning(f"Could not extract text from page {page_number}: {e}")
            page_text = ""
        parts.append(f"{PAGE_MARKER.format(page_number=page_number)}\n{page_text}\n\n")

    full_text = "".join(parts)
    if not any(part.split("\n", 1)[1].strip() for part in parts):
        raise DocumentExtractionError(
            "Không tìm thấy văn bản nào trong PDF (có thể là PDF dạng ảnh scan)."
        )

    logger.info(f"Extracted {len(full_text)} chars from {len(pages)} PDF page(s)")
    return full_text
