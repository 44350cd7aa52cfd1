"""Document ingestion for reference material."""

from src.ingestion.pdf_extractor import DocumentExtractionError, extract_text_from_pdf

__all__ = ["DocumentExtractionError", "extract_text_from_pdf"]
