"""Text extraction from PDF documents."""

from __future__ import annotations

from .pdf_text import ExtractionError, PdfTextExtractor, TextExtractor

__all__ = ["ExtractionError", "PdfTextExtractor", "TextExtractor"]
