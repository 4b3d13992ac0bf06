"""Per-page plain-text extraction from PDF files using pypdfium2."""

from __future__ import annotations

import logging
import re
from pathlib import Path
from typing import Protocol

import pypdfium2 as pdfium

from revisor.models import PageContent

logger = logging.getLogger(__name__)

_WHITESPACE_RE = re.compile(r"\s+")


class ExtractionError(Exception):
    """Raised when a document cannot be opened or its text cannot be read."""

    def __init__(self, message: str, *, path: Path | None = None) -> None:
        super().__init__(message)
        self.path = path


class TextExtractor(Protocol):
    """Turns a document into its ordered pages of plain text."""

    def extract(self, document: Path) -> list[PageContent]: ...


def normalise_page_text(text: str) -> str:
    """Collapse runs of whitespace (including line breaks) to single spaces."""
    return _WHITESPACE_RE.sub(" ", text).strip()


def _read_page_text(pdf: pdfium.PdfDocument, index: int) -> str:
    page = pdf[index]
    try:
        textpage = page.get_textpage()
        try:
            return textpage.get_text_range()
        finally:
            textpage.close()
    finally:
        page.close()


class PdfTextExtractor:
    """Extract the text layer of every page of a PDF.

    Pages are numbered from 1 in document order. Image-only pages produce an
    empty string rather than being skipped, so page numbers stay aligned with
    the source document.
    """

    def extract(self, document: Path) -> list[PageContent]:
        path = Path(document)
        if not path.is_file():
            raise ExtractionError(f"Document not found: {path}", path=path)

        try:
            pdf = pdfium.PdfDocument(str(path))
        except pdfium.PdfiumError as exc:
            raise ExtractionError(
                f"Could not open {path.name} as a PDF: {exc}", path=path
            ) from exc

        pages: list[PageContent] = []
        try:
            for index in range(len(pdf)):
                try:
                    raw = _read_page_text(pdf, index)
                except pdfium.PdfiumError as exc:
                    raise ExtractionError(
                        f"Could not read text from page {index + 1} of {path.name}: {exc}",
                        path=path,
                    ) from exc
                pages.append(
                    PageContent(page_number=index + 1, text=normalise_page_text(raw))
                )
        finally:
            pdf.close()

        logger.debug("Extracted %d page(s) from %s", len(pages), path)
        return pages
