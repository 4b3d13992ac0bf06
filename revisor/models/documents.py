"""Immutable value objects for the document being proofread and its references."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class PageContent:
    """Plain text of one page of the target document.

    Attributes:
        page_number: 1-based page number as reported by the extractor
        text: Extracted page text (may be empty for image-only pages)
    """

    page_number: int
    text: str

    def __post_init__(self) -> None:
        if self.page_number < 1:
            raise ValueError(f"page_number must be >= 1, got {self.page_number}")

    def __str__(self) -> str:
        return f"page {self.page_number}"


@dataclass(frozen=True)
class ReferenceDocument:
    """A reference rule document ranked by its position in the supplied list.

    Attributes:
        name: File name shown to the model (e.g. "manual-de-redacao.pdf")
        text: Full extracted text of the document
        priority_rank: Position in the reference list; 0 is the highest priority
    """

    name: str
    text: str
    priority_rank: int

    def __post_init__(self) -> None:
        if self.priority_rank < 0:
            raise ValueError(
                f"priority_rank must be >= 0, got {self.priority_rank}"
            )
