"""Combine reference documents into one priority-ordered corpus."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Sequence

from revisor.extraction import TextExtractor
from revisor.models import ReferenceDocument

logger = logging.getLogger(__name__)

REFERENCE_HEADER = "\n--- Documento de Referência: {name} ---\n"


def combine_references(documents: Sequence[ReferenceDocument]) -> str:
    """Concatenate reference texts, each under a header naming its document.

    Documents are emitted in list order, so the document at index 0 (the
    highest priority) always comes first. An empty list yields ``""``.
    """
    return "".join(
        REFERENCE_HEADER.format(name=doc.name) + doc.text for doc in documents
    )


def load_reference_documents(
    paths: Sequence[Path], extractor: TextExtractor
) -> list[ReferenceDocument]:
    """Extract each reference file and rank it by its position in ``paths``.

    Raises:
        ExtractionError: If any reference cannot be read.
    """
    documents: list[ReferenceDocument] = []
    for rank, path in enumerate(paths):
        path = Path(path)
        pages = extractor.extract(path)
        documents.append(
            ReferenceDocument(
                name=path.name,
                text=" ".join(page.text for page in pages),
                priority_rank=rank,
            )
        )
        logger.info("Loaded reference %d: %s (%d page(s))", rank + 1, path.name, len(pages))
    return documents


def build_reference_corpus(paths: Sequence[Path], extractor: TextExtractor) -> str:
    """Extract and combine reference files in one step."""
    return combine_references(load_reference_documents(paths, extractor))
