"""Caller-facing entry point: extract, proofread and package one session."""

from __future__ import annotations

import logging
from datetime import datetime
from pathlib import Path
from typing import Sequence

from revisor.extraction import ExtractionError, PdfTextExtractor, TextExtractor
from revisor.llm.service import LLMService
from revisor.models import ProofreadingSession

from .cancellation import CancellationToken
from .driver import ProgressCallback, ProofreadingDriver
from .errors import FatalPipelineFailure
from .references import build_reference_corpus

logger = logging.getLogger(__name__)


def run_proofreading(
    main_document: Path,
    reference_documents: Sequence[Path] = (),
    on_progress: ProgressCallback | None = None,
    cancellation_token: CancellationToken | None = None,
    *,
    llm_service: LLMService | None = None,
    driver: ProofreadingDriver | None = None,
    extractor: TextExtractor | None = None,
) -> ProofreadingSession:
    """Proofread ``main_document`` against ``reference_documents``.

    Reference order is priority order. Either ``llm_service`` or a prebuilt
    ``driver`` must be given.

    Raises:
        Cancelled: If the token is set during the run. No session is produced.
        FatalPipelineFailure: If a document cannot be extracted.
    """
    if driver is None:
        if llm_service is None:
            raise ValueError("run_proofreading needs an llm_service or a driver")
        driver = ProofreadingDriver(llm_service)
    extractor = extractor or PdfTextExtractor()
    main_document = Path(main_document)

    start_time = datetime.now()

    try:
        reference_text = build_reference_corpus(
            [Path(p) for p in reference_documents], extractor
        )
        pages = extractor.extract(main_document)
    except ExtractionError as exc:
        raise FatalPipelineFailure(f"Could not read documents: {exc}") from exc

    logger.info(
        "Proofreading %s (%d page(s), %d reference document(s))",
        main_document.name,
        len(pages),
        len(reference_documents),
    )

    errors = driver.run(pages, reference_text, on_progress, cancellation_token)

    session = ProofreadingSession(
        file_name=main_document.name,
        start_time=start_time,
        errors=errors,
    )
    session.finish()
    return session
