"""Sequential page-by-page proofreading loop."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Callable, Sequence

from revisor.llm.service import LLMService
from revisor.models import CorrectionEntry, PageContent

from .cancellation import CancellationToken
from .errors import Cancelled, PageProcessingFailure
from .request_builder import PageRequest, build_page_request

logger = logging.getLogger(__name__)

ProgressCallback = Callable[[int, int], None]


@dataclass
class DriverStats:
    """Counters for the most recent run."""

    total_pages: int = 0
    pages_processed: int = 0
    failed_pages: list[int] = field(default_factory=list)
    entries: int = 0

    @property
    def pages_failed(self) -> int:
        return len(self.failed_pages)


def decode_page_response(response: Any, page_number: int) -> list[CorrectionEntry]:
    """Turn one parsed model response into entries for ``page_number``.

    The response must be a JSON array of objects. Any malformed item fails
    the whole page so that a page never contributes a partial list.

    Raises:
        PageProcessingFailure: If the payload does not have the declared shape.
    """
    if not isinstance(response, list):
        raise PageProcessingFailure(
            page_number,
            f"Expected top-level JSON array of objects, got {type(response).__name__}",
        )

    entries: list[CorrectionEntry] = []
    for index, item in enumerate(response):
        try:
            entries.append(
                CorrectionEntry.from_llm_response(item, page_number=page_number)
            )
        except ValueError as exc:
            raise PageProcessingFailure(
                page_number, f"Invalid correction at index {index}: {exc}"
            ) from exc
    return entries


class ProofreadingDriver:
    """Sends each page to the model in order and collects the corrections.

    One request is outstanding at a time. A failing page is logged and skipped;
    only cancellation stops the loop early.
    """

    def __init__(self, llm_service: LLMService) -> None:
        self.llm_service = llm_service
        self.last_stats = DriverStats()

    def run(
        self,
        pages: Sequence[PageContent],
        reference_text: str,
        on_progress: ProgressCallback | None = None,
        cancellation_token: CancellationToken | None = None,
    ) -> list[CorrectionEntry]:
        """Proofread ``pages`` and return their corrections in page order.

        Args:
            pages: Pages in the order they should be processed
            reference_text: Combined reference corpus (may be empty)
            on_progress: Called with ``(page_number, total_pages)`` just before
                each page's request is sent
            cancellation_token: Checked before each page and after a failure

        Raises:
            Cancelled: If the token is set before a page is dispatched, or
                while a request that then failed was in flight.
        """
        total = len(pages)
        stats = DriverStats(total_pages=total)
        self.last_stats = stats
        all_entries: list[CorrectionEntry] = []

        for page in pages:
            if cancellation_token is not None:
                cancellation_token.raise_if_cancelled(
                    pages_completed=stats.pages_processed, total_pages=total
                )

            if on_progress is not None:
                on_progress(page.page_number, total)

            try:
                page_entries = self._process_page(reference_text, page)
            except Cancelled:
                raise
            except Exception as exc:
                if cancellation_token is not None and cancellation_token.cancelled:
                    raise Cancelled(
                        pages_completed=stats.pages_processed, total_pages=total
                    ) from exc
                logger.exception(
                    "Failed to process page %d of %d; continuing",
                    page.page_number,
                    total,
                )
                stats.failed_pages.append(page.page_number)
                page_entries = []

            stats.pages_processed += 1
            stats.entries += len(page_entries)
            all_entries.extend(page_entries)

        logger.info(
            "Proofread %d page(s): %d correction(s), %d failed page(s)",
            stats.pages_processed,
            stats.entries,
            stats.pages_failed,
        )
        return all_entries

    def build_request(self, reference_text: str, page: PageContent) -> PageRequest:
        return build_page_request(reference_text, page)

    def _process_page(
        self, reference_text: str, page: PageContent
    ) -> list[CorrectionEntry]:
        request = self.build_request(reference_text, page)
        response = self.llm_service.generate(
            request.prompts,
            filter_json=True,
            response_schema=request.response_schema,
        )
        entries = decode_page_response(response, page.page_number)
        logger.debug("Page %d: %d correction(s)", page.page_number, len(entries))
        return entries
