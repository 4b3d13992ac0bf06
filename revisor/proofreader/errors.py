"""Outcomes of a proofreading run other than success."""

from __future__ import annotations


class Cancelled(Exception):
    """The run was stopped at the user's request.

    Not an error: it is the normal early-termination outcome. Partial results
    are not attached.
    """

    def __init__(self, *, pages_completed: int = 0, total_pages: int = 0) -> None:
        super().__init__(
            f"Proofreading cancelled after {pages_completed} of {total_pages} page(s)"
        )
        self.pages_completed = pages_completed
        self.total_pages = total_pages


class PageProcessingFailure(Exception):
    """A single page's request or response decoding failed.

    Always recovered by the driver: the page contributes no entries.
    """

    def __init__(self, page_number: int, message: str) -> None:
        super().__init__(f"Page {page_number}: {message}")
        self.page_number = page_number


class FatalPipelineFailure(Exception):
    """An error that ends the run without producing a session."""
