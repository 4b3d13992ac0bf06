"""Cooperative cancellation signal shared between a caller and the driver."""

from __future__ import annotations

import threading

from .errors import Cancelled


class CancellationToken:
    """A flag that can be set once from outside the proofreading loop.

    Setting it is idempotent. The driver checks it before each page and after
    a failed request; a request already in flight is allowed to finish.
    """

    def __init__(self) -> None:
        self._event = threading.Event()

    def cancel(self) -> None:
        self._event.set()

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()

    def raise_if_cancelled(self, *, pages_completed: int = 0, total_pages: int = 0) -> None:
        if self._event.is_set():
            raise Cancelled(pages_completed=pages_completed, total_pages=total_pages)
