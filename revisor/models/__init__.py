"""Public model exports for the project.

Keep the :mod:`revisor` namespace clean: tests and other modules should import
``from revisor.models import CorrectionEntry, PageContent``.
"""

from __future__ import annotations

from .correction_entry import CorrectionEntry
from .documents import PageContent, ReferenceDocument
from .session import ProofreadingSession, format_duration

__all__ = [
    "CorrectionEntry",
    "PageContent",
    "ProofreadingSession",
    "ReferenceDocument",
    "format_duration",
]
