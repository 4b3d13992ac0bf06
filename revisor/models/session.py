"""Record of one proofreading run."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime

from .correction_entry import CorrectionEntry


def format_duration(start: datetime, end: datetime) -> str:
    """Render the elapsed time between two instants as ``"<m>m <s>s"``."""
    seconds = max(0, int((end - start).total_seconds()))
    minutes, remaining = divmod(seconds, 60)
    return f"{minutes}m {remaining}s"


@dataclass
class ProofreadingSession:
    """Results of proofreading one document.

    A new session supersedes the previous one; sessions are never merged.
    """

    file_name: str
    start_time: datetime
    end_time: datetime | None = None
    duration: str | None = None
    errors: list[CorrectionEntry] = field(default_factory=list)

    def finish(self, end_time: datetime | None = None) -> None:
        """Stamp the end time and formatted duration."""
        self.end_time = end_time or datetime.now()
        self.duration = format_duration(self.start_time, self.end_time)

    @property
    def error_count(self) -> int:
        return len(self.errors)
