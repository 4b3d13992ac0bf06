"""Shape a proofreading session into a table and write it to disk."""

from __future__ import annotations

from .table import (
    COLUMN_HEADERS,
    NOT_APPLICABLE,
    ExportTable,
    export_file_name,
    export_session,
)
from .writer import write_spreadsheet

__all__ = [
    "COLUMN_HEADERS",
    "NOT_APPLICABLE",
    "ExportTable",
    "export_file_name",
    "export_session",
    "write_spreadsheet",
]
