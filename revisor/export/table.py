"""Row-oriented report table for a proofreading session.

Layout::

    RELATÓRIO DE REVISÃO
    Arquivo:  <file name>
    Data:     <dd/mm/yyyy>
    Duração:  <Xm Ys>
    <blank>
    TIPO DE ERRO | CAPÍTULO | PÁGINA | DE | PARA | EXPLICAÇÃO | STATUS
    ... one row per correction ...
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import PurePath
from typing import Union

from revisor.models import CorrectionEntry, ProofreadingSession

Cell = Union[str, int]
Row = tuple[Cell, ...]

REPORT_TITLE = "RELATÓRIO DE REVISÃO"
SHEET_NAME = "Revisão"
NOT_APPLICABLE = "N/A"
COLUMN_HEADERS: Row = (
    "TIPO DE ERRO",
    "CAPÍTULO",
    "PÁGINA",
    "DE",
    "PARA",
    "EXPLICAÇÃO",
    "STATUS",
)


@dataclass(frozen=True)
class ExportTable:
    """Rows ready for a spreadsheet writer, plus naming hints."""

    rows: tuple[Row, ...]
    file_name: str
    sheet_name: str = SHEET_NAME

    @property
    def header_row_index(self) -> int:
        return self.rows.index(COLUMN_HEADERS)

    @property
    def data_rows(self) -> tuple[Row, ...]:
        return self.rows[self.header_row_index + 1 :]


def export_file_name(file_name: str) -> str:
    """``relatorio.pdf`` -> ``Revisao_relatorio.xlsx`` (extension replaced)."""
    stem = PurePath(file_name).stem or file_name
    return f"Revisao_{stem}.xlsx"


def _entry_row(entry: CorrectionEntry) -> Row:
    return (
        entry.error_type,
        entry.chapter or NOT_APPLICABLE,
        entry.page,
        entry.original,
        entry.suggestion,
        entry.explanation,
        "",
    )


def export_session(session: ProofreadingSession) -> ExportTable:
    """Build the report table for ``session``; pure and repeatable."""
    metadata: list[Row] = [
        (REPORT_TITLE,),
        ("Arquivo:", session.file_name),
        ("Data:", session.start_time.strftime("%d/%m/%Y")),
        ("Duração:", session.duration or ""),
        (),
        COLUMN_HEADERS,
    ]
    rows = metadata + [_entry_row(entry) for entry in session.errors]
    return ExportTable(rows=tuple(rows), file_name=export_file_name(session.file_name))
