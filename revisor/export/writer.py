"""Write an :class:`ExportTable` as an ``.xlsx`` workbook or a CSV file."""

from __future__ import annotations

import csv
import logging
from pathlib import Path

from openpyxl import Workbook
from openpyxl.cell.cell import ILLEGAL_CHARACTERS_RE
from openpyxl.styles import Font

from .table import COLUMN_HEADERS, REPORT_TITLE, ExportTable

logger = logging.getLogger(__name__)


def write_spreadsheet(table: ExportTable, path: Path) -> Path:
    """Write ``table`` to ``path``; the suffix picks the format.

    ``.csv`` writes UTF-8 CSV; anything else is written as an xlsx workbook.
    Parent directories are created as needed.
    """
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)

    if path.suffix.lower() == ".csv":
        _write_csv(table, path)
    else:
        _write_xlsx(table, path)

    logger.info("Wrote %d row(s) to %s", len(table.rows), path)
    return path


def _write_csv(table: ExportTable, path: Path) -> None:
    with open(path, "w", encoding="utf-8", newline="") as f:
        writer = csv.writer(f)
        for row in table.rows:
            writer.writerow(row)


def _write_xlsx(table: ExportTable, path: Path) -> None:
    workbook = Workbook()
    sheet = workbook.active
    sheet.title = table.sheet_name

    bold = Font(bold=True)
    for row in table.rows:
        sheet.append([_xlsx_value(value) for value in row])
        if not row:
            continue
        is_heading = row == COLUMN_HEADERS or row == (REPORT_TITLE,)
        for cell in sheet[sheet.max_row]:
            # Model text such as "= 5 pontos" must stay literal, not a formula
            if isinstance(cell.value, str):
                cell.data_type = "s"
            if is_heading:
                cell.font = bold

    workbook.save(path)


def _xlsx_value(value):
    """Drop control characters that openpyxl refuses to store."""
    if isinstance(value, str):
        return ILLEGAL_CHARACTERS_RE.sub("", value)
    return value
