"""
Spreadsheet cell extraction with openpyxl.

Every non-empty cell is one unit, visited sheet by sheet in row-major order and
tagged with its ``Sheet!R{row}C{col}`` location.
"""

from __future__ import annotations

import io
import logging
from dataclasses import dataclass

from openpyxl import load_workbook

from doctrans.errors import ExtractionError

logger = logging.getLogger(__name__)


@dataclass
class CellText:
    """Text of one non-empty cell (1-based row and column)."""

    sheet: str
    row: int
    column: int
    value: str

    @property
    def location(self) -> str:
        return f"{self.sheet}!R{self.row}C{self.column}"

    def tagged(self, text: str | None = None) -> str:
        """Location tag and text on separate lines."""
        return f"{self.location}\n{self.value if text is None else text}"


def extract_cells(data: bytes) -> list[CellText]:
    """
    Extract non-empty cells from an XLSX workbook.

    Formula cells yield their cached values.

    Raises:
        ExtractionError: If the workbook cannot be read.
    """
    try:
        workbook = load_workbook(io.BytesIO(data), read_only=True, data_only=True)
    except Exception as e:
        raise ExtractionError(f"Cannot open spreadsheet: {e}") from e

    cells: list[CellText] = []
    sheet_count = len(workbook.worksheets)
    try:
        for sheet in workbook.worksheets:
            for row in sheet.iter_rows():
                for cell in row:
                    if cell.value is None:
                        continue
                    value = str(cell.value).strip()
                    if not value:
                        continue
                    cells.append(CellText(sheet.title, cell.row, cell.column, value))
    finally:
        workbook.close()

    logger.debug("Extracted %d cells from %d sheets", len(cells), sheet_count)
    return cells
