"""
Direct text extraction for DOCX files.

Uses python-docx to walk the document body in order. Tables are rendered as
pipe-delimited rows so they stay one unit and keep their column structure.
"""

from __future__ import annotations

import io
import re
import zipfile

from docx import Document
from docx.opc.exceptions import PackageNotFoundError
from docx.table import Table

from doctrans.errors import ExtractionError

_BLANK_LINES = re.compile(r"\n\s*\n")


def _table_to_text(table: Table) -> str:
    """Convert a DOCX table to pipe-delimited rows."""
    rows = []
    for row in table.rows:
        cells = [cell.text.strip().replace("\n", " ") for cell in row.cells]
        rows.append("| " + " | ".join(cells) + " |")
    return "\n".join(rows)


def extract_docx_text(data: bytes) -> str:
    """
    Extract raw text from a DOCX document, paragraphs separated by blank lines.

    Raises:
        ExtractionError: If the bytes are not a valid DOCX package.
    """
    try:
        doc = Document(io.BytesIO(data))
    except (PackageNotFoundError, zipfile.BadZipFile, KeyError, ValueError) as e:
        raise ExtractionError(f"Invalid or corrupted DOCX file: {e}") from e

    parts: list[str] = []
    for block in doc.iter_inner_content():
        if isinstance(block, Table):
            parts.append(_table_to_text(block))
        else:
            parts.append(block.text)
    return "\n\n".join(parts)


def split_paragraphs(text: str) -> list[str]:
    """Normalize line endings and split on blank lines, dropping empty paragraphs."""
    text = text.replace("\r\n", "\n").replace("\r", "\n")
    return [p.strip() for p in _BLANK_LINES.split(text) if p.strip()]


def extract_docx_paragraphs(data: bytes) -> list[str]:
    """Paragraph units of a DOCX document in document order."""
    return split_paragraphs(extract_docx_text(data))
