"""
PyMuPDF-based text extraction for PDFs.

Extracts the embedded text layer page by page and renders pages to PNG for the
scanned-document path.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass

import fitz  # PyMuPDF

from doctrans.errors import ExtractionError

logger = logging.getLogger(__name__)

# "-- 2 of 7 --" style markers some PDF producers inject between pages
PAGE_SEPARATOR = re.compile(r"--\s*\d+\s*of\s*\d+\s*--", re.IGNORECASE)


@dataclass
class PageText:
    """Extracted text of one PDF page (1-based page number)."""

    page_number: int
    text: str


def strip_page_separators(text: str) -> str:
    return PAGE_SEPARATOR.sub("", text)


class PDFExtractor:
    """
    Extract text from PDFs using PyMuPDF.

    Pages whose text is shorter than ``min_page_chars`` after trimming are skipped as
    non-extractable (likely scanned).
    """

    def __init__(self, min_page_chars: int = 5, render_scale: float = 2.0):
        self.min_page_chars = min_page_chars
        self.render_scale = render_scale

    @staticmethod
    def _open(data: bytes) -> fitz.Document:
        try:
            return fitz.open(stream=data, filetype="pdf")
        except Exception as e:
            raise ExtractionError(f"Cannot open PDF: {e}") from e

    def page_count(self, data: bytes) -> int:
        with self._open(data) as doc:
            return len(doc)

    def extract_pages(self, data: bytes) -> list[PageText]:
        """
        Extract the text layer of every page.

        Returns:
            Pages with usable text, in page order. Skipped pages are logged.
        """
        pages: list[PageText] = []
        with self._open(data) as doc:
            for index, page in enumerate(doc):
                text = strip_page_separators(page.get_text()).strip()
                if len(text) < self.min_page_chars:
                    logger.info(
                        "Skipping page %d: %d chars of text (likely scanned)",
                        index + 1,
                        len(text),
                        extra={"page": index + 1, "chars": len(text)},
                    )
                    continue
                pages.append(PageText(page_number=index + 1, text=text))
        return pages

    def render_pages(self, data: bytes, max_pages: int = 50) -> list[bytes]:
        """
        Render up to ``max_pages`` pages to PNG.

        Raises:
            ExtractionError: If the document cannot be opened or rendered.
        """
        images: list[bytes] = []
        matrix = fitz.Matrix(self.render_scale, self.render_scale)
        with self._open(data) as doc:
            total = len(doc)
            if total > max_pages:
                logger.warning("Rendering only the first %d of %d pages", max_pages, total)
            for index in range(min(total, max_pages)):
                try:
                    pix = doc[index].get_pixmap(matrix=matrix)
                    images.append(pix.tobytes("png"))
                except Exception as e:
                    raise ExtractionError(f"Cannot render page {index + 1}: {e}") from e
        return images
