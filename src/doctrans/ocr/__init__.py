"""
Text extraction and OCR.

- pdf: PyMuPDF text layer extraction and page rendering
- docx / spreadsheet: Office document units
- google_vision: cloud OCR with quality-tiered preprocessing
"""

from doctrans.ocr.base import BoundingBox, OCRBlock, OCRPage, OCRProvider, OCRResult
from doctrans.ocr.docx import extract_docx_paragraphs
from doctrans.ocr.google_vision import GoogleVisionOCR
from doctrans.ocr.pdf import PageText, PDFExtractor
from doctrans.ocr.preprocessing import PreprocessingOptions, options_for_quality, preprocess_image
from doctrans.ocr.spreadsheet import CellText, extract_cells

__all__ = [
    "BoundingBox",
    "CellText",
    "GoogleVisionOCR",
    "OCRBlock",
    "OCRPage",
    "OCRProvider",
    "OCRResult",
    "PDFExtractor",
    "PageText",
    "PreprocessingOptions",
    "extract_cells",
    "extract_docx_paragraphs",
    "options_for_quality",
    "preprocess_image",
]
