"""
Translation pipeline for doctrans.

Provides:
- Format dispatch and per-unit extraction → translation orchestration
- Provider adapter over Google Translate and three LLM backends
- Vision translation for page images, with OCR fallback
- Chunking and formatting restoration helpers
"""

from doctrans.translation.chunker import chunk_text, join_chunks, split_into_chunks
from doctrans.translation.pipeline import DocumentTranslationPipeline, select_strategy
from doctrans.translation.providers import (
    GoogleTranslateProvider,
    LLMTranslationProvider,
    TranslationProvider,
)
from doctrans.translation.registry import ClientRegistry
from doctrans.translation.restorer import restore_formatting
from doctrans.translation.vision import VisionResult, VisionTranslator, parse_vision_response

__all__ = [
    "ClientRegistry",
    "DocumentTranslationPipeline",
    "GoogleTranslateProvider",
    "LLMTranslationProvider",
    "TranslationProvider",
    "VisionResult",
    "VisionTranslator",
    "chunk_text",
    "join_chunks",
    "parse_vision_response",
    "restore_formatting",
    "select_strategy",
    "split_into_chunks",
]
