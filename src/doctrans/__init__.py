"""
doctrans: document translation pipeline.

This package provides tools for:
- Extracting translatable units from PDFs, Word documents, spreadsheets and images
- OCR and single-call vision translation for scanned pages
- Translation through Google Cloud Translation, OpenAI, Anthropic or OpenRouter
- Restoring table and token formatting lost by machine translation
"""

__version__ = "0.1.0"

from doctrans.config import Settings, load_config
from doctrans.database import DuckDBJobStore
from doctrans.errors import DocTransError
from doctrans.jobs import InMemoryJobStore, JobRunner
from doctrans.models import (
    DocumentDomain,
    JobStatus,
    OCRQualityLevel,
    ProviderKind,
    Segment,
    TranslationJob,
    TranslationRequest,
)
from doctrans.translation import ClientRegistry, DocumentTranslationPipeline

__all__ = [
    # Config
    "Settings",
    "load_config",
    # Model
    "DocumentDomain",
    "JobStatus",
    "OCRQualityLevel",
    "ProviderKind",
    "Segment",
    "TranslationJob",
    "TranslationRequest",
    # Errors
    "DocTransError",
    # Pipeline
    "ClientRegistry",
    "DocumentTranslationPipeline",
    # Jobs
    "DuckDBJobStore",
    "InMemoryJobStore",
    "JobRunner",
]
