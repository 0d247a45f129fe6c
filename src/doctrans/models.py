"""
Core data model for doctrans.

Segments are the unit of review handed back to the caller; a TranslationJob is the
envelope the caller persists around them.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any


class ProviderKind(str, Enum):
    """Translation backend kinds."""

    GOOGLE = "google"
    OPENAI = "openai"
    ANTHROPIC = "anthropic"
    OPENROUTER = "openrouter"

    @classmethod
    def parse(cls, value: ProviderKind | str | None) -> ProviderKind:
        """Resolve a provider name, defaulting to the LLM router when missing or unknown."""
        if isinstance(value, ProviderKind):
            return value
        if value:
            try:
                return cls(value.strip().lower())
            except ValueError:
                pass
        return cls.OPENROUTER


class DocumentDomain(str, Enum):
    """Content domains that select prompt terminology guidance."""

    GENERAL = "general"
    CERTIFICATE = "certificate"
    LEGAL = "legal"
    MEDICAL = "medical"
    TECHNICAL = "technical"

    @classmethod
    def parse(cls, value: DocumentDomain | str | None) -> DocumentDomain:
        """Resolve a domain name, defaulting to general."""
        if isinstance(value, DocumentDomain):
            return value
        if value:
            try:
                return cls(value.strip().lower())
            except ValueError:
                pass
        return cls.GENERAL


class OCRQualityLevel(str, Enum):
    """
    OCR quality tier: selects detection feature and preprocessing recipe.

    ``auto`` analyzes each image and picks the recipe from its resolution and contrast.
    """

    LOW = "low"
    HIGH = "high"
    AUTO = "auto"

    @classmethod
    def parse(cls, value: OCRQualityLevel | str | None) -> OCRQualityLevel:
        if isinstance(value, OCRQualityLevel):
            return value
        if value:
            try:
                return cls(value.strip().lower())
            except ValueError:
                pass
        return cls.HIGH


class JobStatus(str, Enum):
    """TranslationJob lifecycle states."""

    PENDING = "pending"
    TRANSLATING = "translating"
    REVIEW = "review"
    APPROVED = "approved"
    COMPLETED = "completed"


@dataclass
class Segment:
    """One translatable unit of a document (page, paragraph or cell)."""

    id: str
    original_text: str
    translated_text: str = ""
    order: int = 0
    page_number: int | None = None
    is_edited: bool = False

    def to_dict(self) -> dict[str, Any]:
        """Serialize using the camelCase keys the order system expects."""
        data: dict[str, Any] = {
            "id": self.id,
            "originalText": self.original_text,
            "translatedText": self.translated_text,
            "isEdited": self.is_edited,
            "order": self.order,
        }
        if self.page_number is not None:
            data["pageNumber"] = self.page_number
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Segment:
        return cls(
            id=str(data["id"]),
            original_text=data.get("originalText", ""),
            translated_text=data.get("translatedText", "") or "",
            order=int(data.get("order", 0)),
            page_number=data.get("pageNumber"),
            is_edited=bool(data.get("isEdited", False)),
        )


@dataclass
class TranslationRequest:
    """Input envelope received from the order/administration system."""

    order_id: str
    file_name: str
    source_language: str
    target_language: str
    file_index: int = 0
    file_url: str | None = None
    data: bytes | None = None
    mime_type: str | None = None
    provider: ProviderKind = ProviderKind.OPENROUTER
    domain: DocumentDomain = DocumentDomain.GENERAL
    model: str | None = None
    ocr_quality: OCRQualityLevel = OCRQualityLevel.HIGH

    def __post_init__(self) -> None:
        self.provider = ProviderKind.parse(self.provider)
        self.domain = DocumentDomain.parse(self.domain)
        self.ocr_quality = OCRQualityLevel.parse(self.ocr_quality)
        if self.model is not None and not self.model.strip():
            self.model = None


@dataclass
class TranslationJob:
    """Request/response envelope persisted by the caller around a pipeline run."""

    order_id: str
    file_name: str
    file_index: int = 0
    source_language: str = "auto"
    target_language: str = "en"
    detected_source_language: str | None = None
    provider: ProviderKind = ProviderKind.OPENROUTER
    domain: DocumentDomain = DocumentDomain.GENERAL
    model: str | None = None
    ocr_quality: OCRQualityLevel = OCRQualityLevel.HIGH
    segments: list[Segment] = field(default_factory=list)
    status: JobStatus = JobStatus.PENDING
    progress: int = 0
    error: str | None = None
    updated_at: datetime | None = None

    @classmethod
    def from_request(cls, request: TranslationRequest) -> TranslationJob:
        return cls(
            order_id=request.order_id,
            file_name=request.file_name,
            file_index=request.file_index,
            source_language=request.source_language,
            target_language=request.target_language,
            provider=request.provider,
            domain=request.domain,
            model=request.model,
            ocr_quality=request.ocr_quality,
        )

    @property
    def key(self) -> tuple[str, str]:
        """Identity used by job stores."""
        return (self.order_id, self.file_name)

    def to_dict(self) -> dict[str, Any]:
        data = asdict(self)
        data["provider"] = self.provider.value
        data["domain"] = self.domain.value
        data["ocr_quality"] = self.ocr_quality.value
        data["status"] = self.status.value
        data["segments"] = [s.to_dict() for s in self.segments]
        data["updated_at"] = self.updated_at.isoformat() if self.updated_at else None
        return data
