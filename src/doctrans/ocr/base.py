"""
Base classes and interfaces for OCR providers.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any

from doctrans.models import OCRQualityLevel


@dataclass
class BoundingBox:
    """Axis-aligned box in image pixels."""

    x: int
    y: int
    width: int
    height: int


@dataclass
class OCRBlock:
    """A text block from the layout annotation."""

    text: str
    confidence: float = 0.0
    bounding_box: BoundingBox | None = None


@dataclass
class OCRPage:
    """One page of the layout annotation."""

    page_number: int
    text: str
    blocks: list[OCRBlock] = field(default_factory=list)


@dataclass
class OCRResult:
    """Result from OCR processing."""

    text: str
    confidence: float = 0.0
    was_preprocessed: bool = False
    pages: list[OCRPage] = field(default_factory=list)
    metadata: dict[str, Any] = field(default_factory=dict)

    @property
    def is_empty(self) -> bool:
        """Check if text is empty or whitespace only."""
        return not self.text or not self.text.strip()

    @property
    def word_count(self) -> int:
        """Count words in text."""
        return len(self.text.split()) if self.text else 0


class OCRProvider(ABC):
    """Abstract base class for image OCR backends."""

    @property
    @abstractmethod
    def name(self) -> str:
        """Provider name."""
        ...

    @abstractmethod
    async def recognize(
        self,
        image_bytes: bytes,
        quality: OCRQualityLevel = OCRQualityLevel.HIGH,
        **kwargs: Any,
    ) -> OCRResult:
        """
        Extract text from an image.

        Args:
            image_bytes: Encoded image (PNG, JPEG, ...).
            quality: Selects detection feature and preprocessing recipe.
            **kwargs: Provider-specific options.

        Returns:
            OCRResult with extracted text.

        Raises:
            OCRError: If the backend call fails.
        """
        ...
