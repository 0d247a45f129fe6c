"""
Document translation pipeline.

Dispatches a file to an extraction strategy by MIME type, translates each unit
sequentially (one external call in flight at a time) and assembles the ordered
segment list handed back to the caller.

Image units go through a fallback ladder: vision translation (OpenRouter only),
then OCR followed by text translation. Each rung is logged as it is attempted.
"""

from __future__ import annotations

import logging
import uuid
from collections import Counter
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from enum import Enum

from doctrans.errors import BlobFetchError, ExtractionError, UnsupportedFileTypeError
from doctrans.models import ProviderKind, Segment, TranslationRequest
from doctrans.ocr.docx import extract_docx_paragraphs
from doctrans.ocr.spreadsheet import extract_cells
from doctrans.translation.chunker import join_chunks, split_into_chunks
from doctrans.translation.registry import ClientRegistry

logger = logging.getLogger(__name__)

SCANNED_OCR_FAILED_ORIGINAL = (
    "No extractable text was found in this PDF, and OCR failed. "
    "This usually means it's a scanned document (image-only PDF)."
)
SCANNED_OCR_FAILED_TRANSLATED = "OCR/translation failed: {error}"
SCANNED_NO_TEXT_ORIGINAL = (
    "No extractable text was found in this PDF. "
    "This usually means it's a scanned document (image-only PDF)."
)
SCANNED_NO_TEXT_TRANSLATED = "OCR completed but no text was detected on any page."
IMAGE_NO_TEXT_ORIGINAL = "No text was detected in this image."
IMAGE_NO_TEXT_TRANSLATED = "OCR completed but no text was detected in the image."


class ExtractionStrategy(str, Enum):
    """Extraction strategies selected from the MIME type."""

    IMAGE = "image"
    PDF = "pdf"
    WORD = "word"
    SPREADSHEET = "spreadsheet"


def normalize_mime_type(mime_type: str | None) -> str:
    return (mime_type or "").split(";", 1)[0].strip().lower()


def select_strategy(mime_type: str | None) -> ExtractionStrategy:
    """
    Choose the extraction strategy for a MIME type.

    Raises:
        UnsupportedFileTypeError: For any type without a strategy.
    """
    mime = normalize_mime_type(mime_type)
    if mime.startswith("image/"):
        return ExtractionStrategy.IMAGE
    if mime == "application/pdf":
        return ExtractionStrategy.PDF
    if "wordprocessingml" in mime:
        return ExtractionStrategy.WORD
    if "spreadsheetml" in mime:
        return ExtractionStrategy.SPREADSHEET
    raise UnsupportedFileTypeError(mime_type)


@dataclass
class SegmentDraft:
    """A translated unit before ids and order are assigned."""

    original_text: str
    translated_text: str
    page_number: int | None = None


@dataclass
class DocumentTranslation:
    """Segments of one file plus the source language the backend detected."""

    segments: list[Segment]
    detected_source_language: str | None = None


def assemble_segments(drafts: list[SegmentDraft], id_prefix: str = "seg") -> list[Segment]:
    """Number drafts in extraction order and give each a unique id."""
    return [
        Segment(
            id=f"{id_prefix}-{index}-{uuid.uuid4().hex[:8]}",
            original_text=draft.original_text,
            translated_text=draft.translated_text or "",
            order=index,
            page_number=draft.page_number,
            is_edited=False,
        )
        for index, draft in enumerate(drafts)
    ]


LadderStep = Callable[[], Awaitable[SegmentDraft | None]]


class DocumentTranslationPipeline:
    """Extraction → translation → segment assembly for one file per call."""

    def __init__(self, registry: ClientRegistry):
        self.registry = registry
        self.settings = registry.settings

    async def translate(self, request: TranslationRequest) -> list[Segment]:
        """Translate one file into ordered segments."""
        return (await self.translate_document(request)).segments

    async def translate_document(self, request: TranslationRequest) -> DocumentTranslation:
        """
        Translate one file into ordered segments.

        Args:
            request: File reference, language pair and backend parameters.

        Returns:
            Segments with ``order == index``, and the most frequent source language
            reported by the backend when the request asked for auto-detection.

        Raises:
            UnsupportedFileTypeError: If the MIME type has no strategy.
            DocTransError: Job-level failures (fetch, extraction, OCR, provider).
        """
        data, mime_type = await self._load(request)
        strategy = select_strategy(mime_type)
        logger.info(
            "Translating %s (%s) with %s",
            request.file_name,
            strategy.value,
            request.provider.value,
            extra={
                "order_id": request.order_id,
                "file_name": request.file_name,
                "strategy": strategy.value,
                "provider": request.provider.value,
            },
        )

        languages: Counter[str] = Counter()
        if strategy == ExtractionStrategy.IMAGE:
            media_type = normalize_mime_type(mime_type)
            drafts = await self._translate_image_file(data, media_type, request, languages)
        elif strategy == ExtractionStrategy.PDF:
            drafts = await self._translate_pdf(data, request, languages)
        elif strategy == ExtractionStrategy.WORD:
            drafts = await self._translate_word(data, request, languages)
        else:
            drafts = await self._translate_spreadsheet(data, request, languages)

        segments = assemble_segments(drafts, id_prefix=f"seg-{request.file_index}")
        detected = languages.most_common(1)[0][0] if languages else None
        logger.info(
            "Produced %d segments for %s",
            len(segments),
            request.file_name,
            extra={"file_name": request.file_name, "detected_source_language": detected},
        )
        return DocumentTranslation(segments, detected)

    async def _load(self, request: TranslationRequest) -> tuple[bytes, str | None]:
        if request.data is not None:
            return request.data, request.mime_type
        if not request.file_url:
            raise BlobFetchError(
                "Request carries neither file data nor a file URL",
                details={"file_name": request.file_name},
            )
        blob = await self.registry.fetcher.fetch(request.file_url)
        return blob.data, request.mime_type or blob.content_type

    async def translate_text(
        self,
        text: str,
        request: TranslationRequest,
        languages: Counter[str] | None = None,
    ) -> str:
        """
        Chunk text under the size limit and translate chunk by chunk.

        Source languages the backend detects are counted into ``languages``.
        """
        chunks = split_into_chunks(text, self.settings.translation.max_chunk_chars)
        if not chunks:
            return ""
        provider = await self.registry.translation_provider(request.provider)
        translations = []
        for chunk in chunks:
            result = await provider.translate_detailed(
                chunk.text,
                request.source_language,
                request.target_language,
                request.domain,
                request.model,
            )
            translations.append(result.text)
            if languages is not None and result.detected_source_language:
                languages[result.detected_source_language] += 1
        return join_chunks(chunks, translations)

    # -- images -------------------------------------------------------------

    async def _run_ladder(
        self, steps: list[tuple[str, LadderStep, bool]], context: dict[str, object]
    ) -> SegmentDraft | None:
        """
        Try each step in order until one yields a draft.

        Steps are (name, step, recoverable). A recoverable step that raises is logged
        and the next step runs; a non-recoverable error propagates.
        """
        for name, step, recoverable in steps:
            logger.debug("Attempting %s", name, extra={**context, "step": name})
            try:
                draft = await step()
            except Exception as e:
                if not recoverable:
                    raise
                logger.warning(
                    "%s failed, falling back: %s",
                    name,
                    e,
                    extra={**context, "step": name, "error_type": type(e).__name__},
                )
                continue
            if draft is not None:
                return draft
            logger.info("%s produced no text, falling back", name, extra={**context, "step": name})
        return None

    async def image_to_draft(
        self,
        image_bytes: bytes,
        media_type: str,
        request: TranslationRequest,
        page_number: int | None = None,
        languages: Counter[str] | None = None,
        min_ocr_chars: int = 1,
    ) -> SegmentDraft | None:
        """
        Translate one image through the fallback ladder.

        OCR output shorter than ``min_ocr_chars`` (after stripping) counts as no text.

        Returns:
            The draft, or None when no step found any text.

        Raises:
            DocTransError: If OCR or the text provider fails.
        """

        async def vision_step() -> SegmentDraft | None:
            vision = await self.registry.vision()
            result = await vision.translate_image(
                image_bytes,
                media_type,
                request.source_language,
                request.target_language,
                request.domain,
                request.model,
            )
            if result.is_empty:
                return None
            return SegmentDraft(result.original_text, result.translated_text, page_number)

        async def ocr_step() -> SegmentDraft | None:
            ocr = await self.registry.ocr()
            result = await ocr.recognize(image_bytes, request.ocr_quality)
            if result.is_empty or len(result.text.strip()) < min_ocr_chars:
                return None
            translated = await self.translate_text(result.text, request, languages)
            return SegmentDraft(result.text, translated, page_number)

        steps: list[tuple[str, LadderStep, bool]] = []
        if request.provider == ProviderKind.OPENROUTER:
            steps.append(("vision translation", vision_step, True))
        steps.append(("OCR + text translation", ocr_step, False))
        return await self._run_ladder(
            steps, {"file_name": request.file_name, "page": page_number}
        )

    async def _translate_image_file(
        self,
        data: bytes,
        media_type: str,
        request: TranslationRequest,
        languages: Counter[str],
    ) -> list[SegmentDraft]:
        draft = await self.image_to_draft(data, media_type, request, 1, languages)
        if draft is None:
            return [SegmentDraft(IMAGE_NO_TEXT_ORIGINAL, IMAGE_NO_TEXT_TRANSLATED, 1)]
        return [draft]

    # -- PDF ----------------------------------------------------------------

    async def _translate_pdf(
        self, data: bytes, request: TranslationRequest, languages: Counter[str]
    ) -> list[SegmentDraft]:
        pages = self.registry.pdf.extract_pages(data)
        if pages:
            drafts = []
            for page in pages:
                translated = await self.translate_text(page.text, request, languages)
                drafts.append(SegmentDraft(page.text, translated, page.page_number))
            return drafts

        logger.info(
            "No extractable text in %s, treating as scanned",
            request.file_name,
            extra={"file_name": request.file_name},
        )
        return await self._translate_scanned_pdf(data, request, languages)

    async def _translate_scanned_pdf(
        self, data: bytes, request: TranslationRequest, languages: Counter[str]
    ) -> list[SegmentDraft]:
        drafts: list[SegmentDraft] = []
        min_chars = self.settings.ocr.min_page_chars
        try:
            images = self.registry.pdf.render_pages(data, self.settings.ocr.max_scanned_pages)
            for index, image in enumerate(images):
                draft = await self.image_to_draft(
                    image, "image/png", request, index + 1, languages, min_ocr_chars=min_chars
                )
                if draft is not None:
                    drafts.append(draft)
        except Exception as e:
            logger.warning(
                "Scanned PDF OCR failed for %s: %s",
                request.file_name,
                e,
                exc_info=True,
                extra={"file_name": request.file_name, "error_type": type(e).__name__},
            )
            return [
                SegmentDraft(
                    SCANNED_OCR_FAILED_ORIGINAL,
                    SCANNED_OCR_FAILED_TRANSLATED.format(error=e),
                    1,
                )
            ]

        if not drafts:
            return [SegmentDraft(SCANNED_NO_TEXT_ORIGINAL, SCANNED_NO_TEXT_TRANSLATED, 1)]
        return drafts

    # -- Office -------------------------------------------------------------

    async def _translate_word(
        self, data: bytes, request: TranslationRequest, languages: Counter[str]
    ) -> list[SegmentDraft]:
        paragraphs = extract_docx_paragraphs(data)
        if not paragraphs:
            raise ExtractionError(f"No text found in {request.file_name}")
        drafts = []
        for paragraph in paragraphs:
            translated = await self.translate_text(paragraph, request, languages)
            drafts.append(SegmentDraft(paragraph, translated))
        return drafts

    async def _translate_spreadsheet(
        self, data: bytes, request: TranslationRequest, languages: Counter[str]
    ) -> list[SegmentDraft]:
        cells = extract_cells(data)
        if not cells:
            raise ExtractionError(f"No non-empty cells found in {request.file_name}")
        drafts = []
        for cell in cells:
            translated = await self.translate_text(cell.value, request, languages)
            drafts.append(SegmentDraft(cell.tagged(), cell.tagged(translated)))
        return drafts
