"""
Google Cloud Vision OCR over the REST ``images:annotate`` endpoint.

The quality tier picks both the detection feature and the preprocessing recipe.
"""

from __future__ import annotations

import base64
import logging
from typing import Any

import httpx

from doctrans.config import GoogleConfig
from doctrans.errors import OCRError, ProviderConfigError, ProviderTimeoutError
from doctrans.models import OCRQualityLevel
from doctrans.ocr.base import BoundingBox, OCRBlock, OCRPage, OCRProvider, OCRResult
from doctrans.ocr.preprocessing import PreprocessingOptions, options_for_quality, preprocess_image

logger = logging.getLogger(__name__)

VISION_ANNOTATE_URL = "https://vision.googleapis.com/v1/images:annotate"

FEATURE_BY_QUALITY = {
    OCRQualityLevel.LOW: "TEXT_DETECTION",
    OCRQualityLevel.HIGH: "DOCUMENT_TEXT_DETECTION",
    OCRQualityLevel.AUTO: "DOCUMENT_TEXT_DETECTION",
}


def _bounding_box(block: dict[str, Any]) -> BoundingBox | None:
    vertices = (block.get("boundingBox") or {}).get("vertices") or []
    if len(vertices) < 4:
        return None
    xs = [v.get("x", 0) for v in vertices]
    ys = [v.get("y", 0) for v in vertices]
    return BoundingBox(x=min(xs), y=min(ys), width=max(xs) - min(xs), height=max(ys) - min(ys))


def parse_layout(full_text_annotation: dict[str, Any] | None) -> list[OCRPage]:
    """Turn a ``fullTextAnnotation`` into pages of text blocks."""
    pages: list[OCRPage] = []
    if not full_text_annotation:
        return pages

    for index, page in enumerate(full_text_annotation.get("pages") or []):
        blocks: list[OCRBlock] = []
        for block in page.get("blocks") or []:
            paragraphs = []
            for paragraph in block.get("paragraphs") or []:
                words = [
                    "".join(symbol.get("text", "") for symbol in word.get("symbols") or [])
                    for word in paragraph.get("words") or []
                ]
                paragraphs.append(" ".join(words))
            blocks.append(
                OCRBlock(
                    text="\n".join(paragraphs).strip(),
                    confidence=float(block.get("confidence") or 0.0),
                    bounding_box=_bounding_box(block),
                )
            )
        pages.append(
            OCRPage(
                page_number=index + 1,
                text="\n\n".join(b.text for b in blocks).strip(),
                blocks=blocks,
            )
        )
    return pages


class GoogleVisionOCR(OCRProvider):
    """Cloud text detection via Google Vision."""

    def __init__(
        self,
        config: GoogleConfig,
        timeout: float = 300.0,
        http_client: httpx.AsyncClient | None = None,
    ):
        if not config.api_key and not config.access_token:
            raise ProviderConfigError(
                "google-vision", "set GOOGLE_CLOUD_API_KEY or GOOGLE_CLOUD_ACCESS_TOKEN"
            )
        self._config = config
        self._timeout = timeout
        self._http = http_client

    @property
    def name(self) -> str:
        return "google-vision"

    def _auth(self) -> dict[str, Any]:
        if self._config.api_key:
            return {"params": {"key": self._config.api_key}}
        headers = {"Authorization": f"Bearer {self._config.access_token}"}
        if self._config.project_id:
            headers["x-goog-user-project"] = self._config.project_id
        return {"headers": headers}

    async def _annotate(self, image_bytes: bytes, feature: str) -> dict[str, Any]:
        body = {
            "requests": [
                {
                    "image": {"content": base64.b64encode(image_bytes).decode("ascii")},
                    "features": [{"type": feature}],
                }
            ]
        }
        try:
            if self._http is not None:
                response = await self._http.post(
                    VISION_ANNOTATE_URL, json=body, timeout=self._timeout, **self._auth()
                )
            else:
                async with httpx.AsyncClient(timeout=self._timeout) as client:
                    response = await client.post(VISION_ANNOTATE_URL, json=body, **self._auth())
            response.raise_for_status()
        except httpx.TimeoutException as e:
            raise ProviderTimeoutError(self.name, self._timeout) from e
        except httpx.HTTPStatusError as e:
            raise OCRError(
                f"Vision API error ({e.response.status_code}): {e.response.text}",
                details={"status_code": e.response.status_code},
            ) from e
        except httpx.HTTPError as e:
            raise OCRError(f"Vision API request failed: {e}") from e

        result = (response.json().get("responses") or [{}])[0]
        if result.get("error"):
            raise OCRError(
                f"Vision API error: {result['error'].get('message', result['error'])}",
                details={"error": result["error"]},
            )
        return result

    async def recognize(
        self,
        image_bytes: bytes,
        quality: OCRQualityLevel = OCRQualityLevel.HIGH,
        preprocessing: PreprocessingOptions | None = None,
        **kwargs: Any,
    ) -> OCRResult:
        """
        Run text detection on an image.

        Args:
            image_bytes: Encoded image.
            quality: ``low`` uses TEXT_DETECTION and light preprocessing, ``high`` uses
                DOCUMENT_TEXT_DETECTION and the default recipe, ``auto`` uses
                DOCUMENT_TEXT_DETECTION with a recipe chosen by analyzing the image.
            preprocessing: Explicit recipe overriding the quality default.

        Returns:
            OCRResult with text, page confidence and parsed layout pages.
        """
        quality = OCRQualityLevel.parse(quality)
        feature = FEATURE_BY_QUALITY[quality]
        payload = image_bytes
        was_preprocessed = False
        try:
            options = preprocessing or options_for_quality(quality, image_bytes)
            payload = preprocess_image(image_bytes, options)
            was_preprocessed = True
        except Exception as e:
            logger.warning(
                "Image preprocessing failed, using original: %s",
                e,
                extra={"step": "preprocessing", "error_type": type(e).__name__},
            )

        result = await self._annotate(payload, feature)

        annotations = result.get("textAnnotations") or []
        text = (annotations[0].get("description", "") if annotations else "").strip()
        full = result.get("fullTextAnnotation") or {}
        pages = parse_layout(full)
        confidence = float(((full.get("pages") or [{}])[0]).get("confidence") or 0.0)

        logger.debug(
            "OCR (%s) returned %d chars, confidence %.2f", feature, len(text), confidence
        )
        return OCRResult(
            text=text,
            confidence=confidence,
            was_preprocessed=was_preprocessed,
            pages=pages,
            metadata={"feature": feature},
        )
