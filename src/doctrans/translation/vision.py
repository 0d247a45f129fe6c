"""
Vision translation: read and translate a page image in one multimodal call.

The model is asked for a JSON object ``{"originalText", "translatedText"}``. Parsing
never fails the job: fenced JSON is unwrapped, broken JSON is salvaged by regex, and
as a last resort the raw response becomes the translation. An optional second call
re-aligns tables in the draft; if that call fails the draft is kept.
"""

from __future__ import annotations

import base64
import json
import logging
import re
from dataclasses import dataclass
from typing import Any

from doctrans.errors import MalformedModelOutputError
from doctrans.llm.base import LLMProvider
from doctrans.models import DocumentDomain
from doctrans.translation.prompts import (
    build_refine_prompt,
    build_vision_prompt,
    get_domain_system_prompt,
)

logger = logging.getLogger(__name__)

_CODE_FENCE = re.compile(r"^\s*```[a-zA-Z0-9_-]*\s*\n?(.*?)\n?\s*```\s*$", re.DOTALL)
_FIELD_PATTERN = r'"{name}"\s*:\s*"((?:[^"\\]|\\.)*)"'


@dataclass
class VisionResult:
    """Transcription and translation of one image."""

    original_text: str
    translated_text: str
    refined: bool = False

    @property
    def is_empty(self) -> bool:
        return not self.original_text.strip() and not self.translated_text.strip()


def strip_code_fences(text: str) -> str:
    """Remove a surrounding ```json ... ``` fence if present."""
    match = _CODE_FENCE.match(text)
    return match.group(1).strip() if match else text.strip()


def _parse_json_object(text: str) -> dict[str, Any]:
    """Strict parse of a JSON object, tolerating a code fence or surrounding prose."""
    body = strip_code_fences(text)
    try:
        data = json.loads(body)
    except json.JSONDecodeError:
        start, end = body.find("{"), body.rfind("}")
        if start == -1 or end <= start:
            raise MalformedModelOutputError("response contains no JSON object") from None
        try:
            data = json.loads(body[start : end + 1])
        except json.JSONDecodeError as e:
            raise MalformedModelOutputError(f"invalid JSON in response: {e}") from e
    if not isinstance(data, dict):
        raise MalformedModelOutputError("response JSON is not an object")
    return data


def _salvage_field(text: str, name: str) -> str | None:
    match = re.search(_FIELD_PATTERN.format(name=name), text, re.DOTALL)
    if not match:
        return None
    raw = match.group(1)
    try:
        return json.loads(f'"{raw}"')
    except json.JSONDecodeError:
        return raw.replace('\\"', '"').replace("\\n", "\n")


def parse_vision_response(text: str) -> VisionResult:
    """
    Parse a vision response into a VisionResult.

    Order of attempts: strict JSON (after fence stripping), regex salvage of the two
    string fields, then the raw response as the translation with an empty original.
    """
    try:
        data = _parse_json_object(text)
        return VisionResult(
            original_text=str(data.get("originalText") or ""),
            translated_text=str(data.get("translatedText") or ""),
        )
    except MalformedModelOutputError as e:
        logger.debug("Vision JSON parse failed, salvaging fields: %s", e.message)

    original = _salvage_field(text, "originalText")
    translated = _salvage_field(text, "translatedText")
    if original is not None or translated is not None:
        return VisionResult(original_text=original or "", translated_text=translated or "")

    logger.warning("Vision response had no recognizable fields, using raw text")
    return VisionResult(original_text="", translated_text=text.strip())


def image_message(image_bytes: bytes, media_type: str, prompt: str, detail: str) -> dict[str, Any]:
    """Build a user message carrying an inline base64 image and a text prompt."""
    image_base64 = base64.b64encode(image_bytes).decode("utf-8")
    return {
        "role": "user",
        "content": [
            {
                "type": "image_url",
                "image_url": {"url": f"data:{media_type};base64,{image_base64}", "detail": detail},
            },
            {"type": "text", "text": prompt},
        ],
    }


class VisionTranslator:
    """Single-call image translation with an optional table-alignment refine pass."""

    def __init__(
        self,
        llm: LLMProvider,
        *,
        disable_refine: bool = False,
        image_detail: str = "high",
        temperature: float = 0.2,
        max_tokens: int = 8192,
    ):
        self._llm = llm
        self._disable_refine = disable_refine
        self._image_detail = image_detail
        self._temperature = temperature
        self._max_tokens = max_tokens

    async def translate_image(
        self,
        image_bytes: bytes,
        media_type: str,
        source_language: str,
        target_language: str,
        domain: DocumentDomain | str | None = DocumentDomain.GENERAL,
        model: str | None = None,
        image_detail: str | None = None,
    ) -> VisionResult:
        """
        Transcribe and translate an image.

        Args:
            image_bytes: Encoded image.
            media_type: MIME type of the image (e.g. image/png).
            source_language: Source code or "auto".
            target_language: Target code.
            domain: Content domain for the system prompt.
            model: Model id override.
            image_detail: Detail hint (auto, low, high); defaults to the configured one.

        Returns:
            VisionResult, possibly refined.

        Raises:
            DocTransError: If the vision call itself fails.
        """
        messages = [
            {"role": "system", "content": get_domain_system_prompt(domain)},
            image_message(
                image_bytes,
                media_type,
                build_vision_prompt(source_language, target_language),
                image_detail or self._image_detail,
            ),
        ]
        response = await self._llm.complete(
            messages,
            temperature=self._temperature,
            max_tokens=self._max_tokens,
            model=model,
        )
        result = parse_vision_response(response.content)

        if (
            not self._disable_refine
            and result.original_text.strip()
            and result.translated_text.strip()
        ):
            result = await self._refine(result, target_language, domain, model)
        return result

    async def _refine(
        self,
        draft: VisionResult,
        target_language: str,
        domain: DocumentDomain | str | None,
        model: str | None,
    ) -> VisionResult:
        """Second pass over the translated draft; any failure keeps the draft."""
        try:
            response = await self._llm.chat(
                get_domain_system_prompt(domain),
                build_refine_prompt(draft.translated_text, target_language),
                temperature=0.0,
                max_tokens=self._max_tokens,
                model=model,
            )
            data = _parse_json_object(response.content)
            refined = str(data.get("translatedText") or "").strip()
        except Exception as e:
            logger.warning(
                "Refine pass failed, keeping draft: %s",
                e,
                extra={"step": "refine", "error_type": type(e).__name__},
            )
            return draft

        if not refined:
            return draft
        return VisionResult(draft.original_text, refined, refined=True)
