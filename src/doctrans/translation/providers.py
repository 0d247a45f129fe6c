"""
Translation provider adapter.

Four backends share one ``translate`` signature: Google Cloud Translation (classical
NMT, followed by formatting restoration) and three LLM backends (OpenAI, Anthropic,
OpenRouter) driven by domain prompts.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any

import httpx

from doctrans.config import GoogleConfig
from doctrans.errors import ProviderConfigError
from doctrans.languages import is_auto
from doctrans.llm.base import LLMProvider, map_provider_error
from doctrans.models import DocumentDomain, ProviderKind
from doctrans.translation.prompts import build_translation_user_prompt, get_domain_system_prompt
from doctrans.translation.restorer import restore_formatting

logger = logging.getLogger(__name__)

GOOGLE_TRANSLATE_V2_URL = "https://translation.googleapis.com/language/translate/v2"
GOOGLE_TRANSLATE_V3_URL = "https://translation.googleapis.com/v3"


@dataclass
class TranslatedText:
    """Translation plus the source language the backend detected, if it reports one."""

    text: str
    detected_source_language: str | None = None


class TranslationProvider(ABC):
    """Uniform text translation capability."""

    @property
    @abstractmethod
    def kind(self) -> ProviderKind:
        ...

    @abstractmethod
    async def translate(
        self,
        text: str,
        source_language: str,
        target_language: str,
        domain: DocumentDomain | str | None = DocumentDomain.GENERAL,
        model: str | None = None,
    ) -> str:
        """
        Translate ``text``.

        Args:
            text: Text to translate.
            source_language: Source code, or "auto" to detect.
            target_language: Target code.
            domain: Content domain; defaults to general.
            model: Model override, honoured only by the OpenRouter backend.

        Returns:
            Translated text.
        """
        ...

    async def translate_detailed(
        self,
        text: str,
        source_language: str,
        target_language: str,
        domain: DocumentDomain | str | None = DocumentDomain.GENERAL,
        model: str | None = None,
    ) -> TranslatedText:
        """Like ``translate``, also reporting a detected source language when known."""
        return TranslatedText(
            await self.translate(text, source_language, target_language, domain, model)
        )


class GoogleTranslateProvider(TranslationProvider):
    """
    Google Cloud Translation.

    Uses v3 (bearer token + project, domain glossaries) when both a project id and an
    access token are configured, otherwise v2 with an API key. Output goes through the
    formatting restorer since NMT does not keep layout.
    """

    def __init__(
        self,
        config: GoogleConfig,
        timeout: float = 300.0,
        http_client: httpx.AsyncClient | None = None,
    ):
        if not config.api_key and not (config.project_id and config.access_token):
            raise ProviderConfigError(
                "google",
                "set GOOGLE_CLOUD_API_KEY for v2, or GOOGLE_CLOUD_PROJECT_ID and "
                "GOOGLE_CLOUD_ACCESS_TOKEN for v3",
            )
        self._config = config
        self._timeout = timeout
        self._http = http_client

    @property
    def kind(self) -> ProviderKind:
        return ProviderKind.GOOGLE

    @property
    def api_version(self) -> str:
        if self._config.project_id and self._config.access_token:
            return "v3"
        return "v2"

    def glossary_for(self, domain: DocumentDomain | str | None) -> str | None:
        return self._config.glossaries.get(DocumentDomain.parse(domain).value)

    async def _post(self, url: str, **kwargs: Any) -> dict[str, Any]:
        try:
            if self._http is not None:
                response = await self._http.post(url, timeout=self._timeout, **kwargs)
            else:
                async with httpx.AsyncClient(timeout=self._timeout) as client:
                    response = await client.post(url, **kwargs)
            response.raise_for_status()
            return response.json()
        except httpx.HTTPError as e:
            raise map_provider_error("google", e, timeout=self._timeout) from e

    async def _translate_v2(self, text: str, source: str | None, target: str) -> TranslatedText:
        body: dict[str, Any] = {"q": text, "target": target, "format": "text"}
        if source:
            body["source"] = source
        data = await self._post(
            GOOGLE_TRANSLATE_V2_URL, params={"key": self._config.api_key}, json=body
        )
        translations = (data.get("data") or {}).get("translations") or []
        first = translations[0] if translations else {}
        return TranslatedText(
            first.get("translatedText") or text, first.get("detectedSourceLanguage")
        )

    async def _translate_v3(
        self, text: str, source: str | None, target: str, glossary: str | None
    ) -> TranslatedText:
        cfg = self._config
        parent = f"projects/{cfg.project_id}/locations/{cfg.location}"
        body: dict[str, Any] = {
            "contents": [text],
            "targetLanguageCode": target,
            "mimeType": "text/plain",
        }
        if source:
            body["sourceLanguageCode"] = source
        if glossary:
            body["glossaryConfig"] = {
                "glossary": f"{parent}/glossaries/{glossary}",
                "ignoreCase": cfg.glossary_ignore_case,
            }
            logger.info("Using glossary %s", glossary, extra={"glossary": glossary})

        data = await self._post(
            f"{GOOGLE_TRANSLATE_V3_URL}/{parent}:translateText",
            headers={"Authorization": f"Bearer {cfg.access_token}"},
            json=body,
        )
        translations = data.get("translations") or []
        first = translations[0] if translations else {}
        detected = first.get("detectedLanguageCode")
        glossary_translations = data.get("glossaryTranslations") or []
        if glossary_translations and glossary_translations[0].get("translatedText"):
            return TranslatedText(glossary_translations[0]["translatedText"], detected)
        return TranslatedText(first.get("translatedText") or text, detected)

    async def translate(
        self,
        text: str,
        source_language: str,
        target_language: str,
        domain: DocumentDomain | str | None = DocumentDomain.GENERAL,
        model: str | None = None,
    ) -> str:
        result = await self.translate_detailed(
            text, source_language, target_language, domain, model
        )
        return result.text

    async def translate_detailed(
        self,
        text: str,
        source_language: str,
        target_language: str,
        domain: DocumentDomain | str | None = DocumentDomain.GENERAL,
        model: str | None = None,
    ) -> TranslatedText:
        if not text.strip():
            return TranslatedText(text)
        source = None if is_auto(source_language) else source_language
        glossary = self.glossary_for(domain) if (domain and source) else None

        if self.api_version == "v3":
            translated = await self._translate_v3(text, source, target_language, glossary)
        else:
            if glossary:
                logger.warning(
                    "Glossaries are not supported by Translation v2, translating without %s",
                    glossary,
                )
            translated = await self._translate_v2(text, source, target_language)

        if translated.detected_source_language:
            logger.debug(
                "Google detected source language %s",
                translated.detected_source_language,
                extra={"detected_source_language": translated.detected_source_language},
            )
        return TranslatedText(
            restore_formatting(text, translated.text), translated.detected_source_language
        )


class LLMTranslationProvider(TranslationProvider):
    """Translation through a chat LLM with domain system prompts."""

    def __init__(
        self,
        llm: LLMProvider,
        kind: ProviderKind,
        temperature: float = 0.2,
        max_tokens: int = 8192,
    ):
        self._llm = llm
        self._kind = kind
        self._temperature = temperature
        self._max_tokens = max_tokens

    @property
    def kind(self) -> ProviderKind:
        return self._kind

    @property
    def llm(self) -> LLMProvider:
        return self._llm

    async def translate(
        self,
        text: str,
        source_language: str,
        target_language: str,
        domain: DocumentDomain | str | None = DocumentDomain.GENERAL,
        model: str | None = None,
    ) -> str:
        if not text.strip():
            return text
        # Only the router accepts arbitrary model ids per request
        override = model if self._kind == ProviderKind.OPENROUTER else None
        response = await self._llm.chat(
            get_domain_system_prompt(domain),
            build_translation_user_prompt(text, source_language, target_language),
            temperature=self._temperature,
            max_tokens=self._max_tokens,
            model=override,
        )
        logger.debug(
            "%s translated %d chars in %.0fms",
            self._llm.name,
            len(text),
            response.latency_ms,
            extra={"model": response.model, "output_tokens": response.output_tokens},
        )
        return response.content
