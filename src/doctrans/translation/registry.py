"""
Client registry: every backend client is built once and then only read.

Construction is lazy per backend so a missing credential only fails the jobs that
need that backend. A lock makes first construction single-assignment when several
jobs start concurrently.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable
from typing import Any, TypeVar

from doctrans.config import Settings
from doctrans.fetch import BlobFetcher, HttpBlobFetcher
from doctrans.llm.base import LLMProvider
from doctrans.llm.factory import create_llm_provider
from doctrans.llm.fallback import LogCallback
from doctrans.models import ProviderKind
from doctrans.ocr.base import OCRProvider
from doctrans.ocr.google_vision import GoogleVisionOCR
from doctrans.ocr.pdf import PDFExtractor
from doctrans.translation.providers import (
    GoogleTranslateProvider,
    LLMTranslationProvider,
    TranslationProvider,
)
from doctrans.translation.vision import VisionTranslator

logger = logging.getLogger(__name__)

T = TypeVar("T")


class ClientRegistry:
    """Holds the settings and the backend clients built from them."""

    def __init__(
        self,
        settings: Settings,
        *,
        fetcher: BlobFetcher | None = None,
        ocr: OCRProvider | None = None,
        llms: dict[ProviderKind, LLMProvider] | None = None,
        translators: dict[ProviderKind, TranslationProvider] | None = None,
        log_callback: LogCallback | None = None,
    ):
        """
        Initialize the registry.

        Args:
            settings: Loaded settings.
            fetcher: Blob fetcher; defaults to HTTP.
            ocr: OCR backend; defaults to Google Vision on first use.
            llms: Pre-built LLM providers by kind (tests, custom transports).
            translators: Pre-built translation providers by kind.
            log_callback: Forwarded to model-fallback chains.
        """
        self.settings = settings
        self._log_callback = log_callback
        self._lock = asyncio.Lock()
        self._fetcher = fetcher or HttpBlobFetcher(
            timeout=settings.translation.request_timeout_seconds
        )
        self._ocr = ocr
        self._llms: dict[ProviderKind, LLMProvider] = dict(llms or {})
        self._translators: dict[ProviderKind, TranslationProvider] = dict(translators or {})
        self._vision: VisionTranslator | None = None
        self.pdf = PDFExtractor(
            min_page_chars=settings.ocr.min_page_chars,
            render_scale=settings.ocr.render_scale,
        )

    @classmethod
    def from_settings(cls, settings: Settings, **kwargs: Any) -> ClientRegistry:
        return cls(settings, **kwargs)

    @property
    def fetcher(self) -> BlobFetcher:
        return self._fetcher

    async def _memoize(self, cache: dict[Any, T], key: Any, build: Callable[[], T]) -> T:
        if key in cache:
            return cache[key]
        async with self._lock:
            if key not in cache:
                cache[key] = build()
                logger.debug("Constructed client for %s", key)
            return cache[key]

    async def llm(self, kind: ProviderKind) -> LLMProvider:
        """LLM transport for an LLM backend kind."""
        return await self._memoize(
            self._llms,
            kind,
            lambda: create_llm_provider(kind, self.settings, log_callback=self._log_callback),
        )

    async def translation_provider(self, kind: ProviderKind) -> TranslationProvider:
        """
        Text translation provider for a backend kind.

        Raises:
            ProviderConfigError: If the backend has no credentials configured.
        """
        if kind in self._translators:
            return self._translators[kind]

        if kind == ProviderKind.GOOGLE:
            return await self._memoize(
                self._translators,
                kind,
                lambda: GoogleTranslateProvider(
                    self.settings.providers.google,
                    timeout=self.settings.translation.request_timeout_seconds,
                ),
            )

        llm = await self.llm(kind)
        return await self._memoize(
            self._translators,
            kind,
            lambda: LLMTranslationProvider(
                llm,
                kind,
                temperature=self.settings.translation.temperature,
                max_tokens=self.settings.translation.max_tokens,
            ),
        )

    async def ocr(self) -> OCRProvider:
        """
        OCR backend.

        Raises:
            ProviderConfigError: If no Google credentials are configured.
        """
        if self._ocr is None:
            async with self._lock:
                if self._ocr is None:
                    self._ocr = GoogleVisionOCR(
                        self.settings.providers.google,
                        timeout=self.settings.translation.request_timeout_seconds,
                    )
        return self._ocr

    async def vision(self) -> VisionTranslator:
        """Vision translator on the OpenRouter transport."""
        if self._vision is None:
            llm = await self.llm(ProviderKind.OPENROUTER)
            async with self._lock:
                if self._vision is None:
                    self._vision = VisionTranslator(
                        llm,
                        disable_refine=self.settings.vision.disable_refine,
                        image_detail=self.settings.vision.image_detail,
                        temperature=self.settings.translation.temperature,
                        max_tokens=self.settings.translation.max_tokens,
                    )
        return self._vision
