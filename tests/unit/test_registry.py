"""Tests for the client registry and blob fetching."""

import asyncio

import httpx
import pytest

from doctrans.errors import BlobFetchError, ProviderConfigError
from doctrans.fetch import HttpBlobFetcher
from doctrans.models import ProviderKind
from doctrans.translation.providers import GoogleTranslateProvider, LLMTranslationProvider
from doctrans.translation.registry import ClientRegistry


class TestClientRegistry:
    async def test_clients_built_once_under_concurrency(self, settings):
        settings.providers.google.api_key = "key"
        registry = ClientRegistry(settings)

        providers = await asyncio.gather(
            *(registry.translation_provider(ProviderKind.GOOGLE) for _ in range(5))
        )

        assert isinstance(providers[0], GoogleTranslateProvider)
        assert all(p is providers[0] for p in providers)

    async def test_llm_backends_wrapped_as_translation_providers(self, settings, llm_factory):
        llm = llm_factory(name="openai")
        registry = ClientRegistry(settings, llms={ProviderKind.OPENAI: llm})

        provider = await registry.translation_provider(ProviderKind.OPENAI)

        assert isinstance(provider, LLMTranslationProvider)
        assert provider.llm is llm
        assert provider.kind == ProviderKind.OPENAI

    async def test_missing_credentials_fail_only_that_backend(self, settings, llm_factory):
        registry = ClientRegistry(settings, llms={ProviderKind.OPENROUTER: llm_factory()})

        with pytest.raises(ProviderConfigError):
            await registry.translation_provider(ProviderKind.ANTHROPIC)
        with pytest.raises(ProviderConfigError):
            await registry.ocr()
        assert await registry.translation_provider(ProviderKind.OPENROUTER) is not None

    async def test_vision_translator_uses_router_llm(self, settings, llm_factory):
        settings.vision.disable_refine = True
        llm = llm_factory(['{"originalText": "a", "translatedText": "b"}'])
        registry = ClientRegistry(settings, llms={ProviderKind.OPENROUTER: llm})

        vision = await registry.vision()

        assert vision is await registry.vision()
        result = await vision.translate_image(b"img", "image/png", "de", "en")
        assert result.translated_text == "b"
        assert len(llm.calls) == 1


class TestHttpBlobFetcher:
    async def test_fetch_strips_content_type_params(self):
        client = httpx.AsyncClient(
            transport=httpx.MockTransport(
                lambda r: httpx.Response(
                    200, content=b"%PDF-1.7", headers={"content-type": "Application/PDF; qs=0.9"}
                )
            )
        )

        blob = await HttpBlobFetcher(client=client).fetch("https://blobs.example.com/a.pdf")

        assert blob.data == b"%PDF-1.7"
        assert blob.content_type == "application/pdf"

    async def test_http_errors_become_fetch_errors(self):
        client = httpx.AsyncClient(transport=httpx.MockTransport(lambda r: httpx.Response(404)))

        with pytest.raises(BlobFetchError) as excinfo:
            await HttpBlobFetcher(client=client).fetch("https://blobs.example.com/missing")
        assert excinfo.value.details["url"] == "https://blobs.example.com/missing"
