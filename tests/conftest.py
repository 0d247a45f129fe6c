"""Pytest configuration and fixtures."""

from __future__ import annotations

import io
from typing import Any

import pytest

from doctrans.config import Settings
from doctrans.fetch import FetchedBlob
from doctrans.llm.base import LLMProvider, LLMResponse
from doctrans.models import DocumentDomain, OCRQualityLevel, ProviderKind
from doctrans.ocr.base import OCRProvider, OCRResult
from doctrans.translation.providers import TranslationProvider
from doctrans.translation.registry import ClientRegistry


class FakeLLM(LLMProvider):
    """Scripted LLM: pops one response (or exception) per call and records the call."""

    def __init__(self, responses: list[str | Exception] | None = None, name: str = "fake"):
        self.responses = list(responses or [])
        self.calls: list[dict[str, Any]] = []
        self._name = name

    @property
    def name(self) -> str:
        return self._name

    @property
    def model(self) -> str:
        return "fake-model"

    async def complete(
        self,
        messages: list[dict[str, Any]],
        *,
        temperature: float = 0.2,
        max_tokens: int = 8192,
        model: str | None = None,
        **kwargs: Any,
    ) -> LLMResponse:
        self.calls.append({"messages": messages, "model": model, "temperature": temperature})
        if not self.responses:
            raise AssertionError("FakeLLM ran out of scripted responses")
        response = self.responses.pop(0)
        if isinstance(response, Exception):
            raise response
        return LLMResponse(content=response, model=model or self.model)


class FakeTranslator(TranslationProvider):
    """Tags text with the target language so tests can see what was translated."""

    def __init__(self, kind: ProviderKind = ProviderKind.OPENROUTER):
        self._kind = kind
        self.calls: list[dict[str, Any]] = []

    @property
    def kind(self) -> ProviderKind:
        return self._kind

    async def translate(
        self,
        text: str,
        source_language: str,
        target_language: str,
        domain: DocumentDomain | str | None = DocumentDomain.GENERAL,
        model: str | None = None,
    ) -> str:
        self.calls.append(
            {
                "text": text,
                "source": source_language,
                "target": target_language,
                "domain": domain,
                "model": model,
            }
        )
        return f"[{target_language}] {text}"


class FakeOCR(OCRProvider):
    """Returns a fixed text for every image, or raises the configured error."""

    def __init__(self, text: str = "", error: Exception | None = None):
        self.text = text
        self.error = error
        self.calls: list[OCRQualityLevel] = []

    @property
    def name(self) -> str:
        return "fake-ocr"

    async def recognize(
        self,
        image_bytes: bytes,
        quality: OCRQualityLevel = OCRQualityLevel.HIGH,
        **kwargs: Any,
    ) -> OCRResult:
        self.calls.append(quality)
        if self.error is not None:
            raise self.error
        return OCRResult(text=self.text, confidence=0.9)


class FakeFetcher:
    """In-memory blob store keyed by URL."""

    def __init__(self, blobs: dict[str, FetchedBlob] | None = None):
        self.blobs = dict(blobs or {})
        self.fetched: list[str] = []

    async def fetch(self, url: str) -> FetchedBlob:
        self.fetched.append(url)
        return self.blobs[url]


@pytest.fixture
def settings(monkeypatch) -> Settings:
    """Settings with no credentials picked up from the environment."""
    for var in (
        "GOOGLE_CLOUD_API_KEY",
        "GOOGLE_CLOUD_PROJECT_ID",
        "GOOGLE_CLOUD_ACCESS_TOKEN",
        "OPENAI_API_KEY",
        "ANTHROPIC_API_KEY",
        "OPENROUTER_API_KEY",
    ):
        monkeypatch.delenv(var, raising=False)
    return Settings()


@pytest.fixture
def fake_translator() -> FakeTranslator:
    return FakeTranslator()


@pytest.fixture
def fake_ocr() -> FakeOCR:
    return FakeOCR(text="Scanned text")


@pytest.fixture
def vision_llm() -> FakeLLM:
    """Router LLM used by the vision translator; empty script unless a test fills it."""
    return FakeLLM(name="openrouter")


@pytest.fixture
def fetcher() -> FakeFetcher:
    return FakeFetcher()


@pytest.fixture
def registry(settings, fake_translator, fake_ocr, vision_llm, fetcher) -> ClientRegistry:
    return ClientRegistry(
        settings,
        fetcher=fetcher,
        ocr=fake_ocr,
        llms={ProviderKind.OPENROUTER: vision_llm},
        translators={
            ProviderKind.OPENROUTER: fake_translator,
            ProviderKind.GOOGLE: fake_translator,
            ProviderKind.OPENAI: fake_translator,
            ProviderKind.ANTHROPIC: fake_translator,
        },
    )


@pytest.fixture
def png_bytes() -> bytes:
    """A small white PNG with a black bar."""
    from PIL import Image, ImageDraw

    image = Image.new("RGB", (120, 40), "white")
    ImageDraw.Draw(image).rectangle((10, 15, 110, 25), fill="black")
    buffer = io.BytesIO()
    image.save(buffer, format="PNG")
    return buffer.getvalue()


def make_pdf(pages: list[str]) -> bytes:
    """Build a PDF with one page per string; empty strings give blank pages."""
    import fitz

    doc = fitz.open()
    for text in pages:
        page = doc.new_page()
        if text:
            page.insert_text((72, 72), text)
    data = doc.tobytes()
    doc.close()
    return data


def make_docx(paragraphs: list[str], table: list[list[str]] | None = None) -> bytes:
    from docx import Document

    document = Document()
    for paragraph in paragraphs:
        document.add_paragraph(paragraph)
    if table:
        grid = document.add_table(rows=len(table), cols=len(table[0]))
        for r, row in enumerate(table):
            for c, value in enumerate(row):
                grid.cell(r, c).text = value
    buffer = io.BytesIO()
    document.save(buffer)
    return buffer.getvalue()


def make_xlsx(sheets: dict[str, list[list[Any]]]) -> bytes:
    from openpyxl import Workbook

    workbook = Workbook()
    workbook.remove(workbook.active)
    for title, rows in sheets.items():
        sheet = workbook.create_sheet(title)
        for row in rows:
            sheet.append(row)
    buffer = io.BytesIO()
    workbook.save(buffer)
    return buffer.getvalue()


@pytest.fixture
def pdf_factory():
    return make_pdf


@pytest.fixture
def docx_factory():
    return make_docx


@pytest.fixture
def xlsx_factory():
    return make_xlsx


@pytest.fixture
def llm_factory():
    return FakeLLM


@pytest.fixture
def ocr_factory():
    return FakeOCR
