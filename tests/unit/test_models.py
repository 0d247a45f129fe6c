"""Tests for the data model, languages and the error hierarchy."""

from datetime import datetime, timezone

import pytest

from doctrans.errors import (
    BlobFetchError,
    DocTransError,
    ModelFallbackExhaustedError,
    ProviderModelNotFoundError,
    ProviderTimeoutError,
    ProviderUnavailableError,
    UnsupportedFileTypeError,
)
from doctrans.languages import LANGUAGE_NAMES, is_auto, language_name
from doctrans.models import (
    DocumentDomain,
    JobStatus,
    OCRQualityLevel,
    ProviderKind,
    Segment,
    TranslationJob,
    TranslationRequest,
)


class TestEnums:
    @pytest.mark.parametrize(
        ("value", "expected"),
        [
            ("google", ProviderKind.GOOGLE),
            (" Anthropic ", ProviderKind.ANTHROPIC),
            (None, ProviderKind.OPENROUTER),
            ("deepl", ProviderKind.OPENROUTER),
        ],
    )
    def test_provider_parse(self, value, expected):
        assert ProviderKind.parse(value) == expected

    def test_domain_and_quality_defaults(self):
        assert DocumentDomain.parse("Medical") == DocumentDomain.MEDICAL
        assert DocumentDomain.parse("") == DocumentDomain.GENERAL
        assert OCRQualityLevel.parse("LOW") == OCRQualityLevel.LOW
        assert OCRQualityLevel.parse("medium") == OCRQualityLevel.HIGH
        assert OCRQualityLevel.parse(" Auto ") == OCRQualityLevel.AUTO


class TestSegment:
    def test_camel_case_round_trip(self):
        segment = Segment(
            id="seg-0-abc", original_text="Hallo", translated_text="Hello", page_number=2
        )
        data = segment.to_dict()

        assert data == {
            "id": "seg-0-abc",
            "originalText": "Hallo",
            "translatedText": "Hello",
            "isEdited": False,
            "order": 0,
            "pageNumber": 2,
        }
        assert Segment.from_dict(data) == segment

    def test_page_number_omitted_when_unset(self):
        assert "pageNumber" not in Segment(id="s", original_text="x").to_dict()


class TestRequestAndJob:
    def test_request_normalizes_fields(self):
        request = TranslationRequest(
            order_id="o",
            file_name="f.pdf",
            source_language="auto",
            target_language="en",
            provider="anthropic",
            domain="certificate",
            model="  ",
            ocr_quality="low",
        )
        assert request.provider == ProviderKind.ANTHROPIC
        assert request.domain == DocumentDomain.CERTIFICATE
        assert request.model is None
        assert request.ocr_quality == OCRQualityLevel.LOW

    def test_job_from_request_and_serialization(self):
        request = TranslationRequest("o", "f.pdf", "de", "en", file_index=4)
        job = TranslationJob.from_request(request)
        job.updated_at = datetime(2026, 1, 2, tzinfo=timezone.utc)
        job.segments = [Segment(id="s", original_text="a", translated_text="b")]

        data = job.to_dict()

        assert job.key == ("o", "f.pdf")
        assert data["status"] == JobStatus.PENDING.value
        assert data["provider"] == "openrouter"
        assert data["file_index"] == 4
        assert data["detected_source_language"] is None
        assert data["segments"][0]["originalText"] == "a"
        assert data["updated_at"] == "2026-01-02T00:00:00+00:00"


class TestLanguages:
    def test_names(self):
        assert language_name("de") == "German"
        assert language_name("auto") == "the detected source language"
        assert language_name("xx") == "xx"
        assert len(LANGUAGE_NAMES) == 25

    def test_is_auto(self):
        assert is_auto("auto")
        assert is_auto(" AUTO ")
        assert is_auto("")
        assert not is_auto("en")


class TestErrors:
    def test_categories_distinguish_timeouts_from_unavailable_models(self):
        timeout = ProviderTimeoutError("openrouter", 300.0)
        missing = ProviderModelNotFoundError("anthropic", "claude-x")
        down = ProviderUnavailableError("openai", "503")

        assert timeout.category == "timeout"
        assert missing.category == down.category == "model_unavailable"
        assert "faster model" in timeout.user_message
        assert isinstance(timeout, DocTransError)

    def test_to_dict(self):
        error = UnsupportedFileTypeError("text/plain")
        data = error.to_dict()
        assert data["error_type"] == "UnsupportedFileTypeError"
        assert data["category"] == "unsupported_file"
        assert data["details"] == {"mime_type": "text/plain"}

    def test_user_message_override(self):
        error = BlobFetchError("404 from blob store", user_message="File expired")
        assert error.user_message == "File expired"
        assert BlobFetchError("x").user_message == BlobFetchError.default_user_message

    def test_exhausted_chain_is_a_not_found_error(self):
        error = ModelFallbackExhaustedError("anthropic", ["a", "b"], None)
        assert isinstance(error, ProviderModelNotFoundError)
        assert error.model == "b"
        assert error.details["attempted_models"] == ["a", "b"]
