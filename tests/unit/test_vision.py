"""Tests for vision response parsing and the vision translator."""

import json

import pytest

from doctrans.errors import ProviderTimeoutError
from doctrans.translation.vision import (
    VisionResult,
    VisionTranslator,
    parse_vision_response,
    strip_code_fences,
)


class TestParseVisionResponse:
    def test_fenced_json(self):
        text = '```json\n{"originalText":"Hi","translatedText":"Hola"}\n```'
        assert parse_vision_response(text) == VisionResult("Hi", "Hola")

    def test_fenced_matches_unwrapped(self):
        body = json.dumps({"originalText": "Zeile 1\nZeile 2", "translatedText": "Line 1\nLine 2"})
        assert parse_vision_response(f"```\n{body}\n```") == parse_vision_response(body)

    def test_json_surrounded_by_prose(self):
        text = 'Here you go: {"originalText": "A", "translatedText": "B"} Hope this helps.'
        assert parse_vision_response(text) == VisionResult("A", "B")

    def test_regex_salvage_of_broken_json(self):
        text = 'originalText was read. "originalText": "X", "translatedText": "Y" (truncated'
        assert parse_vision_response(text) == VisionResult("X", "Y")

    def test_salvage_unescapes_strings(self):
        text = '{"originalText": "a\\nb \\"q\\"", "translatedText": "c", trailing'
        result = parse_vision_response(text)
        assert result.original_text == 'a\nb "q"'
        assert result.translated_text == "c"

    def test_raw_text_used_as_last_resort(self):
        result = parse_vision_response("  Just a plain translation.  ")
        assert result == VisionResult("", "Just a plain translation.")

    def test_missing_fields_become_empty(self):
        assert parse_vision_response('{"translatedText": "only"}') == VisionResult("", "only")

    def test_strip_code_fences_leaves_plain_text(self):
        assert strip_code_fences(" plain ") == "plain"


class TestVisionTranslator:
    async def test_single_call_with_inline_image(self, llm_factory, png_bytes):
        llm = llm_factory(['{"originalText": "Hallo", "translatedText": "Hello"}'])
        translator = VisionTranslator(llm, disable_refine=True, image_detail="low")

        result = await translator.translate_image(
            png_bytes, "image/png", "de", "en", "legal", model="google/gemini-2.5-pro"
        )

        assert result == VisionResult("Hallo", "Hello")
        assert len(llm.calls) == 1
        call = llm.calls[0]
        assert call["model"] == "google/gemini-2.5-pro"
        system, user = call["messages"]
        assert system["role"] == "system"
        image_part, text_part = user["content"]
        assert image_part["image_url"]["url"].startswith("data:image/png;base64,")
        assert image_part["image_url"]["detail"] == "low"
        assert "German" in text_part["text"]

    async def test_refine_pass_replaces_translation(self, llm_factory, png_bytes):
        llm = llm_factory(
            [
                '{"originalText": "| a | b |", "translatedText": "| x |y|"}',
                '```json\n{"translatedText": "| x | y |"}\n```',
            ]
        )
        result = await VisionTranslator(llm).translate_image(png_bytes, "image/png", "auto", "en")

        assert result == VisionResult("| a | b |", "| x | y |", refined=True)
        refine_call = llm.calls[1]
        assert refine_call["temperature"] == 0.0
        assert all(isinstance(m["content"], str) for m in refine_call["messages"])

    async def test_refine_failure_keeps_draft(self, llm_factory, png_bytes):
        llm = llm_factory(
            [
                '{"originalText": "A", "translatedText": "B"}',
                ProviderTimeoutError("openrouter", 1.0),
            ]
        )
        result = await VisionTranslator(llm).translate_image(png_bytes, "image/png", "fr", "en")
        assert result == VisionResult("A", "B")

    async def test_refine_unparseable_keeps_draft(self, llm_factory, png_bytes):
        llm = llm_factory(['{"originalText": "A", "translatedText": "B"}', "no json here"])
        result = await VisionTranslator(llm).translate_image(png_bytes, "image/png", "fr", "en")
        assert result == VisionResult("A", "B")

    async def test_no_refine_when_a_field_is_empty(self, llm_factory, png_bytes):
        llm = llm_factory(['{"originalText": "", "translatedText": ""}'])
        result = await VisionTranslator(llm).translate_image(png_bytes, "image/png", "fr", "en")
        assert result.is_empty
        assert len(llm.calls) == 1

    async def test_vision_call_failure_propagates(self, llm_factory, png_bytes):
        llm = llm_factory([ProviderTimeoutError("openrouter", 1.0)])
        with pytest.raises(ProviderTimeoutError):
            await VisionTranslator(llm).translate_image(png_bytes, "image/png", "fr", "en")
