"""Supported languages and display names used in prompts."""

from __future__ import annotations

AUTO_DETECT = "auto"

LANGUAGE_NAMES: dict[str, str] = {
    "en": "English",
    "es": "Spanish",
    "fr": "French",
    "de": "German",
    "it": "Italian",
    "pt": "Portuguese",
    "nl": "Dutch",
    "pl": "Polish",
    "ro": "Romanian",
    "el": "Greek",
    "cs": "Czech",
    "sv": "Swedish",
    "hu": "Hungarian",
    "da": "Danish",
    "fi": "Finnish",
    "no": "Norwegian",
    "sk": "Slovak",
    "hr": "Croatian",
    "bg": "Bulgarian",
    "lt": "Lithuanian",
    "sl": "Slovenian",
    "lv": "Latvian",
    "et": "Estonian",
    "ga": "Irish",
    "mt": "Maltese",
}


def is_auto(code: str | None) -> bool:
    """True when the source language should be detected."""
    return not code or code.strip().lower() == AUTO_DETECT


def language_name(code: str | None) -> str:
    """Display name for a language code; unknown codes are returned verbatim."""
    if is_auto(code):
        return "the detected source language"
    assert code is not None
    return LANGUAGE_NAMES.get(code.lower(), code)
