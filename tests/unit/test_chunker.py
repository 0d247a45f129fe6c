"""Tests for text chunking under provider size limits."""

import pytest

from doctrans.translation.chunker import (
    TextChunk,
    chunk_text,
    join_chunks,
    split_into_chunks,
)


class TestSplitIntoChunks:
    def test_empty_and_whitespace_give_no_chunks(self):
        assert split_into_chunks("") == []
        assert split_into_chunks("   \n\n  ") == []

    def test_short_text_is_one_trimmed_chunk(self):
        chunks = split_into_chunks("  Hello world \n", max_chars=100)
        assert chunks == [TextChunk("Hello world")]

    def test_nine_thousand_chars_of_lines_give_three_chunks(self):
        """18 lines of 499 chars split at line boundaries into ~4000/4000/1000."""
        lines = [chr(ord("a") + i % 26) * 499 for i in range(18)]
        text = "\n".join(lines)

        chunks = split_into_chunks(text, max_chars=4000)

        assert [len(c.text) for c in chunks] == [3999, 3999, 999]
        assert all(c.text.endswith(c.text[-1] * 499) for c in chunks)
        assert [c.separator for c in chunks] == ["\n", "\n", ""]

    def test_prefers_paragraph_breaks(self):
        text = "A" * 30 + "\n\n" + "B" * 30 + "\n\n" + "C" * 30
        chunks = split_into_chunks(text, max_chars=70)

        assert [c.text for c in chunks] == ["A" * 30 + "\n\n" + "B" * 30, "C" * 30]
        assert chunks[0].separator == "\n\n"

    def test_hard_splits_a_line_without_breaks(self):
        text = "x" * 250
        chunks = split_into_chunks(text, max_chars=100)

        assert [len(c.text) for c in chunks] == [100, 100, 50]
        assert all(c.separator == "" for c in chunks)

    def test_no_chunk_exceeds_limit(self):
        text = "\n\n".join(f"Paragraph {i}. " + "word " * (i * 7) for i in range(40))
        for chunk in split_into_chunks(text, max_chars=120):
            assert len(chunk.text) <= 120

    @pytest.mark.parametrize(
        "text",
        [
            "one\ntwo\n\nthree\n \n\nfour",
            "line\r\nwith\r\ncrlf\r\n\r\nendings" * 20,
            "short words " * 200,
            "\n\n".join("p" * n for n in range(1, 60)),
        ],
    )
    def test_join_reproduces_trimmed_input(self, text):
        expected = text.replace("\r\n", "\n").strip()
        chunks = split_into_chunks(text, max_chars=37)
        assert join_chunks(chunks) == expected

    def test_rejects_non_positive_limit(self):
        with pytest.raises(ValueError):
            split_into_chunks("text", max_chars=0)


class TestJoinChunks:
    def test_substitutes_translations_and_keeps_separators(self):
        chunks = [TextChunk("Hallo", "\n\n"), TextChunk("Welt")]
        assert join_chunks(chunks, ["Hello", "World"]) == "Hello\n\nWorld"

    def test_mismatched_translations_rejected(self):
        with pytest.raises(ValueError):
            join_chunks([TextChunk("a")], ["x", "y"])


def test_chunk_text_returns_strings():
    assert chunk_text("a\n\nb", max_chars=1) == ["a", "b"]
