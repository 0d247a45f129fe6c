"""
Text chunking under provider size limits.

Splits long text on blank lines first, then single newlines, and only hard-slices
lines that have no break opportunity. Each chunk remembers the boundary characters
that followed it, so joining chunks with their separators reproduces the input.
"""

from __future__ import annotations

import re
from dataclasses import dataclass

DEFAULT_MAX_CHARS = 4000

_PARAGRAPH_BREAK = re.compile(r"(\n[ \t]*\n\s*)")


@dataclass
class TextChunk:
    """A chunk of text and the boundary characters that follow it."""

    text: str
    separator: str = ""


def _pieces(text: str, max_chars: int) -> list[tuple[str, str]]:
    """Break text into (atom, following-boundary) pairs no longer than max_chars."""
    pieces: list[tuple[str, str]] = []
    parts = _PARAGRAPH_BREAK.split(text)
    # split() with a capture group alternates content / separator
    for i in range(0, len(parts), 2):
        paragraph = parts[i]
        boundary = parts[i + 1] if i + 1 < len(parts) else ""
        if len(paragraph) <= max_chars:
            pieces.append((paragraph, boundary))
            continue

        lines = paragraph.split("\n")
        for j, line in enumerate(lines):
            line_boundary = "\n" if j < len(lines) - 1 else boundary
            if len(line) <= max_chars:
                pieces.append((line, line_boundary))
                continue
            slices = [line[k : k + max_chars] for k in range(0, len(line), max_chars)]
            for k, piece in enumerate(slices):
                pieces.append((piece, line_boundary if k == len(slices) - 1 else ""))
    return pieces


def split_into_chunks(text: str, max_chars: int = DEFAULT_MAX_CHARS) -> list[TextChunk]:
    """
    Split text into chunks of at most ``max_chars`` characters.

    Args:
        text: Input text; line endings are normalized and surrounding whitespace trimmed.
        max_chars: Maximum characters per chunk.

    Returns:
        Ordered chunks. Joining ``chunk.text + chunk.separator`` reproduces the trimmed
        input; chunks that are blank after trimming are dropped and their text moved into
        the neighbouring boundary.
    """
    if max_chars < 1:
        raise ValueError("max_chars must be positive")

    text = text.replace("\r\n", "\n").replace("\r", "\n").strip()
    if not text:
        return []
    if len(text) <= max_chars:
        return [TextChunk(text)]

    chunks: list[TextChunk] = []
    buffer = ""
    pending_sep = ""
    for piece, boundary in _pieces(text, max_chars):
        if buffer and len(buffer) + len(pending_sep) + len(piece) > max_chars:
            chunks.append(TextChunk(buffer, pending_sep))
            buffer = piece
        else:
            buffer = f"{buffer}{pending_sep}{piece}" if buffer else piece
        pending_sep = boundary
    if buffer:
        chunks.append(TextChunk(buffer, pending_sep))

    # The input is stripped, so the first chunk is never blank
    result: list[TextChunk] = []
    for chunk in chunks:
        if result and not chunk.text.strip():
            result[-1].separator += chunk.text + chunk.separator
            continue
        result.append(chunk)
    return result


def chunk_text(text: str, max_chars: int = DEFAULT_MAX_CHARS) -> list[str]:
    """Chunk text and return just the chunk strings."""
    return [chunk.text for chunk in split_into_chunks(text, max_chars)]


def join_chunks(chunks: list[TextChunk], texts: list[str] | None = None) -> str:
    """
    Reassemble chunks with their boundary characters.

    Args:
        chunks: Chunks from ``split_into_chunks``.
        texts: Optional replacement text per chunk (e.g. translations).
    """
    if texts is not None and len(texts) != len(chunks):
        raise ValueError("texts must match chunks one to one")
    parts = []
    for i, chunk in enumerate(chunks):
        parts.append(texts[i] if texts is not None else chunk.text)
        parts.append(chunk.separator)
    return "".join(parts)
