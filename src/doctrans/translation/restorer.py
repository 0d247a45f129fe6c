"""
Formatting restoration for classical machine translation output.

NMT output often loses the line and column structure of the source. These helpers
re-align table rows against the original, fall back to coarser paragraph or line
redistribution when line counts differ, and put back dates, separator lines and
page markers verbatim. All of it is best-effort: when nothing matches, the
translation passes through unaligned.
"""

from __future__ import annotations

import re

_TABLE_SEPARATOR_CELL = re.compile(r"^\s*:?-{3,}:?\s*$")
_SECTION_BREAK = re.compile(r"\n[ \t]*\n\s*")

SPECIAL_TOKEN_PATTERNS: tuple[re.Pattern[str], ...] = (
    # dates: 12/05/2024, 2024-05-12, 12.05.24
    re.compile(r"\b\d{1,4}[./-]\d{1,2}[./-]\d{1,4}\b"),
    # separator lines made of dashes or equals signs
    re.compile(r"^[ \t]*[-=]{3,}[ \t]*$", re.MULTILINE),
    # page markers
    re.compile(r"\bpage\s+\d+\s+of\s+\d+\b", re.IGNORECASE),
)


def _split_row(line: str) -> tuple[list[str], bool, bool]:
    """Return (cells, leading_pipe, trailing_pipe) for a table row."""
    stripped = line.strip()
    leading = stripped.startswith("|")
    trailing = stripped.endswith("|") and len(stripped) > 1
    inner = stripped[1 if leading else 0 : -1 if trailing else None]
    return inner.split("|"), leading, trailing


def _join_row(cells: list[str], leading: bool, trailing: bool) -> str:
    body = "|".join(cells)
    return f"{'|' if leading else ''}{body}{'|' if trailing else ''}"


def is_separator_row(line: str) -> bool:
    """True for markdown table separator rows like ``|---|:--:|``."""
    if "|" not in line:
        return False
    cells, _, _ = _split_row(line)
    return all(_TABLE_SEPARATOR_CELL.match(cell) for cell in cells)


def _rebuild_separator(original: str) -> str:
    cells, leading, trailing = _split_row(original)
    rebuilt = []
    for cell in cells:
        core = cell.strip()
        dashes = core.count("-")
        left = ":" if core.startswith(":") else ""
        right = ":" if core.endswith(":") else ""
        pad_left = cell[: len(cell) - len(cell.lstrip())]
        pad_right = cell[len(cell.rstrip()) :]
        rebuilt.append(f"{pad_left}{left}{'-' * dashes}{right}{pad_right}")
    return _join_row(rebuilt, leading, trailing)


def _distribute_words(words: list[str], weights: list[int]) -> list[str]:
    """Split words into len(weights) groups proportionally to the weights."""
    total = sum(weights)
    groups: list[str] = []
    start = 0
    cumulative = 0
    for weight in weights:
        cumulative += weight
        end = round(len(words) * cumulative / total)
        groups.append(" ".join(words[start:end]))
        start = end
    return groups


def restore_table_line(original: str, translated: str) -> str:
    """
    Re-align one translated line against its original table row.

    Non-table lines and empty translations are returned unchanged. Separator rows are
    rebuilt from the original's dash runs. Data rows take the original's column count;
    when the translation has a different count its words are redistributed across the
    columns by the original cells' share of characters. Every cell is padded to the
    wider of its original and translated width.
    """
    if "|" not in original or not translated.strip():
        return translated
    if is_separator_row(original):
        return _rebuild_separator(original)

    orig_cells, leading, trailing = _split_row(original)
    orig_texts = [cell.strip() for cell in orig_cells]

    if "|" in translated:
        trans_cells = [cell.strip() for cell in _split_row(translated)[0]]
    else:
        trans_cells = []
    if len(trans_cells) != len(orig_texts):
        weights = [max(len(text), 1) for text in orig_texts]
        trans_cells = _distribute_words(translated.replace("|", " ").split(), weights)

    padded = []
    for orig_text, trans_text in zip(orig_texts, trans_cells):
        width = max(len(orig_text), len(trans_text))
        padded.append(f" {trans_text.ljust(width)} ")
    indent = original[: len(original) - len(original.lstrip())]
    return indent + _join_row(padded, leading, trailing)


def _restore_by_sections(original: str, translated: str) -> str:
    orig_sections = [s for s in _SECTION_BREAK.split(original.strip()) if s.strip()]
    trans_sections = [s for s in _SECTION_BREAK.split(translated.strip()) if s.strip()]
    if len(orig_sections) == len(trans_sections):
        return "\n\n".join(section.strip() for section in trans_sections)

    # Lossy last resort: spread words evenly over the original's lines
    line_count = len([line for line in original.split("\n") if line.strip()])
    words = translated.split()
    if line_count <= 1 or not words:
        return translated
    lines = _distribute_words(words, [1] * line_count)
    return "\n".join(line for line in lines if line)


def restore_special_tokens(original: str, translated: str) -> str:
    """Substitute dates, separator lines and page markers with the original literals."""
    for pattern in SPECIAL_TOKEN_PATTERNS:
        originals = [m.group(0) for m in pattern.finditer(original)]
        if not originals:
            continue
        index = 0

        def substitute(match: re.Match[str]) -> str:
            nonlocal index
            if index >= len(originals):
                return match.group(0)
            replacement = originals[index]
            index += 1
            return replacement

        translated = pattern.sub(substitute, translated)
    return translated


def restore_formatting(original: str, translated: str) -> str:
    """
    Best-effort restoration of layout lost by machine translation.

    Args:
        original: Source text sent to the translator.
        translated: Raw translator output.

    Returns:
        The translation with table rows, paragraph breaks and format-sensitive tokens
        re-aligned to the original where possible.
    """
    if not original or not translated:
        return translated

    original = original.replace("\r\n", "\n")
    translated = translated.replace("\r\n", "\n")
    orig_lines = original.split("\n")
    trans_lines = translated.split("\n")

    if len(orig_lines) == len(trans_lines):
        restored = "\n".join(
            restore_table_line(o, t) for o, t in zip(orig_lines, trans_lines)
        )
    else:
        restored = _restore_by_sections(original, translated)

    return restore_special_tokens(original, restored)
