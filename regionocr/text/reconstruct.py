"""Line merging and sentence stabilization."""

from __future__ import annotations

import re

PARAGRAPH_BREAK = re.compile(r"\n\s*\n")
# "pre- fix" left over from a hyphenated line break
BROKEN_HYPHENATION = re.compile(r"(\w+)-\s+(\w+)")


def merge_lines(text: str) -> str:
    """Replace single newlines inside paragraphs with spaces; keep blank-line breaks."""
    return "\n\n".join(p.replace("\n", " ") for p in PARAGRAPH_BREAK.split(text))


def stabilize_sentences(text: str) -> str:
    """Join words split as "word- word"."""
    return BROKEN_HYPHENATION.sub(r"\1\2", text)


def reconstruct_text(text: str, merge: bool = True, stabilize: bool = True) -> str:
    """
    Rebuild sentences broken by OCR line wrapping.

    Example:
        >>> reconstruct_text("a self-\\ncontained\\nline\\n\\nNext")
        'a selfcontained line\\n\\nNext'
    """
    if not text:
        return text

    result = text
    if merge:
        result = merge_lines(result)
    if stabilize:
        result = stabilize_sentences(result)
    return result
