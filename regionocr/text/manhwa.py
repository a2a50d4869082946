"""
Comic speech-bubble cleanup.

Bubble text is often letter-spaced for emphasis ("H E L L O") and broken
into very short lines. This stage rejoins both.
"""

from __future__ import annotations

import re

# Single capitals separated by single spaces, on word boundaries
LETTER_SPACED = re.compile(r"\b[A-Z](?: [A-Z])+\b")
PARAGRAPH_BREAK = re.compile(r"\n\s*\n")
WHITESPACE_RUN = re.compile(r"\s+")
SPACE_BEFORE_TERMINAL = re.compile(r"\s+([.,;?!])")


def repair_letter_spacing(text: str) -> str:
    """Collapse letter-spaced capitals: "H E L L O" -> "HELLO"."""
    return LETTER_SPACED.sub(lambda m: m.group(0).replace(" ", ""), text)


def _reflow(paragraph: str) -> str:
    joined = paragraph.replace("-\n", "")
    joined = joined.replace("\n", " ")
    joined = WHITESPACE_RUN.sub(" ", joined).strip()
    return SPACE_BEFORE_TERMINAL.sub(r"\1", joined)


def clean_manhwa_text(text: str) -> str:
    """
    Repair letter spacing and reflow each paragraph onto one line.

    Within a paragraph, a hyphen at the end of a line joins the two halves
    of the word and other line breaks become spaces. Paragraphs (separated
    by blank lines) are rejoined with a single blank line.

    Example:
        >>> clean_manhwa_text("W H A T?\\nare you do-\\ning")
        'WHAT? are you doing'
    """
    if not text:
        return text

    processed = repair_letter_spacing(text)
    return "\n\n".join(_reflow(p) for p in PARAGRAPH_BREAK.split(processed))
