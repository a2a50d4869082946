"""
Spacing and structural regex fixes.

Both stages are idempotent and only touch spacing, bars and the
l/1-for-I confusion; they never change word content otherwise.
"""

from __future__ import annotations

import re

# =============================================================================
# WHITESPACE NORMALIZATION
# =============================================================================

HORIZONTAL_RUN = re.compile(r"[ \t]+")
SPACE_BEFORE_CLOSING = re.compile(r"\s+([.,!?:;)}\]])")
SPACE_AFTER_OPENING = re.compile(r"([({\[])\s+")
PUNCT_THEN_LETTER = re.compile(r"([.,!?:;])([a-zA-Z])")


def normalize_whitespace(text: str) -> str:
    """
    Normalize spacing around words and punctuation.

    Collapses space/tab runs, removes space before closing punctuation and
    after opening brackets, and separates punctuation from a following
    letter ("word.Next" -> "word. Next"). Newlines are kept.

    Example:
        >>> normalize_whitespace("Hello ,  world .Next ( yes )")
        'Hello, world. Next (yes)'
    """
    if not text:
        return text

    result = HORIZONTAL_RUN.sub(" ", text)
    result = SPACE_BEFORE_CLOSING.sub(r"\1", result)
    result = SPACE_AFTER_OPENING.sub(r"\1", result)
    result = PUNCT_THEN_LETTER.sub(r"\1 \2", result)
    return result.strip()


# =============================================================================
# REGEX CORRECTIONS
# =============================================================================

SPACE_BEFORE_PUNCT = re.compile(r" ([.,;:!?])")
# Standalone l or 1 read in place of the pronoun I
PRONOUN_I = re.compile(r"\b[l1]\b(?= am| have| don't| will)")
LEADING_BAR = re.compile(r"^\|\s*", re.MULTILINE)
TRAILING_BAR = re.compile(r"\s*\|$", re.MULTILINE)


def apply_regex_corrections(text: str) -> str:
    """
    Apply the always-on structural fixes.

    Example:
        >>> apply_regex_corrections("| l am here ( now ) |")
        'I am here (now)'
    """
    if not text:
        return text

    result = HORIZONTAL_RUN.sub(" ", text)
    result = SPACE_BEFORE_PUNCT.sub(r"\1", result)
    result = result.replace("( ", "(").replace(" )", ")")
    result = PRONOUN_I.sub("I", result)
    result = LEADING_BAR.sub("", result)
    result = TRAILING_BAR.sub("", result)
    return result.strip()
