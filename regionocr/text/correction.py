"""
Dictionary correction stage.

Replaces unknown words with the nearest vocabulary word within a small
edit distance, keeping the original capitalization.
"""

from __future__ import annotations

import logging
import re
from typing import TYPE_CHECKING

from regionocr.exceptions import DictionaryNotLoadedError

if TYPE_CHECKING:
    from regionocr.ocr.dictionary import DictionaryManager

logger = logging.getLogger(__name__)

WORD = re.compile(r"[a-zA-Z]+")
ALL_CAPS = re.compile(r"^[A-Z]+$")
MIN_WORD_LENGTH = 3


def match_case(original: str, corrected: str) -> str:
    """
    Apply the capitalization pattern of ``original`` to ``corrected``.

    ALL-CAPS stays all caps and an initial capital stays an initial
    capital; anything else gets ``corrected`` as is.
    """
    if original == original.upper():
        return corrected.upper()
    if original[:1] == original[:1].upper():
        return corrected[:1].upper() + corrected[1:]
    return corrected


def correct_spelling(
    text: str,
    dictionary: DictionaryManager | None,
    lang: str = "eng",
    max_distance: int = 1,
    ignore_caps: bool = True,
) -> str:
    """
    Correct unknown ``[a-zA-Z]+`` tokens against the vocabulary for ``lang``.

    Tokens shorter than three letters, known words and (with
    ``ignore_caps``) ALL-CAPS tokens are left alone. If no vocabulary is
    loaded for ``lang`` the text is returned unchanged.

    Example:
        >>> manager = DictionaryManager()
        >>> manager.load("eng", words=["hello", "world"])
        >>> correct_spelling("Helle World", manager)
        'Hello World'
    """
    if not text:
        return text

    if dictionary is None:
        logger.debug("Skipping dictionary correction: no dictionary configured")
        return text

    try:
        dictionary.words(lang)
    except DictionaryNotLoadedError as e:
        logger.debug("Skipping dictionary correction: %s", e)
        return text

    corrections = 0

    def replace(match: re.Match[str]) -> str:
        nonlocal corrections
        word = match.group(0)
        if len(word) < MIN_WORD_LENGTH:
            return word
        if ignore_caps and ALL_CAPS.match(word):
            return word
        if dictionary.has(word, lang):
            return word

        corrected = dictionary.closest(word, lang, max_distance=max_distance)
        if corrected is None:
            return word
        corrections += 1
        return match_case(word, corrected)

    result = WORD.sub(replace, text)
    if corrections:
        logger.debug("Dictionary correction changed %d words", corrections)
    return result
