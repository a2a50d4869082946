"""
Text pipeline runner.

Stage order is fixed; each stage can be switched off in TextOptions, in
which case it does not run at all:

    noise -> whitespace -> manhwa -> regex -> dictionary -> user rules -> reconstruct

Example:
    >>> process_text("Hello World | ~ $100", TextOptions(noise_aggression="high"))
    'Hello World'
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import TYPE_CHECKING

from regionocr.config import TextOptions
from regionocr.text.correction import correct_spelling
from regionocr.text.manhwa import clean_manhwa_text
from regionocr.text.noise import clean_noise
from regionocr.text.reconstruct import reconstruct_text
from regionocr.text.rules import apply_user_rules
from regionocr.text.spacing import apply_regex_corrections, normalize_whitespace

if TYPE_CHECKING:
    from regionocr.ocr.dictionary import DictionaryManager

logger = logging.getLogger(__name__)

TextStage = Callable[[str], str]

STAGE_ORDER = (
    "noise",
    "whitespace",
    "manhwa",
    "regex",
    "dictionary",
    "user_rules",
    "reconstruct",
)


def build_text_stages(
    options: TextOptions,
    dictionary: DictionaryManager | None = None,
    warnings: list[str] | None = None,
) -> list[tuple[str, TextStage]]:
    """
    Bind the stages enabled in ``options`` to their parameters.

    Returns:
        ``(name, stage)`` pairs in pipeline order.
    """
    candidates: list[tuple[str, bool, TextStage]] = [
        (
            "noise",
            options.noise_cleaning,
            lambda t: clean_noise(t, aggression=options.noise_aggression),
        ),
        ("whitespace", options.normalize_whitespace, normalize_whitespace),
        ("manhwa", options.manhwa_mode, clean_manhwa_text),
        ("regex", options.regex_correction, apply_regex_corrections),
        (
            "dictionary",
            options.dictionary_correction,
            lambda t: correct_spelling(
                t,
                dictionary,
                lang=options.language,
                max_distance=options.dictionary_max_distance,
                ignore_caps=options.dictionary_ignore_caps,
            ),
        ),
        (
            "user_rules",
            options.user_rules,
            lambda t: apply_user_rules(
                t, options.deletions, options.replacements, warnings=warnings
            ),
        ),
        (
            "reconstruct",
            options.text_reconstruction,
            lambda t: reconstruct_text(
                t,
                merge=options.reconstruct_merge_lines,
                stabilize=options.reconstruct_stabilize,
            ),
        ),
    ]

    stages = []
    for name, enabled, stage in candidates:
        if enabled:
            stages.append((name, stage))
        else:
            logger.debug("Text stage %s disabled", name)
    return stages


def process_text(
    text: str,
    options: TextOptions | None = None,
    dictionary: DictionaryManager | None = None,
    warnings: list[str] | None = None,
) -> str:
    """
    Clean raw OCR text.

    Args:
        text: Raw OCR output. Empty input is returned as is.
        options: Stage switches and parameters (defaults if omitted).
        dictionary: Vocabulary source for dictionary correction.
        warnings: List receiving messages for skipped invalid rules.

    Returns:
        The cleaned text.
    """
    if not text:
        return text

    options = options or TextOptions()
    current = text
    for name, stage in build_text_stages(options, dictionary, warnings):
        current = stage(current)
        logger.debug("Text stage %s -> %d chars", name, len(current))
    return current
