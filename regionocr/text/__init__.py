"""
Text cleaning for raw OCR output.

Example:
    >>> from regionocr.text import process_text
    >>> process_text("l am  here .")
    'I am here.'
"""

from regionocr.text.correction import correct_spelling, match_case
from regionocr.text.manhwa import clean_manhwa_text, repair_letter_spacing
from regionocr.text.noise import clean_noise
from regionocr.text.pipeline import STAGE_ORDER, build_text_stages, process_text
from regionocr.text.reconstruct import merge_lines, reconstruct_text, stabilize_sentences
from regionocr.text.rules import (
    apply_deletion,
    apply_deletions,
    apply_replacement,
    apply_replacements,
    apply_user_rules,
    compile_replacement,
)
from regionocr.text.spacing import apply_regex_corrections, normalize_whitespace

__all__ = [
    # Runner
    "STAGE_ORDER",
    "build_text_stages",
    "process_text",
    # Stages
    "apply_regex_corrections",
    "clean_manhwa_text",
    "clean_noise",
    "correct_spelling",
    "normalize_whitespace",
    "reconstruct_text",
    # Helpers
    "match_case",
    "merge_lines",
    "repair_letter_spacing",
    "stabilize_sentences",
    # User rules
    "apply_deletion",
    "apply_deletions",
    "apply_replacement",
    "apply_replacements",
    "apply_user_rules",
    "compile_replacement",
]
