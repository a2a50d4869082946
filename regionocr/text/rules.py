"""
User-defined deletion and find/replace rules.

Deletions run first, then replacements. Replacement rules apply in list
order, each one seeing the output of the previous rule. A rule that
fails to compile is skipped with a warning; the remaining rules still
run.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Sequence

from regionocr.exceptions import RuleCompileError
from regionocr.models import DeletionRule, ReplacementRule

logger = logging.getLogger(__name__)

LETTER = re.compile(r"[a-zA-ZÀ-ÿ]")
DIGIT = re.compile(r"[0-9]")
WORD_CHAR = re.compile(r"\w")


# =============================================================================
# DELETIONS
# =============================================================================


def _is_letter(ch: str) -> bool:
    return bool(ch) and LETTER.match(ch) is not None


def _is_digit(ch: str) -> bool:
    return bool(ch) and DIGIT.match(ch) is not None


def _is_protected(rule: DeletionRule, prev: str, next_: str) -> bool:
    prev_letter, next_letter = _is_letter(prev), _is_letter(next_)
    prev_digit, next_digit = _is_digit(prev), _is_digit(next_)

    if rule.ignore_between_letters and prev_letter and next_letter:
        return True
    if rule.ignore_between_numbers and prev_digit and next_digit:
        return True
    if rule.ignore_inside_words:
        return (prev_letter or prev_digit) and (next_letter or next_digit)
    return False


def apply_deletion(text: str, rule: DeletionRule) -> str:
    """
    Delete occurrences of ``rule.char`` not protected by their context.

    Neighbours are read from the text as it was before this rule ran.

    Example:
        >>> apply_deletion("3.14 and .5", DeletionRule(".", ignore_between_numbers=True))
        '3.14 and 5'
    """
    if not rule.char:
        return text
    if not rule.has_context:
        return text.replace(rule.char, "")

    def replace(match: re.Match[str]) -> str:
        source = match.string
        prev = source[match.start() - 1] if match.start() > 0 else ""
        next_ = source[match.end()] if match.end() < len(source) else ""
        return match.group(0) if _is_protected(rule, prev, next_) else ""

    return re.sub(re.escape(rule.char), replace, text)


def apply_deletions(text: str, rules: Sequence[DeletionRule]) -> str:
    for rule in rules:
        text = apply_deletion(text, rule)
    return text


# =============================================================================
# REPLACEMENTS
# =============================================================================


def compile_replacement(rule: ReplacementRule) -> re.Pattern[str]:
    """
    Compile the search pattern of a replacement rule.

    Matching is case-insensitive unless ``case_sensitive`` is set. Literal
    rules are escaped; with ``whole_word`` a ``\\b`` anchor is added on each
    side where the text begins or ends with a word character.

    Raises:
        RuleCompileError: If the pattern is not a valid regular expression.
    """
    flags = 0 if rule.case_sensitive else re.IGNORECASE

    if rule.is_regex:
        source = rule.find
    else:
        source = re.escape(rule.find)
        if rule.whole_word:
            if WORD_CHAR.match(rule.find[0]):
                source = r"\b" + source
            if WORD_CHAR.match(rule.find[-1]):
                source = source + r"\b"

    try:
        return re.compile(source, flags)
    except re.error as e:
        raise RuleCompileError(rule.find, str(e)) from e


def apply_replacement(text: str, rule: ReplacementRule) -> str:
    """
    Apply one replacement rule to ``text``.

    Regex rules use ``rule.replace`` as a ``re`` template (``\\1``,
    ``\\g<name>``); literal rules insert it verbatim.

    Raises:
        RuleCompileError: If the pattern or the replacement template is invalid.
    """
    pattern = compile_replacement(rule)
    if not rule.is_regex:
        return pattern.sub(lambda _m: rule.replace, text)
    try:
        return pattern.sub(rule.replace, text)
    except re.error as e:
        raise RuleCompileError(rule.find, f"invalid replacement {rule.replace!r}: {e}") from e


def apply_replacements(
    text: str, rules: Sequence[ReplacementRule], warnings: list[str] | None = None
) -> str:
    """
    Apply enabled replacement rules in order.

    Disabled rules and rules with an empty ``find`` are skipped. Invalid
    rules are logged, recorded in ``warnings`` when given, and skipped.
    """
    for rule in rules:
        if not rule.enabled or not rule.find:
            continue
        try:
            text = apply_replacement(text, rule)
        except RuleCompileError as e:
            logger.warning("%s; rule skipped", e)
            if warnings is not None:
                warnings.append(str(e))
    return text


def apply_user_rules(
    text: str,
    deletions: Sequence[DeletionRule] = (),
    replacements: Sequence[ReplacementRule] = (),
    warnings: list[str] | None = None,
) -> str:
    """Apply deletions, then replacements."""
    if not text:
        return text
    text = apply_deletions(text, deletions)
    return apply_replacements(text, replacements, warnings=warnings)
