"""
Noise cleaning for raw OCR output.

Removes stray symbols produced by bubble borders, panel edges and
speckles, while keeping punctuation that carries meaning.

Aggression levels:
- low: keeps isolated currency/math symbols and dash-only lines
- medium: baseline
- high: also drops isolated tildes and tokens containing currency/math symbols
"""

from __future__ import annotations

import logging
import re

logger = logging.getLogger(__name__)


# =============================================================================
# PATTERNS
# =============================================================================

# Border spikes at either end of a line: | _ = em dash, hyphen
LEADING_SPIKES = re.compile(r"^[|_=—\-]+")
TRAILING_SPIKES = re.compile(r"[|_=—\-]+$")

ELLIPSIS_LINE = re.compile(r"^[.?!]+$")
NOISE_SYMBOLS = frozenset("|\\/=_-")
NOISE_TOKEN = re.compile(r"^[|\\/=_\-]+$")
STANDARD_PUNCTUATION = frozenset(".,;?!'\"~")
CURRENCY_MATH = frozenset("$€£%&+")


def _has_alnum(text: str) -> bool:
    return any(ch.isalnum() for ch in text)


def _keep_symbol_line(line: str, aggression: str) -> bool:
    if ELLIPSIS_LINE.match(line):
        return True
    if "~" in line:
        return True
    return aggression == "low" and "-" in line


def _clean_token(token: str, aggression: str) -> str:
    if len(token) == 1:
        if token.isalnum():
            return token
        if token in STANDARD_PUNCTUATION:
            if aggression == "high" and token == "~":
                return ""
            return token
        if token in NOISE_SYMBOLS:
            return ""
        if aggression == "low" and token in CURRENCY_MATH:
            return token
        return ""

    if NOISE_TOKEN.match(token):
        return ""
    if aggression == "high" and any(ch in CURRENCY_MATH for ch in token):
        return ""
    return token


def _clean_line(line: str, aggression: str) -> str:
    cleaned = line.strip()
    cleaned = LEADING_SPIKES.sub("", cleaned)
    cleaned = TRAILING_SPIKES.sub("", cleaned)

    if cleaned and not _has_alnum(cleaned):
        return cleaned if _keep_symbol_line(cleaned, aggression) else ""

    # Split on single spaces only; spacing patterns are left for later stages
    tokens = [_clean_token(token, aggression) for token in cleaned.split(" ")]
    return " ".join(tokens).strip()


def clean_noise(text: str, aggression: str = "medium") -> str:
    """
    Remove OCR noise line by line.

    Lines left empty are dropped from the output.

    Args:
        text: Raw OCR text.
        aggression: "low", "medium" or "high".

    Example:
        >>> clean_noise("| Hello World |\\n=====")
        'Hello World'
    """
    if not text:
        return text

    lines = [_clean_line(line, aggression) for line in text.split("\n")]
    return "\n".join(line for line in lines if line)
