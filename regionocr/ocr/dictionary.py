"""
Vocabulary and edit-distance matching for dictionary correction.

Vocabularies are keyed by Tesseract language code, loaded once and
read-only afterwards, so a single DictionaryManager can be shared by
concurrent pipeline runs.

Sources:
- Explicit word lists passed to ``load``
- The bundled English starter vocabulary (``regionocr/data/eng.txt``)
- pyspellchecker word frequency lists for other languages
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Iterable
from importlib import resources
from typing import TYPE_CHECKING

from regionocr.exceptions import ConfigurationError, DictionaryNotLoadedError

if TYPE_CHECKING:
    from collections.abc import Collection

logger = logging.getLogger(__name__)


# =============================================================================
# CONSTANTS
# =============================================================================

DEFAULT_LANGUAGE = "eng"
DEFAULT_MAX_DISTANCE = 2

# Tesseract language codes with a pyspellchecker dictionary
SPELLCHECKER_LANGUAGES = {
    "eng": "en",
    "spa": "es",
    "fra": "fr",
    "deu": "de",
    "por": "pt",
    "ita": "it",
    "rus": "ru",
    "nld": "nl",
}

BUNDLED_LANGUAGES = ("eng",)


# =============================================================================
# EDIT DISTANCE
# =============================================================================


def levenshtein_distance(s1: str, s2: str) -> int:
    """Calculate Levenshtein edit distance between two strings."""
    if len(s1) < len(s2):
        return levenshtein_distance(s2, s1)

    if len(s2) == 0:
        return len(s1)

    previous_row = list(range(len(s2) + 1))
    for i, c1 in enumerate(s1):
        current_row = [i + 1]
        for j, c2 in enumerate(s2):
            insertions = previous_row[j + 1] + 1
            deletions = current_row[j] + 1
            substitutions = previous_row[j] + (c1 != c2)
            current_row.append(min(insertions, deletions, substitutions))
        previous_row = current_row

    return previous_row[-1]


def find_closest_match(
    word: str, vocabulary: Iterable[str], max_distance: int = DEFAULT_MAX_DISTANCE
) -> str | None:
    """
    Find the vocabulary word nearest to ``word`` within ``max_distance``.

    Candidates whose length differs by more than ``max_distance`` are
    skipped without computing a distance. An exact match returns at once.
    Ties go to the candidate seen first.

    Args:
        word: Word to correct (compared as given; callers lowercase it).
        vocabulary: Candidate words, iterated in order.
        max_distance: Maximum accepted edit distance.

    Returns:
        The closest word, or None if nothing is close enough.

    Example:
        >>> find_closest_match("helo", ["hello", "help"], max_distance=1)
        'hello'
    """
    closest: str | None = None
    best = max_distance + 1

    for candidate in vocabulary:
        if abs(len(candidate) - len(word)) > max_distance:
            continue
        if candidate == word:
            return word
        distance = levenshtein_distance(word, candidate)
        if distance < best:
            best = distance
            closest = candidate

    return closest


# =============================================================================
# DICTIONARY MANAGER
# =============================================================================


class DictionaryManager:
    """
    Holds one lowercase vocabulary per language.

    Loading is idempotent: a second ``load`` for a language that is already
    present does nothing. Vocabularies keep insertion order, which decides
    ties in ``find_closest_match``.

    Example:
        >>> manager = DictionaryManager()
        >>> manager.load("eng", words=["hello", "world"])
        >>> manager.has("Hello")
        True
        >>> manager.closest("helo", max_distance=1)
        'hello'
    """

    def __init__(self) -> None:
        self._vocabularies: dict[str, dict[str, None]] = {}
        self._lock = threading.Lock()

    @property
    def loaded(self) -> bool:
        """True once any vocabulary is loaded."""
        return bool(self._vocabularies)

    def is_loaded(self, lang: str = DEFAULT_LANGUAGE) -> bool:
        return lang in self._vocabularies

    def load(
        self,
        lang: str = DEFAULT_LANGUAGE,
        words: Iterable[str] | None = None,
        use_spellchecker: bool = False,
    ) -> None:
        """
        Load the vocabulary for ``lang`` if it is not loaded yet.

        Args:
            lang: Tesseract language code.
            words: Explicit word list; overrides the built-in sources.
            use_spellchecker: Use pyspellchecker's list even where a bundled
                vocabulary exists.

        Raises:
            ConfigurationError: If no source exists for ``lang``.
        """
        with self._lock:
            if lang in self._vocabularies:
                return

            if words is None:
                words = self._source_words(lang, use_spellchecker)

            vocabulary = dict.fromkeys(w.strip().lower() for w in words if w.strip())
            self._vocabularies[lang] = vocabulary

        logger.info("Loaded %d words for language %s", len(vocabulary), lang)

    def _source_words(self, lang: str, use_spellchecker: bool) -> Iterable[str]:
        if lang in BUNDLED_LANGUAGES and not use_spellchecker:
            return _bundled_words(lang)
        if lang in SPELLCHECKER_LANGUAGES:
            return _spellchecker_words(SPELLCHECKER_LANGUAGES[lang])
        raise ConfigurationError(f"No vocabulary available for language {lang!r}")

    def words(self, lang: str = DEFAULT_LANGUAGE) -> Collection[str]:
        """
        Return the read-only vocabulary for ``lang``.

        Raises:
            DictionaryNotLoadedError: If ``lang`` has not been loaded.
        """
        vocabulary = self._vocabularies.get(lang)
        if vocabulary is None:
            raise DictionaryNotLoadedError(f"Dictionary for {lang!r} is not loaded")
        return vocabulary.keys()

    def has(self, word: str, lang: str = DEFAULT_LANGUAGE) -> bool:
        """Case-insensitive membership; False when ``lang`` is not loaded."""
        vocabulary = self._vocabularies.get(lang)
        if vocabulary is None:
            return False
        return word.lower() in vocabulary

    def closest(
        self, word: str, lang: str = DEFAULT_LANGUAGE, max_distance: int = DEFAULT_MAX_DISTANCE
    ) -> str | None:
        """Nearest vocabulary word to ``word`` (lowercased) within ``max_distance``."""
        return find_closest_match(word.lower(), self.words(lang), max_distance)


def _bundled_words(lang: str) -> list[str]:
    text = (resources.files("regionocr") / "data" / f"{lang}.txt").read_text(encoding="utf-8")
    return text.split()


def _spellchecker_words(language: str) -> Iterable[str]:
    from spellchecker import SpellChecker

    spell = SpellChecker(language=language)
    logger.debug("Loading pyspellchecker word list for %s", language)
    return list(spell.word_frequency.keys())
