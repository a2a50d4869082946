"""
Unit tests for the dictionary engine (regionocr/ocr/dictionary.py).
"""

import threading

import pytest

from regionocr.exceptions import ConfigurationError, DictionaryNotLoadedError
from regionocr.ocr.dictionary import (
    DictionaryManager,
    find_closest_match,
    levenshtein_distance,
)

try:
    import spellchecker  # noqa: F401

    HAS_SPELLCHECKER = True
except ImportError:
    HAS_SPELLCHECKER = False

requires_spellchecker = pytest.mark.skipif(
    not HAS_SPELLCHECKER, reason="pyspellchecker not installed"
)


class TestLevenshteinDistance:
    """Tests for edit distance."""

    def test_classic_example(self):
        assert levenshtein_distance("kitten", "sitting") == 3

    def test_empty_string(self):
        assert levenshtein_distance("", "abc") == 3
        assert levenshtein_distance("abc", "") == 3

    @pytest.mark.parametrize("word", ["", "a", "hello", "same-word"])
    def test_identity(self, word):
        assert levenshtein_distance(word, word) == 0

    def test_symmetric(self):
        assert levenshtein_distance("flaw", "lawn") == levenshtein_distance("lawn", "flaw") == 2


class TestFindClosestMatch:
    """Tests for nearest-word search."""

    def test_exact_match(self):
        assert find_closest_match("hello", ["help", "hello"], max_distance=1) == "hello"

    def test_within_distance(self):
        assert find_closest_match("helo", ["hello", "world"], max_distance=1) == "hello"

    def test_nothing_close_enough(self):
        assert find_closest_match("xyz", ["hello", "world"], max_distance=1) is None

    def test_first_candidate_wins_ties(self):
        assert find_closest_match("bat", ["cat", "hat"], max_distance=1) == "cat"
        assert find_closest_match("bat", ["hat", "cat"], max_distance=1) == "hat"

    def test_closer_candidate_beats_earlier(self):
        assert find_closest_match("cart", ["dark", "card"], max_distance=2) == "card"

    def test_length_pruning(self):
        assert find_closest_match("a", ["abcdef"], max_distance=1) is None

    def test_empty_vocabulary(self):
        assert find_closest_match("word", [], max_distance=2) is None


class TestDictionaryManager:
    """Tests for per-language vocabularies."""

    def test_explicit_words(self):
        manager = DictionaryManager()
        manager.load("eng", words=["Hello", " world ", ""])
        assert list(manager.words("eng")) == ["hello", "world"]

    def test_has_is_case_insensitive(self, english_dictionary):
        assert english_dictionary.has("HELLO")
        assert english_dictionary.has("World")
        assert not english_dictionary.has("planet")

    def test_has_on_unloaded_language(self, english_dictionary):
        assert not english_dictionary.has("hello", "fra")

    def test_load_is_idempotent(self):
        manager = DictionaryManager()
        manager.load("eng", words=["first"])
        manager.load("eng", words=["second"])
        assert list(manager.words("eng")) == ["first"]

    def test_loaded_flags(self):
        manager = DictionaryManager()
        assert not manager.loaded
        assert not manager.is_loaded("eng")
        manager.load("eng", words=["a"])
        assert manager.loaded
        assert manager.is_loaded("eng")
        assert not manager.is_loaded("deu")

    def test_words_before_load(self):
        with pytest.raises(DictionaryNotLoadedError):
            DictionaryManager().words("eng")

    def test_closest_lowercases(self, english_dictionary):
        assert english_dictionary.closest("HELO", max_distance=1) == "hello"

    def test_bundled_english(self):
        manager = DictionaryManager()
        manager.load("eng")
        assert manager.has("hello")
        assert manager.has("the")
        assert len(manager.words("eng")) > 100

    def test_unknown_language(self):
        with pytest.raises(ConfigurationError):
            DictionaryManager().load("xyz")

    def test_concurrent_loads(self):
        manager = DictionaryManager()
        threads = [
            threading.Thread(target=manager.load, args=("eng",), kwargs={"words": [f"w{i}"]})
            for i in range(8)
        ]
        for t in threads:
            t.start()
        for t in threads:
            t.join()
        assert len(manager.words("eng")) == 1

    @requires_spellchecker
    def test_spellchecker_language(self):
        manager = DictionaryManager()
        manager.load("spa")
        assert manager.has("hola")
