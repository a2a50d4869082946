"""
Unit tests for the individual text stages (regionocr/text/).
"""

import pytest

from regionocr.ocr.dictionary import DictionaryManager
from regionocr.text.correction import correct_spelling, match_case
from regionocr.text.manhwa import clean_manhwa_text, repair_letter_spacing
from regionocr.text.noise import clean_noise
from regionocr.text.reconstruct import merge_lines, reconstruct_text, stabilize_sentences
from regionocr.text.spacing import apply_regex_corrections, normalize_whitespace

# =============================================================================
# Noise Cleaning Tests
# =============================================================================


class TestNoiseCleaning:
    """Tests for line-by-line noise removal."""

    def test_empty_input(self):
        assert clean_noise("") == ""

    def test_strips_border_spikes_and_drops_noise_lines(self):
        assert clean_noise("| Hello World |\n=====") == "Hello World"

    def test_low_keeps_currency_token(self):
        assert "$100" in clean_noise("Hello World --- $100", aggression="low")

    def test_high_strips_symbols_and_currency(self):
        assert clean_noise("Hello World | ~ $100", aggression="high") == "Hello World"

    def test_medium_keeps_tilde(self):
        assert clean_noise("Wait ~ ok") == "Wait ~ ok"

    def test_isolated_noise_symbol_removed(self):
        # Spacing is left for the whitespace stage
        assert clean_noise("Go / now") == "Go  now"

    def test_multi_character_noise_token_removed(self):
        assert clean_noise("Yes || no") == "Yes  no"

    @pytest.mark.parametrize("aggression,expected", [("low", "Cost $ 5"), ("medium", "Cost  5")])
    def test_isolated_currency_symbol(self, aggression, expected):
        assert clean_noise("Cost $ 5", aggression=aggression) == expected

    @pytest.mark.parametrize("line", ["...", "?!", "~~"])
    def test_symbol_lines_kept(self, line):
        assert clean_noise(f"Hi\n{line}") == f"Hi\n{line}"

    def test_dash_line_kept_only_at_low(self):
        low = clean_noise("Hello\n- - -", aggression="low")
        assert low.split("\n")[1].strip() == "-"
        assert clean_noise("Hello\n- - -", aggression="medium") == "Hello"

    def test_unicode_letters_are_content(self):
        assert clean_noise("Café |") == "Café"

    def test_empty_lines_dropped(self):
        assert clean_noise("one\n\n|||\ntwo") == "one\ntwo"


# =============================================================================
# Spacing Tests
# =============================================================================


class TestNormalizeWhitespace:
    def test_collapses_runs(self):
        assert normalize_whitespace("a \t  b") == "a b"

    def test_punctuation_spacing(self):
        assert normalize_whitespace("Hello ,world .Next ( yes )") == "Hello, world. Next (yes)"

    def test_newlines_kept(self):
        assert normalize_whitespace("line one\nline two") == "line one\nline two"

    def test_idempotent(self):
        once = normalize_whitespace("  So  ,what ?[ ok ]  ")
        assert normalize_whitespace(once) == once


class TestRegexCorrections:
    """Tests for the always-on structural fixes."""

    @pytest.mark.parametrize(
        "raw,expected",
        [
            ("l am here", "I am here"),
            ("1 have it", "I have it"),
            ("so l will go", "so I will go"),
            ("l don't know", "I don't know"),
        ],
    )
    def test_pronoun_i(self, raw, expected):
        assert apply_regex_corrections(raw) == expected

    def test_pronoun_needs_auxiliary(self):
        assert apply_regex_corrections("l can go") == "l can go"

    def test_bars_stripped_per_line(self):
        assert apply_regex_corrections("| one |\n| two |") == "one\ntwo"

    def test_tightens_parentheses(self):
        assert apply_regex_corrections("see ( this ) now .") == "see (this) now."

    def test_idempotent(self):
        once = apply_regex_corrections("| l am  ( here ) , ok |")
        assert apply_regex_corrections(once) == once


# =============================================================================
# Manhwa Tests
# =============================================================================


class TestManhwaCleanup:
    def test_letter_spacing_repaired(self):
        assert repair_letter_spacing("H E L L O there") == "HELLO there"

    def test_normal_words_untouched(self):
        assert repair_letter_spacing("Hello World") == "Hello World"

    def test_reflow_paragraphs(self):
        text = "H E L L O\nthere\n\nS T O P   it ."
        assert clean_manhwa_text(text) == "HELLO there\n\nSTOP it."

    def test_hyphenated_line_break_joined(self):
        assert clean_manhwa_text("are you do-\ning") == "are you doing"


# =============================================================================
# Reconstruction Tests
# =============================================================================


class TestReconstruction:
    def test_merge_lines_keeps_paragraphs(self):
        assert merge_lines("a\nb\n\nc") == "a b\n\nc"

    def test_stabilize_hyphenation(self):
        assert stabilize_sentences("self- contained") == "selfcontained"

    def test_switches(self):
        text = "pre-\nfix"
        assert reconstruct_text(text, merge=False, stabilize=False) == text
        assert reconstruct_text(text, merge=True, stabilize=False) == "pre- fix"
        assert reconstruct_text(text) == "prefix"


# =============================================================================
# Dictionary Correction Tests
# =============================================================================


class TestMatchCase:
    @pytest.mark.parametrize(
        "original,expected",
        [("HELLE", "HELLO"), ("Helle", "Hello"), ("helle", "hello")],
    )
    def test_patterns(self, original, expected):
        assert match_case(original, "hello") == expected


class TestCorrectSpelling:
    """Tests for vocabulary-based word correction."""

    def test_corrects_close_word(self, english_dictionary):
        assert correct_spelling("Helle World", english_dictionary) == "Hello World"

    def test_all_caps_skipped_by_default(self, english_dictionary):
        assert correct_spelling("HELLE WORLD", english_dictionary) == "HELLE WORLD"

    def test_all_caps_corrected_when_not_ignored(self, english_dictionary):
        result = correct_spelling("HELLE WORLD", english_dictionary, ignore_caps=False)
        assert result == "HELLO WORLD"

    def test_short_words_skipped(self):
        manager = DictionaryManager()
        manager.load("eng", words=["ox"])
        assert correct_spelling("ax", manager) == "ax"

    def test_distance_limit(self, english_dictionary):
        assert correct_spelling("Hellooo", english_dictionary) == "Hellooo"
        assert correct_spelling("Hellooo", english_dictionary, max_distance=2) == "Hello"

    def test_no_dictionary_passes_through(self):
        assert correct_spelling("Helle", None) == "Helle"

    def test_unloaded_language_passes_through(self, english_dictionary):
        assert correct_spelling("Helle", english_dictionary, lang="fra") == "Helle"

    def test_punctuation_preserved(self, english_dictionary):
        assert correct_spelling("helle, world!", english_dictionary) == "hello, world!"
