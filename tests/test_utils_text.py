"""Tests for shared text helpers."""

import pytest

from agent_compliance_eval.utils.text import (
    clamp_score,
    count_syllables,
    letters_only,
    round_half_up,
    split_sentences,
    split_words,
    vowel_ratio,
)


class TestSplitting:
    """Test word and sentence splitting."""

    def test_split_words_on_any_whitespace(self):
        """Test that runs of spaces, tabs and newlines separate words."""
        assert split_words("  one\ttwo\n\nthree  ") == ["one", "two", "three"]

    def test_split_words_empty(self):
        assert split_words("") == []

    def test_split_sentences_drops_short_fragments(self):
        """Test that fragments of 3 characters or fewer are not sentences."""
        assert split_sentences("Hi. I can help you today! Ok?") == [
            "I can help you today"
        ]

    def test_split_sentences_collapses_punctuation_runs(self):
        """Test that '?!' and '...' act as a single separator."""
        assert split_sentences("Really?! Sure... we can do that.") == [
            "Really",
            "Sure",
            "we can do that",
        ]

    def test_text_without_terminal_punctuation_is_one_sentence(self):
        assert split_sentences("no punctuation here at all") == [
            "no punctuation here at all"
        ]


class TestLetters:
    """Test letter extraction and vowel ratio."""

    def test_letters_only(self):
        assert letters_only("It's 30-day policy!") == "Itsdaypolicy"

    def test_vowel_ratio(self):
        assert vowel_ratio("Aa bb") == 0.5

    def test_vowel_ratio_without_letters(self):
        """Test that text with no letters has no ratio."""
        assert vowel_ratio("123 !!!") is None


class TestCountSyllables:
    """Test the syllable heuristic."""

    @pytest.mark.parametrize(
        "word,expected",
        [
            ("the", 1),
            ("cat", 1),
            ("help", 1),
            ("frustrating", 3),
            ("supervisor", 4),
            ("escalated", 3),
            ("policy", 3),
            ("yesterday", 3),
            ("rhythm", 1),
            ("Hello,", 2),
        ],
    )
    def test_count_syllables(self, word, expected):
        assert count_syllables(word) == expected

    def test_number_counts_as_one(self):
        """Test that tokens without letters count one syllable."""
        assert count_syllables("2") == 1


class TestRounding:
    """Test score rounding and clamping."""

    @pytest.mark.parametrize(
        "value,expected",
        [(12.5, 13), (0.5, 1), (2.4999, 2), (99.5, 100), (0.0, 0), (-2.5, -2)],
    )
    def test_round_half_up(self, value, expected):
        """Test that .5 always rounds up, unlike round()."""
        assert round_half_up(value) == expected

    @pytest.mark.parametrize(
        "value,expected", [(-15, 0), (0, 0), (55, 55), (100, 100), (116.1, 100)]
    )
    def test_clamp_score(self, value, expected):
        assert clamp_score(value) == expected
