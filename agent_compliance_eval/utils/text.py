"""
Text helpers shared by the quality gate, rule engine and metrics engine.

Word and sentence splitting must be identical everywhere a count is taken,
otherwise the gate, the structural quality scorer and the metrics engine
would disagree about the same response.

Functions:
    split_words: Whitespace-delimited tokens
    split_sentences: Fragments between . ! ? longer than 3 characters
    letters_only: ASCII letters of a text
    vowel_ratio: Share of vowels among ASCII letters
    count_syllables: Heuristic syllable count for one word
    round_half_up: Round .5 away from zero for non-negative scores
    clamp_score: Clamp to the 0-100 score range
"""

import math
import re

from agent_compliance_eval.config.constants import MIN_SENTENCE_CHARS

_SENTENCE_SPLIT = re.compile(r"[.!?]+")
_NON_LETTER = re.compile(r"[^a-zA-Z]")
_VOWEL = re.compile(r"[aeiouAEIOU]")
_SILENT_SUFFIX = re.compile(r"(?:[^laeiouy]es|ed|[^laeiouy]e)$")
_LEADING_Y = re.compile(r"^y")
_VOWEL_GROUP = re.compile(r"[aeiouy]{1,2}")


def split_words(text: str) -> list[str]:
    """Split text on runs of whitespace, dropping empty tokens."""
    return text.split()


def split_sentences(text: str) -> list[str]:
    """
    Split text into sentence fragments.

    Fragments are separated by runs of ``.``, ``!`` or ``?``; only fragments
    longer than 3 characters after trimming count as sentences.

    Example:
        >>> split_sentences("Hi. I can help you today! Ok?")
        ['I can help you today']
    """
    return [
        fragment.strip()
        for fragment in _SENTENCE_SPLIT.split(text)
        if len(fragment.strip()) > MIN_SENTENCE_CHARS
    ]


def letters_only(text: str) -> str:
    return _NON_LETTER.sub("", text)


def vowel_ratio(text: str) -> float | None:
    """
    Share of vowels among the ASCII letters of text.

    Returns:
        Ratio in [0, 1], or None when text has no letters
    """
    letters = letters_only(text)
    if not letters:
        return None
    return len(_VOWEL.findall(letters)) / len(letters)


def count_syllables(word: str) -> int:
    """
    Heuristic syllable count for a single word.

    Strips a trailing silent ``e``/``ed``/``es`` and a leading ``y``, then
    counts groups of up to two vowels. Words of 3 letters or fewer, and words
    with no vowel group, count as one syllable.

    Example:
        >>> count_syllables("frustrating")
        3
        >>> count_syllables("the")
        1
    """
    word = letters_only(word.lower())
    if len(word) <= 3:
        return 1

    word = _SILENT_SUFFIX.sub("", word, count=1)
    word = _LEADING_Y.sub("", word, count=1)

    groups = _VOWEL_GROUP.findall(word)
    return len(groups) if groups else 1


def round_half_up(value: float) -> int:
    """Round to the nearest integer with .5 rounding up (12.5 -> 13)."""
    return math.floor(value + 0.5)


def clamp_score(value: float) -> int:
    """Clamp a score to the inclusive 0-100 range."""
    return int(max(0, min(100, value)))
