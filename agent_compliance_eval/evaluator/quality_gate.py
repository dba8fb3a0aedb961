"""
Quality gate and structural quality scoring.

The quality gate cheaply rejects responses that are not coherent natural
language before any rule or metric runs, so that keyword heuristics cannot
hand out credit to nonsense. The structural quality scorer rates length,
sentence structure, greeting and sign-off; the rule engine uses it only to
clamp the compliance score.

Both functions are pure and deterministic.
"""

import re

from agent_compliance_eval.config.constants import (
    GATE_MAX_VOWEL_RATIO,
    GATE_MIN_CHARS,
    GATE_MIN_RECOGNIZED_RATIO,
    GATE_MIN_TOKENS,
    GATE_MIN_UNIQUE_RATIO,
    GATE_MIN_VOWEL_RATIO,
    GATE_UNIQUE_RATIO_MIN_TOKENS,
)
from agent_compliance_eval.utils.text import (
    clamp_score,
    split_sentences,
    split_words,
    vowel_ratio,
)

from .lexicons import (
    COMMON_WORDS,
    QUALITY_GREETING,
    QUALITY_SIGNOFF,
    REPEATED_CHARACTER,
    STARTS_WITH_CAPITAL,
)
from .schema import ResponseQuality

_NON_WORD_CHARS = re.compile(r"[^a-z']")


def normalize_tokens(tokens: list[str]) -> list[str]:
    """
    Lower-case tokens and strip everything but letters and apostrophes.

    Tokens left empty (numbers, punctuation) are dropped.

    Example:
        >>> normalize_tokens(["Hello,", "I'm", "42"])
        ['hello', "i'm"]
    """
    cleaned = (_NON_WORD_CHARS.sub("", token.lower()) for token in tokens)
    return [token for token in cleaned if token]


def is_gibberish(text: str) -> bool:
    """
    Classify text as gibberish (True) or natural language (False).

    Any single failing check classifies the text as gibberish:

    1. Fewer than 10 characters after trimming
    2. Fewer than 3 whitespace-delimited tokens
    3. Fewer than 25% of tokens found in the common-word dictionary
    4. Vowel share of letters outside [0.15, 0.70]
    5. A character repeated 5+ times in a row
    6. More than 5 tokens with under 30% of them unique

    Args:
        text: Raw response text

    Returns:
        True if the text should be rejected before evaluation

    Example:
        >>> is_gibberish("asdkjf asldkj aslkdj alskdj")
        True
        >>> is_gibberish("I understand, let me escalate this to my supervisor.")
        False
    """
    cleaned = text.strip()
    if len(cleaned) < GATE_MIN_CHARS:
        return True

    tokens = split_words(cleaned)
    if len(tokens) < GATE_MIN_TOKENS:
        return True

    words = normalize_tokens(tokens)
    if not words:
        return True

    recognized = sum(1 for word in words if word in COMMON_WORDS)
    if recognized / len(words) < GATE_MIN_RECOGNIZED_RATIO:
        return True

    ratio = vowel_ratio(cleaned)
    if ratio is not None and not (
        GATE_MIN_VOWEL_RATIO <= ratio <= GATE_MAX_VOWEL_RATIO
    ):
        return True

    if REPEATED_CHARACTER.search(cleaned):
        return True

    if (
        len(words) > GATE_UNIQUE_RATIO_MIN_TOKENS
        and len(set(words)) / len(words) < GATE_MIN_UNIQUE_RATIO
    ):
        return True

    return False


def score_response_quality(text: str) -> ResponseQuality:
    """
    Rate the structural quality of a response on a 0-100 scale.

    Very short responses return immediately with a fixed low score. Otherwise
    points are earned from zero:

    - +20 for 25+ words, +15 for 50+, +10 for 100+
    - +15 for 2+ sentences, +10 for 4+
    - +10 for a greeting, +10 for a sign-off
    - +10 when most sentences start with a capital letter

    Args:
        text: Raw response text

    Returns:
        ResponseQuality with score and the issues that capped it
    """
    sentences = split_sentences(text)
    word_count = len(split_words(text))

    if word_count < 10:
        return ResponseQuality(
            score=5, issues=("Response is too short (under 10 words)",)
        )

    if word_count < 25:
        return ResponseQuality(score=20, issues=("Response is very brief",))

    if not sentences:
        return ResponseQuality(score=10, issues=("No proper sentences detected",))

    score = 0
    if word_count >= 25:
        score += 20
    if word_count >= 50:
        score += 15
    if word_count >= 100:
        score += 10
    if len(sentences) >= 2:
        score += 15
    if len(sentences) >= 4:
        score += 10

    if QUALITY_GREETING.search(text):
        score += 10
    if QUALITY_SIGNOFF.search(text):
        score += 10

    capitalized = sum(1 for s in sentences if STARTS_WITH_CAPITAL.match(s))
    if capitalized / len(sentences) > 0.5:
        score += 10

    return ResponseQuality(score=clamp_score(score))
