"""
Linguistic metrics for agent responses.

Computes the supplementary 0-100 scores shown next to a verdict: coherence,
empathy, clarity, professionalism, keyword coverage, sentiment and
readability. Every score starts low and is earned from detected signals; a
response that fails the quality pre-check scores zero everywhere.

Phrase tables are matched against the lower-cased response. Checks that
depend on capitalization (first character, all-caps words) and the
readability formula use the original text.

Functions are pure and never raise on string input.
"""

import logging
import math

from agent_compliance_eval.config.constants import (
    GATE_MIN_VOWEL_RATIO,
    KEYWORD_MATCH_RATIO,
    KEYWORD_MIN_LENGTH,
    SENTIMENT_BASELINE,
)
from agent_compliance_eval.config.schema import Scenario
from agent_compliance_eval.evaluator import lexicons as lx
from agent_compliance_eval.evaluator.quality_gate import is_gibberish
from agent_compliance_eval.evaluator.schema import EvaluationVerdict
from agent_compliance_eval.utils.text import (
    clamp_score,
    count_syllables,
    letters_only,
    round_half_up,
    split_sentences,
    split_words,
    vowel_ratio,
)

from .schema import MetricsBundle

logger = logging.getLogger(__name__)


def is_low_quality(text: str) -> bool:
    """
    Quick pre-check: is this text too low quality to score?

    True when the text has fewer than 5 words, has more than 5 words but no
    sentence, or has more than 5 letters with a vowel share under 15%.
    """
    words = split_words(text)
    if len(words) < 5:
        return True

    if not split_sentences(text) and len(words) > 5:
        return True

    letters = letters_only(text.lower())
    if len(letters) > 5:
        ratio = vowel_ratio(letters)
        if ratio is not None and ratio < GATE_MIN_VOWEL_RATIO:
            return True

    return False


def calculate_coherence(text: str) -> int:
    """
    Logical structure of the response.

    Scoring:
    - 5 flat for fewer than 10 words or no sentence
    - +20 / +10 / +5 for 2+ / 3+ / 5+ sentences
    - +5 per transition word, max 25
    - +10 for a line break (paragraphs)
    - +15 for an average of 5-25 words per sentence
    - +15 when over half of the words are distinct
    """
    words = split_words(text)
    sentences = split_sentences(text)
    if len(words) < 10 or not sentences:
        return 5

    score = 0
    if len(sentences) >= 2:
        score += 20
    if len(sentences) >= 3:
        score += 10
    if len(sentences) >= 5:
        score += 5

    score += min(len(lx.matching_phrases(text, lx.TRANSITION_WORDS)) * 5, 25)

    if "\n" in text:
        score += 10

    avg_words = len(words) / len(sentences)
    if 5 <= avg_words <= 25:
        score += 15

    # Words differing only by punctuation count once
    distinct = {letters_only(word.lower()) for word in words}
    if len(distinct) / len(words) > 0.5:
        score += 15

    return clamp_score(score)


def calculate_empathy(text: str) -> int:
    """Empathetic language: markers, acknowledgment and offers of help."""
    if len(split_words(text)) < 5:
        return 0

    score = min(len(lx.matching_phrases(text, lx.EMPATHY_MARKERS)) * 12, 60)
    if lx.EMPATHY_ACKNOWLEDGMENT.search(text):
        score += 20
    if lx.EMPATHY_OFFER_OF_HELP.search(text):
        score += 20
    score -= len(lx.matching_phrases(text, lx.COLD_WORDS)) * 10

    return clamp_score(score)


def calculate_clarity(text: str) -> int:
    """
    Clear, actionable language.

    Rewards action words, concrete numbers and durations, short sentences
    and direct phrasing; penalizes legal jargon.
    """
    words = split_words(text)
    sentences = split_sentences(text)
    if len(words) < 5:
        return 0

    score = min(len(lx.matching_phrases(text, lx.ACTION_WORDS)) * 8, 30)

    if lx.ANY_DIGIT.search(text):
        score += 10
    if lx.TIME_DURATION.search(text):
        score += 5

    if sentences:
        avg_words = len(words) / len(sentences)
        if avg_words <= 20:
            score += 20
        elif avg_words <= 30:
            score += 10

    if len(sentences) >= 2:
        score += 15

    score -= len(lx.matching_phrases(text, lx.JARGON_PHRASES)) * 10

    if lx.DIRECTNESS.search(text):
        score += 10

    return clamp_score(score)


def calculate_professionalism(text: str, original_text: str) -> int:
    """
    Professional tone.

    Args:
        text: Lower-cased response
        original_text: Response as written, for capitalization checks
    """
    words = split_words(text)
    if len(words) < 5:
        return 0

    score = min(len(lx.matching_phrases(text, lx.PROFESSIONAL_MARKERS)) * 8, 35)

    if lx.PROFESSIONAL_GREETING.search(text):
        score += 15
    if lx.PROFESSIONAL_SIGNOFF.search(text):
        score += 15

    if original_text and lx.STARTS_WITH_CAPITAL.match(original_text.strip()):
        score += 10

    if len(split_sentences(text)) >= 2:
        score += 10
    if len(words) >= 30:
        score += 15

    score -= len(lx.matching_phrases(text, lx.SLANG_WORDS)) * 20

    shouting = lx.ALL_CAPS_WORD.findall(original_text)
    score -= min(len(shouting) * 8, 20)

    return clamp_score(score)


def calculate_keyword_coverage(text: str, scenario: Scenario | None) -> int:
    """
    Percentage of the scenario's required actions the response addresses.

    An action counts as covered when at least 40% (rounded up) of its words
    longer than 3 characters occur in the text. Actions with no such words
    are never covered but still count toward the total. No required actions
    means coverage cannot be measured and scores 0.
    """
    if scenario is None or not scenario.required_actions:
        return 0

    covered = 0
    for action in scenario.required_actions:
        keywords = [
            word for word in action.lower().split() if len(word) > KEYWORD_MIN_LENGTH
        ]
        if not keywords:
            continue
        matched = sum(1 for keyword in keywords if keyword in text)
        if matched >= math.ceil(len(keywords) * KEYWORD_MATCH_RATIO):
            covered += 1

    return round_half_up(covered / len(scenario.required_actions) * 100)


def calculate_sentiment(text: str) -> int:
    """Positive/negative balance around a neutral 50."""
    if len(split_words(text)) < 5:
        return 0

    positive = len(lx.matching_phrases(text, lx.POSITIVE_WORDS))
    negative = len(lx.matching_phrases(text, lx.NEGATIVE_WORDS))
    return clamp_score(SENTIMENT_BASELINE + positive * 8 - negative * 5)


def calculate_readability(text: str) -> int:
    """
    Flesch Reading Ease, clamped to 0-100 (higher is easier to read).

        206.835 - 1.015 * (words / sentences) - 84.6 * (syllables / words)

    Returns 0 for fewer than 5 words or no sentence.
    """
    words = split_words(text)
    sentences = split_sentences(text)
    if not sentences or len(words) < 5:
        return 0

    syllables = sum(count_syllables(word) for word in words)
    avg_sentence_length = len(words) / len(sentences)
    avg_syllables = syllables / len(words)

    score = 206.835 - 1.015 * avg_sentence_length - 84.6 * avg_syllables
    return clamp_score(round_half_up(score))


def compute_metrics(
    response_text: str,
    scenario: Scenario | None,
    verdict: EvaluationVerdict | None = None,
) -> MetricsBundle:
    """
    Compute the full metrics bundle for a response.

    Args:
        response_text: The agent's response
        scenario: Scenario the response answers (required actions feed
            keyword coverage); None scores coverage 0
        verdict: Verdict from evaluate(), if already computed. A verdict
            that failed the quality gate forces an all-zero bundle.

    Returns:
        MetricsBundle; response_length is always the character count

    Example:
        >>> bundle = compute_metrics("asdkjf asldkj aslkdj alskdj", scenario)
        >>> bundle.sentiment_score, bundle.response_length
        (0, 27)
    """
    original = response_text or ""
    lowered = original.lower()

    gate_failed = verdict is not None and not verdict.quality_gate_passed
    if gate_failed or is_gibberish(original) or is_low_quality(lowered):
        logger.debug("Response failed quality pre-check, metrics zeroed")
        return MetricsBundle.zero(len(original))

    return MetricsBundle(
        coherence_score=calculate_coherence(lowered),
        empathy_score=calculate_empathy(lowered),
        clarity_score=calculate_clarity(lowered),
        professionalism_score=calculate_professionalism(lowered, original),
        sentiment_score=calculate_sentiment(lowered),
        readability_score=calculate_readability(original),
        keyword_coverage=calculate_keyword_coverage(lowered, scenario),
        response_length=len(original),
    )
