"""
Tests for the linguistic metrics engine.

Covers:
- is_low_quality() pre-check
- Each individual scorer on hand-checked inputs
- compute_metrics() zeroing rules and response_length
"""

import pytest

from agent_compliance_eval.config.repository import ScenarioRepository
from agent_compliance_eval.config.schema import Scenario
from agent_compliance_eval.evaluator import GIBBERISH_VERDICT, evaluate
from agent_compliance_eval.metrics import MetricsBundle, compute_metrics, is_low_quality
from agent_compliance_eval.metrics.engine import (
    calculate_clarity,
    calculate_coherence,
    calculate_empathy,
    calculate_keyword_coverage,
    calculate_professionalism,
    calculate_readability,
    calculate_sentiment,
)

REFUND_ESCALATION_RESPONSE = (
    "I understand this is frustrating, but our 30-day return policy means I "
    "cannot approve this myself. I'm escalating this to my supervisor who will "
    "respond within 2 business days."
)


class TestIsLowQuality:
    """Test the metrics pre-check."""

    def test_fewer_than_five_words(self):
        assert is_low_quality("too short here") is True

    def test_no_sentences(self):
        """Test that six one-letter fragments contain no real sentence."""
        assert is_low_quality("a. b. c. d. e. f.") is True

    def test_too_few_vowels(self):
        assert is_low_quality("xkcd brrr pfft grrr hmm tsk") is True

    def test_normal_text(self):
        assert is_low_quality("thank you for waiting, i will help you now.") is False


class TestCoherence:
    """Test coherence scoring."""

    def test_short_text_scores_five(self):
        assert calculate_coherence("thank you for your patience today") == 5

    def test_structured_text(self):
        """Test sentences, transitions, sentence length and distinct words."""
        text = (
            "first, we will review your order. next, we will contact the courier. "
            "finally, we will email you the result."
        )

        # 3 sentences: 30, 3 transitions: 15, avg length: 15, distinct: 15
        assert calculate_coherence(text) == 75

    def test_line_break_adds_points(self):
        flat = (
            "first, we will review your order. next, we will contact the courier. "
            "finally, we will email you the result."
        )
        assert calculate_coherence(flat.replace(" next", "\nnext")) == 85


class TestEmpathy:
    """Test empathy scoring."""

    def test_markers_acknowledgment_and_offer(self):
        # understand, sorry, i'm sorry: 36 + acknowledgment 20 + offer 20
        assert calculate_empathy("i understand, and i'm sorry. let me help you.") == 76

    def test_cold_words_floor_at_zero(self):
        text = "the request was denied and it is impossible, we refuse."
        assert calculate_empathy(text) == 0

    def test_fewer_than_five_words(self):
        assert calculate_empathy("so sorry about that") == 0


class TestClarity:
    """Test clarity scoring."""

    def test_actionable_text(self):
        # please, email: 16 + digit 10 + duration 5 + short sentences 20 + two
        # sentences 15
        text = "please email us the form within 2 days. we will reply soon."
        assert calculate_clarity(text) == 66

    def test_jargon_penalty(self):
        text = (
            "per our policy, please email us the form within 2 days. "
            "we will reply soon."
        )
        assert calculate_clarity(text) == 56


class TestProfessionalism:
    """Test professionalism scoring."""

    def test_polite_greeting_and_signoff(self):
        original = (
            "Hello, thank you for contacting us. We would be happy to assist you today."
        )

        assert calculate_professionalism(original.lower(), original) == 82

    def test_slang_is_penalized(self):
        clean = "Hello, we would be happy to help you with your order today."
        slangy = "Hello dude, lol we would be happy to help you with your order today."

        assert calculate_professionalism(
            slangy.lower(), slangy
        ) < calculate_professionalism(clean.lower(), clean)

    def test_shouting_is_penalized(self):
        calm = "Please wait while we check your order, thank you."
        shouting = "PLEASE WAIT while we check your order, thank you."

        assert calculate_professionalism(
            calm.lower(), calm
        ) - calculate_professionalism(shouting.lower(), shouting) == 16


class TestKeywordCoverage:
    """Test required-action keyword coverage."""

    def test_half_of_actions_covered(self):
        scenario = Scenario(
            id="CUSTOM",
            required_actions=(
                "Escalate the request to a supervisor",
                "Provide a timeline",
            ),
        )

        text = "i will escalate this to my supervisor"
        assert calculate_keyword_coverage(text, scenario) == 50

    def test_actions_without_keywords_count_as_uncovered(self):
        """Test that short-word actions still count toward the total."""
        scenario = Scenario(
            id="CUSTOM", required_actions=("Mention refund",) + ("Say hi",) * 7
        )

        # 1 of 8 is 12.5%, rounded half up
        assert calculate_keyword_coverage("we will refund you", scenario) == 13

    def test_no_required_actions(self):
        assert calculate_keyword_coverage("anything at all", Scenario(id="CUSTOM")) == 0

    def test_no_scenario(self):
        assert calculate_keyword_coverage("anything at all", None) == 0


class TestSentiment:
    """Test sentiment scoring."""

    def test_positive(self):
        assert calculate_sentiment("thank you, we are happy to help with this") == 74

    def test_negative(self):
        text = "unfortunately we are unable to fix this problem today"
        assert calculate_sentiment(text) == 35

    def test_neutral(self):
        assert calculate_sentiment("your parcel left the warehouse on monday") == 50


class TestReadability:
    """Test Flesch reading ease."""

    def test_simple_text_clamped_to_100(self):
        text = "The cat sat on the mat. The dog ran to the park."
        assert calculate_readability(text) == 100

    def test_no_sentences(self):
        assert calculate_readability("...") == 0


class TestComputeMetrics:
    """Test the full metrics bundle."""

    @pytest.fixture(scope="class")
    def refund_scenario(self):
        return ScenarioRepository.builtin()["CS-REFUND-POLICY"]

    def test_gibberish_scores_zero(self, refund_scenario):
        bundle = compute_metrics("asdkjf asldkj aslkdj alskdj", refund_scenario)

        assert bundle == MetricsBundle.zero(27)

    def test_failed_gate_verdict_scores_zero(self, refund_scenario):
        """Test that a quality-gate verdict zeroes even readable text."""
        bundle = compute_metrics(
            REFUND_ESCALATION_RESPONSE, refund_scenario, GIBBERISH_VERDICT
        )

        assert bundle.sentiment_score == 0
        assert bundle.response_length == len(REFUND_ESCALATION_RESPONSE)

    def test_empty_response(self):
        assert compute_metrics("", None) == MetricsBundle.zero(0)

    def test_valid_response(self, refund_scenario):
        verdict = evaluate(refund_scenario, REFUND_ESCALATION_RESPONSE)

        bundle = compute_metrics(REFUND_ESCALATION_RESPONSE, refund_scenario, verdict)

        assert bundle.response_length == len(REFUND_ESCALATION_RESPONSE)
        # Only the policy statement action is covered
        assert bundle.keyword_coverage == 25
        assert bundle.empathy_score > 0
        for name, value in bundle.model_dump().items():
            if name != "response_length":
                assert 0 <= value <= 100

    def test_metrics_do_not_depend_on_verdict_when_gate_passed(self, refund_scenario):
        verdict = evaluate(refund_scenario, REFUND_ESCALATION_RESPONSE)

        assert compute_metrics(
            REFUND_ESCALATION_RESPONSE, refund_scenario, verdict
        ) == compute_metrics(REFUND_ESCALATION_RESPONSE, refund_scenario)
