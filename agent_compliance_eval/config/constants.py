"""
Scoring constants for Agent Compliance Eval.

This module contains the thresholds shared by the quality gate, the rule
engine and the metrics engine, kept in one place so tests and callers can
refer to them by name.
"""

# Quality gate (gibberish detection)
GATE_MIN_CHARS = 10
GATE_MIN_TOKENS = 3
GATE_MIN_RECOGNIZED_RATIO = 0.25
GATE_MIN_VOWEL_RATIO = 0.15
GATE_MAX_VOWEL_RATIO = 0.70
GATE_MIN_UNIQUE_RATIO = 0.30
GATE_UNIQUE_RATIO_MIN_TOKENS = 5

# Sentence fragments must be longer than this (after trimming) to count
MIN_SENTENCE_CHARS = 3

# Hallucination markers only fire on responses shorter than this
HALLUCINATION_MAX_LENGTH = 100

# Compliance scoring
PASS_SCORE_FLOOR = 70
FAIL_SCORE_CEILING = 60
VIOLATION_PENALTY = 20
MISSING_ACTION_PENALTY = 15
LOW_QUALITY_THRESHOLD = 30
LOW_QUALITY_CAP = 15
TONE_FAILURE_CAP = 10
HALLUCINATION_CAP = 5

# (minimum structural quality, compliance score) for PASS verdicts,
# evaluated in order so the highest matching step wins
PASS_SCORE_STEPS = ((60, 85), (80, 95), (90, 100))

# Keyword coverage: share of an action's keywords that must appear
KEYWORD_MATCH_RATIO = 0.4
KEYWORD_MIN_LENGTH = 3

# Neutral sentiment baseline
SENTIMENT_BASELINE = 50

# Record metadata defaults
DEFAULT_AGENT_NAME = "Unknown Agent"
DEFAULT_TEAM_ORG = "Unknown Team"
