"""
Rule-based compliance evaluation of a single agent response.

evaluate() is the core entry point. It runs the quality gate, the tone check,
the scenario rule set, the hallucination check, then derives the overall
result, the reasoning text and the 0-100 compliance score.

The function is pure: no I/O, no shared mutable state, and identical inputs
always produce an identical verdict.
"""

import logging
from collections.abc import Mapping
from typing import Any

from pydantic import ValidationError

from agent_compliance_eval.config.constants import (
    FAIL_SCORE_CEILING,
    HALLUCINATION_CAP,
    HALLUCINATION_MAX_LENGTH,
    LOW_QUALITY_CAP,
    LOW_QUALITY_THRESHOLD,
    MISSING_ACTION_PENALTY,
    PASS_SCORE_FLOOR,
    PASS_SCORE_STEPS,
    TONE_FAILURE_CAP,
    VIOLATION_PENALTY,
)
from agent_compliance_eval.config.schema import Persona, Scenario
from agent_compliance_eval.exceptions import InvalidScenarioError

from .lexicons import HALLUCINATION_MARKERS, RUDE_WORDS, contains_any
from .quality_gate import is_gibberish, score_response_quality
from .rules import BUILTIN_RULE_SETS, RuleContext, RuleSet, get_rule_set
from .schema import EvaluationVerdict

logger = logging.getLogger(__name__)

QUALITY_GATE_PREFIX = "⛔ QUALITY GATE FAILED:"

GIBBERISH_REASONING = (
    f"{QUALITY_GATE_PREFIX} Response appears to be nonsensical, gibberish, "
    "or not coherent English.\n\n"
    "• The system detected that this response does not contain meaningful, "
    "structured text.\n"
    "• A valid agent response must be written in clear, professional English.\n"
    "• Please provide an actual customer service response to evaluate."
)

GIBBERISH_VERDICT = EvaluationVerdict(
    intent="FAIL",
    policy="FAIL",
    hallucination="NA",
    tone="NOT_OK",
    escalation="NA",
    overall="FAIL",
    reasoning=GIBBERISH_REASONING,
    compliance_score=0,
    quality_gate_passed=False,
)


def coerce_scenario(scenario: Scenario | Mapping[str, Any]) -> Scenario:
    """
    Return scenario as a validated Scenario model.

    Raises:
        InvalidScenarioError: If scenario is not a Scenario or a mapping that
            validates as one (missing id, non-list action fields, ...)
    """
    if isinstance(scenario, Scenario):
        return scenario
    if not isinstance(scenario, Mapping):
        raise InvalidScenarioError(
            f"Scenario must be a Scenario or a mapping, got {type(scenario).__name__}"
        )
    try:
        return Scenario.model_validate(dict(scenario))
    except ValidationError as e:
        details = "; ".join(
            f"{'.'.join(str(p) for p in err['loc']) or '<root>'}: {err['msg']}"
            for err in e.errors()
        )
        raise InvalidScenarioError(f"Invalid scenario: {details}") from e


def build_reasoning(
    overall: str,
    escalation: str,
    tone: str,
    violations: list[str],
    missing_actions: list[str],
) -> str:
    """Human-readable explanation for the verdict."""
    if overall == "PASS":
        escalation_line = (
            "Appropriately escalated"
            if escalation == "YES"
            else "Not required/Not needed"
        )
        return (
            "✅ PASS: Response complies with all policies.\n\n"
            "• Required actions: All present\n"
            "• Forbidden actions: None detected\n"
            f"• Escalation: {escalation_line}\n"
            "• Tone: Professional"
        )

    reasons = []
    if violations:
        reasons.append(f"⛔ VIOLATIONS: {', '.join(violations)}")
    if missing_actions:
        reasons.append(f"⚠️ MISSING: {', '.join(missing_actions)}")
    if tone == "NOT_OK":
        reasons.append("😠 TONE: Inappropriate language detected")
    return "\n\n".join(reasons)


def compute_compliance_score(
    quality_score: int,
    *,
    passed: bool,
    violation_count: int,
    missing_count: int,
    tone_ok: bool,
    hallucinated: bool,
) -> int:
    """
    Compliance score (0-100) from the verdict and structural quality.

    A passing verdict scores at least 70 and steps up to 85, 95 and 100 as
    structural quality reaches 60, 80 and 90. A failing verdict starts at 60
    minus 20 per violation and 15 per missing action, then is capped at 15
    for low quality (< 30), 10 for a tone failure and 5 for a hallucination.

    Examples:
        >>> compute_compliance_score(45, passed=True, violation_count=0,
        ...     missing_count=0, tone_ok=True, hallucinated=False)
        70
        >>> compute_compliance_score(20, passed=False, violation_count=1,
        ...     missing_count=0, tone_ok=True, hallucinated=False)
        15
    """
    if passed:
        score = max(PASS_SCORE_FLOOR, quality_score)
        for threshold, step_score in PASS_SCORE_STEPS:
            if quality_score >= threshold:
                score = step_score
        return min(score, 100)

    score = max(
        0,
        FAIL_SCORE_CEILING
        - violation_count * VIOLATION_PENALTY
        - missing_count * MISSING_ACTION_PENALTY,
    )
    if quality_score < LOW_QUALITY_THRESHOLD:
        score = min(score, LOW_QUALITY_CAP)
    if not tone_ok:
        score = min(score, TONE_FAILURE_CAP)
    if hallucinated:
        score = min(score, HALLUCINATION_CAP)
    return max(0, score)


def evaluate(
    scenario: Scenario | Mapping[str, Any],
    response_text: str,
    persona: Persona | None = None,
    *,
    rule_sets: Mapping[str, RuleSet] = BUILTIN_RULE_SETS,
) -> EvaluationVerdict:
    """
    Evaluate an agent response against a scenario's policy.

    Args:
        scenario: Scenario model, or a mapping validated into one
        response_text: The agent's reply to the scenario's customer message
        persona: Customer persona the exchange simulated. Accepted for
            context only; it never affects the verdict.
        rule_sets: Scenario id -> rule set table. Identifiers not in the
            table use the generic keyword rule set.

    Returns:
        EvaluationVerdict. Gibberish input yields the fixed quality-gate
        verdict with compliance_score 0 and quality_gate_passed False.

    Raises:
        InvalidScenarioError: If scenario is malformed

    Example:
        >>> verdict = evaluate(repository["CS-REFUND-POLICY"],
        ...                    "Sure, I'll process that refund right now.")
        >>> verdict.policy, verdict.overall
        ('FAIL', 'FAIL')
    """
    scenario = coerce_scenario(scenario)

    if persona is not None:
        logger.debug(
            f"Evaluating {scenario.id} for persona {persona.id} ({persona.name})"
        )

    if is_gibberish(response_text):
        logger.debug(f"Quality gate rejected response for {scenario.id}")
        return GIBBERISH_VERDICT

    quality = score_response_quality(response_text)
    ctx = RuleContext(
        scenario=scenario, text=response_text, lowered=response_text.lower()
    )

    tone = "OK"
    if ctx.contains_any(RUDE_WORDS):
        tone = "NOT_OK"
        ctx.violations.append("hostile or dismissive language")

    rule_set = get_rule_set(scenario.id, rule_sets)
    logger.debug(f"Dispatching {scenario.id} to rule set {rule_set.__name__}")
    rule_set(ctx)

    hallucination = "NO"
    if (
        ctx.contains_any(HALLUCINATION_MARKERS)
        and len(ctx.lowered) < HALLUCINATION_MAX_LENGTH
    ):
        hallucination = "YES"
        ctx.violations.append("potential hallucination / fabricated information")

    passed = ctx.policy == "PASS" and not ctx.violations and not ctx.missing_actions
    overall = "PASS" if passed else "FAIL"

    score = compute_compliance_score(
        quality.score,
        passed=passed,
        violation_count=len(ctx.violations),
        missing_count=len(ctx.missing_actions),
        tone_ok=tone == "OK",
        hallucinated=hallucination == "YES",
    )

    return EvaluationVerdict(
        intent="PASS",
        policy=ctx.policy,
        hallucination=hallucination,
        tone=tone,
        escalation=ctx.escalation,
        overall=overall,
        reasoning=build_reasoning(
            overall, ctx.escalation, tone, ctx.violations, ctx.missing_actions
        ),
        compliance_score=score,
        violations=tuple(ctx.violations),
        missing_actions=tuple(ctx.missing_actions),
    )
