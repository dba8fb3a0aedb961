"""
Pydantic schema models for the evaluation pipeline.

This module defines the result structures produced by the rule engine:
- ResponseQuality: Structural quality signal used to clamp compliance scores
- EvaluationVerdict: Per-dimension PASS/FAIL verdict with compliance score

The value vocabularies (PASS/FAIL, YES/NO/NA, OK/NOT_OK) are part of the
stored-history format and must not change.
"""

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, model_validator

PassFail = Literal["PASS", "FAIL"]
YesNoNA = Literal["YES", "NO", "NA"]
ToneStatus = Literal["OK", "NOT_OK"]


class ResponseQuality(BaseModel):
    """Structural quality of a response (length, sentences, greeting, sign-off)."""

    model_config = ConfigDict(frozen=True)

    score: int = Field(..., ge=0, le=100)
    issues: tuple[str, ...] = ()


class EvaluationVerdict(BaseModel):
    """
    Verdict of the rule engine for one response.

    Five independent dimensions plus the derived overall result. The
    reasoning string is built from the structured violations and
    missing_actions lists, which are kept on the verdict as well.

    Attributes:
        intent: PASS/FAIL
        policy: PASS/FAIL
        hallucination: YES/NO/NA
        tone: OK/NOT_OK
        escalation: YES/NO/NA
        overall: FAIL whenever policy failed or anything was recorded
        reasoning: Human-readable explanation
        compliance_score: 0-100 summary score
        violations: Forbidden behaviours detected
        missing_actions: Required behaviours not found
        quality_gate_passed: False when the response was rejected as gibberish
    """

    model_config = ConfigDict(frozen=True)

    intent: PassFail
    policy: PassFail
    hallucination: YesNoNA
    tone: ToneStatus
    escalation: YesNoNA
    overall: PassFail
    reasoning: str
    compliance_score: int = Field(..., ge=0, le=100)
    violations: tuple[str, ...] = ()
    missing_actions: tuple[str, ...] = ()
    quality_gate_passed: bool = True

    @model_validator(mode="after")
    def validate_overall(self) -> "EvaluationVerdict":
        """overall is PASS exactly when policy passed and nothing was recorded."""
        expected = (
            "PASS"
            if self.policy == "PASS"
            and not self.violations
            and not self.missing_actions
            else "FAIL"
        )
        if self.overall != expected:
            raise ValueError(
                f"overall must be {expected} for policy={self.policy}, "
                f"{len(self.violations)} violation(s), "
                f"{len(self.missing_actions)} missing action(s)"
            )
        return self

    @property
    def passed(self) -> bool:
        return self.overall == "PASS"
