"""
Flat evaluation record for persistence and transmission.

EvaluationRecord merges an EvaluationVerdict, its MetricsBundle and the
caller-supplied metadata into one level. Field names are the stored-history
format and must not change.
"""

from pydantic import BaseModel, Field

from agent_compliance_eval.config.constants import DEFAULT_AGENT_NAME, DEFAULT_TEAM_ORG
from agent_compliance_eval.config.schema import Scenario
from agent_compliance_eval.metrics.schema import MetricsBundle

from .schema import EvaluationVerdict, PassFail, ToneStatus, YesNoNA


class EvaluationRecord(BaseModel):
    """
    Flat evaluation record as persisted and transmitted.

    Carries every EvaluationVerdict field, every MetricsBundle field and the
    caller-supplied metadata in a single level.
    """

    # Metadata
    scenario_id: str
    scenario_name: str
    agent_name: str = DEFAULT_AGENT_NAME
    team_org: str = DEFAULT_TEAM_ORG
    persona_id: int | None = None
    raw_response: str
    user_message: str = ""
    timestamp: str

    # Verdict
    intent: PassFail
    policy: PassFail
    hallucination: YesNoNA
    tone: ToneStatus
    escalation: YesNoNA
    overall: PassFail
    reasoning: str
    compliance_score: int = Field(..., ge=0, le=100)
    violations: list[str] = Field(default_factory=list)
    missing_actions: list[str] = Field(default_factory=list)

    # Metrics
    coherence_score: int = Field(..., ge=0, le=100)
    empathy_score: int = Field(..., ge=0, le=100)
    clarity_score: int = Field(..., ge=0, le=100)
    professionalism_score: int = Field(..., ge=0, le=100)
    sentiment_score: int = Field(..., ge=0, le=100)
    readability_score: int = Field(..., ge=0, le=100)
    keyword_coverage: int = Field(..., ge=0, le=100)
    response_length: int = Field(..., ge=0)

    @classmethod
    def from_results(
        cls,
        scenario: Scenario,
        response_text: str,
        verdict: EvaluationVerdict,
        metrics: MetricsBundle,
        *,
        timestamp: str,
        agent_name: str | None = None,
        team_org: str | None = None,
        persona_id: int | None = None,
    ) -> "EvaluationRecord":
        """Merge a verdict and its metrics with caller metadata."""
        verdict_fields = verdict.model_dump(exclude={"quality_gate_passed"})
        return cls(
            scenario_id=scenario.id,
            scenario_name=scenario.display_name,
            agent_name=agent_name or DEFAULT_AGENT_NAME,
            team_org=team_org or DEFAULT_TEAM_ORG,
            persona_id=persona_id,
            raw_response=response_text,
            user_message=scenario.user_message,
            timestamp=timestamp,
            **{
                **verdict_fields,
                "violations": list(verdict.violations),
                "missing_actions": list(verdict.missing_actions),
            },
            **metrics.model_dump(),
        )

    def to_flat_dict(self) -> dict:
        """JSON-compatible flat dictionary of the record."""
        return self.model_dump(mode="json")
