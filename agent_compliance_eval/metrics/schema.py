"""
Pydantic schema for the linguistic metrics bundle.

The bundle accompanies an EvaluationVerdict; it never changes the verdict.
"""

from pydantic import BaseModel, ConfigDict, Field


class MetricsBundle(BaseModel):
    """
    Supplementary 0-100 linguistic scores for one response.

    All scores start from a pessimistic baseline and are earned from detected
    signals. A response rejected by the quality pre-check gets zeros for every
    score; response_length is always the character count.
    """

    model_config = ConfigDict(frozen=True)

    coherence_score: int = Field(..., ge=0, le=100)
    empathy_score: int = Field(..., ge=0, le=100)
    clarity_score: int = Field(..., ge=0, le=100)
    professionalism_score: int = Field(..., ge=0, le=100)
    sentiment_score: int = Field(..., ge=0, le=100)
    readability_score: int = Field(..., ge=0, le=100)
    keyword_coverage: int = Field(..., ge=0, le=100)
    response_length: int = Field(..., ge=0)

    @classmethod
    def zero(cls, response_length: int) -> "MetricsBundle":
        """Bundle for responses that fail the quality pre-check."""
        return cls(
            coherence_score=0,
            empathy_score=0,
            clarity_score=0,
            professionalism_score=0,
            sentiment_score=0,
            readability_score=0,
            keyword_coverage=0,
            response_length=response_length,
        )
