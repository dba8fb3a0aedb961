"""
Rule-based evaluation of agent responses.

The pipeline runs the quality gate, then the scenario's rule set, and
returns an EvaluationVerdict. The orchestrator in runner.py combines the
verdict with the metrics engine; import it from there directly.
"""

from .pipeline import GIBBERISH_VERDICT, compute_compliance_score, evaluate
from .quality_gate import is_gibberish, score_response_quality
from .rules import BUILTIN_RULE_SETS, RuleContext, get_rule_set
from .schema import EvaluationVerdict, ResponseQuality

__all__ = [
    "evaluate",
    "compute_compliance_score",
    "GIBBERISH_VERDICT",
    "is_gibberish",
    "score_response_quality",
    "BUILTIN_RULE_SETS",
    "RuleContext",
    "get_rule_set",
    "EvaluationVerdict",
    "ResponseQuality",
]
