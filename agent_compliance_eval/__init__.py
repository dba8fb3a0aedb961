"""
Agent Compliance Eval.

Rule-based compliance evaluation of customer-support agent responses:
a quality gate, scenario rule sets producing a PASS/FAIL verdict with a
compliance score, and supplementary linguistic metrics.

Example:
    >>> from agent_compliance_eval import evaluate, compute_metrics
    >>> from agent_compliance_eval.config.repository import ScenarioRepository
    >>> scenario = ScenarioRepository.builtin().get_scenario("CS-REFUND-POLICY")
    >>> verdict = evaluate(scenario, "Sure, I'll process that refund right now.")
    >>> verdict.overall
    'FAIL'
"""

__version__ = "0.1.0"

# evaluator must be imported before metrics (metrics builds on its lexicons)
from .evaluator import evaluate
from .metrics import compute_metrics
from .evaluator.runner import run_batch, run_evaluation

__all__ = [
    "__version__",
    "evaluate",
    "compute_metrics",
    "run_evaluation",
    "run_batch",
]
