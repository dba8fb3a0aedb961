"""
Evaluation orchestrator.

Combines the rule engine and the metrics engine into flat EvaluationRecords:

- run_evaluation(): one response against one scenario
- run_batch(): every case of a cases YAML file against a scenario repository

The caller supplies the scenario repository (and optionally personas); this
module keeps no state between calls.
"""

import logging
from collections.abc import Mapping
from pathlib import Path
from typing import Any

from agent_compliance_eval.config.loader import load_cases
from agent_compliance_eval.config.schema import EvaluationCase, Persona, Scenario
from agent_compliance_eval.exceptions import (
    PersonaNotFoundError,
    ScenarioNotFoundError,
)
from agent_compliance_eval.metrics.engine import compute_metrics
from agent_compliance_eval.report.analytics import compute_analytics
from agent_compliance_eval.utils.logging import log_with_context
from agent_compliance_eval.utils.time import utc_timestamp

from .pipeline import coerce_scenario, evaluate
from .record import EvaluationRecord

logger = logging.getLogger(__name__)


def run_evaluation(
    scenario: Scenario | Mapping[str, Any],
    response_text: str,
    persona: Persona | None = None,
    *,
    agent_name: str | None = None,
    team_org: str | None = None,
    persona_id: int | None = None,
    timestamp: str | None = None,
) -> EvaluationRecord:
    """
    Evaluate one response and merge verdict, metrics and metadata.

    Args:
        scenario: Scenario model or mapping
        response_text: The agent's response
        persona: Optional persona (pass-through)
        agent_name: Agent under test (default "Unknown Agent")
        team_org: Owning team (default "Unknown Team")
        persona_id: Stored persona id; defaults to persona.id when a persona
            is given
        timestamp: ISO 8601 UTC timestamp; defaults to now

    Returns:
        EvaluationRecord ready for storage

    Raises:
        InvalidScenarioError: If scenario is malformed
    """
    scenario = coerce_scenario(scenario)
    verdict = evaluate(scenario, response_text, persona)
    metrics = compute_metrics(response_text, scenario, verdict)

    if persona_id is None and persona is not None:
        persona_id = persona.id

    return EvaluationRecord.from_results(
        scenario,
        response_text,
        verdict,
        metrics,
        timestamp=timestamp or utc_timestamp(),
        agent_name=agent_name,
        team_org=team_org,
        persona_id=persona_id,
    )


def _lookup_scenario(
    repository: Mapping[str, Scenario], scenario_id: str
) -> Scenario:
    try:
        scenario = repository[scenario_id]
    except KeyError:
        raise ScenarioNotFoundError(
            f"Scenario not found: {scenario_id}", scenario_id=scenario_id
        ) from None
    return coerce_scenario(scenario)


def _resolve_persona(
    case: EvaluationCase, personas: Mapping[int, Persona] | None
) -> Persona | None:
    """
    Persona for a case, or None.

    Without a persona table the case's persona_id is stored as metadata only.
    """
    if case.persona_id is None or personas is None:
        return None
    try:
        return personas[case.persona_id]
    except KeyError:
        raise PersonaNotFoundError(
            f"Persona not found: {case.persona_id} "
            f"(case for scenario {case.scenario_id})"
        ) from None


def run_batch(
    cases_path: str | Path,
    repository: Mapping[str, Scenario],
    personas: Mapping[int, Persona] | None = None,
) -> dict[str, Any]:
    """
    Evaluate every case of a cases YAML file.

    All scenario and persona references are resolved before the first case is
    evaluated, so an unknown identifier aborts the batch without partial
    results.

    Args:
        cases_path: Path to a YAML file with a ``cases`` list
        repository: Scenario lookup (usually a ScenarioRepository)
        personas: Optional persona lookup by id

    Returns:
        Dictionary containing:
        - 'results': List of EvaluationRecord, in file order
        - 'summary': Aggregate statistics from compute_analytics()
        - 'total_cases': Number of cases evaluated
        - 'total_passed': Number of cases with overall PASS

    Raises:
        ConfigFileNotFoundError: If the cases file does not exist
        ConfigValidationError: If the cases file is invalid
        ScenarioNotFoundError: If a case references an unknown scenario
        PersonaNotFoundError: If a case references an unknown persona
    """
    cases = load_cases(cases_path)
    batch_id = utc_timestamp()

    resolved = []
    for case in cases:
        scenario = _lookup_scenario(repository, case.scenario_id)
        resolved.append((case, scenario, _resolve_persona(case, personas)))

    results = []
    for case, scenario, persona in resolved:
        record = run_evaluation(
            scenario,
            case.response,
            persona,
            agent_name=case.agent_name,
            team_org=case.team_org,
            persona_id=case.persona_id,
            timestamp=batch_id,
        )
        log_with_context(
            logger,
            logging.DEBUG,
            f"Evaluated case for {scenario.id}",
            context={
                "overall": record.overall,
                "compliance_score": record.compliance_score,
            },
            batch_id=batch_id,
        )
        results.append(record)

    summary = compute_analytics(results)
    log_with_context(
        logger,
        logging.INFO,
        f"Batch complete: {summary['passed']}/{summary['total']} passed",
        context={"cases_path": str(cases_path), "pass_rate": summary["pass_rate"]},
        batch_id=batch_id,
    )

    return {
        "results": results,
        "summary": summary,
        "total_cases": len(results),
        "total_passed": summary["passed"],
    }
