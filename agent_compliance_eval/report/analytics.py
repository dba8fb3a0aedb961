"""
Aggregate statistics over evaluation records.

compute_analytics() accepts EvaluationRecord models or the flat dictionaries
returned by storage.db.get_evaluations(), so the same summary is produced for
a fresh batch and for stored history.
"""

from collections.abc import Callable, Iterable, Mapping
from decimal import ROUND_HALF_UP, Decimal
from typing import Any

from agent_compliance_eval.config.constants import DEFAULT_AGENT_NAME
from agent_compliance_eval.evaluator.record import EvaluationRecord
from agent_compliance_eval.utils.text import round_half_up


def _round_to(value: float, places: int) -> float:
    """Round half-up to a fixed number of decimal places (12.345 -> 12.35)."""
    quantum = Decimal(1).scaleb(-places)
    return float(Decimal(str(value)).quantize(quantum, rounding=ROUND_HALF_UP))


def _as_mapping(record: EvaluationRecord | Mapping[str, Any]) -> Mapping[str, Any]:
    if isinstance(record, EvaluationRecord):
        return record.model_dump()
    return record


def _breakdown(
    rows: list[Mapping[str, Any]],
    label: str,
    key: Callable[[Mapping[str, Any]], str],
) -> list[dict[str, Any]]:
    """Pass/fail counts grouped by key(row), sorted by group name."""
    groups: dict[str, dict[str, int]] = {}
    for row in rows:
        group = groups.setdefault(key(row), {"total": 0, "passed": 0, "failed": 0})
        group["total"] += 1
        if row.get("overall") == "PASS":
            group["passed"] += 1
        elif row.get("overall") == "FAIL":
            group["failed"] += 1

    return [
        {
            label: name,
            **counts,
            "pass_rate": _round_to(counts["passed"] * 100 / counts["total"], 2),
        }
        for name, counts in sorted(groups.items())
    ]


def compute_analytics(
    records: Iterable[EvaluationRecord | Mapping[str, Any]],
) -> dict[str, Any]:
    """
    Summarize a collection of evaluation records.

    Args:
        records: EvaluationRecord models or flat record dictionaries

    Returns:
        Dictionary containing:
        - 'total', 'passed', 'failed': record counts
        - 'pass_rate': integer percentage of PASS records
        - 'average_score': mean compliance_score to one decimal (0 if none)
        - 'pass_fail': {"PASS": {"count", "percentage"}, "FAIL": {...}},
          percentages to two decimals
        - 'by_scenario': per scenario name, sorted by name:
          scenario_name, total, passed, failed, pass_rate (two decimals)
        - 'by_agent': the same counts per agent_name, sorted by name

    Example:
        >>> summary = compute_analytics(batch["results"])
        >>> summary["pass_fail"]["PASS"]
        {'count': 3, 'percentage': 75.0}
    """
    rows = [_as_mapping(record) for record in records]
    total = len(rows)
    passed = sum(1 for row in rows if row.get("overall") == "PASS")
    failed = sum(1 for row in rows if row.get("overall") == "FAIL")

    scores = [
        row["compliance_score"]
        for row in rows
        if row.get("compliance_score") is not None
    ]
    average_score = _round_to(sum(scores) / len(scores), 1) if scores else 0

    pass_fail = {
        outcome: {
            "count": count,
            "percentage": _round_to(count * 100 / total, 2) if total else 0,
        }
        for outcome, count in (("PASS", passed), ("FAIL", failed))
    }

    by_scenario = _breakdown(
        rows,
        "scenario_name",
        lambda row: row.get("scenario_name") or row.get("scenario_id") or "",
    )
    by_agent = _breakdown(
        rows, "agent_name", lambda row: row.get("agent_name") or DEFAULT_AGENT_NAME
    )

    return {
        "total": total,
        "passed": passed,
        "failed": failed,
        "pass_rate": round_half_up(passed / total * 100) if total else 0,
        "average_score": average_score,
        "pass_fail": pass_fail,
        "by_scenario": by_scenario,
        "by_agent": by_agent,
    }
