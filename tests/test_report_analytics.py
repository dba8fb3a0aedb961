"""Tests for report.analytics aggregate statistics."""

from agent_compliance_eval import run_evaluation
from agent_compliance_eval.config.schema import Scenario
from agent_compliance_eval.report import compute_analytics


def row(name, overall, score, **extra):
    return {
        "scenario_name": name,
        "overall": overall,
        "compliance_score": score,
        **extra,
    }


class TestComputeAnalytics:
    """Test compute_analytics() over flat record dictionaries."""

    def test_counts_and_rates(self):
        summary = compute_analytics(
            [row("B", "PASS", 85), row("A", "FAIL", 20), row("B", "FAIL", 0)]
        )

        assert summary["total"] == 3
        assert summary["passed"] == 1
        assert summary["failed"] == 2
        assert summary["pass_rate"] == 33
        assert summary["average_score"] == 35.0
        assert summary["pass_fail"] == {
            "PASS": {"count": 1, "percentage": 33.33},
            "FAIL": {"count": 2, "percentage": 66.67},
        }

    def test_by_scenario_sorted_by_name(self):
        summary = compute_analytics(
            [row("B", "PASS", 85), row("A", "FAIL", 20), row("B", "FAIL", 0)]
        )

        assert summary["by_scenario"] == [
            {
                "scenario_name": "A",
                "total": 1,
                "passed": 0,
                "failed": 1,
                "pass_rate": 0.0,
            },
            {
                "scenario_name": "B",
                "total": 2,
                "passed": 1,
                "failed": 1,
                "pass_rate": 50.0,
            },
        ]

    def test_empty_input(self):
        summary = compute_analytics([])

        assert summary["total"] == 0
        assert summary["pass_rate"] == 0
        assert summary["average_score"] == 0
        assert summary["pass_fail"]["PASS"] == {"count": 0, "percentage": 0}
        assert summary["by_scenario"] == []
        assert summary["by_agent"] == []

    def test_by_agent_groups_and_defaults(self):
        summary = compute_analytics(
            [
                row("A", "PASS", 90, agent_name="bot-b"),
                row("A", "FAIL", 10, agent_name="bot-a"),
                row("B", "PASS", 80, agent_name="bot-b"),
                row("B", "FAIL", 0),
            ]
        )

        assert [
            (r["agent_name"], r["total"], r["passed"], r["pass_rate"])
            for r in summary["by_agent"]
        ] == [
            ("Unknown Agent", 1, 0, 0.0),
            ("bot-a", 1, 0, 0.0),
            ("bot-b", 2, 2, 100.0),
        ]

    def test_rates_round_half_up(self):
        records = [row("A", "PASS", 1)] + [row("A", "FAIL", 2)] * 7

        summary = compute_analytics(records)

        assert summary["pass_rate"] == 13
        assert summary["pass_fail"]["PASS"]["percentage"] == 12.5
        assert summary["average_score"] == 1.9

    def test_scenario_id_used_without_name(self):
        summary = compute_analytics(
            [{"scenario_id": "CUSTOM-1", "overall": "PASS", "compliance_score": 70}]
        )

        assert summary["by_scenario"][0]["scenario_name"] == "CUSTOM-1"

    def test_missing_scores_are_skipped(self):
        summary = compute_analytics(
            [row("A", "PASS", 90), row("A", "FAIL", None)]
        )

        assert summary["average_score"] == 90.0

    def test_accepts_records(self):
        """Test that EvaluationRecord models and dictionaries summarize alike."""
        record = run_evaluation(
            Scenario(id="CUSTOM-OPEN", name="Open"),
            "Thank you for your question, I am happy to help with that.",
        )

        assert compute_analytics([record]) == compute_analytics(
            [record.to_flat_dict()]
        )
