"""
Tests for the evaluation orchestrator (run_evaluation and run_batch).

Batch tests write a cases YAML file to tmp_path and evaluate it against the
built-in scenario repository. Time is frozen so record timestamps and the
batch identifier are deterministic.
"""

import logging

import pytest
import yaml
from freezegun import freeze_time

from agent_compliance_eval import run_batch, run_evaluation
from agent_compliance_eval.config.repository import ScenarioRepository
from agent_compliance_eval.config.schema import Persona
from agent_compliance_eval.evaluator.record import EvaluationRecord
from agent_compliance_eval.exceptions import (
    ConfigValidationError,
    InvalidScenarioError,
    PersonaNotFoundError,
    ScenarioNotFoundError,
)

REFUND_ESCALATION_RESPONSE = (
    "I understand this is frustrating, but our 30-day return policy means I "
    "cannot approve this myself. I'm escalating this to my supervisor who will "
    "respond within 2 business days."
)

BILLING_FAILURE_RESPONSE = "This is fraud, I'll refund the charge right now for you."


@pytest.fixture(scope="module")
def repository():
    return ScenarioRepository.builtin()


@pytest.fixture
def cases_file(tmp_path):
    """Cases file with one passing and one failing case."""
    path = tmp_path / "cases.yaml"
    path.write_text(
        yaml.safe_dump(
            {
                "cases": [
                    {
                        "scenario_id": "CS-REFUND-POLICY",
                        "response": REFUND_ESCALATION_RESPONSE,
                        "agent_name": "support-bot-v2",
                        "team_org": "Support Platform",
                        "persona_id": 2,
                    },
                    {
                        "scenario_id": "CS-BILLING-DISPUTE",
                        "response": BILLING_FAILURE_RESPONSE,
                    },
                ]
            }
        ),
        encoding="utf-8",
    )
    return path


def write_cases(path, cases):
    path.write_text(yaml.safe_dump({"cases": cases}), encoding="utf-8")
    return path


class TestRunEvaluation:
    """Test single-response evaluation."""

    @freeze_time("2026-03-14T09:26:53Z")
    def test_builds_flat_record(self, repository):
        record = run_evaluation(
            repository["CS-REFUND-POLICY"],
            REFUND_ESCALATION_RESPONSE,
            agent_name="support-bot-v2",
            team_org="Support Platform",
        )

        assert isinstance(record, EvaluationRecord)
        assert record.scenario_id == "CS-REFUND-POLICY"
        assert record.scenario_name == "Refund Outside Policy Window"
        assert record.agent_name == "support-bot-v2"
        assert record.team_org == "Support Platform"
        assert record.timestamp == "2026-03-14T09:26:53Z"
        assert record.raw_response == REFUND_ESCALATION_RESPONSE
        assert record.user_message.startswith("I bought this jacket")
        assert record.overall == "PASS"
        assert record.compliance_score == 70
        assert record.response_length == len(REFUND_ESCALATION_RESPONSE)

    def test_metadata_defaults(self, repository):
        record = run_evaluation(
            repository["CS-BILLING-DISPUTE"],
            BILLING_FAILURE_RESPONSE,
            timestamp="2026-01-01T00:00:00Z",
        )

        assert record.agent_name == "Unknown Agent"
        assert record.team_org == "Unknown Team"
        assert record.persona_id is None
        assert record.timestamp == "2026-01-01T00:00:00Z"

    def test_persona_id_taken_from_persona(self, repository):
        persona = Persona(id=5, name="Confused Customer")

        record = run_evaluation(
            repository["CS-REFUND-POLICY"], REFUND_ESCALATION_RESPONSE, persona
        )

        assert record.persona_id == 5

    def test_gibberish_record(self, repository):
        record = run_evaluation(repository["CS-DATA-REQUEST"], "asdkjf asldkj aslkdj")

        assert record.overall == "FAIL"
        assert record.compliance_score == 0
        assert record.empathy_score == 0
        assert record.response_length == len("asdkjf asldkj aslkdj")

    def test_flat_dict_is_json_compatible(self, repository):
        record = run_evaluation(
            repository["CS-BILLING-DISPUTE"], BILLING_FAILURE_RESPONSE
        )

        flat = record.to_flat_dict()

        assert flat["violations"] == [
            "reversed charge without proper investigation",
            "confirmed fraud without investigation",
        ]
        assert "quality_gate_passed" not in flat

    def test_invalid_scenario(self):
        with pytest.raises(InvalidScenarioError):
            run_evaluation({"name": "No id"}, REFUND_ESCALATION_RESPONSE)


class TestRunBatch:
    """Test batch evaluation from a cases file."""

    @freeze_time("2026-03-14T09:26:53Z")
    def test_batch_results_and_summary(self, repository, cases_file):
        batch = run_batch(cases_file, repository)

        assert batch["total_cases"] == 2
        assert batch["total_passed"] == 1
        assert [r.overall for r in batch["results"]] == ["PASS", "FAIL"]
        assert batch["summary"]["pass_rate"] == 50
        assert batch["summary"]["average_score"] == 35.0

    @freeze_time("2026-03-14T09:26:53Z")
    def test_batch_records_share_timestamp(self, repository, cases_file):
        batch = run_batch(cases_file, repository)

        assert {r.timestamp for r in batch["results"]} == {"2026-03-14T09:26:53Z"}

    def test_case_metadata_is_kept(self, repository, cases_file):
        first = run_batch(cases_file, repository)["results"][0]

        assert first.agent_name == "support-bot-v2"
        assert first.team_org == "Support Platform"
        # No persona table given, so the id is stored as metadata only
        assert first.persona_id == 2

    def test_personas_are_resolved(self, repository, cases_file):
        personas = {2: Persona(id=2, name="Frustrated Customer")}

        batch = run_batch(cases_file, repository, personas)

        assert batch["results"][0].persona_id == 2

    def test_unknown_persona_aborts_batch(self, repository, cases_file):
        personas = {1: Persona(id=1, name="Polite Customer")}

        with pytest.raises(PersonaNotFoundError, match="Persona not found: 2"):
            run_batch(cases_file, repository, personas)

    def test_unknown_scenario_aborts_batch(self, repository, tmp_path):
        path = write_cases(
            tmp_path / "cases.yaml",
            [
                {"scenario_id": "CS-REFUND-POLICY", "response": "Hello there"},
                {"scenario_id": "CS-UNKNOWN", "response": "Hello there"},
            ],
        )

        with pytest.raises(ScenarioNotFoundError) as exc_info:
            run_batch(path, repository)

        assert exc_info.value.scenario_id == "CS-UNKNOWN"

    def test_plain_mapping_repository(self, tmp_path):
        """Test that any mapping of scenario records works as a repository."""
        path = write_cases(
            tmp_path / "cases.yaml",
            [
                {
                    "scenario_id": "CUSTOM-OPEN",
                    "response": "Thank you for your question, I am happy to help.",
                }
            ],
        )

        batch = run_batch(path, {"CUSTOM-OPEN": {"id": "CUSTOM-OPEN"}})

        assert batch["results"][0].overall == "PASS"
        assert batch["results"][0].scenario_name == "CUSTOM-OPEN"

    def test_invalid_cases_file(self, repository, tmp_path):
        path = tmp_path / "cases.yaml"
        path.write_text(yaml.safe_dump({"items": []}), encoding="utf-8")

        with pytest.raises(ConfigValidationError):
            run_batch(path, repository)

    def test_logs_batch_summary(self, repository, cases_file, caplog):
        with caplog.at_level(logging.INFO, logger="agent_compliance_eval"):
            run_batch(cases_file, repository)

        assert "Batch complete: 1/2 passed" in caplog.text
