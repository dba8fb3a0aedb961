"""
CLI entrypoint for Agent Compliance Eval.

Provides a dual-mode command-line interface with:
- Human-friendly output: Rich spinners, tables and panels
- Agent-friendly output: Structured JSON for automation (--format json)

Commands:
    evaluate: Evaluate one agent response against a scenario
    batch: Evaluate every case of a cases YAML file
    scenarios: List available scenarios
    validate: Validate a scenario YAML file
    analytics: Summarize stored evaluation history

Exit codes:
    0: Success (every evaluated response passed)
    1: Configuration error (invalid YAML, unknown scenario or persona)
    2: Database error (cannot create/access SQLite)
    3: One or more responses failed evaluation

Examples:
    # Evaluate a single response
    agent-compliance-eval evaluate -s CS-REFUND-POLICY \\
        -r "I understand your frustration. Let me escalate this to my supervisor."

    # Batch run with custom scenarios, stored to SQLite, JSON output
    agent-compliance-eval batch --cases cases.yaml --scenarios custom.yaml \\
        --db ./output/evaluations.db --format json
"""

import sqlite3
from importlib.metadata import PackageNotFoundError, version
from pathlib import Path
from typing import NoReturn

import typer
from rich.traceback import install as install_rich_traceback

from agent_compliance_eval.config.loader import load_personas, load_scenarios
from agent_compliance_eval.config.repository import ScenarioRepository
from agent_compliance_eval.config.schema import Persona
from agent_compliance_eval.evaluator.record import EvaluationRecord
from agent_compliance_eval.evaluator.runner import run_batch, run_evaluation
from agent_compliance_eval.exceptions import (
    ConfigFileNotFoundError,
    ConfigurationError,
    DatabaseError,
    InvalidScenarioError,
    PersonaNotFoundError,
    ScenarioNotFoundError,
)
from agent_compliance_eval.report.analytics import compute_analytics
from agent_compliance_eval.storage.db import (
    get_evaluations,
    init_db_if_needed,
    insert_evaluation,
)
from agent_compliance_eval.utils.console import (
    error,
    info,
    output_mode,
    print_analytics,
    print_batch_results,
    print_record,
    print_scenarios_table,
    spinner,
    success,
)
from agent_compliance_eval.utils.logging import setup_logging

# Install Rich tracebacks for better error messages
install_rich_traceback(show_locals=False)

# Exit codes
EXIT_SUCCESS = 0  # Every evaluated response passed
EXIT_CONFIG_ERROR = 1  # Invalid configuration or unknown identifier
EXIT_DB_ERROR = 2  # Database initialization or query failed
EXIT_EVALUATION_FAILED = 3  # At least one response failed

app = typer.Typer(
    name="agent-compliance-eval",
    help="Evaluate customer-support agent responses for policy compliance",
    add_completion=False,
)

FORMAT_OPTION = typer.Option(
    "text",
    "--format",
    "-f",
    help="Output format: 'text' (human-friendly) or 'json' (machine-readable)",
)
VERBOSE_OPTION = typer.Option(False, "--verbose", "-v", help="Enable debug logging")
SCENARIOS_OPTION = typer.Option(
    None,
    "--scenarios",
    help="YAML file of custom scenarios, added to (and overriding) the built-ins",
    exists=True,
    file_okay=True,
    dir_okay=False,
)
PERSONAS_OPTION = typer.Option(
    None,
    "--personas",
    help="YAML file of customer personas",
    exists=True,
    file_okay=True,
    dir_okay=False,
)
DB_OPTION = typer.Option(
    None, "--db", help="SQLite database to store evaluation records in"
)


def _configure(format: str, verbose: bool) -> None:
    """Apply output format and logging flags shared by every command."""
    if format not in ("text", "json"):
        raise typer.BadParameter(
            f"Invalid format: {format}. Must be 'text' or 'json'",
            param_hint="--format",
        )
    output_mode.format = format
    # JSON logs go to stderr; keep them out of the way of human output
    setup_logging(verbose=verbose, quiet_logs=output_mode.is_human())


def _fail(message: str, exit_code: int) -> NoReturn:
    """Report an error (flushing JSON in agent mode) and exit."""
    error(message)
    output_mode.flush_json()
    raise typer.Exit(exit_code)


def _load_repository(scenarios: Path | None) -> ScenarioRepository:
    repository = ScenarioRepository.builtin()
    if scenarios is not None:
        repository = repository.merged_with(ScenarioRepository.from_yaml(scenarios))
    return repository


def _load_persona_table(personas: Path | None) -> dict[int, Persona] | None:
    if personas is None:
        return None
    return {persona.id: persona for persona in load_personas(personas)}


def _store_records(db: Path, records: list[EvaluationRecord]) -> None:
    """Persist records; exits with EXIT_DB_ERROR on failure."""
    try:
        with spinner("Saving results..."):
            init_db_if_needed(db)
            with sqlite3.connect(db) as conn:
                for record in records:
                    insert_evaluation(conn, record)
    except DatabaseError as e:
        _fail(f"Failed to store results: {e}", EXIT_DB_ERROR)

    info(f"Stored {len(records)} evaluation(s) in {db}")
    if output_mode.is_agent():
        output_mode.add_json("db_path", str(db))


@app.command()
def evaluate(
    scenario_id: str = typer.Option(
        ..., "--scenario-id", "-s", help="Scenario identifier (e.g. CS-REFUND-POLICY)"
    ),
    response: str = typer.Option(
        None, "--response", "-r", help="Agent response text"
    ),
    response_file: Path = typer.Option(
        None,
        "--response-file",
        help="File containing the agent response",
        exists=True,
        file_okay=True,
        dir_okay=False,
    ),
    scenarios: Path = SCENARIOS_OPTION,
    personas: Path = PERSONAS_OPTION,
    persona_id: int = typer.Option(
        None, "--persona-id", help="Persona the simulated customer used"
    ),
    agent_name: str = typer.Option(
        None, "--agent-name", help="Name of the agent under test"
    ),
    team_org: str = typer.Option(
        None, "--team-org", help="Team or organization owning the agent"
    ),
    db: Path = DB_OPTION,
    format: str = FORMAT_OPTION,
    verbose: bool = VERBOSE_OPTION,
):
    """
    Evaluate one agent response against a scenario.

    Exit codes:
      0: Response passed
      1: Configuration error
      2: Database error
      3: Response failed

    Examples:
      agent-compliance-eval evaluate -s CS-MEDICAL-ADVICE --response-file reply.txt
    """
    _configure(format, verbose)

    if response is None and response_file is None:
        _fail("Provide --response or --response-file", EXIT_CONFIG_ERROR)
    if response is not None and response_file is not None:
        _fail("Use either --response or --response-file, not both", EXIT_CONFIG_ERROR)
    if response_file is not None:
        try:
            response = response_file.read_text(encoding="utf-8")
        except (UnicodeDecodeError, OSError) as e:
            _fail(
                f"Cannot read response file {response_file}: {e}", EXIT_CONFIG_ERROR
            )

    try:
        repository = _load_repository(scenarios)
        scenario = repository.get_scenario(scenario_id)
        persona = None
        persona_table = _load_persona_table(personas)
        if persona_table is not None and persona_id is not None:
            if persona_id not in persona_table:
                raise PersonaNotFoundError(f"Persona not found: {persona_id}")
            persona = persona_table[persona_id]
    except (ConfigurationError, ScenarioNotFoundError, PersonaNotFoundError) as e:
        _fail(str(e), EXIT_CONFIG_ERROR)

    try:
        with spinner("Evaluating response..."):
            record = run_evaluation(
                scenario,
                response,
                persona,
                agent_name=agent_name,
                team_org=team_org,
                persona_id=persona_id,
            )
    except InvalidScenarioError as e:
        _fail(str(e), EXIT_CONFIG_ERROR)

    print_record(record)

    if db is not None:
        _store_records(db, [record])

    output_mode.flush_json()
    exit_code = EXIT_SUCCESS if record.overall == "PASS" else EXIT_EVALUATION_FAILED
    raise typer.Exit(exit_code)


@app.command()
def batch(
    cases: Path = typer.Option(
        ...,
        "--cases",
        "-c",
        help="YAML file with a 'cases' list",
        exists=True,
        file_okay=True,
        dir_okay=False,
    ),
    scenarios: Path = SCENARIOS_OPTION,
    personas: Path = PERSONAS_OPTION,
    db: Path = DB_OPTION,
    format: str = FORMAT_OPTION,
    verbose: bool = VERBOSE_OPTION,
):
    """
    Evaluate every case of a cases YAML file.

    Exit codes:
      0: Every case passed
      1: Configuration error (invalid file, unknown scenario or persona)
      2: Database error
      3: One or more cases failed

    Examples:
      agent-compliance-eval batch --cases cases.yaml --db ./output/evaluations.db
    """
    _configure(format, verbose)

    try:
        repository = _load_repository(scenarios)
        persona_table = _load_persona_table(personas)
        with spinner("Evaluating cases..."):
            result = run_batch(cases, repository, persona_table)
    except (
        ConfigurationError,
        InvalidScenarioError,
        ScenarioNotFoundError,
        PersonaNotFoundError,
    ) as e:
        _fail(str(e), EXIT_CONFIG_ERROR)

    success(f"Evaluated {result['total_cases']} case(s)")
    print_batch_results(result["results"], result["summary"])

    if db is not None:
        _store_records(db, result["results"])

    output_mode.flush_json()
    if result["total_passed"] < result["total_cases"]:
        raise typer.Exit(EXIT_EVALUATION_FAILED)
    raise typer.Exit(EXIT_SUCCESS)


@app.command(name="scenarios")
def list_scenarios(
    scenarios: Path = SCENARIOS_OPTION,
    format: str = FORMAT_OPTION,
    verbose: bool = VERBOSE_OPTION,
):
    """
    List the built-in scenarios, plus any from --scenarios.

    Examples:
      agent-compliance-eval scenarios --scenarios custom.yaml --format json
    """
    _configure(format, verbose)

    try:
        repository = _load_repository(scenarios)
    except ConfigurationError as e:
        _fail(str(e), EXIT_CONFIG_ERROR)

    print_scenarios_table(repository.values())
    output_mode.flush_json()
    raise typer.Exit(EXIT_SUCCESS)


@app.command()
def validate(
    scenarios: Path = typer.Argument(..., help="Scenario YAML file to validate"),
    format: str = FORMAT_OPTION,
):
    """
    Validate a scenario file without evaluating anything.

    Checks YAML syntax, required fields, list types and unique identifiers.

    Exit codes:
      0: File is valid
      1: File is missing or invalid

    Examples:
      agent-compliance-eval validate custom.yaml --format json
    """
    _configure(format, verbose=False)

    try:
        loaded = load_scenarios(scenarios)
    except ConfigFileNotFoundError as e:
        if output_mode.is_agent():
            output_mode.add_json("valid", False)
            output_mode.add_json("error_type", "file_not_found")
        _fail(str(e), EXIT_CONFIG_ERROR)
    except ConfigurationError as e:
        if output_mode.is_agent():
            output_mode.add_json("valid", False)
            output_mode.add_json("error_type", "validation_error")
        _fail(f"Validation failed: {e}", EXIT_CONFIG_ERROR)

    success(f"Scenario file is valid: {len(loaded)} scenario(s)")
    for scenario in loaded:
        if not scenario.has_known_risk_category:
            info(
                f"{scenario.id}: unknown risk category "
                f"'{scenario.risk_category}', generic rules apply"
            )

    if output_mode.is_agent():
        output_mode.add_json("valid", True)
        output_mode.add_json("scenarios_count", len(loaded))
        output_mode.add_json("scenario_ids", [s.id for s in loaded])
    output_mode.flush_json()
    raise typer.Exit(EXIT_SUCCESS)


@app.command()
def analytics(
    db: Path = typer.Option(
        ...,
        "--db",
        help="SQLite database written by evaluate/batch --db",
        exists=True,
        file_okay=True,
        dir_okay=False,
    ),
    scenario_id: str = typer.Option(
        None, "--scenario-id", "-s", help="Only this scenario"
    ),
    agent_name: str = typer.Option(
        None, "--agent-name", help="Only this agent"
    ),
    limit: int = typer.Option(
        None, "--limit", min=1, help="Only the most recent N evaluations"
    ),
    format: str = FORMAT_OPTION,
    verbose: bool = VERBOSE_OPTION,
):
    """
    Summarize stored evaluation history.

    Examples:
      agent-compliance-eval analytics --db ./output/evaluations.db --agent-name bot-v2
    """
    _configure(format, verbose)

    try:
        init_db_if_needed(db)
        with sqlite3.connect(db) as conn:
            rows = get_evaluations(
                conn, scenario_id=scenario_id, agent_name=agent_name, limit=limit
            )
    except DatabaseError as e:
        _fail(str(e), EXIT_DB_ERROR)

    print_analytics(compute_analytics(rows))
    output_mode.flush_json()
    raise typer.Exit(EXIT_SUCCESS)


@app.callback(invoke_without_command=True)
def main(
    ctx: typer.Context,
    show_version: bool = typer.Option(
        False, "--version", help="Show the version and exit"
    ),
):
    """Evaluate customer-support agent responses for policy compliance."""
    if show_version:
        typer.echo(f"agent-compliance-eval {_read_version()}")
        raise typer.Exit(EXIT_SUCCESS)
    if ctx.invoked_subcommand is None:
        typer.echo(ctx.get_help())


def _read_version() -> str:
    """Version from installed package metadata."""
    try:
        return version("agent-compliance-eval")
    except PackageNotFoundError:
        from agent_compliance_eval import __version__

        return __version__


if __name__ == "__main__":
    app()
