"""
Configuration loader for Agent Compliance Eval.

This module loads YAML files (scenarios, personas, batch cases), validates
them with Pydantic models and returns plain, immutable records for the
evaluation pipeline. The pipeline itself never reads files; callers load
once here and pass the results in.

Scenario files may either hold a top-level ``scenarios`` list or be a bare
list of scenario records (the layout of existing ``scenarios.json`` exports,
which YAML parses as well).

Functions:
    load_scenarios: Load and validate a scenario file
    load_builtin_scenarios: Load the scenarios bundled with the package
    load_personas: Load and validate a persona file
    load_cases: Load and validate a batch cases file
"""

import logging
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, ValidationError

from agent_compliance_eval.exceptions import (
    ConfigFileNotFoundError,
    ConfigValidationError,
)

from .schema import (
    CaseFile,
    EvaluationCase,
    Persona,
    PersonaFile,
    Scenario,
    ScenarioFile,
)

logger = logging.getLogger(__name__)

BUILTIN_SCENARIOS_PATH = Path(__file__).parent / "builtin_scenarios.yaml"


def _read_yaml(path: str | Path, label: str) -> Any:
    """
    Read a YAML file with safe_load and wrap failures in config errors.

    Args:
        path: File to read
        label: Human-readable file kind used in error messages

    Returns:
        Parsed YAML document (never None)

    Raises:
        ConfigFileNotFoundError: If the file does not exist
        ConfigValidationError: If the YAML is malformed or the file is empty
    """
    path = Path(path)

    if not path.exists():
        raise ConfigFileNotFoundError(f"{label} file not found: {path}")

    try:
        with path.open(encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ConfigValidationError(f"Invalid YAML syntax in {path}: {e}") from e
    except OSError as e:
        raise ConfigValidationError(f"Failed to read {label} file {path}: {e}") from e

    if data is None:
        raise ConfigValidationError(f"{label} file is empty: {path}")

    return data


def _validate(model: type[BaseModel], data: Any, path: str | Path) -> BaseModel:
    """Validate data against a root model, formatting errors per field."""
    try:
        return model.model_validate(data)
    except ValidationError as e:
        error_messages = []
        for error in e.errors():
            loc = ".".join(str(x) for x in error["loc"])
            error_messages.append(f"  - {loc}: {error['msg']}")

        raise ConfigValidationError(
            f"Validation failed in {path}:\n" + "\n".join(error_messages)
        ) from e


def load_scenarios(path: str | Path) -> list[Scenario]:
    """
    Load and validate a scenario file.

    Args:
        path: Path to a YAML (or JSON) scenario file

    Returns:
        Scenarios in file order

    Raises:
        ConfigFileNotFoundError: If the file does not exist
        ConfigValidationError: If YAML or schema validation fails

    Example:
        >>> scenarios = load_scenarios("scenarios.yaml")
        >>> scenarios[0].id
        'CUSTOM-BOOKING'
    """
    data = _read_yaml(path, "Scenario")

    if isinstance(data, list):
        data = {"scenarios": data}

    scenario_file = _validate(ScenarioFile, data, path)
    logger.debug(
        f"Loaded {len(scenario_file.scenarios)} scenario(s)",
        extra={"context": {"path": str(path)}},
    )
    return scenario_file.scenarios


def load_builtin_scenarios() -> list[Scenario]:
    """Load the five built-in scenarios bundled with the package."""
    return load_scenarios(BUILTIN_SCENARIOS_PATH)


def load_personas(path: str | Path) -> list[Persona]:
    """
    Load and validate a persona file.

    Accepts a top-level ``personas`` list or a bare list.

    Raises:
        ConfigFileNotFoundError: If the file does not exist
        ConfigValidationError: If YAML or schema validation fails
    """
    data = _read_yaml(path, "Persona")

    if isinstance(data, list):
        data = {"personas": data}

    return _validate(PersonaFile, data, path).personas


def load_cases(path: str | Path) -> list[EvaluationCase]:
    """
    Load and validate a batch cases file.

    Expected layout:

        cases:
          - scenario_id: CS-REFUND-POLICY
            response: "I understand this is frustrating..."
            agent_name: support-bot-v2

    Raises:
        ConfigFileNotFoundError: If the file does not exist
        ConfigValidationError: If the file has no ``cases`` key or fails validation
    """
    data = _read_yaml(path, "Cases")

    if not isinstance(data, dict) or "cases" not in data:
        raise ConfigValidationError(
            f"Invalid cases file {path}: must contain 'cases' key"
        )

    return _validate(CaseFile, data, path).cases
