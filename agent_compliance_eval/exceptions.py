"""
Custom exceptions for Agent Compliance Eval.

This module provides a hierarchy of exceptions that enable type-safe error
handling throughout the application. All exceptions inherit from the base
ComplianceEvalError for consistent catching.

Exception Hierarchy:
    ComplianceEvalError (base)
    ├── ConfigurationError
    │   ├── ConfigFileNotFoundError
    │   └── ConfigValidationError
    ├── InvalidScenarioError
    ├── ScenarioNotFoundError
    ├── PersonaNotFoundError
    └── DatabaseError
        ├── DatabaseInitError
        └── DatabaseQueryError

Gibberish or empty agent responses are NOT errors. They are reported as a
FAIL verdict with zero scores by the evaluation pipeline.

Usage:
    from agent_compliance_eval.exceptions import InvalidScenarioError

    try:
        verdict = evaluate(scenario_dict, response_text)
    except InvalidScenarioError as e:
        logger.error(f"Scenario rejected: {e}")
"""


class ComplianceEvalError(Exception):
    """
    Base exception for all Agent Compliance Eval errors.

    All custom exceptions in this application should inherit from this class.
    This enables catching all application-specific errors with a single except clause.
    """

    pass


# ============================================================================
# Configuration Errors
# ============================================================================


class ConfigurationError(ComplianceEvalError):
    """
    Base class for configuration-related errors.

    Raised when scenario, persona or case files cannot be loaded or validated.
    Should be caught and result in exit code 1 (configuration error).
    """

    pass


class ConfigFileNotFoundError(ConfigurationError):
    """
    Configuration file does not exist at the specified path.

    Example:
        raise ConfigFileNotFoundError("Scenario file not found: scenarios.yaml")
    """

    pass


class ConfigValidationError(ConfigurationError):
    """
    Configuration file is invalid (YAML syntax or schema validation failed).

    Should include details about which field(s) failed validation.

    Example:
        raise ConfigValidationError("scenarios.0.id: Field required")
    """

    pass


# ============================================================================
# Evaluation Errors
# ============================================================================


class InvalidScenarioError(ComplianceEvalError):
    """
    Scenario record is malformed and cannot be evaluated.

    Raised when a scenario is missing its identifier or when its
    required/forbidden action lists are not lists of strings. Evaluation is
    aborted and no partial result is produced.

    Example:
        raise InvalidScenarioError("Scenario is missing required field 'id'")
    """

    pass


class ScenarioNotFoundError(ComplianceEvalError):
    """
    Requested scenario identifier is not present in the scenario repository.

    Example:
        raise ScenarioNotFoundError("Scenario not found: CS-UNKNOWN")
    """

    def __init__(self, message: str, scenario_id: str | None = None):
        super().__init__(message)
        self.scenario_id = scenario_id


class PersonaNotFoundError(ComplianceEvalError):
    """
    Requested persona identifier is not present in the persona collection.

    Example:
        raise PersonaNotFoundError("Persona not found: 7")
    """

    pass


# ============================================================================
# Database Errors
# ============================================================================


class DatabaseError(ComplianceEvalError):
    """
    Base class for database-related errors.

    Should be caught and result in exit code 2 (database error).
    """

    pass


class DatabaseInitError(DatabaseError):
    """
    Database initialization or schema migration failed.

    Example:
        raise DatabaseInitError("Failed to create database: permission denied")
    """

    pass


class DatabaseQueryError(DatabaseError):
    """
    Database query execution failed.

    Example:
        raise DatabaseQueryError("Failed to insert evaluation: constraint violation")
    """

    pass
