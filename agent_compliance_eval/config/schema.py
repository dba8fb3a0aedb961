"""
Configuration schema models for Agent Compliance Eval.

This module defines Pydantic models for the records the evaluation pipeline
consumes: scenarios, personas and batch evaluation cases, plus the file-level
containers used when these are loaded from YAML.

Scenario records are accepted in both snake_case and the camelCase layout of
existing scenario exports (userMessage, requiredActions, riskType, ...).

Models:
    Scenario: Policy test case an agent response is judged against
    Persona: Simulated customer persona (pass-through metadata only)
    EvaluationCase: One response to evaluate in a batch run
    ScenarioFile: Root model of a scenario YAML file
    PersonaFile: Root model of a persona YAML file
    CaseFile: Root model of a batch cases YAML file
"""

from pydantic import (
    AliasChoices,
    BaseModel,
    ConfigDict,
    Field,
    field_validator,
    model_validator,
)

RISK_CATEGORIES = ("policy", "authority", "escalation", "security", "custom")


def _clean_string_list(values: tuple[str, ...]) -> tuple[str, ...]:
    """Strip entries and drop blanks, keeping the original order."""
    return tuple(item.strip() for item in values if item and item.strip())


class Scenario(BaseModel):
    """
    A configured customer-support test case.

    Pairs a simulated customer message with the policy (required and
    forbidden actions) an agent response is judged against. Immutable once
    created.

    Attributes:
        id: Unique scenario identifier (e.g., "CS-REFUND-POLICY")
        name: Display name
        user_message: Simulated customer message
        policy_summary: Free-text summary of the policy in force
        required_actions: Actions the response must perform, in order
        forbidden_actions: Actions the response must not perform
        risk_category: policy | authority | escalation | security | custom.
            Unknown categories are kept as-is and use the generic rule set.
        required_keywords: Flat keywords the generic rule set requires
        forbidden_keywords: Flat keywords the generic rule set forbids
        custom: True for user-authored scenarios
    """

    model_config = ConfigDict(frozen=True)

    id: str
    name: str = ""
    user_message: str = Field(
        default="", validation_alias=AliasChoices("user_message", "userMessage")
    )
    policy_summary: str = Field(
        default="", validation_alias=AliasChoices("policy_summary", "policySummary")
    )
    required_actions: tuple[str, ...] = Field(
        default=(),
        validation_alias=AliasChoices("required_actions", "requiredActions"),
    )
    forbidden_actions: tuple[str, ...] = Field(
        default=(),
        validation_alias=AliasChoices("forbidden_actions", "forbiddenActions"),
    )
    risk_category: str = Field(
        default="custom",
        validation_alias=AliasChoices("risk_category", "risk_type", "riskType"),
    )
    required_keywords: tuple[str, ...] = ()
    forbidden_keywords: tuple[str, ...] = ()
    custom: bool = False

    @model_validator(mode="before")
    @classmethod
    def replace_null_lists(cls, data):
        """Treat explicit nulls for list fields as empty lists."""
        if isinstance(data, dict):
            data = dict(data)
            for key in (
                "required_actions",
                "requiredActions",
                "forbidden_actions",
                "forbiddenActions",
                "required_keywords",
                "forbidden_keywords",
            ):
                if key in data and data[key] is None:
                    data[key] = []
        return data

    @field_validator("id")
    @classmethod
    def validate_id(cls, v: str) -> str:
        """Ensure scenario id is non-empty and used verbatim."""
        if not v or v.isspace():
            raise ValueError("Scenario id cannot be empty")
        if v != v.strip():
            raise ValueError(
                f"Scenario id {v!r} has leading or trailing whitespace"
            )
        return v

    @field_validator(
        "required_actions",
        "forbidden_actions",
        "required_keywords",
        "forbidden_keywords",
    )
    @classmethod
    def validate_string_lists(cls, v: tuple[str, ...]) -> tuple[str, ...]:
        """Normalize action and keyword lists."""
        return _clean_string_list(v)

    @field_validator("risk_category", mode="before")
    @classmethod
    def normalize_risk_category(cls, v):
        """Lower-case the category; missing categories default to custom."""
        if v is None or (isinstance(v, str) and not v.strip()):
            return "custom"
        if isinstance(v, str):
            return v.strip().lower()
        return v

    @property
    def display_name(self) -> str:
        """Name shown in reports, falling back to the identifier."""
        return self.name or self.id

    @property
    def has_known_risk_category(self) -> bool:
        return self.risk_category in RISK_CATEGORIES


class Persona(BaseModel):
    """
    Simulated customer persona.

    Currently consumed as pass-through metadata only; no rule or metric
    depends on it.
    """

    model_config = ConfigDict(frozen=True)

    id: int
    name: str
    description: str = ""
    communication_style: str = ""
    tone: str | None = None
    emoji: str | None = None

    @field_validator("name")
    @classmethod
    def validate_name(cls, v: str) -> str:
        """Ensure persona name is not empty."""
        if not v or v.isspace():
            raise ValueError("Persona name cannot be empty")
        return v.strip()


class EvaluationCase(BaseModel):
    """A single agent response to evaluate as part of a batch run."""

    scenario_id: str
    response: str
    agent_name: str | None = None
    team_org: str | None = None
    persona_id: int | None = None
    description: str | None = None

    @field_validator("scenario_id")
    @classmethod
    def validate_scenario_id(cls, v: str) -> str:
        """Ensure scenario_id is not empty."""
        if not v or v.isspace():
            raise ValueError("scenario_id cannot be empty")
        return v.strip()


class ScenarioFile(BaseModel):
    """Root model of a scenario YAML file."""

    scenarios: list[Scenario]

    @field_validator("scenarios")
    @classmethod
    def validate_unique_ids(cls, v: list[Scenario]) -> list[Scenario]:
        """Scenario identifiers must be unique within a file."""
        seen: set[str] = set()
        duplicates = []
        for scenario in v:
            if scenario.id in seen:
                duplicates.append(scenario.id)
            seen.add(scenario.id)
        if duplicates:
            raise ValueError(f"Duplicate scenario ids: {', '.join(duplicates)}")
        return v


class PersonaFile(BaseModel):
    """Root model of a persona YAML file."""

    personas: list[Persona]

    @field_validator("personas")
    @classmethod
    def validate_unique_ids(cls, v: list[Persona]) -> list[Persona]:
        """Persona identifiers must be unique within a file."""
        ids = [persona.id for persona in v]
        if len(ids) != len(set(ids)):
            raise ValueError("Persona ids must be unique")
        return v


class CaseFile(BaseModel):
    """Root model of a batch cases YAML file."""

    cases: list[EvaluationCase]

    @field_validator("cases")
    @classmethod
    def validate_not_empty(cls, v: list[EvaluationCase]) -> list[EvaluationCase]:
        """A batch needs at least one case."""
        if not v:
            raise ValueError("cases must contain at least one entry")
        return v
